"""Audit logging middleware — records every state-changing request to audit_trail."""


import asyncio
import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

# Methods that mutate state
_WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}

_UUID_LENGTH = 36


def infer_entity(path: str) -> tuple[str, str | None]:
    """``/api/v1/maintenance-requests/<uuid>/assign`` -> ``("maintenance-request", "<uuid>")``."""
    parts = [p for p in path.strip("/").split("/") if p]
    entity_id = next((p for p in reversed(parts) if len(p) == _UUID_LENGTH), None)
    if entity_id:
        idx = parts.index(entity_id)
        entity_type = parts[idx - 1] if idx > 0 else "unknown"
    else:
        entity_type = parts[-1] if parts else "unknown"
    return _singular(entity_type), entity_id


def _singular(name: str) -> str:
    if name.endswith("ies"):
        return name[:-3] + "y"
    if name.endswith("s") and not name.endswith("ss"):
        return name[:-1]
    return name


class AuditMiddleware(BaseHTTPMiddleware):
    """Logs all write operations.

    Each audit row is written asynchronously AFTER the response is sent so it
    never adds latency to the request. Failures in audit logging are caught and
    logged — they never raise to the caller.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000)

        if request.method in _WRITE_METHODS:
            # Fire-and-forget: don't await here so the response is not delayed
            asyncio.create_task(
                record_audit(
                    method=request.method,
                    path=request.url.path,
                    status_code=response.status_code,
                    duration_ms=duration_ms,
                    ip_address=request.client.host if request.client else None,
                    user_agent=request.headers.get("user-agent"),
                )
            )

        return response


async def record_audit(
    *,
    method: str,
    path: str,
    status_code: int,
    duration_ms: int | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> None:
    """Persist an audit row. Logs and swallows all errors to avoid cascading failures."""
    try:
        from app.core.config import settings
        from app.db.base import async_session_factory
        from app.domain.audit import AuditTrail

        entity_type, entity_id = infer_entity(path)

        async with async_session_factory() as session:
            session.add(
                AuditTrail(
                    workspace_id=settings.default_workspace_id,
                    ip_address=ip_address,
                    user_agent=user_agent,
                    method=method,
                    path=path,
                    status_code=status_code,
                    entity_type=entity_type,
                    entity_id=entity_id,
                    duration_ms=duration_ms,
                    description=f"{method} {path} → {status_code} ({duration_ms}ms)",
                )
            )
            await session.commit()
    except Exception as exc:  # pragma: no cover
        logger.error("Audit write failed for %s %s: %s", method, path, exc)
