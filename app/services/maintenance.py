"""Maintenance request service — dashboard workflow over requests created by the voice agent.

Rule: No SQLAlchemy / no FastAPI here. Pure Python business logic.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, ValidationError
from app.core.pagination import PaginationParams
from app.domain.maintenance import (
    PENDING_STATUSES,
    REQUEST_STATUSES,
    MaintenanceRequest,
    MaintenanceRequestActivity,
)
from app.domain.mixins import utcnow
from app.repositories.maintenance import MaintenanceActivityRepository, MaintenanceRequestRepository
from app.repositories.property import PropertyRepository, UnitRepository
from app.schemas.maintenance import (
    MaintenanceAssignRequest,
    MaintenanceRequestUpdate,
    MaintenanceResolveRequest,
    MaintenanceStatsOut,
)

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class MaintenanceRequestService:
    def __init__(self, session: AsyncSession, workspace_id: str):
        self._repo = MaintenanceRequestRepository(session, workspace_id)
        self._activity = MaintenanceActivityRepository(session, workspace_id)
        self._properties = PropertyRepository(session, workspace_id)
        self._units = UnitRepository(session, workspace_id)

    async def list_requests(
        self,
        pagination: PaginationParams,
        *,
        status: str | None = None,
        urgency: str | None = None,
        property_id: str | None = None,
        is_emergency: bool | None = None,
    ) -> tuple[list[MaintenanceRequest], int]:
        filters = {
            "status": status,
            "urgency_level": urgency,
            "property_id": property_id,
            "is_emergency": is_emergency,
        }
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters=filters,
        )

    async def get_request(self, request_id: str) -> MaintenanceRequest:
        request = await self._repo.get_by_id(request_id)
        if not request:
            raise NotFoundError("Maintenance request", request_id)
        return request

    async def update_request(
        self, request_id: str, data: MaintenanceRequestUpdate
    ) -> MaintenanceRequest:
        current = await self.get_request(request_id)
        previous_status = current.status
        changes = data.model_dump(exclude_none=True, exclude_unset=True)
        await self._check_location(changes, current)
        if changes.get("is_emergency") is True:
            changes.setdefault("urgency_level", "emergency")
        updated = await self._repo.update(request_id, **changes)
        if "status" in changes and changes["status"] != previous_status:
            await self._activity.log(request_id, "status_changed", {"status": changes["status"]})
        return updated  # type: ignore[return-value]

    async def _check_location(self, changes: dict[str, Any], current: MaintenanceRequest) -> None:
        """Reject property / unit ids outside this workspace; a unit must sit on the request's property."""
        if "property_id" in changes and not await self._properties.get_by_id(changes["property_id"]):
            raise NotFoundError("Property", changes["property_id"])
        if "unit_id" not in changes:
            return
        unit = await self._units.get_by_id(changes["unit_id"])
        if not unit:
            raise NotFoundError("Unit", changes["unit_id"])
        property_id = changes.get("property_id", current.property_id)
        if property_id is None:
            changes["property_id"] = unit.property_id
        elif unit.property_id != property_id:
            raise ValidationError(f"Unit '{unit.id}' does not belong to property '{property_id}'")

    async def assign_request(
        self, request_id: str, data: MaintenanceAssignRequest
    ) -> MaintenanceRequest:
        await self.get_request(request_id)
        updated = await self._repo.update(
            request_id,
            assigned_to=data.assigned_to,
            assigned_by=data.assigned_by,
            assigned_at=utcnow(),
            status="assigned",
        )
        await self._activity.log(
            request_id, "assigned", {"assigned_to": data.assigned_to}, user_id=data.assigned_by
        )
        return updated  # type: ignore[return-value]

    async def resolve_request(
        self, request_id: str, data: MaintenanceResolveRequest
    ) -> MaintenanceRequest:
        await self.get_request(request_id)
        updated = await self._repo.update(
            request_id,
            resolution_notes=data.resolution_notes,
            resolution_photos=data.resolution_photos,
            resolved_by=data.resolved_by,
            resolved_at=utcnow(),
            status="completed",
        )
        await self._activity.log(
            request_id,
            "resolved",
            {"photos": len(data.resolution_photos or [])},
            user_id=data.resolved_by,
        )
        return updated  # type: ignore[return-value]

    async def list_activity(self, request_id: str) -> list[MaintenanceRequestActivity]:
        await self.get_request(request_id)
        return await self._activity.list_for_request(request_id)

    async def get_stats(self, now: datetime | None = None) -> MaintenanceStatsOut:
        now = now or utcnow()
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        week_ago = now - timedelta(days=7)

        rows = await self._repo.stats_rows()
        by_status: dict[str, int] = {s: 0 for s in REQUEST_STATUSES}
        by_category: Counter[str] = Counter()
        total_this_month = emergency = completed_this_week = 0

        for status, _urgency, is_emergency, created_at, category in rows:
            by_status[status] = by_status.get(status, 0) + 1
            by_category[category] += 1
            created = _as_utc(created_at)
            if created >= month_start:
                total_this_month += 1
            if is_emergency and status != "closed":
                emergency += 1
            if status == "completed" and created >= week_ago:
                completed_this_week += 1

        return MaintenanceStatsOut(
            total=len(rows),
            total_this_month=total_this_month,
            emergency=emergency,
            pending=sum(by_status.get(s, 0) for s in PENDING_STATUSES),
            in_progress=by_status.get("in_progress", 0),
            completed_this_week=completed_this_week,
            by_status=by_status,
            by_category=dict(by_category),
        )

    # ------------------------------------------------------------------
    # Voice channel helpers
    # ------------------------------------------------------------------

    async def resolve_location(
        self,
        property_id: str | None,
        unit_id: str | None = None,
        unit_number: str | None = None,
    ) -> tuple[str | None, str | None]:
        """Drop ids that don't exist in this workspace; look a unit up by number when possible."""
        if property_id and not await self._properties.get_by_id(property_id):
            logger.warning("Ignoring unknown property_id=%s from voice payload", property_id)
            property_id = None

        if unit_id:
            unit = await self._units.get_by_id(unit_id)
            if not unit:
                logger.warning("Ignoring unknown unit_id=%s from voice payload", unit_id)
                unit_id = None
            elif property_id is None:
                property_id = unit.property_id

        if not unit_id and property_id and unit_number:
            unit = await self._units.find_by_number(property_id, unit_number)
            unit_id = unit.id if unit else None

        return property_id, unit_id

    async def create_from_call(self, **fields: Any) -> MaintenanceRequest:
        fields.setdefault("status", "new")
        request = await self._repo.create(**fields)
        logger.info(
            "Created maintenance request %s (ticket=%d, call_id=%s, emergency=%s)",
            request.id,
            request.ticket_number,
            request.call_id,
            request.is_emergency,
        )
        return request

    async def find_request(self, request_id: str) -> MaintenanceRequest | None:
        return await self._repo.get_by_id(request_id)

    async def get_by_call_id(self, call_id: str) -> MaintenanceRequest | None:
        return await self._repo.get_by_call_id(call_id)

    async def apply_call_update(self, request_id: str, **fields: Any) -> MaintenanceRequest:
        return await self._repo.update(request_id, **fields)  # type: ignore[return-value]

    async def log_activity(
        self, request_id: str, action: str, details: dict[str, Any] | None = None
    ) -> MaintenanceRequestActivity:
        return await self._activity.log(request_id, action, details)
