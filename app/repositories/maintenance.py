"""Maintenance request + activity repositories."""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select

from app.domain.maintenance import MaintenanceRequest, MaintenanceRequestActivity
from app.repositories.base import BaseRepository


class MaintenanceRequestRepository(BaseRepository[MaintenanceRequest]):
    model = MaintenanceRequest

    async def get_by_call_id(self, call_id: str) -> MaintenanceRequest | None:
        return await self.first_where(call_id=call_id)

    async def next_ticket_number(self) -> int:
        result = await self._session.execute(
            select(func.coalesce(func.max(MaintenanceRequest.ticket_number), 0)).where(
                MaintenanceRequest.workspace_id == self._workspace_id
            )
        )
        return int(result.scalar_one()) + 1

    async def create(self, **kwargs: Any) -> MaintenanceRequest:
        if kwargs.get("ticket_number") is None:
            kwargs["ticket_number"] = await self.next_ticket_number()
        return await super().create(**kwargs)

    async def stats_rows(self) -> list[tuple]:
        """(status, urgency_level, is_emergency, created_at, issue_category) for every request."""
        result = await self._session.execute(
            select(
                MaintenanceRequest.status,
                MaintenanceRequest.urgency_level,
                MaintenanceRequest.is_emergency,
                MaintenanceRequest.created_at,
                MaintenanceRequest.issue_category,
            ).where(MaintenanceRequest.workspace_id == self._workspace_id)
        )
        return [tuple(row) for row in result.all()]


class MaintenanceActivityRepository(BaseRepository[MaintenanceRequestActivity]):
    model = MaintenanceRequestActivity

    async def log(
        self,
        request_id: str,
        action: str,
        details: dict[str, Any] | None = None,
        user_id: str | None = None,
    ) -> MaintenanceRequestActivity:
        return await self.create(
            request_id=request_id, action=action, details=details, user_id=user_id
        )

    async def list_for_request(self, request_id: str) -> list[MaintenanceRequestActivity]:
        result = await self._session.execute(
            self._base_query()
            .where(MaintenanceRequestActivity.request_id == request_id)
            .order_by(MaintenanceRequestActivity.created_at.desc())
        )
        return list(result.scalars().all())
