"""Maintenance request router — dashboard workflow over voice-agent intake."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.pagination import PaginationParams
from app.core.response import ERROR_RESPONSES, DataResponse, ListResponse, paginated
from app.db.base import get_db
from app.schemas.maintenance import (
    MaintenanceActivityOut,
    MaintenanceAssignRequest,
    MaintenanceRequestOut,
    MaintenanceRequestUpdate,
    MaintenanceResolveRequest,
    MaintenanceStatsOut,
    RequestStatus,
    UrgencyLevel,
)
from app.services.maintenance import MaintenanceRequestService

router = APIRouter(prefix="/maintenance-requests", tags=["Maintenance Requests"], responses=ERROR_RESPONSES)


def _svc(session: AsyncSession) -> MaintenanceRequestService:
    return MaintenanceRequestService(session, settings.default_workspace_id)


@router.get("", response_model=ListResponse[MaintenanceRequestOut])
async def list_maintenance_requests(
    filter_status: Optional[RequestStatus] = Query(default=None, alias="status"),
    urgency: Optional[UrgencyLevel] = Query(default=None),
    property_id: Optional[str] = Query(default=None, alias="propertyId"),
    is_emergency: Optional[bool] = Query(default=None, alias="isEmergency"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    """List requests, newest first. Filter by status, urgency, property or emergency flag."""
    items, total = await _svc(session).list_requests(
        pagination,
        status=filter_status,
        urgency=urgency,
        property_id=property_id,
        is_emergency=is_emergency,
    )
    return paginated(
        [MaintenanceRequestOut.model_validate(r) for r in items],
        total, pagination.page, pagination.limit,
    )


@router.get("/stats", response_model=DataResponse[MaintenanceStatsOut])
async def maintenance_request_stats(session: AsyncSession = Depends(get_db)):
    return {"data": await _svc(session).get_stats()}


@router.get("/{request_id}", response_model=DataResponse[MaintenanceRequestOut])
async def get_maintenance_request(
    request_id: str,
    session: AsyncSession = Depends(get_db),
):
    request = await _svc(session).get_request(request_id)
    return {"data": MaintenanceRequestOut.model_validate(request)}


@router.patch("/{request_id}", response_model=DataResponse[MaintenanceRequestOut])
async def update_maintenance_request(
    request_id: str,
    body: MaintenanceRequestUpdate,
    session: AsyncSession = Depends(get_db),
):
    request = await _svc(session).update_request(request_id, body)
    return {"data": MaintenanceRequestOut.model_validate(request)}


@router.post("/{request_id}/assign", response_model=DataResponse[MaintenanceRequestOut])
async def assign_maintenance_request(
    request_id: str,
    body: MaintenanceAssignRequest,
    session: AsyncSession = Depends(get_db),
):
    request = await _svc(session).assign_request(request_id, body)
    return {"data": MaintenanceRequestOut.model_validate(request)}


@router.post("/{request_id}/resolve", response_model=DataResponse[MaintenanceRequestOut])
async def resolve_maintenance_request(
    request_id: str,
    body: MaintenanceResolveRequest,
    session: AsyncSession = Depends(get_db),
):
    request = await _svc(session).resolve_request(request_id, body)
    return {"data": MaintenanceRequestOut.model_validate(request)}


@router.get("/{request_id}/activity", response_model=DataResponse[list[MaintenanceActivityOut]])
async def list_maintenance_request_activity(
    request_id: str,
    session: AsyncSession = Depends(get_db),
):
    activity = await _svc(session).list_activity(request_id)
    return {"data": [MaintenanceActivityOut.model_validate(a) for a in activity]}
