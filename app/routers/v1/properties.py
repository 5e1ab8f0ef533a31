"""Property + unit router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.pagination import PaginationParams
from app.core.response import ERROR_RESPONSES, DataResponse, ListResponse, paginated
from app.db.base import get_db
from app.schemas.property import PropertyCreate, PropertyOut, UnitCreate, UnitOut
from app.services.property import PropertyService

router = APIRouter(prefix="/properties", tags=["Properties"], responses=ERROR_RESPONSES)


def _svc(session: AsyncSession) -> PropertyService:
    return PropertyService(session, settings.default_workspace_id)


@router.get("", response_model=ListResponse[PropertyOut])
async def list_properties(
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    items, total = await _svc(session).list_properties(pagination)
    return paginated(
        [PropertyOut.model_validate(p) for p in items],
        total, pagination.page, pagination.limit,
    )


@router.post("", response_model=DataResponse[PropertyOut], status_code=status.HTTP_201_CREATED)
async def create_property(
    body: PropertyCreate,
    session: AsyncSession = Depends(get_db),
):
    prop = await _svc(session).create_property(body)
    return {"data": PropertyOut.model_validate(prop)}


@router.get("/{property_id}", response_model=DataResponse[PropertyOut])
async def get_property(
    property_id: str,
    session: AsyncSession = Depends(get_db),
):
    prop = await _svc(session).get_property(property_id)
    return {"data": PropertyOut.model_validate(prop)}


@router.get("/{property_id}/units", response_model=DataResponse[list[UnitOut]])
async def list_units(
    property_id: str,
    session: AsyncSession = Depends(get_db),
):
    units = await _svc(session).list_units(property_id)
    return {"data": [UnitOut.model_validate(u) for u in units]}


@router.post(
    "/{property_id}/units",
    response_model=DataResponse[UnitOut],
    status_code=status.HTTP_201_CREATED,
)
async def create_unit(
    property_id: str,
    body: UnitCreate,
    session: AsyncSession = Depends(get_db),
):
    unit = await _svc(session).create_unit(property_id, body)
    return {"data": UnitOut.model_validate(unit)}
