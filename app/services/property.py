"""Property service — the properties and units the voice agent looks callers up against.

Rule: No SQLAlchemy / no FastAPI here. Pure Python business logic.
"""


from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError
from app.core.pagination import PaginationParams
from app.domain.property import Property, Unit
from app.repositories.property import PropertyRepository, UnitRepository
from app.schemas.property import PropertyCreate, UnitCreate

class PropertyService:
    def __init__(self, session: AsyncSession, workspace_id: str):
        self._repo = PropertyRepository(session, workspace_id)
        self._units = UnitRepository(session, workspace_id)

    async def list_properties(self, pagination: PaginationParams):
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
        )

    async def get_property(self, property_id: str) -> Property:
        prop = await self._repo.get_by_id(property_id)
        if not prop:
            raise NotFoundError("Property", property_id)
        return prop

    async def create_property(self, data: PropertyCreate) -> Property:
        return await self._repo.create(**data.model_dump(exclude_none=True))

    async def list_units(self, property_id: str) -> list[Unit]:
        await self.get_property(property_id)
        return await self._units.list_for_property(property_id)

    async def create_unit(self, property_id: str, data: UnitCreate) -> Unit:
        await self.get_property(property_id)
        if await self._units.find_by_number(property_id, data.unit_number):
            raise ConflictError(f"Unit '{data.unit_number}' already exists on this property")
        return await self._units.create(property_id=property_id, **data.model_dump())
