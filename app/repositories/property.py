"""Property + unit repositories."""

from __future__ import annotations

from sqlalchemy import func, or_

from app.domain.property import Property, Unit
from app.repositories.base import BaseRepository


class PropertyRepository(BaseRepository[Property]):
    model = Property

    async def search(self, query: str, limit: int = 5) -> list[Property]:
        """Case-insensitive substring match on name or address."""
        pattern = f"%{query.lower()}%"
        result = await self._session.execute(
            self._base_query()
            .where(
                or_(
                    func.lower(Property.name).like(pattern),
                    func.lower(Property.address).like(pattern),
                )
            )
            .order_by(Property.name)
            .limit(limit)
        )
        return list(result.scalars().all())


class UnitRepository(BaseRepository[Unit]):
    model = Unit

    async def find_by_number(self, property_id: str, unit_number: str) -> Unit | None:
        result = await self._session.execute(
            self._base_query()
            .where(Unit.property_id == property_id)
            .where(func.lower(Unit.unit_number) == unit_number.strip().lower())
            .limit(1)
        )
        return result.scalars().first()

    async def list_for_property(self, property_id: str) -> list[Unit]:
        result = await self._session.execute(
            self._base_query().where(Unit.property_id == property_id).order_by(Unit.unit_number)
        )
        return list(result.scalars().all())
