"""SQLAlchemy ORM models for properties and their units."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.domain.mixins import SoftDeleteMixin, TimestampMixin, WorkspaceMixin, new_id


class Property(Base, WorkspaceMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "properties"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    units: Mapped[List["Unit"]] = relationship(back_populates="property", lazy="noload")


class Unit(Base, WorkspaceMixin, TimestampMixin):
    __tablename__ = "units"
    __table_args__ = (
        UniqueConstraint("property_id", "unit_number", name="uq_units_property_unit_number"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    property_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    unit_number: Mapped[str] = mapped_column(String(50), nullable=False)
    # "occupied" | "vacant" | "down"
    status: Mapped[str] = mapped_column(String(20), default="occupied", nullable=False)

    property: Mapped["Property"] = relationship(back_populates="units", lazy="noload")
