"""Property and unit Pydantic schemas."""


from datetime import datetime
from typing import Literal

from pydantic import Field

from app.schemas.common import CamelModel

UnitStatus = Literal["occupied", "vacant", "down"]

class PropertyCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    address: str | None = None
    city: str | None = None
    state: str | None = None

class PropertyOut(CamelModel):
    id: str
    workspace_id: str
    name: str
    address: str | None = None
    city: str | None = None
    state: str | None = None
    created_at: datetime
    updated_at: datetime

class UnitCreate(CamelModel):
    unit_number: str = Field(min_length=1, max_length=50)
    status: UnitStatus = "occupied"

class UnitOut(CamelModel):
    id: str
    property_id: str
    unit_number: str
    status: str
    created_at: datetime
