"""Maintenance request Pydantic schemas (request DTOs and response models)."""


from datetime import datetime
from typing import Any, Literal

from pydantic import Field, computed_field

from app.schemas.common import CamelModel
from app.services.voice_payload import format_ticket_number

RequestStatus = Literal["new", "reviewed", "assigned", "in_progress", "completed", "closed"]
UrgencyLevel = Literal["low", "normal", "urgent", "emergency"]

class MaintenanceRequestUpdate(CamelModel):
    caller_name: str | None = None
    caller_phone: str | None = None
    caller_email: str | None = None
    caller_unit_number: str | None = None
    property_id: str | None = None
    unit_id: str | None = None
    issue_category: str | None = None
    issue_subcategory: str | None = None
    issue_description: str | None = None
    issue_location: str | None = None
    urgency_level: UrgencyLevel | None = None
    is_emergency: bool | None = None
    preferred_contact_time: str | None = None
    preferred_access_time: str | None = None
    has_pets: bool | None = None
    special_access_instructions: str | None = None
    status: RequestStatus | None = None
    work_order_id: str | None = None

class MaintenanceAssignRequest(CamelModel):
    assigned_to: str = Field(min_length=1)
    assigned_by: str | None = None

class MaintenanceResolveRequest(CamelModel):
    resolution_notes: str = Field(min_length=1)
    resolution_photos: list[str] | None = None
    resolved_by: str | None = None

class MaintenanceRequestOut(CamelModel):
    id: str
    workspace_id: str
    ticket_number: int
    caller_name: str
    caller_phone: str
    caller_email: str | None = None
    caller_unit_number: str | None = None
    property_id: str | None = None
    unit_id: str | None = None
    issue_category: str
    issue_subcategory: str | None = None
    issue_description: str
    issue_location: str | None = None
    urgency_level: str
    is_emergency: bool
    preferred_contact_time: str | None = None
    preferred_access_time: str | None = None
    has_pets: bool
    special_access_instructions: str | None = None
    call_id: str | None = None
    call_duration_seconds: int | None = None
    call_transcript: str | None = None
    call_recording_url: str | None = None
    call_summary: str | None = None
    call_started_at: datetime | None = None
    call_ended_at: datetime | None = None
    call_analyzed_at: datetime | None = None
    status: str
    assigned_to: str | None = None
    assigned_at: datetime | None = None
    assigned_by: str | None = None
    resolution_notes: str | None = None
    resolution_photos: list[str] | None = None
    resolved_at: datetime | None = None
    resolved_by: str | None = None
    work_order_id: str | None = None
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def formatted_ticket(self) -> str:
        return format_ticket_number(self.ticket_number)

class MaintenanceActivityOut(CamelModel):
    id: str
    request_id: str
    user_id: str | None = None
    action: str
    details: dict[str, Any] | None = None
    created_at: datetime

class MaintenanceStatsOut(CamelModel):
    total: int
    total_this_month: int
    emergency: int
    pending: int
    in_progress: int
    completed_this_week: int
    by_status: dict[str, int]
    by_category: dict[str, int]
