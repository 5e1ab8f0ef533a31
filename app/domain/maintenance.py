"""SQLAlchemy ORM models for maintenance requests and their activity log.

Requests arrive mostly through the voice agent; ``call_id`` is the
conversation id of the call that produced the row and is the idempotency key
for every webhook event.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.domain.mixins import TimestampMixin, WorkspaceMixin, new_id, utcnow

REQUEST_STATUSES: tuple[str, ...] = (
    "new",
    "reviewed",
    "assigned",
    "in_progress",
    "completed",
    "closed",
)
PENDING_STATUSES: frozenset[str] = frozenset({"new", "reviewed", "assigned"})

URGENCY_LEVELS: tuple[str, ...] = ("low", "normal", "urgent", "emergency")


class MaintenanceRequest(Base, WorkspaceMixin, TimestampMixin):
    __tablename__ = "maintenance_requests"
    __table_args__ = (
        UniqueConstraint("workspace_id", "call_id", name="uq_maintenance_requests_call_id"),
        UniqueConstraint(
            "workspace_id", "ticket_number", name="uq_maintenance_requests_ticket_number"
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    ticket_number: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    # Caller
    caller_name: Mapped[str] = mapped_column(String(255), nullable=False, default="Unknown caller")
    caller_phone: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    caller_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    caller_unit_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Location (plain references; the caller may not match a known unit)
    property_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("properties.id", ondelete="SET NULL"), nullable=True, index=True
    )
    unit_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("units.id", ondelete="SET NULL"), nullable=True
    )

    # Issue
    issue_category: Mapped[str] = mapped_column(String(100), nullable=False, default="general")
    issue_subcategory: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    issue_description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    issue_location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    urgency_level: Mapped[str] = mapped_column(String(20), default="normal", nullable=False)
    is_emergency: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)

    # Access
    preferred_contact_time: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    preferred_access_time: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    has_pets: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    special_access_instructions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Call
    call_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    call_duration_seconds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    call_transcript: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    call_recording_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    call_summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    call_started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    call_ended_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    # Set by the first post-call analysis; the call is counted on the agent config then
    call_analyzed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Workflow: new | reviewed | assigned | in_progress | completed | closed
    status: Mapped[str] = mapped_column(String(20), default="new", nullable=False, index=True)
    assigned_to: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    assigned_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    assigned_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    resolution_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    resolution_photos: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    resolved_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    work_order_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    activity: Mapped[List["MaintenanceRequestActivity"]] = relationship(
        back_populates="request", lazy="noload", cascade="all, delete-orphan"
    )


class MaintenanceRequestActivity(Base, WorkspaceMixin):
    """Immutable activity row (no updated_at)."""

    __tablename__ = "maintenance_request_activity"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    request_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("maintenance_requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    details: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    request: Mapped["MaintenanceRequest"] = relationship(back_populates="activity", lazy="noload")
