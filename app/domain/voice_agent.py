"""SQLAlchemy ORM model for voice-agent configuration.

One row per property, plus an optional workspace default (``property_id IS
NULL``) that the webhook reads for emergency keywords and notification
recipients.
"""

from __future__ import annotations

from typing import Any, List, Optional

from sqlalchemy import JSON, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.domain.mixins import TimestampMixin, WorkspaceMixin, new_id

DEFAULT_AGENT_NAME = "Alex"
DEFAULT_BUSINESS_HOURS = ("08:00", "18:00")


class VoiceAgentConfig(Base, WorkspaceMixin, TimestampMixin):
    __tablename__ = "voice_agent_config"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    property_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=True, index=True
    )

    agent_name: Mapped[str] = mapped_column(String(100), default=DEFAULT_AGENT_NAME, nullable=False)
    greeting_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    closing_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    after_hours_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    business_hours_start: Mapped[str] = mapped_column(
        String(5), default=DEFAULT_BUSINESS_HOURS[0], nullable=False
    )
    business_hours_end: Mapped[str] = mapped_column(
        String(5), default=DEFAULT_BUSINESS_HOURS[1], nullable=False
    )

    emergency_keywords: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    # [{"id": "plumbing", "label": "Plumbing", "subcategories": [...]}]
    issue_categories: Mapped[List[dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)
    # [{"question": "...", "answer": "..."}]
    knowledge_base: Mapped[List[dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)

    supervisor_notification_emails: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    emergency_notification_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    calls_handled: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    avg_call_duration_seconds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
