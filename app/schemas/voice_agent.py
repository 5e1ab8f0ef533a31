"""Voice-agent Pydantic schemas: configuration CRUD and the agent-facing endpoints."""


from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from app.schemas.common import CamelModel

# ---------------------------------------------------------------------------
# Configuration (dashboard, camelCase)
# ---------------------------------------------------------------------------

_HHMM = r"^([01]\d|2[0-3]):[0-5]\d$"

class IssueCategory(CamelModel):
    id: str
    label: str
    subcategories: list[str] = []

class KnowledgeEntry(CamelModel):
    question: str
    answer: str

class VoiceAgentConfigCreate(CamelModel):
    property_id: str | None = None
    agent_name: str | None = None
    greeting_message: str | None = None
    closing_message: str | None = None
    after_hours_message: str | None = None
    business_hours_start: str | None = Field(default=None, pattern=_HHMM)
    business_hours_end: str | None = Field(default=None, pattern=_HHMM)
    emergency_keywords: list[str] | None = None
    issue_categories: list[IssueCategory] | None = None
    knowledge_base: list[KnowledgeEntry] | None = None
    supervisor_notification_emails: list[str] | None = None
    emergency_notification_phone: str | None = None

class VoiceAgentConfigUpdate(CamelModel):
    agent_name: str | None = None
    greeting_message: str | None = None
    closing_message: str | None = None
    after_hours_message: str | None = None
    business_hours_start: str | None = Field(default=None, pattern=_HHMM)
    business_hours_end: str | None = Field(default=None, pattern=_HHMM)
    emergency_keywords: list[str] | None = None
    issue_categories: list[IssueCategory] | None = None
    knowledge_base: list[KnowledgeEntry] | None = None
    supervisor_notification_emails: list[str] | None = None
    emergency_notification_phone: str | None = None

class VoiceAgentConfigOut(CamelModel):
    id: str
    workspace_id: str
    property_id: str | None = None
    agent_name: str
    greeting_message: str | None = None
    closing_message: str | None = None
    after_hours_message: str | None = None
    business_hours_start: str
    business_hours_end: str
    emergency_keywords: list[str]
    issue_categories: list[IssueCategory]
    knowledge_base: list[KnowledgeEntry]
    supervisor_notification_emails: list[str] | None = None
    emergency_notification_phone: str | None = None
    calls_handled: int
    avg_call_duration_seconds: int | None = None
    created_at: datetime
    updated_at: datetime

# ---------------------------------------------------------------------------
# Agent-facing endpoints (snake_case wire format of the voice platform)
# ---------------------------------------------------------------------------

class ToolCallRequest(BaseModel):
    tool_name: str
    parameters: dict[str, Any] = {}

class TranscriptIssuesRequest(BaseModel):
    transcript: str = ""
    property_id: str | None = None
    caller_name: str | None = None
    issue_category: str | None = None

class TranscriptIssue(BaseModel):
    title: str = Field(max_length=120)
    description: str
    severity: Literal["severe", "moderate", "low"]
    area: Literal["unit", "inside", "outside"]
    category: str = "general"

class TranscriptIssuesResponse(BaseModel):
    issues: list[TranscriptIssue]
