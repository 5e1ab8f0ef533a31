"""Domain package — all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  property.py     — Properties and their units (what the voice agent looks up)
  maintenance.py  — Maintenance requests and their immutable activity log
  voice_agent.py  — Per-property / workspace-default voice-agent configuration
  audit.py        — Immutable HTTP audit trail (never updated or deleted)
  mixins.py       — Shared TimestampMixin, SoftDeleteMixin, WorkspaceMixin
"""

from app.domain.audit import AuditTrail
from app.domain.maintenance import MaintenanceRequest, MaintenanceRequestActivity
from app.domain.property import Property, Unit
from app.domain.voice_agent import VoiceAgentConfig

__all__ = [
    "AuditTrail",
    "MaintenanceRequest",
    "MaintenanceRequestActivity",
    "Property",
    "Unit",
    "VoiceAgentConfig",
]
