"""Voice-agent configuration service.

Rule: No SQLAlchemy / no FastAPI here. Pure Python business logic.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import ConflictError, NotFoundError
from app.domain.voice_agent import DEFAULT_AGENT_NAME, DEFAULT_BUSINESS_HOURS, VoiceAgentConfig
from app.repositories.property import PropertyRepository
from app.repositories.voice_agent import VoiceAgentConfigRepository
from app.schemas.voice_agent import VoiceAgentConfigCreate, VoiceAgentConfigUpdate


class VoiceAgentConfigService:
    def __init__(self, session: AsyncSession, workspace_id: str):
        self._repo = VoiceAgentConfigRepository(session, workspace_id)
        self._properties = PropertyRepository(session, workspace_id)

    async def get_config(self, property_id: str | None = None) -> VoiceAgentConfig:
        config = await self._repo.get_for_property(property_id)
        if not config:
            raise NotFoundError("Voice agent config", property_id)
        return config

    async def create_config(self, data: VoiceAgentConfigCreate) -> VoiceAgentConfig:
        if data.property_id and not await self._properties.get_by_id(data.property_id):
            raise NotFoundError("Property", data.property_id)
        if await self._repo.get_for_property(data.property_id):
            scope = f"property '{data.property_id}'" if data.property_id else "the workspace default"
            raise ConflictError(f"A voice agent config already exists for {scope}")

        values = data.model_dump(exclude_none=True)
        values.setdefault("agent_name", DEFAULT_AGENT_NAME)
        values.setdefault("business_hours_start", DEFAULT_BUSINESS_HOURS[0])
        values.setdefault("business_hours_end", DEFAULT_BUSINESS_HOURS[1])
        values.setdefault("emergency_keywords", list(settings.default_emergency_keywords))
        values.setdefault("issue_categories", [])
        values.setdefault("knowledge_base", [])
        return await self._repo.create(**values)

    async def update_config(self, config_id: str, data: VoiceAgentConfigUpdate) -> VoiceAgentConfig:
        if not await self._repo.get_by_id(config_id):
            raise NotFoundError("Voice agent config", config_id)
        updated = await self._repo.update(
            config_id, **data.model_dump(exclude_none=True, exclude_unset=True)
        )
        return updated  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Used by the voice channel
    # ------------------------------------------------------------------

    async def resolve(self, property_id: str | None = None) -> VoiceAgentConfig | None:
        """Property config when one exists, else the workspace default (or None)."""
        if property_id:
            config = await self._repo.get_for_property(property_id)
            if config:
                return config
        return await self._repo.get_for_property(None)

    @staticmethod
    def emergency_keywords(config: VoiceAgentConfig | None) -> list[str]:
        if config is None or config.emergency_keywords is None:
            return list(settings.default_emergency_keywords)
        return list(config.emergency_keywords)

    async def record_call(self, config: VoiceAgentConfig | None, duration_seconds: int | None) -> None:
        """Bump ``calls_handled`` and fold *duration_seconds* into the running average."""
        if config is None:
            return
        handled = config.calls_handled or 0
        average = config.avg_call_duration_seconds
        if duration_seconds is not None:
            if average is None or handled == 0:
                average = duration_seconds
            else:
                average = round((average * handled + duration_seconds) / (handled + 1))
        await self._repo.update(
            config.id, calls_handled=handled + 1, avg_call_duration_seconds=average
        )
