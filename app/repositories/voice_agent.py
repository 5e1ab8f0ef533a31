"""Voice-agent config repository."""


from app.domain.voice_agent import VoiceAgentConfig
from app.repositories.base import BaseRepository


class VoiceAgentConfigRepository(BaseRepository[VoiceAgentConfig]):
    model = VoiceAgentConfig

    async def get_for_property(self, property_id: str | None) -> VoiceAgentConfig | None:
        """Config scoped to *property_id*; ``None`` selects the workspace default."""
        return await self.first_where(property_id=property_id)
