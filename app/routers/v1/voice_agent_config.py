"""Voice-agent configuration router."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.response import ERROR_RESPONSES, DataResponse
from app.db.base import get_db
from app.schemas.voice_agent import (
    VoiceAgentConfigCreate,
    VoiceAgentConfigOut,
    VoiceAgentConfigUpdate,
)
from app.services.voice_agent import VoiceAgentConfigService

router = APIRouter(prefix="/voice-agent-config", tags=["Voice Agent Config"], responses=ERROR_RESPONSES)


def _svc(session: AsyncSession) -> VoiceAgentConfigService:
    return VoiceAgentConfigService(session, settings.default_workspace_id)


@router.get("", response_model=DataResponse[VoiceAgentConfigOut])
async def get_voice_agent_config(
    property_id: Optional[str] = Query(
        default=None, alias="propertyId", description="Omit for the workspace default",
    ),
    session: AsyncSession = Depends(get_db),
):
    config = await _svc(session).get_config(property_id)
    return {"data": VoiceAgentConfigOut.model_validate(config)}


@router.post("", response_model=DataResponse[VoiceAgentConfigOut], status_code=status.HTTP_201_CREATED)
async def create_voice_agent_config(
    body: VoiceAgentConfigCreate,
    session: AsyncSession = Depends(get_db),
):
    """Create a config; unset fields take the agent defaults."""
    config = await _svc(session).create_config(body)
    return {"data": VoiceAgentConfigOut.model_validate(config)}


@router.patch("/{config_id}", response_model=DataResponse[VoiceAgentConfigOut])
async def update_voice_agent_config(
    config_id: str,
    body: VoiceAgentConfigUpdate,
    session: AsyncSession = Depends(get_db),
):
    config = await _svc(session).update_config(config_id, body)
    return {"data": VoiceAgentConfigOut.model_validate(config)}
