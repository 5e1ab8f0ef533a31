"""Voice-agent endpoints — called by the conversational-AI phone platform, not the dashboard.

These keep the platform's flat wire contract (``{"success": true}`` /
``{"error": "..."}``) instead of the ``/api/v1`` envelope. Business logic
lives in :mod:`app.services.voice_webhook`, :mod:`app.services.voice_tools`
and :mod:`app.services.transcript_issues`.
"""


import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import AppException
from app.core.response import WebhookAck, WebhookError
from app.db.base import get_db
from app.schemas.voice_agent import (
    ToolCallRequest,
    TranscriptIssuesRequest,
    TranscriptIssuesResponse,
)
from app.services import transcript_issues
from app.services.voice_tools import VoiceToolService
from app.services.voice_webhook import VoiceWebhookService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/voice-agent", tags=["Voice Agent"])


def _error(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# ---------------------------------------------------------------------------
# POST /api/voice-agent/webhook — call events
# ---------------------------------------------------------------------------

@router.post("/webhook", response_model=WebhookAck, responses={500: {"model": WebhookError}})
async def voice_agent_webhook(request: Request, session: AsyncSession = Depends(get_db)):
    """Receive one call event from the voice platform."""
    try:
        payload = await request.json()
        if not isinstance(payload, dict):
            raise ValueError("Webhook payload must be a JSON object")
        logger.debug("Webhook received: %s", json.dumps(payload, default=str))

        event_type = await VoiceWebhookService(session, settings.default_workspace_id).handle(payload)
        await session.commit()
        logger.info("Webhook processed: %s", event_type)
    except Exception as exc:
        logger.exception("Error in voice-agent webhook")
        await session.rollback()
        return _error(str(exc) or "Unknown error")

    return WebhookAck()


# ---------------------------------------------------------------------------
# POST /api/voice-agent/tools — mid-call tool invocations
# ---------------------------------------------------------------------------

@router.post("/tools", responses={500: {"model": WebhookError}})
async def voice_agent_tools(body: ToolCallRequest, session: AsyncSession = Depends(get_db)):
    """Run one agent tool and return its result to the platform."""
    logger.info("Tool call received: %s %s", body.tool_name, body.parameters)
    try:
        result = await VoiceToolService(session, settings.default_workspace_id).call(
            body.tool_name, body.parameters
        )
        await session.commit()
    except AppException as exc:
        await session.rollback()
        logger.warning("Tool %s failed: %s", body.tool_name, exc.message)
        return _error(exc.message)
    except Exception as exc:
        logger.exception("Error in voice-agent tool %s", body.tool_name)
        await session.rollback()
        return _error(str(exc) or "Unknown error")

    return result


# ---------------------------------------------------------------------------
# POST /api/voice-agent/transcript-issues — AI issue extraction
# ---------------------------------------------------------------------------

@router.post("/transcript-issues", response_model=TranscriptIssuesResponse)
async def extract_transcript_issues(body: TranscriptIssuesRequest):
    """Split a call transcript into reviewable maintenance issues."""
    if not body.transcript.strip():
        return _error("Transcript is required", status_code=400)
    try:
        service = transcript_issues.get_transcript_service()
        issues = await service.extract_issues(
            body.transcript,
            property_id=body.property_id,
            caller_name=body.caller_name,
            issue_category=body.issue_category,
        )
    except AppException as exc:
        return _error(exc.message, status_code=exc.status_code)

    return TranscriptIssuesResponse(issues=issues)
