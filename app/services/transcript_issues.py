"""Transcript issue extraction — OpenAI-powered splitting of a call transcript
into distinct, actionable maintenance issues.

The dashboard shows the extracted issues for review before anything is
created; this module only reads the transcript and never writes.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError, RateLimitError
from pydantic import ValidationError as PydanticValidationError

from app.core.config import settings
from app.core.exceptions import (
    RateLimitedError,
    ServiceUnavailableError,
    TranscriptExtractionError,
)
from app.schemas.voice_agent import TranscriptIssue

logger = logging.getLogger(__name__)

# ── System prompt ─────────────────────────────────────────────────────────

ISSUE_EXTRACTION_PROMPT = """You are a maintenance issue extraction assistant for property management.
Analyze the following call transcript between a tenant and a voice agent. Extract distinct, actionable maintenance issues.

For each issue provide:
- title: A clear, professional title (max 60 chars)
- description: A detailed description of the issue based on what the caller reported (2-3 sentences)
- severity: "severe" (safety hazard, emergency, water damage), "moderate" (affects daily living, needs prompt attention), or "low" (cosmetic, minor inconvenience)
- area: "unit" (inside the tenant's unit), "inside" (common indoor areas), or "outside" (exterior, grounds, parking)
- category: The maintenance category (plumbing, electrical, hvac, appliance, structural, pest, general)

Rules:
- Extract ONLY distinct actionable maintenance issues
- Do NOT duplicate issues if the caller mentions the same problem multiple times
- Use professional language, not the caller's exact words
- Assign severity based on urgency keywords and safety implications
- If the caller mentions an emergency (flooding, gas leak, fire, no heat in winter), mark as "severe"

Respond ONLY with a valid JSON object in this exact format:
{
  "issues": [
    {
      "title": "string",
      "description": "string",
      "severity": "severe|moderate|low",
      "area": "unit|inside|outside",
      "category": "string"
    }
  ]
}"""


def build_user_message(
    transcript: str,
    *,
    property_id: Optional[str] = None,
    caller_name: Optional[str] = None,
    issue_category: Optional[str] = None,
) -> str:
    return (
        f"Caller: {caller_name or 'Unknown'}\n"
        f"Reported Category: {issue_category or 'general'}\n"
        f"Property ID: {property_id or 'unknown'}\n\n"
        f"TRANSCRIPT:\n{transcript}"
    )


def parse_issues(raw: Dict[str, Any]) -> List[TranscriptIssue]:
    """Keep the well-formed entries of ``raw["issues"]``; drop the rest."""
    items = raw.get("issues") if isinstance(raw, dict) else None
    if not isinstance(items, list):
        return []
    issues: List[TranscriptIssue] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            issues.append(TranscriptIssue(**item))
        except PydanticValidationError:
            logger.debug("Dropping malformed issue: %s", item)
    return issues


class TranscriptIssueService:
    """Thin async wrapper around OpenAI for transcript issue extraction."""

    def __init__(self) -> None:
        if not settings.ai_enabled:
            raise ServiceUnavailableError(
                "AI features are not available. Configure OPENAI_API_KEY to enable."
            )
        self.client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.openai_timeout,
        )
        self.model = settings.openai_model
        self.max_tokens = settings.openai_max_tokens

    # ── Core OpenAI call ──────────────────────────────────────────────────

    async def _call_openai(
        self, system_prompt: str, user_message: str
    ) -> Dict[str, Any]:
        """Send an async request to OpenAI and return parsed JSON."""
        try:
            logger.info(
                "Calling OpenAI model=%s, input_length=%d",
                self.model,
                len(user_message),
            )
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_message},
                ],
                max_completion_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )

            content = response.choices[0].message.content
            if not content:
                raise TranscriptExtractionError("Empty response from OpenAI")

            return json.loads(content)

        except RateLimitError as exc:
            logger.warning("OpenAI rate limit hit: %s", exc)
            raise RateLimitedError() from exc
        except OpenAIError as exc:
            logger.error("OpenAI API error: %s", exc)
            raise TranscriptExtractionError(f"OpenAI service error: {exc}") from exc
        except json.JSONDecodeError as exc:
            logger.error("Invalid JSON from OpenAI: %s", exc)
            raise TranscriptExtractionError(f"Invalid JSON response: {exc}") from exc

    # ── Public methods ────────────────────────────────────────────────────

    async def extract_issues(
        self,
        transcript: str,
        *,
        property_id: Optional[str] = None,
        caller_name: Optional[str] = None,
        issue_category: Optional[str] = None,
    ) -> List[TranscriptIssue]:
        user_message = build_user_message(
            transcript,
            property_id=property_id,
            caller_name=caller_name,
            issue_category=issue_category,
        )
        raw = await self._call_openai(ISSUE_EXTRACTION_PROMPT, user_message)
        issues = parse_issues(raw)
        logger.info("Extracted %d issue(s) from transcript", len(issues))
        return issues


def get_transcript_service() -> TranscriptIssueService:
    """Factory that creates a TranscriptIssueService instance.

    Raises ``ServiceUnavailableError`` when the OpenAI key is not configured.
    """
    return TranscriptIssueService()
