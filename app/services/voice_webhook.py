"""Voice-agent webhook service — turns call events into maintenance requests.

Event types handled:
  conversation.started     — logged only
  conversation.ended       — stamps call end / duration / transcript / recording on the request
  ticket.created           — supervisor notification + ``notification_sent`` activity
  post_call_transcription  — upsert of the full request from the call analysis

Every write is keyed by ``call_id`` (the platform's conversation id), so a
replayed event updates the existing request instead of creating a second one.
Notification failures are logged and never abort the event.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.maintenance import URGENCY_LEVELS, MaintenanceRequest
from app.domain.mixins import utcnow
from app.domain.voice_agent import VoiceAgentConfig
from app.services import notifications
from app.services.maintenance import MaintenanceRequestService
from app.services.voice_agent import VoiceAgentConfigService
from app.services.voice_payload import (
    build_transcript_text,
    collected_value,
    detect_emergency,
    dig,
    format_ticket_number,
    normalize_string,
    parse_boolean,
    parse_duration,
    parse_unix_timestamp,
)

logger = logging.getLogger(__name__)

EventHandler = Callable[[str | None, Mapping[str, Any]], Awaitable[Any]]


class VoiceWebhookService:
    def __init__(self, session: AsyncSession, workspace_id: str):
        self._requests = MaintenanceRequestService(session, workspace_id)
        self._configs = VoiceAgentConfigService(session, workspace_id)
        self._handlers: dict[str, EventHandler] = {
            "conversation.started": self.on_conversation_started,
            "conversation.ended": self.on_conversation_ended,
            "ticket.created": self.on_ticket_created,
            "post_call_transcription": self.on_post_call_transcription,
        }

    async def handle(self, payload: Mapping[str, Any]) -> str | None:
        """Dispatch one webhook payload; returns the normalized event type."""
        event_type = normalize_string(payload.get("event_type")) or normalize_string(
            payload.get("type")
        )
        data = payload.get("data")
        if not isinstance(data, Mapping):
            data = {}
        conversation_id = normalize_string(payload.get("conversation_id")) or normalize_string(
            data.get("conversation_id")
        )

        handler = self._handlers.get(event_type or "")
        if handler is None:
            logger.info("Unknown event type: %s", event_type)
            return event_type

        await handler(conversation_id, data)
        return event_type

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    async def on_conversation_started(
        self, conversation_id: str | None, data: Mapping[str, Any]
    ) -> None:
        logger.info("Conversation started: %s", conversation_id)

    async def on_conversation_ended(
        self, conversation_id: str | None, data: Mapping[str, Any]
    ) -> MaintenanceRequest | None:
        logger.info("Conversation ended: %s", conversation_id)
        if not conversation_id:
            logger.warning("conversation.ended without a conversation id; nothing to update")
            return None

        request = await self._requests.get_by_call_id(conversation_id)
        if request is None:
            logger.warning("No maintenance request for call %s", conversation_id)
            return None

        fields: dict[str, Any] = {
            "call_ended_at": utcnow(),
            "call_duration_seconds": parse_duration(data.get("duration_seconds")),
            "call_transcript": build_transcript_text(data.get("transcript")),
            "call_recording_url": normalize_string(data.get("recording_url")),
        }
        return await self._requests.apply_call_update(
            request.id, **{k: v for k, v in fields.items() if v is not None}
        )

    async def on_ticket_created(
        self, conversation_id: str | None, data: Mapping[str, Any]
    ) -> MaintenanceRequest | None:
        request_id = normalize_string(data.get("request_id"))
        if not request_id:
            logger.warning("ticket.created without request_id (call %s)", conversation_id)
            return None

        request = await self._requests.find_request(request_id)
        if request is None:
            logger.warning("ticket.created for unknown request %s", request_id)
            return None

        await self.notify_supervisors(request)
        return request

    async def on_post_call_transcription(
        self, conversation_id: str | None, data: Mapping[str, Any]
    ) -> MaintenanceRequest | None:
        if not conversation_id:
            logger.warning("post_call_transcription without a conversation id; skipping")
            return None

        collected = dig(data, "analysis", "data_collection_results")
        dynamic = dig(data, "conversation_initiation_client_data", "dynamic_variables")

        def field(*keys: str) -> Any:
            value = collected_value(collected, *keys)
            return value if value is not None else collected_value(dynamic, *keys)

        transcript = build_transcript_text(data.get("transcript"))
        summary = normalize_string(dig(data, "analysis", "transcript_summary"))
        description = normalize_string(field("issue_description", "description"))
        duration = parse_duration(dig(data, "metadata", "call_duration_secs"))
        started_at = parse_unix_timestamp(dig(data, "metadata", "start_time_unix_secs"))
        unit_number = normalize_string(field("unit_number", "caller_unit_number"))

        property_id, unit_id = await self._requests.resolve_location(
            normalize_string(field("property_id")),
            normalize_string(field("unit_id")),
            unit_number,
        )

        config = await self._configs.resolve(property_id)
        keywords = self._configs.emergency_keywords(config)
        matched = detect_emergency("\n".join(filter(None, [description, transcript])), keywords)
        explicit = parse_boolean(field("is_emergency"))
        is_emergency = explicit is True or bool(matched)

        urgency = normalize_string(field("urgency_level", "urgency"))
        urgency = urgency.lower() if urgency else None
        if urgency not in URGENCY_LEVELS:
            urgency = None
        if is_emergency:
            urgency = "emergency"

        fields: dict[str, Any] = {
            "caller_name": normalize_string(field("caller_name", "name")),
            "caller_phone": normalize_string(field("caller_phone", "phone_number"))
            or normalize_string(dig(data, "metadata", "phone_call", "external_number")),
            "caller_email": normalize_string(field("caller_email", "email")),
            "caller_unit_number": unit_number,
            "property_id": property_id,
            "unit_id": unit_id,
            "issue_category": normalize_string(field("issue_category", "category")),
            "issue_subcategory": normalize_string(field("issue_subcategory", "subcategory")),
            "issue_description": description or summary,
            "issue_location": normalize_string(field("issue_location", "location")),
            "urgency_level": urgency,
            "is_emergency": is_emergency,
            "preferred_contact_time": normalize_string(field("preferred_contact_time")),
            "preferred_access_time": normalize_string(field("preferred_access_time")),
            "has_pets": parse_boolean(field("has_pets")),
            "special_access_instructions": normalize_string(
                field("special_access_instructions", "special_instructions")
            ),
            "call_transcript": transcript,
            "call_summary": summary,
            "call_duration_seconds": duration,
            "call_recording_url": normalize_string(data.get("recording_url")),
            "call_started_at": started_at,
            "call_ended_at": _call_end(started_at, duration),
        }

        existing = await self._requests.get_by_call_id(conversation_id)
        if existing is not None:
            return await self._update_from_call(existing, fields, matched, explicit, config)
        return await self._create_from_call(conversation_id, fields, matched, explicit, config)

    # ------------------------------------------------------------------
    # Upsert halves
    # ------------------------------------------------------------------

    async def _create_from_call(
        self,
        call_id: str,
        fields: dict[str, Any],
        matched: list[str],
        explicit: bool | None,
        config: VoiceAgentConfig | None,
    ) -> MaintenanceRequest:
        values = {k: v for k, v in fields.items() if v is not None}
        values.setdefault("caller_name", "Unknown caller")
        values.setdefault("caller_phone", "")
        values.setdefault("issue_category", "general")
        values.setdefault("issue_description", "Reported via voice agent")
        values.setdefault("urgency_level", "normal")
        values.setdefault("has_pets", False)
        values.setdefault("call_ended_at", utcnow())
        values["call_analyzed_at"] = utcnow()

        request = await self._requests.create_from_call(call_id=call_id, **values)
        await self._requests.log_activity(
            request.id,
            "created_from_call",
            {"call_id": call_id, "ticket": format_ticket_number(request.ticket_number)},
        )
        if request.is_emergency:
            await self._log_emergency(request, matched, explicit)

        await self._configs.record_call(config, request.call_duration_seconds)
        await self.notify_supervisors(request)
        return request

    async def _update_from_call(
        self,
        existing: MaintenanceRequest,
        fields: dict[str, Any],
        matched: list[str],
        explicit: bool | None,
        config: VoiceAgentConfig | None,
    ) -> MaintenanceRequest:
        was_emergency = existing.is_emergency
        first_analysis = existing.call_analyzed_at is None
        changes = {k: v for k, v in fields.items() if v is not None}
        # An emergency flag is never cleared by a later event
        if not changes.get("is_emergency"):
            changes.pop("is_emergency", None)
            if was_emergency:
                changes.pop("urgency_level", None)

        fields_updated = sorted(changes)
        # The first analysis of a call counts it, whichever path inserted the row
        if first_analysis:
            changes["call_analyzed_at"] = utcnow()

        request = await self._requests.apply_call_update(existing.id, **changes)
        await self._requests.log_activity(
            request.id, "call_data_updated", {"fields": fields_updated}
        )
        if request.is_emergency and not was_emergency:
            await self._log_emergency(request, matched, explicit)
        if first_analysis:
            await self._configs.record_call(config, request.call_duration_seconds)
        return request

    async def _log_emergency(
        self, request: MaintenanceRequest, matched: list[str], explicit: bool | None
    ) -> None:
        logger.warning(
            "Emergency flagged on %s (keywords=%s)",
            format_ticket_number(request.ticket_number),
            matched,
        )
        await self._requests.log_activity(
            request.id,
            "emergency_detected",
            {"keywords": matched, "reported_by_caller": explicit is True},
        )

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    async def notify_supervisors(self, request: MaintenanceRequest) -> bool:
        """Email the configured supervisors and record a ``notification_sent`` activity."""
        config = await self._configs.resolve(request.property_id)
        recipients = list((config.supervisor_notification_emails or []) if config else [])

        delivered = False
        notifier = notifications.get_email_notifier()
        if notifier.enabled and recipients:
            subject, body = notifications.build_maintenance_email(request)
            delivered = await notifier.send(recipients, subject, body)

        await self._requests.log_activity(
            request.id,
            "notification_sent",
            {
                "type": "emergency" if request.is_emergency else "standard",
                "recipients": recipients,
                "delivered": delivered,
            },
        )
        return delivered


def _call_end(started_at: datetime | None, duration: int | None) -> datetime | None:
    if started_at is None or duration is None:
        return None
    try:
        return started_at + timedelta(seconds=duration)
    except OverflowError:
        return None
