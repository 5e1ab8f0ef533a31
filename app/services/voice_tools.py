"""Voice-agent tool calls — functions the phone agent invokes mid-call.

Each tool takes the loosely-typed ``parameters`` object from the platform and
returns a plain dict that is read back to the agent. Unknown tools are not an
error: the agent gets ``{"error": "Unknown tool: <name>"}`` and carries on.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, ValidationError
from app.domain.maintenance import URGENCY_LEVELS
from app.domain.mixins import utcnow
from app.repositories.property import PropertyRepository, UnitRepository
from app.services.maintenance import MaintenanceRequestService
from app.services.voice_agent import VoiceAgentConfigService
from app.services.voice_payload import (
    detect_emergency,
    format_ticket_number,
    normalize_string,
    parse_boolean,
    parse_duration,
)

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Mapping[str, Any]], Awaitable[dict[str, Any]]]


def _required(parameters: Mapping[str, Any], name: str) -> str:
    value = normalize_string(parameters.get(name))
    if not value:
        raise ValidationError(f"Missing required parameter '{name}'")
    return value


class VoiceToolService:
    def __init__(self, session: AsyncSession, workspace_id: str):
        self._properties = PropertyRepository(session, workspace_id)
        self._units = UnitRepository(session, workspace_id)
        self._requests = MaintenanceRequestService(session, workspace_id)
        self._configs = VoiceAgentConfigService(session, workspace_id)
        self._tools: dict[str, ToolHandler] = {
            "lookup_property": self.lookup_property,
            "verify_unit": self.verify_unit,
            "create_maintenance_request": self.create_maintenance_request,
            "get_ticket_number": self.get_ticket_number,
            "update_call_data": self.update_call_data,
        }

    async def call(self, tool_name: str, parameters: Mapping[str, Any] | None) -> dict[str, Any]:
        handler = self._tools.get(tool_name)
        if handler is None:
            return {"error": f"Unknown tool: {tool_name}"}
        result = await handler(parameters or {})
        logger.info("Tool %s result: %s", tool_name, result)
        return result

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    async def lookup_property(self, parameters: Mapping[str, Any]) -> dict[str, Any]:
        query = _required(parameters, "query")
        properties = await self._properties.search(query, limit=5)
        return {
            "properties": [
                {
                    "id": p.id,
                    "name": p.name,
                    "address": p.address,
                    "city": p.city,
                    "state": p.state,
                }
                for p in properties
            ],
            "found": bool(properties),
        }

    async def verify_unit(self, parameters: Mapping[str, Any]) -> dict[str, Any]:
        property_id = _required(parameters, "property_id")
        unit_number = _required(parameters, "unit_number")
        unit = await self._units.find_by_number(property_id, unit_number)
        return {
            "verified": unit is not None,
            "unit": (
                {"id": unit.id, "unit_number": unit.unit_number, "status": unit.status}
                if unit
                else None
            ),
            "message": f"Unit {unit_number} verified" if unit else f"Unit {unit_number} not found",
        }

    async def create_maintenance_request(self, parameters: Mapping[str, Any]) -> dict[str, Any]:
        call_id = normalize_string(parameters.get("call_id"))
        if call_id:
            existing = await self._requests.get_by_call_id(call_id)
            if existing is not None:
                logger.info("Request for call %s already exists; returning it", call_id)
                return self._created_result(existing.id, existing.ticket_number)

        unit_number = normalize_string(parameters.get("unit_number"))
        property_id, unit_id = await self._requests.resolve_location(
            normalize_string(parameters.get("property_id")),
            normalize_string(parameters.get("unit_id")),
            unit_number,
        )
        description = _required(parameters, "issue_description")

        config = await self._configs.resolve(property_id)
        matched = detect_emergency(description, self._configs.emergency_keywords(config))
        is_emergency = parse_boolean(parameters.get("is_emergency")) is True or bool(matched)
        urgency = (normalize_string(parameters.get("urgency_level")) or "normal").lower()
        if urgency not in URGENCY_LEVELS:
            urgency = "normal"
        if is_emergency:
            urgency = "emergency"

        request = await self._requests.create_from_call(
            caller_name=normalize_string(parameters.get("caller_name")) or "Unknown caller",
            caller_phone=normalize_string(parameters.get("caller_phone")) or "",
            caller_email=normalize_string(parameters.get("caller_email")),
            caller_unit_number=unit_number,
            property_id=property_id,
            unit_id=unit_id,
            issue_category=normalize_string(parameters.get("issue_category")) or "general",
            issue_subcategory=normalize_string(parameters.get("issue_subcategory")),
            issue_description=description,
            issue_location=normalize_string(parameters.get("issue_location")),
            urgency_level=urgency,
            is_emergency=is_emergency,
            preferred_contact_time=normalize_string(parameters.get("preferred_contact_time")),
            preferred_access_time=normalize_string(parameters.get("preferred_access_time")),
            has_pets=parse_boolean(parameters.get("has_pets")) is True,
            special_access_instructions=normalize_string(parameters.get("special_instructions")),
            call_id=call_id,
            call_started_at=utcnow(),
        )
        await self._requests.log_activity(
            request.id, "created_by_agent", {"call_id": call_id, "keywords": matched}
        )
        return self._created_result(request.id, request.ticket_number)

    async def get_ticket_number(self, parameters: Mapping[str, Any]) -> dict[str, Any]:
        request = await self._load_request(parameters)
        return {
            "ticket_number": request.ticket_number,
            "formatted": format_ticket_number(request.ticket_number),
        }

    async def update_call_data(self, parameters: Mapping[str, Any]) -> dict[str, Any]:
        request = await self._load_request(parameters)
        fields = {
            "call_transcript": normalize_string(parameters.get("call_transcript")),
            "call_duration_seconds": parse_duration(parameters.get("call_duration_seconds")),
            "call_recording_url": normalize_string(parameters.get("call_recording_url")),
        }
        await self._requests.apply_call_update(
            request.id,
            call_ended_at=utcnow(),
            **{k: v for k, v in fields.items() if v is not None},
        )
        return {"success": True}

    # ------------------------------------------------------------------

    async def _load_request(self, parameters: Mapping[str, Any]):
        request_id = _required(parameters, "request_id")
        request = await self._requests.find_request(request_id)
        if request is None:
            raise NotFoundError("Maintenance request", request_id)
        return request

    @staticmethod
    def _created_result(request_id: str, ticket_number: int) -> dict[str, Any]:
        return {
            "success": True,
            "request_id": request_id,
            "ticket_number": ticket_number,
            "formatted_ticket": format_ticket_number(ticket_number),
        }
