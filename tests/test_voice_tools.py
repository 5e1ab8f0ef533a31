import pytest

from app.core.config import settings
from app.db.base import async_session_factory
from app.repositories.maintenance import MaintenanceActivityRepository, MaintenanceRequestRepository
from app.repositories.property import PropertyRepository, UnitRepository

WORKSPACE_ID = settings.default_workspace_id
TOOLS = "/api/voice-agent/tools"


@pytest.fixture
async def maple_court(session):
    prop = await PropertyRepository(session, WORKSPACE_ID).create(
        name="Maple Court", address="12 Maple St", city="Springfield", state="IL"
    )
    unit = await UnitRepository(session, WORKSPACE_ID).create(property_id=prop.id, unit_number="4B")
    await PropertyRepository(session, WORKSPACE_ID).create(name="Oak Tower", address="9 Oak Ave")
    await session.commit()
    return prop, unit


async def call_tool(client, tool_name, **parameters):
    return await client.post(TOOLS, json={"tool_name": tool_name, "parameters": parameters})


async def test_unknown_tool(client):
    resp = await call_tool(client, "order_pizza")
    assert resp.status_code == 200
    assert resp.json() == {"error": "Unknown tool: order_pizza"}


async def test_lookup_property_matches_name_or_address(client, maple_court):
    prop, _ = maple_court

    by_name = (await call_tool(client, "lookup_property", query="maple")).json()
    assert by_name["found"] is True
    assert [p["id"] for p in by_name["properties"]] == [prop.id]

    by_address = (await call_tool(client, "lookup_property", query="OAK AVE")).json()
    assert [p["name"] for p in by_address["properties"]] == ["Oak Tower"]

    missing = (await call_tool(client, "lookup_property", query="birch")).json()
    assert missing == {"properties": [], "found": False}


async def test_lookup_property_requires_query(client):
    resp = await call_tool(client, "lookup_property")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Missing required parameter 'query'"}


async def test_verify_unit(client, maple_court):
    prop, unit = maple_court

    found = (await call_tool(client, "verify_unit", property_id=prop.id, unit_number="4b")).json()
    assert found["verified"] is True
    assert found["unit"]["id"] == unit.id
    assert found["message"] == "Unit 4b verified"

    missing = (await call_tool(client, "verify_unit", property_id=prop.id, unit_number="99")).json()
    assert missing == {"verified": False, "unit": None, "message": "Unit 99 not found"}


async def test_create_maintenance_request(client, maple_court):
    prop, unit = maple_court

    resp = await call_tool(
        client,
        "create_maintenance_request",
        call_id="conv_tool_1",
        property_id=prop.id,
        unit_number="4B",
        caller_name="Sam Lee",
        caller_phone="+15550123",
        issue_category="appliance",
        issue_description="Fridge stopped cooling",
        has_pets="yes",
        special_instructions="Key under the mat",
    )

    body = resp.json()
    assert resp.status_code == 200
    assert body["success"] is True
    assert body["ticket_number"] == 1
    assert body["formatted_ticket"] == "MR-0001"

    async with async_session_factory() as s:
        request = await MaintenanceRequestRepository(s, WORKSPACE_ID).get_by_id(body["request_id"])
        actions = [a.action for a in await MaintenanceActivityRepository(s, WORKSPACE_ID).list_for_request(request.id)]
    assert request.unit_id == unit.id
    assert request.has_pets is True
    assert request.special_access_instructions == "Key under the mat"
    assert request.urgency_level == "normal"
    assert request.is_emergency is False
    assert actions == ["created_by_agent"]


async def test_create_maintenance_request_is_idempotent_per_call(client):
    first = (
        await call_tool(client, "create_maintenance_request", call_id="conv_x", issue_description="Leak")
    ).json()
    second = (
        await call_tool(client, "create_maintenance_request", call_id="conv_x", issue_description="Leak")
    ).json()
    assert second["request_id"] == first["request_id"]
    assert second["ticket_number"] == first["ticket_number"]


async def test_create_maintenance_request_flags_emergency_keywords(client):
    resp = await call_tool(
        client,
        "create_maintenance_request",
        issue_description="There is no heat in the apartment",
        urgency_level="low",
    )
    async with async_session_factory() as s:
        request = await MaintenanceRequestRepository(s, WORKSPACE_ID).get_by_id(resp.json()["request_id"])
    assert request.is_emergency is True
    assert request.urgency_level == "emergency"


async def test_create_maintenance_request_requires_description(client):
    resp = await call_tool(client, "create_maintenance_request", caller_name="Sam")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Missing required parameter 'issue_description'"}


async def test_ticket_numbers_increase(client):
    for n in range(1, 4):
        body = (
            await call_tool(client, "create_maintenance_request", issue_description=f"Issue {n}")
        ).json()
        assert body["ticket_number"] == n

    ticket = (
        await call_tool(client, "get_ticket_number", request_id=body["request_id"])
    ).json()
    assert ticket == {"ticket_number": 3, "formatted": "MR-0003"}


async def test_get_ticket_number_for_unknown_request(client):
    resp = await call_tool(client, "get_ticket_number", request_id="missing")
    assert resp.status_code == 500
    assert "not found" in resp.json()["error"]


async def test_update_call_data(client):
    created = (
        await call_tool(client, "create_maintenance_request", issue_description="Broken blinds")
    ).json()

    resp = await call_tool(
        client,
        "update_call_data",
        request_id=created["request_id"],
        call_transcript="Caller: The blinds are broken.",
        call_duration_seconds="64",
    )
    assert resp.json() == {"success": True}

    async with async_session_factory() as s:
        request = await MaintenanceRequestRepository(s, WORKSPACE_ID).get_by_id(created["request_id"])
    assert request.call_transcript == "Caller: The blinds are broken."
    assert request.call_duration_seconds == 64
    assert request.call_ended_at is not None
