from app.core.config import settings
from app.db.base import async_session_factory
from app.repositories.maintenance import MaintenanceRequestRepository

BASE = "/api/v1/voice-agent-config"


async def test_missing_default_config_is_404(client):
    resp = await client.get(BASE)
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"


async def test_create_applies_defaults(client):
    resp = await client.post(BASE, json={})

    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["propertyId"] is None
    assert data["agentName"] == "Alex"
    assert data["businessHoursStart"] == "08:00"
    assert data["businessHoursEnd"] == "18:00"
    assert data["emergencyKeywords"] == settings.default_emergency_keywords
    assert data["issueCategories"] == []
    assert data["knowledgeBase"] == []
    assert data["callsHandled"] == 0

    fetched = (await client.get(BASE)).json()["data"]
    assert fetched["id"] == data["id"]


async def test_second_default_config_conflicts(client):
    await client.post(BASE, json={"agentName": "Riley"})
    resp = await client.post(BASE, json={"agentName": "Morgan"})

    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "CONFLICT"


async def test_property_scoped_config(client):
    prop = (await client.post("/api/v1/properties", json={"name": "Maple Court"})).json()["data"]

    resp = await client.post(
        BASE,
        json={
            "propertyId": prop["id"],
            "greetingMessage": "Maple Court maintenance, this is Alex.",
            "issueCategories": [
                {"id": "plumbing", "label": "Plumbing", "subcategories": ["leak", "clog"]}
            ],
            "knowledgeBase": [{"question": "Where is the laundry?", "answer": "Basement"}],
        },
    )
    assert resp.status_code == 201

    scoped = (await client.get(BASE, params={"propertyId": prop["id"]})).json()["data"]
    assert scoped["greetingMessage"] == "Maple Court maintenance, this is Alex."
    assert scoped["issueCategories"][0]["subcategories"] == ["leak", "clog"]
    assert scoped["knowledgeBase"][0]["answer"] == "Basement"

    # A property config is not the workspace default
    assert (await client.get(BASE)).status_code == 404


async def test_update_config(client):
    created = (await client.post(BASE, json={})).json()["data"]

    resp = await client.patch(
        f"{BASE}/{created['id']}",
        json={
            "agentName": "Jordan",
            "emergencyKeywords": ["mold", "sparks"],
            "supervisorNotificationEmails": ["ops@example.com"],
            "businessHoursEnd": "20:30",
        },
    )

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["agentName"] == "Jordan"
    assert data["emergencyKeywords"] == ["mold", "sparks"]
    assert data["supervisorNotificationEmails"] == ["ops@example.com"]
    assert data["businessHoursEnd"] == "20:30"
    assert data["businessHoursStart"] == "08:00"


async def test_update_rejects_bad_business_hours(client):
    created = (await client.post(BASE, json={})).json()["data"]
    resp = await client.patch(f"{BASE}/{created['id']}", json={"businessHoursStart": "25:00"})
    assert resp.status_code == 422


async def test_update_missing_config(client):
    resp = await client.patch(f"{BASE}/nope", json={"agentName": "Jordan"})
    assert resp.status_code == 404


async def test_configured_keywords_replace_defaults(client):
    await client.post(BASE, json={"emergencyKeywords": ["mold"]})

    for call_id, description in (
        ("conv_mold", "Black mold behind the shower"),
        ("conv_flood", "Small flood under the sink"),
    ):
        await client.post(
            "/api/voice-agent/webhook",
            json={
                "type": "post_call_transcription",
                "data": {
                    "conversation_id": call_id,
                    "analysis": {
                        "data_collection_results": {"issue_description": {"value": description}}
                    },
                },
            },
        )

    async with async_session_factory() as s:
        repo = MaintenanceRequestRepository(s, settings.default_workspace_id)
        mold = await repo.get_by_call_id("conv_mold")
        flood = await repo.get_by_call_id("conv_flood")
    assert mold.is_emergency is True
    assert flood.is_emergency is False


async def test_config_for_unknown_property(client):
    resp = await client.post(BASE, json={"propertyId": "missing-property"})
    assert resp.status_code == 404
