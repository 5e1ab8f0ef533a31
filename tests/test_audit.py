import asyncio

import httpx
from fastapi import FastAPI
from sqlalchemy import select

from app.db.base import async_session_factory
from app.domain.audit import AuditTrail
from app.middleware import audit
from app.middleware.audit import AuditMiddleware, infer_entity, record_audit

REQUEST_ID = "0b7c61a2-51b4-4d0e-9d3e-3f1c8a4f9a11"


def test_infer_entity_from_id_path():
    assert infer_entity(f"/api/v1/maintenance-requests/{REQUEST_ID}/assign") == (
        "maintenance-request",
        REQUEST_ID,
    )


def test_infer_entity_without_id():
    assert infer_entity("/api/voice-agent/webhook") == ("webhook", None)
    assert infer_entity("/api/v1/properties") == ("property", None)
    assert infer_entity("/") == ("unknown", None)


async def test_record_audit_persists_row():
    await record_audit(
        method="POST",
        path=f"/api/v1/maintenance-requests/{REQUEST_ID}/resolve",
        status_code=200,
        duration_ms=12,
        ip_address="10.0.0.5",
        user_agent="pytest",
    )

    async with async_session_factory() as s:
        rows = (await s.execute(select(AuditTrail))).scalars().all()

    (row,) = rows
    assert row.workspace_id == "test-workspace"
    assert row.entity_type == "maintenance-request"
    assert row.entity_id == REQUEST_ID
    assert row.status_code == 200
    assert row.description.startswith("POST /api/v1/maintenance-requests/")


async def test_middleware_audits_writes_only(monkeypatch):
    recorded = []

    async def fake_record(**kwargs):
        recorded.append(kwargs)

    monkeypatch.setattr(audit, "record_audit", fake_record)

    app = FastAPI()
    app.add_middleware(AuditMiddleware)

    @app.get("/things")
    async def list_things():
        return []

    @app.post("/things")
    async def create_thing():
        return {"ok": True}

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        await c.get("/things")
        await c.post("/things")

    for _ in range(5):
        await asyncio.sleep(0)

    assert [(r["method"], r["path"], r["status_code"]) for r in recorded] == [
        ("POST", "/things", 200)
    ]
