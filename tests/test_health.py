async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {
        "status": "ok",
        "app": "Property Ops API",
        "env": "test",
        "aiEnabled": False,
        "emailEnabled": False,
    }


async def test_unknown_route_uses_error_envelope(client):
    resp = await client.get("/api/v1/nothing-here")
    assert resp.status_code == 404
    assert resp.json() == {"error": {"code": "NOT_FOUND", "message": "Resource not found"}}
