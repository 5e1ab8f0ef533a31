import json

import httpx

from app.domain.maintenance import MaintenanceRequest
from app.services.notifications import EmailNotifier, build_maintenance_email


def make_request(**overrides):
    values = {
        "ticket_number": 7,
        "caller_name": "Jane Doe",
        "issue_category": "plumbing",
        "issue_description": "Kitchen sink is dripping",
        "is_emergency": False,
    }
    values.update(overrides)
    return MaintenanceRequest(**values)


def test_standard_email():
    subject, body = build_maintenance_email(make_request(), dashboard_url="https://ops.example.com/")

    assert subject == "New Maintenance Request: MR-0007"
    assert "Maintenance Request MR-0007" in body
    assert "EMERGENCY" not in body
    assert "<strong>Urgency:</strong> Normal" in body
    assert 'href="https://ops.example.com/voice-agent"' in body


def test_emergency_email_escapes_caller_input():
    subject, body = build_maintenance_email(
        make_request(is_emergency=True, caller_name="<script>alert(1)</script>"),
        dashboard_url="https://ops.example.com",
    )

    assert subject == "🚨 EMERGENCY: MR-0007 - plumbing"
    assert "<script>" not in body
    assert "&lt;script&gt;" in body
    assert "<strong>Urgency:</strong> EMERGENCY" in body


async def test_send_posts_to_resend():
    captured = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"id": "email_1"})

    notifier = EmailNotifier(
        "re_test_key",
        api_url="https://mail.example.com/emails",
        sender="Ops <ops@example.com>",
        transport=httpx.MockTransport(handler),
    )

    assert await notifier.send(["a@example.com"], "Hello", "<p>Hi</p>") is True

    (request,) = captured
    assert str(request.url) == "https://mail.example.com/emails"
    assert request.headers["authorization"] == "Bearer re_test_key"
    assert json.loads(request.content) == {
        "from": "Ops <ops@example.com>",
        "to": ["a@example.com"],
        "subject": "Hello",
        "html": "<p>Hi</p>",
    }


async def test_send_is_skipped_without_api_key():
    def handler(request):
        raise AssertionError("no request expected")

    notifier = EmailNotifier("", transport=httpx.MockTransport(handler))
    assert notifier.enabled is False
    assert await notifier.send(["a@example.com"], "Hello", "<p>Hi</p>") is False


async def test_send_without_recipients():
    notifier = EmailNotifier("re_test_key", transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    assert await notifier.send([], "Hello", "<p>Hi</p>") is False


async def test_send_reports_provider_errors():
    rejected = EmailNotifier(
        "re_test_key",
        transport=httpx.MockTransport(lambda r: httpx.Response(422, json={"message": "bad"})),
    )
    assert await rejected.send(["a@example.com"], "Hello", "<p>Hi</p>") is False

    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    offline = EmailNotifier("re_test_key", transport=httpx.MockTransport(unreachable))
    assert await offline.send(["a@example.com"], "Hello", "<p>Hi</p>") is False
