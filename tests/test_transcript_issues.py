from types import SimpleNamespace

import httpx
import openai
import pytest

from app.core.config import settings
from app.core.exceptions import RateLimitedError, ServiceUnavailableError, TranscriptExtractionError
from app.services import transcript_issues
from app.services.transcript_issues import TranscriptIssueService, build_user_message, parse_issues

ENDPOINT = "/api/voice-agent/transcript-issues"

TRANSCRIPT = (
    "Agent: How can I help?\n"
    "Caller: Water is coming through the ceiling and the hallway light is out."
)


def fake_completion(content):
    async def create(**kwargs):
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])

    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


@pytest.fixture
def ai_enabled(monkeypatch):
    monkeypatch.setattr(settings, "openai_api_key", "sk-test")


def test_parse_issues_drops_malformed_entries():
    issues = parse_issues(
        {
            "issues": [
                {
                    "title": "Ceiling leak",
                    "description": "Water is entering through the ceiling.",
                    "severity": "severe",
                    "area": "unit",
                    "category": "plumbing",
                },
                {"title": "Missing fields"},
                {
                    "title": "Bad severity",
                    "description": "x",
                    "severity": "catastrophic",
                    "area": "unit",
                },
                "not an object",
            ]
        }
    )
    assert [i.title for i in issues] == ["Ceiling leak"]
    assert parse_issues({"issues": "nope"}) == []
    assert parse_issues({}) == []


def test_build_user_message_defaults():
    message = build_user_message("Caller: hi")
    assert "Caller: Unknown" in message
    assert "Reported Category: general" in message
    assert message.endswith("TRANSCRIPT:\nCaller: hi")


def test_service_requires_api_key():
    with pytest.raises(ServiceUnavailableError):
        TranscriptIssueService()


async def test_invalid_model_output_raises(ai_enabled):
    service = TranscriptIssueService()
    service.client = fake_completion("not json")
    with pytest.raises(TranscriptExtractionError):
        await service.extract_issues(TRANSCRIPT)


async def test_blank_transcript_is_rejected(client):
    resp = await client.post(ENDPOINT, json={"transcript": "   "})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Transcript is required"}


async def test_unconfigured_ai_returns_503(client):
    resp = await client.post(ENDPOINT, json={"transcript": TRANSCRIPT})
    assert resp.status_code == 503
    assert "OPENAI_API_KEY" in resp.json()["error"]


async def test_extracts_issues(client, ai_enabled, monkeypatch):
    seen = {}

    async def fake_call(self, system_prompt, user_message):
        seen["prompt"] = system_prompt
        seen["message"] = user_message
        return {
            "issues": [
                {
                    "title": "Ceiling leak",
                    "description": "Water is coming through the ceiling.",
                    "severity": "severe",
                    "area": "unit",
                    "category": "plumbing",
                },
                {
                    "title": "Hallway light out",
                    "description": "The hallway light is not working.",
                    "severity": "low",
                    "area": "inside",
                    "category": "electrical",
                },
            ]
        }

    monkeypatch.setattr(TranscriptIssueService, "_call_openai", fake_call)

    resp = await client.post(
        ENDPOINT,
        json={"transcript": TRANSCRIPT, "caller_name": "Jane Doe", "issue_category": "plumbing"},
    )

    assert resp.status_code == 200
    issues = resp.json()["issues"]
    assert [i["area"] for i in issues] == ["unit", "inside"]
    assert issues[0]["severity"] == "severe"
    assert seen["prompt"] == transcript_issues.ISSUE_EXTRACTION_PROMPT
    assert "Caller: Jane Doe" in seen["message"]


async def test_upstream_failure_maps_to_502(client, ai_enabled, monkeypatch):
    async def failing_call(self, system_prompt, user_message):
        raise TranscriptExtractionError("OpenAI service error: boom")

    monkeypatch.setattr(TranscriptIssueService, "_call_openai", failing_call)

    resp = await client.post(ENDPOINT, json={"transcript": TRANSCRIPT})
    assert resp.status_code == 502
    assert resp.json() == {"error": "OpenAI service error: boom"}


def rate_limited_client():
    async def create(**kwargs):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        raise openai.RateLimitError(
            "Rate limit reached", response=httpx.Response(429, request=request), body=None
        )

    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


async def test_openai_rate_limit_raises_rate_limited(ai_enabled):
    service = TranscriptIssueService()
    service.client = rate_limited_client()
    with pytest.raises(RateLimitedError):
        await service.extract_issues(TRANSCRIPT)


async def test_rate_limit_maps_to_429(client, ai_enabled, monkeypatch):
    monkeypatch.setattr(transcript_issues, "AsyncOpenAI", lambda **kwargs: rate_limited_client())

    resp = await client.post(ENDPOINT, json={"transcript": TRANSCRIPT})
    assert resp.status_code == 429
    assert resp.json() == {"error": "Rate limit exceeded. Please try again in a moment."}
