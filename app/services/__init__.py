"""Services package — all business logic lives here, never in routers.

Files:
  voice_payload.py      — pure normalization helpers for voice-platform payloads
  voice_webhook.py      — call-event handling (upsert by call_id, emergency flagging)
  voice_tools.py        — tool calls the phone agent makes mid-call
  notifications.py      — supervisor email via the Resend API (httpx)
  transcript_issues.py  — OpenAI issue extraction from call transcripts
  maintenance.py        — maintenance request workflow (assign / resolve / stats)
  voice_agent.py        — voice-agent configuration
  property.py           — properties and units

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
