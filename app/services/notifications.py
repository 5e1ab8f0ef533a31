"""Supervisor email notifications for new maintenance requests (Resend API).

Sending is best-effort: every failure is logged and reported as ``False`` so
that a broken email provider never fails the caller's webhook.
"""

from __future__ import annotations

import html
import logging

import httpx

from app.core.config import settings
from app.domain.maintenance import MaintenanceRequest
from app.services.voice_payload import format_ticket_number

logger = logging.getLogger(__name__)


def build_maintenance_email(
    request: MaintenanceRequest, dashboard_url: str | None = None,
) -> tuple[str, str]:
    """Return ``(subject, html_body)`` for a maintenance-request notification."""
    ticket = format_ticket_number(request.ticket_number)
    category = request.issue_category or "general"
    if request.is_emergency:
        subject = f"🚨 EMERGENCY: {ticket} - {category}"
    else:
        subject = f"New Maintenance Request: {ticket}"

    link = f"{(dashboard_url or settings.dashboard_url).rstrip('/')}/voice-agent"
    prefix = "🚨 EMERGENCY " if request.is_emergency else ""
    body = (
        f"<h2>{prefix}Maintenance Request {ticket}</h2>"
        f"<p><strong>Caller:</strong> {html.escape(request.caller_name or '')}</p>"
        f"<p><strong>Category:</strong> {html.escape(category)}</p>"
        f"<p><strong>Description:</strong> {html.escape(request.issue_description or '')}</p>"
        f"<p><strong>Urgency:</strong> {'EMERGENCY' if request.is_emergency else 'Normal'}</p>"
        f'<p><a href="{html.escape(link)}">View in Dashboard</a></p>'
    )
    return subject, body


class EmailNotifier:
    """Thin async wrapper around the Resend ``/emails`` endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        api_url: str | None = None,
        sender: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.resend_api_key
        self.api_url = api_url or settings.resend_api_url
        self.sender = sender or settings.email_from
        self.timeout = timeout if timeout is not None else settings.email_timeout
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def send(self, to: list[str], subject: str, html_body: str) -> bool:
        if not self.enabled:
            logger.info("Email delivery not configured; skipping '%s'", subject)
            return False
        if not to:
            return False

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self.api_url,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json={
                        "from": self.sender,
                        "to": to,
                        "subject": subject,
                        "html": html_body,
                    },
                )
        except httpx.HTTPError as exc:
            logger.error("Error sending email '%s': %s", subject, exc)
            return False

        if response.is_success:
            logger.info("Notification email sent to %d recipient(s)", len(to))
            return True
        logger.error(
            "Failed to send email (status=%s): %s", response.status_code, response.text
        )
        return False


def get_email_notifier() -> EmailNotifier:
    """Factory for the configured notifier (replaced in tests)."""
    return EmailNotifier()
