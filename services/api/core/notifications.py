# services/api/core/notifications.py
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from core.email_sender import EmailResult, send_email
from core.identifiers import utc_iso
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

EmailSender = Callable[[str, str, str], Awaitable[EmailResult]]

MISSING_CONFIG_REASON = "Missing RESEND_API_KEY, RESIDENTIAL_EMAIL_FROM, or tech email"
SMTP_MISSING_CONFIG_REASON = "Missing SMTP_HOST, SMTP_USER, SMTP_PASSWORD, RESIDENTIAL_EMAIL_FROM, or tech email"


def missing_config_reason(settings: Settings) -> str:
    if settings.email_backend.lower() == "smtp":
        return SMTP_MISSING_CONFIG_REASON
    return MISSING_CONFIG_REASON


def residential_request_message(record: Dict[str, Any]) -> tuple[str, str]:
    """(subject, body) for the technician assignment email."""
    customer = record.get("customer") or {}
    number = record.get("requestNumber") or ""
    subject = f"New Residential Request {number}".strip()
    lines = [
        "You have been assigned a new residential request.",
        f"Request #: {number or 'N/A'}",
        f"Customer: {customer.get('name') or 'N/A'}",
        f"Phone: {customer.get('phone') or 'N/A'}",
        f"Address: {customer.get('address') or 'N/A'}",
        f"Description: {record.get('description') or 'N/A'}",
        f"Status: {record.get('status') or 'open'}",
    ]
    return subject, "\n".join(lines)


class RequestNotifier:
    """
    Emails the technician assigned to a request.

    The outcome is returned as data (`{sent, reason?, notifiedAt}`) and
    stored on the request; nothing here raises into the caller.
    """

    def __init__(
        self,
        sender: Optional[EmailSender] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], str] = utc_iso,
    ):
        self.settings = settings or get_settings()
        self.sender = sender or self._default_sender
        self.clock = clock

    async def _default_sender(self, to: str, subject: str, body: str) -> EmailResult:
        return await send_email(to, subject, body, settings=self.settings)

    async def notify(self, record: Dict[str, Any]) -> Dict[str, Any]:
        result = await self._send(record)
        result["notifiedAt"] = self.clock()
        return result

    async def _send(self, record: Dict[str, Any]) -> Dict[str, Any]:
        to = record.get("assignedTechEmail")
        if not self.settings.email_configured() or not to:
            logger.warning(
                f"Skipping tech notification for {record.get('requestNumber') or '-'}: email not configured"
            )
            return {"sent": False, "reason": missing_config_reason(self.settings)}

        subject, body = residential_request_message(record)
        try:
            outcome = await self.sender(to, subject, body)
        except Exception as e:
            logger.warning(f"Tech notification to {to} failed: {e}")
            return {"sent": False, "reason": str(e)}

        if outcome.ok:
            return {"sent": True}
        if outcome.status is not None:
            reason = f"Resend error: {outcome.status} {outcome.text}"
        else:
            reason = outcome.text or "send failed"
        logger.warning(f"Tech notification to {to} not sent: {reason}")
        return {"sent": False, "reason": reason}
