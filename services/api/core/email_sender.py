# services/api/core/email_sender.py
from __future__ import annotations
import aiosmtplib
import asyncio
import httpx
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import List, Optional
import logging

from settings import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailResult:
    """Outcome of one send attempt. `status` is the HTTP/SMTP code when known."""
    ok: bool
    status: Optional[int] = None
    text: str = ""


def _clean_cc(to_email: str, cc_emails: Optional[List[str]]) -> List[str]:
    if not cc_emails:
        return []
    return sorted(
        {
            addr.strip()
            for addr in cc_emails
            if addr and addr.strip() and addr.strip().lower() != to_email.lower()
        }
    )


async def send_via_resend(
    *,
    to_email: str,
    subject: str,
    body_text: str,
    api_key: str,
    api_url: str,
    from_email: str,
    timeout: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> EmailResult:
    """
    POST a plain-text email to the Resend API.
    Non-2xx answers come back as ok=False with the response body in `text`.
    """
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        resp = await client.post(
            api_url,
            headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
            json={"from": from_email, "to": [to_email], "subject": subject, "text": body_text},
        )
    if resp.is_success:
        logger.info(f"✓ Email sent to {to_email} via Resend")
        return EmailResult(ok=True, status=resp.status_code, text=resp.text)
    logger.warning(f"✗ Resend rejected email to {to_email}: {resp.status_code}")
    return EmailResult(ok=False, status=resp.status_code, text=resp.text)


async def send_via_smtp(
    *,
    to_email: str,
    subject: str,
    body_text: str,
    smtp_host: str,
    smtp_port: int,
    smtp_user: str,
    smtp_password: str,
    from_email: str,
    from_name: str,
    timeout: float,
    cc_emails: Optional[List[str]] = None,
) -> EmailResult:
    """Plain-text email over SMTP with STARTTLS (Gmail-style relay)."""
    msg = MIMEMultipart()
    msg['From'] = f"{from_name} <{from_email}>"
    msg['To'] = to_email
    msg['Subject'] = subject

    clean_cc = _clean_cc(to_email, cc_emails)
    if clean_cc:
        msg["Cc"] = ", ".join(clean_cc)

    msg.attach(MIMEText(body_text, 'plain'))

    await asyncio.wait_for(
        aiosmtplib.send(
            msg,
            hostname=smtp_host,
            port=smtp_port,
            username=smtp_user,
            password=smtp_password,
            start_tls=True,
            recipients=[to_email] + clean_cc,
        ),
        timeout=timeout,
    )
    logger.info(f"✓ Email sent to {to_email} via SMTP")
    return EmailResult(ok=True, status=250)


async def send_email(
    to: str,
    subject: str,
    body: str,
    *,
    settings: Optional[Settings] = None,
) -> EmailResult:
    """
    Send a plain-text email with whichever backend EMAIL_BACKEND selects.

    Never raises: transport errors and timeouts come back as ok=False with
    the error text.
    """
    settings = settings or get_settings()
    backend = settings.email_backend.lower()
    try:
        if backend == "smtp":
            return await send_via_smtp(
                to_email=to,
                subject=subject,
                body_text=body,
                smtp_host=settings.smtp_host,
                smtp_port=settings.smtp_port,
                smtp_user=settings.smtp_user,
                smtp_password=settings.smtp_password,
                from_email=settings.residential_email_from or settings.smtp_user,
                from_name=settings.smtp_from_name,
                timeout=settings.email_timeout_seconds,
                cc_emails=settings.get_cc_list(),
            )
        return await send_via_resend(
            to_email=to,
            subject=subject,
            body_text=body,
            api_key=settings.resend_api_key,
            api_url=settings.resend_api_url,
            from_email=settings.residential_email_from,
            timeout=settings.email_timeout_seconds,
        )
    except asyncio.TimeoutError:
        logger.error(f"✗ Email send to {to} timed out after {settings.email_timeout_seconds}s")
        return EmailResult(ok=False, text="timed out")
    except Exception as e:
        logger.error(f"✗ Email send failed to {to}: {e}")
        return EmailResult(ok=False, text=str(e))
