"""Resend transactional email wrapper."""

import logging

import httpx

from ..config import EMAIL_FROM, RESEND_API_KEY

logger = logging.getLogger(__name__)

_RESEND_URL = "https://api.resend.com/emails"


async def send_email(to: list[str], subject: str, html: str, *, sender: str = EMAIL_FROM) -> str:
    """Send one HTML email. Returns the Resend message id."""
    if not RESEND_API_KEY:
        raise RuntimeError("RESEND_API_KEY is not configured")

    async with httpx.AsyncClient(timeout=httpx.Timeout(15.0)) as client:
        resp = await client.post(
            _RESEND_URL,
            headers={"Authorization": f"Bearer {RESEND_API_KEY}"},
            json={"from": sender, "to": to, "subject": subject, "html": html},
        )
        resp.raise_for_status()

    message_id = resp.json().get("id", "")
    logger.info("Email sent to %s: %s", ", ".join(to), message_id)
    return message_id
