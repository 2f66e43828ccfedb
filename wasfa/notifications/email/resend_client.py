# wasfa/notifications/email/resend_client.py
import base64
import logging

import httpx

from wasfa.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

RESEND_URL = "https://api.resend.com/emails"


def send_via_resend(
    from_email: str,
    to_email: str,
    subject: str,
    html_body: str,
    attachments: list[dict] | None = None,
) -> None:
    """
    Send email via Resend API.
    attachments: List of dicts with 'filename' and 'content' (raw bytes, base64 encoded here)
    """
    if not settings.resend_api_key:
        raise ValueError("RESEND_API_KEY is not configured")

    headers = {
        "Authorization": f"Bearer {settings.resend_api_key}",
        "Content-Type": "application/json",
    }
    payload = {
        "from": from_email,
        "to": to_email,
        "subject": subject,
        "html": html_body,
    }

    if attachments:
        payload["attachments"] = [
            {
                "filename": att["filename"],
                "content": base64.b64encode(att["content"]).decode("utf-8"),
            }
            for att in attachments
        ]

    try:
        response = httpx.post(RESEND_URL, json=payload, headers=headers, timeout=10.0)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning("[RESEND ERROR] Failed to send email to %s: %s", to_email, exc)
        raise
