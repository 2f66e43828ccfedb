# wasfa/notifications/email/base.py
import logging
from typing import Optional

from wasfa.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def send_email(
    to_email: str,
    subject: str,
    body: str,
    *,
    reason: Optional[str] = None,
    html: bool = False,
    attachments: list[dict] | None = None,
) -> None:
    """
    Unified email sending abstraction supporting SMTP and Resend.

    - If email_sandbox_mode is True:
        all emails are sent to EMAIL_TEST_RECIPIENT (if set).
    - Otherwise:
        uses EMAIL_BACKEND to choose between SMTP and Resend.
    """
    debug_reason = f" [{reason}]" if reason else ""

    actual_recipient = to_email
    if settings.email_sandbox_mode:
        actual_recipient = str(settings.email_test_recipient or settings.email_from)
        logger.info(
            "[EMAIL SANDBOX%s] Original: %s, Redirected to: %s, Subject: %r",
            debug_reason,
            to_email,
            actual_recipient,
            subject,
        )

    if settings.email_backend.lower() == "resend":
        from wasfa.notifications.email.resend_client import send_via_resend

        send_via_resend(
            from_email=str(settings.email_from),
            to_email=actual_recipient,
            subject=subject,
            html_body=body if html else f"<pre>{body}</pre>",
            attachments=attachments,
        )
    else:
        from wasfa.notifications.email.smtp_client import send_via_smtp

        send_via_smtp(
            from_email=str(settings.email_from),
            to_email=actual_recipient,
            subject=subject,
            body=body,
            attachments=attachments,
        )

    logger.info("[EMAIL SENT%s] To: %s (original: %s), Subject: %r", debug_reason, actual_recipient, to_email, subject)


def send_email_safely(to_email: str, subject: str, body: str, **kwargs) -> bool:
    """
    send_email() that never raises. Returns False when delivery failed.
    """
    try:
        send_email(to_email, subject, body, **kwargs)
        return True
    except Exception as exc:
        logger.warning("[EMAIL ERROR] Failed to send %r to %s: %s", subject, to_email, exc, exc_info=True)
        return False
