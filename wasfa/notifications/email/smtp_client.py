# wasfa/notifications/email/smtp_client.py
import logging
import smtplib
from email.message import EmailMessage

from wasfa.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def send_via_smtp(
    from_email: str,
    to_email: str,
    subject: str,
    body: str,
    attachments: list[dict] | None = None,
) -> None:
    """
    Minimal SMTP client using Python's standard library.

    It respects:
        - settings.email_smtp_host
        - settings.email_smtp_port
        - settings.email_smtp_username
        - settings.email_smtp_password

    attachments: List of dicts with 'filename', 'content' (bytes) and
    optionally 'mime_type' (defaults to application/pdf)
    """
    msg = EmailMessage()
    msg["From"] = from_email
    msg["To"] = to_email
    msg["Subject"] = subject

    if body.strip().lower().startswith(("<!doctype html", "<html")):
        msg.set_content(body, subtype="html")
    else:
        msg.set_content(body)

    for att in attachments or []:
        maintype, _, subtype = att.get("mime_type", "application/pdf").partition("/")
        msg.add_attachment(
            att["content"],
            maintype=maintype,
            subtype=subtype,
            filename=att["filename"],
        )

    host = settings.email_smtp_host
    port = settings.email_smtp_port
    username = settings.email_smtp_username
    password = settings.email_smtp_password

    with smtplib.SMTP(host, port, timeout=10) as server:
        server.ehlo()
        try:
            server.starttls()
            server.ehlo()
        except smtplib.SMTPException:
            logger.debug("STARTTLS not offered by %s:%s, continuing without TLS", host, port)

        if username and password:
            server.login(username, password)

        server.send_message(msg)
