"""
Contact form relay.

Validates the submission and forwards it to the configured mail transport:
- `web3forms` (default): one notification to the site owner via the
  Web3Forms API
- `smtp`: a notification to the owner plus a confirmation to the sender
"""

from __future__ import annotations

import html
import logging
import os
import re

from core import mailer, settings
from core.errors import MailRelayError, ValidationError

from . import schemas

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Values that end up in mail headers.
_HEADER_BREAK_RE = re.compile(r"[\r\n]")

TRANSPORTS = ("web3forms", "smtp")


def contact_transport() -> str:
    value = os.environ.get("CONTACT_TRANSPORT", "web3forms").strip().lower() or "web3forms"
    return value if value in TRANSPORTS else "web3forms"


def web3forms_access_key() -> str:
    return os.environ.get("WEB3FORMS_ACCESS_KEY", "").strip()


def web3forms_url() -> str:
    return os.environ.get("WEB3FORMS_URL", mailer.DEFAULT_WEB3FORMS_URL).strip() or mailer.DEFAULT_WEB3FORMS_URL


def sender_display_name() -> str:
    return os.environ.get("CONTACT_SENDER_NAME", "Portfolio Contact").strip() or "Portfolio Contact"


def smtp_config() -> mailer.SmtpConfig:
    return mailer.SmtpConfig(
        host=os.environ.get("SMTP_HOST", "").strip(),
        port=settings.env_int("SMTP_PORT", 587),
        username=os.environ.get("EMAIL_USER", "").strip(),
        password=os.environ.get("EMAIL_PASS", ""),
    )


def owner_address() -> str:
    return os.environ.get("EMAIL_RECEIVER", "").strip() or os.environ.get("EMAIL_USER", "").strip()


def validate(payload: schemas.ContactRequest) -> schemas.ContactRequest:
    """
    Return a stripped copy, or raise ValidationError.
    """
    cleaned = schemas.ContactRequest(
        name=(payload.name or "").strip(),
        email=(payload.email or "").strip(),
        subject=(payload.subject or "").strip(),
        message=(payload.message or "").strip(),
    )
    if not (cleaned.name and cleaned.email and cleaned.subject and cleaned.message):
        raise ValidationError("All fields are required")
    if any(_HEADER_BREAK_RE.search(value) for value in (cleaned.name, cleaned.email, cleaned.subject)):
        raise ValidationError("Name, email and subject must be a single line")
    if not EMAIL_RE.match(cleaned.email):
        raise ValidationError("Please provide a valid email address")
    return cleaned


def _paragraphs_html(title: str, rows: list[tuple[str, str]]) -> str:
    body = "".join(
        f"<p><strong>{html.escape(label)}</strong><br>"
        f"<span style=\"white-space: pre-wrap;\">{html.escape(value)}</span></p>"
        for label, value in rows
    )
    return f"<div style=\"font-family: Arial, sans-serif;\"><h2>{html.escape(title)}</h2>{body}</div>"


def owner_notification(submission: schemas.ContactRequest, *, to: str) -> mailer.OutboundMail:
    rows = [
        ("From", submission.name),
        ("Email", submission.email),
        ("Subject", submission.subject),
        ("Message", submission.message),
    ]
    return mailer.OutboundMail(
        to=to,
        subject=f"Portfolio Contact: {submission.subject}",
        text="\n".join(f"{label}: {value}" for label, value in rows),
        html=_paragraphs_html("New Contact Form Submission", rows),
        reply_to=submission.email,
        from_name=sender_display_name(),
    )


def sender_confirmation(submission: schemas.ContactRequest) -> mailer.OutboundMail:
    text = (
        f"Hi {submission.name},\n\n"
        "Thank you for getting in touch! I've received your message and will get back "
        "to you as soon as possible.\n\n"
        f"Your message:\n{submission.message}\n"
    )
    return mailer.OutboundMail(
        to=submission.email,
        subject=f"Thanks for reaching out, {submission.name}!",
        text=text,
        html=_paragraphs_html(
            "Message Received!",
            [("Hi", submission.name), ("Your message", submission.message)],
        ),
        from_name=sender_display_name(),
    )


async def send_contact_message(payload: schemas.ContactRequest) -> schemas.ContactResponse:
    submission = validate(payload)
    transport = contact_transport()

    try:
        if transport == "smtp":
            config = smtp_config()
            await mailer.send_smtp(config, owner_notification(submission, to=owner_address()))
            await mailer.send_smtp(config, sender_confirmation(submission))
        else:
            await mailer.send_web3forms(
                access_key=web3forms_access_key(),
                sender_name=submission.name,
                sender_email=submission.email,
                subject=f"Portfolio Contact: {submission.subject}",
                message=submission.message,
                url=web3forms_url(),
                from_name=sender_display_name(),
            )
    except MailRelayError:
        logger.exception("contact_relay_failed transport=%s", transport)
        # Keep relay internals out of the response body.
        raise MailRelayError() from None

    logger.info("contact_relayed transport=%s", transport)
    return schemas.ContactResponse()
