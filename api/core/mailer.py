"""
Outbound mail relays used by the contact form.

- Web3Forms: POST {WEB3FORMS_URL} -> {"success": true, "message": "..."}
- SMTP: STARTTLS + login, one message per call
"""

from __future__ import annotations

import asyncio
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Any

import httpx

from .errors import MailRelayError

DEFAULT_WEB3FORMS_URL = "https://api.web3forms.com/submit"


@dataclass(frozen=True)
class OutboundMail:
    to: str
    subject: str
    text: str
    html: str | None = None
    reply_to: str | None = None
    from_name: str | None = None


@dataclass(frozen=True)
class SmtpConfig:
    host: str
    port: int
    username: str
    password: str
    timeout_s: float = 30.0


async def send_web3forms(
    *,
    access_key: str,
    sender_name: str,
    sender_email: str,
    subject: str,
    message: str,
    url: str = DEFAULT_WEB3FORMS_URL,
    from_name: str | None = None,
    timeout_s: float = 30.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> None:
    access_key = (access_key or "").strip()
    if not access_key:
        raise MailRelayError("WEB3FORMS_ACCESS_KEY is not set.")

    payload: dict[str, Any] = {
        "access_key": access_key,
        "name": sender_name,
        "email": sender_email,
        "replyto": sender_email,
        "subject": subject,
        "message": message,
    }
    if from_name:
        payload["from_name"] = from_name

    try:
        async with httpx.AsyncClient(timeout=timeout_s, transport=transport) as client:
            resp = await client.post(url, json=payload, headers={"Accept": "application/json"})
    except httpx.HTTPError as exc:
        raise MailRelayError(f"Web3Forms request failed: {exc.__class__.__name__}") from exc

    if resp.status_code != 200:
        # Avoid dumping huge bodies; include a small snippet.
        raise MailRelayError(f"Web3Forms request failed: {resp.status_code} {resp.text[:300]}")

    try:
        data = resp.json()
    except ValueError as exc:
        raise MailRelayError("Web3Forms returned a non-JSON response.") from exc
    if not isinstance(data, dict) or not data.get("success"):
        detail = data.get("message") if isinstance(data, dict) else None
        raise MailRelayError(f"Web3Forms rejected the submission: {detail or 'unknown error'}")


def _build_message(mail: OutboundMail, *, sender: str) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = mail.subject
    msg["From"] = f'"{mail.from_name}" <{sender}>' if mail.from_name else sender
    msg["To"] = mail.to
    if mail.reply_to:
        msg["Reply-To"] = mail.reply_to
    msg.set_content(mail.text)
    if mail.html:
        msg.add_alternative(mail.html, subtype="html")
    return msg


def _send_smtp_blocking(config: SmtpConfig, mail: OutboundMail) -> None:
    msg = _build_message(mail, sender=config.username)
    with smtplib.SMTP(config.host, config.port, timeout=config.timeout_s) as server:
        server.starttls()
        server.login(config.username, config.password)
        server.send_message(msg)


async def send_smtp(config: SmtpConfig, mail: OutboundMail) -> None:
    if not config.host or not config.username:
        raise MailRelayError("SMTP_HOST and EMAIL_USER must be set.")
    try:
        await asyncio.to_thread(_send_smtp_blocking, config, mail)
    except (smtplib.SMTPException, OSError, ValueError) as exc:
        raise MailRelayError(f"SMTP send failed: {exc.__class__.__name__}") from exc
