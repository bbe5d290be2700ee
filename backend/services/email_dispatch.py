"""
Emailing a summary to a list of recipients.

Recipients are checked up front: one bad address rejects the whole send, and
nothing reaches the mail service. A successful hand-off to Gmail counts as
delivered; there is no retry or bounce handling.
"""

from __future__ import annotations

import html
import re
from email.message import EmailMessage
from typing import Any, Dict, List, Optional, Protocol

from loguru import logger

from core.config import settings
from models import Summary, Transcript
from services.gmail_client import GmailSender
from services.google_helper import sender_credentials

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class EmailDispatchError(Exception):
    """The mail service could not take the message."""


class InvalidRecipientError(ValueError):
    def __init__(self, invalid: List[str]) -> None:
        self.invalid = invalid
        if invalid:
            super().__init__(f"Invalid email addresses: {', '.join(invalid)}")
        else:
            super().__init__("At least one email address is required")


class MailSender(Protocol):
    async def send(self, message: EmailMessage) -> Dict[str, Any]: ...


def validate_recipients(recipients: List[str]) -> List[str]:
    """Return the recipients stripped, or raise if any is unusable."""
    cleaned = [r.strip() for r in recipients]
    if not cleaned:
        raise InvalidRecipientError([])
    invalid = [r for r in cleaned if not EMAIL_RE.match(r)]
    if invalid:
        raise InvalidRecipientError(invalid)
    return cleaned


def _text_body(summary: Summary, message: Optional[str]) -> str:
    parts = []
    if message:
        parts += [message, ""]
    parts += [
        "Meeting Summary",
        "===============",
        "",
        summary.display_text,
        "",
        f'Instructions used: "{summary.custom_prompt}"',
    ]
    return "\n".join(parts)


def _html_body(summary: Summary, message: Optional[str]) -> str:
    intro = f"<p>{html.escape(message)}</p>" if message else ""
    return (
        "<html><body>"
        f"{intro}"
        "<h2>Meeting Summary</h2>"
        f'<div style="white-space: pre-wrap; font-family: sans-serif;">{html.escape(summary.display_text)}</div>'
        f'<p style="color: #666; font-size: 12px;">Instructions used: "{html.escape(summary.custom_prompt)}"</p>'
        "</body></html>"
    )


def build_message(
    *,
    sender: Optional[str],
    recipients: List[str],
    subject: str,
    summary: Summary,
    message: Optional[str] = None,
    transcript: Optional[Transcript] = None,
) -> EmailMessage:
    msg = EmailMessage()
    if sender:
        msg["From"] = sender
    msg["To"] = ", ".join(recipients)
    msg["Subject"] = subject

    msg.set_content(_text_body(summary, message))
    msg.add_alternative(_html_body(summary, message), subtype="html")

    if transcript is not None:
        msg.add_attachment(
            transcript.content.encode("utf-8"),
            maintype="text",
            subtype="plain",
            filename=transcript.file_name or "transcript.txt",
        )
    return msg


class EmailDispatcher:
    def __init__(self, sender: Optional[MailSender], from_address: Optional[str] = None) -> None:
        self._sender = sender
        self._from_address = from_address

    async def send_summary(
        self,
        *,
        summary: Summary,
        transcript: Transcript,
        recipients: List[str],
        subject: str,
        message: Optional[str] = None,
        include_original: bool = False,
    ) -> int:
        """
        Email the summary (edited text when present) to every recipient.

        Returns the number of recipients. Raises `InvalidRecipientError`
        before any network call, or `EmailDispatchError` when sending fails.
        """
        recipients = validate_recipients(recipients)

        if self._sender is None:
            raise EmailDispatchError("Email service is not configured")

        email = build_message(
            sender=self._from_address,
            recipients=recipients,
            subject=subject,
            summary=summary,
            message=message,
            transcript=transcript if include_original else None,
        )
        try:
            await self._sender.send(email)
        except Exception as exc:
            logger.exception("Sending summary {} failed: {}", summary.id, exc)
            raise EmailDispatchError("Failed to send email") from exc

        logger.info("Summary {} emailed to {} recipient(s)", summary.id, len(recipients))
        return len(recipients)


def build_email_dispatcher() -> EmailDispatcher:
    if not settings.email_configured:
        logger.warning("Gmail sending is not configured; email endpoint will fail")
        return EmailDispatcher(None, settings.EMAIL_SENDER)

    return EmailDispatcher(GmailSender(sender_credentials), settings.EMAIL_SENDER)
