"""
Gmail transport: hands a composed MIME message to the Gmail API.
"""

from __future__ import annotations

import asyncio
import base64
from email.message import EmailMessage
from typing import Any, Callable, Dict

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from loguru import logger


class GmailSender:
    """Sends messages as the account the credentials belong to."""

    def __init__(self, credentials_factory: Callable[[], Credentials]) -> None:
        self._credentials_factory = credentials_factory

    def _send_sync(self, message: EmailMessage) -> Dict[str, Any]:
        creds = self._credentials_factory()
        service = build("gmail", "v1", credentials=creds, cache_discovery=False)
        raw = base64.urlsafe_b64encode(message.as_bytes()).decode()
        return service.users().messages().send(userId="me", body={"raw": raw}).execute()

    async def send(self, message: EmailMessage) -> Dict[str, Any]:
        # googleapiclient is blocking
        result = await asyncio.to_thread(self._send_sync, message)
        logger.info("Gmail accepted message id={} to={}", result.get("id"), message["To"])
        return result
