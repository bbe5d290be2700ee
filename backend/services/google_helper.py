"""
Centralized helper for creating Google API credentials.
"""

from __future__ import annotations

from google.oauth2.credentials import Credentials
from google.auth.transport.requests import Request

from core.config import settings

# Sending is the only thing the backend does with Google APIs.
GMAIL_SEND_SCOPES = [
    "https://www.googleapis.com/auth/gmail.send",
]


def sender_credentials() -> Credentials:
    """
    Builds a Credentials object for the configured sending account from its
    stored refresh token.
    """
    creds = Credentials(
        token=None, refresh_token=settings.GMAIL_REFRESH_TOKEN, token_uri="https://oauth2.googleapis.com/token",
        client_id=settings.GMAIL_CLIENT_ID, client_secret=settings.GMAIL_CLIENT_SECRET,
        scopes=GMAIL_SEND_SCOPES,
    )
    # Force refresh to ensure we have a valid access token.
    creds.refresh(Request())
    return creds
