"""Shared fixtures.

Provides:
- Fake Gemini model and fake Gmail sender (no network, no credentials)
- FastAPI app built with in-memory storage and the fakes
- Async HTTP client for API testing
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from email.message import EmailMessage
from types import SimpleNamespace
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("STORAGE_BACKEND", "memory")

from main import create_app  # noqa: E402
from services.email_dispatch import EmailDispatcher
from services.storage import InMemoryStorage
from services.summarizer import Summarizer

TRANSCRIPT = (
    "John: Good morning everyone. Our quarterly results show 15% growth.\n"
    "Sarah: Great. The new marketing campaign launches next month with a budget of $50,000.\n"
    "John: I will prepare the detailed financial report by Friday.\n"
    "Sarah: I will finalize the campaign budget by Wednesday. Meeting ends at 10:00 AM.\n"
)


def gemini_response(text: str) -> SimpleNamespace:
    part = SimpleNamespace(text=text)
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


class FakeModel:
    """Stands in for google.generativeai.GenerativeModel."""

    def __init__(self, text: str = "  Generated summary.  ", exc: Exception | None = None) -> None:
        self.text = text
        self.exc = exc
        self.calls: list[dict[str, Any]] = []

    async def generate_content_async(self, contents: Any, generation_config: Any = None) -> SimpleNamespace:
        self.calls.append({"contents": contents, "generation_config": generation_config})
        if self.exc is not None:
            raise self.exc
        return gemini_response(self.text)


class FakeSender:
    """Records messages instead of calling Gmail."""

    def __init__(self, exc: Exception | None = None) -> None:
        self.exc = exc
        self.sent: list[EmailMessage] = []

    async def send(self, message: EmailMessage) -> dict[str, Any]:
        if self.exc is not None:
            raise self.exc
        self.sent.append(message)
        return {"id": f"msg-{len(self.sent)}"}


@pytest.fixture
def fake_model() -> FakeModel:
    return FakeModel()


@pytest.fixture
def fake_sender() -> FakeSender:
    return FakeSender()


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def app(storage, fake_model, fake_sender):
    return create_app(
        storage=storage,
        summarizer=Summarizer(fake_model),
        email_dispatcher=EmailDispatcher(fake_sender, "notes@example.com"),
    )


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def transcript(client) -> dict:
    response = await client.post("/api/v1/transcripts", json={"content": TRANSCRIPT})
    assert response.status_code == 200, response.text
    return response.json()


@pytest_asyncio.fixture
async def summary(client, transcript) -> dict:
    response = await client.post(
        "/api/v1/summaries",
        json={"transcriptId": transcript["id"], "customPrompt": "Summarize in bullet points"},
    )
    assert response.status_code == 200, response.text
    return response.json()
