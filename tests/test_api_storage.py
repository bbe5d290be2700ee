"""API behaviour that depends on the storage backend: SQLite timestamps and storage failures."""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from loguru import logger

from conftest import TRANSCRIPT
from core.database import build_engine
from main import create_app
from services.email_dispatch import EmailDispatcher
from services.storage import SqlStorage
from services.summarizer import Summarizer

pytestmark = pytest.mark.asyncio


@pytest.fixture
def error_logs():
    messages: list[str] = []
    sink_id = logger.add(lambda message: messages.append(str(message)), level="ERROR")
    yield messages
    logger.remove(sink_id)


async def _boom(*args, **kwargs):
    raise RuntimeError("database is locked")


# ── SQLite-backed app ────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def sql_client(tmp_path, fake_model, fake_sender) -> AsyncGenerator[AsyncClient, None]:
    storage = SqlStorage(build_engine(f"sqlite+aiosqlite:///{tmp_path / 'api.db'}"))
    # ASGITransport does not run startup hooks
    await storage.init()
    app = create_app(
        storage=storage,
        summarizer=Summarizer(fake_model),
        email_dispatcher=EmailDispatcher(fake_sender, "notes@example.com"),
    )
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    await storage.dispose()


async def test_sql_backend_timestamps_are_utc(sql_client):
    transcript = (await sql_client.post("/api/v1/transcripts", json={"content": TRANSCRIPT})).json()
    assert transcript["uploadedAt"].endswith("+00:00")

    fetched = (await sql_client.get(f"/api/v1/transcripts/{transcript['id']}")).json()
    assert fetched["uploadedAt"].endswith("+00:00")

    summary = (
        await sql_client.post(
            "/api/v1/summaries",
            json={"transcriptId": transcript["id"], "customPrompt": "Summarize in bullet points"},
        )
    ).json()
    edited = (
        await sql_client.patch(f"/api/v1/summaries/{summary['id']}", json={"editedSummary": "Edited"})
    ).json()
    assert edited["createdAt"].endswith("+00:00")
    assert edited["updatedAt"].endswith("+00:00")
    assert edited["updatedAt"] >= edited["createdAt"]

    full = (await sql_client.get(f"/api/v1/summaries/{summary['id']}")).json()
    assert full["transcript"]["uploadedAt"].endswith("+00:00")
    assert full["summary"] == "Edited"

    sent = await sql_client.post(
        f"/api/v1/summaries/{summary['id']}/email",
        json={"recipients": ["alice@example.com"], "subject": "Sync"},
    )
    assert sent.status_code == 200
    logs = (await sql_client.get(f"/api/v1/summaries/{summary['id']}/emails")).json()
    assert len(logs) == 1
    assert logs[0]["sentAt"].endswith("+00:00")


async def test_memory_backend_timestamps_are_utc(client, summary):
    assert summary["createdAt"].endswith("+00:00")
    assert summary["updatedAt"].endswith("+00:00")


# ── storage failures ─────────────────────────────────────────────────────────


async def test_transcript_upload_failure(client, storage, monkeypatch, error_logs):
    monkeypatch.setattr(storage, "create_transcript", _boom)
    response = await client.post("/api/v1/transcripts", json={"content": TRANSCRIPT})
    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to upload transcript"}
    assert any("database is locked" in m for m in error_logs)


async def test_transcript_fetch_failure(client, transcript, storage, monkeypatch, error_logs):
    monkeypatch.setattr(storage, "get_transcript", _boom)
    response = await client.get(f"/api/v1/transcripts/{transcript['id']}")
    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to fetch transcript"}
    assert any("Error fetching transcript" in m for m in error_logs)


async def test_summary_generation_storage_failure(client, transcript, storage, monkeypatch, error_logs):
    monkeypatch.setattr(storage, "create_summary", _boom)
    response = await client.post(
        "/api/v1/summaries",
        json={"transcriptId": transcript["id"], "customPrompt": "Summarize"},
    )
    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to generate summary"}
    assert error_logs


async def test_summary_fetch_failure(client, summary, storage, monkeypatch, error_logs):
    monkeypatch.setattr(storage, "get_summary_with_transcript", _boom)
    response = await client.get(f"/api/v1/summaries/{summary['id']}")
    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to fetch summary"}
    assert any("Error fetching summary" in m for m in error_logs)


async def test_summary_update_failure(client, summary, storage, monkeypatch, error_logs):
    monkeypatch.setattr(storage, "update_summary", _boom)
    response = await client.patch(f"/api/v1/summaries/{summary['id']}", json={"editedSummary": "New"})
    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/json")
    assert response.json() == {"detail": "Failed to update summary"}
    assert any("Error updating summary" in m for m in error_logs)


async def test_email_log_failure_after_send(client, summary, storage, fake_sender, monkeypatch, error_logs):
    monkeypatch.setattr(storage, "create_email_log", _boom)
    response = await client.post(
        f"/api/v1/summaries/{summary['id']}/email",
        json={"recipients": ["alice@example.com"], "subject": "Sync"},
    )
    assert response.status_code == 500
    assert response.json() == {"detail": "Email sent but could not be recorded"}
    assert len(fake_sender.sent) == 1
    assert any("Error recording email" in m for m in error_logs)


async def test_email_lookup_failure_sends_nothing(client, summary, storage, fake_sender, monkeypatch):
    monkeypatch.setattr(storage, "get_summary_with_transcript", _boom)
    response = await client.post(
        f"/api/v1/summaries/{summary['id']}/email",
        json={"recipients": ["alice@example.com"], "subject": "Sync"},
    )
    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to send email"}
    assert fake_sender.sent == []


async def test_email_log_list_failure(client, summary, storage, monkeypatch, error_logs):
    monkeypatch.setattr(storage, "get_email_logs_by_summary", _boom)
    response = await client.get(f"/api/v1/summaries/{summary['id']}/emails")
    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to fetch email logs"}
    assert any("Error fetching email logs" in m for m in error_logs)

    # the 404 path is unaffected by the error handling
    missing = await client.get("/api/v1/summaries/nope/emails")
    assert missing.status_code == 404
