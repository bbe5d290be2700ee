"""
Persistence for transcripts, summaries and email logs.

Two interchangeable backends share the `Storage` protocol:

* `InMemoryStorage` – plain dicts, lives as long as the process.
* `SqlStorage`      – SQLModel tables on an async SQLAlchemy engine.

`build_storage()` picks one from settings at startup.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol, Tuple

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlmodel import select

from core.config import settings
from core.database import build_engine, build_session_factory, init_db
from models import EmailLog, Summary, Transcript

SummaryWithTranscript = Tuple[Summary, Transcript]


class Storage(Protocol):
    async def init(self) -> None: ...

    async def create_transcript(self, content: str, file_name: str | None = None) -> Transcript: ...

    async def get_transcript(self, transcript_id: str) -> Optional[Transcript]: ...

    async def create_summary(
        self, transcript_id: str, custom_prompt: str, generated_summary: str
    ) -> Summary: ...

    async def get_summary(self, summary_id: str) -> Optional[Summary]: ...

    async def get_summary_with_transcript(self, summary_id: str) -> Optional[SummaryWithTranscript]: ...

    async def update_summary(self, summary_id: str, edited_summary: str) -> Optional[Summary]: ...

    async def create_email_log(
        self,
        summary_id: str,
        recipients: List[str],
        subject: str,
        message: str | None = None,
        include_original: bool = False,
    ) -> EmailLog: ...

    async def get_email_logs_by_summary(self, summary_id: str) -> List[EmailLog]: ...


def _bump(previous: datetime) -> datetime:
    now = datetime.now(timezone.utc)
    if previous.tzinfo is None:
        previous = previous.replace(tzinfo=timezone.utc)
    # never move updated_at backwards
    return max(now, previous)


# ──────────────────────────────────────────────────────────────────────────────
# in-memory


class InMemoryStorage:
    """Dict-backed storage, used for demos and tests."""

    def __init__(self) -> None:
        self._transcripts: Dict[str, Transcript] = {}
        self._summaries: Dict[str, Summary] = {}
        self._email_logs: Dict[str, List[EmailLog]] = {}

    async def init(self) -> None:
        logger.info("Using in-memory storage; data is lost on restart")

    async def create_transcript(self, content: str, file_name: str | None = None) -> Transcript:
        transcript = Transcript(content=content, file_name=file_name)
        self._transcripts[transcript.id] = transcript
        return transcript

    async def get_transcript(self, transcript_id: str) -> Optional[Transcript]:
        return self._transcripts.get(transcript_id)

    async def create_summary(
        self, transcript_id: str, custom_prompt: str, generated_summary: str
    ) -> Summary:
        summary = Summary(
            transcript_id=transcript_id,
            custom_prompt=custom_prompt,
            generated_summary=generated_summary,
        )
        summary.updated_at = summary.created_at
        self._summaries[summary.id] = summary
        return summary

    async def get_summary(self, summary_id: str) -> Optional[Summary]:
        return self._summaries.get(summary_id)

    async def get_summary_with_transcript(self, summary_id: str) -> Optional[SummaryWithTranscript]:
        summary = self._summaries.get(summary_id)
        if not summary:
            return None
        transcript = self._transcripts.get(summary.transcript_id)
        if not transcript:
            return None
        return summary, transcript

    async def update_summary(self, summary_id: str, edited_summary: str) -> Optional[Summary]:
        summary = self._summaries.get(summary_id)
        if not summary:
            return None
        summary.edited_summary = edited_summary
        summary.updated_at = _bump(summary.updated_at)
        return summary

    async def create_email_log(
        self,
        summary_id: str,
        recipients: List[str],
        subject: str,
        message: str | None = None,
        include_original: bool = False,
    ) -> EmailLog:
        email_log = EmailLog(
            summary_id=summary_id,
            recipients=list(recipients),
            subject=subject,
            message=message,
            include_original=include_original,
        )
        self._email_logs.setdefault(summary_id, []).append(email_log)
        return email_log

    async def get_email_logs_by_summary(self, summary_id: str) -> List[EmailLog]:
        return list(self._email_logs.get(summary_id, []))


# ──────────────────────────────────────────────────────────────────────────────
# SQL


class SqlStorage:
    """SQLModel-backed storage. Each call runs in its own session."""

    def __init__(
        self,
        engine: AsyncEngine,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> None:
        self._engine = engine
        self._session_factory = session_factory or build_session_factory(engine)

    async def init(self) -> None:
        await init_db(self._engine)
        logger.info("Database tables ready ({})", self._engine.url.render_as_string(hide_password=True))

    async def dispose(self) -> None:
        await self._engine.dispose()

    async def create_transcript(self, content: str, file_name: str | None = None) -> Transcript:
        transcript = Transcript(content=content, file_name=file_name)
        async with self._session_factory() as session:
            session.add(transcript)
            await session.commit()
            await session.refresh(transcript)
        return transcript

    async def get_transcript(self, transcript_id: str) -> Optional[Transcript]:
        async with self._session_factory() as session:
            return await session.get(Transcript, transcript_id)

    async def create_summary(
        self, transcript_id: str, custom_prompt: str, generated_summary: str
    ) -> Summary:
        summary = Summary(
            transcript_id=transcript_id,
            custom_prompt=custom_prompt,
            generated_summary=generated_summary,
        )
        summary.updated_at = summary.created_at
        async with self._session_factory() as session:
            session.add(summary)
            await session.commit()
            await session.refresh(summary)
        return summary

    async def get_summary(self, summary_id: str) -> Optional[Summary]:
        async with self._session_factory() as session:
            return await session.get(Summary, summary_id)

    async def get_summary_with_transcript(self, summary_id: str) -> Optional[SummaryWithTranscript]:
        async with self._session_factory() as session:
            summary = await session.get(Summary, summary_id)
            if not summary:
                return None
            transcript = await session.get(Transcript, summary.transcript_id)
            if not transcript:
                return None
            return summary, transcript

    async def update_summary(self, summary_id: str, edited_summary: str) -> Optional[Summary]:
        async with self._session_factory() as session:
            summary = await session.get(Summary, summary_id)
            if not summary:
                return None
            summary.edited_summary = edited_summary
            summary.updated_at = _bump(summary.updated_at)
            await session.commit()
            await session.refresh(summary)
            return summary

    async def create_email_log(
        self,
        summary_id: str,
        recipients: List[str],
        subject: str,
        message: str | None = None,
        include_original: bool = False,
    ) -> EmailLog:
        email_log = EmailLog(
            summary_id=summary_id,
            recipients=list(recipients),
            subject=subject,
            message=message,
            include_original=include_original,
        )
        async with self._session_factory() as session:
            session.add(email_log)
            await session.commit()
            await session.refresh(email_log)
        return email_log

    async def get_email_logs_by_summary(self, summary_id: str) -> List[EmailLog]:
        stmt = select(EmailLog).where(EmailLog.summary_id == summary_id).order_by(EmailLog.sent_at)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())


def build_storage(backend: str | None = None, database_url: str | None = None) -> Storage:
    backend = backend or settings.STORAGE_BACKEND
    if backend == "memory":
        return InMemoryStorage()
    if backend == "database":
        return SqlStorage(build_engine(database_url))
    raise ValueError(f"Unknown storage backend: {backend!r}")
