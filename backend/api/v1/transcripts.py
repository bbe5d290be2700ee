"""
Transcript upload and lookup.

Uploads arrive either as a multipart `file` part or as `{content}` in a JSON
or form body. Only plain-text files are accepted.
"""

from datetime import datetime, timezone
from json import JSONDecodeError
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Request
from loguru import logger
from starlette.datastructures import UploadFile

from api.deps import get_storage
from core.config import settings
from models import Transcript
from services.storage import Storage

router = APIRouter(prefix="/transcripts", tags=["Transcripts"])

MIME_TEXT = "text/plain"
FORM_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


def isoformat_utc(value: datetime) -> str:
    # SQLite hands DateTime(timezone=True) back naive; everything is stored as UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def transcript_dict(transcript: Transcript) -> dict:
    return {
        "id": transcript.id,
        "content": transcript.content,
        "fileName": transcript.file_name,
        "uploadedAt": isoformat_utc(transcript.uploaded_at),
    }


async def _read_text_file(upload: UploadFile) -> str:
    mime = (upload.content_type or "").split(";")[0].strip().lower()
    if mime != MIME_TEXT:
        raise HTTPException(
            status_code=400,
            detail="Invalid file type. Only plain text (.txt) files are supported.",
        )

    data = await upload.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {settings.MAX_UPLOAD_BYTES // (1024 * 1024)} MB.",
        )
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="File must be UTF-8 encoded text")


async def _extract_content(request: Request) -> Tuple[Optional[str], Optional[str]]:
    """Return (content, file_name) from whichever body shape was sent."""
    content_type = request.headers.get("content-type", "").lower()

    if content_type.startswith(FORM_TYPES):
        form = await request.form()
        upload = form.get("file")
        if isinstance(upload, UploadFile):
            try:
                return await _read_text_file(upload), upload.filename
            finally:
                await upload.close()
        content = form.get("content")
        return (content if isinstance(content, str) else None), None

    try:
        body = await request.json()
    except (JSONDecodeError, UnicodeDecodeError):
        raise HTTPException(status_code=400, detail="Request body must be JSON or a file upload")
    content = body.get("content") if isinstance(body, dict) else None
    return (content if isinstance(content, str) else None), None


@router.post("")
async def upload_transcript(
    request: Request,
    storage: Storage = Depends(get_storage),
) -> dict:
    """Store a transcript from an uploaded .txt file or pasted text."""
    content, file_name = await _extract_content(request)

    if content is None:
        raise HTTPException(status_code=400, detail="Either file or content is required")
    if len(content.encode("utf-8")) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="Transcript too large")
    if not content.strip():
        raise HTTPException(status_code=400, detail="Transcript content cannot be empty")

    try:
        transcript = await storage.create_transcript(content, file_name)
    except Exception as e:
        logger.exception("Error storing transcript: {}", e)
        raise HTTPException(status_code=500, detail="Failed to upload transcript")

    logger.info("Stored transcript {} ({} chars, file={})", transcript.id, len(content), file_name)
    return transcript_dict(transcript)


@router.get("/{transcript_id}")
async def get_transcript(
    transcript_id: str,
    storage: Storage = Depends(get_storage),
) -> dict:
    try:
        transcript = await storage.get_transcript(transcript_id)
    except Exception as e:
        logger.exception("Error fetching transcript {}: {}", transcript_id, e)
        raise HTTPException(status_code=500, detail="Failed to fetch transcript")

    if not transcript:
        raise HTTPException(status_code=404, detail="Transcript not found")
    return transcript_dict(transcript)
