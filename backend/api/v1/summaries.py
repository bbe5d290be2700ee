from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from api.deps import get_email_dispatcher, get_storage, get_summarizer
from api.v1.transcripts import isoformat_utc, transcript_dict
from models import EmailLog, Summary
from services.email_dispatch import (
    EmailDispatchError,
    EmailDispatcher,
    InvalidRecipientError,
    validate_recipients,
)
from services.storage import Storage
from services.summarizer import GenerationError, Summarizer

router = APIRouter(prefix="/summaries", tags=["Summaries"])


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SummaryRequest(_CamelModel):
    transcript_id: str = Field(min_length=1)
    custom_prompt: str = Field(min_length=1)

    @field_validator("custom_prompt")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Instructions cannot be empty")
        return value


class SummaryUpdateRequest(_CamelModel):
    edited_summary: str = Field(min_length=1)

    @field_validator("edited_summary")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Edited summary cannot be empty")
        return value


class EmailRequest(_CamelModel):
    recipients: List[str] = Field(min_length=1)
    subject: str = Field(min_length=1)
    message: Optional[str] = None
    include_original: bool = False

    @field_validator("recipients")
    @classmethod
    def _valid_addresses(cls, value: List[str]) -> List[str]:
        return validate_recipients(value)

    @field_validator("subject")
    @classmethod
    def _strip_subject(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Subject cannot be empty")
        return value

    @field_validator("message")
    @classmethod
    def _blank_message_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()


def summary_dict(summary: Summary) -> dict:
    return {
        "id": summary.id,
        "transcriptId": summary.transcript_id,
        "customPrompt": summary.custom_prompt,
        "generatedSummary": summary.generated_summary,
        "editedSummary": summary.edited_summary,
        "summary": summary.display_text,
        "createdAt": isoformat_utc(summary.created_at),
        "updatedAt": isoformat_utc(summary.updated_at),
    }


def email_log_dict(email_log: EmailLog) -> dict:
    return {
        "id": email_log.id,
        "summaryId": email_log.summary_id,
        "recipients": email_log.recipients,
        "subject": email_log.subject,
        "message": email_log.message,
        "includeOriginal": email_log.include_original,
        "sentAt": isoformat_utc(email_log.sent_at),
        "status": email_log.status,
    }


@router.post("")
async def create_summary(
    payload: SummaryRequest,
    storage: Storage = Depends(get_storage),
    summarizer: Summarizer = Depends(get_summarizer),
) -> dict:
    """Generate a summary of a stored transcript following the user's instructions"""
    try:
        transcript = await storage.get_transcript(payload.transcript_id)
    except Exception as e:
        logger.exception("Error fetching transcript {}: {}", payload.transcript_id, e)
        raise HTTPException(status_code=500, detail="Failed to generate summary")
    if not transcript:
        raise HTTPException(status_code=404, detail="Transcript not found")

    try:
        generated = await summarizer.summarise(transcript.content, payload.custom_prompt)
    except GenerationError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.exception("Error generating summary for transcript {}: {}", transcript.id, e)
        raise HTTPException(status_code=500, detail="Failed to generate summary")

    try:
        summary = await storage.create_summary(
            transcript_id=transcript.id,
            custom_prompt=payload.custom_prompt,
            generated_summary=generated,
        )
    except Exception as e:
        logger.exception("Error storing summary for transcript {}: {}", transcript.id, e)
        raise HTTPException(status_code=500, detail="Failed to generate summary")

    logger.info("Created summary {} for transcript {}", summary.id, transcript.id)
    return summary_dict(summary)


@router.get("/{summary_id}")
async def get_summary(
    summary_id: str,
    storage: Storage = Depends(get_storage),
) -> dict:
    """Get a summary together with its transcript"""
    try:
        found = await storage.get_summary_with_transcript(summary_id)
    except Exception as e:
        logger.exception("Error fetching summary {}: {}", summary_id, e)
        raise HTTPException(status_code=500, detail="Failed to fetch summary")
    if not found:
        raise HTTPException(status_code=404, detail="Summary not found")

    summary, transcript = found
    return {**summary_dict(summary), "transcript": transcript_dict(transcript)}


@router.patch("/{summary_id}")
async def update_summary(
    summary_id: str,
    payload: SummaryUpdateRequest,
    storage: Storage = Depends(get_storage),
) -> dict:
    """Save the user's edit; the generated text is kept as is"""
    try:
        summary = await storage.update_summary(summary_id, payload.edited_summary)
    except Exception as e:
        logger.exception("Error updating summary {}: {}", summary_id, e)
        raise HTTPException(status_code=500, detail="Failed to update summary")
    if not summary:
        raise HTTPException(status_code=404, detail="Summary not found")
    return summary_dict(summary)


@router.post("/{summary_id}/email")
async def email_summary(
    summary_id: str,
    payload: EmailRequest,
    storage: Storage = Depends(get_storage),
    dispatcher: EmailDispatcher = Depends(get_email_dispatcher),
) -> dict:
    """Email the summary to the recipients and record the send"""
    try:
        found = await storage.get_summary_with_transcript(summary_id)
    except Exception as e:
        logger.exception("Error fetching summary {}: {}", summary_id, e)
        raise HTTPException(status_code=500, detail="Failed to send email")
    if not found:
        raise HTTPException(status_code=404, detail="Summary not found")

    summary, transcript = found
    try:
        recipient_count = await dispatcher.send_summary(
            summary=summary,
            transcript=transcript,
            recipients=payload.recipients,
            subject=payload.subject,
            message=payload.message,
            include_original=payload.include_original,
        )
    except InvalidRecipientError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except EmailDispatchError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.exception("Error emailing summary {}: {}", summary_id, e)
        raise HTTPException(status_code=500, detail="Failed to send email")

    try:
        await storage.create_email_log(
            summary_id=summary.id,
            recipients=payload.recipients,
            subject=payload.subject,
            message=payload.message,
            include_original=payload.include_original,
        )
    except Exception as e:
        # the message already went out; only the record is missing
        logger.exception("Error recording email for summary {}: {}", summary_id, e)
        raise HTTPException(status_code=500, detail="Email sent but could not be recorded")
    return {"message": "Email sent successfully", "recipientCount": recipient_count}


@router.get("/{summary_id}/emails")
async def list_summary_emails(
    summary_id: str,
    storage: Storage = Depends(get_storage),
) -> List[dict]:
    """Emails already sent for this summary, oldest first"""
    try:
        summary = await storage.get_summary(summary_id)
        if not summary:
            raise HTTPException(status_code=404, detail="Summary not found")
        email_logs = await storage.get_email_logs_by_summary(summary_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error fetching email logs for summary {}: {}", summary_id, e)
        raise HTTPException(status_code=500, detail="Failed to fetch email logs")

    return [email_log_dict(log) for log in email_logs]
