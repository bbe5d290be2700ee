"""
Meeting summariser backed by Gemini.

`Summarizer` takes an already-built `GenerativeModel` so tests can hand it a
fake; `build_summarizer()` wires the real one from settings.
"""

from __future__ import annotations

from typing import Any, Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from loguru import logger

from core.config import settings
from services.fallback_summary import generate_fallback_summary

SYSTEM_PROMPT = (
    "You are an AI assistant specialized in summarizing meeting transcripts. "
    "You will receive a meeting transcript and custom instructions for how to "
    "format the summary. Follow the custom instructions precisely while "
    "maintaining accuracy and clarity."
)

USER_PROMPT_TEMPLATE = (
    'Please summarize the following meeting transcript according to these instructions: "{instructions}"\n'
    "\n"
    "Meeting Transcript:\n"
    "{transcript}\n"
    "\n"
    "Please provide a well-structured summary following the given instructions."
)

# Substrings Google uses when the key itself is rejected
_INVALID_KEY_MARKERS = ("api key not valid", "api_key_invalid", "invalid api key")


class GenerationError(Exception):
    """The model could not produce a summary for this request."""


def build_user_prompt(transcript: str, instructions: str) -> str:
    return USER_PROMPT_TEMPLATE.format(instructions=instructions, transcript=transcript)


def is_invalid_credentials(exc: BaseException) -> bool:
    if isinstance(exc, google_exceptions.Unauthenticated):
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _INVALID_KEY_MARKERS)


def _first_candidate_text(result: Any) -> str:
    candidates = getattr(result, "candidates", None) or []
    if not candidates:
        return ""
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    return "".join(getattr(part, "text", "") or "" for part in parts).strip()


class Summarizer:
    def __init__(
        self,
        model: Optional[Any],
        *,
        max_output_tokens: int = 2000,
        temperature: float = 0.3,
    ) -> None:
        self._model = model
        self._generation_config = {
            "temperature": temperature,
            "max_output_tokens": max_output_tokens,
        }

    async def summarise(self, transcript: str, instructions: str) -> str:
        """
        Summarise a transcript following the user's formatting instructions.

        Falls back to the rule-based summary when Gemini rejects the API key;
        every other failure surfaces as `GenerationError`.
        """
        if self._model is None:
            raise GenerationError("Summarization API key is not configured")

        try:
            result = await self._model.generate_content_async(
                build_user_prompt(transcript, instructions),
                generation_config=self._generation_config,
            )
        except Exception as exc:
            if is_invalid_credentials(exc):
                logger.warning("Gemini rejected the API key, using fallback summary: {}", exc)
                return generate_fallback_summary(transcript, instructions)
            logger.exception("Gemini summarisation failed: {}", exc)
            raise GenerationError("Failed to generate summary. Please try again.") from exc

        try:
            summary = _first_candidate_text(result)
        except Exception as exc:  # malformed response object
            logger.exception("Unexpected Gemini response shape: {}", exc)
            raise GenerationError("Failed to generate summary. Please try again.") from exc

        if not summary:
            raise GenerationError("No summary generated")
        logger.info("Generated summary ({} chars) for transcript of {} chars", len(summary), len(transcript))
        return summary


def build_summarizer() -> Summarizer:
    model = None
    if settings.GEMINI_API_KEY:
        genai.configure(api_key=settings.GEMINI_API_KEY)
        model = genai.GenerativeModel(settings.GEMINI_MODEL, system_instruction=SYSTEM_PROMPT)
    else:
        logger.warning("GEMINI_API_KEY is not set; summary generation will fail")
    return Summarizer(
        model,
        max_output_tokens=settings.SUMMARY_MAX_OUTPUT_TOKENS,
        temperature=settings.SUMMARY_TEMPERATURE,
    )
