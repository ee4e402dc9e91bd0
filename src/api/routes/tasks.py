"""Task endpoints: parse typed text, a transcript, or an audio upload into a task."""

from __future__ import annotations

import logging
from typing import Annotated

import anthropic
import openai
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from src.api.dependencies import get_orchestrator
from src.api.models import (
    AudioTaskResponse,
    ParseTaskResponse,
    TaskInputRequest,
    TranscriptRequest,
)
from src.config import settings
from src.errors import (
    EmptyInputError,
    InputTooLongError,
    TaskParseError,
    TranscriptionError,
    TranscriptionFailureReason,
    UnsupportedAudioFormatError,
)
from src.orchestrator import ExtractionOrchestrator
from src.transcription.models import validate_content_type

logger = logging.getLogger(__name__)

router = APIRouter()

_TRANSCRIPTION_STATUS: dict[TranscriptionFailureReason, int] = {
    TranscriptionFailureReason.INVALID_FORMAT: 400,
    TranscriptionFailureReason.NO_SPEECH: 400,
    TranscriptionFailureReason.TOO_LARGE: 413,
    TranscriptionFailureReason.NETWORK: 503,
    TranscriptionFailureReason.UNKNOWN: 502,
}


def to_http_exception(exc: Exception) -> HTTPException:
    """Map an extraction failure onto an HTTP status and detail."""
    if isinstance(exc, (EmptyInputError, InputTooLongError, UnsupportedAudioFormatError)):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, TranscriptionError):
        return HTTPException(status_code=_TRANSCRIPTION_STATUS[exc.reason], detail=str(exc))
    if isinstance(exc, TaskParseError):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, (anthropic.APIError, openai.APIError)):
        # Upstream LLM unavailable or rejecting requests; not the client's fault.
        return HTTPException(status_code=503, detail=f"LLM unavailable: {exc}")
    return HTTPException(status_code=500, detail="Failed to process task")


_HANDLED = (
    EmptyInputError,
    InputTooLongError,
    UnsupportedAudioFormatError,
    TranscriptionError,
    TaskParseError,
    anthropic.APIError,
    openai.APIError,
)


async def _read_capped(upload: UploadFile, max_bytes: int) -> bytes:
    """Read an upload, refusing anything over ``max_bytes`` without buffering it all."""
    if upload.size is not None and upload.size > max_bytes:
        raise _too_large(upload.size, max_bytes)
    raw = await upload.read(max_bytes + 1)
    if len(raw) > max_bytes:
        raise _too_large(None, max_bytes)
    return raw


def _too_large(size: int | None, max_bytes: int) -> TranscriptionError:
    received = f"{size} bytes" if size is not None else "over the limit"
    return TranscriptionError(
        f"Audio file is too large ({received}, max {max_bytes} bytes)",
        TranscriptionFailureReason.TOO_LARGE,
    )


@router.post("/api/tasks/parse", response_model=ParseTaskResponse)
async def parse_task(
    payload: TaskInputRequest,
    orchestrator: Annotated[ExtractionOrchestrator, Depends(get_orchestrator)],
) -> ParseTaskResponse:
    """Parse typed natural-language input into a structured task."""
    try:
        task = await orchestrator.extract_from_text(payload.input)
    except _HANDLED as exc:
        logger.warning("Text extraction failed: %s", exc)
        raise to_http_exception(exc) from exc
    return ParseTaskResponse(task=task)


@router.post("/api/tasks/transcript", response_model=ParseTaskResponse)
async def parse_transcript(
    payload: TranscriptRequest,
    orchestrator: Annotated[ExtractionOrchestrator, Depends(get_orchestrator)],
) -> ParseTaskResponse:
    """Parse an already transcribed utterance into a structured task."""
    try:
        task = await orchestrator.extract_from_text(payload.transcript)
    except _HANDLED as exc:
        logger.warning("Transcript extraction failed: %s", exc)
        raise to_http_exception(exc) from exc
    return ParseTaskResponse(task=task)


@router.post("/api/tasks/audio", response_model=AudioTaskResponse)
async def parse_audio(
    audio: Annotated[UploadFile, File(...)],
    orchestrator: Annotated[ExtractionOrchestrator, Depends(get_orchestrator)],
) -> AudioTaskResponse:
    """Transcribe an uploaded recording and parse the transcript into a task.

    Accepts .mp3, .mp4, .mpeg, .mpga, .m4a, .wav and .webm uploads. The
    transcript is returned alongside the task so the client can show what was
    heard.
    """
    try:
        validate_content_type(audio.content_type)
        raw = await _read_capped(audio, settings.max_audio_bytes)
        result = await orchestrator.extract_from_audio(raw, audio.filename or "")
    except _HANDLED as exc:
        logger.warning("Audio extraction failed for %s: %s", audio.filename, exc)
        raise to_http_exception(exc) from exc
    return AudioTaskResponse(task=result.parsed_task, transcript=result.transcript)
