"""Speech-to-text clients (OpenAI Whisper, AssemblyAI).

Each client raises ``TranscriptionError`` with a typed reason when it can tell
what went wrong. ``classify_transcription_error`` is the message-based
fallback used for anything the clients let through unclassified.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Protocol

import openai
from openai import AsyncOpenAI

from src.errors import TranscriptionError, TranscriptionFailureReason

_TRANSCRIPTION_PROMPT = "This is a task description. The speaker is describing a task to be done."

# Lower-cased message fragments -> reason, checked in order
_REASON_MARKERS: list[tuple[tuple[str, ...], TranscriptionFailureReason]] = [
    (
        ("invalid file format", "unsupported format", "could not decode"),
        TranscriptionFailureReason.INVALID_FORMAT,
    ),
    (("file is too large", "too large", "exceeds"), TranscriptionFailureReason.TOO_LARGE),
    (("no speech", "no spoken audio"), TranscriptionFailureReason.NO_SPEECH),
    (("timed out", "timeout", "connection"), TranscriptionFailureReason.NETWORK),
]

_REASON_MESSAGES: dict[TranscriptionFailureReason, str] = {
    TranscriptionFailureReason.INVALID_FORMAT: (
        "Invalid audio format. Please ensure the file is a valid audio file."
    ),
    TranscriptionFailureReason.TOO_LARGE: (
        "File size exceeds the transcription limit. Please use a smaller file."
    ),
    TranscriptionFailureReason.NO_SPEECH: (
        "No speech detected in the audio file. Please ensure the audio contains clear speech."
    ),
    TranscriptionFailureReason.NETWORK: "Transcription service unavailable",
}


def classify_transcription_error(exc: BaseException) -> TranscriptionError:
    """Build a ``TranscriptionError`` for an unclassified collaborator failure."""
    if isinstance(exc, TranscriptionError):
        return exc
    if isinstance(exc, (TimeoutError, ConnectionError)):
        reason = TranscriptionFailureReason.NETWORK
    else:
        reason = reason_from_message(str(exc))

    detail = _REASON_MESSAGES.get(reason, "Audio transcription failed")
    return TranscriptionError(f"{detail}: {exc}", reason)


def reason_from_message(message: str) -> TranscriptionFailureReason:
    lowered = message.lower()
    for markers, reason in _REASON_MARKERS:
        if any(marker in lowered for marker in markers):
            return reason
    return TranscriptionFailureReason.UNKNOWN


class SpeechToTextClient(Protocol):
    async def transcribe(self, path: Path, *, language: str) -> str: ...


class WhisperTranscriber:
    """OpenAI Whisper via the async OpenAI SDK."""

    def __init__(
        self,
        api_key: str,
        model: str = "whisper-1",
        timeout: float = 30.0,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._client = client or AsyncOpenAI(api_key=api_key, timeout=timeout)
        self._model = model

    async def transcribe(self, path: Path, *, language: str) -> str:
        try:
            with path.open("rb") as audio_file:
                transcription = await self._client.audio.transcriptions.create(
                    file=audio_file,
                    model=self._model,
                    response_format="text",
                    language=language,
                    temperature=0.2,
                    prompt=_TRANSCRIPTION_PROMPT,
                )
        except openai.APIConnectionError as exc:
            # APITimeoutError is a subclass
            raise TranscriptionError(
                f"Transcription service unavailable: {exc}",
                TranscriptionFailureReason.NETWORK,
            ) from exc
        except openai.APIStatusError as exc:
            if exc.status_code == 413:
                raise TranscriptionError(
                    _REASON_MESSAGES[TranscriptionFailureReason.TOO_LARGE],
                    TranscriptionFailureReason.TOO_LARGE,
                ) from exc
            raise classify_transcription_error(exc) from exc

        # response_format="text" yields a plain string
        return transcription if isinstance(transcription, str) else str(transcription.text)


class AssemblyAITranscriber:
    """AssemblyAI via its synchronous SDK, run in a worker thread."""

    def __init__(self, api_key: str) -> None:
        self._api_key = api_key

    async def transcribe(self, path: Path, *, language: str) -> str:
        # Synchronous SDK; keep it off the event loop.
        return await asyncio.to_thread(self._transcribe_sync, path, language)

    def _transcribe_sync(self, path: Path, language: str) -> str:
        import assemblyai as aai  # type: ignore[import-untyped]  # no stubs; import inside function

        aai.settings.api_key = self._api_key
        config = aai.TranscriptionConfig(language_code=language)
        transcript = aai.Transcriber().transcribe(str(path), config=config)

        if transcript.status == aai.TranscriptStatus.error:
            message = str(transcript.error or "unknown error")
            reason = reason_from_message(message)
            raise TranscriptionError(f"Transcription failed: {message}", reason)

        return transcript.text or ""
