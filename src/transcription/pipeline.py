"""Audio -> transcript pipeline with a scoped temporary file."""

from __future__ import annotations

import asyncio
import logging
import secrets
import tempfile
import time
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

from src.errors import (
    EmptyTranscriptError,
    TranscriptionError,
    TranscriptionFailureReason,
)
from src.pipeline_config import RetryPolicy
from src.retry import retry_async
from src.transcription.clients import SpeechToTextClient, classify_transcription_error
from src.transcription.models import TranscriptionRequest

logger = logging.getLogger(__name__)

# 25 MB, the Whisper upload limit
DEFAULT_MAX_AUDIO_BYTES = 25 * 1024 * 1024


def temp_audio_name(extension: str) -> str:
    """Collision-resistant file name: epoch milliseconds plus a random suffix."""
    return f"audio_{int(time.time() * 1000)}_{secrets.token_hex(6)}{extension}"


class TranscriptionPipeline:
    """Turns an uploaded audio buffer into trimmed transcript text.

    Validation happens before anything touches the disk or the network. The
    buffer is then written to a uniquely named temp file that is removed on
    every exit path, and the speech-to-text call runs under the retry policy.
    """

    def __init__(
        self,
        client: SpeechToTextClient,
        retry_policy: RetryPolicy | None = None,
        *,
        language: str = "en",
        upload_dir: str | Path | None = None,
        max_audio_bytes: int = DEFAULT_MAX_AUDIO_BYTES,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._retry_policy = retry_policy or RetryPolicy()
        self._language = language
        self._upload_dir = Path(upload_dir) if upload_dir else Path(tempfile.gettempdir())
        self._max_audio_bytes = max_audio_bytes
        self._sleep = sleep

    async def transcribe(self, audio: bytes, filename: str) -> str:
        """Transcribe ``audio`` and return the trimmed transcript.

        Raises:
            EmptyInputError: ``audio`` is empty.
            UnsupportedAudioFormatError: ``filename`` has an unsupported extension.
            EmptyTranscriptError: the collaborator returned only whitespace.
            TranscriptionError: the collaborator failed on every attempt.
        """
        request = TranscriptionRequest(audio=audio, filename=filename)
        request.validate()
        if len(audio) > self._max_audio_bytes:
            raise TranscriptionError(
                f"Audio file is too large ({len(audio)} bytes, "
                f"max {self._max_audio_bytes} bytes)",
                TranscriptionFailureReason.TOO_LARGE,
            )

        logger.info("Processing audio file %s (%d bytes)", filename, len(audio))

        with self._temporary_file(request) as path:
            try:
                transcript = await retry_async(
                    lambda: self._client.transcribe(path, language=self._language),
                    self._retry_policy,
                    sleep=self._sleep,
                )
            except TranscriptionError:
                raise
            except Exception as exc:
                logger.error("Transcription error for %s: %s", filename, exc)
                raise classify_transcription_error(exc) from exc

            text = (transcript or "").strip()
            if not text:
                raise EmptyTranscriptError()

        logger.info("Received transcription (%d chars)", len(text))
        return text

    @contextmanager
    def _temporary_file(self, request: TranscriptionRequest) -> Iterator[Path]:
        self._upload_dir.mkdir(parents=True, exist_ok=True)
        path = self._upload_dir / temp_audio_name(request.extension)
        # "xb" fails instead of clobbering if the name is somehow taken.
        fh = path.open("xb")
        try:
            with fh:
                fh.write(request.audio)
            logger.debug("Temporary file created: %s", path)
            yield path
        finally:
            try:
                path.unlink(missing_ok=True)
                logger.debug("Temporary file cleaned up: %s", path)
            except OSError:
                logger.warning("Failed to remove temporary file %s", path, exc_info=True)
