"""Data models and format allow-lists for audio transcription."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePath

from src.errors import EmptyInputError, UnsupportedAudioFormatError

# Container formats accepted by the speech-to-text collaborators
AUDIO_EXTENSIONS = (".mp3", ".mp4", ".mpeg", ".mpga", ".m4a", ".wav", ".webm")

AUDIO_MIME_TYPES = frozenset(
    {
        "audio/mpeg",
        "audio/mp3",
        "audio/wav",
        "audio/wave",
        "audio/x-wav",
        "audio/mp4",
        "audio/m4a",
        "audio/webm",
        "video/mp4",  # some mp4 files are audio-only
        "video/webm",  # some webm files are audio-only
    }
)


@dataclass(frozen=True)
class TranscriptionRequest:
    """An uploaded audio buffer and the filename it arrived with.

    The filename is only used to derive the extension; it never becomes
    part of the temp file path.
    """

    audio: bytes
    filename: str

    @property
    def extension(self) -> str:
        return PurePath(self.filename).suffix.lower()

    def validate(self) -> None:
        """Reject empty buffers and unsupported extensions.

        Raises:
            EmptyInputError: ``audio`` is empty.
            UnsupportedAudioFormatError: extension not in ``AUDIO_EXTENSIONS``.
        """
        if not self.audio:
            raise EmptyInputError("Invalid or empty audio buffer")
        if self.extension not in AUDIO_EXTENSIONS:
            raise UnsupportedAudioFormatError(
                f"Unsupported audio format: {self.extension or '(none)'}. "
                f"Supported formats: {', '.join(AUDIO_EXTENSIONS)}"
            )


def validate_content_type(content_type: str | None) -> None:
    """Reject upload MIME types outside ``AUDIO_MIME_TYPES``.

    A missing content type is accepted; the extension check still applies.
    """
    if not content_type:
        return
    mime = content_type.split(";", 1)[0].strip().lower()
    if mime not in AUDIO_MIME_TYPES:
        raise UnsupportedAudioFormatError(
            f"Invalid mime type: {mime}. Allowed types: {', '.join(sorted(AUDIO_MIME_TYPES))}"
        )
