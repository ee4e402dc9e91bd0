"""Error taxonomy for text and audio task extraction.

Every failure the core raises on purpose derives from ``TaskParserError`` so the
HTTP layer (or any other caller) can map kinds to responses in one place.
Collaborator exceptions that the core does not classify propagate unchanged.
"""

from __future__ import annotations

from enum import StrEnum


class TaskParserError(Exception):
    """Base class for task extraction failures."""


class EmptyInputError(TaskParserError):
    """Text or audio input was empty."""


class InputTooLongError(TaskParserError):
    """Text input exceeded the configured character limit."""


class UnsupportedAudioFormatError(TaskParserError):
    """Audio filename extension or MIME type is not in the allow-list."""


class TaskParseError(TaskParserError):
    """The language model returned a document that is not a valid task."""


class MaxRetriesExceededError(TaskParserError):
    """Retry loop finished without a result or an error to re-raise."""


class TranscriptionFailureReason(StrEnum):
    """Why a transcription failed."""

    INVALID_FORMAT = "invalid-format"
    TOO_LARGE = "too-large"
    NO_SPEECH = "no-speech"
    NETWORK = "network"
    UNKNOWN = "unknown"


class TranscriptionError(TaskParserError):
    """Speech-to-text failed; ``reason`` carries the classification."""

    def __init__(
        self,
        message: str,
        reason: TranscriptionFailureReason = TranscriptionFailureReason.UNKNOWN,
    ) -> None:
        super().__init__(message)
        self.reason = reason


class EmptyTranscriptError(TranscriptionError):
    """The transcript was empty or whitespace-only."""

    def __init__(
        self,
        message: str = (
            "Audio transcription produced empty result. "
            "Please ensure the audio contains clear speech."
        ),
    ) -> None:
        super().__init__(message, TranscriptionFailureReason.NO_SPEECH)
