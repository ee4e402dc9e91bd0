"""Pipeline configuration: provider enums and the RetryPolicy dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class LLMProvider(str, Enum):
    """Language-model backends able to produce a structured task document."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"


class SpeechProvider(str, Enum):
    """Speech-to-text backends used by the transcription pipeline."""

    OPENAI = "openai"
    ASSEMBLYAI = "assemblyai"


@dataclass(frozen=True)
class RetryPolicy:
    """Immutable retry settings for one retried call.

    The delay before retry ``n`` (1-based attempt that just failed) is
    ``base_delay * n`` seconds, so the backoff grows linearly.
    """

    max_attempts: int = 3
    base_delay: float = 1.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must not be negative")

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after ``attempt`` failed."""
        return self.base_delay * attempt
