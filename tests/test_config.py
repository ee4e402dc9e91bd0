"""Tests for Settings, provider enums and RetryPolicy."""

from __future__ import annotations

import pytest

from src.config import Settings
from src.pipeline_config import LLMProvider, RetryPolicy, SpeechProvider

# ---------------------------------------------------------------------------
# Enum tests
# ---------------------------------------------------------------------------


class TestLLMProvider:
    def test_from_string(self) -> None:
        assert LLMProvider("anthropic") is LLMProvider.ANTHROPIC
        assert LLMProvider("openai") is LLMProvider.OPENAI

    def test_invalid_raises(self) -> None:
        with pytest.raises(ValueError):
            LLMProvider("gemini")

    def test_is_str_subclass(self) -> None:
        """Enum values behave as plain strings for JSON serialization."""
        assert isinstance(LLMProvider.OPENAI, str)


class TestSpeechProvider:
    def test_from_string(self) -> None:
        assert SpeechProvider("openai") is SpeechProvider.OPENAI
        assert SpeechProvider("assemblyai") is SpeechProvider.ASSEMBLYAI

    def test_invalid_raises(self) -> None:
        with pytest.raises(ValueError):
            SpeechProvider("invalid")

    def test_value_compares_as_plain_string(self) -> None:
        assert isinstance(SpeechProvider.ASSEMBLYAI, str)
        assert SpeechProvider.ASSEMBLYAI == "assemblyai"
        assert SpeechProvider.ASSEMBLYAI.value == "assemblyai"


# ---------------------------------------------------------------------------
# RetryPolicy tests
# ---------------------------------------------------------------------------


class TestRetryPolicy:
    def test_defaults(self) -> None:
        policy = RetryPolicy()
        assert policy.max_attempts == 3
        assert policy.base_delay == 1.0

    def test_linear_delays(self) -> None:
        policy = RetryPolicy(base_delay=1.5)
        assert [policy.delay_for(n) for n in (1, 2, 3)] == [1.5, 3.0, 4.5]

    def test_immutable(self) -> None:
        policy = RetryPolicy()
        with pytest.raises(AttributeError):
            policy.max_attempts = 5  # type: ignore[misc]

    @pytest.mark.parametrize("kwargs", [{"max_attempts": 0}, {"base_delay": -1.0}])
    def test_invalid_values_raise(self, kwargs) -> None:
        with pytest.raises(ValueError):
            RetryPolicy(**kwargs)


# ---------------------------------------------------------------------------
# Settings tests
# ---------------------------------------------------------------------------


class TestSettings:
    def test_defaults(self, monkeypatch) -> None:
        monkeypatch.delenv("LLM_PROVIDER", raising=False)
        monkeypatch.delenv("RETRY_MAX_ATTEMPTS", raising=False)
        cfg = Settings(_env_file=None)

        assert cfg.llm_provider is LLMProvider.ANTHROPIC
        assert cfg.speech_provider is SpeechProvider.OPENAI
        assert cfg.max_input_chars == 2000
        assert cfg.max_audio_bytes == 25 * 1024 * 1024
        assert cfg.retry_policy == RetryPolicy(max_attempts=3, base_delay=1.0)

    def test_env_override(self, monkeypatch) -> None:
        monkeypatch.setenv("LLM_PROVIDER", "openai")
        monkeypatch.setenv("RETRY_MAX_ATTEMPTS", "5")
        monkeypatch.setenv("RETRY_BASE_DELAY_SECONDS", "0.25")

        cfg = Settings(_env_file=None)

        assert cfg.llm_provider is LLMProvider.OPENAI
        assert cfg.retry_policy == RetryPolicy(max_attempts=5, base_delay=0.25)

    def test_invalid_provider_rejected(self, monkeypatch) -> None:
        monkeypatch.setenv("SPEECH_PROVIDER", "carrier-pigeon")
        with pytest.raises(ValueError):
            Settings(_env_file=None)
