from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings

from src.pipeline_config import LLMProvider, RetryPolicy, SpeechProvider


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file.
    """

    # API Keys
    anthropic_api_key: str = ""
    openai_api_key: str = ""
    assemblyai_api_key: str = ""

    # Collaborators
    llm_provider: LLMProvider = LLMProvider.ANTHROPIC
    llm_model: str = "claude-sonnet-4-20250514"
    openai_chat_model: str = "gpt-3.5-turbo-1106"
    speech_provider: SpeechProvider = SpeechProvider.OPENAI
    whisper_model: str = "whisper-1"
    transcription_language: str = "en"
    request_timeout_seconds: float = 30.0

    # Retry
    retry_max_attempts: int = 3
    retry_base_delay_seconds: float = 1.0

    # Input limits
    max_input_chars: int = 2000
    max_audio_bytes: int = 25 * 1024 * 1024
    upload_dir: str = ""  # empty -> system temp dir

    # App config
    usage_reset_check_seconds: float = 3600.0
    log_level: str = "INFO"
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.retry_max_attempts,
            base_delay=self.retry_base_delay_seconds,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Gracefully handles missing .env files (e.g. in CI/testing) by falling
    back to environment variables and defaults.
    """
    try:
        return Settings()
    except Exception:
        # If .env is missing or unreadable, build settings from env vars only.
        return Settings(_env_file=None)  # type: ignore[call-arg]


settings = get_settings()
