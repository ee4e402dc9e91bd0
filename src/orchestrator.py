"""Entry points: text -> task and audio -> task."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from src.config import Settings
from src.extraction.extractor import StructuredExtractor
from src.extraction.llm import AnthropicTaskClient, LanguageModelClient, OpenAITaskClient
from src.extraction.models import ParsedTask
from src.monitoring.usage import UsageTracker
from src.pipeline_config import LLMProvider, SpeechProvider
from src.transcription.clients import (
    AssemblyAITranscriber,
    SpeechToTextClient,
    WhisperTranscriber,
)
from src.transcription.pipeline import TranscriptionPipeline

logger = logging.getLogger(__name__)


@dataclass
class AudioExtraction:
    """Result of the audio entry point; the transcript is kept for the caller."""

    parsed_task: ParsedTask
    transcript: str


class ExtractionOrchestrator:
    """Composes transcription and structured extraction.

    Holds no per-call state, so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        extractor: StructuredExtractor,
        transcription: TranscriptionPipeline,
    ) -> None:
        self._extractor = extractor
        self._transcription = transcription

    async def extract_from_text(self, text: str) -> ParsedTask:
        return await self._extractor.extract(text)

    async def extract_from_audio(self, audio: bytes, filename: str) -> AudioExtraction:
        transcript = await self._transcription.transcribe(audio, filename)
        parsed_task = await self._extractor.extract(transcript)
        logger.info("Parsed task %r from audio %s", parsed_task.task_name, filename)
        return AudioExtraction(parsed_task=parsed_task, transcript=transcript)


def build_llm_client(settings: Settings) -> LanguageModelClient:
    if settings.llm_provider is LLMProvider.OPENAI:
        return OpenAITaskClient(
            api_key=settings.openai_api_key,
            model=settings.openai_chat_model,
            timeout=settings.request_timeout_seconds,
        )
    return AnthropicTaskClient(
        api_key=settings.anthropic_api_key,
        model=settings.llm_model,
        timeout=settings.request_timeout_seconds,
    )


def build_speech_client(settings: Settings) -> SpeechToTextClient:
    if settings.speech_provider is SpeechProvider.ASSEMBLYAI:
        return AssemblyAITranscriber(api_key=settings.assemblyai_api_key)
    return WhisperTranscriber(
        api_key=settings.openai_api_key,
        model=settings.whisper_model,
        timeout=settings.request_timeout_seconds,
    )


def build_orchestrator(
    settings: Settings,
    usage_tracker: UsageTracker | None = None,
) -> ExtractionOrchestrator:
    """Wire the configured collaborators into an orchestrator."""
    policy = settings.retry_policy
    extractor = StructuredExtractor(
        build_llm_client(settings),
        policy,
        max_input_chars=settings.max_input_chars,
        usage_tracker=usage_tracker,
    )
    transcription = TranscriptionPipeline(
        build_speech_client(settings),
        policy,
        language=settings.transcription_language,
        upload_dir=settings.upload_dir or None,
        max_audio_bytes=settings.max_audio_bytes,
    )
    return ExtractionOrchestrator(extractor, transcription)
