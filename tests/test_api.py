"""Tests for API endpoints (no external API keys required)."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import get_orchestrator, get_usage_tracker
from src.api.main import app
from src.api.routes.tasks import to_http_exception
from src.errors import (
    EmptyInputError,
    EmptyTranscriptError,
    InputTooLongError,
    TaskParseError,
    TranscriptionError,
    TranscriptionFailureReason,
    UnsupportedAudioFormatError,
)
from src.extraction.models import ParsedTask, Priority
from src.monitoring.usage import UsageTracker
from src.orchestrator import AudioExtraction

# Without a context manager the lifespan never runs, so no real clients are built
client = TestClient(app)

AUDIO = b"\xff\xfb\x90\x00" + b"\x00" * 100  # fake MP3 binary header

TASK = ParsedTask(
    taskName="Review docs",
    description="Review the project documentation",
    priority=Priority.P1,
    dueDate=datetime(2024, 3, 20, 23, 59, tzinfo=UTC),
    assignee="Mike",
    tags=["documentation"],
)


@pytest.fixture
def orchestrator():
    mock = MagicMock()
    mock.extract_from_text = AsyncMock(return_value=TASK)
    mock.extract_from_audio = AsyncMock(
        return_value=AudioExtraction(parsed_task=TASK, transcript="review docs next wednesday")
    )
    app.dependency_overrides[get_orchestrator] = lambda: mock
    yield mock
    app.dependency_overrides.pop(get_orchestrator, None)


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


# --- /api/tasks/parse ---


def test_parse_returns_camel_case_task(orchestrator):
    response = client.post("/api/tasks/parse", json={"input": "Review docs next Wednesday"})

    assert response.status_code == 200
    task = response.json()["task"]
    assert task["taskName"] == "Review docs"
    assert task["priority"] == "P1"
    assert task["assignee"] == "Mike"
    assert task["tags"] == ["documentation"]
    assert task["dueDate"].startswith("2024-03-20T23:59:00")
    orchestrator.extract_from_text.assert_awaited_once_with("Review docs next Wednesday")


def test_parse_requires_input(orchestrator):
    response = client.post("/api/tasks/parse", json={})
    assert response.status_code == 422  # missing required field


def test_parse_rejects_overlong_input(orchestrator):
    response = client.post("/api/tasks/parse", json={"input": "x" * 2001})
    assert response.status_code == 422
    orchestrator.extract_from_text.assert_not_awaited()


def test_parse_whitespace_input_is_400(orchestrator):
    orchestrator.extract_from_text.side_effect = EmptyInputError("Input text cannot be empty")

    response = client.post("/api/tasks/parse", json={"input": "   "})

    assert response.status_code == 400
    assert "empty" in response.json()["detail"].lower()


def test_parse_unparseable_document_is_422(orchestrator):
    orchestrator.extract_from_text.side_effect = TaskParseError("Missing required fields")

    response = client.post("/api/tasks/parse", json={"input": "gibberish"})

    assert response.status_code == 422
    assert "Missing required fields" in response.json()["detail"]


def test_parse_llm_outage_is_503(orchestrator):
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    orchestrator.extract_from_text.side_effect = anthropic.APIConnectionError(request=request)

    response = client.post("/api/tasks/parse", json={"input": "Review docs"})

    assert response.status_code == 503


# --- /api/tasks/transcript ---


def test_transcript_endpoint(orchestrator):
    response = client.post("/api/tasks/transcript", json={"transcript": "call mom tomorrow"})

    assert response.status_code == 200
    assert response.json()["task"]["taskName"] == "Review docs"
    orchestrator.extract_from_text.assert_awaited_once_with("call mom tomorrow")


# --- /api/tasks/audio ---


def test_audio_upload_returns_task_and_transcript(orchestrator):
    response = client.post(
        "/api/tasks/audio",
        files={"audio": ("memo.mp3", AUDIO, "audio/mpeg")},
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["transcript"] == "review docs next wednesday"
    assert body["task"]["taskName"] == "Review docs"
    orchestrator.extract_from_audio.assert_awaited_once_with(AUDIO, "memo.mp3")


def test_audio_upload_requires_file(orchestrator):
    response = client.post("/api/tasks/audio")
    assert response.status_code == 422


def test_audio_upload_rejects_non_audio_mime(orchestrator):
    response = client.post(
        "/api/tasks/audio",
        files={"audio": ("notes.txt", b"hello", "text/plain")},
    )

    assert response.status_code == 400
    assert "mime type" in response.json()["detail"].lower()
    orchestrator.extract_from_audio.assert_not_awaited()


def test_audio_oversized_upload_is_413_before_extraction(orchestrator):
    with patch("src.api.routes.tasks.settings") as mock_settings:
        mock_settings.max_audio_bytes = 10
        response = client.post(
            "/api/tasks/audio",
            files={"audio": ("memo.mp3", AUDIO, "audio/mpeg")},
        )

    assert response.status_code == 413
    assert "too large" in response.json()["detail"].lower()
    orchestrator.extract_from_audio.assert_not_awaited()


def test_audio_upload_at_limit_is_accepted(orchestrator):
    with patch("src.api.routes.tasks.settings") as mock_settings:
        mock_settings.max_audio_bytes = len(AUDIO)
        response = client.post(
            "/api/tasks/audio",
            files={"audio": ("memo.mp3", AUDIO, "audio/mpeg")},
        )

    assert response.status_code == 200
    orchestrator.extract_from_audio.assert_awaited_once_with(AUDIO, "memo.mp3")


def test_audio_no_speech_is_400(orchestrator):
    orchestrator.extract_from_audio.side_effect = EmptyTranscriptError()

    response = client.post(
        "/api/tasks/audio",
        files={"audio": ("memo.wav", AUDIO, "audio/wav")},
    )

    assert response.status_code == 400


def test_audio_network_failure_is_503(orchestrator):
    orchestrator.extract_from_audio.side_effect = TranscriptionError(
        "offline", TranscriptionFailureReason.NETWORK
    )

    response = client.post(
        "/api/tasks/audio",
        files={"audio": ("memo.wav", AUDIO, "audio/wav")},
    )

    assert response.status_code == 503


# --- /api/monitoring/usage ---


def test_usage_endpoint():
    tracker = UsageTracker(clock=lambda: datetime(2024, 3, 18, tzinfo=UTC))
    tracker.record(120)
    app.dependency_overrides[get_usage_tracker] = lambda: tracker
    try:
        response = client.get("/api/monitoring/usage")
    finally:
        app.dependency_overrides.pop(get_usage_tracker, None)

    assert response.status_code == 200
    body = response.json()
    assert body["requests"] == 1
    assert body["tokens"] == 120
    assert body["lastReset"].startswith("2024-03-18T00:00:00")


# --- error mapping ---


@pytest.mark.parametrize(
    ("exc", "status"),
    [
        (EmptyInputError("empty"), 400),
        (InputTooLongError("too long"), 400),
        (UnsupportedAudioFormatError("ogg"), 400),
        (TranscriptionError("bad", TranscriptionFailureReason.INVALID_FORMAT), 400),
        (EmptyTranscriptError(), 400),
        (TranscriptionError("big", TranscriptionFailureReason.TOO_LARGE), 413),
        (TranscriptionError("net", TranscriptionFailureReason.NETWORK), 503),
        (TranscriptionError("???"), 502),
        (TaskParseError("bad json"), 422),
        (RuntimeError("surprise"), 500),
    ],
)
def test_to_http_exception(exc, status):
    assert to_http_exception(exc).status_code == status
