"""Root conftest: fake API keys and shared fixtures."""

from __future__ import annotations

import os
from typing import Any

import pytest

# Ensure tests don't accidentally use real API keys
os.environ.setdefault("ANTHROPIC_API_KEY", "sk-ant-test-fake-key")
os.environ.setdefault("OPENAI_API_KEY", "sk-test-fake-key")

from tests.fakes import RecordingSleep  # noqa: E402


@pytest.fixture
def no_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def task_document() -> dict[str, Any]:
    """A well-formed document whose due date is already in the past."""
    return {
        "taskName": "Review docs",
        "description": "Review the project documentation",
        "priority": "P1",
        "dueDate": "2024-03-01T23:59:00.000Z",
        "assignee": "Mike",
        "tags": ["documentation"],
    }
