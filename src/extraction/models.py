"""Data models for structured task extraction results."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNASSIGNED = "Unassigned"

MAX_TASK_NAME_CHARS = 200
MAX_DESCRIPTION_CHARS = 1000
MAX_ASSIGNEE_CHARS = 50
MAX_TAG_CHARS = 20
MAX_TAGS = 5


class Priority(StrEnum):
    """Task priority, P1 highest."""

    P1 = "P1"
    P2 = "P2"
    P3 = "P3"
    P4 = "P4"

    @property
    def rank(self) -> int:
        """1 for the most urgent level, 4 for the least."""
        return int(self.value[1])


class ParsedTask(BaseModel):
    """A task record built from free-form text.

    Field names are snake_case in Python and camelCase on the wire
    (``taskName``, ``dueDate``), matching the document the language model
    returns.
    """

    model_config = ConfigDict(populate_by_name=True)

    task_name: str = Field(..., alias="taskName", min_length=1, max_length=MAX_TASK_NAME_CHARS)
    description: str = Field(..., min_length=1, max_length=MAX_DESCRIPTION_CHARS)
    priority: Priority = Priority.P3
    due_date: datetime | None = Field(default=None, alias="dueDate")
    assignee: str = Field(default=UNASSIGNED, max_length=MAX_ASSIGNEE_CHARS)
    tags: list[str] = Field(default_factory=list)

    @field_validator("task_name", "description", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("priority", mode="before")
    @classmethod
    def normalise_priority(cls, v: Any) -> Any:
        if v is None:
            return Priority.P3
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("due_date", mode="before")
    @classmethod
    def blank_due_date(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("due_date")
    @classmethod
    def as_utc(cls, v: datetime | None) -> datetime | None:
        if v is None:
            return None
        # Naive timestamps from the model are taken to be UTC.
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v.astimezone(UTC)

    @field_validator("assignee", mode="before")
    @classmethod
    def default_assignee(cls, v: Any) -> Any:
        if v is None:
            return UNASSIGNED
        if isinstance(v, str):
            return v.strip() or UNASSIGNED
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, v: Any) -> Any:
        """Drop blanks and duplicates, truncate long tags, keep the first five."""
        if v is None:
            return []
        if not isinstance(v, list):
            return v
        cleaned: list[str] = []
        for tag in v:
            if not isinstance(tag, str):
                continue
            tag = tag.strip()[:MAX_TAG_CHARS]
            if tag and tag not in cleaned:
                cleaned.append(tag)
        return cleaned[:MAX_TAGS]
