"""Pydantic request/response schemas for the Task Parser API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.extraction.models import ParsedTask


class TaskInputRequest(BaseModel):
    """Request body for the /api/tasks/parse endpoint."""

    input: str = Field(..., min_length=1, max_length=2000)


class TranscriptRequest(BaseModel):
    """Request body for the /api/tasks/transcript endpoint.

    Lets a client that already has a transcript (e.g. browser speech
    recognition) skip the audio upload.
    """

    transcript: str = Field(..., min_length=1, max_length=2000)


class ParseTaskResponse(BaseModel):
    """Response body for the text and transcript endpoints."""

    task: ParsedTask


class AudioTaskResponse(BaseModel):
    """Response body for the /api/tasks/audio endpoint."""

    task: ParsedTask
    transcript: str


class UsageResponse(BaseModel):
    """Response body for the /api/monitoring/usage endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    requests: int
    tokens: int
    last_reset: datetime = Field(..., alias="lastReset")
