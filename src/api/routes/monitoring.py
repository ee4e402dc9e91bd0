"""Monitoring endpoint: language-model usage since the last daily reset."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from src.api.dependencies import get_usage_tracker
from src.api.models import UsageResponse
from src.monitoring.usage import UsageTracker

router = APIRouter()


@router.get("/api/monitoring/usage", response_model=UsageResponse)
async def usage(
    tracker: Annotated[UsageTracker, Depends(get_usage_tracker)],
) -> UsageResponse:
    snapshot = tracker.snapshot()
    return UsageResponse(
        requests=snapshot.requests,
        tokens=snapshot.tokens,
        last_reset=snapshot.last_reset,
    )
