from __future__ import annotations

from fastapi import Request

from src.monitoring.usage import UsageTracker
from src.orchestrator import ExtractionOrchestrator


def get_orchestrator(request: Request) -> ExtractionOrchestrator:
    return request.app.state.orchestrator


def get_usage_tracker(request: Request) -> UsageTracker:
    return request.app.state.usage_tracker
