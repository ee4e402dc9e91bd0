import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.routes.monitoring import router as monitoring_router
from src.api.routes.tasks import router as tasks_router
from src.config import settings
from src.monitoring.usage import UsageTracker
from src.orchestrator import build_orchestrator

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    tracker = UsageTracker(check_interval=settings.usage_reset_check_seconds)
    app.state.usage_tracker = tracker
    app.state.orchestrator = build_orchestrator(settings, usage_tracker=tracker)
    await tracker.start()
    try:
        yield
    finally:
        await tracker.stop()


app = FastAPI(
    title="Task Parser API",
    description="Turns typed or spoken requests into structured tasks",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
    ],
    allow_origin_regex=r"http://localhost:\d+",
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(tasks_router)
app.include_router(monitoring_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}
