"""
FastAPI application for jsonlingo.

This is the HTTP API that frontends poll for session progress, logs and
results. It owns one orchestrator, so at most one translation runs at a
time.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from jsonlingo.config import get_settings
from jsonlingo.core.errors import AlreadyRunning, NoSessionToResume, NoTranslatableContent
from jsonlingo.core.log_config import configure_logging
from jsonlingo.core.models import (
    LanguageInfo,
    TranslationConfig,
    TranslationLog,
    TranslationSession,
    TranslationStats,
)
from jsonlingo.processing import create_patch, extract_strings, generate_diff
from jsonlingo.services.orchestrator import (
    SessionLease,
    TranslationOrchestrator,
    create_orchestrator,
)

logger = logging.getLogger(__name__)


# =============================================================================
# App State
# =============================================================================


class AppState:
    """Application state - initialized at startup."""
    
    orchestrator: TranslationOrchestrator
    tasks: set[asyncio.Task]


state = AppState()
state.tasks = set()


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup app resources."""
    settings = get_settings()
    configure_logging(settings.log_level)
    
    state.orchestrator = create_orchestrator(settings)
    logger.info(
        f"jsonlingo API starting in {settings.environment} mode "
        f"(backend: {settings.translator_backend})"
    )
    
    yield
    
    for task in list(state.tasks):
        task.cancel()
    await state.orchestrator.backend.aclose()
    await state.orchestrator.cache.store.close()
    logger.info("jsonlingo API shutting down")


# =============================================================================
# App Setup
# =============================================================================


app = FastAPI(
    title="jsonlingo API",
    description="Structure-preserving translation of large JSON documents",
    version="0.1.0",
    lifespan=lifespan,
)


# CORS
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Dependencies
# =============================================================================


def get_orchestrator() -> TranslationOrchestrator:
    return state.orchestrator


def require_session(
    orchestrator: TranslationOrchestrator = Depends(get_orchestrator),
) -> TranslationSession:
    session = orchestrator.get_current_session()
    if session is None:
        raise HTTPException(status_code=404, detail="No translation session")
    return session


# =============================================================================
# Request/Response Models
# =============================================================================


class StartTranslationRequest(BaseModel):
    json_data: Any = Field(alias="json")
    source_language: str = "auto"
    target_language: str
    batch_size: int | None = Field(default=None, gt=0)
    max_retries: int | None = Field(default=None, ge=0)


class ResumeRequest(BaseModel):
    max_retries: int | None = Field(default=None, ge=0)


class BatchSummary(BaseModel):
    id: str
    status: str
    progress: float
    jobs: int


class SessionResponse(BaseModel):
    session_id: str
    status: str
    source_language: str
    target_language: str
    total_strings: int
    unique_strings: int
    translated_strings: int
    skipped_strings: int
    error_strings: int
    start_time: int
    end_time: int | None
    batches: list[BatchSummary]
    
    @classmethod
    def from_session(cls, session: TranslationSession) -> SessionResponse:
        return cls(
            session_id=session.id,
            status=session.status.value,
            source_language=session.source_language,
            target_language=session.target_language,
            total_strings=session.total_strings,
            unique_strings=session.unique_strings,
            translated_strings=session.translated_strings,
            skipped_strings=session.skipped_strings,
            error_strings=session.error_strings,
            start_time=session.start_time,
            end_time=session.end_time,
            batches=[
                BatchSummary(
                    id=batch.id,
                    status=batch.status.value,
                    progress=batch.progress,
                    jobs=len(batch.jobs),
                )
                for batch in session.batches
            ],
        )


def _spawn(coro, lease: SessionLease | None = None) -> None:
    """Run a coroutine in the background and log if it fails.

    `lease` is released once the task ends, even if it is cancelled before
    the coroutine got to run.
    """
    task = asyncio.create_task(coro)
    state.tasks.add(task)
    
    def _done(t: asyncio.Task) -> None:
        state.tasks.discard(t)
        if lease is not None:
            lease.release()
        if not t.cancelled() and t.exception() is not None:
            logger.error(f"Background translation failed: {t.exception()}")
    
    task.add_done_callback(_done)


# =============================================================================
# Backend
# =============================================================================


@app.get("/health")
async def health_check(orchestrator: TranslationOrchestrator = Depends(get_orchestrator)):
    """Health check endpoint, including the translator backend."""
    backend_ok = await orchestrator.backend.health_check()
    return {
        "status": "healthy" if backend_ok else "degraded",
        "service": "jsonlingo-api",
        "backend": orchestrator.backend.backend_id,
        "backend_healthy": backend_ok,
    }


@app.get("/languages", response_model=list[LanguageInfo])
async def list_languages(orchestrator: TranslationOrchestrator = Depends(get_orchestrator)):
    """Languages supported by the translator backend."""
    return await orchestrator.backend.list_languages()


# =============================================================================
# Translations
# =============================================================================


@app.post("/translations", status_code=202)
async def start_translation(
    request: StartTranslationRequest,
    wait: bool = False,
    orchestrator: TranslationOrchestrator = Depends(get_orchestrator),
):
    """
    Start translating a JSON document.
    
    By default the run continues in the background and the client polls
    `/translations/current`. With `?wait=true` the request returns when the
    session finishes or is paused.
    """
    config = TranslationConfig(
        source_language=request.source_language,
        target_language=request.target_language,
        batch_size=request.batch_size or get_settings().batch_size,
        max_retries=(
            request.max_retries
            if request.max_retries is not None
            else get_settings().max_retries
        ),
    )
    
    lease = orchestrator.try_acquire_session()
    if lease is None:
        raise HTTPException(status_code=409, detail="Translation already in progress")
    if not extract_strings(request.json_data):
        lease.release()
        raise HTTPException(status_code=422, detail="No translatable strings found in the JSON")
    
    if not wait:
        _spawn(orchestrator.start_translation(request.json_data, config, lease=lease), lease)
        return {"status": "started"}
    
    try:
        session = await orchestrator.start_translation(request.json_data, config, lease=lease)
    except AlreadyRunning as e:
        raise HTTPException(status_code=409, detail=str(e))
    except NoTranslatableContent as e:
        raise HTTPException(status_code=422, detail=str(e))
    
    return SessionResponse.from_session(session)


@app.get("/translations/current", response_model=SessionResponse)
async def get_current(session: TranslationSession = Depends(require_session)):
    """Progress snapshot of the current session."""
    return SessionResponse.from_session(session)


@app.post("/translations/current/pause", response_model=SessionResponse)
async def pause(
    session: TranslationSession = Depends(require_session),
    orchestrator: TranslationOrchestrator = Depends(get_orchestrator),
):
    orchestrator.pause_translation()
    return SessionResponse.from_session(session)


@app.post("/translations/current/stop", response_model=SessionResponse)
async def stop(
    session: TranslationSession = Depends(require_session),
    orchestrator: TranslationOrchestrator = Depends(get_orchestrator),
):
    orchestrator.stop_translation()
    return SessionResponse.from_session(session)


@app.post("/translations/current/resume", status_code=202)
async def resume(
    request: ResumeRequest | None = None,
    wait: bool = False,
    orchestrator: TranslationOrchestrator = Depends(get_orchestrator),
):
    """Resume a paused session."""
    max_retries = request.max_retries if request else None
    
    if orchestrator.get_current_session() is None:
        raise HTTPException(status_code=404, detail="No session to resume")
    lease = orchestrator.try_acquire_session()
    if lease is None:
        raise HTTPException(status_code=409, detail="Translation already in progress")
    
    if not wait:
        _spawn(orchestrator.resume_translation(max_retries=max_retries, lease=lease), lease)
        return {"status": "resumed"}
    
    try:
        session = await orchestrator.resume_translation(max_retries=max_retries, lease=lease)
    except NoSessionToResume as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AlreadyRunning as e:
        raise HTTPException(status_code=409, detail=str(e))
    
    return SessionResponse.from_session(session)


@app.delete("/translations/current", status_code=204)
async def reset(orchestrator: TranslationOrchestrator = Depends(get_orchestrator)):
    """Discard the current session."""
    try:
        orchestrator.reset()
    except AlreadyRunning as e:
        raise HTTPException(status_code=409, detail=str(e))


@app.get("/translations/current/result")
async def get_result(
    partial: bool = False,
    session: TranslationSession = Depends(require_session),
    orchestrator: TranslationOrchestrator = Depends(get_orchestrator),
):
    """
    The translated document.
    
    Only available once the session completed, unless `?partial=true`,
    which applies whatever has been translated so far.
    """
    if partial:
        return orchestrator.get_partial_result()
    if session.translated_json is None:
        raise HTTPException(status_code=409, detail="Translation not finished")
    return session.translated_json


@app.get("/translations/current/diff")
async def get_diff(session: TranslationSession = Depends(require_session)):
    if session.translated_json is None:
        raise HTTPException(status_code=409, detail="Translation not finished")
    return [
        record.model_dump(mode="json")
        for record in generate_diff(session.original_json, session.translated_json)
    ]


@app.get("/translations/current/patch")
async def get_patch(session: TranslationSession = Depends(require_session)):
    if session.translated_json is None:
        raise HTTPException(status_code=409, detail="Translation not finished")
    return create_patch(session.original_json, session.translated_json)


@app.get("/translations/current/logs", response_model=list[TranslationLog])
async def get_logs(
    since: int = 0,
    session: TranslationSession = Depends(require_session),
):
    """Log records, optionally only those at or after `since` (epoch ms)."""
    return [log for log in session.logs if log.timestamp >= since]


@app.get("/translations/current/stats", response_model=TranslationStats)
async def get_stats(
    session: TranslationSession = Depends(require_session),
    orchestrator: TranslationOrchestrator = Depends(get_orchestrator),
):
    return orchestrator.get_translation_stats()
