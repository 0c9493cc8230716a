# -*- coding: utf-8 -*-
"""
FastAPI app serving the preview panel.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import HTMLResponse

from . import __version__, diagnostics
from .config import settings
from .jinja_env import render_template
from .logging_config import setup_logging
from .middleware import RequestIDMiddleware
from .models import (
    HealthResponse,
    PreviewSnapshotResponse,
    RefreshResponse,
    SelectionAccepted,
    SelectionEvent,
)
from .service import preview_service

# Setup structured logging
setup_logging()
logger = logging.getLogger(__name__)


# noinspection PyUnusedLocal
@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Application lifecycle management."""
    logger.info("Starting cell preview service", extra={"version": __version__})

    # Startup
    await preview_service.start()

    yield

    # Shutdown
    logger.info("Shutting down cell preview service")
    await preview_service.stop()


app = FastAPI(
    title="Cell Preview Service",
    description="Live Markdown preview of the selected cell of a tabular document",
    version=__version__,
    lifespan=lifespan,
)

# Middleware stack (order matters: last added = first executed)
app.add_middleware(GZipMiddleware, minimum_size=settings.GZIP_MIN_SIZE)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Service health endpoint."""
    return HealthResponse(
        status="healthy",
        watcher_running=preview_service.is_ready,
        host_ready=preview_service.host_ready,
        version=__version__,
    )


@app.get("/preview", response_model=PreviewSnapshotResponse)
async def get_preview(
        after: int | None = Query(None, ge=0, description="Wait for a version newer than this"),
        timeout: float | None = Query(None, gt=0, le=120, description="Long-poll wait in seconds"),
) -> PreviewSnapshotResponse:
    """
    Current preview snapshot.

    - **after**: when set, waits until the snapshot version exceeds it
    - **timeout**: maximum wait in seconds (defaults to PREVIEW_POLL_TIMEOUT)
    """
    if after is None:
        snapshot = preview_service.sink.snapshot
    else:
        snapshot = await preview_service.sink.wait_for_change(
            after, timeout or settings.PREVIEW_POLL_TIMEOUT
        )
    return PreviewSnapshotResponse.from_snapshot(snapshot)


@app.post("/events/selection", response_model=SelectionAccepted, status_code=202)
async def selection_changed(event: SelectionEvent) -> SelectionAccepted:
    """Selection-change webhook called by the host bridge."""
    if not preview_service.is_ready:
        raise HTTPException(status_code=503, detail="Selection watcher not running")

    logger.debug(
        "Selection event received",
        extra={"record_id": event.record_id, "field_id": event.field_id},
    )
    preview_service.host.dispatch_selection(event.to_selection())
    return SelectionAccepted()


@app.post("/preview/refresh", response_model=RefreshResponse)
async def refresh_preview() -> RefreshResponse:
    """Re-read the last previewed cell, bypassing the dedup guard."""
    if not preview_service.is_ready:
        raise HTTPException(status_code=503, detail="Selection watcher not running")

    result = await preview_service.watcher.refresh()
    return RefreshResponse(refreshed=result is not None and result.committed)


@app.get("/", response_class=HTMLResponse)
async def panel() -> HTMLResponse:
    """Preview panel page."""
    snapshot = preview_service.sink.snapshot
    page = render_template(
        "panel.html.j2",
        snapshot=snapshot,
        placeholder=diagnostics.placeholder(),
        poll_timeout=settings.PREVIEW_POLL_TIMEOUT,
    )
    return HTMLResponse(page)
