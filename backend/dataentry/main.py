"""FastAPI application entry point."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from dataentry.config import settings
from dataentry.logging_config import configure_logging
from dataentry.services.stage_service import stage_service

logger = logging.getLogger("dataentry")


class RequestLoggingMiddleware:
    """Logs method, path, status code and duration for every HTTP request.

    Request bodies are never logged; they carry the player's field values.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "?")
        path = scope.get("path", "?")
        start = time.monotonic()
        status_code = 0

        async def logging_send(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            await send(message)

        try:
            await self.app(scope, receive, logging_send)
        finally:
            duration_ms = (time.monotonic() - start) * 1000
            logger.info("%s %s %d %.1fms", method, path, status_code, duration_ms)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: fail fast on a broken stage catalog
    configure_logging()
    stages = stage_service.list_stages()
    logger.info("Starting (%s) with %d stages", settings.APP_ENV, len(stages))
    yield


app = FastAPI(
    title="Data Entry Rush API",
    description="Backend API for a data-entry training game: read the source, fill in the form, get scored",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # TODO: restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Routes ---
from dataentry.api.routes import game, stages  # noqa: E402

app.include_router(stages.router, prefix="/api/stages", tags=["stages"])
app.include_router(game.router, prefix="/api/game", tags=["game"])


@app.get("/health")
async def health_check():
    return {"status": "ok"}
