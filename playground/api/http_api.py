"""
HTTP API adapter for the image playground.

Architectural role:
- Expose the two browser-facing POST endpoints plus a health check.
- Parse request JSON leniently and delegate to the service layer.
- Map the `playground.core.errors` taxonomy to HTTP statuses.

Endpoint responsibilities:
- `POST /api/predictions`: normalize, create and poll an image prediction.
- `POST /api/refine`: refine a prompt with the configured text model.
- `GET /api/health`: report which model versions are configured.

Concurrency:
- Blocking service calls run in the anyio threadpool, sized at startup to
  `settings.worker_threads`. The health check stays on the event loop.

Request lifecycle:
1. Parse request JSON (invalid JSON -> 400; non-object JSON -> `{}`).
2. Run the blocking service call in the threadpool.
3. Return the response model, or `{error, details?}` with the mapped status.

Error handling strategy:
- `PlaygroundError` subclasses carry their own status (400/500/provider/502/504).
- Anything else is logged with traceback and answered with a generic 500.

Static files:
- When `settings.public_dir` exists it is mounted at `/` after the API routes.
"""

import json
import logging
import os
from contextlib import asynccontextmanager

import anyio.to_thread
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from playground.api.schemas import HealthResponse, PredictionResponse, RefineResponse
from playground.core.errors import PlaygroundError, ValidationError
from playground.image.poller import PredictionPoller
from playground.image.service import generate_image
from playground.llm.provider_config import Settings
from playground.llm.service import refine_prompt


logger = logging.getLogger(__name__)


async def read_json_body(request: Request) -> dict:
    """Return the request JSON as a dict; non-object bodies become `{}`."""
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except ValueError:
        raise ValidationError("Request body must be valid JSON.") from None
    return body if isinstance(body, dict) else {}


def error_response(exc: Exception, route: str) -> JSONResponse:
    """Map an exception to the `{error, details?}` envelope."""
    if isinstance(exc, PlaygroundError):
        if exc.status_code >= 500:
            logger.warning("[%s] %s (HTTP %s)", route, exc.message, exc.status_code)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    logger.exception("[%s] unexpected error", route)
    return JSONResponse(status_code=500, content={"error": "Unexpected server error."})


def create_app(settings: Settings | None = None, poller=None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Runtime configuration; read from the environment when omitted.
        poller: Prediction poller; built from `settings` when omitted.

    Raises:
        ConfigurationError: Startup-required settings are missing.
    """
    if settings is None:
        settings = Settings.from_env()
    settings.validate()
    if poller is None:
        poller = PredictionPoller.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Each prediction holds one worker thread for its whole poll budget.
        limiter = anyio.to_thread.current_default_thread_limiter()
        limiter.total_tokens = settings.worker_threads
        logger.info("Threadpool sized to %d workers", settings.worker_threads)
        yield

    app = FastAPI(title="Image Playground", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.poller = poller

    @app.get("/api/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(
            models={key: selector.configured for key, selector in settings.models.items()},
            refine=bool(settings.refine_version),
        )

    @app.post("/api/predictions", response_model=PredictionResponse)
    async def create_prediction(request: Request):
        try:
            body = await read_json_body(request)
            result = await run_in_threadpool(generate_image, body, settings, poller)
        except Exception as exc:
            return error_response(exc, "/api/predictions")
        return PredictionResponse(**result)

    @app.post("/api/refine", response_model=RefineResponse)
    async def refine(request: Request):
        try:
            body = await read_json_body(request)
            result = await run_in_threadpool(refine_prompt, body, settings, poller)
        except Exception as exc:
            return error_response(exc, "/api/refine")
        return RefineResponse(**result)

    if settings.public_dir and os.path.isdir(settings.public_dir):
        app.mount("/", StaticFiles(directory=settings.public_dir, html=True), name="public")
    else:
        logger.debug("Static directory %r not found; serving API only", settings.public_dir)

    return app
