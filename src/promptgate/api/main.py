"""PromptGate — FastAPI Application.

This module defines the application factory, every route, the error handlers,
and the ``main()`` CLI function that launches the uvicorn server.

Architecture
------------
Each request is an independent, strictly sequential transaction:

    validate prompt → render template → provider call → (moderation) → respond

- **Configuration** comes from :mod:`promptgate.core.config` (environment
  variables with the ``PROMPTGATE_`` prefix).
- **Provider calls** go through :class:`~promptgate.core.upstream.InferenceClient`
  and :class:`~promptgate.core.moderation.ModerationClient`, which share one
  ``httpx.AsyncClient`` created in the lifespan and stored on ``app.state``.
- **Cross-origin access** is granted only under ``/ai`` and only for the
  configured allow-list (:mod:`promptgate.api.cors`).
- **Errors** are returned as plain text bodies; anything unexpected becomes a
  generic 500 and is logged server-side only.

Endpoints
---------
========  ==================================  ==================================
Method    Path                                Purpose
========  ==================================  ==================================
GET       ``/ai``                             Raw token stream
GET       ``/ai/txt2txt``                     Text completion (JSON or stream)
GET       ``/ai/txt2img/{width}/{height}``    Image generation
GET       ``/ai/txt2img``                     Image generation, default size
GET       ``/health``                         Liveness probe
========  ==================================  ==================================

Usage
-----
CLI (installed entry point)::

    promptgate

Direct invocation::

    python -m promptgate.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import httpx
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response, StreamingResponse
from starlette.background import BackgroundTask
from starlette.exceptions import HTTPException as StarletteHTTPException

from promptgate import __version__
from promptgate.api.cors import PrefixCORSMiddleware
from promptgate.api.models import HealthResponse, ImageResponse, TextResponse
from promptgate.api.prompt_builder import (
    IMAGE_NEGATIVE_PROMPT,
    build_image_prompt,
    build_text_prompt,
)
from promptgate.api.validation import PromptValidationError, resolve_dimensions, validate_prompt
from promptgate.core.config import PromptGateConfig, config
from promptgate.core.moderation import ModerationClient
from promptgate.core.upstream import InferenceClient, UpstreamError, extract_image_data

logger = logging.getLogger(__name__)

FLAGGED_MESSAGE = "Your request has been flagged as inappropriate."

# Headers sent with relayed token streams.
STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "Content-Encoding": "identity",
}


# ---------------------------------------------------------------------------
# Application lifecycle — shared HTTP client setup and teardown.
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the provider clients on startup and close them on shutdown.

    No timeout is configured on the shared client: provider calls are
    bounded only by the hosting platform.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to the application for the duration of its lifetime.
    """
    cfg: PromptGateConfig = app.state.config
    http = httpx.AsyncClient(
        timeout=httpx.Timeout(None),
        transport=app.state.transport,
    )
    app.state.http_client = http
    app.state.inference = InferenceClient(cfg, http)
    app.state.moderation = ModerationClient(cfg, http) if cfg.moderation_enabled else None
    state = "enabled" if cfg.moderation_enabled else "disabled"
    logger.info(f"Provider clients ready (moderation {state}).")

    yield

    await http.aclose()
    logger.info("Provider clients closed on shutdown.")


# ---------------------------------------------------------------------------
# Dependencies.
# ---------------------------------------------------------------------------


def get_config(request: Request) -> PromptGateConfig:
    return request.app.state.config


def get_inference(request: Request) -> InferenceClient:
    return request.app.state.inference


def get_moderation(request: Request) -> ModerationClient | None:
    return request.app.state.moderation


# ---------------------------------------------------------------------------
# Response helpers.
# ---------------------------------------------------------------------------


def _flagged_response() -> TextResponse:
    """Fixed notice returned instead of content that failed moderation."""
    return TextResponse(
        response=FLAGGED_MESSAGE,
        created_at=datetime.now(timezone.utc).isoformat(),
    )


async def _stream_text(prompt: str, inference: InferenceClient) -> StreamingResponse:
    """Relay the provider stream unchanged; the connection is released afterwards."""
    upstream = await inference.stream_completion(build_text_prompt(prompt))
    return StreamingResponse(
        upstream.aiter_bytes(),
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
        background=BackgroundTask(upstream.aclose),
    )


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------

router = APIRouter()


@router.get("/health")
async def health() -> HealthResponse:
    """Liveness probe; lives outside the CORS prefix."""
    return HealthResponse(version=__version__)


@router.get("/ai", response_model=None)
async def stream_ai(
    prompt: str | None = None,
    inference: InferenceClient = Depends(get_inference),
    moderation: ModerationClient | None = Depends(get_moderation),
) -> Response | TextResponse:
    """Relay a streaming completion for the templated prompt.

    Returns:
        ``text/event-stream`` response carrying the provider's bytes as-is,
        or the flagged notice when moderation rejects the prompt.

    Raises:
        PromptValidationError: 400 when ``prompt`` is absent or empty.
    """
    prompt = validate_prompt(prompt)
    if moderation is not None and (await moderation.moderate_text(prompt)).flagged:
        return _flagged_response()
    return await _stream_text(prompt, inference)


@router.get("/ai/txt2txt", response_model=None)
async def txt2txt(
    prompt: str | None = None,
    cfg: PromptGateConfig = Depends(get_config),
    inference: InferenceClient = Depends(get_inference),
    moderation: ModerationClient | None = Depends(get_moderation),
) -> Response | TextResponse:
    """Generate text for the templated prompt.

    The prompt is moderated *before* generation; a flagged prompt never
    reaches the completion endpoint.

    Returns:
        :class:`TextResponse` with all choice texts joined and the provider's
        ``created`` timestamp, or a raw event stream when ``text_stream`` is
        enabled.

    Raises:
        PromptValidationError: 400 when ``prompt`` is absent or empty.
    """
    prompt = validate_prompt(prompt)

    if moderation is not None and (await moderation.moderate_text(prompt)).flagged:
        return _flagged_response()

    if cfg.text_stream:
        return await _stream_text(prompt, inference)

    result = await inference.complete(build_text_prompt(prompt))
    return TextResponse(response=result.text, created_at=result.created)


async def _generate_image(
    prompt: str | None,
    width: str | None,
    height: str | None,
    cfg: PromptGateConfig,
    inference: InferenceClient,
    moderation: ModerationClient | None,
) -> Response | TextResponse | ImageResponse:
    prompt = validate_prompt(prompt)
    w, h = resolve_dimensions(width, height, cfg)

    try:
        payload = await inference.generate_image(
            build_image_prompt(prompt),
            w,
            h,
            negative_prompt=IMAGE_NEGATIVE_PROMPT,
        )
    except UpstreamError as e:
        raise HTTPException(status_code=400, detail=e.body) from e

    b64 = extract_image_data(payload)
    if b64 is None:
        if cfg.image_passthrough:
            return JSONResponse(payload)
        raise HTTPException(status_code=404, detail="No data")

    # Images are moderated after generation: the output is what gets checked.
    if moderation is not None:
        verdict = await moderation.moderate_image(b64, cfg.image_response_extension)
        if verdict.flagged:
            return _flagged_response()

    if cfg.image_passthrough:
        return JSONResponse(payload)
    return ImageResponse(data=b64)


@router.get("/ai/txt2img/{width}/{height}", response_model=None)
async def txt2img(
    width: str,
    height: str,
    prompt: str | None = None,
    cfg: PromptGateConfig = Depends(get_config),
    inference: InferenceClient = Depends(get_inference),
    moderation: ModerationClient | None = Depends(get_moderation),
) -> Response | TextResponse | ImageResponse:
    """Generate one image of (clamped) ``width`` × ``height`` pixels.

    Non-numeric dimensions fall back to the configured default; all values
    are clamped to ``[min_dimension, max_dimension]``.

    Returns:
        :class:`ImageResponse` with the base64 payload, the provider's raw
        JSON when ``image_passthrough`` is enabled, or the flagged notice.

    Raises:
        HTTPException: 400 with the provider's raw body when generation is
            rejected; 404 ``"No data"`` when the payload has no image.
    """
    return await _generate_image(prompt, width, height, cfg, inference, moderation)


@router.get("/ai/txt2img", response_model=None)
async def txt2img_default_size(
    prompt: str | None = None,
    cfg: PromptGateConfig = Depends(get_config),
    inference: InferenceClient = Depends(get_inference),
    moderation: ModerationClient | None = Depends(get_moderation),
) -> Response | TextResponse | ImageResponse:
    """Generate one image at the default dimensions."""
    return await _generate_image(prompt, None, None, cfg, inference, moderation)


# ---------------------------------------------------------------------------
# Error handlers.
# ---------------------------------------------------------------------------


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


async def _validation_error_handler(request: Request, exc: PromptValidationError) -> Response:
    return PlainTextResponse(str(exc), status_code=400)


async def _catch_unhandled_errors(request: Request, call_next) -> Response:
    """Turn any uncaught error into a generic plain-text 500.

    Registered as the innermost middleware so the 500 still passes through
    the CORS layer on its way out.
    """
    try:
        return await call_next(request)
    except Exception:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return PlainTextResponse("Internal Server Error", status_code=500)


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


def create_app(
    settings: PromptGateConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build a configured FastAPI application.

    Args:
        settings: Configuration to use.  Defaults to the global ``config``.
        transport: Optional httpx transport for the shared client (tests pass
            an ``httpx.MockTransport``).

    Returns:
        The application, with CORS restricted to ``settings.cors_prefix``.
    """
    cfg = settings or config

    application = FastAPI(
        title="PromptGate",
        description="Templated prompt proxy for hosted text and image generation.",
        version=__version__,
        lifespan=lifespan,
    )
    application.state.config = cfg
    application.state.transport = transport

    # Middleware added later wraps earlier middleware: the error catcher must
    # sit inside the CORS layer.
    application.middleware("http")(_catch_unhandled_errors)
    application.add_middleware(
        PrefixCORSMiddleware,
        prefix=cfg.cors_prefix,
        allow_origins=cfg.cors_origins,
        allow_methods=cfg.cors_allow_methods,
        allow_headers=cfg.cors_allow_headers,
        expose_headers=cfg.cors_expose_headers,
        allow_credentials=cfg.cors_allow_credentials,
        max_age=cfg.cors_max_age,
    )

    application.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    application.add_exception_handler(PromptValidationError, _validation_error_handler)

    application.include_router(router)
    return application


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from :data:`~promptgate.core.config.config`
    (``PROMPTGATE_SERVER_HOST``, ``PROMPTGATE_SERVER_PORT``,
    ``PROMPTGATE_LOG_LEVEL``).  Defaults to ``0.0.0.0:8787``.

    This function is registered as the ``promptgate`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "promptgate.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
