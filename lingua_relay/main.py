# lingua_relay/main.py
# -*- coding: utf-8 -*-
"""
Lingua Relay — FastAPI application entrypoint
---------------------------------------------
This file wires everything together:

- Sets up central logging.
- Creates the FastAPI app with a lifespan that owns the single upstream
  client (built on startup, closed on shutdown).
- Adds the CORS middleware: every response, errors and unhandled 500s
  included, carries permissive cross-origin headers, and any OPTIONS
  request is answered with 200 and an empty body.
- Registers the error handlers that produce {"error": "..."} envelopes.
- Mounts routers:
    * /api/conversation/start           (HTTP) → new session id
    * /api/conversation/message         (HTTP) → one-shot reply
    * /api/conversation/message/stream  (HTTP) → streamed reply
- Exposes an ASGI `app` object for uvicorn.

Typical run command (dev):

    uvicorn lingua_relay.main:app --host 0.0.0.0 --port 8000 --reload

"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Dict, Optional

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from lingua_relay import __version__
from lingua_relay.core.config import settings
from lingua_relay.core.errors import InvalidRequestError, RelayError
from lingua_relay.providers import OpenAIResponsesUpstream
from lingua_relay.routers.conversation import router as conversation_router
from lingua_relay.utils import get_logger, setup_logging


setup_logging(debug=settings.debug)
logger = get_logger(__name__)
logger.info(
    "Lingua Relay starting (env=%s, model=%s, api_key_set=%s)",
    settings.environment,
    settings.openai_model,
    bool(settings.openai_api_key),
)

CORS_ALLOW_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type"


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.detail)
    return _error(exc.status_code, exc.public_message)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.warning("%s %s -> 400: %s", request.method, request.url.path, exc.errors())
    return _error(400, InvalidRequestError.public_message)


async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    message = "Not found" if exc.status_code == 404 else str(exc.detail)
    return _error(exc.status_code, message)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def cors_headers(origin: Optional[str]) -> Dict[str, str]:
    """
    Cross-origin headers for one response.

    With the default `cors_allow_origins = ["*"]` every response gets
    `Access-Control-Allow-Origin: *`, whether or not the request sent an
    Origin. A restricted list echoes the request's Origin when it is listed.
    """
    headers = {
        "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
        "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
    }
    allowed = settings.cors_allow_origins
    if "*" in allowed:
        headers["Access-Control-Allow-Origin"] = "*"
    elif origin and origin in allowed:
        headers["Access-Control-Allow-Origin"] = origin
        headers["Vary"] = "Origin"
    return headers


async def cors_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """
    Answer OPTIONS directly, turn unhandled exceptions into the 500
    envelope, and stamp the CORS headers on whatever goes out.
    """
    if request.method == "OPTIONS":
        response: Response = Response(status_code=200)
    else:
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Unhandled exception in %s %s", request.method, request.url.path)
            response = _error(500, "Internal server error")

    response.headers.update(cors_headers(request.headers.get("origin")))
    return response


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """One upstream client (and connection pool) for the whole process."""
    upstream = OpenAIResponsesUpstream.from_settings(settings)
    app.state.upstream = upstream
    logger.info("Upstream client ready (model=%s)", upstream.model)
    try:
        yield
    finally:
        await upstream.aclose()
        logger.info("Upstream client closed")


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """
    Application factory.

    Returns a configured FastAPI instance ready for uvicorn.
    """
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.middleware("http")(cors_middleware)

    app.add_exception_handler(RelayError, relay_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    app.include_router(conversation_router)

    # ------------------------------------------------------------------
    # Meta / health endpoints
    # ------------------------------------------------------------------

    @app.get("/", tags=["meta"])
    async def root():
        return {
            "name": settings.app_name,
            "environment": settings.environment,
            "message": "Lingua Relay is running.",
        }

    @app.get("/health", tags=["meta"])
    async def health_check():
        """
        Lightweight health check for load balancers / monitoring scripts.
        """
        return {
            "status": "ok",
            "environment": settings.environment,
            "model": settings.openai_model,
            "upstream_configured": bool(settings.openai_api_key),
        }

    logger.info("FastAPI app created (env=%s)", settings.environment)
    return app


# ASGI app for uvicorn / gunicorn
app = create_app()


if __name__ == "__main__":
    """
    Allow `python -m lingua_relay.main` during development.
    """
    import uvicorn

    uvicorn.run(
        "lingua_relay.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=(settings.environment != "production"),
    )
