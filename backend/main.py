# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
FastAPI application factory.

Responsibilities
----------------
* Build the shared collaborators once – DB engine and session factory,
  identity provider, AI prompt orchestrator – and keep them on ``app.state``
  so route dependencies receive them explicitly.
* Register CORS, request logging and the JSON error handlers.
* Mount the feature routers (auth, users, admin, ai).
* Expose a /health endpoint for container liveness checks.

Run with:
    uvicorn main:create_app --factory --app-dir backend
"""

import time
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware

from admin.router import router as admin_router
from ai.client import CompletionClient
from ai.orchestrator import PromptOrchestrator
from ai.router import router as ai_router
from auth.providers import build_identity_provider
from auth.router import router as auth_router
from core.config import Settings, get_settings
from core.errors import register_exception_handlers
from core.logger import logger
from database import build_engine, build_session_factory
from users.router import router as users_router


# ---------------------------------------------------------------------------
# Request-logging middleware
# ---------------------------------------------------------------------------
# Logs every inbound request: method, path, client IP, status, latency.
# Bodies (passwords, prompts, profiles) are NOT echoed – only the URL and
# metadata are recorded.


class _RequestLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, client IP, response status and latency (ms)."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        client_ip = request.client.host if request.client else "unknown"

        logger.info(
            "%s %s | client=%s status=%d latency=%.1fms",
            request.method,
            request.url.path,
            client_ip,
            response.status_code,
            elapsed_ms,
        )
        return response


@asynccontextmanager
async def _lifespan(app: FastAPI):
    logger.info("HiiNen service starting up")
    yield
    # Return pooled DB connections before the process exits
    app.state.engine.dispose()
    logger.info("HiiNen service shutting down")


def create_app(
    settings: Settings | None = None,
    ai_transport: httpx.AsyncBaseTransport | None = None,
    auth_transport: httpx.BaseTransport | None = None,
) -> FastAPI:
    """
    Build the application.  *settings* defaults to the environment; the
    optional transports replace the network for the AI and Supabase clients.
    """
    settings = settings or get_settings()

    app = FastAPI(title="HiiNen", version="1.0.0", lifespan=_lifespan)

    engine = build_engine(settings.database_url)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.identity_provider = build_identity_provider(settings, transport=auth_transport)
    app.state.orchestrator = PromptOrchestrator(
        CompletionClient(
            endpoint=settings.ai_endpoint,
            model=settings.ai_model,
            token=settings.ai_token,
            timeout=settings.ai_timeout_seconds,
            transport=ai_transport,
        ),
        temperature=settings.ai_temperature,
        max_tokens=settings.ai_max_tokens,
        expose_details=settings.expose_error_details,
    )

    # -----------------------------------------------------------------------
    # CORS – restrict to the frontend origin(s) from CORS_ORIGINS
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
    )
    app.add_middleware(_RequestLogMiddleware)

    register_exception_handlers(app, expose_details=settings.expose_error_details)

    # -----------------------------------------------------------------------
    # Routers
    # -----------------------------------------------------------------------
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(admin_router)
    app.include_router(ai_router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    logger.info(
        "HiiNen app created | auth_provider=%s ai_model=%s",
        settings.auth_provider,
        settings.ai_model,
    )
    return app
