"""
Chatbot Server Application Entry Point

This module defines the FastAPI application instance, creates the long-lived
service clients, registers all routers and middleware, configures global
exception handling, and provides a test-friendly application factory.

Design Goals
------------
- Explicit client initialization at startup, passed to pipelines by argument
- Centralized router registration
- Global exception safety net
- Test-friendly via create_app()
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, settings as default_settings
from .core.errors import unhandled_exception_handler
from .core.logging import log_requests, setup_logging
from .embeddings.embedder import Embedder
from .jobs.runner import JobRunner
from .llm.client import ChatModelClient
from .vectorstore import PineconeIndex

from .api import (
    chatbot_routes,
    health_routes,
    job_routes,
    stats_routes,
)


logger = logging.getLogger("chatbot.app")


def _secret(value) -> Optional[str]:
    return value.get_secret_value() if value is not None else None


# ---------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Report configuration gaps at startup and stop background jobs at shutdown.

    Missing credentials do not stop the server; the pipeline that needs them
    fails with a ConfigurationError instead.
    """
    logger.info("Server is running on port %d", app.state.settings.port)

    missing = app.state.settings.missing_settings()
    if missing:
        logger.warning("Missing configuration: %s", ", ".join(missing))
    else:
        logger.info("Configuration validated successfully")

    yield

    logger.info("Shutting down chatbot-server")
    await app.state.job_runner.shutdown()


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration override. Defaults to the environment-derived settings.

    Returns
    -------
    FastAPI
        Fully configured FastAPI application.
    """
    settings = settings or default_settings
    setup_logging(settings.log_level)

    app = FastAPI(
        title="chatbot-server",
        version="1.0.0",
        lifespan=lifespan,
    )

    # --------------------------------------------------------------
    # Long-lived Clients
    # --------------------------------------------------------------

    openai_key = _secret(settings.openai_api_key)

    app.state.settings = settings
    app.state.embedder = Embedder(
        api_key=openai_key,
        model=settings.embedding_model,
        base_url=settings.openai_base_url,
        batch_size=settings.embedding_batch_size,
        timeout=settings.http_timeout,
    )
    app.state.chat_model = ChatModelClient(
        api_key=openai_key,
        model=settings.chat_model,
        temperature=settings.chat_temperature,
        base_url=settings.openai_base_url,
        timeout=settings.http_timeout,
    )
    app.state.pinecone_index = PineconeIndex(
        api_key=_secret(settings.pinecone_api_key),
        index_name=settings.pinecone_index_name,
        control_url=settings.pinecone_control_url,
        timeout=settings.http_timeout,
    )
    app.state.job_runner = JobRunner(max_history=settings.job_history_size)

    # --------------------------------------------------------------
    # Global Exception Handling
    # --------------------------------------------------------------

    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------
    # Middleware
    # --------------------------------------------------------------

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins(),
    )
    # Added last so it wraps CORS and logs preflight requests too
    app.middleware("http")(log_requests)

    # --------------------------------------------------------------
    # Router Registration
    # --------------------------------------------------------------

    app.include_router(health_routes.router)
    app.include_router(stats_routes.router)
    app.include_router(chatbot_routes.router)
    app.include_router(job_routes.router)

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn)
# ---------------------------------------------------------------------

app = create_app()
