"""
Global Error Handling

This module defines the exception hierarchy used by the external service
clients and the application-wide handler for exceptions that reach the
FastAPI error path.

Design Goals
------------
- Never leak internal exception details to clients
- Log full stack traces internally for debugging
- Give each external collaborator its own failure type
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import PlainTextResponse

logger = logging.getLogger("chatbot.errors")

GENERIC_ERROR_MESSAGE = "Something broke!"


# ---------------------------------------------------------------------
# Exception Hierarchy
# ---------------------------------------------------------------------

class ChatbotError(RuntimeError):
    """Base error for all chatbot-server failures."""


class ConfigurationError(ChatbotError):
    """Raised when a required setting (credential, index name) is missing."""


class DocumentSourceError(ChatbotError):
    """Raised when the CSV document source cannot be read."""


class EmbeddingError(ChatbotError):
    """Raised when embedding generation fails."""


class VectorStoreError(ChatbotError):
    """Raised when a vector database call fails or returns malformed data."""


class ChatModelError(ChatbotError):
    """Raised when the chat completion call fails or returns malformed data."""


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> PlainTextResponse:
    """
    Catch-all handler for uncaught exceptions.

    Registered with FastAPI as the final safety net for any exception not
    handled by a route. Background pipelines never reach this handler; their
    failures are recorded by the job runner instead.

    Parameters
    ----------
    request : Request
        The incoming HTTP request that triggered the exception.

    exc : Exception
        The uncaught exception instance.

    Returns
    -------
    PlainTextResponse
        A 500 response carrying only a generic message.
    """
    logger.exception(
        "Unhandled exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )

    return PlainTextResponse(GENERIC_ERROR_MESSAGE, status_code=500)
