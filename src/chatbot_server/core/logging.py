"""Logging setup and the request logging middleware."""

import logging

from fastapi import Request

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"

access_logger = logging.getLogger("chatbot.access")


def setup_logging(level: str = "INFO") -> None:
    """
    Send the `chatbot.*` loggers to stderr at `level`.

    Safe to call more than once. The package logger gets its own handler so
    records are emitted however the process was launched, including under
    `uvicorn chatbot_server.main:app` where only `uvicorn.*` is configured.
    """
    package_logger = logging.getLogger("chatbot")
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        package_logger.addHandler(handler)


def format_request_line(request: Request) -> str:
    url = request.url.path
    if request.url.query:
        url = f"{url}?{request.url.query}"
    return f"{request.method} {url}"


async def log_requests(request: Request, call_next):
    """Log every request as `METHOD URL` before it is dispatched."""
    access_logger.info(format_request_line(request))
    return await call_next(request)
