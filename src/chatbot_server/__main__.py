"""Run the server with uvicorn: `python -m chatbot_server`."""

import uvicorn

from .config import settings


def main() -> None:
    uvicorn.run(
        "chatbot_server.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
