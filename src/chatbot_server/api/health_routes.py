from typing import Annotated

from fastapi import APIRouter, Depends

from .dependencies import get_job_runner, get_settings
from .models import HealthResponse, MessageResponse
from ..config import Settings
from ..jobs.runner import JobRunner, job_counts

router = APIRouter(tags=["health"])

HELLO_MESSAGE = "Hello from the server!"


@router.get("/api", response_model=MessageResponse)
def hello() -> MessageResponse:
    return MessageResponse(message=HELLO_MESSAGE)


@router.get("/health", response_model=HealthResponse)
def health(
    settings: Annotated[Settings, Depends(get_settings)],
    runner: Annotated[JobRunner, Depends(get_job_runner)],
) -> HealthResponse:
    missing = settings.missing_settings()
    return HealthResponse(
        status="degraded" if missing else "ok",
        missing_settings=missing,
        jobs=job_counts(runner.list_jobs()),
    )
