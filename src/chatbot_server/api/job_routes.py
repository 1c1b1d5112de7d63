"""
Job Routes

Read-only view of the background jobs started by `/upsert` and `/getanswer`.
Results of the answer pipeline are only written to the server log and are
not exposed here.
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException, status

from .dependencies import get_job_runner
from .models import JobResponse
from ..jobs.runner import JobRunner

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("", response_model=List[JobResponse], summary="List recent background jobs")
async def list_jobs(
    runner: Annotated[JobRunner, Depends(get_job_runner)],
) -> List[JobResponse]:
    return [JobResponse.from_job(job) for job in runner.list_jobs()]


@router.get("/{job_id}", response_model=JobResponse, summary="Get a background job")
async def get_job(
    job_id: str,
    runner: Annotated[JobRunner, Depends(get_job_runner)],
) -> JobResponse:
    job = runner.get(job_id)
    if job is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Job '{job_id}' not found",
        )
    return JobResponse.from_job(job)
