"""
API Models

Pydantic models for the JSON responses of the server. The trigger routes
answer in plain text and have no model here.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Literal

from pydantic import BaseModel, Field, ConfigDict

from ..jobs.runner import Job


class MessageResponse(BaseModel):
    """
    Static acknowledgement returned by `GET /api`.
    """
    message: str

    model_config = ConfigDict(extra="forbid")


class HealthResponse(BaseModel):
    """
    Liveness and configuration readiness.
    """
    status: Literal["ok", "degraded"]
    missing_settings: List[str] = Field(default_factory=list)
    jobs: Dict[str, int] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")


class JobResponse(BaseModel):
    """
    Public view of a background job. Never includes pipeline results.
    """
    id: str
    name: str
    status: Literal["pending", "running", "succeeded", "failed"]
    created_at: datetime
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    error: Optional[str] = None

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_job(cls, job: Job) -> "JobResponse":
        return cls(
            id=job.id,
            name=job.name,
            status=job.status.value,
            created_at=job.created_at,
            started_at=job.started_at,
            finished_at=job.finished_at,
            error=job.error,
        )
