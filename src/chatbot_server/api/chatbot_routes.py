"""
Chatbot Trigger Routes

`/upsert` and `/getanswer` acknowledge immediately and run their pipeline as
a background job. The caller never sees the pipeline outcome: failures are
logged and recorded on the job, and the answer text is only logged.

Responsibilities
----------------
1. Resolve the shared clients and pipeline options.
2. Spawn the pipeline on the job runner.
3. Return the plain-text acknowledgement with the job id in `X-Job-Id`.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from .dependencies import (
    get_chat_model,
    get_embedder,
    get_job_runner,
    get_pinecone_index,
    get_settings,
)
from ..config import Settings
from ..embeddings.embedder import Embedder
from ..jobs.runner import Job, JobRunner
from ..llm.client import ChatModelClient
from ..rag.pipelines import run_answer, run_ingestion
from ..vectorstore import PineconeIndex

router = APIRouter(tags=["chatbot"])

PROCESSING_STARTED = "Chatbot processing started"
JOB_ID_HEADER = "X-Job-Id"


def _accepted(job: Job) -> PlainTextResponse:
    return PlainTextResponse(PROCESSING_STARTED, headers={JOB_ID_HEADER: job.id})


@router.get("/upsert", response_class=PlainTextResponse, summary="Ingest the CSV source")
async def upsert(
    settings: Annotated[Settings, Depends(get_settings)],
    embedder: Annotated[Embedder, Depends(get_embedder)],
    index: Annotated[PineconeIndex, Depends(get_pinecone_index)],
    runner: Annotated[JobRunner, Depends(get_job_runner)],
) -> PlainTextResponse:
    options = settings.pipeline_options()
    job = runner.spawn("upsert", lambda: run_ingestion(options, embedder, index))
    return _accepted(job)


@router.get("/getanswer", response_class=PlainTextResponse, summary="Answer the configured question")
async def get_answer(
    settings: Annotated[Settings, Depends(get_settings)],
    embedder: Annotated[Embedder, Depends(get_embedder)],
    index: Annotated[PineconeIndex, Depends(get_pinecone_index)],
    chat_model: Annotated[ChatModelClient, Depends(get_chat_model)],
    runner: Annotated[JobRunner, Depends(get_job_runner)],
) -> PlainTextResponse:
    options = settings.pipeline_options()
    job = runner.spawn(
        "getanswer",
        lambda: run_answer(options, embedder, index, chat_model),
    )
    return _accepted(job)
