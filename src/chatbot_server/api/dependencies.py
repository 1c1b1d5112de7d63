"""
Request dependencies.

The long-lived clients are created once in `create_app()` and stored on
`app.state`; these getters hand them to routes so tests can replace them
through `app.dependency_overrides`.
"""

from fastapi import Request

from ..config import Settings
from ..embeddings.embedder import Embedder
from ..jobs.runner import JobRunner
from ..llm.client import ChatModelClient
from ..vectorstore import PineconeIndex


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_embedder(request: Request) -> Embedder:
    return request.app.state.embedder


def get_chat_model(request: Request) -> ChatModelClient:
    return request.app.state.chat_model


def get_pinecone_index(request: Request) -> PineconeIndex:
    return request.app.state.pinecone_index


def get_job_runner(request: Request) -> JobRunner:
    return request.app.state.job_runner
