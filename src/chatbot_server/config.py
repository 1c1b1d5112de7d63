"""
Application Configuration

Settings are read from the environment (and an optional `.env` file) by
pydantic-settings. Credentials are optional at import time so the server can
start without them; the client that needs a missing value raises
`ConfigurationError` on first use.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class PipelineOptions(BaseModel):
    """
    Options shared by the ingestion and answer pipelines.

    Both pipelines read the same `namespace`, so upserted vectors and
    retrieval always target one partition of the index.
    """

    namespace: str = Field(..., min_length=1)
    question: str = Field(..., min_length=1)
    batch_concurrency: int = Field(..., ge=1)
    batch_size: int = Field(..., ge=1, le=1000)
    csv_path: str = Field(..., min_length=1)
    retrieval_top_k: int = Field(..., ge=1)

    model_config = ConfigDict(frozen=True, extra="forbid")


class Settings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 9000
    log_level: str = "INFO"

    # Single origin allowed by CORS (the frontend app URL)
    frontend_url: Optional[str] = None

    openai_api_key: Optional[SecretStr] = None
    openai_base_url: str = "https://api.openai.com/v1"
    embedding_model: str = "text-embedding-3-small"
    embedding_batch_size: int = 512
    chat_model: str = "gpt-3.5-turbo"
    chat_temperature: float = 0.0

    pinecone_api_key: Optional[SecretStr] = None
    pinecone_index_name: Optional[str] = None
    pinecone_control_url: str = "https://api.pinecone.io"

    http_timeout: float = 60.0

    csv_path: str = "data.csv"
    namespace: str = "data1"
    question: str = "Show me the all cars you have with all details?"
    batch_concurrency: int = 5
    batch_size: int = 1000  # Pinecone accepts at most 1000 vectors per upsert
    retrieval_top_k: int = 4

    job_history_size: int = 100

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    def pipeline_options(self) -> PipelineOptions:
        return PipelineOptions(
            namespace=self.namespace,
            question=self.question,
            batch_concurrency=self.batch_concurrency,
            batch_size=self.batch_size,
            csv_path=self.csv_path,
            retrieval_top_k=self.retrieval_top_k,
        )

    def allowed_origins(self) -> List[str]:
        # Browsers send Origin without a trailing slash
        if not self.frontend_url:
            return []
        return [self.frontend_url.rstrip("/")]

    def missing_settings(self) -> List[str]:
        """Names of the settings external calls will need but are unset."""
        missing = []
        if self.openai_api_key is None:
            missing.append("OPENAI_API_KEY")
        if self.pinecone_api_key is None:
            missing.append("PINECONE_API_KEY")
        if not self.pinecone_index_name:
            missing.append("PINECONE_INDEX_NAME")
        return missing


settings = Settings()
