"""
Embedding Client

Calls the OpenAI embeddings REST endpoint for the ingestion and answer
pipelines. Inputs are sent in batches, one request at a time, and every
response is checked before its vectors are handed back.
"""

from __future__ import annotations

from typing import Any, List, Sequence, Optional
import logging
import httpx

from ..core.errors import ConfigurationError, EmbeddingError

logger = logging.getLogger("chatbot.embedder")


class Embedder:
    """
    Async OpenAI embeddings client.

    Holds configuration only; one instance is shared by all requests.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "text-embedding-3-small",
        base_url: str = "https://api.openai.com/v1",
        batch_size: int = 512,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Parameters
        ----------
        api_key : Optional[str]
            OpenAI API key. Checked on the first call.

        model : str
            Embedding model identifier.

        base_url : str
            Base URL of the OpenAI-compatible API.

        batch_size : int
            Default number of texts per request.

        timeout : float
            HTTP timeout for each request.

        transport : Optional[httpx.AsyncBaseTransport]
            Transport override for tests.
        """
        self.api_key = api_key
        self.model = model
        self.url = f"{base_url.rstrip('/')}/embeddings"
        self.batch_size = batch_size
        self.timeout = timeout
        self._transport = transport

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def embed(
        self,
        texts: Sequence[str],
        batch_size: Optional[int] = None,
    ) -> List[List[float]]:
        """
        Embed `texts`, returning one vector per text in input order.

        Raises
        ------
        ConfigurationError
            If no API key is configured.

        EmbeddingError
            If a request fails or a response is malformed.
        """
        if not texts:
            return []

        if not self.api_key:
            raise ConfigurationError("OPENAI_API_KEY is not configured.")

        size = batch_size or self.batch_size
        vectors: List[List[float]] = []

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            for start in range(0, len(texts), size):
                batch = list(texts[start : start + size])
                data = await self._request(client, batch)
                batch_vectors = self._parse_vectors(data)
                if len(batch_vectors) != len(batch):
                    raise EmbeddingError(
                        f"Expected {len(batch)} embeddings, received {len(batch_vectors)}."
                    )
                vectors.extend(batch_vectors)

        logger.debug("Embedded %d texts with %s", len(vectors), self.model)
        return vectors

    async def embed_query(self, text: str) -> List[float]:
        """Embed a single query string."""
        vectors = await self.embed([text])
        return vectors[0]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _request(self, client: httpx.AsyncClient, batch: List[str]) -> Any:
        try:
            response = await client.post(
                self.url,
                json={"model": self.model, "input": batch},
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error(
                "Embeddings call for %d texts failed (%s): %s",
                len(batch),
                type(exc).__name__,
                exc,
            )
            raise EmbeddingError(
                f"Embedding request failed: {type(exc).__name__}"
            ) from exc

        try:
            return response.json()
        except ValueError as exc:
            logger.error("Embeddings endpoint returned a non-JSON body")
            raise EmbeddingError("Embedding response is not valid JSON.") from exc

    @staticmethod
    def _parse_vectors(data: Any) -> List[List[float]]:
        """
        Pull the vectors out of `{"data": [{"index": i, "embedding": [...]}]}`.

        Records are put back in `index` order when every record carries one.
        """
        records = data.get("data") if isinstance(data, dict) else None
        if not isinstance(records, list):
            raise EmbeddingError("Embedding response has no 'data' list.")

        if all(isinstance(r, dict) and isinstance(r.get("index"), int) for r in records):
            records = sorted(records, key=lambda r: r["index"])

        vectors: List[List[float]] = []
        for position, record in enumerate(records):
            values = record.get("embedding") if isinstance(record, dict) else None
            if not isinstance(values, list) or not all(
                isinstance(x, (float, int)) for x in values
            ):
                raise EmbeddingError(f"Bad embedding record at position {position}.")
            vectors.append([float(x) for x in values])

        return vectors
