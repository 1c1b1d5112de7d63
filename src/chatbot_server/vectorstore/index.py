"""
Pinecone Index Client

This module talks to a managed Pinecone index over its REST API.

Key Properties
--------------
- The data-plane host is resolved once from the control plane by index name
- Namespaced upsert and filtered similarity query
- Transport errors and malformed responses surface as VectorStoreError
- Fully testable with an injected httpx transport
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from ..core.errors import ConfigurationError, VectorStoreError

logger = logging.getLogger("chatbot.pinecone")

PINECONE_API_VERSION = "2024-07"


# ---------------------------------------------------------------------
# Wire Models
# ---------------------------------------------------------------------

class VectorRecord(BaseModel):
    """
    One vector as stored in the index.
    """
    id: str = Field(..., min_length=1)
    values: List[float] = Field(..., min_length=1)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid", frozen=True)


class QueryMatch(BaseModel):
    """
    One similarity match returned by a query.
    """
    id: str
    score: float = 0.0
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")


# ---------------------------------------------------------------------
# Index Client
# ---------------------------------------------------------------------

class PineconeIndex:
    """
    Async REST client for a single Pinecone index.

    Holds no per-request state besides the cached data-plane host, so one
    instance is shared across requests.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        index_name: Optional[str] = None,
        control_url: str = "https://api.pinecone.io",
        host: Optional[str] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Parameters
        ----------
        api_key : Optional[str]
            Pinecone API key. Checked on first call.

        index_name : Optional[str]
            Name of the index. Checked on first call unless `host` is given.

        control_url : str
            Control-plane base URL used to resolve the index host.

        host : Optional[str]
            Data-plane host; skips control-plane resolution when provided.

        timeout : float
            HTTP timeout for each request.

        transport : Optional[httpx.AsyncBaseTransport]
            Optional transport override (used by tests).
        """
        self.api_key = api_key
        self.index_name = index_name
        self.control_url = control_url.rstrip("/")
        self.timeout = timeout
        self._host = self._normalize_host(host) if host else None
        self._host_lock = asyncio.Lock()
        self._transport = transport

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def upsert(self, vectors: List[VectorRecord], namespace: str) -> int:
        """
        Insert or update vectors in `namespace`.

        Returns
        -------
        int
            The upserted count reported by Pinecone.
        """
        if not vectors:
            return 0

        payload = {
            "vectors": [v.model_dump() for v in vectors],
            "namespace": namespace,
        }
        data = await self._post("/vectors/upsert", payload)
        count = data.get("upsertedCount", len(vectors))
        logger.debug("Upserted %s vectors into namespace %r", count, namespace)
        return int(count)

    async def query(
        self,
        vector: List[float],
        top_k: int,
        namespace: str,
        filter: Optional[Dict[str, Any]] = None,
    ) -> List[QueryMatch]:
        """
        Return the `top_k` nearest vectors in `namespace`, best match first.
        """
        payload: Dict[str, Any] = {
            "vector": vector,
            "topK": top_k,
            "namespace": namespace,
            "includeMetadata": True,
            "includeValues": False,
        }
        if filter:
            payload["filter"] = filter

        data = await self._post("/query", payload)
        matches = data.get("matches", [])
        if not isinstance(matches, list):
            raise VectorStoreError("Pinecone query response 'matches' must be a list.")

        try:
            return [QueryMatch(**m) for m in matches]
        except (TypeError, ValueError) as exc:
            raise VectorStoreError("Malformed match in Pinecone query response.") from exc

    async def describe_index_stats(self) -> Dict[str, Any]:
        return await self._post("/describe_index_stats", {})

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _normalize_host(host: str) -> str:
        if host.startswith(("http://", "https://")):
            return host.rstrip("/")
        return f"https://{host.rstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        if not self.api_key:
            raise ConfigurationError("PINECONE_API_KEY is not configured.")
        return {
            "Api-Key": self.api_key,
            "X-Pinecone-API-Version": PINECONE_API_VERSION,
        }

    async def _resolve_host(self) -> str:
        if self._host:
            return self._host

        async with self._host_lock:
            if self._host:
                return self._host

            if not self.index_name:
                raise ConfigurationError("PINECONE_INDEX_NAME is not configured.")

            url = f"{self.control_url}/indexes/{self.index_name}"
            try:
                async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                    resp = await client.get(url, headers=self._headers())
                resp.raise_for_status()
            except httpx.HTTPError as exc:
                logger.error(
                    "Failed to describe index %r (%s): %s",
                    self.index_name,
                    type(exc).__name__,
                    exc,
                )
                raise VectorStoreError(
                    f"Could not resolve Pinecone index '{self.index_name}': {type(exc).__name__}"
                ) from exc

            description = self._decode(resp, f"/indexes/{self.index_name}")
            host = description.get("host")
            if not isinstance(host, str) or not host:
                raise VectorStoreError(
                    f"Pinecone index '{self.index_name}' description has no host."
                )

            self._host = self._normalize_host(host)
            logger.info("Resolved Pinecone index %r to %s", self.index_name, self._host)
            return self._host

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        host = await self._resolve_host()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(f"{host}{path}", json=payload, headers=self._headers())
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Pinecone request %s failed (%s): %s", path, type(exc).__name__, exc)
            raise VectorStoreError(
                f"Pinecone request {path} failed: {type(exc).__name__}"
            ) from exc

        return self._decode(resp, path)

    @staticmethod
    def _decode(resp: httpx.Response, path: str) -> Dict[str, Any]:
        try:
            data = resp.json()
        except ValueError as exc:
            logger.error("Pinecone returned a non-JSON body for %s", path)
            raise VectorStoreError(f"Pinecone response for {path} is not valid JSON.") from exc
        if not isinstance(data, dict):
            raise VectorStoreError(f"Unexpected Pinecone response for {path}.")
        return data
