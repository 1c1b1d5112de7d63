"""
Vector Store

Document-level view over a Pinecone index: embeds Documents, stores them as
namespaced vectors with their text in metadata, and maps similarity matches
back to Documents.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .index import PineconeIndex, VectorRecord
from ..documents.models import Document
from ..embeddings.embedder import Embedder

logger = logging.getLogger("chatbot.pinecone")

TEXT_KEY = "text"
NAMESPACE_KEY = "namespace"


class PineconeVectorStore:
    """
    Pinecone-backed store of Documents within one namespace.
    """

    def __init__(
        self,
        embedder: Embedder,
        index: PineconeIndex,
        namespace: str,
    ) -> None:
        """
        Parameters
        ----------
        embedder : Embedder
            Client used to embed documents and queries.
        index : PineconeIndex
            Target index.
        namespace : str
            Partition every upsert and query is scoped to.
        """
        self._embedder = embedder
        self._index = index
        self.namespace = namespace

    @classmethod
    def from_existing_index(
        cls,
        embedder: Embedder,
        index: PineconeIndex,
        namespace: str,
    ) -> "PineconeVectorStore":
        """Open a handle to vectors already stored under `namespace`."""
        return cls(embedder, index, namespace)

    @classmethod
    async def from_documents(
        cls,
        documents: Sequence[Document],
        embedder: Embedder,
        index: PineconeIndex,
        namespace: str,
        batch_size: int = 1000,
        max_concurrency: int = 5,
    ) -> "PineconeVectorStore":
        """Create a store and upsert `documents` into it."""
        store = cls(embedder, index, namespace)
        await store.add_documents(
            documents,
            batch_size=batch_size,
            max_concurrency=max_concurrency,
        )
        return store

    async def add_documents(
        self,
        documents: Sequence[Document],
        batch_size: int = 1000,
        max_concurrency: int = 5,
    ) -> List[str]:
        """
        Embed and upsert documents.

        Vectors are sent in batches of at most `batch_size`, with no more
        than `max_concurrency` batches in flight.

        Returns
        -------
        List[str]
            Assigned vector ids, aligned with `documents`.
        """
        if not documents:
            return []

        embeddings = await self._embedder.embed([d.content for d in documents])
        return await self.add_vectors(
            embeddings,
            documents,
            batch_size=batch_size,
            max_concurrency=max_concurrency,
        )

    async def add_vectors(
        self,
        embeddings: Sequence[List[float]],
        documents: Sequence[Document],
        batch_size: int = 1000,
        max_concurrency: int = 5,
    ) -> List[str]:
        if len(embeddings) != len(documents):
            raise ValueError(
                f"Got {len(embeddings)} embeddings for {len(documents)} documents."
            )

        records = [
            VectorRecord(
                id=str(uuid.uuid4()),
                values=list(embedding),
                metadata={
                    **doc.metadata,
                    TEXT_KEY: doc.content,
                    NAMESPACE_KEY: self.namespace,
                },
            )
            for embedding, doc in zip(embeddings, documents)
        ]

        batches = [
            records[start : start + batch_size]
            for start in range(0, len(records), batch_size)
        ]
        semaphore = asyncio.Semaphore(max_concurrency)

        async def _upsert(batch: List[VectorRecord]) -> int:
            async with semaphore:
                return await self._index.upsert(batch, namespace=self.namespace)

        tasks = [asyncio.create_task(_upsert(b)) for b in batches]
        try:
            counts = await asyncio.gather(*tasks)
        except BaseException:
            # One failed batch fails the whole upsert; stop the rest.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        logger.info(
            "Upserted %d vectors in %d batches into namespace %r",
            sum(counts),
            len(batches),
            self.namespace,
        )
        return [r.id for r in records]

    async def similarity_search_with_score(
        self,
        query: str,
        k: int = 4,
        filter: Optional[Dict[str, Any]] = None,
    ) -> List[Tuple[Document, float]]:
        """
        Return up to `k` Documents most similar to `query`, best first.

        Matches without stored text are skipped.
        """
        query_embedding = await self._embedder.embed_query(query)
        matches = await self._index.query(
            query_embedding,
            top_k=k,
            namespace=self.namespace,
            filter=filter,
        )

        results: List[Tuple[Document, float]] = []
        for match in matches:
            metadata = dict(match.metadata)
            text = metadata.pop(TEXT_KEY, None)
            if not isinstance(text, str):
                logger.warning("Skipping match %s without stored text", match.id)
                continue
            document = Document(
                content=text,
                metadata={key: str(value) for key, value in metadata.items()},
            )
            results.append((document, match.score))

        return results

    async def similarity_search(
        self,
        query: str,
        k: int = 4,
        filter: Optional[Dict[str, Any]] = None,
    ) -> List[Document]:
        results = await self.similarity_search_with_score(query, k=k, filter=filter)
        return [doc for doc, _ in results]
