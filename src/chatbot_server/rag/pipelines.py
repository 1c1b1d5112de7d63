"""
Ingestion and Answer Pipelines

Both pipelines are linear sequences over the external clients. They take
every collaborator as an argument and keep no state of their own.

Ingestion
---------
1. Read all CSV rows into Documents.
2. Embed every Document.
3. Upsert the vectors into the configured namespace in bounded batches.

Answer
------
1. Open a fresh store handle for the namespace.
2. Retrieve the documents closest to the question, filtered to the namespace.
3. Assemble the prompt.
4. Call the chat model and log the reply.
"""

from __future__ import annotations

import logging

from ..config import PipelineOptions
from ..documents.csv_source import load_csv_documents
from ..embeddings.embedder import Embedder
from ..llm.client import ChatModelClient
from ..vectorstore import PineconeIndex, PineconeVectorStore
from .prompts import assemble_prompt

logger = logging.getLogger("chatbot.pipeline")


def namespace_filter(namespace: str) -> dict:
    return {"namespace": {"$eq": namespace}}


async def run_ingestion(
    options: PipelineOptions,
    embedder: Embedder,
    index: PineconeIndex,
) -> int:
    """
    Load the CSV source and upsert every row into the vector store.

    Returns
    -------
    int
        Number of documents upserted.
    """
    documents = await load_csv_documents(options.csv_path)
    logger.info("Ingesting %d documents into namespace %r", len(documents), options.namespace)

    await PineconeVectorStore.from_documents(
        documents,
        embedder,
        index,
        namespace=options.namespace,
        batch_size=options.batch_size,
        max_concurrency=options.batch_concurrency,
    )

    logger.info("Ingestion complete: %d documents", len(documents))
    return len(documents)


async def run_answer(
    options: PipelineOptions,
    embedder: Embedder,
    index: PineconeIndex,
    chat_model: ChatModelClient,
) -> str:
    """
    Answer the configured question from retrieved context.

    An empty retrieval still goes to the chat model with an empty context.
    """
    store = PineconeVectorStore.from_existing_index(
        embedder,
        index,
        namespace=options.namespace,
    )

    documents = await store.similarity_search(
        options.question,
        k=options.retrieval_top_k,
        filter=namespace_filter(options.namespace),
    )
    logger.info("Retrieved %d documents for question %r", len(documents), options.question)

    prompt = assemble_prompt(options.question, documents)
    answer = await chat_model.complete(prompt)

    logger.info("Final answer: %s", answer)
    return answer
