"""Prompt template for retrieval-augmented answers."""

from typing import Sequence

from ..documents.models import Document

ANSWER_PROMPT_TEMPLATE = """Answer the question based only on the following context:
{context}
Question: {question}"""

CONTEXT_SEPARATOR = "\n\n"


def join_documents(documents: Sequence[Document]) -> str:
    return CONTEXT_SEPARATOR.join(doc.content for doc in documents)


def assemble_prompt(question: str, documents: Sequence[Document]) -> str:
    """Fill the answer template with the joined document contents."""
    return ANSWER_PROMPT_TEMPLATE.format(
        context=join_documents(documents),
        question=question,
    )
