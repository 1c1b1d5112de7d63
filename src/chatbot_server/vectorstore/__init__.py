"""
Vector Store Package

Pinecone REST index client and the Document-level store built on it.
"""

from .index import PineconeIndex, QueryMatch, VectorRecord
from .store import PineconeVectorStore

__all__ = [
    "PineconeIndex",
    "QueryMatch",
    "VectorRecord",
    "PineconeVectorStore",
]
