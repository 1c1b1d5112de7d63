"""
Index Statistics

Exposes the Pinecone index statistics (vector counts per namespace) so an
operator can see the effect of `/upsert` without reading the server logs.
"""

from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends

from .dependencies import get_pinecone_index
from ..vectorstore import PineconeIndex

router = APIRouter(prefix="/api", tags=["stats"])


@router.get("/stats", summary="Describe the vector index")
async def index_stats(
    index: Annotated[PineconeIndex, Depends(get_pinecone_index)],
) -> Dict[str, Any]:
    # Failures go to the global exception handler
    return await index.describe_index_stats()
