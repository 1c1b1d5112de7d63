"""
Document Data Models

This module defines the canonical unit of text moved through the system:
one Document per CSV row on the way in, one Document per vector match on
the way out of retrieval.
"""

from __future__ import annotations

from typing import Dict

from pydantic import BaseModel, ConfigDict, Field


class Document(BaseModel):
    """
    A single text document with string metadata.

    Instances are immutable once created.
    """

    content: str = Field(
        ...,
        description="Text that is embedded and later injected into the prompt.",
    )

    metadata: Dict[str, str] = Field(
        default_factory=dict,
        description="Flat string metadata, e.g. the CSV source path and row index.",
    )

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )
