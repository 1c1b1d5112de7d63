"""
CSV Document Source

Reads a whole CSV file and turns every data row into one Document. The first
row is the header; each Document's content lists the row as
`column: value` lines, and its metadata records the source path and the
0-based row index.
"""

from __future__ import annotations

import asyncio
import csv
import logging
from pathlib import Path
from typing import Dict, List, Optional

from .models import Document
from ..core.errors import DocumentSourceError

logger = logging.getLogger("chatbot.documents")


def _row_to_content(row: Dict[Optional[str], object]) -> str:
    lines = []
    for key, value in row.items():
        # Cells beyond the header width are collected by DictReader under None
        if key is None:
            extra = value if isinstance(value, list) else [value]
            lines.extend(str(v).strip() for v in extra)
            continue
        text = "" if value is None else str(value)
        lines.append(f"{key.strip()}: {text.strip()}")
    return "\n".join(lines)


def read_csv_documents(path: str | Path, encoding: str = "utf-8") -> List[Document]:
    """
    Read every row of a CSV file into a Document.

    Parameters
    ----------
    path : str | Path
        Location of the CSV file. Relative paths resolve against the
        process working directory.

    encoding : str
        File encoding.

    Returns
    -------
    List[Document]
        One Document per data row, in file order.

    Raises
    ------
    DocumentSourceError
        If the file is missing or cannot be read.
    """
    csv_path = Path(path)
    source = str(path)

    try:
        with csv_path.open("r", encoding=encoding, newline="") as handle:
            reader = csv.DictReader(handle)
            documents = [
                Document(
                    content=_row_to_content(row),
                    metadata={"source": source, "row": str(index)},
                )
                for index, row in enumerate(reader)
            ]
    except FileNotFoundError as exc:
        raise DocumentSourceError(f"CSV file not found: {source}") from exc
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise DocumentSourceError(
            f"Failed to read CSV file {source}: {type(exc).__name__}"
        ) from exc

    logger.info("Loaded %d documents from %s", len(documents), source)
    return documents


async def load_csv_documents(path: str | Path, encoding: str = "utf-8") -> List[Document]:
    """Read the CSV off the event loop thread."""
    return await asyncio.to_thread(read_csv_documents, path, encoding)
