"""
Tabular dataset loading.

Reads delimited text files into headers plus raw string rows, the input
shape the clustering pipeline expects. The first line is the header; rows
with a different number of fields are dropped, so the pipeline only ever
sees rectangular data.
"""

from __future__ import annotations

import csv
import gzip
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from clusterscope.core.exceptions import EmptyDatasetError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dataset:
    """Headers plus rows of raw cell strings."""

    headers: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]
    dropped_rows: int = 0

    def __len__(self) -> int:
        return len(self.rows)


def _detect_delimiter(path: Path) -> str:
    name = path.name.lower()
    if name.endswith(".tsv") or name.endswith(".tsv.gz") or name.endswith(".tab"):
        return "\t"
    return ","


@contextmanager
def _open_text(path: Path) -> Iterator[TextIO]:
    if path.suffix == ".gz":
        handle = gzip.open(path, "rt", newline="", encoding="utf-8")
    else:
        handle = path.open("r", newline="", encoding="utf-8")
    try:
        yield handle
    finally:
        handle.close()


def load_dataset(path: Path, delimiter: str | None = None) -> Dataset:
    """
    Load a CSV/TSV file (optionally gzip compressed).

    Args:
        path: Path to the delimited text file.
        delimiter: Field delimiter. Detected from the extension when omitted
            (tab for .tsv/.tab, comma otherwise).

    Returns:
        Dataset with the header line and every row of matching length.

    Raises:
        FileNotFoundError: If path does not exist.
        EmptyDatasetError: If the file has no header or no valid data row.
    """
    if not path.exists():
        raise FileNotFoundError(f"Dataset file not found: {path}")

    sep = delimiter or _detect_delimiter(path)
    with _open_text(path) as handle:
        records = [r for r in csv.reader(handle, delimiter=sep) if r]

    if not records:
        raise EmptyDatasetError(str(path))

    headers = tuple(records[0])
    rows = tuple(tuple(r) for r in records[1:] if len(r) == len(headers))
    dropped = len(records) - 1 - len(rows)

    if dropped:
        logger.warning(
            f"Dropped {dropped} row(s) of {path.name} whose field count "
            f"differs from the {len(headers)} header columns"
        )
    if not rows:
        raise EmptyDatasetError(str(path))

    logger.info(f"Loaded {len(rows)} rows x {len(headers)} columns from {path}")
    return Dataset(headers=headers, rows=rows, dropped_rows=dropped)
