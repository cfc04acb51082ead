"""
Numeric projection of raw tabular datasets.

Reduces a rectangular dataset of raw cell values (strings or numbers) to the
columns in which every row holds a finite number. The resulting float matrix
is the input of the distance computation.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

logger = logging.getLogger(__name__)

Cell = str | int | float
Row = Sequence[Cell]


def parse_number(value: object) -> float | None:
    """
    Parse a raw cell value as a finite float.

    Numbers are accepted as-is, strings are stripped and parsed with Python
    float syntax. Booleans, blanks, partial numbers such as ``"12abc"`` and
    non-finite values (``nan``, ``inf``) are rejected.

    Args:
        value: Raw cell value.

    Returns:
        The parsed float, or None if the value is not a finite number.

    Example:
        >>> parse_number(" 3.5 ")
        3.5
        >>> parse_number("n/a") is None
        True
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(number):
        return None
    return number


@dataclass(frozen=True)
class NumericProjection:
    """
    Numeric-only view of a dataset.

    Attributes:
        matrix: Float array of shape (n_rows, n_numeric_columns). Row i is
            original row i.
        headers: Names of the qualifying columns, in original order.
        column_indices: Positions of the qualifying columns in the original
            header list.
    """

    matrix: np.ndarray
    headers: tuple[str, ...]
    column_indices: tuple[int, ...] = field(default=())

    @property
    def n_rows(self) -> int:
        return int(self.matrix.shape[0])

    @property
    def n_columns(self) -> int:
        return len(self.headers)

    @property
    def is_empty(self) -> bool:
        """True when there is no row or no qualifying column to cluster on."""
        return self.n_rows == 0 or self.n_columns == 0


def project_numeric(headers: Sequence[str], rows: Sequence[Row]) -> NumericProjection:
    """
    Keep only the columns whose every cell parses as a finite number.

    A single non-numeric cell disqualifies its whole column. When no column
    qualifies the projection is empty; this is a normal outcome that callers
    check with ``NumericProjection.is_empty`` rather than an error.

    Rows are assumed to be uniform in length (one value per header); callers
    validate this before projecting.

    Args:
        headers: Column names of the dataset.
        rows: Raw rows, each with one value per header.

    Returns:
        NumericProjection with values coerced to float.
    """
    n_rows = len(rows)
    parsed_columns: list[list[float]] = []
    kept_headers: list[str] = []
    kept_indices: list[int] = []

    for col_idx, name in enumerate(headers):
        values: list[float] = []
        for row in rows:
            number = parse_number(row[col_idx])
            if number is None:
                logger.debug(f"Column '{name}' is not numeric (value {row[col_idx]!r})")
                break
            values.append(number)
        else:
            if n_rows > 0:
                parsed_columns.append(values)
                kept_headers.append(name)
                kept_indices.append(col_idx)

    if parsed_columns:
        matrix = np.array(parsed_columns, dtype=np.float64).T.copy()
    else:
        matrix = np.empty((n_rows, 0), dtype=np.float64)

    logger.info(
        f"Numeric projection: {len(kept_headers)}/{len(headers)} columns, {n_rows} rows"
    )
    return NumericProjection(
        matrix=matrix,
        headers=tuple(kept_headers),
        column_indices=tuple(kept_indices),
    )
