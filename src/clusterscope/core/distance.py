"""
Pairwise distance matrix construction over numeric rows.

This module provides the DistanceMatrix container and the block-parallel
builder that fills it. Each unordered row pair is computed once and mirrored;
the per-pair accumulation always runs over columns in the same order, so the
result is bit-identical whatever the worker count or block size.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from enum import Enum

import numpy as np
import polars as pl

from clusterscope.core.exceptions import InvalidInputError, InvalidMetricError

logger = logging.getLogger(__name__)

DEFAULT_BLOCK_SIZE = 256


class DistanceMetric(str, Enum):
    """Row-to-row distance metric."""

    EUCLIDEAN = "euclidean"
    MANHATTAN = "manhattan"

    @classmethod
    def parse(cls, value: DistanceMetric | str) -> DistanceMetric:
        """
        Resolve a selector value, failing on anything unrecognized.

        Raises:
            InvalidMetricError: If value does not name a supported metric.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidMetricError(value, [m.value for m in cls])


class DistanceMatrix:
    """
    Symmetric n x n matrix of pairwise row distances.

    Invariants: symmetric, zero diagonal, non-negative. The underlying array
    is read-only once constructed, so the matrix can be shared freely with
    rendering collaborators.
    """

    __slots__ = ("_array", "_metric")

    def __init__(
        self,
        array: np.ndarray,
        metric: DistanceMetric = DistanceMetric.EUCLIDEAN,
    ) -> None:
        """
        Wrap a precomputed distance array.

        Args:
            array: Square float array of distances.
            metric: Metric the distances were computed with.

        Raises:
            InvalidInputError: If the array is not 2-D and square, or is not
                symmetric with a zero diagonal and non-negative entries.
        """
        array = np.asarray(array, dtype=np.float64)
        if array.ndim != 2 or array.shape[0] != array.shape[1]:
            raise InvalidInputError(
                message=f"Distance matrix must be square, got shape {array.shape}",
            )
        if not np.all(array >= 0.0):
            raise InvalidInputError(
                message="Distance matrix has negative or NaN entries",
            )
        if np.any(np.diag(array) != 0.0):
            raise InvalidInputError(
                message="Distance matrix diagonal must be zero",
            )
        if not np.allclose(array, array.T):
            raise InvalidInputError(
                message="Distance matrix must be symmetric",
                suggestion="Build matrices with build_distance_matrix().",
            )
        array = array.copy()
        array.flags.writeable = False
        self._array = array
        self._metric = metric

    @property
    def metric(self) -> DistanceMetric:
        return self._metric

    @property
    def size(self) -> int:
        """Number of rows (and columns) in the matrix."""
        return int(self._array.shape[0])

    def __len__(self) -> int:
        return self.size

    @property
    def values(self) -> np.ndarray:
        """Read-only view of the distance array."""
        return self._array

    def get(self, i: int, j: int) -> float:
        """Distance between rows i and j."""
        return float(self._array[i, j])

    def submatrix(self, rows: Iterable[int], cols: Iterable[int]) -> np.ndarray:
        """Distances between every index in rows and every index in cols."""
        return self._array[np.ix_(np.asarray(list(rows)), np.asarray(list(cols)))]

    def to_polars(self) -> pl.DataFrame:
        """
        Convert to a Polars DataFrame.

        Columns are named by row index; a leading ``row`` column carries the
        row index of each line.
        """
        data: dict[str, list] = {"row": list(range(self.size))}
        for j in range(self.size):
            data[str(j)] = self._array[:, j].tolist()
        return pl.DataFrame(data)

    def __repr__(self) -> str:
        return f"DistanceMatrix(size={self.size}, metric={self._metric.value!r})"


def _row_distances(
    matrix: np.ndarray,
    i: int,
    metric: DistanceMetric,
) -> np.ndarray:
    """
    Distances from row i to every later row j > i.

    Accumulates one column at a time (k = 0..d-1) so the floating-point
    summation order of each pair never depends on how rows are batched.
    """
    diff = matrix[i + 1:] - matrix[i]
    acc = np.zeros(diff.shape[0], dtype=np.float64)
    for k in range(diff.shape[1]):
        column = diff[:, k]
        if metric is DistanceMetric.EUCLIDEAN:
            acc += column * column
        else:
            acc += np.abs(column)
    if metric is DistanceMetric.EUCLIDEAN:
        np.sqrt(acc, out=acc)
    return acc


def _compute_block(
    matrix: np.ndarray,
    start: int,
    stop: int,
    metric: DistanceMetric,
) -> list[tuple[int, np.ndarray]]:
    """Upper-triangle distances for rows [start, stop)."""
    return [(i, _row_distances(matrix, i, metric)) for i in range(start, stop)]


def build_distance_matrix(
    matrix: np.ndarray,
    metric: DistanceMetric | str = DistanceMetric.EUCLIDEAN,
    num_workers: int = 1,
    block_size: int = DEFAULT_BLOCK_SIZE,
) -> DistanceMatrix:
    """
    Compute the full pairwise distance matrix of a numeric matrix.

    Euclidean: ``sqrt(sum_k (x[i][k] - x[j][k])^2)``.
    Manhattan: ``sum_k |x[i][k] - x[j][k]|``.

    Rows are split into blocks of ``block_size``; with ``num_workers > 1``
    blocks are computed on a thread pool (NumPy releases the GIL for the
    vector arithmetic). Only the upper triangle is computed and then mirrored;
    the diagonal is left at zero.

    Args:
        matrix: Float array of shape (n_rows, n_columns).
        metric: Distance metric selector.
        num_workers: Number of worker threads (1 = compute inline).
        block_size: Rows per work unit.

    Returns:
        DistanceMatrix of shape (n_rows, n_rows).

    Raises:
        InvalidMetricError: If metric is not recognized.
        InvalidInputError: If matrix is not 2-D or the worker settings are invalid.
    """
    metric = DistanceMetric.parse(metric)

    data = np.asarray(matrix, dtype=np.float64)
    if data.ndim != 2:
        raise InvalidInputError(
            message=f"Numeric matrix must be 2-D, got {data.ndim} dimension(s)",
        )
    if num_workers < 1 or block_size < 1:
        raise InvalidInputError(
            message=(
                f"num_workers and block_size must be >= 1, "
                f"got {num_workers} and {block_size}"
            ),
        )

    n = data.shape[0]
    result = np.zeros((n, n), dtype=np.float64)
    blocks = [(start, min(start + block_size, n)) for start in range(0, n, block_size)]

    def store(rows: list[tuple[int, np.ndarray]]) -> None:
        for i, dists in rows:
            result[i, i + 1:] = dists
            result[i + 1:, i] = dists

    if num_workers == 1 or len(blocks) <= 1:
        for start, stop in blocks:
            store(_compute_block(data, start, stop, metric))
    else:
        logger.debug(f"Computing {len(blocks)} distance blocks on {num_workers} threads")
        with ThreadPoolExecutor(max_workers=num_workers) as executor:
            futures = [
                executor.submit(_compute_block, data, start, stop, metric)
                for start, stop in blocks
            ]
            for future in as_completed(futures):
                store(future.result())

    logger.info(f"Built {n}x{n} {metric.value} distance matrix over {data.shape[1]} columns")
    return DistanceMatrix(result, metric=metric)
