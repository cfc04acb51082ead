"""
Agglomerative hierarchical clustering.

Builds a binary merge tree bottom-up: start with one leaf per row, then
repeatedly merge the closest pair of active clusters until one root remains.

Tie-breaking is deterministic. Pairs (i, j) with i < j are scanned in
row-major order over the active-cluster list and a pair only replaces the
current best when its distance is strictly smaller, so the first minimal
pair encountered wins. Merged clusters are appended to the end of the list.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import Enum
from typing import Any

import numpy as np

from clusterscope.core.distance import DistanceMatrix
from clusterscope.core.exceptions import InvalidInputError
from clusterscope.core.linkage import LinkageEvaluator, LinkageMethod
from clusterscope.core.tree import ClusterNode, Internal, Leaf
from clusterscope.models.results import MergeStep

logger = logging.getLogger(__name__)


class ClustererState(str, Enum):
    """Agglomeration state."""

    MERGING = "merging"
    DONE = "done"


class AgglomerativeClusterer:
    """
    Naive agglomerative clusterer over a precomputed distance matrix.

    Every step recomputes the linkage of all active pairs from the distance
    matrix. Leaf-index arrays of active clusters are kept alongside the nodes
    and concatenated on merge, which avoids re-walking subtrees without
    changing any distance or tie-break.

    Example:
        >>> clusterer = AgglomerativeClusterer(distances, "single", rows=rows)
        >>> root = clusterer.run()
        >>> len(clusterer.steps) == len(rows) - 1
        True
    """

    def __init__(
        self,
        distances: DistanceMatrix,
        method: LinkageMethod | str = LinkageMethod.WARD,
        rows: Sequence[Sequence[Any]] | None = None,
    ) -> None:
        """
        Initialize with one leaf per row of the distance matrix.

        Args:
            distances: Pairwise row distances.
            method: Linkage rule.
            rows: Optional original rows, attached to the leaves for labelling.

        Raises:
            InvalidInputError: If the matrix has no rows, or rows does not
                match the matrix size.
            InvalidLinkageError: If method is not recognized.
        """
        self._evaluator = LinkageEvaluator(distances, method)

        n = distances.size
        if n == 0:
            raise InvalidInputError(
                message="Cannot cluster an empty dataset",
                suggestion="Check for rows before running the clusterer.",
            )
        if rows is not None and len(rows) != n:
            raise InvalidInputError(
                message=f"Got {len(rows)} rows for a {n}x{n} distance matrix",
            )

        self._active: list[ClusterNode] = [
            Leaf(index=i, row=tuple(rows[i]) if rows is not None else None)
            for i in range(n)
        ]
        self._members: list[np.ndarray] = [np.array([i], dtype=np.intp) for i in range(n)]
        self._steps: list[MergeStep] = []

    @property
    def method(self) -> LinkageMethod:
        return self._evaluator.method

    @property
    def state(self) -> ClustererState:
        if len(self._active) > 1:
            return ClustererState.MERGING
        return ClustererState.DONE

    @property
    def active(self) -> tuple[ClusterNode, ...]:
        """Current clusters, in scan order."""
        return tuple(self._active)

    @property
    def steps(self) -> list[MergeStep]:
        """Merge history so far."""
        return list(self._steps)

    def _closest_pair(self) -> tuple[int, int, float]:
        """Find the first pair of active clusters with minimal linkage."""
        best_i, best_j = 0, 1
        best = np.inf
        for i in range(len(self._members) - 1):
            dists = self._evaluator.to_clusters(self._members[i], self._members[i + 1:])
            k = int(np.argmin(dists))
            if dists[k] < best:
                best = float(dists[k])
                best_i, best_j = i, i + 1 + k
        return best_i, best_j, best

    def step(self) -> MergeStep:
        """
        Merge the closest pair of active clusters.

        Returns:
            Record of the merge that was performed.

        Raises:
            RuntimeError: If clustering is already done.
        """
        if self.state is ClustererState.DONE:
            raise RuntimeError("Clustering is done; no clusters left to merge")

        i, j, height = self._closest_pair()
        left, right = self._active[i], self._active[j]
        left_members, right_members = self._members[i], self._members[j]

        merged = Internal(left=left, right=right, height=height)
        record = MergeStep(
            step=len(self._steps) + 1,
            left=tuple(sorted(left_members.tolist())),
            right=tuple(sorted(right_members.tolist())),
            height=height,
        )

        # j > i, so remove j first to keep i valid
        for idx in (j, i):
            del self._active[idx]
            del self._members[idx]
        self._active.append(merged)
        self._members.append(np.concatenate([left_members, right_members]))
        self._steps.append(record)

        logger.debug(
            f"Merge {record.step}: {len(record.left)}+{len(record.right)} rows "
            f"at height {height:.6g}"
        )
        return record

    def run(self) -> ClusterNode:
        """
        Merge until a single cluster remains and return it as the tree root.

        A single-row input returns its leaf without merging.
        """
        while self.state is ClustererState.MERGING:
            self.step()
        root = self._active[0]
        logger.info(
            f"{self.method.value} linkage finished after {len(self._steps)} merges"
        )
        return root


def cluster(
    distances: DistanceMatrix,
    method: LinkageMethod | str = LinkageMethod.WARD,
    rows: Sequence[Sequence[Any]] | None = None,
) -> tuple[ClusterNode, list[MergeStep]]:
    """
    Run agglomerative clustering to completion.

    Returns:
        Tuple of (tree root, merge history).
    """
    clusterer = AgglomerativeClusterer(distances, method, rows=rows)
    root = clusterer.run()
    return root, clusterer.steps
