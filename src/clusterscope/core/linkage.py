"""
Inter-cluster linkage rules.

A linkage turns the pairwise row distances between two clusters into a single
cluster-to-cluster distance. Three rules are supported:

- single: minimum cross-cluster distance
- complete: maximum cross-cluster distance
- ward: root mean square of the cross-cluster distances,
  ``sqrt(sum(d[i][j]^2) / (|A| * |B|))``

Note:
    The ward rule here is a simplified proxy, not the textbook Ward
    minimum-variance criterion used by SciPy or scikit-learn. Merge heights
    and, in some cases, merge order differ from those libraries.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import Enum

import numpy as np

from clusterscope.core.distance import DistanceMatrix
from clusterscope.core.exceptions import InvalidInputError, InvalidLinkageError
from clusterscope.core.tree import ClusterNode, get_all_leaves

logger = logging.getLogger(__name__)


class LinkageMethod(str, Enum):
    """Cluster-to-cluster distance rule."""

    WARD = "ward"
    COMPLETE = "complete"
    SINGLE = "single"

    @classmethod
    def parse(cls, value: LinkageMethod | str) -> LinkageMethod:
        """
        Resolve a selector value, failing on anything unrecognized.

        Raises:
            InvalidLinkageError: If value does not name a supported linkage.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidLinkageError(value, [m.value for m in cls])


class LinkageEvaluator:
    """
    Computes inter-cluster distances from a DistanceMatrix.

    Distances are always read fresh from the matrix; nothing is cached
    between calls, so results stay correct as cluster membership changes.

    The distance from one cluster to another never depends on which other
    clusters are evaluated in the same call. The ward sum adds squared
    distances one at a time, rows of the first cluster outer and rows of the
    second inner, in leaf order, so it equals the plain nested loop bit for
    bit. Swapping the two clusters may change the last ulp.

    Example:
        >>> evaluator = LinkageEvaluator(distances, "complete")
        >>> height = evaluator.between(node_a, node_b)
    """

    def __init__(
        self,
        distances: DistanceMatrix,
        method: LinkageMethod | str = LinkageMethod.WARD,
    ) -> None:
        self.distances = distances
        self.method = LinkageMethod.parse(method)
        if self.method is LinkageMethod.WARD:
            logger.debug(
                "Ward linkage uses the RMS of cross-cluster distances, "
                "not the Ward minimum-variance criterion"
            )

    def to_clusters(
        self,
        cluster: Sequence[int] | np.ndarray,
        others: Sequence[Sequence[int] | np.ndarray],
    ) -> np.ndarray:
        """
        Linkage distance from one cluster to each of several others.

        Args:
            cluster: Row indices of the reference cluster.
            others: Row indices of each cluster to compare against.

        Returns:
            Array with one linkage distance per entry of ``others``.

        Raises:
            InvalidInputError: If any cluster is empty.
        """
        a = np.asarray(cluster, dtype=np.intp)
        if a.size == 0 or not others:
            raise InvalidInputError(message="Linkage requires non-empty clusters")

        groups = [np.asarray(other, dtype=np.intp) for other in others]
        sizes = np.array([g.size for g in groups], dtype=np.intp)
        if np.any(sizes == 0):
            raise InvalidInputError(message="Linkage requires non-empty clusters")

        offsets = np.zeros(len(groups), dtype=np.intp)
        np.cumsum(sizes[:-1], out=offsets[1:])
        block = self.distances.values[np.ix_(a, np.concatenate(groups))]

        if self.method is LinkageMethod.SINGLE:
            return np.minimum.reduceat(block.min(axis=0), offsets)
        if self.method is LinkageMethod.COMPLETE:
            return np.maximum.reduceat(block.max(axis=0), offsets)

        # cumsum over the C-order flattening adds strictly left to right:
        # rows of the reference cluster outer, rows of the other cluster inner
        squared = block * block
        totals = np.empty(len(groups), dtype=np.float64)
        for g, (start, size) in enumerate(zip(offsets.tolist(), sizes.tolist())):
            totals[g] = np.cumsum(squared[:, start:start + size])[-1]
        return np.sqrt(totals / (a.size * sizes))

    def between_indices(
        self,
        cluster_a: Sequence[int] | np.ndarray,
        cluster_b: Sequence[int] | np.ndarray,
    ) -> float:
        """Linkage distance between two sets of row indices."""
        return float(self.to_clusters(cluster_a, [cluster_b])[0])

    def between(self, node_a: ClusterNode, node_b: ClusterNode) -> float:
        """Linkage distance between two cluster nodes."""
        return self.between_indices(get_all_leaves(node_a), get_all_leaves(node_b))
