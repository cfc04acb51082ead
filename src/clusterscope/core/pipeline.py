"""
End-to-end clustering pipeline.

raw dataset -> numeric projection -> distance matrix -> agglomerative
clustering -> merge tree.

All validation happens before any distance is computed, and a run either
returns a complete result or an explicit empty result; partial matrices or
trees are never handed out.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from clusterscope.core.agglomerative import AgglomerativeClusterer
from clusterscope.core.distance import DistanceMatrix, build_distance_matrix
from clusterscope.core.exceptions import EmptyInputError, MalformedRowError
from clusterscope.core.projection import NumericProjection, Row, project_numeric
from clusterscope.core.tree import (
    ClusterNode,
    count_internal,
    iter_leaves,
    leaf_label,
    to_hierarchy,
)
from clusterscope.models.config import ClusteringConfig
from clusterscope.models.results import ClusteringSummary, MergeStep

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClusteringResult:
    """
    Outcome of one pipeline run.

    Either ``tree`` and ``distances`` are set, or ``reason`` names why there
    was nothing to cluster (see EmptyInputError.NO_ROWS and
    EmptyInputError.NO_NUMERIC_COLUMNS).
    """

    config: ClusteringConfig
    headers: tuple[str, ...]
    projection: NumericProjection | None = None
    distances: DistanceMatrix | None = None
    tree: ClusterNode | None = None
    steps: tuple[MergeStep, ...] = field(default=())
    reason: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.tree is None

    def raise_if_empty(self) -> None:
        """
        Raise EmptyInputError for an empty result.

        Raises:
            EmptyInputError: If the run had nothing to cluster.
        """
        if self.is_empty:
            raise EmptyInputError(self.reason or EmptyInputError.NO_ROWS)

    def leaf_labels(self) -> dict[int, str]:
        """Display label of every leaf, keyed by row index."""
        if self.tree is None:
            return {}
        return {leaf.index: leaf_label(leaf, self.headers) for leaf in iter_leaves(self.tree)}

    def hierarchy(self) -> dict[str, Any] | None:
        """Nested-dict view of the tree for a hierarchy layout."""
        if self.tree is None:
            return None
        return to_hierarchy(self.tree)

    def summary(self) -> ClusteringSummary:
        projection = self.projection
        return ClusteringSummary(
            metric=self.config.metric.value,
            linkage=self.config.linkage.value,
            n_rows=projection.n_rows if projection is not None else 0,
            n_columns=projection.n_columns if projection is not None else 0,
            numeric_headers=list(projection.headers) if projection is not None else [],
            n_merges=count_internal(self.tree) if self.tree is not None else 0,
            root_height=self.steps[-1].height if self.steps else 0.0,
        )


def validate_rows(headers: Sequence[str], rows: Sequence[Row]) -> None:
    """
    Check that every row holds exactly one value per header.

    Raises:
        MalformedRowError: For the first row whose length differs.
    """
    expected = len(headers)
    for idx, row in enumerate(rows):
        if len(row) != expected:
            raise MalformedRowError(row_index=idx, expected=expected, actual=len(row))


def run_clustering(
    headers: Sequence[str],
    rows: Sequence[Row],
    config: ClusteringConfig | None = None,
    **selectors: Any,
) -> ClusteringResult:
    """
    Cluster a raw dataset.

    Args:
        headers: Column names.
        rows: Raw rows, one value per header.
        config: Run configuration, the defaults when omitted.
        **selectors: ``metric``, ``linkage``, ``num_workers`` or
            ``block_size`` values applied on top of ``config`` through
            ClusteringConfig.with_selectors().

    Returns:
        ClusteringResult. Zero rows or zero numeric columns give an empty
        result rather than an exception.

    Raises:
        InvalidMetricError: If the metric selector is not recognized.
        InvalidLinkageError: If the linkage selector is not recognized.
        MalformedRowError: If a row length differs from the header count.
    """
    if config is None:
        config = ClusteringConfig()
    if selectors:
        config = config.with_selectors(**selectors)
    headers = tuple(headers)

    validate_rows(headers, rows)

    if not rows:
        logger.info("No rows to cluster")
        return ClusteringResult(
            config=config, headers=headers, reason=EmptyInputError.NO_ROWS
        )

    projection = project_numeric(headers, rows)
    if projection.is_empty:
        logger.info("No numeric columns found; skipping clustering")
        return ClusteringResult(
            config=config,
            headers=headers,
            projection=projection,
            reason=EmptyInputError.NO_NUMERIC_COLUMNS,
        )

    distances = build_distance_matrix(
        projection.matrix,
        config.metric,
        num_workers=config.num_workers,
        block_size=config.block_size,
    )
    clusterer = AgglomerativeClusterer(distances, config.linkage, rows=rows)
    tree = clusterer.run()

    return ClusteringResult(
        config=config,
        headers=headers,
        projection=projection,
        distances=distances,
        tree=tree,
        steps=tuple(clusterer.steps),
    )
