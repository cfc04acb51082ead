"""
Pydantic configuration models for clusterscope.

Defines the metric and linkage selection plus the distance-matrix worker
settings for a clustering run. Configuration can be loaded from YAML files
or built from CLI arguments.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from clusterscope.core.distance import DEFAULT_BLOCK_SIZE, DistanceMetric
from clusterscope.core.linkage import LinkageMethod

logger = logging.getLogger(__name__)


class ClusteringConfig(BaseModel):
    """
    Configuration for one clustering run.

    The defaults match the initial selection of the dashboard: euclidean
    distances with ward linkage.

    Selector strings from users should go through ``from_selectors()``, which
    raises InvalidMetricError / InvalidLinkageError for unknown values instead
    of a generic pydantic ValidationError.
    """

    metric: DistanceMetric = Field(
        default=DistanceMetric.EUCLIDEAN,
        description="Row-to-row distance metric: 'euclidean' or 'manhattan'",
    )
    linkage: LinkageMethod = Field(
        default=LinkageMethod.WARD,
        description="Cluster-to-cluster linkage: 'ward', 'complete' or 'single'",
    )
    num_workers: int = Field(
        default=1,
        ge=1,
        description="Threads used to build the distance matrix (1 = inline)",
    )
    block_size: int = Field(
        default=DEFAULT_BLOCK_SIZE,
        ge=1,
        description="Rows per distance-matrix work unit",
    )

    model_config = {"frozen": True}

    @classmethod
    def from_selectors(
        cls,
        metric: DistanceMetric | str = DistanceMetric.EUCLIDEAN,
        linkage: LinkageMethod | str = LinkageMethod.WARD,
        **kwargs: Any,
    ) -> ClusteringConfig:
        """
        Build a configuration from raw selector values.

        Raises:
            InvalidMetricError: If metric is not recognized.
            InvalidLinkageError: If linkage is not recognized.
        """
        return cls(
            metric=DistanceMetric.parse(metric),
            linkage=LinkageMethod.parse(linkage),
            **kwargs,
        )

    def with_selectors(self, **selectors: Any) -> ClusteringConfig:
        """
        Copy of this configuration with selector values applied on top.

        Values go through the same parsing and validation as
        ``from_selectors()``.

        Raises:
            InvalidMetricError: If metric is not recognized.
            InvalidLinkageError: If linkage is not recognized.
            ValidationError: If a worker setting is out of range.
            TypeError: If a keyword does not name a configuration field.
        """
        unknown = sorted(set(selectors) - set(type(self).model_fields))
        if unknown:
            msg = f"Unknown configuration field(s): {', '.join(unknown)}"
            raise TypeError(msg)
        values = self.model_dump()
        values.update(selectors)
        return self.from_selectors(**values)

    @classmethod
    def from_yaml(cls, path: Path) -> ClusteringConfig:
        """
        Load clustering configuration from a YAML file.

        The file uses a nested structure::

            distance:
              metric: manhattan
              num_workers: 4
              block_size: 256
            linkage:
              method: complete

        Unknown keys are ignored. Flat top-level ``metric`` / ``linkage`` keys
        are accepted as well.

        Raises:
            FileNotFoundError: If the YAML file does not exist.
            ValueError: If the YAML document is not a mapping.
            ConfigurationError: If a selector value is not recognized.
        """
        import yaml

        raw = yaml.safe_load(path.read_text())
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            msg = f"YAML config must be a mapping, got {type(raw).__name__}"
            raise ValueError(msg)

        flat = _flatten_yaml_config(raw)
        logger.debug(f"Loaded clustering config from {path}: {flat}")
        return cls.from_selectors(**flat)

    def to_yaml_str(self) -> str:
        """Serialize the configuration to a nested YAML string."""
        import yaml

        data = {
            "distance": {
                "metric": self.metric.value,
                "num_workers": self.num_workers,
                "block_size": self.block_size,
            },
            "linkage": {
                "method": self.linkage.value,
            },
        }
        return yaml.dump(data, default_flow_style=False, sort_keys=False)


def _flatten_yaml_config(raw: dict[str, Any]) -> dict[str, Any]:
    """
    Flatten nested YAML config structure into ClusteringConfig keyword arguments.

    Maps:
        distance.metric -> metric
        distance.num_workers -> num_workers
        distance.block_size -> block_size
        linkage.method -> linkage
    """
    flat: dict[str, Any] = {}

    distance = raw.get("distance", {})
    if isinstance(distance, dict):
        _map_if_present(distance, "metric", flat, "metric")
        _map_if_present(distance, "num_workers", flat, "num_workers")
        _map_if_present(distance, "block_size", flat, "block_size")
    elif distance is not None:
        flat["metric"] = distance

    linkage = raw.get("linkage", {})
    if isinstance(linkage, dict):
        _map_if_present(linkage, "method", flat, "linkage")
    elif linkage is not None:
        flat["linkage"] = linkage

    _map_if_present(raw, "metric", flat, "metric")
    _map_if_present(raw, "num_workers", flat, "num_workers")
    _map_if_present(raw, "block_size", flat, "block_size")

    return flat


def _map_if_present(
    source: dict[str, Any],
    source_key: str,
    target: dict[str, Any],
    target_key: str,
) -> None:
    """Copy value from source dict to target dict if key exists."""
    if source_key in source and source[source_key] is not None:
        target[target_key] = source[source_key]
