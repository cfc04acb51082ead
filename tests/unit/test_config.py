"""
Unit tests for configuration models.

Tests ClusteringConfig defaults, selector parsing, field validation and
YAML loading/serialization.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from clusterscope.core.distance import DistanceMetric
from clusterscope.core.exceptions import (
    ConfigurationError,
    InvalidLinkageError,
    InvalidMetricError,
)
from clusterscope.core.linkage import LinkageMethod
from clusterscope.models.config import ClusteringConfig


class TestClusteringConfig:
    """Tests for ClusteringConfig model."""

    def test_default_values(self):
        """Defaults are euclidean distances with ward linkage, inline build."""
        config = ClusteringConfig()

        assert config.metric is DistanceMetric.EUCLIDEAN
        assert config.linkage is LinkageMethod.WARD
        assert config.num_workers == 1
        assert config.block_size == 256

    def test_from_selectors(self):
        config = ClusteringConfig.from_selectors("Manhattan", "single", num_workers=4)

        assert config.metric is DistanceMetric.MANHATTAN
        assert config.linkage is LinkageMethod.SINGLE
        assert config.num_workers == 4

    def test_from_selectors_rejects_unknown_metric(self):
        with pytest.raises(InvalidMetricError) as exc_info:
            ClusteringConfig.from_selectors(metric="cosine")

        assert exc_info.value.value == "cosine"
        assert isinstance(exc_info.value, ConfigurationError)

    def test_from_selectors_rejects_unknown_linkage(self):
        with pytest.raises(InvalidLinkageError):
            ClusteringConfig.from_selectors(linkage="centroid")

    def test_with_selectors_applies_overrides(self):
        base = ClusteringConfig(metric="manhattan", num_workers=2)

        config = base.with_selectors(linkage=" Complete ")

        assert config.linkage is LinkageMethod.COMPLETE
        assert config.metric is DistanceMetric.MANHATTAN
        assert config.num_workers == 2

    def test_with_selectors_validates(self):
        with pytest.raises(InvalidLinkageError):
            ClusteringConfig().with_selectors(linkage="bogus")
        with pytest.raises(ValidationError):
            ClusteringConfig().with_selectors(num_workers=0)
        with pytest.raises(TypeError):
            ClusteringConfig().with_selectors(metrc="manhattan")

    @pytest.mark.parametrize("field", ["num_workers", "block_size"])
    def test_worker_settings_must_be_positive(self, field):
        with pytest.raises(ValidationError):
            ClusteringConfig(**{field: 0})

    def test_frozen(self):
        config = ClusteringConfig()

        with pytest.raises(ValidationError):
            config.metric = DistanceMetric.MANHATTAN  # type: ignore[misc]


class TestYamlConfig:
    """Tests for YAML loading and serialization."""

    def test_nested_structure(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "distance:\n"
            "  metric: manhattan\n"
            "  num_workers: 3\n"
            "  block_size: 64\n"
            "linkage:\n"
            "  method: complete\n"
        )

        config = ClusteringConfig.from_yaml(path)

        assert config.metric is DistanceMetric.MANHATTAN
        assert config.linkage is LinkageMethod.COMPLETE
        assert config.num_workers == 3
        assert config.block_size == 64

    def test_flat_selectors(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("metric: manhattan\nlinkage: single\n")

        config = ClusteringConfig.from_yaml(path)

        assert config.metric is DistanceMetric.MANHATTAN
        assert config.linkage is LinkageMethod.SINGLE

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert ClusteringConfig.from_yaml(path) == ClusteringConfig()

    def test_unknown_keys_ignored(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("linkage:\n  method: single\nrender:\n  width: 800\n")

        assert ClusteringConfig.from_yaml(path).linkage is LinkageMethod.SINGLE

    def test_invalid_selector_in_yaml(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("linkage:\n  method: average\n")

        with pytest.raises(InvalidLinkageError):
            ClusteringConfig.from_yaml(path)

    def test_non_mapping_document(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("- euclidean\n- ward\n")

        with pytest.raises(ValueError, match="mapping"):
            ClusteringConfig.from_yaml(path)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            ClusteringConfig.from_yaml(tmp_path / "missing.yaml")

    def test_yaml_output_reloads(self, tmp_path: Path):
        config = ClusteringConfig(metric="manhattan", linkage="complete", num_workers=2)
        path = tmp_path / "config.yaml"
        path.write_text(config.to_yaml_str())

        assert "metric: manhattan" in path.read_text()
        assert ClusteringConfig.from_yaml(path) == config
