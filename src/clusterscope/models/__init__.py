"""
Pydantic data models for clusterscope.

Provides type-safe models for run configuration and clustering results.
"""

from clusterscope.models.config import ClusteringConfig
from clusterscope.models.results import ClusteringSummary, MergeStep

__all__ = [
    "ClusteringConfig",
    "ClusteringSummary",
    "MergeStep",
]
