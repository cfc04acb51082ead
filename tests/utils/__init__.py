"""Testing utilities for clusterscope."""

from tests.utils.assertions import DistanceAssertions, TreeAssertions

__all__ = [
    "DistanceAssertions",
    "TreeAssertions",
]
