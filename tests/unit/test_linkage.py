"""
Unit tests for linkage rules.

Covers single/complete/ward formulas on a known matrix, the single <=
complete property and selector validation.
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from clusterscope.core.distance import build_distance_matrix
from clusterscope.core.exceptions import InvalidInputError, InvalidLinkageError
from clusterscope.core.linkage import LinkageEvaluator, LinkageMethod
from clusterscope.core.tree import Internal, Leaf


@pytest.fixture
def four_point_distances(four_points):
    return build_distance_matrix(four_points, "euclidean")


class TestLinkageMethod:
    """Tests for linkage selector parsing."""

    def test_parse_known_values(self):
        assert LinkageMethod.parse("ward") is LinkageMethod.WARD
        assert LinkageMethod.parse(" Single ") is LinkageMethod.SINGLE
        assert LinkageMethod.parse(LinkageMethod.COMPLETE) is LinkageMethod.COMPLETE

    @pytest.mark.parametrize("value", ["average", "centroid", "", None])
    def test_parse_unknown_raises(self, value):
        with pytest.raises(InvalidLinkageError):
            LinkageMethod.parse(value)

    def test_evaluator_rejects_unknown_method(self, four_point_distances):
        with pytest.raises(InvalidLinkageError):
            LinkageEvaluator(four_point_distances, "median")


class TestLinkageFormulas:
    """Tests of each rule between clusters {0, 1} and {2, 3}."""

    def test_single_is_minimum(self, four_point_distances):
        evaluator = LinkageEvaluator(four_point_distances, "single")

        assert evaluator.between_indices([0, 1], [2, 3]) == pytest.approx(math.sqrt(41))

    def test_complete_is_maximum(self, four_point_distances):
        evaluator = LinkageEvaluator(four_point_distances, "complete")

        assert evaluator.between_indices([0, 1], [2, 3]) == pytest.approx(math.sqrt(61))

    def test_ward_is_rms_of_cross_distances(self, four_point_distances):
        evaluator = LinkageEvaluator(four_point_distances, "ward")

        # squared cross distances: 50, 61, 41, 50
        expected = math.sqrt((50 + 61 + 41 + 50) / 4)
        assert evaluator.between_indices([0, 1], [2, 3]) == pytest.approx(expected)

    @pytest.mark.parametrize("method", list(LinkageMethod))
    def test_singletons_equal_pair_distance(self, four_point_distances, method):
        evaluator = LinkageEvaluator(four_point_distances, method)

        assert evaluator.between_indices([1], [2]) == pytest.approx(math.sqrt(41))

    @pytest.mark.parametrize("method", list(LinkageMethod))
    def test_symmetric_in_arguments(self, random_points, method):
        evaluator = LinkageEvaluator(build_distance_matrix(random_points), method)

        a, b = [0, 4, 9], [2, 3, 15, 20]
        assert evaluator.between_indices(a, b) == pytest.approx(evaluator.between_indices(b, a))

    def test_between_nodes_uses_leaf_sets(self, four_point_distances):
        evaluator = LinkageEvaluator(four_point_distances, "complete")
        left = Internal(Leaf(0), Leaf(1), 1.0)
        right = Internal(Leaf(2), Leaf(3), 1.0)

        assert evaluator.between(left, right) == evaluator.between_indices([0, 1], [2, 3])
        assert evaluator.between(Leaf(0), Leaf(3)) == four_point_distances.get(0, 3)

    def test_empty_cluster_raises(self, four_point_distances):
        evaluator = LinkageEvaluator(four_point_distances, "single")

        with pytest.raises(InvalidInputError):
            evaluator.between_indices([], [1])
        with pytest.raises(InvalidInputError):
            evaluator.to_clusters([0], [[1], []])


def _ward_nested_loop(distances, cluster_a, cluster_b):
    total = 0.0
    for i in cluster_a:
        for j in cluster_b:
            d = distances.get(i, j)
            total += d * d
    return math.sqrt(total / (len(cluster_a) * len(cluster_b)))


class TestWardSummationOrder:
    """The ward sum must match a sequential nested loop exactly."""

    def test_matches_nested_loop_bitwise(self, random_points):
        distances = build_distance_matrix(random_points)
        evaluator = LinkageEvaluator(distances, "ward")
        cluster = [3, 0, 17, 9, 22, 5, 11]
        others = [[1, 2, 4, 6, 7, 8, 10, 12, 13, 14], [15], [29, 16, 18, 19, 20, 21]]

        batch = evaluator.to_clusters(cluster, others)

        for value, other in zip(batch.tolist(), others):
            assert value == _ward_nested_loop(distances, cluster, other)


class TestLinkageProperties:
    """Property-style checks over random clusters."""

    def test_single_never_exceeds_complete(self, random_points):
        distances = build_distance_matrix(random_points)
        single = LinkageEvaluator(distances, "single")
        complete = LinkageEvaluator(distances, "complete")
        rng = np.random.default_rng(7)

        for _ in range(50):
            perm = rng.permutation(len(random_points))
            cut = int(rng.integers(1, len(perm) - 1))
            a, b = perm[:cut], perm[cut:]
            assert single.between_indices(a, b) <= complete.between_indices(a, b)

    @pytest.mark.parametrize("method", list(LinkageMethod))
    def test_batch_matches_individual_calls(self, random_points, method):
        evaluator = LinkageEvaluator(build_distance_matrix(random_points), method)
        others = [[1, 2], [3], [4, 5, 6, 7], [8, 9, 10]]

        batch = evaluator.to_clusters([0, 11], others)
        individual = [evaluator.between_indices([0, 11], other) for other in others]

        assert batch.tolist() == individual
