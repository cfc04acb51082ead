"""
Core algorithms for agglomerative hierarchical clustering.

This module contains the numeric projection, distance matrix construction,
linkage rules and the agglomerative clusterer that produces the merge tree
behind a dendrogram.
"""

from clusterscope.core.agglomerative import AgglomerativeClusterer, ClustererState
from clusterscope.core.distance import DistanceMatrix, DistanceMetric, build_distance_matrix
from clusterscope.core.linkage import LinkageEvaluator, LinkageMethod
from clusterscope.core.pipeline import ClusteringResult, run_clustering
from clusterscope.core.projection import NumericProjection, project_numeric
from clusterscope.core.tree import ClusterNode, Internal, Leaf, get_all_leaves

__all__ = [
    "AgglomerativeClusterer",
    "ClusterNode",
    "ClustererState",
    "ClusteringResult",
    "DistanceMatrix",
    "DistanceMetric",
    "Internal",
    "Leaf",
    "LinkageEvaluator",
    "LinkageMethod",
    "NumericProjection",
    "build_distance_matrix",
    "get_all_leaves",
    "project_numeric",
    "run_clustering",
]
