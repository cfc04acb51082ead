"""
Clusterscope: agglomerative hierarchical clustering for tabular datasets.

Projects a dataset onto its numeric columns, computes pairwise row distances
and builds the binary merge tree a dendrogram is drawn from, under single,
complete or ward linkage.
"""

__version__ = "0.1.0"
__author__ = "Clusterscope Team"

from clusterscope.core.pipeline import ClusteringResult, run_clustering
from clusterscope.core.tree import Internal, Leaf
from clusterscope.models.config import ClusteringConfig

__all__ = [
    "ClusteringConfig",
    "ClusteringResult",
    "Internal",
    "Leaf",
    "__version__",
    "run_clustering",
]
