"""Merge tree produced by agglomerative clustering.

A cluster node is a tagged variant: either a ``Leaf`` wrapping one original
row, or an ``Internal`` node joining exactly two children at the linkage
distance of their merge. Nodes are frozen dataclasses and are dispatched with
``match`` statements rather than virtual methods.

The module also provides the read-only views a rendering collaborator needs
(leaf extraction, d3-style hierarchy dicts, Newick strings, leaf labels). No
layout or pixel positioning is done here.

Traversals are iterative: single linkage on chained data builds trees as deep
as the number of rows, which would exceed Python's recursion limit.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from io import StringIO
from typing import TYPE_CHECKING, Any, TypeAlias

import polars as pl

if TYPE_CHECKING:
    from Bio.Phylo.BaseTree import Clade

    from clusterscope.models.results import MergeStep

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Leaf:
    """One original data row."""

    index: int
    row: tuple[Any, ...] | None = None

    @property
    def height(self) -> float:
        return 0.0


@dataclass(frozen=True, slots=True)
class Internal:
    """Merge of two child clusters at ``height``."""

    left: ClusterNode
    right: ClusterNode
    height: float


ClusterNode: TypeAlias = Leaf | Internal


def children(node: ClusterNode) -> tuple[ClusterNode, ...]:
    """Direct children of a node (empty for a leaf)."""
    match node:
        case Leaf():
            return ()
        case Internal(left=left, right=right):
            return (left, right)
    raise TypeError(f"Not a cluster node: {node!r}")


def iter_nodes(node: ClusterNode) -> Iterator[ClusterNode]:
    """Yield every node in pre-order, left subtree before right."""
    stack: list[ClusterNode] = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(children(current)))


def get_all_leaves(node: ClusterNode) -> list[int]:
    """
    Original row indices under a node, in left-to-right order.

    For a leaf this is its own single index.
    """
    return [n.index for n in iter_nodes(node) if isinstance(n, Leaf)]


def iter_leaves(node: ClusterNode) -> Iterator[Leaf]:
    """Yield the leaves under a node, left to right."""
    for n in iter_nodes(node):
        if isinstance(n, Leaf):
            yield n


def count_leaves(node: ClusterNode) -> int:
    return sum(1 for n in iter_nodes(node) if isinstance(n, Leaf))


def count_internal(node: ClusterNode) -> int:
    return sum(1 for n in iter_nodes(node) if isinstance(n, Internal))


def max_height(node: ClusterNode) -> float:
    """Largest merge height in the tree (0.0 for a single leaf)."""
    return max((n.height for n in iter_nodes(node)), default=0.0)


def leaf_label(leaf: Leaf, headers: Sequence[str] | None = None) -> str:
    """
    Display label of a leaf: value of the last column followed by the row index.

    Falls back to ``"Item <index>"`` when the leaf carries no original row.

    Example:
        >>> leaf_label(Leaf(3, ("5.1", "3.5", "setosa")), ["a", "b", "class"])
        'setosa (3)'
    """
    if not leaf.row:
        return f"Item {leaf.index}"
    class_idx = len(headers) - 1 if headers else len(leaf.row) - 1
    return f"{leaf.row[class_idx]} ({leaf.index})"


def leaf_tooltip(leaf: Leaf, headers: Sequence[str]) -> str:
    """Full original row of a leaf as ``header: value`` lines."""
    if not leaf.row:
        return ""
    return "\n".join(f"{name}: {value}" for name, value in zip(headers, leaf.row))


def to_hierarchy(node: ClusterNode) -> dict[str, Any]:
    """
    Convert a tree into nested dicts for a hierarchy layout.

    Leaves become ``{"id", "height": 0.0, "children": [], "data"}``; internal
    nodes become ``{"height", "children": [left, right]}``.
    """
    built: dict[int, dict[str, Any]] = {}
    stack: list[tuple[ClusterNode, bool]] = [(node, False)]

    while stack:
        current, expanded = stack.pop()
        match current:
            case Leaf(index=index, row=row):
                built[id(current)] = {
                    "id": index,
                    "height": 0.0,
                    "children": [],
                    "data": list(row) if row is not None else None,
                }
            case Internal(left=left, right=right, height=height):
                if expanded:
                    built[id(current)] = {
                        "height": height,
                        "children": [built.pop(id(left)), built.pop(id(right))],
                    }
                else:
                    stack.append((current, True))
                    stack.append((right, False))
                    stack.append((left, False))

    return built[id(node)]


def _to_clade(node: ClusterNode, labels: Mapping[int, str]) -> Clade:
    """Build a BioPython clade mirroring the merge tree."""
    from Bio.Phylo.BaseTree import Clade

    clades: dict[int, Clade] = {}
    stack: list[tuple[ClusterNode, float, bool]] = [(node, node.height, False)]

    while stack:
        current, parent_height, expanded = stack.pop()
        branch = parent_height - current.height
        match current:
            case Leaf(index=index):
                name = labels.get(index, str(index))
                clades[id(current)] = Clade(branch_length=branch, name=name)
            case Internal(left=left, right=right, height=height):
                if expanded:
                    clades[id(current)] = Clade(
                        branch_length=branch,
                        clades=[clades.pop(id(left)), clades.pop(id(right))],
                    )
                else:
                    stack.append((current, parent_height, True))
                    stack.append((right, height, False))
                    stack.append((left, height, False))

    return clades[id(node)]


def to_newick(node: ClusterNode, labels: Mapping[int, str] | None = None) -> str:
    """
    Serialize a merge tree to a Newick string using BioPython.

    Branch lengths are the height difference between a node and its parent,
    so leaf-to-root path lengths equal the root height for monotone linkages.

    Args:
        node: Tree root.
        labels: Optional mapping from row index to tip name. Rows without a
            label are named by their index.

    Returns:
        Newick format string ending with ``;``.
    """
    from Bio import Phylo
    from Bio.Phylo.BaseTree import Tree

    root = _to_clade(node, labels or {})
    tree = Tree(root=root, rooted=True)

    output = StringIO()
    Phylo.write(tree, output, "newick")
    return output.getvalue().strip()


def merge_table(steps: Sequence[MergeStep]) -> pl.DataFrame:
    """
    Merge history as a Polars DataFrame.

    Columns: step, left (list of row indices), right (list of row indices),
    height, size.
    """
    return pl.DataFrame(
        {
            "step": [s.step for s in steps],
            "left": [list(s.left) for s in steps],
            "right": [list(s.right) for s in steps],
            "height": [s.height for s in steps],
            "size": [s.size for s in steps],
        },
        schema={
            "step": pl.Int64,
            "left": pl.List(pl.Int64),
            "right": pl.List(pl.Int64),
            "height": pl.Float64,
            "size": pl.Int64,
        },
    )
