"""Root-distance annotation."""

from typing import List, Tuple

from orthoclade.clustering.types import RootDistances
from orthoclade.tree import Node


def annotate_distances(root: Node) -> RootDistances:
    """
    Compute the cumulative branch length from ``root`` to every node.

    The root is at distance 0 (its own branch length, if any, is ignored);
    every other node is at its parent's distance plus its branch length,
    with an unset length read as 0. The result is a separate table keyed by
    node identity; nodes are not modified.

    Args:
        root: Root of the tree, after any rerooting.

    Returns:
        Mapping from every node of the tree to its root distance.
    """
    distances: RootDistances = {}
    stack: List[Tuple[Node, float]] = [(root, 0.0)]
    while stack:
        node, distance = stack.pop()
        distances[node] = distance
        for child in node.children:
            stack.append((child, distance + child.branch_length))
    return distances
