"""
Core rerooting implementation for phylogenetic trees.

This module provides the rerooting operations used before orthogroup
extraction:
- Basic tree structure manipulation (path collection, edge flipping)
- Rerooting at a node or at a node label
- Path lengths between nodes, used to check that rerooting keeps distances
"""

import logging
from collections import deque
from typing import Dict, Iterator, List, Optional, Tuple

from orthoclade.exceptions import NodeNotFoundError
from orthoclade.tree import Node

logger = logging.getLogger(__name__)

# =============================================================================
# HELPER FUNCTIONS FOR TREE STRUCTURE MANIPULATION
# =============================================================================


def _collect_path_to_root(start_node: Node) -> List[Node]:
    """
    Collect all nodes from start_node up to the current root.

    Args:
        start_node: The node to start collecting from

    Returns:
        List of nodes from start_node to root (inclusive)
    """
    path: List[Node] = []
    node: Optional[Node] = start_node
    while node is not None:
        path.append(node)
        node = node.parent
    return path


def _splice_out(node: Node) -> None:
    """
    Remove a non-root node that has at most one child.

    A single child is attached to the node's parent in the node's position and
    takes over the summed length of both edges. A childless node is dropped.
    """
    parent = node.parent
    if parent is None:
        return
    index = next(i for i, child in enumerate(parent.children) if child is node)
    if node.children:
        only_child = node.children[0]
        only_child.length = only_child.branch_length + node.branch_length
        only_child.parent = parent
        parent.children[index] = only_child
    else:
        del parent.children[index]
    node.parent = None
    node.children = []


def _flip_upward(node: Node) -> Node:
    """
    Flip the tree structure upward from the given node to make it the new root.

    Parent-child relationships along the path from ``node`` to the current
    root are reversed. Every edge keeps its length: after the flip the length
    is stored on the former parent, which is now the child end of the edge.
    If the former root is left with a single child it is spliced out.

    Args:
        node: The node that should become the new root

    Returns:
        The new root node (same as input node)
    """
    if node.parent is None:
        return node

    path: List[Node] = _collect_path_to_root(node)
    old_root = path[-1]
    edge_lengths = [path_node.length for path_node in path]

    for i in range(len(path) - 1):
        child_node = path[i]
        parent_node = path[i + 1]

        parent_node.children = [c for c in parent_node.children if c is not child_node]
        child_node.children.append(parent_node)
        parent_node.parent = child_node
        parent_node.length = edge_lengths[i]

    node.parent = None
    node.length = None

    if len(old_root.children) <= 1:
        _splice_out(old_root)

    node.invalidate_caches(propagate_up=False, propagate_down=True)
    return node


# =============================================================================
# CORE REROOTING OPERATIONS
# =============================================================================


def reroot_at_node(node: Node) -> Node:
    """
    Reroot the tree at the specified node.

    A leaf cannot become the root without dropping out of the leaf set, so
    for a leaf the tree is rerooted at its parent instead.

    Args:
        node: The node to reroot at

    Returns:
        The new root node
    """
    if node.is_leaf() and node.parent is not None:
        logger.warning(
            f"Asked to reroot at leaf '{node.name}', rerooting at its parent instead"
        )
        node = node.parent
    return _flip_upward(node)


def reroot_by_name(tree: Node, name: str) -> Node:
    """
    Reroot ``tree`` at the first node (preorder) labelled ``name``.

    Internal node labels are searched as well as leaf names.

    Returns:
        The new root node

    Raises:
        NodeNotFoundError: If no node carries the label.
    """
    target = tree.get_root().find_node_by_name(name)
    if target is None:
        raise NodeNotFoundError(name)
    logger.info(f"Rerooting tree at '{name}'")
    return reroot_at_node(target)


# =============================================================================
# PATH LENGTHS
# =============================================================================


def _neighbors_with_length(node: Node) -> Iterator[Tuple[Node, float]]:
    if node.parent is not None:
        yield node.parent, node.branch_length
    for child in node.children:
        yield child, child.branch_length


def path_length(node1: Node, node2: Node) -> float:
    """
    Sum of branch lengths on the path between two nodes of the same tree.

    Raises:
        ValueError: If the nodes are not connected.
    """
    distances: Dict[int, float] = {id(node1): 0.0}
    queue = deque([node1])
    while queue:
        node = queue.popleft()
        if node is node2:
            return distances[id(node)]
        for neighbor, edge_len in _neighbors_with_length(node):
            if id(neighbor) not in distances:
                distances[id(neighbor)] = distances[id(node)] + edge_len
                queue.append(neighbor)
    raise ValueError(f"{node1!r} and {node2!r} are not in the same tree")
