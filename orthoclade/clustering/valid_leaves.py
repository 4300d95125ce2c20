"""Bounded-divergence leaf collection."""

from typing import List, Tuple

from orthoclade.tree import Node


def valid_leaves(node: Node, budget: float) -> List[str]:
    """
    Names of the leaves reachable from ``node`` within a divergence budget.

    Every lineage is followed on its own: descending into a child spends that
    child's branch length from the remaining budget, and a child whose branch
    length is strictly greater than what remains is dropped together with its
    whole subtree. A branch length equal to the remaining budget is kept.

    A leaf is always valid with respect to itself, so ``valid_leaves(leaf, b)``
    is ``[leaf.name]`` for any budget.

    Args:
        node: Start node.
        budget: Divergence cutoff available below ``node``.

    Returns:
        Leaf names in left-to-right order, possibly empty.
    """
    leaves: List[str] = []
    stack: List[Tuple[Node, float]] = [(node, budget)]
    while stack:
        current, remaining = stack.pop()
        if not current.children:
            leaves.append(current.name)
            continue
        # Reversed so leaves come off the stack left to right
        for child in reversed(current.children):
            length = child.branch_length
            if length > remaining:
                continue
            stack.append((child, remaining - length))
    return leaves
