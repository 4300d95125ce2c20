from __future__ import annotations
from typing import Optional, Any, Dict, List, Set

try:
    from typing import Self
except ImportError:
    from typing_extensions import Self

from orthoclade.exceptions import MalformedTreeError


class Node:
    """
    Phylogenetic tree node with parent pointers, using __slots__.

    Nodes compare and hash by identity, so a node can key lookup tables
    (for example root distances) without the table depending on names or
    topology.
    """

    __slots__ = (
        "children",
        "parent",
        "name",
        "length",
        "values",
        "_traverse_cache",
        "_leaves_cache",
    )

    children: List[Self]
    parent: Optional[Self]
    name: str
    length: Optional[float]
    values: Dict[str, Any]
    _traverse_cache: Optional[List[Self]]
    _leaves_cache: Optional[List[Self]]

    def __init__(
        self,
        children: Optional[List[Self]] = None,
        name: str = "",
        length: Optional[float] = None,
        values: Optional[Dict[str, Any]] = None,
    ):
        self.children = list(children) if children is not None else []
        for child in self.children:
            child.parent = self
        self.parent = None
        self.name = name
        self.length = length
        self.values = dict(values) if values is not None else {}
        self._traverse_cache = None
        self._leaves_cache = None

    def __repr__(self) -> str:
        return f"Node('{self.name}')"

    @property
    def branch_length(self) -> float:
        """Branch length to the parent, with an unset length read as 0."""
        return self.length if self.length is not None else 0.0

    # ------------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------------
    def append_child(self, node: Self) -> None:
        node.parent = self
        self.children.append(node)
        self.invalidate_caches(propagate_up=True)

    def deep_copy(self) -> Self:
        """Copy the subtree rooted here; the copy is detached from any parent."""
        new_root = object.__new__(type(self))
        new_root.parent = None
        stack = [(self, new_root)]
        while stack:
            source, target = stack.pop()
            target.name = source.name
            target.length = source.length
            target.values = dict(source.values)
            target._traverse_cache = None
            target._leaves_cache = None
            target.children = []
            for child in source.children:
                child_copy = object.__new__(type(self))
                child_copy.parent = target
                target.children.append(child_copy)
                stack.append((child, child_copy))
        return new_root

    # ------------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------------
    def traverse(self) -> List[Self]:
        """
        Return a list of all nodes in the subtree rooted at this node (Pre-order).
        Uses an iterative stack approach to avoid recursion depth issues.
        """
        if self._traverse_cache is not None:
            return self._traverse_cache

        nodes: List[Self] = []
        stack: List[Self] = [self]

        while stack:
            current = stack.pop()
            nodes.append(current)
            # Add children in reverse to maintain left-to-right visit order
            for child in reversed(current.children):
                stack.append(child)

        self._traverse_cache = nodes
        return nodes

    def postorder_traversal(self) -> List[Self]:
        """
        Return all nodes of the subtree with every node listed after all of
        its descendants. Children are visited left to right.
        """
        nodes: List[Self] = []
        stack: List[tuple[Self, bool]] = [(self, False)]

        while stack:
            current, expanded = stack.pop()
            if expanded or not current.children:
                nodes.append(current)
                continue
            stack.append((current, True))
            for child in reversed(current.children):
                stack.append((child, False))
        return nodes

    def internal_nodes(self) -> List[Self]:
        """Internal nodes in postorder."""
        return [node for node in self.postorder_traversal() if node.children]

    def get_leaves(self) -> List[Self]:
        """
        Return all leaf nodes in the subtree rooted at this node, left to right.
        Uses caching for performance - cache is invalidated when tree structure changes.
        """
        if self._leaves_cache is not None:
            return self._leaves_cache

        self._leaves_cache = [node for node in self.traverse() if not node.children]
        return self._leaves_cache

    def get_current_order(self) -> tuple[str, ...]:
        """
        Return the current order of taxa in the tree as a tuple.
        """
        return tuple(str(leaf.name) for leaf in self.get_leaves())

    def find_node_by_name(self, name: str) -> Optional[Self]:
        """First node in preorder whose label equals ``name``, leaves included."""
        for node in self.traverse():
            if node.name and node.name == name:
                return node
        return None

    def get_root(self) -> Self:
        cur = self
        while cur.parent is not None:
            cur = cur.parent
        return cur

    def is_leaf(self) -> bool:
        return len(self.children) == 0

    def is_internal(self) -> bool:
        return bool(self.children)

    # ------------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------------
    def validate(self) -> None:
        """
        Check that this node is the root of a well-formed tree.

        Raises:
            MalformedTreeError: if the node has a parent, a node is reachable
                twice, parent pointers disagree with child lists, a branch
                length is negative, or a leaf is unnamed.
        """
        if self.parent is not None:
            raise MalformedTreeError(
                f"{self!r} is not a root: it has parent {self.parent!r}"
            )

        seen: Set[int] = set()
        stack: List[Self] = [self]
        while stack:
            node = stack.pop()
            if id(node) in seen:
                raise MalformedTreeError(
                    f"{node!r} is reachable more than once (cycle or shared child)"
                )
            seen.add(id(node))
            if node.length is not None and node.length < 0:
                raise MalformedTreeError(
                    f"{node!r} has negative branch length {node.length}"
                )
            if not node.children and not node.name:
                raise MalformedTreeError("Found a leaf without a name")
            for child in node.children:
                if child.parent is not node:
                    raise MalformedTreeError(
                        f"{child!r} is listed as child of {node!r} "
                        f"but points to parent {child.parent!r}"
                    )
                stack.append(child)

    # ------------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------------
    def to_newick(self, lengths: bool = True) -> str:
        return self._to_newick(lengths=lengths) + ";"

    def _to_newick(self, lengths: bool = True) -> str:
        label = _quote_label(self.name or "")
        if self.children:
            label = (
                "(" + ",".join(ch._to_newick(lengths) for ch in self.children) + ")"
            ) + label
        if lengths and self.length is not None:
            return f"{label}:{float(self.length):.6f}"
        return label

    # ------------------------------------------------------------------------
    # Cache management
    # ------------------------------------------------------------------------
    def invalidate_caches(
        self, propagate_up: bool = True, propagate_down: bool = False
    ) -> None:
        """
        Drop cached traversals for this node.
        If propagate_up is True, also invalidate caches for all ancestors.
        If propagate_down is True, also invalidate caches for all descendants.
        """
        self._traverse_cache = None
        self._leaves_cache = None

        if propagate_down:
            for node in self.traverse():
                node._traverse_cache = None
                node._leaves_cache = None
            self._traverse_cache = None

        if propagate_up:
            ancestor = self.parent
            while ancestor is not None:
                ancestor._traverse_cache = None
                ancestor._leaves_cache = None
                ancestor = ancestor.parent


_NEWICK_SPECIAL = set("()[]':;, \t\n")


def _quote_label(label: str) -> str:
    if not any(char in _NEWICK_SPECIAL for char in label):
        return label
    return "'" + label.replace("'", "''") + "'"
