"""
Custom exceptions for orthogroup extraction.
"""

from __future__ import annotations


class OrthogroupError(Exception):
    """Base exception for orthogroup extraction errors."""

    pass


class MalformedTreeError(OrthogroupError):
    """Raised when a tree has no usable root or breaks structural invariants."""

    pass


class NodeNotFoundError(OrthogroupError):
    """Raised when a node label requested for rerooting is not in the tree."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Cannot find reroot ID '{name}' in all tree labels")


class MissingTaxonError(OrthogroupError):
    """Raised when leaf genes have no taxon assignment and the policy is strict."""

    def __init__(self, genes: list[str]):
        self.genes = genes
        preview = ", ".join(genes[:5])
        if len(genes) > 5:
            preview += f", ... ({len(genes) - 5} more)"
        super().__init__(f"No taxon assigned to {len(genes)} gene(s): {preview}")
