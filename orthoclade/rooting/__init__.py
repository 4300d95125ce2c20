"""
Rooting module for phylogenetic trees.

- core_rooting: rerooting at a node or a node label, and path lengths
"""

from .core_rooting import reroot_at_node, reroot_by_name, path_length

__all__ = [
    "reroot_at_node",
    "reroot_by_name",
    "path_length",
]
