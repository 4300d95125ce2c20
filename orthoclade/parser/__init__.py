"""
Newick format parser module for phylogenetic trees.

This module parses Newick format strings into ``orthoclade.tree.Node``
structures.
"""

from .newick_parser import parse_newick

__all__ = ["parse_newick"]
