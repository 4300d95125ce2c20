"""Core type definitions for orthogroup extraction."""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Tuple, TypeAlias

from orthoclade.tree import Node

RootDistances: TypeAlias = Dict[Node, float]
"""Cumulative branch length from the root, keyed by node identity."""

NON_OG_LABEL = "non_OG"


@dataclass(frozen=True)
class Candidate:
    """Orthogroup proposed by one internal node, before overlap resolution."""

    genes: Tuple[str, ...]
    """Valid leaves of the node, in left-to-right order."""

    taxa: FrozenSet[str]
    """Distinct taxa represented by ``genes``."""

    index: int
    """Position of the proposing node among internal nodes in postorder."""

    node_name: str = ""

    root_distance: float = 0.0
    """Root distance of the proposing node."""

    @property
    def size(self) -> int:
        return len(self.genes)


@dataclass(frozen=True)
class FinalCluster:
    """Committed orthogroup; disjoint from every other FinalCluster."""

    label: str
    genes: Tuple[str, ...]
    taxa: FrozenSet[str]

    source_index: int
    """``Candidate.index`` of the candidate this cluster was committed from."""

    root_distance: float = 0.0

    @property
    def size(self) -> int:
        return len(self.genes)
