"""Candidate orthogroup generation over the internal nodes of a tree."""

import logging
from typing import List, Optional

from tqdm import tqdm

from orthoclade.clustering.distances import annotate_distances
from orthoclade.clustering.taxa import TaxonMap
from orthoclade.clustering.types import Candidate, RootDistances
from orthoclade.clustering.valid_leaves import valid_leaves
from orthoclade.tree import Node

logger = logging.getLogger(__name__)


def generate_candidates(
    root: Node,
    taxon_map: TaxonMap,
    max_length: float,
    required_taxa: int,
    distances: Optional[RootDistances] = None,
    show_progress: bool = False,
) -> List[Candidate]:
    """
    Propose one candidate orthogroup per qualifying internal node.

    Internal nodes are visited in postorder. For each node the valid leaves
    within ``max_length`` are collected; the node proposes a candidate when
    those leaves represent at least ``required_taxa`` distinct taxa.
    Candidates of nested nodes overlap; overlaps are settled by
    :func:`orthoclade.clustering.resolver.resolve_clusters`.

    Args:
        root: Root of the (rerooted) tree.
        taxon_map: Gene to taxon lookup.
        max_length: Divergence cutoff.
        required_taxa: Minimum number of distinct taxa per candidate.
        distances: Precomputed root distances; computed here when omitted.
        show_progress: Display a progress bar over internal nodes.

    Returns:
        Candidates in discovery order, ``Candidate.index`` counting internal
        nodes in postorder.
    """
    if distances is None:
        distances = annotate_distances(root)

    internal = root.internal_nodes()
    candidates: List[Candidate] = []
    for index, node in enumerate(
        tqdm(
            internal,
            desc="Scanning internal nodes",
            unit="node",
            disable=not show_progress,
        )
    ):
        leaves = valid_leaves(node, max_length)
        if not leaves:
            continue

        taxa = taxon_map.taxa_of(leaves)
        if len(taxa) >= required_taxa:
            candidates.append(
                Candidate(
                    genes=tuple(leaves),
                    taxa=taxa,
                    index=index,
                    node_name=node.name,
                    root_distance=distances[node],
                )
            )

    logger.info(
        f"Generated {len(candidates)} candidate(s) from {len(internal)} internal node(s)"
    )
    return candidates
