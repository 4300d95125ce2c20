"""Greedy resolution of overlapping candidates into disjoint orthogroups."""

import logging
from typing import Iterable, List, Set

from orthoclade.clustering.taxa import TaxonMap
from orthoclade.clustering.types import Candidate, FinalCluster

logger = logging.getLogger(__name__)


def candidate_sort_key(candidate: Candidate) -> tuple[int, int]:
    """Larger candidates first; equal sizes in postorder discovery order."""
    return (-candidate.size, candidate.index)


def resolve_clusters(
    candidates: Iterable[Candidate],
    taxon_map: TaxonMap,
    required_taxa: int,
) -> List[FinalCluster]:
    """
    Commit disjoint orthogroups from overlapping candidates, largest first.

    Each candidate, in :func:`candidate_sort_key` order, is reduced to the
    genes not yet claimed by an earlier commitment. The remainder is committed
    as a new cluster only if it is non-empty and still represents at least
    ``required_taxa`` distinct taxa on its own.

    Returns:
        FinalClusters in commit order, labelled ``OG1``, ``OG2``, ...
    """
    occupied: Set[str] = set()
    final_clusters: List[FinalCluster] = []

    for candidate in sorted(candidates, key=candidate_sort_key):
        new_genes = tuple(gene for gene in candidate.genes if gene not in occupied)
        if not new_genes:
            continue

        new_taxa = taxon_map.taxa_of(new_genes)
        if len(new_taxa) < required_taxa:
            logger.debug(
                f"Dropping remainder of candidate {candidate.index}: "
                f"{len(new_genes)} gene(s), {len(new_taxa)} taxa"
            )
            continue

        final_clusters.append(
            FinalCluster(
                label=f"OG{len(final_clusters) + 1}",
                genes=new_genes,
                taxa=new_taxa,
                source_index=candidate.index,
                root_distance=candidate.root_distance,
            )
        )
        occupied.update(new_genes)

    logger.info(f"Resolved {len(final_clusters)} orthogroup(s)")
    return final_clusters
