"""
Orthogroup clustering over an annotated tree.

- distances: root-distance annotation
- valid_leaves: bounded-divergence leaf collection
- candidates: one candidate per qualifying internal node
- resolver: greedy resolution into disjoint orthogroups
- taxa: gene to taxon lookup and missing-taxon policy
"""

from .types import Candidate, FinalCluster, RootDistances, NON_OG_LABEL
from .taxa import TaxonMap, MissingTaxonPolicy
from .distances import annotate_distances
from .valid_leaves import valid_leaves
from .candidates import generate_candidates
from .resolver import resolve_clusters, candidate_sort_key

__all__ = [
    "Candidate",
    "FinalCluster",
    "RootDistances",
    "NON_OG_LABEL",
    "TaxonMap",
    "MissingTaxonPolicy",
    "annotate_distances",
    "valid_leaves",
    "generate_candidates",
    "resolve_clusters",
    "candidate_sort_key",
]
