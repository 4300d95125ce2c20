"""Orthogroup labels for every leaf, and tabular views of the result."""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Sequence, Tuple

import pandas as pd

from orthoclade.clustering.taxa import TaxonMap
from orthoclade.clustering.types import NON_OG_LABEL, FinalCluster

logger = logging.getLogger(__name__)

UNASSIGNED_TAXON = "unassigned"
MATRIX_MODES = ("count", "circle")


@dataclass
class Assignment:
    """
    Final label of every leaf gene.

    ``rows`` lists (gene, label) pairs: the genes of each orthogroup in commit
    order first, then the unassigned genes in leaf order with label
    ``non_OG``. Every leaf of the tree appears exactly once.
    """

    rows: List[Tuple[str, str]]
    clusters: List[FinalCluster] = field(default_factory=list)

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def labels(self) -> Dict[str, str]:
        """Gene to label lookup."""
        return dict(self.rows)

    def unassigned(self) -> List[str]:
        return [gene for gene, label in self.rows if label == NON_OG_LABEL]

    def clusters_by_label(self) -> Dict[str, Tuple[str, ...]]:
        return {cluster.label: cluster.genes for cluster in self.clusters}

    def to_dataframe(self) -> pd.DataFrame:
        """The assignment as a two-column ``Gene``/``Cluster`` table."""
        return pd.DataFrame(self.rows, columns=["Gene", "Cluster"])

    def summary(self) -> pd.DataFrame:
        """
        One row per orthogroup with its gene count, taxon count and the root
        distance of the node it was proposed by.
        """
        return pd.DataFrame(
            [
                {
                    "Cluster": cluster.label,
                    "Genes": cluster.size,
                    "Taxa": len(cluster.taxa),
                    "RootDistance": cluster.root_distance,
                }
                for cluster in self.clusters
            ],
            columns=["Cluster", "Genes", "Taxa", "RootDistance"],
        )


def build_assignment(
    leaf_names: Sequence[str], clusters: Sequence[FinalCluster]
) -> Assignment:
    """
    Label every leaf with its orthogroup, or ``non_OG`` if it has none.

    Args:
        leaf_names: All leaf genes of the tree, in leaf order.
        clusters: Disjoint clusters in commit order.

    Raises:
        ValueError: If a cluster holds a gene that is not a leaf, or a gene
            is claimed twice.
    """
    leaf_set = set(leaf_names)
    rows: List[Tuple[str, str]] = []
    assigned: Dict[str, str] = {}

    for cluster in clusters:
        for gene in cluster.genes:
            if gene not in leaf_set:
                raise ValueError(f"{cluster.label} contains unknown gene '{gene}'")
            if gene in assigned:
                raise ValueError(
                    f"Gene '{gene}' is in both {assigned[gene]} and {cluster.label}"
                )
            assigned[gene] = cluster.label
            rows.append((gene, cluster.label))

    for gene in leaf_names:
        if gene not in assigned:
            rows.append((gene, NON_OG_LABEL))

    logger.info(
        f"Assigned {len(assigned)} of {len(leaf_names)} gene(s) to "
        f"{len(clusters)} orthogroup(s)"
    )
    return Assignment(rows=rows, clusters=list(clusters))


def gene_count_matrix(
    assignment: Assignment, taxon_map: TaxonMap, mode: str = "count"
) -> pd.DataFrame:
    """
    Orthogroup by taxon table of assigned genes.

    Rows follow the orthogroup commit order and columns are sorted taxon
    names. Genes without a taxon are counted under ``unassigned``.

    Args:
        assignment: Result of :func:`build_assignment`.
        taxon_map: Gene to taxon lookup.
        mode: ``"count"`` for gene counts, ``"circle"`` for ``o``/``x``
            presence marks.

    Raises:
        ValueError: For an unknown mode.
    """
    if mode not in MATRIX_MODES:
        raise ValueError(f"Unknown matrix mode '{mode}', expected one of {MATRIX_MODES}")

    records = [
        (cluster.label, taxon_map.get(gene) or UNASSIGNED_TAXON)
        for cluster in assignment.clusters
        for gene in cluster.genes
    ]
    if not records:
        return pd.DataFrame(index=pd.Index([], name="Cluster"))

    frame = pd.DataFrame(records, columns=["Cluster", "Taxon"])
    matrix = pd.crosstab(frame["Cluster"], frame["Taxon"])
    matrix = matrix.reindex([cluster.label for cluster in assignment.clusters])
    matrix = matrix[sorted(matrix.columns)]
    matrix.columns.name = None

    if mode == "circle":
        matrix = matrix.gt(0).apply(lambda column: column.map({True: "o", False: "x"}))
    return matrix
