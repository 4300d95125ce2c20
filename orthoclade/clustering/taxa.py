"""Gene to taxon lookup with an explicit policy for unmapped genes."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from orthoclade.exceptions import MissingTaxonError

logger = logging.getLogger(__name__)


class MissingTaxonPolicy(Enum):
    """How a gene without a taxon entry counts towards taxon diversity."""

    EXCLUDE = "exclude"
    """The gene stays a cluster member but adds no taxon."""

    SINGLETON = "singleton"
    """Each unmapped gene counts as its own taxon, distinct from every other
    taxon and from every other unmapped gene."""

    ERROR = "error"
    """Any unmapped leaf gene aborts the run with MissingTaxonError."""


def _singleton_taxon(gene: str) -> str:
    return f"unassigned:{gene}"


class TaxonMap:
    """
    Read-only mapping from gene identifier to taxon identifier.

    Built once before clustering and passed explicitly to every stage that
    needs taxon information.
    """

    def __init__(
        self,
        gene_to_taxon: Mapping[str, str],
        policy: MissingTaxonPolicy = MissingTaxonPolicy.EXCLUDE,
    ):
        self._gene_to_taxon: Dict[str, str] = dict(gene_to_taxon)
        self.policy = policy

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[Tuple[str, str]],
        policy: MissingTaxonPolicy = MissingTaxonPolicy.EXCLUDE,
    ) -> "TaxonMap":
        """
        Build a map from (taxon, gene) pairs.

        A gene listed more than once keeps its last taxon.
        """
        gene_to_taxon: Dict[str, str] = {}
        for taxon, gene in pairs:
            previous = gene_to_taxon.get(gene)
            if previous is not None and previous != taxon:
                logger.warning(
                    f"Gene '{gene}' is assigned to both '{previous}' and '{taxon}'; "
                    f"keeping '{taxon}'"
                )
            gene_to_taxon[gene] = taxon
        return cls(gene_to_taxon, policy=policy)

    def with_policy(self, policy: MissingTaxonPolicy) -> "TaxonMap":
        return TaxonMap(self._gene_to_taxon, policy=policy)

    def __len__(self) -> int:
        return len(self._gene_to_taxon)

    def __contains__(self, gene: object) -> bool:
        return gene in self._gene_to_taxon

    def __repr__(self) -> str:
        return f"TaxonMap({len(self)} genes, policy={self.policy.value})"

    def get(self, gene: str) -> Optional[str]:
        return self._gene_to_taxon.get(gene)

    def missing_genes(self, genes: Iterable[str]) -> List[str]:
        """Genes without a taxon entry, in input order."""
        return [gene for gene in genes if gene not in self._gene_to_taxon]

    def check_genes(self, genes: Iterable[str]) -> None:
        """
        Apply the missing-taxon policy to a full gene set up front.

        Raises:
            MissingTaxonError: Under the ERROR policy, if any gene is unmapped.
        """
        missing = self.missing_genes(genes)
        if not missing:
            return
        if self.policy is MissingTaxonPolicy.ERROR:
            raise MissingTaxonError(missing)
        logger.warning(
            f"{len(missing)} leaf gene(s) have no taxon assignment "
            f"(policy: {self.policy.value})"
        )

    def taxa_of(self, genes: Iterable[str]) -> FrozenSet[str]:
        """
        Distinct taxa represented by ``genes`` under the map's policy.

        Raises:
            MissingTaxonError: Under the ERROR policy, for an unmapped gene.
        """
        taxa = set()
        for gene in genes:
            taxon = self._gene_to_taxon.get(gene)
            if taxon is not None:
                taxa.add(taxon)
            elif self.policy is MissingTaxonPolicy.SINGLETON:
                taxa.add(_singleton_taxon(gene))
            elif self.policy is MissingTaxonPolicy.ERROR:
                raise MissingTaxonError([gene])
        return frozenset(taxa)
