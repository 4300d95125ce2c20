"""Orthogroup extraction pipeline."""

from collections import Counter
from dataclasses import dataclass
from typing import Mapping, Optional, Union
import logging
import time

from orthoclade.clustering.candidates import generate_candidates
from orthoclade.clustering.distances import annotate_distances
from orthoclade.clustering.resolver import resolve_clusters
from orthoclade.clustering.taxa import MissingTaxonPolicy, TaxonMap
from orthoclade.exceptions import MalformedTreeError
from orthoclade.report import Assignment, build_assignment
from orthoclade.rooting import reroot_by_name
from orthoclade.tree import Node

DEFAULT_MAX_LENGTH = 0.1
DEFAULT_REQUIRED_TAXA = 4


@dataclass
class PipelineConfig:
    """Configuration for orthogroup extraction."""

    max_length: float = DEFAULT_MAX_LENGTH
    """Divergence cutoff for collecting the valid leaves of a node."""

    required_taxa: int = DEFAULT_REQUIRED_TAXA
    """Minimum number of distinct taxa in a candidate and in a committed cluster."""

    reroot_id: Optional[str] = None
    """Label of the node to reroot at before clustering."""

    missing_taxon: MissingTaxonPolicy = MissingTaxonPolicy.EXCLUDE
    show_progress: bool = False
    logger_name: str = __name__

    def __post_init__(self) -> None:
        if isinstance(self.missing_taxon, str):
            self.missing_taxon = MissingTaxonPolicy(self.missing_taxon)
        if self.max_length < 0:
            raise ValueError(f"max_length must be >= 0, got {self.max_length}")
        if isinstance(self.required_taxa, bool) or not isinstance(
            self.required_taxa, int
        ):
            raise ValueError(
                f"required_taxa must be an integer, got {self.required_taxa!r}"
            )
        if self.required_taxa < 1:
            raise ValueError(f"required_taxa must be >= 1, got {self.required_taxa}")
        if self.reroot_id == "":
            self.reroot_id = None


class OrthogroupPipeline:
    """
    Runs the full extraction on one tree: rerooting, root-distance
    annotation, candidate generation, overlap resolution and labelling.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initializes the orthogroup pipeline.

        Args:
            config: Pipeline configuration settings.
            logger: Logger instance for pipeline events.
        """
        self.config: PipelineConfig = config or PipelineConfig()
        self.logger = logger or logging.getLogger(self.config.logger_name)

    def process_tree(
        self, tree: Node, taxa: Union[TaxonMap, Mapping[str, str]]
    ) -> Assignment:
        """
        Extract orthogroups from ``tree``.

        The tree is rerooted in place when ``config.reroot_id`` is set.

        Args:
            tree: Any node of the tree; its root is used.
            taxa: Gene to taxon lookup. The configured missing-taxon policy
                applies regardless of the policy a TaxonMap was built with.

        Returns:
            The label of every leaf gene.

        Raises:
            MalformedTreeError: If the tree is structurally invalid or has
                duplicate leaf names.
            NodeNotFoundError: If ``config.reroot_id`` matches no node.
            MissingTaxonError: Under the ``error`` policy, if a leaf gene
                has no taxon.
        """
        start_time = time.time()

        root = self._prepare_tree(tree)
        taxon_map = self._prepare_taxon_map(taxa)

        leaf_names = [leaf.name for leaf in root.get_leaves()]
        taxon_map.check_genes(leaf_names)
        self.logger.info(
            f"Clustering {len(leaf_names)} genes "
            f"(max_length={self.config.max_length}, "
            f"required_taxa={self.config.required_taxa})"
        )

        distances = annotate_distances(root)
        candidates = generate_candidates(
            root,
            taxon_map,
            max_length=self.config.max_length,
            required_taxa=self.config.required_taxa,
            distances=distances,
            show_progress=self.config.show_progress,
        )
        clusters = resolve_clusters(
            candidates, taxon_map, required_taxa=self.config.required_taxa
        )
        assignment = build_assignment(leaf_names, clusters)

        self.logger.info(
            f"Extracted {len(clusters)} orthogroup(s) in "
            f"{time.time() - start_time:.2f} seconds"
        )
        return assignment

    # --- Private helpers ---

    def _prepare_tree(self, tree: Node) -> Node:
        root = tree.get_root()
        root.validate()

        duplicates = [
            name
            for name, count in Counter(leaf.name for leaf in root.get_leaves()).items()
            if count > 1
        ]
        if duplicates:
            raise MalformedTreeError(
                f"Leaf names must be unique; duplicated: {', '.join(sorted(duplicates))}"
            )

        if self.config.reroot_id is not None:
            root = reroot_by_name(root, self.config.reroot_id)
        return root

    def _prepare_taxon_map(self, taxa: Union[TaxonMap, Mapping[str, str]]) -> TaxonMap:
        if isinstance(taxa, TaxonMap):
            return taxa.with_policy(self.config.missing_taxon)
        return TaxonMap(taxa, policy=self.config.missing_taxon)


def extract_orthogroups(
    tree: Node,
    taxa: Union[TaxonMap, Mapping[str, str]],
    max_length: float = DEFAULT_MAX_LENGTH,
    required_taxa: int = DEFAULT_REQUIRED_TAXA,
    reroot_id: Optional[str] = None,
    missing_taxon: Union[MissingTaxonPolicy, str] = MissingTaxonPolicy.EXCLUDE,
) -> Assignment:
    """Functional shortcut for ``OrthogroupPipeline(PipelineConfig(...)).process_tree``."""
    config = PipelineConfig(
        max_length=max_length,
        required_taxa=required_taxa,
        reroot_id=reroot_id,
        missing_taxon=missing_taxon,
    )
    return OrthogroupPipeline(config).process_tree(tree, taxa)
