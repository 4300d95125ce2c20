import logging
from typing import Callable

import pytest

from orthoclade.clustering.taxa import TaxonMap
from orthoclade.tree import Node


def pytest_configure(config):
    """Set up test environment before tests run."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@pytest.fixture
def unique_taxa() -> Callable[[Node], TaxonMap]:
    """Build a TaxonMap that puts every leaf of a tree in its own taxon."""

    def _build(tree: Node) -> TaxonMap:
        return TaxonMap({leaf.name: f"taxon_{leaf.name}" for leaf in tree.get_leaves()})

    return _build
