import csv
import logging
import sys
from pathlib import Path
from typing import Union

import pandas as pd

from orthoclade.clustering.taxa import MissingTaxonPolicy, TaxonMap
from orthoclade.parser.newick_parser import parse_newick
from orthoclade.report import Assignment
from orthoclade.tree import Node

logger = logging.getLogger(__name__)

STDOUT = "stdout"


def read_newick(path: Union[str, Path]) -> Node:
    """Read the first tree of a Newick file."""
    with open(path) as f:
        newick_string: str = f.read()

    tree = parse_newick(newick_string)
    logger.info(f"Read tree with {len(tree.get_leaves())} leaves from {path}")
    return tree


def read_taxon_table(
    path: Union[str, Path],
    policy: MissingTaxonPolicy = MissingTaxonPolicy.EXCLUDE,
) -> TaxonMap:
    """
    Read a tab-separated taxon table without header: column 1 is the taxon,
    column 2 the gene. Further columns are ignored.

    Raises:
        ValueError: If the file has fewer than two columns or cannot be parsed.
    """
    try:
        frame = pd.read_csv(
            path,
            sep="\t",
            header=None,
            names=["taxon", "gene"],
            usecols=[0, 1],
            dtype=str,
            keep_default_na=False,
            quoting=csv.QUOTE_NONE,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError:
        logger.warning(f"Taxon table {path} is empty")
        return TaxonMap({}, policy=policy)
    except ValueError as e:
        raise ValueError(f"Cannot parse taxon table {path}: {e}") from e

    taxa = frame["taxon"].fillna("").str.strip()
    genes = frame["gene"].fillna("").str.strip()
    if len(frame) and (genes == "").all():
        raise ValueError(
            f"Taxon table {path} needs two tab-separated columns (taxon, gene)"
        )

    incomplete = (taxa == "") | (genes == "")
    if incomplete.any():
        logger.warning(
            f"Skipping {int(incomplete.sum())} row(s) without taxon or gene in {path}"
        )

    taxon_map = TaxonMap.from_pairs(
        zip(taxa[~incomplete], genes[~incomplete]), policy=policy
    )
    logger.info(f"Read taxa for {len(taxon_map)} genes from {path}")
    return taxon_map


def write_assignment(assignment: Assignment, destination: Union[str, Path]) -> None:
    """
    Write the ``Gene``/``Cluster`` table as TSV to a path, or to standard
    output when ``destination`` is ``"stdout"`` (any case).
    """
    frame = assignment.to_dataframe()
    if str(destination).lower() == STDOUT:
        frame.to_csv(sys.stdout, sep="\t", index=False)
        return
    frame.to_csv(destination, sep="\t", index=False)
    logger.info(f"Wrote {len(frame)} gene assignments to {destination}")


def write_count_matrix(matrix: pd.DataFrame, path: Union[str, Path]) -> None:
    """Write an orthogroup by taxon matrix as TSV, labels in the first column."""
    matrix.to_csv(path, sep="\t", index=True, index_label="Cluster")
    logger.info(f"Wrote {len(matrix)} x {len(matrix.columns)} matrix to {path}")
