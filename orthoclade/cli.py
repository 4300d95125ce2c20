#!/usr/bin/env python3
"""
Extract allelic orthogroups from a phylogenetic tree.

Every internal node proposes the leaves it reaches without exceeding the
branch-length cutoff along any lineage. Proposals covering enough distinct
taxa are resolved largest first into disjoint orthogroups (OG1, OG2, ...);
genes left over are reported as non_OG.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from orthoclade.clustering.taxa import MissingTaxonPolicy
from orthoclade.exceptions import OrthogroupError
from orthoclade.io import (
    STDOUT,
    read_newick,
    read_taxon_table,
    write_assignment,
    write_count_matrix,
)
from orthoclade.pipeline import (
    DEFAULT_MAX_LENGTH,
    DEFAULT_REQUIRED_TAXA,
    OrthogroupPipeline,
    PipelineConfig,
)
from orthoclade.report import MATRIX_MODES, gene_count_matrix
from orthoclade.validators import NonNegativeFloatAction, PositiveIntegerAction

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure logging to standard error based on verbosity."""
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def setup_argument_parser() -> argparse.ArgumentParser:
    """
    Configure and return the argument parser.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog="orthoclade",
        description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # Required arguments
    parser.add_argument(
        "-i",
        "--input",
        help="Input tree file in Newick format",
        required=True,
        type=Path,
    )
    parser.add_argument(
        "-a",
        "--add",
        dest="taxa",
        help="Taxon table (TSV, col1: taxon, col2: gene)",
        required=True,
        type=Path,
    )

    # Clustering options
    clustering_group = parser.add_argument_group("clustering options")
    clustering_group.add_argument(
        "-m",
        "--max",
        dest="max_length",
        help=f"Maximum cumulative branch length below a node (default: {DEFAULT_MAX_LENGTH})",
        default=DEFAULT_MAX_LENGTH,
        type=float,
        action=NonNegativeFloatAction,
    )
    clustering_group.add_argument(
        "-t",
        "--taxa",
        dest="required_taxa",
        help=f"Minimum number of distinct taxa per orthogroup (default: {DEFAULT_REQUIRED_TAXA})",
        default=DEFAULT_REQUIRED_TAXA,
        type=int,
        action=PositiveIntegerAction,
    )
    clustering_group.add_argument(
        "-r",
        "--reroot",
        dest="reroot_id",
        help="Reroot the tree at the node with this label before clustering",
    )
    clustering_group.add_argument(
        "--missing-taxon",
        choices=[policy.value for policy in MissingTaxonPolicy],
        default=MissingTaxonPolicy.EXCLUDE.value,
        help=(
            "How genes absent from the taxon table count towards taxon diversity: "
            "exclude (not counted), singleton (each is its own taxon) or error "
            "(abort) (default: exclude)"
        ),
    )

    # Output options
    output_group = parser.add_argument_group("output options")
    output_group.add_argument(
        "-o",
        "--output",
        help="Output orthogroup table in TSV format (default: stdout)",
        default=STDOUT,
    )
    output_group.add_argument(
        "--matrix",
        help="Also write an orthogroup by taxon matrix to this TSV file",
        type=Path,
    )
    output_group.add_argument(
        "--matrix-type",
        choices=MATRIX_MODES,
        default="count",
        help="Matrix cells: gene counts or o/x presence marks (default: count)",
    )
    output_group.add_argument(
        "--progress",
        help="Show a progress bar while scanning internal nodes",
        action="store_true",
    )
    output_group.add_argument(
        "-v",
        "--verbose",
        help="Enable debug logging",
        action="store_true",
    )
    output_group.add_argument(
        "-q",
        "--quiet",
        help="Only log warnings and errors",
        action="store_true",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = setup_argument_parser()
    args = parser.parse_args(argv)
    setup_logging(verbose=args.verbose, quiet=args.quiet)

    config = PipelineConfig(
        max_length=args.max_length,
        required_taxa=args.required_taxa,
        reroot_id=args.reroot_id,
        missing_taxon=MissingTaxonPolicy(args.missing_taxon),
        show_progress=args.progress,
    )

    try:
        tree = read_newick(args.input)
        taxon_map = read_taxon_table(args.taxa, policy=config.missing_taxon)
        assignment = OrthogroupPipeline(config).process_tree(tree, taxon_map)
    except FileNotFoundError as e:
        logger.error(f"Cannot find input file: {e.filename}")
        return 1
    except (OrthogroupError, ValueError) as e:
        logger.error(str(e))
        return 1

    write_assignment(assignment, args.output)
    if args.matrix is not None:
        write_count_matrix(
            gene_count_matrix(assignment, taxon_map, mode=args.matrix_type),
            args.matrix,
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
