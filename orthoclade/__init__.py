"""Allelic orthogroup extraction from phylogenetic trees."""

__all__ = [
    "Node",
    "parse_newick",
    "TaxonMap",
    "MissingTaxonPolicy",
    "PipelineConfig",
    "OrthogroupPipeline",
    "extract_orthogroups",
    "Assignment",
    "OrthogroupError",
    "MalformedTreeError",
    "NodeNotFoundError",
    "MissingTaxonError",
]


def __getattr__(name):
    if name == "Node":
        from .tree import Node

        return Node
    if name == "parse_newick":
        from .parser import parse_newick

        return parse_newick
    if name in {"TaxonMap", "MissingTaxonPolicy"}:
        from .clustering import taxa

        return getattr(taxa, name)
    if name in {"PipelineConfig", "OrthogroupPipeline", "extract_orthogroups"}:
        from . import pipeline

        return getattr(pipeline, name)
    if name == "Assignment":
        from .report import Assignment

        return Assignment
    if name in {
        "OrthogroupError",
        "MalformedTreeError",
        "NodeNotFoundError",
        "MissingTaxonError",
    }:
        from . import exceptions

        return getattr(exceptions, name)
    raise AttributeError(name)
