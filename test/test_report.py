import pytest

from orthoclade.clustering.taxa import TaxonMap
from orthoclade.clustering.types import FinalCluster
from orthoclade.report import build_assignment, gene_count_matrix


def cluster(label, genes, taxon_map, index=0, root_distance=0.0):
    return FinalCluster(
        label=label,
        genes=tuple(genes),
        taxa=taxon_map.taxa_of(genes),
        source_index=index,
        root_distance=root_distance,
    )


TAXA = TaxonMap(
    {"a": "human", "b": "mouse", "c": "human", "d": "rat", "e": "mouse", "f": "rat"}
)


def test_clusters_first_then_unassigned_in_leaf_order():
    leaves = ["f", "a", "b", "c", "d", "e"]
    clusters = [cluster("OG1", ["c", "d"], TAXA), cluster("OG2", ["a", "b"], TAXA)]
    assignment = build_assignment(leaves, clusters)
    assert list(assignment) == [
        ("c", "OG1"),
        ("d", "OG1"),
        ("a", "OG2"),
        ("b", "OG2"),
        ("f", "non_OG"),
        ("e", "non_OG"),
    ]
    assert len(assignment) == 6
    assert assignment.unassigned() == ["f", "e"]
    assert assignment.labels()["d"] == "OG1"
    assert assignment.clusters_by_label() == {"OG1": ("c", "d"), "OG2": ("a", "b")}


def test_no_clusters_means_all_non_og():
    assignment = build_assignment(["a", "b"], [])
    assert list(assignment) == [("a", "non_OG"), ("b", "non_OG")]


def test_unknown_gene_is_rejected():
    with pytest.raises(ValueError):
        build_assignment(["a", "b"], [cluster("OG1", ["a", "z"], TAXA)])


def test_gene_in_two_clusters_is_rejected():
    with pytest.raises(ValueError):
        build_assignment(
            ["a", "b", "c"],
            [cluster("OG1", ["a", "b"], TAXA), cluster("OG2", ["b", "c"], TAXA)],
        )


def test_to_dataframe():
    assignment = build_assignment(["a", "b", "c"], [cluster("OG1", ["a", "b"], TAXA)])
    frame = assignment.to_dataframe()
    assert list(frame.columns) == ["Gene", "Cluster"]
    assert frame["Cluster"].tolist() == ["OG1", "OG1", "non_OG"]


def test_summary():
    assignment = build_assignment(
        ["a", "b", "c", "d"],
        [
            cluster("OG1", ["a", "b", "c"], TAXA, root_distance=0.5),
            cluster("OG2", ["d"], TAXA, root_distance=0.25),
        ],
    )
    summary = assignment.summary()
    assert summary["Cluster"].tolist() == ["OG1", "OG2"]
    assert summary["Genes"].tolist() == [3, 1]
    assert summary["Taxa"].tolist() == [2, 1]
    assert summary["RootDistance"].tolist() == [0.5, 0.25]


def test_gene_count_matrix_counts():
    assignment = build_assignment(
        list("abcdef"),
        [cluster("OG1", ["a", "b", "c"], TAXA), cluster("OG2", ["d", "e"], TAXA)],
    )
    matrix = gene_count_matrix(assignment, TAXA)
    assert matrix.index.tolist() == ["OG1", "OG2"]
    assert matrix.columns.tolist() == ["human", "mouse", "rat"]
    assert matrix.loc["OG1"].tolist() == [2, 1, 0]
    assert matrix.loc["OG2"].tolist() == [0, 1, 1]


def test_gene_count_matrix_circle():
    assignment = build_assignment(
        list("abcdef"),
        [cluster("OG1", ["a", "b", "c"], TAXA), cluster("OG2", ["d", "e"], TAXA)],
    )
    matrix = gene_count_matrix(assignment, TAXA, mode="circle")
    assert matrix.loc["OG1"].tolist() == ["o", "o", "x"]
    assert matrix.loc["OG2"].tolist() == ["x", "o", "o"]


def test_gene_count_matrix_keeps_commit_order_past_nine():
    genes = [f"g{i}" for i in range(12)]
    taxon_map = TaxonMap({gene: "t" for gene in genes})
    clusters = [cluster(f"OG{i + 1}", [gene], taxon_map) for i, gene in enumerate(genes)]
    matrix = gene_count_matrix(build_assignment(genes, clusters), taxon_map)
    assert matrix.index.tolist() == [f"OG{i}" for i in range(1, 13)]


def test_gene_count_matrix_unassigned_taxon_column():
    taxon_map = TaxonMap({"a": "human"})
    assignment = build_assignment(["a", "x"], [cluster("OG1", ["a", "x"], taxon_map)])
    matrix = gene_count_matrix(assignment, taxon_map)
    assert matrix.columns.tolist() == ["human", "unassigned"]


def test_gene_count_matrix_empty_and_bad_mode():
    assignment = build_assignment(["a"], [])
    assert gene_count_matrix(assignment, TAXA).empty
    with pytest.raises(ValueError):
        gene_count_matrix(assignment, TAXA, mode="pie")
