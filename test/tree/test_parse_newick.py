import logging

import pytest

from orthoclade.exceptions import MalformedTreeError
from orthoclade.parser.newick_parser import parse_newick, split_token


def get_child(node, *path):
    for index in path:
        node = node.children[index]
    return node


def test_parse_newick_names():
    root = parse_newick("(A,B,(C,D));")
    assert len(root.children) == 3
    assert len(root.children[2].children) == 2
    assert get_child(root, 0).name == "A"
    assert get_child(root, 1).name == "B"
    assert get_child(root, 2, 0).name == "C"
    assert get_child(root, 2, 1).name == "D"


def test_parse_newick_internal_labels():
    root = parse_newick("(A,B,(C,D)E)F;")
    assert get_child(root, 2).name == "E"
    assert get_child(root).name == "F"


def test_parse_newick_lengths():
    root = parse_newick("(A:0.1,B:0.2,(C:0.3,D:0.4):0.5):0.0;")
    assert get_child(root, 0).length == 0.1
    assert get_child(root, 1).length == 0.2
    assert get_child(root, 2, 0).length == 0.3
    assert get_child(root, 2, 1).length == 0.4
    assert get_child(root, 2).length == 0.5
    assert root.length == 0.0


def test_parse_newick_missing_lengths_stay_unset():
    root = parse_newick("(A,B:,(C:1e-3,D)E);")
    assert get_child(root, 0).length is None
    assert get_child(root, 1).length is None
    assert get_child(root, 2, 0).length == 0.001
    assert get_child(root, 2).length is None
    assert get_child(root, 0).branch_length == 0.0


def test_parse_newick_whitespace_and_newlines():
    root = parse_newick("(\n  A : 0.1 ,\n  B : 0.2\n) ;\n")
    assert list(root.get_current_order()) == ["A", "B"]
    assert get_child(root, 1).length == 0.2


def test_parse_newick_quoted_labels():
    root = parse_newick("('gene one':0.1,'it''s':0.2,'a,b':0.3);")
    assert list(root.get_current_order()) == ["gene one", "it's", "a,b"]
    assert get_child(root, 2).length == 0.3


def test_parse_newick_nhx_metadata():
    root = parse_newick("(A:0.1[&&NHX:S=human:D=N],B[&&NHX:S=mouse]);")
    assert get_child(root, 0).values == {"S": "human", "D": "N"}
    assert get_child(root, 0).length == 0.1
    assert get_child(root, 1).values == {"S": "mouse"}


def test_parse_newick_bootstrap_labels_as_names():
    root = parse_newick("((A:0.1,B:0.1)95:0.2,C:0.3);")
    assert get_child(root, 0).name == "95"


def test_parse_newick_only_first_tree():
    root = parse_newick("(A,B);(C,D);")
    assert list(root.get_current_order()) == ["A", "B"]


def test_parse_newick_without_semicolon():
    root = parse_newick("(A:1,B:2)")
    assert list(root.get_current_order()) == ["A", "B"]


def test_parse_newick_single_leaf():
    root = parse_newick("A;")
    assert root.is_leaf()
    assert root.name == "A"


def test_parse_newick_parent_pointers():
    root = parse_newick("((A,B)X,C);")
    for node in root.traverse():
        for child in node.children:
            assert child.parent is node
    assert root.parent is None


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   ",
        ";",
        "((A,B);",
        "(A,B));",
        "(A:abc,B);",
        "(A:-1,B);",
        "A,B;",
        "(,);",
        "('A,B);",
        "(A[comment,B);",
    ],
)
def test_parse_newick_malformed(text):
    with pytest.raises(MalformedTreeError):
        parse_newick(text)


def test_split_token():
    assert split_token("S=human") == ("S", "human")
    assert split_token("B=95") == ("B", 95)
    assert split_token("flag") == ("flag", True)


def test_space_inside_unquoted_label_is_reported(caplog):
    with caplog.at_level(logging.WARNING):
        root = parse_newick("(Homo sapiens_g1:0.01,B:0.01);")
    assert list(root.get_current_order()) == ["Homosapiens_g1", "B"]
    assert "Dropped whitespace inside unquoted label starting 'Homo'" in caplog.text


def test_space_between_tokens_is_not_reported(caplog):
    with caplog.at_level(logging.WARNING):
        root = parse_newick("( A :0.01 , B:0.01 ) X ;\n")
    assert list(root.get_current_order()) == ["A", "B"]
    assert root.name == "X"
    assert "Dropped whitespace" not in caplog.text
