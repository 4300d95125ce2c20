import pytest

from orthoclade.exceptions import MalformedTreeError
from orthoclade.parser.newick_parser import parse_newick
from orthoclade.tree import Node


def make_simple_tree():
    #     R
    #    / \
    #   X   C
    #  / \
    # A   B
    a = Node(name="A", length=1.0)
    b = Node(name="B", length=2.0)
    x = Node(children=[a, b], name="X", length=3.0)
    c = Node(name="C", length=4.0)
    r = Node(children=[x, c], name="R")
    return r, x, a, b, c


def make_caterpillar(depth: int) -> Node:
    root = Node(name="")
    current = root
    for i in range(depth):
        leaf = Node(name=f"L{i}", length=0.001)
        inner = Node(name="", length=0.001)
        current.children = [leaf, inner]
        leaf.parent = current
        inner.parent = current
        current = inner
    current.name = "tail"
    return root


def test_constructor_sets_parent_pointers():
    r, x, a, b, c = make_simple_tree()
    assert a.parent is x
    assert x.parent is r
    assert r.parent is None
    assert c.parent is r


def test_unset_length_reads_as_zero():
    assert Node(name="A").branch_length == 0.0
    assert Node(name="A", length=0.25).branch_length == 0.25


def test_traverse_is_preorder():
    r, x, a, b, c = make_simple_tree()
    assert r.traverse() == [r, x, a, b, c]


def test_postorder_lists_descendants_first():
    r, x, a, b, c = make_simple_tree()
    order = r.postorder_traversal()
    assert order == [a, b, x, c, r]
    for node in order:
        for child in node.children:
            assert order.index(child) < order.index(node)


def test_internal_nodes_in_postorder():
    r, x, a, b, c = make_simple_tree()
    assert r.internal_nodes() == [x, r]


def test_get_leaves_left_to_right():
    r, x, a, b, c = make_simple_tree()
    assert r.get_leaves() == [a, b, c]
    assert r.get_current_order() == ("A", "B", "C")
    assert x.get_leaves() == [a, b]


def test_append_child_invalidates_ancestor_caches():
    r, x, a, b, c = make_simple_tree()
    assert len(r.get_leaves()) == 3
    d = Node(name="D", length=0.5)
    x.append_child(d)
    assert d.parent is x
    assert [leaf.name for leaf in r.get_leaves()] == ["A", "B", "D", "C"]


def test_nodes_hash_by_identity():
    first = Node(name="A")
    second = Node(name="A")
    assert first != second
    assert len({first, second}) == 2


def test_find_node_by_name_includes_internal_labels():
    r, x, a, b, c = make_simple_tree()
    assert r.find_node_by_name("X") is x
    assert r.find_node_by_name("B") is b
    assert r.find_node_by_name("missing") is None
    assert r.find_node_by_name("") is None


def test_get_root_and_kind():
    r, x, a, b, c = make_simple_tree()
    assert b.get_root() is r
    assert a.is_leaf() and not a.is_internal()
    assert x.is_internal() and not x.is_leaf()


def test_deep_copy_is_detached_and_equal_in_shape():
    r, x, a, b, c = make_simple_tree()
    copy = x.deep_copy()
    assert copy is not x
    assert copy.parent is None
    assert copy.length == 3.0
    assert [leaf.name for leaf in copy.get_leaves()] == ["A", "B"]
    assert all(child.parent is copy for child in copy.children)
    copy.children[0].name = "changed"
    assert a.name == "A"


def test_validate_accepts_well_formed_tree():
    r, *_ = make_simple_tree()
    r.validate()


def test_validate_rejects_non_root():
    r, x, *_ = make_simple_tree()
    with pytest.raises(MalformedTreeError):
        x.validate()


def test_validate_rejects_unnamed_leaf():
    root = Node(children=[Node(name="A"), Node(name="")])
    with pytest.raises(MalformedTreeError):
        root.validate()


def test_validate_rejects_negative_length():
    root = Node(children=[Node(name="A", length=-0.1), Node(name="B")])
    with pytest.raises(MalformedTreeError):
        root.validate()


def test_validate_rejects_shared_child():
    shared = Node(name="S")
    left = Node(children=[shared], name="L")
    right = Node(children=[Node(name="B")], name="R")
    right.children.append(shared)
    root = Node(children=[left, right])
    with pytest.raises(MalformedTreeError):
        root.validate()


def test_validate_rejects_inconsistent_parent_pointer():
    a = Node(name="A")
    root = Node(children=[a, Node(name="B")])
    a.parent = Node(name="elsewhere")
    with pytest.raises(MalformedTreeError):
        root.validate()


def test_to_newick_round_trip():
    r, *_ = make_simple_tree()
    text = r.to_newick()
    assert text == "((A:1.000000,B:2.000000)X:3.000000,C:4.000000)R;"
    reparsed = parse_newick(text)
    assert reparsed.get_current_order() == ("A", "B", "C")
    assert reparsed.children[0].length == 3.0


def test_to_newick_quotes_special_labels():
    root = Node(children=[Node(name="gene one"), Node(name="it's")])
    assert root.to_newick() == "('gene one','it''s');"


def test_deep_tree_traversals_do_not_recurse():
    depth = 5000
    root = make_caterpillar(depth)
    root.validate()
    assert len(root.get_leaves()) == depth + 1
    assert len(root.postorder_traversal()) == 2 * depth + 1
    assert len(root.deep_copy().traverse()) == 2 * depth + 1
