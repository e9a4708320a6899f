import random

import pytest

from glab.apt_nodes import NodeCategory, NodeType
from glab.apt_tree import CAPACITY, NodeTree, TreeError
from glab.core import AssertionFailure


def _walk(node):
    if node is None:
        return
    yield node
    for child in node.children:
        yield from _walk(child)


def test_new_tree_is_empty():
    tree = NodeTree()
    assert tree.is_empty()
    assert tree.node_count() == 0
    assert tree.tree_to_arrays() == ([], [])


def test_insert_nodes_fill_slots_in_order():
    tree = NodeTree()
    assert tree.insert_node(NodeType.PLUS)
    assert tree.insert_node(NodeType.OP_X)
    assert tree.insert_node(NodeType.OP_Y)
    assert tree.node_count() == 3
    assert tree.tree_to_arrays() == ([9, -1, 22, 23, -2], [])
    assert tree.eval(2.0, 5.0) == 2.0 + 5.0


def test_insert_into_full_tree_fails():
    tree = NodeTree()
    for kind in (NodeType.PLUS, NodeType.OP_X, NodeType.OP_Y):
        tree.insert_node(kind)
    assert tree.insert_node(NodeType.OP_X) is False
    assert tree.node_count() == 3


def test_insert_unknown_type_fails():
    tree = NodeTree()
    assert tree.insert_node(99) is False
    assert tree.is_empty()


@pytest.mark.parametrize(
    "arr, data",
    [
        ([9, -1, 21, 22, -2], [1.5]),
        ([8, -1, 22, 9, -1, 23, 21, -2, 21, -2], [0.25, 3.0]),
        ([13, -1, 11, -1, 22, 22, -2, -2], []),
        ([21], [4.0]),
    ],
)
def test_arrays_round_trip(arr, data):
    tree = NodeTree.from_arrays(arr, data)
    assert tree.tree_to_arrays() == (arr, data)


def test_single_constant_evaluates_to_its_data():
    tree = NodeTree.from_arrays([21], [4.0])
    assert tree.eval(1.0, 2.0) == 4.0


def test_trailing_padding_is_ignored():
    tree = NodeTree.from_arrays([9, -1, 22, 23, -2, 0, 0, 0], [])
    assert tree.tree_to_arrays() == ([9, -1, 22, 23, -2], [])


@pytest.mark.parametrize(
    "arr, data",
    [
        ([0], []),
        ([-1], []),
        ([], []),
        ([9, -1, 22, 23, 21, -2], [1.0]),
        ([9, -1, 22], []),
        ([9, -1, 30, -2], []),
        ([21], []),
    ],
)
def test_invalid_arrays_raise(arr, data):
    with pytest.raises(TreeError):
        NodeTree.from_arrays(arr, data)


@pytest.mark.parametrize("seed", [1, 2, 3, 7, 42])
def test_spawn_random_tree_is_complete(seed):
    tree = NodeTree(random.Random(seed))
    tree.spawn_random_tree(17)
    assert not tree.is_empty()
    assert tree.root.empty_leaf_count() == 0
    assert 1 <= tree.node_count() <= 17 + 2
    for node in _walk(tree.root):
        if node.category is NodeCategory.LEAF:
            assert node.node_type in (NodeType.CONST, NodeType.OP_X, NodeType.OP_Y)
    arr, data = tree.tree_to_arrays()
    assert NodeTree.from_arrays(arr, data).tree_to_arrays() == (arr, data)


def test_spawn_is_deterministic_for_a_seed():
    first = NodeTree(random.Random(11))
    second = NodeTree(random.Random(11))
    first.spawn_random_tree(17)
    second.spawn_random_tree(17)
    assert first.tree_to_arrays() == second.tree_to_arrays()


def test_fill_all_leaf_positions():
    tree = NodeTree(random.Random(5))
    tree.insert_node(NodeType.PLUS)
    tree.fill_all_leaf_positions()
    assert tree.node_count() == 3
    assert tree.root.empty_leaf_count() == 0
    assert all(
        c.node_type in (NodeType.CONST, NodeType.OP_X, NodeType.OP_Y)
        for c in tree.root.children[:2]
    )


def test_fill_empty_tree_raises():
    with pytest.raises(TreeError):
        NodeTree().fill_all_leaf_positions()


def test_copy_tree_between_siblings():
    tree = NodeTree.from_arrays([9, -1, 22, 13, -1, 23, -2, -2], [])
    target = tree.root.children[0]
    assert tree.copy_tree(target, tree.root.children[1])
    assert tree.tree_to_arrays() == ([9, -1, 13, -1, 23, -2, 13, -1, 23, -2, -2], [])
    assert tree.node_count() == 5
    assert tree.root.children[0] is target
    assert target.parent is tree.root


def test_copy_tree_from_ancestor():
    tree = NodeTree.from_arrays([13, -1, 22, -2], [])
    assert tree.copy_tree(tree.root.children[0], tree.root)
    assert tree.tree_to_arrays() == ([13, -1, 13, -1, 22, -2, -2], [])


def test_copy_tree_into_foreign_node_fails():
    tree = NodeTree.from_arrays([9, -1, 22, 23, -2], [])
    other = NodeTree.from_arrays([13, -1, 22, -2], [])
    with pytest.raises(AssertionFailure):
        tree.copy_tree(other.root.children[0], tree.root.children[0])


def test_swap_tree_between_trees():
    t1 = NodeTree.from_arrays([9, -1, 22, 23, -2], [])
    t2 = NodeTree.from_arrays([13, -1, 11, -1, 22, 22, -2, -2], [])
    assert NodeTree.swap_tree(t1, t1.root.children[0], t2, t2.root.children[0])
    assert t1.tree_to_arrays() == ([9, -1, 11, -1, 22, 22, -2, 23, -2], [])
    assert t2.tree_to_arrays() == ([13, -1, 22, -2], [])


def test_swap_tree_refuses_ancestral_relation():
    tree = NodeTree.from_arrays([13, -1, 22, -2], [])
    before = tree.tree_to_arrays()
    assert NodeTree.swap_tree(tree, tree.root, tree, tree.root.children[0]) is False
    assert tree.tree_to_arrays() == before


def test_mutate_node_keeps_tree_complete():
    tree = NodeTree.from_arrays([9, -1, 22, 23, -2], [], rng=random.Random(3))
    left = tree.root.children[0]
    target = tree.root.children[1]
    tree.mutate_node(target)
    assert tree.root.children[0] is left
    assert tree.root.children[1] is target
    assert target.parent is tree.root
    assert tree.root.empty_leaf_count() == 0
    arr, data = tree.tree_to_arrays()
    assert NodeTree.from_arrays(arr, data).tree_to_arrays() == (arr, data)


def test_mutate_foreign_node_fails():
    tree = NodeTree.from_arrays([9, -1, 22, 23, -2], [])
    other = NodeTree.from_arrays([13, -1, 22, -2], [])
    with pytest.raises(AssertionFailure):
        tree.mutate_node(other.root)


def test_reset_empties_tree():
    tree = NodeTree.from_arrays([9, -1, 22, 23, -2], [])
    tree.reset()
    assert tree.is_empty()
    assert tree.node_count() == 0


def test_format_levels():
    tree = NodeTree.from_arrays([9, -1, 22, 13, -1, 23, -2, -2], [])
    assert tree.format_levels() == "+ (x, y) \nOpX() - (x) \nOpY() \n\n"


def test_empty_tree_operations_raise():
    tree = NodeTree()
    with pytest.raises(TreeError):
        tree.eval(0.0, 0.0)
    with pytest.raises(TreeError):
        tree.format_levels()


def test_capacity_limit():
    tree = NodeTree()
    for _ in range(CAPACITY):
        assert tree.insert_node(NodeType.NEGATE)
    assert tree.node_count() == CAPACITY
    with pytest.raises(TreeError):
        tree.insert_node(NodeType.NEGATE)