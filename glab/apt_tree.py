"""Expression trees of picture nodes: building, copying, mutating and flattening."""

from __future__ import annotations

import random
from typing import Optional, Sequence, Union

from glab.apt_nodes import Node, NodeCategory, NodeType, create_node
from glab.core import get_logger, log_assert

__all__ = ["CAPACITY", "CLOSE_BRACE", "OPEN_BRACE", "NodeTree", "TreeError"]

CAPACITY = 50
OPEN_BRACE = -1
CLOSE_BRACE = -2

_LEAF_TYPES = (NodeType.CONST, NodeType.OP_X, NodeType.OP_Y)
_RANDOM_KINDS = int(NodeType.TOTAL) - 1

_ARITY = {
    NodeCategory.BRANCH_1: 1,
    NodeCategory.BRANCH_1_AND_DATA: 1,
    NodeCategory.BRANCH_2: 2,
    NodeCategory.BRANCH_2_AND_DATA: 2,
    NodeCategory.BRANCH_3: 3,
    NodeCategory.BRANCH_3_AND_DATA: 3,
}


class TreeError(ValueError):
    """Raised for malformed tree encodings, empty trees and a full tree."""


def _arity(node: Node) -> int:
    return _ARITY.get(node.category, 0)


def _root_of(node: Node) -> Node:
    while node.parent is not None:
        node = node.parent
    return node


def _is_ancestor_or_self(ancestor: Node, node: Optional[Node]) -> bool:
    while node is not None:
        if node is ancestor:
            return True
        node = node.parent
    return False


def _related(a: Node, b: Node) -> bool:
    return _is_ancestor_or_self(a, b) or _is_ancestor_or_self(b, a)


def _reshape(node: Node, template: Node) -> None:
    """Turn ``node`` into a childless copy of ``template``, keeping its parent."""
    node.node_type = template.node_type
    node.category = template.category
    node.children = [None, None, None]
    node.data = template.data


class NodeTree:
    """A tree of at most CAPACITY nodes that evaluates to one value per (x, y)."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng if rng is not None else random.Random()
        self._root: Optional[Node] = None

    @classmethod
    def from_arrays(
        cls,
        arr: Sequence[Union[int, float]],
        const_data: Sequence[float],
        rng: Optional[random.Random] = None,
    ) -> "NodeTree":
        """Rebuild a tree from the encoding produced by ``tree_to_arrays``.

        Codes after the root's closing brace (such as zero padding) are ignored.
        """
        codes = [int(c) for c in arr]
        values = [float(v) for v in const_data]
        if not codes or codes[0] <= 0:
            get_logger().error("InValid-Tree")
            raise TreeError("invalid tree: the first code must be a node type")
        tree = cls(rng)
        if not tree.insert_node(codes[0]):
            raise TreeError(f"unknown node type {codes[0]}")
        assert tree._root is not None
        tree._fill_from_arrays(tree._root, codes, 0, values, 0)
        return tree

    @property
    def root(self) -> Optional[Node]:
        return self._root

    def reset(self) -> None:
        """Discard every node."""
        if self._root is not None:
            self._root.delete_tree()
        self._root = None

    def insert_node(self, node_type: Union[Node, NodeType, int]) -> bool:
        """Add a node of ``node_type`` at the shallowest free position."""
        node = self._new_node(node_type)
        if node is None:
            get_logger().error("unknown node")
            return False
        if self._root is None:
            self._root = node
            return True
        return self._root.balanced_insert_child(node)

    def spawn_random_tree(self, max_tree_size: int) -> None:
        """Grow random nodes up to about ``max_tree_size``, then close every slot with leaves."""
        if self._root is None:
            self.insert_node(self._random_kind())
        assert self._root is not None
        self._random_tree_fill(self._root, max_tree_size)

    def eval(self, x: float, y: float, z: float = 0.0) -> float:
        if self._root is None:
            raise TreeError("tree is empty")
        return self._root.value(x, y, z)

    def is_empty(self) -> bool:
        return self._root is None

    def node_count(self) -> int:
        return self._root.node_count() if self._root is not None else 0

    def copy_tree(self, copy_to_node: Node, copy_from_node: Node) -> bool:
        """Replace the subtree at ``copy_to_node`` with a copy of ``copy_from_node``'s subtree.

        Constants in the copy receive fresh random values.
        """
        log_assert(
            _root_of(copy_to_node) is self._root, "target node is not part of this tree"
        )
        if _related(copy_to_node, copy_from_node):
            temp = NodeTree(self._rng)
            temp.insert_node(copy_from_node)
            assert temp._root is not None
            temp._raw_copy_tree(temp._root, copy_from_node)
            self._raw_copy_tree(copy_to_node, temp._root)
            return True
        self._raw_copy_tree(copy_to_node, copy_from_node)
        return True

    @staticmethod
    def swap_tree(
        tree_of_node1: "NodeTree",
        node1: Node,
        tree_of_node2: "NodeTree",
        node2: Node,
    ) -> bool:
        """Exchange two subtrees; refuses when one contains the other."""
        log_assert(_root_of(node1) is tree_of_node1._root, "node1 is not part of its tree")
        log_assert(_root_of(node2) is tree_of_node2._root, "node2 is not part of its tree")
        if tree_of_node1 is tree_of_node2 and _related(node1, node2):
            get_logger().error(
                "Cannot Replace node, there's ancestral relation b/w %s & %s",
                node1.label(),
                node2.label(),
            )
            return False
        temp = NodeTree(tree_of_node2._rng)
        temp.insert_node(node2)
        assert temp._root is not None
        temp._raw_copy_tree(temp._root, node2)
        tree_of_node2._raw_copy_tree(node2, node1)
        tree_of_node1._raw_copy_tree(node1, temp._root)
        return True

    def mutate_node(self, node: Node, node_tree_size: int = 5) -> None:
        """Replace ``node`` and its subtree with a random subtree of about ``node_tree_size`` nodes."""
        log_assert(_root_of(node) is self._root, "node is not part of this tree")
        node.delete_tree()
        template = create_node(self._random_kind(), self._rng)
        assert template is not None
        _reshape(node, template)
        if node.empty_leaf_count():
            self._random_tree_fill(node, node_tree_size)

    def fill_all_leaf_positions(self) -> None:
        """Put a random leaf (constant, x or y) into every free position."""
        if self._root is None:
            raise TreeError("tree is empty")
        while self.node_count() < CAPACITY:
            kind = _LEAF_TYPES[self._rng.randrange(len(_LEAF_TYPES))]
            leaf = create_node(kind, self._rng)
            assert leaf is not None
            if not self._root.balanced_insert_child(leaf):
                break

    def tree_to_arrays(self) -> tuple[list[int], list[float]]:
        """Flatten to pre-order type codes with brace markers, and the constants in order."""
        arr: list[int] = []
        data: list[float] = []
        if self._root is None:
            get_logger().error("No Root node")
            return arr, data
        self._flatten(self._root, arr, data)
        return arr, data

    def format_levels(self) -> str:
        """Return the node labels level by level, one line per level."""
        if self._root is None:
            raise TreeError("tree is empty")
        parts: list[str] = []
        node: Optional[Node] = self._root
        next_level = self._root.first_child()
        while node is not None:
            parts.append(node.label() + " ")
            nxt = node.next_node_at_same_level()
            if nxt is not None:
                node = nxt
                if next_level is None:
                    next_level = node.first_child()
            else:
                node = next_level
                parts.append("\n")
                next_level = node.first_child() if node is not None else None
        parts.append("\n")
        return "".join(parts)

    def _random_kind(self) -> NodeType:
        return NodeType(self._rng.randrange(_RANDOM_KINDS) + 1)

    def _new_node(self, node_type: Union[Node, NodeType, int]) -> Optional[Node]:
        node = create_node(node_type, self._rng)
        if node is None:
            return None
        if self.node_count() >= CAPACITY:
            raise TreeError(f"tree is full ({CAPACITY} nodes)")
        return node

    def _random_tree_fill(self, target: Node, max_tree_size: int) -> None:
        empty = target.empty_leaf_count()
        while empty and empty + target.node_count() < max_tree_size:
            node = self._new_node(self._random_kind())
            assert node is not None
            if not target.balanced_insert_child(node, True):
                return
            assert self._root is not None
            empty = self._root.empty_leaf_count()
        self.fill_all_leaf_positions()

    def _raw_copy_tree(self, copy_to_node: Node, copy_from_node: Node) -> None:
        template = create_node(copy_from_node, self._rng)
        if template is None:
            raise TreeError(f"cannot copy node {copy_from_node!r}")
        copy_to_node.delete_tree()
        _reshape(copy_to_node, template)
        self._copy_children(copy_to_node, copy_from_node)

    def _copy_children(self, copy_to_node: Node, copy_from_node: Node) -> None:
        for i in range(_arity(copy_from_node)):
            source = copy_from_node.children[i]
            if source is None:
                continue
            child = self._new_node(source)
            assert child is not None
            copy_to_node.children[i] = child
            child.parent = copy_to_node
            self._copy_children(child, source)

    def _flatten(self, node: Optional[Node], arr: list[int], data: list[float]) -> None:
        if node is None:
            arr.append(0)
            return
        arr.append(int(node.node_type))
        if node.has_data():
            data.append(node.data)
        if node.has_child():
            arr.append(OPEN_BRACE)
            for child in node.children[: _arity(node)]:
                self._flatten(child, arr, data)
            arr.append(CLOSE_BRACE)

    def _fill_from_arrays(
        self,
        node: Node,
        codes: list[int],
        index: int,
        values: list[float],
        data_index: int,
    ) -> tuple[int, int]:
        kind = codes[index]
        if node.node_type != kind:
            template = create_node(kind, self._rng)
            if template is None:
                raise TreeError(f"unknown node type {kind}")
            node.delete_tree()
            _reshape(node, template)
        index += 1
        if node.has_data():
            if data_index >= len(values):
                raise TreeError("not enough constant data")
            node.data = values[data_index]
            data_index += 1
        if index < len(codes) and codes[index] == OPEN_BRACE:
            index += 1
            while True:
                if index >= len(codes):
                    raise TreeError("unterminated child list")
                code = codes[index]
                if code == CLOSE_BRACE:
                    break
                child = self._new_node(code)
                if child is None:
                    raise TreeError(f"unknown node type {code}")
                if not node.try_insert(child):
                    get_logger().error(
                        "InValid Tree, Cannot Insert Node %s in Node %s",
                        child.label(),
                        node.label(),
                    )
                    raise TreeError(
                        f"cannot insert {child.label()} into {node.label()}"
                    )
                index, data_index = self._fill_from_arrays(
                    child, codes, index, values, data_index
                )
            index += 1
        return index, data_index