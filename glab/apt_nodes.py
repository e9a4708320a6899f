"""Expression-tree nodes for evolving pictures: node kinds, evaluation and tree walking."""

from __future__ import annotations

import math
import random
from enum import IntEnum
from typing import Optional, Union

from glab.core import get_logger, log_assert

__all__ = [
    "Node",
    "NodeCategory",
    "NodeType",
    "create_node",
    "evaluate",
    "node_label",
]


class NodeCategory(IntEnum):
    NONE = 0
    LEAF = 1
    BRANCH_1 = 2
    BRANCH_1_AND_DATA = 3
    BRANCH_2 = 4
    BRANCH_2_AND_DATA = 5
    BRANCH_3 = 6
    BRANCH_3_AND_DATA = 7


class NodeType(IntEnum):
    NONE = 0
    MAX = 1
    MIN = 2
    ARC_TAN2 = 3
    SIN = 4
    COS = 5
    TAN = 6
    ATAN = 7
    LERP = 8
    PLUS = 9
    MINUS = 10
    MULT = 11
    DIV = 12
    NEGATE = 13
    SQUARE = 14
    CEIL = 15
    LOG2 = 16
    ABS = 17
    CLIP = 18
    FLOOR = 19
    WRAP = 20
    CONST = 21
    OP_X = 22
    OP_Y = 23
    TOTAL = 24


_LABELS = {
    NodeType.MAX: "Max(x, y)",
    NodeType.MIN: "Min(x, y)",
    NodeType.ARC_TAN2: "arcTan2(x, y)",
    NodeType.SIN: "Sin(x)",
    NodeType.COS: "Cos(x)",
    NodeType.TAN: "Tan(x)",
    NodeType.LERP: "Lerp(x, y, z)",
    NodeType.ATAN: "Atan(x)",
    NodeType.PLUS: "+ (x, y)",
    NodeType.MINUS: "- (x, y)",
    NodeType.MULT: "* (x, y)",
    NodeType.DIV: "/ (x, y)",
    NodeType.NEGATE: "- (x)",
    NodeType.SQUARE: "Sqr (x)",
    NodeType.CEIL: "Ceil (x)",
    NodeType.LOG2: "Log2 (x)",
    NodeType.ABS: "Abs (x)",
    NodeType.CLIP: "Clip (x, y)",
    NodeType.FLOOR: "Floor (x)",
    NodeType.WRAP: "Wrap (x)",
    NodeType.CONST: "Const",
    NodeType.OP_X: "OpX()",
    NodeType.OP_Y: "OpY()",
}

_CATEGORIES = {
    NodeType.MAX: NodeCategory.BRANCH_2,
    NodeType.MIN: NodeCategory.BRANCH_2,
    NodeType.ARC_TAN2: NodeCategory.BRANCH_2,
    NodeType.SIN: NodeCategory.BRANCH_1,
    NodeType.COS: NodeCategory.BRANCH_1,
    NodeType.TAN: NodeCategory.BRANCH_1,
    NodeType.LERP: NodeCategory.BRANCH_3,
    NodeType.ATAN: NodeCategory.BRANCH_1,
    NodeType.PLUS: NodeCategory.BRANCH_2,
    NodeType.MINUS: NodeCategory.BRANCH_2,
    NodeType.MULT: NodeCategory.BRANCH_2,
    NodeType.DIV: NodeCategory.BRANCH_2,
    NodeType.NEGATE: NodeCategory.BRANCH_1,
    NodeType.SQUARE: NodeCategory.BRANCH_1,
    NodeType.CEIL: NodeCategory.BRANCH_1,
    NodeType.LOG2: NodeCategory.BRANCH_1,
    NodeType.ABS: NodeCategory.BRANCH_1,
    NodeType.CLIP: NodeCategory.BRANCH_2,
    NodeType.FLOOR: NodeCategory.BRANCH_1,
    NodeType.WRAP: NodeCategory.BRANCH_1,
    NodeType.CONST: NodeCategory.LEAF,
    NodeType.OP_X: NodeCategory.LEAF,
    NodeType.OP_Y: NodeCategory.LEAF,
}

_ARITY = {
    NodeCategory.NONE: 0,
    NodeCategory.LEAF: 0,
    NodeCategory.BRANCH_1: 1,
    NodeCategory.BRANCH_1_AND_DATA: 1,
    NodeCategory.BRANCH_2: 2,
    NodeCategory.BRANCH_2_AND_DATA: 2,
    NodeCategory.BRANCH_3: 3,
    NodeCategory.BRANCH_3_AND_DATA: 3,
}

_DATA_CATEGORIES = frozenset(
    {
        NodeCategory.LEAF,
        NodeCategory.BRANCH_1_AND_DATA,
        NodeCategory.BRANCH_2_AND_DATA,
        NodeCategory.BRANCH_3_AND_DATA,
    }
)

_PLAIN_BRANCH = {
    NodeCategory.BRANCH_1_AND_DATA: NodeCategory.BRANCH_1,
    NodeCategory.BRANCH_2_AND_DATA: NodeCategory.BRANCH_2,
    NodeCategory.BRANCH_3_AND_DATA: NodeCategory.BRANCH_3,
}


def _as_type(node_type: Union["Node", NodeType, int]) -> Optional[NodeType]:
    if isinstance(node_type, Node):
        return node_type.node_type
    try:
        return NodeType(int(node_type))
    except ValueError:
        return None


def node_label(node_type: Union["Node", NodeType, int]) -> str:
    """Return the display label of a node kind."""
    kind = _as_type(node_type)
    label = _LABELS.get(kind) if kind is not None else None
    if label is None:
        get_logger().error("Unknown Node Type")
        return "Invalid"
    return label


def create_node(
    node_type: Union["Node", NodeType, int], rng: Optional[random.Random] = None
) -> Optional["Node"]:
    """Return a fresh, unlinked node of the given kind, or None for an unknown kind.

    Constants get a random value in [0, 10) with a step of 0.001.
    """
    kind = _as_type(node_type)
    category = _CATEGORIES.get(kind) if kind is not None else None
    if category is None:
        get_logger().error("Unknown Node Type")
        return None
    if kind is NodeType.CONST:
        source = rng if rng is not None else random
        return Node(kind, category, source.randrange(10000) / 1000.0)
    return Node(kind, category)


def _trunc(x: float) -> float:
    return float(math.trunc(x)) if math.isfinite(x) else x


def _periodic(fn, x: float) -> float:
    try:
        return fn(x)
    except ValueError:
        return math.nan


def _div(x: float, y: float) -> float:
    if y != 0:
        return x / y
    if x == 0 or math.isnan(x):
        return math.nan
    return math.copysign(math.inf, x) * math.copysign(1.0, y)


def _log2(x: float) -> float:
    if math.isnan(x) or x < 0:
        return math.nan
    if x == 0:
        return -math.inf
    return math.log2(x)


def evaluate(
    node_type: Union["Node", NodeType, int], x: float, y: float, z: float, data: float
) -> float:
    """Apply the operation of ``node_type`` to its operands; trig inputs are in degrees."""
    kind = _as_type(node_type)
    if kind is NodeType.MAX:
        return x if x > y else y
    if kind is NodeType.MIN:
        return y if x > y else x
    if kind is NodeType.ARC_TAN2:
        return math.atan2(math.radians(y), math.radians(x))
    if kind is NodeType.SIN:
        return _periodic(math.sin, math.radians(x))
    if kind is NodeType.COS:
        return _periodic(math.cos, math.radians(x))
    if kind is NodeType.TAN:
        return _periodic(math.tan, math.radians(x))
    if kind is NodeType.ATAN:
        return math.atan(math.radians(x))
    if kind is NodeType.LERP:
        return x + z * (y - x)
    if kind is NodeType.PLUS:
        return y + x
    if kind is NodeType.MINUS:
        return x - y
    if kind is NodeType.MULT:
        return y * x
    if kind is NodeType.DIV:
        return _div(x, y)
    if kind is NodeType.NEGATE:
        return -x
    if kind is NodeType.SQUARE:
        return x * x
    if kind is NodeType.CEIL:
        return _trunc(x) + 1
    if kind is NodeType.LOG2:
        return _log2(x)
    if kind is NodeType.ABS:
        return abs(x)
    if kind is NodeType.CLIP:
        return y if x > y else (-y if x < -y else x)
    if kind is NodeType.FLOOR:
        return _trunc(x)
    if kind is NodeType.WRAP:
        half = (x + 1) / 2
        return -1 + 2 * (half - _trunc(half))
    if kind is NodeType.CONST:
        return data
    if kind is NodeType.OP_X:
        return x
    if kind is NodeType.OP_Y:
        return y
    get_logger().error("Unknown Node Type")
    return 0.0


class Node:
    """One node of an expression tree, linked to its parent and up to three children."""

    def __init__(
        self,
        node_type: NodeType = NodeType.NONE,
        category: NodeCategory = NodeCategory.NONE,
        data: float = 0.0,
    ) -> None:
        self.node_type = NodeType(node_type)
        self.category = NodeCategory(category)
        self._data = float(data)
        self.parent: Optional[Node] = None
        self.children: list[Optional[Node]] = [None, None, None]

    def __repr__(self) -> str:
        return f"<Node {self.node_type.name} {self.category.name}>"

    @property
    def data(self) -> float:
        return self._data if self.category in _DATA_CATEGORIES else 0.0

    @data.setter
    def data(self, value: float) -> None:
        if self.category in _DATA_CATEGORIES:
            self._data = float(value)

    def _arity(self) -> int:
        return _ARITY[self.category]

    def _own_children(self) -> list[Optional["Node"]]:
        return self.children[: self._arity()]

    def _check_valid(self) -> None:
        if self.category is NodeCategory.NONE:
            log_assert(False, f"node {self!r} has no category")

    def _clear(self) -> None:
        self.node_type = NodeType.NONE
        self.category = NodeCategory.NONE
        self._data = 0.0
        self.parent = None
        self.children = [None, None, None]

    def has_child(self) -> bool:
        self._check_valid()
        return any(child is not None for child in self._own_children())

    def has_data(self) -> bool:
        self._check_valid()
        return self.category in _DATA_CATEGORIES

    def first_child(self) -> Optional["Node"]:
        self._check_valid()
        return next((c for c in self._own_children() if c is not None), None)

    def node_count(self) -> int:
        """Number of nodes in the subtree rooted here."""
        self._check_valid()
        return 1 + sum(c.node_count() for c in self._own_children() if c is not None)

    def empty_leaf_count(self) -> int:
        """Number of free child slots in the subtree rooted here."""
        self._check_valid()
        return sum(
            1 if c is None else c.empty_leaf_count() for c in self._own_children()
        )

    def next_node_at_same_level(self, max_depth: int = 0) -> Optional["Node"]:
        """Return the next node to the right at this node's depth, or None.

        A non-zero ``max_depth`` (negative, relative to this node) stops the walk
        from climbing to or above that depth.
        """
        if self.parent is None:
            return None
        last_level, curr_level = 1, 0
        curr: Node = self
        while True:
            if last_level > curr_level:
                if max_depth and curr_level <= max_depth:
                    return None
                parent = curr.parent
                assert parent is not None
                if parent.category in (
                    NodeCategory.LEAF,
                    NodeCategory.BRANCH_1,
                    NodeCategory.BRANCH_1_AND_DATA,
                ):
                    last_level, curr, curr_level = curr_level, parent, curr_level - 1
                elif parent.category is NodeCategory.NONE:
                    get_logger().error("This Node Is Invalid")
                    return None
                else:
                    siblings = parent._own_children()
                    index = next(i for i, c in enumerate(siblings) if c is curr)
                    sibling = next(
                        (c for c in siblings[index + 1:] if c is not None), None
                    )
                    if sibling is not None:
                        last_level, curr = curr_level, sibling
                        if curr_level == 0:
                            return curr
                    else:
                        last_level, curr, curr_level = curr_level, parent, curr_level - 1
            else:
                if curr.category is NodeCategory.NONE:
                    get_logger().error("This Node Is Invalid")
                    return None
                child = None if curr.category is NodeCategory.LEAF else curr.first_child()
                if child is not None:
                    last_level, curr, curr_level = curr_level, child, curr_level + 1
                else:
                    last_level, curr, curr_level = curr_level, curr.parent, curr_level - 1
            if curr is None or curr.parent is None or curr_level == 0:
                break
        if curr_level < 0 or curr is None:
            return None
        return curr

    def value(self, x: float, y: float, z: float = 0.0) -> float:
        """Evaluate the subtree; empty child slots pass the incoming operand through."""
        arity = self._arity()
        const = self._data if self.category in (_DATA_CATEGORIES | {NodeCategory.NONE}) else 0.0
        c0, c1, c2 = self.children
        if arity >= 1:
            x = c0.value(x, y, z) if c0 is not None else x
        if arity >= 2:
            y = c1.value(x, y, z) if c1 is not None else y
        elif arity == 1:
            y = 0.0
        if arity >= 3:
            z = c2.value(x, y, z) if c2 is not None else z
        elif arity >= 1:
            z = 0.0
        return evaluate(self.node_type, x, y, z, const)

    def try_insert(self, node: "Node") -> bool:
        """Attach ``node`` in the next free slot; only the trailing slot decides if there is room."""
        arity = self._arity()
        if arity == 0 or self.children[arity - 1] is not None:
            return False
        for i in range(arity):
            if self.children[i] is None:
                self.children[i] = node
                node.parent = self
                return True
        return False

    def balanced_insert_child(self, node: "Node", local_insert: bool = False) -> bool:
        """Insert ``node`` at the shallowest free slot, scanning level by level."""
        parent_at_depth = -1 if local_insert else 0
        curr: Optional[Node] = self
        next_level_first = curr.first_child()
        while curr is not None:
            if curr.try_insert(node):
                return True
            nxt = curr.next_node_at_same_level(parent_at_depth)
            if nxt is not None:
                curr = nxt
                if next_level_first is None:
                    next_level_first = curr.first_child()
            else:
                curr = next_level_first
                next_level_first = curr.first_child() if curr is not None else None
                parent_at_depth = parent_at_depth - 1 if local_insert else 0
        return False

    def _swap_children_with(self, node: "Node") -> bool:
        mine = _PLAIN_BRANCH.get(self.category, self.category)
        theirs = _PLAIN_BRANCH.get(node.category, node.category)
        if mine != theirs:
            return False
        # Three-way branches only exchange their first two children.
        count = {NodeCategory.BRANCH_1: 1, NodeCategory.BRANCH_2: 2, NodeCategory.BRANCH_3: 2}.get(mine, 0)
        for i in range(count):
            node.children[i], self.children[i] = self.children[i], node.children[i]
            if node.children[i] is not None:
                node.children[i].parent = node
            if self.children[i] is not None:
                self.children[i].parent = self
        return True

    def try_swap_children(self, node: "Node") -> None:
        """Exchange children with ``node`` if both have the same branch shape."""
        self._swap_children_with(node)

    def swap_children(self, node: "Node") -> None:
        """Like try_swap_children, but warns when nothing can be swapped."""
        if not self._swap_children_with(node):
            get_logger().warning(
                "Cannot Swap children, use TrySwapChildren(): no warns or SwapNodeTree()"
            )
        elif _PLAIN_BRANCH.get(self.category, self.category) is NodeCategory.LEAF:
            get_logger().warning("Leaf node, No child - no swap")

    def swap_data(self, node: "Node") -> None:
        if self.has_data() and node.has_data():
            self._data, node._data = node._data, self._data

    def delete_tree(self) -> None:
        """Detach and clear every descendant; this node itself is kept."""
        for i in range(self._arity()):
            child = self.children[i]
            if child is not None:
                child.delete_tree()
                child._clear()
                self.children[i] = None

    def label(self) -> str:
        return node_label(self.node_type)