"""Pictures made of three expression trees, their texture encoding and its evaluation."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Sequence, Union

import numpy as np

from glab.apt_nodes import NodeType, evaluate
from glab.apt_tree import CLOSE_BRACE, OPEN_BRACE, NodeTree

__all__ = [
    "DEFAULT_TREE_SIZE",
    "EQUATION_WIDTH",
    "ROWS_PER_PICTURE",
    "Picture",
    "encode_pictures",
    "evaluate_encoded",
    "render_channel",
]

EQUATION_WIDTH = 40
ROWS_PER_PICTURE = 6
DEFAULT_TREE_SIZE = 17

_DATA_CODES = frozenset({int(NodeType.CONST), int(NodeType.OP_X), int(NodeType.OP_Y)})

# A parsed encoding: (type code, children) where children is None for a leaf.
_Parsed = tuple[int, Optional[list["_Parsed"]]]


def _floor(v: float) -> float:
    return float(math.floor(v)) if math.isfinite(v) else v


def _ceil(v: float) -> float:
    return float(math.ceil(v)) if math.isfinite(v) else v


def _shader_op(code: int, x: float, y: float, z: float, const: float) -> float:
    """The per-pixel operation set, which rounds with real floor/ceil and atan(x, y)."""
    try:
        kind = NodeType(code)
    except ValueError:
        return 0.0
    if kind in (NodeType.NONE, NodeType.TOTAL):
        return 0.0
    if kind is NodeType.ARC_TAN2:
        return math.atan2(x, y)
    if kind is NodeType.CEIL:
        return _ceil(x)
    if kind is NodeType.FLOOR:
        return _floor(x)
    if kind is NodeType.WRAP:
        half = (x + 1) / 2
        return -1 + 2 * (half - _floor(half))
    return evaluate(kind, x, y, z, const)


def _parse(codes: list[int], index: int) -> tuple[_Parsed, int]:
    code = codes[index]
    if code in (OPEN_BRACE, CLOSE_BRACE):
        raise ValueError(f"brace where a node type was expected at position {index}")
    index += 1
    if index >= len(codes) or codes[index] != OPEN_BRACE:
        return (code, None), index
    index += 1
    children: list[_Parsed] = []
    while True:
        if index >= len(codes):
            raise ValueError("unterminated scope in equation")
        if codes[index] == CLOSE_BRACE:
            index += 1
            break
        child, index = _parse(codes, index)
        children.append(child)
    if len(children) > 3:
        raise ValueError(f"node {code} has {len(children)} operands, at most 3 allowed")
    return (code, children), index


def _compile(eqn: Iterable[Union[int, float]]) -> _Parsed:
    codes = [int(c) for c in eqn]
    if len(codes) < 2 or codes[1] != OPEN_BRACE:
        return (codes[0] if codes else 0, None)
    parsed, _ = _parse(codes, 0)
    return parsed


def _run(node: _Parsed, x: float, y: float, take: Callable[[], float]) -> float:
    code, children = node
    if children is None:
        const = take() if code in _DATA_CODES else 0.0
        return _shader_op(code, x, y, 0.0, const)
    # Inner scopes collapse first, left to right; a scope's own leaves read their
    # constants only when that scope is solved.
    nested = [_run(c, x, y, take) if c[1] is not None else None for c in children]
    results = [0.0, 0.0, 0.0]
    for i, (child, value) in enumerate(zip(children, nested)):
        if value is None:
            child_code = child[0]
            const = take() if child_code in _DATA_CODES else 0.0
            value = _shader_op(child_code, x, y, 0.0, const)
        results[i] = value
    const = take() if code in _DATA_CODES else 0.0
    return _shader_op(code, results[0], results[1], results[2], const)


def _evaluate_parsed(parsed: _Parsed, values: Sequence[float], x: float, y: float) -> float:
    position = 0

    def take() -> float:
        nonlocal position
        value = float(values[position]) if position < len(values) else 0.0
        position += 1
        return value

    return _run(parsed, float(x), float(y), take)


def evaluate_encoded(
    eqn: Iterable[Union[int, float]], data: Sequence[float], x: float, y: float
) -> float:
    """Evaluate one encoded equation row with its constants row at (x, y).

    Constants are consumed in the order scopes are solved (innermost first),
    not in the order they were written.
    """
    return _evaluate_parsed(_compile(eqn), [float(v) for v in data], x, y)


def render_channel(
    eqn: Iterable[Union[int, float]], data: Sequence[float], width: int, height: int
) -> np.ndarray:
    """Evaluate an encoded equation at every pixel; x is the column and y the row."""
    if width < 0 or height < 0:
        raise ValueError(f"image size must not be negative, got {width}x{height}")
    parsed = _compile(eqn)
    values = [float(v) for v in data]
    out = np.empty((height, width), dtype=np.float32)
    with np.errstate(over="ignore", invalid="ignore"):
        for row, col in np.ndindex(height, width):
            out[row, col] = _evaluate_parsed(parsed, values, col, row)
    return out


@dataclass
class Picture:
    """Three expression trees, one per colour channel, and the image size they render to."""

    r: NodeTree = field(default_factory=NodeTree)
    g: NodeTree = field(default_factory=NodeTree)
    b: NodeTree = field(default_factory=NodeTree)
    tex_w: int = 0
    tex_h: int = 0

    @classmethod
    def random(
        cls, rng: Optional[random.Random] = None, max_tree_size: int = DEFAULT_TREE_SIZE
    ) -> "Picture":
        """Return a picture whose channels are random trees of about ``max_tree_size`` nodes."""
        source = rng if rng is not None else random.Random()
        trees = []
        for _ in range(3):
            tree = NodeTree(source)
            tree.spawn_random_tree(max_tree_size)
            trees.append(tree)
        return cls(*trees)

    @property
    def channels(self) -> tuple[NodeTree, NodeTree, NodeTree]:
        return (self.r, self.g, self.b)

    def reset_image(self, width: int, height: int) -> bool:
        """Set the output image size; return whether it changed."""
        if (self.tex_w, self.tex_h) == (width, height):
            return False
        self.tex_w, self.tex_h = int(width), int(height)
        return True

    def render(self, width: int, height: int, eqn_width: int = EQUATION_WIDTH) -> np.ndarray:
        """Render the encoded picture to a (height, width, 3) array."""
        rows = encode_pictures([self], eqn_width)
        planes = [render_channel(rows[2 * c], rows[2 * c + 1], width, height) for c in range(3)]
        return np.stack(planes, axis=-1)


def encode_pictures(pictures: Iterable[Picture], width: int = EQUATION_WIDTH) -> np.ndarray:
    """Pack pictures into rows: type codes and constants for red, green and blue.

    Each row holds ``width`` values; longer encodings are cut off, shorter ones
    are padded with zeros.
    """
    if width < 1:
        raise ValueError(f"equation width must be positive, got {width}")
    pics = list(pictures)
    out = np.zeros((ROWS_PER_PICTURE * len(pics), width), dtype=np.float32)
    for n, picture in enumerate(pics):
        for c, tree in enumerate(picture.channels):
            arr, data = tree.tree_to_arrays()
            codes_row = ROWS_PER_PICTURE * n + 2 * c
            arr, data = arr[:width], data[:width]
            out[codes_row, : len(arr)] = arr
            out[codes_row + 1, : len(data)] = data
    return out