import random

import numpy as np
import pytest

from glab.apt_nodes import NodeType
from glab.apt_tree import CLOSE_BRACE, OPEN_BRACE, NodeTree
from glab.pictures import (
    EQUATION_WIDTH,
    ROWS_PER_PICTURE,
    Picture,
    encode_pictures,
    evaluate_encoded,
    render_channel,
)

PLUS = int(NodeType.PLUS)
MULT = int(NodeType.MULT)
SIN = int(NodeType.SIN)
CONST = int(NodeType.CONST)
OP_X = int(NodeType.OP_X)
OP_Y = int(NodeType.OP_Y)
CEIL = int(NodeType.CEIL)


def test_encode_shape_and_dtype():
    pics = [Picture.random(random.Random(1)), Picture.random(random.Random(2))]
    rows = encode_pictures(pics)
    assert rows.shape == (2 * ROWS_PER_PICTURE, EQUATION_WIDTH)
    assert rows.dtype == np.float32


def test_encode_empty_list_and_bad_width():
    assert encode_pictures([]).shape == (0, EQUATION_WIDTH)
    with pytest.raises(ValueError):
        encode_pictures([], 0)


def test_encode_truncates_rows_to_width():
    pic = Picture.random(random.Random(5))
    arr, _ = pic.r.tree_to_arrays()
    rows = encode_pictures([pic], 3)
    assert rows.shape == (ROWS_PER_PICTURE, 3)
    assert rows[0].tolist() == [float(v) for v in arr[:3]]


def test_random_picture_is_deterministic_for_a_seed():
    a = encode_pictures([Picture.random(random.Random(11))])
    b = encode_pictures([Picture.random(random.Random(11))])
    np.testing.assert_array_equal(a, b)


def test_encoding_round_trips_through_tree_arrays():
    pic = Picture.random(random.Random(4))
    rows = encode_pictures([pic], 128)
    for c, tree in enumerate(pic.channels):
        rebuilt = NodeTree.from_arrays(rows[2 * c].tolist(), rows[2 * c + 1].tolist())
        arr, data = tree.tree_to_arrays()
        new_arr, new_data = rebuilt.tree_to_arrays()
        assert new_arr == arr
        assert new_data == pytest.approx(data, rel=1e-6)


def test_single_leaf_equations():
    assert evaluate_encoded([OP_X, 0, 0], [0.0], 3.0, 8.0) == 3.0
    assert evaluate_encoded([OP_Y, 0, 0], [0.0], 3.0, 8.0) == 8.0
    assert evaluate_encoded([CONST, 0, 0], [2.5], 3.0, 8.0) == 2.5


def test_empty_equation_evaluates_to_zero():
    assert evaluate_encoded([0] * EQUATION_WIDTH, [0.0] * EQUATION_WIDTH, 1.0, 2.0) == 0.0


@pytest.mark.parametrize("point", [(0.0, 0.0), (30.0, 2.0), (-12.5, 7.0)])
def test_encoded_evaluation_matches_tree_for_shared_operations(point):
    codes = [PLUS, OPEN_BRACE, SIN, OPEN_BRACE, OP_X, CLOSE_BRACE,
             MULT, OPEN_BRACE, OP_X, OP_Y, CLOSE_BRACE, CLOSE_BRACE]
    data = [0.0, 0.0, 0.0]
    tree = NodeTree.from_arrays(codes, data)
    x, y = point
    assert evaluate_encoded(codes + [0] * 5, data, x, y) == pytest.approx(tree.eval(x, y))


def test_constants_are_consumed_in_scope_order():
    codes = [PLUS, OPEN_BRACE, CONST, MULT, OPEN_BRACE, CONST, CONST,
             CLOSE_BRACE, CLOSE_BRACE]
    assert evaluate_encoded(codes, [1.0, 2.0, 3.0], 0.0, 0.0) == pytest.approx(5.0)


def test_ceil_uses_true_ceiling():
    codes = [CEIL, OPEN_BRACE, OP_X, CLOSE_BRACE]
    assert evaluate_encoded(codes, [0.0], 2.0, 0.0) == 2.0


def test_malformed_equation_raises():
    with pytest.raises(ValueError):
        evaluate_encoded([PLUS, OPEN_BRACE, OP_X], [0.0], 1.0, 1.0)


def test_render_channel_uses_column_as_x_and_row_as_y():
    xs = render_channel([OP_X], [0.0], 4, 3)
    ys = render_channel([OP_Y], [0.0], 4, 3)
    assert xs.shape == (3, 4)
    np.testing.assert_array_equal(xs, np.tile(np.arange(4, dtype=np.float32), (3, 1)))
    np.testing.assert_array_equal(ys, np.tile(np.arange(3, dtype=np.float32)[:, None], (1, 4)))


def test_picture_render_matches_channel_rendering():
    pic = Picture.random(random.Random(3))
    image = pic.render(4, 3)
    rows = encode_pictures([pic])
    assert image.shape == (3, 4, 3)
    for c in range(3):
        np.testing.assert_array_equal(image[..., c], render_channel(rows[2 * c], rows[2 * c + 1], 4, 3))


def test_reset_image_reports_changes():
    pic = Picture()
    assert pic.reset_image(512, 512) is True
    assert pic.reset_image(512, 512) is False
    assert (pic.tex_w, pic.tex_h) == (512, 512)
    assert pic.reset_image(256, 512) is True