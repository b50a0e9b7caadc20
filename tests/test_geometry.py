import math

import numpy as np
import pytest

from facewarp.geometry import (
    bilin_interp,
    is_within_tri,
    pythag,
    same_side,
    tri_facing,
)


@pytest.fixture
def square():
    # Unit-square corners (0,0), (4,0), (4,4), (0,4) split into two triangles.
    shape = np.array([0.0, 4.0, 4.0, 0.0, 0.0, 0.0, 4.0, 4.0]).reshape(-1, 1)
    tri = np.array([[0, 1, 2], [0, 2, 3]], dtype=np.int32)
    return tri, shape


@pytest.mark.parametrize("a,b", [(3.0, 4.0), (-5.0, 12.0), (1e200, 1e200), (0.0, 7.0)])
def test_pythag_matches_hypot(a, b):
    assert pythag(a, b) == pytest.approx(math.hypot(a, b))


def test_pythag_zero():
    assert pythag(0.0, 0.0) == 0.0


def test_pythag_symmetric():
    assert pythag(2.5, -9.0) == pytest.approx(pythag(-9.0, 2.5))


def test_same_side_true_and_false():
    assert same_side(1, 1, 2, 3, 0, 0, 5, 0) is True
    assert same_side(1, 1, 2, -3, 0, 0, 5, 0) is False


def test_same_side_point_on_line_counts():
    assert same_side(3, 0, 2, -3, 0, 0, 5, 0) is True


def test_is_within_tri_finds_triangles(square):
    tri, shape = square
    assert is_within_tri(3.0, 1.0, tri, shape) == 0
    assert is_within_tri(1.0, 3.0, tri, shape) == 1


def test_is_within_tri_outside(square):
    tri, shape = square
    assert is_within_tri(5.0, 5.0, tri, shape) is None
    assert is_within_tri(-0.5, 2.0, tri, shape) is None


def test_is_within_tri_shared_edge_prefers_first(square):
    tri, shape = square
    assert is_within_tri(2.0, 2.0, tri, shape) == 0


def test_is_within_tri_accepts_flat_shape(square):
    tri, shape = square
    assert is_within_tri(1.0, 3.0, tri.tolist(), shape.reshape(-1).tolist()) == 1


def test_bilin_interp_integer_coordinates_return_pixels():
    image = np.arange(12, dtype=np.uint8).reshape(3, 4)
    for row in range(3):
        for col in range(4):
            assert bilin_interp(image, col, row) == float(image[row, col])


def test_bilin_interp_outside_is_zero():
    image = np.full((3, 4), 200, dtype=np.uint8)
    assert bilin_interp(image, -0.1, 1.0) == 0.0
    assert bilin_interp(image, 4.0, 1.0) == 0.0
    assert bilin_interp(image, 1.0, 3.0) == 0.0


@pytest.mark.parametrize("x,y", [(1.25, 0.0), (0.0, 1.5), (2.3, 1.7), (0.5, 0.5)])
def test_bilin_interp_exact_on_linear_image(x, y):
    ys, xs = np.mgrid[0:4, 0:5]
    image = (3 * xs + 5 * ys).astype(np.uint8)
    assert bilin_interp(image, x, y) == pytest.approx(3 * x + 5 * y)


def test_bilin_interp_within_neighbour_range():
    image = np.array([[10, 90], [40, 250]], dtype=np.uint8)
    value = bilin_interp(image, 0.3, 0.6)
    assert 10 <= value <= 250


def test_bilin_interp_rejects_colour_image():
    with pytest.raises(ValueError):
        bilin_interp(np.zeros((2, 2, 3), dtype=np.uint8), 0.5, 0.5)


def test_tri_facing_identical_is_one():
    assert tri_facing(0, 0, 1, 0, 0, 1, 0, 0, 1, 0, 0, 1) == pytest.approx(1.0)


def test_tri_facing_mirror_is_negative():
    assert tri_facing(0, 0, 1, 0, 0, 1, 0, 0, -1, 0, 0, 1) < 0


def test_tri_facing_scaled_by_two():
    assert tri_facing(0, 0, 1, 0, 0, 1, 0, 0, 2, 0, 0, 2) == pytest.approx(4.0)


def test_tri_facing_degenerate_source_raises():
    with pytest.raises(ZeroDivisionError):
        tri_facing(0, 0, 1, 1, 2, 2, 0, 0, 1, 0, 0, 1)