"""Planar geometry helpers for triangulated shapes and image sampling."""

from __future__ import annotations

import math
from typing import Any

import numpy as np


def pythag(a: float, b: float) -> float:
    """Compute sqrt(a**2 + b**2) without destructive overflow or underflow."""
    absa, absb = abs(a), abs(b)
    if absa > absb:
        return absa * math.sqrt(1.0 + (absb / absa) ** 2)
    if absb == 0.0:
        return 0.0
    return absb * math.sqrt(1.0 + (absa / absb) ** 2)


def same_side(
    x0: float, y0: float, x1: float, y1: float,
    x2: float, y2: float, x3: float, y3: float,
) -> bool:
    """True if (x0, y0) and (x1, y1) lie on the same side of the line through
    (x2, y2) and (x3, y3). A point on the line counts as either side."""
    first = (x3 - x2) * (y0 - y2) - (x0 - x2) * (y3 - y2)
    second = (x3 - x2) * (y1 - y2) - (x1 - x2) * (y3 - y2)
    return first * second >= 0


def _coordinates(shape: Any) -> tuple[np.ndarray, np.ndarray]:
    flat = np.asarray(shape, dtype=np.float64).reshape(-1)
    half = flat.size // 2
    return flat[:half], flat[half:2 * half]


def is_within_tri(x: float, y: float, tri: Any, shape: Any) -> int | None:
    """Index of the first triangle of ``tri`` that contains (x, y), else None.

    ``tri`` holds one row of three vertex indices per triangle; ``shape`` is a
    stacked column of all x coordinates followed by all y coordinates.
    """
    xs, ys = _coordinates(shape)
    triangles = np.asarray(tri, dtype=np.int64).reshape(-1, 3)
    for index, (i, j, k) in enumerate(triangles):
        s11, s12 = xs[i], ys[i]
        s21, s22 = xs[j], ys[j]
        s31, s32 = xs[k], ys[k]
        if (
            same_side(x, y, s11, s12, s21, s22, s31, s32)
            and same_side(x, y, s21, s22, s11, s12, s31, s32)
            and same_side(x, y, s31, s32, s11, s12, s21, s22)
        ):
            return index
    return None


def bilin_interp(image: Any, x: float, y: float) -> float:
    """Bilinearly interpolate a 2-D image at (x, y); 0 outside the image."""
    pixels = np.asarray(image)
    if pixels.ndim != 2:
        raise ValueError("bilin_interp expects a single-channel 2-D image")
    rows, cols = pixels.shape
    if x < 0 or x >= cols or y < 0 or y >= rows:
        return 0.0
    x1, y1 = math.floor(x), math.floor(y)
    x2, y2 = min(math.ceil(x), cols - 1), min(math.ceil(y), rows - 1)

    def at(row: int, col: int) -> float:
        return float(pixels[row, col])

    if x1 == x2:
        if y1 == y2:
            return at(y1, x1)
        return (y2 - y) * at(y1, x1) + (y - y1) * at(y2, x1)
    if y1 == y2:
        return (x2 - x) * at(y1, x1) + (x - x1) * at(y1, x2)
    top = (x2 - x) * at(y1, x1) + (x - x1) * at(y1, x2)
    bottom = (x2 - x) * at(y2, x1) + (x - x1) * at(y2, x2)
    return (y2 - y) * top + (y - y1) * bottom


def tri_facing(
    sx0: float, sy0: float, sx1: float, sy1: float, sx2: float, sy2: float,
    dx0: float, dy0: float, dx1: float, dy1: float, dx2: float, dy2: float,
) -> float:
    """Ratio of the signed areas of a destination and a source triangle.

    Positive when both triangles have the same orientation. Raises
    ZeroDivisionError if the source triangle is degenerate.
    """
    numerator = (dx1 - dx0) * (dy0 - dy2) + (dy1 - dy0) * (dx2 - dx0)
    denominator = (sx1 - sx0) * (sy0 - sy2) + (sy1 - sy0) * (sx2 - sx0)
    return numerator / denominator