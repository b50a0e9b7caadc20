"""Piecewise affine warp over a triangulated reference shape."""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from typing import Any

import numpy as np

from facewarp.geometry import bilin_interp, is_within_tri, same_side, tri_facing

_SUPPORTED_TYPES = (np.uint8, np.float32, np.float64)


class WarpError(ValueError):
    """Raised when a warp is given inconsistent data or cannot map a point."""


def _flat(shape: Any) -> np.ndarray:
    return np.asarray(shape, dtype=np.float64).reshape(-1)


def _locate(
    xs: np.ndarray, ys: np.ndarray, tri: np.ndarray, px: np.ndarray, py: np.ndarray
) -> np.ndarray:
    """Index of the first triangle containing each point, -1 where none does."""
    result = np.full(np.shape(xs), -1, dtype=np.int64)
    for index, (i, j, k) in enumerate(tri):
        inside = (
            same_side(xs, ys, px[i], py[i], px[j], py[j], px[k], py[k])
            & same_side(xs, ys, px[j], py[j], px[i], py[i], px[k], py[k])
            & same_side(xs, ys, px[k], py[k], px[i], py[i], px[j], py[j])
        )
        result[inside & (result == -1)] = index
    return result


def _remap(image: np.ndarray, mapx: np.ndarray, mapy: np.ndarray) -> np.ndarray:
    """Bilinear resampling of ``image`` at the map coordinates, 0 outside."""
    rows, cols = image.shape[:2]
    mx = mapx.astype(np.float64)
    my = mapy.astype(np.float64)
    x0 = np.floor(mx).astype(np.int64)
    y0 = np.floor(my).astype(np.int64)
    fx = mx - x0
    fy = my - y0
    if image.ndim == 3:
        fx = fx[..., None]
        fy = fy[..., None]

    def sample(yy: np.ndarray, xx: np.ndarray) -> np.ndarray:
        out = np.zeros(mx.shape + image.shape[2:], dtype=np.float64)
        valid = (xx >= 0) & (xx < cols) & (yy >= 0) & (yy < rows)
        out[valid] = image[yy[valid], xx[valid]]
        return out

    top = (1.0 - fx) * sample(y0, x0) + fx * sample(y0, x0 + 1)
    bottom = (1.0 - fx) * sample(y0 + 1, x0) + fx * sample(y0 + 1, x0 + 1)
    result = (1.0 - fy) * top + fy * bottom
    if np.issubdtype(image.dtype, np.integer):
        info = np.iinfo(image.dtype)
        result = np.clip(np.rint(result), info.min, info.max)
    return result.astype(image.dtype)


class PiecewiseAffineWarp:
    """Maps a triangulated reference region onto a destination shape.

    Shapes are stacked coordinate vectors: all x values followed by all y
    values. ``tri`` holds one row of three vertex indices per triangle. An
    optional ``mask`` restricts which pixels of the reference region are used.
    """

    def __init__(self, src: Any, tri: Any, mask: Any = None) -> None:
        source = _flat(src)
        if source.size == 0 or source.size % 2:
            raise WarpError("source shape must hold an even, non-zero number of values")
        triangles = np.asarray(tri)
        if triangles.ndim != 2 or triangles.shape[1] != 3:
            raise WarpError("triangulation must have three columns")
        if not np.issubdtype(triangles.dtype, np.integer):
            raise WarpError("triangulation must hold integer vertex indices")
        triangles = triangles.astype(np.int64)
        n = source.size // 2
        if triangles.size and (triangles.min() < 0 or triangles.max() >= n):
            raise WarpError("triangulation refers to a vertex outside the shape")

        self.src = source.copy()
        self.tri = triangles.copy()
        xs, ys = self.src[:n], self.src[n:]

        j, k, l = self.tri.T
        c1 = ys[l] - ys[j]
        c2 = xs[l] - xs[j]
        c4 = ys[k] - ys[j]
        c3 = xs[k] - xs[j]
        c5 = c3 * c1 - c2 * c4
        if np.any(c5 == 0):
            raise WarpError("triangulation contains a degenerate triangle")
        self.alpha = np.column_stack(((ys[j] * c2 - xs[j] * c1) / c5, c1 / c5, -c2 / c5))
        self.beta = np.column_stack(((xs[j] * c4 - ys[j] * c3) / c5, -c4 / c5, c3 / c5))

        xmin, xmax = float(xs.min()), float(xs.max())
        ymin, ymax = float(ys.min()), float(ys.max())
        width = int(xmax - xmin + 1.0)
        height = int(ymax - ymin + 1.0)
        self.xmin = xmin
        self.ymin = ymin

        grid_x, grid_y = np.meshgrid(
            np.arange(width, dtype=np.float64) + xmin,
            np.arange(height, dtype=np.float64) + ymin,
        )
        located = _locate(grid_x, grid_y, self.tri, xs, ys)
        if mask is None:
            allowed = np.ones((height, width), dtype=bool)
        else:
            given = np.asarray(mask)
            if given.shape != (height, width):
                raise WarpError(
                    f"mask must be {height}x{width}, got {'x'.join(map(str, given.shape))}"
                )
            allowed = given != 0
        self.tridx = np.where(allowed, located, 0).astype(np.int64)
        self.mask = (allowed & (located >= 0)).astype(np.uint8)

        self.dst = self.src.copy()
        self.coeff = np.zeros((self.n_tri, 6), dtype=np.float64)
        self.calc_coeff()

    @property
    def n_points(self) -> int:
        """Number of vertices of the reference shape."""
        return self.src.size // 2

    @property
    def n_tri(self) -> int:
        """Number of triangles."""
        return self.tri.shape[0]

    @property
    def n_pix(self) -> int:
        """Number of pixels inside the warped region."""
        return int(np.count_nonzero(self.mask))

    @property
    def width(self) -> int:
        """Width of the reference region in pixels."""
        return self.mask.shape[1]

    @property
    def height(self) -> int:
        """Height of the reference region in pixels."""
        return self.mask.shape[0]

    def set_dst(self, dst: Any) -> None:
        """Set the destination shape; it must have as many values as the source."""
        destination = _flat(dst)
        if destination.size != self.src.size:
            raise WarpError("destination shape must match the source shape")
        self.dst = destination.copy()

    def calc_coeff(self) -> None:
        """Recompute the affine coefficients of every triangle from ``dst``."""
        n = self.n_points
        dx, dy = self.dst[:n], self.dst[n:]
        i, j, k = self.tri.T
        c1 = dx[i]
        c2 = dx[j] - c1
        c3 = dx[k] - c1
        c4 = dy[i]
        c5 = dy[j] - c4
        c6 = dy[k] - c4
        a, b = self.alpha, self.beta
        self.coeff = np.column_stack((
            c1 + c2 * a[:, 0] + c3 * b[:, 0],
            c2 * a[:, 1] + c3 * b[:, 1],
            c2 * a[:, 2] + c3 * b[:, 2],
            c4 + c5 * a[:, 0] + c6 * b[:, 0],
            c5 * a[:, 1] + c6 * b[:, 1],
            c5 * a[:, 2] + c6 * b[:, 2],
        ))

    def _apply(self, index: int, xi: float, yi: float) -> tuple[float, float]:
        a = self.coeff[index]
        xo = a[0] + a[1] * xi + a[2] * yi
        yo = a[3] + a[4] * xi + a[5] * yi
        return float(xo), float(yo)

    def _resolve(self, xi: float, yi: float, triangle: int | None) -> int | None:
        if triangle is not None and 0 <= triangle < self.n_tri:
            return triangle
        return is_within_tri(xi, yi, self.tri, self.src)

    def warp_point(
        self, xi: float, yi: float, triangle: int | None = None
    ) -> tuple[float, float]:
        """Map a source point; raises WarpError if it lies in no triangle."""
        index = self._resolve(xi, yi, triangle)
        if index is None:
            raise WarpError(f"point ({xi}, {yi}) lies outside the triangulation")
        return self._apply(index, xi, yi)

    def warp_point_check(
        self, xi: float, yi: float, triangle: int | None = None
    ) -> tuple[float, float] | None:
        """Map a source point, or return None if it lies in no triangle."""
        index = self._resolve(xi, yi, triangle)
        if index is None:
            return None
        return self._apply(index, xi, yi)

    def warp_region(self) -> tuple[np.ndarray, np.ndarray]:
        """Destination coordinates of every region pixel; -1 outside the mask."""
        ys, xs = np.nonzero(self.mask)
        xi = xs.astype(np.float64) + self.xmin
        yi = ys.astype(np.float64) + self.ymin
        a = self.coeff[self.tridx[ys, xs]]
        mapx = np.full(self.mask.shape, -1.0, dtype=np.float32)
        mapy = np.full(self.mask.shape, -1.0, dtype=np.float32)
        mapx[ys, xs] = ((a[:, 0] + a[:, 1] * xi) + a[:, 2] * yi).astype(np.float32)
        mapy[ys, xs] = ((a[:, 3] + a[:, 4] * xi) + a[:, 5] * yi).astype(np.float32)
        return mapx, mapy

    def _fallback(
        self,
        point: int,
        xi: float,
        yi: float,
        n: int,
        idx: Sequence[int] | None,
        mapper: Callable[[float, float, int], tuple[float, float] | None],
    ) -> tuple[float, float]:
        if idx is None:
            raise WarpError(f"point {point} lies outside the triangulation")
        indices = np.asarray(idx, dtype=np.int64).reshape(-1)
        if indices.size != n:
            raise WarpError("index list must have one entry per point")
        vertex = indices[point]
        results = [
            mapper(xi, yi, t)
            for t, corners in enumerate(self.tri)
            if vertex in corners
        ]
        found = [r for r in results if r is not None]
        if not found:
            raise WarpError(f"vertex {vertex} belongs to no triangle")
        return (
            sum(r[0] for r in found) / len(found),
            sum(r[1] for r in found) / len(found),
        )

    def _map_shape(
        self,
        shape: Any,
        idx: Sequence[int] | None,
        mapper: Callable[[float, float, int | None], tuple[float, float] | None],
    ) -> np.ndarray:
        points = _flat(shape)
        n = points.size // 2
        out = np.zeros(2 * n, dtype=np.float64)
        for i, (x, y) in enumerate(zip(points[:n], points[n:2 * n])):
            result = mapper(float(x), float(y), None)
            if result is None:
                result = self._fallback(i, float(x), float(y), n, idx, mapper)
            out[i], out[i + n] = result
        return out

    def warp(self, shape: Any, idx: Sequence[int] | None = None) -> np.ndarray:
        """Map every point of a shape to the destination.

        A point outside the triangulation is mapped by averaging the affine
        maps of the triangles touching vertex ``idx[i]``; without ``idx`` such
        a point raises WarpError.
        """
        return self._map_shape(shape, idx, self.warp_point_check)

    def inverse_warp_point(
        self, xi: float, yi: float, triangle: int | None = None
    ) -> tuple[float, float] | None:
        """Map a destination point back into region coordinates.

        Returns None if no triangle is given and the point lies in none.
        """
        if triangle is None:
            triangle = is_within_tri(xi, yi, self.tri, self.dst)
            if triangle is None:
                return None
        a = self._inverse_affine(triangle, self.dst)
        xo = a[0, 0] * xi + a[0, 1] * yi + a[0, 2]
        yo = a[1, 0] * xi + a[1, 1] * yi + a[1, 2]
        return float(xo), float(yo)

    def inverse_warp(self, shape: Any, idx: Sequence[int] | None = None) -> np.ndarray:
        """Map every point of a destination shape back into region coordinates."""
        return self._map_shape(shape, idx, self.inverse_warp_point)

    def _inverse_affine(self, triangle: int, dst: np.ndarray) -> np.ndarray:
        n = self.n_points
        corners = self.tri[triangle]
        x = np.column_stack((dst[corners], dst[corners + n], np.ones(3)))
        y = np.column_stack((self.src[corners] - self.xmin, self.src[corners + n] - self.ymin))
        return (np.linalg.pinv(x) @ y).T

    def crop(self, image: Any, shape: Any) -> np.ndarray:
        """Sample the region of ``image`` covered by ``shape`` into the reference frame."""
        self.set_dst(shape)
        self.calc_coeff()
        mapx, mapy = self.warp_region()
        return _remap(np.asarray(image), mapx, mapy)

    def _masked_values(self, image: Any) -> np.ndarray:
        pixels = np.asarray(image)
        if pixels.shape[:2] != (self.height, self.width) or pixels.ndim != 2:
            raise WarpError(f"image must be {self.height}x{self.width}")
        if pixels.dtype.type not in _SUPPORTED_TYPES:
            raise WarpError(f"Unsupported image type {pixels.dtype}")
        return pixels[self.mask != 0]

    def vectorize(self, image: Any) -> np.ndarray:
        """The region pixels of an image, in row order, as float64."""
        return self._masked_values(image).astype(np.float64)

    def vectorize_uchar(self, image: Any) -> np.ndarray:
        """The region pixels of an image, in row order, as uint8."""
        values = self._masked_values(image)
        if values.dtype == np.uint8:
            return values.copy()
        return np.clip(np.trunc(values), 0, 255).astype(np.uint8)

    def unvectorize(self, vec: Any, background: int = -1) -> np.ndarray:
        """Build a uint8 image from region pixel values.

        Values are rounded and clipped to 0..255; pixels outside the region
        take ``background`` when it lies in 0..255, otherwise 0.
        """
        values = np.asarray(vec, dtype=np.float64).reshape(-1)
        if values.size != self.n_pix:
            raise WarpError("vector length must equal the number of region pixels")
        image = np.zeros((self.height, self.width), dtype=np.uint8)
        if 0 <= background <= 255:
            image[:] = background
        image[self.mask != 0] = np.clip(np.floor(values + 0.5), 0, 255).astype(np.uint8)
        return image

    def _draw(self, sources: Sequence[np.ndarray], targets: Sequence[np.ndarray], shape: Any) -> None:
        points = _flat(shape)
        if points.size != self.src.size:
            raise WarpError("shape must match the source shape")
        for source in sources:
            if source.dtype != np.uint8 or source.shape != (self.height, self.width):
                raise WarpError(f"source images must be uint8 and {self.height}x{self.width}")
        for target in targets:
            if target.dtype != np.uint8 or target.ndim != 2:
                raise WarpError("destination images must be 2-D uint8 arrays")
        rows, cols = targets[0].shape
        n = self.n_points
        for triangle, corners in enumerate(self.tri):
            sx = self.src[corners] - self.xmin
            sy = self.src[corners + n] - self.ymin
            dx = points[corners]
            dy = points[corners + n]
            xmax, ymax = math.ceil(dx.max()), math.ceil(dy.max())
            xmin, ymin = math.floor(dx.min()), math.floor(dy.min())
            if xmin < 0 or xmax >= cols or ymin < 0 or ymax >= rows:
                continue
            try:
                facing = tri_facing(sx[0], sy[0], sx[1], sy[1], sx[2], sy[2],
                                    dx[0], dy[0], dx[1], dy[1], dx[2], dy[2])
            except ZeroDivisionError:
                continue
            if facing <= 0:
                continue
            a = self._inverse_affine(triangle, points)
            grid_x, grid_y = np.meshgrid(
                np.arange(xmin, xmax + 1, dtype=np.float64),
                np.arange(ymin, ymax + 1, dtype=np.float64),
            )
            inside = (
                same_side(grid_x, grid_y, dx[0], dy[0], dx[1], dy[1], dx[2], dy[2])
                & same_side(grid_x, grid_y, dx[1], dy[1], dx[0], dy[0], dx[2], dy[2])
                & same_side(grid_x, grid_y, dx[2], dy[2], dx[0], dy[0], dx[1], dy[1])
            )
            for i, j in zip(grid_y[inside], grid_x[inside]):
                x = a[0, 0] * j + a[0, 1] * i + a[0, 2]
                y = a[1, 0] * j + a[1, 1] * i + a[1, 2]
                for source, target in zip(sources, targets):
                    target[int(i), int(j)] = int(bilin_interp(source, x, y) + 0.5)

    def draw(self, src: Any, dst: np.ndarray, shape: Any) -> np.ndarray:
        """Paint a reference-frame image onto ``dst`` at ``shape``, in place.

        Triangles that leave ``dst`` or are flipped are skipped. Returns ``dst``.
        """
        self._draw([np.asarray(src)], [dst], shape)
        return dst

    def draw_rgb(
        self, src: Sequence[Any], dst: Sequence[np.ndarray], shape: Any
    ) -> Sequence[np.ndarray]:
        """Like :meth:`draw` for three separate channel images. Returns ``dst``."""
        if len(src) != 3 or len(dst) != 3:
            raise WarpError("draw_rgb needs exactly three source and three destination channels")
        self._draw([np.asarray(s) for s in src], list(dst), shape)
        return dst

    def find_vtri(self) -> np.ndarray:
        """A (points x triangles) uint8 table: 1 where a vertex belongs to a triangle."""
        table = np.zeros((self.n_points, self.n_tri), dtype=np.uint8)
        for t, corners in enumerate(self.tri):
            table[corners, t] = 1
        return table

    def pix_tri(self) -> np.ndarray:
        """Triangle index of each region pixel, in row order (-1 if none)."""
        ys, xs = np.nonzero(self.mask)
        n = self.n_points
        return _locate(
            xs.astype(np.float64) + self.xmin,
            ys.astype(np.float64) + self.ymin,
            self.tri,
            self.src[:n],
            self.src[n:],
        )

    def dwdx(self, pix_tri: Any = None) -> np.ndarray:
        """Barycentric weights (3 x n_pix) of each region pixel in its triangle."""
        indices = self.pix_tri() if pix_tri is None else np.asarray(pix_tri, dtype=np.int64).reshape(-1)
        ys, xs = np.nonzero(self.mask)
        if indices.size != xs.size:
            raise WarpError("pixel triangle list must have one entry per region pixel")
        vx = xs.astype(np.float64) + self.xmin
        vy = ys.astype(np.float64) + self.ymin
        a = self.alpha[indices]
        b = self.beta[indices]
        second = a[:, 0] + a[:, 1] * vx + a[:, 2] * vy
        third = b[:, 0] + b[:, 1] * vx + b[:, 2] * vy
        return np.vstack((1.0 - (second + third), second, third))