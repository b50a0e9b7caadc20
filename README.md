# facewarp

Tools for working with 2D face shapes: a piecewise affine warp over a
triangulated shape, reading and writing `.pts` landmark files, and a set of
small matrix, norm, pathname and argument helpers.

Shapes are stored the usual way for landmark models: a column of `2n`
values, all the x coordinates first, then all the y coordinates.

## Installation

```
pip install .
```

## Landmark files (`facewarp.points`)

```python
from facewarp.points import load_points, save_points, vectorise_points

save_points("face.pts", [(10.0, 20.0), (30.0, 40.0)])
points = load_points("face.pts")       # [(10.0, 20.0), (30.0, 40.0)]
shape = vectorise_points(points)       # (4, 1) column [x0, x1, y0, y1]
```

A file starts with `n_points: N`, then `{`, one point per line and `}`.
`load_points3` and `save_points3` do the same for 3D points. A malformed
file raises `ValueError`.

## Piecewise affine warp (`facewarp.paw`)

```python
import numpy as np
from facewarp.paw import PiecewiseAffineWarp

src = np.array([0.0, 10.0, 0.0, 10.0,
                0.0, 0.0, 10.0, 10.0])          # four corners of a square
tri = np.array([[0, 1, 2], [1, 3, 2]])
warp = PiecewiseAffineWarp(src, tri)            # optional third argument: mask

dst = src * 2.0 + 5.0
warp.set_dst(dst)
warp.calc_coeff()
x, y = warp.warp_point(5.0, 5.0)                # (15.0, 15.0)

image = np.zeros((40, 40), dtype=np.uint8)
cropped = warp.crop(image, dst)                 # image under dst, in the reference frame
pixels = warp.vectorize(cropped)                # one float64 per pixel inside the mask
back = warp.unvectorize(pixels, 0)              # uint8 image, background 0
```

Other members:

- `warp_point_check` and `inverse_warp_point` return `None` where a point lies
  in no triangle; `warp_point` raises `WarpError` instead.
- `warp(shape, idx)` and `inverse_warp(shape, idx)` map whole shapes; a point
  outside the triangulation is averaged over the triangles touching vertex
  `idx[i]`, and raises `WarpError` when no `idx` is given.
- `warp_region()` returns the destination x and y maps of every region pixel
  (-1 outside the mask).
- `draw(src, dst, shape)` and `draw_rgb(src, dst, shape)` paint a
  reference-frame uint8 texture into `dst` in place, skipping triangles that
  leave `dst` or are flipped.
- `vectorize_uchar`, `find_vtri`, `pix_tri` and `dwdx` give uint8 pixel
  vectors, the vertex/triangle table, the triangle of each region pixel and
  the barycentric weights of each region pixel.
- Properties: `n_points`, `n_tri`, `n_pix`, `width`, `height`.

Bad input and unmappable points raise `WarpError`, a subclass of `ValueError`.

The geometric building blocks (`same_side`, `is_within_tri`, `bilin_interp`,
`tri_facing`, `pythag`) live in `facewarp.geometry`; `is_within_tri` returns
the index of the first containing triangle, or `None`.

## Helpers

- `facewarp.helpers`: `nan_p`, `plusp`, `column_concatenate`,
  `row_concatenate`, `rank`, image and matrix shape predicates,
  `l1_norm` / `l2_norm` / `l2sq_norm` (with an optional `prior` matrix, and
  summed over lists of matrices), `random_matrix` and friends,
  `read_list` / `read_and_transform_list` for files of non-empty lines,
  `pathname_type`, `pathname_name`, `pathname_directory`,
  `pathname_sans_directory`, `make_pathname`, `file_exists_p`, and
  `load_grayscale_image`, which reads any image Pillow can open into a uint8
  array.
- `facewarp.matrices`: `every`, `some`, `every_pair`, `for_each_pair`,
  `remove_if_not`, `reduce_with_key`, `ones`, `zeros`, `eye`,
  `vector_of_zeros`, `vector_of_value`, `less_than_or_equal_to`,
  `matrix_dimensions_equal_p`, `concatenate`, `clone` and index predicates.
- `facewarp.arguments`: `CommandLineArgument` (a slot filled with `assign`
  and read with `get`), `get_argument(argv, index, convert)`,
  `assign_argument`, `have_argument_p` and `have_arguments_p`, for simple
  hand-written positional argument handling.

## What this package does not do

It has no command-line program, no face detection or tracking, no shape
fitting or shape prediction, and no reading or writing of trained model
files. It offers the warp, the geometry and the point-file and matrix
utilities that such a tracker would be built on.

## Tests

```
pip install .[test]
pytest
```