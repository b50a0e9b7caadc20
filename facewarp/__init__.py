"""Piecewise affine face-shape warping, landmark-file I/O, and matrix and argument helpers."""

__version__ = "0.1.0"
__all__ = ["arguments", "geometry", "helpers", "matrices", "paw", "points"]