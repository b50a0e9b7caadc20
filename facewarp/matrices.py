"""Sequence predicates and small matrix utilities built on numpy arrays."""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterable, Sequence
from typing import Any, TypeVar

import numpy as np

T = TypeVar("T")
R = TypeVar("R")


def every(iterable: Iterable[T], predicate: Callable[[T], Any]) -> bool:
    """Return True unless the predicate is false for some item."""
    return all(predicate(item) for item in iterable)


def every_pair(
    first: Iterable[Any], second: Iterable[Any], predicate: Callable[[Any, Any], Any]
) -> bool:
    """Apply a binary predicate pairwise, stopping at the shorter sequence."""
    return all(predicate(a, b) for a, b in zip(first, second))


def some(iterable: Iterable[T], predicate: Callable[[T], Any]) -> bool:
    """Return True if the predicate holds for at least one item."""
    return any(predicate(item) for item in iterable)


def remove_if_not(iterable: Iterable[T], predicate: Callable[[T], Any]) -> list[T]:
    """Keep only the items for which the predicate holds, in order."""
    return [item for item in iterable if predicate(item)]


def for_each_pair(
    first: Iterable[Any], second: Iterable[Any], function: Callable[[Any, Any], Any]
) -> None:
    """Call a function on each pair, stopping at the shorter sequence."""
    for a, b in zip(first, second):
        function(a, b)


def reduce_with_key(
    iterable: Iterable[T],
    initial: R,
    function: Callable[[R, Any], R],
    key: Callable[[T], Any],
) -> R:
    """Fold the keyed items into an accumulator starting from ``initial``."""
    return functools.reduce(function, map(key, iterable), initial)


def vector_lengths_equal_p(*args: Sequence[Any]) -> bool:
    """Return True if all given sequences have the same length as the first."""
    if len(args) < 2:
        raise TypeError("vector_lengths_equal_p needs at least two sequences")
    first = len(args[0])
    return all(len(other) == first for other in args[1:])


def _dimensions(matrix: Any) -> tuple[int, int]:
    array = np.asarray(matrix)
    if array.ndim == 0:
        return 1, 1
    rows = array.shape[0]
    columns = array.shape[1] if array.ndim > 1 else 1
    return rows, columns


def valid_row_index_p(matrix: Any, index: int) -> bool:
    """Return True if ``index`` addresses a row of the matrix."""
    rows, _ = _dimensions(matrix)
    return 0 <= index < rows


def valid_column_index_p(matrix: Any, index: int) -> bool:
    """Return True if ``index`` addresses a column of the matrix."""
    _, columns = _dimensions(matrix)
    return 0 <= index < columns


def valid_matrix_index_p(matrix: Any, row: int, column: int) -> bool:
    """Return True if (row, column) lies inside the matrix."""
    return valid_row_index_p(matrix, row) and valid_column_index_p(matrix, column)


def ones(rows: int, columns: int) -> np.ndarray:
    """A rows x columns matrix of ones."""
    return np.ones((rows, columns), dtype=np.float64)


def zeros(rows: int, columns: int) -> np.ndarray:
    """A rows x columns matrix of zeros."""
    return np.zeros((rows, columns), dtype=np.float64)


def vector_of_zeros(count: int, rows: int, columns: int) -> list[np.ndarray]:
    """A list of ``count`` independent zero matrices."""
    return vector_of_value(count, zeros(rows, columns))


def vector_of_value(count: int, value: Any) -> list[np.ndarray]:
    """A list of ``count`` independent copies of ``value``."""
    template = np.asarray(value)
    return [template.copy() for _ in range(count)]


def eye(rows: int, columns: int) -> np.ndarray:
    """A rows x columns matrix with ones on the main diagonal."""
    return np.eye(rows, columns, dtype=np.float64)


def less_than_or_equal_to(a: Any, b: Any) -> bool:
    """Return True if no element of ``a`` is greater than its counterpart in ``b``."""
    left = np.asarray(a)
    right = np.asarray(b)
    if left.shape != right.shape:
        raise ValueError("Cannot perform comparison as matrix sizes do not match.")
    return not bool(np.any(left > right))


def matrix_dimensions_equal_p(matrices: Sequence[Any]) -> bool:
    """Return True if every matrix has the shape of the first one."""
    if len(matrices) <= 1:
        return True
    reference = _dimensions(matrices[0])
    return all(_dimensions(m) == reference for m in matrices[1:])


def concatenate(a: Iterable[T], b: Iterable[T]) -> list[T]:
    """A new list holding the items of ``a`` followed by those of ``b``."""
    return [*a, *b]


def clone(value: Any) -> Any:
    """Deep-copy a matrix, or each matrix of a list or tuple of matrices."""
    if isinstance(value, (list, tuple)):
        return [np.array(item, copy=True) for item in value]
    return np.array(value, copy=True)