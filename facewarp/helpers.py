"""Matrix predicates, norms, pathname handling, list files and random matrices."""

from __future__ import annotations

import functools
import random
from collections.abc import Callable, Iterable, Sequence
from typing import IO, Any, TypeVar

import numpy as np
from PIL import Image

T = TypeVar("T")

_QUANTISATION = 10000


def _as_matrix(value: Any) -> np.ndarray:
    array = np.asarray(value, dtype=np.float64)
    if array.ndim == 0:
        return array.reshape(1, 1)
    if array.ndim == 1:
        return array.reshape(-1, 1)
    return array


def _shape(matrix: Any) -> tuple[int, int]:
    array = np.asarray(matrix)
    if array.ndim == 0:
        return 1, 1
    rows = array.shape[0]
    columns = array.shape[1] if array.ndim > 1 else 1
    return rows, columns


def _is_collection(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and any(
        isinstance(item, np.ndarray) for item in value
    )


def nan_p(value: Any) -> bool:
    """Return True if the value, or any element of a matrix, is NaN."""
    return bool(np.isnan(np.asarray(value, dtype=np.float64)).any())


def plusp(value: float) -> bool:
    """Return True if the value is strictly positive."""
    return value > 0


def _join_columns(a: Any, b: Any) -> np.ndarray:
    left, right = _as_matrix(a), _as_matrix(b)
    if left.shape[0] != right.shape[0]:
        raise ValueError(
            "Unable to concatenate matrix columns as the number of rows do not match. "
            f"({left.shape[0]} != {right.shape[0]})"
        )
    return np.hstack((left, right))


def column_concatenate(*args: Any) -> np.ndarray:
    """Place matrices side by side; all must have the same number of rows."""
    if len(args) < 2:
        raise TypeError("column_concatenate needs at least two matrices")
    return functools.reduce(_join_columns, args)


def row_concatenate(a: Any, b: Any) -> np.ndarray:
    """Stack ``b`` below ``a``; both must have the same number of columns."""
    top, bottom = _as_matrix(a), _as_matrix(b)
    if top.shape[1] != bottom.shape[1]:
        raise ValueError("Column length mismatch.")
    return np.vstack((top, bottom))


def rank(matrix: Any) -> int:
    """Number of singular values greater than machine epsilon."""
    array = _as_matrix(matrix)
    if array.size == 0:
        return 0
    singular = np.linalg.svd(array, compute_uv=False)
    return int(np.count_nonzero(singular > np.finfo(np.float64).eps))


def invalid_image_p(image: Any) -> bool:
    """Return True if the image has no rows or no columns."""
    array = np.asarray(image)
    if array.ndim < 2:
        return True
    return array.shape[0] == 0 or array.shape[1] == 0


def valid_image_p(image: Any) -> bool:
    """Return True if the image has at least one row and one column."""
    return not invalid_image_p(image)


def matrix_with_dimensions_p(matrix: Any, rows: int, columns: int) -> bool:
    """Return True if the matrix is exactly rows x columns."""
    return _shape(matrix) == (rows, columns)


def column_vector_with_length_p(matrix: Any, length: int) -> bool:
    """Return True if the matrix is a column vector of the given length."""
    return matrix_with_dimensions_p(matrix, length, 1)


def matrices_with_dimensions_p(matrices: Iterable[Any], rows: int, columns: int) -> bool:
    """Return True if every matrix is exactly rows x columns."""
    return all(matrix_with_dimensions_p(m, rows, columns) for m in matrices)


def column_vector_p(matrix: Any) -> bool:
    """Return True if the matrix has a single column."""
    return _shape(matrix)[1] == 1


def column_vectors_p(matrices: Iterable[Any]) -> bool:
    """Return True if every matrix has a single column."""
    return all(column_vector_p(m) for m in matrices)


def column_vectors_with_length_p(matrices: Iterable[Any], length: int) -> bool:
    """Return True if every matrix is a column vector of the given length."""
    return all(column_vector_with_length_p(m, length) for m in matrices)


def file_exists_p(pathname: str) -> bool:
    """Return True if the file can be opened for reading."""
    try:
        with open(pathname, "rb"):
            return True
    except OSError:
        return False


def read_list(source: str | IO[str]) -> list[str]:
    """Read the non-empty lines of a file name or an open text stream."""
    if isinstance(source, str):
        try:
            with open(source, encoding="utf-8") as stream:
                return read_list(stream)
        except OSError as exc:
            raise OSError(f"Unable to open file {source}") from exc
    return [line for line in source.read().split("\n") if line]


def read_and_transform_list(filename: str, function: Callable[[str], T]) -> list[T]:
    """Read the non-empty lines of a file and apply ``function`` to each."""
    return [function(line) for line in read_list(filename)]


def pathname_sans_directory(pathname: str) -> str:
    """The last component of a path, with POSIX basename semantics."""
    if not pathname:
        return "."
    stripped = pathname.rstrip("/")
    if not stripped:
        return "/"
    return stripped.rsplit("/", 1)[-1]


def pathname_directory(pathname: str) -> str:
    """The directory part of a path, with POSIX dirname semantics."""
    stripped = pathname.rstrip("/")
    if not stripped:
        return "/" if pathname else "."
    if "/" not in stripped:
        return "."
    head = stripped.rsplit("/", 1)[0].rstrip("/")
    return head or "/"


def _split_name(pathname: str, what: str) -> tuple[str, str | None]:
    base = pathname_sans_directory(pathname)
    if base.count(".") > 1:
        raise ValueError(f"Unable to compute the {what} of file '{pathname}'")
    if "." not in base:
        return base, None
    name, extension = base.split(".", 1)
    return name, extension


def pathname_type(pathname: str) -> str:
    """The extension of the file name, or an empty string if there is none."""
    _, extension = _split_name(pathname, "extension")
    return extension or ""


def pathname_name(pathname: str) -> str:
    """The file name without directory and extension."""
    name, _ = _split_name(pathname, "name component")
    return name


def make_pathname(directory: str, name: str, type: str) -> str:
    """Join directory, name and optional extension into a path."""
    path = f"{directory}/{name}"
    return f"{path}.{type}" if type else path


def load_grayscale_image(pathname: str) -> np.ndarray:
    """Load an image and return it as an 8-bit grayscale array."""
    try:
        with Image.open(pathname) as image:
            gray = image.convert("L")
            array = np.array(gray, dtype=np.uint8)
    except OSError as exc:
        raise OSError(f"Unable to load image '{pathname}'") from exc
    if invalid_image_p(array):
        raise OSError(f"Unable to load image '{pathname}'")
    return array


def random_matrix(rows: int, columns: int, low: float = -1.0, high: float = 1.0) -> np.ndarray:
    """A matrix of values in [low, high) quantised to 1/10000 steps."""
    steps = np.array(
        [[random.randrange(_QUANTISATION) for _ in range(columns)] for _ in range(rows)],
        dtype=np.float64,
    ).reshape(rows, columns)
    return low + (steps / _QUANTISATION) * (high - low)


def random_vector(rows: int, low: float = -1.0, high: float = 1.0) -> np.ndarray:
    """A random column vector with values in [low, high)."""
    return random_matrix(rows, 1, low, high)


def random_matrices(
    count: int, rows: int, columns: int, low: float = -1.0, high: float = 1.0
) -> list[np.ndarray]:
    """A list of independent random matrices."""
    return [random_matrix(rows, columns, low, high) for _ in range(count)]


def random_vectors(
    count: int, rows: int, low: float = -1.0, high: float = 1.0
) -> list[np.ndarray]:
    """A list of independent random column vectors."""
    return random_matrices(count, rows, 1, low, high)


def random_matrix_of_maximum_rank(
    rows: int, columns: int, low: float = -1.0, high: float = 1.0
) -> np.ndarray:
    """A random matrix whose rank equals min(rows, columns)."""
    while True:
        candidate = random_matrix(rows, columns, low, high)
        if rank(candidate) == min(rows, columns):
            return candidate


def l1_norm(value: Any) -> float:
    """Sum of absolute values; for a list of matrices, the sum of their norms."""
    if _is_collection(value):
        return float(sum(l1_norm(item) for item in value))
    return float(np.abs(np.asarray(value, dtype=np.float64)).sum())


def l2_norm(value: Any, prior: Any = None) -> float:
    """Euclidean (Frobenius) norm of ``prior @ value``, or of ``value`` alone.

    For a list of matrices the norms are summed.
    """
    if _is_collection(value):
        return float(sum(l2_norm(item, prior) for item in value))
    matrix = _as_matrix(value)
    if prior is not None:
        matrix = _as_matrix(prior) @ matrix
    return float(np.sqrt(np.sum(matrix * matrix)))


def l2sq_norm(value: Any, prior: Any = None) -> float:
    """Squared l2 norm; for a list of matrices, the sum of squared norms."""
    if _is_collection(value):
        return float(sum(l2sq_norm(item, prior) for item in value))
    return l2_norm(value, prior) ** 2


def _sequence_of(values: Sequence[Any]) -> list[np.ndarray]:
    return [np.asarray(v, dtype=np.float64) for v in values]