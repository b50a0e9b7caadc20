"""Reading and writing landmark point files in the ``.pts`` text format."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

import numpy as np

_WHITESPACE = re.compile(r"\s*")
_WORD = re.compile(r"\S+")
_INTEGER = re.compile(r"[+-]?\d+")
_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class _Scanner:
    """Whitespace-skipping reader over the text of a points file."""

    def __init__(self, text: str, pathname: str) -> None:
        self._text = text
        self._pos = 0
        self._pathname = pathname

    def _fail(self, what: str) -> ValueError:
        return ValueError(f"Malformed pts file '{self._pathname}': {what}")

    def _skip(self) -> None:
        match = _WHITESPACE.match(self._text, self._pos)
        self._pos = match.end() if match else self._pos

    def _take(self, pattern: re.Pattern[str], what: str) -> str:
        self._skip()
        match = pattern.match(self._text, self._pos)
        if match is None:
            raise self._fail(f"expected {what}")
        self._pos = match.end()
        return match.group()

    def word(self) -> str:
        return self._take(_WORD, "a word")

    def char(self) -> str:
        self._skip()
        if self._pos >= len(self._text):
            raise self._fail("unexpected end of file")
        ch = self._text[self._pos]
        self._pos += 1
        return ch

    def integer(self) -> int:
        return int(self._take(_INTEGER, "an integer"))

    def number(self) -> float:
        return float(self._take(_NUMBER, "a number"))


def _load(pathname: str, dimension: int) -> list[tuple[float, ...]]:
    with open(pathname, encoding="utf-8") as stream:
        text = stream.read()
    scanner = _Scanner(text, str(pathname))

    while not scanner.word().startswith("n_points:"):
        pass
    count = scanner.integer()
    if count < 0:
        raise ValueError(f"Malformed pts file '{pathname}': negative point count")

    while scanner.char() != "{":
        pass

    return [
        tuple(scanner.number() for _ in range(dimension)) for _ in range(count)
    ]


def _save(pathname: str, points: Sequence[Sequence[float]], separator: str) -> None:
    lines = [f"n_points: {len(points)}", "{"]
    lines.extend(separator.join(f"{float(c):g}" for c in point) for point in points)
    lines.append("}")
    with open(pathname, "w", encoding="utf-8") as stream:
        stream.write("\n".join(lines) + "\n")


def load_points(pathname: str) -> list[tuple[float, float]]:
    """Load 2-D points; raises ValueError if the file is malformed."""
    return [(x, y) for x, y in _load(pathname, 2)]


def save_points(pathname: str, points: Sequence[Sequence[float]]) -> None:
    """Write 2-D points, tab separated, one per line."""
    _save(pathname, points, "\t")


def load_points3(pathname: str) -> list[tuple[float, float, float]]:
    """Load 3-D points; raises ValueError if the file is malformed."""
    return [(x, y, z) for x, y, z in _load(pathname, 3)]


def save_points3(pathname: str, points: Sequence[Sequence[float]]) -> None:
    """Write 3-D points, space separated, one per line."""
    _save(pathname, points, " ")


def vectorise_points(points: Iterable[Sequence[float]]) -> np.ndarray:
    """Stack points into a (2n, 1) column: all x coordinates, then all y."""
    pairs = [(float(p[0]), float(p[1])) for p in points]
    xs = [x for x, _ in pairs]
    ys = [y for _, y in pairs]
    return np.array(xs + ys, dtype=np.float64).reshape(-1, 1)