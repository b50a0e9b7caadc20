"""Positional command-line arguments that are filled in one at a time."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Generic, TypeVar

T = TypeVar("T")

_NOT_ASSIGNED = (
    "Cannot obtain value of expected command line argument "
    "as no value has been assigned."
)


class CommandLineArgument(Generic[T]):
    """A slot for one expected argument, converted from text when assigned.

    Strings handed to :meth:`assign` go through ``convert``; any other value
    is stored as it is.
    """

    def __init__(self, convert: Callable[[str], T] = str) -> None:  # type: ignore[assignment]
        self._convert = convert
        self._value: T | None = None
        self._assigned = False

    @property
    def is_assigned(self) -> bool:
        """True once a value has been assigned."""
        return self._assigned

    def assign(self, value: Any) -> CommandLineArgument[T]:
        """Store ``value``, converting it first if it is a string."""
        self._value = self._convert(value) if isinstance(value, str) else value
        self._assigned = True
        return self

    def get(self) -> T:
        """The assigned value; raises RuntimeError if there is none."""
        if not self._assigned:
            raise RuntimeError(_NOT_ASSIGNED)
        return self._value  # type: ignore[return-value]

    def __repr__(self) -> str:
        if self._assigned:
            return f"CommandLineArgument({self._value!r})"
        return "CommandLineArgument(<unassigned>)"


def get_argument(
    argv: Sequence[str], index: int, convert: Callable[[str], Any] = str
) -> tuple[Any, int]:
    """Return the argument following ``argv[index]`` and its index.

    Raises RuntimeError when ``argv[index]`` is the last element.
    """
    following = index + 1
    if following >= len(argv):
        raise RuntimeError(
            f"Not enough arguments to process argument: {argv[index]}"
        )
    return convert(argv[following]), following


def have_argument_p(argument: CommandLineArgument[Any]) -> bool:
    """True if the argument has been assigned."""
    return argument.is_assigned


def have_arguments_p(*args: CommandLineArgument[Any]) -> bool:
    """True if every given argument has been assigned."""
    if not args:
        raise TypeError("have_arguments_p needs at least one argument")
    return all(have_argument_p(argument) for argument in args)


def assign_argument(value: str, *args: CommandLineArgument[Any]) -> bool:
    """Assign ``value`` to the first unassigned argument.

    Returns False if every argument already holds a value.
    """
    if not args:
        raise TypeError("assign_argument needs at least one argument")
    for argument in args:
        if not have_argument_p(argument):
            argument.assign(value)
            return True
    return False