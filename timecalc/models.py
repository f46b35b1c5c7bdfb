"""Data models for timecalc.

Result, the literal/token enums and the token variants: the typed structures
that flow through literal → formatter → bridge → session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Generic, Optional, TypeVar, Union

if TYPE_CHECKING:
    from timecalc.literal import Literal

T = TypeVar("T")
E = TypeVar("E")


class Sign(str, Enum):
    """Sign of a literal."""

    POSITIVE = "+"
    NEGATIVE = "-"


class ValueType(str, Enum):
    """Whether a literal is a time duration or a plain number."""

    TIME = "time"
    NUMBER = "number"


class Phase(str, Enum):
    """Which digit buffer a literal is currently appending to."""

    WHOLE = "whole"
    FRACTION = "fraction"


class Paren(str, Enum):
    """Parenthesis kind."""

    OPEN = "("
    CLOSE = ")"


class StandardStream(str, Enum):
    """Evaluator output streams."""

    STDOUT = "stdout"
    STDERR = "stderr"


_MISSING = object()


class Result(Generic[T, E]):
    """Either a success holding a value or a failure holding an error.

    Build one with ``Result.success(value)`` or ``Result.failure(error)``.
    Passing both payloads, or neither, raises ValueError. Instances are
    immutable.
    """

    __slots__ = ("_value", "_error")

    def __init__(self, value: object = _MISSING, error: object = _MISSING) -> None:
        if (value is _MISSING) == (error is _MISSING):
            raise ValueError("Result needs exactly one of value or error")
        if value is None or error is None:
            raise ValueError("Result payload must not be None")
        object.__setattr__(self, "_value", value)
        object.__setattr__(self, "_error", error)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("Result is immutable")

    @classmethod
    def success(cls, value: T) -> Result[T, E]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: E) -> Result[T, E]:
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        return self._value is not _MISSING

    @property
    def is_failure(self) -> bool:
        return self._error is not _MISSING

    @property
    def value(self) -> Optional[T]:
        """The success value, or None for a failure."""
        return None if self._value is _MISSING else self._value

    @property
    def error(self) -> Optional[E]:
        """The failure error, or None for a success."""
        return None if self._error is _MISSING else self._error

    def unwrap(self) -> T:
        """Return the value, raising ValueError if this is a failure."""
        if self._value is _MISSING:
            raise ValueError(f"unwrap() on failure: {self._error}")
        return self._value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        return self._value == other._value and self._error == other._error

    def __hash__(self) -> int:
        return hash((self.is_success, self.value, self.error))

    def __repr__(self) -> str:
        if self.is_success:
            return f"Success[{self._value}]"
        return f"Failure[{self._error}]"


# --- Tokens ---


@dataclass
class Value:
    """A value token. Owns the literal it renders."""

    literal: Literal = field(repr=False)
    text: str = ""

    def refresh(self) -> None:
        self.text = self.literal.render()


@dataclass(frozen=True)
class Operator:
    """An arithmetic operator token."""

    char: str

    @property
    def text(self) -> str:
        return self.char


@dataclass(frozen=True)
class Parenthesis:
    """An opening or closing parenthesis token."""

    kind: Paren

    @property
    def text(self) -> str:
        return self.kind.value


Token = Union[Value, Operator, Parenthesis]


def is_open(token: Optional[Token]) -> bool:
    return isinstance(token, Parenthesis) and token.kind is Paren.OPEN


def is_close(token: Optional[Token]) -> bool:
    return isinstance(token, Parenthesis) and token.kind is Paren.CLOSE
