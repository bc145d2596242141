"""Result type for explicit error handling.

Operations that can fail for expected reasons (a malformed version string,
a missing changelog, a git command exiting non-zero) return ``Ok(value)`` or
``Err(error)`` instead of raising. Callers branch with ``isinstance`` or
structural pattern matching:

    match resolve("minor", "1.2.3"):
        case Ok(version):
            print(f"releasing {version}")
        case Err(error):
            print(f"cannot release: {error.message}")
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

__all__ = ["Ok", "Err", "Result"]


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Successful result carrying a value."""

    value: T

    def map[U](self, f: Callable[[T], U]) -> Ok[U]:
        """Apply ``f`` to the contained value."""
        return Ok(f(self.value))

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failed result carrying an error payload."""

    error: E

    def map(self, f: Callable[..., object]) -> Err[E]:
        """Return self unchanged; there is no value to transform."""
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]
