"""Result wrapper used by the public API instead of raising."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class Ok[T]:
    """Successful outcome carrying a value."""

    value: T

    @property
    def ok(self) -> Literal[True]:
        """Always true."""
        return True


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying the error that caused it."""

    error: Exception

    @property
    def ok(self) -> Literal[False]:
        """Always false."""
        return False


type Result[T] = Ok[T] | Err
