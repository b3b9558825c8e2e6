"""Result type for explicit error handling.

Every fallible step of the release pipeline returns either ``Ok(value)`` or
``Err(error)``. Callers branch on the variant instead of catching
exceptions, which keeps fatal and recoverable failures visible in the
signatures:

    match parse_version("1.2.3"):
        case Ok(version):
            print(version.build_code)
        case Err(error):
            print(error.reason)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying ``value``."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed outcome carrying ``error``."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Ok[T] | Err[E]
