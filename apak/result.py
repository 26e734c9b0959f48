from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from .errors import ApakError


T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of an internal parse/decode step.

    Internal helpers hand these back instead of raising; the public
    entry points call ``unwrap()`` so errors surface in one place.
    """

    value: Optional[T] = None
    error: Optional[ApakError] = None

    def __post_init__(self):
        if self.error is not None and self.value is not None:
            raise ValueError("A failed result cannot carry a value")

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, error: ApakError) -> "Result[T]":
        return cls(error=error)

    @property
    def failed(self) -> bool:
        return self.error is not None

    def map(self, fn: Callable[[T], U]) -> "Result[U]":
        if self.error is not None:
            return Result(error=self.error)
        return Result(value=fn(self.value))  # type: ignore[arg-type]

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
