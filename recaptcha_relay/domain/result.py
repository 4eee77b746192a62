from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from .errors import RelayError

__all__ = ["Ok", "Err", "Result"]

T = TypeVar("T")
E = TypeVar("E", bound=RelayError)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err[RelayError]]
