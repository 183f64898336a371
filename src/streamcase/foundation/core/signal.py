"""Receive outcomes: the next upstream item, or upstream's termination.

Every receive resolves to exactly one of two variants. ``Done`` is data,
not an exception, so a stage handles it at the same place it handles items:

    >>> match upstream.receive():
    ...     case Item(value):
    ...         ...  # next item
    ...     case Done(result):
    ...         ...  # upstream finished with `result`
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

T = TypeVar("T")
R = TypeVar("R")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Item(Generic[T]):
    """Upstream emitted ``value``."""

    value: T

    def is_item(self) -> bool:
        return True

    def is_done(self) -> bool:
        return False

    def match(self, *, item: Callable[[T], U], done: Callable[[object], U]) -> U:
        return item(self.value)


@dataclass(frozen=True, slots=True)
class Done(Generic[R]):
    """Upstream terminated with return value ``result``."""

    result: R

    def is_item(self) -> bool:
        return False

    def is_done(self) -> bool:
        return True

    def match(self, *, item: Callable[[object], U], done: Callable[[R], U]) -> U:
        return done(self.result)


# Outcome of one receive
Signal = Union[Item[T], Done[R]]
