"""Sink combinators: terminal consumers reducing a stream to one value."""

from __future__ import annotations

from typing import Any, TypeVar

from streamcase.foundation.core import Done, Item, Receiver, Stage, folding

T = TypeVar("T")


def discard() -> Stage[Any, Any, Any]:
    """Consume and ignore every item; return upstream's return value."""
    def consume(upstream: Receiver[Any]) -> Any:
        while True:
            if isinstance(signal := upstream.receive(), Done):
                return signal.result

    return Stage.sink(consume, name="discard")


def summing() -> Stage[T, Any, T]:
    """Fold with ``+`` starting from 0."""
    return folding(_add, 0).named("summing")


def multiplying() -> Stage[T, Any, T]:
    """Fold with ``*`` starting from 1."""
    return folding(_mul, 1).named("multiplying")


def consuming() -> Stage[T, Any, list[T]]:
    """Accumulate every item, in arrival order, and return the list."""
    def consume(upstream: Receiver[T]) -> list[T]:
        items: list[T] = []
        while True:
            match upstream.receive():
                case Item(value):
                    items.append(value)
                case Done():
                    return items

    return Stage.sink(consume, name="consuming")


def _add(item: Any, acc: Any) -> Any:
    return acc + item


def _mul(item: Any, acc: Any) -> Any:
    return acc * item
