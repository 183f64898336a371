"""Protocol sugar shared by the combinators.

- receive_forever: run a handler per item until upstream is done
- receive_one: peel one item and continue, or forward upstream's result
- identity: pass-through pipe
- elements: source over an in-memory collection
- folding: generic reducing sink
"""

from __future__ import annotations

from collections.abc import Callable, Generator, Iterable
from typing import Any, TypeVar

from .signal import Done, Item
from .stage import Receiver, Stage, describe

I = TypeVar("I")  # noqa: E741
O = TypeVar("O")  # noqa: E741
R = TypeVar("R")
A = TypeVar("A")


def receive_forever(upstream: Receiver[I], handler: Callable[[I], Iterable[O]]) -> Generator[O, None, Any]:
    """Hand every received item to ``handler`` and emit what it produces.

    Returns upstream's return value once upstream is done; the handler is
    never invoked for the termination signal.
    """
    while True:
        match upstream.receive():
            case Item(value):
                yield from handler(value)
            case Done(result):
                return result


def receive_one(
    upstream: Receiver[I],
    handler: Callable[[I], Generator[O, None, R]],
) -> Generator[O, None, R | Any]:
    """Receive once; on an item continue with ``handler(item)``, on done forward upstream's result."""
    match upstream.receive():
        case Item(value):
            return (yield from handler(value))
        case Done(result):
            return result


def _single(value: O) -> tuple[O]:
    return (value,)


def identity() -> Stage[I, I, Any]:
    """Forward every item; terminate with upstream's return value."""
    return Stage.pipe(lambda up: receive_forever(up, _single), name="identity")


def elements(collection: Iterable[O]) -> Stage[Any, O, None]:
    """Emit every element of ``collection`` in iteration order, then return None.

    A one-shot iterator is consumed by the first run; collections can be
    re-run.
    """
    def body(_: Receiver[Any]) -> Generator[O, None, None]:
        yield from collection

    return Stage.source(body, name=f"elements({type(collection).__name__})")


def folding(combine: Callable[[I, A], A], seed: A) -> Stage[I, Any, A]:
    """Reduce every item with ``acc = combine(item, acc)``; return the final ``acc``."""
    def consume(upstream: Receiver[I]) -> A:
        acc = seed
        while True:
            match upstream.receive():
                case Item(value):
                    acc = combine(value, acc)
                case Done():
                    return acc

    return Stage.sink(consume, name=f"folding({describe(combine)})")
