"""Pipe combinators: stateful, termination-aware transducers.

Every pipe pulls from upstream only when it needs one more item to decide
its next emission or its own termination, and, unless documented otherwise,
terminates with upstream's return value. Buffered state is flushed or
dropped exactly once, when upstream is done.

Flush rules differ on purpose:
    grouping_by   final batch emitted only if non-empty
    chunking      final batch always emitted, even when empty
    splitting_by  final segment always emitted, even when empty
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Generator, Iterable
from typing import Any, TypeVar

from streamcase.foundation.core import Done, Item, Receiver, Stage, describe, receive_forever

from ._validate import require_non_negative, require_positive

T = TypeVar("T")
U = TypeVar("U")
A = TypeVar("A")


# ─────────────────────────────────────────────────────────────────────────────
# Item-by-item
# ─────────────────────────────────────────────────────────────────────────────


def mapping(f: Callable[[T], U]) -> Stage[T, U, Any]:
    """Emit ``f(item)`` for every received item."""
    return Stage.pipe(lambda up: receive_forever(up, lambda x: (f(x),)), name=f"mapping({describe(f)})")


def mapping_m(action: Callable[[T], U]) -> Stage[T, U, Any]:
    """Emit the result of running an effectful ``action`` on every item.

    The action runs exactly once per item, in arrival order, and only when
    downstream asks for the next value; an item that is never demanded is
    never acted on.
    """
    def body(upstream: Receiver[T]) -> Generator[U, None, Any]:
        while True:
            match upstream.receive():
                case Item(value):
                    yield action(value)
                case Done(result):
                    return result

    return Stage.pipe(body, name=f"mapping_m({describe(action)})")


def concatting() -> Stage[Iterable[T], T, Any]:
    """Flatten each received iterable into its elements, in iteration order."""
    return Stage.pipe(lambda up: receive_forever(up, iter), name="concatting")


def filtering(predicate: Callable[[T], bool]) -> Stage[T, T, Any]:
    """Pass through only items for which ``predicate`` holds."""
    def keep(value: T) -> tuple[T, ...]:
        return (value,) if predicate(value) else ()

    return Stage.pipe(lambda up: receive_forever(up, keep), name=f"filtering({describe(predicate)})")


def filtering_just() -> Stage[T | None, T, Any]:
    """Pass through present values; drop ``None``."""
    return filtering(_is_present).named("filtering_just")


def tracing(effect: Callable[[T], object]) -> Stage[T, T, Any]:
    """Call ``effect(item)`` for its side effect, then emit ``item`` unchanged."""
    def observe(value: T) -> tuple[T]:
        effect(value)
        return (value,)

    return Stage.pipe(lambda up: receive_forever(up, observe), name=f"tracing({describe(effect)})")


def repeating(n: int) -> Stage[T, T, Any]:
    """Emit each item ``n`` times in a row before asking for the next one."""
    require_non_negative("repeating", "n", n)
    return Stage.pipe(lambda up: receive_forever(up, lambda x: (x,) * n), name=f"repeating({n})")


def deduplicating() -> Stage[T, T, Any]:
    """Drop items equal to the previously emitted item (like ``uniq``).

    Only consecutive duplicates are removed; the first item is always emitted.
    """
    def body(upstream: Receiver[T]) -> Generator[T, None, Any]:
        emitted_any = False
        last: Any = None
        while True:
            match upstream.receive():
                case Item(value):
                    if not emitted_any or value != last:
                        emitted_any, last = True, value
                        yield value
                case Done(result):
                    return result

    return Stage.pipe(body, name="deduplicating")


# ─────────────────────────────────────────────────────────────────────────────
# Bounded prefixes
# ─────────────────────────────────────────────────────────────────────────────


def taking(n: int) -> Stage[T, T, Any]:
    """Emit at most ``n`` items.

    After the n-th item the stage terminates with None without receiving
    again, abandoning the rest of upstream. If upstream runs out first, its
    return value is forwarded.
    """
    require_non_negative("taking", "n", n)

    def body(upstream: Receiver[T]) -> Generator[T, None, Any]:
        for _ in range(n):
            match upstream.receive():
                case Item(value):
                    yield value
                case Done(result):
                    return result
        return None

    return Stage.pipe(body, name=f"taking({n})")


def dropping(n: int) -> Stage[T, T, Any]:
    """Discard the first ``n`` items, then pass everything through."""
    require_non_negative("dropping", "n", n)

    def body(upstream: Receiver[T]) -> Generator[T, None, Any]:
        for _ in range(n):
            if isinstance(signal := upstream.receive(), Done):
                return signal.result
        return (yield from receive_forever(upstream, _single))

    return Stage.pipe(body, name=f"dropping({n})")


def taking_while(predicate: Callable[[T], bool]) -> Stage[T, T, Any]:
    """Emit items while ``predicate`` holds.

    The first failing item is consumed and discarded, and the stage
    terminates with None. If upstream runs out first, its return value is
    forwarded.
    """
    def body(upstream: Receiver[T]) -> Generator[T, None, Any]:
        while True:
            match upstream.receive():
                case Item(value):
                    if not predicate(value):
                        return None
                    yield value
                case Done(result):
                    return result

    return Stage.pipe(body, name=f"taking_while({describe(predicate)})")


def dropping_while(predicate: Callable[[T], bool]) -> Stage[T, T, Any]:
    """Discard leading items while ``predicate`` holds; emit the first failing item and everything after."""
    def body(upstream: Receiver[T]) -> Generator[T, None, Any]:
        while True:
            match upstream.receive():
                case Item(value):
                    if not predicate(value):
                        yield value
                        break
                case Done(result):
                    return result
        return (yield from receive_forever(upstream, _single))

    return Stage.pipe(body, name=f"dropping_while({describe(predicate)})")


# ─────────────────────────────────────────────────────────────────────────────
# Batching
# ─────────────────────────────────────────────────────────────────────────────


def grouping_by(same: Callable[[T, T], bool]) -> Stage[T, list[T], Any]:
    """Batch consecutive items that are ``same`` as the batch's first member.

    ``same(first, item)`` is asked for each new item; when it fails the
    pending batch is emitted and the item starts the next one. At the end
    the pending batch is emitted only if it is non-empty, so an empty
    upstream produces no batches.

    Example:
        >>> collect(elements([1, 1, 2, 3, 3]) | grouping())
        [[1, 1], [2], [3, 3]]
    """
    def body(upstream: Receiver[T]) -> Generator[list[T], None, Any]:
        batch: list[T] = []
        while True:
            match upstream.receive():
                case Item(value):
                    if batch and not same(batch[0], value):
                        yield batch
                        batch = []
                    batch.append(value)
                case Done(result):
                    if batch:
                        yield batch
                    return result

    return Stage.pipe(body, name=f"grouping_by({describe(same)})")


def grouping() -> Stage[T, list[T], Any]:
    """Batch runs of equal consecutive items."""
    return grouping_by(operator.eq).named("grouping")


def chunking(size: int) -> Stage[T, list[T], Any]:
    """Emit consecutive batches of exactly ``size`` items.

    When upstream finishes, the batch in progress is always emitted, even if
    it is empty: ``[]`` becomes ``[[]]`` and six items in threes end with a
    trailing ``[]``.

    Raises:
        ConfigurationError: If ``size`` is below 1.
    """
    require_positive("chunking", "size", size)

    def body(upstream: Receiver[T]) -> Generator[list[T], None, Any]:
        while True:
            batch: list[T] = []
            while len(batch) < size:
                match upstream.receive():
                    case Item(value):
                        batch.append(value)
                    case Done(result):
                        yield batch
                        return result
            yield batch

    return Stage.pipe(body, name=f"chunking({size})")


def splitting_by(is_separator: Callable[[T], bool]) -> Stage[T, list[T], Any]:
    """Split the stream into segments at separator items.

    Separators are consumed and dropped; each one closes the current
    segment, which is emitted even when empty. The last segment is always
    emitted when upstream finishes.

    Example:
        >>> collect(elements("a b  c") | splitting_by(str.isspace) | mapping("".join))
        ['a', 'b', '', 'c']
    """
    def body(upstream: Receiver[T]) -> Generator[list[T], None, Any]:
        segment: list[T] = []
        while True:
            match upstream.receive():
                case Item(value):
                    if is_separator(value):
                        yield segment
                        segment = []
                    else:
                        segment.append(value)
                case Done(result):
                    yield segment
                    return result

    return Stage.pipe(body, name=f"splitting_by({describe(is_separator)})")


# ─────────────────────────────────────────────────────────────────────────────
# Running state
# ─────────────────────────────────────────────────────────────────────────────


def scanning(f: Callable[[T, A], A], initial: A) -> Stage[T, A, Any]:
    """Emit running accumulations: ``initial`` first, then ``acc = f(item, acc)`` per item.

    Emits one more value than it receives; ``initial`` goes out before
    anything is received.
    """
    def body(upstream: Receiver[T]) -> Generator[A, None, Any]:
        acc = initial
        yield acc
        while True:
            match upstream.receive():
                case Item(value):
                    acc = f(value, acc)
                    yield acc
                case Done(result):
                    return result

    return Stage.pipe(body, name=f"scanning({describe(f)})")


def _single(value: T) -> tuple[T]:
    return (value,)


def _is_present(value: object) -> bool:
    return value is not None
