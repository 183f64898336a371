"""Source combinators: zero-input generators of a sequence."""

from __future__ import annotations

from collections.abc import Callable, Generator
from typing import Any, TypeVar

from streamcase.foundation.core import Receiver, Stage, describe

from ._validate import require_non_negative

T = TypeVar("T")
S = TypeVar("S")


def iterating(f: Callable[[T], T], seed: T) -> Stage[Any, T, Any]:
    """Emit ``seed``, ``f(seed)``, ``f(f(seed))``, ... forever.

    Never terminates on its own; bound it downstream (e.g. with ``taking``).
    ``f`` is applied lazily, only after the previous value was taken.
    """
    def body(_: Receiver[Any]) -> Generator[T, None, Any]:
        value = seed
        while True:
            yield value
            value = f(value)

    return Stage.source(body, name=f"iterating({describe(f)})")


def unfolding(f: Callable[[S], tuple[T, S] | None], seed: S) -> Stage[Any, T, None]:
    """Grow a sequence from ``seed``: ``f`` returns ``(item, next_seed)`` or None to stop.

    Example:
        >>> countdown = unfolding(lambda n: (n, n - 1) if n > 0 else None, 3)
        >>> collect(countdown)
        [3, 2, 1]
    """
    def body(_: Receiver[Any]) -> Generator[T, None, None]:
        state = seed
        while (step := f(state)) is not None:
            item, state = step
            yield item

    return Stage.source(body, name=f"unfolding({describe(f)})")


def replicating(n: int, x: T) -> Stage[Any, T, None]:
    """Emit ``x`` exactly ``n`` times, then terminate."""
    require_non_negative("replicating", "n", n)

    def body(_: Receiver[Any]) -> Generator[T, None, None]:
        for _ in range(n):
            yield x

    return Stage.source(body, name=f"replicating({n}, {x!r})")
