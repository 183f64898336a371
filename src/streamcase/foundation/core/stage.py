"""Stages and the connector that wires them together.

A stage body is a generator function taking a ``Receiver``:

- ``upstream.receive()`` suspends until upstream emits (``Item``) or
  terminates (``Done``)
- ``yield item`` emits downstream and resumes once downstream has taken it
- ``return value`` terminates the stage with its return value

Sources, pipes and sinks are all ``Stage`` values; ``StageKind`` records
which endpoints are open. ``up | down`` fuses two stages into one.

Example:
    >>> def doubled(up: Receiver[int]) -> Generator[int, None, object]:
    ...     while True:
    ...         match up.receive():
    ...             case Item(x): yield x * 2
    ...             case Done(r): return r
    >>> pipe = Stage.pipe(doubled, name="doubled")
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from enum import StrEnum
from typing import Any, Generic, Protocol, TypeVar

from streamcase.foundation.config import get_settings
from streamcase.foundation.errors import ProtocolError
from streamcase.runtime.observability import get_logger

from .signal import Done, Item, Signal

I = TypeVar("I")  # noqa: E741 - received item type
O = TypeVar("O")  # noqa: E741 - emitted item type
R = TypeVar("R")
M = TypeVar("M")
S = TypeVar("S")

I_co = TypeVar("I_co", covariant=True)


class Receiver(Protocol[I_co]):
    """Upstream end of a link, as seen by the stage that pulls from it."""

    def receive(self) -> Signal[I_co, Any]: ...


Body = Callable[[Receiver[I]], Generator[O, None, R]]


class StageKind(StrEnum):
    """Which endpoints of a stage are open."""
    SOURCE = "source"      # emits, never receives
    PIPE = "pipe"          # receives and emits
    SINK = "sink"          # receives, never emits
    PIPELINE = "pipeline"  # closed at both ends; runnable

    @classmethod
    def of(cls, *, receives: bool, emits: bool) -> StageKind:
        if receives:
            return cls.PIPE if emits else cls.SINK
        return cls.SOURCE if emits else cls.PIPELINE

    @property
    def receives(self) -> bool:
        return self in (StageKind.PIPE, StageKind.SINK)

    @property
    def emits(self) -> bool:
        return self in (StageKind.SOURCE, StageKind.PIPE)


class Stage(Generic[I, O, R]):
    """A unit of a pipeline: receives ``I``, emits ``O``, returns ``R`` once.

    A Stage is an immutable description. Every ``run()`` starts a fresh
    generator, so per-run state (counters, buffers) never leaks between runs.
    """

    __slots__ = ("_body", "name", "kind")

    def __init__(self, body: Body[I, O, R], *, name: str, kind: StageKind = StageKind.PIPE) -> None:
        self._body = body
        self.name = name
        self.kind = kind

    @classmethod
    def source(cls, body: Body[Any, O, R], *, name: str) -> Stage[Any, O, R]:
        return cls(body, name=name, kind=StageKind.SOURCE)

    @classmethod
    def pipe(cls, body: Body[I, O, R], *, name: str) -> Stage[I, O, R]:
        return cls(body, name=name, kind=StageKind.PIPE)

    @classmethod
    def sink(cls, consume: Callable[[Receiver[I]], R], *, name: str) -> Stage[I, Any, R]:
        """Build a sink from a plain function that pulls until it decides to return."""
        return cls(lambda up: _consuming_body(consume, up), name=name, kind=StageKind.SINK)

    @property
    def receives(self) -> bool:
        return self.kind.receives

    @property
    def emits(self) -> bool:
        return self.kind.emits

    def run(self, upstream: Receiver[I]) -> Generator[O, None, R]:
        """Start a fresh run of this stage pulling from ``upstream``."""
        return self._body(upstream)

    def named(self, name: str) -> Stage[I, O, R]:
        return Stage(self._body, name=name, kind=self.kind)

    def map_result(self, f: Callable[[R], S]) -> Stage[I, O, S]:
        """Transform the return value, leaving emissions untouched.

        Example:
            >>> counted = consuming().map_result(len)
        """
        def body(upstream: Receiver[I]) -> Generator[O, None, S]:
            return f((yield from self.run(upstream)))

        return Stage(body, name=f"{self.name}.map_result({describe(f)})", kind=self.kind)

    def __or__(self, other: Stage[O, M, S]) -> Stage[I, M, S]:
        return fuse(self, other)

    def __repr__(self) -> str:
        return f"<{self.kind} {self.name}>"


def _consuming_body(consume: Callable[[Receiver[I]], R], upstream: Receiver[I]) -> Generator[Any, None, R]:
    return consume(upstream)
    yield  # unreachable; marks this function as a generator


# ─────────────────────────────────────────────────────────────────────────────
# Links
# ─────────────────────────────────────────────────────────────────────────────


class Link(Generic[I]):
    """Pull end of a fused connection, wrapping the upstream stage's generator.

    Advances upstream only when receive() is called. After upstream has
    terminated (or the link was closed) any further receive is a protocol
    violation.
    """

    __slots__ = ("_gen", "_name", "_finished")

    def __init__(self, gen: Generator[I, None, Any], name: str) -> None:
        self._gen = gen
        self._name = name
        self._finished = False

    @property
    def finished(self) -> bool:
        return self._finished

    def receive(self) -> Signal[I, Any]:
        if self._finished:
            raise ProtocolError.create(self._name, "receive on a link whose upstream already terminated")
        try:
            value = next(self._gen)
        except StopIteration as stop:
            self._finished = True
            return Done(stop.value)
        except BaseException:
            self._finished = True
            raise
        return Item(value)

    def close(self) -> bool:
        """Close an upstream that has not terminated. Returns True if it was abandoned."""
        if self._finished:
            return False
        self._finished = True
        self._gen.close()
        return True


class ClosedInput:
    """Receiver handed to stages with no upstream. Receiving from it is an error."""

    __slots__ = ("_name",)

    def __init__(self, name: str) -> None:
        self._name = name

    def receive(self) -> Signal[Any, Any]:
        raise ProtocolError.create(self._name, "stage has no upstream to receive from")


# ─────────────────────────────────────────────────────────────────────────────
# Connector
# ─────────────────────────────────────────────────────────────────────────────


def fuse(up: Stage[I, M, Any], down: Stage[M, O, R]) -> Stage[I, O, R]:
    """Connect ``up``'s emissions to ``down``'s receives.

    The composite runs ``down``; ``up`` advances only when ``down`` asks for
    an item. The composite returns ``down``'s return value. If ``down``
    terminates first, ``up`` is closed (its ``finally`` blocks run) unless
    ``PipelineSettings.close_abandoned`` is off, in which case it is left
    suspended.

    Raises:
        ProtocolError: If ``up`` never emits or ``down`` never receives.
    """
    if not up.emits:
        raise ProtocolError.create(up.name, f"cannot connect a {up.kind} to {down.name}: it emits nothing")
    if not down.receives:
        raise ProtocolError.create(down.name, f"cannot connect {up.name} to a {down.kind}: it receives nothing")

    def body(upstream: Receiver[I]) -> Generator[O, None, R]:
        settings = get_settings().pipeline
        link: Link[M] = Link(up.run(upstream), up.name)
        log = get_logger("streamcase.connector") if settings.log_stages else None
        if log:
            log.debug("stage started", stage=down.name, upstream=up.name)
        try:
            result = yield from down.run(link)
        finally:
            if settings.close_abandoned and link.close():
                get_logger("streamcase.connector").debug("upstream abandoned", stage=down.name, upstream=up.name)
        if log:
            log.debug("stage finished", stage=down.name, result_type=type(result).__name__)
        return result

    kind = StageKind.of(receives=up.receives, emits=down.emits)
    return Stage(body, name=f"{up.name} | {down.name}", kind=kind)


def describe(obj: object) -> str:
    """Short printable name for callables and values used in stage names."""
    name = getattr(obj, "__qualname__", None) or getattr(obj, "__name__", None)
    return name if isinstance(name, str) else repr(obj)
