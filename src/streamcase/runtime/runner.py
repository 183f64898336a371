"""Drive closed pipelines and sources.

- run: execute a pipeline closed at both ends and return its result
- iterate: lazily pull a source's emissions as a Python iterator
- collect: run a source to a list
"""

from __future__ import annotations

import time
from collections.abc import Generator, Iterator
from typing import Any, TypeVar

from streamcase.foundation.core import ClosedInput, Stage
from streamcase.foundation.errors import ProtocolError
from streamcase.runtime.observability import get_logger

O = TypeVar("O")  # noqa: E741
R = TypeVar("R")


def run(pipeline: Stage[Any, Any, R]) -> R:
    """Run a source-to-sink pipeline to completion and return the sink's result.

    Raises:
        ProtocolError: If the stage still has an open input or output end,
            or emits an item despite being declared closed.

    Example:
        >>> run(replicating(3, 2) | summing())
        6
    """
    if pipeline.receives:
        raise ProtocolError.create(pipeline.name, "cannot run a stage with an open input; connect a source first")
    if pipeline.emits:
        raise ProtocolError.create(pipeline.name, "cannot run a stage with an open output; connect a sink or use iterate()")

    log = get_logger("streamcase.runner").bind_stage(pipeline.name, pipeline.kind)
    log.debug("pipeline started")
    start = time.perf_counter()
    gen = pipeline.run(ClosedInput(pipeline.name))
    try:
        item = next(gen)
    except StopIteration as stop:
        log.debug("pipeline finished", duration_ms=_elapsed(start))
        return stop.value
    except Exception as e:
        log.error("pipeline failed", duration_ms=_elapsed(start), error=str(e), error_type=type(e).__name__)
        raise
    gen.close()
    raise ProtocolError.create(pipeline.name, f"closed pipeline emitted an item: {item!r}")


def iterate(source: Stage[Any, O, Any]) -> Iterator[O]:
    """Yield a source's emissions on demand, discarding its return value.

    Closing the returned iterator (or abandoning it) closes the whole chain.
    """
    if source.receives:
        raise ProtocolError.create(source.name, "cannot iterate a stage with an open input; connect a source first")
    if not source.emits:
        raise ProtocolError.create(source.name, "cannot iterate a stage that emits nothing; use run() for its result")
    return _drain(source)


def _drain(source: Stage[Any, O, Any]) -> Generator[O, None, None]:
    yield from source.run(ClosedInput(source.name))


def collect(source: Stage[Any, O, Any]) -> list[O]:
    """Run a finite source and return everything it emitted, in order."""
    return list(iterate(source))


def _elapsed(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)
