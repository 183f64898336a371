"""Streamcase - composable, pull-based stream transducers.

Sources produce items, pipes transform them, sinks reduce them to a value.
Stages are connected with ``|`` and nothing runs until a closed pipeline is
run: each stage pulls from its upstream only when it needs another item.

Quick Start:
    >>> from streamcase import run, collect, elements, chunking, consuming
    >>>
    >>> run(elements([1, 2, 3, 4, 5]) | chunking(2) | consuming())
    [[1, 2], [3, 4], [5]]

Infinite sources are fine as long as something downstream stops pulling:
    >>> from streamcase import iterating, taking, summing
    >>> run(iterating(lambda x: x * 2, 1) | taking(5) | summing())
    31

Writing a custom pipe:
    >>> from streamcase import Stage, Item, Done
    >>>
    >>> def pairs(up):
    ...     while True:
    ...         match up.receive():
    ...             case Item(x): yield (x, x)
    ...             case Done(r): return r
    >>> collect(elements("ab") | Stage.pipe(pairs, name="pairs"))
    [('a', 'a'), ('b', 'b')]

Files and consoles:
    >>> from streamcase.io import file_lines, console_sink
    >>> # file_lines emits Ok(line) items, or a single Err(StageError)
"""

from __future__ import annotations

__version__ = "0.1.0"

# Protocol
from .foundation.core import (
    ClosedInput,
    Done,
    Item,
    Link,
    Receiver,
    Signal,
    Stage,
    StageKind,
    elements,
    folding,
    fuse,
    identity,
    receive_forever,
    receive_one,
)

# Errors
from .foundation.errors import (
    ConfigurationError,
    Err,
    ErrorCode,
    Ok,
    ProtocolError,
    Result,
    StageError,
    StreamException,
    classify_exception,
)

# Configuration
from .foundation.config import (
    IOSettings,
    LoggingSettings,
    PipelineSettings,
    StreamcaseSettings,
    clear_settings_cache,
    get_settings,
)

# Combinators
from .combinators import (
    chunking,
    concatting,
    consuming,
    deduplicating,
    discard,
    dropping,
    dropping_while,
    filtering,
    filtering_just,
    grouping,
    grouping_by,
    iterating,
    mapping,
    mapping_m,
    multiplying,
    repeating,
    replicating,
    scanning,
    splitting_by,
    summing,
    taking,
    taking_while,
    tracing,
    unfolding,
)

# Running
from .runtime.runner import collect, iterate, run

# Observability
from .runtime.observability import configure_from_settings, configure_logging, get_logger, log_context

__all__ = [
    "__version__",
    # Protocol
    "Stage", "StageKind", "Receiver", "Link", "ClosedInput", "Signal", "Item", "Done",
    "fuse", "receive_forever", "receive_one", "identity", "elements", "folding",
    # Errors
    "ErrorCode", "StageError", "StreamException", "ConfigurationError", "ProtocolError",
    "classify_exception", "Result", "Ok", "Err",
    # Configuration
    "StreamcaseSettings", "LoggingSettings", "PipelineSettings", "IOSettings",
    "get_settings", "clear_settings_cache",
    # Sources
    "iterating", "unfolding", "replicating",
    # Pipes
    "mapping", "mapping_m", "concatting", "filtering", "filtering_just",
    "taking", "dropping", "taking_while", "dropping_while", "deduplicating",
    "repeating", "tracing", "grouping_by", "grouping", "chunking",
    "splitting_by", "scanning",
    # Sinks
    "discard", "summing", "multiplying", "consuming",
    # Running
    "run", "iterate", "collect",
    # Observability
    "configure_logging", "configure_from_settings", "get_logger", "log_context",
]
