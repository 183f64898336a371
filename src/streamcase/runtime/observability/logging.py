"""Structured logging for pipeline execution with context propagation.

- Every entry can carry the stage it concerns (name and kind)
- Console output for development, JSON Lines for aggregation
- Scoped context via ``log_context``

Quick Start:
    >>> from streamcase.runtime.observability import get_logger, configure_logging
    >>>
    >>> configure_logging(format="console", level="DEBUG")  # or "json"
    >>> log = get_logger("ingest").bind_stage("chunking(3)", "pipe")
    >>> log.debug("flushed batch", size=3)
    # => 10:30:45.123 [debug] <chunking(3)> flushed batch logger="ingest" size=3
"""

from __future__ import annotations

import logging
import sys
import time
import traceback
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol, TextIO, Union, runtime_checkable

import orjson

if TYPE_CHECKING:
    from types import TracebackType

    from streamcase.foundation.config import StreamcaseSettings

JsonPrimitive = Union[str, int, float, bool, None]
JsonValue = Union[JsonPrimitive, list[Any], dict[str, Any]]
JsonDict = dict[str, Any]

# Keys rendered outside the key=value tail by the console renderer
_STAGE_KEYS = ("stage", "kind")

_scope: ContextVar[JsonDict] = ContextVar("streamcase_log_scope", default={})


# ─────────────────────────────────────────────────────────────────────────────
# Entries & Logger
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class LogEntry:
    """One rendered event: when, how severe, what, and the merged context."""

    timestamp: float
    level: str
    event: str
    context: JsonDict

    @property
    def stage(self) -> str | None:
        return self.context.get("stage")

    @property
    def iso_time(self) -> str:
        return datetime.fromtimestamp(self.timestamp, tz=UTC).isoformat()

    @property
    def clock(self) -> str:
        """HH:MM:SS.mmm in UTC."""
        return datetime.fromtimestamp(self.timestamp, tz=UTC).strftime("%H:%M:%S.%f")[:-3]


@dataclass(slots=True)
class BoundLogger:
    """Logger carrying a fixed context. ``bind``/``unbind`` return new loggers; nothing mutates in place.

    Context precedence, lowest first: ``log_context`` scope, bound context,
    call-site keywords.
    """

    context: JsonDict = field(default_factory=dict)
    _renderer: LogRenderer | None = None
    _level: int = logging.DEBUG

    def _with(self, context: JsonDict) -> BoundLogger:
        return BoundLogger(context=context, _renderer=self._renderer, _level=self._level)

    def bind(self, **kw: JsonValue) -> BoundLogger:
        return self._with({**self.context, **kw})

    def bind_stage(self, name: str, kind: str, **kw: JsonValue) -> BoundLogger:
        """Attach the stage an entry concerns."""
        return self.bind(stage=name, kind=str(kind), **kw)

    def unbind(self, *keys: str) -> BoundLogger:
        return self._with({k: v for k, v in self.context.items() if k not in keys})

    def is_enabled_for(self, level: int) -> bool:
        return level >= self._level

    def log(self, level: int, event: str, **kw: JsonValue) -> None:
        if not self.is_enabled_for(level):
            return
        entry = LogEntry(time.time(), logging.getLevelName(level).lower(), event,
                         {**_scope.get(), **self.context, **kw})
        (self._renderer or _current_renderer()).render(entry)

    def debug(self, event: str, **kw: JsonValue) -> None:
        self.log(logging.DEBUG, event, **kw)

    def info(self, event: str, **kw: JsonValue) -> None:
        self.log(logging.INFO, event, **kw)

    def warning(self, event: str, **kw: JsonValue) -> None:
        self.log(logging.WARNING, event, **kw)

    def error(self, event: str, **kw: JsonValue) -> None:
        self.log(logging.ERROR, event, **kw)

    def exception(self, event: str, **kw: JsonValue) -> None:
        """Error entry with the active exception's traceback under ``exc_info``."""
        self.log(logging.ERROR, event, exc_info=traceback.format_exc(), **kw)


# ─────────────────────────────────────────────────────────────────────────────
# Renderers
# ─────────────────────────────────────────────────────────────────────────────


@runtime_checkable
class LogRenderer(Protocol):
    def render(self, entry: LogEntry) -> None: ...


@dataclass(slots=True)
class ConsoleRenderer:
    """One line per entry: ``clock [level] <stage> event key=value ...``.

    The stage name, when present, goes in angle brackets before the event.
    Long values are cut to ``max_value_len`` characters.
    """

    output: TextIO = field(default_factory=lambda: sys.stderr)
    colors: bool | None = None  # None = use colors only on a tty
    show_timestamp: bool = True
    max_value_len: int = 80

    def __post_init__(self) -> None:
        if self.colors is None:
            isatty = getattr(self.output, "isatty", None)
            self.colors = bool(isatty and isatty())

    def render(self, entry: LogEntry) -> None:
        paint = _paint if self.colors else _plain
        head: list[str] = []
        if self.show_timestamp:
            head.append(paint("dim", entry.clock))
        head.append(paint(_LEVEL_STYLE.get(entry.level, "dim"), f"[{entry.level}]"))
        if entry.stage is not None:
            head.append(paint("magenta", f"<{entry.stage}>"))
        head.append(paint("bold", entry.event))
        tail = [f"{paint('cyan', k)}={self._value(v, paint)}"
                for k, v in sorted(entry.context.items()) if k not in _STAGE_KEYS and k != "exc_info"]
        print(" ".join(head + tail), file=self.output)
        if trace := entry.context.get("exc_info"):
            print(paint("red", str(trace)), file=self.output)

    def _value(self, v: object, paint: Any) -> str:
        match v:
            case bool() | None:
                return paint("blue", str(v).lower() if v is not None else "null")
            case int() | float():
                return paint("blue", str(v))
            case str():
                return paint("yellow", f'"{_clip(v, self.max_value_len)}"')
            case list() | tuple() | dict():
                return paint("dim", f"<{type(v).__name__} of {len(v)}>")
            case _:
                return paint("white", _clip(repr(v), self.max_value_len))


@dataclass(slots=True)
class JsonRenderer:
    """JSON Lines; non-JSON values fall back to ``str``."""

    output: TextIO = field(default_factory=lambda: sys.stdout)

    def render(self, entry: LogEntry) -> None:
        record = {"timestamp": entry.iso_time, "level": entry.level, "event": entry.event, **entry.context}
        self.output.write(orjson.dumps(record, default=str,
                                       option=orjson.OPT_NON_STR_KEYS | orjson.OPT_APPEND_NEWLINE).decode())


@dataclass(slots=True)
class NoOpRenderer:
    def render(self, entry: LogEntry) -> None:
        pass


@dataclass(slots=True)
class MemoryRenderer:
    """Keeps entries in memory so tests can assert on what a pipeline logged."""

    entries: list[LogEntry] = field(default_factory=list)

    def render(self, entry: LogEntry) -> None:
        self.entries.append(entry)

    def events(self) -> list[str]:
        return [e.event for e in self.entries]

    def find(self, event: str) -> LogEntry | None:
        """First entry with this event name, or None."""
        return next((e for e in self.entries if e.event == event), None)

    def for_stage(self, stage: str) -> list[LogEntry]:
        return [e for e in self.entries if e.stage == stage]


# ─────────────────────────────────────────────────────────────────────────────
# Global Configuration
# ─────────────────────────────────────────────────────────────────────────────


_active_renderer: ContextVar[LogRenderer | None] = ContextVar("streamcase_log_renderer", default=None)
_active_level: ContextVar[int] = ContextVar("streamcase_log_level", default=logging.INFO)


def configure_logging(
    format: str = "console",  # noqa: A002 - matches LoggingSettings.format
    level: str = "INFO",
    *,
    output: TextIO | None = None,
    colors: bool | None = None,
    renderer: LogRenderer | None = None,
) -> LogRenderer:
    """Select the renderer and minimum level for loggers created afterwards.

    ``format`` is "console", "json" or "none"; an explicit ``renderer``
    takes precedence over it. Returns the renderer in use.
    """
    if renderer is None:
        match format:
            case "console":
                renderer = ConsoleRenderer(output=output or sys.stderr, colors=colors)
            case "json":
                renderer = JsonRenderer(output=output or sys.stdout)
            case "none":
                renderer = NoOpRenderer()
            case _:
                raise ValueError(f"Unknown format: {format!r}; expected 'console', 'json' or 'none'")
    _active_level.set(logging.getLevelNamesMapping().get(level.upper(), logging.INFO))
    _active_renderer.set(renderer)
    return renderer


def configure_from_settings(settings: StreamcaseSettings | None = None) -> LogRenderer:
    """Apply the logging section of ``settings`` (the global ones by default).

    The level is ``effective_log_level``, so ``STREAMCASE_DEBUG=true`` forces DEBUG.
    """
    if settings is None:
        from streamcase.foundation.config import get_settings
        settings = get_settings()
    section = settings.logging
    return configure_logging(format=section.format, level=settings.effective_log_level, colors=section.colors)


def get_logger(name: str | None = None, **initial_context: JsonValue) -> BoundLogger:
    """Logger at the configured level; ``name`` is recorded under ``logger``."""
    if name:
        initial_context["logger"] = name
    return BoundLogger(context=initial_context, _level=_active_level.get())


def _current_renderer() -> LogRenderer:
    renderer = _active_renderer.get()
    if renderer is None:
        renderer = ConsoleRenderer()
        _active_renderer.set(renderer)
    return renderer


class log_context:
    """Add keys to every entry logged inside the ``with`` block.

    Example:
        >>> with log_context(pipeline="ingest", run=7):
        ...     run(source | consuming())  # every entry carries pipeline and run
    """

    __slots__ = ("_extra", "_token")

    def __init__(self, **kw: JsonValue) -> None:
        self._extra: JsonDict = kw
        self._token: Any = None

    def __enter__(self) -> log_context:
        self._token = _scope.set({**_scope.get(), **self._extra})
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None,
                 exc_tb: TracebackType | None) -> None:
        if self._token is not None:
            _scope.reset(self._token)
            self._token = None


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────


_ANSI = {"reset": "\033[0m", "bold": "\033[1m", "dim": "\033[2m", "red": "\033[31m", "green": "\033[32m",
         "yellow": "\033[33m", "blue": "\033[34m", "magenta": "\033[35m", "cyan": "\033[36m", "white": "\033[37m"}
_LEVEL_STYLE = {"debug": "dim", "info": "green", "warning": "yellow", "error": "red", "critical": "red"}


def _paint(style: str, text: str) -> str:
    return f"{_ANSI[style]}{text}{_ANSI['reset']}"


def _plain(style: str, text: str) -> str:
    return text


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[: limit - 3] + "..."
