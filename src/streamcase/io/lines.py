"""Line-oriented console and file adapters.

- console_lines: prompt and emit one line of input per step
- file_lines: emit ``Ok(line)`` per line; open/read failures become one ``Err``
- console_sink: write every received line

File failures are data, not exceptions: downstream decides what to do with
an ``Err(StageError)`` item. The file handle lives inside the stage's own
``with`` block, so it is released when the stage finishes or is abandoned.

Example:
    >>> run(file_lines("notes.txt") | filtering(Result.is_ok) | mapping(Result.unwrap) | console_sink())
"""

from __future__ import annotations

import os
import sys
from collections.abc import Generator
from typing import Any, TextIO

from streamcase.foundation.config import get_settings
from streamcase.foundation.core import Done, Item, Receiver, Stage
from streamcase.foundation.errors import Err, Ok, Result, StageError
from streamcase.runtime.observability import get_logger

LineResult = Result[str, StageError]


def _strip_newline(line: str) -> str:
    return line[:-1] if line.endswith("\n") else line


def console_lines(
    prompt: str | None = None,
    *,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> Stage[Any, str, None]:
    """Write ``prompt`` and emit the next line of input, until end of input.

    Args:
        prompt: Text written before each read (default: ``IOSettings.prompt``)
        stdin: Input stream (default: ``sys.stdin`` at run time)
        stdout: Stream the prompt is written to (default: ``sys.stdout``)
    """
    def body(_: Receiver[Any]) -> Generator[str, None, None]:
        settings = get_settings().io
        text = settings.prompt if prompt is None else prompt
        source, sink = stdin or sys.stdin, stdout or sys.stdout
        while True:
            if text:
                sink.write(text)
                sink.flush()
            line = source.readline()
            if not line:
                return None
            yield _strip_newline(line) if settings.strip_newlines else line

    return Stage.source(body, name="console_lines")


def file_lines(path: str | os.PathLike[str], *, encoding: str | None = None) -> Stage[Any, LineResult, None]:
    """Emit each line of the file at ``path`` as ``Ok(line)``.

    A failure to open the file is emitted as a single ``Err(StageError)``
    and the source terminates; a read or decode failure mid-file is emitted
    the same way after the lines read so far.
    """
    name = f"file_lines({os.fspath(path)!r})"

    def body(_: Receiver[Any]) -> Generator[LineResult, None, None]:
        settings = get_settings().io
        log = get_logger("streamcase.io").bind_stage(name, "source")
        try:
            handle = open(path, encoding=encoding or settings.encoding)  # noqa: SIM115 - closed by the with below
        except OSError as exc:
            log.warning("open failed", error=str(exc))
            yield Err(StageError.from_exception(name, exc))
            return None
        with handle:
            lineno = 0
            while True:
                try:
                    line = handle.readline()
                except (OSError, UnicodeDecodeError) as exc:
                    log.warning("read failed", line=lineno + 1, error=str(exc))
                    yield Err(StageError.from_exception(name, exc, f"line {lineno + 1}"))
                    return None
                if not line:
                    log.debug("file exhausted", lines=lineno)
                    return None
                lineno += 1
                yield Ok(_strip_newline(line) if settings.strip_newlines else line)

    return Stage.source(body, name=name)


def console_sink(*, stdout: TextIO | None = None) -> Stage[str, Any, Any]:
    """Write each received line to ``stdout``; return upstream's return value."""
    def consume(upstream: Receiver[str]) -> Any:
        out = stdout or sys.stdout
        while True:
            match upstream.receive():
                case Item(line):
                    print(line, file=out)
                case Done(result):
                    return result

    return Stage.sink(consume, name="console_sink")
