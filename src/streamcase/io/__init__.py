"""Thin line-oriented adapters for consoles and files."""

from .lines import LineResult, console_lines, console_sink, file_lines

__all__ = ["LineResult", "console_lines", "console_sink", "file_lines"]
