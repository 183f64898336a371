"""Standardized error types for stages and pipelines.

Provides error codes and a structured error model that adapters emit as
ordinary stream items, plus the exceptions raised for malformed
configuration and protocol misuse.
"""

from __future__ import annotations

import traceback
from enum import StrEnum
from functools import lru_cache
from typing import Annotated, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)


class ErrorCode(StrEnum):
    """Standard error codes for stage failures."""
    INVALID_CONFIG = "INVALID_CONFIG"
    PROTOCOL_VIOLATION = "PROTOCOL_VIOLATION"
    NOT_FOUND = "NOT_FOUND"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    IS_A_DIRECTORY = "IS_A_DIRECTORY"
    DECODE_ERROR = "DECODE_ERROR"
    IO_ERROR = "IO_ERROR"
    UNKNOWN = "UNKNOWN"


# Exception types checked before falling back to name patterns
_TYPE_CODES: tuple[tuple[type[BaseException], ErrorCode], ...] = (
    (FileNotFoundError, ErrorCode.NOT_FOUND),
    (PermissionError, ErrorCode.PERMISSION_DENIED),
    (IsADirectoryError, ErrorCode.IS_A_DIRECTORY),
    (UnicodeError, ErrorCode.DECODE_ERROR),
)

_PATTERN_CODES: dict[str, ErrorCode] = {
    "notfound": ErrorCode.NOT_FOUND,
    "no such file": ErrorCode.NOT_FOUND,
    "permission": ErrorCode.PERMISSION_DENIED,
    "directory": ErrorCode.IS_A_DIRECTORY,
    "decode": ErrorCode.DECODE_ERROR,
    "codec": ErrorCode.DECODE_ERROR,
}
_PATTERN_KEYS = tuple(_PATTERN_CODES.keys())


@lru_cache(maxsize=256)
def _classify_cached(exc_key: str) -> ErrorCode:
    haystack = exc_key.lower()
    for pattern in _PATTERN_KEYS:
        if pattern in haystack:
            return _PATTERN_CODES[pattern]
    return ErrorCode.UNKNOWN


def classify_exception(exc: BaseException) -> ErrorCode:
    """Map an exception to an error code by type, then by name/message."""
    for exc_type, code in _TYPE_CODES:
        if isinstance(exc, exc_type):
            return code
    code = _classify_cached(f"{type(exc).__name__} {exc}")
    if code is ErrorCode.UNKNOWN and isinstance(exc, OSError):
        return ErrorCode.IO_ERROR
    return code


class StageError(BaseModel):
    """Structured description of a stage failure.

    Adapters emit this inside ``Err`` items rather than raising, so
    downstream stages pattern-match on it like any other data.

    Attributes:
        stage: Name of the stage that failed
        message: Human-readable error message
        code: Machine-readable error code
        details: Optional detailed information (e.g., stack trace)
    """

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        validate_default=True,
        json_schema_extra={
            "title": "Stage Error",
            "examples": [{
                "stage": "file_lines('data.txt')",
                "message": "[Errno 2] No such file or directory: 'data.txt'",
                "code": "NOT_FOUND",
            }],
        },
    )

    stage: Annotated[str, Field(min_length=1, description="Name of the failing stage")]
    message: Annotated[str, Field(min_length=1, description="Human-readable error message")]
    code: ErrorCode = Field(default=ErrorCode.UNKNOWN, description="Machine-readable classification")
    details: str | None = Field(default=None, repr=False, description="Optional stack trace")

    @field_validator("message", mode="before")
    @classmethod
    def _ensure_message(cls, v: str | BaseException) -> str:
        """Accept exception objects and extract their message."""
        return str(v) if isinstance(v, BaseException) else v

    @computed_field
    @property
    def is_missing(self) -> bool:
        """Whether the failure is a missing resource."""
        return self.code is ErrorCode.NOT_FOUND

    @classmethod
    def from_exception(
        cls,
        stage: str,
        exc: BaseException,
        context: str = "",
        *,
        include_trace: bool = False,
    ) -> Self:
        """Create from an exception with auto-classification."""
        return cls(
            stage=stage,
            message=f"{context}: {exc}" if context else str(exc) or type(exc).__name__,
            code=classify_exception(exc),
            details=traceback.format_exc() if include_trace else None,
        )

    def render(self) -> str:
        return f"{self.stage}: {self.message} [{self.code}]"

    __str__ = render


class StreamException(Exception):
    """Exception wrapping a StageError for raising."""

    code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(self, error: StageError) -> None:
        self.error = error
        super().__init__(error.message)

    @classmethod
    def create(cls, stage: str, message: str) -> Self:
        return cls(StageError(stage=stage, message=message, code=cls.code))


class ConfigurationError(StreamException, ValueError):
    """A combinator was constructed with an invalid parameter."""

    code = ErrorCode.INVALID_CONFIG


class ProtocolError(StreamException, RuntimeError):
    """A stage broke the receive/emit contract."""

    code = ErrorCode.PROTOCOL_VIOLATION
