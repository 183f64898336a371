"""Tests for error classification and the exception hierarchy."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from streamcase import (
    ConfigurationError,
    ErrorCode,
    ProtocolError,
    StageError,
    StreamException,
    classify_exception,
)


@pytest.mark.parametrize(
    ("exc", "code"),
    [
        (FileNotFoundError(2, "No such file or directory"), ErrorCode.NOT_FOUND),
        (PermissionError(13, "Permission denied"), ErrorCode.PERMISSION_DENIED),
        (IsADirectoryError(21, "Is a directory"), ErrorCode.IS_A_DIRECTORY),
        (UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte"), ErrorCode.DECODE_ERROR),
        (OSError("disk on fire"), ErrorCode.IO_ERROR),
        (LookupError("unknown codec"), ErrorCode.DECODE_ERROR),
        (RuntimeError("boom"), ErrorCode.UNKNOWN),
    ],
)
def test_classify_exception(exc: BaseException, code: ErrorCode) -> None:
    assert classify_exception(exc) is code


def test_stage_error_from_exception() -> None:
    error = StageError.from_exception("file_lines('x')", FileNotFoundError(2, "No such file or directory"), "open")
    assert error.code is ErrorCode.NOT_FOUND
    assert error.is_missing
    assert error.message.startswith("open: ")
    assert error.details is None
    assert str(error) == f"file_lines('x'): {error.message} [NOT_FOUND]"


def test_stage_error_falls_back_to_type_name() -> None:
    assert StageError.from_exception("s", KeyError()).message == "KeyError"


def test_stage_error_includes_trace_on_request() -> None:
    try:
        raise ValueError("bad")
    except ValueError as exc:
        error = StageError.from_exception("s", exc, include_trace=True)
    assert error.details is not None
    assert "ValueError: bad" in error.details


def test_stage_error_is_frozen_and_validated() -> None:
    error = StageError(stage="s", message="m")
    assert error.code is ErrorCode.UNKNOWN
    with pytest.raises(ValidationError):
        error.stage = "other"  # type: ignore[misc]
    with pytest.raises(ValidationError):
        StageError(stage="", message="m")


def test_stage_error_serializes() -> None:
    data = StageError(stage="s", message="m", code=ErrorCode.IO_ERROR).model_dump()
    assert data == {"stage": "s", "message": "m", "code": ErrorCode.IO_ERROR, "details": None, "is_missing": False}


def test_exception_hierarchy() -> None:
    config = ConfigurationError.create("chunking", "size must be >= 1, got 0")
    assert isinstance(config, StreamException) and isinstance(config, ValueError)
    assert config.error.code is ErrorCode.INVALID_CONFIG
    assert str(config) == "size must be >= 1, got 0"

    protocol = ProtocolError.create("taking(1)", "receive after done")
    assert isinstance(protocol, RuntimeError)
    assert protocol.error.code is ErrorCode.PROTOCOL_VIOLATION
    assert protocol.error.stage == "taking(1)"
