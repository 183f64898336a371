"""Unified error handling for streamcase.

- ErrorCode: Standard error codes for stage failures
- StageError/StreamException: Structured errors and exceptions
- ConfigurationError/ProtocolError: Construction and protocol misuse
- Result/Ok/Err: Tagged success/failure items for adapters
"""

from .errors import (
    ConfigurationError,
    ErrorCode,
    ProtocolError,
    StageError,
    StreamException,
    classify_exception,
)
from .result import Err, Ok, Result

__all__ = [
    # Core errors
    "ErrorCode", "StageError", "StreamException", "classify_exception",
    "ConfigurationError", "ProtocolError",
    # Result monad
    "Result", "Ok", "Err",
]
