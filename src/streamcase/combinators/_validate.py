"""Construction-time parameter checks shared by combinators."""

from __future__ import annotations

from streamcase.foundation.errors import ConfigurationError


def require_non_negative(combinator: str, param: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ConfigurationError.create(combinator, f"{param} must be an int, got {type(value).__name__}")
    if value < 0:
        raise ConfigurationError.create(combinator, f"{param} must be >= 0, got {value}")


def require_positive(combinator: str, param: str, value: int) -> None:
    require_non_negative(combinator, param, value)
    if value == 0:
        raise ConfigurationError.create(combinator, f"{param} must be >= 1, got 0")
