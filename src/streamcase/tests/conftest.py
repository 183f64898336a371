"""Shared fixtures: isolated settings, silent logging, finite test sources."""

from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterable
from typing import Any

import pytest
from hypothesis import HealthCheck, settings

from streamcase import Stage, clear_settings_cache, configure_logging
from streamcase.runtime.observability import MemoryRenderer

# Autouse fixtures reset global state once per test, not once per example
settings.register_profile("streamcase", suppress_health_check=[HealthCheck.function_scoped_fixture])
settings.load_profile("streamcase")


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    for key in list(os.environ):
        if key.startswith("STREAMCASE_"):
            monkeypatch.delenv(key)
    clear_settings_cache()
    configure_logging(format="none")
    yield
    clear_settings_cache()


@pytest.fixture
def log_records() -> MemoryRenderer:
    """Capture every log entry at DEBUG and above."""
    renderer = MemoryRenderer()
    configure_logging(level="DEBUG", renderer=renderer)
    return renderer


@pytest.fixture
def finite() -> Callable[..., Stage[Any, Any, Any]]:
    """Factory for a source over ``items`` that returns ``result`` and records every pull in ``pulled``."""
    def make(items: Iterable[Any], result: Any = "END", pulled: list[Any] | None = None) -> Stage[Any, Any, Any]:
        def body(_: Any) -> Generator[Any, None, Any]:
            for item in items:
                if pulled is not None:
                    pulled.append(item)
                yield item
            return result

        return Stage.source(body, name="finite")

    return make
