"""Tests for the Result type carried by adapter stages.

Validates:
- Functor laws
- Extraction and case analysis
- Results as stream items
"""

from __future__ import annotations

from typing import Callable

import pytest

from streamcase import Err, Ok, Result, collect, deduplicating, elements, filtering, mapping


# ═════════════════════════════════════════════════════════════════════════════
# Property Tests - Functor Laws
# ═════════════════════════════════════════════════════════════════════════════


def test_functor_identity() -> None:
    """Functor law: fmap id = id"""
    result: Result[int, str] = Ok(42)
    assert result.map(lambda x: x) == result

    err_result: Result[int, str] = Err("fail")
    assert err_result.map(lambda x: x) == err_result


def test_functor_composition() -> None:
    """Functor law: fmap (f . g) = fmap f . fmap g"""
    f: Callable[[int], int] = lambda x: x + 1
    g: Callable[[int], int] = lambda x: x * 2
    result: Result[int, str] = Ok(5)
    assert result.map(lambda x: f(g(x))) == result.map(g).map(f)


def test_map_skips_err() -> None:
    calls: list[str] = []
    assert Err("stop").map(calls.append) == Err("stop")
    assert calls == []


# ═════════════════════════════════════════════════════════════════════════════
# Extraction
# ═════════════════════════════════════════════════════════════════════════════


def test_unwrap() -> None:
    assert Ok(1).unwrap() == 1
    assert Err("e").unwrap_err() == "e"
    with pytest.raises(RuntimeError):
        Err("e").unwrap()
    with pytest.raises(RuntimeError):
        Ok(1).unwrap_err()


def test_match_and_bool() -> None:
    assert Ok(2).match(ok=lambda v: v + 1, err=len) == 3
    assert Err("abc").match(ok=lambda v: v + 1, err=len) == 3
    assert bool(Ok(0)) and not bool(Err("e"))
    assert Ok(0).is_ok() and Err("e").is_err()


def test_structural_pattern_matching() -> None:
    match Ok("line"):
        case Result(value):
            assert value == "line"


def test_equality_and_repr() -> None:
    assert repr(Ok(1)) == "Ok(1)"
    assert repr(Err("e")) == "Err('e')"
    assert Ok(1) != Err(1)
    assert len({Ok(1), Ok(1), Err(1)}) == 2


# ═════════════════════════════════════════════════════════════════════════════
# Results as stream items
# ═════════════════════════════════════════════════════════════════════════════


def test_results_flow_through_pipes() -> None:
    items = [Ok("a"), Err("bad"), Ok("b")]
    assert collect(elements(items) | filtering(Result.is_ok) | mapping(Result.unwrap)) == ["a", "b"]
    assert collect(elements(items) | filtering(Result.is_err) | mapping(Result.unwrap_err)) == ["bad"]


def test_results_deduplicate_by_value() -> None:
    assert collect(elements([Ok(1), Ok(1), Err(1), Err(1)]) | deduplicating()) == [Ok(1), Err(1)]
