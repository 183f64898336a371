"""Tests for pipe combinators.

Each group checks emissions, how much of upstream gets pulled, and what the
pipe terminates with.
"""

from __future__ import annotations

import itertools
import operator

import pytest

from streamcase import (
    ConfigurationError,
    chunking,
    collect,
    concatting,
    consuming,
    deduplicating,
    discard,
    dropping,
    dropping_while,
    elements,
    filtering,
    filtering_just,
    grouping,
    grouping_by,
    iterating,
    mapping,
    mapping_m,
    repeating,
    run,
    scanning,
    splitting_by,
    taking,
    taking_while,
    tracing,
)


# ─────────────────────────────────────────────────────────────────────────────
# Item-by-item
# ─────────────────────────────────────────────────────────────────────────────


def test_mapping() -> None:
    assert collect(elements([1, 2, 3]) | mapping(lambda x: x + 1)) == [2, 3, 4]
    assert mapping(str.upper).name == "mapping(str.upper)"


def test_mapping_m_runs_action_once_per_demanded_item(finite) -> None:
    calls: list[int] = []

    def act(x: int) -> int:
        calls.append(x)
        return x * 10

    assert run(finite([1, 2, 3]) | mapping_m(act) | taking(2) | consuming()) == [10, 20]
    assert calls == [1, 2]


def test_mapping_m_forwards_result(finite) -> None:
    assert run(finite([1], "END") | mapping_m(str) | discard()) == "END"


def test_concatting() -> None:
    assert collect(elements([[1, 2], [], (3,), "ab"]) | concatting()) == [1, 2, 3, "a", "b"]


def test_concatting_is_lazy_within_an_item() -> None:
    assert run(elements([itertools.count()]) | concatting() | taking(3) | consuming()) == [0, 1, 2]


def test_filtering() -> None:
    assert collect(elements(range(10)) | filtering(lambda x: x % 3 == 0)) == [0, 3, 6, 9]


def test_filtering_just_drops_only_none() -> None:
    assert collect(elements([1, None, 0, None, "", 2]) | filtering_just()) == [1, 0, "", 2]
    assert filtering_just().name == "filtering_just"


def test_tracing_observes_only_demanded_items(finite) -> None:
    seen: list[int] = []
    assert run(finite([1, 2, 3]) | tracing(seen.append) | taking(1) | consuming()) == [1]
    assert seen == [1]


def test_tracing_passes_items_unchanged() -> None:
    seen: list[str] = []
    assert collect(elements("ab") | tracing(seen.append)) == ["a", "b"]
    assert seen == ["a", "b"]


def test_repeating(finite) -> None:
    assert collect(elements([1, 2]) | repeating(2)) == [1, 1, 2, 2]
    assert collect(elements([1, 2]) | repeating(0)) == []
    assert run(finite([1], "END") | repeating(3) | discard()) == "END"


def test_deduplicating_consecutive_only() -> None:
    assert collect(elements([1, 1, 2, 2, 2, 3, 1]) | deduplicating()) == [1, 2, 3, 1]


def test_deduplicating_first_item_always_emitted() -> None:
    assert collect(elements([None, None, 1]) | deduplicating()) == [None, 1]
    assert collect(elements([]) | deduplicating()) == []


# ─────────────────────────────────────────────────────────────────────────────
# Bounded prefixes
# ─────────────────────────────────────────────────────────────────────────────


def test_taking_over_infinite_source() -> None:
    assert run(iterating(lambda x: x + 1, 0) | taking(3) | consuming()) == [0, 1, 2]


def test_taking_more_than_available_forwards_result(finite) -> None:
    assert run(finite([1, 2], "END") | taking(5) | consuming()) == [1, 2]
    assert run(finite([1, 2], "END") | taking(5) | discard()) == "END"


def test_taking_zero_pulls_nothing(finite) -> None:
    pulled: list[int] = []
    assert run(finite([1, 2], pulled=pulled) | taking(0) | consuming()) == []
    assert pulled == []


def test_dropping(finite) -> None:
    assert collect(elements([1, 2, 3, 4]) | dropping(2)) == [3, 4]
    assert collect(elements([1, 2]) | dropping(5)) == []
    assert run(finite([1, 2], "END") | dropping(5) | discard()) == "END"
    assert run(finite([1, 2, 3], "END") | dropping(1) | discard()) == "END"


def test_taking_while_consumes_first_failure(finite) -> None:
    pulled: list[int] = []
    assert run(finite([1, 2, 5, 1], pulled=pulled) | taking_while(lambda x: x < 3) | consuming()) == [1, 2]
    assert pulled == [1, 2, 5]


def test_taking_while_result(finite) -> None:
    assert run(finite([1, 5], "END") | taking_while(lambda x: x < 3) | discard()) is None
    assert run(finite([1, 2], "END") | taking_while(lambda x: x < 3) | discard()) == "END"


def test_dropping_while() -> None:
    assert collect(elements([1, 2, 5, 1, 0]) | dropping_while(lambda x: x < 3)) == [5, 1, 0]
    assert collect(elements([1, 2]) | dropping_while(lambda x: x < 3)) == []


@pytest.mark.parametrize("factory", [taking, dropping, repeating])
def test_counts_must_be_non_negative(factory) -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        factory(-1)
    assert exc_info.value.error.code == "INVALID_CONFIG"


# ─────────────────────────────────────────────────────────────────────────────
# Batching
# ─────────────────────────────────────────────────────────────────────────────


def test_grouping() -> None:
    assert collect(elements([1, 1, 2, 3, 3]) | grouping()) == [[1, 1], [2], [3, 3]]
    assert collect(elements([]) | grouping()) == []
    assert grouping().name == "grouping"


def test_grouping_by_compares_with_first_member() -> None:
    close = lambda a, b: abs(b - a) < 2  # noqa: E731
    assert collect(elements([1, 2, 3, 4]) | grouping_by(close)) == [[1, 2], [3, 4]]


def test_grouping_by_key() -> None:
    words = ["apple", "avocado", "banana", "blueberry", "cherry"]
    same_initial = lambda a, b: a[0] == b[0]  # noqa: E731
    assert collect(elements(words) | grouping_by(same_initial)) == [
        ["apple", "avocado"], ["banana", "blueberry"], ["cherry"],
    ]


def test_chunking() -> None:
    assert collect(elements([1, 2, 3, 4, 5]) | chunking(2)) == [[1, 2], [3, 4], [5]]


def test_chunking_always_flushes_final_batch() -> None:
    assert collect(elements([]) | chunking(3)) == [[]]
    assert collect(elements([1, 2, 3, 4, 5, 6]) | chunking(3)) == [[1, 2, 3], [4, 5, 6], []]


def test_chunking_batches_are_independent() -> None:
    first, second = collect(elements([1, 2, 3, 4]) | chunking(2))
    first.append(99)
    assert second == [3, 4]


def test_chunking_forwards_result(finite) -> None:
    assert run(finite([1, 2, 3], "END") | chunking(2) | discard()) == "END"


@pytest.mark.parametrize("size", [0, -3])
def test_chunking_rejects_non_positive_size(size: int) -> None:
    with pytest.raises(ConfigurationError, match="size"):
        chunking(size)


def test_chunking_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        chunking(0)


def test_splitting_by() -> None:
    assert collect(elements("a b  c") | splitting_by(str.isspace) | mapping("".join)) == ["a", "b", "", "c"]


def test_splitting_by_always_flushes_final_segment() -> None:
    assert collect(elements("") | splitting_by(str.isspace)) == [[]]
    assert collect(elements(" ") | splitting_by(str.isspace)) == [[], []]
    assert collect(elements([1, 0]) | splitting_by(lambda x: x == 0)) == [[1], []]


# ─────────────────────────────────────────────────────────────────────────────
# Running state
# ─────────────────────────────────────────────────────────────────────────────


def test_scanning() -> None:
    running = scanning(lambda x, acc: acc + x, 0)
    assert collect(elements([1, 2, 3]) | running) == [0, 1, 3, 6]
    assert collect(elements([]) | running) == [0]


def test_scanning_emits_initial_before_receiving(finite) -> None:
    pulled: list[int] = []
    assert run(finite([1, 2], pulled=pulled) | scanning(operator.add, 0) | taking(1) | consuming()) == [0]
    assert pulled == []


def test_scanning_argument_order() -> None:
    assert collect(elements("ab") | scanning(lambda x, acc: acc + x, "")) == ["", "a", "ab"]
