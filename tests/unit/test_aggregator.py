"""Unit tests for two-operation aggregation.

Failures are forced through scripted outcomes so each composition is
deterministic.
"""

from __future__ import annotations

import asyncio
import logging
import operator
from unittest.mock import Mock

import pytest

from deferred_flow.runtime.compose.aggregator import (
    AggregationState,
    AggregationTracker,
    ConcurrentFailurePolicy,
    run_concurrent,
    run_nested_sync,
    run_sequential,
)
from deferred_flow.runtime.compose.decision import ScriptedDecider
from deferred_flow.runtime.compose.deferred import Deferred
from deferred_flow.runtime.compose.errors import IllegalTransitionError, OperationFailed
from deferred_flow.runtime.compose.result import Err, Ok
from deferred_flow.runtime.sink import RecordingSink
from deferred_flow.runtime.snippets.sources import one_or_error, sync_one_or_error


def _settle_later(delay: float, *, value: object = None, error: str | None = None) -> Deferred[object]:
    d: Deferred[object] = Deferred()
    loop = asyncio.get_running_loop()
    if error is None:
        loop.call_later(delay, d.resolve, value)
    else:
        loop.call_later(delay, d.reject, OperationFailed(error))
    return d


def test_sequential_sums_two_successes() -> None:
    decider = ScriptedDecider(outcomes=[True, True])
    tracker = AggregationTracker(state=AggregationState.WAITING_ON_A)

    result = asyncio.run(
        run_sequential(
            lambda: one_or_error(decider),
            lambda: one_or_error(decider),
            combine=operator.add,
            tracker=tracker,
        )
    )

    assert result == Ok(2)
    assert tracker.history == [
        AggregationState.WAITING_ON_A,
        AggregationState.WAITING_ON_B,
        AggregationState.DONE,
    ]


def test_sequential_first_failure_never_starts_second() -> None:
    decider = ScriptedDecider(outcomes=[False])
    start_b = Mock()
    tracker = AggregationTracker(state=AggregationState.WAITING_ON_A)

    result = asyncio.run(
        run_sequential(lambda: one_or_error(decider), start_b, tracker=tracker)
    )

    assert isinstance(result, Err)
    assert str(result.error) == "failed"
    assert start_b.call_count == 0
    assert tracker.history == [AggregationState.WAITING_ON_A, AggregationState.DONE]


def test_sequential_second_failure_is_reported() -> None:
    decider = ScriptedDecider(outcomes=[True, False])
    sink = RecordingSink()

    result = asyncio.run(
        run_sequential(
            lambda: one_or_error(decider),
            lambda: one_or_error(decider),
            progress=sink,
        )
    )

    assert isinstance(result, Err)
    assert str(result.error) == "failed"
    assert sink.lines == ["first call succeeded"]


def test_sequential_markers_precede_result_in_start_order() -> None:
    sink = RecordingSink()

    async def scenario() -> object:
        return await run_sequential(
            lambda: _settle_later(0.01, value="hello"),
            lambda: _settle_later(0.0, value="world"),
            progress=sink,
        )

    assert asyncio.run(scenario()) == Ok(("hello", "world"))
    assert sink.lines == ["first call succeeded", "second call succeeded", "Both calls succeeded"]


def test_sequential_rejects_tracker_in_wrong_state() -> None:
    tracker = AggregationTracker(state=AggregationState.DONE)
    with pytest.raises(IllegalTransitionError):
        asyncio.run(run_sequential(Mock(), Mock(), tracker=tracker))


def test_concurrent_preserves_operand_order() -> None:
    sink = RecordingSink()

    async def scenario() -> object:
        return await run_concurrent(
            lambda: _settle_later(0.02, value="hello"),
            lambda: _settle_later(0.0, value="world"),
            progress=sink,
        )

    assert asyncio.run(scenario()) == Ok(("hello", "world"))
    # B settled first; the aggregate marker comes only after both.
    assert sink.lines == ["second call succeeded", "first call succeeded", "Both calls succeeded"]


def test_concurrent_starts_both_before_either_settles() -> None:
    started: list[str] = []

    async def scenario() -> object:
        def _start(name: str, delay: float) -> Deferred[object]:
            started.append(name)
            return _settle_later(delay, value=name)

        tracker = AggregationTracker(state=AggregationState.WAITING_ON_BOTH)
        result = await run_concurrent(
            lambda: _start("a", 0.01), lambda: _start("b", 0.0), tracker=tracker
        )
        assert tracker.history == [AggregationState.WAITING_ON_BOTH, AggregationState.DONE]
        return result

    assert asyncio.run(scenario()) == Ok(("a", "b"))
    assert started == ["a", "b"]


@pytest.mark.parametrize("policy", list(ConcurrentFailurePolicy))
def test_concurrent_both_failing_prefers_first_operand(policy: ConcurrentFailurePolicy) -> None:
    async def scenario() -> object:
        return await run_concurrent(
            lambda: _settle_later(0.0, error="A failed"),
            lambda: _settle_later(0.0, error="B failed"),
            policy=policy,
        )

    for _ in range(5):
        result = asyncio.run(scenario())
        assert isinstance(result, Err)
        assert str(result.error) == "A failed"


def test_concurrent_wait_all_waits_for_slower_operand(caplog: pytest.LogCaptureFixture) -> None:
    async def scenario() -> object:
        return await run_concurrent(
            lambda: _settle_later(0.02, error="A failed"),
            lambda: _settle_later(0.0, error="B failed"),
        )

    with caplog.at_level(logging.WARNING):
        result = asyncio.run(scenario())

    assert isinstance(result, Err)
    assert str(result.error) == "A failed"
    assert any("Suppressed failure" in r.getMessage() for r in caplog.records)


def test_concurrent_fail_fast_returns_first_observed_failure() -> None:
    async def scenario() -> object:
        return await run_concurrent(
            lambda: _settle_later(0.05, value="hello"),
            lambda: _settle_later(0.0, error="g() failed"),
            policy=ConcurrentFailurePolicy.FAIL_FAST,
        )

    result = asyncio.run(scenario())
    assert isinstance(result, Err)
    assert str(result.error) == "g() failed"


def test_concurrent_start_raising_synchronously_still_starts_other() -> None:
    start_b = Mock(side_effect=lambda: Deferred.fulfilled("world"))

    def _start_a() -> Deferred[str]:
        raise OperationFailed("f() failed")

    async def scenario() -> object:
        return await run_concurrent(_start_a, start_b)

    result = asyncio.run(scenario())
    assert isinstance(result, Err)
    assert str(result.error) == "f() failed"
    assert start_b.call_count == 1


def test_nested_sync_translates_first_failure() -> None:
    decider = ScriptedDecider(outcomes=[False])
    call_b = Mock(return_value=1)
    sink = RecordingSink()

    result = run_nested_sync(lambda: sync_one_or_error(decider), call_b, progress=sink)

    assert isinstance(result, Err)
    assert str(result.error) == "first call failed"
    assert isinstance(result.error.__cause__, OperationFailed)
    assert call_b.call_count == 0
    assert sink.lines == []


def test_nested_sync_translates_second_failure() -> None:
    decider = ScriptedDecider(outcomes=[True, False])
    sink = RecordingSink()

    result = run_nested_sync(
        lambda: sync_one_or_error(decider),
        lambda: sync_one_or_error(decider),
        progress=sink,
    )

    assert isinstance(result, Err)
    assert str(result.error) == "second call failed"
    assert sink.lines == ["first call succeeded"]


def test_nested_sync_combines_successes() -> None:
    sink = RecordingSink()
    result = run_nested_sync(lambda: 1, lambda: 1, combine=operator.add, progress=sink)
    assert result == Ok(2)
    assert sink.lines == ["first call succeeded", "second call succeeded", "Both calls succeeded"]
