"""Aggregate two fallible operations into one outcome.

Three compositions share one contract: the first failure wins and is
returned as `Err`, otherwise the combined values are returned as `Ok`.

- `run_sequential`: B starts only after A has succeeded.
- `run_concurrent`: A and B are both started before either outcome is known.
- `run_nested_sync`: the synchronous counterpart, built as a Result chain.

Progress markers are written to an optional line sink.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

from ..sink import LineSink
from .errors import IllegalTransitionError, OperationFailed
from .result import Err, Ok, Result

logger = logging.getLogger(__name__)

T = TypeVar("T")
T1 = TypeVar("T1")
T2 = TypeVar("T2")

FIRST_SUCCEEDED = "first call succeeded"
SECOND_SUCCEEDED = "second call succeeded"
BOTH_SUCCEEDED = "Both calls succeeded"

StartFn = Callable[[], Awaitable[T]]


class AggregationState(str, Enum):
    WAITING_ON_A = "waiting_on_a"
    WAITING_ON_B = "waiting_on_b"
    WAITING_ON_BOTH = "waiting_on_both"
    DONE = "done"


ALLOWED_TRANSITIONS: dict[AggregationState, set[AggregationState]] = {
    AggregationState.WAITING_ON_A: {AggregationState.WAITING_ON_B, AggregationState.DONE},
    AggregationState.WAITING_ON_B: {AggregationState.DONE},
    AggregationState.WAITING_ON_BOTH: {AggregationState.DONE},
    AggregationState.DONE: set(),
}


class ConcurrentFailurePolicy(str, Enum):
    # Wait for both; operand A's reason wins when both fail.
    WAIT_ALL = "wait_all"
    # Surface the first failure observed; the other operation keeps running.
    FAIL_FAST = "fail_fast"


@dataclass(slots=True)
class AggregationTracker:
    """Explicit state of one aggregation call, with the states it went through."""

    state: AggregationState
    history: list[AggregationState] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.history.append(self.state)

    def advance(self, to: AggregationState) -> None:
        allowed = ALLOWED_TRANSITIONS.get(self.state, set())
        if to not in allowed:
            raise IllegalTransitionError(f"Illegal transition: {self.state.value} -> {to.value}")
        logger.debug(
            "Aggregation transition",
            extra={"from_state": self.state.value, "to_state": to.value},
        )
        self.state = to
        self.history.append(to)


def _pair(first: Any, second: Any) -> tuple[Any, Any]:
    return (first, second)


def _emit(progress: LineSink | None, marker: str) -> None:
    if progress is not None:
        progress.write_line(marker)


def _tracker_for(tracker: AggregationTracker | None, initial: AggregationState) -> AggregationTracker:
    if tracker is None:
        return AggregationTracker(state=initial)
    if tracker.state is not initial:
        raise IllegalTransitionError(
            f"Aggregation must start in {initial.value}, not {tracker.state.value}"
        )
    return tracker


async def run_sequential(
    start_a: StartFn[T1],
    start_b: StartFn[T2],
    *,
    combine: Callable[[T1, T2], Any] = _pair,
    progress: LineSink | None = None,
    tracker: AggregationTracker | None = None,
) -> Result[Any]:
    """Run A, then B only if A succeeded.

    Returns `Err` with A's reason (B never started) or B's reason, otherwise
    `Ok(combine(r1, r2))`.
    """

    tracker = _tracker_for(tracker, AggregationState.WAITING_ON_A)

    try:
        r1 = await start_a()
    except Exception as exc:
        tracker.advance(AggregationState.DONE)
        return Err(exc)
    _emit(progress, FIRST_SUCCEEDED)

    tracker.advance(AggregationState.WAITING_ON_B)
    try:
        r2 = await start_b()
    except Exception as exc:
        tracker.advance(AggregationState.DONE)
        return Err(exc)
    _emit(progress, SECOND_SUCCEEDED)

    tracker.advance(AggregationState.DONE)
    _emit(progress, BOTH_SUCCEEDED)
    return Ok(combine(r1, r2))


def _launch(start: StartFn[T]) -> asyncio.Future[T]:
    try:
        return asyncio.ensure_future(start())
    except Exception as exc:
        failed: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        failed.set_exception(exc)
        return failed


def _report_late_failure(fut: asyncio.Future[Any]) -> None:
    if fut.cancelled():
        return
    exc = fut.exception()
    if exc is not None:
        logger.warning(
            "Operation failed after the aggregate outcome was decided",
            extra={"reason": str(exc)},
        )


async def run_concurrent(
    start_a: StartFn[T1],
    start_b: StartFn[T2],
    *,
    policy: ConcurrentFailurePolicy = ConcurrentFailurePolicy.WAIT_ALL,
    progress: LineSink | None = None,
    tracker: AggregationTracker | None = None,
) -> Result[tuple[T1, T2]]:
    """Start A and B together and wait according to `policy`.

    On success the pair keeps operand order regardless of which operation
    settled first. Nothing is cancelled.
    """

    tracker = _tracker_for(tracker, AggregationState.WAITING_ON_BOTH)

    first = _launch(start_a)
    second = _launch(start_b)

    def _marker(text: str) -> Callable[[asyncio.Future[Any]], None]:
        def _on_done(fut: asyncio.Future[Any]) -> None:
            if not fut.cancelled() and fut.exception() is None:
                _emit(progress, text)

        return _on_done

    first.add_done_callback(_marker(FIRST_SUCCEEDED))
    second.add_done_callback(_marker(SECOND_SUCCEEDED))

    return_when = (
        asyncio.ALL_COMPLETED
        if policy is ConcurrentFailurePolicy.WAIT_ALL
        else asyncio.FIRST_EXCEPTION
    )
    _done, pending = await asyncio.wait({first, second}, return_when=return_when)
    tracker.advance(AggregationState.DONE)

    failures = [fut for fut in (first, second) if fut.done() and fut.exception() is not None]
    for fut in pending:
        fut.add_done_callback(_report_late_failure)

    if failures:
        reason = failures[0].exception()
        for suppressed in failures[1:]:
            logger.warning(
                "Suppressed failure of concurrent operation",
                extra={"reason": str(suppressed.exception()), "kept": str(reason)},
            )
        assert reason is not None
        return Err(reason)

    _emit(progress, BOTH_SUCCEEDED)
    return Ok((first.result(), second.result()))


def attempt(fn: Callable[[], T], *, failure_message: str) -> Result[T]:
    """Call `fn`, translating any failure into `OperationFailed(failure_message)`."""

    try:
        return Ok(fn())
    except Exception as exc:
        failure = OperationFailed(failure_message)
        failure.__cause__ = exc
        return Err(failure)


def run_nested_sync(
    call_a: Callable[[], T1],
    call_b: Callable[[], T2],
    *,
    combine: Callable[[T1, T2], Any] = _pair,
    progress: LineSink | None = None,
    first_failure: str = "first call failed",
    second_failure: str = "second call failed",
) -> Result[Any]:
    """Synchronous counterpart of `run_sequential`.

    Each call's failure is translated into a distinct reason; `call_b` is not
    invoked when `call_a` fails.
    """

    def _second(r1: T1) -> Result[Any]:
        _emit(progress, FIRST_SUCCEEDED)
        return attempt(call_b, failure_message=second_failure).map(lambda r2: _both(r1, r2))

    def _both(r1: T1, r2: T2) -> Any:
        _emit(progress, SECOND_SUCCEEDED)
        _emit(progress, BOTH_SUCCEEDED)
        return combine(r1, r2)

    return attempt(call_a, failure_message=first_failure).and_then(_second)
