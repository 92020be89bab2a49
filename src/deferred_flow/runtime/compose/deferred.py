"""Deferred computations with an explicit state machine.

A `Deferred` starts `pending` and settles exactly once, either `fulfilled`
with a value or `rejected` with an exception. Continuations registered with
`add_done_callback` or `then` run on the event loop, in attachment order,
after the terminal state is reached.

Deferreds are awaitable, so they compose with coroutines and `asyncio`
primitives.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Generator
from enum import Enum
from typing import Any, Generic, TypeVar

from .errors import IllegalTransitionError
from .result import Err, Ok, Result

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")


class DeferredState(str, Enum):
    PENDING = "pending"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"


ALLOWED_TRANSITIONS: dict[DeferredState, set[DeferredState]] = {
    DeferredState.PENDING: {DeferredState.FULFILLED, DeferredState.REJECTED},
    DeferredState.FULFILLED: set(),
    DeferredState.REJECTED: set(),
}


class Deferred(Generic[T]):
    """A value that becomes available later, or fails.

    Must be settled and observed while an event loop is running; the loop is
    bound on first use.
    """

    def __init__(self, *, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._state = DeferredState.PENDING
        self._value: T | None = None
        self._reason: BaseException | None = None
        self._callbacks: list[Callable[[Deferred[T]], None]] = []
        self._observed = False
        # Strong reference to the task this deferred mirrors, if any.
        self._task: asyncio.Future[Any] | None = None

    def __repr__(self) -> str:
        if self._state is DeferredState.FULFILLED:
            return f"<Deferred fulfilled value={self._value!r}>"
        if self._state is DeferredState.REJECTED:
            return f"<Deferred rejected reason={self._reason!r}>"
        return "<Deferred pending>"

    def __del__(self) -> None:
        if self._state is DeferredState.REJECTED and not self._observed:
            logger.error(
                "Rejected deferred was never observed",
                extra={"reason": repr(self._reason)},
            )

    @classmethod
    def fulfilled(cls, value: T) -> Deferred[T]:
        deferred: Deferred[T] = cls()
        deferred.resolve(value)
        return deferred

    @classmethod
    def rejected(cls, reason: BaseException) -> Deferred[Any]:
        deferred: Deferred[Any] = cls()
        deferred.reject(reason)
        return deferred

    @property
    def state(self) -> DeferredState:
        return self._state

    def done(self) -> bool:
        return self._state is not DeferredState.PENDING

    @property
    def value(self) -> T:
        if self._state is not DeferredState.FULFILLED:
            raise IllegalTransitionError(f"Deferred has no value while {self._state.value}")
        return self._value  # type: ignore[return-value]

    @property
    def reason(self) -> BaseException:
        if self._state is not DeferredState.REJECTED or self._reason is None:
            raise IllegalTransitionError(f"Deferred has no reason while {self._state.value}")
        self._observed = True
        return self._reason

    def resolve(self, value: T) -> None:
        self._settle(DeferredState.FULFILLED)
        self._value = value
        self._flush()

    def reject(self, reason: BaseException) -> None:
        if not isinstance(reason, BaseException):
            raise TypeError(f"Rejection reason must be an exception, got {type(reason).__name__}")
        self._settle(DeferredState.REJECTED)
        self._reason = reason
        self._flush()

    def add_done_callback(self, fn: Callable[[Deferred[T]], None]) -> None:
        """Register a continuation; it never runs inline."""

        self._observed = True
        if self._state is DeferredState.PENDING:
            self._callbacks.append(fn)
        else:
            self._get_loop().call_soon(fn, self)

    def then(
        self,
        on_fulfilled: Callable[[T], Any] | None = None,
        on_rejected: Callable[[BaseException], Any] | None = None,
    ) -> Deferred[Any]:
        """Chain a continuation and return the deferred for its outcome.

        Handlers may return a plain value or an awaitable (another `Deferred`,
        a coroutine, a future), which is adopted. A handler that raises
        rejects the returned deferred. A missing handler passes the outcome
        through unchanged.
        """

        child: Deferred[Any] = Deferred(loop=self._loop)

        def _continue(parent: Deferred[T]) -> None:
            if parent.state is DeferredState.FULFILLED:
                handler: Callable[[Any], Any] | None = on_fulfilled
                arg: Any = parent.value
            else:
                handler = on_rejected
                arg = parent.reason
            if handler is None:
                child._adopt(parent)
                return
            try:
                out = handler(arg)
            except Exception as exc:
                child.reject(exc)
                return
            if inspect.isawaitable(out):
                ensure_deferred(out).add_done_callback(child._adopt)
            else:
                child.resolve(out)

        self.add_done_callback(_continue)
        return child

    def catch(self, on_rejected: Callable[[BaseException], Any]) -> Deferred[Any]:
        return self.then(None, on_rejected)

    async def as_result(self) -> Result[T]:
        try:
            return Ok(await self)
        except Exception as exc:
            return Err(exc)

    def __await__(self) -> Generator[Any, None, T]:
        future: asyncio.Future[T] = self._get_loop().create_future()

        def _copy(deferred: Deferred[T]) -> None:
            if future.cancelled():
                return
            if deferred.state is DeferredState.FULFILLED:
                future.set_result(deferred.value)
            else:
                future.set_exception(deferred.reason)

        self.add_done_callback(_copy)
        return (yield from future.__await__())

    def _adopt(self, other: Deferred[Any]) -> None:
        if other.state is DeferredState.FULFILLED:
            self.resolve(other.value)
        else:
            self.reject(other.reason)

    def _settle(self, to: DeferredState) -> None:
        allowed = ALLOWED_TRANSITIONS.get(self._state, set())
        if to not in allowed:
            raise IllegalTransitionError(
                f"Illegal transition: {self._state.value} -> {to.value}"
            )
        self._state = to

    def _flush(self) -> None:
        callbacks, self._callbacks = self._callbacks, []
        if not callbacks:
            return
        loop = self._get_loop()
        for fn in callbacks:
            loop.call_soon(fn, self)

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop


def ensure_deferred(awaitable: Awaitable[T]) -> Deferred[T]:
    """Wrap a coroutine or future so it can be chained like a `Deferred`.

    Coroutines are scheduled immediately, so the computation is in flight
    when this returns.
    """

    if isinstance(awaitable, Deferred):
        return awaitable

    deferred: Deferred[T] = Deferred()
    task = asyncio.ensure_future(awaitable)
    deferred._task = task

    def _mirror(fut: asyncio.Future[T]) -> None:
        if fut.cancelled():
            deferred.reject(asyncio.CancelledError())
            return
        exc = fut.exception()
        if exc is not None:
            deferred.reject(exc)
        else:
            deferred.resolve(fut.result())

    task.add_done_callback(_mirror)
    return deferred
