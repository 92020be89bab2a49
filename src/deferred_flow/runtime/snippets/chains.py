"""Snippets built on `one_or_error` and its synchronous twin.

They show the same "first failure wins" contract written four ways:
async/await aggregation, explicit continuations, continuations with
progress markers, and a synchronous Result chain.
"""

from __future__ import annotations

import operator
from collections.abc import Callable
from typing import NoReturn

from ..compose.aggregator import (
    BOTH_SUCCEEDED,
    FIRST_SUCCEEDED,
    SECOND_SUCCEEDED,
    run_nested_sync,
    run_sequential,
)
from ..compose.deferred import ensure_deferred
from ..compose.errors import OperationFailed
from ..compose.result import Err
from ..sink import format_error, format_value
from .context import SnippetContext, report
from .sources import hello_world, one_or_error, sync_one_or_error

AFTER_CALLS = "after calls"


async def sum_chain(ctx: SnippetContext) -> None:
    """Add two deferred ones, printing the total or the first failure."""

    result = await run_sequential(
        lambda: one_or_error(ctx.decider),
        lambda: one_or_error(ctx.decider),
        combine=operator.add,
    )
    report(ctx.sink, result)


async def sum_chain_callbacks(ctx: SnippetContext) -> None:
    """Same as `sum_chain`, wired with `then(success, failure)` continuations.

    Failures are printed to the output stream. The trailing `catch` reports a
    failure of the second call, which the failure handler of the first call
    cannot see.
    """

    sink = ctx.sink

    def _second(r1: int) -> object:
        return one_or_error(ctx.decider).then(lambda r2: sink.write_line(format_value(r1 + r2)))

    def _print_error(err: BaseException) -> None:
        sink.write_line(format_error(err))

    await one_or_error(ctx.decider).then(_second, _print_error).catch(_print_error)


def _translate(message: str) -> Callable[[BaseException], NoReturn]:
    def _raise(err: BaseException) -> NoReturn:
        raise OperationFailed(message) from err

    return _raise


async def progress_chain(ctx: SnippetContext) -> None:
    """Continuations that print progress and relabel failures per call."""

    sink = ctx.sink

    def _first_ok(_value: int) -> object:
        sink.write_line(FIRST_SUCCEEDED)
        return one_or_error(ctx.decider).then(
            lambda _v: sink.write_line(SECOND_SUCCEEDED),
            _translate("second async call failed"),
        )

    await (
        one_or_error(ctx.decider)
        .then(_first_ok, _translate("first async call failed"))
        .then(lambda _v: sink.write_line(BOTH_SUCCEEDED))
        .catch(lambda err: sink.write_error(format_error(err)))
    )


async def nested_sync(ctx: SnippetContext) -> None:
    """Two synchronous calls; a failure is reported and the flow carries on."""

    result = run_nested_sync(
        lambda: sync_one_or_error(ctx.sync_decider),
        lambda: sync_one_or_error(ctx.sync_decider),
        progress=ctx.sink,
    )
    if isinstance(result, Err):
        ctx.sink.write_error(format_error(result.error))
    ctx.sink.write_line(AFTER_CALLS)


async def hello_world_twice(ctx: SnippetContext) -> None:
    """Consume one coroutine's result by continuation, another by `await`."""

    printed = ensure_deferred(hello_world()).then(ctx.sink.write_line)
    ctx.sink.write_line(await hello_world())
    await printed
