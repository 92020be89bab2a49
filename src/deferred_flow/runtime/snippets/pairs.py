"""Snippets that fetch a ("hello", "world") pair.

`greeting` and `pair_sequential` await one word after the other,
`pair_concurrent` starts both before awaiting, and `pair_gathered` hands both
to `asyncio.gather`.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any

from ..compose.aggregator import run_concurrent, run_sequential
from ..sink import format_error, format_value
from .context import SnippetContext, report
from .sources import word_or_error


def _f(ctx: SnippetContext) -> Coroutine[Any, Any, str]:
    return word_or_error("hello", ctx.decider, failure_message="f() failed")


def _g(ctx: SnippetContext) -> Coroutine[Any, Any, str]:
    return word_or_error("world", ctx.decider, failure_message="g() failed")


async def greeting(ctx: SnippetContext) -> None:
    result = await run_sequential(
        lambda: _f(ctx),
        lambda: _g(ctx),
        combine=lambda first, second: f"{first} {second}",
    )
    report(ctx.sink, result)


async def pair_sequential(ctx: SnippetContext) -> None:
    try:
        results = [await _f(ctx), await _g(ctx)]
    except Exception as exc:
        ctx.sink.write_error(format_error(exc))
        return
    ctx.sink.write_line(format_value(results))


async def pair_concurrent(ctx: SnippetContext) -> None:
    result = await run_concurrent(
        lambda: _f(ctx),
        lambda: _g(ctx),
        policy=ctx.failure_policy,
    )
    report(ctx.sink, result)


async def pair_gathered(ctx: SnippetContext) -> None:
    """`asyncio.gather` without `return_exceptions` raises the first failure."""

    try:
        results = await asyncio.gather(_f(ctx), _g(ctx))
    except Exception as exc:
        ctx.sink.write_error(format_error(exc))
        return
    ctx.sink.write_line(format_value(results))
