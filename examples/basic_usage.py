#!/usr/bin/env python3
"""Programmatic aggregation example.

This demonstrates using the composition primitives directly:

* load settings from `.env`
* build deciders from a seed
* compose two deferred operations sequentially and concurrently

The seed is passed as an argument so a run can be replayed.
"""

from __future__ import annotations

import argparse
import asyncio
import operator
from typing import Sequence

from deferred_flow.runtime.compose import RandomDecider, run_concurrent, run_sequential
from deferred_flow.runtime.config import DeferredFlowSettings
from deferred_flow.runtime.logging import configure_logging
from deferred_flow.runtime.sink import ConsoleSink
from deferred_flow.runtime.snippets import report
from deferred_flow.runtime.snippets.sources import one_or_error


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Aggregate two deferred operations.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the random source")
    return parser.parse_args(argv)


async def _demo(decider: RandomDecider, sink: ConsoleSink) -> None:
    total = await run_sequential(
        lambda: one_or_error(decider),
        lambda: one_or_error(decider),
        combine=operator.add,
        progress=sink,
    )
    report(sink, total)

    pair = await run_concurrent(
        lambda: one_or_error(decider),
        lambda: one_or_error(decider),
        progress=sink,
    )
    report(sink, pair)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = DeferredFlowSettings()
    configure_logging(settings.log_level)

    decider = RandomDecider.seeded(settings.success_probability, args.seed)
    asyncio.run(_demo(decider, ConsoleSink()))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
