from __future__ import annotations

import asyncio
import logging
import random

from deferred_flow.runtime.compose.decision import RandomDecider
from deferred_flow.runtime.config import DeferredFlowSettings
from deferred_flow.runtime.sink import LineSink
from deferred_flow.runtime.snippets.context import SnippetContext
from deferred_flow.runtime.snippets.registry import Snippet

logger = logging.getLogger(__name__)


def build_context(settings: DeferredFlowSettings, sink: LineSink) -> SnippetContext:
    """Wire the deciders from settings.

    Both deciders draw from one random source, so a fixed seed replays the
    whole run.
    """

    rng = random.Random(settings.seed)
    return SnippetContext(
        sink=sink,
        decider=RandomDecider(settings.success_probability, rng.random),
        sync_decider=RandomDecider(settings.sync_success_probability, rng.random),
        failure_policy=settings.failure_policy,
    )


async def _run_to_completion(snippet: Snippet, ctx: SnippetContext) -> None:
    try:
        await snippet.run(ctx)
    finally:
        # Operations a snippet stopped waiting for still run to completion.
        current = asyncio.current_task()
        while True:
            outstanding = [task for task in asyncio.all_tasks() if task is not current]
            if not outstanding:
                break
            logger.debug(
                "Waiting for in-flight operations",
                extra={"snippet": snippet.name, "count": len(outstanding)},
            )
            await asyncio.gather(*outstanding, return_exceptions=True)


def run_snippet(snippet: Snippet, ctx: SnippetContext) -> None:
    """Run one snippet on a fresh event loop.

    The loop is closed only after every operation started during the run has
    settled, so late failures are still reported.
    """

    logger.info("Running snippet", extra={"snippet": snippet.name})
    asyncio.run(_run_to_completion(snippet, ctx))
