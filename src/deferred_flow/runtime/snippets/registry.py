"""Named snippets runnable from the command line."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from . import chains, pairs
from .context import SnippetContext


class UnknownSnippetError(KeyError):
    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown snippet: {self.name} (available: {', '.join(SNIPPETS)})"


@dataclass(frozen=True, slots=True)
class Snippet:
    name: str
    summary: str
    run: Callable[[SnippetContext], Awaitable[None]]


SNIPPETS: dict[str, Snippet] = {
    snippet.name: snippet
    for snippet in (
        Snippet("greeting", "Await f() then g() and print 'hello world'", pairs.greeting),
        Snippet("sum-chain", "Add two deferred ones, sequentially", chains.sum_chain),
        Snippet(
            "sum-chain-callbacks",
            "Add two deferred ones with then(success, failure)",
            chains.sum_chain_callbacks,
        ),
        Snippet(
            "progress-chain",
            "Print progress markers and relabel each call's failure",
            chains.progress_chain,
        ),
        Snippet("nested-sync", "Two synchronous calls, failure reported", chains.nested_sync),
        Snippet("hello-world", "Consume a coroutine by continuation and by await", chains.hello_world_twice),
        Snippet("pair-sequential", "Await both words one after the other", pairs.pair_sequential),
        Snippet("pair-concurrent", "Start both words, then await them", pairs.pair_concurrent),
        Snippet("pair-gathered", "Gather both words with asyncio.gather", pairs.pair_gathered),
    )
}


def get_snippet(name: str) -> Snippet:
    try:
        return SNIPPETS[name]
    except KeyError:
        raise UnknownSnippetError(name) from None
