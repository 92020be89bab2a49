"""Test configuration and fixtures."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator

import pytest

from deferred_flow.runtime.compose.aggregator import ConcurrentFailurePolicy
from deferred_flow.runtime.compose.decision import ScriptedDecider
from deferred_flow.runtime.sink import RecordingSink
from deferred_flow.runtime.snippets.context import SnippetContext

ContextFactory = Callable[..., SnippetContext]


@pytest.fixture
def sink() -> RecordingSink:
    """Provide an in-memory line sink."""
    return RecordingSink()


@pytest.fixture
def make_context(sink: RecordingSink) -> ContextFactory:
    """Build a snippet context from scripted outcomes."""

    def _make(
        outcomes: Iterable[bool] = (),
        sync_outcomes: Iterable[bool] = (),
        policy: ConcurrentFailurePolicy = ConcurrentFailurePolicy.WAIT_ALL,
    ) -> SnippetContext:
        return SnippetContext(
            sink=sink,
            decider=ScriptedDecider(outcomes=outcomes),
            sync_decider=ScriptedDecider(outcomes=sync_outcomes),
            failure_policy=policy,
        )

    return _make


@pytest.fixture
def reset_root_logging() -> Iterator[None]:
    """Undo `configure_logging` so handlers never outlive captured streams."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
