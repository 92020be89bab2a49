"""Unit tests for injected success/failure decisions."""

from __future__ import annotations

import pytest

from deferred_flow.runtime.compose.decision import RandomDecider, ScriptedDecider


def test_random_decider_compares_against_probability() -> None:
    values = iter([0.1, 0.69, 0.7, 0.95])
    decider = RandomDecider(probability=0.7, random_source=lambda: next(values))
    assert [decider.succeeds() for _ in range(4)] == [True, True, False, False]


def test_random_decider_rejects_out_of_range_probability() -> None:
    with pytest.raises(ValueError):
        RandomDecider(probability=1.5)


def test_seeded_decider_replays() -> None:
    first = RandomDecider.seeded(0.5, seed=42)
    second = RandomDecider.seeded(0.5, seed=42)
    assert [first.succeeds() for _ in range(20)] == [second.succeeds() for _ in range(20)]


def test_scripted_decider_fails_loudly_when_exhausted() -> None:
    decider = ScriptedDecider(outcomes=[True, False])
    assert decider.succeeds() is True
    assert decider.succeeds() is False
    assert decider.calls == 2
    with pytest.raises(LookupError):
        decider.succeeds()


def test_scripted_decider_always() -> None:
    decider = ScriptedDecider.always(False, times=3)
    assert [decider.succeeds() for _ in range(3)] == [False, False, False]
