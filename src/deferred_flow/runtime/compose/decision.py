from __future__ import annotations

import random
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Protocol


class Decider(Protocol):
    """Decides whether the next fallible operation succeeds.

    Demonstration operations never consult a random source directly; they ask
    a decider, so runs can be made deterministic.
    """

    def succeeds(self) -> bool: ...


@dataclass(slots=True)
class RandomDecider(Decider):
    """Succeed when `random_source()` falls below `probability`."""

    probability: float
    random_source: Callable[[], float] = random.random

    def __post_init__(self) -> None:
        if not 0.0 <= self.probability <= 1.0:
            raise ValueError(f"probability must be within [0, 1], got {self.probability}")

    @classmethod
    def seeded(cls, probability: float, seed: int | None) -> RandomDecider:
        if seed is None:
            return cls(probability=probability)
        return cls(probability=probability, random_source=random.Random(seed).random)

    def succeeds(self) -> bool:
        return self.random_source() < self.probability


@dataclass(slots=True)
class ScriptedDecider(Decider):
    """Replay a fixed sequence of outcomes.

    Raises `LookupError` once the script is exhausted so that an unexpected
    extra call fails loudly instead of inventing an outcome.
    """

    outcomes: Iterable[bool]
    calls: int = field(default=0, init=False)
    _pending: list[bool] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._pending = list(self.outcomes)

    @classmethod
    def always(cls, outcome: bool, times: int = 64) -> ScriptedDecider:
        return cls(outcomes=[outcome] * times)

    def succeeds(self) -> bool:
        if not self._pending:
            raise LookupError(f"Scripted decider exhausted after {self.calls} calls")
        self.calls += 1
        return self._pending.pop(0)
