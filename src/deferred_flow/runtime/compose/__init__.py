"""Composition primitives for deferred computations.

This package introduces first-class types for:
- Deferred computations with an explicit pending/fulfilled/rejected state
- Tagged Ok/Err results that short-circuit on the first failure
- Injected success/failure decisions
- Sequential and concurrent aggregation of two fallible operations
"""

from .aggregator import (
    AggregationState,
    AggregationTracker,
    ConcurrentFailurePolicy,
    attempt,
    run_concurrent,
    run_nested_sync,
    run_sequential,
)
from .deferred import Deferred, DeferredState, ensure_deferred
from .decision import Decider, RandomDecider, ScriptedDecider
from .errors import IllegalTransitionError, OperationFailed
from .result import Err, Ok, Result

__all__ = [
    "AggregationState",
    "AggregationTracker",
    "ConcurrentFailurePolicy",
    "Decider",
    "Deferred",
    "DeferredState",
    "Err",
    "IllegalTransitionError",
    "Ok",
    "OperationFailed",
    "RandomDecider",
    "Result",
    "ScriptedDecider",
    "attempt",
    "ensure_deferred",
    "run_concurrent",
    "run_nested_sync",
    "run_sequential",
]
