"""Deferred Flow.

Short, independent snippets that compose two fallible operations:
- deferred computations with an explicit state machine
- sequential and concurrent aggregation with first-failure-wins semantics
- a synchronous Result chain for contrast
"""

__version__ = "0.1.0"

from deferred_flow.runtime.config import DeferredFlowSettings

__all__ = ["__version__", "DeferredFlowSettings"]
