from __future__ import annotations

from dataclasses import dataclass

from ..compose.aggregator import ConcurrentFailurePolicy
from ..compose.decision import Decider
from ..compose.result import Ok, Result
from ..sink import LineSink, format_error, format_value


@dataclass(frozen=True, slots=True)
class SnippetContext:
    """Everything a snippet needs, passed explicitly.

    `decider` drives deferred operations, `sync_decider` the synchronous ones.
    """

    sink: LineSink
    decider: Decider
    sync_decider: Decider
    failure_policy: ConcurrentFailurePolicy = ConcurrentFailurePolicy.WAIT_ALL


def report(sink: LineSink, result: Result[object]) -> None:
    """Print a success value to the output stream, a failure to the error stream."""

    if isinstance(result, Ok):
        sink.write_line(format_value(result.value))
    else:
        sink.write_error(format_error(result.error))
