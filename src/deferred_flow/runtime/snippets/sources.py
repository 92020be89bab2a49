"""Fallible operations used by the snippets.

Every outcome is decided by an injected `Decider` at the moment the operation
starts.
"""

from __future__ import annotations

import asyncio

from ..compose.decision import Decider
from ..compose.deferred import Deferred
from ..compose.errors import OperationFailed


def one_or_error(decider: Decider) -> Deferred[int]:
    """Settle with `1` or `OperationFailed("failed")` on the next loop iteration."""

    deferred: Deferred[int] = Deferred()
    loop = asyncio.get_running_loop()
    if decider.succeeds():
        loop.call_soon(deferred.resolve, 1)
    else:
        loop.call_soon(deferred.reject, OperationFailed("failed"))
    return deferred


def sync_one_or_error(decider: Decider) -> int:
    if decider.succeeds():
        return 1
    raise OperationFailed("failed")


async def word_or_error(word: str, decider: Decider, *, failure_message: str) -> str:
    if decider.succeeds():
        return word
    raise OperationFailed(failure_message)


async def hello_world() -> str:
    return "hello world"
