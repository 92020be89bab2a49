from __future__ import annotations


class OperationFailed(RuntimeError):
    """A fallible operation did not produce a value.

    The message names the operation that failed, e.g. ``"f() failed"`` or
    ``"first call failed"``.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class IllegalTransitionError(ValueError):
    pass
