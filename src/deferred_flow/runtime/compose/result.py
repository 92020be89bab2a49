"""Tagged success/failure values.

Each fallible step returns either `Ok` or `Err`. Chaining with `and_then`
stops at the first `Err`, which replaces nested try/except scopes.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, NoReturn, TypeAlias, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> Ok[U]:
        return Ok(fn(self.value))

    def and_then(self, fn: Callable[[T], Result[U]]) -> Result[U]:
        return fn(self.value)


@dataclass(frozen=True, slots=True)
class Err:
    error: BaseException

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> NoReturn:
        raise self.error

    def map(self, fn: Callable[[object], object]) -> Err:
        _ = fn
        return self

    def and_then(self, fn: Callable[[object], object]) -> Err:
        _ = fn
        return self


Result: TypeAlias = Union[Ok[T], Err]
