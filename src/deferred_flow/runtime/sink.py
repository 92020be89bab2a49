"""Line-oriented output for demonstrations.

Snippets only need a "write line" capability. `ConsoleSink` writes to
stdout/stderr; `RecordingSink` keeps lines in memory for inspection.
"""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from typing import Any, Protocol, TextIO


class LineSink(Protocol):
    def write_line(self, text: str) -> None: ...

    def write_error(self, text: str) -> None: ...


def format_value(value: Any) -> str:
    """Render a value the way it is printed by the snippets.

    Strings are written verbatim; everything else as compact JSON, so a pair
    renders as `["hello","world"]` and a total as `2`.
    """

    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def format_error(error: BaseException) -> str:
    return str(error) or type(error).__name__


@dataclass(slots=True)
class ConsoleSink(LineSink):
    stdout: TextIO = field(default_factory=lambda: sys.stdout)
    stderr: TextIO = field(default_factory=lambda: sys.stderr)

    def write_line(self, text: str) -> None:
        print(text, file=self.stdout)

    def write_error(self, text: str) -> None:
        print(text, file=self.stderr)


@dataclass(slots=True)
class RecordingSink(LineSink):
    lines: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    # Both streams interleaved, tagged by stream name.
    events: list[tuple[str, str]] = field(default_factory=list)

    def write_line(self, text: str) -> None:
        self.lines.append(text)
        self.events.append(("out", text))

    def write_error(self, text: str) -> None:
        self.errors.append(text)
        self.events.append(("err", text))
