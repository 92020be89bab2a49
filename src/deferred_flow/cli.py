"""Console script entrypoint.

The CLI is implemented in `deferred_flow.runtime.main`.
"""

from __future__ import annotations

from deferred_flow.runtime.main import main

__all__ = ["main"]


if __name__ == "__main__":
    raise SystemExit(main())
