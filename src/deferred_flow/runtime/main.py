"""CLI entrypoint for running the snippets."""

from __future__ import annotations

import argparse
import logging
import sys

from pydantic import ValidationError

from deferred_flow import __version__
from deferred_flow.runtime.compose.aggregator import ConcurrentFailurePolicy
from deferred_flow.runtime.config import DeferredFlowSettings
from deferred_flow.runtime.logging import configure_logging
from deferred_flow.runtime.runner import build_context, run_snippet
from deferred_flow.runtime.sink import ConsoleSink
from deferred_flow.runtime.snippets.registry import (
    SNIPPETS,
    Snippet,
    UnknownSnippetError,
    get_snippet,
)

logger = logging.getLogger(__name__)


def _probability(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from None
    if not 0.0 <= parsed <= 1.0:
        raise argparse.ArgumentTypeError(f"must be within [0, 1]: {value}")
    return parsed


def _add_run_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed the random source so the run can be replayed",
    )
    parser.add_argument(
        "--success-probability",
        type=_probability,
        default=None,
        help="Chance that a deferred operation succeeds (default from settings: 0.7)",
    )
    parser.add_argument(
        "--sync-success-probability",
        type=_probability,
        default=None,
        help="Chance that a synchronous operation succeeds (default from settings: 0.5)",
    )
    parser.add_argument(
        "--failure-policy",
        choices=[policy.value for policy in ConcurrentFailurePolicy],
        default=None,
        help="How concurrent composition reports failures",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="deferred-flow",
        description="Run snippets that compose two fallible deferred operations",
    )
    parser.add_argument("--version", action="version", version=f"deferred-flow {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List available snippets")

    run = subparsers.add_parser("run", help="Run one snippet")
    run.add_argument("name", help="Snippet name (see 'list')")
    _add_run_options(run)

    run_all = subparsers.add_parser("run-all", help="Run every snippet in order")
    _add_run_options(run_all)

    return parser


def _apply_overrides(
    settings: DeferredFlowSettings, args: argparse.Namespace
) -> DeferredFlowSettings:
    update: dict[str, object] = {}
    if args.seed is not None:
        update["seed"] = args.seed
    if args.success_probability is not None:
        update["success_probability"] = args.success_probability
    if args.sync_success_probability is not None:
        update["sync_success_probability"] = args.sync_success_probability
    if args.failure_policy is not None:
        update["failure_policy"] = ConcurrentFailurePolicy(args.failure_policy)
    return settings.model_copy(update=update) if update else settings


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "list":
        width = max(len(name) for name in SNIPPETS) + 2
        for snippet in SNIPPETS.values():
            print(f"{snippet.name:<{width}}{snippet.summary}")
        return 0

    try:
        settings = DeferredFlowSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    settings = _apply_overrides(settings, args)
    configure_logging(settings.log_level)

    if args.command == "run":
        try:
            selected: list[Snippet] = [get_snippet(args.name)]
        except UnknownSnippetError as e:
            print(str(e), file=sys.stderr)
            return 2
    else:
        selected = list(SNIPPETS.values())

    sink = ConsoleSink()
    ctx = build_context(settings, sink)
    status = 0
    for snippet in selected:
        if args.command == "run-all":
            sink.write_line(f"== {snippet.name}")
        try:
            run_snippet(snippet, ctx)
        except Exception as e:
            logger.exception("Snippet raised", extra={"snippet": snippet.name})
            print(f"{type(e).__name__}: {e}", file=sys.stderr)
            status = 1
    return status
