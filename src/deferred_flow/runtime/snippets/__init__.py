"""Demonstration snippets.

Each snippet is an independent coroutine function taking a `SnippetContext`.
"""

from .context import SnippetContext, report
from .registry import SNIPPETS, Snippet, UnknownSnippetError, get_snippet

__all__ = ["SNIPPETS", "Snippet", "SnippetContext", "UnknownSnippetError", "get_snippet", "report"]
