"""Runtime components for the snippets.

Provides:
- Settings loaded from .env
- Structured logging
- A small CLI surface
- The composition primitives and the snippets built on them
"""
