from __future__ import annotations


class InvalidArgument(ValueError):
    """Raised when planner input is malformed (dangling ids, non-finite budgets, ...)."""
