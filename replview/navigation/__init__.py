"""Drill-down navigation over a result value.

Each evaluated result owns one NavigationStack. Descending pushes a frame,
clicking a breadcrumb truncates back to an earlier frame.
"""

from .stack import NavigationError, NavigationFrame, NavigationStack

__all__ = ["NavigationError", "NavigationFrame", "NavigationStack"]
