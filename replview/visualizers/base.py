"""Visualizer contract."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from fastapi import APIRouter
from markupsafe import Markup

from replview.ui.context import RenderContext

GENERIC = 0
"""Precedence of a generic visualizer that can show many kinds of values."""

SPECIFIC = 100
"""Precedence of a visualizer made for one type, shown by default."""


class Visualizer(ABC):
    """A rendering strategy for a class of values.

    ``label``, ``supports`` and ``precedence`` are called while building the
    UI. They must be cheap, never block on I/O and have no side effects.
    ``render`` may register actions and download tokens through the context.
    """

    @property
    @abstractmethod
    def label(self) -> str:
        """Name shown in the UI tab for this visualizer."""

    @abstractmethod
    def supports(self, value: Any) -> bool:
        """Check if this visualizer can show the value."""

    def precedence(self) -> int:
        """Bigger wins. GENERIC (0) for fallbacks, SPECIFIC (100) for a type."""
        return GENERIC

    @abstractmethod
    def render(self, value: Any, ctx: RenderContext) -> Markup:
        """Render the value as an HTML fragment.

        Return Markup. A plain str is treated as text and escaped.
        """

    def side_channel_handler(self) -> Optional[APIRouter]:
        """Optional HTTP routes, mounted under the app prefix."""
        return None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.label!r}>"
