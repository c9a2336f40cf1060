"""Render the displayed value of a result through the dispatcher.

- No applicable visualizer: a placeholder, not an error
- Render failure: an error fragment in place of the value; the session and
  its navigation state are untouched
"""

import logging
from typing import Any, Optional

from markupsafe import Markup, escape

from replview.repl.sessions import EvaluationResult
from replview.ui import html
from replview.ui.context import RenderContext
from replview.ui.schemas import RenderedView, ResultSummary
from replview.visualizers.base import Visualizer
from replview.visualizers.registry import Dispatcher

logger = logging.getLogger(__name__)


class RenderError(RuntimeError):
    """A visualizer failed to render a value."""

    def __init__(self, label: str, cause: Exception):
        super().__init__(f"{label} visualizer failed: {type(cause).__name__}: {cause}")
        self.label = label
        self.cause = cause


_NO_VISUALIZER = html.template(
    '<div class="no-visualizer">No visualizer for a value of type {{ type_name }}</div>'
)
_RENDER_ERROR = html.template('<div class="render-error">{{ message }}</div>')


def render_value(visualizer: Visualizer, value: Any, ctx: RenderContext) -> Markup:
    """Render with one visualizer.

    A plain string result is escaped; only Markup is trusted as HTML.

    Raises:
        RenderError: If the visualizer raises.
    """
    try:
        return escape(visualizer.render(value, ctx))
    except Exception as e:
        logger.exception(f"Visualizer {visualizer.label!r} failed to render {type(value).__name__}")
        raise RenderError(visualizer.label, e) from e


def render_view(
    result: EvaluationResult,
    dispatcher: Dispatcher,
    ctx: RenderContext,
    selected: Optional[str] = None,
) -> RenderedView:
    """Render the current navigation frame of a result.

    ``selected`` picks an applicable visualizer by label; otherwise the
    best one renders. Actions from any previous render are dropped.
    """
    result.actions.clear()
    value = result.navigation.current
    applicable = dispatcher.applicable(value)

    view = RenderedView(
        result_id=result.result_id,
        value_type=type(value).__name__,
        tabs=[v.label for v in applicable],
        breadcrumbs=result.navigation.breadcrumbs(),
    )
    if not applicable:
        view.html = str(html.render(_NO_VISUALIZER, type_name=view.value_type))
        return view

    visualizer = next((v for v in applicable if v.label == selected), applicable[0])
    view.selected = visualizer.label
    try:
        view.html = str(render_value(visualizer, value, ctx))
    except RenderError as e:
        view.error = str(e)
        view.html = str(html.render(_RENDER_ERROR, message=view.error))
    return view


def summarize(result: EvaluationResult, dispatcher: Dispatcher) -> ResultSummary:
    navigation = result.navigation
    return ResultSummary(
        result_id=result.result_id,
        code=result.code,
        failed=result.failed,
        evaluated_at=result.evaluated_at,
        value_type=type(navigation.current).__name__,
        depth=navigation.depth,
        breadcrumbs=navigation.breadcrumbs(),
        trail=navigation.trail(),
        applicable=[v.label for v in dispatcher.applicable(navigation.current)],
    )
