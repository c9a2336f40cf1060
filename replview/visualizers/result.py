"""Generic structural visualizer, applicable to every value.

Mappings render as key/value tables, sequences and sets as item lists,
everything else as its repr. Keys and items link to a drill-down that
pushes one navigation frame per nesting level on the way to them.
"""

from collections.abc import Mapping, Set
from itertools import islice
from typing import Any, Optional

from markupsafe import Markup

from replview.config import AppConfig, VisualizerOptions
from replview.ui.context import RenderContext
from replview.visualizers.base import GENERIC, Visualizer
from replview.visualizers.table import is_sequence

MAX_DEPTH = 3
MAX_SCALAR_CHARS = 500


def _is_container(value: Any) -> bool:
    return isinstance(value, (Mapping, Set)) or is_sequence(value)


def _summary(value: Any) -> str:
    kind = "keys" if isinstance(value, Mapping) else "items"
    return f"{type(value).__name__} ({len(value)} {kind})"


def _scalar(value: Any) -> Markup:
    text = repr(value)
    if len(text) > MAX_SCALAR_CHARS:
        text = text[: MAX_SCALAR_CHARS - 1] + "…"
    return Markup('<span class="scalar">{}</span>').format(text)


class ResultVisualizer(Visualizer):
    def __init__(self, max_depth: int = MAX_DEPTH):
        self.max_depth = max_depth

    @property
    def label(self) -> str:
        return "Result"

    def supports(self, value: Any) -> bool:
        return True

    def precedence(self) -> int:
        return GENERIC

    def render(self, value: Any, ctx: RenderContext) -> Markup:
        return Markup('<div class="result">{}</div>').format(self._node(value, ctx, (), 0))

    def _node(self, value: Any, ctx: RenderContext, path: tuple, depth: int) -> Markup:
        if not _is_container(value):
            return _scalar(value)
        if depth >= self.max_depth:
            return Markup('<span class="summary">{}</span>').format(_summary(value))

        if isinstance(value, Mapping):
            entries = list(islice(value.items(), ctx.max_items))
        else:
            entries = list(islice(enumerate(value), ctx.max_items))
        more = len(value) - len(entries)

        parts = []
        if isinstance(value, Mapping):
            for key, item in entries:
                steps = path + ((key, item),)
                parts.append(
                    Markup('<tr><td><a href="{}">{}</a></td><td>{}</td></tr>').format(
                        ctx.descend_path_url(steps),
                        key if isinstance(key, str) else repr(key),
                        self._node(item, ctx, steps, depth + 1),
                    )
                )
            body = Markup('<table class="map">{}</table>').format(Markup("").join(parts))
        else:
            for index, item in entries:
                steps = path + ((index, item),)
                url = ctx.descend_path_url(steps)
                if _is_container(item):
                    parts.append(
                        Markup('<li><a class="index" href="{}">{}</a> {}</li>').format(
                            url, index, self._node(item, ctx, steps, depth + 1)
                        )
                    )
                else:
                    parts.append(
                        Markup('<li><a href="{}">{}</a></li>').format(url, _scalar(item))
                    )
            tag = "ul" if isinstance(value, Set) else "ol"
            body = Markup('<{0} class="seq" start="0">{1}</{0}>').format(
                Markup(tag), Markup("").join(parts)
            )

        if more > 0:
            body += Markup('<div class="more">… {} more</div>').format(more)
        return Markup('<div class="container"><span class="type">{}</span>{}</div>').format(
            type(value).__name__, body
        )


def result_visualizer(config: AppConfig, options: VisualizerOptions) -> Optional[ResultVisualizer]:
    if not options.enabled:
        return None
    return ResultVisualizer(max_depth=options.option("max_depth", MAX_DEPTH))
