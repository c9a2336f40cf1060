"""Exception visualizer: type, message, cause, attributes and traceback."""

import traceback
from typing import Any, Optional

from markupsafe import Markup

from replview.config import AppConfig, VisualizerOptions
from replview.ui import html
from replview.ui.context import RenderContext
from replview.visualizers.base import SPECIFIC, Visualizer

_THROWABLE = html.template("""\
<div class="throwable">
  <div><b>Type: </b>{{ type_label }}</div>
  <div><b>Message: </b>{{ message }}</div>
  {% if cause_label %}
  <div><b>Cause: </b><a href="{{ cause_url }}">{{ cause_label }}</a></div>
  {% endif %}
  {% if data %}
  <div><b>Data </b>
    <table class="map">
    {% for key, value in data %}<tr><td>{{ key }}</td><td>{{ value }}</td></tr>{% endfor %}
    </table>
  </div>
  {% endif %}
  <div><b>Stack trace </b>
    <details>
      <summary>{{ trace|length }} stack trace lines</summary>
      <ul>
      {% for frame in trace %}
        <li>{{ frame.name }} ({{ frame.filename }}:{{ frame.lineno }}){% if frame.line %} <code>{{ frame.line }}</code>{% endif %}</li>
      {% endfor %}
      </ul>
    </details>
  </div>
</div>
""")


def type_name(ex: BaseException) -> str:
    cls = type(ex)
    if cls.__module__ in ("builtins", "__main__", "__repl__"):
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def cause_of(ex: BaseException) -> Optional[BaseException]:
    """Explicit cause, else the implicit context unless it was suppressed."""
    if ex.__cause__ is not None:
        return ex.__cause__
    if not ex.__suppress_context__:
        return ex.__context__
    return None


class ThrowableVisualizer(Visualizer):
    @property
    def label(self) -> str:
        return "Throwable"

    def supports(self, value: Any) -> bool:
        return isinstance(value, BaseException)

    def precedence(self) -> int:
        return SPECIFIC

    def render(self, value: Any, ctx: RenderContext) -> Markup:
        cause = cause_of(value)
        cause_label = None
        cause_url = None
        if cause is not None:
            cause_label = f"{type_name(cause)}: {cause}"
            cause_url = ctx.descend_url(type_name(cause), cause)

        data = [(key, repr(attr)) for key, attr in vars(value).items()]
        return html.render(
            _THROWABLE,
            type_label=type_name(value),
            message=str(value),
            cause_label=cause_label,
            cause_url=cause_url,
            data=data,
            trace=traceback.extract_tb(value.__traceback__),
        )


def throwable_visualizer(config: AppConfig, options: VisualizerOptions) -> Optional[ThrowableVisualizer]:
    if not options.enabled:
        return None
    return ThrowableVisualizer()
