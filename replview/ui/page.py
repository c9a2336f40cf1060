"""Full HTML page: evaluation form, breadcrumbs, visualizer tabs and view."""

from typing import Optional
from urllib.parse import urlencode

from markupsafe import Markup

from replview import __version__
from replview.repl.sessions import ReplSession
from replview.ui import html
from replview.ui.context import VISUALIZER_PARAM, RenderContext
from replview.ui.view import render_view
from replview.visualizers.registry import Dispatcher

ROOT_LABEL = "root"

_PAGE = html.template("""\
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>replview</title>
  <style>
    body { font-family: sans-serif; margin: 1.5em; }
    textarea { width: 100%; font-family: monospace; }
    .breadcrumbs ul { list-style: none; padding: 0; display: flex; gap: .5em; }
    .breadcrumbs li + li:before { content: "/"; margin-right: .5em; color: #888; }
    .tabs { display: flex; gap: .5em; margin: .8em 0; }
    .tab { padding: .2em .8em; border: 1px solid #ccc; border-radius: 4px; text-decoration: none; }
    .tab.active { background: #333; color: #fff; }
    table.table, table.map { border-collapse: collapse; }
    table.table td, table.table th, table.map td { border: 1px solid #ddd; padding: .2em .5em; vertical-align: top; }
    .render-error { color: #b00; white-space: pre-wrap; }
    .bar { fill: #4a7ebb; } .bar.negative { fill: #bb4a4a; }
    .type { color: #888; font-size: .8em; margin-right: .4em; }
  </style>
</head>
<body>
  <form method="post" action="{{ eval_url }}">
    <textarea name="code" rows="4" placeholder="Python code">{{ code }}</textarea>
    <button type="submit">Evaluate</button>
  </form>
  <form method="post" action="{{ clear_url }}"><button type="submit">Clear</button></form>
  {% if view %}
  <div id="evaluation">
    {% if crumbs %}
    <div class="breadcrumbs">
      <ul>
      {% for url, label in crumbs %}<li><a href="{{ url }}">{{ label }}</a></li>{% endfor %}
      </ul>
    </div>
    {% endif %}
    <div class="tabs">
    {% for url, label in tabs %}
      <a class="tab{% if label == view.selected %} active{% endif %}" href="{{ url }}">{{ label }}</a>
    {% endfor %}
    </div>
    <div class="view">{{ fragment }}</div>
  </div>
  {% endif %}
  <footer><small>replview {{ version }}</small></footer>
</body>
</html>
""")


def render_page(
    session: ReplSession,
    dispatcher: Dispatcher,
    ctx: Optional[RenderContext],
    prefix: str = "",
    selected: Optional[str] = None,
) -> str:
    """Render the page for a session. ``ctx`` is None when there is no result."""
    result = session.current
    view = None
    crumbs = []
    tabs = []
    if result is not None and ctx is not None:
        view = render_view(result, dispatcher, ctx, selected)
        if view.breadcrumbs:
            crumbs = [(ctx.breadcrumb_url(0), ROOT_LABEL)]
            crumbs += [
                (ctx.breadcrumb_url(i), label)
                for i, label in enumerate(view.breadcrumbs, start=1)
            ]
        tabs = [
            (ctx.url("/") + "?" + urlencode({VISUALIZER_PARAM: label}), label)
            for label in view.tabs
        ]

    return str(
        html.render(
            _PAGE,
            eval_url=f"{prefix}/eval",
            clear_url=f"{prefix}/clear",
            code=result.code if result else "",
            view=view,
            crumbs=crumbs,
            tabs=tabs,
            fragment=Markup(view.html) if view else "",
            version=__version__,
        )
    )
