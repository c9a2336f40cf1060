"""Table drawing: columns, substring filtering and pagination.

Visualizers describe a table as columns plus row objects; this module turns
it into HTML. Rows keep their position in the full data so a click on a
filtered or paged row still navigates to the right element.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional

from markupsafe import Markup

from replview.ui import html
from replview.ui.context import VISUALIZER_PARAM, RenderContext

FILTER_PARAM = "filter"
PAGE_PARAM = "page"
MAX_CELL_CHARS = 200


@dataclass(frozen=True)
class Column:
    label: str
    accessor: Callable[[Any], Any]


@dataclass
class TableData:
    """Columns and rows of a table.

    ``row_target`` maps (position, row) to the (label, value) to descend to
    when the row is clicked. None makes rows inert.
    """

    columns: list[Column]
    rows: list[Any]
    row_target: Optional[Callable[[int, Any], tuple[Any, Any]]] = None


def cell_text(value: Any) -> str:
    """Display text for a cell: strings as-is, anything else as repr."""
    text = value if isinstance(value, str) else repr(value)
    if len(text) > MAX_CELL_CHARS:
        text = text[: MAX_CELL_CHARS - 1] + "…"
    return text


def _cells(table: TableData, row: Any) -> list[str]:
    cells = []
    for column in table.columns:
        try:
            cells.append(cell_text(column.accessor(row)))
        except (KeyError, IndexError, TypeError):
            cells.append("")
    return cells


def filter_rows(table: TableData, text: Optional[str]) -> list[tuple[int, list[str]]]:
    """(position, cell texts) of rows with a cell containing ``text``.

    Matching is case-insensitive. An empty filter keeps every row.
    """
    rows = [(position, _cells(table, row)) for position, row in enumerate(table.rows)]
    if not text:
        return rows
    needle = text.lower()
    return [(p, cells) for p, cells in rows if any(needle in c.lower() for c in cells)]


def paginate(rows: list, page: int, page_size: int) -> tuple[list, int, int]:
    """Slice rows for a 1-based page. Returns (rows, page, page_count)."""
    page_count = max(1, -(-len(rows) // page_size))
    page = min(max(page, 1), page_count)
    start = (page - 1) * page_size
    return rows[start:start + page_size], page, page_count


_TABLE = html.template("""\
<div class="table-view">
  <form class="table-filter" method="get" action="{{ form_action }}">
    {% if selected %}<input type="hidden" name="{{ visualizer_param }}" value="{{ selected }}">{% endif %}
    <input type="search" name="{{ filter_param }}" value="{{ filter_text }}" placeholder="Filter rows">
  </form>
  <table class="table">
    <thead><tr>{% for label in labels %}<th>{{ label }}</th>{% endfor %}</tr></thead>
    <tbody>
    {% for url, cells in rows %}
      <tr{% if url %} class="clickable"{% endif %}>
      {% for cell in cells %}
        <td>{% if url %}<a href="{{ url }}">{{ cell }}</a>{% else %}{{ cell }}{% endif %}</td>
      {% endfor %}
      </tr>
    {% endfor %}
    </tbody>
  </table>
  <div class="pager">
    {% if prev_url %}<a href="{{ prev_url }}">&laquo; Prev</a>{% endif %}
    <span>Page {{ page }} of {{ page_count }} ({{ matched }} rows)</span>
    {% if next_url %}<a href="{{ next_url }}">Next &raquo;</a>{% endif %}
  </div>
</div>
""")


def render_table(table: TableData, ctx: RenderContext) -> Markup:
    """Render a filtered, paged table using the request's query parameters."""
    filter_text = ctx.param(FILTER_PARAM, "") or ""
    try:
        page = int(ctx.param(PAGE_PARAM, "1") or 1)
    except ValueError:
        page = 1

    matched = filter_rows(table, filter_text)
    visible, page, page_count = paginate(matched, page, ctx.page_size)

    rows = []
    for position, cells in visible:
        url = None
        if table.row_target is not None:
            label, value = table.row_target(position, table.rows[position])
            url = ctx.descend_url(label, value)
        rows.append((url, cells))

    return html.render(
        _TABLE,
        form_action=ctx.url("/"),
        visualizer_param=VISUALIZER_PARAM,
        selected=ctx.param(VISUALIZER_PARAM),
        filter_param=FILTER_PARAM,
        filter_text=filter_text,
        labels=[c.label for c in table.columns],
        rows=rows,
        page=page,
        page_count=page_count,
        matched=len(matched),
        prev_url=ctx.view_url(page=page - 1) if page > 1 else None,
        next_url=ctx.view_url(page=page + 1) if page < page_count else None,
    )
