"""Table visualizer.

Shows three data shapes as a filterable, paged table:
- a mapping: Key and Value columns, a row click descends into the value
- a sequence of mappings: one column per key, a row click descends into the row
- a sequence of lists/tuples (CSV-like): the first row holds column labels

Shape checks look at the first ``sample_size`` elements only, so a sequence
whose head matches but whose tail does not is still accepted.
"""

from collections.abc import Mapping, Sequence
from itertools import islice
from typing import Any, Optional

from markupsafe import Markup

from replview.config import AppConfig, VisualizerOptions
from replview.ui.context import RenderContext
from replview.ui.table import Column, TableData, render_table
from replview.visualizers.base import GENERIC, Visualizer


def is_sequence(value: Any) -> bool:
    """Ordered, indexable collection that is not text."""
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def sample(items: Any, sample_size: int) -> list:
    return list(islice(items, sample_size))


def is_sequence_of_mappings(value: Any, sample_size: int) -> bool:
    return is_sequence(value) and all(
        isinstance(item, Mapping) for item in sample(value, sample_size)
    )


def is_row_sequence(value: Any, sample_size: int) -> bool:
    return is_sequence(value) and all(
        isinstance(item, (list, tuple)) for item in sample(value, sample_size)
    )


def _map_table(data: Mapping) -> TableData:
    return TableData(
        columns=[
            Column("Key", lambda row: row[0]),
            Column("Value", lambda row: row[1]),
        ],
        rows=list(data.items()),
        row_target=lambda _position, row: (row[0], row[1]),
    )


def _mappings_table(data: Sequence) -> TableData:
    keys = {}
    for item in data:
        if isinstance(item, Mapping):
            for key in item:
                keys.setdefault(str(key), key)
    columns = [
        Column(label, lambda row, key=key: row.get(key) if isinstance(row, Mapping) else None)
        for label, key in sorted(keys.items())
    ]
    return TableData(
        columns=columns,
        rows=list(data),
        row_target=lambda position, row: (position, row),
    )


def _rows_table(data: Sequence) -> TableData:
    rows = list(data)
    header = list(rows[0]) if rows else []
    columns = [
        Column(str(label), lambda row, i=i: row[i])
        for i, label in enumerate(header)
    ]
    return TableData(columns=columns, rows=rows[1:])


def table_data(value: Any, sample_size: int) -> Optional[TableData]:
    """Build table data for a supported value, None otherwise."""
    if isinstance(value, Mapping):
        return _map_table(value)
    if is_sequence_of_mappings(value, sample_size):
        return _mappings_table(value)
    if is_row_sequence(value, sample_size):
        return _rows_table(value)
    return None


class TableVisualizer(Visualizer):
    def __init__(self, sample_size: int):
        self.sample_size = sample_size

    @property
    def label(self) -> str:
        return "Table"

    def supports(self, value: Any) -> bool:
        return (
            isinstance(value, Mapping)
            or is_sequence_of_mappings(value, self.sample_size)
            or is_row_sequence(value, self.sample_size)
        )

    def precedence(self) -> int:
        return GENERIC

    def render(self, value: Any, ctx: RenderContext) -> Markup:
        return render_table(table_data(value, self.sample_size), ctx)


def table_visualizer(config: AppConfig, options: VisualizerOptions) -> Optional[TableVisualizer]:
    if not options.enabled:
        return None
    return TableVisualizer(sample_size=options.option("sample_size", config.sample_size))
