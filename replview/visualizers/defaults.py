"""Default visualizer set, in registration order.

Registration order is the tie-break between visualizers of equal
precedence, so the generic Result view comes first.
"""

from replview.config import AppConfig
from replview.visualizers.base import Visualizer
from replview.visualizers.chart import chart_visualizer
from replview.visualizers.file import file_visualizer
from replview.visualizers.result import result_visualizer
from replview.visualizers.table import table_visualizer
from replview.visualizers.throwable import throwable_visualizer

DEFAULT_FACTORIES = [
    ("result", result_visualizer),
    ("table", table_visualizer),
    ("file", file_visualizer),
    ("throwable", throwable_visualizer),
    ("chart", chart_visualizer),
]


def register_defaults(config: AppConfig) -> list[Visualizer]:
    """Build the enabled default visualizers."""
    visualizers = []
    for name, factory in DEFAULT_FACTORIES:
        visualizer = factory(config, config.visualizer_options(name))
        if visualizer is not None:
            visualizers.append(visualizer)
    return visualizers
