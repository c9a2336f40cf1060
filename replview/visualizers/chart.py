"""Bar chart visualizer for mappings of numbers."""

from collections.abc import Mapping
from itertools import islice
from numbers import Real
from typing import Any, Optional

from markupsafe import Markup

from replview.config import AppConfig, VisualizerOptions
from replview.ui import html
from replview.ui.context import RenderContext
from replview.visualizers.base import GENERIC, Visualizer

BAR_HEIGHT = 22
BAR_GAP = 6
LABEL_WIDTH = 160
PLOT_WIDTH = 480

_CHART = html.template("""\
<div class="chart">
  <svg xmlns="http://www.w3.org/2000/svg" width="{{ width }}" height="{{ height }}" role="img">
  {% for bar in bars %}
    <g transform="translate(0,{{ bar.y }})">
      <text x="{{ label_width - 6 }}" y="{{ bar_height * 0.7 }}" text-anchor="end">{{ bar.label }}</text>
      <rect x="{{ label_width }}" width="{{ bar.width }}" height="{{ bar_height }}" class="{{ 'bar negative' if bar.negative else 'bar' }}"></rect>
      <text x="{{ label_width + bar.width + 4 }}" y="{{ bar_height * 0.7 }}">{{ bar.value }}</text>
    </g>
  {% endfor %}
  </svg>
</div>
""")


def is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


class ChartVisualizer(Visualizer):
    def __init__(self, sample_size: int):
        self.sample_size = sample_size

    @property
    def label(self) -> str:
        return "Chart"

    def supports(self, value: Any) -> bool:
        return isinstance(value, Mapping) and all(
            is_number(v) for v in islice(value.values(), self.sample_size)
        )

    def precedence(self) -> int:
        return GENERIC

    def render(self, value: Any, ctx: RenderContext) -> Markup:
        entries = [(k, v) for k, v in islice(value.items(), ctx.max_items) if is_number(v)]
        largest = max((abs(float(v)) for _, v in entries), default=0.0) or 1.0

        bars = [
            {
                "label": str(key),
                "value": number,
                "y": i * (BAR_HEIGHT + BAR_GAP),
                "width": round(abs(float(number)) / largest * PLOT_WIDTH, 1),
                "negative": float(number) < 0,
            }
            for i, (key, number) in enumerate(entries)
        ]
        return html.render(
            _CHART,
            bars=bars,
            bar_height=BAR_HEIGHT,
            label_width=LABEL_WIDTH,
            width=LABEL_WIDTH + PLOT_WIDTH + 80,
            height=max(len(bars), 1) * (BAR_HEIGHT + BAR_GAP),
        )


def chart_visualizer(config: AppConfig, options: VisualizerOptions) -> Optional[ChartVisualizer]:
    if not options.enabled:
        return None
    return ChartVisualizer(sample_size=options.option("sample_size", config.sample_size))
