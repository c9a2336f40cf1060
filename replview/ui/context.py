"""Render context passed explicitly to every visualizer render.

The context ties a render to the result that owns it. Click targets are
registered as actions on that result and exposed as URLs, so a click always
lands on the right navigation stack.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Optional
from urllib.parse import quote, urlencode

from replview.downloads import DownloadStore, get_download_store
from replview.repl.sessions import EvaluationResult

VISUALIZER_PARAM = "v"


@dataclass
class RenderContext:
    """Per-render state: owning result, URL prefix and request parameters."""

    result: EvaluationResult
    prefix: str = ""
    params: Mapping[str, str] = field(default_factory=dict)
    downloads: Optional[DownloadStore] = None
    sample_size: int = 10
    max_items: int = 100
    page_size: int = 20

    def __post_init__(self):
        if self.downloads is None:
            self.downloads = get_download_store()

    @property
    def navigation(self):
        return self.result.navigation

    def param(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.params.get(name, default)

    def url(self, path: str) -> str:
        """Absolute URL for an app path, honouring the prefix."""
        return f"{self.prefix}{path}"

    def view_url(self, **overrides: Any) -> str:
        """URL of the page with some query parameters replaced.

        A None override removes the parameter.
        """
        params = dict(self.params)
        for key, value in overrides.items():
            if value is None:
                params.pop(key, None)
            else:
                params[key] = str(value)
        query = urlencode(params)
        return self.url("/") + (f"?{query}" if query else "")

    def action_url(self, action: Callable[[], Any], keep_view: bool = True) -> str:
        """Register a click action on the owning result and return its URL."""
        action_id = self.result.actions.register(action)
        url = self.url(
            f"/results/{quote(self.result.result_id)}/actions/{action_id}"
        )
        selected = self.params.get(VISUALIZER_PARAM)
        if keep_view and selected:
            url += "?" + urlencode({VISUALIZER_PARAM: selected})
        return url

    def descend_url(self, label: Any, value: Any) -> str:
        """URL that pushes one navigation frame when followed."""
        navigation = self.result.navigation
        return self.action_url(lambda: navigation.descend(label, value), keep_view=False)

    def descend_path_url(self, steps: Iterable[tuple[Any, Any]]) -> str:
        """URL that pushes one frame per (label, value) step when followed."""
        navigation = self.result.navigation
        steps = list(steps)
        return self.action_url(lambda: navigation.descend_path(steps), keep_view=False)

    def breadcrumb_url(self, index: int) -> str:
        return self.url(f"/results/{quote(self.result.result_id)}/breadcrumbs/{index}")
