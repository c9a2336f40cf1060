from __future__ import annotations

import html
import re
from typing import Any

import pytest
from fastapi.testclient import TestClient
from markupsafe import Markup

from replview.api.main import create_app
from replview.config import AppConfig
from replview.repl.sessions import EvaluationResult
from replview.ui.context import RenderContext
from replview.visualizers.base import Visualizer


class StubVisualizer(Visualizer):
    """Configurable visualizer for dispatch tests."""

    def __init__(
        self,
        label: str,
        precedence: int = 0,
        supports: Any = True,
        fail_supports: bool = False,
        fail_precedence: bool = False,
        fail_render: bool = False,
    ) -> None:
        self._label = label
        self._precedence = precedence
        self._supports = supports
        self.fail_supports = fail_supports
        self.fail_precedence = fail_precedence
        self.fail_render = fail_render

    @property
    def label(self) -> str:
        return self._label

    def supports(self, value: Any) -> bool:
        if self.fail_supports:
            raise RuntimeError(f"{self._label} supports exploded")
        if callable(self._supports):
            return self._supports(value)
        return self._supports

    def precedence(self) -> int:
        if self.fail_precedence:
            raise RuntimeError(f"{self._label} precedence exploded")
        return self._precedence

    def render(self, value: Any, ctx: RenderContext) -> Markup:
        if self.fail_render:
            raise ValueError("cannot draw this")
        return Markup("<p>{}: {}</p>").format(self._label, repr(value))


def make_context(value: Any, **kwargs: Any) -> RenderContext:
    return RenderContext(result=EvaluationResult(code="value", value=value), **kwargs)


def link_href(page: str, text: str) -> str:
    """href of the first link whose inner HTML is exactly ``text``."""
    match = re.search(r'<a[^>]*href="([^"]+)"[^>]*>' + re.escape(text) + "</a>", page)
    assert match, f"no link {text!r} in page"
    return html.unescape(match.group(1))


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(download_ttl_seconds=None, session_ttl_seconds=None)


@pytest.fixture
def client(config: AppConfig):
    with TestClient(create_app(config)) as c:
        yield c
