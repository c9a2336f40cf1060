from __future__ import annotations

import logging
import sys
import types

import pytest
from conftest import StubVisualizer

from replview.config import AppConfig, ConfigError, VisualizerOptions
from replview.visualizers.registry import Dispatcher, VisualizerRegistry, build_registry


def _dispatcher(*visualizers: StubVisualizer) -> Dispatcher:
    return Dispatcher(VisualizerRegistry(visualizers))


def test_best_returns_a_supporting_visualizer() -> None:
    only_ints = StubVisualizer("ints", precedence=100, supports=lambda v: isinstance(v, int))
    anything = StubVisualizer("anything")
    dispatcher = _dispatcher(only_ints, anything)

    assert dispatcher.best(5) is only_ints
    assert dispatcher.best("five") is anything


def test_best_is_none_when_nothing_applies() -> None:
    dispatcher = _dispatcher(StubVisualizer("never", supports=False))
    assert dispatcher.best(object()) is None
    assert dispatcher.applicable(object()) == []


def test_equal_precedence_prefers_first_registered() -> None:
    first = StubVisualizer("first", precedence=0)
    second = StubVisualizer("second", precedence=0)
    dispatcher = _dispatcher(first, second)

    for _ in range(5):
        assert dispatcher.best({"k": 1}) is first


def test_applicable_orders_by_precedence_then_registration() -> None:
    a = StubVisualizer("a", precedence=0)
    b = StubVisualizer("b", precedence=100)
    c = StubVisualizer("c", precedence=0)
    d = StubVisualizer("d", precedence=100)
    e = StubVisualizer("e", precedence=50, supports=False)

    assert _dispatcher(a, b, c, d, e).applicable(None) == [b, d, a, c]


def test_failing_predicates_are_excluded_and_logged(caplog: pytest.LogCaptureFixture) -> None:
    broken_supports = StubVisualizer("broken-supports", precedence=500, fail_supports=True)
    broken_precedence = StubVisualizer("broken-precedence", fail_precedence=True)
    healthy = StubVisualizer("healthy")

    with caplog.at_level(logging.WARNING):
        applicable = _dispatcher(broken_supports, broken_precedence, healthy).applicable([1, 2])

    assert applicable == [healthy]
    assert "broken-supports" in caplog.text
    assert "broken-precedence" in caplog.text


def test_default_registry_order() -> None:
    registry = build_registry(AppConfig())
    assert registry.labels() == ["Result", "Table", "File", "Throwable", "Chart"]


def test_disabled_visualizers_are_not_registered() -> None:
    config = AppConfig(
        visualizers={
            "chart": VisualizerOptions(enabled=False),
            "file": VisualizerOptions(enabled=False),
        }
    )
    assert build_registry(config).labels() == ["Result", "Table", "Throwable"]


def test_extra_visualizers_are_appended() -> None:
    extra = StubVisualizer("Extra", precedence=0)
    registry = build_registry(AppConfig(), extra=[extra])

    assert registry.labels()[-1] == "Extra"
    # registered after Result with the same precedence, so Result still wins
    assert Dispatcher(registry).best({"k": 1}).label == "Result"


def test_plugin_factories_are_loaded(monkeypatch: pytest.MonkeyPatch) -> None:
    module = types.ModuleType("replview_test_plugins")
    module.make = lambda config: StubVisualizer("Plugin", precedence=100)
    module.disabled = lambda config: None
    monkeypatch.setitem(sys.modules, "replview_test_plugins", module)

    config = AppConfig(plugins=["replview_test_plugins:make", "replview_test_plugins:disabled"])
    registry = build_registry(config)

    assert registry.labels()[-1] == "Plugin"
    assert registry.count() == 6


@pytest.mark.parametrize("spec", ["no_colon", "replview_missing_module:factory", "os:"])
def test_bad_plugin_reference_raises(spec: str) -> None:
    with pytest.raises(ConfigError):
        build_registry(AppConfig(plugins=[spec]))


def test_registry_summaries() -> None:
    summaries = build_registry(AppConfig()).list_summaries()
    by_label = {s.label: s for s in summaries}

    assert [s.index for s in summaries] == [0, 1, 2, 3, 4]
    assert by_label["File"].precedence == 100
    assert by_label["File"].side_channel is True
    assert by_label["Table"].precedence == 0
    assert by_label["Table"].side_channel is False
