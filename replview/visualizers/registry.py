"""Visualizer registry and dispatcher.

The registry is an ordered, read-only tuple of visualizers built once at
startup:
- defaults from configuration, each individually enabled/disabled
- plugin factories named in configuration ('module:callable')
- extra visualizers supplied by the host application
Global singleton via get_visualizer_registry().

The dispatcher filters the registry to visualizers supporting a value and
orders them by precedence, highest first. Equal precedence keeps registry
order, so the earliest registered wins.
"""

import importlib
import logging
from typing import Any, Iterable, Iterator, Optional

from fastapi import APIRouter

from replview.config import AppConfig, ConfigError, get_config
from replview.visualizers.base import Visualizer
from replview.visualizers.defaults import register_defaults
from replview.visualizers.schemas import VisualizerSummary

logger = logging.getLogger(__name__)


class VisualizerRegistry:
    """Ordered collection of visualizers."""

    def __init__(self, visualizers: Iterable[Visualizer]):
        self._visualizers: tuple[Visualizer, ...] = tuple(visualizers)

    def __iter__(self) -> Iterator[Visualizer]:
        return iter(self._visualizers)

    def __len__(self) -> int:
        return len(self._visualizers)

    def count(self) -> int:
        return len(self._visualizers)

    def list_all(self) -> list[Visualizer]:
        return list(self._visualizers)

    def labels(self) -> list[str]:
        return [v.label for v in self._visualizers]

    def get(self, label: str) -> Optional[Visualizer]:
        """Get the first visualizer with a label."""
        for visualizer in self._visualizers:
            if visualizer.label == label:
                return visualizer
        return None

    def list_summaries(self) -> list[VisualizerSummary]:
        summaries = []
        for index, visualizer in enumerate(self._visualizers):
            try:
                precedence = int(visualizer.precedence())
            except Exception as e:
                logger.warning(f"Visualizer {visualizer.label!r} precedence failed: {e}")
                precedence = None
            summaries.append(
                VisualizerSummary(
                    index=index,
                    label=visualizer.label,
                    precedence=precedence,
                    side_channel=visualizer.side_channel_handler() is not None,
                )
            )
        return summaries

    def side_channel_routers(self) -> list[APIRouter]:
        """HTTP routers exposed by visualizers, in registry order."""
        routers = []
        for visualizer in self._visualizers:
            router = visualizer.side_channel_handler()
            if router is not None:
                routers.append(router)
        return routers


class Dispatcher:
    """Selects visualizers for a value."""

    def __init__(self, registry: VisualizerRegistry):
        self.registry = registry

    def applicable(self, value: Any) -> list[Visualizer]:
        """Visualizers supporting the value, best first.

        A visualizer whose supports() or precedence() raises is left out
        for this value; the others are still considered.
        """
        candidates: list[tuple[int, int, Visualizer]] = []
        for index, visualizer in enumerate(self.registry):
            try:
                if not visualizer.supports(value):
                    continue
                precedence = int(visualizer.precedence())
            except Exception as e:
                logger.warning(
                    f"Visualizer {visualizer.label!r} failed checking a "
                    f"{type(value).__name__} value, skipping it: {e}"
                )
                continue
            candidates.append((-precedence, index, visualizer))

        candidates.sort(key=lambda c: (c[0], c[1]))
        return [visualizer for _, _, visualizer in candidates]

    def best(self, value: Any) -> Optional[Visualizer]:
        """The winning visualizer for the value, or None if nothing applies."""
        applicable = self.applicable(value)
        return applicable[0] if applicable else None


def load_plugin(spec: str, config: AppConfig) -> Optional[Visualizer]:
    """Build a visualizer from a 'module:callable' factory reference.

    The factory is called with the app config and may return None to
    stay disabled.

    Raises:
        ConfigError: If the reference cannot be imported or called.
    """
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigError(f"Plugin reference must be 'module:callable', got {spec!r}")
    try:
        factory = getattr(importlib.import_module(module_name), attr)
        visualizer = factory(config)
    except Exception as e:
        raise ConfigError(f"Failed to load visualizer plugin {spec!r}: {e}") from e

    if visualizer is not None and not isinstance(visualizer, Visualizer):
        raise ConfigError(f"Plugin {spec!r} did not return a Visualizer")
    return visualizer


def build_registry(
    config: AppConfig,
    extra: Optional[Iterable[Visualizer]] = None,
) -> VisualizerRegistry:
    """Build the registry: defaults, then config plugins, then extras."""
    visualizers = register_defaults(config)
    for spec in config.plugins:
        visualizer = load_plugin(spec, config)
        if visualizer is not None:
            visualizers.append(visualizer)
    visualizers.extend(extra or [])

    registry = VisualizerRegistry(visualizers)
    logger.info(f"Registered {registry.count()} visualizers: {registry.labels()}")
    return registry


# Global registry instance
_registry: Optional[VisualizerRegistry] = None


def init_visualizer_registry(
    config: AppConfig,
    extra: Optional[Iterable[Visualizer]] = None,
) -> VisualizerRegistry:
    """Build the global registry, replacing any previous one."""
    global _registry
    _registry = build_registry(config, extra)
    return _registry


def get_visualizer_registry() -> VisualizerRegistry:
    """Get the global visualizer registry instance."""
    global _registry
    if _registry is None:
        _registry = build_registry(get_config())
    return _registry


def get_dispatcher() -> Dispatcher:
    return Dispatcher(get_visualizer_registry())
