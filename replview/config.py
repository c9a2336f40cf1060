"""Application configuration.

Loaded once at startup from a YAML file (path in REPLVIEW_CONFIG, default
``replview.yaml`` in the working directory). A missing file yields defaults.

Example::

    port: 4444
    prefix: /repl
    visualizers:
      chart:
        enabled: false
      file:
        allow_download: true
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 10
"""How many items of a collection are checked when testing its shape."""

DEFAULT_CONFIG_PATH = Path("replview.yaml")


class ConfigError(ValueError):
    """Raised for invalid configuration or unloadable plugin visualizers."""


class VisualizerOptions(BaseModel):
    """Options for one visualizer. Strategy-specific keys are kept as extras."""

    model_config = ConfigDict(extra="allow")

    enabled: bool = True

    def option(self, key: str, default: Any = None) -> Any:
        """Get a strategy-specific option."""
        return (self.model_extra or {}).get(key, default)


class AppConfig(BaseModel):
    """Top-level replview configuration."""

    host: str = Field(default="127.0.0.1", description="Interface to bind the HTTP server to")
    port: int = Field(default=4444, description="HTTP port")
    prefix: str = Field(
        default="",
        description="URL prefix for every route, e.g. '/repl'. Empty for root.",
    )
    sample_size: int = Field(
        default=SAMPLE_SIZE,
        ge=1,
        description="Collection items inspected by visualizer shape checks",
    )
    max_items: int = Field(
        default=100,
        ge=1,
        description="Entries shown per container by the structural visualizer",
    )
    page_size: int = Field(default=20, ge=1, description="Table rows per page")
    download_ttl_seconds: Optional[float] = Field(
        default=900.0,
        description="Lifetime of an unresolved download token (null = never expires)",
    )
    download_chunk_size: int = Field(default=64 * 1024, ge=1)
    session_ttl_seconds: Optional[float] = Field(
        default=3600.0,
        description="Idle lifetime of a browser session (null = never expires)",
    )
    visualizers: dict[str, VisualizerOptions] = Field(
        default_factory=dict,
        description="Visualizer name -> options. Unlisted visualizers are enabled.",
    )
    plugins: list[str] = Field(
        default_factory=list,
        description="Extra visualizer factories as 'module:callable', appended after defaults",
    )

    def visualizer_options(self, name: str) -> VisualizerOptions:
        """Get options for a visualizer, falling back to enabled defaults."""
        return self.visualizers.get(name) or VisualizerOptions()

    @property
    def normalized_prefix(self) -> str:
        """Prefix with a leading slash and no trailing slash ('' for root)."""
        prefix = self.prefix.strip().rstrip("/")
        if prefix and not prefix.startswith("/"):
            prefix = "/" + prefix
        return prefix


def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load configuration from YAML.

    Raises:
        ConfigError: If the file exists but is not a valid configuration.
    """
    if path is None:
        path = Path(os.environ.get("REPLVIEW_CONFIG", DEFAULT_CONFIG_PATH))

    if not path.exists():
        logger.info(f"No config file at {path}, using defaults")
        return AppConfig()

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        config = AppConfig.model_validate(data)
    except (yaml.YAMLError, ValidationError) as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.info(f"Loaded configuration from {path}")
    return config


# Global config instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: AppConfig) -> None:
    """Replace the global configuration (used by the app factory)."""
    global _config
    _config = config
