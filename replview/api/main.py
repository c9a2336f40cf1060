"""replview API - browser-based value inspector.

Serves:
- The HTML UI: evaluation form, visualizer tabs, breadcrumbs
- A JSON API for evaluation, rendering and navigation under /v1
- Side-channel routes exposed by visualizers (e.g. file downloads)

Run with the ``replview`` script, or
``uvicorn replview.api.main:create_app --factory``.
"""

import logging
from contextlib import asynccontextmanager
from typing import Iterable, Optional

from fastapi import FastAPI

from replview import __version__
from replview.api.routes import browser, results
from replview.config import AppConfig, get_config, set_config
from replview.downloads import get_download_store, init_download_store
from replview.repl.sessions import get_session_store, init_session_store
from replview.visualizers.base import Visualizer
from replview.visualizers.registry import get_visualizer_registry, init_visualizer_registry

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    registry = get_visualizer_registry()
    logger.info(f"Visualizers ready: {registry.labels()}")
    logger.info("replview ready")
    yield
    logger.info(
        f"Shutting down replview ({get_session_store().count()} sessions, "
        f"{get_download_store().count()} pending downloads)"
    )


def create_app(
    config: Optional[AppConfig] = None,
    extra_visualizers: Optional[Iterable[Visualizer]] = None,
) -> FastAPI:
    """Build the app.

    Shared state is created here, before the registry, so visualizers
    built by the registry see the same download store as the routes.

    Args:
        config: Configuration (default: loaded from REPLVIEW_CONFIG).
        extra_visualizers: Host-supplied visualizers appended after the
            defaults and configured plugins.
    """
    if config is None:
        config = get_config()
    set_config(config)
    init_download_store(ttl_seconds=config.download_ttl_seconds)
    init_session_store(ttl_seconds=config.session_ttl_seconds)
    registry = init_visualizer_registry(config, extra_visualizers)

    prefix = config.normalized_prefix
    app = FastAPI(
        title="replview",
        description="Evaluate Python expressions and inspect the results in the browser.",
        version=__version__,
        lifespan=lifespan,
    )

    app.include_router(browser.router, prefix=prefix)
    app.include_router(results.router, prefix=f"{prefix}/v1")
    for side_channel in registry.side_channel_routers():
        app.include_router(side_channel, prefix=prefix)

    @app.get(f"{prefix}/health")
    async def health():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": __version__,
            "visualizers_loaded": get_visualizer_registry().count(),
            "sessions": get_session_store().count(),
            "pending_downloads": get_download_store().count(),
        }

    return app


def main() -> None:
    """Run the server with uvicorn."""
    import uvicorn

    config = get_config()
    uvicorn.run(create_app(config), host=config.host, port=config.port)


if __name__ == "__main__":
    main()
