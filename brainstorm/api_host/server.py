"""
App Host Server - FastAPI application exposing the canvas operations.

This module provides create_app() which builds a FastAPI application that:
- Loads the node collection from the configured storage file
- Exposes GraphController via REST API endpoints
- Optionally serves the local suggestion endpoint (/api/ai/expand)
- Serves the built web UI when a static directory is configured

Usage:
    from brainstorm.api_host import create_app

    # Default configuration
    app = create_app()

    # Custom configuration
    from brainstorm.api_host.config import AppConfig
    config = AppConfig(storage_file="workshop.json", local_fallback=True)
    app = create_app(config)
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles

from brainstorm.core import NodeStore, PersistenceAdapter, JsonFileKeyValueStore
from brainstorm.service import (
    GraphController,
    ExpansionService,
    LocalSuggestionGenerator,
    FallbackExpansionService,
    create_rest_router,
    create_ai_router,
)

from .config import AppConfig

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[AppConfig] = None,
    store: Optional[NodeStore] = None,
    expansion=None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Optional configuration object. If None, uses defaults from environment.
        store: Optional pre-configured NodeStore. If None, one is created
            on top of the configured storage file.
        expansion: Optional expansion source. If None, an ExpansionService
            for the configured URL is used, wrapped in the local fallback
            policy when config.local_fallback is set.

    Returns:
        Configured FastAPI application.
    """
    if config is None:
        config = AppConfig.from_env()

    app = FastAPI(
        title="Brainstorm Canvas",
        description="REST API for the brainstorm node canvas",
        version="1.0.0",
    )

    # The web UI may be served from a separate dev server
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if store is None:
        storage_path = config.get_storage_path()
        store = NodeStore(PersistenceAdapter(JsonFileKeyValueStore(str(storage_path))))
        logger.info(f"Loaded {len(store)} nodes from {storage_path}")

    generator = LocalSuggestionGenerator()

    if expansion is None:
        expansion = ExpansionService(
            base_url=config.get_expansion_url(),
            endpoint_path=config.expansion_path,
            timeout=config.expansion_timeout,
        )
        if config.local_fallback:
            expansion = FallbackExpansionService(expansion, generator)

    controller = GraphController(store, expansion)

    # Store components on app state for access in routes and tests
    app.state.config = config
    app.state.node_store = store
    app.state.controller = controller

    app.include_router(create_rest_router(controller), prefix=config.api_prefix)

    if config.serve_ai_endpoint:
        app.include_router(create_ai_router(generator), prefix=config.api_prefix)

    _mount_static_files(app, config)

    @app.get("/health")
    async def health_check() -> Dict[str, Any]:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "nodes": len(store),
            "expanding": controller.expanding,
        }

    @app.get("/info")
    async def info() -> Dict[str, Any]:
        """API information endpoint."""
        return {
            "name": "Brainstorm Canvas",
            "version": "1.0.0",
            "endpoints": {
                "api": config.api_prefix,
                "export": f"{config.api_prefix}/export",
                "import": f"{config.api_prefix}/import",
                "health": "/health",
            },
            "expansion": {
                "url": f"{config.get_expansion_url().rstrip('/')}{config.expansion_path}",
                "local_fallback": config.local_fallback,
                "serves_ai_endpoint": config.serve_ai_endpoint,
            },
        }

    return app


def _mount_static_files(app: FastAPI, config: AppConfig) -> None:
    """Mount the web UI directory when it exists."""
    if not config.web_static_path:
        return

    web_path = Path(config.web_static_path)
    if not (web_path.exists() and web_path.is_dir()):
        logger.warning(f"Web static path {web_path} not found, UI not served")
        return

    app.mount("/web", StaticFiles(directory=str(web_path), html=True), name="web")

    @app.get("/")
    async def root() -> RedirectResponse:
        """Redirect root to web application."""
        return RedirectResponse(url="/web/", status_code=302)


def get_app() -> FastAPI:
    """
    Factory function for uvicorn.

    Usage:
        uvicorn brainstorm.api_host.server:get_app --factory
    """
    return create_app()
