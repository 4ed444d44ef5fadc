"""
Brainstorm package - node-graph state manager for a visual brainstorming canvas.

This package is organized into:
- core: Node model, node store, persistence and import/export codec
- service: Expansion service, graph controller and REST routing
- api_host: FastAPI application server

Usage:
    from brainstorm.core import NodeStore, PersistenceAdapter, Node
    from brainstorm.service import GraphController, ExpansionService
    from brainstorm.api_host import create_app, AppConfig
"""

__version__ = "1.0.0"
