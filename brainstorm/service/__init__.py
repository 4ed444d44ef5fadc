"""
brainstorm.service - Expansion, orchestration and REST routing

Main components:
- ExpansionService: Client for the remote suggestion endpoint
- LocalSuggestionGenerator: Offline suggestion source
- FallbackExpansionService: Opt-in primary/fallback expansion policy
- GraphController: Operations invoked by the presentation layer
- create_rest_router / create_ai_router: FastAPI routers

Usage:
    from brainstorm.core import NodeStore
    from brainstorm.service import GraphController, ExpansionService

    controller = GraphController(NodeStore(), ExpansionService("http://localhost:8000"))
    result = await controller.ask_expand(node_id)
"""

from .expansion import (
    ExpansionError,
    ExpansionService,
    LocalSuggestionGenerator,
    FallbackExpansionService,
)
from .controller import GraphController, NO_SUGGESTION_PLACEHOLDER
from .rest_api import create_rest_router, create_ai_router

__all__ = [
    "ExpansionError",
    "ExpansionService",
    "LocalSuggestionGenerator",
    "FallbackExpansionService",
    "GraphController",
    "NO_SUGGESTION_PLACEHOLDER",
    "create_rest_router",
    "create_ai_router",
]
