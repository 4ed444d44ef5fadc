"""
REST API router for canvas operations.

Provides FastAPI routes that map UI events 1:1 onto GraphController
operations. This module handles HTTP-specific concerns: request models,
status codes and the export download.

Routes that save the collection are plain functions, which FastAPI runs in
its threadpool, so file writes never block the event loop.

Usage:
    from fastapi import FastAPI
    from brainstorm.service import GraphController, create_rest_router

    app = FastAPI()
    router = create_rest_router(controller)
    app.include_router(router, prefix="/api")
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Request, Response
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from brainstorm.core import EXPORT_FILENAME, EXPORT_MEDIA_TYPE, NodePatch, entry_to_record

from .controller import GraphController
from .expansion import LocalSuggestionGenerator


# ==================== Request Models ====================

class AddNodeRequest(BaseModel):
    """Request model for creating a node."""
    text: str = Field("", description="Idea text (blank text is ignored)")


class SelectRequest(BaseModel):
    """Request model for changing the selection."""
    node_id: Optional[str] = Field(None, description="Node to select, or null to clear")


class ExpandTextRequest(BaseModel):
    """Request model for the suggestion endpoint."""
    text: str = Field(..., description="Text to expand")


# ==================== Router Factories ====================

def create_rest_router(controller: GraphController, prefix: str = "") -> APIRouter:
    """
    Create a FastAPI router with all canvas endpoints.

    Args:
        controller: GraphController to use for operations
        prefix: Optional URL prefix for all routes

    Returns:
        Configured APIRouter
    """
    router = APIRouter(prefix=prefix, tags=["canvas"])

    def _state() -> Dict[str, Any]:
        return {
            "nodes": [entry_to_record(node) for node in controller.snapshot()],
            "selected_id": controller.selected_id,
            "expanding": controller.expanding,
        }

    # ==================== Node Endpoints ====================

    @router.get("/nodes")
    async def list_nodes() -> Dict[str, Any]:
        """Get the collection, the selection and the expansion flag."""
        return _state()

    @router.post("/nodes")
    def add_node(request: AddNodeRequest) -> Dict[str, Any]:
        """Create a node from text. Blank text is a no-op."""
        node = controller.add_node(request.text)
        if node is None:
            return {"success": False, "node": None}
        return {"success": True, "node": node.to_dict()}

    @router.get("/nodes/{node_id}")
    async def get_node(node_id: str) -> Dict[str, Any]:
        """Get a specific node."""
        node = controller.store.get(node_id)
        if node is None:
            raise HTTPException(status_code=404, detail=f"Node {node_id} not found")
        return node.to_dict()

    @router.patch("/nodes/{node_id}")
    def update_node(node_id: str, patch: NodePatch) -> Dict[str, Any]:
        """Merge content/x/y into a node. Unknown ids are a no-op."""
        node = controller.update_node(node_id, patch)
        return {"success": node is not None, "node": node.to_dict() if node else None}

    @router.delete("/nodes/{node_id}")
    def remove_node(node_id: str) -> Dict[str, Any]:
        """Delete a node. Unknown ids are a no-op."""
        return {"success": controller.remove_node(node_id)}

    @router.put("/selection")
    async def select(request: SelectRequest) -> Dict[str, Any]:
        """Set the selection verbatim."""
        controller.select(request.node_id)
        return {"selected_id": controller.selected_id}

    # ==================== Expansion Endpoint ====================

    @router.post("/nodes/{node_id}/expand")
    async def expand_node(node_id: str) -> Dict[str, Any]:
        """Expand a node into a new related node."""
        result = await controller.ask_expand(node_id)
        if not result.success and not result.skipped:
            raise HTTPException(status_code=502, detail=result.message)
        return {
            "success": result.success,
            "skipped": result.skipped,
            "node": result.node.to_dict() if result.node else None,
            "message": result.message,
        }

    # ==================== Import/Export Endpoints ====================

    @router.get("/export")
    async def export_nodes() -> Response:
        """Download the collection as a JSON file."""
        return Response(
            content=controller.export_json(),
            media_type=EXPORT_MEDIA_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
        )

    @router.post("/import")
    async def import_nodes(request: Request) -> Dict[str, Any]:
        """Replace the collection with an uploaded JSON document (raw body)."""
        body = await request.body()
        try:
            text = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise HTTPException(status_code=400, detail=f"Failed to import: {e}")

        result = await run_in_threadpool(controller.import_json, text)
        if not result.success:
            raise HTTPException(status_code=400, detail=result.message)
        return result.model_dump()

    return router


def create_ai_router(generator: LocalSuggestionGenerator, prefix: str = "") -> APIRouter:
    """
    Create a router serving suggestions from a local generator.

    The route answers ``POST /ai/expand`` with ``{"suggestion": ...}``, the
    contract ExpansionService expects from a remote endpoint.
    """
    router = APIRouter(prefix=prefix, tags=["ai"])

    @router.post("/ai/expand")
    async def expand_text(request: ExpandTextRequest) -> Dict[str, Any]:
        """Return a suggestion related to the given text."""
        return {"suggestion": await generator.expand(request.text)}

    return router
