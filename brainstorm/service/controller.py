"""
GraphController - the operations the presentation layer invokes.

The controller owns no storage. It composes the NodeStore, an expansion
source and the import/export codec, and it owns two policies:

- Expansion: a successful expansion creates a node next to its source; a
  failed one creates nothing and produces a user-visible notice.
- Import: a bad document produces a notice and leaves the collection
  untouched; a good one replaces the collection wholesale.

User-visible notices go to the on_notice callback. The default callback only
logs them.
"""

import asyncio
import functools
import logging
from typing import Any, Callable, List, Mapping, Optional, Union

from brainstorm.core import (
    Node, NodePatch, NodeStore, ExpandResult, ImportResult,
    ImportExportCodec, InvalidFormatError, ImportParseError,
)

from .expansion import ExpansionError

logger = logging.getLogger(__name__)


# Offset of an expanded node from its source node
EXPAND_OFFSET_X = 120.0
EXPAND_OFFSET_Y = 20.0

NO_SUGGESTION_PLACEHOLDER = "(AI had no suggestion)"


def _log_notice(message: str) -> None:
    logger.warning(f"NOTICE: {message}")


class GraphController:
    """
    Entry point for UI events.

    Args:
        store: NodeStore holding the collection and selection
        expansion: Object with an async ``expand(text) -> Optional[str]``
            that raises ExpansionError on failure
        codec: Import/export codec (default ImportExportCodec)
        on_notice: Callback receiving user-visible failure messages
    """

    def __init__(
        self,
        store: NodeStore,
        expansion,
        codec: Optional[ImportExportCodec] = None,
        on_notice: Callable[[str], None] = _log_notice,
    ):
        self._store = store
        self._expansion = expansion
        self._codec = codec or ImportExportCodec()
        self._on_notice = on_notice
        self._in_flight = 0

    @property
    def store(self) -> NodeStore:
        """Access the underlying store."""
        return self._store

    @property
    def expanding(self) -> bool:
        """True while at least one expansion request is in flight."""
        return self._in_flight > 0

    @property
    def selected_id(self) -> Optional[str]:
        return self._store.selected_id

    def snapshot(self) -> List[Any]:
        return self._store.snapshot()

    # ==================== Node Operations ====================

    def add_node(self, text: Optional[str]) -> Optional[Node]:
        return self._store.add(text)

    def update_node(self, node_id: str, patch: Union[NodePatch, Mapping[str, Any]]) -> Optional[Node]:
        return self._store.update(node_id, patch)

    def move_node(self, node_id: str, x: float, y: float) -> Optional[Node]:
        """Drag handler: update only the position."""
        return self._store.update(node_id, {"x": x, "y": y})

    def remove_node(self, node_id: str) -> bool:
        return self._store.remove(node_id)

    def select(self, node_id: Optional[str]) -> None:
        self._store.select(node_id)

    # ==================== Expansion ====================

    async def ask_expand(self, node_id: str) -> ExpandResult:
        """
        Expand a node into a new related node.

        The new node is placed at a fixed offset from the source node and
        selected. The collection is not locked while the request is in
        flight, so the node is inserted into whatever the collection holds
        when the request resolves.

        Returns:
            ExpandResult; ``skipped`` is set when the source node is missing
        """
        self._in_flight += 1
        try:
            source = self._store.get(node_id)
            if source is None:
                logger.info(f"EXPAND: node {node_id} not found, skipping")
                return ExpandResult(success=False, skipped=True, message=f"Node {node_id} not found")

            logger.info(f"EXPAND: requesting suggestion for node {node_id}")
            try:
                suggestion = await self._expansion.expand(source.content)
            except ExpansionError as e:
                message = f"AI request failed: {e}"
                logger.error(f"EXPAND: {message}")
                self._notify(message)
                return ExpandResult(success=False, message=message)

            # The insert saves to disk, so it runs off the event loop
            node = await asyncio.get_running_loop().run_in_executor(
                None,
                functools.partial(
                    self._store.create,
                    content=suggestion if suggestion is not None else NO_SUGGESTION_PLACEHOLDER,
                    x=source.x + EXPAND_OFFSET_X,
                    y=source.y + EXPAND_OFFSET_Y,
                ),
            )
            logger.info(f"EXPAND: created node {node.id} from {node_id}")
            return ExpandResult(success=True, node=node)
        finally:
            self._in_flight -= 1

    def start_expand(self, node_id: str) -> "asyncio.Task[ExpandResult]":
        """Schedule ask_expand as a cancellable task on the running loop."""
        return asyncio.ensure_future(self.ask_expand(node_id))

    # ==================== Import/Export ====================

    def export_json(self) -> str:
        return self._codec.export(self._store.snapshot())

    def import_json(self, text: str) -> ImportResult:
        """
        Replace the collection with the nodes of a JSON document.

        Nothing changes unless the whole document is accepted.
        """
        try:
            nodes = self._codec.import_(text)
        except InvalidFormatError as e:
            message = f"Invalid file format: {e}"
        except ImportParseError as e:
            message = f"Failed to import: {e}"
        else:
            self._store.replace_all(nodes)
            logger.info(f"IMPORT: replaced collection with {len(nodes)} nodes")
            return ImportResult(success=True, node_count=len(nodes))

        logger.warning(f"IMPORT: {message}")
        self._notify(message)
        return ImportResult(success=False, message=message)

    # ==================== Internals ====================

    def _notify(self, message: str) -> None:
        try:
            self._on_notice(message)
        except Exception as e:
            logger.error(f"Error in notice callback: {e}")
