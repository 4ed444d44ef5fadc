"""
NodeStore - the authoritative in-memory node collection and selection.

The collection is ordered newest-first and every id in it is unique.
Removing the selected node clears the selection in the same step, so the
selection never refers to a node that was removed. An imported collection may
also hold entries that are not nodes; they are kept in place and never match
an id.

Every mutation that changes the collection saves the resulting snapshot
through the persistence port. Saving is best-effort; a failed save is logged
and the in-memory state remains authoritative.

Mutations and their saves are serialized by a lock, so the store can be
driven from worker threads while the event loop keeps serving requests.
"""

import logging
import random
import threading
from typing import Any, Callable, Iterable, List, Mapping, Optional, Union

from .models import Node, NodePatch, new_node_id
from .persistence import PersistenceAdapter

logger = logging.getLogger(__name__)

# Spawn region for newly added nodes
SPAWN_X = (40.0, 640.0)
SPAWN_Y = (40.0, 340.0)

PATCH_FIELDS = ("content", "x", "y")


def _is_node(entry: Any, node_id: Optional[str]) -> bool:
    return isinstance(entry, Node) and entry.id == node_id


class NodeStore:
    """
    Owns the node collection and the current selection.

    Args:
        persistence: Port used to load the collection at startup and save it
            after every mutation. None keeps the store purely in memory.
        rng: Random source for spawn coordinates
        id_factory: Callable producing fresh node ids
    """

    def __init__(
        self,
        persistence: Optional[PersistenceAdapter] = None,
        rng: Optional[random.Random] = None,
        id_factory: Callable[[], str] = new_node_id,
    ):
        self._persistence = persistence
        self._rng = rng or random.Random()
        self._id_factory = id_factory
        self._lock = threading.RLock()

        self._nodes: List[Any] = []
        self._selected_id: Optional[str] = None
        self._listeners: List[Callable[[List[Any]], None]] = []

        if self._persistence is not None:
            self._nodes = self._persistence.load()

    # ==================== Queries ====================

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    def snapshot(self) -> List[Any]:
        """Return the current collection, newest first. Nodes are immutable."""
        with self._lock:
            return list(self._nodes)

    def get(self, node_id: str) -> Optional[Node]:
        """Get a specific node"""
        with self._lock:
            return next((n for n in self._nodes if _is_node(n, node_id)), None)

    def __len__(self) -> int:
        return len(self._nodes)

    def add_listener(self, listener: Callable[[List[Any]], None]) -> None:
        """Register a callback that receives the snapshot after each mutation."""
        self._listeners.append(listener)

    # ==================== Mutations ====================

    def add(self, text: Optional[str]) -> Optional[Node]:
        """
        Create a node from text, put it first and select it.

        Blank text is ignored and None is returned.
        """
        if not text or not text.strip():
            return None

        with self._lock:
            return self.create(text.strip(), self._spawn(*SPAWN_X), self._spawn(*SPAWN_Y))

    def create(self, content: str, x: float, y: float) -> Node:
        """Create a node with a fresh id at the given position, put it first and select it."""
        with self._lock:
            return self.insert(Node(id=self._id_factory(), content=content, x=x, y=y))

    def insert(self, node: Node) -> Node:
        """Put an already-built node first and select it."""
        with self._lock:
            self._nodes.insert(0, node)
            self._selected_id = node.id
            self._changed()
        return node

    def update(self, node_id: str, patch: Union[NodePatch, Mapping[str, Any]]) -> Optional[Node]:
        """
        Merge content/x/y from patch into the node, keeping its id.

        Content is not validated here, so an update may leave it empty.
        Returns the updated node, or None if the id is unknown.
        """
        if isinstance(patch, NodePatch):
            changes = patch.changes()
        else:
            changes = {k: v for k, v in patch.items() if k in PATCH_FIELDS}

        with self._lock:
            for index, node in enumerate(self._nodes):
                if _is_node(node, node_id):
                    updated = node.model_copy(update=changes)
                    self._nodes[index] = updated
                    self._changed()
                    return updated
        return None

    def remove(self, node_id: str) -> bool:
        """Delete the node, clearing the selection if it was selected."""
        with self._lock:
            remaining = [n for n in self._nodes if not _is_node(n, node_id)]
            if len(remaining) == len(self._nodes):
                return False

            self._nodes = remaining
            if self._selected_id == node_id:
                self._selected_id = None
            self._changed()
        return True

    def select(self, node_id: Optional[str]) -> None:
        """Set the selection verbatim. The id is not checked."""
        with self._lock:
            self._selected_id = node_id

    def replace_all(self, nodes: Iterable[Any]) -> None:
        """Discard the collection and selection and use nodes instead."""
        with self._lock:
            self._nodes = list(nodes)
            self._selected_id = None
            self._changed()

    # ==================== Internals ====================

    def _spawn(self, low: float, high: float) -> float:
        return low + self._rng.random() * (high - low)

    def _changed(self) -> None:
        snapshot = list(self._nodes)

        if self._persistence is not None:
            try:
                self._persistence.save(snapshot)
            except Exception as e:
                logger.warning(f"Failed to persist {len(snapshot)} nodes: {e}")

        for listener in self._listeners:
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Error in node store listener: {e}")
