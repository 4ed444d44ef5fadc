"""
brainstorm.core - Node-graph state for the brainstorm canvas

This package holds the node collection, its persistence and its JSON
import/export without any dependency on HTTP or the expansion service.

Main components:
- NodeStore: Owns the node collection and the current selection
- PersistenceAdapter: Loads and saves the collection under a versioned key
- ImportExportCodec: Converts the collection to and from a JSON document
- Models: Node and result types

Usage:
    from brainstorm.core import NodeStore, PersistenceAdapter, JsonFileKeyValueStore

    persistence = PersistenceAdapter(JsonFileKeyValueStore("brainstorm.json"))
    store = NodeStore(persistence)
    node = store.add("Idea A")
"""

# Data models
from .models import (
    Node,
    NodePatch,
    ExpandResult,
    ImportResult,
    new_node_id,
    entry_to_record,
    entry_from_record,
)

# Persistence
from .persistence import (
    STORAGE_KEY,
    KeyValueStore,
    MemoryKeyValueStore,
    JsonFileKeyValueStore,
    PersistenceAdapter,
)

# Node store
from .store import NodeStore

# Import/export
from .codec import (
    EXPORT_FILENAME,
    EXPORT_MEDIA_TYPE,
    ImportExportCodec,
    ImportExportError,
    InvalidFormatError,
    ImportParseError,
)

__all__ = [
    # Data models
    "Node",
    "NodePatch",
    "ExpandResult",
    "ImportResult",
    "new_node_id",
    "entry_to_record",
    "entry_from_record",

    # Persistence
    "STORAGE_KEY",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "PersistenceAdapter",

    # Node store
    "NodeStore",

    # Import/export
    "EXPORT_FILENAME",
    "EXPORT_MEDIA_TYPE",
    "ImportExportCodec",
    "ImportExportError",
    "InvalidFormatError",
    "ImportParseError",
]
