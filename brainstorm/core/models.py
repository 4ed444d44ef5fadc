"""
Data models for the brainstorm canvas.

A Node is the only entity: an idea with text content and a position on an
unbounded 2D canvas. Nodes are immutable; updates produce a new Node with the
same id.

This module has no dependency on storage, HTTP or the expansion service.
"""

import uuid
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Keyword names taken by BaseModel.model_construct itself
_CONSTRUCT_RESERVED = ("cls", "_fields_set")


def new_node_id() -> str:
    """Generate a fresh opaque node id."""
    return str(uuid.uuid4())


class Node(BaseModel):
    """A single idea on the canvas"""
    model_config = ConfigDict(frozen=True, extra="allow")

    id: str = Field(default_factory=new_node_id)
    content: str = ""
    x: float = 0.0
    y: float = 0.0

    @model_validator(mode="after")
    def mark_complete(self) -> "Node":
        # A validated node is complete, defaults included
        self.__pydantic_fields_set__.update(type(self).model_fields)
        return self

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dict for JSON storage.

        Fields missing from the record a node was built from are left out,
        so the generated id and default position never reach the file.
        """
        # Records imported without validation may carry unexpected types
        data = self.model_dump(warnings=False)
        known = type(self).model_fields
        return {k: v for k, v in data.items() if k in self.model_fields_set or k not in known}

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Node":
        """
        Create a Node from a stored or imported record without validation.

        Missing fields get their defaults in memory and unknown keys are kept,
        so a record survives a load/save or import/export cycle unchanged.
        """
        values = dict(record)
        reserved = {k: values.pop(k) for k in _CONSTRUCT_RESERVED if k in values}
        node = cls.model_construct(**values)
        if reserved:
            node.__pydantic_extra__.update(reserved)
        return node


def entry_to_record(entry: Any) -> Any:
    """Serializable form of a collection entry. Non-node entries pass through."""
    return entry.to_dict() if isinstance(entry, Node) else entry


def entry_from_record(record: Any) -> Any:
    """Collection entry for a stored or imported value. Only objects become nodes."""
    return Node.from_record(record) if isinstance(record, Mapping) else record


class NodePatch(BaseModel):
    """Partial update for a node. Only fields that were set are merged."""
    content: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ExpandResult(BaseModel):
    """Result from an expansion request"""
    success: bool
    node: Optional[Node] = None
    skipped: bool = False  # Source node was not found
    message: str = ""


class ImportResult(BaseModel):
    """Result from importing a JSON document"""
    success: bool
    node_count: int = 0
    message: str = ""
