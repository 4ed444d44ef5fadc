"""
JSON import/export of the node collection.

Export writes a pretty-printed JSON array of node objects. Import accepts any
JSON array; its elements are taken as they are, without per-field validation.
Objects become nodes and any other value is carried through verbatim. Import
is all-or-nothing: it either returns the complete new collection or raises,
and it never touches a store itself.
"""

import json
from typing import Any, Iterable, List

from .models import entry_from_record, entry_to_record

EXPORT_FILENAME = "brainstorm-nodes.json"
EXPORT_MEDIA_TYPE = "application/json"


class ImportExportError(Exception):
    """Base class for import failures reported to the user."""


class InvalidFormatError(ImportExportError):
    """The document parsed, but its top level is not an array."""

    def __init__(self, message: str = "expected an array of nodes"):
        super().__init__(message)


class ImportParseError(ImportExportError):
    """The document is not valid JSON."""


class ImportExportCodec:
    """Converts between a node collection and a portable JSON document."""

    indent = 2

    def export(self, nodes: Iterable[Any]) -> str:
        """Serialize the collection to a pretty-printed JSON array."""
        return json.dumps([entry_to_record(node) for node in nodes], indent=self.indent, ensure_ascii=False)

    def import_(self, text: str) -> List[Any]:
        """
        Parse a JSON document into a node collection.

        Raises:
            ImportParseError: text is not valid JSON
            InvalidFormatError: top level is not an array
        """
        try:
            parsed = json.loads(text)
        except ValueError as e:
            raise ImportParseError(str(e)) from e

        if not isinstance(parsed, list):
            raise InvalidFormatError()

        return [entry_from_record(record) for record in parsed]

    loads = import_
    dumps = export
