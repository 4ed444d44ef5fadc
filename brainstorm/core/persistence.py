"""
Durable persistence for the node collection.

The whole collection is stored as one serialized JSON array under a single
versioned key in a key-value store. A schema change introduces a new key
instead of rewriting data stored under the old one.

Key-value backends:
- MemoryKeyValueStore: in-process dict, for tests and throwaway sessions
- JsonFileKeyValueStore: JSON object file on disk, written atomically
  (temp file + rename) under an OS-level file lock

Loading and saving never raise. A missing or unreadable record loads as an
empty collection and a failed write only logs; the in-memory state stays
authoritative for the session.
"""

import json
import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .models import entry_from_record, entry_to_record

logger = logging.getLogger(__name__)

STORAGE_KEY = "brainstorm:nodes:v1"


# Cross-platform file locking
if sys.platform == 'win32':
    import msvcrt

    def _lock_file(f, exclusive=True):
        """Acquire file lock on Windows."""
        msvcrt.locking(f.fileno(), msvcrt.LK_NBLCK if exclusive else msvcrt.LK_LOCK, 1)

    def _unlock_file(f):
        """Release file lock on Windows."""
        msvcrt.locking(f.fileno(), msvcrt.LK_UNLCK, 1)
else:
    import fcntl

    def _lock_file(f, exclusive=True):
        """Acquire file lock on Unix."""
        fcntl.flock(f, fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)

    def _unlock_file(f):
        """Release file lock on Unix."""
        fcntl.flock(f, fcntl.LOCK_UN)


class KeyValueStore:
    """String key-value store interface used by PersistenceAdapter."""

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError


class MemoryKeyValueStore(KeyValueStore):
    """Key-value store held in memory."""

    def __init__(self, items: Optional[Dict[str, str]] = None):
        self.items: Dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value


class JsonFileKeyValueStore(KeyValueStore):
    """
    Key-value store backed by a JSON object file.

    The file maps each key to its serialized string value. Reads take a
    shared lock; writes go to a temp file in the same directory under an
    exclusive lock and are renamed over the target.
    """

    def __init__(self, path: str):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}

        with open(self.path, 'r', encoding='utf-8') as f:
            _lock_file(f, exclusive=False)
            try:
                raw = f.read()
            finally:
                _unlock_file(f)

        if not raw.strip():
            return {}
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object in {self.path}")
        return data

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        if value is None or isinstance(value, str):
            return value
        # Tolerate hand-edited files that store the value unencoded
        return json.dumps(value)

    def set_item(self, key: str, value: str) -> None:
        try:
            items = self._read_all()
        except ValueError as e:
            logger.warning(f"Replacing unreadable store file {self.path}: {e}")
            items = {}
        items[key] = value

        self.path.parent.mkdir(parents=True, exist_ok=True)

        temp_fd, temp_path = tempfile.mkstemp(
            suffix='.json',
            prefix='brainstorm_',
            dir=self.path.parent
        )

        try:
            with os.fdopen(temp_fd, 'w', encoding='utf-8') as f:
                _lock_file(f, exclusive=True)
                try:
                    json.dump(items, f, indent=2, ensure_ascii=False)
                    f.flush()
                    os.fsync(f.fileno())
                finally:
                    _unlock_file(f)

            os.replace(temp_path, self.path)

        except Exception:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise


class PersistenceAdapter:
    """
    Loads and saves the node collection as one serialized record.

    Args:
        store: Key-value backend holding the record
        key: Versioned key the record is stored under
    """

    def __init__(self, store: KeyValueStore, key: str = STORAGE_KEY):
        self.store = store
        self.key = key

    def load(self) -> List[Any]:
        """
        Read the stored collection.

        Returns an empty list when the record is absent, empty, not valid
        JSON, or not an array. Array elements that are not objects are kept
        as they are.
        """
        try:
            raw = self.store.get_item(self.key)
        except Exception as e:
            logger.warning(f"Failed to read saved nodes: {e}")
            return []

        if not raw:
            return []

        try:
            records = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Failed to parse saved nodes: {e}")
            return []

        if not isinstance(records, list):
            logger.warning(f"Ignoring saved nodes under '{self.key}': expected an array")
            return []

        nodes = [entry_from_record(record) for record in records]
        logger.info(f"Loaded {len(nodes)} nodes from '{self.key}'")
        return nodes

    def save(self, nodes: Iterable[Any]) -> None:
        """Serialize and write the collection. Failures are logged, not raised."""
        try:
            payload = json.dumps([entry_to_record(node) for node in nodes], ensure_ascii=False)
            self.store.set_item(self.key, payload)
        except Exception as e:
            logger.warning(f"Failed to save nodes: {e}")
