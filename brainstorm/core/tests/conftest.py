"""
Pytest fixtures for brainstorm.core tests.

Provides:
- In-memory and file-backed persistence
- Seeded random source and predictable id factory
- NodeStore instances, empty and pre-populated
"""

import itertools
import os
import random
import tempfile

import pytest

from brainstorm.core import (
    Node, NodeStore, PersistenceAdapter, MemoryKeyValueStore, JsonFileKeyValueStore,
)


@pytest.fixture
def memory_kv():
    """Empty in-memory key-value store."""
    return MemoryKeyValueStore()


@pytest.fixture
def persistence(memory_kv):
    """PersistenceAdapter over the in-memory store."""
    return PersistenceAdapter(memory_kv)


@pytest.fixture
def temp_storage_file():
    """Path to a storage file inside a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield os.path.join(tmpdir, "brainstorm.json")


@pytest.fixture
def file_persistence(temp_storage_file):
    """PersistenceAdapter over a JSON file."""
    return PersistenceAdapter(JsonFileKeyValueStore(temp_storage_file))


@pytest.fixture
def id_factory():
    """Id factory yielding "1", "2", "3", ..."""
    counter = itertools.count(1)
    return lambda: str(next(counter))


@pytest.fixture
def store(persistence, id_factory):
    """Empty NodeStore with seeded randomness and predictable ids."""
    return NodeStore(persistence, rng=random.Random(42), id_factory=id_factory)


@pytest.fixture
def store_with_data(persistence, id_factory):
    """NodeStore holding nodes B (id 2) and A (id 1), newest first."""
    store = NodeStore(persistence, rng=random.Random(42), id_factory=id_factory)
    store.add("Idea A")
    store.add("Idea B")
    return store


@pytest.fixture
def sample_nodes():
    """Plain nodes for codec and persistence tests."""
    return [
        Node(id="n2", content="Second", x=130.0, y=30.0),
        Node(id="n1", content="First", x=10.0, y=-25.5),
    ]
