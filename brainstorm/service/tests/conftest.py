"""
Pytest fixtures for brainstorm.service tests.

Provides:
- FakeExpansion: scripted expansion source (no network)
- NodeStore and GraphController wired to the fake
- Captured user-visible notices
"""

import asyncio
import itertools
import random
from typing import List, Optional

import pytest

from brainstorm.core import Node, NodeStore, PersistenceAdapter, MemoryKeyValueStore
from brainstorm.service import GraphController, ExpansionError


class FakeExpansion:
    """
    Expansion source returning scripted results.

    Set ``result`` to the suggestion to return, or ``error`` to an exception
    to raise. Set ``gate`` to an asyncio.Event to hold requests until it is set.
    """

    def __init__(self):
        self.result: Optional[str] = "Suggestion"
        self.error: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None
        self.received: List[str] = []

    async def expand(self, text: str) -> Optional[str]:
        self.received.append(text)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def fake_expansion():
    return FakeExpansion()


@pytest.fixture
def memory_kv():
    return MemoryKeyValueStore()


@pytest.fixture
def store(memory_kv):
    """NodeStore holding the node {id: 5, content: "Cats", x: 10, y: 10}."""
    counter = itertools.count(100)
    store = NodeStore(
        PersistenceAdapter(memory_kv),
        rng=random.Random(1),
        id_factory=lambda: str(next(counter)),
    )
    store.insert(Node(id="5", content="Cats", x=10, y=10))
    store.select(None)
    return store


@pytest.fixture
def notices():
    return []


@pytest.fixture
def controller(store, fake_expansion, notices):
    return GraphController(store, fake_expansion, on_notice=notices.append)


@pytest.fixture
def failing_expansion(fake_expansion):
    fake_expansion.error = ExpansionError("HTTP 503: unavailable", status_code=503)
    return fake_expansion
