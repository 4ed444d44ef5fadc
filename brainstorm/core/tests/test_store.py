"""
Unit tests for NodeStore
"""

import json
import logging
import random
from concurrent.futures import ThreadPoolExecutor

import pytest
from pydantic import ValidationError

from brainstorm.core import (
    NodePatch, NodeStore, PersistenceAdapter, MemoryKeyValueStore, STORAGE_KEY,
)


def _stored_ids(memory_kv):
    return [record["id"] for record in json.loads(memory_kv.get_item(STORAGE_KEY))]


class TestNodeStoreInit:
    """Tests for NodeStore initialization"""

    def test_starts_empty(self, store):
        assert store.snapshot() == []
        assert store.selected_id is None

    def test_loads_from_persistence(self, persistence, sample_nodes):
        persistence.save(sample_nodes)

        store = NodeStore(persistence)

        assert store.snapshot() == sample_nodes
        assert store.selected_id is None

    def test_works_without_persistence(self):
        store = NodeStore()
        node = store.add("Idea")

        assert store.snapshot() == [node]


class TestAdd:
    """Tests for NodeStore.add"""

    def test_add_to_empty_store(self, store):
        """Test: store empty -> add("Idea A") -> one node, selected"""
        node = store.add("Idea A")

        assert [n.content for n in store.snapshot()] == ["Idea A"]
        assert store.selected_id == node.id

    def test_add_trims_text(self, store):
        node = store.add("  Idea A \n")

        assert node.content == "Idea A"

    @pytest.mark.parametrize("text", ["", "   ", "\t\n", None])
    def test_blank_text_is_ignored(self, store_with_data, text):
        """Test that blank text changes neither collection nor selection"""
        before = store_with_data.snapshot()
        selected = store_with_data.selected_id

        assert store_with_data.add(text) is None
        assert store_with_data.snapshot() == before
        assert store_with_data.selected_id == selected

    def test_newest_first(self, store_with_data):
        assert [n.content for n in store_with_data.snapshot()] == ["Idea B", "Idea A"]

    def test_spawn_region(self, store):
        for i in range(50):
            node = store.add(f"Idea {i}")
            assert 40 <= node.x < 640
            assert 40 <= node.y < 340

    def test_spawn_is_deterministic_under_seed(self):
        first = NodeStore(rng=random.Random(7)).add("Idea")
        second = NodeStore(rng=random.Random(7)).add("Idea")

        assert (first.x, first.y) == (second.x, second.y)

    def test_uses_id_factory(self, store):
        assert store.add("Idea").id == "1"
        assert store.add("Idea").id == "2"

    def test_add_persists(self, memory_kv, store):
        store.add("Idea A")

        assert _stored_ids(memory_kv) == ["1"]


class TestCreate:
    """Tests for NodeStore.create"""

    def test_create_at_position(self, store_with_data):
        node = store_with_data.create("Expanded", 130, 30)

        assert store_with_data.snapshot()[0] == node
        assert (node.x, node.y) == (130, 30)
        assert store_with_data.selected_id == node.id

    def test_create_does_not_trim_or_validate(self, store):
        node = store.create("", 0, 0)

        assert node.content == ""


class TestUpdate:
    """Tests for NodeStore.update"""

    def test_update_content(self, store_with_data):
        updated = store_with_data.update("1", {"content": "Renamed"})

        assert updated.content == "Renamed"
        assert store_with_data.get("1").content == "Renamed"

    def test_update_position_keeps_content(self, store_with_data):
        store_with_data.update("1", {"x": -10, "y": 5000})

        node = store_with_data.get("1")
        assert (node.x, node.y) == (-10, 5000)
        assert node.content == "Idea A"

    def test_update_keeps_id(self, store_with_data):
        store_with_data.update("1", {"id": "hijacked", "content": "Renamed"})

        assert store_with_data.get("1").content == "Renamed"
        assert store_with_data.get("hijacked") is None

    def test_update_allows_empty_content(self, store_with_data):
        """Test that update does not apply the add-time validation"""
        store_with_data.update("1", {"content": ""})

        assert store_with_data.get("1").content == ""

    def test_update_with_patch_model(self, store_with_data):
        store_with_data.update("2", NodePatch(x=1.0))

        node = store_with_data.get("2")
        assert node.x == 1.0
        assert node.content == "Idea B"

    def test_update_keeps_order_and_selection(self, store_with_data):
        store_with_data.update("1", {"content": "Renamed"})

        assert [n.id for n in store_with_data.snapshot()] == ["2", "1"]
        assert store_with_data.selected_id == "2"

    def test_update_missing_is_noop(self, memory_kv, store_with_data):
        before = memory_kv.get_item(STORAGE_KEY)

        assert store_with_data.update("missing", {"content": "X"}) is None
        assert memory_kv.get_item(STORAGE_KEY) == before

    def test_update_persists(self, memory_kv, store_with_data):
        store_with_data.update("1", {"content": "Renamed"})

        stored = json.loads(memory_kv.get_item(STORAGE_KEY))
        assert stored[1]["content"] == "Renamed"


class TestRemove:
    """Tests for NodeStore.remove"""

    def test_remove_selected_clears_selection(self, store_with_data):
        """Test: A(1), B(2) present, selection 1 -> remove(1) -> [B], selection None"""
        store_with_data.select("1")

        assert store_with_data.remove("1") is True
        assert [n.id for n in store_with_data.snapshot()] == ["2"]
        assert store_with_data.selected_id is None

    def test_remove_unselected_keeps_selection(self, store_with_data):
        store_with_data.select("2")
        store_with_data.remove("1")

        assert store_with_data.selected_id == "2"

    def test_remove_missing_is_noop(self, store_with_data):
        assert store_with_data.remove("missing") is False
        assert len(store_with_data) == 2

    def test_remove_persists(self, memory_kv, store_with_data):
        store_with_data.remove("2")

        assert _stored_ids(memory_kv) == ["1"]


class TestSelect:
    """Tests for NodeStore.select"""

    def test_select_and_clear(self, store_with_data):
        store_with_data.select("1")
        assert store_with_data.selected_id == "1"

        store_with_data.select(None)
        assert store_with_data.selected_id is None

    def test_select_unknown_id_is_allowed(self, store_with_data):
        store_with_data.select("nope")

        assert store_with_data.selected_id == "nope"


class TestReplaceAll:
    """Tests for NodeStore.replace_all"""

    def test_replaces_collection_and_clears_selection(self, store_with_data, sample_nodes):
        store_with_data.replace_all(sample_nodes)

        assert store_with_data.snapshot() == sample_nodes
        assert store_with_data.selected_id is None

    def test_replace_persists(self, memory_kv, store_with_data, sample_nodes):
        store_with_data.replace_all(sample_nodes)

        assert _stored_ids(memory_kv) == ["n2", "n1"]


    def test_non_node_entries_are_kept_and_never_match(self, memory_kv, store_with_data, sample_nodes):
        """Test that imported values which are not nodes sit in the collection untouched"""
        store_with_data.replace_all([None, 3] + sample_nodes)

        assert store_with_data.get(None) is None
        assert store_with_data.remove(None) is False
        assert store_with_data.update("n1", {"content": "Changed"}).content == "Changed"
        assert store_with_data.remove("n2") is True
        assert store_with_data.snapshot()[:2] == [None, 3]
        assert json.loads(memory_kv.get_item(STORAGE_KEY))[:2] == [None, 3]


class TestSnapshot:
    """Tests for NodeStore.snapshot"""

    def test_snapshot_is_a_copy(self, store_with_data):
        snapshot = store_with_data.snapshot()
        snapshot.clear()

        assert len(store_with_data) == 2

    def test_snapshot_nodes_are_immutable(self, store_with_data):
        node = store_with_data.snapshot()[0]

        with pytest.raises(ValidationError):
            node.content = "changed"
        assert store_with_data.get(node.id).content == "Idea B"


class TestPersistenceFailures:
    """Tests for best-effort saving"""

    def test_failed_save_keeps_memory_state(self, caplog):
        class BrokenAdapter(PersistenceAdapter):
            def save(self, nodes):
                raise OSError("disk full")

        store = NodeStore(BrokenAdapter(MemoryKeyValueStore()))

        with caplog.at_level(logging.WARNING):
            node = store.add("Still here")

        assert store.snapshot() == [node]
        assert "disk full" in caplog.text


class TestConcurrentMutations:
    """Tests for mutations arriving from worker threads"""

    def test_parallel_adds_are_all_kept_and_saved(self, memory_kv, store):
        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(store.add, [f"Idea {i}" for i in range(50)]))

        assert len(store) == 50
        assert sorted(_stored_ids(memory_kv), key=int) == [str(i) for i in range(1, 51)]


class TestListeners:
    """Tests for change listeners"""

    def test_listener_receives_snapshot(self, store):
        received = []
        store.add_listener(received.append)

        store.add("Idea")
        store.select(None)

        assert len(received) == 1
        assert received[0][0].content == "Idea"

    def test_listener_errors_are_logged(self, store, caplog):
        def broken(snapshot):
            raise RuntimeError("render failed")

        store.add_listener(broken)

        with caplog.at_level(logging.ERROR):
            node = store.add("Idea")

        assert store.selected_id == node.id
        assert "render failed" in caplog.text


class TestInvariants:
    """Randomized operation sequences"""

    @pytest.mark.parametrize("seed", range(20))
    def test_ids_unique_and_selection_valid(self, seed, id_factory):
        rng = random.Random(seed)
        store = NodeStore(rng=random.Random(seed), id_factory=id_factory)

        for _ in range(200):
            ids = [n.id for n in store.snapshot()]
            op = rng.choice(["add", "add", "blank", "update", "remove", "remove_selected"])

            if op == "add":
                store.add(f"Idea {rng.random()}")
            elif op == "blank":
                store.add(rng.choice(["", " ", "\n"]))
            elif op == "update" and ids:
                store.update(rng.choice(ids), {"content": "", "x": rng.uniform(-1e4, 1e4)})
            elif op == "remove" and ids:
                store.remove(rng.choice(ids + ["missing"]))
            elif op == "remove_selected" and store.selected_id is not None:
                store.remove(store.selected_id)
                assert store.selected_id is None

            ids = [n.id for n in store.snapshot()]
            assert len(ids) == len(set(ids))
            assert store.selected_id is None or store.selected_id in ids
