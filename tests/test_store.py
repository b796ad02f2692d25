"""
Tests for the store module
"""
import json
import os

import numpy as np
import pytest

from quadworld.constants import API_VERSION, PREFS_FILENAME, TerrainType, WorldSettings
from quadworld.path import PathAddress, Relation
from quadworld.store import Store


def test_store_creation(store):
    """Test that a new store is empty"""
    assert store.history.is_root
    assert store.leaf_depth == 1
    assert store.start_path == PathAddress.parse("3")
    assert os.listdir(store.root_location) == [PREFS_FILENAME]


def test_get_block_generates_and_persists(store):
    """Test that the first visit generates a block and saves it"""
    block = store.get_block("3")
    assert block.loaded
    assert float(block.weight) > 0
    assert store.has_block(PathAddress.parse("3"))
    assert store.get_block(PathAddress.parse("3")) is block


def test_get_block_at_wrong_depth(store):
    """Test that blocks only live one level below the root"""
    with pytest.raises(ValueError):
        store.get_block("3/1")


def test_single_instance_per_path(store):
    """Test that a path always resolves to the same block object"""
    assert store.get_or_create("3") is store.get_or_create(PathAddress.parse("3"))


def test_transaction_batches_saves(store):
    """Test that nested calls write only when the outermost one ends"""
    with store.transaction():
        block = store.get_block("3")
        assert store.call_depth == 1
        assert block.dirty
        assert not store.has_block(PathAddress.parse("3"))

    assert store.call_depth == 0
    assert block.dirty is False
    assert store.has_block(PathAddress.parse("3"))


def test_transaction_flushes_on_error(store):
    """Test that an exception still writes accumulated changes"""
    with pytest.raises(RuntimeError):
        with store.transaction():
            store.get_block("3")
            raise RuntimeError("boom")

    assert store.call_depth == 0
    assert store.has_block(PathAddress.parse("3"))


def test_dirty_block_survives_eviction(tmp_path):
    """Test that eviction never produces a second copy of an unsaved block"""
    settings = WorldSettings(seed=7)
    settings.cache_capacity = 1
    store = Store(str(tmp_path / "qtree"), settings)

    with store.transaction():
        block = store.get_block("3")
        store.get_or_create("2")
        assert "3" not in store.cache
        assert store.get_or_create("3") is block

    assert store.has_block(PathAddress.parse("3"))


def test_generate_vertex_on_empty_world(store):
    """Test that a world without blocks has no room for content"""
    assert store.generate_vertex() is None


def test_generate_vertex(store):
    """Test placing content through the whole tree"""
    block = store.get_block("3")

    first = store.generate_vertex()
    assert first is not None
    assert first.block is block
    assert block.cell(first.x, first.y) == (TerrainType.GRASS, 0.0)
    assert store.get_root().weights[3] == float(block.weight)

    second = store.generate_vertex()
    assert second is not None
    assert (second.x, second.y) != (first.x, first.y)


def test_reparent_preserves_content(store):
    """Test that growing the root moves the tree without changing it"""
    block = store.get_block("3")
    types = block.types.copy()
    weights = block.weights.copy()
    old_total = store.get_root().total_weight

    store.reparent(2)

    assert str(store.history) == "2"
    assert store.leaf_depth == 2
    assert os.path.exists(os.path.join(store.root_location, "2", "3.terrain"))
    assert os.path.exists(os.path.join(store.root_location, "2", "info"))
    assert np.array_equal(store.get_root().weights, [0.0, 0.0, old_total, 0.0])
    assert store.get_index(PathAddress.parse("2")).weights[3] == float(block.weight)

    store.cache.clear()
    fresh = store.load_or_create("3")
    assert fresh.path == PathAddress.parse("2/3")
    assert fresh.key == "3"
    assert np.array_equal(fresh.types, types)
    assert np.array_equal(fresh.weights, weights)


def test_history_survives_reopen(store):
    """Test that a reopened store remembers its root growth"""
    store.get_block("3")
    store.reparent(1)

    reopened = Store(store.root_location, WorldSettings(seed=1))
    assert str(reopened.history) == "1"
    assert reopened.load_or_create("3").loaded


def test_adjacency_cycle(store):
    """Test that right, up, left, down leads back to the starting block"""
    origin = store.get_block("3")

    right = store.get_adjacent_block(origin, Relation.RIGHT)
    assert str(store.history) == "2"
    assert right.path == PathAddress.parse("3/2")

    up = store.get_adjacent_block(right, Relation.TOP)
    left = store.get_adjacent_block(up, Relation.LEFT)
    down = store.get_adjacent_block(left, Relation.BOTTOM)

    assert down is origin
    assert down.path == PathAddress.parse("2/3")
    assert len({origin.key, right.key, up.key, left.key}) == 4


def test_diagonal_adjacency(store):
    """Test resolving a diagonal one axis at a time"""
    origin = store.get_block("3")
    diagonal = store.get_adjacent_block(origin, Relation.TOP_LEFT)
    assert diagonal.path == PathAddress.parse("0")
    assert store.history.is_root


def test_generate_vertex_after_growth(store):
    """Test that placement still finds blocks after the root grew"""
    origin = store.get_block("3")
    store.get_adjacent_block(origin, Relation.RIGHT)

    placement = store.generate_vertex()
    assert placement is not None
    assert placement.block.key in ("3", "3/2")


def test_clear(store):
    """Test wiping the world"""
    block = store.get_block("3")
    store.reparent(2)
    store.clear()

    assert store.history.is_root
    assert len(store.cache) == 0
    assert os.listdir(store.root_location) == [PREFS_FILENAME]
    assert store.get_block("3") is not block


def test_version_mismatch_clears(tmp_path):
    """Test that a world written in another format is discarded"""
    root = tmp_path / "qtree"
    root.mkdir()
    (root / "3.terrain").write_bytes(b"old")
    (root / PREFS_FILENAME).write_text(json.dumps({"api": "0", "history": "1"}))

    store = Store(str(root), WorldSettings(seed=3))

    assert store.history.is_root
    assert not (root / "3.terrain").exists()
    assert store.prefs.get("api") == API_VERSION


def test_foreign_directory_is_left_alone(tmp_path):
    """Test that a directory without a world is never wiped"""
    root = tmp_path / "mydata"
    root.mkdir()
    (root / "notes.txt").write_text("keep me")

    with pytest.raises(ValueError):
        Store(str(root), WorldSettings(seed=1))

    assert (root / "notes.txt").read_text() == "keep me"
    assert not (root / PREFS_FILENAME).exists()


def test_empty_directory_becomes_world(tmp_path):
    """Test that an existing empty directory is adopted as a new world"""
    root = tmp_path / "empty"
    root.mkdir()

    store = Store(str(root), WorldSettings(seed=1))

    assert store.history.is_root
    assert json.loads((root / PREFS_FILENAME).read_text())["api"] == API_VERSION
