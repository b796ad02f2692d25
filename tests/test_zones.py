"""
Tests for the zones module
"""
from quadworld.constants import BLOCK_SIZE
from quadworld.path import Relation
from quadworld.zones import Zone, ZoneMap


def test_region_at():
    """Test splitting a block into nine regions"""
    assert ZoneMap.region_at(0, 0) == Relation.BOTTOM_LEFT
    assert ZoneMap.region_at(BLOCK_SIZE // 2, BLOCK_SIZE // 2) == Relation.CENTER
    assert ZoneMap.region_at(BLOCK_SIZE - 1, BLOCK_SIZE - 1) == Relation.TOP_RIGHT
    assert ZoneMap.region_at(BLOCK_SIZE - 1, BLOCK_SIZE // 2) == Relation.RIGHT


def test_zone_relations():
    """Test relations between zones on the grid"""
    zone = Zone("3", (0, 0))
    other = Zone("2", (-1, 1))
    assert zone.relation_to(other) == Relation.TOP_LEFT
    assert other.relation_to(zone) == Relation.BOTTOM_RIGHT
    assert zone.is_near(other)
    assert not zone.is_near(Zone("1", (2, 0)))


def test_start(store):
    """Test that starting makes the start block the active zone"""
    zone_map = ZoneMap(store)
    zone = zone_map.start()

    assert zone.key == "3"
    assert zone.position == (0, 0)
    assert zone_map.active_block.loaded
    assert store.prefs.get("path") == "3"


def test_enter_edge_adds_neighbor(store):
    """Test that entering an edge region loads the block beyond it"""
    zone_map = ZoneMap(store)
    active = zone_map.start()

    zone_map.enter(active, Relation.RIGHT)

    assert set(active.adjacent) == {Relation.RIGHT}
    right = active.adjacent[Relation.RIGHT]
    assert right.position == (1, 0)
    assert right.adjacent[Relation.LEFT] is active
    assert len(zone_map.zones) == 2


def test_enter_corner_adds_diagonal(store):
    """Test that entering a corner region loads three neighbours"""
    zone_map = ZoneMap(store)
    active = zone_map.start()

    zone_map.enter(active, Relation.TOP_RIGHT)

    assert set(active.adjacent) == {Relation.RIGHT, Relation.TOP, Relation.TOP_RIGHT}
    diagonal = active.adjacent[Relation.TOP_RIGHT]
    assert diagonal.position == (1, 1)
    assert active.adjacent[Relation.RIGHT].adjacent[Relation.TOP] is diagonal
    assert active.adjacent[Relation.TOP].adjacent[Relation.RIGHT] is diagonal


def test_enter_center_drops_neighbors(store):
    """Test that returning to the middle unloads every neighbour"""
    zone_map = ZoneMap(store)
    active = zone_map.start()
    zone_map.enter(active, Relation.TOP_RIGHT)

    zone_map.enter(active, Relation.CENTER)

    assert active.adjacent == {}
    assert list(zone_map.zones.values()) == [active]


def test_enter_opposite_edge_swaps_neighbors(store):
    """Test that moving to the other edge drops the far side"""
    zone_map = ZoneMap(store)
    active = zone_map.start()
    zone_map.enter(active, Relation.RIGHT)

    zone_map.enter(active, Relation.LEFT)

    assert set(active.adjacent) == {Relation.LEFT}


def test_enter_other_zone_changes_active(store):
    """Test that walking into a neighbour makes it active"""
    zone_map = ZoneMap(store)
    active = zone_map.start()
    zone_map.enter(active, Relation.RIGHT)
    right = active.adjacent[Relation.RIGHT]

    zone_map.enter(right, Relation.LEFT)

    assert zone_map.active is right
    assert zone_map.active_block.key == right.key
    assert store.prefs.get("path") == right.key


def test_remove_zone_unlinks_both_sides(store):
    """Test that removing a zone leaves no dangling links"""
    zone_map = ZoneMap(store)
    active = zone_map.start()
    zone_map.enter(active, Relation.RIGHT)
    right = active.adjacent[Relation.RIGHT]

    zone_map.remove_zone(right)

    assert Relation.RIGHT not in active.adjacent
    assert right.adjacent == {}
    assert right.key not in zone_map.zones
