"""
Zone map: keeps the blocks around the active one linked to each other
"""
import logging
from typing import Dict, Optional, Tuple, Union

from quadworld.block import Block
from quadworld.constants import BLOCK_SIZE
from quadworld.path import PathAddress, Relation
from quadworld.store import Store

logger = logging.getLogger(__name__)


class Zone:
    """A loaded block placed on the screen grid, in block units"""

    def __init__(self, key: str, position: Tuple[int, int]):
        self.key = key
        self.position = position
        self.adjacent: Dict[Relation, "Zone"] = {}

    def relation_to(self, other: "Zone") -> Relation:
        """Where another zone lies as seen from this one"""
        return Relation.from_vector(other.position[0] - self.position[0],
                                    other.position[1] - self.position[1])

    def is_near(self, other: "Zone") -> bool:
        return max(abs(other.position[0] - self.position[0]),
                   abs(other.position[1] - self.position[1])) <= 1

    def __repr__(self) -> str:
        return f"Zone('{self.key}', {self.position})"


class ZoneMap:
    """Tracks the active zone and the neighbours loaded around it"""

    def __init__(self, store: Store):
        self.store = store
        self.zones: Dict[str, Zone] = {}
        self.active: Optional[Zone] = None
        self.active_block: Optional[Block] = None

    def start(self, path: Union[PathAddress, str, None] = None) -> Zone:
        """
        Load the starting block and make it the active zone

        Args:
            path: Block to start from, defaults to the last active block

        Returns:
            The active zone
        """
        self.zones.clear()
        block = self.store.get_block(path if path is not None else self.store.start_path)
        self.active = self.create_zone(block, (0, 0))
        self.active_block = block
        self.store.prefs.set("path", block.key)
        return self.active

    def create_zone(self, block: Block, position: Tuple[int, int]) -> Zone:
        """
        Register a zone and link it with every zone touching it

        Args:
            block: Block shown by the zone
            position: Grid position in block units

        Returns:
            The new zone
        """
        zone = Zone(block.key, position)
        for other in self.zones.values():
            if not zone.is_near(other):
                continue
            relation = zone.relation_to(other)
            zone.adjacent[relation] = other
            other.adjacent[relation.flip()] = zone
        self.zones[zone.key] = zone
        return zone

    def remove_zone(self, zone: Zone) -> None:
        for relation, other in list(zone.adjacent.items()):
            if other.adjacent.get(relation.flip()) is zone:
                del other.adjacent[relation.flip()]
        zone.adjacent.clear()
        self.zones.pop(zone.key, None)

    def add_adjacent(self, relation: Relation) -> Zone:
        """
        Make sure the active zone has a neighbour in a direction

        Args:
            relation: Cardinal or diagonal direction

        Returns:
            The neighbouring zone
        """
        if relation in self.active.adjacent:
            return self.active.adjacent[relation]
        block = self.store.get_adjacent_block(self.active_block, relation)
        position = (self.active.position[0] + relation.x, self.active.position[1] + relation.y)
        return self.create_zone(block, position)

    def remove_adjacents(self, mask: Relation) -> None:
        """Remove every neighbour of the active zone whose relation intersects the mask"""
        for relation, zone in list(self.active.adjacent.items()):
            if relation & mask:
                self.remove_zone(zone)

    def change_active(self, zone: Zone) -> None:
        """Make another zone active, dropping zones that no longer touch it"""
        self.active = zone
        self.active_block = self.store.get_block(zone.key)
        self.store.prefs.set("path", zone.key)
        for other in list(self.zones.values()):
            if other is not zone and not zone.is_near(other):
                self.remove_zone(other)
        logger.debug(f"Active zone is now {zone}")

    def enter(self, zone: Zone, relation: Relation) -> None:
        """
        React to the avatar entering one of the nine regions of a zone

        Args:
            zone: Zone the region belongs to
            relation: Region within the zone, CENTER for the middle third
        """
        if zone is not self.active:
            self.change_active(zone)
            return
        if relation == Relation.CENTER:
            self.remove_adjacents(Relation.EVERYTHING)
            return

        remove = Relation.CENTER
        for side in (Relation.LEFT, Relation.RIGHT, Relation.TOP, Relation.BOTTOM):
            if relation & side:
                remove |= side.flip()
                self.add_adjacent(side)
            else:
                remove |= side
        if relation.x and relation.y:
            self.add_adjacent(relation)
        self.remove_adjacents(remove)

    @staticmethod
    def region_at(x: float, y: float) -> Relation:
        """
        Get the region of a block containing a local position

        Args:
            x: Local x-coordinate in cells
            y: Local y-coordinate in cells

        Returns:
            The relation of the third the position falls in on each axis
        """
        third = BLOCK_SIZE / 3
        rx = -1 if x < third else (1 if x >= 2 * third else 0)
        ry = -1 if y < third else (1 if y >= 2 * third else 0)
        return Relation.from_vector(rx, ry)
