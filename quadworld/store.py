"""
World store: caches, dirty tracking and root growth for the block quadtree
"""
import logging
import os
import random
import shutil
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Union

from quadworld.block import Block, Placement
from quadworld.cache import BoundedCache
from quadworld.constants import (
    API_VERSION, INFO_FILENAME, PREFS_FILENAME, STAGING_DIRNAME, TERRAIN_EXTENSION,
    WorldSettings
)
from quadworld.density import DensityIndex
from quadworld.path import PathAddress, Quadrant, Relation
from quadworld.prefs import Preferences

logger = logging.getLogger(__name__)


class Store:
    """
    Owns the on-disk quadtree of a world.

    Blocks are addressed by PathAddress. Every block lives one level below
    the history prefix (see leaf_depth); growing the root with reparent()
    moves the stored tree one level down instead of renaming blocks, and
    blocks are cached under a key that ignores the history prefix.

    Public operations run inside a transaction: nested calls share one
    batch of dirty blocks, written once when the outermost call returns.
    """

    def __init__(self, root_location: str, settings: Optional[WorldSettings] = None):
        """
        Open or create a world

        Args:
            root_location: Directory holding the tree and preferences
            settings: Generation settings, a random seed is used if omitted
        """
        self.root_location = root_location
        self.settings = settings or WorldSettings()
        self.random = random.Random(self.settings.seed)

        self.history = PathAddress()
        self.cache: BoundedCache[str, Block] = BoundedCache(self.settings.cache_capacity)
        self.indexes: BoundedCache[str, DensityIndex] = BoundedCache(self.settings.cache_capacity)
        self.dirty_blocks: Dict[str, Block] = {}
        self.call_depth = 0

        os.makedirs(root_location, exist_ok=True)
        self.prefs = Preferences(os.path.join(root_location, PREFS_FILENAME))
        if os.path.exists(self.prefs.file_path):
            self.prefs.load()
            if self.prefs.get("api") != API_VERSION:
                logger.info(f"World format {self.prefs.get('api')} is not {API_VERSION}, starting over")
                self.clear()
        elif os.listdir(root_location):
            raise ValueError(f"{root_location} is not empty and holds no world")
        else:
            self.prefs.reset({"api": API_VERSION, "history": ""})
        self.history = PathAddress.parse(self.prefs.get("history", ""))

    @property
    def leaf_depth(self) -> int:
        """Depth of every block below the current root"""
        return self.history.depth + 1

    @property
    def start_path(self) -> PathAddress:
        """Path of the last active block, or the default starting block"""
        return PathAddress.parse(self.prefs.get("path", self.settings.start_path))

    def normalize(self, path: PathAddress) -> PathAddress:
        return path.normalized(self.history)

    def relative_key(self, path: PathAddress) -> str:
        return path.relative(self.history)

    def block_file(self, path: PathAddress) -> str:
        codes = [str(int(code)) for code in self.normalize(path).codes]
        return os.path.join(self.root_location, *codes) + TERRAIN_EXTENSION

    def index_file(self, path: PathAddress) -> str:
        codes = [str(int(code)) for code in path.codes]
        return os.path.join(self.root_location, *codes, INFO_FILENAME)

    def has_block(self, path: PathAddress) -> bool:
        return os.path.exists(self.block_file(path))

    @contextmanager
    def transaction(self) -> Iterator["Store"]:
        """Batch saves: dirty blocks are written when the outermost scope exits"""
        self.call_depth += 1
        try:
            yield self
        finally:
            self.call_depth -= 1
            if self.call_depth == 0:
                self.save_dirty()

    def add_dirty(self, block: Block) -> None:
        self.dirty_blocks.setdefault(block.key, block)

    def save_dirty(self) -> None:
        """Write every dirty block"""
        blocks = list(self.dirty_blocks.values())
        for block in blocks:
            block.save()
            block.set_dirty(False)
            self.dirty_blocks.pop(block.key, None)
        if blocks:
            logger.debug(f"Saved {len(blocks)} dirty blocks")

    def get_or_create(self, path: Union[PathAddress, str]) -> Block:
        """
        Get the single in-memory block for a path without touching storage

        Args:
            path: Block address, or its relative key

        Returns:
            The cached block, possibly unloaded
        """
        if isinstance(path, str):
            path = PathAddress.parse(path)
        path = self.normalize(path)
        if path.depth != self.leaf_depth:
            raise ValueError(f"Blocks live at depth {self.leaf_depth}, got '{path}'")
        key = self.relative_key(path)
        block = self.cache.get(key)
        if block is None:
            # An evicted block may still be waiting to be saved
            block = self.dirty_blocks.get(key)
            if block is None:
                block = Block(self, path)
            self.cache.set(key, block)
        return block

    def load_or_create(self, path: Union[PathAddress, str]) -> Block:
        block = self.get_or_create(path)
        block.load()
        return block

    def get_block(self, path: Union[PathAddress, str]) -> Block:
        """
        Get a block, loading or generating it as needed

        Args:
            path: Block address, or its relative key

        Returns:
            A loaded block
        """
        with self.transaction():
            block = self.load_or_create(path)
            if not block.loaded:
                block.generate()
            return block

    def get_neighbor(self, block: Block, relation: Relation) -> Optional[Block]:
        """
        Get the neighbour in a cardinal direction without growing the tree

        Returns:
            The neighbour (possibly unloaded), or None past the tree edge
        """
        path = block.path
        if not path.has_adjacent(relation):
            return None
        return self.get_or_create(path.find_adjacent_path(relation))

    def get_adjacent_block(self, block: Block, relation: Relation) -> Block:
        """
        Get the block next to another one, growing the tree if it is on the edge

        Args:
            block: Starting block
            relation: Direction, diagonals are resolved one axis at a time

        Returns:
            The loaded neighbour
        """
        with self.transaction():
            path = block.path
            for part in Relation(relation).parts():
                if not path.has_adjacent(part):
                    path = path.grow(part)
                    self.reparent(path.root)
                path = path.find_adjacent_path(part)
            return self.get_block(path)

    def get_index(self, path: PathAddress) -> DensityIndex:
        """Get the density index of an internal node, loading it on a miss"""
        key = str(path)
        index = self.indexes.get(key)
        if index is None:
            index = DensityIndex(self, path)
            index.load()
            self.indexes.set(key, index)
        return index

    def get_root(self) -> DensityIndex:
        return self.get_index(PathAddress())

    def reparent(self, quadrant: int) -> None:
        """
        Grow a new root above the current one

        The stored tree moves one directory down into the new root's child
        `quadrant`, and the new root index records the old root's weight.

        Args:
            quadrant: Slot the old root takes under the new root
        """
        quadrant = Quadrant(quadrant)
        old_total = self.get_root().total_weight
        self.history = self.history.grow(quadrant)
        self.prefs.set("history", str(self.history))

        staging = os.path.join(self.root_location, STAGING_DIRNAME)
        os.makedirs(staging)
        for name in os.listdir(self.root_location):
            if name in (PREFS_FILENAME, STAGING_DIRNAME):
                continue
            shutil.move(os.path.join(self.root_location, name), os.path.join(staging, name))
        os.rename(staging, os.path.join(self.root_location, str(int(quadrant))))
        self.indexes.clear()

        root = self.get_root()
        root.weights[quadrant] = old_total
        root.save()
        logger.info(f"Grew world root, history is now '{self.history}'")

    def generate_vertex(self) -> Optional[Placement]:
        """
        Place one new grass cell somewhere in the world

        Returns:
            The placement, or None if no block has capacity left
        """
        with self.transaction():
            placement = self.get_root().pick_child()
        if placement is None:
            logger.warning("No available space for new grass")
        else:
            logger.info(f"Placed grass at ({placement.x}, {placement.y}) in block {placement.block.key}")
        return placement

    def clear(self) -> None:
        """Forget the whole world, on disk and in memory"""
        self.history = PathAddress()
        self.cache.clear()
        self.indexes.clear()
        self.dirty_blocks.clear()
        if os.path.isdir(self.root_location):
            shutil.rmtree(self.root_location)
        os.makedirs(self.root_location)
        self.prefs.reset({"api": API_VERSION, "history": ""})
        logger.info(f"Cleared world at {self.root_location}")
