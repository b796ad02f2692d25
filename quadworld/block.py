"""
Terrain blocks: the leaves of the world quadtree
"""
import logging
import os
from typing import TYPE_CHECKING, Iterator, NamedTuple, Optional, Tuple

import numpy as np

from quadworld.constants import (
    BLOCK_SIZE, DIFFUSION_RADIUS, DIFFUSION_STEP, EMPTY_WEIGHT, PLACEMENT_EPSILON,
    SCATTER_TABLE, WEIGHT_SOURCES, TerrainType
)
from quadworld.path import PathAddress, Relation

if TYPE_CHECKING:
    from quadworld.store import Store

logger = logging.getLogger(__name__)

# On-disk layout: aggregate weight, then one record per cell, x outer, y inner
AGGREGATE_DTYPE = np.dtype("<f4")
RECORD_DTYPE = np.dtype([("type", "u1"), ("weight", "<f4")])


class Placement(NamedTuple):
    """A cell that just received new content"""
    x: int
    y: int
    block: "Block"


class Block:
    """A BLOCK_SIZE x BLOCK_SIZE grid of weighted terrain cells"""

    def __init__(self, store: "Store", path: PathAddress):
        """
        Create an empty, unloaded block. Use Store.get_or_create instead of
        calling this directly so only one instance exists per path.

        Args:
            store: Store owning this block
            path: Address of the block
        """
        self.store = store
        self._path = path
        self.types: Optional[np.ndarray] = None  # uint8 codes indexed [x, y]
        self.weights: Optional[np.ndarray] = None  # float32 indexed [x, y]
        self.weight = np.float32(0.0)
        self.dirty = False
        self._persisted: Optional[bool] = None

    @property
    def path(self) -> PathAddress:
        """Address from the current root"""
        self._path = self.store.normalize(self._path)
        return self._path

    @property
    def key(self) -> str:
        """Identity that survives root growth, for cache keys and external lookups"""
        return self.store.relative_key(self._path)

    @property
    def loaded(self) -> bool:
        return self.types is not None

    @property
    def file_path(self) -> str:
        return self.store.block_file(self.path)

    @property
    def is_persisted(self) -> bool:
        if self._persisted is None:
            self._persisted = os.path.exists(self.file_path)
        return self._persisted

    def cell(self, x: int, y: int) -> Tuple[TerrainType, float]:
        """Get the content and weight of a cell"""
        return TerrainType(int(self.types[x, y])), float(self.weights[x, y])

    def affects_weights(self, x: int, y: int) -> bool:
        return TerrainType(int(self.types[x, y])) in WEIGHT_SOURCES

    def set_dirty(self, dirty: bool = True) -> None:
        """
        Flag the block for the store's next save pass

        Args:
            dirty: False once the block has been written
        """
        if self.dirty == dirty:
            return
        self.dirty = dirty
        if dirty:
            self.store.add_dirty(self)

    def generate(self) -> None:
        """Scatter obstacles over a fresh block and compute placement weights"""
        rng = self.store.random
        count = self.store.settings.obstacle_count
        self.types = np.full((BLOCK_SIZE, BLOCK_SIZE), TerrainType.NONE, dtype=np.uint8)
        self.weights = np.full((BLOCK_SIZE, BLOCK_SIZE), EMPTY_WEIGHT, dtype=np.float32)
        self.weight = np.float32(self.store.settings.get_initial_weight())

        scattered = np.zeros((BLOCK_SIZE, BLOCK_SIZE), dtype=bool)
        for _ in range(count):
            x, y = rng.randrange(BLOCK_SIZE), rng.randrange(BLOCK_SIZE)
            while scattered[x, y]:
                x, y = rng.randrange(BLOCK_SIZE), rng.randrange(BLOCK_SIZE)
            scattered[x, y] = True
            self.types[x, y] = self._scatter_type(rng.random())
            self.weights[x, y] = 0.0

        self.set_dirty()
        for x in range(BLOCK_SIZE):
            for y in range(BLOCK_SIZE):
                if self.affects_weights(x, y):
                    self.reduce_weight_for_nearest_cells(x, y, reflective=True)
        logger.debug(f"Generated block {self.path} with weight {float(self.weight):.2f}")

    @staticmethod
    def _scatter_type(chance: float) -> TerrainType:
        for bound, terrain_type in SCATTER_TABLE:
            if chance < bound:
                return terrain_type
        return SCATTER_TABLE[-1][1]

    def reduce_weight_for_nearest_cells(self, x: int, y: int, reflective: bool = False) -> None:
        """
        Suppress placement around a weight-affecting cell

        Cells within DIFFUSION_RADIUS (Chebyshev) lose a share of their weight
        that shrinks with distance; the cell itself loses all of it. Cells
        past the block edge are reduced in the neighbouring block, but only
        if that block has already been persisted.

        Args:
            x: Local x-coordinate of the source cell
            y: Local y-coordinate of the source cell
            reflective: Also reduce the source for every weight-affecting
                neighbour cell in another block (used while generating)
        """
        self.set_dirty()
        for dx in range(-DIFFUSION_RADIUS, DIFFUSION_RADIUS + 1):
            for dy in range(-DIFFUSION_RADIUS, DIFFUSION_RADIUS + 1):
                self._reduce_cell_weight(x, y, dx, dy, reflective)

    def _reduce_cell_weight(self, source_x: int, source_y: int, dx: int, dy: int,
                            reflective: bool) -> None:
        factor = DIFFUSION_STEP * (DIFFUSION_RADIUS + 1 - max(abs(dx), abs(dy)))
        target_x = source_x + dx
        target_y = source_y + dy
        block = self._owner_of(target_x, target_y)
        if block is None:
            return
        if block is not self:
            if not block.is_persisted:
                return
            block.load()

        x = target_x % BLOCK_SIZE
        y = target_y % BLOCK_SIZE
        if self.affects_weights(source_x, source_y):
            if dx == 0 and dy == 0:
                factor = 1.0
            if block is not self:
                block.set_dirty()
            block._do_reduce(x, y, factor)

        if block is not self and reflective and block.affects_weights(x, y):
            self._do_reduce(source_x, source_y, factor)

    def _owner_of(self, x: int, y: int) -> Optional["Block"]:
        """Resolve the block owning a cell given in this block's coordinates"""
        block = self
        if x < 0:
            block = self.store.get_neighbor(block, Relation.LEFT)
        elif x >= BLOCK_SIZE:
            block = self.store.get_neighbor(block, Relation.RIGHT)
        if block is None:
            return None
        if y < 0:
            block = self.store.get_neighbor(block, Relation.BOTTOM)
        elif y >= BLOCK_SIZE:
            block = self.store.get_neighbor(block, Relation.TOP)
        return block

    def _do_reduce(self, x: int, y: int, factor: float) -> None:
        current = self.weights[x, y]
        if current == 0:
            return
        reduction = current * np.float32(factor)
        self.weights[x, y] = current - reduction
        self.weight = np.float32(self.weight - reduction)

    def pick_and_place(self) -> Optional[Placement]:
        """
        Place grass on a cell drawn in proportion to its weight

        Returns:
            The placement, or None if the block has no capacity left
        """
        if not self.loaded or self.weight < PLACEMENT_EPSILON:
            return None
        flat = self.weights.ravel().astype(np.float64)
        shares = np.cumsum(flat) / float(self.weight)
        index = int(np.searchsorted(shares, self.store.random.random(), side="right"))
        if index >= flat.size:
            # Rounding left the draw above the last share
            candidates = np.flatnonzero(flat > 0)
            if candidates.size == 0:
                return None
            index = int(candidates[-1])
        x, y = divmod(index, BLOCK_SIZE)
        self.types[x, y] = TerrainType.GRASS
        self.reduce_weight_for_nearest_cells(x, y)
        return Placement(x, y, self)

    def load(self) -> None:
        """Read the block from storage unless it is in memory or was never saved"""
        if self.loaded or not self.is_persisted:
            return
        with open(self.file_path, "rb") as f:
            data = f.read()
        self.weight = np.float32(np.frombuffer(data, dtype=AGGREGATE_DTYPE, count=1)[0])
        records = np.frombuffer(
            data, dtype=RECORD_DTYPE, count=BLOCK_SIZE * BLOCK_SIZE,
            offset=AGGREGATE_DTYPE.itemsize
        ).reshape(BLOCK_SIZE, BLOCK_SIZE)
        self.types = records["type"].astype(np.uint8)
        self.weights = records["weight"].astype(np.float32)
        logger.debug(f"Loaded block {self.path}")

    def save(self) -> None:
        """Write the block and push its weight into the parent density index"""
        if not self.loaded:
            return
        records = np.empty((BLOCK_SIZE, BLOCK_SIZE), dtype=RECORD_DTYPE)
        records["type"] = self.types
        records["weight"] = self.weights
        file_path = self.file_path
        os.makedirs(os.path.dirname(file_path), exist_ok=True)
        with open(file_path, "wb") as f:
            f.write(np.array([self.weight], dtype=AGGREGATE_DTYPE).tobytes())
            f.write(records.tobytes())
        self._persisted = True

        path = self.path
        index = self.store.get_index(path.parent)
        index.weights[path.orientation] = float(self.weight)
        index.save()
        logger.debug(f"Saved block {path}")

    def visible_cells(self) -> Iterator[Tuple[Tuple[int, int], TerrainType]]:
        """Yield ((x, y), content) for every non-empty cell"""
        if not self.loaded:
            return
        for x in range(BLOCK_SIZE):
            for y in range(BLOCK_SIZE):
                if self.types[x, y] != TerrainType.NONE:
                    yield (x, y), TerrainType(int(self.types[x, y]))
