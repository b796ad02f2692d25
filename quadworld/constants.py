"""World constants"""
from enum import IntEnum
import random
from typing import Optional

# Block settings
BLOCK_SIZE = 20  # Cells per block side
OBSTACLE_COUNT = 70  # Cells scattered with content when a block is generated
EMPTY_WEIGHT = float(BLOCK_SIZE)  # Placement capacity of an untouched empty cell

# Diffusion settings
DIFFUSION_RADIUS = 2  # Chebyshev radius of the suppression window
DIFFUSION_STEP = 0.15  # Reduction factor per ring, counted from the outside
PLACEMENT_EPSILON = 0.01  # Below this a block or subtree can't take more content

# Store settings
CACHE_CAPACITY = 16
API_VERSION = "1.2"
DEFAULT_START_PATH = "3"
TERRAIN_EXTENSION = ".terrain"
INFO_FILENAME = "info"
PREFS_FILENAME = "prefs.json"
STAGING_DIRNAME = "tmp"

# Viewer settings
SCREEN_WIDTH = 960
SCREEN_HEIGHT = 960
TILE_SIZE = 12
FPS = 30
GENERATE_INTERVAL_MS = 5000


class TerrainType(IntEnum):
    """Content of a single cell, values are the on-disk codes"""
    NONE = 0
    GRASS = 1
    TREE = 2
    STONE = 3
    WATER = 4


# Scatter table: cumulative probability upper bounds for generated content
SCATTER_TABLE = (
    (0.1, TerrainType.TREE),
    (0.4, TerrainType.GRASS),
    (0.5, TerrainType.WATER),
    (1.0, TerrainType.STONE),
)

# Only these cells suppress placement around themselves
WEIGHT_SOURCES = frozenset({TerrainType.GRASS})

# Colors
BLACK = (0, 0, 0)
GRID_COLOR = (40, 40, 40)
CURSOR_COLOR = (220, 60, 60)

TERRAIN_COLORS = {
    TerrainType.NONE: (24, 30, 20),
    TerrainType.GRASS: (67, 160, 71),
    TerrainType.TREE: (30, 90, 40),
    TerrainType.STONE: (128, 128, 128),
    TerrainType.WATER: (64, 164, 223),
}


# World settings
class WorldSettings:
    def __init__(self, seed: Optional[int] = None):
        self.seed = seed if seed is not None else random.randint(1, 100000)
        self.cache_capacity = CACHE_CAPACITY
        self.obstacle_count = OBSTACLE_COUNT
        self.start_path = DEFAULT_START_PATH

    def get_initial_weight(self) -> float:
        """Get the aggregate weight of a freshly scattered block"""
        return EMPTY_WEIGHT * (BLOCK_SIZE * BLOCK_SIZE - self.obstacle_count)
