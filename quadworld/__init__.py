"""
QuadWorld: an unbounded tile world stored as a growable quadtree
"""
from quadworld.block import Block, Placement
from quadworld.constants import BLOCK_SIZE, TerrainType, WorldSettings
from quadworld.density import DensityIndex
from quadworld.path import PathAddress, Quadrant, Relation
from quadworld.store import Store

__all__ = [
    "Block", "Placement", "BLOCK_SIZE", "TerrainType", "WorldSettings",
    "DensityIndex", "PathAddress", "Quadrant", "Relation", "Store",
]
