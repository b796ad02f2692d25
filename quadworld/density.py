"""
Density index: internal quadtree nodes holding the weight of each child subtree
"""
import logging
import os
from typing import TYPE_CHECKING, Optional

import numpy as np

from quadworld.block import Placement
from quadworld.constants import PLACEMENT_EPSILON
from quadworld.path import PathAddress, Quadrant

if TYPE_CHECKING:
    from quadworld.store import Store

logger = logging.getLogger(__name__)

WEIGHTS_DTYPE = np.dtype("<f8")


class DensityIndex:
    """Aggregate placement weight of the four quadrants below one tree node"""

    def __init__(self, store: "Store", path: PathAddress):
        """
        Args:
            store: Store owning the tree
            path: Address of the node from the current root
        """
        self.store = store
        self.path = path
        self.weights = np.zeros(4, dtype=np.float64)

    @property
    def total_weight(self) -> float:
        return float(self.weights.sum())

    @property
    def file_path(self) -> str:
        return self.store.index_file(self.path)

    def load(self) -> None:
        """Read weights from storage, keeping zeros if nothing was saved"""
        if not os.path.exists(self.file_path):
            return
        with open(self.file_path, "rb") as f:
            data = f.read()
        self.weights = np.frombuffer(data, dtype=WEIGHTS_DTYPE, count=4).astype(np.float64)

    def write(self) -> None:
        file_path = self.file_path
        os.makedirs(os.path.dirname(file_path), exist_ok=True)
        with open(file_path, "wb") as f:
            f.write(self.weights.astype(WEIGHTS_DTYPE).tobytes())

    def save(self) -> None:
        """Write this node, then refresh and write every ancestor up to the root"""
        self.write()
        node = self
        while not node.path.is_root:
            parent = self.store.get_index(node.path.parent)
            parent.weights[node.path.orientation] = node.total_weight
            parent.write()
            node = parent

    def pick_child(self) -> Optional[Placement]:
        """
        Descend by weighted draws until a stored block takes new content

        Returns:
            The placement, or None when no subtree on the way has capacity
        """
        node = self
        while True:
            total = node.total_weight
            if total < PLACEMENT_EPSILON:
                return None
            child_path = node.path.child(node._draw_quadrant(total))
            if child_path.depth >= self.store.leaf_depth:
                if not self.store.has_block(child_path):
                    logger.debug(f"Index points at missing block {child_path}")
                    return None
                return self.store.load_or_create(child_path).pick_and_place()
            node = self.store.get_index(child_path)

    def _draw_quadrant(self, total: float) -> Quadrant:
        draw = self.store.random.random() * total
        index = int(np.searchsorted(np.cumsum(self.weights), draw, side="right"))
        if index >= 4:
            index = int(np.flatnonzero(self.weights > 0)[-1])
        return Quadrant(index)
