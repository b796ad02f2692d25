"""
Quadtree addressing: relations between neighbouring cells, quadrant codes
and paths relative to a root that can grow in any direction
"""
from enum import IntEnum, IntFlag
from typing import Iterable, Iterator, List, Optional, Tuple

RELATION_EPSILON = 0.01


class Relation(IntFlag):
    """Position of one region relative to another: 8 neighbours plus center"""
    CENTER = 0
    TOP = 1
    BOTTOM = 2
    LEFT = 4
    RIGHT = 8
    TOP_LEFT = TOP | LEFT
    TOP_RIGHT = TOP | RIGHT
    BOTTOM_LEFT = BOTTOM | LEFT
    BOTTOM_RIGHT = BOTTOM | RIGHT
    VERTICAL = TOP | BOTTOM
    HORIZONTAL = LEFT | RIGHT
    EVERYTHING = TOP | BOTTOM | LEFT | RIGHT

    @classmethod
    def from_vector(cls, x: float, y: float) -> "Relation":
        """
        Build a relation from a displacement, y growing upward

        Args:
            x: Horizontal displacement
            y: Vertical displacement

        Returns:
            The relation the displacement points to, CENTER for a zero vector
        """
        mask = cls.CENTER
        if x > RELATION_EPSILON:
            mask |= cls.RIGHT
        elif x < -RELATION_EPSILON:
            mask |= cls.LEFT
        if y > RELATION_EPSILON:
            mask |= cls.TOP
        elif y < -RELATION_EPSILON:
            mask |= cls.BOTTOM
        return cls(mask)

    @classmethod
    def all(cls) -> List["Relation"]:
        """Get the 9 valid relations (no contradictory up+down or left+right)"""
        return [
            cls(mask) for mask in range(16)
            if mask & cls.VERTICAL != cls.VERTICAL and mask & cls.HORIZONTAL != cls.HORIZONTAL
        ]

    @property
    def x(self) -> int:
        return (1 if self & Relation.RIGHT else 0) - (1 if self & Relation.LEFT else 0)

    @property
    def y(self) -> int:
        return (1 if self & Relation.TOP else 0) - (1 if self & Relation.BOTTOM else 0)

    def flip(self) -> "Relation":
        """Get the opposite relation"""
        return Relation.from_vector(-self.x, -self.y)

    def parts(self) -> Iterator["Relation"]:
        """Split into cardinal components, horizontal first"""
        if self & Relation.LEFT:
            yield Relation.LEFT
        elif self & Relation.RIGHT:
            yield Relation.RIGHT
        if self & Relation.TOP:
            yield Relation.TOP
        elif self & Relation.BOTTOM:
            yield Relation.BOTTOM


DIRECTIONS = (Relation.TOP, Relation.BOTTOM, Relation.LEFT, Relation.RIGHT)


class Quadrant(IntEnum):
    """
    Child slot of a tree node. Bit 1 marks the right half and bit 2 the
    bottom half of the parent.
    """
    TOP_LEFT = 0
    TOP_RIGHT = 1
    BOTTOM_LEFT = 2
    BOTTOM_RIGHT = 3

    @property
    def is_right(self) -> bool:
        return bool(self & 1)

    @property
    def is_bottom(self) -> bool:
        return bool(self & 2)

    def has_adjacent(self, relation: Relation) -> bool:
        """
        Check whether the sibling in a direction shares this quadrant's parent

        Args:
            relation: A cardinal direction

        Returns:
            True if moving that way stays inside the parent
        """
        if relation == Relation.TOP:
            return self.is_bottom
        if relation == Relation.BOTTOM:
            return not self.is_bottom
        if relation == Relation.LEFT:
            return self.is_right
        if relation == Relation.RIGHT:
            return not self.is_right
        return False

    def flip(self, relation: Relation) -> "Quadrant":
        """Mirror the quadrant across the axis a direction crosses"""
        if relation & Relation.VERTICAL:
            return Quadrant(self ^ 2)
        if relation & Relation.HORIZONTAL:
            return Quadrant(self ^ 1)
        return self


class PathAddress:
    """
    Route from a tree root to a node, one quadrant per level.

    Paths are written as quadrant codes joined by "/", e.g. "2/3". The
    first code selects a child of the root the path was built against.
    When the tree grows a new root, paths built earlier are one level too
    short; normalized() restores the missing leading codes from the
    history prefix.
    """

    def __init__(self, codes: Iterable[int] = ()):
        self.codes: Tuple[Quadrant, ...] = tuple(Quadrant(code) for code in codes)
        self._relative: Optional[Tuple[Tuple[Quadrant, ...], str]] = None

    @classmethod
    def parse(cls, text: str) -> "PathAddress":
        """
        Parse a "/"-joined path

        Args:
            text: Path text, empty for the root

        Returns:
            The parsed path
        """
        text = text.strip("/")
        if not text:
            return cls()
        return cls(int(part) for part in text.split("/"))

    @property
    def depth(self) -> int:
        return len(self.codes)

    @property
    def is_root(self) -> bool:
        return not self.codes

    @property
    def parent(self) -> "PathAddress":
        if len(self.codes) <= 1:
            return PathAddress()
        return PathAddress(self.codes[:-1])

    @property
    def orientation(self) -> Quadrant:
        """Quadrant this node occupies inside its parent"""
        if not self.codes:
            raise ValueError("Root path has no orientation")
        return self.codes[-1]

    @property
    def root(self) -> Quadrant:
        """Quadrant selected at the top level"""
        if not self.codes:
            raise ValueError("Path without root")
        return self.codes[0]

    def child(self, quadrant: int) -> "PathAddress":
        return PathAddress(self.codes + (Quadrant(quadrant),))

    def grow(self, root) -> "PathAddress":
        """
        Prepend a new top-level quadrant

        Args:
            root: A quadrant code, or a Relation naming the side that has to
                become free. TOP and RIGHT use quadrant 2, anything else 1.

        Returns:
            The path seen from a root one level higher
        """
        if isinstance(root, Relation):
            root = Quadrant.BOTTOM_LEFT if root & Relation.TOP_RIGHT else Quadrant.TOP_RIGHT
        return PathAddress((Quadrant(root),) + self.codes)

    def has_adjacent(self, relation: Relation) -> bool:
        """Check whether a neighbour in a direction exists without growing the tree"""
        return any(code.has_adjacent(relation) for code in reversed(self.codes))

    def find_adjacent_path(self, relation: Relation) -> Optional["PathAddress"]:
        """
        Find the path of the same-depth neighbour in a cardinal direction

        Codes are mirrored from the deepest level upward until a level that
        already has a sibling on that side; shallower levels are shared.

        Args:
            relation: A cardinal direction

        Returns:
            The neighbour's path, or None for the empty path
        """
        if not self.codes:
            return None
        shared: List[Quadrant] = []
        found = False
        for code in reversed(self.codes):
            shared.append(code if found else code.flip(relation))
            if code.has_adjacent(relation):
                found = True
        shared.reverse()
        return PathAddress(shared)

    def normalized(self, history: "PathAddress") -> "PathAddress":
        """
        Restore leading codes lost to root growth

        Args:
            history: Codes of every root grown so far, newest first

        Returns:
            A path of depth len(history) + 1, or self when already that deep
        """
        missing = len(history.codes) + 1 - len(self.codes)
        if missing <= 0:
            return self
        return PathAddress(history.codes[:missing] + self.codes)

    def relative(self, history: "PathAddress") -> str:
        """Get the key of this path that stays stable while the root grows"""
        if self._relative is not None and self._relative[0] == history.codes:
            return self._relative[1]
        codes = self.normalized(history).codes
        offset = 0
        while offset < len(history.codes) and offset < len(codes):
            if history.codes[offset] != codes[offset]:
                break
            offset += 1
        key = "/".join(str(int(code)) for code in codes[offset:])
        self._relative = (history.codes, key)
        return key

    def __len__(self) -> int:
        return len(self.codes)

    def __eq__(self, other) -> bool:
        if not isinstance(other, PathAddress):
            return NotImplemented
        return self.codes == other.codes

    def __hash__(self) -> int:
        return hash(self.codes)

    def __str__(self) -> str:
        return "/".join(str(int(code)) for code in self.codes)

    def __repr__(self) -> str:
        return f"PathAddress('{self}')"
