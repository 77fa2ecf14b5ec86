"""
Bezier path data models.

These models describe an editable cubic Bezier path independently of
any canvas. Coordinates are plain floats; which coordinate space they
are expressed in is tracked by the owning BezierPath.

Key concepts:
- Point: Immutable 2D value (LocalPoint / WorldPoint tag the space)
- BezierPoint: Anchor with optional incoming/outgoing control points
- CoordinateSpace: WorldSpace or LocalSpace(matrix snapshot)
- BezierPath: Ordered anchors plus edit-mode state
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Iterator, Tuple, TYPE_CHECKING
from enum import Enum
import uuid

if TYPE_CHECKING:
    from PyQt6.QtGui import QTransform


MIN_ANCHORS = 2


# =============================================================================
# Enumerations
# =============================================================================

class AnchorType(Enum):
    """Anchor behaviour for its two control points."""
    SMOOTH = "smooth"   # Control points stay directionally opposite
    CORNER = "corner"   # Control points move independently

    def toggled(self) -> "AnchorType":
        return AnchorType.CORNER if self is AnchorType.SMOOTH else AnchorType.SMOOTH


# =============================================================================
# Helper Functions
# =============================================================================

def _generate_id() -> str:
    """Generate a unique anchor ID."""
    return str(uuid.uuid4())


# =============================================================================
# Points
# =============================================================================

@dataclass(frozen=True)
class Point:
    """2D point value with no identity."""
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, k: float) -> "Point":
        return Point(self.x * k, self.y * k)

    __rmul__ = __mul__

    def __neg__(self) -> "Point":
        return Point(-self.x, -self.y)

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Point":
        """Create from dictionary, rejecting malformed records."""
        try:
            return cls(float(data["x"]), float(data["y"]))
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid point record {data!r}: {e}") from e


@dataclass(frozen=True)
class LocalPoint(Point):
    """Point expressed in a path's own untransformed frame."""


@dataclass(frozen=True)
class WorldPoint(Point):
    """Point expressed in canvas (scene) coordinates."""


# =============================================================================
# Coordinate spaces
# =============================================================================

@dataclass(frozen=True)
class WorldSpace:
    """Points are stored in canvas coordinates."""

    @property
    def is_local(self) -> bool:
        return False


@dataclass(frozen=True, eq=False)
class LocalSpace:
    """
    Points are stored in the path's local frame.

    Attributes:
        matrix: Local-to-world transform captured at the last
                transform or edit event.
    """
    matrix: "QTransform"

    @property
    def is_local(self) -> bool:
        return True


WORLD_SPACE = WorldSpace()


# =============================================================================
# Anchors and paths
# =============================================================================

@dataclass
class BezierPoint:
    """
    An anchor point on a cubic Bezier path.

    Attributes:
        id: Stable unique identifier, generated once at creation
        x: Anchor X in the path's active coordinate space
        y: Anchor Y in the path's active coordinate space
        type: Smooth or corner
        control_point1: Incoming handle (shapes the segment ending here)
        control_point2: Outgoing handle (shapes the segment starting here)
    """
    x: float = 0.0
    y: float = 0.0
    type: AnchorType = AnchorType.SMOOTH
    control_point1: Optional[Point] = None
    control_point2: Optional[Point] = None
    id: str = field(default_factory=_generate_id)

    def __post_init__(self):
        """Convert string type to enum if needed."""
        if isinstance(self.type, str):
            self.type = AnchorType(self.type)

    @property
    def anchor(self) -> Point:
        return Point(self.x, self.y)

    @property
    def is_smooth(self) -> bool:
        return self.type is AnchorType.SMOOTH

    def get_control_point(self, index: int) -> Optional[Point]:
        """Get control point 1 (incoming) or 2 (outgoing)."""
        if index == 1:
            return self.control_point1
        if index == 2:
            return self.control_point2
        raise ValueError(f"Control point index must be 1 or 2, got {index}")

    def set_control_point(self, index: int, value: Optional[Point]):
        """Set control point 1 (incoming) or 2 (outgoing)."""
        if index == 1:
            self.control_point1 = value
        elif index == 2:
            self.control_point2 = value
        else:
            raise ValueError(f"Control point index must be 1 or 2, got {index}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        d = {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "type": self.type.value,
        }
        if self.control_point1 is not None:
            d["controlPoint1"] = self.control_point1.to_dict()
        if self.control_point2 is not None:
            d["controlPoint2"] = self.control_point2.to_dict()
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BezierPoint":
        """Create from dictionary, rejecting malformed records."""
        if not isinstance(data, dict):
            raise ValueError(f"Invalid anchor record: {data!r}")
        try:
            anchor_type = AnchorType(data.get("type", "smooth"))
            x = float(data["x"])
            y = float(data["y"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid anchor record {data!r}: {e}") from e
        cp1 = data.get("controlPoint1")
        cp2 = data.get("controlPoint2")
        return cls(
            id=data.get("id") or _generate_id(),
            x=x,
            y=y,
            type=anchor_type,
            control_point1=Point.from_dict(cp1) if cp1 is not None else None,
            control_point2=Point.from_dict(cp2) if cp2 is not None else None,
        )

    def copy(self) -> "BezierPoint":
        """Create a copy that keeps the same ID."""
        return BezierPoint(
            id=self.id,
            x=self.x,
            y=self.y,
            type=self.type,
            control_point1=self.control_point1,
            control_point2=self.control_point2,
        )


def segment_points(a0: BezierPoint, a1: BezierPoint) -> Tuple[Point, Point, Point, Point]:
    """
    (p0, cp1, cp2, p1) of the segment between two anchors.

    The segment uses the outgoing handle of a0 and the incoming handle
    of a1; a missing handle collapses onto its own anchor.
    """
    p0 = a0.anchor
    p1 = a1.anchor
    cp1 = a0.control_point2 if a0.control_point2 is not None else p0
    cp2 = a1.control_point1 if a1.control_point1 is not None else p1
    return (p0, cp1, cp2, p1)


@dataclass
class BezierPath:
    """
    An open cubic Bezier path made of ordered anchors.

    Attributes:
        points: Anchors in drawing order (at least two for a valid path)
        is_edit_mode: Whether an edit session currently owns the path
        space: Coordinate space of every point in ``points``
        selected_anchor_id: Anchor selected in the active session
        id: Unique identifier for this path
    """
    points: List[BezierPoint] = field(default_factory=list)
    is_edit_mode: bool = False
    space: Any = WORLD_SPACE
    selected_anchor_id: Optional[str] = None
    id: str = field(default_factory=_generate_id)

    @property
    def bezier_points_are_local(self) -> bool:
        return self.space.is_local

    @property
    def is_valid(self) -> bool:
        return len(self.points) >= MIN_ANCHORS

    def find_point(self, point_id: str) -> Optional[BezierPoint]:
        """Get an anchor by ID."""
        for point in self.points:
            if point.id == point_id:
                return point
        return None

    def index_of(self, point_id: str) -> int:
        """Get the index of an anchor, or -1 if missing."""
        for i, point in enumerate(self.points):
            if point.id == point_id:
                return i
        return -1

    def segments(self) -> Iterator[Tuple[Point, Point, Point, Point]]:
        """
        Yield (p0, cp1, cp2, p1) for every segment.

        A missing handle collapses onto its own anchor.
        """
        for a0, a1 in zip(self.points, self.points[1:]):
            yield segment_points(a0, a1)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Raises:
            ValueError: If the points are currently in local space.
        """
        if self.bezier_points_are_local:
            raise ValueError(
                "Cannot serialize a path while its points are in local space; "
                "flush to world coordinates first"
            )
        return {
            "id": self.id,
            "points": [p.to_dict() for p in self.points],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BezierPath":
        """Create from dictionary (points are world coordinates)."""
        raw_points = data.get("points")
        if not isinstance(raw_points, list):
            raise ValueError("Path record has no point list")
        points = [BezierPoint.from_dict(p) for p in raw_points]
        ids = [p.id for p in points]
        if len(set(ids)) != len(ids):
            raise ValueError("Path record contains duplicate anchor IDs")
        return cls(
            id=data.get("id") or _generate_id(),
            points=points,
        )
