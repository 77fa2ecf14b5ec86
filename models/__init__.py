"""
Models package.

This package contains the data models for the Bezier path editor:
- Points and their coordinate-space tags (Point, LocalPoint, WorldPoint)
- Anchors and paths (BezierPoint, BezierPath)
- Coordinate spaces (WorldSpace, LocalSpace)
"""

from .bezier import (
    MIN_ANCHORS,
    AnchorType,
    Point,
    LocalPoint,
    WorldPoint,
    WorldSpace,
    LocalSpace,
    WORLD_SPACE,
    BezierPoint,
    BezierPath,
    segment_points,
)

__all__ = [
    "MIN_ANCHORS",
    "AnchorType",
    "Point",
    "LocalPoint",
    "WorldPoint",
    "WorldSpace",
    "LocalSpace",
    "WORLD_SPACE",
    "BezierPoint",
    "BezierPath",
    "segment_points",
]
