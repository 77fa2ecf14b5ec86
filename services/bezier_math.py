"""
Cubic Bezier geometry.

Pure functions on Point values: evaluation, tangents, De Casteljau
subdivision, closest-point search and control handle alignment.
Nothing here depends on Qt, so the functions can be used (and
replaced) without touching the editor.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from models.bezier import Point, BezierPoint, segment_points


# Sampling used by the closest-point search
COARSE_SAMPLES = 20
REFINE_SAMPLES = 10


@dataclass(frozen=True)
class CubicSegment:
    """One cubic Bezier segment: start, two control points, end."""
    p0: Point
    cp1: Point
    cp2: Point
    p1: Point

    def evaluate(self, t: float) -> Point:
        return evaluate_cubic_bezier(t, self.p0, self.cp1, self.cp2, self.p1)

    def as_tuple(self) -> Tuple[Point, Point, Point, Point]:
        return (self.p0, self.cp1, self.cp2, self.p1)


@dataclass(frozen=True)
class ClosestPoint:
    """Result of a closest-point search along a path."""
    segment_index: int
    t: float
    point: Point
    distance: float


# ----------------------------
# Vector helpers
# ----------------------------

def lerp(p0: Point, p1: Point, t: float) -> Point:
    """Linear interpolation between two points."""
    return Point(p0.x + (p1.x - p0.x) * t, p0.y + (p1.y - p0.y) * t)


def distance(p0: Point, p1: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(p1.x - p0.x, p1.y - p0.y)


def vector_length(v: Point) -> float:
    """Get length of a vector."""
    return math.hypot(v.x, v.y)


def normalize_vector(v: Point) -> Point:
    """Normalize a vector to unit length."""
    length = vector_length(v)
    if length == 0:
        return Point(0.0, 0.0)
    return Point(v.x / length, v.y / length)


def calculate_angle(origin: Point, target: Point) -> float:
    """Angle in radians of the direction from origin to target."""
    return math.atan2(target.y - origin.y, target.x - origin.x)


def calculate_handle_position(anchor: Point, angle: float, length: float) -> Point:
    """Place a handle at a given angle (radians) and length from its anchor."""
    return Point(anchor.x + math.cos(angle) * length,
                 anchor.y + math.sin(angle) * length)


# ----------------------------
# Curve evaluation
# ----------------------------

def evaluate_cubic_bezier(t: float, p0: Point, cp1: Point, cp2: Point, p1: Point) -> Point:
    """
    Evaluate a cubic Bezier curve at parameter t (0 to 1).

    B(t) = (1-t)^3*P0 + 3(1-t)^2*t*C1 + 3(1-t)*t^2*C2 + t^3*P1
    """
    u = 1.0 - t
    b0 = u * u * u
    b1 = 3.0 * u * u * t
    b2 = 3.0 * u * t * t
    b3 = t * t * t
    return Point(
        b0 * p0.x + b1 * cp1.x + b2 * cp2.x + b3 * p1.x,
        b0 * p0.y + b1 * cp1.y + b2 * cp2.y + b3 * p1.y,
    )


def tangent_cubic_bezier(t: float, p0: Point, cp1: Point, cp2: Point, p1: Point) -> Point:
    """
    First derivative of a cubic Bezier curve at parameter t.

    B'(t) = 3(1-t)^2*(C1-P0) + 6(1-t)*t*(C2-C1) + 3t^2*(P1-C2)
    """
    u = 1.0 - t
    a = 3.0 * u * u
    b = 6.0 * u * t
    c = 3.0 * t * t
    return Point(
        a * (cp1.x - p0.x) + b * (cp2.x - cp1.x) + c * (p1.x - cp2.x),
        a * (cp1.y - p0.y) + b * (cp2.y - cp1.y) + c * (p1.y - cp2.y),
    )


def subdivide_cubic_bezier(
    t: float, p0: Point, cp1: Point, cp2: Point, p1: Point
) -> Tuple[CubicSegment, CubicSegment]:
    """
    Split a cubic Bezier at t using De Casteljau's construction.

    Returns:
        (left, right) where left covers [0, t] and right covers [t, 1].
        Together they trace exactly the original curve.
    """
    # Level 1
    p01 = lerp(p0, cp1, t)
    p12 = lerp(cp1, cp2, t)
    p23 = lerp(cp2, p1, t)

    # Level 2
    p012 = lerp(p01, p12, t)
    p123 = lerp(p12, p23, t)

    # Level 3 - the point on the curve at t
    p0123 = lerp(p012, p123, t)

    left = CubicSegment(p0, p01, p012, p0123)
    right = CubicSegment(p0123, p123, p23, p1)
    return left, right


def segment_control_points(a0: BezierPoint, a1: BezierPoint) -> CubicSegment:
    """Build the segment between two anchors; missing handles collapse onto the anchor."""
    return CubicSegment(*segment_points(a0, a1))


# ----------------------------
# Closest point search
# ----------------------------

def find_closest_point_on_cubic_bezier(
    x: float, y: float,
    p0: Point, cp1: Point, cp2: Point, p1: Point,
    samples: int = COARSE_SAMPLES,
    refine_samples: int = REFINE_SAMPLES,
) -> float:
    """
    Approximate the parameter t of the curve point nearest to (x, y).

    Uniform coarse sampling finds the best t, then a second uniform pass
    searches the neighbouring +/- 1/samples interval. This is a sampling
    heuristic, not an analytic solve.
    """
    target = Point(x, y)
    best_t = 0.0
    best_dist = math.inf

    for i in range(samples + 1):
        t = i / samples
        d = distance(target, evaluate_cubic_bezier(t, p0, cp1, cp2, p1))
        if d < best_dist:
            best_dist = d
            best_t = t

    span = 1.0 / samples
    start = max(0.0, best_t - span)
    end = min(1.0, best_t + span)
    for i in range(refine_samples + 1):
        t = start + (end - start) * (i / refine_samples)
        d = distance(target, evaluate_cubic_bezier(t, p0, cp1, cp2, p1))
        if d < best_dist:
            best_dist = d
            best_t = t

    return best_t


def find_closest_point_on_path(
    x: float, y: float,
    points: Sequence[BezierPoint],
    samples: int = COARSE_SAMPLES,
    refine_samples: int = REFINE_SAMPLES,
) -> Optional[ClosestPoint]:
    """
    Find the point of a multi-segment path nearest to (x, y).

    Returns:
        ClosestPoint with the segment index, local parameter and point,
        or None when there are fewer than two anchors.
    """
    if len(points) < 2:
        return None

    target = Point(x, y)
    best: Optional[ClosestPoint] = None

    for i in range(len(points) - 1):
        seg = segment_control_points(points[i], points[i + 1])
        t = find_closest_point_on_cubic_bezier(
            x, y, *seg.as_tuple(), samples=samples, refine_samples=refine_samples
        )
        point = seg.evaluate(t)
        d = distance(target, point)
        if best is None or d < best.distance:
            best = ClosestPoint(segment_index=i, t=t, point=point, distance=d)

    return best


# ----------------------------
# Handle alignment
# ----------------------------

def align_control_handles(
    anchor: Point, cp1: Point, cp2: Point, maintain_lengths: bool = True
) -> Tuple[Point, Point]:
    """
    Make cp1 point directly away from cp2 across the anchor.

    Args:
        anchor: The anchor both handles belong to
        cp1: Handle to recompute
        cp2: Handle whose direction is authoritative (returned unchanged)
        maintain_lengths: Keep cp1's own distance from the anchor

    Returns:
        (new_cp1, cp2). Falls back to a pure reflection of cp2 when lengths
        are not kept or cp2 sits on the anchor.
    """
    dx = cp2.x - anchor.x
    dy = cp2.y - anchor.y

    if maintain_lengths:
        len2 = math.hypot(dx, dy)
        if len2 > 0:
            len1 = distance(anchor, cp1)
            return (
                Point(anchor.x - dx / len2 * len1, anchor.y - dy / len2 * len1),
                cp2,
            )

    return Point(anchor.x - dx, anchor.y - dy), cp2


def handles_are_aligned(anchor: Point, cp1: Point, cp2: Point, tolerance: float = 1e-9) -> bool:
    """Check that two handles point in opposite directions from the anchor."""
    d1 = normalize_vector(cp1 - anchor)
    d2 = normalize_vector(cp2 - anchor)
    if vector_length(d1) == 0 or vector_length(d2) == 0:
        return True
    return abs(d1.x + d2.x) <= tolerance and abs(d1.y + d2.y) <= tolerance
