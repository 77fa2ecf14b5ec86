"""
Unit tests for Bezier geometry functions.

Tests:
- Evaluation and tangents at the end points
- De Casteljau subdivision reproduces the original curve
- Closest-point search on single segments and whole paths
- Smooth handle alignment
"""

import math
import pytest

from models.bezier import BezierPoint, Point
from services.bezier_math import (
    CubicSegment, lerp, distance, vector_length, normalize_vector,
    calculate_angle, calculate_handle_position,
    evaluate_cubic_bezier, tangent_cubic_bezier, subdivide_cubic_bezier,
    segment_control_points, find_closest_point_on_cubic_bezier,
    find_closest_point_on_path, align_control_handles, handles_are_aligned,
)


CURVE = (Point(0, 0), Point(30, 90), Point(120, -40), Point(150, 30))


def approx_point(p: Point, tol: float = 1e-9):
    return pytest.approx((p.x, p.y), abs=tol)


class TestVectorHelpers:
    """Tests for small vector helpers."""

    def test_lerp(self):
        assert lerp(Point(0, 0), Point(10, 20), 0.25) == Point(2.5, 5)

    def test_distance_and_length(self):
        assert distance(Point(0, 0), Point(3, 4)) == 5
        assert vector_length(Point(-3, 4)) == 5

    def test_normalize(self):
        n = normalize_vector(Point(0, -5))
        assert (n.x, n.y) == (0, -1)

    def test_normalize_zero_vector(self):
        assert normalize_vector(Point(0, 0)) == Point(0, 0)

    def test_angle_and_handle_position(self):
        anchor = Point(10, 10)
        angle = calculate_angle(anchor, Point(10, 20))
        assert angle == pytest.approx(math.pi / 2)
        handle = calculate_handle_position(anchor, angle, 5)
        assert (handle.x, handle.y) == approx_point(Point(10, 15))


class TestEvaluation:
    """Tests for curve evaluation."""

    def test_end_points(self):
        p0, cp1, cp2, p1 = CURVE
        assert evaluate_cubic_bezier(0, *CURVE) == p0
        assert (evaluate_cubic_bezier(1, *CURVE).x, evaluate_cubic_bezier(1, *CURVE).y) == \
            approx_point(p1)

    def test_midpoint(self):
        # B(0.5) = (P0 + 3C1 + 3C2 + P1) / 8
        mid = evaluate_cubic_bezier(0.5, *CURVE)
        assert (mid.x, mid.y) == approx_point(Point((0 + 90 + 360 + 150) / 8, (0 + 270 - 120 + 30) / 8))

    def test_tangent_at_ends(self):
        p0, cp1, cp2, p1 = CURVE
        start = tangent_cubic_bezier(0, *CURVE)
        end = tangent_cubic_bezier(1, *CURVE)
        assert (start.x, start.y) == approx_point((cp1 - p0) * 3)
        assert (end.x, end.y) == approx_point((p1 - cp2) * 3)

    def test_segment_control_points_fall_back_to_anchors(self):
        a = BezierPoint(x=0, y=0)
        b = BezierPoint(x=10, y=0, control_point1=Point(8, 2))
        seg = segment_control_points(a, b)
        assert seg == CubicSegment(Point(0, 0), Point(0, 0), Point(8, 2), Point(10, 0))


class TestSubdivision:
    """Tests for De Casteljau subdivision."""

    @pytest.mark.parametrize("t", [0.1, 0.33, 0.5, 0.8])
    def test_halves_reproduce_curve(self, t):
        left, right = subdivide_cubic_bezier(t, *CURVE)
        for s in (0.0, 0.2, 0.5, 0.7, 1.0):
            original_left = evaluate_cubic_bezier(t * s, *CURVE)
            original_right = evaluate_cubic_bezier(t + (1 - t) * s, *CURVE)
            l = left.evaluate(s)
            r = right.evaluate(s)
            assert (l.x, l.y) == approx_point(original_left)
            assert (r.x, r.y) == approx_point(original_right)

    def test_split_point_is_shared(self):
        left, right = subdivide_cubic_bezier(0.4, *CURVE)
        assert left.p1 == right.p0
        split = evaluate_cubic_bezier(0.4, *CURVE)
        assert (left.p1.x, left.p1.y) == approx_point(split)
        assert left.p0 == CURVE[0]
        assert right.p1 == CURVE[3]


class TestClosestPoint:
    """Tests for the sampled closest-point search."""

    def test_straight_cubic(self):
        """A query on a straight cubic at a sampled parameter lands on the curve."""
        p0, p1 = Point(0, 0), Point(100, 0)
        # x(t) = 100 * (3t^2 - 2t^3) at t = 0.25, 0.5, 0.75
        for qx in (15.625, 50.0, 84.375):
            t = find_closest_point_on_cubic_bezier(qx, 0, p0, p0, p1, p1)
            hit = evaluate_cubic_bezier(t, p0, p0, p1, p1)
            assert distance(hit, Point(qx, 0)) < 1e-2

    def test_straight_cubic_between_samples(self):
        """Off-sample queries are resolved to the refinement step."""
        p0, p1 = Point(0, 0), Point(100, 0)
        for qx in (7.0, 31.0, 77.0):
            t = find_closest_point_on_cubic_bezier(qx, 0, p0, p0, p1, p1)
            hit = evaluate_cubic_bezier(t, p0, p0, p1, p1)
            assert distance(hit, Point(qx, 0)) < 1.0

    def test_straight_cubic_with_thirds_handles(self):
        """Evenly spaced handles make the curve linear in t."""
        p0, cp1, cp2, p1 = Point(0, 0), Point(100 / 3, 0), Point(200 / 3, 0), Point(100, 0)
        for qx in (10.0, 25.0, 50.0, 90.0):
            t = find_closest_point_on_cubic_bezier(qx, 0, p0, cp1, cp2, p1)
            hit = evaluate_cubic_bezier(t, p0, cp1, cp2, p1)
            assert distance(hit, Point(qx, 0)) < 1e-2

    def test_end_points(self):
        assert find_closest_point_on_cubic_bezier(-50, 0, *CURVE) == 0.0
        assert find_closest_point_on_cubic_bezier(400, 60, *CURVE) == 1.0

    def test_path_picks_nearest_segment(self, three_anchor_path):
        result = find_closest_point_on_path(150, 8, three_anchor_path.points)
        assert result is not None
        assert result.segment_index == 1
        assert 0 < result.t < 1
        assert result.distance == pytest.approx(distance(result.point, Point(150, 8)))

    def test_path_needs_two_points(self):
        assert find_closest_point_on_path(0, 0, [BezierPoint()]) is None
        assert find_closest_point_on_path(0, 0, []) is None


class TestHandleAlignment:
    """Tests for smooth handle alignment."""

    def test_mirrors_direction_keeps_length(self):
        anchor = Point(100, 0)
        cp1 = Point(80, -20)
        cp2 = Point(130, 20)
        new_cp1, same_cp2 = align_control_handles(anchor, cp1, cp2)

        assert same_cp2 == cp2
        assert distance(anchor, new_cp1) == pytest.approx(distance(anchor, cp1))
        d1 = normalize_vector(new_cp1 - anchor)
        d2 = normalize_vector(cp2 - anchor)
        assert (d1.x, d1.y) == approx_point(-d2)
        assert handles_are_aligned(anchor, new_cp1, cp2)

    def test_without_maintaining_length_reflects(self):
        anchor = Point(10, 10)
        new_cp1, _ = align_control_handles(anchor, Point(0, 0), Point(15, 12), maintain_lengths=False)
        assert new_cp1 == Point(5, 8)

    def test_degenerate_reference_handle(self):
        """A reference handle on the anchor collapses the other onto it."""
        anchor = Point(10, 10)
        new_cp1, _ = align_control_handles(anchor, Point(0, 0), Point(10, 10))
        assert new_cp1 == anchor

    def test_alignment_check(self):
        anchor = Point(0, 0)
        assert handles_are_aligned(anchor, Point(-1, 0), Point(5, 0))
        assert not handles_are_aligned(anchor, Point(-1, 1), Point(5, 0))
        assert handles_are_aligned(anchor, anchor, Point(5, 0))
