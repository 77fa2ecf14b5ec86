"""
Coordinate transform synchronization for Bezier paths.

While a path is being edited its points are stored in the path item's
local frame, and world (scene) coordinates are derived from them
through the item's current transform. Storing local coordinates keeps
repeated move/rotate/scale events from accumulating floating-point
drift.

Each event reads the item transform exactly once (``snapshot``) and
every conversion made while handling that event goes through the
stored LocalSpace matrix.
"""

import logging
from typing import Callable, List, Optional

from PyQt6.QtCore import QPointF
from PyQt6.QtGui import QTransform

from models.bezier import (
    Point, LocalPoint, WorldPoint, BezierPoint, BezierPath,
    LocalSpace, WORLD_SPACE,
)
from services.path_data import build_path_data

logger = logging.getLogger(__name__)


# Host events that change the item transform
TRANSFORM_EVENTS = ("moving", "rotating", "scaling", "skewing", "modified")


# ----------------------------
# Matrix helpers
# ----------------------------

def map_point(matrix: QTransform, x: float, y: float) -> QPointF:
    """Apply an affine matrix to a point."""
    return matrix.map(QPointF(x, y))


def invert_matrix(matrix: QTransform) -> Optional[QTransform]:
    """Invert an affine matrix, or return None if it is singular."""
    inverse, invertible = matrix.inverted()
    if not invertible:
        return None
    return inverse


def map_bezier_point(point: BezierPoint, matrix: QTransform):
    """Map an anchor and both of its control points in place."""
    mapped = map_point(matrix, point.x, point.y)
    point.x = mapped.x()
    point.y = mapped.y()
    for index in (1, 2):
        cp = point.get_control_point(index)
        if cp is not None:
            mapped = map_point(matrix, cp.x, cp.y)
            point.set_control_point(index, Point(mapped.x(), mapped.y()))


# ----------------------------
# Synchronizer
# ----------------------------

class CoordinateTransformSynchronizer:
    """
    Converts a path's points between local and world space.

    The host item must provide ``bezier_path``, ``transform_matrix()``,
    ``set_path_data()``, ``request_render()`` and transform listener
    registration. An optional handle manager is asked to reposition its
    visuals after every transform event.
    """

    def __init__(self, handle_manager=None):
        self.handle_manager = handle_manager
        self._listeners: dict[int, Callable] = {}

    # ---- conversions ----

    def snapshot(self, item) -> QTransform:
        """
        Read the item transform once and store it on the path.

        Returns the matrix that all conversions for the current event
        must use.
        """
        matrix = QTransform(item.transform_matrix())
        path: BezierPath = item.bezier_path
        if path.bezier_points_are_local:
            path.space = LocalSpace(matrix)
        return matrix

    def to_local(self, item) -> bool:
        """
        Convert all points from world to local coordinates.

        Returns:
            True if the points were converted, False if they were
            already local or the transform cannot be inverted.
        """
        path: BezierPath = item.bezier_path
        if path.bezier_points_are_local:
            logger.debug(f"Path {path.id} already in local space")
            return False

        matrix = QTransform(item.transform_matrix())
        inverse = invert_matrix(matrix)
        if inverse is None:
            logger.warning(f"Path {path.id} has a singular transform; staying in world space")
            return False

        for point in path.points:
            map_bezier_point(point, inverse)
        path.space = LocalSpace(matrix)
        logger.debug(f"Path {path.id} converted to local space ({len(path.points)} points)")
        return True

    def to_world(self, item) -> bool:
        """
        Convert all points from local to world coordinates.

        Returns:
            True if the points were converted, False if they were
            already in world space.
        """
        path: BezierPath = item.bezier_path
        if not path.bezier_points_are_local:
            logger.debug(f"Path {path.id} already in world space")
            return False

        matrix = QTransform(item.transform_matrix())
        for point in path.points:
            map_bezier_point(point, matrix)
        path.space = WORLD_SPACE
        logger.debug(f"Path {path.id} converted to world space ({len(path.points)} points)")
        return True

    @staticmethod
    def get_world_point(path: BezierPath, point: Point) -> WorldPoint:
        """World position of a point stored in the path's active space."""
        if not path.bezier_points_are_local:
            return WorldPoint(point.x, point.y)
        mapped = map_point(path.space.matrix, point.x, point.y)
        return WorldPoint(mapped.x(), mapped.y())

    @staticmethod
    def get_local_point(path: BezierPath, point: WorldPoint) -> Optional[LocalPoint]:
        """
        Convert a world position into the path's active space.

        Returns None if the stored matrix cannot be inverted.
        """
        if not path.bezier_points_are_local:
            return LocalPoint(point.x, point.y)
        inverse = invert_matrix(path.space.matrix)
        if inverse is None:
            return None
        mapped = map_point(inverse, point.x, point.y)
        return LocalPoint(mapped.x(), mapped.y())

    def world_points(self, item) -> List[BezierPoint]:
        """
        World-space copies of the item's points.

        The path itself is not modified, so this is safe to call while
        an edit session is active.
        """
        path: BezierPath = item.bezier_path
        copies = [p.copy() for p in path.points]
        if path.bezier_points_are_local:
            matrix = QTransform(item.transform_matrix())
            for point in copies:
                map_bezier_point(point, matrix)
        return copies

    # ---- transform events ----

    def on_transform(self, item, event: str = "modified"):
        """
        Re-derive world positions after the item transform changed.

        Only acts while the path is in edit mode. Local coordinates stay
        untouched; visuals are moved to their new world positions, the
        geometry is rebuilt and a render is requested.
        """
        path: BezierPath = item.bezier_path
        if not path.is_edit_mode:
            return
        if not path.bezier_points_are_local:
            logger.warning(f"Transform event '{event}' on path {path.id} in edit mode but world space")
            return

        self.snapshot(item)

        if self.handle_manager is not None:
            self.handle_manager.update_anchor_handles()
            if path.selected_anchor_id:
                self.handle_manager.update_control_handles(path.selected_anchor_id)

        item.set_path_data(build_path_data(path.points))
        item.request_render()

    def attach(self, item):
        """Start listening to the item's transform events."""
        key = id(item)
        if key in self._listeners:
            return

        def listener(source, event):
            if event in TRANSFORM_EVENTS:
                self.on_transform(source, event)

        self._listeners[key] = listener
        item.add_transform_listener(listener)

    def detach(self, item):
        """Stop listening to the item's transform events."""
        listener = self._listeners.pop(id(item), None)
        if listener is not None:
            item.remove_transform_listener(listener)
