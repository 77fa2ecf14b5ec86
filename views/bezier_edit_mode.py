"""
Bezier edit mode.

Interaction state machine for editing one BezierPathItem at a time:

    Idle  <->  AnchorSelected(id)      (hover_anchor_id tracked orthogonally)

While a session is active the path's points live in the item's local
frame (see services.transform_sync). Pointer positions arrive in scene
coordinates and are converted through the matrix snapshot taken at the
start of each event, so a single event never mixes two transforms.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

from models.bezier import (
    AnchorType, BezierPath, BezierPoint, Point, WorldPoint, MIN_ANCHORS,
)
from services.bezier_math import (
    align_control_handles, find_closest_point_on_path,
    segment_control_points, subdivide_cubic_bezier,
)
from services.path_data import build_path_data
from services.settings_manager import EditorSettings
from services.transform_sync import CoordinateTransformSynchronizer
from views.bezier_canvas import BezierCanvasScene, BezierPathItem
from views.handle_manager import HandleManager

logger = logging.getLogger(__name__)


@dataclass
class EditSession:
    """State of the path currently being edited."""
    item: BezierPathItem
    selected_anchor_id: Optional[str] = None
    hover_anchor_id: Optional[str] = None

    @property
    def path(self) -> BezierPath:
        return self.item.bezier_path


class BezierEditMode(QObject):
    """
    Edits the anchors and control points of a Bezier path.

    Signals:
        stateChanged: Emitted after activation, deactivation, selection
                      changes and point insertion/deletion/toggling.
    """

    stateChanged = pyqtSignal()

    def __init__(self, scene: BezierCanvasScene, settings: Optional[EditorSettings] = None,
                 parent=None):
        super().__init__(parent)
        self.scene = scene
        self.settings = settings or EditorSettings()
        self._session: Optional[EditSession] = None

        self.sync = CoordinateTransformSynchronizer()
        self.handles = HandleManager(scene, self, self.settings.handles, self.sync)
        self.sync.handle_manager = self.handles

    # ---- queries ----

    def is_active(self) -> bool:
        return self._session is not None

    @property
    def path_item(self) -> Optional[BezierPathItem]:
        return self._session.item if self._session else None

    @property
    def hover_anchor_id(self) -> Optional[str]:
        return self._session.hover_anchor_id if self._session else None

    def get_selected_anchor_id(self) -> Optional[str]:
        return self._session.selected_anchor_id if self._session else None

    def selected_point(self) -> Optional[BezierPoint]:
        """The selected anchor of the active path, if any."""
        if self._session is None or self._session.selected_anchor_id is None:
            return None
        return self._session.path.find_point(self._session.selected_anchor_id)

    # ---- lifecycle ----

    def activate(self, item) -> bool:
        """
        Start editing a path item.

        Converts the path's points to local space, locks the item against
        selection and dragging, and creates one anchor handle per point.

        Returns:
            True if a session was started.
        """
        if not isinstance(item, BezierPathItem):
            logger.warning("Can only edit Bezier path items")
            return False
        if not item.bezier_path.is_valid:
            logger.warning(f"Path {item.bezier_path.id} needs at least {MIN_ANCHORS} points to edit")
            return False
        if self._session is not None:
            if self._session.item is item:
                return True
            self.deactivate()

        path = item.bezier_path
        logger.debug(f"Activating edit mode on path {path.id} ({len(path.points)} points)")

        path.is_edit_mode = True
        self.sync.to_local(item)
        self.sync.snapshot(item)

        item.set_properties(selectable=False, evented=False, object_caching=False)

        self._session = EditSession(item=item)
        self.handles.bind(item)
        for point in path.points:
            self.handles.create_anchor_handle(point)
        self.sync.attach(item)

        self.scene.request_render()
        self.stateChanged.emit()
        return True

    def deactivate(self):
        """
        End the session: remove all visuals, convert points back to world
        space and unlock the item. Safe to call when idle.
        """
        if self._session is None:
            return

        item = self._session.item
        path = item.bezier_path
        logger.debug(f"Deactivating edit mode on path {path.id}")

        self.sync.detach(item)
        self.handles.clear_handles()
        self.scene.clearSelection()

        if path.is_valid:
            self.sync.to_world(item)

        path.is_edit_mode = False
        path.selected_anchor_id = None

        item.set_properties(selectable=True, evented=True, object_caching=True)

        self._session = None
        self.handles.bind(None)
        self.handles.sweep_scene()

        self.scene.request_render()
        self.stateChanged.emit()

    # ---- geometry ----

    def rebuild_path(self):
        """Regenerate the item geometry from the point list and move the anchors."""
        if self._session is None:
            return
        path = self._session.path
        if not path.is_valid:
            return
        self._session.item.set_path_data(build_path_data(path.points))
        self.handles.update_anchor_handles()
        self.scene.request_render()

    def update_anchor_handles(self):
        """Move every anchor visual to its current world position."""
        if self._session is None:
            return
        self.sync.snapshot(self._session.item)
        self.handles.update_anchor_handles()
        self.scene.request_render()

    # ---- selection ----

    def handle_anchor_click(self, point_id: str):
        """Select an anchor, dropping the previous selection."""
        if self._session is None:
            return
        if self._session.selected_anchor_id == point_id:
            return
        if self._session.path.find_point(point_id) is None:
            logger.debug(f"Click on unknown anchor {point_id}")
            return

        if self._session.selected_anchor_id is not None:
            self._deselect_anchor()
        self._select_anchor(point_id)
        self.stateChanged.emit()

    def _select_anchor(self, point_id: str):
        self._session.selected_anchor_id = point_id
        self._session.path.selected_anchor_id = point_id
        self.sync.snapshot(self._session.item)
        self.handles.set_anchor_selected(point_id, True)
        self.handles.create_control_handles(point_id)
        self.scene.request_render()

    def _deselect_anchor(self):
        point_id = self._session.selected_anchor_id
        self.handles.set_anchor_selected(point_id, False)
        self.handles.clear_control_handles()
        self._session.selected_anchor_id = None
        self._session.path.selected_anchor_id = None

    def handle_anchor_hover(self, point_id: str):
        if self._session is not None:
            self._session.hover_anchor_id = point_id

    def handle_anchor_hover_out(self):
        if self._session is not None:
            self._session.hover_anchor_id = None

    # ---- drags ----

    def handle_anchor_drag(self, point_id: str):
        """Move an anchor to where its handle was dragged."""
        if self._session is None:
            return
        handle = self.handles.get_anchor_handle(point_id)
        path = self._session.path
        point = path.find_point(point_id)
        if handle is None or point is None:
            return

        self.sync.snapshot(self._session.item)
        local = self.sync.get_local_point(path, handle.world_position())
        if local is None:
            logger.warning(f"Cannot move anchor {point_id}: path transform is singular")
            return

        point.x = local.x
        point.y = local.y
        self.rebuild_path()

        if self._session.selected_anchor_id == point_id:
            self.handles.update_control_handles(point_id)

    def handle_control_drag(self, point_id: str, handle_index: int):
        """
        Move a control point to where its handle was dragged.

        For a smooth anchor the opposite control point is turned to face
        directly away from the dragged one, keeping its own length.
        """
        if self._session is None:
            return
        handle = self.handles.get_control_handle(point_id, handle_index)
        path = self._session.path
        point = path.find_point(point_id)
        if handle is None or point is None:
            return

        self.sync.snapshot(self._session.item)
        local = self.sync.get_local_point(path, handle.world_position())
        if local is None:
            logger.warning(f"Cannot move control point of {point_id}: path transform is singular")
            return

        dragged = Point(local.x, local.y)
        point.set_control_point(handle_index, dragged)

        opposite_index = 2 if handle_index == 1 else 1
        opposite = point.get_control_point(opposite_index)
        if point.type is AnchorType.SMOOTH and opposite is not None:
            aligned, _ = align_control_handles(point.anchor, opposite, dragged)
            point.set_control_point(opposite_index, aligned)
            self.handles.update_control_handle(point_id, opposite_index)

        self.rebuild_path()
        self.handles.update_guide_lines(point_id)

    # ---- editing operations ----

    def handle_path_click(self, x: float, y: float):
        """Insert an anchor where the curve was clicked, unless an anchor is hovered."""
        if self._session is None:
            return
        if self._session.hover_anchor_id is None:
            self.add_anchor_point(x, y)

    def add_anchor_point(self, x: float, y: float) -> Optional[str]:
        """
        Split the path at the curve point nearest to a scene position.

        Args:
            x, y: Pointer position in scene coordinates

        Returns:
            ID of the inserted anchor, or None if nothing was inserted.
        """
        if self._session is None:
            logger.debug("add_anchor_point called with no active session")
            return None
        path = self._session.path
        if not path.is_valid:
            return None

        self.sync.snapshot(self._session.item)
        local = self.sync.get_local_point(path, WorldPoint(x, y))
        if local is None:
            logger.warning("Cannot add anchor: path transform is singular")
            return None

        geometry = self.settings.geometry
        hit = find_closest_point_on_path(
            local.x, local.y, path.points,
            samples=geometry.closest_point_samples,
            refine_samples=geometry.refine_samples,
        )
        if hit is None:
            return None

        prev = path.points[hit.segment_index]
        nxt = path.points[hit.segment_index + 1]
        left, right = subdivide_cubic_bezier(hit.t, *segment_control_points(prev, nxt).as_tuple())

        new_point = BezierPoint(
            x=left.p1.x,
            y=left.p1.y,
            type=AnchorType.SMOOTH,
            control_point1=left.cp2,
            control_point2=right.cp1,
        )
        prev.control_point2 = left.cp1
        nxt.control_point1 = right.cp2
        path.points.insert(hit.segment_index + 1, new_point)

        self.handles.create_anchor_handle(new_point)
        self.rebuild_path()

        # Neighbour handles changed, refresh them if one of them is selected
        selected = self._session.selected_anchor_id
        if selected in (prev.id, nxt.id):
            self.handles.clear_control_handles()
            self.handles.create_control_handles(selected)

        logger.debug(f"Inserted anchor {new_point.id} at segment {hit.segment_index}, t={hit.t:.3f}")
        self.stateChanged.emit()
        return new_point.id

    def delete_anchor_point(self, point_id: str) -> bool:
        """
        Remove an anchor.

        Rejected when the path would drop below two anchors. The removed
        interior anchor's control points are handed to its neighbours.

        Returns:
            True if the anchor was removed.
        """
        if self._session is None:
            logger.debug("delete_anchor_point called with no active session")
            return False
        path = self._session.path
        index = path.index_of(point_id)
        if index == -1:
            logger.debug(f"No anchor {point_id} to delete")
            return False
        if len(path.points) <= MIN_ANCHORS:
            logger.warning(f"Cannot delete anchor: path must keep at least {MIN_ANCHORS} points")
            return False

        if self._session.selected_anchor_id == point_id:
            self._deselect_anchor()

        if self._session.hover_anchor_id == point_id:
            self._session.hover_anchor_id = None
        self.handles.remove_anchor_handle(point_id)
        deleted = path.points.pop(index)

        if 0 < index < len(path.points):
            prev = path.points[index - 1]
            nxt = path.points[index]
            if deleted.control_point1 is not None and deleted.control_point2 is not None:
                prev.control_point2 = deleted.control_point1
                nxt.control_point1 = deleted.control_point2

        self.sync.snapshot(self._session.item)
        self.rebuild_path()

        selected = self._session.selected_anchor_id
        if selected is not None:
            self.handles.clear_control_handles()
            self.handles.create_control_handles(selected)

        logger.debug(f"Deleted anchor {point_id} ({len(path.points)} points left)")
        self.stateChanged.emit()
        return True

    def toggle_point_type(self, point_id: str):
        """Switch an anchor between smooth and corner."""
        if self._session is None:
            return
        point = self._session.path.find_point(point_id)
        if point is None:
            logger.debug(f"No anchor {point_id} to toggle")
            return

        point.type = point.type.toggled()
        self.sync.snapshot(self._session.item)

        if (point.type is AnchorType.SMOOTH
                and point.control_point1 is not None
                and point.control_point2 is not None):
            point.control_point1, _ = align_control_handles(
                point.anchor, point.control_point1, point.control_point2)
            self.rebuild_path()

        if self.handles.get_anchor_handle(point_id) is not None:
            if self._session.hover_anchor_id == point_id:
                self._session.hover_anchor_id = None
            self.handles.remove_anchor_handle(point_id)
            self.handles.create_anchor_handle(point)
            if self._session.selected_anchor_id == point_id:
                self.handles.clear_control_handles()
                self._select_anchor(point_id)

        self.scene.request_render()
        self.stateChanged.emit()
