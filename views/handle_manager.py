"""
Handle manager for Bezier edit mode.

Creates, positions and destroys the visuals of an edit session:
one anchor handle per BezierPoint, plus control handles and dashed
guide lines for the selected anchor only. Handles are keyed by point
ID (control handles and guide lines by "{id}-cp{n}" / "{id}-line{n}"),
so inserting or deleting anchors never requires relabeling.
"""

import logging
from typing import Dict, Optional

from models.bezier import BezierPath, BezierPoint, Point, WorldPoint
from services.settings_manager import HandleStyle
from services.transform_sync import CoordinateTransformSynchronizer
from views.bezier_canvas import (
    BezierCanvasScene, BezierPathItem,
    AnchorHandleItem, ControlHandleItem, GuideLineItem,
)

logger = logging.getLogger(__name__)


def control_handle_key(point_id: str, handle_index: int) -> str:
    return f"{point_id}-cp{handle_index}"


def guide_line_key(point_id: str, handle_index: int) -> str:
    return f"{point_id}-line{handle_index}"


class HandleManager:
    """
    Owns the handle visuals of the active edit session.

    Visual positions always come from ``get_world_point``: identity for
    world-space paths, otherwise the path's current LocalSpace matrix.
    """

    def __init__(self, scene: BezierCanvasScene, editor, style: HandleStyle,
                 sync: CoordinateTransformSynchronizer):
        self.scene = scene
        self.editor = editor
        self.style = style
        self.sync = sync
        self._item: Optional[BezierPathItem] = None

        self.anchor_handles: Dict[str, AnchorHandleItem] = {}
        self.control_handles: Dict[str, ControlHandleItem] = {}
        self.guide_lines: Dict[str, GuideLineItem] = {}

    def bind(self, item: Optional[BezierPathItem]):
        """Set the path item whose points the handles follow."""
        self._item = item

    @property
    def path(self) -> Optional[BezierPath]:
        return self._item.bezier_path if self._item is not None else None

    def get_world_point(self, point: Point) -> WorldPoint:
        path = self.path
        if path is None:
            return WorldPoint(point.x, point.y)
        return self.sync.get_world_point(path, point)

    def _find_point(self, point_id: str) -> Optional[BezierPoint]:
        path = self.path
        if path is None:
            return None
        return path.find_point(point_id)

    # ---- anchor handles ----

    def create_anchor_handle(self, point: BezierPoint) -> AnchorHandleItem:
        """Create the anchor visual for a point (circle if smooth, square if corner)."""
        existing = self.anchor_handles.pop(point.id, None)
        if existing is not None:
            self.scene.removeItem(existing)

        handle = AnchorHandleItem(self.editor, point, self.style)
        handle.set_world_position(self.get_world_point(point.anchor))
        self.scene.addItem(handle)
        self.anchor_handles[point.id] = handle
        self.scene.request_render()
        return handle

    def remove_anchor_handle(self, point_id: str):
        handle = self.anchor_handles.pop(point_id, None)
        if handle is None:
            return
        self.scene.removeItem(handle)
        self.scene.request_render()

    def get_anchor_handle(self, point_id: str) -> Optional[AnchorHandleItem]:
        return self.anchor_handles.get(point_id)

    def set_anchor_selected(self, point_id: str, selected: bool):
        """Highlight or restore an anchor visual."""
        handle = self.anchor_handles.get(point_id)
        if handle is None:
            return
        point = self._find_point(point_id)
        if point is not None:
            handle.anchor_type = point.type
        handle.set_selected_appearance(selected)

    def update_anchor_handles(self):
        """Move every anchor visual to its point's world position."""
        path = self.path
        if path is None:
            return
        for point in path.points:
            handle = self.anchor_handles.get(point.id)
            if handle is not None:
                handle.set_world_position(self.get_world_point(point.anchor))

    # ---- control handles ----

    def create_control_handles(self, point_id: str):
        """Spawn control handles and guide lines for the selected anchor."""
        point = self._find_point(point_id)
        if point is None:
            logger.debug(f"No point {point_id} to create control handles for")
            return

        world_anchor = self.get_world_point(point.anchor)
        for index in (1, 2):
            cp = point.get_control_point(index)
            if cp is None:
                continue
            world_cp = self.get_world_point(cp)

            handle = ControlHandleItem(self.editor, point_id, index, self.style)
            handle.set_world_position(world_cp)
            self.scene.addItem(handle)
            self.control_handles[control_handle_key(point_id, index)] = handle

            line = GuideLineItem(point_id, index, self.style)
            line.set_endpoints(world_anchor, world_cp)
            self.scene.addItem(line)
            self.guide_lines[guide_line_key(point_id, index)] = line

        self.scene.request_render()

    def get_control_handle(self, point_id: str, handle_index: int) -> Optional[ControlHandleItem]:
        return self.control_handles.get(control_handle_key(point_id, handle_index))

    def update_control_handle(self, point_id: str, handle_index: int):
        """Move one control handle to its control point's world position."""
        point = self._find_point(point_id)
        handle = self.get_control_handle(point_id, handle_index)
        if point is None or handle is None:
            return
        cp = point.get_control_point(handle_index)
        if cp is not None:
            handle.set_world_position(self.get_world_point(cp))

    def update_control_handles(self, point_id: str):
        """Move both control handles of an anchor, then its guide lines."""
        for index in (1, 2):
            self.update_control_handle(point_id, index)
        self.update_guide_lines(point_id)

    def update_guide_lines(self, point_id: str):
        point = self._find_point(point_id)
        if point is None:
            return
        world_anchor = self.get_world_point(point.anchor)
        for index in (1, 2):
            line = self.guide_lines.get(guide_line_key(point_id, index))
            cp = point.get_control_point(index)
            if line is not None and cp is not None:
                line.set_endpoints(world_anchor, self.get_world_point(cp))

    # ---- teardown ----

    def clear_control_handles(self):
        """Remove all control handles and guide lines."""
        for handle in self.control_handles.values():
            self.scene.removeItem(handle)
        self.control_handles.clear()

        for line in self.guide_lines.values():
            self.scene.removeItem(line)
        self.guide_lines.clear()

        self.scene.request_render()

    def clear_handles(self):
        """Remove every visual owned by the session."""
        for handle in self.anchor_handles.values():
            self.scene.removeItem(handle)
        self.anchor_handles.clear()

        self.clear_control_handles()

    def sweep_scene(self) -> int:
        """Remove stray edit visuals still present in the scene."""
        strays = self.scene.edit_visuals()
        for item in strays:
            self.scene.removeItem(item)
        if strays:
            logger.warning(f"Removed {len(strays)} stray edit visuals")
            self.scene.request_render()
        return len(strays)
