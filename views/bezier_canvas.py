"""
Canvas items for Bezier path editing.

Uses Qt's Graphics View Framework. The scene hosts BezierPathItem
objects (the curves themselves, transformable as a whole) and the
temporary handle items the edit mode spawns while a path is edited.
"""

import logging
from typing import Callable, Dict, List, Optional

from PyQt6.QtCore import Qt, QPointF, QLineF, pyqtSignal
from PyQt6.QtGui import (
    QPainter, QPen, QBrush, QColor, QPainterPath, QPainterPathStroker, QTransform,
)
from PyQt6.QtWidgets import (
    QGraphicsScene, QGraphicsItem, QGraphicsEllipseItem,
    QGraphicsLineItem, QGraphicsPathItem,
)

from models.bezier import AnchorType, BezierPath, BezierPoint, WorldPoint
from services.path_data import build_path_data, path_data_to_painter_path
from services.settings_manager import HandleStyle, UISettings
from services.transform_sync import CoordinateTransformSynchronizer, map_bezier_point

# Setup logger for this module
logger = logging.getLogger(__name__)


# QGraphicsItem.data() key marking edit visuals
EDIT_VISUAL_ROLE = 0

EDIT_VISUAL_ANCHOR = "anchor"
EDIT_VISUAL_CONTROL = "control"
EDIT_VISUAL_GUIDE = "guide"


# Color scheme
COLORS = {
    "selection": QColor("#3B82F6"),        # Bright blue
    "hover": QColor("#60A5FA"),            # Light blue
    "grid": QColor("#E5E7EB"),             # Light gray
    "background": QColor("#FAFAFA"),       # Off-white
    "edit_path": QColor("#6B7280"),        # Gray while editing
}


def is_edit_visual(item: QGraphicsItem) -> bool:
    """Check whether an item was spawned by the edit mode."""
    return item.data(EDIT_VISUAL_ROLE) in (
        EDIT_VISUAL_ANCHOR, EDIT_VISUAL_CONTROL, EDIT_VISUAL_GUIDE
    )


# ----------------------------
# Handle base class
# ----------------------------

class _BaseHandle(QGraphicsEllipseItem):
    """
    Base class for draggable edit handles.

    Handles live directly in the scene, so their position is a world
    position. They are movable but never part of the scene selection.
    """

    def __init__(self, editor, point_id: str, radius: float, kind: str):
        super().__init__(-radius, -radius, radius * 2, radius * 2)
        self.editor = editor
        self.point_id = point_id
        self.r = radius
        self.exclude_from_export = True
        self._guard_setpos = False

        self.setData(EDIT_VISUAL_ROLE, kind)
        self.setFlags(
            QGraphicsItem.GraphicsItemFlag.ItemIsMovable |
            QGraphicsItem.GraphicsItemFlag.ItemSendsGeometryChanges
        )
        self.setAcceptHoverEvents(True)
        self.setCursor(Qt.CursorShape.SizeAllCursor)

    def world_position(self) -> WorldPoint:
        pos = self.pos()
        return WorldPoint(pos.x(), pos.y())

    def set_world_position(self, point: WorldPoint):
        """Move the handle without reporting it as a drag."""
        self._guard_setpos = True
        try:
            self.setPos(point.x, point.y)
        finally:
            self._guard_setpos = False

    def _on_moved(self):
        raise NotImplementedError

    def itemChange(self, change, value):
        if change == QGraphicsItem.GraphicsItemChange.ItemPositionHasChanged:
            if not self._guard_setpos:
                self._on_moved()
        return super().itemChange(change, value)


class AnchorHandleItem(_BaseHandle):
    """
    Draggable anchor handle.

    Drawn as a circle for smooth anchors and as a square for corners.
    """

    def __init__(self, editor, point: BezierPoint, style: HandleStyle):
        super().__init__(editor, point.id, style.anchor_radius, EDIT_VISUAL_ANCHOR)
        self.anchor_type = point.type
        self.style = style
        self.is_selected_anchor = False
        self.setZValue(110)
        self.set_selected_appearance(False)

    @property
    def base_color(self) -> str:
        if self.anchor_type is AnchorType.SMOOTH:
            return self.style.smooth_color
        return self.style.corner_color

    def set_selected_appearance(self, selected: bool):
        """Highlight (or restore) the handle."""
        self.is_selected_anchor = selected
        if selected:
            self.setBrush(QBrush(QColor(self.style.selected_color)))
            self.setPen(QPen(QColor(self.style.stroke_color), self.style.selected_stroke_width))
            self.setScale(self.style.selected_scale)
        else:
            self.setBrush(QBrush(QColor(self.base_color)))
            self.setPen(QPen(QColor(self.style.stroke_color), self.style.stroke_width))
            self.setScale(1.0)

    def shape(self) -> QPainterPath:
        if self.anchor_type is AnchorType.CORNER:
            path = QPainterPath()
            path.addRect(self.rect())
            return path
        return super().shape()

    def paint(self, painter, option, widget=None):
        """Draw corners as squares instead of ellipses."""
        if self.anchor_type is AnchorType.CORNER:
            painter.setPen(self.pen())
            painter.setBrush(self.brush())
            painter.drawRect(self.rect())
        else:
            super().paint(painter, option, widget)

    def mousePressEvent(self, event):
        self.editor.handle_anchor_click(self.point_id)
        super().mousePressEvent(event)

    def hoverEnterEvent(self, event):
        self.editor.handle_anchor_hover(self.point_id)
        super().hoverEnterEvent(event)

    def hoverLeaveEvent(self, event):
        self.editor.handle_anchor_hover_out()
        super().hoverLeaveEvent(event)

    def _on_moved(self):
        self.editor.handle_anchor_drag(self.point_id)


class ControlHandleItem(_BaseHandle):
    """
    Draggable control point handle.

    handle_index: 1 for the incoming handle, 2 for the outgoing handle
    """

    def __init__(self, editor, point_id: str, handle_index: int, style: HandleStyle):
        super().__init__(editor, point_id, style.control_handle_radius, EDIT_VISUAL_CONTROL)
        self.handle_index = handle_index
        self.setZValue(105)
        self.setBrush(QBrush(QColor("#ffffff")))
        self.setPen(QPen(QColor(style.guide_line_color), style.stroke_width))

    def _on_moved(self):
        self.editor.handle_control_drag(self.point_id, self.handle_index)


# ----------------------------
# Guide line (connects anchor to control handle)
# ----------------------------

class GuideLineItem(QGraphicsLineItem):
    """Dashed line from an anchor to one of its control handles."""

    def __init__(self, point_id: str, handle_index: int, style: HandleStyle):
        super().__init__()
        self.point_id = point_id
        self.handle_index = handle_index
        self.exclude_from_export = True
        self.setData(EDIT_VISUAL_ROLE, EDIT_VISUAL_GUIDE)

        pen = QPen(QColor(style.guide_line_color), 1)
        pen.setDashPattern(list(style.guide_line_dash))
        self.setPen(pen)
        self.setZValue(95)  # Below handles
        self.setAcceptedMouseButtons(Qt.MouseButton.NoButton)
        self.setAcceptHoverEvents(False)

    def set_endpoints(self, start: WorldPoint, end: WorldPoint):
        self.setLine(QLineF(start.x, start.y, end.x, end.y))

    def endpoints(self):
        line = self.line()
        return (WorldPoint(line.x1(), line.y1()), WorldPoint(line.x2(), line.y2()))


# ----------------------------
# Path item
# ----------------------------

class BezierPathItem(QGraphicsPathItem):
    """
    A Bezier path on the canvas.

    The item's geometry is expressed in item coordinates; moving,
    rotating, scaling or shearing the item changes its scene transform
    and is reported to registered transform listeners as ``moving``,
    ``rotating``, ``scaling``, ``skewing`` and ``modified`` (end of a
    mouse drag, or a new transform origin). Outside edit mode the world
    points are carried along with the transform.
    """

    _TRANSFORM_CHANGES = {
        QGraphicsItem.GraphicsItemChange.ItemPositionHasChanged: "moving",
        QGraphicsItem.GraphicsItemChange.ItemRotationHasChanged: "rotating",
        QGraphicsItem.GraphicsItemChange.ItemScaleHasChanged: "scaling",
        QGraphicsItem.GraphicsItemChange.ItemTransformHasChanged: "skewing",
        QGraphicsItem.GraphicsItemChange.ItemTransformOriginPointHasChanged: "modified",
    }

    def __init__(self, bezier_path: BezierPath, ui: Optional[UISettings] = None, parent=None):
        super().__init__(parent)
        self.bezier_path = bezier_path
        self.path_data = ""
        self.ui = ui or UISettings()
        self._transform_listeners: List[Callable] = []
        # Transform the world points were last consistent with
        self._points_matrix = QTransform()
        self._moved_since_press = False
        self._is_hovered = False

        self.setFlags(
            QGraphicsItem.GraphicsItemFlag.ItemIsSelectable |
            QGraphicsItem.GraphicsItemFlag.ItemIsMovable |
            QGraphicsItem.GraphicsItemFlag.ItemSendsGeometryChanges
        )
        self.setAcceptHoverEvents(True)
        self._setup_appearance()

        # New items start untransformed, so world points double as local geometry
        self.set_path_data(build_path_data(bezier_path.points))

    def _setup_appearance(self):
        """Set up colors and pen."""
        if self.bezier_path.is_edit_mode:
            color = COLORS["edit_path"]
        elif self._is_hovered:
            color = COLORS["hover"]
        else:
            color = QColor(self.ui.path_color)
        self.setPen(QPen(color, self.ui.path_width, Qt.PenStyle.SolidLine,
                         Qt.PenCapStyle.RoundCap, Qt.PenJoinStyle.RoundJoin))
        self.setBrush(QBrush(Qt.BrushStyle.NoBrush))

    # ---- host interface used by the editor ----

    def transform_matrix(self):
        """Local-to-scene transform of this item."""
        return self.sceneTransform()

    def set_path_data(self, data: str):
        """Replace the geometry with new path data."""
        self.path_data = data
        self.setPath(path_data_to_painter_path(data))

    def set_properties(self, **props):
        """
        Set interaction properties and mark the item dirty.

        Supported: selectable, evented, object_caching.
        """
        for name, value in props.items():
            if name == "selectable":
                self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsSelectable, value)
                self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsMovable, value)
                if not value:
                    self.setSelected(False)
            elif name == "evented":
                self.setAcceptedMouseButtons(
                    Qt.MouseButton.AllButtons if value else Qt.MouseButton.NoButton
                )
                self.setAcceptHoverEvents(value)
            elif name == "object_caching":
                self.setCacheMode(
                    QGraphicsItem.CacheMode.DeviceCoordinateCache if value
                    else QGraphicsItem.CacheMode.NoCache
                )
            else:
                logger.warning(f"Ignoring unknown path item property '{name}'")
        self._setup_appearance()
        self.update()

    def request_render(self):
        scene = self.scene()
        if isinstance(scene, BezierCanvasScene):
            scene.request_render()
        else:
            self.update()

    def add_transform_listener(self, listener: Callable):
        if listener not in self._transform_listeners:
            self._transform_listeners.append(listener)

    def remove_transform_listener(self, listener: Callable):
        if listener in self._transform_listeners:
            self._transform_listeners.remove(listener)

    def _notify_transform(self, event: str):
        for listener in list(self._transform_listeners):
            listener(self, event)

    def _follow_transform(self):
        """Carry world points along with a transform change made outside edit mode."""
        matrix = QTransform(self.sceneTransform())
        if matrix == self._points_matrix:
            return
        inverse, invertible = self._points_matrix.inverted()
        if not invertible or not matrix.isInvertible():
            return
        delta = inverse * matrix
        for point in self.bezier_path.points:
            map_bezier_point(point, delta)
        self._points_matrix = matrix

    def hit_test(self, scene_pos: QPointF, tolerance: float) -> bool:
        """Check whether a scene position lies within tolerance of the curve stroke."""
        stroker = QPainterPathStroker()
        stroker.setWidth(max(tolerance, 0.5) * 2)
        return stroker.createStroke(self.path()).contains(self.mapFromScene(scene_pos))

    def to_dict(self) -> dict:
        """Serialized form; points are always world coordinates."""
        points = CoordinateTransformSynchronizer().world_points(self)
        return {
            "id": self.bezier_path.id,
            "points": [p.to_dict() for p in points],
        }

    # ---- Qt events ----

    def itemChange(self, change, value):
        """Report transform changes to listeners."""
        event = self._TRANSFORM_CHANGES.get(change)
        if event is not None:
            if self.bezier_path.bezier_points_are_local:
                self._points_matrix = QTransform(self.sceneTransform())
            else:
                self._follow_transform()
            if event == "moving":
                self._moved_since_press = True
            self._notify_transform(event)
        return super().itemChange(change, value)

    def mousePressEvent(self, event):
        self._moved_since_press = False
        super().mousePressEvent(event)

    def mouseReleaseEvent(self, event):
        super().mouseReleaseEvent(event)
        if self._moved_since_press:
            self._moved_since_press = False
            self._notify_transform("modified")

    def hoverEnterEvent(self, event):
        self._is_hovered = True
        self._setup_appearance()
        super().hoverEnterEvent(event)

    def hoverLeaveEvent(self, event):
        self._is_hovered = False
        self._setup_appearance()
        super().hoverLeaveEvent(event)

    def paint(self, painter: QPainter, option, widget=None):
        """Custom paint with selection highlight."""
        if self.isSelected():
            glow_pen = QPen(COLORS["selection"], self.ui.path_width + 6)
            glow_pen.setCapStyle(Qt.PenCapStyle.RoundCap)
            painter.setPen(glow_pen)
            painter.drawPath(self.path())

        super().paint(painter, option, widget)


# ----------------------------
# Scene
# ----------------------------

class BezierCanvasScene(QGraphicsScene):
    """
    Scene managing Bezier path items and edit visuals.

    Pointer coordinates reported through signals are scene (world)
    coordinates.
    """

    # Signals
    pathAdded = pyqtSignal(object)                   # BezierPathItem
    pathRemoved = pyqtSignal(str)                    # path id
    pathClicked = pyqtSignal(object, float, float)   # BezierPathItem, x, y
    pathDoubleClicked = pyqtSignal(object)           # BezierPathItem

    def __init__(self, path_click_tolerance: float = 6.0,
                 ui: Optional[UISettings] = None, parent=None):
        super().__init__(parent)
        self.path_click_tolerance = path_click_tolerance
        self.ui = ui or UISettings()
        self._path_items: Dict[str, BezierPathItem] = {}
        self.render_requests = 0

        self.setBackgroundBrush(COLORS["background"])
        self.setSceneRect(-2000, -2000, 4000, 4000)

    def add_bezier_path(self, bezier_path: BezierPath) -> BezierPathItem:
        """Add a path to the scene."""
        item = BezierPathItem(bezier_path, self.ui)
        self.addItem(item)
        self._path_items[bezier_path.id] = item
        self.pathAdded.emit(item)
        return item

    def remove_bezier_path(self, path_id: str):
        """Remove a path from the scene."""
        item = self._path_items.pop(path_id, None)
        if item is None:
            return
        self.removeItem(item)
        self.pathRemoved.emit(path_id)

    def get_path_item(self, path_id: str) -> Optional[BezierPathItem]:
        return self._path_items.get(path_id)

    def bezier_items(self) -> List[BezierPathItem]:
        return list(self._path_items.values())

    def edit_visuals(self) -> List[QGraphicsItem]:
        """All handle and guide line items currently in the scene."""
        return [item for item in self.items() if is_edit_visual(item)]

    def request_render(self):
        self.render_requests += 1
        self.update()

    def path_item_at(self, pos: QPointF, edit_mode_only: bool = False) -> Optional[BezierPathItem]:
        """Topmost path whose stroke passes within tolerance of pos."""
        for item in sorted(self._path_items.values(), key=lambda i: i.zValue(), reverse=True):
            if edit_mode_only and not item.bezier_path.is_edit_mode:
                continue
            if item.hit_test(pos, self.path_click_tolerance):
                return item
        return None

    def _handle_at(self, pos: QPointF) -> bool:
        return any(
            item.data(EDIT_VISUAL_ROLE) in (EDIT_VISUAL_ANCHOR, EDIT_VISUAL_CONTROL)
            for item in self.items(pos)
        )

    def mousePressEvent(self, event):
        """Report clicks on a curve being edited."""
        if event.button() == Qt.MouseButton.LeftButton:
            pos = event.scenePos()
            if not self._handle_at(pos):
                item = self.path_item_at(pos, edit_mode_only=True)
                if item is not None:
                    self.pathClicked.emit(item, pos.x(), pos.y())
                    event.accept()
                    return
        super().mousePressEvent(event)

    def mouseDoubleClickEvent(self, event):
        """Report double-clicks on a curve that is not being edited."""
        pos = event.scenePos()
        if event.button() == Qt.MouseButton.LeftButton and not self._handle_at(pos):
            item = self.path_item_at(pos)
            if item is not None and not item.bezier_path.is_edit_mode:
                self.pathDoubleClicked.emit(item)
                event.accept()
                return
        super().mouseDoubleClickEvent(event)
