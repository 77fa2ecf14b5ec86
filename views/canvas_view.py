"""
Canvas view for Bezier path editing.

Wraps a BezierCanvasScene and the edit mode that works on it, and maps
keyboard shortcuts onto edit operations.
"""

import logging
from typing import Optional

from PyQt6.QtCore import Qt, QPointF, QRectF, pyqtSignal
from PyQt6.QtGui import QPainter, QPen, QKeyEvent, QWheelEvent, QMouseEvent
from PyQt6.QtWidgets import QGraphicsView

from services.settings_manager import EditorSettings
from views.bezier_canvas import BezierCanvasScene, COLORS
from views.bezier_edit_mode import BezierEditMode

logger = logging.getLogger(__name__)


class BezierCanvasView(QGraphicsView):
    """
    Canvas widget showing Bezier paths.

    Double-click a path to edit it. While editing:
    - Delete / Backspace removes the selected anchor
    - T toggles the selected anchor between smooth and corner
    - Escape ends editing
    """

    # Signals
    editModeChanged = pyqtSignal(bool)  # True while a path is being edited

    def __init__(self, settings: Optional[EditorSettings] = None, parent=None):
        super().__init__(parent)
        self.settings = settings or EditorSettings()

        # Create scene
        self.canvas_scene = BezierCanvasScene(
            path_click_tolerance=self.settings.geometry.path_click_tolerance,
            ui=self.settings.ui,
        )
        self.setScene(self.canvas_scene)

        self.edit_mode = BezierEditMode(self.canvas_scene, self.settings, parent=self)

        # Connect scene signals
        self.canvas_scene.pathClicked.connect(self._on_path_clicked)
        self.canvas_scene.pathDoubleClicked.connect(self._on_path_double_clicked)
        self.canvas_scene.pathRemoved.connect(self._on_path_removed)
        self.edit_mode.stateChanged.connect(self._on_edit_state_changed)

        # View settings
        self.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.setViewportUpdateMode(QGraphicsView.ViewportUpdateMode.FullViewportUpdate)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorUnderMouse)
        self.setResizeAnchor(QGraphicsView.ViewportAnchor.AnchorViewCenter)
        self.setDragMode(QGraphicsView.DragMode.RubberBandDrag)

        # State
        self._zoom_factor = 1.0
        self._is_panning = False
        self._last_pan_pos = QPointF()
        self._was_editing = False

    def drawBackground(self, painter: QPainter, rect: QRectF):
        """Draw grid background."""
        super().drawBackground(painter, rect)

        if not self.settings.ui.show_grid:
            return

        grid_size = max(int(self.settings.ui.grid_size), 1)
        left = int(rect.left()) - (int(rect.left()) % grid_size)
        top = int(rect.top()) - (int(rect.top()) % grid_size)

        painter.setPen(QPen(COLORS["grid"], 1))

        x = left
        while x < rect.right():
            painter.drawLine(int(x), int(rect.top()), int(x), int(rect.bottom()))
            x += grid_size

        y = top
        while y < rect.bottom():
            painter.drawLine(int(rect.left()), int(y), int(rect.right()), int(y))
            y += grid_size

    # ---- scene signal handlers ----

    def _on_path_clicked(self, item, x: float, y: float):
        if self.edit_mode.path_item is item:
            self.edit_mode.handle_path_click(x, y)

    def _on_path_double_clicked(self, item):
        self.edit_mode.activate(item)

    def _on_path_removed(self, path_id: str):
        item = self.edit_mode.path_item
        if item is not None and item.bezier_path.id == path_id:
            self.edit_mode.deactivate()

    def _on_edit_state_changed(self):
        editing = self.edit_mode.is_active()
        if editing != self._was_editing:
            self._was_editing = editing
            self.editModeChanged.emit(editing)

    # ---- Qt events ----

    def wheelEvent(self, event: QWheelEvent):
        """Handle zoom with mouse wheel."""
        factor = 1.15
        if event.angleDelta().y() < 0:
            factor = 1 / factor

        new_zoom = self._zoom_factor * factor
        if 0.1 <= new_zoom <= 5:
            self._zoom_factor = new_zoom
            self.scale(factor, factor)

    def mousePressEvent(self, event: QMouseEvent):
        """Pan with the middle mouse button."""
        if event.button() == Qt.MouseButton.MiddleButton:
            self._is_panning = True
            self._last_pan_pos = event.position()
            self.setCursor(Qt.CursorShape.ClosedHandCursor)
            event.accept()
        else:
            super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent):
        if self._is_panning:
            delta = event.position() - self._last_pan_pos
            self._last_pan_pos = event.position()
            self.horizontalScrollBar().setValue(int(self.horizontalScrollBar().value() - delta.x()))
            self.verticalScrollBar().setValue(int(self.verticalScrollBar().value() - delta.y()))
            event.accept()
        else:
            super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent):
        if event.button() == Qt.MouseButton.MiddleButton and self._is_panning:
            self._is_panning = False
            self.setCursor(Qt.CursorShape.ArrowCursor)
            event.accept()
        else:
            super().mouseReleaseEvent(event)

    def keyPressEvent(self, event: QKeyEvent):
        """Handle keyboard shortcuts."""
        key = event.key()
        if self.edit_mode.is_active():
            selected = self.edit_mode.get_selected_anchor_id()
            if key in (Qt.Key.Key_Delete, Qt.Key.Key_Backspace):
                if selected is not None:
                    self.edit_mode.delete_anchor_point(selected)
                event.accept()
                return
            if key == Qt.Key.Key_T:
                if selected is not None:
                    self.edit_mode.toggle_point_type(selected)
                event.accept()
                return
            if key == Qt.Key.Key_Escape:
                self.edit_mode.deactivate()
                event.accept()
                return
        elif key in (Qt.Key.Key_Delete, Qt.Key.Key_Backspace):
            self.delete_selected_paths()
            event.accept()
            return
        super().keyPressEvent(event)

    # ---- commands ----

    def delete_selected_paths(self):
        """Remove every selected path from the canvas."""
        for item in list(self.canvas_scene.selectedItems()):
            if item in self.canvas_scene.bezier_items():
                self.canvas_scene.remove_bezier_path(item.bezier_path.id)

    def fit_contents(self):
        """Fit view to show all items."""
        self.fitInView(self.canvas_scene.itemsBoundingRect().adjusted(-50, -50, 50, 50),
                       Qt.AspectRatioMode.KeepAspectRatio)

    def reset_view(self):
        """Reset to default zoom and position."""
        self.resetTransform()
        self._zoom_factor = 1.0
        self.centerOn(0, 0)
