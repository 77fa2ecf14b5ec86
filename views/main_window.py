"""
Main application window.

Assembles the canvas and the edit controls and manages the layout.
"""

from typing import List, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QLabel, QStatusBar, QMessageBox, QDockWidget,
)

from models.bezier import AnchorType, BezierPath, BezierPoint, Point
from services.settings_manager import get_settings
from views.bezier_canvas import BezierPathItem
from views.canvas_view import BezierCanvasView
from views.edit_controls import BezierEditControls


def demo_path() -> BezierPath:
    """A small S-curve to start with."""
    return BezierPath(points=[
        BezierPoint(x=-200, y=0, type=AnchorType.CORNER,
                    control_point2=Point(-120, -120)),
        BezierPoint(x=0, y=0, type=AnchorType.SMOOTH,
                    control_point1=Point(-80, 100), control_point2=Point(80, -100)),
        BezierPoint(x=200, y=0, type=AnchorType.CORNER,
                    control_point1=Point(120, 120)),
    ])


class MainWindow(QMainWindow):
    """
    Main application window.

    Layout:
    ┌─────────────────────────────────────┬───────────────┐
    │  Menu Bar                           │               │
    ├─────────────────────────────────────┤  Edit         │
    │                                     │  Controls     │
    │            Canvas                   │  (dock)       │
    │                                     │               │
    ├─────────────────────────────────────┴───────────────┤
    │  Status Bar                                         │
    └─────────────────────────────────────────────────────┘
    """

    def __init__(self, config_override: Optional[str] = None):
        super().__init__()

        # Settings manager (JSON file based)
        self.settings_manager = get_settings(config_override)

        # Setup
        self._setup_window()
        self._setup_central_widget()
        self._setup_menu()
        self._setup_status_bar()
        self._connect_signals()

        self.canvas.canvas_scene.add_bezier_path(demo_path())
        self._update_counts()

        # Restore window geometry
        self._load_window_settings()

    def _load_window_settings(self):
        """Restore window geometry and state."""
        geometry, state = self.settings_manager.get_window_geometry()
        if geometry:
            self.restoreGeometry(geometry)
        if state:
            self.restoreState(state)

    def _save_window_settings(self):
        """Save window geometry and state."""
        self.settings_manager.save_window_geometry(
            self.saveGeometry().data(),
            self.saveState().data()
        )

    def closeEvent(self, event):
        """Handle window close - leave edit mode and save settings."""
        self.canvas.edit_mode.deactivate()
        self._save_window_settings()
        super().closeEvent(event)

    def _setup_window(self):
        """Configure window properties."""
        self.setWindowTitle("Bezier Path Editor")
        self.setMinimumSize(800, 600)
        self.resize(1200, 800)

        self.setStyleSheet("""
            QMainWindow {
                background: #F3F4F6;
            }
        """)

    def _setup_central_widget(self):
        self.canvas = BezierCanvasView(self.settings_manager.settings)
        self.setCentralWidget(self.canvas)

        self.edit_controls = BezierEditControls(self.canvas.edit_mode)
        dock = QDockWidget("Edit Mode", self)
        dock.setObjectName("editControlsDock")
        dock.setWidget(self.edit_controls)
        dock.setFeatures(QDockWidget.DockWidgetFeature.DockWidgetMovable)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, dock)
        self._edit_dock = dock

    def _setup_menu(self):
        """Create menu bar."""
        menubar = self.menuBar()

        # File menu
        file_menu = menubar.addMenu("&File")

        new_path_action = QAction("&New Path", self)
        new_path_action.setShortcut(QKeySequence.StandardKey.New)
        new_path_action.triggered.connect(self._on_new_path)
        file_menu.addAction(new_path_action)

        file_menu.addSeparator()

        exit_action = QAction("E&xit", self)
        exit_action.setShortcut(QKeySequence.StandardKey.Quit)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        # Edit menu
        edit_menu = menubar.addMenu("&Edit")

        edit_path_action = QAction("&Edit Selected Path", self)
        edit_path_action.setShortcut("Return")
        edit_path_action.triggered.connect(self._on_edit_selected)
        edit_menu.addAction(edit_path_action)

        done_action = QAction("&Done Editing", self)
        done_action.triggered.connect(self.canvas.edit_mode.deactivate)
        edit_menu.addAction(done_action)

        # Transform menu
        transform_menu = menubar.addMenu("&Transform")

        rotate_action = QAction("&Rotate 15°", self)
        rotate_action.setShortcut("Ctrl+]")
        rotate_action.triggered.connect(lambda: self._on_rotate(15))
        transform_menu.addAction(rotate_action)

        rotate_back_action = QAction("Rotate &-15°", self)
        rotate_back_action.setShortcut("Ctrl+[")
        rotate_back_action.triggered.connect(lambda: self._on_rotate(-15))
        transform_menu.addAction(rotate_back_action)

        scale_up_action = QAction("Scale &Up", self)
        scale_up_action.triggered.connect(lambda: self._on_scale(1.25))
        transform_menu.addAction(scale_up_action)

        scale_down_action = QAction("Scale &Down", self)
        scale_down_action.triggered.connect(lambda: self._on_scale(0.8))
        transform_menu.addAction(scale_down_action)

        # View menu
        view_menu = menubar.addMenu("&View")

        fit_action = QAction("&Fit to Contents", self)
        fit_action.setShortcut("Ctrl+0")
        fit_action.triggered.connect(self.canvas.fit_contents)
        view_menu.addAction(fit_action)

        reset_view_action = QAction("&Reset View", self)
        reset_view_action.setShortcut("Ctrl+R")
        reset_view_action.triggered.connect(self.canvas.reset_view)
        view_menu.addAction(reset_view_action)

        # Help menu
        help_menu = menubar.addMenu("&Help")

        about_action = QAction("&About", self)
        about_action.triggered.connect(self._on_about)
        help_menu.addAction(about_action)

    def _setup_status_bar(self):
        """Create status bar."""
        status = QStatusBar()
        status.setStyleSheet("""
            QStatusBar {
                background: #F9FAFB;
                border-top: 1px solid #E5E7EB;
                padding: 4px 8px;
                color: #6B7280;
                font-size: 12px;
            }
        """)
        self.setStatusBar(status)

        self._count_label = QLabel("Paths: 0")
        status.addWidget(self._count_label)

        # Spacer
        status.addWidget(QWidget(), 1)

        self._instruction_label = QLabel(
            "Double-click a path to edit • Delete removes anchor • T toggles type • Esc to finish"
        )
        status.addWidget(self._instruction_label)

    def _connect_signals(self):
        """Connect all signals."""
        scene = self.canvas.canvas_scene
        scene.pathAdded.connect(lambda _item: self._update_counts())
        scene.pathRemoved.connect(lambda _path_id: self._update_counts())
        self.canvas.editModeChanged.connect(self._on_edit_mode_changed)
        self.edit_controls.exitRequested.connect(self.canvas.setFocus)

    def _update_counts(self):
        count = len(self.canvas.canvas_scene.bezier_items())
        self._count_label.setText(f"Paths: {count}")

    def _target_items(self) -> List[BezierPathItem]:
        """The path being edited, otherwise the selected paths."""
        item = self.canvas.edit_mode.path_item
        if item is not None:
            return [item]
        return [i for i in self.canvas.canvas_scene.selectedItems() if isinstance(i, BezierPathItem)]

    def _on_new_path(self):
        path = demo_path()
        item = self.canvas.canvas_scene.add_bezier_path(path)
        offset = 40 * (len(self.canvas.canvas_scene.bezier_items()) - 1)
        item.setPos(offset, offset)
        self.statusBar().showMessage("New path added", 2000)

    def _on_edit_selected(self):
        targets = self._target_items()
        if targets:
            self.canvas.edit_mode.activate(targets[0])

    def _on_rotate(self, degrees: float):
        for item in self._target_items():
            item.setTransformOriginPoint(item.path().boundingRect().center())
            item.setRotation(item.rotation() + degrees)

    def _on_scale(self, factor: float):
        for item in self._target_items():
            item.setTransformOriginPoint(item.path().boundingRect().center())
            item.setScale(item.scale() * factor)

    def _on_edit_mode_changed(self, editing: bool):
        if editing:
            self.statusBar().showMessage("Edit mode active", 2000)
        else:
            self.statusBar().showMessage("Edit mode finished", 2000)

    def _on_about(self):
        """Show about dialog."""
        QMessageBox.about(
            self,
            "About Bezier Path Editor",
            "<h3>Bezier Path Editor</h3>"
            "<p>Interactive editor for cubic Bezier paths.</p>"
            "<ul>"
            "<li>Drag anchors and control handles</li>"
            "<li>Click the curve to insert an anchor</li>"
            "<li>Smooth and corner anchors</li>"
            "<li>Edits stay in sync with rotation and scaling</li>"
            "</ul>"
        )
