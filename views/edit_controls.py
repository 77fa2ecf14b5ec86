"""
Edit Controls Panel.

Shows edit-mode hints and actions for the selected anchor:
smooth/corner switch, point deletion and leaving edit mode.
"""

from typing import Optional
from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QPushButton, QLabel, QFrame
)

from models.bezier import AnchorType, MIN_ANCHORS
from views.bezier_edit_mode import BezierEditMode


class BezierEditControls(QFrame):
    """
    Panel bound to a BezierEditMode.

    Hidden while no path is being edited; the anchor section is only
    shown while an anchor is selected.
    """

    # Signals
    exitRequested = pyqtSignal()

    def __init__(self, edit_mode: BezierEditMode, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._edit_mode = edit_mode
        self._setup_ui()
        self._connect_signals()
        self.refresh()

    def _setup_ui(self):
        self.setStyleSheet("""
            QPushButton {
                border: 1px solid #D1D5DB;
                border-radius: 4px;
                padding: 6px 10px;
            }
            QPushButton:checked {
                background: #10B981;
                color: white;
            }
            QPushButton#deleteBtn {
                background: #EF4444;
                color: white;
            }
            QPushButton#deleteBtn:disabled {
                background: #FCA5A5;
            }
        """)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 8, 12, 8)
        layout.setSpacing(8)

        self._title_label = QLabel("Edit Mode Active")
        self._title_label.setStyleSheet("font-weight: bold;")
        layout.addWidget(self._title_label)

        hints = QLabel(
            "• Click path to add point\n"
            "• Click anchor to select\n"
            "• Drag handles to reshape"
        )
        hints.setStyleSheet("color: #6B7280; font-size: 11px;")
        layout.addWidget(hints)

        # Selected anchor section
        self._anchor_section = QWidget()
        anchor_layout = QVBoxLayout(self._anchor_section)
        anchor_layout.setContentsMargins(0, 0, 0, 0)
        anchor_layout.addWidget(QLabel("Selected Anchor"))

        type_row = QHBoxLayout()
        self._smooth_btn = QPushButton("Smooth")
        self._smooth_btn.setCheckable(True)
        type_row.addWidget(self._smooth_btn)
        self._corner_btn = QPushButton("Corner")
        self._corner_btn.setCheckable(True)
        type_row.addWidget(self._corner_btn)
        anchor_layout.addLayout(type_row)

        self._delete_btn = QPushButton("Delete Point")
        self._delete_btn.setObjectName("deleteBtn")
        anchor_layout.addWidget(self._delete_btn)

        layout.addWidget(self._anchor_section)

        self._done_btn = QPushButton("Done Editing")
        layout.addWidget(self._done_btn)
        layout.addStretch()

    def _connect_signals(self):
        self._smooth_btn.clicked.connect(lambda: self._set_type(AnchorType.SMOOTH))
        self._corner_btn.clicked.connect(lambda: self._set_type(AnchorType.CORNER))
        self._delete_btn.clicked.connect(self._on_delete)
        self._done_btn.clicked.connect(self._on_done)
        self._edit_mode.stateChanged.connect(self.refresh)

    def _set_type(self, anchor_type: AnchorType):
        point = self._edit_mode.selected_point()
        if point is not None and point.type is not anchor_type:
            self._edit_mode.toggle_point_type(point.id)
        self.refresh()

    def _on_delete(self):
        point_id = self._edit_mode.get_selected_anchor_id()
        if point_id is not None:
            self._edit_mode.delete_anchor_point(point_id)

    def _on_done(self):
        self._edit_mode.deactivate()
        self.exitRequested.emit()

    def refresh(self):
        """Sync the widgets with the edit mode state."""
        active = self._edit_mode.is_active()
        self.setVisible(active)
        if not active:
            return

        point = self._edit_mode.selected_point()
        self._anchor_section.setVisible(point is not None)
        if point is None:
            return

        self._smooth_btn.setChecked(point.type is AnchorType.SMOOTH)
        self._corner_btn.setChecked(point.type is AnchorType.CORNER)
        point_count = len(self._edit_mode.path_item.bezier_path.points)
        self._delete_btn.setEnabled(point_count > MIN_ANCHORS)
