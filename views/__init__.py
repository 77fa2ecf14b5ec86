"""Views package."""

from .bezier_canvas import (
    BezierCanvasScene,
    BezierPathItem,
    AnchorHandleItem,
    ControlHandleItem,
    GuideLineItem,
)
from .handle_manager import HandleManager
from .bezier_edit_mode import BezierEditMode, EditSession
from .canvas_view import BezierCanvasView
from .edit_controls import BezierEditControls
from .main_window import MainWindow

__all__ = [
    "BezierCanvasScene",
    "BezierPathItem",
    "AnchorHandleItem",
    "ControlHandleItem",
    "GuideLineItem",
    "HandleManager",
    "BezierEditMode",
    "EditSession",
    "BezierCanvasView",
    "BezierEditControls",
    "MainWindow",
]
