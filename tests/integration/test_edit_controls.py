"""
Integration tests for the canvas view, edit controls panel and main window.

Covers:
- Panel visibility and buttons bound to the edit mode
- Scene signal wiring and keyboard shortcuts of the canvas view
- Main window startup, transform actions and settings persistence
"""

import pytest
from PyQt6.QtCore import QPointF, Qt

from models.bezier import AnchorType, BezierPath
from services.settings_manager import reset_settings_manager
from views.canvas_view import BezierCanvasView
from views.edit_controls import BezierEditControls


@pytest.fixture
def view(qtbot):
    widget = BezierCanvasView()
    qtbot.addWidget(widget)
    return widget


@pytest.fixture
def item(view, three_anchor_path):
    return view.canvas_scene.add_bezier_path(three_anchor_path)


@pytest.fixture
def panel(qtbot, view):
    widget = BezierEditControls(view.edit_mode)
    qtbot.addWidget(widget)
    return widget


# ══════════════════════════════════════════════════════════════════════════
# Edit controls panel
# ══════════════════════════════════════════════════════════════════════════

class TestEditControls:
    """Tests for BezierEditControls."""

    def test_hidden_while_idle(self, panel):
        assert panel.isHidden()

    def test_shown_during_session(self, panel, view, item):
        view.edit_mode.activate(item)
        assert not panel.isHidden()
        assert panel._anchor_section.isHidden()

        view.edit_mode.deactivate()
        assert panel.isHidden()

    def test_anchor_section_follows_selection(self, panel, view, item):
        view.edit_mode.activate(item)
        view.edit_mode.handle_anchor_click("p1")

        assert not panel._anchor_section.isHidden()
        assert panel._smooth_btn.isChecked()
        assert not panel._corner_btn.isChecked()
        assert panel._delete_btn.isEnabled()

    def test_delete_disabled_at_minimum(self, panel, view, straight_path):
        straight = view.canvas_scene.add_bezier_path(straight_path)
        view.edit_mode.activate(straight)
        view.edit_mode.handle_anchor_click("a")
        assert not panel._delete_btn.isEnabled()

    def test_corner_button_toggles(self, qtbot, panel, view, item):
        view.edit_mode.activate(item)
        view.edit_mode.handle_anchor_click("p1")

        qtbot.mouseClick(panel._corner_btn, Qt.MouseButton.LeftButton)

        assert item.bezier_path.find_point("p1").type is AnchorType.CORNER
        assert panel._corner_btn.isChecked()
        assert not panel._smooth_btn.isChecked()

    def test_smooth_button_on_smooth_anchor(self, qtbot, panel, view, item):
        view.edit_mode.activate(item)
        view.edit_mode.handle_anchor_click("p1")

        qtbot.mouseClick(panel._smooth_btn, Qt.MouseButton.LeftButton)

        assert item.bezier_path.find_point("p1").type is AnchorType.SMOOTH
        assert panel._smooth_btn.isChecked()

    def test_delete_button(self, qtbot, panel, view, item):
        view.edit_mode.activate(item)
        view.edit_mode.handle_anchor_click("p1")

        qtbot.mouseClick(panel._delete_btn, Qt.MouseButton.LeftButton)

        assert [p.id for p in item.bezier_path.points] == ["p0", "p2"]
        assert panel._anchor_section.isHidden()

    def test_done_button(self, qtbot, panel, view, item):
        view.edit_mode.activate(item)
        with qtbot.waitSignal(panel.exitRequested, timeout=1000):
            qtbot.mouseClick(panel._done_btn, Qt.MouseButton.LeftButton)
        assert not view.edit_mode.is_active()
        assert panel.isHidden()


# ══════════════════════════════════════════════════════════════════════════
# Canvas view
# ══════════════════════════════════════════════════════════════════════════

class TestCanvasView:
    """Tests for BezierCanvasView wiring."""

    def test_double_click_activates(self, qtbot, view, item):
        with qtbot.waitSignal(view.editModeChanged, timeout=1000) as blocker:
            view.canvas_scene.pathDoubleClicked.emit(item)
        assert blocker.args == [True]
        assert view.edit_mode.path_item is item

    def test_edit_mode_changed_only_on_transitions(self, view, item):
        received = []
        view.editModeChanged.connect(received.append)

        view.edit_mode.activate(item)
        view.edit_mode.handle_anchor_click("p1")
        view.edit_mode.deactivate()

        assert received == [True, False]

    def test_path_click_inserts_on_edited_path(self, view, item):
        view.edit_mode.activate(item)
        view.canvas_scene.pathClicked.emit(item, 150.0, 15.0)
        assert len(item.bezier_path.points) == 4

    def test_path_click_after_deleting_hovered_anchor(self, qtbot, view, item):
        view.resize(600, 400)
        view.show()
        qtbot.waitExposed(view)
        editor = view.edit_mode
        editor.activate(item)

        qtbot.mouseMove(view.viewport(), view.mapFromScene(QPointF(100, 0)))
        assert editor.hover_anchor_id == "p1"

        editor.handle_anchor_click("p1")
        editor.delete_anchor_point("p1")
        qtbot.mouseMove(view.viewport(), view.mapFromScene(QPointF(150, 30)))
        assert editor.hover_anchor_id is None

        view.canvas_scene.pathClicked.emit(item, 150.0, 15.0)
        assert len(item.bezier_path.points) == 3

    def test_path_click_on_other_path_ignored(self, view, item, straight_path):
        other = view.canvas_scene.add_bezier_path(straight_path)
        view.edit_mode.activate(item)
        view.canvas_scene.pathClicked.emit(other, 50.0, 0.0)
        assert len(item.bezier_path.points) == 3
        assert len(other.bezier_path.points) == 2

    def test_removing_edited_path_ends_session(self, view, item):
        view.edit_mode.activate(item)
        view.canvas_scene.remove_bezier_path(item.bezier_path.id)
        assert not view.edit_mode.is_active()
        assert view.canvas_scene.edit_visuals() == []

    def test_key_t_toggles_selected(self, qtbot, view, item):
        view.edit_mode.activate(item)
        view.edit_mode.handle_anchor_click("p1")
        qtbot.keyClick(view, Qt.Key.Key_T)
        assert item.bezier_path.find_point("p1").type is AnchorType.CORNER

    def test_key_delete_removes_selected_anchor(self, qtbot, view, item):
        view.edit_mode.activate(item)
        view.edit_mode.handle_anchor_click("p2")
        qtbot.keyClick(view, Qt.Key.Key_Delete)
        assert [p.id for p in item.bezier_path.points] == ["p0", "p1"]

    def test_key_delete_without_selection(self, qtbot, view, item):
        view.edit_mode.activate(item)
        qtbot.keyClick(view, Qt.Key.Key_Backspace)
        assert len(item.bezier_path.points) == 3
        assert item in view.canvas_scene.bezier_items()

    def test_key_escape_ends_session(self, qtbot, view, item):
        view.edit_mode.activate(item)
        qtbot.keyClick(view, Qt.Key.Key_Escape)
        assert not view.edit_mode.is_active()

    def test_key_delete_removes_selected_paths(self, qtbot, view, item):
        item.setSelected(True)
        qtbot.keyClick(view, Qt.Key.Key_Delete)
        assert view.canvas_scene.bezier_items() == []

    def test_path_item_at(self, view, item):
        scene = view.canvas_scene
        assert scene.path_item_at(QPointF(100, 1)) is item
        assert scene.path_item_at(QPointF(100, 80)) is None
        assert scene.path_item_at(QPointF(100, 1), edit_mode_only=True) is None

        view.edit_mode.activate(item)
        assert scene.path_item_at(QPointF(100, 1), edit_mode_only=True) is item

    def test_reset_view(self, view):
        view.scale(2, 2)
        view.reset_view()
        assert view.transform().m11() == 1.0


# ══════════════════════════════════════════════════════════════════════════
# Main window
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def window(qtbot, settings_file):
    from views.main_window import MainWindow
    reset_settings_manager()
    win = MainWindow(config_override=str(settings_file))
    qtbot.addWidget(win)
    yield win
    reset_settings_manager()


class TestMainWindow:
    """Smoke tests for MainWindow."""

    def test_starts_with_demo_path(self, window):
        items = window.canvas.canvas_scene.bezier_items()
        assert len(items) == 1
        assert isinstance(items[0].bezier_path, BezierPath)
        assert window._count_label.text() == "Paths: 1"
        assert window.edit_controls.isHidden()

    def test_new_path_updates_count(self, window):
        window._on_new_path()
        items = window.canvas.canvas_scene.bezier_items()
        assert len(items) == 2
        assert window._count_label.text() == "Paths: 2"
        # The offset copy carries its world points along
        assert items[1].bezier_path.points[0].x == pytest.approx(-160)

    def test_edit_selected(self, window):
        item = window.canvas.canvas_scene.bezier_items()[0]
        item.setSelected(True)
        window._on_edit_selected()
        assert window.canvas.edit_mode.path_item is item

    def test_rotate_edited_path_moves_handles(self, window):
        item = window.canvas.canvas_scene.bezier_items()[0]
        edit_mode = window.canvas.edit_mode
        edit_mode.activate(item)

        window._on_rotate(15)

        assert item.rotation() == 15
        last = item.bezier_path.points[-1]
        expected = item.mapToScene(QPointF(last.x, last.y))
        handle = edit_mode.handles.get_anchor_handle(last.id)
        assert handle.pos().x() == pytest.approx(expected.x())
        assert handle.pos().y() == pytest.approx(expected.y())

    def test_close_saves_geometry(self, window, settings_file):
        window.show()
        window.canvas.edit_mode.activate(window.canvas.canvas_scene.bezier_items()[0])
        window.close()
        assert not window.canvas.edit_mode.is_active()
        assert settings_file.exists()
