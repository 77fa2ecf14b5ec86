"""
Pytest configuration and shared fixtures for Bezier editor tests.
"""

import os
import pytest
import tempfile
import shutil
from pathlib import Path
from typing import Generator

# Qt widgets must run without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from models.bezier import AnchorType, BezierPath, BezierPoint, Point
from services.settings_manager import SettingsManager, reset_settings_manager


# ============== Temporary Directory Fixtures ==============

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    tmp = tempfile.mkdtemp(prefix="bezier_editor_test_")
    yield Path(tmp)
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def settings_file(temp_dir: Path) -> Path:
    """Settings file location inside the temporary directory."""
    return temp_dir / "config" / "settings.json"


@pytest.fixture
def settings_manager(settings_file: Path) -> Generator[SettingsManager, None, None]:
    """Settings manager writing to a temporary file."""
    reset_settings_manager()
    yield SettingsManager(str(settings_file))
    reset_settings_manager()


# ============== Model Fixtures ==============

@pytest.fixture
def straight_path() -> BezierPath:
    """Two anchors with no handles: a straight cubic from (0,0) to (100,0)."""
    return BezierPath(points=[
        BezierPoint(id="a", x=0, y=0, type=AnchorType.CORNER),
        BezierPoint(id="b", x=100, y=0, type=AnchorType.CORNER),
    ])


@pytest.fixture
def three_anchor_path() -> BezierPath:
    """Corner, smooth, corner with every facing handle present."""
    return BezierPath(points=[
        BezierPoint(id="p0", x=0, y=0, type=AnchorType.CORNER,
                    control_point2=Point(20, -20)),
        BezierPoint(id="p1", x=100, y=0, type=AnchorType.SMOOTH,
                    control_point1=Point(80, -20), control_point2=Point(120, 20)),
        BezierPoint(id="p2", x=200, y=0, type=AnchorType.CORNER,
                    control_point1=Point(180, 20)),
    ])


# ============== Qt Fixtures ==============

@pytest.fixture
def scene(qapp):
    """An empty canvas scene."""
    from views.bezier_canvas import BezierCanvasScene
    return BezierCanvasScene()


@pytest.fixture
def editor(scene):
    """Edit mode bound to the scene; any session is closed afterwards."""
    from views.bezier_edit_mode import BezierEditMode
    mode = BezierEditMode(scene)
    yield mode
    mode.deactivate()

