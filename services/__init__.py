"""Services package."""

from .bezier_math import (
    CubicSegment,
    ClosestPoint,
    evaluate_cubic_bezier,
    tangent_cubic_bezier,
    subdivide_cubic_bezier,
    segment_control_points,
    find_closest_point_on_cubic_bezier,
    find_closest_point_on_path,
    align_control_handles,
    handles_are_aligned,
)
from .path_data import (
    build_path_data,
    parse_path_data,
    path_data_to_painter_path,
)
from .transform_sync import CoordinateTransformSynchronizer
from .settings_manager import (
    SettingsManager,
    EditorSettings,
    HandleStyle,
    GeometrySettings,
    UISettings,
    get_settings,
    reset_settings_manager,
)

__all__ = [
    # Geometry
    "CubicSegment",
    "ClosestPoint",
    "evaluate_cubic_bezier",
    "tangent_cubic_bezier",
    "subdivide_cubic_bezier",
    "segment_control_points",
    "find_closest_point_on_cubic_bezier",
    "find_closest_point_on_path",
    "align_control_handles",
    "handles_are_aligned",
    # Path data
    "build_path_data",
    "parse_path_data",
    "path_data_to_painter_path",
    # Coordinate spaces
    "CoordinateTransformSynchronizer",
    # Settings
    "SettingsManager",
    "EditorSettings",
    "HandleStyle",
    "GeometrySettings",
    "UISettings",
    "get_settings",
    "reset_settings_manager",
]
