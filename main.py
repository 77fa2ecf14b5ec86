#!/usr/bin/env python3
"""
Bezier Path Editor - Main Entry Point

An interactive editor for cubic Bezier paths: drag anchors and control
handles, insert and delete anchors, switch between smooth and corner
points while the path is moved, rotated or scaled as a whole.

Usage:
    python main.py
    python main.py --debug    # Enable debug logging
"""

import sys
import logging
import argparse
from PyQt6.QtWidgets import QApplication
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QPalette, QColor

from views import MainWindow


def setup_logging(debug: bool = False):
    """Configure logging for the application."""
    level = logging.DEBUG if debug else logging.INFO

    # Create formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging initialized at {'DEBUG' if debug else 'INFO'} level")


# Light theme shared by every widget
PALETTE_COLORS = {
    QPalette.ColorRole.Window: "#F3F4F6",
    QPalette.ColorRole.WindowText: "#111827",
    QPalette.ColorRole.Base: "#FFFFFF",
    QPalette.ColorRole.Text: "#374151",
    QPalette.ColorRole.Button: "#FFFFFF",
    QPalette.ColorRole.ButtonText: "#374151",
    QPalette.ColorRole.Highlight: "#3B82F6",
    QPalette.ColorRole.HighlightedText: "#FFFFFF",
}


def build_palette() -> QPalette:
    palette = QPalette()
    for role, color in PALETTE_COLORS.items():
        palette.setColor(role, QColor(color))
    return palette


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Bezier Path Editor')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--config', metavar='PATH', help='Use an alternative settings file')
    return parser.parse_args(argv)


def setup_application(argv=None) -> QApplication:
    """Configure the Qt application."""
    QApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )

    app = QApplication(argv if argv is not None else sys.argv)
    app.setApplicationName("Bezier Path Editor")
    app.setApplicationVersion("0.1.0")
    app.setOrganizationName("bezier-editor")
    app.setPalette(build_palette())
    return app


def main():
    """Main entry point."""
    args = parse_args()
    setup_logging(debug=args.debug)

    app = setup_application()
    window = MainWindow(config_override=args.config)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
