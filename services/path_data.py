"""
Path data codec.

Builds and parses the compact path-data notation used to hand geometry
to the canvas:

    M x y C cx1 cy1, cx2 cy2, x y C ...

Only absolute M, L, C and Z commands are supported.
"""

import re
from typing import List, Sequence, Tuple

from PyQt6.QtCore import QPointF
from PyQt6.QtGui import QPainterPath

from models.bezier import BezierPoint, segment_points


# Number of arguments per command
COMMAND_ARITY = {"M": 2, "L": 2, "C": 6, "Z": 0}

_TOKEN_RE = re.compile(r"[MLCZmlcz]|[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")

PathCommand = Tuple[str, Tuple[float, ...]]


def format_number(value: float) -> str:
    """Format a coordinate compactly without losing double precision."""
    value = float(value)
    if value == 0:
        return "0"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def build_path_data(points: Sequence[BezierPoint]) -> str:
    """
    Build path data for a list of anchors.

    Each segment uses the outgoing handle of its start anchor and the
    incoming handle of its end anchor; a missing handle collapses onto
    its anchor. Returns an empty string for fewer than two anchors.
    """
    if len(points) < 2:
        return ""

    f = format_number
    parts = [f"M {f(points[0].x)} {f(points[0].y)}"]
    for curr, nxt in zip(points, points[1:]):
        _, cp1, cp2, _ = segment_points(curr, nxt)
        parts.append(
            f"C {f(cp1.x)} {f(cp1.y)}, {f(cp2.x)} {f(cp2.y)}, {f(nxt.x)} {f(nxt.y)}"
        )
    return " ".join(parts)


def parse_path_data(data: str) -> List[PathCommand]:
    """
    Parse path data into (command, args) tuples.

    Raises:
        ValueError: On unknown commands, missing arguments or relative
                    commands.
    """
    tokens = _TOKEN_RE.findall(data.replace(",", " "))
    commands: List[PathCommand] = []
    i = 0
    while i < len(tokens):
        cmd = tokens[i]
        if cmd not in COMMAND_ARITY:
            if cmd.isalpha():
                raise ValueError(f"Unsupported path command '{cmd}'")
            raise ValueError(f"Expected a command, found '{cmd}'")
        arity = COMMAND_ARITY[cmd]
        args = tokens[i + 1:i + 1 + arity]
        if len(args) != arity or any(a.isalpha() for a in args):
            raise ValueError(f"Command '{cmd}' expects {arity} numbers")
        commands.append((cmd, tuple(float(a) for a in args)))
        i += 1 + arity
    if commands and commands[0][0] != "M":
        raise ValueError("Path data must start with 'M'")
    return commands


def path_data_to_painter_path(data: str) -> QPainterPath:
    """Convert path data to a QPainterPath."""
    path = QPainterPath()
    if not data:
        return path
    for cmd, args in parse_path_data(data):
        if cmd == "M":
            path.moveTo(QPointF(*args))
        elif cmd == "L":
            path.lineTo(QPointF(*args))
        elif cmd == "C":
            path.cubicTo(QPointF(args[0], args[1]),
                         QPointF(args[2], args[3]),
                         QPointF(args[4], args[5]))
        elif cmd == "Z":
            path.closeSubpath()
    return path
