from typing import Optional, Sequence, Tuple
import os

import cv2  # type: ignore
import numpy as np

from ..ink.strokes import Stroke
from .primitives import ProcessingResult, ShapeType


def _shape_color(shape_type: ShapeType) -> Tuple[int, int, int]:
    """
    BGR colors for visibility on a white canvas.
    """
    mapping = {
        ShapeType.RECTANGLE: (0, 160, 0),     # green
        ShapeType.DIAMOND: (0, 120, 220),     # orange
        ShapeType.CIRCLE: (200, 120, 0),      # blue
        ShapeType.TRIANGLE: (180, 0, 180),    # magenta
        ShapeType.LINE: (120, 120, 120),
        ShapeType.ARROW: (60, 60, 60),
        ShapeType.CONNECTOR: (220, 0, 0),
        ShapeType.UNKNOWN: (0, 200, 220),     # yellow
    }
    return mapping[shape_type]


def _parse_color(color: str) -> Tuple[int, int, int]:
    """'#rrggbb' (optionally '#rrggbbaa') to BGR; anything unparsable is black."""
    hex_part = (color or "").lstrip("#")
    try:
        r = int(hex_part[0:2], 16)
        g = int(hex_part[2:4], 16)
        b = int(hex_part[4:6], 16)
    except ValueError:
        return (0, 0, 0)
    return (b, g, r)


def render_strokes(strokes: Sequence[Stroke], width: int, height: int) -> np.ndarray:
    """Rasterize strokes onto a white BGR canvas."""
    img = np.full((height, width, 3), 255, dtype=np.uint8)
    for stroke in strokes:
        if len(stroke.points) < 2:
            continue
        pts = np.array([[int(round(p.x)), int(round(p.y))] for p in stroke.points], dtype=np.int32)
        cv2.polylines(
            img,
            [pts.reshape(-1, 1, 2)],
            False,
            _parse_color(stroke.color),
            max(1, int(round(stroke.width))),
            lineType=cv2.LINE_AA,
        )
    return img


def draw_result(
    strokes: Sequence[Stroke],
    result: ProcessingResult,
    output_path: str,
    canvas_size: Optional[Tuple[int, int]] = None,
) -> str:
    """
    Render the strokes and overlay detected shapes and connectors, for debugging.
    The canvas defaults to the strokes' extent plus a margin.
    """
    if canvas_size is None:
        max_x = max((p.x for s in strokes for p in s.points), default=0.0)
        max_y = max((p.y for s in strokes for p in s.points), default=0.0)
        canvas_size = (int(max_x) + 40, int(max_y) + 40)
    width, height = canvas_size
    img = render_strokes(strokes, width, height)

    # Draw shapes (bboxes + label)
    for shape in result.shapes:
        b = shape.bounds
        color = _shape_color(shape.shape_type)
        cv2.rectangle(img, (int(b.min_x), int(b.min_y)), (int(b.max_x), int(b.max_y)), color, 1)
        label = f"{shape.id}:{shape.shape_type.value}"
        cv2.putText(
            img,
            label,
            (int(b.min_x), max(0, int(b.min_y) - 6)),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.5,
            color,
            1,
            lineType=cv2.LINE_AA,
        )

    # Draw connectors between node centers
    for conn in result.connectors:
        if conn.source_id is None or conn.target_id is None:
            continue
        src = result.shape_by_id(conn.source_id)
        dst = result.shape_by_id(conn.target_id)
        if src is None or dst is None:
            continue
        start = tuple(int(v) for v in src.bounds.center)
        end = tuple(int(v) for v in dst.bounds.center)
        color = _shape_color(ShapeType.CONNECTOR)
        if conn.directed:
            cv2.arrowedLine(img, start, end, color, 2, line_type=cv2.LINE_AA, tipLength=0.1)
        else:
            cv2.line(img, start, end, color, 2, lineType=cv2.LINE_AA)

    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    cv2.imwrite(output_path, img)
    return output_path
