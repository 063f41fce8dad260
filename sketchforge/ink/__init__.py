from .strokes import Point, Stroke, StrokeGroup
from .loader import parse_strokes_json, strokes_to_json

__all__ = ["Point", "Stroke", "StrokeGroup", "parse_strokes_json", "strokes_to_json"]
