from .primitives import (
    BoundingBox,
    Connector,
    DetectedShape,
    DiagramType,
    ProcessingResult,
    ShapeType,
    TextRegion,
)

__all__ = [
    "BoundingBox",
    "Connector",
    "DetectedShape",
    "DiagramType",
    "ProcessingResult",
    "ShapeType",
    "TextRegion",
]
