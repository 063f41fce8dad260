# sketchforge/geometry/primitives.py

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ShapeType(str, Enum):
    RECTANGLE = "rectangle"
    CIRCLE = "circle"
    DIAMOND = "diamond"
    TRIANGLE = "triangle"
    LINE = "line"
    ARROW = "arrow"
    CONNECTOR = "connector"
    UNKNOWN = "unknown"

    @property
    def is_linear(self) -> bool:
        return self in (ShapeType.LINE, ShapeType.ARROW, ShapeType.CONNECTOR)


class DiagramType(str, Enum):
    FLOWCHART = "flowchart"
    CONCEPT_MAP = "concept_map"
    GENERIC = "diagram"


@dataclass(frozen=True)
class BoundingBox:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Tuple[float, float]:
        return (0.5 * (self.min_x + self.max_x), 0.5 * (self.min_y + self.max_y))

    def expanded(self, margin: float) -> "BoundingBox":
        return BoundingBox(self.min_x - margin, self.min_y - margin, self.max_x + margin, self.max_y + margin)

    def intersects(self, other: "BoundingBox") -> bool:
        # touching edges count as intersecting
        return (
            self.min_x <= other.max_x
            and other.min_x <= self.max_x
            and self.min_y <= other.max_y
            and other.min_y <= self.max_y
        )

    def contains(self, point: Tuple[float, float]) -> bool:
        x, y = point
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def union(self, other: "BoundingBox") -> "BoundingBox":
        return BoundingBox(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.min_x, "y": self.min_y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class TextRegion:
    """
    Recognized text supplied by an OCR collaborator. Carried through untouched.
    """

    id: str
    text: str
    bounds: BoundingBox
    confidence: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "bounds": self.bounds.to_dict(),
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class DetectedShape:
    """
    A single classified stroke group.
    """

    id: str  # e.g. "s1"
    shape_type: ShapeType
    bounds: BoundingBox
    confidence: float
    stroke_ids: Tuple[str, ...] = ()
    rotation: Optional[float] = None  # degrees
    corners: Tuple[Tuple[float, float], ...] = ()
    radius: Optional[float] = None
    radius_x: Optional[float] = None
    radius_y: Optional[float] = None
    direction: Optional[Tuple[float, float]] = None  # unit vector, tail -> head
    start_point: Optional[Tuple[float, float]] = None  # arrows: the head side holds the tip
    end_point: Optional[Tuple[float, float]] = None
    head_at_end: Optional[bool] = None  # arrows only, None when ambiguous

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "shape_type": self.shape_type.value,
            "bounds": dict(self.bounds.to_dict(), rotation=self.rotation),
            "confidence": self.confidence,
            "stroke_ids": list(self.stroke_ids),
            "corners": [list(c) for c in self.corners],
            "radius": self.radius,
            "radius_x": self.radius_x,
            "radius_y": self.radius_y,
            "direction": list(self.direction) if self.direction else None,
            "start_point": list(self.start_point) if self.start_point else None,
            "end_point": list(self.end_point) if self.end_point else None,
            "head_at_end": self.head_at_end,
        }


@dataclass(frozen=True)
class Connector:
    """
    An inferred edge between two shapes, backed by a line or arrow shape.
    """

    id: str  # e.g. "c0"
    shape_id: str
    source_id: Optional[str]
    target_id: Optional[str]
    directed: bool
    confidence: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "shape_id": self.shape_id,
            "from": self.source_id,
            "to": self.target_id,
            "directed": self.directed,
            "confidence": self.confidence,
        }


@dataclass
class ProcessingResult:
    """
    Everything one analysis call produces.
    """

    shapes: List[DetectedShape] = field(default_factory=list)
    connectors: List[Connector] = field(default_factory=list)
    text_regions: List[TextRegion] = field(default_factory=list)
    suggested_diagram_type: DiagramType = DiagramType.GENERIC
    confidence: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    def shape_by_id(self, shape_id: str) -> Optional[DetectedShape]:
        for shape in self.shapes:
            if shape.id == shape_id:
                return shape
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shapes": [s.to_dict() for s in self.shapes],
            "connectors": [c.to_dict() for c in self.connectors],
            "text_regions": [t.to_dict() for t in self.text_regions],
            "suggested_diagram_type": self.suggested_diagram_type.value,
            "confidence": self.confidence,
            "metadata": self.metadata,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)
