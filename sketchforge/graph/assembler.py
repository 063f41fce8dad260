from typing import Any, Dict, Optional, Sequence

from ..geometry.primitives import (
    Connector,
    DetectedShape,
    DiagramType,
    ProcessingResult,
    ShapeType,
    TextRegion,
)


def suggest_diagram_type(shapes: Sequence[DetectedShape], connectors: Sequence[Connector]) -> DiagramType:
    """
    Coarse diagram label from the shape/connector mix.
    - flowchart: enough connectors to chain the nodes together
    - concept_map: mostly ellipses with few connectors between them
    - diagram: anything else
    """
    nodes = [s for s in shapes if not s.shape_type.is_linear]
    circles = sum(1 for s in nodes if s.shape_type == ShapeType.CIRCLE)
    n_conn = len(connectors)

    if n_conn > 0 and n_conn >= max(1, len(nodes) - 1):
        return DiagramType.FLOWCHART
    if nodes and circles * 2 > len(nodes) and n_conn < circles:
        return DiagramType.CONCEPT_MAP
    return DiagramType.GENERIC


def assemble_result(
    shapes: Sequence[DetectedShape],
    connectors: Sequence[Connector],
    text_regions: Optional[Sequence[TextRegion]] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> ProcessingResult:
    confidence = sum(s.confidence for s in shapes) / len(shapes) if shapes else 0.0
    return ProcessingResult(
        shapes=list(shapes),
        connectors=list(connectors),
        text_regions=list(text_regions or []),
        suggested_diagram_type=suggest_diagram_type(shapes, connectors),
        confidence=max(0.0, min(1.0, confidence)),
        metadata=dict(metadata or {}),
    )


def label_for_shape(shape: DetectedShape, text_regions: Sequence[TextRegion]) -> str:
    """
    Join the text of every region whose center falls inside the shape's box,
    top to bottom then left to right.
    """
    inside = [t for t in text_regions if shape.bounds.contains(t.bounds.center)]
    inside.sort(key=lambda t: (t.bounds.min_y, t.bounds.min_x))
    return " ".join(t.text.strip() for t in inside if t.text.strip())
