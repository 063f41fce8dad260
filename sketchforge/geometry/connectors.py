# sketchforge/geometry/connectors.py

import logging
import math
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from ..config import DetectionParams
from .primitives import Connector, DetectedShape, ShapeType

logger = logging.getLogger(__name__)


def _match_endpoint(point: Optional[Tuple[float, float]], nodes: Sequence[DetectedShape], margin: float) -> Optional[str]:
    """
    The node whose margin-expanded box holds the point. When several do, the
    one whose box center is nearest wins.
    """
    if point is None:
        return None
    best_id = None
    best_dist = float("inf")
    px, py = point
    for node in nodes:
        if not node.bounds.expanded(margin).contains(point):
            continue
        cx, cy = node.bounds.center
        dist = math.hypot(cx - px, cy - py)
        if dist < best_dist:
            best_dist = dist
            best_id = node.id
    return best_id


def detect_connectors(
    shapes: Sequence[DetectedShape],
    params: DetectionParams,
) -> Tuple[List[DetectedShape], List[Connector]]:
    """
    Bind line and arrow shapes to the nodes their endpoints touch.

    Returns the shape list (line/arrow shapes that became connectors are
    re-emitted with type CONNECTOR, everything else unchanged and in order)
    and the connectors. Arrows point at their head end; lines, and arrows
    whose head is ambiguous, run from the first recorded point to the last.
    """
    nodes = [s for s in shapes if not s.shape_type.is_linear]
    out_shapes: List[DetectedShape] = []
    connectors: List[Connector] = []

    for shape in shapes:
        if shape.shape_type not in (ShapeType.LINE, ShapeType.ARROW):
            out_shapes.append(shape)
            continue

        start_match = _match_endpoint(shape.start_point, nodes, params.connector_margin)
        end_match = _match_endpoint(shape.end_point, nodes, params.connector_margin)

        if start_match is None and end_match is None:
            out_shapes.append(shape)
            continue
        if start_match == end_match:
            # both ends inside the same node: a stroke on the shape, not an edge
            out_shapes.append(shape)
            continue

        directed = shape.shape_type == ShapeType.ARROW
        if directed and shape.head_at_end is False:
            source_id, target_id = end_match, start_match
        else:
            source_id, target_id = start_match, end_match

        connectors.append(
            Connector(
                id=f"c{len(connectors)}",
                shape_id=shape.id,
                source_id=source_id,
                target_id=target_id,
                directed=directed,
                confidence=shape.confidence,
            )
        )
        out_shapes.append(replace(shape, shape_type=ShapeType.CONNECTOR))

    logger.debug("bound %d connectors across %d nodes", len(connectors), len(nodes))
    return out_shapes, connectors
