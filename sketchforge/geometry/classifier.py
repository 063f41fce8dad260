# sketchforge/geometry/classifier.py

"""
Rule-based shape classification.

Rules run in a fixed order and the first one that accepts wins. Open paths
are settled first because the polygon and ellipse rules only make sense for
a path that returns to its start.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..config import DetectionParams
from .descriptors import Corner, GeometryDescriptors
from .primitives import DetectedShape, ShapeType

logger = logging.getLogger(__name__)

# Unknown never reports more than this, which is below every accepted score
UNKNOWN_CONFIDENCE_CAP = 0.45


@dataclass
class RuleOutcome:
    shape_type: ShapeType
    accepted: bool
    confidence: float
    attributes: Dict[str, Any] = field(default_factory=dict)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def _corner_match(observed: int, expected: int) -> float:
    if observed == expected:
        return 1.0
    return _clamp(1.0 - abs(observed - expected) / float(expected))


def _closure_score(d: GeometryDescriptors, params: DetectionParams) -> float:
    if params.closedness_threshold <= 0:
        return 1.0 if d.closedness <= 0 else 0.0
    return _clamp(1.0 - d.closedness / params.closedness_threshold)


def _unit(dx: float, dy: float) -> Optional[Tuple[float, float]]:
    norm = math.hypot(dx, dy)
    if norm <= 0:
        return None
    return (dx / norm, dy / norm)


class ShapeClassifier:
    def __init__(self, params: DetectionParams):
        self.params = params
        self._rules: List[Callable[[GeometryDescriptors], RuleOutcome]] = [
            self._rule_line,
            self._rule_triangle,
            self._rule_quadrilateral,
            self._rule_circle,
        ]

    def classify(self, shape_id: str, stroke_ids: Tuple[str, ...], d: GeometryDescriptors) -> DetectedShape:
        if d.is_degenerate:
            return self._build(shape_id, stroke_ids, d, RuleOutcome(ShapeType.UNKNOWN, False, 0.0))

        near_misses: List[float] = []
        for rule in self._rules:
            outcome = rule(d)
            if outcome.accepted:
                return self._build(shape_id, stroke_ids, d, outcome)
            near_misses.append(outcome.confidence)

        confidence = min(max(near_misses), UNKNOWN_CONFIDENCE_CAP)
        return self._build(shape_id, stroke_ids, d, RuleOutcome(ShapeType.UNKNOWN, False, confidence))

    # -- rules ---------------------------------------------------------------

    def _end_zones(self, d: GeometryDescriptors) -> Tuple[List[Corner], List[Corner], int]:
        """
        Split corners into those near the first point, those near the last
        point and the rest. "Near" is within end_zone times the box diagonal,
        so the zones do not shrink as an arrow head grows.
        """
        radius = self.params.end_zone * math.hypot(d.bounds.width, d.bounds.height)
        (sx, sy), (ex, ey) = d.start_point, d.end_point
        start_zone: List[Corner] = []
        end_zone: List[Corner] = []
        interior = 0
        for c in d.corners:
            to_start = math.hypot(c.x - sx, c.y - sy)
            to_end = math.hypot(c.x - ex, c.y - ey)
            if min(to_start, to_end) > radius:
                interior += 1
            elif to_start < to_end:
                start_zone.append(c)
            else:
                end_zone.append(c)
        return start_zone, end_zone, interior

    @staticmethod
    def _shaft_straightness(tail: Tuple[float, float], tip: Corner, arc: float) -> float:
        if arc <= 0:
            return 0.0
        return _clamp(math.hypot(tip.x - tail[0], tip.y - tail[1]) / arc)

    def _rule_line(self, d: GeometryDescriptors) -> RuleOutcome:
        p = self.params
        start_zone, end_zone, interior = self._end_zones(d)
        clean_body = 1.0 if interior == 0 else 0.0

        head_corners = max(len(start_zone), len(end_zone))
        if head_corners < p.arrow_head_corners:
            accepted = d.straightness >= p.straightness_threshold and not d.is_closed and interior == 0
            confidence = _clamp(0.8 * d.straightness + 0.2 * clean_body)
            return RuleOutcome(ShapeType.LINE, accepted, confidence)

        if len(start_zone) == len(end_zone):
            head_at_end = None
        else:
            head_at_end = len(end_zone) > len(start_zone)

        # straightness is measured on the shaft, from the tail to the first
        # head corner met along the path; both ends barbed leaves nothing to trim
        attributes: Dict[str, Any] = {"head_at_end": head_at_end}
        straightness = d.straightness
        if head_at_end is not None:
            if head_at_end:
                tip = min(end_zone, key=lambda c: c.position)
                tail = d.start_point
                arc = tip.position * d.perimeter
            else:
                tip = max(start_zone, key=lambda c: c.position)
                tail = d.end_point
                arc = (1.0 - tip.position) * d.perimeter
            straightness = self._shaft_straightness(tail, tip, arc)
            attributes["tail"] = tail
            attributes["tip"] = (tip.x, tip.y)

        accepted = straightness >= p.straightness_threshold and not d.is_closed and interior == 0
        head_score = min(1.0, head_corners / float(p.arrow_head_corners + 1))
        confidence = _clamp(0.6 * straightness + 0.4 * head_score * clean_body)
        return RuleOutcome(ShapeType.ARROW, accepted, confidence, attributes)

    def _rule_triangle(self, d: GeometryDescriptors) -> RuleOutcome:
        accepted = d.is_closed and d.corner_count == 3
        confidence = 0.4 * _closure_score(d, self.params) + 0.6 * _corner_match(d.corner_count, 3)
        return RuleOutcome(ShapeType.TRIANGLE, accepted, _clamp(confidence))

    def _rule_quadrilateral(self, d: GeometryDescriptors) -> RuleOutcome:
        p = self.params
        closure = _closure_score(d, p)
        corner_score = _corner_match(d.corner_count, 4)
        if d.corner_count < 2:
            confidence = 0.25 * closure + 0.25 * corner_score
            return RuleOutcome(ShapeType.RECTANGLE, False, _clamp(confidence))

        # deviation of each corner-to-corner edge from the nearest axis, in [0, 45]
        deviations: List[float] = []
        signed: List[float] = []
        pts = [(c.x, c.y) for c in d.corners]
        for (x1, y1), (x2, y2) in zip(pts, pts[1:] + pts[:1]):
            angle = math.degrees(math.atan2(y2 - y1, x2 - x1)) % 90.0
            deviations.append(min(angle, 90.0 - angle))
            signed.append(angle if angle <= 45.0 else angle - 90.0)
        mean_dev = sum(deviations) / len(deviations)

        rect_align = _clamp(1.0 - mean_dev / 45.0)
        diamond_align = _clamp(1.0 - abs(mean_dev - 45.0) / 45.0)
        rect_fill = d.rectangularity
        diamond_fill = _clamp(1.0 - abs(d.rectangularity - 0.5) / 0.5)

        rect_conf = _clamp(0.25 * closure + 0.25 * corner_score + 0.3 * rect_align + 0.2 * rect_fill)
        diamond_conf = _clamp(0.25 * closure + 0.25 * corner_score + 0.3 * diamond_align + 0.2 * diamond_fill)

        quad = d.is_closed and d.corner_count == 4
        if quad and mean_dev <= p.edge_angle_tolerance:
            rotation = sum(signed) / len(signed)
            return RuleOutcome(ShapeType.RECTANGLE, True, rect_conf, {"rotation": round(rotation, 2)})
        if quad and abs(mean_dev - 45.0) <= p.edge_angle_tolerance:
            rotation = sum(45.0 - dev for dev in deviations) / len(deviations)
            return RuleOutcome(ShapeType.DIAMOND, True, diamond_conf, {"rotation": round(rotation, 2)})

        if rect_conf >= diamond_conf:
            return RuleOutcome(ShapeType.RECTANGLE, False, rect_conf)
        return RuleOutcome(ShapeType.DIAMOND, False, diamond_conf)

    def _rule_circle(self, d: GeometryDescriptors) -> RuleOutcome:
        p = self.params
        few_corners = d.corner_count <= p.circle_max_corners
        accepted = d.circularity >= p.circularity_threshold and few_corners
        corner_score = 1.0 if few_corners else _clamp(1.0 - (d.corner_count - p.circle_max_corners) / 4.0)
        w, h = d.bounds.width, d.bounds.height
        aspect = min(w, h) / max(w, h) if max(w, h) > 0 else 0.0
        confidence = _clamp(0.6 * d.circularity + 0.25 * corner_score + 0.15 * aspect)
        return RuleOutcome(ShapeType.CIRCLE, accepted, confidence)

    # -- output --------------------------------------------------------------

    def _build(self, shape_id: str, stroke_ids: Tuple[str, ...], d: GeometryDescriptors, outcome: RuleOutcome) -> DetectedShape:
        shape_type = outcome.shape_type if outcome.accepted else ShapeType.UNKNOWN
        corners: Tuple[Tuple[float, float], ...] = ()
        radius = radius_x = radius_y = None
        direction = None
        head_at_end = None
        rotation = None
        start_point, end_point = d.start_point, d.end_point

        if shape_type in (ShapeType.TRIANGLE, ShapeType.RECTANGLE, ShapeType.DIAMOND):
            corners = tuple((round(c.x, 3), round(c.y, 3)) for c in d.corners)
            rotation = outcome.attributes.get("rotation")
        elif shape_type == ShapeType.CIRCLE:
            radius_x = d.bounds.width / 2.0
            radius_y = d.bounds.height / 2.0
            radius = (radius_x + radius_y) / 2.0
        elif shape_type in (ShapeType.LINE, ShapeType.ARROW) and d.start_point and d.end_point:
            (sx, sy), (ex, ey) = d.start_point, d.end_point
            head_at_end = outcome.attributes.get("head_at_end")
            if "tip" in outcome.attributes:
                (tx, ty), (hx, hy) = outcome.attributes["tail"], outcome.attributes["tip"]
                direction = _unit(hx - tx, hy - ty)
                # the head end is the arrow tip, not wherever the last barb stopped
                if head_at_end:
                    end_point = (hx, hy)
                else:
                    start_point = (hx, hy)
            else:
                direction = _unit(ex - sx, ey - sy)

        shape = DetectedShape(
            id=shape_id,
            shape_type=shape_type,
            bounds=d.bounds,
            confidence=_clamp(outcome.confidence),
            stroke_ids=tuple(stroke_ids),
            rotation=rotation,
            corners=corners,
            radius=radius,
            radius_x=radius_x,
            radius_y=radius_y,
            direction=direction,
            start_point=start_point,
            end_point=end_point,
            head_at_end=head_at_end,
        )
        logger.debug("%s classified as %s (%.2f)", shape_id, shape_type.value, shape.confidence)
        return shape
