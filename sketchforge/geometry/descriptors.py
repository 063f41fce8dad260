# sketchforge/geometry/descriptors.py

"""
Metric descriptors of a consolidated stroke group.

All ratios are defined to be 0 when their denominator is 0, so degenerate
input never raises.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

from ..config import DetectionParams
from ..ink.strokes import Stroke, StrokeGroup
from .primitives import BoundingBox

logger = logging.getLogger(__name__)

_EPS = 1e-9


@dataclass(frozen=True)
class Corner:
    x: float
    y: float
    angle: float  # turning angle, degrees
    position: float  # arc-length fraction along the analyzed path


@dataclass(frozen=True)
class GeometryDescriptors:
    bounds: BoundingBox
    perimeter: float
    area: float
    circularity: float
    rectangularity: float
    straightness: float
    closedness: float
    is_closed: bool
    corners: Tuple[Corner, ...]
    start_point: Optional[Tuple[float, float]]
    end_point: Optional[Tuple[float, float]]
    point_count: int

    @property
    def corner_count(self) -> int:
        return len(self.corners)

    @property
    def is_degenerate(self) -> bool:
        return self.point_count < 2 or self.perimeter <= _EPS


def consolidate(group: StrokeGroup, strokes_by_id: Dict[str, Stroke]) -> np.ndarray:
    """
    Concatenate a group's strokes into one (N, 2) polyline.
    Group stroke ids are already in drawing order.
    """
    chunks: List[np.ndarray] = []
    for sid in group.stroke_ids:
        stroke = strokes_by_id[sid]
        if stroke.points:
            chunks.append(np.array([(p.x, p.y) for p in stroke.points], dtype=float))
    if not chunks:
        return np.zeros((0, 2), dtype=float)
    return np.vstack(chunks)


def _shoelace_area(points: np.ndarray) -> float:
    x = points[:, 0]
    y = points[:, 1]
    return 0.5 * abs(float(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))))


def _resample(points: np.ndarray, closed: bool, count: int) -> Tuple[np.ndarray, np.ndarray, float]:
    """
    Evenly resample a polyline by arc length.

    Returns (samples, arc positions in [0, 1), sample step). Closed paths
    include the closing segment and are sampled without repeating the start.
    """
    path = np.vstack([points, points[:1]]) if closed else points
    seg = np.hypot(*np.diff(path, axis=0).T)
    keep = np.concatenate([[True], seg > _EPS])
    path = path[keep]
    seg = seg[seg > _EPS]
    if len(path) < 2:
        return path, np.zeros(len(path)), 0.0

    cum = np.concatenate([[0.0], np.cumsum(seg)])
    total = float(cum[-1])
    at = np.linspace(0.0, total, count, endpoint=not closed)
    xs = np.interp(at, cum, path[:, 0])
    ys = np.interp(at, cum, path[:, 1])
    step = total / count if closed else total / (count - 1)
    return np.column_stack([xs, ys]), at / total, step


def _turning_angles(samples: np.ndarray, closed: bool, window: int) -> np.ndarray:
    """
    Turning angle in degrees at every sample, measured between the chords to
    the samples ``window`` steps behind and ahead. Open-path ends get 0.
    """
    n = len(samples)
    angles = np.zeros(n)
    if closed:
        idx = np.arange(n)
    else:
        idx = np.arange(window, n - window)
    if len(idx) == 0:
        return angles

    prev = samples[(idx - window) % n]
    nxt = samples[(idx + window) % n]
    cur = samples[idx]
    v1 = cur - prev
    v2 = nxt - cur
    norms = np.hypot(*v1.T) * np.hypot(*v2.T)
    dots = np.einsum("ij,ij->i", v1, v2)
    with np.errstate(divide="ignore", invalid="ignore"):
        cos = np.where(norms > _EPS, dots / np.where(norms > _EPS, norms, 1.0), 1.0)
    angles[idx] = np.degrees(np.arccos(np.clip(cos, -1.0, 1.0)))
    return angles


def detect_corners(points: np.ndarray, closed: bool, params: DetectionParams) -> Tuple[Corner, ...]:
    samples, positions, step = _resample(points, closed, params.resample_points)
    if len(samples) < 2 * params.corner_window + 1:
        return ()

    angles = _turning_angles(samples, closed, params.corner_window)
    candidates = [i for i in range(len(samples)) if angles[i] > params.corner_angle_threshold]
    if not candidates:
        return ()

    tolerance = 2.0 * step

    def close(i: int, j: int) -> bool:
        return math.hypot(samples[i, 0] - samples[j, 0], samples[i, 1] - samples[j, 1]) <= tolerance

    # runs of neighbouring candidates collapse to their sharpest sample
    clusters: List[List[int]] = [[candidates[0]]]
    for i in candidates[1:]:
        if close(clusters[-1][-1], i):
            clusters[-1].append(i)
        else:
            clusters.append([i])
    if closed and len(clusters) > 1 and close(clusters[-1][-1], clusters[0][0]):
        clusters[0] = clusters.pop() + clusters[0]

    best = [max(c, key=lambda i: angles[i]) for c in clusters]
    best.sort(key=lambda i: positions[i])
    return tuple(
        Corner(
            x=float(samples[i, 0]),
            y=float(samples[i, 1]),
            angle=float(angles[i]),
            position=float(positions[i]),
        )
        for i in best
    )


def _degenerate(points: np.ndarray) -> GeometryDescriptors:
    if len(points):
        bounds = BoundingBox(
            float(points[:, 0].min()), float(points[:, 1].min()),
            float(points[:, 0].max()), float(points[:, 1].max()),
        )
        start = (float(points[0, 0]), float(points[0, 1]))
        end = (float(points[-1, 0]), float(points[-1, 1]))
    else:
        bounds = BoundingBox(0.0, 0.0, 0.0, 0.0)
        start = end = None
    return GeometryDescriptors(
        bounds=bounds,
        perimeter=0.0,
        area=0.0,
        circularity=0.0,
        rectangularity=0.0,
        straightness=0.0,
        closedness=0.0,
        is_closed=False,
        corners=(),
        start_point=start,
        end_point=end,
        point_count=len(points),
    )


def compute_descriptors(points: np.ndarray, params: DetectionParams) -> GeometryDescriptors:
    """
    Descriptors of one consolidated polyline.

    closedness and straightness are both |first - last| / perimeter; a path is
    closed when closedness <= closedness_threshold. Area, circularity and
    rectangularity are only measured for closed paths and are 0 otherwise.
    """
    if len(points) < 2:
        return _degenerate(points)

    seg = np.hypot(*np.diff(points, axis=0).T)
    perimeter = float(seg.sum())
    if perimeter <= _EPS:
        return _degenerate(points)

    bounds = BoundingBox(
        float(points[:, 0].min()), float(points[:, 1].min()),
        float(points[:, 0].max()), float(points[:, 1].max()),
    )
    gap = float(np.hypot(*(points[-1] - points[0])))
    closedness = min(1.0, gap / perimeter)
    straightness = closedness
    is_closed = closedness <= params.closedness_threshold

    area = 0.0
    circularity = 0.0
    rectangularity = 0.0
    if is_closed:
        area = _shoelace_area(points)
        loop = perimeter + gap
        circularity = min(1.0, 4.0 * math.pi * area / (loop * loop))
        box_area = bounds.width * bounds.height
        if box_area > _EPS:
            rectangularity = min(1.0, area / box_area)

    corners = detect_corners(points, is_closed, params)

    return GeometryDescriptors(
        bounds=bounds,
        perimeter=perimeter,
        area=area,
        circularity=circularity,
        rectangularity=rectangularity,
        straightness=straightness,
        closedness=closedness,
        is_closed=is_closed,
        corners=corners,
        start_point=(float(points[0, 0]), float(points[0, 1])),
        end_point=(float(points[-1, 0]), float(points[-1, 1])),
        point_count=len(points),
    )


def analyze_group(group: StrokeGroup, strokes_by_id: Dict[str, Stroke], params: DetectionParams) -> GeometryDescriptors:
    points = consolidate(group, strokes_by_id)
    descriptors = compute_descriptors(points, params)
    logger.debug(
        "group %s: perimeter=%.1f closedness=%.3f circularity=%.3f corners=%d",
        group.stroke_ids,
        descriptors.perimeter,
        descriptors.closedness,
        descriptors.circularity,
        descriptors.corner_count,
    )
    return descriptors
