# sketchforge/geometry/grouping.py

import logging
from typing import Dict, List, Sequence

from ..config import DetectionParams
from ..ink.strokes import Stroke, StrokeGroup
from .primitives import BoundingBox

logger = logging.getLogger(__name__)


class _DisjointSet:
    def __init__(self, size: int):
        self.parent = list(range(size))

    def find(self, i: int) -> int:
        root = i
        while self.parent[root] != root:
            root = self.parent[root]
        # path compression
        while self.parent[i] != root:
            self.parent[i], i = root, self.parent[i]
        return root

    def union(self, a: int, b: int) -> None:
        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return
        # keep the lower index as root so roots follow input order
        if rb < ra:
            ra, rb = rb, ra
        self.parent[rb] = ra


def _time_gap(a: Stroke, b: Stroke) -> float:
    """Pen-up to pen-down gap between two strokes; 0 when their spans overlap."""
    if a.start_time <= b.start_time:
        return max(0, b.start_time - a.end_time)
    return max(0, a.start_time - b.end_time)


def _should_merge(a: Stroke, box_a: BoundingBox, b: Stroke, box_b: BoundingBox, params: DetectionParams) -> bool:
    if box_a.expanded(params.proximity_distance).intersects(box_b.expanded(params.proximity_distance)):
        return True
    return _time_gap(a, b) < params.temporal_window_ms


def group_strokes(strokes: Sequence[Stroke], params: DetectionParams) -> List[StrokeGroup]:
    """
    Partition strokes into shape candidates.

    Strokes with fewer than two points are dropped. Two strokes share a group
    when their proximity-expanded boxes intersect or when one was started within
    ``temporal_window_ms`` of the other ending; membership is transitive.
    Groups come back ordered by their earliest stroke.
    """
    usable = [s for s in strokes if len(s.points) >= 2]
    dropped = len(strokes) - len(usable)
    if dropped:
        logger.debug("dropped %d strokes with fewer than 2 points", dropped)
    if not usable:
        return []

    boxes = [s.bounds() for s in usable]
    dsu = _DisjointSet(len(usable))
    for i in range(len(usable)):
        for j in range(i + 1, len(usable)):
            if _should_merge(usable[i], boxes[i], usable[j], boxes[j], params):
                dsu.union(i, j)

    members: Dict[int, List[int]] = {}
    for i in range(len(usable)):
        members.setdefault(dsu.find(i), []).append(i)

    groups: List[StrokeGroup] = []
    for idxs in members.values():
        idxs.sort(key=lambda k: (usable[k].start_time, k))
        first = idxs[0]
        groups.append(
            StrokeGroup(
                stroke_ids=tuple(usable[k].id for k in idxs),
                start_time=usable[first].start_time,
            )
        )
    # ties on start time fall back to the input position of the earliest stroke
    order = {s.id: k for k, s in enumerate(usable)}
    groups.sort(key=lambda g: (g.start_time, order[g.stroke_ids[0]]))

    logger.debug("grouped %d strokes into %d groups", len(usable), len(groups))
    return groups
