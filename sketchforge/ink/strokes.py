from dataclasses import dataclass
from typing import Optional, Tuple

from ..geometry.primitives import BoundingBox


@dataclass(frozen=True)
class Point:
    x: float
    y: float
    timestamp: int = 0  # milliseconds
    pressure: Optional[float] = None


@dataclass(frozen=True)
class Stroke:
    """
    One pen-down to pen-up path, as recorded by the drawing surface.
    """

    id: str
    points: Tuple[Point, ...]
    color: str = "#000000"
    width: float = 2.0
    tool: str = "pen"

    def __post_init__(self):
        object.__setattr__(self, "points", tuple(self.points))

    @property
    def start_time(self) -> int:
        return self.points[0].timestamp if self.points else 0

    @property
    def end_time(self) -> int:
        return self.points[-1].timestamp if self.points else 0

    def bounds(self) -> BoundingBox:
        xs = [p.x for p in self.points]
        ys = [p.y for p in self.points]
        if not xs:
            return BoundingBox(0.0, 0.0, 0.0, 0.0)
        return BoundingBox(min(xs), min(ys), max(xs), max(ys))


@dataclass(frozen=True)
class StrokeGroup:
    """
    Strokes judged to form one visual shape, ordered by start time.
    """

    stroke_ids: Tuple[str, ...]
    start_time: int
