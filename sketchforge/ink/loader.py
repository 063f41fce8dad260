import json
from dataclasses import replace
from typing import Any, Dict, List, Tuple, Union

from .strokes import Point, Stroke


_POINT_SYNONYMS = {"t": "timestamp", "time": "timestamp", "ts": "timestamp", "p": "pressure"}
_STROKE_SYNONYMS = {"stroke_id": "id", "pts": "points", "stroke_width": "width"}

# spacing for payloads recorded without times; far wider than any temporal window
UNTIMED_STROKE_GAP_MS = 60_000


def _normalize_keys(record: Dict[str, Any], synonyms: Dict[str, str]) -> Dict[str, Any]:
    """
    Rename loosely-named keys to their canonical field names.
    Canonical keys already present win over synonyms.
    """
    normalized = dict(record)
    for alias, canonical in synonyms.items():
        if alias in normalized and canonical not in normalized:
            normalized[canonical] = normalized.pop(alias)
    return normalized


def _parse_point(raw: Any) -> Tuple[Point, bool]:
    """Returns the point and whether the record carried a timestamp."""
    if isinstance(raw, (list, tuple)):
        # [x, y] or [x, y, timestamp]
        if len(raw) < 2:
            raise ValueError(f"point needs at least x and y: {raw!r}")
        timed = len(raw) > 2 and raw[2] is not None
        ts = int(raw[2]) if timed else 0
        return Point(x=float(raw[0]), y=float(raw[1]), timestamp=ts), timed
    if not isinstance(raw, dict):
        raise ValueError(f"unsupported point record: {raw!r}")
    data = _normalize_keys(raw, _POINT_SYNONYMS)
    try:
        x = float(data["x"])
        y = float(data["y"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"point has no numeric x/y: {raw!r}") from exc
    pressure = data.get("pressure")
    timed = data.get("timestamp") is not None
    point = Point(
        x=x,
        y=y,
        timestamp=int(data["timestamp"]) if timed else 0,
        pressure=float(pressure) if pressure is not None else None,
    )
    return point, timed


def _with_drawing_order_times(strokes: List[Stroke]) -> List[Stroke]:
    # stroke k starts at k * gap, its points 1 ms apart
    return [
        replace(
            s,
            points=tuple(replace(p, timestamp=k * UNTIMED_STROKE_GAP_MS + i) for i, p in enumerate(s.points)),
        )
        for k, s in enumerate(strokes)
    ]


def parse_strokes_json(raw_json: Union[str, List[Any], Dict[str, Any]]) -> List[Stroke]:
    """
    Parse a stroke payload from the drawing surface into typed strokes.

    Accepts JSON text, a list of stroke records, or a dict with a "strokes" key.
    Records without an id get ``stroke-<index>``; a repeated id is an error.

    A payload with no timestamps at all is given synthetic ones in record
    order, one minute apart per stroke, so grouping falls back to spatial
    proximity alone. A payload that times some points but not others is
    rejected.
    """
    data: Any
    if isinstance(raw_json, str):
        data = json.loads(raw_json)
    else:
        data = raw_json

    if isinstance(data, dict):
        data = data.get("strokes", [])
    if not isinstance(data, list):
        raise ValueError("stroke payload must be a list or an object with a 'strokes' list")

    strokes: List[Stroke] = []
    seen_ids = set()
    timed_points = 0
    total_points = 0
    for idx, record in enumerate(data):
        if not isinstance(record, dict):
            raise ValueError(f"stroke record {idx} is not an object")
        s = _normalize_keys(record, _STROKE_SYNONYMS)
        stroke_id = str(s.get("id") or f"stroke-{idx}")
        if stroke_id in seen_ids:
            raise ValueError(f"duplicate stroke id {stroke_id!r}")
        seen_ids.add(stroke_id)

        points: List[Point] = []
        for raw_point in s.get("points", []) or []:
            point, timed = _parse_point(raw_point)
            points.append(point)
            timed_points += timed
        total_points += len(points)

        strokes.append(
            Stroke(
                id=stroke_id,
                points=tuple(points),
                color=s.get("color", "#000000"),
                width=float(s.get("width", 2.0)),
                tool=s.get("tool", "pen"),
            )
        )

    if total_points and timed_points == 0:
        return _with_drawing_order_times(strokes)
    if timed_points != total_points:
        raise ValueError(f"{total_points - timed_points} of {total_points} points have no timestamp")
    return strokes


def strokes_to_json(strokes: List[Stroke]) -> str:
    obj = [
        {
            "id": s.id,
            "points": [
                {"x": p.x, "y": p.y, "pressure": p.pressure, "timestamp": p.timestamp}
                for p in s.points
            ],
            "color": s.color,
            "width": s.width,
            "tool": s.tool,
        }
        for s in strokes
    ]
    return json.dumps(obj, indent=2, ensure_ascii=False)
