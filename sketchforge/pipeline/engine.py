import logging
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence

from ..config import DetectionParams
from ..geometry.classifier import ShapeClassifier
from ..geometry.connectors import detect_connectors
from ..geometry.descriptors import analyze_group
from ..geometry.grouping import group_strokes
from ..geometry.primitives import DetectedShape, ProcessingResult, TextRegion
from ..graph.assembler import assemble_result
from ..ink.strokes import Stroke

logger = logging.getLogger(__name__)


class ShapeDetectionEngine:
    """
    Strokes in, ProcessingResult out.

    Pure and synchronous: the engine keeps no state between calls besides its
    parameters, so analyzing the same strokes twice gives the same result.
    """

    def __init__(self, params: Optional[DetectionParams] = None):
        self.params = params or DetectionParams()
        self.classifier = ShapeClassifier(self.params)

    def analyze(
        self,
        strokes: Sequence[Stroke],
        text_regions: Optional[Sequence[TextRegion]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ProcessingResult:
        strokes_by_id = {s.id: s for s in strokes}
        if len(strokes_by_id) != len(strokes):
            dupes = sorted(sid for sid, n in Counter(s.id for s in strokes).items() if n > 1)
            raise ValueError(f"duplicate stroke ids: {', '.join(dupes)}")
        groups = group_strokes(strokes, self.params)

        shapes: List[DetectedShape] = []
        for idx, group in enumerate(groups):
            descriptors = analyze_group(group, strokes_by_id, self.params)
            shapes.append(self.classifier.classify(f"s{idx}", group.stroke_ids, descriptors))

        shapes, connectors = detect_connectors(shapes, self.params)

        meta: Dict[str, Any] = {"stroke_count": len(strokes), "group_count": len(groups)}
        meta.update(metadata or {})
        result = assemble_result(shapes, connectors, text_regions, meta)
        logger.debug(
            "analyzed %d strokes: %d shapes, %d connectors, type=%s",
            len(strokes),
            len(result.shapes),
            len(result.connectors),
            result.suggested_diagram_type.value,
        )
        return result
