import logging
import threading
from typing import List, Optional, Sequence, Tuple

from ..geometry.primitives import ProcessingResult, TextRegion
from ..ink.strokes import Stroke
from .engine import ShapeDetectionEngine

logger = logging.getLogger(__name__)


class AnalysisInProgressError(RuntimeError):
    """Raised when an analysis is requested while another one is running."""


class DrawingSession:
    """
    The live stroke collection of one canvas.

    The stroke lock is held only to copy a snapshot; the engine runs on the
    copy with the lock released, so add_stroke never waits for an analysis.
    At most one analysis runs at a time and a concurrent request is rejected.
    """

    def __init__(self, engine: Optional[ShapeDetectionEngine] = None):
        self.engine = engine or ShapeDetectionEngine()
        self._strokes: List[Stroke] = []
        self._revision = 0
        self._lock = threading.Lock()
        self._analysis_lock = threading.Lock()
        self.last_result: Optional[ProcessingResult] = None

    @property
    def revision(self) -> int:
        with self._lock:
            return self._revision

    def add_stroke(self, stroke: Stroke) -> None:
        with self._lock:
            if any(s.id == stroke.id for s in self._strokes):
                raise ValueError(f"duplicate stroke id {stroke.id!r}")
            self._strokes.append(stroke)
            self._revision += 1

    def clear(self) -> None:
        with self._lock:
            self._strokes.clear()
            self._revision += 1
            self.last_result = None

    def snapshot(self) -> Tuple[int, Tuple[Stroke, ...]]:
        with self._lock:
            return self._revision, tuple(self._strokes)

    def analyze(self, text_regions: Optional[Sequence[TextRegion]] = None) -> ProcessingResult:
        if not self._analysis_lock.acquire(blocking=False):
            logger.warning("analysis requested while another is in flight; rejecting")
            raise AnalysisInProgressError("already processing")
        try:
            revision, strokes = self.snapshot()
            result = self.engine.analyze(strokes, text_regions, metadata={"revision": revision})
        finally:
            self._analysis_lock.release()

        with self._lock:
            self.last_result = result
        return result

    def is_stale(self, result: ProcessingResult) -> bool:
        """True when strokes changed after the snapshot this result was computed from."""
        return result.metadata.get("revision") != self.revision
