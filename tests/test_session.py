import threading

import pytest

from conftest import make_stroke, rectangle_stroke, segment

from sketchforge.geometry.primitives import ProcessingResult
from sketchforge.pipeline.session import AnalysisInProgressError, DrawingSession


class BlockingEngine:
    """Engine stand-in that parks inside analyze until released."""

    def __init__(self):
        self.entered = threading.Event()
        self.release = threading.Event()
        self.seen = None

    def analyze(self, strokes, text_regions=None, metadata=None):
        self.seen = strokes
        self.entered.set()
        self.release.wait(timeout=5)
        return ProcessingResult(metadata=dict(metadata or {}))


def test_analyze_records_revision_and_last_result():
    session = DrawingSession()
    session.add_stroke(rectangle_stroke("r", 0, 0, 200, 100))
    result = session.analyze()
    assert result.metadata["revision"] == 1
    assert session.last_result is result
    assert not session.is_stale(result)


def test_new_stroke_makes_result_stale():
    session = DrawingSession()
    session.add_stroke(make_stroke("a", segment((0, 0), (100, 0))))
    result = session.analyze()
    session.add_stroke(make_stroke("b", segment((0, 50), (100, 50)), start_ms=1000))
    assert session.is_stale(result)


def test_clear_drops_strokes_and_result():
    session = DrawingSession()
    session.add_stroke(make_stroke("a", segment((0, 0), (100, 0))))
    session.analyze()
    session.clear()
    assert session.last_result is None
    revision, strokes = session.snapshot()
    assert strokes == ()
    assert revision == 2


def test_concurrent_analysis_is_rejected_and_strokes_still_accepted():
    engine = BlockingEngine()
    session = DrawingSession(engine)
    session.add_stroke(make_stroke("a", segment((0, 0), (100, 0))))

    results = []
    worker = threading.Thread(target=lambda: results.append(session.analyze()))
    worker.start()
    assert engine.entered.wait(timeout=5)

    with pytest.raises(AnalysisInProgressError, match="already processing"):
        session.analyze()

    # stroke intake does not wait for the running analysis
    session.add_stroke(make_stroke("b", segment((0, 50), (100, 50)), start_ms=1000))
    assert session.revision == 2

    engine.release.set()
    worker.join(timeout=5)
    assert not worker.is_alive()

    assert [s.id for s in engine.seen] == ["a"]
    assert session.is_stale(results[0])

    # the lock is free again once the first analysis returns
    engine.entered.clear()
    assert session.analyze().metadata["revision"] == 2


def test_reused_stroke_id_is_refused():
    session = DrawingSession()
    session.add_stroke(make_stroke("a", segment((0, 0), (100, 0))))
    with pytest.raises(ValueError, match="duplicate stroke id"):
        session.add_stroke(make_stroke("a", segment((800, 800), (800, 900)), start_ms=5000))
    assert session.revision == 1
