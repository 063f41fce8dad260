from .engine import ShapeDetectionEngine
from .session import AnalysisInProgressError, DrawingSession
from .sketch_extractor import SketchExtractor

__all__ = ["ShapeDetectionEngine", "AnalysisInProgressError", "DrawingSession", "SketchExtractor"]
