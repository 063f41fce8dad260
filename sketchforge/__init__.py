from .config import DetectionParams, SketchforgeConfig
from .pipeline import AnalysisInProgressError, DrawingSession, ShapeDetectionEngine, SketchExtractor

__all__ = [
    "DetectionParams",
    "SketchforgeConfig",
    "AnalysisInProgressError",
    "DrawingSession",
    "ShapeDetectionEngine",
    "SketchExtractor",
]
