from typing import Optional, Sequence

from ..config import SketchforgeConfig
from ..geometry.primitives import ProcessingResult, TextRegion
from ..graph.drawio import ExportOptions, to_drawio_xml
from ..graph.mermaid import to_mermaid
from ..ink.loader import parse_strokes_json
from ..ink.strokes import Stroke
from .engine import ShapeDetectionEngine
from .session import DrawingSession


class SketchExtractor:
    def __init__(self, config: Optional[SketchforgeConfig] = None):
        self.config = config or SketchforgeConfig()
        self.engine = ShapeDetectionEngine(self.config.detection)

    def new_session(self) -> DrawingSession:
        return DrawingSession(self.engine)

    def extract(
        self,
        strokes: Sequence[Stroke],
        *,
        text_regions: Optional[Sequence[TextRegion]] = None,
    ) -> ProcessingResult:
        return self.engine.analyze(strokes, text_regions)

    def extract_json(self, strokes_json, *, text_regions: Optional[Sequence[TextRegion]] = None) -> ProcessingResult:
        return self.extract(parse_strokes_json(strokes_json), text_regions=text_regions)

    def result_to_json(self, result: ProcessingResult) -> str:
        return result.to_json()

    def result_to_mermaid(self, result: ProcessingResult) -> str:
        return to_mermaid(result)

    def result_to_drawio(self, result: ProcessingResult, options: Optional[ExportOptions] = None) -> str:
        if options is None:
            options = ExportOptions(
                page_width=float(self.config.canvas_width),
                page_height=float(self.config.canvas_height),
            )
        return to_drawio_xml(result, options)
