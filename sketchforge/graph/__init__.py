from .assembler import assemble_result, label_for_shape, suggest_diagram_type
from .drawio import ExportOptions, to_drawio_xml
from .mermaid import to_mermaid

__all__ = [
    "assemble_result",
    "label_for_shape",
    "suggest_diagram_type",
    "ExportOptions",
    "to_drawio_xml",
    "to_mermaid",
]
