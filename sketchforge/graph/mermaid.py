from ..geometry.primitives import ProcessingResult, ShapeType
from .assembler import label_for_shape


_BRACKETS = {
    ShapeType.RECTANGLE: ("[", "]"),
    ShapeType.DIAMOND: ("{", "}"),
    ShapeType.CIRCLE: ("((", "))"),
    ShapeType.TRIANGLE: ("[/", "\\]"),
    ShapeType.UNKNOWN: ("[", "]"),
    ShapeType.LINE: None,
    ShapeType.ARROW: None,
    ShapeType.CONNECTOR: None,
}


def to_mermaid(result: ProcessingResult) -> str:
    """
    Convert a ProcessingResult to a Mermaid flowchart string.
    Shape mapping:
    - rectangle: [text]
    - diamond: {text}
    - circle: ((text))
    - triangle: [/text\\]
    - unknown: [text]
    Lines, arrows and connectors are not nodes. Connectors become edges
    (--> when directed, --- otherwise); ones with a free end are skipped.
    """
    lines = ["flowchart TD"]
    # Nodes
    for shape in result.shapes:
        brackets = _BRACKETS[shape.shape_type]
        if brackets is None:
            continue
        text = label_for_shape(shape, result.text_regions) or shape.id
        safe = text.replace('"', "'")
        lines.append(f'    {shape.id}{brackets[0]}"{safe}"{brackets[1]}')
    # Edges
    for conn in result.connectors:
        if conn.source_id is None or conn.target_id is None:
            continue
        arrow = "-->" if conn.directed else "---"
        lines.append(f"    {conn.source_id} {arrow} {conn.target_id}")
    return "\n".join(lines)
