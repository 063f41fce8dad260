"""draw.io (mxGraph XML) export of a ProcessingResult."""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional

from ..geometry.primitives import Connector, DetectedShape, ProcessingResult, ShapeType
from .assembler import label_for_shape

logger = logging.getLogger(__name__)

MIN_NODE_WIDTH = 80.0
MIN_NODE_HEIGHT = 40.0

_EDGE_BASE = "edgeStyle=orthogonalEdgeStyle;rounded=0;orthogonalLoop=1;jettySize=auto;html=1;"

STYLES: Dict[ShapeType, str] = {
    ShapeType.RECTANGLE: "rounded=0;whiteSpace=wrap;html=1;fillColor=#dae8fc;strokeColor=#6c8ebf;",
    ShapeType.DIAMOND: "rhombus;whiteSpace=wrap;html=1;fillColor=#fff2cc;strokeColor=#d6b656;",
    ShapeType.CIRCLE: "ellipse;whiteSpace=wrap;html=1;fillColor=#d5e8d4;strokeColor=#82b366;",
    ShapeType.TRIANGLE: "triangle;direction=north;whiteSpace=wrap;html=1;fillColor=#e1d5e7;strokeColor=#9673a6;",
    ShapeType.UNKNOWN: "rounded=1;dashed=1;whiteSpace=wrap;html=1;fillColor=#f5f5f5;strokeColor=#666666;",
    ShapeType.LINE: _EDGE_BASE + "endArrow=none;",
    ShapeType.ARROW: _EDGE_BASE + "endArrow=classic;endFill=1;",
    ShapeType.CONNECTOR: _EDGE_BASE + "endArrow=classic;endFill=1;",
}


@dataclass
class ExportOptions:
    filename: str = "sketch"
    include_grid: bool = True
    page_width: float = 1169.0
    page_height: float = 827.0


def _fmt(value: float) -> str:
    return f"{value:g}"


def _node_style(shape: DetectedShape) -> str:
    style = STYLES[shape.shape_type]
    if shape.rotation:
        style += f"rotation={_fmt(shape.rotation)};"
    return style


def _edge_style(conn: Optional[Connector], shape: DetectedShape) -> str:
    if conn is not None:
        if conn.directed:
            return STYLES[ShapeType.ARROW]
        return STYLES[ShapeType.LINE]
    return STYLES[shape.shape_type]


def _add_vertex(root: ET.Element, cell_id: str, shape: DetectedShape, label: str) -> None:
    cell = ET.SubElement(
        root,
        "mxCell",
        id=cell_id,
        value=label,
        style=_node_style(shape),
        vertex="1",
        parent="1",
    )
    b = shape.bounds
    ET.SubElement(
        cell,
        "mxGeometry",
        x=_fmt(b.min_x),
        y=_fmt(b.min_y),
        width=_fmt(max(b.width, MIN_NODE_WIDTH)),
        height=_fmt(max(b.height, MIN_NODE_HEIGHT)),
        attrib={"as": "geometry"},
    )


def _add_edge(
    root: ET.Element,
    cell_id: str,
    shape: DetectedShape,
    conn: Optional[Connector],
    cell_ids: Dict[str, str],
) -> None:
    attrs = {
        "id": cell_id,
        "value": "",
        "style": _edge_style(conn, shape),
        "edge": "1",
        "parent": "1",
    }
    source = cell_ids.get(conn.source_id) if conn and conn.source_id else None
    target = cell_ids.get(conn.target_id) if conn and conn.target_id else None
    if source:
        attrs["source"] = source
    if target:
        attrs["target"] = target
    cell = ET.SubElement(root, "mxCell", attrib=attrs)
    geometry = ET.SubElement(cell, "mxGeometry", relative="1", attrib={"as": "geometry"})

    # free ends keep their drawn position
    tail, head = shape.start_point, shape.end_point
    is_arrow = conn.directed if conn is not None else shape.shape_type == ShapeType.ARROW
    if is_arrow and shape.head_at_end is False:
        tail, head = head, tail
    if not source and tail is not None:
        ET.SubElement(geometry, "mxPoint", x=_fmt(tail[0]), y=_fmt(tail[1]), attrib={"as": "sourcePoint"})
    if not target and head is not None:
        ET.SubElement(geometry, "mxPoint", x=_fmt(head[0]), y=_fmt(head[1]), attrib={"as": "targetPoint"})


def to_drawio_xml(result: ProcessingResult, options: Optional[ExportOptions] = None) -> str:
    """
    Generate mxGraph XML compatible with draw.io / diagrams.net.

    Node shapes become vertex cells; connectors and standalone lines/arrows
    become edge cells. Cell ids are assigned in result order starting at 2
    (0 and 1 are the default root and layer cells).
    """
    options = options or ExportOptions()
    mxfile = ET.Element(
        "mxfile",
        host="sketchforge",
        modified=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000Z"),
        agent="sketchforge",
        type="device",
    )
    diagram = ET.SubElement(mxfile, "diagram", id=f"{options.filename}-0", name=options.filename)
    model = ET.SubElement(
        diagram,
        "mxGraphModel",
        dx="0",
        dy="0",
        grid="1" if options.include_grid else "0",
        gridSize="10",
        guides="1",
        tooltips="1",
        connect="1",
        arrows="1",
        fold="1",
        page="1",
        pageScale="1",
        pageWidth=_fmt(options.page_width),
        pageHeight=_fmt(options.page_height),
        math="0",
        shadow="0",
    )
    root = ET.SubElement(model, "root")
    ET.SubElement(root, "mxCell", id="0")
    ET.SubElement(root, "mxCell", id="1", parent="0")

    next_id = 2
    cell_ids: Dict[str, str] = {}
    for shape in result.shapes:
        if shape.shape_type.is_linear:
            continue
        cell_ids[shape.id] = str(next_id)
        _add_vertex(root, str(next_id), shape, label_for_shape(shape, result.text_regions))
        next_id += 1

    by_shape = {c.shape_id: c for c in result.connectors}
    edges = 0
    for shape in result.shapes:
        if not shape.shape_type.is_linear:
            continue
        _add_edge(root, str(next_id), shape, by_shape.get(shape.id), cell_ids)
        next_id += 1
        edges += 1

    logger.debug("exported %d vertices and %d edges", len(cell_ids), edges)
    body = ET.tostring(mxfile, encoding="unicode")
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + body
