import pytest

from conftest import arrow_coords, circle_coords, make_stroke, polyline, rectangle_stroke, segment

from sketchforge.config import DetectionParams
from sketchforge.geometry.primitives import BoundingBox, DiagramType, ShapeType, TextRegion
from sketchforge.pipeline.engine import ShapeDetectionEngine


def connector_params():
    # tight grouping so a connector stroke is not swallowed by the boxes it touches
    return DetectionParams(proximity_distance=3.0)


def test_empty_input_gives_empty_result():
    result = ShapeDetectionEngine().analyze([])
    assert result.shapes == []
    assert result.connectors == []
    assert result.confidence == 0.0
    assert result.suggested_diagram_type == DiagramType.GENERIC
    assert result.metadata["stroke_count"] == 0


def test_single_rectangle_stroke():
    result = ShapeDetectionEngine().analyze([rectangle_stroke("r", 0, 0, 200, 100)])
    assert len(result.shapes) == 1
    shape = result.shapes[0]
    assert shape.id == "s0"
    assert shape.shape_type == ShapeType.RECTANGLE
    assert shape.stroke_ids == ("r",)
    assert 0.0 <= result.confidence <= 1.0


def test_rectangle_drawn_as_four_strokes_is_one_shape():
    sides = [
        ((0, 0), (200, 0)),
        ((200, 0), (200, 100)),
        ((200, 100), (0, 100)),
        ((0, 100), (0, 0)),
    ]
    strokes = [make_stroke(f"side{i}", segment(a, b), start_ms=i * 1000) for i, (a, b) in enumerate(sides)]
    result = ShapeDetectionEngine().analyze(strokes)
    assert len(result.shapes) == 1
    assert result.shapes[0].shape_type == ShapeType.RECTANGLE
    assert result.shapes[0].stroke_ids == ("side0", "side1", "side2", "side3")
    assert result.shapes[0].confidence >= 0.8


def test_line_between_rectangles_is_a_connector():
    strokes = [
        rectangle_stroke("A", 0, 0, 100, 60, start_ms=0),
        rectangle_stroke("B", 300, 0, 100, 60, start_ms=5000),
        make_stroke("L", segment((125, 30), (275, 30)), start_ms=10000),
    ]
    result = ShapeDetectionEngine(connector_params()).analyze(strokes)

    types = [s.shape_type for s in result.shapes]
    assert types == [ShapeType.RECTANGLE, ShapeType.RECTANGLE, ShapeType.CONNECTOR]
    assert len(result.connectors) == 1
    c = result.connectors[0]
    assert (c.source_id, c.target_id, c.directed) == ("s0", "s1", False)
    assert result.suggested_diagram_type == DiagramType.FLOWCHART


def test_reversed_line_swaps_source_and_target():
    strokes = [
        rectangle_stroke("A", 0, 0, 100, 60, start_ms=0),
        rectangle_stroke("B", 300, 0, 100, 60, start_ms=5000),
        make_stroke("L", segment((275, 30), (125, 30)), start_ms=10000),
    ]
    result = ShapeDetectionEngine(connector_params()).analyze(strokes)
    assert (result.connectors[0].source_id, result.connectors[0].target_id) == ("s1", "s0")


def test_arrow_between_rectangles_is_directed():
    strokes = [
        rectangle_stroke("A", 0, 0, 100, 60, start_ms=0),
        rectangle_stroke("B", 400, 0, 100, 60, start_ms=5000),
        make_stroke("arrow", arrow_coords((125, 30), 390), start_ms=10000),
    ]
    result = ShapeDetectionEngine(connector_params()).analyze(strokes)
    assert len(result.connectors) == 1
    c = result.connectors[0]
    assert c.directed
    assert (c.source_id, c.target_id) == ("s0", "s1")


def test_two_stroke_arrow_is_a_directed_connector():
    strokes = [
        rectangle_stroke("A", 100, 0, 100, 60, start_ms=0),
        rectangle_stroke("B", 400, 0, 100, 60, start_ms=5000),
        make_stroke("shaft", segment((225, 30), (375, 30), 40), start_ms=10000),
        make_stroke("head", polyline([(351, 16), (375, 30), (351, 44)]), start_ms=10300),
    ]
    result = ShapeDetectionEngine(connector_params()).analyze(strokes)

    arrow = result.shapes[2]
    assert arrow.stroke_ids == ("shaft", "head")
    assert arrow.shape_type == ShapeType.CONNECTOR
    assert len(result.connectors) == 1
    c = result.connectors[0]
    assert c.directed
    assert (c.source_id, c.target_id) == ("s0", "s1")


def test_isolated_line_stays_a_line():
    strokes = [
        rectangle_stroke("A", 0, 0, 100, 60, start_ms=0),
        make_stroke("L", segment((600, 600), (800, 600)), start_ms=5000),
    ]
    result = ShapeDetectionEngine().analyze(strokes)
    assert [s.shape_type for s in result.shapes] == [ShapeType.RECTANGLE, ShapeType.LINE]
    assert result.connectors == []


def test_analysis_is_deterministic():
    strokes = [
        rectangle_stroke("A", 0, 0, 100, 60, start_ms=0),
        make_stroke("C", circle_coords(500, 300, 60), start_ms=3000),
        make_stroke("L", segment((125, 30), (275, 30)), start_ms=6000),
    ]
    engine = ShapeDetectionEngine(connector_params())
    assert engine.analyze(strokes).to_dict() == engine.analyze(strokes).to_dict()


def test_every_confidence_is_bounded():
    strokes = [
        rectangle_stroke("A", 0, 0, 100, 60, start_ms=0),
        make_stroke("C", circle_coords(500, 300, 60), start_ms=3000),
        make_stroke("scribble", [(900, 900), (930, 910), (905, 940), (935, 950), (910, 900)], start_ms=6000),
        make_stroke("dot", [(50, 700)], start_ms=9000),
    ]
    result = ShapeDetectionEngine().analyze(strokes)
    assert 0.0 <= result.confidence <= 1.0
    for shape in result.shapes:
        assert 0.0 <= shape.confidence <= 1.0
    assert result.metadata["stroke_count"] == 4
    assert result.metadata["group_count"] == 3


def test_text_regions_and_metadata_pass_through():
    region = TextRegion(id="t0", text="Start", bounds=BoundingBox(10, 10, 60, 30), confidence=0.7)
    result = ShapeDetectionEngine().analyze(
        [rectangle_stroke("A", 0, 0, 100, 60)],
        text_regions=[region],
        metadata={"revision": 7},
    )
    assert result.text_regions == [region]
    assert result.metadata["revision"] == 7


def test_duplicate_stroke_ids_are_rejected():
    strokes = [
        make_stroke("a", segment((0, 0), (100, 0))),
        make_stroke("a", segment((800, 800), (800, 900)), start_ms=5000),
    ]
    with pytest.raises(ValueError, match="duplicate stroke ids: a"):
        ShapeDetectionEngine().analyze(strokes)
