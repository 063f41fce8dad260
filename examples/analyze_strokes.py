# examples/analyze_strokes.py

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from typing import Optional

# Ensure project root is on sys.path when running this file directly
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from sketchforge import SketchExtractor, SketchforgeConfig
from sketchforge.geometry.visualize import draw_result
from sketchforge.ink.loader import parse_strokes_json


@dataclass
class SketchRunResult:
    result_json: str
    mermaid: str
    drawio: str
    overlay_path: Optional[str]


def run_sketch_pipeline(
    strokes_path: str,
    *,
    config: Optional[SketchforgeConfig] = None,
    overlay_path: Optional[str] = None,
    json_path: Optional[str] = None,
    mermaid_path: Optional[str] = None,
    drawio_path: Optional[str] = None,
) -> SketchRunResult:
    """
    Analyze a recorded stroke file and return every export as a string.
    Files are only written for the paths that are given.
    """
    extractor = SketchExtractor(config)
    with open(strokes_path, "r", encoding="utf-8") as src:
        strokes = parse_strokes_json(src.read())

    result = extractor.extract(strokes)
    result_json = extractor.result_to_json(result)
    mermaid_text = extractor.result_to_mermaid(result)
    drawio_xml = extractor.result_to_drawio(result)

    if overlay_path:
        draw_result(strokes, result, overlay_path)

    for path, text in ((json_path, result_json), (mermaid_path, mermaid_text), (drawio_path, drawio_xml)):
        if path:
            with open(path, "w", encoding="utf-8") as dest:
                dest.write(text)

    return SketchRunResult(
        result_json=result_json,
        mermaid=mermaid_text,
        drawio=drawio_xml,
        overlay_path=overlay_path,
    )


def main():
    parser = argparse.ArgumentParser(description="Detect shapes and connectors in a recorded stroke file.")
    parser.add_argument("--strokes", required=True, help="Path to a strokes JSON file")
    parser.add_argument("--out-json", default=None, help="Path to save the ProcessingResult JSON")
    parser.add_argument("--mermaid", default=None, help="Path to save a Mermaid flowchart")
    parser.add_argument("--drawio", default=None, help="Path to save draw.io XML")
    parser.add_argument("--overlay", default=None, help="Path to save a debug overlay image")
    parser.add_argument("--proximity", type=float, default=None, help="Override the grouping proximity distance")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log per-stage details")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides = {}
    if args.proximity is not None:
        overrides["proximity_distance"] = args.proximity

    run = run_sketch_pipeline(
        args.strokes,
        config=SketchforgeConfig(detection_overrides=overrides),
        overlay_path=args.overlay,
        json_path=args.out_json,
        mermaid_path=args.mermaid,
        drawio_path=args.drawio,
    )

    if args.out_json:
        print(f"Wrote result JSON: {args.out_json}")
    else:
        print(run.result_json)
    if args.mermaid:
        print(f"Wrote Mermaid: {args.mermaid}")
    if args.drawio:
        print(f"Wrote draw.io XML: {args.drawio}")
    if run.overlay_path:
        print(f"Saved overlay: {run.overlay_path}")


if __name__ == "__main__":
    main()
