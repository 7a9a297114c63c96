import argparse
import json
import logging
import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from hazardscan import config
from hazardscan.pipeline import analyze_image_file


def main():
    parser = argparse.ArgumentParser(description="Score a hazard map image on a risk grid.")
    parser.add_argument("--image", required=True, help="Path to input image.")
    parser.add_argument("--hazard", default="seismic", choices=config.HAZARD_TYPES, help="Hazard domain.")
    parser.add_argument("--rows", type=int, default=config.DEFAULT_ROWS, help="Grid rows.")
    parser.add_argument("--cols", type=int, default=config.DEFAULT_COLS, help="Grid columns.")
    parser.add_argument("--location", default=None, help="Free-text location shown on the map.")
    parser.add_argument("--output-image", default=None, help="Path to save the annotated grid image.")
    parser.add_argument("--output-json", default=None, help="Path to save JSON output.")
    parser.add_argument("--include-llm", default="true", help="true|false to include AI enrichment.")

    args = parser.parse_args()
    include_llm = str(args.include_llm).lower() not in ["false", "0", "no"]

    logging.basicConfig(level=config.LOG_LEVEL)
    logging.getLogger("urllib3").setLevel(logging.ERROR)

    output, _ = analyze_image_file(
        image_path=args.image,
        hazard=args.hazard,
        rows=args.rows,
        cols=args.cols,
        location=args.location,
        include_llm=include_llm,
        output_json_path=args.output_json,
        output_image_path=args.output_image
    )

    print(json.dumps(output))


if __name__ == "__main__":
    main()
