from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .chart import create_chart
from .errors import ChartError
from .models import request_from_dict

SUFFIX_FORMATS = {".png": "PNG", ".jpg": "JPEG", ".jpeg": "JPEG"}


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="charttile",
        description="Render a grid chart of cover art with title/artist/rating cards.",
    )
    ap.add_argument("request", help='JSON file ({"entries": [...], "rows": .., "cols": .., "coverSize": ..}), or - for stdin')
    ap.add_argument("-o", "--output", default="chart.png", help="Output image (.png, .jpg or .jpeg)")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log every fetch and tile")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    out_path = Path(args.output).resolve()
    fmt = SUFFIX_FORMATS.get(out_path.suffix.lower())
    if fmt is None:
        print(f"Unsupported output type {out_path.suffix!r}; use .png, .jpg or .jpeg", file=sys.stderr)
        return 2

    try:
        if args.request == "-":
            payload = json.load(sys.stdin)
        else:
            payload = json.loads(Path(args.request).read_text(encoding="utf-8"))
        request = request_from_dict(payload)
    except (OSError, ValueError) as exc:
        print(f"Invalid request: {exc}", file=sys.stderr)
        return 2

    try:
        data = create_chart(request, fmt=fmt)
    except ChartError as exc:
        print(f"Error creating chart: {exc}", file=sys.stderr)
        return 1

    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(data)
    print("Wrote:", out_path)
    return 0
