# SPDX-License-Identifier: Apache-2.0
"""
PDF Inserter - CLI Tool

Inserts text, images or flowed HTML into a page of an existing PDF.
Coordinates use a top-left origin with Y growing downward.

Usage:
    insert-pdf <input.pdf> [options] {text,image,html} ...

Examples:
    insert-pdf doc.pdf text 72 72 "Hello World"
    insert-pdf doc.pdf -p 2 text 72 100 "你好世界" --size 14
    insert-pdf doc.pdf image 50 50 250 200 logo.png --no-keep-proportion
    insert-pdf doc.pdf html 50 300 550 500 body.html --css style.css --min-scale 0.5
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import NoReturn, Optional, Sequence

import pikepdf  # type: ignore[import-untyped]

from pdf_inserter.core.errors import InsertError
from pdf_inserter.core.models import Color, Point, Rect
from pdf_inserter.core.pdf_inserter import PDFInserter

logger = logging.getLogger(__name__)


def _color(value: str) -> Color:
    try:
        return Color.from_hex(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _add_rect(parser: argparse.ArgumentParser) -> None:
    for name in ("x0", "y0", "x1", "y1"):
        parser.add_argument(name, type=float, help=f"Rectangle {name}")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed argument Namespace.
    """
    parser = argparse.ArgumentParser(
        prog="insert-pdf",
        description="Insert text, images or HTML into a PDF page",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s doc.pdf text 72 72 "Hello World"              # Latin text
  %(prog)s doc.pdf text 72 100 "こんにちは" --size 14      # CJK text
  %(prog)s doc.pdf image 50 50 250 200 logo.png           # Image, aspect kept
  %(prog)s doc.pdf html 50 300 550 500 body.html          # HTML, shrink to fit
  %(prog)s doc.pdf -o out.pdf html 50 300 550 500 b.html --min-scale 1
""",
    )

    parser.add_argument("input", type=Path, help="Path to the PDF to modify")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Output file path (default: <input>_inserted.pdf)",
    )
    parser.add_argument(
        "-p",
        "--page",
        type=int,
        default=0,
        help="Page number, 0-indexed (default: 0)",
    )
    parser.add_argument(
        "--underlay",
        action="store_true",
        help="Draw below existing page content (image and html)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose logging",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    text = sub.add_parser("text", help="Insert a single text run")
    text.add_argument("x", type=float, help="Baseline X")
    text.add_argument("y", type=float, help="Baseline Y")
    text.add_argument("text", help="Text to insert (UTF-8)")
    text.add_argument("--font", default="Helvetica", help="Standard font (default: Helvetica)")
    text.add_argument("--size", type=float, default=11.0, help="Font size (default: 11)")
    text.add_argument("--color", type=_color, default=Color(), help="Hex color (default: #000000)")
    text.add_argument(
        "--rotate", type=int, default=0, choices=[0, 90, 180, 270], help="Rotation in degrees"
    )

    image = sub.add_parser("image", help="Insert an image")
    _add_rect(image)
    image.add_argument("image", type=Path, help="Image file")
    image.add_argument(
        "--no-keep-proportion",
        dest="keep_proportion",
        action="store_false",
        help="Stretch the image to the rectangle",
    )

    html = sub.add_parser("html", help="Insert flowed HTML")
    _add_rect(html)
    html.add_argument("html", type=Path, help="HTML file")
    html.add_argument("--css", type=Path, help="CSS file")
    html.add_argument(
        "--min-scale",
        type=float,
        default=0.0,
        help="Minimum scale (1 disables shrinking, 0 allows any; default: 0)",
    )

    return parser.parse_args(argv)


def run(args: argparse.Namespace) -> int:
    """Run the requested insertion.

    Returns:
        Exit code.
    """
    input_path: Path = args.input
    if not input_path.exists():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1
    if input_path.suffix.lower() != ".pdf":
        print(f"Error: Not a PDF file: {input_path}", file=sys.stderr)
        return 1

    output_path: Path = args.output or input_path.with_stem(input_path.stem + "_inserted")
    overlay = not args.underlay

    try:
        with PDFInserter(input_path) as inserter:
            if args.command == "text":
                inserter.insert_text(
                    args.page,
                    Point(args.x, args.y),
                    args.text,
                    fontname=args.font,
                    fontsize=args.size,
                    color=args.color,
                    rotate=args.rotate,
                )
            elif args.command == "image":
                inserter.insert_image(
                    args.page,
                    Rect(args.x0, args.y0, args.x1, args.y1),
                    args.image.read_bytes(),
                    keep_proportion=args.keep_proportion,
                    overlay=overlay,
                )
            else:
                css = args.css.read_text(encoding="utf-8") if args.css else ""
                result = inserter.insert_htmlbox(
                    args.page,
                    Rect(args.x0, args.y0, args.x1, args.y1),
                    args.html.read_text(encoding="utf-8"),
                    css=css,
                    min_scale=args.min_scale,
                    overlay=overlay,
                )
                print(json.dumps(result.to_dict()))
                if not result.fitted:
                    print("Warning: content overflowed the rectangle", file=sys.stderr)
            inserter.save(output_path)
    except (InsertError, IndexError, OSError, pikepdf.PdfError) as e:
        print(f"Error: Insertion failed: {e}", file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1

    print(f"Complete: {output_path}")
    return 0


def main() -> NoReturn:
    """Main entry point."""
    args = parse_args()

    # Configure logging
    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    sys.exit(run(args))


if __name__ == "__main__":
    main()
