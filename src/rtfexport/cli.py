"""Command-line interface for rtfexport.

Usage::

    rtfexport input.md                     # writes input.rtf
    rtfexport page.html -o output.rtf      # explicit output path
    rtfexport input.md -f hwpx             # heading outline as HWPX
    rtfexport input.md --style letter      # use letter preset
    rtfexport --list-styles                # list available presets
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rtfexport import __version__
from rtfexport.converter import FORMATS, Converter
from rtfexport.encoder import decode_unicode_escapes
from rtfexport.errors import RtfExportError
from rtfexport.style_manager import StyleManager


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rtfexport",
        description="Convert HTML or Markdown files to RTF (or an HWPX outline).",
    )
    parser.add_argument(
        "input",
        nargs="?",
        help="Path to the .md or .html file to convert.",
    )
    parser.add_argument(
        "-o", "--output",
        help="Output file path. Defaults to <input>.rtf / <input>.hwpx.",
    )
    parser.add_argument(
        "-f", "--format",
        default="rtf",
        choices=FORMATS,
        help="Output format (default: %(default)s).",
    )
    parser.add_argument(
        "-s", "--style",
        default="default",
        choices=StyleManager.PRESETS,
        help="Style preset (default: %(default)s).",
    )
    parser.add_argument(
        "-e", "--encoding",
        default="utf-8",
        help="Input file encoding (default: %(default)s).",
    )
    parser.add_argument(
        "--plain-text-overflow",
        action="store_true",
        help="Render over-deep nesting as plain text instead of failing.",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Also print the RTF with Unicode escapes decoded.",
    )
    parser.add_argument(
        "--list-styles",
        action="store_true",
        help="List available style presets and exit.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print progress information.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.list_styles:
        print("Available style presets:")
        for preset in StyleManager.PRESETS:
            print(f"  - {preset}")
        return 0

    if not args.input:
        parser.error("the following argument is required: input")

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"Error: file not found: {input_path}", file=sys.stderr)
        return 1

    # Determine output path
    if args.output:
        output_path = Path(args.output)
    else:
        output_path = input_path.with_suffix(f".{args.format}")

    if args.verbose:
        print(f"Input:  {input_path}")
        print(f"Output: {output_path}")
        print(f"Format: {args.format}")
        print(f"Style:  {args.style}")

    overflow = "text" if args.plain_text_overflow else "error"
    try:
        converter = Converter(style_preset=args.style, overflow=overflow)
        converter.convert_file(
            input_path, output_path, encoding=args.encoding, fmt=args.format,
        )
    except (RtfExportError, OSError, UnicodeDecodeError, LookupError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.preview and args.format == "rtf":
        print(decode_unicode_escapes(output_path.read_text(encoding="ascii")))

    if args.verbose:
        print(f"Done. {output_path.stat().st_size} bytes written.")
    else:
        print(f"Converted: {output_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
