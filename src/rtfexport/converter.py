"""High-level HTML/Markdown-to-RTF conversion orchestrator.

Ties together the tree builders, style manager and renderers into a
single public API for converting text or files to RTF or HWPX output.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rtfexport.hwpx import render_hwpx
from rtfexport.nodes import DocumentNode
from rtfexport.parser import HtmlParser, MarkdownParser
from rtfexport.renderer import RtfRenderer
from rtfexport.style_manager import StyleManager

logger = logging.getLogger(__name__)

FORMATS = ["rtf", "hwpx"]
HTML_SUFFIXES = frozenset({".html", ".htm", ".xhtml"})


class Converter:
    """Convert HTML or Markdown content to RTF (or an HWPX outline).

    Usage::

        converter = Converter(style_preset="default")
        converter.convert_file("input.md", "output.rtf")

        # or from string
        rtf_text = converter.convert_html("<h1>Hello</h1>")
    """

    STYLE_PRESETS = StyleManager.PRESETS

    def __init__(self, style_preset: str = "default", *, overflow: str = "error") -> None:
        self.style_manager = StyleManager(style_preset)
        max_depth = self.style_manager.styles.max_depth
        self.html_parser = HtmlParser(max_depth=max_depth, overflow=overflow)
        self.markdown_parser = MarkdownParser(max_depth=max_depth, overflow=overflow)
        self.renderer = RtfRenderer(self.style_manager, overflow=overflow)

    def convert_tree(self, root: DocumentNode) -> str:
        """Serialize an already-built document tree to RTF text."""
        return self.renderer.render(root)

    def convert_html(self, html: str) -> str:
        """Convert an HTML fragment or document to RTF text."""
        root = self.html_parser.parse(html)
        rtf = self.renderer.render(root)
        logger.debug("converted %d chars of HTML to %d chars of RTF", len(html), len(rtf))
        return rtf

    def convert_markdown(self, markdown_text: str) -> str:
        """Convert Markdown text to RTF text."""
        root = self.markdown_parser.parse(markdown_text)
        rtf = self.renderer.render(root)
        logger.debug(
            "converted %d chars of Markdown to %d chars of RTF", len(markdown_text), len(rtf)
        )
        return rtf

    def export_hwpx(self, text: str, *, is_html: bool = False) -> bytes:
        """Convert HTML or Markdown text to an HWPX heading outline."""
        parser = self.html_parser if is_html else self.markdown_parser
        return render_hwpx(parser.parse(text))

    def convert_bytes(self, text: str, *, is_html: bool = False, fmt: str = "rtf") -> bytes:
        """Convert *text* to the bytes of the requested output format."""
        if fmt not in FORMATS:
            raise ValueError(f"Unknown format {fmt!r}. Choose from: {', '.join(FORMATS)}")
        if fmt == "hwpx":
            return self.export_hwpx(text, is_html=is_html)
        rtf = self.convert_html(text) if is_html else self.convert_markdown(text)
        return rtf.encode("ascii")

    def convert_file(
        self,
        input_path: str | Path,
        output_path: str | Path,
        *,
        encoding: str = "utf-8",
        fmt: str = "rtf",
    ) -> None:
        """Read an HTML or Markdown file and write the converted output.

        Args:
            input_path: Path to the ``.md`` or ``.html`` source.
            output_path: Path for the ``.rtf`` / ``.hwpx`` output.
            encoding: Text encoding of the source file.
            fmt: ``"rtf"`` or ``"hwpx"``.
        """
        input_path = Path(input_path)
        output_path = Path(output_path)

        text = input_path.read_text(encoding=encoding)
        is_html = input_path.suffix.lower() in HTML_SUFFIXES
        data = self.convert_bytes(text, is_html=is_html, fmt=fmt)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(data)
        logger.debug("wrote %d bytes to %s", len(data), output_path)
