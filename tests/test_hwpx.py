"""Tests for the HWPX outline export."""

from __future__ import annotations

import io
import zipfile
import xml.etree.ElementTree as ET

from rtfexport import hwpx
from rtfexport.nodes import NodeType, element, text
from rtfexport.parser import MarkdownParser


def section_texts(data: bytes) -> list[str]:
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        root = ET.fromstring(zf.read(hwpx.SECTION_PATH))
    return [t.text or "" for t in root.iter(f"{{{hwpx.NS_SECTION}}}t")]


class TestArchive:
    def test_members(self) -> None:
        data = hwpx.build_hwpx(["Title"])
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            assert zf.namelist() == list(hwpx.MEMBERS)

    def test_all_members_well_formed(self) -> None:
        data = hwpx.build_hwpx(["Title"])
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            for name in hwpx.MEMBERS:
                ET.fromstring(zf.read(name))

    def test_namespaces(self) -> None:
        data = hwpx.build_hwpx([])
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            assert hwpx.NS_MAIN in zf.read(hwpx.CONTENT_PATH).decode("utf-8")
            assert hwpx.NS_SECTION in zf.read(hwpx.SECTION_PATH).decode("utf-8")
            container = zf.read(hwpx.CONTAINER_PATH).decode("utf-8")
            assert hwpx.CONTENT_PATH in container


class TestSection:
    def test_one_paragraph_per_heading(self) -> None:
        assert section_texts(hwpx.build_hwpx(["One", "Two"])) == ["One", "Two"]

    def test_placeholder(self) -> None:
        assert section_texts(hwpx.build_hwpx([])) == [hwpx.PLACEHOLDER_TEXT]

    def test_xml_escaped(self) -> None:
        assert section_texts(hwpx.build_hwpx(["a < b & c > d"])) == ["a < b & c > d"]

    def test_unicode(self) -> None:
        assert section_texts(hwpx.build_hwpx(["한글 제목"])) == ["한글 제목"]


class TestExtractHeadings:
    def test_document_order(self) -> None:
        root = MarkdownParser().parse("# A\n\ntext\n\n## B\n\n> ### C\n")
        assert hwpx.extract_headings(root) == ["A", "B", "C"]

    def test_blank_headings_skipped(self) -> None:
        root = element(
            NodeType.GENERIC,
            element(NodeType.HEADING, text("  "), level=1),
            element(NodeType.HEADING, element(NodeType.BOLD, text("Bold")), level=2),
        )
        assert hwpx.extract_headings(root) == ["Bold"]

    def test_render_without_headings(self) -> None:
        root = MarkdownParser().parse("just a paragraph")
        assert section_texts(hwpx.render_hwpx(root)) == [hwpx.PLACEHOLDER_TEXT]
