"""Minimal HWPX bundle export.

The HWPX file is a ZIP archive of small OWPML XML documents.  This
exporter only carries the document outline: one paragraph per heading,
or a single placeholder paragraph when the tree has no headings.  It
shares nothing with the RTF font and measurement machinery.
"""

from __future__ import annotations

import io
import zipfile
from xml.sax.saxutils import escape

from rtfexport.nodes import DocumentNode, NodeType

NS_MAIN = "http://www.hancom.co.kr/hwpml/2011/main"
NS_SECTION = "http://www.hancom.co.kr/hwpml/2011/section"
NS_VERSION = "http://www.hancom.co.kr/hwpml/2011/version"
NS_CONTAINER = "urn:oasis:names:tc:opendocument:xmlns:container"

CONTAINER_PATH = "META-INF/container.xml"
VERSION_PATH = "version.xml"
CONTENT_PATH = "Contents/content.hpf"
SECTION_PATH = "Contents/section0.xml"

MEMBERS = (CONTAINER_PATH, VERSION_PATH, CONTENT_PATH, SECTION_PATH)

PLACEHOLDER_TEXT = "Untitled document"

_XML_DECL = '<?xml version="1.0" encoding="UTF-8" standalone="yes" ?>'


def extract_headings(root: DocumentNode) -> list[str]:
    """Plain text of every heading under *root*, in document order."""
    headings: list[str] = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == NodeType.HEADING:
            title = node.text_content().strip()
            if title:
                headings.append(title)
            continue
        stack.extend(reversed(node.children))
    return headings


# -- Fixed-structure XML files ----------------------------------------------

def _build_container_xml() -> str:
    return (
        f"{_XML_DECL}"
        f'<ocf:container xmlns:ocf="{NS_CONTAINER}">'
        "<ocf:rootfiles>"
        f'<ocf:rootfile full-path="{CONTENT_PATH}"'
        ' media-type="application/hwpml-package+xml"/>'
        "</ocf:rootfiles>"
        "</ocf:container>"
    )


def _build_version_xml() -> str:
    return (
        f"{_XML_DECL}"
        f'<hv:HCFVersion xmlns:hv="{NS_VERSION}"'
        ' tagetApplication="WORDPROCESSOR"'
        ' major="5" minor="1" micro="0" buildNumber="0"'
        ' xmlVersion="1.4"/>'
    )


def _build_content_hpf() -> str:
    return (
        f"{_XML_DECL}"
        f'<hm:package xmlns:hm="{NS_MAIN}">'
        "<hm:body>"
        f'<hm:section id="section0" href="{SECTION_PATH}"/>'
        "</hm:body>"
        "</hm:package>"
    )


def _build_section_xml(headings: list[str]) -> str:
    paragraphs = headings or [PLACEHOLDER_TEXT]
    parts: list[str] = [_XML_DECL, f'<hs:sec xmlns:hs="{NS_SECTION}">']
    for idx, text in enumerate(paragraphs):
        parts.append(f'<hs:p id="{idx}"><hs:run><hs:t>{escape(text)}</hs:t></hs:run></hs:p>')
    parts.append("</hs:sec>")
    return "".join(parts)


def build_hwpx(headings: list[str]) -> bytes:
    """Assemble the four-member HWPX archive for *headings*."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(CONTAINER_PATH, _build_container_xml())
        zf.writestr(VERSION_PATH, _build_version_xml())
        zf.writestr(CONTENT_PATH, _build_content_hpf())
        zf.writestr(SECTION_PATH, _build_section_xml(headings))
    return buf.getvalue()


def render_hwpx(root: DocumentNode) -> bytes:
    """Export the heading outline of *root* as HWPX bytes."""
    return build_hwpx(extract_headings(root))
