"""Build :class:`~rtfexport.nodes.DocumentNode` trees from HTML or Markdown.

HTML (an editor's ``getHTML()`` snapshot) is read with BeautifulSoup;
Markdown is tokenised by mistune v3 in AST mode.  Both builders return a
GENERIC ``document`` root whose children are the top-level blocks.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

import mistune
from bs4 import BeautifulSoup
from bs4.element import (
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    ProcessingInstruction,
    Tag,
)

from rtfexport.errors import NestingTooDeepError
from rtfexport.nodes import BLOCK_TYPES, DocumentNode, NodeType

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 100


def _document(children: list[DocumentNode]) -> DocumentNode:
    return DocumentNode(type=NodeType.GENERIC, children=children, tag_name="document")


def _coerce_span(value: Any) -> int:
    try:
        span = int(str(value).strip())
    except (TypeError, ValueError):
        return 1
    return span if span > 0 else 1


def _check_overflow(overflow: str) -> None:
    if overflow not in ("error", "text"):
        raise ValueError(f"Unknown overflow mode {overflow!r}. Choose from: error, text")


# ---------------------------------------------------------------------------
# HTML
# ---------------------------------------------------------------------------

_TAG_MAP: dict[str, NodeType] = {
    "p": NodeType.PARAGRAPH,
    "div": NodeType.PARAGRAPH,
    "section": NodeType.PARAGRAPH,
    "article": NodeType.PARAGRAPH,
    "span": NodeType.SPAN,
    "strong": NodeType.BOLD,
    "b": NodeType.BOLD,
    "em": NodeType.ITALIC,
    "i": NodeType.ITALIC,
    "u": NodeType.UNDERLINE,
    "ins": NodeType.UNDERLINE,
    "s": NodeType.STRIKETHROUGH,
    "strike": NodeType.STRIKETHROUGH,
    "del": NodeType.STRIKETHROUGH,
    "code": NodeType.INLINE_CODE,
    "pre": NodeType.CODE_BLOCK,
    "blockquote": NodeType.BLOCKQUOTE,
    "br": NodeType.LINE_BREAK,
    "input": NodeType.INPUT,
    "ul": NodeType.UNORDERED_LIST,
    "ol": NodeType.ORDERED_LIST,
    "li": NodeType.LIST_ITEM,
    "h1": NodeType.HEADING,
    "h2": NodeType.HEADING,
    "h3": NodeType.HEADING,
    "h4": NodeType.HEADING,
    "h5": NodeType.HEADING,
    "h6": NodeType.HEADING,
    "a": NodeType.LINK,
    "table": NodeType.TABLE,
    "tr": NodeType.TABLE_ROW,
    "td": NodeType.TABLE_CELL,
    "th": NodeType.TABLE_CELL,
    "hr": NodeType.HORIZONTAL_RULE,
}

_SKIP_TAGS = frozenset({"head", "script", "style", "template", "noscript", "title"})
_TABLE_SECTIONS = frozenset({"thead", "tbody", "tfoot"})
# Containers that map to GENERIC but still start a new line; bs4 names the root "[document]"
_BLOCK_CONTAINERS = frozenset({"[document]", "html", "body", "main"})
_IGNORED_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)
_WHITESPACE_RE = re.compile(r"[ \t\n\r\f]+")


def _is_block_tag(node: Any) -> bool:
    if not isinstance(node, Tag):
        return False
    ntype = _TAG_MAP.get(node.name)
    if ntype is not None:
        return ntype in BLOCK_TYPES
    return node.name in _TABLE_SECTIONS


def _at_line_edge(sibling: Any, parent: Any) -> bool:
    """True if text beside *sibling* starts or ends a rendered line."""
    if sibling is None:
        return _is_block_tag(parent) or getattr(parent, "name", None) in _BLOCK_CONTAINERS
    return _is_block_tag(sibling) or getattr(sibling, "name", None) == "br"


def parse_style(style: Optional[str]) -> dict[str, str]:
    """Parse an inline ``style`` attribute into ``{property: value}``."""
    result: dict[str, str] = {}
    if not style:
        return result
    for declaration in style.split(";"):
        name, sep, value = declaration.partition(":")
        if sep and name.strip() and value.strip():
            result[name.strip().lower()] = value.strip()
    return result


class HtmlParser:
    """Parse HTML into a :class:`DocumentNode` tree."""

    def __init__(
        self,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        overflow: str = "error",
        features: str = "html.parser",
    ) -> None:
        _check_overflow(overflow)
        self.max_depth = max_depth
        self.overflow = overflow
        self.features = features

    # -- public API ---------------------------------------------------------

    def parse(self, html: str) -> DocumentNode:
        """Return a ``document`` root for *html*."""
        soup = BeautifulSoup(html, self.features)
        return _document(self._convert_children(soup, depth=0, preformatted=False))

    # -- conversion ---------------------------------------------------------

    def _convert_children(
        self, tag: Tag, *, depth: int, preformatted: bool
    ) -> list[DocumentNode]:
        nodes: list[DocumentNode] = []
        for child in tag.children:
            if isinstance(child, _IGNORED_STRINGS):
                continue
            if isinstance(child, NavigableString):
                node = self._convert_string(child, preformatted=preformatted)
            elif isinstance(child, Tag):
                node = self._convert_tag(child, depth=depth + 1, preformatted=preformatted)
            else:
                node = None
            if node is not None:
                nodes.append(node)
        return nodes

    def _convert_string(
        self, string: NavigableString, *, preformatted: bool
    ) -> Optional[DocumentNode]:
        raw = str(string)
        if preformatted:
            return DocumentNode(type=NodeType.TEXT, text=raw) if raw else None
        collapsed = _WHITESPACE_RE.sub(" ", raw)
        if _at_line_edge(string.previous_sibling, string.parent):
            collapsed = collapsed.lstrip(" ")
        if _at_line_edge(string.next_sibling, string.parent):
            collapsed = collapsed.rstrip(" ")
        if not collapsed:
            return None
        return DocumentNode(type=NodeType.TEXT, text=collapsed)

    def _convert_tag(
        self, tag: Tag, *, depth: int, preformatted: bool
    ) -> Optional[DocumentNode]:
        name = (tag.name or "").lower()
        if name in _SKIP_TAGS:
            return None

        if depth > self.max_depth:
            if self.overflow == "error":
                raise NestingTooDeepError(self.max_depth)
            logger.warning("HTML nested deeper than %d at <%s>; keeping text only",
                           self.max_depth, name)
            return DocumentNode(type=NodeType.TEXT, text=tag.get_text())

        if name == "img":
            alt = (tag.get("alt") or "").strip()
            return DocumentNode(type=NodeType.TEXT, text=alt) if alt else None

        ntype = _TAG_MAP.get(name, NodeType.GENERIC)
        preformatted = preformatted or ntype == NodeType.CODE_BLOCK

        if ntype == NodeType.TABLE:
            children = self._convert_table_children(tag, depth=depth)
        else:
            children = self._convert_children(tag, depth=depth, preformatted=preformatted)

        node = DocumentNode(type=ntype, children=children, tag_name=name)

        if ntype == NodeType.HEADING:
            node.level = min(3, int(name[1]))
        elif ntype == NodeType.LINK:
            node.href = tag.get("href")
        elif ntype == NodeType.TABLE_CELL:
            node.colspan = _coerce_span(tag.get("colspan", 1))
        elif ntype == NodeType.INPUT:
            node.input_type = (tag.get("type") or "text").lower()
            node.checked = tag.has_attr("checked")
        elif ntype == NodeType.SPAN:
            style = parse_style(tag.get("style"))
            node.font_size = style.get("font-size", "")
            node.font_family = style.get("font-family", "")
        elif ntype == NodeType.GENERIC:
            logger.debug("unknown tag <%s>; keeping its children", name)
        return node

    def _convert_table_children(self, tag: Tag, *, depth: int) -> list[DocumentNode]:
        """Table children with thead/tbody/tfoot flattened into rows."""
        rows: list[DocumentNode] = []
        for child in tag.children:
            if not isinstance(child, Tag):
                continue
            name = (child.name or "").lower()
            if name in _TABLE_SECTIONS:
                for row in child.find_all("tr", recursive=False):
                    node = self._convert_tag(row, depth=depth + 2, preformatted=False)
                    if node is not None:
                        rows.append(node)
            elif name == "tr":
                node = self._convert_tag(child, depth=depth + 1, preformatted=False)
                if node is not None:
                    rows.append(node)
        return rows


# ---------------------------------------------------------------------------
# Markdown
# ---------------------------------------------------------------------------

class MarkdownParser:
    """Parse Markdown text into a :class:`DocumentNode` tree.

    Soft line breaks become hard line breaks, matching GFM with
    ``breaks`` enabled.
    """

    def __init__(
        self,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        overflow: str = "error",
    ) -> None:
        _check_overflow(overflow)
        self.max_depth = max_depth
        self.overflow = overflow
        self._md = mistune.create_markdown(
            renderer=None,  # AST mode
            plugins=["table", "strikethrough", "task_lists"],
        )
        self._html = HtmlParser(max_depth=max_depth, overflow=overflow)
        self._depth = 0

    # -- public API ---------------------------------------------------------

    def parse(self, markdown_text: str) -> DocumentNode:
        """Return a ``document`` root for *markdown_text*."""
        tokens: list[dict[str, Any]] = self._md(markdown_text)  # type: ignore[assignment]
        self._depth = 0
        return _document(self._convert_tokens(tokens))

    # -- token conversion ---------------------------------------------------

    def _convert_tokens(self, tokens: list[dict[str, Any]]) -> list[DocumentNode]:
        nodes: list[DocumentNode] = []
        for tok in tokens:
            if tok.get("type") == "block_html":
                nodes.extend(self._html.parse(tok.get("raw", "")).children)
                continue
            node = self._convert_token(tok)
            if node is not None:
                nodes.append(node)
        return nodes

    def _convert_token(self, tok: dict[str, Any]) -> Optional[DocumentNode]:
        if self._depth >= self.max_depth:
            if self.overflow == "error":
                raise NestingTooDeepError(self.max_depth)
            logger.warning("Markdown nested deeper than %d; keeping text only", self.max_depth)
            return self._text(self._extract_text(tok))
        ttype = tok.get("type", "")
        handler = getattr(self, f"_handle_{ttype}", None)
        self._depth += 1
        try:
            if handler:
                return handler(tok)
            # Fallback – treat unknown tokens as plain text if they carry text.
            raw = tok.get("raw", tok.get("text", ""))
            if raw:
                return self._text(str(raw))
            return None
        finally:
            self._depth -= 1

    def _text(self, value: str) -> DocumentNode:
        return DocumentNode(type=NodeType.TEXT, text=value)

    def _element(self, ntype: NodeType, tok: dict, **attrs) -> DocumentNode:
        children_raw = tok.get("children")
        if children_raw is None:
            children_raw = tok.get("text", tok.get("raw", ""))
        return DocumentNode(type=ntype, children=self._convert_inline(children_raw), **attrs)

    def _convert_inline(self, children: Any) -> list[DocumentNode]:
        if children is None:
            return []
        if isinstance(children, str):
            return [self._text(children)] if children else []
        if isinstance(children, list):
            return self._convert_tokens(children)
        return []

    # -- block handlers -----------------------------------------------------

    def _handle_heading(self, tok: dict) -> DocumentNode:
        level = tok.get("attrs", {}).get("level", tok.get("level", 1))
        return self._element(NodeType.HEADING, tok, level=min(3, max(1, int(level))), tag_name=f"h{level}")

    def _handle_paragraph(self, tok: dict) -> DocumentNode:
        return self._element(NodeType.PARAGRAPH, tok, tag_name="p")

    def _handle_block_text(self, tok: dict) -> DocumentNode:
        """Block text inside tight list items."""
        return self._element(NodeType.PARAGRAPH, tok, tag_name="p")

    def _handle_thematic_break(self, _tok: dict) -> DocumentNode:
        return DocumentNode(type=NodeType.HORIZONTAL_RULE, tag_name="hr")

    def _handle_block_code(self, tok: dict) -> DocumentNode:
        raw = tok.get("raw", tok.get("text", ""))
        text = raw if isinstance(raw, str) else str(raw)
        return DocumentNode(
            type=NodeType.CODE_BLOCK,
            children=[self._text(text)] if text else [],
            tag_name="pre",
        )

    def _handle_block_quote(self, tok: dict) -> DocumentNode:
        return DocumentNode(
            type=NodeType.BLOCKQUOTE,
            children=self._convert_inline(tok.get("children", [])),
            tag_name="blockquote",
        )

    def _handle_blank_line(self, _tok: dict) -> Optional[DocumentNode]:
        return None

    # -- inline handlers ----------------------------------------------------

    def _handle_text(self, tok: dict) -> DocumentNode:
        raw = tok.get("raw", tok.get("text", ""))
        return self._text(raw if isinstance(raw, str) else str(raw))

    def _handle_strong(self, tok: dict) -> DocumentNode:
        return self._element(NodeType.BOLD, tok, tag_name="strong")

    def _handle_emphasis(self, tok: dict) -> DocumentNode:
        return self._element(NodeType.ITALIC, tok, tag_name="em")

    def _handle_strikethrough(self, tok: dict) -> DocumentNode:
        return self._element(NodeType.STRIKETHROUGH, tok, tag_name="del")

    def _handle_codespan(self, tok: dict) -> DocumentNode:
        raw = tok.get("raw", tok.get("text", ""))
        return DocumentNode(
            type=NodeType.INLINE_CODE,
            children=[self._text(str(raw))] if raw else [],
            tag_name="code",
        )

    def _handle_linebreak(self, _tok: dict) -> DocumentNode:
        return DocumentNode(type=NodeType.LINE_BREAK, tag_name="br")

    def _handle_softbreak(self, _tok: dict) -> DocumentNode:
        return DocumentNode(type=NodeType.LINE_BREAK, tag_name="br")

    def _handle_inline_html(self, _tok: dict) -> Optional[DocumentNode]:
        return None

    # -- link / image -------------------------------------------------------

    def _handle_link(self, tok: dict) -> DocumentNode:
        attrs = tok.get("attrs", {})
        return self._element(NodeType.LINK, tok, href=attrs.get("url", ""), tag_name="a")

    def _handle_image(self, tok: dict) -> Optional[DocumentNode]:
        alt = tok.get("attrs", {}).get("alt", "") or self._extract_text(tok)
        return self._text(alt) if alt else None

    # -- lists --------------------------------------------------------------

    def _handle_list(self, tok: dict) -> DocumentNode:
        ordered = tok.get("attrs", {}).get("ordered", False)
        return DocumentNode(
            type=NodeType.ORDERED_LIST if ordered else NodeType.UNORDERED_LIST,
            children=self._convert_inline(tok.get("children", [])),
            tag_name="ol" if ordered else "ul",
        )

    def _handle_list_item(self, tok: dict) -> DocumentNode:
        attrs = tok.get("attrs", {})
        children = self._convert_inline(tok.get("children", []))
        if "checked" in attrs:
            children = self._checkbox(bool(attrs["checked"])) + children
        return DocumentNode(type=NodeType.LIST_ITEM, children=children, tag_name="li")

    def _handle_task_list_item(self, tok: dict) -> DocumentNode:
        attrs = tok.get("attrs", {})
        children = self._convert_inline(tok.get("children", []))
        checked = bool(attrs.get("checked", False))
        return DocumentNode(
            type=NodeType.LIST_ITEM,
            children=self._checkbox(checked) + children,
            tag_name="li",
        )

    def _checkbox(self, checked: bool) -> list[DocumentNode]:
        box = DocumentNode(
            type=NodeType.INPUT,
            input_type="checkbox",
            checked=checked,
            tag_name="input",
        )
        return [box, self._text(" ")]

    # -- table --------------------------------------------------------------

    def _handle_table(self, tok: dict) -> DocumentNode:
        rows: list[DocumentNode] = []
        for child in tok.get("children", []):
            ctype = child.get("type", "")
            if ctype == "table_head":
                rows.append(self._make_table_row(child.get("children", [])))
            elif ctype == "table_body":
                for row in child.get("children", []):
                    rows.append(self._make_table_row(row.get("children", [])))
            elif ctype == "table_row":
                rows.append(self._make_table_row(child.get("children", [])))
        return DocumentNode(type=NodeType.TABLE, children=rows, tag_name="table")

    def _make_table_row(self, cell_tokens: list[dict]) -> DocumentNode:
        cells = [
            DocumentNode(
                type=NodeType.TABLE_CELL,
                children=self._convert_inline(cell.get("children", [])),
                tag_name="th" if cell.get("attrs", {}).get("head") else "td",
            )
            for cell in cell_tokens
        ]
        return DocumentNode(type=NodeType.TABLE_ROW, children=cells, tag_name="tr")

    # -- helpers ------------------------------------------------------------

    def _extract_text(self, tok: Any) -> str:
        if isinstance(tok, str):
            return tok
        if isinstance(tok, list):
            return "".join(self._extract_text(t) for t in tok)
        if isinstance(tok, dict):
            if "children" in tok and isinstance(tok["children"], list):
                return self._extract_text(tok["children"])
            return str(tok.get("raw", tok.get("text", "")))
        return ""
