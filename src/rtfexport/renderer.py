"""RTF document renderer - converts a document tree to RTF markup.

This module walks a :class:`~rtfexport.nodes.DocumentNode` tree (produced
by :mod:`rtfexport.parser` or by an editor snapshot) and emits an RTF
document.  Markup is built bottom-up: every handler returns the markup
for its subtree and parents only concatenate.

Fonts are referenced by ``\\fN`` indices into the fixed table from
:mod:`rtfexport.fonts`; colour slot 1 of the colour table is the code
background.  List and table state lives in a
:class:`~rtfexport.context.RenderContext` created per :meth:`render` call.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from rtfexport import fonts, units
from rtfexport.context import ListKind, RenderContext
from rtfexport.encoder import encode
from rtfexport.nodes import DocumentNode, NodeType
from rtfexport.style_manager import StyleManager

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# RTF constants
# ---------------------------------------------------------------------------

_HEADER = "{\\rtf1\\ansi\\ansicpg1252\\deff0\\uc1"

_BULLET = "\\bullet"
_CHECKED = "\u2611"
_UNCHECKED = "\u2610"
_RULE = "\u2014" * 24
_EMPTY_CELL = "\\~"
_CODE_COLOR = 1

_CELL_BORDERS = "".join(
    f"\\clbrdr{side}\\brdrs\\brdrw10" for side in ("t", "l", "b", "r")
)

OVERFLOW_MODES = ("error", "text")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _column_span(cell: DocumentNode) -> int:
    """Column span of *cell*; missing, invalid or non-positive spans are 1."""
    try:
        span = int(cell.colspan)
    except (TypeError, ValueError):
        return 1
    return span if span > 0 else 1


def _table_rows(table: DocumentNode) -> list[DocumentNode]:
    """Rows of *table*, looking through thead/tbody style wrappers."""
    rows: list[DocumentNode] = []
    for child in table.children:
        if child.type == NodeType.TABLE_ROW:
            rows.append(child)
        elif child.type == NodeType.GENERIC:
            rows.extend(c for c in child.children if c.type == NodeType.TABLE_ROW)
    return rows


def _row_cells(row: DocumentNode) -> list[DocumentNode]:
    return [c for c in row.children if c.type == NodeType.TABLE_CELL]


def _column_boundaries(width: int, columns: int) -> list[int]:
    """Cumulative right edges (twips) of *columns* equal-width columns."""
    return [width * (i + 1) // columns for i in range(columns)]


def _is_block(node: DocumentNode) -> bool:
    """True for block nodes and unknown wrappers that contain one."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.is_block:
            return True
        if current.type == NodeType.GENERIC:
            stack.extend(current.children)
    return False


# ---------------------------------------------------------------------------
# RtfRenderer
# ---------------------------------------------------------------------------

class RtfRenderer:
    """Render a :class:`~rtfexport.nodes.DocumentNode` tree to RTF."""

    def __init__(
        self,
        style_manager: Optional[StyleManager] = None,
        *,
        overflow: str = "error",
    ) -> None:
        if overflow not in OVERFLOW_MODES:
            raise ValueError(
                f"Unknown overflow mode {overflow!r}. Choose from: {', '.join(OVERFLOW_MODES)}"
            )
        self.style: StyleManager = style_manager or StyleManager()
        self.overflow = overflow

    @property
    def styles(self):
        return self.style.styles

    # ======================================================================
    # Public API
    # ======================================================================

    def render(self, root: DocumentNode) -> str:
        """Return a complete RTF document for the tree under *root*."""
        body = self.render_body(root)
        logger.debug("rendered RTF body: %d chars", len(body))
        return self.assemble(body)

    def render_bytes(self, root: DocumentNode) -> bytes:
        """Like :meth:`render`; the output is pure ASCII after escaping."""
        return self.render(root).encode("ascii")

    def render_body(self, root: DocumentNode) -> str:
        """Render *root* without the document preamble."""
        ctx = RenderContext()
        if root.type == NodeType.GENERIC:
            return self._render_flow(root.children, ctx, root)
        return self._render_node(root, ctx, None)

    def assemble(self, body: str) -> str:
        """Wrap *body* markup in the RTF preamble and closing brace."""
        styles = self.styles
        return (
            f"{_HEADER}\n"
            f"{fonts.font_table()}\n"
            f"{self.style.color_table()}\n"
            f"{styles.page.to_rtf()}\\viewkind4\\f{fonts.DEFAULT_FONT}\\fs{styles.body_size}\n"
            f"{body}"
            "}"
        )

    # ======================================================================
    # Node dispatch
    # ======================================================================

    def _render_node(
        self,
        node: DocumentNode,
        ctx: RenderContext,
        parent: Optional[DocumentNode],
    ) -> str:
        limit = self.styles.max_depth
        if self.overflow == "text" and ctx.depth >= limit:
            logger.warning(
                "nesting deeper than %d at <%s>; rendering as plain text",
                limit, node.tag_name or node.type.value,
            )
            return encode(node.text_content())
        with ctx.descend(limit):
            handler: Optional[Callable[..., str]] = getattr(
                self, f"_render_{node.type.value}", None
            )
            if handler is not None:
                return handler(node, ctx, parent)
            return self._render_children(node, ctx)

    def _render_children(self, node: DocumentNode, ctx: RenderContext) -> str:
        return "".join(self._render_node(child, ctx, node) for child in node.children)

    def _render_flow(
        self,
        children: list[DocumentNode],
        ctx: RenderContext,
        parent: Optional[DocumentNode],
    ) -> str:
        """Render block children as-is and wrap inline runs in paragraphs."""
        parts: list[str] = []
        pending: list[str] = []

        def flush() -> None:
            if pending:
                parts.append(self._paragraph("".join(pending), ctx))
                pending.clear()

        for child in children:
            if _is_block(child):
                flush()
                parts.append(self._render_node(child, ctx, parent))
            else:
                pending.append(self._render_node(child, ctx, parent))
        flush()
        return "".join(parts)

    # ======================================================================
    # Paragraph units
    # ======================================================================

    def _cell_props(self, ctx: RenderContext) -> str:
        if not ctx.table_depth:
            return ""
        if ctx.table_depth > 1:
            return f"\\intbl\\itap{ctx.table_depth}"
        return "\\intbl"

    def _paragraph(
        self,
        inner: str,
        ctx: RenderContext,
        *,
        left: Optional[int] = None,
        first: int = 0,
        extra: str = "",
    ) -> str:
        """One ``{\\pard ... \\par}`` unit, or nothing if *inner* is blank."""
        if not inner.strip():
            return ""
        left = ctx.indent if left is None else left
        props = self._cell_props(ctx)
        if left:
            props += f"\\li{left}"
        if first:
            props += f"\\fi{first}"
        props += extra
        return f"{{\\pard{props} {inner}\\par}}\n"

    # ======================================================================
    # Per-NodeType renderers
    # ======================================================================

    def _render_text(self, node, ctx, parent) -> str:
        return encode(node.text)

    def _render_paragraph(self, node, ctx, parent) -> str:
        return self._render_flow(node.children, ctx, node)

    def _render_generic(self, node, ctx, parent) -> str:
        if any(_is_block(c) for c in node.children):
            return self._render_flow(node.children, ctx, node)
        return self._render_children(node, ctx)

    def _render_heading(self, node, ctx, parent) -> str:
        inner = self._render_children(node, ctx)
        if not inner.strip():
            return ""
        styles = self.styles
        size = styles.heading_size(node.level or 1)
        return self._paragraph(
            f"{{\\fs{size}\\b {inner}\\b0}}",
            ctx,
            extra=f"\\sb{styles.heading_space_before}\\sa{styles.heading_space_after}\\keepn",
        )

    def _wrap_inline(self, node, ctx, control: str) -> str:
        inner = self._render_children(node, ctx)
        if not inner.strip():
            return ""
        return f"{{{control} {inner}}}"

    def _render_bold(self, node, ctx, parent) -> str:
        return self._wrap_inline(node, ctx, "\\b")

    def _render_italic(self, node, ctx, parent) -> str:
        return self._wrap_inline(node, ctx, "\\i")

    def _render_underline(self, node, ctx, parent) -> str:
        return self._wrap_inline(node, ctx, "\\ul")

    def _render_strikethrough(self, node, ctx, parent) -> str:
        return self._wrap_inline(node, ctx, "\\strike")

    def _render_span(self, node, ctx, parent) -> str:
        inner = self._render_children(node, ctx)
        font = fonts.lookup(node.font_family)
        size = units.to_half_points(node.font_size)
        if font is None and size is None:
            return inner
        if not inner:
            return ""
        controls = ""
        if font is not None:
            controls += f"\\f{font}"
        if size is not None:
            controls += f"\\fs{size}"
        return f"{{{controls} {inner}}}"

    def _render_inline_code(self, node, ctx, parent) -> str:
        if parent is not None and parent.type == NodeType.CODE_BLOCK:
            return ""
        content = node.text_content()
        if not content:
            return ""
        return f"{{\\f{fonts.MONOSPACE_FONT} {encode(content)}}}"

    def _render_code_block(self, node, ctx, parent) -> str:
        content = node.text_content()
        if content.endswith("\n"):
            content = content[:-1]
        if not content.strip():
            return ""
        return self._paragraph(
            f"{{\\f{fonts.MONOSPACE_FONT}\\fs{self.styles.code_size} {encode(content)}}}",
            ctx,
            extra=f"\\cbpat{_CODE_COLOR}",
        )

    def _render_blockquote(self, node, ctx, parent) -> str:
        with ctx.indented(self.styles.quote_indent):
            return self._render_flow(node.children, ctx, node)

    def _render_line_break(self, node, ctx, parent) -> str:
        return "\\line "

    def _render_input(self, node, ctx, parent) -> str:
        if node.input_type.lower() != "checkbox":
            return ""
        return encode(_CHECKED if node.checked else _UNCHECKED)

    def _render_horizontal_rule(self, node, ctx, parent) -> str:
        return self._paragraph(encode(_RULE), ctx, extra="\\qc")

    # -- links --------------------------------------------------------------

    def _render_link(self, node, ctx, parent) -> str:
        inner = self._render_children(node, ctx)
        href = (node.href or "").strip()
        if not href:
            return inner
        display = inner if inner.strip() else encode(node.text_content())
        if not display.strip():
            display = encode(href)
        target = encode(href.replace('"', "%22"))
        return (
            "{\\field"
            f"{{\\*\\fldinst{{HYPERLINK \"{target}\"}}}}"
            f"{{\\fldrslt{{\\ul {display}}}}}"
            "}"
        )

    # -- lists --------------------------------------------------------------

    def _render_unordered_list(self, node, ctx, parent) -> str:
        return self._render_list(node, ctx, ListKind.UNORDERED)

    def _render_ordered_list(self, node, ctx, parent) -> str:
        return self._render_list(node, ctx, ListKind.ORDERED)

    def _render_list(self, node: DocumentNode, ctx: RenderContext, kind: ListKind) -> str:
        with ctx.list_scope(kind), ctx.indented(self.styles.list_indent):
            return self._render_flow(node.children, ctx, node)

    def _render_list_item(self, node, ctx, parent) -> str:
        entry = ctx.current_list
        if entry is None:
            logger.debug("list item outside of a list; rendering as paragraph")
            return self._render_flow(node.children, ctx, node)

        head: list[str] = []
        tail: list[str] = []
        head_closed = False
        # A leading checkbox does not count as marker-line text
        head_has_text = False

        def visit(children: list[DocumentNode], owner: DocumentNode) -> None:
            nonlocal head_closed, head_has_text
            pending: list[str] = []
            for child in children:
                if not head_closed:
                    if not _is_block(child):
                        head.append(self._render_node(child, ctx, owner))
                        if child.text_content().strip():
                            head_has_text = True
                        continue
                    if child.type == NodeType.PARAGRAPH and not head_has_text:
                        visit(child.children, child)
                        if "".join(head).strip():
                            head_closed = True
                        continue
                    head_closed = True
                if _is_block(child):
                    if pending:
                        tail.append(self._paragraph("".join(pending), ctx))
                        pending = []
                    tail.append(self._render_node(child, ctx, owner))
                else:
                    pending.append(self._render_node(child, ctx, owner))
            if pending:
                tail.append(self._paragraph("".join(pending), ctx))

        visit(node.children, node)

        head_markup = "".join(head)
        rest = "".join(tail)
        if not head_markup.strip():
            return rest

        if entry.kind == ListKind.ORDERED:
            entry.counter += 1
            marker = f"{entry.counter}."
        else:
            marker = _BULLET
        hang = self.styles.list_hang
        first_line = self._paragraph(
            f"{marker}\\tab {head_markup}",
            ctx,
            first=-hang,
            extra=f"\\tx{ctx.indent}",
        )
        return first_line + rest

    # -- tables -------------------------------------------------------------

    def _render_table(self, node, ctx, parent) -> str:
        rows = _table_rows(node)
        columns = max(
            (sum(_column_span(c) for c in _row_cells(row)) for row in rows),
            default=0,
        )
        if columns == 0:
            return ""
        bounds = _column_boundaries(self.styles.effective_table_width, columns)
        return "".join(self._render_row(row, ctx, bounds) for row in rows)

    def _render_table_row(self, node, ctx, parent) -> str:
        logger.debug("table row outside of a table; rendering as one-row table")
        return self._render_table(
            DocumentNode(type=NodeType.TABLE, children=[node], tag_name="table"),
            ctx,
            parent,
        )

    def _render_table_cell(self, node, ctx, parent) -> str:
        logger.debug("table cell outside of a row; rendering as paragraph")
        return self._render_flow(node.children, ctx, node)

    def _render_row(self, row: DocumentNode, ctx: RenderContext, bounds: list[int]) -> str:
        cells = _row_cells(row)
        if not cells:
            return ""
        with ctx.table_scope() as depth:
            nested = depth > 1
            props = self._cell_props(ctx)
            cell_end = "\\nestcell" if nested else "\\cell"
            column = 0
            definitions: list[str] = []
            contents: list[str] = []
            for cell in cells:
                column += _column_span(cell)
                boundary = bounds[min(column, len(bounds)) - 1]
                definitions.append(f"\\clvertalt{_CELL_BORDERS}\\cellx{boundary}")
                content = self._render_cell_content(cell, ctx)
                if not content.strip():
                    content = _EMPTY_CELL
                contents.append(f"\\pard{props} {content}{cell_end}\n")

        row_def = "\\trowd\\trgaph108\\trleft0" + "".join(definitions)
        if nested:
            return (
                "".join(contents)
                + f"{{\\*\\nesttableprops {row_def}\\nestrow}}{{\\nonesttables\\par}}\n"
            )
        return row_def + "\n" + "".join(contents) + "\\row\n"

    def _render_cell_content(self, cell: DocumentNode, ctx: RenderContext) -> str:
        owner = cell
        children = cell.children
        while len(children) == 1 and children[0].type == NodeType.PARAGRAPH:
            owner = children[0]
            children = owner.children
        if any(_is_block(c) for c in children):
            return self._render_flow(children, ctx, owner)
        return "".join(self._render_node(c, ctx, owner) for c in children)
