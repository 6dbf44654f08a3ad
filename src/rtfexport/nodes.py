"""Document tree consumed by the RTF and HWPX serializers.

Both tree builders in :mod:`rtfexport.parser` (HTML and Markdown) produce
this shape, and the renderers only ever read it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


# ---------------------------------------------------------------------------
# Node definitions
# ---------------------------------------------------------------------------

class NodeType(Enum):
    TEXT = "text"
    PARAGRAPH = "paragraph"
    SPAN = "span"
    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"
    STRIKETHROUGH = "strikethrough"
    INLINE_CODE = "inline_code"
    CODE_BLOCK = "code_block"
    BLOCKQUOTE = "blockquote"
    LINE_BREAK = "line_break"
    INPUT = "input"
    UNORDERED_LIST = "unordered_list"
    ORDERED_LIST = "ordered_list"
    LIST_ITEM = "list_item"
    HEADING = "heading"
    LINK = "link"
    TABLE = "table"
    TABLE_ROW = "table_row"
    TABLE_CELL = "table_cell"
    HORIZONTAL_RULE = "horizontal_rule"
    GENERIC = "generic"


BLOCK_TYPES = frozenset({
    NodeType.PARAGRAPH,
    NodeType.CODE_BLOCK,
    NodeType.BLOCKQUOTE,
    NodeType.UNORDERED_LIST,
    NodeType.ORDERED_LIST,
    NodeType.LIST_ITEM,
    NodeType.HEADING,
    NodeType.TABLE,
    NodeType.TABLE_ROW,
    NodeType.TABLE_CELL,
    NodeType.HORIZONTAL_RULE,
})


@dataclass
class DocumentNode:
    type: NodeType
    children: list[DocumentNode] = field(default_factory=list)
    text: str = ""
    # Heading
    level: int = 0
    # Link
    href: Optional[str] = None
    # Table cell
    colspan: int = 1
    # Input
    input_type: str = ""
    checked: bool = False
    # Inline style (CSS strings, e.g. "18px" / "'Noto Sans KR', sans-serif")
    font_size: str = ""
    font_family: str = ""
    # Source tag name, kept for GENERIC nodes and log messages
    tag_name: str = ""

    @property
    def is_block(self) -> bool:
        return self.type in BLOCK_TYPES

    def text_content(self) -> str:
        """Concatenated text of this node and all its descendants."""
        parts: list[str] = []
        stack: list[DocumentNode] = [self]
        while stack:
            node = stack.pop()
            if node.type == NodeType.TEXT:
                parts.append(node.text)
            else:
                stack.extend(reversed(node.children))
        return "".join(parts)


def text(value: str) -> DocumentNode:
    """Shorthand for a TEXT node."""
    return DocumentNode(type=NodeType.TEXT, text=value)


def element(ntype: NodeType, *children: DocumentNode, **attrs) -> DocumentNode:
    """Shorthand for an element node with positional children."""
    return DocumentNode(type=ntype, children=list(children), **attrs)
