"""Fixed RTF font table and CSS font-family resolution.

The table is compiled once at import time.  Body markup refers to fonts
by their ``\\fN`` index, so the order of :data:`FONT_TABLE` must never
change between the preamble and the body.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from rtfexport.encoder import encode


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FontTableEntry:
    """One ``{\\fN ...;}`` declaration plus the CSS names that select it."""

    index: int
    declaration: str
    aliases: frozenset[str]


def _declare(
    index: int,
    family: str,
    name: str,
    *,
    charset: int = 0,
    alternate: str = "",
) -> str:
    falt = f"{{\\*\\falt {encode(alternate)}}}" if alternate else ""
    return f"{{\\f{index}\\f{family}\\fcharset{charset} {encode(name)}{falt};}}"


# (family class, canonical name, charset, alternate name, aliases)
_CATALOG: list[tuple[str, str, int, str, tuple[str, ...]]] = [
    ("swiss", "Noto Sans KR", 129, "Arial", (
        "noto sans kr", "arial", "helvetica", "helvetica neue",
        "sans-serif", "system-ui", "-apple-system",
    )),
    ("modern", "Courier New", 0, "", (
        "courier new", "courier", "consolas", "menlo", "monaco",
        "d2coding", "monospace", "ui-monospace",
    )),
    ("roman", "Noto Serif KR", 129, "Times New Roman", (
        "noto serif kr", "times new roman", "times", "georgia", "serif",
    )),
    ("swiss", "Malgun Gothic", 129, "맑은 고딕", (
        "malgun gothic", "맑은 고딕",
    )),
    ("swiss", "Nanum Gothic", 129, "나눔고딕", (
        "nanum gothic", "nanumgothic", "나눔고딕",
    )),
    ("roman", "Nanum Myeongjo", 129, "나눔명조", (
        "nanum myeongjo", "nanummyeongjo", "나눔명조",
    )),
    ("swiss", "Dotum", 129, "돋움", ("dotum", "돋움")),
    ("swiss", "Gulim", 129, "굴림", ("gulim", "굴림")),
    ("roman", "Batang", 129, "바탕", ("batang", "바탕")),
]


def _build_table() -> tuple[FontTableEntry, ...]:
    entries: list[FontTableEntry] = []
    seen: dict[str, int] = {}
    for index, (family, name, charset, alternate, aliases) in enumerate(_CATALOG):
        for alias in aliases:
            if alias in seen:
                raise ValueError(
                    f"Font alias {alias!r} declared for both f{seen[alias]} and f{index}"
                )
            seen[alias] = index
        entries.append(FontTableEntry(
            index=index,
            declaration=_declare(index, family, name, charset=charset, alternate=alternate),
            aliases=frozenset(aliases),
        ))
    return tuple(entries)


FONT_TABLE: tuple[FontTableEntry, ...] = _build_table()

DEFAULT_FONT = 0
MONOSPACE_FONT = 1

_ALIAS_INDEX: dict[str, int] = {
    alias: entry.index for entry in FONT_TABLE for alias in entry.aliases
}

_FONT_TABLE_RTF = "{\\fonttbl" + "".join(e.declaration for e in FONT_TABLE) + "}"


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

def normalize_family(declaration: str) -> str:
    """Reduce a CSS ``font-family`` value to its first family, lower-cased.

    ``"'Noto Sans KR', sans-serif"`` becomes ``"noto sans kr"``.
    """
    first = declaration.split(",", 1)[0].strip()
    if first[:1] in ("'", '"'):
        first = first[1:]
    if first[-1:] in ("'", '"'):
        first = first[:-1]
    return first.strip().lower()


def lookup(declaration: Optional[str]) -> Optional[int]:
    """Return the font index for a CSS family declaration, or ``None``."""
    if not declaration:
        return None
    return _ALIAS_INDEX.get(normalize_family(declaration))


def font_table() -> str:
    """The ``{\\fonttbl ...}`` group emitted once per document."""
    return _FONT_TABLE_RTF
