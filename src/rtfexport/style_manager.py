"""RTF document style presets.

Manages presets (default, letter, compact) that fix page geometry, font
sizes, indents and the nesting limit used by the renderer.  All lengths
are in twips (1/1440 inch) and all font sizes in half-points.
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass
class PageSetup:
    """Paper size and margins."""

    width: int = 11906        # A4, 210mm
    height: int = 16838       # A4, 297mm
    margin_left: int = 1134   # 20mm
    margin_right: int = 1134
    margin_top: int = 1134
    margin_bottom: int = 1134

    @property
    def content_width(self) -> int:
        return self.width - self.margin_left - self.margin_right

    def to_rtf(self) -> str:
        return (
            f"\\paperw{self.width}\\paperh{self.height}"
            f"\\margl{self.margin_left}\\margr{self.margin_right}"
            f"\\margt{self.margin_top}\\margb{self.margin_bottom}"
        )


@dataclass
class StyleSet:
    """Everything the renderer needs besides the font table."""

    page: PageSetup = field(default_factory=PageSetup)
    body_size: int = 22
    heading_sizes: dict[int, int] = field(
        default_factory=lambda: {1: 48, 2: 36, 3: 28}
    )
    heading_space_before: int = 240
    heading_space_after: int = 120
    code_size: int = 20
    code_background: tuple[int, int, int] = (242, 242, 242)
    quote_indent: int = 720
    list_indent: int = 720
    list_hang: int = 360
    # 0 means "page content width"
    table_width: int = 0
    max_depth: int = 100

    def derive(self, **overrides) -> StyleSet:
        """Return a copy with selected fields overridden."""
        clone = deepcopy(self)
        for k, v in overrides.items():
            if hasattr(clone, k):
                setattr(clone, k, v)
        return clone

    @property
    def effective_table_width(self) -> int:
        return self.table_width or self.page.content_width

    def heading_size(self, level: int) -> int:
        """Half-point size for heading *level*, clamped to 1--3."""
        level = max(1, min(3, level))
        return self.heading_sizes[level]


# ---------------------------------------------------------------------------
# Preset definitions
# ---------------------------------------------------------------------------

def _build_default_styles() -> StyleSet:
    return StyleSet()


def _build_letter_styles() -> StyleSet:
    return StyleSet(
        page=PageSetup(
            width=12240,
            height=15840,
            margin_left=1440,
            margin_right=1440,
            margin_top=1440,
            margin_bottom=1440,
        ),
        body_size=24,
    )


def _build_compact_styles() -> StyleSet:
    return StyleSet(
        page=PageSetup(
            margin_left=720,
            margin_right=720,
            margin_top=720,
            margin_bottom=720,
        ),
        body_size=20,
        heading_sizes={1: 40, 2: 32, 3: 26},
        heading_space_before=160,
        heading_space_after=80,
        code_size=18,
        quote_indent=480,
        list_indent=540,
        list_hang=270,
    )


_PRESET_BUILDERS = {
    "default": _build_default_styles,
    "letter": _build_letter_styles,
    "compact": _build_compact_styles,
}


# ---------------------------------------------------------------------------
# StyleManager
# ---------------------------------------------------------------------------

class StyleManager:
    """Resolve a preset name to its :class:`StyleSet`.

    Usage::

        sm = StyleManager("letter")
        sm.styles.page.to_rtf()
    """

    PRESETS = list(_PRESET_BUILDERS.keys())

    def __init__(self, preset: str = "default", **overrides) -> None:
        if preset not in _PRESET_BUILDERS:
            raise ValueError(
                f"Unknown preset {preset!r}. Choose from: {', '.join(_PRESET_BUILDERS)}"
            )
        self.preset = preset
        self.styles: StyleSet = _PRESET_BUILDERS[preset]()
        if overrides:
            self.styles = self.styles.derive(**overrides)

    def color_table(self) -> str:
        """``{\\colortbl ...}`` with the auto colour and one custom slot."""
        r, g, b = self.styles.code_background
        return f"{{\\colortbl ;\\red{r}\\green{g}\\blue{b};}}"
