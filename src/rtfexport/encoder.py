"""Escape literal text for RTF output.

RTF is a 7-bit format: the three control literals are backslash-escaped,
newlines and tabs become control words, and every character above ``~``
is written as a signed 16-bit ``\\uN?`` escape followed by a ``?``
fallback glyph for readers that skip Unicode controls (``\\uc1``).

Code points above U+FFFF are not split into surrogate pairs: they are
taken modulo 0x10000, so each still yields exactly one escape but reads
back as an unrelated BMP character (U+1F600 becomes ``\\u-2560?``, which
is U+F600).
"""

from __future__ import annotations

import re

_ESCAPES = {
    "\\": "\\\\",
    "{": "\\{",
    "}": "\\}",
    "\n": "\\line ",
    "\t": "\\tab ",
}

_UNICODE_ESCAPE_RE = re.compile(r"\\u(-?\d+)\?")


def _signed16(code: int) -> int:
    """Fold a code point into the signed 16-bit range RTF expects."""
    code %= 0x10000
    return code - 0x10000 if code > 0x7FFF else code


def encode(text: str) -> str:
    """Return *text* escaped for inclusion in an RTF body."""
    parts: list[str] = []
    for char in text:
        escaped = _ESCAPES.get(char)
        if escaped is not None:
            parts.append(escaped)
            continue
        code = ord(char)
        if code > 126:
            parts.append(f"\\u{_signed16(code)}?")
        else:
            parts.append(char)
    return "".join(parts)


def decode_unicode_escapes(rtf: str) -> str:
    """Replace ``\\uN?`` escapes in *rtf* with the characters they encode.

    Used for human-readable previews of generated RTF; everything else in
    the markup is left untouched.
    """

    def _replace(match: re.Match) -> str:
        code = int(match.group(1))
        if code < 0:
            code += 0x10000
        if not 0 <= code <= 0xFFFF:
            return match.group(0)
        return chr(code)

    return _UNICODE_ESCAPE_RE.sub(_replace, rtf)
