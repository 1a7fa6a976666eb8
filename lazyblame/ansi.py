"""Display-width measurement and truncation for annotation labels.

Widths are terminal columns: combining marks take none, East Asian
wide/fullwidth characters take two. ANSI escape sequences never count.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
OSC8_RE = re.compile(r"\x1b\]8;;[^\x1b]*\x1b\\")
ELLIPSIS = "…"
ZERO_WIDTH_JOINER = "\u200d"
TAB_STOP = 8


def _is_variation_selector(ch: str) -> bool:
    code = ord(ch)
    return 0xFE00 <= code <= 0xFE0F or 0xE0100 <= code <= 0xE01EF


def char_display_width(ch: str, col: int = 0) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next 8-column stop. Zero-width characters (combining
    marks, format characters like the joiner U+200D, variation selectors)
    consume no columns; East Asian wide/fullwidth characters consume two.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.category(ch) == "Cf" or _is_variation_selector(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", OSC8_RE.sub("", text))


def display_width(text: str) -> int:
    """Return the rendered column width of ``text`` ignoring escape sequences."""
    col = 0
    for ch in strip_ansi(text):
        col += char_display_width(ch, col)
    return col


def truncate_to_width(text: str, max_cols: int, omission: str = ELLIPSIS) -> str:
    """Shorten ``text`` to ``max_cols`` columns and append ``omission``.

    Text that already fits is returned unchanged. Otherwise the longest prefix
    fitting in ``max_cols`` is kept; a character that does not fit is dropped
    together with any combining marks that follow it. A joiner left dangling
    at the cut and trailing whitespace are removed so the ellipsis hugs the
    last visible character.
    """
    if display_width(text) <= max_cols:
        return text

    out: list[str] = []
    col = 0
    for ch in text:
        width = char_display_width(ch, col)
        if col + width > max_cols:
            break
        out.append(ch)
        col += width
    return "".join(out).rstrip(ZERO_WIDTH_JOINER).rstrip() + omission
