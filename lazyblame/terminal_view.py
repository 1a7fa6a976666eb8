"""Terminal host: print source with blame annotations at line ends.

Annotation colors are the descriptor's CSS ``rgba`` swatches alpha-blended over
the terminal theme background and emitted as 24-bit SGR sequences.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from .decorations import AnnotationDescriptor, AnnotationStyle
from .hunks import Selection
from .syntax import DEFAULT_STYLE, highlight_lines, sanitize_terminal_text

RESET = "\033[0m"
DIM = "\033[2m"
ANNOTATION_GAP = "    "
SELECTED_MARKER = "▌"

THEME_BACKGROUNDS: dict[str, tuple[int, int, int]] = {
    "dark": (30, 30, 30),
    "light": (255, 255, 255),
}
DEFAULT_THEME = "dark"

_RGBA_RE = re.compile(
    r"^\s*rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*([0-9]*\.?[0-9]+)\s*)?\)\s*$"
)

RGB = tuple[int, int, int]


def parse_rgba(value: str) -> tuple[RGB, float]:
    """Parse ``rgb(...)``/``rgba(...)`` into a color and an alpha in [0, 1]."""
    match = _RGBA_RE.match(value)
    if match is None:
        raise ValueError(f"not an rgba color: {value!r}")
    red, green, blue = (max(0, min(255, int(match.group(n)))) for n in (1, 2, 3))
    alpha = float(match.group(4)) if match.group(4) is not None else 1.0
    return (red, green, blue), max(0.0, min(1.0, alpha))


def blend(color: RGB, alpha: float, base: RGB) -> RGB:
    """Composite ``color`` at ``alpha`` over an opaque ``base``."""
    red, green, blue = (round(c * alpha + b * (1.0 - alpha)) for c, b in zip(color, base))
    return (red, green, blue)


def annotation_sgr(style: AnnotationStyle, base: RGB) -> str:
    """Truecolor SGR prefix for one annotation style over ``base``."""
    bg_color, bg_alpha = parse_rgba(style.background_color)
    background = blend(bg_color, bg_alpha, base)
    fg_color, fg_alpha = parse_rgba(style.color)
    foreground = blend(fg_color, fg_alpha, background)
    return (
        f"\033[48;2;{background[0]};{background[1]};{background[2]}m"
        f"\033[38;2;{foreground[0]};{foreground[1]};{foreground[2]}m"
    )


def hyperlink(text: str, url: str) -> str:
    """Wrap ``text`` in an OSC 8 terminal hyperlink when ``url`` is absolute."""
    if not url.startswith(("http://", "https://")):
        return text
    return f"\033]8;;{url}\033\\{text}\033]8;;\033\\"


def format_annotation(decoration: AnnotationDescriptor, theme: str, no_color: bool) -> str:
    label = sanitize_terminal_text(decoration.label)
    if no_color:
        return label
    style = decoration.light if theme == "light" else decoration.dark
    base = THEME_BACKGROUNDS.get(theme, THEME_BACKGROUNDS[DEFAULT_THEME])
    return hyperlink(f"{annotation_sgr(style, base)} {label} {RESET}", decoration.link_url)


@dataclass
class TerminalEditor:
    """``EditorHost`` adapter printing a single document to a terminal."""

    path: Path
    source: str
    current_selections: list[Selection] | None = None
    theme: str = DEFAULT_THEME
    style: str = DEFAULT_STYLE
    no_color: bool = False
    decorations: list[AnnotationDescriptor] = field(default_factory=list)

    def document_uri(self) -> str:
        return self.path.resolve().as_uri()

    def selections(self) -> list[Selection] | None:
        return self.current_selections

    def set_decorations(self, decorations: list[AnnotationDescriptor]) -> None:
        self.decorations = list(decorations)

    def _selected_lines(self) -> set[int]:
        selected: set[int] = set()
        for selection in self.current_selections or []:
            selected.update(range(selection.start_line, selection.end_line + 1))
        return selected

    def _source_lines(self) -> list[str]:
        text = sanitize_terminal_text(self.source)
        if self.no_color:
            return text.splitlines()
        return highlight_lines(text, self.path, self.style)

    def render_lines(self) -> list[str]:
        """Return printable rows: gutter, source, then any annotations."""
        lines = self._source_lines()
        by_line: dict[int, list[AnnotationDescriptor]] = {}
        for decoration in self.decorations:
            by_line.setdefault(decoration.target_line, []).append(decoration)

        selected = self._selected_lines()
        number_width = len(str(max(1, len(lines))))
        rows: list[str] = []
        for idx, line in enumerate(lines):
            marker = SELECTED_MARKER if idx in selected else " "
            gutter = f"{idx + 1:>{number_width}}{marker}"
            if not self.no_color:
                gutter = f"{DIM}{gutter}{RESET}"
            row = f"{gutter} {line}"
            if not self.no_color and "\033" in line:
                row += RESET
            for decoration in by_line.get(idx, []):
                row += ANNOTATION_GAP + format_annotation(decoration, self.theme, self.no_color)
            rows.append(row)
        return rows

    def render(self) -> str:
        rows = self.render_lines()
        return "".join(f"{row}\n" for row in rows)
