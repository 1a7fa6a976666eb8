"""Turn a blame hunk into a render-agnostic end-of-line annotation.

The descriptor carries the label, hover text, link and a fixed light/dark
palette. Hosts decide how to draw it; ``to_dict`` gives the JSON decoration
shape understood by code-host extension APIs.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from urllib.parse import urljoin

from .ansi import truncate_to_width
from .hunks import Hunk
from .relative_time import format_relative_time

MAX_AUTHOR_WIDTH = 25
MAX_MESSAGE_WIDTH = 45

LinkBase = str | Callable[[str], str] | None


@dataclass(frozen=True)
class AnnotationStyle:
    """Background and text color as CSS ``rgba(...)`` strings."""

    background_color: str
    color: str

    def to_dict(self) -> dict[str, str]:
        return {"backgroundColor": self.background_color, "color": self.color}


LIGHT_STYLE = AnnotationStyle(
    background_color="rgba(193, 217, 255, 0.65)",
    color="rgba(0, 0, 25, 0.55)",
)
DARK_STYLE = AnnotationStyle(
    background_color="rgba(15, 43, 89, 0.65)",
    color="rgba(235, 235, 255, 0.55)",
)


@dataclass(frozen=True)
class RenderOptions:
    """Knobs for ``render_hunk``.

    ``link_base`` is either a base URL that commit urls are resolved against or
    a callable mapping a commit url to the final link.
    """

    link_base: LinkBase = None
    max_author_width: int = MAX_AUTHOR_WIDTH
    max_message_width: int = MAX_MESSAGE_WIDTH


@dataclass(frozen=True)
class AnnotationDescriptor:
    """Declarative annotation anchored on one whole line."""

    target_line: int
    label: str
    hover_text: str
    link_url: str
    light: AnnotationStyle = field(default=LIGHT_STYLE)
    dark: AnnotationStyle = field(default=DARK_STYLE)
    is_whole_line: bool = True

    @property
    def target_range(self) -> tuple[int, int]:
        """Zero-width range on ``target_line``."""
        return (self.target_line, self.target_line)

    def to_dict(self) -> dict[str, object]:
        start, end = self.target_range
        return {
            "range": {"start": start, "end": end},
            "isWholeLine": self.is_whole_line,
            "after": {
                "contentText": self.label,
                "hoverMessage": self.hover_text,
                "linkURL": self.link_url,
                "light": self.light.to_dict(),
                "dark": self.dark.to_dict(),
            },
        }


def resolve_link(commit_url: str, link_base: LinkBase) -> str:
    """Resolve a commit url against ``link_base``; an empty url has no link."""
    if not commit_url or link_base is None:
        return commit_url
    if callable(link_base):
        return link_base(commit_url)
    return urljoin(link_base, commit_url)


def message_subject(message: str) -> str:
    """First line of a commit message."""
    lines = message.strip().splitlines()
    return lines[0].strip() if lines else ""


def format_label(hunk: Hunk, now: datetime, options: RenderOptions) -> str:
    author = truncate_to_width(hunk.author.person.display_name, options.max_author_width)
    message = truncate_to_width(message_subject(hunk.message), options.max_message_width)
    return f"{author}, {format_relative_time(hunk.author.date, now)}: • {message}"


def render_hunk(
    hunk: Hunk,
    now: datetime,
    target_line: int,
    options: RenderOptions | None = None,
) -> AnnotationDescriptor:
    """Render one hunk as an annotation on ``target_line``."""
    if options is None:
        options = RenderOptions()
    return AnnotationDescriptor(
        target_line=target_line,
        label=format_label(hunk, now, options),
        hover_text=hunk.message,
        link_url=resolve_link(hunk.commit.url, options.link_base),
    )
