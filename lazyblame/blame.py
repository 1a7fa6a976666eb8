"""Compute blame annotations for one document.

This is the only coroutine in the pipeline: it awaits the hunk lookup once,
then runs the synchronous matcher and renderer.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
from datetime import datetime

from .decorations import AnnotationDescriptor, RenderOptions, render_hunk
from .hunks import Hunk, Selection
from .matching import match_hunks_to_selections
from .settings import MODE_FILE, MODE_NONE, resolve_decorations_mode

HunkLookup = Callable[[str], Awaitable[Sequence[Hunk]]]


def render_matches(
    hunks: Sequence[Hunk],
    selections: Sequence[Selection] | None,
    now: datetime,
    options: RenderOptions | None = None,
) -> list[AnnotationDescriptor]:
    return [
        render_hunk(hunk, now, target_line, options)
        for hunk, target_line in match_hunks_to_selections(hunks, selections)
    ]


async def get_blame_decorations(
    *,
    uri: str,
    settings: Mapping[str, object],
    now: datetime,
    selections: Sequence[Selection] | None,
    query_hunks: HunkLookup,
    options: RenderOptions | None = None,
) -> list[AnnotationDescriptor]:
    """Return annotations for ``uri`` under the given settings snapshot.

    With decorations disabled the lookup is never called. In ``file`` mode the
    selections are ignored and every hunk is annotated. Lookup errors
    propagate.
    """
    mode = resolve_decorations_mode(settings)
    if mode == MODE_NONE:
        return []

    hunks = await query_hunks(uri)
    if mode == MODE_FILE:
        selections = None
    return render_matches(hunks, selections, now, options)
