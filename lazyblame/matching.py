"""Select the hunks that need an annotation for the current selections."""

from __future__ import annotations

from collections.abc import Sequence

from .hunks import Hunk, Selection


def hunk_overlaps_selection(hunk: Hunk, selection: Selection) -> bool:
    """Return whether ``hunk`` shares at least one line with ``selection``.

    Bounds are inclusive on both sides, so a caret inside the hunk matches.
    """
    return selection.end_line >= hunk.first_line and selection.start_line <= hunk.last_line


def match_hunks_to_selections(
    hunks: Sequence[Hunk],
    selections: Sequence[Selection] | None,
) -> list[tuple[Hunk, int]]:
    """Pair each relevant hunk with the zero-based line its annotation goes on.

    Without selections every hunk is anchored at its own first line. With
    selections, matches are emitted selection by selection (input order) and
    hunk by hunk within a selection. A hunk starting above the selection is
    anchored at the selection's first line so the annotation stays in view.
    """
    if selections is None:
        return [(hunk, hunk.first_line) for hunk in hunks]

    matches: list[tuple[Hunk, int]] = []
    for selection in selections:
        for hunk in hunks:
            if not hunk_overlaps_selection(hunk, selection):
                continue
            matches.append((hunk, max(hunk.first_line, selection.start_line)))
    return matches
