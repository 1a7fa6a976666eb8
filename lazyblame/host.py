"""Host-side wiring between an editor and the blame pipeline.

``EditorHost`` is the narrow surface consumed from an editor. ``BlameDecorator``
recomputes annotations from current snapshots whenever the configuration or
the selections change, and publishes them to the editor.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from loguru import logger

from .blame import HunkLookup, get_blame_decorations
from .decorations import AnnotationDescriptor, RenderOptions
from .hunks import Selection

_CURRENT = object()


class EditorHost(Protocol):
    def document_uri(self) -> str: ...

    def selections(self) -> list[Selection] | None: ...

    def set_decorations(self, decorations: list[AnnotationDescriptor]) -> None: ...


@dataclass
class MemoryEditor:
    """In-memory editor that records every published decoration list."""

    uri: str
    current_selections: list[Selection] | None = None
    published: list[list[AnnotationDescriptor]] = field(default_factory=list)

    def document_uri(self) -> str:
        return self.uri

    def selections(self) -> list[Selection] | None:
        return self.current_selections

    def set_decorations(self, decorations: list[AnnotationDescriptor]) -> None:
        self.published.append(list(decorations))

    @property
    def decorations(self) -> list[AnnotationDescriptor] | None:
        return self.published[-1] if self.published else None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BlameDecorator:
    """Recompute and publish blame annotations on upstream changes.

    Each call snapshots settings, selections and the clock, then awaits the
    lookup. Failures are logged and nothing is published for that cycle. When
    a newer call starts before an older one resolves, the older result is
    dropped.
    """

    def __init__(
        self,
        settings_provider: Callable[[], Mapping[str, object]],
        query_hunks: HunkLookup,
        clock: Callable[[], datetime] = utc_now,
        options: RenderOptions | None = None,
    ) -> None:
        self._settings_provider = settings_provider
        self._query_hunks = query_hunks
        self._clock = clock
        self._options = options
        self._generation = 0

    async def decorate(
        self,
        editor: EditorHost,
        selections: Sequence[Selection] | None | object = _CURRENT,
    ) -> list[AnnotationDescriptor] | None:
        """Publish annotations for ``editor``.

        ``selections`` defaults to the editor's current selections; pass
        ``None`` explicitly to annotate the whole file. Returns the published
        list, or ``None`` when the cycle failed or was superseded.
        """
        if selections is _CURRENT:
            selections = editor.selections()
        self._generation += 1
        generation = self._generation
        uri = editor.document_uri()
        try:
            decorations = await get_blame_decorations(
                uri=uri,
                settings=self._settings_provider(),
                now=self._clock(),
                selections=selections,
                query_hunks=self._query_hunks,
                options=self._options,
            )
        except Exception as exc:
            logger.error(f"Decoration error for {uri}: {exc}")
            return None

        if generation != self._generation:
            logger.debug(f"Dropping superseded decorations for {uri}")
            return None
        editor.set_decorations(decorations)
        return decorations

    async def on_configuration_changed(self, editor: EditorHost) -> list[AnnotationDescriptor] | None:
        return await self.decorate(editor)

    async def on_selections_changed(
        self,
        editor: EditorHost,
        selections: Sequence[Selection] | None,
    ) -> list[AnnotationDescriptor] | None:
        return await self.decorate(editor, selections)
