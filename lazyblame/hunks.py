"""Blame hunk and selection value types.

Hunks use the code-host convention: 1-based lines with an exclusive end.
Selections use zero-based editor positions. ``Hunk.first_line`` and
``Hunk.last_line`` bridge the two.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Person:
    display_name: str


@dataclass(frozen=True)
class Author:
    person: Person
    date: str


@dataclass(frozen=True)
class Commit:
    url: str


@dataclass(frozen=True)
class Hunk:
    """Contiguous line range attributed to one revision."""

    start_line: int
    end_line: int
    author: Author
    rev: str
    message: str
    commit: Commit

    @property
    def first_line(self) -> int:
        """Zero-based index of the first covered line."""
        return self.start_line - 1

    @property
    def last_line(self) -> int:
        """Zero-based index of the last covered line (inclusive)."""
        return self.end_line - 2


@dataclass(frozen=True)
class Position:
    line: int
    character: int = 0


@dataclass(frozen=True)
class Selection:
    """Editor selection between two zero-based positions.

    ``start`` may come after ``end`` for backwards selections; the line
    accessors always return the ordered bounds.
    """

    start: Position
    end: Position

    @classmethod
    def lines(cls, start_line: int, end_line: int | None = None) -> "Selection":
        """Build a whole-line selection, or a caret when ``end_line`` is omitted."""
        if end_line is None:
            end_line = start_line
        return cls(Position(start_line), Position(end_line))

    @property
    def start_line(self) -> int:
        return min(self.start.line, self.end.line)

    @property
    def end_line(self) -> int:
        return max(self.start.line, self.end.line)


def hunk_from_dict(data: dict[str, object]) -> Hunk:
    """Build a ``Hunk`` from the code-host JSON shape.

    Missing nested fields become empty strings; a missing line bound raises
    ``KeyError`` since the hunk would be meaningless without it.
    """
    author = data.get("author")
    if not isinstance(author, dict):
        author = {}
    person = author.get("person")
    if not isinstance(person, dict):
        person = {}
    commit = data.get("commit")
    if not isinstance(commit, dict):
        commit = {}
    return Hunk(
        start_line=int(data["startLine"]),
        end_line=int(data["endLine"]),
        author=Author(
            person=Person(display_name=str(person.get("displayName", ""))),
            date=str(author.get("date", "")),
        ),
        rev=str(data.get("rev", "")),
        message=str(data.get("message", "")),
        commit=Commit(url=str(commit.get("url", ""))),
    )


def hunk_to_dict(hunk: Hunk) -> dict[str, object]:
    return {
        "startLine": hunk.start_line,
        "endLine": hunk.end_line,
        "author": {
            "person": {"displayName": hunk.author.person.display_name},
            "date": hunk.author.date,
        },
        "rev": hunk.rev,
        "message": hunk.message,
        "commit": {"url": hunk.commit.url},
    }


def load_hunks_json(path: Path) -> list[Hunk]:
    """Load hunks from a JSON file holding a list (or ``{"hunks": [...]}``).

    Hunks are returned sorted by ``start_line``.
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("hunks", [])
    if not isinstance(data, list):
        raise ValueError(f"expected a list of hunks in {path}")
    hunks = [hunk_from_dict(item) for item in data if isinstance(item, dict)]
    return sorted(hunks, key=lambda hunk: hunk.start_line)
