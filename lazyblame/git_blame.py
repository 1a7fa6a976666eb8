"""Hunk lookup backed by ``git blame --porcelain``.

Consecutive lines blamed to the same commit are merged into one hunk. Full
commit messages come from a single ``git log`` call. Git runs in a worker
thread so the lookup can be awaited.
"""

from __future__ import annotations

import asyncio
import re
import subprocess
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import urlparse
from urllib.request import url2pathname

from loguru import logger

from .hunks import Author, Commit, Hunk, Person

GIT_TIMEOUT_SECONDS = 30.0
UNCOMMITTED_SHA = "0" * 40

_SHA_RE = re.compile(r"^[0-9a-f]{40}$")
_SCP_REMOTE_RE = re.compile(r"^(?:[\w.-]+@)?([\w.-]+):(?!//)(.+)$")


class BlameLookupError(RuntimeError):
    """Raised when git cannot produce blame data for a document."""


@dataclass(frozen=True)
class BlameLine:
    sha: str
    final_line: int
    author: str
    author_time: int | None
    summary: str


def _run_git(cwd: Path, args: list[str], timeout_seconds: float) -> subprocess.CompletedProcess[str] | None:
    """Execute a git subcommand with timeout and tolerant failure handling."""
    try:
        return subprocess.run(
            ["git", "-C", str(cwd), *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout_seconds,
        )
    except Exception as exc:
        logger.debug(f"git {' '.join(args[:1])} failed to run: {exc}")
        return None


def parse_blame_porcelain(raw: str) -> list[BlameLine]:
    """Parse ``git blame --porcelain`` output into per-line records.

    Commit headers appear only the first time a commit is seen; later lines of
    the same commit reuse them.
    """
    lines = raw.split("\n")
    headers: dict[str, dict[str, str]] = {}
    records: list[BlameLine] = []

    i = 0
    while i < len(lines):
        parts = lines[i].split()
        i += 1
        if len(parts) < 3 or not _SHA_RE.match(parts[0]):
            continue
        sha = parts[0]
        final_line = int(parts[2])

        info = headers.setdefault(sha, {})
        while i < len(lines) and not lines[i].startswith("\t"):
            key, _, value = lines[i].partition(" ")
            if key in {"author", "author-time", "summary"}:
                info[key] = value
            i += 1
        i += 1  # content line

        try:
            author_time: int | None = int(info.get("author-time", ""))
        except ValueError:
            author_time = None
        records.append(
            BlameLine(
                sha=sha,
                final_line=final_line,
                author=info.get("author", ""),
                author_time=author_time,
                summary=info.get("summary", ""),
            )
        )
    return records


def format_author_time(author_time: int | None) -> str:
    if author_time is None:
        return ""
    return datetime.fromtimestamp(author_time, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def commit_url_for(sha: str) -> str:
    """Commit page path relative to a repository web base."""
    if sha == UNCOMMITTED_SHA:
        return ""
    return f"commit/{sha}"


def group_blame_lines(
    records: Iterable[BlameLine],
    messages: dict[str, str] | None = None,
    url_for: Callable[[str], str] = commit_url_for,
) -> list[Hunk]:
    """Merge consecutive lines of the same commit into hunks.

    Hunk lines are 1-based with an exclusive end, ordered by start line.
    """
    messages = messages or {}
    hunks: list[Hunk] = []
    current: BlameLine | None = None
    start = end = 0

    def flush() -> None:
        if current is None:
            return
        hunks.append(
            Hunk(
                start_line=start,
                end_line=end,
                author=Author(
                    person=Person(display_name=current.author),
                    date=format_author_time(current.author_time),
                ),
                rev=current.sha,
                message=messages.get(current.sha, current.summary),
                commit=Commit(url=url_for(current.sha)),
            )
        )

    for record in sorted(records, key=lambda item: item.final_line):
        if current is not None and record.sha == current.sha and record.final_line == end:
            end += 1
            continue
        flush()
        current = record
        start = record.final_line
        end = record.final_line + 1
    flush()
    return hunks


def parse_commit_messages(raw: str) -> dict[str, str]:
    """Parse ``git log --format=%H%x00%B%x1e`` output into sha -> message."""
    messages: dict[str, str] = {}
    for entry in raw.split("\x1e"):
        sha, sep, body = entry.strip("\n").partition("\x00")
        if sep and _SHA_RE.match(sha):
            messages[sha] = body.strip()
    return messages


def _commit_messages(repo_root: Path, shas: list[str]) -> dict[str, str]:
    if not shas:
        return {}
    proc = _run_git(
        repo_root,
        ["log", "--no-walk=unsorted", "--format=%H%x00%B%x1e", *shas],
        GIT_TIMEOUT_SECONDS,
    )
    if proc is None or proc.returncode != 0:
        return {}
    return parse_commit_messages(proc.stdout)


def uri_to_path(uri: str) -> Path:
    """Convert a ``file://`` uri (or a plain path) to a ``Path``."""
    parsed = urlparse(uri)
    if parsed.scheme == "file":
        return Path(url2pathname(parsed.path))
    if parsed.scheme:
        raise BlameLookupError(f"unsupported document uri: {uri}")
    return Path(uri)


def blame_file(path: Path) -> list[Hunk]:
    """Run git blame for ``path`` and return its hunks."""
    path = path.resolve()
    proc = _run_git(path.parent, ["blame", "--porcelain", "--", path.name], GIT_TIMEOUT_SECONDS)
    if proc is None:
        raise BlameLookupError(f"git blame could not run for {path}")
    if proc.returncode != 0:
        raise BlameLookupError(proc.stderr.strip() or f"git blame failed for {path}")

    records = parse_blame_porcelain(proc.stdout)
    shas = sorted({record.sha for record in records if record.sha != UNCOMMITTED_SHA})
    return group_blame_lines(records, _commit_messages(path.parent, shas))


async def query_git_hunks(uri: str) -> list[Hunk]:
    """Async hunk lookup keyed by document uri."""
    path = uri_to_path(uri)
    hunks = await asyncio.to_thread(blame_file, path)
    logger.debug(f"Blamed {path}: {len(hunks)} hunks")
    return hunks


def remote_to_web_base(remote_url: str) -> str | None:
    """Map a git remote url to an https repository base ending in ``/``.

    Handles ``https://``, ``ssh://`` and scp-like ``git@host:owner/repo``
    forms. Returns ``None`` for local paths and unknown schemes.
    """
    url = remote_url.strip()
    if not url:
        return None
    parsed = urlparse(url)
    if parsed.scheme in {"http", "https", "ssh", "git"}:
        host = parsed.hostname
        repo_path = parsed.path
    elif not parsed.scheme or len(parsed.scheme) > 1:
        match = _SCP_REMOTE_RE.match(url)
        if match is None:
            return None
        host, repo_path = match.group(1), match.group(2)
    else:
        return None
    if not host:
        return None
    repo_path = repo_path.strip("/")
    if repo_path.endswith(".git"):
        repo_path = repo_path[: -len(".git")]
    if not repo_path:
        return None
    return f"https://{host}/{repo_path}/"


def remote_web_base(path: Path, remote: str = "origin") -> str | None:
    """Return the web base of ``remote`` for the repository containing ``path``."""
    cwd = path if path.is_dir() else path.parent
    proc = _run_git(cwd, ["remote", "get-url", remote], GIT_TIMEOUT_SECONDS)
    if proc is None or proc.returncode != 0:
        return None
    return remote_to_web_base(proc.stdout)
