"""Command-line front door for lazyblame.

Parses CLI options, loads settings and source text, then runs one blame
decoration cycle and prints the annotated file (or descriptor JSON).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from loguru import logger

from .blame import HunkLookup
from .decorations import RenderOptions
from .git_blame import BlameLookupError, query_git_hunks, remote_web_base
from .host import BlameDecorator, utc_now
from .hunks import Hunk, Selection, hunk_to_dict, load_hunks_json
from .relative_time import parse_timestamp
from .settings import (
    DECORATION_MODES,
    DECORATIONS_KEY,
    load_config,
    migrate_decorations_setting,
    update_setting,
)
from .syntax import DEFAULT_STYLE, read_text
from .terminal_view import THEME_BACKGROUNDS, TerminalEditor


def _selection_arg(value: str) -> Selection:
    """argparse type for 1-based ``N`` or ``A-B`` line selections."""
    start_text, sep, end_text = value.partition("-")
    try:
        start = int(start_text)
        end = int(end_text) if sep else start
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid line selection: {value!r}") from exc
    if start <= 0 or end <= 0:
        raise argparse.ArgumentTypeError("line numbers must be >= 1")
    return Selection.lines(start - 1, end - 1)


def _timestamp_arg(value: str) -> datetime:
    try:
        return parse_timestamp(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid ISO-8601 timestamp: {value!r}") from exc


def configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


def json_file_lookup(hunks_path: Path) -> HunkLookup:
    """Hunk lookup that serves the same JSON file for any document."""

    async def lookup(uri: str) -> list[Hunk]:
        return await asyncio.to_thread(load_hunks_json, hunks_path)

    return lookup


def load_settings() -> dict[str, object]:
    """Load settings, migrating deprecated decoration keys once."""
    settings = load_config()
    migrated = migrate_decorations_setting(settings, update_setting)
    if migrated is not None:
        settings[DECORATIONS_KEY] = migrated
    return settings


def dump_hunks(lookup: HunkLookup, uri: str) -> None:
    """Write the hunks returned by ``lookup`` for ``uri`` as a JSON list."""
    try:
        hunks = asyncio.run(lookup(uri))
    except (BlameLookupError, OSError, ValueError) as exc:
        raise SystemExit(f"Cannot load blame hunks: {exc}") from exc
    sys.stdout.write(json.dumps([hunk_to_dict(hunk) for hunk in hunks], indent=2, ensure_ascii=False) + "\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Show git blame annotations at the end of source lines."
    )
    parser.add_argument("path", help="File to annotate.")
    parser.add_argument(
        "--select",
        action="append",
        type=_selection_arg,
        metavar="N|A-B",
        help="1-based line or line range to annotate; repeatable. Default: whole file.",
    )
    parser.add_argument(
        "--mode",
        choices=DECORATION_MODES,
        default=None,
        help="Override the git.blame.decorations setting.",
    )
    parser.add_argument("--hunks", metavar="JSON", help="Read blame hunks from a JSON file instead of git.")
    parser.add_argument("--link-base", default=None, help="Base URL that commit links are resolved against.")
    parser.add_argument("--now", type=_timestamp_arg, default=None, help="Reference time (ISO-8601).")
    parser.add_argument("--theme", choices=tuple(THEME_BACKGROUNDS), default="dark", help="Annotation palette.")
    parser.add_argument("--style", default=DEFAULT_STYLE, help="Pygments style name.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output even on TTY.")
    parser.add_argument("--json", action="store_true", help="Print annotation descriptors as JSON.")
    parser.add_argument("--dump-hunks", action="store_true", help="Print the looked-up blame hunks as JSON and exit.")
    parser.add_argument("--verbose", action="store_true", help="Log debug details to stderr.")
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Parse CLI arguments and print one blame decoration cycle for a file."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    path = Path(args.path)
    if not path.is_file():
        raise SystemExit(f"File not found: {path}")

    settings = load_settings()
    if args.mode is not None:
        settings[DECORATIONS_KEY] = args.mode

    if args.hunks is not None:
        hunks_path = Path(args.hunks)
        if not hunks_path.is_file():
            raise SystemExit(f"Hunks file not found: {hunks_path}")
        lookup = json_file_lookup(hunks_path)
        link_base = args.link_base
    else:
        lookup = query_git_hunks
        link_base = args.link_base or remote_web_base(path.resolve())

    if args.dump_hunks:
        dump_hunks(lookup, path.resolve().as_uri())
        return

    now = args.now or utc_now()
    editor = TerminalEditor(
        path=path,
        source=read_text(path),
        current_selections=args.select,
        theme=args.theme,
        style=args.style,
        no_color=args.no_color or args.json or not sys.stdout.isatty(),
    )
    decorator = BlameDecorator(
        settings_provider=lambda: settings,
        query_hunks=lookup,
        clock=lambda: now,
        options=RenderOptions(link_base=link_base),
    )
    decorations = asyncio.run(decorator.decorate(editor))
    if decorations is None:
        raise SystemExit(1)

    if args.json:
        sys.stdout.write(json.dumps([item.to_dict() for item in decorations], indent=2, ensure_ascii=False) + "\n")
        return
    sys.stdout.write(editor.render())


if __name__ == "__main__":
    main()
