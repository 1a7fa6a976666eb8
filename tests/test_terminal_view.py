"""Tests for the terminal host adapter."""

from __future__ import annotations

import unittest
from datetime import datetime, timezone
from pathlib import Path

from lazyblame.ansi import strip_ansi
from lazyblame.decorations import DARK_STYLE, LIGHT_STYLE, AnnotationDescriptor
from lazyblame.hunks import Selection
from lazyblame.terminal_view import (
    TerminalEditor,
    annotation_sgr,
    blend,
    format_annotation,
    hyperlink,
    parse_rgba,
)

NOW = datetime(2018, 12, 1, 21, 52, 45, tzinfo=timezone.utc)
SOURCE = "a = 1\nb = 2\nc = 3\n"


def _descriptor(line: int, label: str = "a, 3 months ago: • c", link: str = "d") -> AnnotationDescriptor:
    return AnnotationDescriptor(target_line=line, label=label, hover_text="c", link_url=link)


class ColorTests(unittest.TestCase):
    def test_parse_rgba(self) -> None:
        self.assertEqual(parse_rgba("rgba(15, 43, 89, 0.65)"), ((15, 43, 89), 0.65))
        self.assertEqual(parse_rgba("rgb(1,2,3)"), ((1, 2, 3), 1.0))
        with self.assertRaises(ValueError):
            parse_rgba("#ffffff")

    def test_blend(self) -> None:
        self.assertEqual(blend((255, 255, 255), 0.5, (0, 0, 0)), (128, 128, 128))
        self.assertEqual(blend((10, 20, 30), 1.0, (200, 200, 200)), (10, 20, 30))

    def test_annotation_sgr_uses_truecolor(self) -> None:
        sgr = annotation_sgr(LIGHT_STYLE, (255, 255, 255))
        self.assertTrue(sgr.startswith("\033[48;2;"))
        self.assertIn("\033[38;2;", sgr)
        self.assertNotEqual(annotation_sgr(DARK_STYLE, (30, 30, 30)), sgr)


class FormatAnnotationTests(unittest.TestCase):
    def test_plain_when_no_color(self) -> None:
        self.assertEqual(format_annotation(_descriptor(0), "dark", no_color=True), "a, 3 months ago: • c")

    def test_hyperlink_only_for_absolute_urls(self) -> None:
        self.assertEqual(hyperlink("x", "commit/abc"), "x")
        self.assertEqual(hyperlink("x", "https://h.test/c"), "\033]8;;https://h.test/c\033\\x\033]8;;\033\\")

    def test_colored_annotation_strips_to_label(self) -> None:
        rendered = format_annotation(_descriptor(0, link="https://h.test/c"), "light", no_color=False)
        self.assertEqual(strip_ansi(rendered).strip(), "a, 3 months ago: • c")


class TerminalEditorTests(unittest.TestCase):
    def test_plain_render_places_annotations_on_target_lines(self) -> None:
        editor = TerminalEditor(
            path=Path("example.py"),
            source=SOURCE,
            current_selections=[Selection.lines(1)],
            no_color=True,
        )
        editor.set_decorations([_descriptor(1, "e, 3 weeks ago: • g")])
        self.assertEqual(
            editor.render(),
            "1  a = 1\n2▌ b = 2    e, 3 weeks ago: • g\n3  c = 3\n",
        )

    def test_document_uri_is_file_uri(self) -> None:
        editor = TerminalEditor(path=Path("/tmp/example.py"), source="")
        self.assertEqual(editor.document_uri(), "file:///tmp/example.py")

    def test_control_characters_are_neutralized(self) -> None:
        editor = TerminalEditor(path=Path("x.txt"), source="bell\x07\n", no_color=True)
        self.assertEqual(editor.render_lines(), ["1  bell\\x07"])

    def test_colored_render_keeps_text_and_line_count(self) -> None:
        editor = TerminalEditor(path=Path("example.py"), source=SOURCE)
        editor.set_decorations([_descriptor(2)])
        rows = editor.render_lines()
        self.assertEqual(len(rows), 3)
        self.assertEqual(strip_ansi(rows[0]), "1  a = 1")
        self.assertEqual(strip_ansi(rows[2]), "3  c = 3     a, 3 months ago: • c ")


if __name__ == "__main__":
    unittest.main()
