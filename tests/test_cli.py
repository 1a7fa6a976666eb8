"""End-to-end tests for the ``lazyblame`` command."""

from __future__ import annotations

import contextlib
import io
import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from lazyblame import cli, settings

HUNKS = [
    {
        "startLine": line,
        "endLine": line + 1,
        "author": {"person": {"displayName": name}, "date": date},
        "rev": rev,
        "message": message,
        "commit": {"url": url},
    }
    for line, name, date, rev, message, url in (
        (1, "a", "2018-09-10T21:52:45Z", "b", "c", "d"),
        (2, "e", "2018-11-10T21:52:45Z", "f", "g", "h"),
        (3, "i", "2018-10-10T21:52:45Z", "j", "k", "l"),
    )
]
NOW = "2018-12-01T21:52:45Z"


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.root = Path(tmp.name)
        self.source = self.root / "example.txt"
        self.source.write_text("one\ntwo\nthree\n", encoding="utf-8")
        self.hunks = self.root / "hunks.json"
        self.hunks.write_text(json.dumps(HUNKS), encoding="utf-8")
        self.config_path = self.root / "settings.json"
        patcher = mock.patch("lazyblame.settings.CONFIG_PATH", self.config_path)
        patcher.start()
        self.addCleanup(patcher.stop)

    def _run(self, *extra: str) -> str:
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            cli.main([str(self.source), "--hunks", str(self.hunks), "--now", NOW, "--no-color", *extra])
        return out.getvalue()

    def test_selection_annotates_matching_hunk(self) -> None:
        self.assertEqual(
            self._run("--select", "2"),
            "1  one\n2▌ two    e, 3 weeks ago: • g\n3  three\n",
        )

    def test_whole_file_without_selection(self) -> None:
        output = self._run()
        self.assertIn("1  one    a, 3 months ago: • c", output)
        self.assertIn("3  three    i, 2 months ago: • k", output)

    def test_mode_none_prints_source_only(self) -> None:
        self.assertEqual(self._run("--mode", "none"), "1  one\n2  two\n3  three\n")

    def test_json_output_with_link_base(self) -> None:
        payload = json.loads(self._run("--select", "2-3", "--json", "--link-base", "https://sourcegraph.test"))
        self.assertEqual([item["range"]["start"] for item in payload], [1, 2])
        self.assertEqual(payload[0]["after"]["linkURL"], "https://sourcegraph.test/h")
        self.assertEqual(payload[0]["after"]["contentText"], "e, 3 weeks ago: • g")

    def test_dump_hunks_prints_hunk_json_sorted_by_line(self) -> None:
        self.hunks.write_text(json.dumps(list(reversed(HUNKS))), encoding="utf-8")
        self.assertEqual(json.loads(self._run("--dump-hunks")), HUNKS)

    def test_startup_migrates_deprecated_settings(self) -> None:
        settings.save_config({"git.blame.lineDecorations": False})
        self.assertEqual(self._run(), "1  one\n2  two\n3  three\n")
        self.assertEqual(settings.load_config()["git.blame.decorations"], "none")

    def test_missing_file_exits(self) -> None:
        with self.assertRaises(SystemExit):
            cli.main([str(self.root / "missing.txt"), "--hunks", str(self.hunks)])

    def test_invalid_selection_exits(self) -> None:
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                cli.main([str(self.source), "--select", "0-x"])


if __name__ == "__main__":
    unittest.main()
