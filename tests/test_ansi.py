from __future__ import annotations

import unittest

from lazyblame.ansi import ELLIPSIS, display_width, strip_ansi, truncate_to_width


class TruncateToWidthTests(unittest.TestCase):
    def test_text_that_fits_is_unchanged(self) -> None:
        self.assertEqual(truncate_to_width("abc", 3), "abc")
        self.assertEqual(truncate_to_width("", 0), "")

    def test_cuts_at_fixed_width_and_appends_ellipsis(self) -> None:
        self.assertEqual(truncate_to_width("abcdef", 4), "abcd" + ELLIPSIS)

    def test_wide_characters_count_two_columns(self) -> None:
        self.assertEqual(display_width("漢字"), 4)
        self.assertEqual(truncate_to_width("漢字漢字", 5), "漢字" + ELLIPSIS)

    def test_combining_marks_stay_with_their_base(self) -> None:
        text = "cafe\u0301 au lait"
        self.assertEqual(display_width(text), 12)
        self.assertEqual(truncate_to_width(text, 4), "cafe\u0301" + ELLIPSIS)
        self.assertEqual(truncate_to_width("abce\u0301", 3), "abc" + ELLIPSIS)

    def test_joiners_and_variation_selectors_are_zero_width(self) -> None:
        self.assertEqual(display_width("\U0001F44D\ufe0f"), 2)
        self.assertEqual(display_width("\U0001F469\u200d\U0001F4BB"), 4)
        self.assertEqual(truncate_to_width("ok\U0001F44D\ufe0f", 4), "ok\U0001F44D\ufe0f")

    def test_cut_inside_emoji_sequence_drops_dangling_joiner(self) -> None:
        text = "ab\U0001F469\u200d\U0001F4BBcd"
        self.assertEqual(truncate_to_width(text, 5), "ab\U0001F469" + ELLIPSIS)

    def test_trailing_whitespace_is_removed_before_ellipsis(self) -> None:
        self.assertEqual(truncate_to_width("abc   defg", 5), "abc" + ELLIPSIS)

    def test_escape_sequences_do_not_count(self) -> None:
        styled = "\033[31mred\033[0m"
        self.assertEqual(display_width(styled), 3)
        self.assertEqual(strip_ansi(styled), "red")
        self.assertEqual(strip_ansi("\033]8;;https://x.test\033\\link\033]8;;\033\\"), "link")


if __name__ == "__main__":
    unittest.main()
