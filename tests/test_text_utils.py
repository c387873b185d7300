"""Tests for text utility functions."""

import pytest


class TestCountWords:
    def test_empty_string(self):
        from tools.text_utils import count_words
        assert count_words("") == 0

    def test_only_whitespace(self):
        from tools.text_utils import count_words
        assert count_words("  \t\n ") == 0

    def test_mixed_whitespace(self):
        from tools.text_utils import count_words
        assert count_words("one  two\tthree\nfour") == 4

    def test_unspaced_text_is_one_token(self):
        from tools.text_utils import count_words
        assert count_words("你好世界") == 1


class TestFormatWordCount:
    @pytest.mark.parametrize("count,expected", [
        (0, "0"),
        (999, "999"),
        (1000, "1.0k"),
        (2500, "2.5k"),
        (10000, "1.0万"),
        (123456, "12.3万"),
    ])
    def test_format(self, count, expected):
        from tools.text_utils import format_word_count
        assert format_word_count(count) == expected
