"""Tools package: text utilities."""

from tools.text_utils import count_words, format_word_count

__all__ = [
    "count_words",
    "format_word_count",
]
