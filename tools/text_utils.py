"""Text utilities: word counting and display formatting."""


def count_words(text: str) -> int:
    """Count whitespace-delimited tokens in text.

    This is the cached ``word_count`` of chapters and versions, so it must
    stay a pure function of the text.
    """
    return len(text.split())


def format_word_count(count: int) -> str:
    """Format a word count for compact display in chapter listings.

    Counts of ten thousand and above use the 万 unit, thousands use ``k``.
    """
    if count >= 10000:
        return f"{count / 10000:.1f}万"
    if count >= 1000:
        return f"{count / 1000:.1f}k"
    return str(count)
