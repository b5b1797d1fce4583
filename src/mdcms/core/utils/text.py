"""Word count and reading time for document bodies"""

import math
import re


TAG_RE = re.compile(r'<[^>]*>')


def word_count(text: str) -> int:
    """Count whitespace-separated words, ignoring HTML tags."""
    if not text:
        return 0
    return len(TAG_RE.sub(' ', text).split())


def reading_time(words: int, words_per_minute: int = 200) -> int:
    """Minutes needed to read `words` words, rounded up, at least 1."""
    return max(1, math.ceil(words / words_per_minute))


def format_reading_time(minutes: int) -> str:
    return f"{minutes} min read"
