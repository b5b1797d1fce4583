"""Slug generation for posts and pages created without an explicit slug"""

import re
import unicodedata


def slugify(text: str, fallback: str = "untitled") -> str:
    """Lowercase, ASCII-fold, and hyphen-join text into a URL-safe slug."""
    text = unicodedata.normalize('NFKD', text).encode('ascii', 'ignore').decode('ascii')
    text = re.sub(r'[^\w\s-]', '', text.lower())
    text = re.sub(r'[\s_-]+', '-', text).strip('-')
    return text or fallback
