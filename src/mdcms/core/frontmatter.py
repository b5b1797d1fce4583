"""Frontmatter header parsing and serialization (flat key: value pairs)"""

import re
from typing import Any, Union


FrontmatterValue = Union[str, bool]

FRONTMATTER_RE = re.compile(r'^---\s*\n(.*?)\n---\s*\n(.*)$', re.DOTALL)

# Characters that make a bare value ambiguous when read back as YAML-like text.
_SPECIAL_CHARS = (':', '"', '#', '\n', '\r')
_INDICATORS = tuple("'[]{}&*!|>%@`,?-")
_ESCAPES = {'n': '\n', 'r': '\r'}


def _unquote(value: str) -> str:
    """Strip one layer of matching quotes; double-quoted values unescape \\", \\\\, \\n and \\r."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        inner = value[1:-1]
        if value[0] == '"':
            inner = re.sub(r'\\(["\\nr])', lambda m: _ESCAPES.get(m.group(1), m.group(1)), inner)
        return inner
    return value


def parse_frontmatter(raw: str) -> tuple[dict[str, FrontmatterValue], str]:
    """Return (frontmatter, body). Text without a header comes back as ({}, raw)."""
    m = FRONTMATTER_RE.match(raw)
    if not m:
        return {}, raw

    frontmatter: dict[str, FrontmatterValue] = {}
    for line in m.group(1).split('\n'):
        trimmed = line.strip()
        if not trimmed or trimmed.startswith('#'):
            continue
        key, sep, value = trimmed.partition(':')
        if not sep:
            continue
        value = _unquote(value.strip())
        if value == 'true':
            frontmatter[key.strip()] = True
        elif value == 'false':
            frontmatter[key.strip()] = False
        else:
            frontmatter[key.strip()] = value
    return frontmatter, m.group(2)


def _needs_quotes(value: str) -> bool:
    return (
        not value
        or value != value.strip()
        or any(c in value for c in _SPECIAL_CHARS)
        or value.startswith(_INDICATORS)
    )


def format_value(value: Any) -> str:
    """Render a single frontmatter value, quoting strings that would not read back verbatim."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (list, tuple, set)):
        value = ','.join(str(v) for v in value)
    text = str(value)
    if _needs_quotes(text):
        escaped = (
            text.replace('\\', '\\\\')
            .replace('"', '\\"')
            .replace('\n', '\\n')
            .replace('\r', '\\r')
        )
        return f'"{escaped}"'
    return text


def serialize_frontmatter(frontmatter: dict[str, Any], body: str) -> str:
    """Prefix body with a --- delimited header. Keys with None values are skipped."""
    lines = [f"{key}: {format_value(value)}" for key, value in frontmatter.items() if value is not None]
    if not lines:
        return body
    return "---\n" + "\n".join(lines) + "\n---\n\n" + body


def split_list(value: FrontmatterValue | None) -> list[str]:
    """Split a comma-joined frontmatter value into trimmed, non-empty items."""
    if value is None or isinstance(value, bool):
        return []
    return [item.strip() for item in value.split(',') if item.strip()]
