"""Inline Markdown substitutions applied to rendered block HTML, plus cleanup"""

import re


IMAGE_RE = re.compile(r'!\[([^\]]*)\]\(([^)]+)\)')
INLINE_CODE_RE = re.compile(r'`([^`]+)`')
LINK_RE = re.compile(r'\[([^\]]+)\]\(([^)]+)\)')
BOLD_RE = re.compile(r'\*\*([^*]+)\*\*')
ITALIC_RE = re.compile(r'(?<!\*)\*([^*]+)\*(?!\*)')

PRE_RE = re.compile(r'<pre>.*?</pre>', re.DOTALL)
PLACEHOLDER_RE = re.compile(r'\x00(\d+)\x00')

# Block tags that must not sit inside a <p>.
_UNWRAP_TAGS = ('h[1-6]', 'blockquote', 'ul', 'ol', 'pre')


def format_inline(html: str) -> str:
    """Apply images, inline code, links, bold, italic in that order.

    Code blocks, images and code spans are parked behind placeholders once
    produced, so later rules never see their text.
    """
    parked: list[str] = []

    def _park(fragment: str) -> str:
        parked.append(fragment)
        return f'\x00{len(parked) - 1}\x00'

    html = PRE_RE.sub(lambda m: _park(m.group(0)), html)
    html = IMAGE_RE.sub(lambda m: _park(f'<img src="{m.group(2)}" alt="{m.group(1)}">'), html)
    html = INLINE_CODE_RE.sub(lambda m: _park(f'<code>{m.group(1)}</code>'), html)
    html = LINK_RE.sub(r'<a href="\2" target="_blank" rel="noopener noreferrer">\1</a>', html)
    html = BOLD_RE.sub(r'<strong>\1</strong>', html)
    html = ITALIC_RE.sub(r'<em>\1</em>', html)

    # Parked fragments may contain earlier placeholders (an image inside a code span).
    while PLACEHOLDER_RE.search(html):
        html = PLACEHOLDER_RE.sub(lambda m: parked[int(m.group(1))], html)
    return html


def cleanup_html(html: str) -> str:
    """Drop empty paragraphs and <br>, and unwrap block tags a paragraph swallowed."""
    html = html.replace('<p></p>', '')
    for tag in _UNWRAP_TAGS:
        html = re.sub(rf'<p>(<{tag}>)', r'\1', html)
        html = re.sub(rf'(</{tag}>)</p>', r'\1', html)
    return html.replace('<br>', '')
