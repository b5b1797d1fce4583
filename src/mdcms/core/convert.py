"""Markdown <-> HTML conversion for the editor surface

Fenced code without a language renders as a bare <pre><code> (no
language-text class), so html_to_markdown gives back the same bare fence.
"""

import html as htmllib
import re

from bs4 import BeautifulSoup, NavigableString, Tag

from mdcms.core.blocks import parse_blocks
from mdcms.core.inline import cleanup_html, format_inline
from mdcms.core.models import (
    Block, Blockquote, CodeBlock, Heading, ImageLine, ListBlock, Paragraph,
)


EMPTY_DOCUMENT = '<p></p>'
LANGUAGE_CLASS_RE = re.compile(r'language-(\w+)')
EXCESS_NEWLINES_RE = re.compile(r'\n{3,}')

DOUBLE_ENCODED = (
    ('&amp;amp;', '&amp;'),
    ('&amp;nbsp;', '&nbsp;'),
    ('&amp;lt;', '&lt;'),
    ('&amp;gt;', '&gt;'),
    ('&amp;quot;', '&quot;'),
    ('&amp;#39;', '&#39;'),
    ('&amp;#x27;', '&#x27;'),
    ('&amp;#x2F;', '&#x2F;'),
)


# --- Markdown -> HTML ---

def render_block(block: Block) -> str:
    """Wrap a block's raw text in its HTML tag. Inline syntax is left for format_inline."""
    if isinstance(block, Heading):
        return f'<h{block.level}>{block.text}</h{block.level}>'
    if isinstance(block, Paragraph):
        return f'<p>{block.text}</p>'
    if isinstance(block, Blockquote):
        return f'<blockquote>{block.text}</blockquote>'
    if isinstance(block, ListBlock):
        tag = 'ol' if block.ordered else 'ul'
        items = ''.join(f'<li>{item}</li>' for item in block.items)
        return f'<{tag}>{items}</{tag}>'
    if isinstance(block, CodeBlock):
        attr = f' class="language-{block.lang}"' if block.lang else ''
        return f'<pre><code{attr}>{htmllib.escape(block.code, quote=False)}</code></pre>'
    if isinstance(block, ImageLine):
        return block.raw
    raise TypeError(f"Unknown block type: {type(block).__name__}")


def markdown_to_html(md: str) -> str:
    """Convert editor Markdown to HTML. Empty input gives an empty paragraph."""
    if not md:
        return EMPTY_DOCUMENT
    md = md.replace('\x00', '')
    html = ''.join(render_block(b) for b in parse_blocks(md))
    html = cleanup_html(format_inline(html))
    return html or EMPTY_DOCUMENT


# --- HTML -> Markdown ---

def _code_language(el: Tag) -> str:
    for cls in el.get('class') or []:
        m = LANGUAGE_CLASS_RE.match(cls)
        if m:
            return m.group(1)
    return ''


def _fence(lang: str, code: str) -> str:
    return f'```{lang}\n{code}\n```\n\n'


def _convert(node, in_list: bool = False) -> str:
    if isinstance(node, NavigableString):
        # Comments, doctypes and CDATA are NavigableString subclasses.
        return str(node) if type(node) is NavigableString else ''
    if not isinstance(node, Tag):
        return ''

    tag = node.name.lower()
    if tag == 'li':
        return ''.join(_convert(child, True) for child in node.children).strip()

    child_in_list = in_list or tag in ('ul', 'ol')
    children = ''.join(_convert(child, child_in_list) for child in node.children)

    if tag in ('h1', 'h2', 'h3', 'h4', 'h5', 'h6'):
        return f"{'#' * int(tag[1])} {children}\n\n"
    if tag == 'p':
        return children if in_list else f'{children}\n\n'
    if tag in ('strong', 'b'):
        return f'**{children}**'
    if tag in ('em', 'i'):
        return f'*{children}*'
    if tag == 'code':
        if node.parent is not None and node.parent.name == 'pre':
            return _fence(_code_language(node), node.get_text())
        return f'`{node.get_text()}`'
    if tag == 'pre':
        code = node.find('code')
        if code is not None:
            return _fence(_code_language(code), code.get_text())
        return _fence('', node.get_text())
    if tag == 'blockquote':
        lines = [line for line in children.split('\n') if line.strip()]
        return '\n'.join(f'> {line}' for line in lines) + '\n\n'
    if tag == 'ul':
        items = node.find_all('li')
        return '\n'.join(f'- {_convert(item, True)}' for item in items) + '\n\n'
    if tag == 'ol':
        items = node.find_all('li')
        return '\n'.join(f'{i}. {_convert(item, True)}' for i, item in enumerate(items, 1)) + '\n\n'
    if tag == 'a':
        href = node.get('href') or ''
        return f'[{children or href}]({href})'
    if tag == 'img':
        return f"![{node.get('alt') or ''}]({node.get('src') or ''})"
    if tag == 'br':
        return '\n'
    if tag == 'div':
        return children if in_list else f'{children}\n'
    return children


def html_to_markdown(html: str) -> str:
    """Convert editor HTML to Markdown, tag by tag."""
    if not html:
        return ''
    soup = BeautifulSoup(html, 'html.parser')
    result = _convert(soup).strip()
    return EXCESS_NEWLINES_RE.sub('\n\n', result)


def decode_html_entities(text: str) -> str:
    """Replace named and numeric character references with the characters they stand for."""
    return htmllib.unescape(text) if text else text


def fix_double_encoded_entities(text: str) -> str:
    """Undo one level of entity double-encoding (&amp;lt; -> &lt;)."""
    if not text:
        return text
    for encoded, fixed in DOUBLE_ENCODED:
        text = text.replace(encoded, fixed)
    return text
