"""Line-oriented Markdown block parser: a fold over lines into block nodes"""

import re
from dataclasses import dataclass, replace
from functools import reduce
from typing import Optional

from mdcms.core.models import (
    Block, Blockquote, CodeBlock, Heading, ImageLine, ListBlock, Paragraph,
)


FENCE_RE = re.compile(r'^```(\w+)?$')
HEADING_RE = re.compile(r'^(#{1,6})\s')
BLOCKQUOTE_RE = re.compile(r'^>\s')
ORDERED_ITEM_RE = re.compile(r'^\d+\.\s')
UNORDERED_ITEM_RE = re.compile(r'^[-*]\s')
IMAGE_TOKEN_RE = re.compile(r'!\[.*?\]\(.*?\)')


@dataclass(frozen=True)
class _State:
    """Fold state. fence is None outside a code block, else the open block's language."""
    blocks: tuple[Block, ...] = ()
    fence: Optional[str] = None
    code: tuple[str, ...] = ()
    list_ordered: Optional[bool] = None   # None when no list is open
    list_items: tuple[str, ...] = ()
    paragraph: tuple[str, ...] = ()


def _flush_paragraph(state: _State) -> _State:
    if not state.paragraph:
        return state
    return replace(state, blocks=state.blocks + (Paragraph(' '.join(state.paragraph)),), paragraph=())


def _flush_list(state: _State) -> _State:
    if state.list_ordered is None:
        return state
    block = ListBlock(ordered=state.list_ordered, items=state.list_items)
    return replace(state, blocks=state.blocks + (block,), list_ordered=None, list_items=())


def _flush_code(state: _State) -> _State:
    if state.fence is None:
        return state
    block = CodeBlock(lang=state.fence, code='\n'.join(state.code))
    return replace(state, blocks=state.blocks + (block,), fence=None, code=())


def _is_list_item(line: str) -> bool:
    return bool(ORDERED_ITEM_RE.match(line) or UNORDERED_ITEM_RE.match(line))


def _emit(state: _State, block: Block) -> _State:
    """Headings, quotes and image lines stand alone: close the paragraph, then append."""
    state = _flush_paragraph(state)
    return replace(state, blocks=state.blocks + (block,))


def _list_item(state: _State, ordered: bool, text: str) -> _State:
    """Continue the open list, or close a list of the other kind and open a new one."""
    state = _flush_paragraph(state)
    if state.list_ordered is not ordered:
        state = replace(_flush_list(state), list_ordered=ordered)
    return replace(state, list_items=state.list_items + (text,))


def _step(state: _State, line: str) -> _State:
    fence = FENCE_RE.match(line)
    if fence:
        if state.fence is not None:
            return _flush_code(state)
        state = _flush_list(_flush_paragraph(state))
        return replace(state, fence=fence.group(1) or '')

    if state.fence is not None:
        return replace(state, code=state.code + (line,))

    if state.list_ordered is not None and line.strip() and not _is_list_item(line):
        state = _flush_list(state)

    heading = HEADING_RE.match(line)
    if heading:
        return _emit(state, Heading(level=len(heading.group(1)), text=line[heading.end():]))

    if BLOCKQUOTE_RE.match(line):
        return _emit(state, Blockquote(line[2:]))

    item = ORDERED_ITEM_RE.match(line)
    if item:
        return _list_item(state, True, line[item.end():])
    item = UNORDERED_ITEM_RE.match(line)
    if item:
        return _list_item(state, False, line[item.end():])

    if IMAGE_TOKEN_RE.search(line):
        return _emit(state, ImageLine(line))

    if line.strip():
        return replace(state, paragraph=state.paragraph + (line.strip(),))
    return _flush_paragraph(state)


def parse_blocks(markdown: str) -> tuple[Block, ...]:
    """Parse Markdown into an ordered tuple of block nodes.

    Open code block, list and paragraph are flushed at end of input, in that order.
    """
    state = reduce(_step, markdown.split('\n'), _State())
    return _flush_paragraph(_flush_list(_flush_code(state))).blocks
