"""Markdown-lite parsing for model replies.

Only the subset models actually use in chat replies is recognised:
blank-line separated paragraphs, numbered lists, dash/star lists and
``**bold**`` spans. Anything else is kept as plain paragraph text, so every
input produces a renderable tree.
"""

import re
from dataclasses import dataclass, field
from typing import Union

from rich.markup import escape

_BLOCK_SEPARATOR = re.compile(r"\n\n+")
_ORDERED_ITEM = re.compile(r"^\d+\.\s")
_UNORDERED_ITEM = re.compile(r"^[-*]\s")
_ORDERED_MARKER = re.compile(r"^\d+\.\s*")
_UNORDERED_MARKER = re.compile(r"^[-*]\s*")
_BOLD = re.compile(r"\*\*(.+?)\*\*")


@dataclass(frozen=True)
class TextSpan:
    text: str


@dataclass(frozen=True)
class BoldSpan:
    text: str


Span = Union[TextSpan, BoldSpan]


@dataclass(frozen=True)
class Paragraph:
    spans: list[Span] = field(default_factory=list)


@dataclass(frozen=True)
class ListItem:
    spans: list[Span] = field(default_factory=list)


@dataclass(frozen=True)
class OrderedList:
    items: list[ListItem] = field(default_factory=list)


@dataclass(frozen=True)
class UnorderedList:
    items: list[ListItem] = field(default_factory=list)


Block = Union[Paragraph, OrderedList, UnorderedList]


def parse_inline(text: str) -> list[Span]:
    """Split text into plain and bold spans.

    Scans left to right; the first ``**...**`` pair wins and matches never
    overlap. An unpaired ``**`` stays literal.
    """
    spans: list[Span] = []
    position = 0
    for match in _BOLD.finditer(text):
        if match.start() > position:
            spans.append(TextSpan(text[position:match.start()]))
        spans.append(BoldSpan(match.group(1)))
        position = match.end()
    if position < len(text):
        spans.append(TextSpan(text[position:]))
    return spans


def _list_items(block: str, marker: re.Pattern) -> list[ListItem]:
    lines = [line.strip() for line in block.split("\n") if line.strip()]
    return [ListItem(parse_inline(marker.sub("", line, count=1))) for line in lines]


def parse_block(block: str) -> Block:
    stripped = block.strip()
    if _ORDERED_ITEM.match(stripped):
        return OrderedList(_list_items(block, _ORDERED_MARKER))
    if _UNORDERED_ITEM.match(stripped):
        return UnorderedList(_list_items(block, _UNORDERED_MARKER))
    return Paragraph(parse_inline(block))


def parse_markdown(text: str) -> list[Block]:
    """Parse reply text into paragraph and list blocks."""
    return [parse_block(part) for part in _BLOCK_SEPARATOR.split(text or "")]


def _spans_plain(spans: list[Span]) -> str:
    return "".join(span.text for span in spans)


def _spans_rich(spans: list[Span]) -> str:
    parts = []
    for span in spans:
        if isinstance(span, BoldSpan):
            parts.append(f"[bold]{escape(span.text)}[/bold]")
        else:
            parts.append(escape(span.text))
    return "".join(parts)


def _render(blocks: list[Block], render_spans) -> str:
    rendered = []
    for block in blocks:
        if isinstance(block, OrderedList):
            rendered.append("\n".join(
                f"{i}. {render_spans(item.spans)}" for i, item in enumerate(block.items, 1)
            ))
        elif isinstance(block, UnorderedList):
            rendered.append("\n".join(f"• {render_spans(item.spans)}" for item in block.items))
        else:
            rendered.append(render_spans(block.spans))
    return "\n\n".join(rendered)


def render_plain(blocks: list[Block]) -> str:
    """Render blocks as plain text with emphasis markers removed."""
    return _render(blocks, _spans_plain)


def render_rich(blocks: list[Block]) -> str:
    """Render blocks as rich console markup."""
    return _render(blocks, _spans_rich)
