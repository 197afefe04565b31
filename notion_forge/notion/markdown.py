"""Markdown to Notion rich text and blocks.

Generated content (descriptions, ingredient lists, step bodies) is written as
markdown. Notion stores formatting as annotations on rich-text segments, so
`**bold**` must become a bold segment rather than literal asterisks.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional

import parsy as P

logger = logging.getLogger(__name__)

# Notion rejects text objects longer than this
MAX_TEXT_LENGTH = 2000


@dataclass
class Span:
    text: str
    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    code: bool = False
    link: Optional[str] = None

    def same_format(self, other: "Span") -> bool:
        return (
            self.bold == other.bold
            and self.italic == other.italic
            and self.strikethrough == other.strikethrough
            and self.code == other.code
            and self.link == other.link
        )


def _apply(spans: list[Span], **attrs) -> list[Span]:
    for span in spans:
        for key, value in attrs.items():
            setattr(span, key, value)
    return spans


def _flatten(items) -> list[Span]:
    flat: list[Span] = []
    for item in items:
        if isinstance(item, list):
            flat.extend(item)
        else:
            flat.append(item)
    return flat


def _merge(spans: list[Span]) -> list[Span]:
    merged: list[Span] = []
    for span in spans:
        if not span.text:
            continue
        if merged and merged[-1].same_format(span):
            merged[-1].text += span.text
        else:
            merged.append(span)
    return merged


_SPECIAL = set("\\*~`[")


def _make_inline_parser():
    def parse_inner(text: str) -> list[Span]:
        if not text:
            return []
        try:
            return inline.parse(text)
        except P.ParseError:
            return [Span(text)]

    escaped = (P.string("\\") >> P.char_from("\\*~`[]_")).map(Span)

    code = (P.string("`") >> P.regex(r"[^`]+") << P.string("`")).map(
        lambda t: Span(t, code=True)
    )

    # inner content is captured by regex up to the closing delimiter, then parsed again
    bold = (P.string("**") >> P.regex(r"(?:\\.|[^*\\]|\*(?!\*))+") << P.string("**")).map(
        lambda inner: _apply(parse_inner(inner), bold=True)
    )
    strikethrough = (P.string("~~") >> P.regex(r"(?:\\.|[^~\\]|~(?!~))+") << P.string("~~")).map(
        lambda inner: _apply(parse_inner(inner), strikethrough=True)
    )
    italic = (P.string("*") >> P.regex(r"(?:\\.|[^*\\\n])+") << P.string("*")).map(
        lambda inner: _apply(parse_inner(inner), italic=True)
    )

    @P.generate
    def link():
        yield P.string("[")
        label = yield P.regex(r"[^\[\]]*")
        yield P.string("](")
        url = yield P.regex(r"[^)\s]+")
        yield P.string(")")
        return _apply(parse_inner(label), link=url)

    literal_run = P.test_char(lambda c: c not in _SPECIAL, "literal").at_least(1).map(
        lambda chars: Span("".join(chars))
    )
    # a special character that did not open a construct is kept as text
    fallback = P.any_char.map(Span)

    inline = (
        escaped | code | bold | strikethrough | italic | link | literal_run | fallback
    ).many().map(_flatten)
    return inline


_inline_parser = _make_inline_parser()


def parse_inline(text: str) -> list[Span]:
    if not text:
        return []
    try:
        return _merge(_inline_parser.parse(text))
    except P.ParseError as e:
        logger.warning("Inline markdown parse failed; using plain text | error=%s", e)
        return [Span(text)]


def _chunks(text: str, limit: int = MAX_TEXT_LENGTH) -> list[str]:
    return [text[i : i + limit] for i in range(0, len(text), limit)] or [""]


def spans_to_rich_text(spans: Iterable[Span]) -> list[dict]:
    out: list[dict] = []
    for span in spans:
        annotations = {}
        if span.bold:
            annotations["bold"] = True
        if span.italic:
            annotations["italic"] = True
        if span.strikethrough:
            annotations["strikethrough"] = True
        if span.code:
            annotations["code"] = True
        for chunk in _chunks(span.text):
            item: dict = {"type": "text", "text": {"content": chunk}}
            if span.link:
                item["text"]["link"] = {"url": span.link}
            if annotations:
                item["annotations"] = dict(annotations)
            out.append(item)
    return out


def plain_rich_text(text: str) -> list[dict]:
    """Wrap a plain string as text segments, split at Notion's length limit."""
    if not text:
        return []
    return [{"type": "text", "text": {"content": chunk}} for chunk in _chunks(text)]


def markdown_to_rich_text(text: str) -> list[dict]:
    return spans_to_rich_text(parse_inline(text))


def rich_text_to_plain(items: Iterable[dict]) -> str:
    """Concatenate the text of Notion rich-text segments, in order."""
    parts = []
    for item in items or []:
        plain = item.get("plain_text")
        if plain is None:
            plain = (item.get("text") or {}).get("content", "")
        parts.append(plain or "")
    return "".join(parts)


_HEADING = re.compile(r"^(#{1,3})\s+(.*)$")
_NUMBERED = re.compile(r"^\d+[.)]\s+(.*)$")
_BULLETED = re.compile(r"^[-*+]\s+(.*)$")


def _block(block_type: str, text: str) -> dict:
    return {
        "object": "block",
        "type": block_type,
        block_type: {"rich_text": markdown_to_rich_text(text)},
    }


def markdown_to_blocks(text: str) -> list[dict]:
    """Convert line-oriented markdown into Notion block objects.

    Supports headings (#, ##, ###), numbered and bulleted list items and
    paragraphs; consecutive plain lines form one paragraph.
    """
    blocks: list[dict] = []
    paragraph: list[str] = []

    def flush() -> None:
        if paragraph:
            blocks.append(_block("paragraph", "\n".join(paragraph)))
            paragraph.clear()

    for raw in (text or "").splitlines():
        line = raw.strip()
        if not line:
            flush()
            continue
        m = _HEADING.match(line)
        if m:
            flush()
            blocks.append(_block(f"heading_{len(m.group(1))}", m.group(2)))
            continue
        m = _NUMBERED.match(line)
        if m:
            flush()
            blocks.append(_block("numbered_list_item", m.group(1)))
            continue
        m = _BULLETED.match(line)
        if m:
            flush()
            blocks.append(_block("bulleted_list_item", m.group(1)))
            continue
        paragraph.append(line)
    flush()
    return blocks
