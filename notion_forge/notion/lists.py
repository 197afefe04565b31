"""Key/value lists stored in a single rich-text property.

Each entry is written as one ``**key** - value`` line. Reading splits each
line on the first " - ", so a key that itself contains " - " does not come
back intact. Markdown characters in keys and values are backslash-escaped
so they survive the trip through rich text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from notion_forge.notion.markdown import markdown_to_rich_text

SEPARATOR = " - "
_MARKDOWN_CHARS = re.compile(r"([\\*~`\[])")


@dataclass(frozen=True)
class ListEntry:
    key: str
    value: str


def escape_markdown(text: str) -> str:
    return _MARKDOWN_CHARS.sub(r"\\\1", text)


def serialize_list(entries: Iterable[ListEntry]) -> str:
    return "\n".join(
        f"**{escape_markdown(entry.key)}**{SEPARATOR}{escape_markdown(entry.value)}"
        for entry in entries
    )


def encode_list(entries: Iterable[ListEntry]) -> list[dict]:
    return markdown_to_rich_text(serialize_list(entries))


def _strip_bold(text: str) -> str:
    text = text.strip()
    if len(text) >= 4 and text.startswith("**") and text.endswith("**"):
        text = text[2:-2]
    return text.strip()


def parse_list(text: str) -> list[ListEntry]:
    entries: list[ListEntry] = []
    for line in (text or "").split("\n"):
        key, sep, value = line.partition(SEPARATOR)
        if not sep:
            continue
        key = _strip_bold(key)
        if not key:
            continue
        entries.append(ListEntry(key, value.strip()))
    return entries
