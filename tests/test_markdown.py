from notion_forge.notion.markdown import (
    markdown_to_blocks,
    markdown_to_rich_text,
    parse_inline,
    rich_text_to_plain,
)


def test_inline_formatting_becomes_annotations():
    items = markdown_to_rich_text("Use **fresh** basil, *not* `dried` ~~ever~~")
    texts = [i["text"]["content"] for i in items]
    assert texts == ["Use ", "fresh", " basil, ", "not", " ", "dried", " ", "ever"]
    assert items[1]["annotations"] == {"bold": True}
    assert items[3]["annotations"] == {"italic": True}
    assert items[5]["annotations"] == {"code": True}
    assert items[7]["annotations"] == {"strikethrough": True}
    assert "annotations" not in items[0]


def test_links_and_nested_bold():
    items = markdown_to_rich_text("[**Practice** now](https://example.com/x)")
    assert items[0]["text"] == {"content": "Practice", "link": {"url": "https://example.com/x"}}
    assert items[0]["annotations"] == {"bold": True}
    assert items[1]["text"]["content"] == " now"


def test_unclosed_markers_are_kept_literally():
    assert rich_text_to_plain(markdown_to_rich_text("2 * 3 = 6 and [x")) == "2 * 3 = 6 and [x"
    assert rich_text_to_plain(markdown_to_rich_text("**open")) == "**open"


def test_escaped_characters():
    spans = parse_inline(r"\*literal\*")
    assert [s.text for s in spans] == ["*literal*"]


def test_blocks_from_markdown():
    blocks = markdown_to_blocks(
        "# Preparation\n1. Dice\n2) Chop\n\n## Notes\n- one\nline a\nline b\n\nafter"
    )
    assert [b["type"] for b in blocks] == [
        "heading_1",
        "numbered_list_item",
        "numbered_list_item",
        "heading_2",
        "bulleted_list_item",
        "paragraph",
        "paragraph",
    ]
    assert rich_text_to_plain(blocks[2]["numbered_list_item"]["rich_text"]) == "Chop"
    assert rich_text_to_plain(blocks[5]["paragraph"]["rich_text"]) == "line a\nline b"
    assert blocks[0]["object"] == "block"


def test_bold_line_is_a_paragraph_not_a_bullet():
    blocks = markdown_to_blocks("**Tip:** salt early")
    assert blocks[0]["type"] == "paragraph"


def test_escaped_delimiters_inside_bold():
    items = markdown_to_rich_text(r"**Eggs\*\*** - 2")
    assert items[0] == {"type": "text", "text": {"content": "Eggs**"}, "annotations": {"bold": True}}
    assert rich_text_to_plain(items) == "Eggs** - 2"
