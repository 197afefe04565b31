"""Create a Spanish-language tip page from a free-text prompt."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import quote

from notion_forge.errors import GenerationError
from notion_forge.models.tip import SpanishTip
from notion_forge.notion.client import mention_comment
from notion_forge.notion.markdown import markdown_to_blocks
from notion_forge.notion.properties import PropertyKind, encode

logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "You are a positive and cheerful spanish language tutor that provides tips to help people learn Spanish. "
    "Each tip should be clear, and practical with enough information for me to learn the concept that is being discussed."
)
CREATED_MESSAGE = "your Spanish tip has been created!"
CHAT_URL = "https://chat.openai.com/?q="

# (attribute, Notion property, kind)
TIP_FIELDS = (
    ("title", "Name", PropertyKind.TITLE),
    ("level", "CEFR Level", PropertyKind.SELECT),
    ("category", "Category", PropertyKind.SELECT),
    ("subcategory", "Subcategory", PropertyKind.SELECT),
)
LAST_REVIEWED = "Last Reviewed"


def build_tip_properties(tip: SpanishTip, reviewed_at: datetime | None = None) -> dict:
    reviewed_at = reviewed_at or datetime.now(timezone.utc)
    properties = {prop: encode(kind, getattr(tip, attr)) for attr, prop, kind in TIP_FIELDS}
    properties[LAST_REVIEWED] = encode(PropertyKind.DATE, {"start": reviewed_at.isoformat()})
    return properties


def practice_link(tip: SpanishTip) -> str:
    query = (
        "You are a Spanish language tutor that provides tips to help people learn Spanish. "
        f'I am currently studying the topic "{tip.title}", and I want to practice it. '
        "Please provide me with practice prompts that I can use to improve my understanding of this topic."
    )
    return CHAT_URL + quote(query, safe="")


def build_tip_markdown(tip: SpanishTip) -> str:
    return (
        f"[Practice with ChatGPT]({practice_link(tip)})\n\n"
        f"# Explanation\n{tip.explanation}\n\n"
        f"# Examples\n{tip.uses}\n\n"
        f"# Practice Prompt\n{tip.practice_prompt}"
    )


def create_tip(
    notion,
    generator,
    prompt: str,
    database_id: str,
    user_id: Optional[str] = None,
) -> str:
    stage = "generate"
    logger.info("Tip create start | database=%s", database_id)
    try:
        tip = generator.generate_structured(input=prompt, instructions=INSTRUCTIONS, schema=SpanishTip)
        if tip is None:
            raise GenerationError("No tip returned for prompt")

        stage = "persist"
        page_id = notion.create_page(
            database_id,
            build_tip_properties(tip),
            children=markdown_to_blocks(build_tip_markdown(tip)),
        )

        stage = "comment"
        if not user_id:
            logger.warning("NOTION_USER_ID not set; posting comment without mention")
        notion.create_comment(page_id, mention_comment(CREATED_MESSAGE, user_id))
    except Exception:
        logger.exception("Tip create failed | database=%s stage=%s", database_id, stage)
        raise
    logger.info("Tip create success | page=%s title=%s", page_id, tip.title)
    return page_id
