"""Create a recipe page from a free-text prompt."""

from __future__ import annotations

import logging
from typing import Optional

from notion_forge.errors import GenerationError
from notion_forge.models.recipe import Recipe
from notion_forge.notion.client import file_upload_cover, mention_comment
from notion_forge.notion.markdown import markdown_to_blocks
from notion_forge.recipes.mapping import (
    build_body_markdown,
    build_image_prompt,
    build_recipe_properties,
)
from notion_forge.recipes.prompts import CREATE_INSTRUCTIONS

logger = logging.getLogger(__name__)

CREATED_MESSAGE = "your recipe has been created!"


def create_recipe(
    notion,
    generator,
    prompt: str,
    database_id: str,
    user_id: Optional[str] = None,
) -> str:
    """Generate a recipe and its cover image, then persist it as a new page.

    Returns the new page id.
    """
    stage = "generate"
    logger.info("Recipe create start | database=%s", database_id)
    try:
        recipe = generator.generate_structured(
            input=prompt, instructions=CREATE_INSTRUCTIONS, schema=Recipe
        )
        if recipe is None:
            raise GenerationError("No recipe returned for prompt")

        stage = "image"
        image = generator.generate_image(build_image_prompt(recipe))
        upload_id = notion.upload_image(image, recipe.title)

        stage = "persist"
        page_id = notion.create_page(
            database_id,
            build_recipe_properties(recipe),
            children=markdown_to_blocks(build_body_markdown(recipe)),
            cover=file_upload_cover(upload_id),
        )

        stage = "comment"
        if not user_id:
            logger.warning("NOTION_USER_ID not set; posting comment without mention")
        notion.create_comment(page_id, mention_comment(CREATED_MESSAGE, user_id))
    except Exception:
        logger.exception("Recipe create failed | database=%s stage=%s", database_id, stage)
        raise
    logger.info("Recipe create success | page=%s title=%s", page_id, recipe.title)
    return page_id
