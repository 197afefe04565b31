"""Recipe modification through #modify comments.

A run moves through fetching -> authorizing -> regenerating -> rendering ->
persisting -> commenting -> done. Any failure moves it to `failed` and is
re-raised; writes that already happened are not rolled back, so a failure
while persisting can leave new properties next to the old body.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from notion_forge.errors import AuthorizationError, GenerationError
from notion_forge.models.recipe import Recipe
from notion_forge.notion.client import file_upload_cover
from notion_forge.notion.markdown import markdown_to_blocks
from notion_forge.notion.properties import parse_property_bag
from notion_forge.recipes.mapping import (
    assemble_recipe,
    build_body_markdown,
    build_image_prompt,
    build_recipe_properties,
)
from notion_forge.recipes.prompts import build_modification_prompt
from notion_forge.webhooks import extract_instruction, has_trigger

logger = logging.getLogger(__name__)

FALLBACK_SUMMARY = "Recipe has been updated based on your suggestion"


class ModifyState(str, Enum):
    FETCHING = "fetching"
    AUTHORIZING = "authorizing"
    REGENERATING = "regenerating"
    RENDERING = "rendering"
    PERSISTING = "persisting"
    COMMENTING = "commenting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ModificationRequest:
    target_page_id: str
    trigger_comment_id: str
    instruction: Optional[str] = None


@dataclass
class ModificationRun:
    request: ModificationRequest
    state: ModifyState = ModifyState.FETCHING
    history: list[ModifyState] = field(default_factory=lambda: [ModifyState.FETCHING])
    failed_at: Optional[ModifyState] = None
    error: Optional[BaseException] = None
    triggered: bool = False
    recipe: Optional[Recipe] = None

    def advance(self, state: ModifyState) -> None:
        self.state = state
        self.history.append(state)

    def fail(self, error: BaseException) -> None:
        self.failed_at = self.state
        self.error = error
        self.advance(ModifyState.FAILED)


class RecipeModifier:
    """Runs modification requests against one recipes database.

    `notion` is a NotionGateway (or anything with the same methods) and
    `generator` provides generate_structured() and generate_image().
    """

    def __init__(self, notion, generator, database_id: str):
        self.notion = notion
        self.generator = generator
        self.database_id = database_id

    def modify(self, page_id: str, comment_id: str) -> ModificationRun:
        return self.execute(ModificationRun(ModificationRequest(page_id, comment_id)))

    def execute(self, run: ModificationRun) -> ModificationRun:
        request = run.request
        page_id = request.target_page_id
        logger.info("Modify start | page=%s comment=%s", page_id, request.trigger_comment_id)
        try:
            comment = self.notion.fetch_comment(request.trigger_comment_id)
            if not has_trigger(comment):
                logger.info("Modify skipped | page=%s reason=no trigger tag", page_id)
                run.advance(ModifyState.DONE)
                return run
            run.triggered = True
            request.instruction = extract_instruction(comment)

            run.advance(ModifyState.AUTHORIZING)
            page = self.notion.verify_database_access(page_id, self.database_id)
            if page is None:
                raise AuthorizationError(page_id, self.database_id)

            run.advance(ModifyState.REGENERATING)
            body = self.notion.fetch_page_body(page_id)
            current = assemble_recipe(parse_property_bag(page.get("properties")), body)
            updated = self.generator.generate_structured(
                input=request.instruction,
                instructions=build_modification_prompt(current, request.instruction),
                schema=Recipe,
            )
            if updated is None:
                raise GenerationError("Failed to generate updated recipe")
            run.recipe = updated

            run.advance(ModifyState.RENDERING)
            blocks = markdown_to_blocks(build_body_markdown(updated))
            image = self.generator.generate_image(build_image_prompt(updated))
            upload_id = self.notion.upload_image(image, updated.title)

            run.advance(ModifyState.PERSISTING)
            self.notion.update_page_properties(
                page_id, build_recipe_properties(updated), cover=file_upload_cover(upload_id)
            )
            self.notion.replace_page_body(page_id, blocks)

            run.advance(ModifyState.COMMENTING)
            self.notion.create_comment(page_id, updated.change_description or FALLBACK_SUMMARY)

            run.advance(ModifyState.DONE)
            logger.info("Modify success | page=%s title=%s", page_id, updated.title)
            return run
        except Exception as e:
            stage = run.state.value
            run.fail(e)
            logger.exception("Modify failed | page=%s stage=%s", page_id, stage)
            raise
