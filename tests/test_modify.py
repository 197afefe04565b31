import pytest

from conftest import FakeGenerator, FakeNotion, make_recipe, multi_select, select, title
from notion_forge.errors import AuthorizationError, GenerationError, PersistenceError
from notion_forge.models.recipe import Recipe
from notion_forge.recipes.modify import (
    FALLBACK_SUMMARY,
    ModificationRequest,
    ModificationRun,
    ModifyState,
    RecipeModifier,
)

DATABASE_ID = "db-recipes-1"


def recipe_page(parent="db-recipes-1"):
    return {
        "id": "page-1",
        "parent": {"type": "database_id", "database_id": parent},
        "properties": {
            "Name": title("Chicken Curry"),
            "Difficulty": select("Medium"),
            "Meal Type": multi_select("Dinner"),
        },
    }


def make_notion(comment="looks great #modify make it vegan", parent="db-recipes-1"):
    return FakeNotion(
        comments={"comment-1": comment},
        pages={"page-1": recipe_page(parent)},
        bodies={"page-1": "Preparation\nDice the chicken\nInstructions\nBrown the chicken"},
    )


def test_modify_end_to_end():
    notion = make_notion()
    updated = make_recipe(
        title="Chickpea Curry",
        protein_type=["None"],
        change_description="Swapped chicken for chickpeas.",
    )
    generator = FakeGenerator(result=updated)

    run = RecipeModifier(notion, generator, DATABASE_ID).modify("page-1", "comment-1")

    assert run.state == ModifyState.DONE
    assert run.triggered
    assert run.request.instruction == "make it vegan"
    assert run.history == [
        ModifyState.FETCHING,
        ModifyState.AUTHORIZING,
        ModifyState.REGENERATING,
        ModifyState.RENDERING,
        ModifyState.PERSISTING,
        ModifyState.COMMENTING,
        ModifyState.DONE,
    ]

    call = generator.structured_calls[0]
    assert call["input"] == "make it vegan"
    assert call["schema"] is Recipe
    assert "Chicken Curry" in call["instructions"]
    assert "1. Dice the chicken" in call["instructions"]

    assert [c[0] for c in notion.writes()] == [
        "upload_image",
        "update_page_properties",
        "replace_page_body",
        "create_comment",
    ]
    _, page_id, properties, cover = notion.calls[notion.call_names().index("update_page_properties")]
    assert page_id == "page-1"
    assert properties["Name"]["title"][0]["text"]["content"] == "Chickpea Curry"
    assert cover == {"type": "file_upload", "file_upload": {"id": "upload-1"}}

    _, _, children = notion.calls[notion.call_names().index("replace_page_body")]
    assert children[0]["type"] == "heading_1"

    assert notion.calls[-1] == ("create_comment", "page-1", "Swapped chicken for chickpeas.")


def test_comment_without_tag_does_nothing():
    notion = make_notion(comment="looks great, make it vegan")
    generator = FakeGenerator(result=make_recipe())

    run = RecipeModifier(notion, generator, DATABASE_ID).modify("page-1", "comment-1")

    assert run.state == ModifyState.DONE
    assert not run.triggered
    assert notion.call_names() == ["fetch_comment"]
    assert generator.structured_calls == []


def test_bare_tag_regenerates_with_empty_instruction():
    notion = make_notion(comment="#modify")
    generator = FakeGenerator(result=make_recipe())

    run = RecipeModifier(notion, generator, DATABASE_ID).modify("page-1", "comment-1")

    assert run.state == ModifyState.DONE
    assert run.triggered
    assert run.request.instruction == ""
    assert generator.structured_calls[0]["input"] == ""
    assert "update_page_properties" in notion.call_names()
    assert notion.call_names()[-1] == "create_comment"


def test_tag_match_is_case_sensitive():
    notion = make_notion(comment="#MODIFY make it vegan")
    generator = FakeGenerator(result=make_recipe())

    run = RecipeModifier(notion, generator, DATABASE_ID).modify("page-1", "comment-1")

    assert not run.triggered
    assert notion.call_names() == ["fetch_comment"]
    assert generator.structured_calls == []
    assert generator.image_prompts == []


def test_page_outside_database_is_rejected_without_writes():
    notion = make_notion(parent="db-other")
    generator = FakeGenerator(result=make_recipe())
    modifier = RecipeModifier(notion, generator, DATABASE_ID)

    with pytest.raises(AuthorizationError):
        modifier.modify("page-1", "comment-1")

    assert notion.writes() == []
    assert generator.structured_calls == []


def test_database_ids_compare_without_dashes_and_case():
    notion = make_notion(parent="DB-RECIPES-1")
    run = RecipeModifier(notion, FakeGenerator(result=make_recipe()), "dbrecipes1").modify(
        "page-1", "comment-1"
    )
    assert run.state == ModifyState.DONE


def test_generation_failure_is_reported_before_any_write():
    notion = make_notion()
    modifier = RecipeModifier(notion, FakeGenerator(result=None), DATABASE_ID)

    with pytest.raises(GenerationError):
        modifier.modify("page-1", "comment-1")

    assert notion.writes() == []


def test_failure_records_stage():
    notion = make_notion()
    notion.fail_on = "replace_page_body"
    modifier = RecipeModifier(notion, FakeGenerator(result=make_recipe()), DATABASE_ID)

    run = ModificationRun(ModificationRequest("page-1", "comment-1"))
    with pytest.raises(PersistenceError):
        modifier.execute(run)

    assert run.state == ModifyState.FAILED
    assert run.failed_at == ModifyState.PERSISTING
    assert isinstance(run.error, PersistenceError)


def test_missing_change_description_uses_fallback():
    notion = make_notion()
    modifier = RecipeModifier(notion, FakeGenerator(result=make_recipe()), DATABASE_ID)

    modifier.modify("page-1", "comment-1")

    assert notion.calls[-1] == ("create_comment", "page-1", FALLBACK_SUMMARY)
