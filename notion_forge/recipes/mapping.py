"""Map Recipe records to Notion recipe-database properties and back.

`RECIPE_FIELDS` and `RECIPE_LIST_FIELDS` are the single source of truth for
which Notion property holds which recipe attribute; a schema change is a
one-line edit there.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Type, get_args

from pydantic import BaseModel

from notion_forge.models.recipe import Difficulty, MealType, ProteinType, Recipe
from notion_forge.models.recipe import Ingredient, NutritionItem
from notion_forge.notion.lists import ListEntry, encode_list, parse_list
from notion_forge.notion.properties import PropertyKind, decode, encode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldSpec:
    attr: str
    prop: str
    kind: PropertyKind
    markdown: bool = False


@dataclass(frozen=True)
class ListFieldSpec:
    attr: str
    prop: str
    model: Type[BaseModel]
    key_attr: str
    value_attr: str


RECIPE_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("title", "Name", PropertyKind.TITLE),
    FieldSpec("description", "Description", PropertyKind.RICH_TEXT, markdown=True),
    FieldSpec("country", "Country of Origin", PropertyKind.SELECT),
    FieldSpec("difficulty", "Difficulty", PropertyKind.SELECT),
    FieldSpec("serving_size", "Serving Size", PropertyKind.RICH_TEXT),
    FieldSpec("prep_time", "Prep Time (min)", PropertyKind.NUMBER),
    FieldSpec("cook_time", "Cook Time (min)", PropertyKind.NUMBER),
    FieldSpec("calories", "Calories (cal)", PropertyKind.NUMBER),
    FieldSpec("protein", "Protein (g)", PropertyKind.NUMBER),
    FieldSpec("carbs", "Carbs (g)", PropertyKind.NUMBER),
    FieldSpec("fat", "Fat (g)", PropertyKind.NUMBER),
    FieldSpec("fiber", "Fiber (g)", PropertyKind.NUMBER),
    FieldSpec("meal_type", "Meal Type", PropertyKind.MULTI_SELECT),
    FieldSpec("diet", "Diet", PropertyKind.MULTI_SELECT),
    FieldSpec("protein_type", "Protein Type", PropertyKind.MULTI_SELECT),
    FieldSpec("allergies", "Allergies", PropertyKind.MULTI_SELECT),
)

RECIPE_LIST_FIELDS: tuple[ListFieldSpec, ...] = (
    ListFieldSpec("ingredients", "Ingredients", Ingredient, "ingredient", "quantity"),
    ListFieldSpec("other_nutrition", "Nutrition Facts", NutritionItem, "item", "quantity"),
)

DEFAULT_DIFFICULTY = "Medium"
PREPARATION_HEADING = "Preparation"
INSTRUCTIONS_HEADING = "Instructions"

_DIFFICULTIES = set(get_args(Difficulty))
_MEAL_TYPES = set(get_args(MealType))
_PROTEIN_TYPES = set(get_args(ProteinType))


def build_recipe_properties(recipe: Recipe) -> dict:
    """Encode every recipe attribute held in page properties."""
    properties = {
        mapping.prop: encode(mapping.kind, getattr(recipe, mapping.attr), markdown=mapping.markdown)
        for mapping in RECIPE_FIELDS
    }
    for mapping in RECIPE_LIST_FIELDS:
        entries = [
            ListEntry(getattr(item, mapping.key_attr), getattr(item, mapping.value_attr))
            for item in getattr(recipe, mapping.attr)
        ]
        properties[mapping.prop] = {"rich_text": encode_list(entries)}
    return properties


def _numbered(steps: list[str]) -> str:
    return "\n".join(f"{i}. {step}" for i, step in enumerate(steps, start=1))


def build_body_markdown(recipe: Recipe) -> str:
    return (
        f"# {PREPARATION_HEADING}\n{_numbered(recipe.preparation)}\n"
        f"# {INSTRUCTIONS_HEADING}\n{_numbered(recipe.instructions)}"
    )


def build_image_prompt(recipe: Recipe) -> str:
    return (
        f"A professional, appetizing food photograph of {recipe.title}. "
        f"{recipe.description} "
        "Plated and styled for a cookbook, natural light, shallow depth of field, no text."
    )


def parse_body_steps(body: str) -> tuple[list[str], list[str]]:
    """Split page body text into (preparation, instructions) step lists.

    Steps are the non-empty lines under the "Preparation" and "Instructions"
    headings; anything before the first heading is ignored.
    """
    sections: dict[str, list[str]] = {
        PREPARATION_HEADING.lower(): [],
        INSTRUCTIONS_HEADING.lower(): [],
    }
    current: Optional[list[str]] = None
    for line in (body or "").split("\n"):
        text = line.strip()
        if not text:
            continue
        if text.lower() in sections:
            current = sections[text.lower()]
            continue
        if current is not None:
            current.append(text)
    return sections[PREPARATION_HEADING.lower()], sections[INSTRUCTIONS_HEADING.lower()]


def assemble_recipe(bag: dict, body: Optional[str] = None) -> Recipe:
    """Rebuild a complete Recipe from a page's property bag and body text.

    Absent or mistyped properties take zero values; out-of-range enum values
    fall back (difficulty) or are dropped (meal and protein types).
    """
    values = {mapping.attr: decode(bag, mapping.prop, mapping.kind) for mapping in RECIPE_FIELDS}

    if values["difficulty"] not in _DIFFICULTIES:
        logger.debug("Unknown difficulty %r; using %s", values["difficulty"], DEFAULT_DIFFICULTY)
        values["difficulty"] = DEFAULT_DIFFICULTY
    values["meal_type"] = [v for v in values["meal_type"] if v in _MEAL_TYPES]
    values["protein_type"] = [v for v in values["protein_type"] if v in _PROTEIN_TYPES]

    for mapping in RECIPE_LIST_FIELDS:
        text = decode(bag, mapping.prop, PropertyKind.RICH_TEXT)
        values[mapping.attr] = [
            mapping.model(**{mapping.key_attr: entry.key, mapping.value_attr: entry.value})
            for entry in parse_list(text)
        ]

    preparation, instructions = parse_body_steps(body) if body else ([], [])
    return Recipe(
        tldr="",
        preparation=preparation,
        instructions=instructions,
        **values,
    )
