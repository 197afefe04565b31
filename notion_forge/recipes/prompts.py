"""Prompt text sent to the generator for recipe creation and modification."""

from __future__ import annotations

from notion_forge.models.recipe import Recipe

CREATE_INSTRUCTIONS = (
    "You are a helpful assistant that provides detailed cooking recipes based on user prompts. "
    "All the instructions and details should be clear, concise, and easy to follow."
)


def _number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _joined(values: list[str], empty: str) -> str:
    return ", ".join(values) or empty


def _steps(steps: list[str], label: str) -> str:
    if not steps:
        return ""
    numbered = "\n".join(f"{i}. {step}" for i, step in enumerate(steps, start=1))
    return f"{label}:\n{numbered}\n"


def describe_recipe(recipe: Recipe) -> str:
    ingredients = "\n".join(f"- {i.ingredient}: {i.quantity}" for i in recipe.ingredients)
    nutrition = "\n".join(f"- {n.item}: {n.quantity}" for n in recipe.other_nutrition)
    other = f"\nOther Nutrition:\n{nutrition}\n" if nutrition else ""
    return f"""Title: {recipe.title}
Description: {recipe.description}
Difficulty: {recipe.difficulty}
Country of Origin: {recipe.country}
Prep Time: {_number(recipe.prep_time)} minutes
Cook Time: {_number(recipe.cook_time)} minutes
Servings: {recipe.serving_size}
Meal Type: {_joined(recipe.meal_type, "N/A")}
Diet: {_joined(recipe.diet, "N/A")}
Protein Type: {_joined(recipe.protein_type, "N/A")}
Allergies: {_joined(recipe.allergies, "None")}

Ingredients:
{ingredients}

Nutrition Facts (per serving):
- Calories: {_number(recipe.calories)} cal
- Protein: {_number(recipe.protein)} g
- Carbs: {_number(recipe.carbs)} g
- Fat: {_number(recipe.fat)} g
- Fiber: {_number(recipe.fiber)} g
{other}
{_steps(recipe.preparation, "Preparation")}{_steps(recipe.instructions, "Instructions")}"""


def build_modification_prompt(recipe: Recipe, instruction: str) -> str:
    """Instructions for regenerating `recipe` with the user's requested change.

    Empty step lists mean the current steps are unknown, not that the recipe
    has none, so the model is asked to supply complete steps either way.
    """
    return f"""You are a helpful assistant that provides detailed cooking recipes.
The user wants to modify an existing recipe based on their request.

Current recipe:
{describe_recipe(recipe)}
Modification request from the user:
"{instruction}"

Please update the recipe according to this request and return the complete updated recipe details,
including full preparation and instruction steps.
Also include a 'change_description' field that explains what you changed in the recipe."""
