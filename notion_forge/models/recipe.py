"""Recipe record, used both as the Gemini response schema and as the domain object."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

Difficulty = Literal["Easy", "Medium", "Hard"]
MealType = Literal["Breakfast", "Lunch", "Dinner", "Snack", "Dessert"]
ProteinType = Literal["None", "Chicken", "Beef", "Pork", "Tofu", "Fish", "Seafood", "Other"]


class Ingredient(BaseModel):
    ingredient: str = Field(description="Ingredient name.")
    quantity: str = Field(description="Amount and unit, e.g., '2 cups'.")


class NutritionItem(BaseModel):
    item: str = Field(description="Nutrition item.")
    quantity: str = Field(description="Amount and unit, e.g., '2mg'.")


# No field defaults except change_description: the Gemini API rejects non-null
# defaults in a response schema.
class Recipe(BaseModel):
    title: str = Field(description="Title of the recipe.")
    tldr: str = Field(
        description="A brief summary and explanation of the recipe in 1-2 sentences for a general response to the prompt."
    )
    description: str = Field(
        description="Short description of the recipe, such as its origins, flavor profile, cooking techniques used, common pairings, and any other interesting details."
    )
    country: str = Field(description="Country or region where the recipe originates.")
    difficulty: Difficulty = Field(
        description="Difficulty level of the recipe in terms of time and technical skill."
    )
    serving_size: str = Field(
        description="Number of servings that the recipe makes and portion description."
    )
    prep_time: float = Field(description="Preparation time in minutes.")
    cook_time: float = Field(description="Cooking time in minutes.")
    calories: float = Field(description="Calories (cal).")
    protein: float = Field(description="Protein in grams (g).")
    carbs: float = Field(description="Carbohydrates in grams (g).")
    fat: float = Field(description="Fat in grams (g).")
    fiber: float = Field(description="Fiber in grams (g).")
    meal_type: List[MealType] = Field(description="The type of meal this recipe is suitable for.")
    diet: List[str] = Field(
        description="Diet types such as Keto, Vegan, Vegetarian, etc. It should be brief, and do not use special characters."
    )
    protein_type: List[ProteinType] = Field(description="Types of protein used in the recipe.")
    allergies: List[str] = Field(
        description="Allergens such as Shellfish, Peanuts, etc. It should be brief, and do not use special characters."
    )
    ingredients: List[Ingredient] = Field(description="List of ingredients with quantities.")
    other_nutrition: List[NutritionItem] = Field(
        description="Other nutritional details such as cholesterol, sodium, iron, zinc, potassium, vitamins, and minerals."
    )
    preparation: List[str] = Field(
        description="Step-by-step preparation instructions. Do not include step numbers, just the instruction."
    )
    instructions: List[str] = Field(
        description="Step-by-step cooking instructions. Do not include step numbers, just the instruction."
    )
    change_description: Optional[str] = Field(
        default=None,
        description="Summary of changes made to the recipe in the most recent update.",
    )
