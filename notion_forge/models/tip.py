from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

Level = Literal[
    "🟢 A1: Beginner",
    "🟡 A2:Elementary",
    "🔵 B1: Intermediate",
    "🟣 B2: Upper Intermediate",
    "🔴 C1: Advanced",
    "⚫ C2: Proficient",
]

Category = Literal[
    "🔷 Core Grammar & Verb Use",
    "🟨 Vocabulary & Word Use",
    "🟩 Conversation & Usage",
    "🟫 Pronunciation & Listening",
    "🟪 Cultural / Regional Variation",
]

Subcategory = Literal[
    "Verb Conjugation",
    "Verb Usage / Meaning Differences",
    "Tense & Mood",
    "Grammar Structures",
    "Vocabulary",
    "Common Mistakes / False Friends",
    "Synonyms & Word Nuances",
    "Phrase Patterns / Sentence Starters",
    "Questions & Interrogatives",
    "Idiomatic Expressions",
    "Formality & Register",
    "Pronunciation",
    "Listening Tips",
    "Regional Usage",
    "Cultural Notes",
]


class SpanishTip(BaseModel):
    title: str = Field(description="A concise title for the tip, ideally 5-10 words.")
    level: Level
    category: Category
    subcategory: Subcategory
    explanation: str = Field(description="A clear explanation of the tip in a markdown format.")
    uses: str = Field(
        description="Put the tip into practice by providing 2-3 spanish sentences or phrases that show the tip in use in a markdown format."
    )
    practice_prompt: str = Field(
        description="Give a homework prompt for the user so that they can practice the tip. You can use markdown formatting for emphasis."
    )
