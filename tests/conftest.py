import pytest

from notion_forge.models.recipe import Ingredient, NutritionItem, Recipe


def title(text):
    return {"type": "title", "title": [{"type": "text", "plain_text": text}]}


def rich_text(text):
    return {"type": "rich_text", "rich_text": [{"type": "text", "plain_text": text}]}


def number(value):
    return {"type": "number", "number": value}


def select(name):
    return {"type": "select", "select": {"name": name} if name else None}


def multi_select(*names):
    return {"type": "multi_select", "multi_select": [{"name": n} for n in names]}


def date(start, end=None):
    return {"type": "date", "date": {"start": start, "end": end}}


def checkbox(value):
    return {"type": "checkbox", "checkbox": value}


def status(name):
    return {"type": "status", "status": {"name": name}}


def url(value):
    return {"type": "url", "url": value}


def place(name=None, address=None, lat=None, lon=None):
    return {
        "type": "place",
        "place": {"name": name, "address": address, "lat": lat, "lon": lon},
    }


def make_recipe(**overrides):
    values = dict(
        title="Chicken Curry",
        tldr="A warming curry.",
        description="A **rich** curry from Kerala.",
        country="India",
        difficulty="Medium",
        serving_size="4 servings",
        prep_time=15,
        cook_time=40,
        calories=520,
        protein=35,
        carbs=30,
        fat=22,
        fiber=6,
        meal_type=["Dinner"],
        diet=["High Protein"],
        protein_type=["Chicken"],
        allergies=["Dairy"],
        ingredients=[
            Ingredient(ingredient="Chicken thighs", quantity="600 g"),
            Ingredient(ingredient="Coconut milk", quantity="400 ml"),
        ],
        other_nutrition=[NutritionItem(item="Sodium", quantity="800 mg")],
        preparation=["Dice the chicken", "Chop the onion"],
        instructions=["Brown the chicken", "Simmer in coconut milk"],
    )
    values.update(overrides)
    return Recipe(**values)


class FakeNotion:
    """In-memory stand-in for NotionGateway that records every call."""

    def __init__(self, comments=None, pages=None, bodies=None, database_pages=None):
        self.comments = comments or {}
        self.pages = pages or {}
        self.bodies = bodies or {}
        self.database_pages = database_pages or []
        self.calls = []
        self.fail_on = None

    def _record(self, name, *args):
        self.calls.append((name,) + args)
        if self.fail_on == name:
            from notion_forge.errors import PersistenceError

            raise PersistenceError(name)

    def call_names(self):
        return [c[0] for c in self.calls]

    def writes(self):
        reads = {"fetch_comment", "verify_database_access", "fetch_page_body", "query_pages"}
        return [c for c in self.calls if c[0] not in reads]

    def fetch_comment(self, comment_id):
        self._record("fetch_comment", comment_id)
        return self.comments.get(comment_id, "")

    def verify_database_access(self, page_id, database_id):
        self._record("verify_database_access", page_id, database_id)
        page = self.pages.get(page_id)
        if page is None:
            return None
        parent = page.get("parent", {}).get("database_id", "")
        if parent.replace("-", "").lower() != database_id.replace("-", "").lower():
            return None
        return page

    def fetch_page_body(self, page_id):
        self._record("fetch_page_body", page_id)
        return self.bodies.get(page_id, "")

    def upload_image(self, data, title):
        self._record("upload_image", data, title)
        return "upload-1"

    def update_page_properties(self, page_id, properties, cover=None):
        self._record("update_page_properties", page_id, properties, cover)

    def replace_page_body(self, page_id, children):
        self._record("replace_page_body", page_id, children)

    def create_comment(self, page_id, rich_text):
        self._record("create_comment", page_id, rich_text)

    def create_page(self, database_id, properties, children=None, cover=None):
        self._record("create_page", database_id, properties, children, cover)
        return "new-page"

    def query_pages(self, database_id, filter=None, sorts=None):
        self._record("query_pages", database_id, filter, sorts)
        return list(self.database_pages)


class FakeGenerator:
    def __init__(self, result=None, image=b"png-bytes"):
        self.result = result
        self.image = image
        self.structured_calls = []
        self.image_prompts = []

    def generate_structured(self, input, instructions, schema):
        self.structured_calls.append(
            {"input": input, "instructions": instructions, "schema": schema}
        )
        return self.result

    def generate_image(self, prompt):
        self.image_prompts.append(prompt)
        return self.image


@pytest.fixture
def recipe():
    return make_recipe()
