"""Typer CLI for notion-forge (recipes, tips, modify, calendar exports, serve)."""

from __future__ import annotations

import json
from typing import Optional

import typer
from rich.console import Console

from dotenv import load_dotenv
# load .env immediately so settings read on first use pick up values from the file
load_dotenv()

from notion_forge.log import configure_logging
from notion_forge.settings import get_settings, validate_required

configure_logging(get_settings())

from notion_forge.calendar.events import CalendarProp, events_from_pages
from notion_forge.calendar.geojson import pages_to_feature_collection
from notion_forge.calendar.ics_export import export_ics
from notion_forge.generation.gemini import GeminiGenerator
from notion_forge.notion.client import NotionGateway
from notion_forge.recipes.create import create_recipe
from notion_forge.recipes.modify import RecipeModifier
from notion_forge.tips.create import create_tip

app = typer.Typer()
console = Console()


@app.command()
def recipe(db: str, prompt: str):
    """Generate a recipe from PROMPT and add it to database DB."""
    try:
        validate_required("NOTION_TOKEN", "GEMINI_API_KEY")
        settings = get_settings()
        page_id = create_recipe(
            NotionGateway.from_settings(),
            GeminiGenerator.from_settings(),
            prompt,
            db,
            settings.NOTION_USER_ID,
        )
        console.print(f"Recipe created: {page_id}")
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


@app.command()
def tip(db: str, prompt: str):
    """Generate a Spanish tip from PROMPT and add it to database DB."""
    try:
        validate_required("NOTION_TOKEN", "GEMINI_API_KEY")
        settings = get_settings()
        page_id = create_tip(
            NotionGateway.from_settings(),
            GeminiGenerator.from_settings(),
            prompt,
            db,
            settings.NOTION_USER_ID,
        )
        console.print(f"Tip created: {page_id}")
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


@app.command()
def modify(page_id: str, comment_id: str):
    """Apply the #modify request in COMMENT_ID to recipe page PAGE_ID."""
    try:
        validate_required("NOTION_TOKEN", "GEMINI_API_KEY", "NOTION_RECIPES_DATABASE_ID")
        modifier = RecipeModifier(
            NotionGateway.from_settings(),
            GeminiGenerator.from_settings(),
            get_settings().NOTION_RECIPES_DATABASE_ID,
        )
        run = modifier.modify(page_id, comment_id)
        if run.triggered:
            console.print(f"Recipe updated: {run.recipe.title}")
        else:
            console.print("Comment has no #modify tag; nothing to do.")
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


@app.command()
def calendar(db: str, outfile: str = "calendar.ics"):
    """Export events from database DB to an .ics file."""
    try:
        validate_required("NOTION_TOKEN")
        pages = NotionGateway.from_settings().query_pages(
            db, sorts=[{"property": CalendarProp.DATE.value, "direction": "ascending"}]
        )
        events = events_from_pages(pages)
        export_ics(events, outfile)
        console.print(f"Wrote {len(events)} events to {outfile}")
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


@app.command()
def geojson(
    db: str,
    outfile: str = "places.geojson",
    title_prop: Optional[str] = None,
    start_prop: str = "Start",
    end_prop: str = "End",
    location_prop: str = "Location",
    coords_prop: str = "LocationCoords",
    url_prop: str = "URL",
):
    """Export located pages from database DB as a GeoJSON FeatureCollection."""
    try:
        validate_required("NOTION_TOKEN")
        pages = NotionGateway.from_settings().query_pages(
            db, sorts=[{"property": start_prop, "direction": "ascending"}]
        )
        collection = pages_to_feature_collection(
            pages,
            title_prop=title_prop,
            start_prop=start_prop,
            end_prop=end_prop,
            location_prop=location_prop,
            coords_prop=coords_prop,
            url_prop=url_prop,
        )
        with open(outfile, "w", encoding="utf8") as fh:
            json.dump(collection, fh, ensure_ascii=False, indent=2)
        console.print(f"Wrote {len(collection['features'])} features to {outfile}")
    except Exception as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


@app.command()
def serve(host: str = "127.0.0.1", port: int = 8000):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("notion_forge.main:app", host=host, port=port)


if __name__ == "__main__":
    app()
