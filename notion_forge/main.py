"""HTTP entry points: recipe and tip creation, #modify webhooks, calendar feeds."""

from __future__ import annotations

import logging
from functools import cached_property
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response

from notion_forge.calendar.events import CalendarProp, events_from_pages
from notion_forge.calendar.geojson import pages_to_feature_collection
from notion_forge.calendar.ics_export import build_calendar, serialize_calendar
from notion_forge.errors import NotionForgeError, ValidationError
from notion_forge.generation.gemini import GeminiGenerator
from notion_forge.log import configure_logging
from notion_forge.notion.client import NotionGateway
from notion_forge.recipes.create import create_recipe
from notion_forge.recipes.modify import RecipeModifier
from notion_forge.settings import Settings, get_settings
from notion_forge.tasks import TaskDispatcher
from notion_forge.tips.create import create_tip
from notion_forge.webhooks import parse_comment_webhook, verification_token

logger = logging.getLogger(__name__)


class Services:
    """Collaborators shared by the request handlers.

    The Notion gateway and generator are built on first use so a missing
    token only fails the requests that need it.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.dispatcher = TaskDispatcher(settings.WORKER_THREADS)

    @cached_property
    def notion(self) -> NotionGateway:
        return NotionGateway.from_settings(self.settings)

    @cached_property
    def generator(self) -> GeminiGenerator:
        return GeminiGenerator.from_settings(self.settings)


_services: Services | None = None


def get_services() -> Services:
    global _services
    if _services is None:
        _services = Services(get_settings())
    return _services


app = FastAPI(title="notion-forge")


@app.on_event("startup")
def startup():
    configure_logging(get_settings())


@app.on_event("shutdown")
def shutdown():
    if _services is not None:
        _services.dispatcher.shutdown(wait=True)


@app.exception_handler(ValidationError)
async def validation_error(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(NotionForgeError)
async def server_error(request: Request, exc: NotionForgeError):
    logger.error("Request failed | path=%s error=%s", request.url.path, exc)
    return JSONResponse(
        status_code=500, content={"error": "Request failed", "detail": str(exc)}
    )


@app.exception_handler(Exception)
async def internal_error(request: Request, exc: Exception):
    logger.exception("Unhandled error | path=%s", request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500, content={"error": "Internal error", "detail": str(exc)}
    )


def require(value: Optional[str], name: str) -> str:
    if not value:
        raise ValidationError(f"Missing required query param: {name}")
    return value


@app.api_route("/api/recipes", methods=["GET", "POST"])
def recipes(
    db: Optional[str] = None,
    prompt: Optional[str] = None,
    services: Services = Depends(get_services),
):
    db = require(db, "db")
    prompt = require(prompt, "prompt")
    handle = services.dispatcher.submit(
        "recipe create",
        create_recipe,
        services.notion,
        services.generator,
        prompt,
        db,
        services.settings.NOTION_USER_ID,
    )
    return {"message": "Recipe creation in progress", "task_id": handle.id}


@app.post("/api/recipes/modify")
async def modify_recipe(request: Request, services: Services = Depends(get_services)):
    try:
        payload = await request.json()
    except ValueError:
        payload = None

    token = verification_token(payload)
    if token is not None:
        logger.info("Webhook verification token received | token=%s", token)
        return {"message": "verification token received"}

    database_id = services.settings.NOTION_RECIPES_DATABASE_ID
    if not database_id:
        return JSONResponse(
            status_code=500,
            content={
                "error": "NOTION_RECIPES_DATABASE_ID not configured",
                "detail": "Set NOTION_RECIPES_DATABASE_ID to the recipes database id",
            },
        )

    webhook = parse_comment_webhook(payload)
    if webhook is None:
        return {"message": "ignored"}

    modifier = RecipeModifier(services.notion, services.generator, database_id)
    handle = services.dispatcher.submit(
        "recipe modify", modifier.modify, webhook.page_id, webhook.comment_id
    )
    return {"message": "Recipe modification in progress", "task_id": handle.id}


@app.api_route("/api/spanish-tips", methods=["GET", "POST"])
def spanish_tips(
    db: Optional[str] = None,
    prompt: Optional[str] = None,
    services: Services = Depends(get_services),
):
    db = require(db, "db")
    prompt = require(prompt, "prompt")
    handle = services.dispatcher.submit(
        "tip create",
        create_tip,
        services.notion,
        services.generator,
        prompt,
        db,
        services.settings.NOTION_USER_ID,
    )
    return {"message": "Spanish tip creation in progress", "task_id": handle.id}


@app.get("/api/calendar")
def calendar(db: Optional[str] = None, services: Services = Depends(get_services)):
    db = require(db, "db")
    pages = services.notion.query_pages(
        db, sorts=[{"property": CalendarProp.DATE.value, "direction": "ascending"}]
    )
    events = events_from_pages(pages)
    logger.info("Calendar export | database=%s pages=%d events=%d", db, len(pages), len(events))
    return Response(
        content=serialize_calendar(build_calendar(events)),
        media_type="text/calendar",
    )


@app.get("/api/notion-geojson")
def notion_geojson(
    db: Optional[str] = None,
    titleProp: Optional[str] = None,
    startProp: str = "Start",
    endProp: str = "End",
    locationProp: str = "Location",
    coordsProp: str = "LocationCoords",
    urlProp: str = "URL",
    services: Services = Depends(get_services),
):
    db = require(db, "db")
    pages = services.notion.query_pages(
        db, sorts=[{"property": startProp, "direction": "ascending"}]
    )
    collection = pages_to_feature_collection(
        pages,
        title_prop=titleProp,
        start_prop=startProp,
        end_prop=endProp,
        location_prop=locationProp,
        coords_prop=coordsProp,
        url_prop=urlProp,
    )
    return JSONResponse(
        content=collection, headers={"Cache-Control": "public, max-age=300"}
    )
