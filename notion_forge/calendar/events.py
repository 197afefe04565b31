"""Read calendar events out of Notion pages."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Iterable, Optional

from notion_forge.models.event import CalendarEvent
from notion_forge.notion.properties import DateValue, PlaceValue, PropertyKind, decode, parse_property_bag

logger = logging.getLogger(__name__)


class CalendarProp(str, Enum):
    STATUS = "Status"
    ALL_DAY = "AllDay"
    DATE = "Date"
    CATEGORY = "Category"
    PLACE = "Place"
    LOCATION = "Location"
    URL = "URL"
    NOTES = "Notes"
    NAME = "Name"


EMOJI = {
    "Amusement Parks": "🎢",
    "Bakeries": "🥐",
    "Concerts": "🎵",
    "Entertainment": "🎭",
    "Flights": "✈️",
    "Hotels": "🏨",
    "Markets": "🛒",
    "Museums": "🖼️",
    "Parks": "🌳",
    "Places of Interest": "📍",
    "Restaurants": "🍽️",
    "Shopping": "🛍️",
    "Tours": "🗺️",
    "Transportation": "🚆",
}

CONFIRMED_STATUSES = ("Scheduled", "Reserved")
SKIPPED_STATUS = "Cancelled"
SKIPPED_CATEGORY = "Flights"


def parse_datetime(value: str) -> datetime:
    """Parse a Notion date string; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _utc_midnight(value: datetime) -> datetime:
    value = value.astimezone(timezone.utc)
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def event_window(date: DateValue, all_day: bool) -> tuple[datetime, datetime]:
    """(start, end) for a Notion date.

    Timed events without an end last one hour. All-day events start at UTC
    midnight and end, exclusively, the day after their last day. An end
    before the start counts as no end.
    """
    start = parse_datetime(date.start)
    end = parse_datetime(date.end) if date.end else None
    if end is not None and end < start:
        logger.warning("Ignoring date end before start | start=%s end=%s", date.start, date.end)
        end = None
    if all_day:
        start = _utc_midnight(start)
        last_day = _utc_midnight(end) if end is not None else start
        return start, last_day + timedelta(days=1)
    return start, end or start + timedelta(hours=1)


def title_prefix(category: Optional[str]) -> str:
    return f"{EMOJI[category]} " if category in EMOJI else ""


def place_label(place: Optional[PlaceValue]) -> str:
    if place is None:
        return ""
    return ", ".join(part for part in (place.name, place.address) if part)


def is_valid_event(status: str, category: Optional[str], date: Optional[DateValue]) -> bool:
    return status != SKIPPED_STATUS and category != SKIPPED_CATEGORY and date is not None


def event_from_page(page: dict) -> Optional[CalendarEvent]:
    """Build a CalendarEvent, or None for cancelled, flight, or undated pages."""
    bag = parse_property_bag(page.get("properties"))
    status = decode(bag, CalendarProp.STATUS, PropertyKind.STATUS)
    category = decode(bag, CalendarProp.CATEGORY, PropertyKind.SELECT) or None
    date = decode(bag, CalendarProp.DATE, PropertyKind.DATE)
    if not is_valid_event(status, category, date):
        return None

    all_day = decode(bag, CalendarProp.ALL_DAY, PropertyKind.CHECKBOX)
    start, end = event_window(date, all_day)
    place = decode(bag, CalendarProp.PLACE, PropertyKind.PLACE)
    name = decode(bag, CalendarProp.NAME, PropertyKind.TITLE)
    pending = "" if status in CONFIRMED_STATUSES else "[Pending] "

    return CalendarEvent(
        page_id=page.get("id", ""),
        title=title_prefix(category) + pending + name,
        category=category,
        start=start,
        end=end,
        all_day=all_day,
        location=place_label(place) or decode(bag, CalendarProp.LOCATION, PropertyKind.RICH_TEXT),
        place=place,
        notes=decode(bag, CalendarProp.NOTES, PropertyKind.RICH_TEXT),
        url=decode(bag, CalendarProp.URL, PropertyKind.URL) or None,
        status=status,
    )


def events_from_pages(pages: Iterable[dict]) -> list[CalendarEvent]:
    events = []
    for page in pages:
        try:
            event = event_from_page(page)
        except ValueError:
            logger.warning("Skipping page with unparseable date | page=%s", page.get("id"))
            continue
        if event is not None:
            events.append(event)
    return events
