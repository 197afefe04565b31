"""Build an ICS calendar from calendar events."""

from __future__ import annotations

from datetime import timedelta
from typing import Iterable

from ics import Calendar, Event

from notion_forge.models.event import CalendarEvent


def build_calendar(events: Iterable[CalendarEvent]) -> Calendar:
    cal = Calendar()
    for item in events:
        ev = Event()
        ev.uid = f"{item.page_id}@notion"
        ev.name = item.title
        ev.begin = item.start
        if item.all_day:
            # make_all_day() extends through the day of `end`, so pass the last day itself
            ev.end = item.end - timedelta(days=1)
            ev.make_all_day()
        else:
            ev.end = item.end
        if item.location:
            ev.location = item.location
        if item.notes:
            ev.description = item.notes
        if item.url:
            ev.url = item.url
        cal.events.add(ev)
    return cal


def serialize_calendar(cal: Calendar) -> str:
    return cal.serialize()


def export_ics(events: Iterable[CalendarEvent], outfile: str) -> None:
    cal = build_calendar(events)
    with open(outfile, "w", encoding="utf8") as fh:
        fh.write(serialize_calendar(cal))
