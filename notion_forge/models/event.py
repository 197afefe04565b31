from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from notion_forge.notion.properties import PlaceValue


class CalendarEvent(BaseModel):
    """An event read from a Notion calendar database; never written back."""

    page_id: str
    title: str
    category: Optional[str] = None
    start: datetime
    end: datetime
    all_day: bool = False
    location: str = ""
    place: Optional[PlaceValue] = None
    notes: str = ""
    url: Optional[str] = None
    status: str = ""
