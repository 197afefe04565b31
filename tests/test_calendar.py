from datetime import datetime, timezone

from conftest import checkbox, date, place, rich_text, select, status, title, url
from notion_forge.calendar.events import event_from_page, event_window, events_from_pages
from notion_forge.calendar.geojson import pages_to_feature_collection, parse_coords
from notion_forge.calendar.ics_export import build_calendar, export_ics, serialize_calendar
from notion_forge.notion.properties import DateValue

UTC = timezone.utc


def event_page(page_id="page-1", **props):
    properties = {
        "Name": title("Dinner at Noma"),
        "Status": status("Scheduled"),
        "Category": select("Restaurants"),
        "Date": date("2024-05-01T10:00:00+00:00"),
    }
    properties.update(props)
    return {"id": page_id, "properties": properties}


def test_event_window_defaults_to_one_hour():
    start, end = event_window(DateValue(start="2024-05-01T10:00:00+02:00"), all_day=False)
    assert start == datetime(2024, 5, 1, 8, 0, tzinfo=UTC)
    assert end == datetime(2024, 5, 1, 9, 0, tzinfo=UTC)


def test_event_window_naive_is_utc():
    start, end = event_window(
        DateValue(start="2024-05-01T10:00:00", end="2024-05-01T12:30:00"), all_day=False
    )
    assert start == datetime(2024, 5, 1, 10, 0, tzinfo=UTC)
    assert end == datetime(2024, 5, 1, 12, 30, tzinfo=UTC)


def test_event_window_all_day_has_exclusive_end():
    start, end = event_window(DateValue(start="2024-05-01"), all_day=True)
    assert start == datetime(2024, 5, 1, tzinfo=UTC)
    assert end == datetime(2024, 5, 2, tzinfo=UTC)

    start, end = event_window(DateValue(start="2024-05-01", end="2024-05-03"), all_day=True)
    assert end == datetime(2024, 5, 4, tzinfo=UTC)


def test_event_from_page_confirmed():
    page = event_page(
        Place=place("Noma", "Refshalevej 96"),
        Notes=rich_text("Window table"),
        URL=url("https://noma.dk"),
    )
    event = event_from_page(page)
    assert event.title == "🍽️ Dinner at Noma"
    assert event.location == "Noma, Refshalevej 96"
    assert event.notes == "Window table"
    assert event.url == "https://noma.dk"
    assert event.all_day is False


def test_event_from_page_pending_and_location_fallback():
    page = event_page(Status=status("Idea"), Location=rich_text("Copenhagen"))
    event = event_from_page(page)
    assert event.title == "🍽️ [Pending] Dinner at Noma"
    assert event.location == "Copenhagen"


def test_event_from_page_skips_cancelled_flights_and_undated():
    assert event_from_page(event_page(Status=status("Cancelled"))) is None
    assert event_from_page(event_page(Category=select("Flights"))) is None
    assert event_from_page(event_page(Date={"type": "date", "date": None})) is None


def test_events_from_pages_skips_bad_dates():
    pages = [event_page("ok"), event_page("bad", Date=date("not-a-date"))]
    assert [e.page_id for e in events_from_pages(pages)] == ["ok"]


def test_build_calendar(tmp_path):
    events = events_from_pages(
        [
            event_page("timed"),
            event_page("allday", AllDay=checkbox(True), Date=date("2024-06-01")),
        ]
    )
    text = serialize_calendar(build_calendar(events))
    assert "BEGIN:VCALENDAR" in text
    assert "UID:timed@notion" in text
    assert "UID:allday@notion" in text
    assert "20240501T100000Z" in text
    assert "VALUE=DATE" in text
    assert "20240601" in text
    assert "Dinner at Noma" in text

    outfile = tmp_path / "out.ics"
    export_ics(events, str(outfile))
    assert outfile.read_text(encoding="utf8").count("BEGIN:VEVENT") == 2


def test_parse_coords():
    assert parse_coords("55.68, 12.61") == (55.68, 12.61)
    assert parse_coords("55.68") is None
    assert parse_coords("north, south") is None
    assert parse_coords("nan, 1") is None
    assert parse_coords("") is None


def test_feature_collection():
    pages = [
        {
            "id": "p1",
            "url": "https://notion.so/p1",
            "properties": {
                "Title": title("Tivoli"),
                "LocationCoords": rich_text("55.6737, 12.5681"),
                "Location": rich_text("Copenhagen"),
                "Start": date("2024-05-01", "2024-05-02"),
            },
        },
        {
            "id": "p2",
            "properties": {
                "Title": title("Nowhere"),
                "LocationCoords": rich_text("unknown"),
            },
        },
        {
            "id": "p3",
            "properties": {
                "Title": title("Formula place"),
                "LocationCoords": {
                    "type": "formula",
                    "formula": {"type": "string", "string": "1.0, 2.0"},
                },
                "URL": url("https://example.com"),
                "Start": date("2024-05-03"),
                "End": date("2024-05-04"),
            },
        },
    ]
    collection = pages_to_feature_collection(pages)
    assert collection["type"] == "FeatureCollection"
    first, second = collection["features"]

    assert first["geometry"] == {"type": "Point", "coordinates": [12.5681, 55.6737]}
    assert first["properties"] == {
        "id": "p1",
        "name": "Tivoli",
        "location": "Copenhagen",
        "url": "https://notion.so/p1",
        "start": "2024-05-01",
        "end": "2024-05-02",
    }
    assert second["geometry"]["coordinates"] == [2.0, 1.0]
    assert second["properties"]["url"] == "https://example.com"
    assert second["properties"]["end"] == "2024-05-04"
    assert second["properties"]["location"] == ""


def test_feature_collection_custom_property_names():
    pages = [
        {
            "id": "p1",
            "properties": {
                "Name": title("Default title"),
                "Label": rich_text("ignored"),
                "Coords": rich_text("1, 2"),
                "When": date("2024-01-01"),
            },
        }
    ]
    collection = pages_to_feature_collection(
        pages, title_prop="Name", start_prop="When", coords_prop="Coords"
    )
    props = collection["features"][0]["properties"]
    assert props["name"] == "Default title"
    assert props["start"] == "2024-01-01"
    assert props["end"] is None
    assert props["url"] is None


def test_event_window_ignores_end_before_start():
    backwards = DateValue(start="2025-05-02T18:00:00+00:00", end="2025-05-01T18:00:00+00:00")
    start, end = event_window(backwards, all_day=False)
    assert start == datetime(2025, 5, 2, 18, 0, tzinfo=UTC)
    assert end == datetime(2025, 5, 2, 19, 0, tzinfo=UTC)

    start, end = event_window(DateValue(start="2025-05-03", end="2025-05-01"), all_day=True)
    assert start == datetime(2025, 5, 3, tzinfo=UTC)
    assert end == datetime(2025, 5, 4, tzinfo=UTC)


def test_build_calendar_with_backwards_dates():
    page = event_page(
        "backwards", Date=date("2025-05-02T18:00:00+00:00", "2025-05-01T18:00:00+00:00")
    )
    text = serialize_calendar(build_calendar(events_from_pages([page])))
    assert "UID:backwards@notion" in text
    assert "20250502T190000Z" in text
