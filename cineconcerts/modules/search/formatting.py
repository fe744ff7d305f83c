"""Plain-text rendering of event hits for tool results."""

from typing import Any, Dict

EVENT_SEPARATOR = "\n\n---\n\n"


def format_event(hit: Dict[str, Any]) -> str:
    """Render one event as a short markdown-ish block."""
    title = hit.get("Title") or "CineConcerts Event"
    date = hit.get("Event Date") or "TBA"
    show_code = hit.get("Show Code") or ""
    poster = hit.get("Poster") or ""
    tickets = hit.get("Buy Tickets") or ""

    location_parts = [hit.get(key) or "" for key in ("Venue", "City", "State", "Country")]
    location = ", ".join(part for part in location_parts if part)

    lines = [
        f"**{title}**",
        f"Date: {date}",
        f"Location: {location}" if location else None,
        f"Show Code: {show_code}" if show_code else None,
        f"Poster: {poster}" if poster else None,
        f"Tickets: {tickets}" if tickets else None,
    ]
    return "\n".join(line for line in lines if line)


def format_events(hits) -> str:
    return EVENT_SEPARATOR.join(format_event(hit) for hit in hits)


def format_details(hit: Dict[str, Any]) -> str:
    """Every public field of a hit, one ``**key**: value`` line each."""
    return "\n".join(
        f"**{key}**: {value}"
        for key, value in hit.items()
        if not key.startswith("_") and key != "objectID"
    )
