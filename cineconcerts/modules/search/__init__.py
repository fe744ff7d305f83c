"""
Search Module - Black Box Interface

Purpose: Query the CineConcerts events index
Interface: AlgoliaSearch.search(), geo_search(), browse(), find_by_show_code()
Hidden: Algolia REST wire format, credentials

Failures surface as SearchUnavailableError.
"""

from .algolia import AlgoliaSearch, EventHit
from .formatting import format_details, format_event, format_events

__all__ = ["AlgoliaSearch", "EventHit", "format_details", "format_event", "format_events"]
