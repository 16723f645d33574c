"""Stop directory browsing and name search."""

from __future__ import annotations

from collections.abc import Sequence

from kmb_tracker.data.models import Stop

BROWSE_LIMIT = 50
SEARCH_LIMIT = 20
MIN_QUERY_LENGTH = 2


def browse_stops(stops: Sequence[Stop], limit: int = BROWSE_LIMIT) -> list[Stop]:
    """First page of the directory, in API order."""
    return list(stops[:limit])


def search_stops(stops: Sequence[Stop], query: str, limit: int = SEARCH_LIMIT) -> list[Stop]:
    """Case-insensitive substring match on either stop name.

    Queries shorter than two characters after trimming return nothing.
    """
    needle = (query or "").strip().lower()
    if len(needle) < MIN_QUERY_LENGTH:
        return []
    matches: list[Stop] = []
    for stop in stops:
        if needle in stop.name_primary.lower() or needle in stop.name_secondary.lower():
            matches.append(stop)
            if len(matches) >= limit:
                break
    return matches


def find_stop(stops: Sequence[Stop], stop_id: str) -> Stop | None:
    for stop in stops:
        if stop.id == stop_id:
            return stop
    return None


__all__ = ["BROWSE_LIMIT", "MIN_QUERY_LENGTH", "SEARCH_LIMIT", "browse_stops", "find_stop", "search_stops"]
