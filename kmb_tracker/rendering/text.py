"""Plain-text tables for the command line."""

from __future__ import annotations

from collections.abc import Sequence

from kmb_tracker.data.favorites import FavoriteStop
from kmb_tracker.data.models import Stop
from kmb_tracker.rendering.board_data import BoardData


def format_stops(stops: Sequence[Stop]) -> str:
    if not stops:
        return "No stops found."
    return "\n".join(
        f"{stop.id}  {stop.name_primary} / {stop.name_secondary}" for stop in stops
    )


def format_arrivals(data: BoardData) -> str:
    lines = [f"Selected Stop: {data.stop_name}", data.headline]
    if data.rows:
        lines.append(f"{'Route':<8}{'Arrival':<9}{'Wait':>6}  Destination")
        for row in data.rows:
            lines.append(f"{row.route:<8}{row.clock_time:<9}{row.wait_minutes:>6}  {row.destination}")
    return "\n".join(lines)


def format_favorites(favorites: Sequence[FavoriteStop]) -> str:
    if not favorites:
        return "You have no favorite stops saved yet."
    return "\n".join(f"{fav.id}  {fav.name}  (stop {fav.stop_id})" for fav in favorites)


__all__ = ["format_arrivals", "format_favorites", "format_stops"]
