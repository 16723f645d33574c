"""Data structures for rendering an arrival board."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from kmb_tracker.logic.arrivals import ProcessedArrival, next_arrival

HONG_KONG_TZ = timezone(timedelta(hours=8), "HKT")
MISSING = "N/A"


@dataclass(frozen=True)
class BoardRow:
    """Single arrival line for display."""

    route: str
    destination: str
    clock_time: str
    wait_minutes: int


@dataclass(frozen=True)
class BoardData:
    """Board data for the renderers."""

    stop_name: str
    rows: list[BoardRow]
    next_row: BoardRow | None = None

    @property
    def headline(self) -> str:
        if self.next_row is None:
            return "No upcoming arrivals for this stop."
        first = self.next_row
        return f"Next Bus: Route {first.route} to {first.destination} in ~{first.wait_minutes} min"


def format_clock(value: datetime) -> str:
    return value.astimezone(HONG_KONG_TZ).strftime("%H:%M")


def _board_row(item: ProcessedArrival) -> BoardRow:
    return BoardRow(
        route=item.route or MISSING,
        destination=item.destination_primary or MISSING,
        clock_time=format_clock(item.eta),
        wait_minutes=item.wait_minutes,
    )


def build_board_data(stop_name: str, arrivals: Sequence[ProcessedArrival]) -> BoardData:
    soonest = next_arrival(arrivals)
    return BoardData(
        stop_name=stop_name,
        rows=[_board_row(item) for item in arrivals],
        next_row=_board_row(soonest) if soonest is not None else None,
    )


__all__ = ["BoardData", "BoardRow", "HONG_KONG_TZ", "build_board_data", "format_clock"]
