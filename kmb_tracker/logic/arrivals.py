"""Wait-time computation and ordering for stop arrivals."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import math

from kmb_tracker.data.models import ArrivalRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessedArrival:
    """An arrival annotated with whole minutes until it reaches the stop."""

    record: ArrivalRecord
    eta: datetime
    wait_minutes: int

    @property
    def route(self) -> str:
        return self.record.route

    @property
    def destination_primary(self) -> str:
        return self.record.destination_primary

    @property
    def destination_secondary(self) -> str:
        return self.record.destination_secondary


def parse_eta(value: str | None) -> datetime | None:
    """Parse an ISO-8601 ETA; naive values are taken as UTC."""
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def wait_minutes(eta: datetime, now: datetime) -> int:
    """Minutes from ``now`` to ``eta``, rounded half up and clamped at zero."""
    seconds = (eta - now).total_seconds()
    return max(0, math.floor(seconds / 60 + 0.5))


def process(arrivals: Sequence[ArrivalRecord] | None, now: datetime) -> list[ProcessedArrival]:
    """Annotate arrivals with wait minutes and sort them soonest first.

    Records without a usable ETA are skipped with a warning. The sort is
    stable, so equal waits keep their input order.
    """
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")
    if not arrivals:
        return []

    processed: list[ProcessedArrival] = []
    for record in arrivals:
        eta = parse_eta(record.eta)
        if eta is None:
            logger.warning(
                "Skipping arrival for route %s with unusable ETA %r", record.route or "?", record.eta
            )
            continue
        processed.append(ProcessedArrival(record=record, eta=eta, wait_minutes=wait_minutes(eta, now)))

    return sorted(processed, key=lambda item: item.wait_minutes)


def next_arrival(processed: Sequence[ProcessedArrival]) -> ProcessedArrival | None:
    """Return the soonest processed arrival, if any."""
    return processed[0] if processed else None


__all__ = ["ProcessedArrival", "next_arrival", "parse_eta", "process", "wait_minutes"]
