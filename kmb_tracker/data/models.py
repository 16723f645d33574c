"""Records read from the KMB open-data API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Stop:
    """A bus stop from the stop directory."""

    id: str
    name_primary: str
    name_secondary: str
    latitude: float | None = None
    longitude: float | None = None

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> Stop:
        return cls(
            id=str(item["stop"]),
            name_primary=item.get("name_tc") or "",
            name_secondary=item.get("name_en") or "",
            latitude=_to_float(item.get("lat")),
            longitude=_to_float(item.get("long")),
        )


@dataclass(frozen=True)
class ArrivalRecord:
    """One predicted vehicle arrival at a stop."""

    route: str
    destination_primary: str
    eta: str | None
    destination_secondary: str = ""
    eta_seq: int | None = None
    direction: str | None = None
    service_type: int | None = None
    remark: str = ""

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> ArrivalRecord:
        return cls(
            route=str(item.get("route") or ""),
            destination_primary=item.get("dest_tc") or "",
            eta=item.get("eta"),
            destination_secondary=item.get("dest_en") or "",
            eta_seq=item.get("eta_seq"),
            direction=item.get("dir"),
            service_type=item.get("service_type"),
            remark=item.get("rmk_en") or "",
        )


def _to_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


__all__ = ["ArrivalRecord", "Stop"]
