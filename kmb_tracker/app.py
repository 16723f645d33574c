"""Application controller that owns the stop directory and current selection."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
import logging

from kmb_tracker.config import AppConfig
from kmb_tracker.data.favorites import FavoritesStore, save_pending_favorite
from kmb_tracker.data.kmb_client import KMBClient
from kmb_tracker.data.models import Stop
from kmb_tracker.data.storage import LocalStorage
from kmb_tracker.exceptions import NetworkError
from kmb_tracker.logic.arrivals import ProcessedArrival, process
from kmb_tracker.logic.search import BROWSE_LIMIT, SEARCH_LIMIT, browse_stops, search_stops

logger = logging.getLogger(__name__)

STOP_LIST_ERROR = "Could not load bus stop list. Please refresh."
ARRIVALS_ERROR = "Failed to fetch arrival data. Please try again."


@dataclass(frozen=True)
class SelectedStop:
    id: str
    name: str


@dataclass(frozen=True)
class ArrivalsResult:
    """Outcome of one arrivals fetch for the selected stop."""

    stop: SelectedStop
    arrivals: list[ProcessedArrival]
    fetched_at: datetime
    error: str | None


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TrackerApp:
    """Explicit state for the views: the stop list and the selected stop."""

    def __init__(
        self,
        client: KMBClient,
        storage: LocalStorage,
        favorites: FavoritesStore | None = None,
        now: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.client = client
        self.storage = storage
        self.favorites = favorites if favorites is not None else FavoritesStore(storage)
        self._now = now
        self.all_stops: list[Stop] = []
        self.selected: SelectedStop | None = None
        self.stop_list_error: str | None = None
        self.last_result: ArrivalsResult | None = None

    @classmethod
    def from_config(cls, config: AppConfig) -> TrackerApp:
        client = KMBClient(
            stop_list_url=config.api.stop_list_url,
            eta_url_base=config.api.eta_url_base,
            timeout_seconds=config.api.timeout_seconds,
        )
        return cls(client=client, storage=LocalStorage(config.storage.path))

    def load_stops(self) -> list[Stop]:
        """Fetch the directory; on failure keep the previous list and record an error."""
        try:
            self.all_stops = self.client.fetch_stop_list()
        except NetworkError as exc:
            logger.error("Stop list fetch failed: %s", exc)
            self.stop_list_error = STOP_LIST_ERROR
        else:
            self.stop_list_error = None
        return self.all_stops

    def ensure_stops(self) -> list[Stop]:
        if not self.all_stops:
            self.load_stops()
        return self.all_stops

    def browse(self, limit: int = BROWSE_LIMIT) -> list[Stop]:
        return browse_stops(self.all_stops, limit)

    def search(self, query: str, limit: int = SEARCH_LIMIT) -> list[Stop]:
        return search_stops(self.all_stops, query, limit)

    def select_stop(self, stop_id: str, stop_name: str) -> ArrivalsResult:
        """Make a stop current and fetch its arrivals."""
        self.selected = SelectedStop(id=stop_id, name=stop_name)
        return self.refresh_arrivals()

    def refresh_arrivals(self) -> ArrivalsResult:
        if self.selected is None:
            raise RuntimeError("No stop selected")
        now = self._now()
        try:
            records = self.client.fetch_arrivals(self.selected.id)
        except NetworkError as exc:
            logger.error("Arrivals fetch for stop %s failed: %s", self.selected.id, exc)
            result = ArrivalsResult(stop=self.selected, arrivals=[], fetched_at=now, error=ARRIVALS_ERROR)
        else:
            result = ArrivalsResult(
                stop=self.selected, arrivals=process(records, now), fetched_at=now, error=None
            )
        self.last_result = result
        return result

    def current_arrivals(self, stop_id: str, stop_name: str) -> ArrivalsResult:
        """Reuse the last successful fetch for this stop, fetching only when there is none."""
        last = self.last_result
        if last is not None and last.error is None and last.stop.id == stop_id:
            return last
        return self.select_stop(stop_id, stop_name)

    def clear_selection(self) -> None:
        self.selected = None

    def save_selected_to_favorites(self) -> bool:
        """Stage the selected stop for the favorites form."""
        if self.selected is None or not self.selected.id or not self.selected.name:
            return False
        save_pending_favorite(self.storage, self.selected.id, self.selected.name)
        return True


__all__ = ["ARRIVALS_ERROR", "ArrivalsResult", "STOP_LIST_ERROR", "SelectedStop", "TrackerApp"]
