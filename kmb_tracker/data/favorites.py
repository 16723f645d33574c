"""Favorite stops persisted in local storage."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import json
import logging
import time
from typing import Any

from kmb_tracker.data.storage import LocalStorage
from kmb_tracker.exceptions import DuplicateError, NotFoundError, StorageError, ValidationError

logger = logging.getLogger(__name__)

FAVORITES_KEY = "kmbFavorites"
PENDING_FAVORITE_KEY = "pendingFavorite"


@dataclass(frozen=True)
class FavoriteStop:
    """A user-named favorite for a KMB stop."""

    id: str
    stop_id: str
    name: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "stopId": self.stop_id, "name": self.name}

    @classmethod
    def from_dict(cls, data: Any) -> FavoriteStop:
        if not isinstance(data, dict):
            raise StorageError(f"Favorite entry must be an object, got {data!r}")
        try:
            return cls(id=str(data["id"]), stop_id=str(data["stopId"]), name=str(data["name"]))
        except KeyError as exc:
            raise StorageError(f"Favorite entry is missing {exc.args[0]!r}") from exc


@dataclass(frozen=True)
class PendingFavorite:
    """Stop handed from the browse view to the favorites form."""

    stop_id: str
    stop_name: str


FavoritesObserver = Callable[[list[FavoriteStop]], None]


class FavoritesStore:
    """CRUD over the ordered favorites list.

    The collection is read in full, mutated and rewritten in full on every
    change. Observers are called with the new list after each write.
    """

    def __init__(
        self,
        storage: LocalStorage,
        clock: Callable[[], float] = time.time,
        key: str = FAVORITES_KEY,
    ) -> None:
        self._storage = storage
        self._clock = clock
        self._key = key
        self._observers: list[FavoritesObserver] = []

    def subscribe(self, observer: FavoritesObserver) -> None:
        self._observers.append(observer)

    def unsubscribe(self, observer: FavoritesObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def list(self) -> list[FavoriteStop]:
        """Return favorites in insertion order."""
        raw = self._storage.get_item(self._key)
        if not raw:
            return []
        try:
            entries = json.loads(raw)
        except ValueError as exc:
            raise StorageError(f"Stored favorites are not valid JSON: {exc}") from exc
        if not isinstance(entries, list):
            raise StorageError("Stored favorites must be a JSON list")
        return [FavoriteStop.from_dict(entry) for entry in entries]

    def get(self, favorite_id: str) -> FavoriteStop | None:
        for favorite in self.list():
            if favorite.id == favorite_id:
                return favorite
        return None

    def find_by_stop_id(self, stop_id: str) -> FavoriteStop | None:
        stop_id = stop_id.strip()
        for favorite in self.list():
            if favorite.stop_id == stop_id:
                return favorite
        return None

    def add(self, stop_id: str, name: str) -> FavoriteStop:
        """Append a favorite; at most one favorite may exist per stop id."""
        stop_id = (stop_id or "").strip()
        name = (name or "").strip()
        if not stop_id or not name:
            raise ValidationError("Please enter both Stop ID and a Friendly Name")

        favorites = self.list()
        if any(favorite.stop_id == stop_id for favorite in favorites):
            raise DuplicateError("This Stop ID is already in your favorites.")

        favorite = FavoriteStop(id=self._next_id(favorites), stop_id=stop_id, name=name)
        favorites.append(favorite)
        self._save(favorites)
        logger.info("Added favorite %s for stop %s", favorite.id, stop_id)
        return favorite

    def rename(self, favorite_id: str, new_name: str) -> FavoriteStop:
        new_name = (new_name or "").strip()
        if not new_name:
            raise ValidationError("Favorite name cannot be empty")

        favorites = self.list()
        for index, favorite in enumerate(favorites):
            if favorite.id == favorite_id:
                renamed = FavoriteStop(id=favorite.id, stop_id=favorite.stop_id, name=new_name)
                favorites[index] = renamed
                self._save(favorites)
                logger.info("Renamed favorite %s", favorite_id)
                return renamed
        raise NotFoundError(f"No favorite with id {favorite_id}")

    def remove(self, favorite_id: str) -> bool:
        """Delete a favorite; returns False when the id is unknown."""
        favorites = self.list()
        remaining = [favorite for favorite in favorites if favorite.id != favorite_id]
        if len(remaining) == len(favorites):
            return False
        self._save(remaining)
        logger.info("Removed favorite %s", favorite_id)
        return True

    def _next_id(self, favorites: list[FavoriteStop]) -> str:
        candidate = int(self._clock() * 1000)
        numeric_ids = [int(favorite.id) for favorite in favorites if favorite.id.isascii() and favorite.id.isdigit()]
        if numeric_ids and candidate <= max(numeric_ids):
            candidate = max(numeric_ids) + 1
        return str(candidate)

    def _save(self, favorites: list[FavoriteStop]) -> None:
        payload = json.dumps([favorite.to_dict() for favorite in favorites], ensure_ascii=False)
        self._storage.set_item(self._key, payload)
        for observer in list(self._observers):
            observer(list(favorites))


def save_pending_favorite(storage: LocalStorage, stop_id: str, stop_name: str) -> None:
    """Hand a stop over to the next load of the favorites view."""
    payload = json.dumps({"stopId": stop_id, "stopName": stop_name}, ensure_ascii=False)
    storage.set_item(PENDING_FAVORITE_KEY, payload)


def take_pending_favorite(storage: LocalStorage) -> PendingFavorite | None:
    """Return and clear the pending handoff, if any."""
    raw = storage.get_item(PENDING_FAVORITE_KEY)
    if raw is None:
        return None
    storage.remove_item(PENDING_FAVORITE_KEY)
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("Discarding unreadable pending favorite: %r", raw)
        return None
    if not isinstance(data, dict) or not data.get("stopId"):
        logger.warning("Discarding malformed pending favorite: %r", data)
        return None
    return PendingFavorite(stop_id=str(data["stopId"]), stop_name=str(data.get("stopName") or ""))


__all__ = [
    "FAVORITES_KEY",
    "FavoriteStop",
    "FavoritesStore",
    "PENDING_FAVORITE_KEY",
    "PendingFavorite",
    "save_pending_favorite",
    "take_pending_favorite",
]
