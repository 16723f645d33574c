"""Durable key/value slots backed by a single JSON document on disk."""

from __future__ import annotations

import json
import os
from pathlib import Path
import tempfile

from kmb_tracker.exceptions import StorageError


class LocalStorage:
    """String slots keyed by name, persisted as one JSON object.

    Every write rewrites the whole document through a temporary file and
    ``os.replace`` so readers never observe a partial write.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get_item(self, key: str) -> str | None:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError("LocalStorage values must be strings")
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, ValueError) as exc:
            raise StorageError(f"Could not read storage file {self._path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"Storage file {self._path} must contain a JSON object")
        return data

    def _write(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".storage-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self._path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Could not write storage file {self._path}: {exc}") from exc


__all__ = ["LocalStorage"]
