"""Render an arrival board PNG from a saved stop-eta API response."""

from __future__ import annotations

import argparse
from datetime import datetime, timezone
import json
from typing import Any

from kmb_tracker.data.models import ArrivalRecord
from kmb_tracker.logic.arrivals import parse_eta, process
from kmb_tracker.rendering import build_board_data, compose_board, save_board


def _load_payload(path: str) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise SystemExit(f"{path} must contain a JSON object")
    return payload


def _reference_time(payload: dict[str, Any], override: str | None) -> datetime:
    # Replay against the response timestamp so old samples still show waits.
    for value in (override, payload.get("generated_timestamp")):
        parsed = parse_eta(value)
        if parsed is not None:
            return parsed
    return datetime.now(timezone.utc)


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("path", nargs="?", default="data/samples/stop_eta.json")
    parser.add_argument("--name", default="Sample stop")
    parser.add_argument("--now", help="ISO-8601 reference time")
    parser.add_argument("--output", default="emulator_output/board.png")
    args = parser.parse_args()

    payload = _load_payload(args.path)
    records = [ArrivalRecord.from_api(item) for item in payload.get("data") or [] if isinstance(item, dict)]
    arrivals = process(records, _reference_time(payload, args.now))

    board = build_board_data(args.name, arrivals)
    save_board(compose_board(board), args.output)
    print(board.headline)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
