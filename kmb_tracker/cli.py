"""Command-line entry point for the KMB stop tracker."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
import sys

from kmb_tracker.app import TrackerApp
from kmb_tracker.config import AppConfig, load_config
from kmb_tracker.data.favorites import FavoriteStop
from kmb_tracker.exceptions import KMBTrackerError
from kmb_tracker.logging_setup import setup_logging
from kmb_tracker.logic.search import BROWSE_LIMIT, MIN_QUERY_LENGTH, SEARCH_LIMIT, find_stop
from kmb_tracker.rendering import build_board_data, compose_board, save_board
from kmb_tracker.rendering.text import format_arrivals, format_favorites, format_stops
from kmb_tracker.web.server import serve


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kmb-tracker", description="KMB bus stop arrivals and favorites")
    parser.add_argument("--config", default="config/config.yaml", help="Path to the YAML config file")
    commands = parser.add_subparsers(dest="command", required=True)

    serve_parser = commands.add_parser("serve", help="Run the web front end")
    serve_parser.add_argument("--host", help="Override server.host")
    serve_parser.add_argument("--port", type=int, help="Override server.port")

    stops_parser = commands.add_parser("stops", help="List or search stops")
    stops_parser.add_argument("--search", default="", help="Substring of either stop name")
    stops_parser.add_argument(
        "--limit",
        type=_positive_int,
        help=f"Maximum stops to print (default {BROWSE_LIMIT}, or {SEARCH_LIMIT} when searching)",
    )

    arrivals_parser = commands.add_parser("arrivals", help="Show arrivals for a stop")
    arrivals_parser.add_argument("stop_id")
    arrivals_parser.add_argument("--name", default="", help="Display name for the stop")
    arrivals_parser.add_argument("--board", help="Also save the arrival board PNG to this path")

    favorites_parser = commands.add_parser("favorites", help="Manage favorite stops")
    favorite_commands = favorites_parser.add_subparsers(dest="action", required=True)
    favorite_commands.add_parser("list")
    add_parser = favorite_commands.add_parser("add")
    add_parser.add_argument("stop_id")
    add_parser.add_argument("name")
    rename_parser = favorite_commands.add_parser("rename")
    rename_parser.add_argument("id")
    rename_parser.add_argument("name")
    remove_parser = favorite_commands.add_parser("remove")
    remove_parser.add_argument("id")

    return parser


def _print_favorites(favorites: Sequence[FavoriteStop]) -> None:
    print(format_favorites(favorites))


def _run_stops(app: TrackerApp, args: argparse.Namespace) -> int:
    app.load_stops()
    if app.stop_list_error:
        print(app.stop_list_error, file=sys.stderr)
        return 1
    if args.search:
        if len(args.search.strip()) < MIN_QUERY_LENGTH:
            print(f"Search query must be at least {MIN_QUERY_LENGTH} characters.", file=sys.stderr)
            return 1
        print(format_stops(app.search(args.search, args.limit or SEARCH_LIMIT)))
    else:
        print(format_stops(app.browse(args.limit or BROWSE_LIMIT)))
    return 0


def _run_arrivals(app: TrackerApp, config: AppConfig, args: argparse.Namespace) -> int:
    name = args.name
    if not name:
        favorite = app.favorites.find_by_stop_id(args.stop_id)
        if favorite is not None:
            name = favorite.name
        else:
            stop = find_stop(app.ensure_stops(), args.stop_id)
            name = stop.name_primary if stop else args.stop_id

    result = app.select_stop(args.stop_id, name)
    if result.error:
        print(result.error, file=sys.stderr)
        return 1

    board = build_board_data(name, result.arrivals)
    print(format_arrivals(board))
    if args.board:
        save_board(compose_board(board, config.display.width, config.display.height), args.board)
    return 0


def _run_favorites(app: TrackerApp, args: argparse.Namespace) -> int:
    if args.action == "list":
        _print_favorites(app.favorites.list())
        return 0

    app.favorites.subscribe(_print_favorites)
    if args.action == "add":
        app.favorites.add(args.stop_id, args.name)
    elif args.action == "rename":
        app.favorites.rename(args.id, args.name)
    elif args.action == "remove":
        if not app.favorites.remove(args.id):
            print(f"No favorite with id {args.id}; nothing removed.")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        config = load_config(args.config)
    except ValueError as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        return 1

    setup_logging(config.log)
    app = TrackerApp.from_config(config)

    try:
        if args.command == "serve":
            port = args.port if args.port is not None else config.server.port
            serve(app, args.host or config.server.host, port, config.display)
            return 0
        if args.command == "stops":
            return _run_stops(app, args)
        if args.command == "arrivals":
            return _run_arrivals(app, config, args)
        if args.command == "favorites":
            return _run_favorites(app, args)
    except KMBTrackerError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
