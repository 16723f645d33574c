"""Web front end for browsing stops, arrivals and favorites."""

from __future__ import annotations

from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, HTTPServer
import logging
from typing import Any
from urllib.parse import parse_qs, urlsplit

from kmb_tracker.app import SelectedStop, TrackerApp
from kmb_tracker.config import DisplayConfig
from kmb_tracker.data.favorites import take_pending_favorite
from kmb_tracker.exceptions import KMBTrackerError, NotFoundError
from kmb_tracker.rendering import board_png_bytes, build_board_data, compose_board
from kmb_tracker.rendering.composer import DISPLAY_HEIGHT, DISPLAY_WIDTH
from kmb_tracker.rendering.pages import (
    render_arrivals_page,
    render_browse_page,
    render_favorites_page,
)

logger = logging.getLogger(__name__)

MAX_FORM_BYTES = 64 * 1024


def _first(params: dict[str, list[str]], key: str) -> str:
    values = params.get(key)
    return values[0] if values else ""


def make_handler(app: TrackerApp, display: DisplayConfig | None = None) -> type[BaseHTTPRequestHandler]:
    """Build a request handler class bound to one application controller."""
    board_width = display.width if display else DISPLAY_WIDTH
    board_height = display.height if display else DISPLAY_HEIGHT

    class TrackerHandler(BaseHTTPRequestHandler):
        def do_GET(self) -> None:  # noqa: N802
            url = urlsplit(self.path)
            params = parse_qs(url.query)

            if url.path == "/healthz":
                self._send(HTTPStatus.OK, b"ok", "text/plain; charset=utf-8")
                return
            if url.path == "/":
                self._redirect("/browse-stops")
                return
            if url.path == "/browse-stops":
                self._browse(params)
                return
            if url.path == "/favorites":
                self._favorites_page()
                return
            if url.path == "/board.png":
                self._board(params)
                return

            self._send(HTTPStatus.NOT_FOUND, b"not found", "text/plain; charset=utf-8")

        def do_POST(self) -> None:  # noqa: N802
            url = urlsplit(self.path)
            form = self._read_form()
            if form is None:
                self._send(HTTPStatus.BAD_REQUEST, b"invalid Content-Length", "text/plain; charset=utf-8")
                return

            if url.path == "/favorites/pending":
                stop_id = _first(form, "stop_id")
                stop_name = _first(form, "stop_name")
                if stop_id and stop_name:
                    app.selected = SelectedStop(id=stop_id, name=stop_name)
                    app.save_selected_to_favorites()
                self._redirect("/favorites")
                return
            if url.path == "/favorites/add":
                stop_id = _first(form, "stop_id")
                name = _first(form, "name")
                try:
                    favorite = app.favorites.add(stop_id, name)
                except KMBTrackerError as exc:
                    self._favorites_page(
                        status=HTTPStatus.BAD_REQUEST, error=str(exc), prefill=(stop_id, name)
                    )
                    return
                self._favorites_page(message=f"Saved {favorite.name}.")
                return
            if url.path == "/favorites/rename":
                try:
                    app.favorites.rename(_first(form, "id"), _first(form, "name"))
                except NotFoundError as exc:
                    self._favorites_page(status=HTTPStatus.NOT_FOUND, error=str(exc))
                    return
                except KMBTrackerError as exc:
                    self._favorites_page(status=HTTPStatus.BAD_REQUEST, error=str(exc))
                    return
                self._redirect("/favorites")
                return
            if url.path == "/favorites/delete":
                app.favorites.remove(_first(form, "id"))
                self._redirect("/favorites")
                return

            self._send(HTTPStatus.NOT_FOUND, b"not found", "text/plain; charset=utf-8")

        def _browse(self, params: dict[str, list[str]]) -> None:
            stop_id = _first(params, "stop")
            stop_name = _first(params, "name")
            if stop_id and stop_name:
                result = app.select_stop(stop_id, stop_name)
                board = build_board_data(stop_name, result.arrivals)
                self._send_html(HTTPStatus.OK, render_arrivals_page(stop_id, board, result.error))
                return

            app.clear_selection()
            query = _first(params, "q")
            if query:
                app.ensure_stops()
                matches = app.search(query) if len(query.strip()) >= 2 else None
            else:
                app.load_stops()
                matches = None
            html = render_browse_page(app.browse(), query, matches, app.stop_list_error)
            self._send_html(HTTPStatus.OK, html)

        def _favorites_page(
            self,
            status: HTTPStatus = HTTPStatus.OK,
            error: str | None = None,
            message: str | None = None,
            prefill: tuple[str, str] = ("", ""),
        ) -> None:
            prefill_stop_id, prefill_name = prefill
            pending = take_pending_favorite(app.storage)
            if pending is not None:
                prefill_stop_id = pending.stop_id
                prefill_name = f"{pending.stop_name} Stop"
            html = render_favorites_page(
                app.favorites.list(), prefill_stop_id, prefill_name, error=error, message=message
            )
            self._send_html(status, html)

        def _board(self, params: dict[str, list[str]]) -> None:
            stop_id = _first(params, "stop")
            if not stop_id:
                self._send(HTTPStatus.BAD_REQUEST, b"missing stop", "text/plain; charset=utf-8")
                return
            result = app.current_arrivals(stop_id, _first(params, "name") or stop_id)
            if result.error:
                self._send(HTTPStatus.BAD_GATEWAY, result.error.encode("utf-8"), "text/plain; charset=utf-8")
                return
            image = compose_board(
                build_board_data(result.stop.name, result.arrivals), board_width, board_height
            )
            self._send(HTTPStatus.OK, board_png_bytes(image), "image/png")

        def _read_form(self) -> dict[str, list[str]] | None:
            try:
                length = int(self.headers.get("Content-Length") or 0)
            except ValueError:
                return None
            raw = self.rfile.read(min(length, MAX_FORM_BYTES)) if length > 0 else b""
            return parse_qs(raw.decode("utf-8", errors="replace"))

        def _redirect(self, location: str) -> None:
            self.send_response(HTTPStatus.SEE_OTHER)
            self.send_header("Location", location)
            self.send_header("Content-Length", "0")
            self.end_headers()

        def _send_html(self, status: HTTPStatus, html: str) -> None:
            self._send(status, html.encode("utf-8"), "text/html; charset=utf-8")

        def _send(self, status: HTTPStatus, body: bytes, content_type: str) -> None:
            self.send_response(status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format: str, *args: Any) -> None:
            logger.debug("%s %s", self.address_string(), format % args)

    return TrackerHandler


def create_server(
    app: TrackerApp, host: str, port: int, display: DisplayConfig | None = None
) -> HTTPServer:
    return HTTPServer((host, port), make_handler(app, display))


def serve(app: TrackerApp, host: str, port: int, display: DisplayConfig | None = None) -> None:
    server = create_server(app, host, port, display)
    logger.info("Serving on http://%s:%d/", host, server.server_address[1])
    try:
        server.serve_forever()
    finally:
        server.server_close()


__all__ = ["create_server", "make_handler", "serve"]
