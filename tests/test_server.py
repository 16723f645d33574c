from __future__ import annotations

from datetime import datetime, timedelta, timezone
import http.client
import threading
from collections.abc import Iterator
from unittest.mock import MagicMock
from urllib.parse import urlsplit

import pytest
import requests

from kmb_tracker.app import TrackerApp
from kmb_tracker.data.models import ArrivalRecord, Stop
from kmb_tracker.data.storage import LocalStorage
from kmb_tracker.exceptions import NetworkError
from kmb_tracker.web.server import create_server

NOW = datetime(2024, 6, 1, 4, 0, 0, tzinfo=timezone.utc)

# Talk to the local server directly, ignoring any proxy settings.
_http = requests.Session()
_http.trust_env = False


@pytest.fixture()
def client() -> MagicMock:
    client = MagicMock()
    client.fetch_stop_list.return_value = [
        Stop("A1", "旺角站", "MONG KOK STATION"),
        Stop("B2", "尖沙咀碼頭", "STAR FERRY"),
    ]
    client.fetch_arrivals.return_value = [
        ArrivalRecord("1A", "中秀茂坪", (NOW + timedelta(minutes=7)).isoformat()),
        ArrivalRecord("6", "荔枝角", (NOW + timedelta(minutes=2)).isoformat()),
    ]
    return client


@pytest.fixture()
def app(client: MagicMock, tmp_path) -> TrackerApp:
    return TrackerApp(client=client, storage=LocalStorage(tmp_path / "storage.json"), now=lambda: NOW)


@pytest.fixture()
def base_url(app: TrackerApp) -> Iterator[str]:
    server = create_server(app, "127.0.0.1", 0)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}"
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=2)


def test_healthz(base_url: str) -> None:
    response = _http.get(f"{base_url}/healthz", timeout=5)

    assert response.status_code == 200
    assert response.text == "ok"


def test_root_redirects_to_browse(base_url: str) -> None:
    response = _http.get(f"{base_url}/", allow_redirects=False, timeout=5)

    assert response.status_code == 303
    assert response.headers["Location"] == "/browse-stops"


def test_browse_lists_stops(base_url: str) -> None:
    response = _http.get(f"{base_url}/browse-stops", timeout=5)

    assert response.status_code == 200
    assert "MONG KOK STATION" in response.text
    assert "STAR FERRY" in response.text


def test_browse_search(base_url: str) -> None:
    response = _http.get(f"{base_url}/browse-stops", params={"q": "ferry"}, timeout=5)

    results = response.text.split('id="searchResults">')[1].split("</div>\n    </section>")[0]
    assert "STAR FERRY" in results
    assert "MONG KOK" not in results


def test_browse_stop_list_failure_shows_message(base_url: str, client: MagicMock) -> None:
    client.fetch_stop_list.side_effect = NetworkError("down")

    response = _http.get(f"{base_url}/browse-stops", timeout=5)

    assert response.status_code == 200
    assert "Could not load bus stop list. Please refresh." in response.text


def test_selecting_stop_shows_sorted_arrivals(base_url: str, client: MagicMock) -> None:
    response = _http.get(
        f"{base_url}/browse-stops", params={"stop": "A1", "name": "旺角站"}, timeout=5
    )

    client.fetch_arrivals.assert_called_once_with("A1")
    assert "Next Bus: Route 6 to 荔枝角 in ~2 min" in response.text
    assert response.text.index("荔枝角") < response.text.index("中秀茂坪")


def test_arrivals_failure_shows_message(base_url: str, client: MagicMock) -> None:
    client.fetch_arrivals.side_effect = NetworkError("timeout")

    response = _http.get(
        f"{base_url}/browse-stops", params={"stop": "A1", "name": "旺角站"}, timeout=5
    )

    assert response.status_code == 200
    assert "Failed to fetch arrival data. Please try again." in response.text


def test_pending_favorite_prefills_form_once(base_url: str) -> None:
    response = _http.post(
        f"{base_url}/favorites/pending",
        data={"stop_id": "A1", "stop_name": "旺角站"},
        allow_redirects=False,
        timeout=5,
    )
    assert response.status_code == 303
    assert response.headers["Location"] == "/favorites"

    first = _http.get(f"{base_url}/favorites", timeout=5)
    second = _http.get(f"{base_url}/favorites", timeout=5)

    assert 'value="旺角站 Stop"' in first.text
    assert 'value="旺角站 Stop"' not in second.text


def test_favorites_crud(base_url: str, app: TrackerApp) -> None:
    added = _http.post(f"{base_url}/favorites/add", data={"stop_id": "A1", "name": "Home"}, timeout=5)
    assert added.status_code == 200
    assert "Saved Home." in added.text
    favorite = app.favorites.list()[0]

    duplicate = _http.post(f"{base_url}/favorites/add", data={"stop_id": "A1", "name": "Again"}, timeout=5)
    assert duplicate.status_code == 400
    assert "already in your favorites" in duplicate.text

    renamed = _http.post(
        f"{base_url}/favorites/rename", data={"id": favorite.id, "name": "Work"}, allow_redirects=False, timeout=5
    )
    assert renamed.status_code == 303
    assert app.favorites.list()[0].name == "Work"

    missing = _http.post(f"{base_url}/favorites/rename", data={"id": "nope", "name": "x"}, timeout=5)
    assert missing.status_code == 404

    for _ in range(2):
        deleted = _http.post(
            f"{base_url}/favorites/delete", data={"id": favorite.id}, allow_redirects=False, timeout=5
        )
        assert deleted.status_code == 303
    assert app.favorites.list() == []


def test_add_favorite_validation_error(base_url: str, app: TrackerApp) -> None:
    response = _http.post(f"{base_url}/favorites/add", data={"stop_id": "A1", "name": " "}, timeout=5)

    assert response.status_code == 400
    assert "Please enter both Stop ID and a Friendly Name" in response.text
    assert app.favorites.list() == []


def test_board_png(base_url: str) -> None:
    response = _http.get(f"{base_url}/board.png", params={"stop": "A1", "name": "MK"}, timeout=5)

    assert response.status_code == 200
    assert response.headers["Content-Type"] == "image/png"
    assert response.content.startswith(b"\x89PNG")


def test_board_png_requires_stop(base_url: str) -> None:
    response = _http.get(f"{base_url}/board.png", timeout=5)

    assert response.status_code == 400


def test_unknown_path(base_url: str) -> None:
    assert _http.get(f"{base_url}/nope", timeout=5).status_code == 404


def test_board_png_reuses_page_fetch(base_url: str, client: MagicMock) -> None:
    params = {"stop": "A1", "name": "MK"}
    page = _http.get(f"{base_url}/browse-stops", params=params, timeout=5)
    board = _http.get(f"{base_url}/board.png", params=params, timeout=5)

    assert 'src="/board.png?' in page.text
    assert board.status_code == 200
    assert client.fetch_arrivals.call_count == 1


def test_post_with_invalid_content_length(base_url: str, app: TrackerApp) -> None:
    parts = urlsplit(base_url)
    connection = http.client.HTTPConnection(parts.hostname, parts.port, timeout=5)
    try:
        connection.putrequest("POST", "/favorites/add")
        connection.putheader("Content-Length", "abc")
        connection.endheaders()
        response = connection.getresponse()

        assert response.status == 400
        assert b"invalid Content-Length" in response.read()
    finally:
        connection.close()
    assert app.favorites.list() == []
