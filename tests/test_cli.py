from __future__ import annotations

from collections.abc import Sequence
import textwrap
import typing
from typing import Any
from unittest.mock import Mock, patch

import pytest

from kmb_tracker import cli
from kmb_tracker.data.favorites import FavoriteStop, FavoritesStore
from kmb_tracker.data.storage import LocalStorage


@pytest.fixture()
def config_path(tmp_path, monkeypatch) -> str:
    monkeypatch.delenv("KMB_STORAGE_PATH", raising=False)
    monkeypatch.setattr(cli, "setup_logging", lambda config: None)
    path = tmp_path / "config.yaml"
    path.write_text(
        textwrap.dedent(
            f"""
            api:
              stop_list_url: "https://example.test/stop"
              eta_url_base: "https://example.test/stop-eta"
              timeout_seconds: 5
            storage:
              path: "{tmp_path / 'storage.json'}"
            server:
              host: "127.0.0.1"
              port: 8080
            display:
              width: 192
              height: 64
            logging:
              level: "INFO"
              log_dir: "{tmp_path / 'logs'}"
            """
        )
    )
    return str(path)


def _mock_response(status_code: int, json_data: dict[str, Any]) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.text = ""
    response.json.return_value = json_data
    return response


def _store(tmp_path) -> FavoritesStore:
    return FavoritesStore(LocalStorage(tmp_path / "storage.json"))


def test_favorites_add_list_rename_remove(config_path: str, tmp_path, capsys) -> None:
    assert cli.main(["--config", config_path, "favorites", "add", "123", "Home"]) == 0
    assert "Home  (stop 123)" in capsys.readouterr().out

    favorite = _store(tmp_path).list()[0]

    assert cli.main(["--config", config_path, "favorites", "rename", favorite.id, "Work"]) == 0
    assert cli.main(["--config", config_path, "favorites", "list"]) == 0
    assert "Work  (stop 123)" in capsys.readouterr().out

    assert cli.main(["--config", config_path, "favorites", "remove", favorite.id]) == 0
    assert "You have no favorite stops saved yet." in capsys.readouterr().out
    assert cli.main(["--config", config_path, "favorites", "remove", favorite.id]) == 0
    assert "nothing removed" in capsys.readouterr().out


def test_favorites_duplicate_exits_non_zero(config_path: str, capsys) -> None:
    cli.main(["--config", config_path, "favorites", "add", "123", "Home"])
    capsys.readouterr()

    assert cli.main(["--config", config_path, "favorites", "add", "123", "Again"]) == 1
    assert "already in your favorites" in capsys.readouterr().err


def test_rename_unknown_exits_non_zero(config_path: str, capsys) -> None:
    assert cli.main(["--config", config_path, "favorites", "rename", "nope", "x"]) == 1
    assert "No favorite with id nope" in capsys.readouterr().err


def test_stops_search(config_path: str, capsys) -> None:
    payload = {
        "data": [
            {"stop": "A1", "name_tc": "旺角", "name_en": "MONG KOK"},
            {"stop": "B2", "name_tc": "尖沙咀", "name_en": "TSIM SHA TSUI"},
        ]
    }
    with patch("requests.get", return_value=_mock_response(200, payload)):
        assert cli.main(["--config", config_path, "stops", "--search", "tsim"]) == 0

    out = capsys.readouterr().out
    assert "B2  尖沙咀 / TSIM SHA TSUI" in out
    assert "A1" not in out


def test_stops_network_failure(config_path: str, capsys) -> None:
    with patch("requests.get", return_value=_mock_response(500, {})):
        assert cli.main(["--config", config_path, "stops"]) == 1

    assert "Could not load bus stop list" in capsys.readouterr().err


def test_arrivals_with_board(config_path: str, tmp_path, capsys) -> None:
    payload = {"data": [{"route": "1A", "dest_tc": "中秀茂坪", "eta": "2099-01-01T00:00:00+08:00"}]}
    board_path = tmp_path / "board.png"
    with patch("requests.get", return_value=_mock_response(200, payload)):
        code = cli.main(
            ["--config", config_path, "arrivals", "A1", "--name", "旺角", "--board", str(board_path)]
        )

    assert code == 0
    out = capsys.readouterr().out
    assert "Selected Stop: 旺角" in out
    assert "Next Bus: Route 1A to 中秀茂坪" in out
    assert board_path.exists()


def test_arrivals_network_failure(config_path: str, capsys) -> None:
    with patch("requests.get", return_value=_mock_response(503, {})):
        assert cli.main(["--config", config_path, "arrivals", "A1", "--name", "x"]) == 1

    assert "Failed to fetch arrival data" in capsys.readouterr().err


def test_missing_config(tmp_path, capsys) -> None:
    assert cli.main(["--config", str(tmp_path / "missing.yaml"), "favorites", "list"]) == 1
    assert "Config error" in capsys.readouterr().err


def test_stops_limit(config_path: str, capsys) -> None:
    payload = {
        "data": [
            {"stop": "A1", "name_tc": "旺角", "name_en": "MONG KOK STOP"},
            {"stop": "B2", "name_tc": "尖沙咀", "name_en": "TSIM SHA TSUI STOP"},
        ]
    }
    with patch("requests.get", return_value=_mock_response(200, payload)):
        assert cli.main(["--config", config_path, "stops", "--limit", "1"]) == 0
        browse_out = capsys.readouterr().out
        assert cli.main(["--config", config_path, "stops", "--search", "stop", "--limit", "1"]) == 0
        search_out = capsys.readouterr().out

    assert "A1" in browse_out
    assert "B2" not in browse_out
    assert "A1" in search_out
    assert "B2" not in search_out


def test_stops_limit_must_be_positive(config_path: str) -> None:
    with pytest.raises(SystemExit):
        cli.main(["--config", config_path, "stops", "--limit", "0"])


def test_stops_search_too_short(config_path: str, capsys) -> None:
    payload = {"data": [{"stop": "A1", "name_tc": "旺角", "name_en": "MONG KOK"}]}
    with patch("requests.get", return_value=_mock_response(200, payload)):
        assert cli.main(["--config", config_path, "stops", "--search", "m"]) == 1

    captured = capsys.readouterr()
    assert "at least 2 characters" in captured.err
    assert captured.out == ""


def test_serve_port_zero_overrides_config(config_path: str, monkeypatch) -> None:
    calls = []
    monkeypatch.setattr(cli, "serve", lambda app, host, port, display: calls.append((host, port)))

    assert cli.main(["--config", config_path, "serve", "--port", "0"]) == 0
    assert cli.main(["--config", config_path, "serve"]) == 0

    assert calls == [("127.0.0.1", 0), ("127.0.0.1", 8080)]


def test_favorites_printer_is_annotated() -> None:
    hints = typing.get_type_hints(cli._print_favorites)

    assert hints["favorites"] == Sequence[FavoriteStop]
    assert hints["return"] is type(None)
