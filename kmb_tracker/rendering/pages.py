"""HTML pages for the web front end."""

from __future__ import annotations

from collections.abc import Sequence
from html import escape
from urllib.parse import urlencode

from kmb_tracker.data.favorites import FavoriteStop
from kmb_tracker.data.models import Stop
from kmb_tracker.rendering.board_data import BoardData

STYLE = """
      body { background: #111; color: #eee; font-family: sans-serif; margin: 2em; }
      a { color: #7cf; }
      .stop-item, .favorite-item { padding: 0.4em 0; border-bottom: 1px solid #333; }
      .stop-id { color: #888; margin-left: 1em; }
      .error { color: #f66; }
      .message { color: #6f6; }
      table { border-collapse: collapse; }
      th, td { padding: 0.3em 1em; text-align: left; }
      form.inline { display: inline; }
"""


def _page(title: str, body: str) -> str:
    return f"""<!doctype html>
<html>
  <head>
    <meta charset="utf-8">
    <style>{STYLE}</style>
    <title>{escape(title)}</title>
  </head>
  <body>
    <nav><a href="/browse-stops">Browse stops</a> | <a href="/favorites">Favorites</a></nav>
{body}
  </body>
</html>"""


def stop_link(stop_id: str, stop_name: str) -> str:
    return "/browse-stops?" + urlencode({"stop": stop_id, "name": stop_name})


def _notice(error: str | None, message: str | None = None) -> str:
    parts = []
    if error:
        parts.append(f'<p class="error">{escape(error)}</p>')
    if message:
        parts.append(f'<p class="message">{escape(message)}</p>')
    return "\n".join(parts)


def _stop_items(stops: Sequence[Stop], empty_text: str) -> str:
    if not stops:
        return f'<div class="stop-item">{escape(empty_text)}</div>'
    items = []
    for stop in stops:
        href = escape(stop_link(stop.id, stop.name_primary))
        items.append(
            f'<div class="stop-item"><a href="{href}">'
            f'<span class="stop-name">{escape(stop.name_primary)} / {escape(stop.name_secondary)}</span></a>'
            f'<span class="stop-id">ID: {escape(stop.id)}</span></div>'
        )
    return "\n".join(items)


def render_browse_page(
    stops: Sequence[Stop],
    query: str = "",
    matches: Sequence[Stop] | None = None,
    error: str | None = None,
) -> str:
    """Search box, optional search results, and the first page of stops."""
    search_results = ""
    if matches is not None:
        search_results = _stop_items(matches, "No matching stops found")
    body = f"""
    <h1>Browse Bus Stops</h1>
    {_notice(error)}
    <section class="search-section">
      <form method="get" action="/browse-stops">
        <input type="text" name="q" value="{escape(query)}" placeholder="Search stop name">
        <button type="submit">Search</button>
      </form>
      <div id="searchResults">{search_results}</div>
    </section>
    <p class="or-divider">or</p>
    <section class="all-stops-section">
      <h2>All Stops</h2>
      {_stop_items(stops, "No stops found.")}
    </section>"""
    return _page("Browse Bus Stops", body)


def render_arrivals_page(stop_id: str, data: BoardData, error: str | None = None) -> str:
    """Arrival table for the selected stop with save and back actions."""
    if error:
        results = ""
    elif not data.rows:
        results = f"<p>{escape(data.headline)}</p>"
    else:
        rows = "\n".join(
            f"<tr><td><strong>{escape(row.route)}</strong></td><td>{escape(row.destination)}</td>"
            f"<td>{escape(row.clock_time)}</td><td>{row.wait_minutes}</td></tr>"
            for row in data.rows
        )
        results = f"""<h3>{escape(data.headline)}</h3>
      <table>
        <thead><tr><th>Route</th><th>Destination</th><th>Arrival Time</th><th>Wait (min)</th></tr></thead>
        <tbody>
{rows}
        </tbody>
      </table>
      <img src="/board.png?{escape(urlencode({"stop": stop_id, "name": data.stop_name}))}" alt="Arrival board">"""

    body = f"""
    <section id="arrivalResultsArea">
      <h3>Selected Stop: {escape(data.stop_name)} (ID: {escape(stop_id)})</h3>
      {_notice(error)}
      <div id="results">{results}</div>
      <form method="post" action="/favorites/pending" class="inline">
        <input type="hidden" name="stop_id" value="{escape(stop_id)}">
        <input type="hidden" name="stop_name" value="{escape(data.stop_name)}">
        <button type="submit" id="saveToFavoritesBtn">Save to favorites</button>
      </form>
      <a id="backToBrowseBtn" href="/browse-stops">Back to stops</a>
    </section>"""
    return _page(f"Arrivals: {data.stop_name}", body)


def render_favorites_page(
    favorites: Sequence[FavoriteStop],
    prefill_stop_id: str = "",
    prefill_name: str = "",
    error: str | None = None,
    message: str | None = None,
) -> str:
    """Favorites list with rename, delete and view actions, plus the add form."""
    if not favorites:
        listing = '<p class="no-favorites">You have no favorite stops saved yet.</p>'
    else:
        items = []
        for fav in favorites:
            fav_id = escape(fav.id)
            items.append(
                f"""<div class="favorite-item" data-id="{fav_id}">
        <span><strong>{escape(fav.name)}</strong> <span class="stop-id">{escape(fav.stop_id)}</span></span>
        <form method="post" action="/favorites/rename" class="inline">
          <input type="hidden" name="id" value="{fav_id}">
          <input type="text" name="name" value="{escape(fav.name)}">
          <button class="edit" type="submit">Rename</button>
        </form>
        <form method="post" action="/favorites/delete" class="inline">
          <input type="hidden" name="id" value="{fav_id}">
          <button class="delete" type="submit">Delete</button>
        </form>
        <a class="view" href="{escape(stop_link(fav.stop_id, fav.name))}">View Times</a>
      </div>"""
            )
        listing = "<h3>Your Saved Stops</h3>\n" + "\n".join(items)

    body = f"""
    <h1>Favorite Stops</h1>
    {_notice(error, message)}
    <form method="post" action="/favorites/add">
      <input type="text" id="newFavStopId" name="stop_id" value="{escape(prefill_stop_id)}" placeholder="Stop ID">
      <input type="text" id="newFavName" name="name" value="{escape(prefill_name)}" placeholder="Friendly name">
      <button type="submit" id="addFavoriteBtn">Add favorite</button>
    </form>
    <div id="favoritesList">{listing}</div>"""
    return _page("Favorite Stops", body)


__all__ = ["render_arrivals_page", "render_browse_page", "render_favorites_page", "stop_link"]
