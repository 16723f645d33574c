"""Arrival board image composer."""

from __future__ import annotations

from PIL import Image, ImageDraw, ImageFont

from kmb_tracker.rendering.board_data import BoardData, BoardRow

DISPLAY_WIDTH = 192
DISPLAY_HEIGHT = 64
MIN_WIDTH = 96
MIN_HEIGHT = 32

HEADER_HEIGHT = 12
ROW_HEIGHT = 12

DOT_DIAMETER = 6
DOT_RADIUS = DOT_DIAMETER // 2
DOT_LEFT_MARGIN = 3
DOT_CENTER_OFFSET = DOT_LEFT_MARGIN + DOT_RADIUS

ROUTE_X = 12
CLOCK_X_FROM_RIGHT = 64
WAIT_X_FROM_RIGHT = 26

COLOR_BACKGROUND = (0, 0, 0)
COLOR_HEADER = (255, 200, 0)
COLOR_TEXT = (255, 255, 255)
COLOR_CLOCK = (136, 136, 136)
COLOR_SEPARATOR = (42, 42, 42)
COLOR_DIM_TEXT = (72, 72, 72)

COLOR_DUE = (0, 200, 0)
COLOR_SOON = (220, 180, 0)
COLOR_LATER = (72, 72, 200)

SOON_MINUTES = 10

FONT = ImageFont.load_default()


def _drawable(text: str) -> str:
    # The bundled bitmap font only covers Latin-1.
    return text.encode("latin-1", errors="replace").decode("latin-1")


def _dot_color(wait_minutes: int) -> tuple[int, int, int]:
    if wait_minutes <= 0:
        return COLOR_DUE
    if wait_minutes <= SOON_MINUTES:
        return COLOR_SOON
    return COLOR_LATER


def _draw_row(draw: ImageDraw.ImageDraw, index: int, row: BoardRow, width: int) -> None:
    top = HEADER_HEIGHT + index * ROW_HEIGHT
    dot_top = top + (ROW_HEIGHT - DOT_DIAMETER) // 2
    draw.ellipse(
        [DOT_LEFT_MARGIN, dot_top, DOT_LEFT_MARGIN + DOT_DIAMETER - 1, dot_top + DOT_DIAMETER - 1],
        fill=_dot_color(row.wait_minutes),
    )
    text_y = top + 1
    draw.text((ROUTE_X, text_y), _drawable(row.route), font=FONT, fill=COLOR_TEXT)
    draw.text((width - CLOCK_X_FROM_RIGHT, text_y), row.clock_time, font=FONT, fill=COLOR_CLOCK)
    wait_text = "NOW" if row.wait_minutes <= 0 else f"{row.wait_minutes}m"
    draw.text((width - WAIT_X_FROM_RIGHT, text_y), wait_text, font=FONT, fill=COLOR_TEXT)


def compose_board(data: BoardData, width: int = DISPLAY_WIDTH, height: int = DISPLAY_HEIGHT) -> Image.Image:
    """Compose an RGB board listing the soonest arrivals that fit."""
    if width < MIN_WIDTH or height < MIN_HEIGHT:
        raise ValueError(f"Board must be at least {MIN_WIDTH}x{MIN_HEIGHT}, got {width}x{height}.")

    image = Image.new("RGB", (width, height), COLOR_BACKGROUND)
    draw = ImageDraw.Draw(image)

    draw.text((2, 0), _drawable(data.stop_name), font=FONT, fill=COLOR_HEADER)
    draw.line((0, HEADER_HEIGHT - 1, width - 1, HEADER_HEIGHT - 1), fill=COLOR_SEPARATOR)

    max_rows = (height - HEADER_HEIGHT) // ROW_HEIGHT
    if not data.rows:
        draw.text((ROUTE_X, HEADER_HEIGHT + 1), "No arrivals", font=FONT, fill=COLOR_DIM_TEXT)
        return image

    for index, row in enumerate(data.rows[:max_rows]):
        _draw_row(draw, index, row, width)
    return image


__all__ = ["compose_board"]
