"""Rendering utilities for arrival boards, HTML pages and text output."""

from kmb_tracker.rendering.board_data import BoardData, BoardRow, build_board_data
from kmb_tracker.rendering.composer import compose_board
from kmb_tracker.rendering.emulator import board_png_bytes, save_board

__all__ = ["BoardData", "BoardRow", "board_png_bytes", "build_board_data", "compose_board", "save_board"]
