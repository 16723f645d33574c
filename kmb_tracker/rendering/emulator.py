"""Board image output helpers."""

from __future__ import annotations

import io
from pathlib import Path

from PIL import Image


def save_board(image: Image.Image, path: str = "emulator_output/board.png") -> None:
    """Save a board image to disk as a PNG image."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(output_path, format="PNG")


def board_png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


__all__ = ["board_png_bytes", "save_board"]
