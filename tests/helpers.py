"""Synthetic document builders used across the test suite."""

import io

import numpy as np
from PIL import Image

WHITE = (255, 255, 255, 255)


def make_text_page(
    width: int = 1000,
    height: int = 600,
    line_height: int = 12,
    line_spacing: int = 40,
    margin: int = 100,
) -> np.ndarray:
    """Render a white RGBA page with rows of black word-shaped blocks."""
    page = np.full((height, width, 4), 255, dtype=np.uint8)
    bottom = height - margin // 2
    for row, top in enumerate(range(margin // 2, bottom, line_spacing)):
        if top + line_height > bottom:
            break
        stagger = (row * 23) % 40
        for left in range(margin + stagger, width - margin, 70):
            right = min(left + 55, width - margin)
            page[top : top + line_height, left:right, :3] = 0
    return page


def make_bar_page(
    width: int = 600, height: int = 400, bar_height: int = 10, spacing: int = 30
) -> np.ndarray:
    """Render a white RGBA page with solid full-width black bars."""
    page = np.full((height, width, 4), 255, dtype=np.uint8)
    for top in range(40, height - 40, spacing):
        page[top : top + bar_height, 60 : width - 60, :3] = 0
    return page


def skew(page: np.ndarray, angle: float) -> np.ndarray:
    """Turn a page counter-clockwise by ``angle`` degrees, expanding the canvas."""
    image = Image.fromarray(page)
    rotated = image.rotate(
        angle, resample=Image.Resampling.BICUBIC, expand=True, fillcolor=WHITE
    )
    return np.array(rotated)


def encode(pixels: np.ndarray, fmt: str = "PNG") -> bytes:
    """Encode an RGBA array with Pillow."""
    image = Image.fromarray(pixels)
    if fmt == "JPEG":
        image = image.convert("RGB")
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


def decode(data: bytes) -> np.ndarray:
    """Decode image bytes to an RGBA array."""
    with Image.open(io.BytesIO(data)) as image:
        return np.array(image.convert("RGBA"))
