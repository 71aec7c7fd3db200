"""Shared pytest fixtures: small synthetic images built with Pillow."""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image


def make_striped_image(stripes: list[tuple[tuple[int, ...], int]], width: int = 100) -> Image.Image:
    """Build an RGBA image from horizontal stripes of (color, rows).

    Colors may be RGB or RGBA; RGB stripes are fully opaque.
    """
    height = sum(rows for _, rows in stripes)
    img = Image.new("RGBA", (width, height))
    y = 0
    for color, rows in stripes:
        fill = tuple(color) if len(color) == 4 else (*color, 255)
        img.paste(fill, (0, y, width, y + rows))
        y += rows
    return img


@pytest.fixture
def make_image():
    """Factory fixture wrapping make_striped_image."""
    return make_striped_image


@pytest.fixture
def solid_image() -> Image.Image:
    """A 50x50 opaque image of one mid-bucket color."""
    return Image.new("RGB", (50, 50), (52, 152, 222))


@pytest.fixture
def striped_image() -> Image.Image:
    """100x100: 50 rows red, 30 rows a near-red, 20 rows blue."""
    return make_striped_image([
        ((200, 30, 30), 50),
        ((205, 35, 35), 30),
        ((30, 30, 200), 20),
    ])


@pytest.fixture
def striped_image_path(tmp_path: Path, striped_image: Image.Image) -> Path:
    path = tmp_path / "stripes.png"
    striped_image.save(path)
    return path
