"""
Conftest: shared fixtures for all Lumasort test modules.

1. Gray-pixel builders: a gray pixel (v, v, v) has luma v, so tests can be
   written directly in luma values
2. Random grids and on-disk sample images
"""

import os
import sys

import numpy as np
import pytest
from PIL import Image

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.grid import PixelGrid


def gray_row(values) -> np.ndarray:
    """(N, 4) uint16 row of opaque gray pixels with the given levels."""
    values = np.asarray(values, dtype=np.uint16)
    row = np.empty((len(values), 4), dtype=np.uint16)
    row[:, 0] = values
    row[:, 1] = values
    row[:, 2] = values
    row[:, 3] = 0xFFFF
    return row


def grid_from_lumas(rows) -> PixelGrid:
    """PixelGrid whose pixel at (x, y) is gray with level rows[y][x]."""
    return PixelGrid(np.stack([gray_row(r) for r in rows]))


def levels(grid: PixelGrid) -> list[list[int]]:
    """Red channel of every pixel, row by row (equals luma for gray grids)."""
    return grid.pixels[:, :, 0].astype(int).tolist()


@pytest.fixture
def rng():
    return np.random.RandomState(555)


@pytest.fixture
def random_grid(rng):
    """5 wide x 3 tall grid of random opaque colors."""
    data = rng.randint(0, 0x10000, (3, 5, 4)).astype(np.uint16)
    data[:, :, 3] = 0xFFFF
    return PixelGrid(data)


@pytest.fixture
def sample_png(tmp_path, rng):
    """8x6 random RGB PNG on disk."""
    path = tmp_path / "sample.png"
    Image.fromarray(rng.randint(0, 256, (6, 8, 3), dtype=np.uint8)).save(path)
    return path


@pytest.fixture
def sample_gif(tmp_path, rng):
    """8x6 palette GIF on disk."""
    path = tmp_path / "anim.gif"
    img = Image.fromarray(rng.randint(0, 256, (6, 8, 3), dtype=np.uint8)).convert("P")
    img.save(path, format="GIF")
    return path


@pytest.fixture
def sample_mpo(tmp_path, rng):
    """8x6 two-frame MPO saved as .jpg, the way many cameras write JPEGs."""
    path = tmp_path / "cam.jpg"
    frames = [Image.fromarray(rng.randint(0, 256, (6, 8, 3), dtype=np.uint8)) for _ in range(2)]
    frames[0].save(path, format="MPO", save_all=True, append_images=frames[1:])
    return path
