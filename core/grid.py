"""
Lumasort — Pixel Grid
A mutable 2-D RGBA buffer plus a coordinate-swapping view so the same
row logic can walk columns.

Channels are unsigned 16-bit (0-65535). 8-bit sources are widened by 257
so 0xFF becomes 0xFFFF.
"""

from typing import NamedTuple

import numpy as np

CHANNEL_MAX = 0xFFFF
WIDEN_8_TO_16 = 257


class Pixel(NamedTuple):
    """One RGBA color value. Alpha is stored straight (not premultiplied)."""
    r: int
    g: int
    b: int
    a: int = CHANNEL_MAX


class PixelGrid:
    """Rectangular RGBA buffer addressed by (x, y).

    Backed by a (height, width, 4) uint16 array in ``pixels``.
    """

    def __init__(self, pixels: np.ndarray):
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"Expected (H, W, 4) array, got shape {pixels.shape}")
        self.pixels = pixels.astype(np.uint16, copy=False)

    @classmethod
    def blank(cls, width: int, height: int) -> "PixelGrid":
        return cls(np.zeros((height, width, 4), dtype=np.uint16))

    @classmethod
    def from_array(cls, frame: np.ndarray) -> "PixelGrid":
        """Build a grid from an (H, W), (H, W, 3) or (H, W, 4) array.

        uint8 input is widened to 16 bits. Missing alpha is filled opaque.
        Always copies, so the grid never aliases the caller's array.
        """
        frame = np.asarray(frame)
        if frame.ndim == 2:
            frame = np.stack([frame, frame, frame], axis=2)
        if frame.ndim != 3 or frame.shape[2] not in (3, 4):
            raise ValueError(f"Unsupported frame shape {frame.shape}")

        if frame.dtype == np.uint8:
            data = frame.astype(np.uint16) * WIDEN_8_TO_16
        else:
            data = np.clip(frame, 0, CHANNEL_MAX).astype(np.uint16)

        if data.shape[2] == 3:
            alpha = np.full(data.shape[:2] + (1,), CHANNEL_MAX, dtype=np.uint16)
            data = np.concatenate([data, alpha], axis=2)
        return cls(data.copy())

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def bounds(self) -> tuple[int, int]:
        return self.width, self.height

    def get(self, x: int, y: int) -> Pixel:
        r, g, b, a = self.pixels[y, x]
        return Pixel(int(r), int(g), int(b), int(a))

    def set(self, x: int, y: int, pixel) -> None:
        self.pixels[y, x] = tuple(pixel)

    def copy(self) -> "PixelGrid":
        return PixelGrid(self.pixels.copy())

    def to_uint8(self) -> np.ndarray:
        """Narrow back to an (H, W, 4) uint8 array (drops the low byte)."""
        return (self.pixels >> 8).astype(np.uint8)

    def __eq__(self, other):
        if not isinstance(other, PixelGrid):
            return NotImplemented
        return self.pixels.shape == other.pixels.shape and np.array_equal(self.pixels, other.pixels)

    def __repr__(self):
        return f"PixelGrid({self.width}x{self.height})"


class GridView:
    """Row-major or column-major presentation of a PixelGrid.

    With ``transposed=True`` every (x, y) is swapped before it reaches the
    grid, and bounds() reports (height, width). Rows of a transposed view
    are columns of the grid. The view holds no pixel data of its own.
    """

    def __init__(self, grid: PixelGrid, transposed: bool = False):
        self.grid = grid
        self.transposed = transposed

    def _array(self) -> np.ndarray:
        # numpy transpose is a strided view, not a copy
        if self.transposed:
            return self.grid.pixels.transpose(1, 0, 2)
        return self.grid.pixels

    def bounds(self) -> tuple[int, int]:
        w, h = self.grid.bounds()
        return (h, w) if self.transposed else (w, h)

    def get(self, x: int, y: int) -> Pixel:
        if self.transposed:
            x, y = y, x
        return self.grid.get(x, y)

    def set(self, x: int, y: int, pixel) -> None:
        if self.transposed:
            x, y = y, x
        self.grid.set(x, y, pixel)

    def row(self, y: int) -> np.ndarray:
        """Copy of row ``y`` of this view as an (N, 4) array."""
        return self._array()[y].copy()

    def set_row(self, y: int, values: np.ndarray) -> None:
        self._array()[y] = values

    def rows(self):
        """Yield row indices of this view."""
        return range(self.bounds()[1])
