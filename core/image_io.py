"""
Lumasort — Image I/O
Decodes images into PixelGrids and encodes sorted grids back to files.
Uses Pillow for all codec work. Sorting itself never touches this module.
"""

import base64
import logging
from io import BytesIO
from pathlib import Path

import numpy as np
from PIL import Image

from core.grid import PixelGrid

logger = logging.getLogger(__name__)

# Decoded format -> format written back out. GIF has no good still-image
# encoding for sorted photos, so it is written as JPEG.
OUTPUT_FORMATS = {
    "PNG": "PNG",
    "JPEG": "JPEG",
    "GIF": "JPEG",
}

# Pillow names some decoded formats after a container rather than the codec.
# Camera JPEGs carrying extra images come back as MPO.
FORMAT_ALIASES = {
    "MPO": "JPEG",
}

JPEG_QUALITY = 95


class ImageFormatError(Exception):
    """Decoded image format has no output encoder."""
    pass


def _decoded_format(input_format: str) -> str:
    fmt = (input_format or "").upper()
    return FORMAT_ALIASES.get(fmt, fmt)


def output_format(input_format: str) -> str:
    """Map a Pillow format name to the format sorted output is saved in."""
    fmt = _decoded_format(input_format)
    if fmt not in OUTPUT_FORMATS:
        raise ImageFormatError(
            f"Unsupported image format {input_format!r}. "
            f"Supported: {', '.join(sorted(OUTPUT_FORMATS))}"
        )
    return OUTPUT_FORMATS[fmt]


def grid_from_image(img: Image.Image) -> PixelGrid:
    """Draw any Pillow image into a fresh RGBA grid (first frame only)."""
    return PixelGrid.from_array(np.array(img.convert("RGBA")))


def grid_to_image(grid: PixelGrid) -> Image.Image:
    return Image.fromarray(grid.to_uint8())


def load_grid(path: str) -> tuple[PixelGrid, str]:
    """Open an image file.

    Returns:
        (grid, format) where format is Pillow's name, e.g. "PNG".

    Raises:
        FileNotFoundError / PIL.UnidentifiedImageError: Passed through as-is.
    """
    with Image.open(str(path)) as img:
        img.load()
        fmt = img.format
        grid = grid_from_image(img)
    logger.debug("Loaded %s: %dx%d %s", path, grid.width, grid.height, fmt)
    return grid, fmt


def output_name(input_path: str, passes: int, threshold: float, input_format: str) -> str:
    """File name for one sorted output, e.g. ``sorted_1x_5000.000000l_cat.png``."""
    basename = Path(input_path).name
    fmt = output_format(input_format)
    if fmt != _decoded_format(input_format):
        basename = Path(input_path).stem + "." + fmt.lower()
    return f"sorted_{passes}x_{threshold:f}l_{basename}"


def encode_grid(grid: PixelGrid, fmt: str) -> bytes:
    """Encode a grid to image bytes in ``fmt`` ("PNG" or "JPEG")."""
    img = grid_to_image(grid)
    buf = BytesIO()
    if fmt == "JPEG":
        img.convert("RGB").save(buf, format="JPEG", quality=JPEG_QUALITY)
    else:
        img.save(buf, format=fmt)
    return buf.getvalue()


def write_sweep(results, input_path: str, input_format: str, passes: int,
                output_dir=".") -> list[Path]:
    """Write one file per SweepResult into ``output_dir``.

    Every output is encoded in memory before the first file is written, so
    an encoder failure leaves nothing behind.
    """
    fmt = output_format(input_format)
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    encoded = [
        (output_dir / output_name(input_path, passes, r.threshold, input_format), encode_grid(r.grid, fmt))
        for r in results
    ]
    paths = []
    for path, data in encoded:
        path.write_bytes(data)
        paths.append(path)
    return paths


def grid_to_data_url(grid: PixelGrid, max_dimension: int = 1920) -> str:
    """PNG data URL for a grid, downscaled if either side exceeds max_dimension."""
    img = grid_to_image(grid)
    w, h = img.size
    if max(w, h) > max_dimension:
        ratio = max_dimension / max(w, h)
        img = img.resize((max(1, int(w * ratio)), max(1, int(h * ratio))), Image.LANCZOS)
    buf = BytesIO()
    img.save(buf, format="PNG", optimize=True)
    b64 = base64.b64encode(buf.getvalue()).decode()
    return f"data:image/png;base64,{b64}"
