#!/usr/bin/env python3
"""
Lumasort — FastAPI Backend
Upload an image once, then request pixel-sort previews for any settings.
"""

import asyncio
import logging
import sys
import os
from dataclasses import asdict
from io import BytesIO
from pathlib import Path

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from fastapi import FastAPI, UploadFile, File, HTTPException
from pydantic import BaseModel, Field
from PIL import Image, UnidentifiedImageError

from core.grid import PixelGrid
from core.image_io import grid_from_image, grid_to_data_url
from core.safety import (
    ALLOWED_EXTENSIONS, MAX_PASSES, SafetyError,
    validate_config_limits, validate_grid_size,
)
from core.sweep import SortConfig, InvalidConfiguration, process, threshold_sweep

logger = logging.getLogger(__name__)

app = FastAPI(title="Lumasort")

MAX_UPLOAD_SIZE = 50 * 1024 * 1024  # 50MB limit

# Previews are sorted at reduced size to keep requests fast
PREVIEW_MAX_PIXELS = 640 * 480
MAX_PREVIEW_DIMENSION = 1280

# In-memory state for current session
_state = {
    "grid": None,
    "format": None,
    "filename": None,
}
_state_lock = asyncio.Lock()

# Structured error recovery hints for user-facing errors
ERROR_RECOVERY = {
    "no_image": {"code": "NO_IMAGE", "hint": "Upload an image first.", "action": "load_file"},
    "bad_file": {"code": "BAD_FILE", "hint": "Upload a PNG, JPEG or GIF.", "action": "load_file"},
    "file_too_large": {"code": "FILE_TOO_LARGE", "hint": "Try a smaller image.", "action": None},
    "invalid_config": {"code": "INVALID_CONFIG", "hint": "Use a positive threshold increment.", "action": None},
    "processing_failed": {"code": "PROCESSING_FAILED", "hint": "Try fewer passes or a narrower sweep.", "action": "retry"},
}


def _error_detail(key: str, message: str) -> dict:
    """Build structured error detail dict for the frontend."""
    recovery = ERROR_RECOVERY.get(key, {})
    return {
        "detail": message,
        "code": recovery.get("code", "UNKNOWN"),
        "hint": recovery.get("hint", ""),
        "action": recovery.get("action"),
    }


class SortRequest(BaseModel):
    sort_rows: bool = True
    sort_cols: bool = True
    passes: int = Field(default=1, ge=1, le=MAX_PASSES)
    threshold_min: float = 0.0
    threshold_max: float = 60000.0
    threshold_increment: float = 5000.0

    def to_config(self) -> SortConfig:
        return SortConfig(**self.model_dump())


def _preview_grid(grid: PixelGrid) -> PixelGrid:
    """Downscale to PREVIEW_MAX_PIXELS before sorting."""
    w, h = grid.bounds()
    if w * h <= PREVIEW_MAX_PIXELS:
        return grid
    scale = (PREVIEW_MAX_PIXELS / (w * h)) ** 0.5
    new_w, new_h = max(1, int(w * scale)), max(1, int(h * scale))
    img = Image.fromarray(grid.to_uint8()).resize((new_w, new_h))
    return grid_from_image(img)


@app.get("/api/health")
async def health_check():
    return {"status": "ok"}


@app.get("/api/defaults")
async def defaults():
    """Default sort settings and the thresholds they sweep."""
    config = SortConfig()
    return {"config": asdict(config), "thresholds": threshold_sweep(config)}


@app.post("/api/upload")
async def upload_image(file: UploadFile = File(...)):
    """Upload an image to sort. Replaces any previous upload."""
    if not file.filename:
        raise HTTPException(status_code=400, detail="No filename provided")
    suffix = Path(file.filename).suffix.lower()
    if suffix not in ALLOWED_EXTENSIONS:
        raise HTTPException(status_code=400, detail=_error_detail(
            "bad_file", f"Unsupported file type: {suffix or '(none)'}. "
                        f"Accepted: {', '.join(sorted(ALLOWED_EXTENSIONS))}"))

    data = await file.read(MAX_UPLOAD_SIZE + 1)
    if len(data) > MAX_UPLOAD_SIZE:
        raise HTTPException(status_code=413, detail=_error_detail(
            "file_too_large", f"File too large. Maximum size: {MAX_UPLOAD_SIZE // (1024*1024)}MB"))

    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            fmt = img.format
            grid = grid_from_image(img)
        validate_grid_size(grid.width, grid.height)
    except (UnidentifiedImageError, OSError) as e:
        raise HTTPException(status_code=400, detail=_error_detail("bad_file", f"Could not decode image: {e}"))
    except SafetyError as e:
        raise HTTPException(status_code=413, detail=_error_detail("file_too_large", str(e)))

    # Lock state mutations (prevents race if two uploads overlap)
    async with _state_lock:
        _state["grid"] = grid
        _state["format"] = fmt
        _state["filename"] = file.filename

    return {
        "status": "ok",
        "info": {"filename": file.filename, "format": fmt, "width": grid.width, "height": grid.height},
        "preview": grid_to_data_url(grid, MAX_PREVIEW_DIMENSION),
    }


@app.post("/api/preview")
async def preview_sort(req: SortRequest):
    """Sort the uploaded image once per threshold and return data URLs."""
    async with _state_lock:
        grid = _state["grid"]
    if grid is None:
        raise HTTPException(status_code=400, detail=_error_detail("no_image", "No image loaded"))

    config = req.to_config()
    try:
        validate_config_limits(config)
    except (InvalidConfiguration, SafetyError) as e:
        raise HTTPException(status_code=400, detail=_error_detail("invalid_config", str(e)))

    try:
        small = _preview_grid(grid)
        results = await asyncio.to_thread(process, small, config)
        previews = [
            {"threshold": r.threshold, "image": grid_to_data_url(r.grid, MAX_PREVIEW_DIMENSION)}
            for r in results
        ]
    except Exception as e:
        logger.exception("Preview failed")
        raise HTTPException(status_code=500, detail=_error_detail(
            "processing_failed", f"Sorting failed: {str(e)[:100]}"))

    return {"previews": previews, "width": small.width, "height": small.height}


def start(port: int = 7860):
    import uvicorn
    print(f"Lumasort — launching at http://127.0.0.1:{port}")
    uvicorn.run(app, host="127.0.0.1", port=port, log_level="warning")


if __name__ == "__main__":
    start()
