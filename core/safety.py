"""
Lumasort — Safety & Resource Guards
Centralized preflight checks run before any file processing.
Prevents oversized inputs and runaway threshold sweeps.
"""

import os
from pathlib import Path

# --- Configurable Limits ---
MAX_FILE_MB = 100           # Maximum input file size
MAX_PIXELS = 40_000_000     # ~40MP, beyond this a single pass takes minutes
MAX_SWEEP_STEPS = 200       # Maximum outputs per input image
MAX_PASSES = 50
ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif"}


class SafetyError(Exception):
    """Raised when a preflight check fails."""
    pass


def preflight(input_path: str) -> dict:
    """Run all safety checks before processing a file.

    Args:
        input_path: Path to the input image.

    Returns:
        dict with file metadata (path, size_mb, extension).

    Raises:
        SafetyError: If any check fails.
        FileNotFoundError: If input doesn't exist.
    """
    input_path = str(input_path)
    real_path = os.path.realpath(input_path)

    # 1. File exists
    if not os.path.isfile(real_path):
        raise FileNotFoundError(f"Input file not found: {input_path}")

    # 2. File size check
    size_mb = os.path.getsize(real_path) / (1024 * 1024)
    if size_mb > MAX_FILE_MB:
        raise SafetyError(
            f"Input file is {size_mb:.0f}MB, exceeds {MAX_FILE_MB}MB limit."
        )

    # 3. File extension check
    ext = Path(real_path).suffix.lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise SafetyError(
            f"File type '{ext}' not allowed. "
            f"Supported: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
        )

    return {
        "path": real_path,
        "size_mb": size_mb,
        "extension": ext,
    }


def validate_grid_size(width: int, height: int) -> None:
    """Raises SafetyError if the image has more than MAX_PIXELS pixels."""
    if width * height > MAX_PIXELS:
        raise SafetyError(
            f"Image is {width}x{height} ({width * height / 1e6:.1f}MP), "
            f"max is {MAX_PIXELS / 1e6:.0f}MP."
        )


def validate_config_limits(config) -> None:
    """Check that a SortConfig won't produce an absurd amount of work.

    Raises:
        SafetyError: Too many passes or too many sweep steps.
        InvalidConfiguration: Config can't produce a finite sweep.
    """
    config.validate()
    if config.passes > MAX_PASSES:
        raise SafetyError(f"{config.passes} passes requested, max is {MAX_PASSES}.")
    if config.threshold_min < config.threshold_max:
        steps = (config.threshold_max - config.threshold_min) / config.threshold_increment
        if steps > MAX_SWEEP_STEPS:
            raise SafetyError(
                f"Threshold sweep would produce ~{steps:.0f} images, max is {MAX_SWEEP_STEPS}. "
                f"Raise --tinc or narrow --tmin/--tmax."
            )
