"""
Lumasort — Sort Orchestrator
Runs pixel-sort passes over a grid for every threshold in a sweep.

One input grid produces one output grid per threshold. Each threshold
starts again from the untouched input; passes within a threshold compound.
"""

import logging
import math
import numbers
from dataclasses import dataclass

from core.grid import GridView, PixelGrid
from effects.pixelsort import sort_axis

logger = logging.getLogger(__name__)


class InvalidConfiguration(ValueError):
    """Sort settings that cannot produce a finite sweep."""
    pass


@dataclass
class SortConfig:
    """Sorting settings. Thresholds are on the 16-bit luma scale (0-65535).

    sort_rows: Sort each horizontal row of the image.
    sort_cols: Sort each vertical column of the image.
    passes: Full row/column passes per threshold (>= 1).
    threshold_min / threshold_max / threshold_increment: Sweep is
        min, min + inc, ... while < max.
    """
    sort_rows: bool = True
    sort_cols: bool = True
    passes: int = 1
    threshold_min: float = 0.0
    threshold_max: float = 60000.0
    threshold_increment: float = 5000.0

    def validate(self) -> None:
        """Raise InvalidConfiguration if this config would hang or misbehave."""
        for name in ("threshold_min", "threshold_max", "threshold_increment"):
            value = getattr(self, name)
            if not isinstance(value, numbers.Real) or not math.isfinite(value):
                raise InvalidConfiguration(f"{name} must be a finite number, got {value!r}")
        if isinstance(self.passes, bool) or not isinstance(self.passes, numbers.Integral) or self.passes < 1:
            raise InvalidConfiguration(f"passes must be an integer >= 1, got {self.passes!r}")
        if self.threshold_min < self.threshold_max and self.threshold_increment <= 0:
            raise InvalidConfiguration(
                f"threshold_increment must be > 0 to sweep "
                f"{self.threshold_min} -> {self.threshold_max}, got {self.threshold_increment}"
            )


@dataclass
class SweepResult:
    threshold: float
    grid: PixelGrid


def threshold_sweep(config: SortConfig) -> list[float]:
    """Ascending thresholds from threshold_min up to (not including) threshold_max."""
    config.validate()
    thresholds = []
    k = 0
    while True:
        # Multiply instead of accumulating so long sweeps don't drift
        t = config.threshold_min + k * config.threshold_increment
        if not t < config.threshold_max:
            break
        thresholds.append(t)
        k += 1
    return thresholds


def sort_pass(grid: PixelGrid, threshold: float, config: SortConfig) -> PixelGrid:
    """One pass over ``grid`` in place: rows, then columns."""
    if grid.is_empty():
        return grid
    # sort_rows means horizontal rows, matching the -norow/-nocol flags
    if config.sort_rows:
        runs = sort_axis(GridView(grid, transposed=False), threshold)
        logger.debug("threshold=%s rows: %d runs", threshold, runs)
    if config.sort_cols:
        runs = sort_axis(GridView(grid, transposed=True), threshold)
        logger.debug("threshold=%s cols: %d runs", threshold, runs)
    return grid


def sort_at_threshold(grid: PixelGrid, threshold: float, config: SortConfig) -> PixelGrid:
    """Copy ``grid`` and run config.passes passes on the copy."""
    out = grid.copy()
    for _ in range(config.passes):
        sort_pass(out, threshold, config)
    return out


def process(grid: PixelGrid, config: SortConfig | None = None) -> list[SweepResult]:
    """Sort ``grid`` once per threshold in the sweep.

    The input grid is left untouched. An empty grid yields empty copies.

    Raises:
        InvalidConfiguration: Before any work, if the sweep can't terminate.
    """
    config = config or SortConfig()
    thresholds = threshold_sweep(config)
    logger.info("Sorting %dx%d grid at %d thresholds, %d pass(es)",
                grid.width, grid.height, len(thresholds), config.passes)
    return [SweepResult(t, sort_at_threshold(grid, t, config)) for t in thresholds]
