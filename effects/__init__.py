"""
Lumasort — Effects
Every effect works on raw pixel arrays and takes its threshold explicitly.
"""

from effects.pixelsort import (
    LUMA_WEIGHTS,
    luma,
    luma_values,
    find_run,
    iter_runs,
    sort_run,
    sort_sequence,
    sort_axis,
)

__all__ = [
    "LUMA_WEIGHTS",
    "luma", "luma_values",
    "find_run", "iter_runs",
    "sort_run", "sort_sequence", "sort_axis",
]
