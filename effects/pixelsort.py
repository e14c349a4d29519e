"""
Lumasort — Pixel Sort Effect
Finds runs of bright pixels along a row and reorders each run by
descending luma. Classic glitch art effect.

Luma is taken from alpha-premultiplied color, so a fully transparent
pixel is black to the sorter whatever color it stores.
"""

import numpy as np

# Rec. 709 luma weights
LUMA_WEIGHTS = np.array([0.2126, 0.7152, 0.0722])
_WR, _WG, _WB = (float(w) for w in LUMA_WEIGHTS)

ALPHA_MAX = 0xFFFF


def luma(pixel) -> float:
    """Luma of one pixel: 0.2126R + 0.7152G + 0.0722B, scaled by alpha."""
    value = _WR * pixel[0] + _WG * pixel[1] + _WB * pixel[2]
    if len(pixel) > 3:
        value = value * float(pixel[3]) / ALPHA_MAX
    return value


def luma_values(pixels: np.ndarray) -> np.ndarray:
    """Vectorised luma for an (N, C) array of pixels, C >= 3."""
    values = pixels[..., :3].astype(np.float64) @ LUMA_WEIGHTS
    if pixels.shape[-1] > 3:
        values = values * pixels[..., 3].astype(np.float64) / ALPHA_MAX
    return values


def find_run(keys, start: int, threshold: float):
    """Find the next run in ``keys`` at or after ``start``.

    A run begins at the first key strictly above ``threshold`` and ends
    (exclusive) at the first key strictly below it, so keys equal to the
    threshold stay inside a run they are already part of.

    Returns:
        (run_start, run_end) or None when no key above threshold remains.
    """
    n = len(keys)
    for j in range(start, n):
        if keys[j] > threshold:
            for end in range(j, n):
                if keys[end] < threshold:
                    return j, end
            return j, n
    return None


def iter_runs(keys: np.ndarray, threshold: float):
    """Yield every (run_start, run_end) that repeated find_run calls produce.

    Scanning resumes at run_end + 1: the boundary pixel after a run is
    never looked at again.
    """
    keys = np.asarray(keys)
    n = len(keys)
    above = np.flatnonzero(keys > threshold)
    below = np.flatnonzero(keys < threshold)

    i = 0
    while i < n:
        k = np.searchsorted(above, i)
        if k == len(above):
            return
        run_start = int(above[k])
        m = np.searchsorted(below, run_start)
        run_end = int(below[m]) if m < len(below) else n
        yield run_start, run_end
        i = run_end + 1


def sort_run(pixels: np.ndarray, keys=None) -> np.ndarray:
    """Return ``pixels`` reordered brightest first.

    Ties keep their original relative order.
    """
    if keys is None:
        keys = luma_values(pixels)
    order = np.argsort(-np.asarray(keys, dtype=np.float64), kind="stable")
    return pixels[order]


def sort_sequence(seq: np.ndarray, threshold: float, keys=None) -> int:
    """Sort every run of ``seq`` in place.

    Args:
        seq: (N, C) pixel array, modified in place.
        threshold: Luma threshold for this pass.
        keys: Precomputed luma of ``seq`` (computed if omitted).

    Returns:
        Number of runs found.
    """
    if keys is None:
        keys = luma_values(seq)

    # Runs never overlap and scanning only moves forward, so keys past the
    # current run still describe the unsorted pixels they were computed from.
    count = 0
    for start, end in iter_runs(keys, threshold):
        count += 1
        if end - start < 2:
            continue
        seq[start:end] = sort_run(seq[start:end], keys[start:end])
    return count


def sort_axis(view, threshold: float) -> int:
    """Sort every row of a GridView in place. Returns total runs found."""
    total = 0
    for y in view.rows():
        seq = view.row(y)
        found = sort_sequence(seq, threshold)
        if found:
            view.set_row(y, seq)
            total += found
    return total
