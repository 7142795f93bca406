"""
Window aggregator: per-position sums of squares over a clamped window.

For a rank-4 array (batch, height, width, channels) and radius r:

    acrossChannels: sum x[b, i, j, k]^2   for k in [c-r, c+r]
    withinChannel:  sum x[b, p, q, c]^2   for p in [i-r, i+r], q in [j-r, j+r]

Ranges are clamped to the array bounds. Out-of-range indices are dropped
from the sum (no zero padding, no wraparound), so windows narrow at the
edges and degenerate to the element itself on a length-1 axis.

The square spatial window is separable: a windowed sum along height
followed by one along width gives the clamped 2D box sum.

Two aggregations:
    sliding: running sum, add the entering square and subtract the
             leaving one. O(n) along the axis. Recomputed from scratch
             every `refresh_interval` steps to bound drift, and per
             position when the sum turns non-finite or collapses after a
             large term leaves.
    naive:   every window summed directly. O(n * window). Reference.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from localnorm.params import Aggregation, NormRegion

logger = logging.getLogger(__name__)

# Axes of a (batch, height, width, channels) array.
HEIGHT_AXIS = 1
WIDTH_AXIS = 2
CHANNEL_AXIS = 3

# A running sum below this fraction of its recent peak is rebuilt; the
# small terms summed alongside the peak were rounded to ulp(peak).
CANCELLATION_RATIO = 2.0 ** -26


def _window_bounds(k: int, radius: int, n: int) -> tuple[int, int]:
    """Half-open clamped range [lo, hi) of the window centred on k."""
    return max(0, k - radius), min(n, k + radius + 1)


def naive_window_sum(values: np.ndarray, axis: int, radius: int) -> np.ndarray:
    """
    Windowed sum along one axis, each window summed from scratch.

    Args:
        values: Array of any rank (already squared by the caller).
        axis: Axis to window along.
        radius: Half-width of the window.

    Returns:
        float64 array of the same shape as `values`.
    """
    src = np.moveaxis(np.asarray(values, dtype=np.float64), axis, 0)
    n = src.shape[0]
    out = np.empty_like(src)

    for k in range(n):
        lo, hi = _window_bounds(k, radius, n)
        out[k] = src[lo:hi].sum(axis=0)

    return np.moveaxis(out, 0, axis)


def sliding_window_sum(
    values: np.ndarray,
    axis: int,
    radius: int,
    refresh_interval: Optional[int] = 64,
) -> np.ndarray:
    """
    Windowed sum along one axis using a running sum.

    The running sum is vectorized over every other axis. Moving the window
    from k-1 to k adds values[k + radius] and subtracts
    values[k - radius - 1] when those indices are in range.

    A position's running sum is rebuilt from its own window when it is no
    longer finite (a NaN or inf entered or left) or when it has shrunk below
    CANCELLATION_RATIO of the largest sum seen since its last rebuild, since
    small terms added next to a large one were rounded away.

    Args:
        values: Non-negative array of any rank (squares).
        axis: Axis to window along.
        radius: Half-width of the window.
        refresh_interval: Every this many steps the whole running sum is
            rebuilt from the window itself. None never refreshes.

    Returns:
        float64 array of the same shape as `values`.
    """
    src = np.moveaxis(np.asarray(values, dtype=np.float64), axis, 0)
    n = src.shape[0]
    if radius == 0:
        return np.moveaxis(src.copy(), 0, axis)

    out = np.empty(src.shape)
    if n == 0:
        return np.moveaxis(out, 0, axis)

    # (n, positions) views so per-position rebuilds are plain boolean masks.
    flat = src.reshape(n, -1)
    flat_out = out.reshape(n, -1)

    lo, hi = _window_bounds(0, radius, n)
    running = flat[lo:hi].sum(axis=0)
    peak = running.copy()
    flat_out[0] = running
    refreshes = 0
    rebuilds = 0

    with np.errstate(invalid="ignore", over="ignore"):
        for k in range(1, n):
            lo, hi = _window_bounds(k, radius, n)
            if refresh_interval is not None and k % refresh_interval == 0:
                running = flat[lo:hi].sum(axis=0)
                peak = running.copy()
                refreshes += 1
                flat_out[k] = running
                continue

            entering = k + radius
            leaving = k - radius - 1
            if entering < n:
                running = running + flat[entering]
            peak = np.fmax(peak, running)
            if leaving >= 0:
                running = running - flat[leaving]

            stale = ~np.isfinite(running) | (running < peak * CANCELLATION_RATIO)
            if stale.any():
                running[stale] = flat[lo:hi, stale].sum(axis=0)
                peak[stale] = running[stale]
                rebuilds += int(stale.sum())
            flat_out[k] = running

    # Rounding can still leave tiny negatives where the true sum is zero.
    np.maximum(out, 0.0, out=out)

    if refreshes or rebuilds:
        logger.debug(
            "sliding sum along axis %d: n=%d, %d refreshes, %d rebuilds",
            axis, n, refreshes, rebuilds,
        )

    return np.moveaxis(out, 0, axis)


def aggregate(
    x4d: np.ndarray,
    radius: int,
    mode: NormRegion,
    aggregation: Aggregation = Aggregation.SLIDING,
    refresh_interval: Optional[int] = 64,
) -> np.ndarray:
    """
    Compute the window sum map of a rank-4 array.

    The mode and aggregation are resolved once here; the per-axis passes
    are vectorized over every position.

    Args:
        x4d: Array shaped (batch, height, width, channels).
        radius: Half-width of the window.
        mode: NormRegion.ACROSS_CHANNELS or NormRegion.WITHIN_CHANNEL.
        aggregation: Aggregation.SLIDING or Aggregation.NAIVE.
        refresh_interval: Passed to the sliding aggregation.

    Returns:
        float64 array shaped like x4d holding each position's window sum.
    """
    if x4d.ndim != 4:
        raise ValueError(f"aggregate expects a rank-4 array, got rank {x4d.ndim}")

    with np.errstate(over="ignore"):
        squares = np.square(x4d, dtype=np.float64)

    if aggregation is Aggregation.SLIDING:

        def window_sum(values, axis):
            return sliding_window_sum(values, axis, radius, refresh_interval)

    elif aggregation is Aggregation.NAIVE:

        def window_sum(values, axis):
            return naive_window_sum(values, axis, radius)

    else:
        raise ValueError(f"Unknown aggregation: {aggregation}")

    if mode is NormRegion.ACROSS_CHANNELS:
        return window_sum(squares, CHANNEL_AXIS)
    if mode is NormRegion.WITHIN_CHANNEL:
        return window_sum(window_sum(squares, HEIGHT_AXIS), WIDTH_AXIS)
    raise ValueError(f"Unknown mode: {mode}")
