"""
Rank adapter: run one rank-4 algorithm for rank-3 and rank-4 inputs.

A rank-3 array (height, width, channels) is viewed as a single-batch
rank-4 array (1, height, width, channels). Results are demoted back by
dropping the unit batch. Both directions are reshapes, never copies.
"""

from __future__ import annotations

import numpy as np

from localnorm.errors import UnsupportedRankError

SUPPORTED_RANKS = (3, 4)


def check_rank(x: np.ndarray, expected: tuple = SUPPORTED_RANKS) -> int:
    """
    Return the rank of x, raising if it is not one of `expected`.

    Raises:
        UnsupportedRankError: If x.ndim is not in `expected`.
    """
    if x.ndim not in expected:
        raise UnsupportedRankError(x.ndim, expected)
    return x.ndim


def promote(x: np.ndarray) -> tuple[np.ndarray, int]:
    """
    View x as rank 4.

    Args:
        x: Array of rank 3 (h, w, c) or rank 4 (b, h, w, c).

    Returns:
        (x4d, original_rank) where x4d shares memory with x.
    """
    rank = check_rank(x)
    if rank == 3:
        return x[np.newaxis, ...], rank
    return x, rank


def demote(y4d: np.ndarray, original_rank: int) -> np.ndarray:
    """Undo promote(): drop the unit batch if the input was rank 3."""
    if original_rank == 3:
        if y4d.shape[0] != 1:
            raise ValueError(f"Cannot demote batch of size {y4d.shape[0]} to rank 3")
        return y4d[0]
    return y4d
