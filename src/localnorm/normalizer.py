"""
Normalizer: elementwise rescaling by the window energy.

    output = input / (bias + alpha * window_sum) ** beta

Negative bases are only defined for integer beta. For fractional beta a
negative base raises DomainError instead of producing NaN.
"""

from __future__ import annotations

import numpy as np

from localnorm.errors import DomainError


def compute_base(window_sums: np.ndarray, bias: float, alpha: float) -> np.ndarray:
    """Return bias + alpha * window_sums as float64."""
    return bias + alpha * np.asarray(window_sums, dtype=np.float64)


def check_domain(base: np.ndarray, beta: float) -> None:
    """
    Raise DomainError if a negative base meets a fractional exponent.

    NaN bases (from NaN inputs) are left to propagate.
    """
    if float(beta).is_integer():
        return
    negative = base < 0
    if negative.any():
        raise DomainError(
            count=int(negative.sum()),
            min_base=float(base[negative].min()),
            beta=beta,
        )


def apply(
    x4d: np.ndarray,
    window_sums: np.ndarray,
    bias: float,
    alpha: float,
    beta: float,
) -> np.ndarray:
    """
    Rescale x4d by its window sums.

    Args:
        x4d: Input array.
        window_sums: Per-position sums of squares, same shape as x4d.
        bias: Constant added to the scaled sum.
        alpha: Scale on the sum.
        beta: Exponent.

    Returns:
        New array, same shape and dtype as x4d.

    Raises:
        DomainError: If some base is negative and beta is not an integer.
    """
    if x4d.shape != window_sums.shape:
        raise ValueError(
            f"window_sums shape {window_sums.shape} doesn't match input shape {x4d.shape}"
        )

    base = compute_base(window_sums, bias, alpha)
    check_domain(base, beta)

    # Zero bases follow IEEE division (inf or nan) without warnings.
    with np.errstate(divide="ignore", invalid="ignore"):
        scale = np.power(base, beta)
        out = np.asarray(x4d, dtype=np.float64) / scale

    return out.astype(x4d.dtype, copy=False)
