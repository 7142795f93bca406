"""
Local Response Normalization entry points.

    local_response_normalization(x, radius=5, bias=1, alpha=1, beta=0.5,
                                 mode="acrossChannels")

Pipeline for a single call:
    validate params -> promote to rank 4 -> aggregate window sums
    -> normalize -> demote to the input rank

Every call is pure: the input is read only and a new array is returned.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

import numpy as np

from localnorm import normalizer, rank, window
from localnorm.params import Aggregation, LRNParams, NormRegion

logger = logging.getLogger(__name__)


def _as_float_array(x) -> np.ndarray:
    """Convert x to an ndarray with a real floating dtype."""
    arr = np.asarray(x)
    if arr.dtype.kind == "f":
        return arr
    if arr.dtype.kind in "biu":
        return arr.astype(np.float64)
    raise TypeError(f"Expected a real numeric array, got dtype {arr.dtype}")


def _normalize_4d(x4d: np.ndarray, params: LRNParams) -> np.ndarray:
    """The single rank-4 kernel every entry point runs."""
    sums = window.aggregate(
        x4d,
        params.radius,
        params.mode,
        aggregation=params.aggregation,
        refresh_interval=params.refresh_interval,
    )
    return normalizer.apply(x4d, sums, params.bias, params.alpha, params.beta)


def normalize(x, params: LRNParams) -> np.ndarray:
    """
    Normalize a rank-3 or rank-4 array under an existing LRNParams.

    Raises:
        UnsupportedRankError: If x is not rank 3 or 4.
        DomainError: Negative base with fractional beta.
    """
    arr = _as_float_array(x)
    x4d, original_rank = rank.promote(arr)
    logger.debug(
        "LRN shape=%s rank=%d params=%s", arr.shape, original_rank, params.to_dict()
    )
    return rank.demote(_normalize_4d(x4d, params), original_rank)


def local_response_normalization(
    x,
    radius: int = 5,
    bias: float = 1,
    alpha: float = 1,
    beta: float = 0.5,
    mode: Union[NormRegion, str] = NormRegion.ACROSS_CHANNELS,
    *,
    aggregation: Union[Aggregation, str] = Aggregation.SLIDING,
    refresh_interval: Optional[int] = 64,
) -> np.ndarray:
    """
    Normalize the activation of a local neighbourhood across or within channels.

    Args:
        x: Rank-3 (height, width, channels) or rank-4
            (batch, height, width, channels) array-like.
        radius: Number of adjacent channels or spatial positions on each
            side of the centre included in the window.
        bias: Constant bias term of the base.
        alpha: Scale factor, usually positive.
        beta: Exponent.
        mode: "acrossChannels" (default) or "withinChannel".
        aggregation: "sliding" (default) or "naive".
        refresh_interval: Sliding steps between exact recomputations.

    Returns:
        Array with the same shape as x.

    Raises:
        InvalidParameterError: Bad radius, mode or other parameter.
        UnsupportedRankError: x is not rank 3 or 4.
        DomainError: Negative base with fractional beta.
    """
    params = LRNParams(
        radius=radius,
        bias=bias,
        alpha=alpha,
        beta=beta,
        mode=mode,
        aggregation=aggregation,
        refresh_interval=refresh_interval,
    )
    return normalize(x, params)


def local_response_normalization_3d(
    x,
    radius: int = 5,
    bias: float = 1,
    alpha: float = 1,
    beta: float = 0.5,
    mode: Union[NormRegion, str] = NormRegion.ACROSS_CHANNELS,
    **kwargs,
) -> np.ndarray:
    """Rank-3 only form; views x as one batch and runs the rank-4 kernel."""
    params = LRNParams(radius=radius, bias=bias, alpha=alpha, beta=beta, mode=mode, **kwargs)
    arr = _as_float_array(x)
    rank.check_rank(arr, expected=(3,))
    x4d, original_rank = rank.promote(arr)
    return rank.demote(_normalize_4d(x4d, params), original_rank)


def local_response_normalization_4d(
    x,
    radius: int = 5,
    bias: float = 1,
    alpha: float = 1,
    beta: float = 0.5,
    mode: Union[NormRegion, str] = NormRegion.ACROSS_CHANNELS,
    **kwargs,
) -> np.ndarray:
    """Rank-4 only form."""
    params = LRNParams(radius=radius, bias=bias, alpha=alpha, beta=beta, mode=mode, **kwargs)
    arr = _as_float_array(x)
    rank.check_rank(arr, expected=(4,))
    return _normalize_4d(arr, params)


class LocalResponseNorm:
    """
    Reusable LRN bound to one parameter bundle.

    Parameters are validated once at construction; each call then runs the
    same normalization on a new input.

    Example:
        lrn = LocalResponseNorm(radius=2, alpha=1e-4, beta=0.75)
        y = lrn(x)
    """

    def __init__(self, params: Optional[LRNParams] = None, **overrides) -> None:
        """
        Initialise with an LRNParams and/or field overrides.

        Args:
            params: Base parameter bundle (default: LRNParams()).
            **overrides: Fields replaced on top of `params`.
        """
        base = params if params is not None else LRNParams()
        self._params = base.replace(**overrides) if overrides else base

    @property
    def params(self) -> LRNParams:
        return self._params

    def forward(self, x) -> np.ndarray:
        """Normalize x (rank 3 or 4)."""
        return normalize(x, self._params)

    def __call__(self, x) -> np.ndarray:
        return self.forward(x)

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in self._params.to_dict().items())
        return f"LocalResponseNorm({fields})"
