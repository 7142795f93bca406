"""
Normalization parameters and their validation.

LRNParams is the immutable bundle every call runs under:
    radius: half-width of the window (non-negative int)
    bias:   added before exponentiation
    alpha:  scale on the windowed sum of squares
    beta:   exponent
    mode:   which neighbourhood the window covers (NormRegion)

Two extra knobs select how window sums are computed (Aggregation) and
how often the sliding running sum is recomputed from scratch.
"""

from __future__ import annotations

import dataclasses
import enum
import math
import numbers
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from localnorm.errors import InvalidParameterError


class NormRegion(str, enum.Enum):
    """Neighbourhood the normalization window covers."""

    ACROSS_CHANNELS = "acrossChannels"
    WITHIN_CHANNEL = "withinChannel"


class Aggregation(str, enum.Enum):
    """How per-position window sums are computed."""

    SLIDING = "sliding"  # running sum, O(n) along the windowed axis
    NAIVE = "naive"  # every window from scratch, reference implementation


def _resolve_enum(enum_cls, name: str, value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(repr(m.value) for m in enum_cls)
        raise InvalidParameterError(name, value, f"expected one of {allowed}") from None


def validate_radius(radius) -> int:
    """
    Check that radius is a non-negative integer.

    Floats are rejected even when integral; the value is never coerced.

    Returns:
        The radius as a plain int.
    """
    if isinstance(radius, (bool, np.bool_)) or not isinstance(radius, (int, np.integer)):
        raise InvalidParameterError("radius", radius, "must be an integer")
    if radius < 0:
        raise InvalidParameterError("radius", radius, "must be non-negative")
    return int(radius)


def validate_mode(mode) -> NormRegion:
    """Resolve a NormRegion or its string value."""
    return _resolve_enum(NormRegion, "mode", mode)


def validate_aggregation(aggregation) -> Aggregation:
    """Resolve an Aggregation or its string value."""
    return _resolve_enum(Aggregation, "aggregation", aggregation)


def _validate_real(name: str, value) -> float:
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, numbers.Real):
        raise InvalidParameterError(name, value, "must be a real number")
    value = float(value)
    if not math.isfinite(value):
        raise InvalidParameterError(name, value, "must be finite")
    return value


def _validate_refresh_interval(refresh_interval) -> Optional[int]:
    if refresh_interval is None:
        return None
    if isinstance(refresh_interval, (bool, np.bool_)) or not isinstance(
        refresh_interval, (int, np.integer)
    ):
        raise InvalidParameterError(
            "refresh_interval", refresh_interval, "must be a positive integer or None"
        )
    if refresh_interval < 1:
        raise InvalidParameterError("refresh_interval", refresh_interval, "must be positive")
    return int(refresh_interval)


@dataclass(frozen=True)
class LRNParams:
    """
    Immutable parameter bundle for one normalization.

    Validated on construction. String modes ("acrossChannels",
    "withinChannel") and aggregations ("sliding", "naive") are resolved to
    their enums, so downstream code only sees enum members.

    Attributes:
        radius: Half-width of the window.
        bias: Constant added to the scaled window sum.
        alpha: Scale factor on the window sum.
        beta: Exponent applied to the base.
        mode: Neighbourhood selection.
        aggregation: Sliding running sum or naive recompute.
        refresh_interval: Sliding steps between exact recomputations
            (None never refreshes).
    """

    radius: int = 5
    bias: float = 1.0
    alpha: float = 1.0
    beta: float = 0.5
    mode: Union[NormRegion, str] = NormRegion.ACROSS_CHANNELS
    aggregation: Union[Aggregation, str] = Aggregation.SLIDING
    refresh_interval: Optional[int] = 64

    def __post_init__(self) -> None:
        # Frozen: normalized values are written through object.__setattr__.
        object.__setattr__(self, "radius", validate_radius(self.radius))
        object.__setattr__(self, "bias", _validate_real("bias", self.bias))
        object.__setattr__(self, "alpha", _validate_real("alpha", self.alpha))
        object.__setattr__(self, "beta", _validate_real("beta", self.beta))
        object.__setattr__(self, "mode", validate_mode(self.mode))
        object.__setattr__(self, "aggregation", validate_aggregation(self.aggregation))
        object.__setattr__(
            self, "refresh_interval", _validate_refresh_interval(self.refresh_interval)
        )

    def replace(self, **changes) -> "LRNParams":
        """Return a validated copy with some fields changed."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict:
        """Plain-value view, enums as their string values."""
        return {
            "radius": self.radius,
            "bias": self.bias,
            "alpha": self.alpha,
            "beta": self.beta,
            "mode": self.mode.value,
            "aggregation": self.aggregation.value,
            "refresh_interval": self.refresh_interval,
        }


DEFAULT_PARAMS = LRNParams()
