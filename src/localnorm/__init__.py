"""
localnorm: Local Response Normalization for numpy arrays.

Each element of a rank-3 or rank-4 array is rescaled by the squared energy
of a local window:

    output = input / (bias + alpha * sum(window ** 2)) ** beta

The window spans adjacent channels (last axis) or a square spatial
neighbourhood inside one channel.

Modules:
    params: Parameter bundle, mode enums and validation
    rank: Rank-3 <-> rank-4 promotion and demotion
    window: Windowed sum-of-squares aggregation (sliding and naive)
    normalizer: Closed-form rescaling and the negative-base policy
    lrn: Public entry points
    errors: Exception hierarchy
"""

import logging

from localnorm.errors import LRNError, UnsupportedRankError, InvalidParameterError, DomainError
from localnorm.params import Aggregation, LRNParams, NormRegion, DEFAULT_PARAMS
from localnorm.lrn import (
    LocalResponseNorm,
    local_response_normalization,
    local_response_normalization_3d,
    local_response_normalization_4d,
)

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Entry points
    "local_response_normalization",
    "local_response_normalization_3d",
    "local_response_normalization_4d",
    "LocalResponseNorm",
    # Configuration
    "LRNParams",
    "NormRegion",
    "Aggregation",
    "DEFAULT_PARAMS",
    # Errors
    "LRNError",
    "UnsupportedRankError",
    "InvalidParameterError",
    "DomainError",
]
