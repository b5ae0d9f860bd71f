"""Probability model construction."""

from .model import ProbabilityModel, base_signal, trend_signal
from .normalizer import ProbabilityNormalizer

__all__ = [
    "ProbabilityModel",
    "ProbabilityNormalizer",
    "base_signal",
    "trend_signal",
]
