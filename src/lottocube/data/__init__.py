"""Data loading and state persistence utilities."""

from .loader import DataValidationError, DrawHistoryLoader
from .state import EngineState, StateStore

__all__ = [
    "DataValidationError",
    "DrawHistoryLoader",
    "EngineState",
    "StateStore",
]
