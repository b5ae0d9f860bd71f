"""Scoring, working pool and final selection."""

from .diversity import Deduplicator, default_similarity_threshold
from .scorer import Candidate, ComboScorer
from .working_pool import PoolManager

__all__ = ["Candidate", "ComboScorer", "Deduplicator", "PoolManager", "default_similarity_threshold"]
