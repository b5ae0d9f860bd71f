"""Final top-N selection without near-duplicates or historical repeats."""

from __future__ import annotations

from collections.abc import Sequence

from lottocube.engine.history import HistorySet

from .scorer import Candidate


def default_similarity_threshold(pick: int) -> int:
    """Overlap at which two combinations count as near-duplicates."""
    return min(pick, max(3, pick - 1))


class Deduplicator:
    """Walk a ranked pool and keep pairwise-dissimilar, never-drawn candidates."""

    def __init__(self, similarity_threshold: int, history: HistorySet | None = None) -> None:
        if similarity_threshold <= 0:
            raise ValueError("similarity_threshold must be > 0.")
        self.similarity_threshold = similarity_threshold
        self.history = history or HistorySet()

    def select(self, ranked: Sequence[Candidate], result_count: int) -> list[Candidate]:
        """Select up to result_count candidates from a descending-score sequence."""
        if result_count <= 0:
            raise ValueError("result_count must be > 0.")

        selected: list[Candidate] = []
        for candidate in ranked:
            if self.history.matches(candidate.numbers):
                continue
            if self._too_similar(candidate.numbers, selected):
                continue

            selected.append(candidate)
            if len(selected) >= result_count:
                break
        return selected

    def _too_similar(self, numbers: tuple[int, ...], selected: list[Candidate]) -> bool:
        candidate_set = set(numbers)
        for existing in selected:
            if len(candidate_set.intersection(existing.numbers)) >= self.similarity_threshold:
                return True
        return False
