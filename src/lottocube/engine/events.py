"""Progress checkpoints reported by a generation run."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .runner import GenerationResult


@dataclass(frozen=True)
class ProgressEvent:
    """One progress checkpoint; percent runs 0..100."""

    phase: str
    percent: int
    message: str = ""
    round: int = 0
    total_rounds: int = 0
    pool_size: int = 0
    best_score: float = 0.0
    elapsed_ms: int = 0


class GenerationObserver:
    """Synchronous hooks called at fixed checkpoints; subclasses override what they need.

    Hooks run on the round loop itself, so they should return quickly.
    """

    def on_progress(self, event: ProgressEvent) -> None:
        pass

    def on_round(self, round_number: int, best_score: float) -> None:
        pass

    def on_complete(self, result: GenerationResult) -> None:
        pass


class CallbackObserver(GenerationObserver):
    """Adapt plain callables to the observer interface."""

    def __init__(
        self,
        on_progress: Callable[[ProgressEvent], Any] | None = None,
        on_round: Callable[[int, float], Any] | None = None,
        on_complete: Callable[[GenerationResult], Any] | None = None,
    ) -> None:
        self._on_progress = on_progress
        self._on_round = on_round
        self._on_complete = on_complete

    def on_progress(self, event: ProgressEvent) -> None:
        if self._on_progress is not None:
            self._on_progress(event)

    def on_round(self, round_number: int, best_score: float) -> None:
        if self._on_round is not None:
            self._on_round(round_number, best_score)

    def on_complete(self, result: GenerationResult) -> None:
        if self._on_complete is not None:
            self._on_complete(result)
