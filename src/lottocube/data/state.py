"""JSON file store for probability maps and working pools carried between runs."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class EngineState:
    """Persisted knowledge from a previous run."""

    prob_map: dict[int, float]
    pool: list[tuple[int, ...]]

    def as_overrides(self) -> dict[str, Any]:
        """Config fields that feed this state back into the next run."""
        return {
            "external_prob_map": dict(self.prob_map) or None,
            "initial_pool": tuple(self.pool),
        }


class StateStore:
    """Read and write engine state to a single JSON file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> EngineState:
        with self.path.open("r", encoding="utf-8") as file:
            payload = json.load(file)
        if not isinstance(payload, dict):
            raise ValueError(f"State file root must be a JSON object: {self.path}")

        prob_map = {int(key): float(value) for key, value in (payload.get("prob_map") or {}).items()}
        pool = [tuple(int(value) for value in numbers) for numbers in payload.get("pool") or []]
        return EngineState(prob_map=prob_map, pool=pool)

    def save(self, state: dict[str, Any]) -> None:
        """Write a result's to_state() payload."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(state, ensure_ascii=False, separators=(",", ":"), sort_keys=True),
            encoding="utf-8",
        )
