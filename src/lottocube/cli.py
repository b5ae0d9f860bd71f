"""lottocube - command-line recommender."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from tqdm import tqdm

from lottocube.config import ConfigLoadError, EngineConfig, PRESETS, load_config, with_preset
from lottocube.data import DataValidationError, DrawHistoryLoader, StateStore
from lottocube.engine.errors import ConfigurationError
from lottocube.engine.events import GenerationObserver
from lottocube.engine.runner import GenerationResult, generate
from lottocube.logging_config import setup_logging

logger = logging.getLogger(__name__)


class TqdmObserver(GenerationObserver):
    """Render round progress as a tqdm bar."""

    def __init__(self, total_rounds: int, disable: bool = False) -> None:
        self.bar = tqdm(total=total_rounds, desc="Rounds", disable=disable)

    def on_round(self, round_number: int, best_score: float) -> None:
        self.bar.update(1)
        self.bar.set_postfix({"best": f"{best_score:.2f}"})

    def on_complete(self, result: GenerationResult) -> None:
        self.bar.close()


def number_list(value: str) -> frozenset[int]:
    """Parse a comma-separated list of integers."""
    try:
        return frozenset(int(part) for part in value.split(",") if part.strip())
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected comma-separated integers, got '{value}'") from exc


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="lottocube combination recommender")
    parser.add_argument("--csv", default=None, help="Draw history CSV (round,n1..nK[,bonus]).")
    parser.add_argument("--config", default=None, help="YAML/JSON engine config file.")
    parser.add_argument("--preset", default="lotto645", choices=sorted(PRESETS), help="Parameter preset.")
    parser.add_argument("--games", type=int, default=None, help="Number of combinations to output.")
    parser.add_argument("--rounds", type=int, default=None, help="Search rounds.")
    parser.add_argument("--seed", type=int, default=None, help="Random seed.")
    parser.add_argument("--exclude", type=number_list, default=None, help="Comma-separated numbers to exclude, e.g. 2,5,17.")
    parser.add_argument("--state", default=None, help="JSON state file to resume from and update.")
    parser.add_argument("--output", default=None, help="Write the full result as JSON.")
    parser.add_argument("--log-level", default="INFO", help="Logging level.")
    parser.add_argument("--no-progress", action="store_true", help="Disable the progress bar.")
    return parser.parse_args(argv)


def build_run_config(args: argparse.Namespace) -> EngineConfig:
    """Resolve preset/config file and overlay command-line options."""
    config = load_config(args.config) if args.config else with_preset(args.preset)
    overrides: dict[str, Any] = {}

    if args.games is not None:
        overrides["result_count"] = args.games
    if args.rounds is not None:
        overrides["rounds"] = args.rounds
    if args.seed is not None:
        overrides["seed"] = args.seed
    if args.exclude:
        overrides["exclude_numbers"] = args.exclude

    if args.csv:
        max_number = config.range_end if config.range_end is not None else config.items
        loader = DrawHistoryLoader(max_number=max_number)
        frame = loader.load_and_validate(args.csv)
        overrides["history"] = tuple(loader.draws(frame))
        overrides["bonus_history"] = tuple(loader.bonus_numbers(frame))
        logger.info("Loaded %d draws from %s", len(frame), args.csv)

    if args.state:
        store = StateStore(args.state)
        if store.exists():
            state = store.load()
            overrides.update(state.as_overrides())
            logger.info("Resumed state: %d probabilities, %d pooled combinations", len(state.prob_map), len(state.pool))

    return config.with_overrides(**overrides) if overrides else config


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = build_run_config(args)
        observer = TqdmObserver(config.rounds, disable=args.no_progress)
        result = asyncio.run(generate(config, observer=observer))
    except FileNotFoundError as exc:
        print(f"[ERROR] File not found: {exc}", file=sys.stderr)
        return 1
    except (ConfigurationError, ConfigLoadError, DataValidationError) as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1

    print("=" * 60)
    print(f"lottocube {result.meta.version} | {result.meta.pick}/{result.meta.valid_pool_size} numbers")
    print("=" * 60)
    for index, (numbers, score) in enumerate(zip(result.results, result.scores), start=1):
        numbers_str = ", ".join(f"{number:2d}" for number in numbers)
        print(f"  {index:2d}: [{numbers_str}]  score={score:.2f}")
    print("-" * 60)
    print(f"elapsed {result.meta.elapsed_ms} ms | history {result.meta.history_size} draws")

    if args.state:
        StateStore(args.state).save(result.to_state())
    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json.dumps(result.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
        print(f"[OK] Saved to {output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
