"""CSV loader and validator for draw history data."""

from __future__ import annotations

import re
from pathlib import Path

import pandas as pd

ROUND_COLUMN = "round"
BONUS_COLUMN = "bonus"
NUMBER_COLUMN_PATTERN = re.compile(r"^n(\d+)$")
ROUND_ALIASES = {"round_id": "round", "draw": "round", "bonus_number": "bonus", "bn": "bonus"}


class DataValidationError(ValueError):
    """Raised when draw history data fails validation."""


class DrawHistoryLoader:
    """Load and validate draw history CSV data with columns round, n1..nK and optional bonus."""

    def __init__(self, max_number: int = 45) -> None:
        if max_number <= 0:
            raise ValueError("max_number must be > 0.")
        self.max_number = max_number

    def load_csv(self, path: str | Path, encoding: str = "utf-8") -> pd.DataFrame:
        """Load CSV and normalize column names."""
        csv_path = Path(path)
        if not csv_path.exists():
            raise FileNotFoundError(f"CSV file not found: {csv_path}")

        dataframe = pd.read_csv(csv_path, encoding=encoding)
        return self._normalize_columns(dataframe)

    @staticmethod
    def number_columns(dataframe: pd.DataFrame) -> list[str]:
        """Return n1..nK columns ordered by their index."""
        matched = [
            (int(match.group(1)), column)
            for column in dataframe.columns
            if (match := NUMBER_COLUMN_PATTERN.match(str(column)))
        ]
        return [column for _, column in sorted(matched)]

    def validate(self, dataframe: pd.DataFrame) -> None:
        """Validate schema, number range, and per-row uniqueness."""
        number_columns = self.number_columns(dataframe)
        if ROUND_COLUMN not in dataframe.columns:
            raise DataValidationError(f"Missing required columns: ['{ROUND_COLUMN}']")
        if not number_columns:
            raise DataValidationError("Missing required columns: at least one of n1..nK")

        checked = [ROUND_COLUMN, *number_columns]
        if BONUS_COLUMN in dataframe.columns:
            checked.append(BONUS_COLUMN)

        for column in checked:
            try:
                pd.to_numeric(dataframe[column], errors="raise")
            except (TypeError, ValueError) as exc:
                raise DataValidationError(f"Column '{column}' must be numeric.") from exc

        blank_rows = dataframe[checked].isna().any(axis=1)
        if blank_rows.any():
            blank_rounds = dataframe.loc[blank_rows, ROUND_COLUMN].tolist()
            raise DataValidationError(f"Missing values detected in rounds: {blank_rounds}")

        numeric_df = dataframe[checked].astype(int)

        for column in [*number_columns, *([BONUS_COLUMN] if BONUS_COLUMN in checked else [])]:
            out_of_range = (numeric_df[column] < 1) | (numeric_df[column] > self.max_number)
            if out_of_range.any():
                invalid_rows = numeric_df.loc[out_of_range, ROUND_COLUMN].tolist()
                raise DataValidationError(
                    f"Column '{column}' has values outside 1~{self.max_number} at rounds: {invalid_rows}"
                )

        duplicate_rows = numeric_df[number_columns].nunique(axis=1) != len(number_columns)
        if duplicate_rows.any():
            invalid_rounds = numeric_df.loc[duplicate_rows, ROUND_COLUMN].tolist()
            raise DataValidationError(
                f"Duplicate numbers detected in rounds: {invalid_rounds}"
            )

    def index_by_round(self, dataframe: pd.DataFrame) -> pd.DataFrame:
        """Sort by round and set round as index."""
        self.validate(dataframe)
        indexed = dataframe.copy()
        if ROUND_COLUMN in indexed.index.names:
            indexed = indexed.reset_index(drop=True)
        indexed[ROUND_COLUMN] = indexed[ROUND_COLUMN].astype(int)
        indexed = indexed.sort_values(ROUND_COLUMN).set_index(ROUND_COLUMN, drop=False)
        return indexed

    def load_and_validate(
        self, path: str | Path, recent_n: int | None = None, encoding: str = "utf-8"
    ) -> pd.DataFrame:
        """Load CSV, validate it, and optionally keep only recent N rounds."""
        dataframe = self.load_csv(path, encoding=encoding)
        indexed = self.index_by_round(dataframe)
        if recent_n is not None:
            if recent_n <= 0:
                raise ValueError("recent_n must be greater than 0.")
            return indexed.tail(recent_n)
        return indexed

    def draws(self, dataframe: pd.DataFrame) -> list[tuple[int, ...]]:
        """Return draws oldest first as sorted tuples."""
        columns = self.number_columns(dataframe)
        return [tuple(sorted(int(value) for value in row)) for row in dataframe[columns].itertuples(index=False)]

    @staticmethod
    def bonus_numbers(dataframe: pd.DataFrame) -> list[int]:
        """Return the bonus column oldest first, or an empty list."""
        if BONUS_COLUMN not in dataframe.columns:
            return []
        return [int(value) for value in dataframe[BONUS_COLUMN].tolist()]

    @staticmethod
    def _normalize_columns(dataframe: pd.DataFrame) -> pd.DataFrame:
        normalized = {}
        for column in dataframe.columns:
            new_name = str(column).strip().lower()
            normalized[column] = ROUND_ALIASES.get(new_name, new_name)
        return dataframe.rename(columns=normalized)
