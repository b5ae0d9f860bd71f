from __future__ import annotations

import json

import pytest

from lottocube import cli

SMALL = {
    "items": 20,
    "pick": 4,
    "rounds": 2,
    "batch_size": 100,
    "evolve_time_ms": 0,
    "loop_min": 500,
    "result_count": 3,
    "seed": 5,
}


def _write_inputs(tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps(SMALL), encoding="utf-8")
    csv_path = tmp_path / "history.csv"
    csv_path.write_text(
        "round,n1,n2,n3,n4,bonus\n"
        "1,1,5,9,13,2\n"
        "2,2,6,10,14,3\n"
        "3,3,7,11,15,4\n",
        encoding="utf-8",
    )
    return config_path, csv_path


def test_main_writes_output_and_state(tmp_path, capsys):
    config_path, csv_path = _write_inputs(tmp_path)
    output_path = tmp_path / "out" / "result.json"
    state_path = tmp_path / "state.json"

    exit_code = cli.main(
        [
            "--config", str(config_path),
            "--csv", str(csv_path),
            "--output", str(output_path),
            "--state", str(state_path),
            "--exclude", "20",
            "--no-progress",
            "--log-level", "WARNING",
        ]
    )

    assert exit_code == 0
    payload = json.loads(output_path.read_text(encoding="utf-8"))
    assert len(payload["results"]) == 3
    assert payload["meta"]["history_size"] == 3
    assert payload["meta"]["excluded_count"] == 1
    assert all(20 not in numbers for numbers in payload["results"])
    assert state_path.exists()
    assert "Saved to" in capsys.readouterr().out


def test_state_is_resumed_on_next_run(tmp_path):
    config_path, _ = _write_inputs(tmp_path)
    state_path = tmp_path / "state.json"
    state_path.write_text(json.dumps({"prob_map": {"4": 0.5}, "pool": [[1, 2, 3, 4]]}), encoding="utf-8")

    args = cli.parse_args(["--config", str(config_path), "--state", str(state_path)])
    config = cli.build_run_config(args)

    assert config.external_prob_map == {4: 0.5}
    assert config.initial_pool == ((1, 2, 3, 4),)


def test_command_line_options_override_preset():
    args = cli.parse_args(["--preset", "lotto638", "--games", "7", "--rounds", "4", "--seed", "9", "--exclude", "1, 2"])
    config = cli.build_run_config(args)

    assert config.items == 38
    assert config.result_count == 7
    assert config.rounds == 4
    assert config.seed == 9
    assert config.exclude_numbers == frozenset({1, 2})


def test_missing_csv_returns_error(tmp_path, capsys):
    exit_code = cli.main(["--csv", str(tmp_path / "missing.csv"), "--no-progress"])

    assert exit_code == 1
    assert "File not found" in capsys.readouterr().err


def test_invalid_history_returns_error(tmp_path, capsys):
    csv_path = tmp_path / "bad.csv"
    csv_path.write_text("round,n1,n2,n3,n4,n5,n6\n1,1,1,2,3,4,5\n", encoding="utf-8")

    exit_code = cli.main(["--csv", str(csv_path), "--no-progress"])

    assert exit_code == 1
    assert "Duplicate numbers" in capsys.readouterr().err


def test_blank_history_cell_returns_error(tmp_path, capsys):
    csv_path = tmp_path / "gap.csv"
    csv_path.write_text("round,n1,n2,n3,n4,n5,n6\n1,1,2,3,4,5,\n", encoding="utf-8")

    exit_code = cli.main(["--csv", str(csv_path), "--no-progress"])

    assert exit_code == 1
    assert "Missing values" in capsys.readouterr().err


def test_non_numeric_exclusion_is_a_usage_error(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.parse_args(["--exclude", "3,x"])

    assert excinfo.value.code == 2
    assert "comma-separated integers" in capsys.readouterr().err
