import json

import pandas as pd
import pytest
import yaml

import logging_config
from wage_planner.cli import RATES_SCHEMA, load_rate_edits, main


@pytest.fixture(autouse=True)
def fresh_logging():
    logging_config.reset_logging()
    yield
    logging_config.reset_logging()


@pytest.fixture
def inputs(tmp_path):
    roster = tmp_path / "roster.csv"
    pd.DataFrame({
        "employee_id": ["e1", "e2", "e3"],
        "employee_band": ["Eng", "Eng", "Ops"],
        "employee_level": ["Lv.2", "Lv.2", "Lv.1"],
        "performance_grade": ["S", "A", "S"],
        "employee_gross_compensation": [70_000_000, 60_000_000, 40_000_000],
    }).to_csv(roster, index=False)

    config = tmp_path / "planner.yaml"
    config.write_text(yaml.safe_dump({"budget": {"total": 10_000_000}}), encoding="utf-8")

    rates = tmp_path / "rates.yaml"
    rates.write_text(yaml.safe_dump({
        "grade_rates": {"S": {"base_up": 3.0, "merit": 1.0}},
        "edits": [
            {"scope": "cell", "band": "Ops", "level": "Lv.1", "grade": "S", "field": "merit", "value": 2.0},
            {"scope": "company", "grade": "Z", "field": "merit", "value": 2.0},
        ],
    }), encoding="utf-8")
    return roster, config, rates


def test_cli_apply_writes_summaries_and_snapshot(tmp_path, inputs, capsys):
    roster, config, rates = inputs
    out = tmp_path / "out"

    code = main([
        "--roster", str(roster), "--config", str(config), "--rates", str(rates),
        "--apply", "--output-dir", str(out), "--log-dir", str(tmp_path / "logs"),
    ])

    assert code == 0
    assert "Committed effective rate" in capsys.readouterr().out
    assert (out / "budget.csv").is_file()
    snapshot = json.loads((out / "adjustment_matrix.json").read_text(encoding="utf-8"))
    assert snapshot["metadata"]["version"] > 1
    budget = pd.read_csv(out / "budget.csv")
    # S: 70M x 4% + 40M x 5%
    assert budget.loc[0, "direct_cost"] == pytest.approx(4_800_000)
    assert (tmp_path / "logs" / "combined.log").is_file()


def test_cli_reports_missing_roster(tmp_path):
    code = main(["--roster", str(tmp_path / "missing.csv"), "--log-dir", str(tmp_path / "logs")])
    assert code == 1


def test_rates_file_validation(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text(yaml.safe_dump({"edits": [{"scope": "galaxy", "grade": "S"}]}), encoding="utf-8")
    with pytest.raises(ValueError, match="validation failed"):
        load_rate_edits(path)
    assert "edits" in RATES_SCHEMA
