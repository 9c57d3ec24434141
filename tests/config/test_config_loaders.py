import pytest
import yaml

from wage_planner.config.loaders import (
    ConfigLoadError,
    load_planner_config,
    load_yaml_config,
    parse_planner_config,
)


def _write(tmp_path, data, name="planner.yaml"):
    path = tmp_path / name
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


def test_load_full_config(tmp_path):
    path = _write(tmp_path, {
        "budget": {"total": 500_000_000, "welfare": 50_000_000},
        "indirect_cost": {"retirement": 0.05, "insurance": 0.1, "pension": 0.02},
        "additional_type": "amount",
        "pay_zones": {
            "mode": "range",
            "level_configs": [
                {
                    "level": 2,
                    "ranges": [
                        {"zone_id": 1, "min_salary": 0, "max_salary": 60_000_000},
                        {"zone_id": 2, "min_salary": 60_000_001, "max_salary": 90_000_000},
                    ],
                }
            ],
        },
    })

    config = load_planner_config(path)

    assert config.budget.available == pytest.approx(450_000_000)
    assert config.indirect_cost_rate == pytest.approx(0.17)
    assert config.additional_type == "amount"
    assert config.pay_zones.for_level("2").ranges[1].zone_id == 2


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    assert load_yaml_config(path) == {}
    config = load_planner_config(path)
    assert config.indirect_cost_rate == pytest.approx(0.178)
    assert config.pay_zones.for_level("Lv.2") is not None


def test_missing_file(tmp_path):
    with pytest.raises(ConfigLoadError):
        load_yaml_config(tmp_path / "nope.yaml")


def test_non_mapping_is_rejected(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigLoadError):
        load_yaml_config(path)


def test_schema_violation():
    with pytest.raises(ConfigLoadError, match="validation failed"):
        parse_planner_config({"additional_type": "bonus"})


def test_model_violation_is_wrapped():
    with pytest.raises(ConfigLoadError):
        parse_planner_config({"warning_threshold": 120, "danger_threshold": 100})


def test_parse_leaves_caller_mapping_untouched():
    level_config = {
        "level": 2,
        "ranges": [{"zone_id": 1, "min_salary": 0, "max_salary": 60_000_000}],
    }
    raw = {"pay_zones": {"mode": "range", "level_configs": [level_config]}}

    config = parse_planner_config(raw)

    assert config.pay_zones.for_level("2") is not None
    assert level_config["level"] == 2
    assert raw["pay_zones"]["level_configs"][0] is level_config
