import pytest

from wage_planner.config.models import LevelPayZoneConfig, PayZoneConfiguration, PayZoneRange
from wage_planner.state.pay_zones import PayZoneAssigner, parse_recorded_zone, with_resolved_zones
from wage_planner.state.roster import Employee
from wage_planner.utils.columns import EMP_ID, EMP_RESOLVED_ZONE


@pytest.mark.parametrize(
    "value, expected",
    [(None, 1), (3, 3), ("Lv.3", 3), ("zone 5", 5), ("none", 1), (float("nan"), 1), (0, 1)],
)
def test_parse_recorded_zone(value, expected):
    assert parse_recorded_zone(value) == expected


def test_range_mode_uses_default_configuration():
    assigner = PayZoneAssigner()
    assert assigner.assign_salary("Lv.4", 115_000_000) == 5
    assert assigner.assign_salary("Lv.4", 50_000_000) == 1
    assert assigner.assign_salary("Lv.2", 70_000_000) == 2
    assert assigner.assign_salary("Lv.2", 72_128_002) == 3
    # inactive zone 3 is skipped
    assert assigner.assign_salary("Lv.1", 40_000_000) == 2
    # above every range falls back to the level default
    assert assigner.assign_salary("Lv.4", 500_000_000) == 1
    assert assigner.assign_salary("Unknown", 40_000_000) == 1


def test_manual_mode_reads_recorded_zone():
    assigner = PayZoneAssigner(PayZoneConfiguration(mode="manual"))
    assert assigner(Employee("e1", "A", "Lv.4", "S", 200_000_000, pay_zone="Lv.3")) == 3
    assert assigner(Employee("e2", "A", "Lv.4", "S", 200_000_000)) == 1


def test_assign_frame_matches_row_wise(mixed_roster):
    assigner = PayZoneAssigner()
    frame = with_resolved_zones(mixed_roster, assigner)

    expected = [assigner.assign(e) for e in mixed_roster.employees]
    assert frame[EMP_RESOLVED_ZONE].tolist() == expected
    assert frame[EMP_ID].tolist() == ["e1", "e2", "e3", "e4", "e5", "e6"]


def test_overlapping_levels_fall_back_to_first_match(roster_factory):
    config = PayZoneConfiguration(level_configs=[
        LevelPayZoneConfig(level="L1", ranges=[
            PayZoneRange(zone_id=2, min_salary=50, max_salary=150),
            PayZoneRange(zone_id=1, min_salary=0, max_salary=100),
        ])
    ])
    assigner = PayZoneAssigner(config, strict=False)
    roster = roster_factory([("a", "X", "L1", "S", 75), ("b", "X", "L1", "S", 20)])

    frame = with_resolved_zones(roster, assigner)

    assert frame[EMP_RESOLVED_ZONE].tolist() == [2, 1]


def test_custom_assigner_callable(mixed_roster):
    frame = with_resolved_zones(mixed_roster, lambda e: 4)
    assert set(frame[EMP_RESOLVED_ZONE]) == {4}


def test_distribution_and_available_zones(mixed_roster):
    assigner = PayZoneAssigner(PayZoneConfiguration(mode="manual"))
    stats = assigner.distribution(mixed_roster)
    assert stats["total"] == {1: 3, 2: 2, 3: 1}
    assert stats["by_level"]["Lv.2"] == {3: 1, 1: 1, 2: 1}
    assert PayZoneAssigner().available_zones("Lv.1") == [2, 3]
    assert PayZoneAssigner().available_zones("Other") == [1, 2, 3, 4, 5]
