import pytest

from wage_planner.config.models import PayZoneConfiguration, PlannerConfig
from wage_planner.state.roster import Employee, Roster


def make_roster(records, bands=None, levels=None, grades=None):
    """records: (id, band, level, grade, salary[, pay_zone])"""
    employees = [
        Employee(
            employee_id=str(r[0]),
            band=r[1],
            level=r[2],
            grade=r[3],
            current_salary=r[4],
            pay_zone=r[5] if len(r) > 5 else None,
        )
        for r in records
    ]
    return Roster.from_employees(employees, bands=bands, levels=levels, grades=grades)


@pytest.fixture
def wavg_roster():
    # two G1 at 50M, one G2 at 100M, all in A x L1
    return make_roster([
        ("e1", "A", "L1", "G1", 50_000_000),
        ("e2", "A", "L1", "G1", 50_000_000),
        ("e3", "A", "L1", "G2", 100_000_000),
    ])


@pytest.fixture
def mixed_roster():
    # recorded zones drive assignment under manual mode
    return make_roster(
        [
            ("e1", "Eng", "Lv.1", "S", 40_000_000, 1),
            ("e2", "Eng", "Lv.1", "A", 50_000_000, 2),
            ("e3", "Eng", "Lv.2", "S", 70_000_000, 3),
            ("e4", "Eng", "Lv.2", "S", 80_000_000, 1),
            ("e5", "Ops", "Lv.1", "A", 45_000_000, 1),
            ("e6", "Ops", "Lv.2", "B", 65_000_000, 2),
        ],
        levels=["Lv.1", "Lv.2"],
    )


@pytest.fixture
def manual_config():
    return PlannerConfig(pay_zones=PayZoneConfiguration(mode="manual"))


def recorded_zone(employee):
    return int(employee.pay_zone or 1)


@pytest.fixture
def roster_factory():
    return make_roster


@pytest.fixture
def zone_from_roster():
    """Assigner that returns the zone recorded on the employee."""
    return recorded_zone
