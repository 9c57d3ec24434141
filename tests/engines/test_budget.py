import pytest

from wage_planner.engines.budget import (
    STATUS_OPTIMAL,
    STATUS_OVER,
    STATUS_UNDER,
    budget_breakdown,
    calculate_budget_usage,
    employee_budget_impact,
    summarize_usage,
)
from wage_planner.engines.synchronizer import Coordinates, EditScope, set_rate
from wage_planner.matrix.builder import create_empty_matrix
from wage_planner.matrix.models import RateValues
from wage_planner.utils.columns import BASE_UP, DIRECT_COST, EMP_ID, RATE_SOURCE


@pytest.fixture
def single_roster(roster_factory):
    return roster_factory([("e1", "A", "L1", "G1", 100_000_000)])


def test_direct_indirect_and_total_cost(single_roster, zone_from_roster):
    matrix = create_empty_matrix(["A"], ["L1"], ["G1"])
    set_rate(matrix, EditScope.CELL, Coordinates("A", "L1"), "G1", "base_up", 2.0)
    set_rate(matrix, EditScope.CELL, Coordinates("A", "L1"), "G1", "merit", 1.0)

    usage = calculate_budget_usage(
        matrix, single_roster, 10_000_000, zone_from_roster, indirect_cost_rate=0.178
    )

    assert usage.direct_cost == pytest.approx(3_000_000)
    assert usage.indirect_cost == pytest.approx(534_000)
    assert usage.total_cost == pytest.approx(3_534_000)
    assert usage.usage_percentage == pytest.approx(35.34)
    assert usage.remaining == pytest.approx(6_466_000)
    assert not usage.is_over_budget
    assert usage.status == STATUS_UNDER


def test_empty_matrix_costs_nothing(mixed_roster, zone_from_roster):
    matrix = create_empty_matrix(mixed_roster.bands, mixed_roster.levels, mixed_roster.grades)
    usage = calculate_budget_usage(matrix, mixed_roster, 1_000_000, zone_from_roster)
    assert usage.total_cost == 0.0
    assert usage.usage_percentage == 0.0


def test_override_dominates_only_its_zone(mixed_roster, zone_from_roster):
    matrix = create_empty_matrix(mixed_roster.bands, mixed_roster.levels, mixed_roster.grades)
    set_rate(matrix, EditScope.CELL, Coordinates("Eng", "Lv.2"), "S", "base_up", 2.0)
    set_rate(matrix, EditScope.CELL_PAY_ZONE, Coordinates("Eng", "Lv.2", 3), "S", "base_up", 6.0)

    df = budget_breakdown(matrix, mixed_roster, zone_from_roster).set_index(EMP_ID)

    assert df.loc["e3", BASE_UP] == 6.0
    assert df.loc["e3", RATE_SOURCE] == "pay_zone"
    assert df.loc["e4", BASE_UP] == 2.0
    assert df.loc["e4", RATE_SOURCE] == "grade"
    assert df.loc["e3", DIRECT_COST] == pytest.approx(70_000_000 * 0.06)
    assert df.loc["e4", DIRECT_COST] == pytest.approx(80_000_000 * 0.02)
    # roster order and length are preserved
    assert list(df.index) == ["e1", "e2", "e3", "e4", "e5", "e6"]


def test_unknown_cell_resolves_to_zero(roster_factory, zone_from_roster):
    roster = roster_factory([("e1", "Z", "L9", "S", 10_000_000)])
    matrix = create_empty_matrix(["A"], ["L1"], ["S"])
    df = budget_breakdown(matrix, roster, zone_from_roster)
    assert df[DIRECT_COST].tolist() == [0.0]
    assert df[RATE_SOURCE].tolist() == ["none"]


def test_fixed_amount_additional(single_roster, zone_from_roster):
    matrix = create_empty_matrix(["A"], ["L1"], ["G1"])
    set_rate(matrix, EditScope.COMPANY, Coordinates(), "G1", "additional", 50)

    usage = calculate_budget_usage(
        matrix, single_roster, 10_000_000, zone_from_roster, additional_type="amount"
    )

    assert usage.direct_cost == pytest.approx(500_000)


@pytest.mark.parametrize(
    "direct, available, usage_pct, over, status",
    [
        (0.0, 0.0, 0.0, False, STATUS_UNDER),
        (1_000.0, 0.0, 200.0, True, STATUS_OVER),
        (1_000.0, -5_000.0, 200.0, True, STATUS_OVER),
        (0.0, -5_000.0, 0.0, True, STATUS_OVER),
    ],
)
def test_degenerate_budgets(direct, available, usage_pct, over, status):
    usage = summarize_usage(direct, available)
    assert usage.usage_percentage == usage_pct
    assert usage.is_over_budget is over
    assert usage.status == status


def test_usage_is_not_clamped_for_positive_budget():
    usage = summarize_usage(1_000.0, 100.0, indirect_cost_rate=0.0)
    assert usage.usage_percentage == pytest.approx(1000.0)
    assert usage.status == STATUS_OVER


@pytest.mark.parametrize(
    "total, status",
    [(50.0, STATUS_UNDER), (80.0, STATUS_OPTIMAL), (100.0, STATUS_OPTIMAL), (100.5, STATUS_OVER)],
)
def test_status_thresholds(total, status):
    assert summarize_usage(total, 100.0, indirect_cost_rate=0.0).status == status


def test_employee_budget_impact():
    rates = RateValues(base_up=2.0, merit=1.0)
    assert employee_budget_impact(100_000_000, rates) == pytest.approx(3_534_000)
    fixed = RateValues(additional=10)
    assert employee_budget_impact(
        50_000_000, fixed, additional_type="amount", indirect_cost_rate=0.0
    ) == pytest.approx(100_000)
