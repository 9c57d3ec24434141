import pytest

from wage_planner.matrix.builder import create_empty_matrix
from wage_planner.matrix.models import (
    AdjustmentMatrix,
    MatrixCell,
    RateValues,
    normalize_field,
)


@pytest.fixture
def matrix():
    return create_empty_matrix(["A", "B"], ["L1", "L2"], ["S", "A"])


def test_normalize_field_accepts_camel_case():
    assert normalize_field("baseUp") == "base_up"
    assert normalize_field("merit") == "merit"
    assert normalize_field("bonus") is None


def test_effective_rate_leaves_out_fixed_amount():
    rates = RateValues(base_up=2.0, merit=1.0, additional=5.0)
    assert rates.effective_rate("percentage") == pytest.approx(8.0)
    assert rates.effective_rate("amount") == pytest.approx(3.0)


def test_resolve_prefers_override_then_grade_then_zero():
    cell = MatrixCell(
        band="A",
        level="L1",
        grade_rates={"S": RateValues(base_up=2.0)},
        pay_zone_overrides={"S": {3: RateValues(base_up=5.0)}},
    )
    assert cell.resolve("S", 3).base_up == 5.0
    assert cell.resolve("S", 1).base_up == 2.0
    assert cell.resolve("S").base_up == 2.0
    assert cell.resolve("B", 3) == RateValues.zero()


def test_copy_shares_nothing_mutable(matrix):
    matrix.cell("A", "L1").pay_zone_overrides["S"] = {2: RateValues(merit=1.0)}
    clone = matrix.copy()

    clone.cell("A", "L1").grade_rates["S"].base_up = 9.0
    clone.cell("A", "L1").pay_zone_overrides["S"][2].merit = 7.0
    clone.cell("B", "L2").statistics.grade_distribution["S"] = 4

    assert matrix.cell("A", "L1").grade_rates["S"].base_up == 0.0
    assert matrix.cell("A", "L1").pay_zone_overrides["S"][2].merit == 1.0
    assert matrix.cell("B", "L2").statistics.grade_distribution == {}
    # cell_map points at the cloned cells
    assert clone.cell("A", "L1") is clone.cells[0][0]


def test_dict_round_trip_preserves_overrides(matrix):
    matrix.cell("B", "L2").pay_zone_overrides["A"] = {4: RateValues(base_up=1.5)}
    matrix.metadata.basis = "percentage|zones:0|roster:0"

    restored = AdjustmentMatrix.from_dict(matrix.to_dict())

    assert restored == matrix
    assert restored.cell("B", "L2").pay_zone_overrides["A"][4].base_up == 1.5


def test_equality_ignores_last_updated_but_not_version(matrix):
    clone = matrix.copy()
    clone.metadata.last_updated = clone.metadata.last_updated.replace(year=2000)
    assert clone == matrix

    clone.touch()
    assert clone != matrix
