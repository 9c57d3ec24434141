import logging

import pytest

from wage_planner.config.models import (
    LevelPayZoneConfig,
    PayZoneConfiguration,
    PayZoneRange,
    PlannerConfig,
)
from wage_planner.engines.synchronizer import EditScope
from wage_planner.session.controller import StagingController
from wage_planner.session.exceptions import RosterLoadError
from wage_planner.session.storage import InMemoryMatrixStore
from wage_planner.state.roster import Employee, Roster


@pytest.fixture
def controller(mixed_roster, manual_config):
    return StagingController(mixed_roster, manual_config)


def test_fresh_controller_has_zero_matrix(controller):
    assert controller.weighted_average.total_average.effective_rate() == 0.0
    assert controller.budget_usage.total_cost == 0.0
    assert controller.history_index == 0
    assert not controller.has_changes
    assert not controller.can_undo and not controller.can_redo


def test_edit_stages_without_touching_committed(controller):
    committed = controller.matrix.copy()

    assert controller.set_company_grade_rate("S", "base_up", 3.0)

    assert controller.has_changes
    assert controller.matrix == committed
    assert controller.pending_matrix.cell("Eng", "Lv.1").grade_rates["S"].base_up == 3.0
    assert controller.pending_weighted_average.total_average.base_up > 0
    assert controller.weighted_average.total_average.base_up == 0.0


def test_no_op_edit_does_not_create_pending(controller, caplog):
    with caplog.at_level(logging.WARNING):
        assert not controller.set_cell_grade_rate("Nope", "Lv.1", "S", "merit", 1.0)
    assert not controller.has_changes
    assert controller.pending_budget_usage is None


def test_apply_then_undo_restores_prior_matrix(controller):
    before = controller.matrix.copy()
    controller.set_level_pay_zone_grade_rate("Lv.2", 3, "S", "base_up", 5.0)

    assert controller.apply()
    assert controller.history_index == 1
    assert controller.matrix != before

    assert controller.undo()
    assert controller.matrix == before
    assert controller.can_redo

    assert controller.redo()
    assert controller.matrix.cell("Eng", "Lv.2").pay_zone_overrides["S"][3].base_up == 5.0


def test_apply_without_pending_is_a_no_op(controller):
    assert not controller.apply()
    assert len(controller.history) == 1


def test_discard_is_idempotent(controller):
    committed = controller.matrix.copy()
    controller.set_cell_grade_rate("Eng", "Lv.1", "A", "merit", 2.0)

    controller.discard()
    once = (controller.matrix.to_dict(), controller.pending_matrix, controller.history_index)
    controller.discard()
    twice = (controller.matrix.to_dict(), controller.pending_matrix, controller.history_index)

    assert once == twice
    assert controller.matrix == committed


def test_new_apply_truncates_redo_tail(controller):
    controller.set_company_grade_rate("S", "merit", 1.0)
    controller.apply()
    controller.set_company_grade_rate("S", "merit", 2.0)
    controller.apply()
    controller.undo()

    controller.set_company_grade_rate("A", "merit", 3.0)
    controller.apply()

    assert len(controller.history) == 3
    assert controller.history_index == 2
    assert not controller.can_redo
    assert controller.matrix.cell("Eng", "Lv.1").grade_rates["S"].merit == 1.0


def test_undo_and_redo_at_bounds(controller):
    assert not controller.undo()
    assert not controller.redo()


def test_undo_discards_pending(controller):
    controller.set_company_grade_rate("S", "merit", 1.0)
    controller.apply()
    controller.set_company_grade_rate("S", "merit", 2.0)

    controller.undo()

    assert not controller.has_changes


def test_reset_zeroes_and_restarts_history(controller):
    controller.set_company_grade_rate("S", "merit", 1.0)
    controller.apply()

    controller.reset()

    assert controller.history_index == 0
    assert len(controller.history) == 1
    assert controller.weighted_average.total_average.merit == 0.0


def test_reload_rebuilds_against_new_vocabulary(controller, roster_factory):
    new_roster = roster_factory([("n1", "HR", "Lv.3", "B", 30_000_000, 1)])

    controller.reload(lambda: new_roster)

    assert controller.matrix.bands == ["HR"]
    assert controller.matrix.cell("HR", "Lv.3").statistics.employee_count == 1
    assert controller.history_index == 0


def test_failed_reload_keeps_committed_and_drops_pending(controller, caplog):
    controller.set_company_grade_rate("S", "merit", 1.0)
    controller.apply()
    committed = controller.matrix.copy()
    controller.set_company_grade_rate("S", "merit", 2.0)

    def broken():
        raise OSError("roster service unavailable")

    with caplog.at_level(logging.ERROR):
        with pytest.raises(RosterLoadError) as excinfo:
            controller.reload(broken)

    assert isinstance(excinfo.value.__cause__, OSError)
    assert controller.matrix == committed
    assert controller.history_index == 1
    assert not controller.has_changes
    assert "Roster reload failed" in caplog.text


def test_apply_persists_and_restore_reads_back(mixed_roster, manual_config):
    store = InMemoryMatrixStore()
    controller = StagingController(mixed_roster, manual_config, store=store)
    controller.set_cell_pay_zone_grade_rate("Eng", "Lv.2", 3, "S", "base_up", 6.0)
    controller.apply()
    assert manual_config.storage_key in store

    fresh = StagingController(mixed_roster, manual_config, store=store)
    assert fresh.restore()
    assert fresh.matrix.cell("Eng", "Lv.2").pay_zone_overrides["S"][3].base_up == 6.0


def test_restore_rejects_other_vocabulary(mixed_roster, manual_config, roster_factory):
    store = InMemoryMatrixStore()
    controller = StagingController(mixed_roster, manual_config, store=store)
    controller.set_company_grade_rate("S", "merit", 1.0)
    controller.apply()

    other = StagingController(
        roster_factory([("x", "HR", "Lv.1", "S", 10_000_000)]), manual_config, store=store
    )
    assert not other.restore()


def test_additional_type_toggle_refreshes_views(roster_factory, manual_config):
    roster = roster_factory([("e1", "A", "L1", "G1", 100_000_000)])
    controller = StagingController(roster, manual_config)
    controller.set_company_grade_rate("G1", "base_up", 2.0)
    controller.set_company_grade_rate("G1", "additional", 10)
    controller.apply()
    assert controller.matrix.aggregated.total.total == pytest.approx(12.0)

    controller.set_additional_type("amount")

    assert controller.matrix.aggregated.total.total == pytest.approx(2.0)
    assert controller.budget_usage.direct_cost == pytest.approx(2_000_000 + 100_000)

    with pytest.raises(ValueError):
        controller.set_additional_type("bonus")


def test_set_budget_updates_usage(controller):
    controller.set_company_grade_rate("S", "base_up", 10.0)
    controller.apply()
    direct = controller.budget_usage.direct_cost

    controller.set_budget(total=direct * 1.178 * 2, welfare=0)

    assert controller.budget_usage.usage_percentage == pytest.approx(50.0)


def test_pay_zone_config_change_moves_employees(roster_factory):
    roster = roster_factory([("e1", "A", "L1", "S", 50_000_000)])
    controller = StagingController(roster, PlannerConfig())
    controller.edit(EditScope.CELL_PAY_ZONE, "S", "base_up", 5.0, band="A", level="L1", zone=2)
    controller.apply()
    # L1 has no configured ranges, so the employee sits in zone 1
    assert controller.weighted_average.total_average.base_up == 0.0

    controller.set_pay_zone_config(PayZoneConfiguration(level_configs=[
        LevelPayZoneConfig(level="L1", ranges=[PayZoneRange(zone_id=2, min_salary=0, max_salary=99_000_000)])
    ]))

    assert controller.weighted_average.total_average.base_up == pytest.approx(5.0)
    assert controller.budget_usage.direct_cost == pytest.approx(2_500_000)


def test_budget_breakdown_follows_pending(controller):
    controller.set_company_grade_rate("S", "base_up", 1.0)
    assert controller.budget_breakdown(pending=True)["direct_cost"].sum() > 0
    assert controller.budget_breakdown()["direct_cost"].sum() == 0


def test_numeric_levels_reach_weighted_average_and_budget(manual_config):
    roster = Roster.from_employees([Employee("1", "A", 1, "G", 100_000_000)])
    controller = StagingController(roster, manual_config)

    assert controller.set_cell_grade_rate("A", "1", "G", "base_up", 3.0)

    assert controller.pending_weighted_average.summary.total_employees == 1
    assert controller.pending_weighted_average.total_average.base_up == pytest.approx(3.0)
    assert controller.pending_budget_usage.direct_cost == pytest.approx(3_000_000)


def test_fresh_pending_after_discard_gets_fresh_views(controller):
    controller.set_company_grade_rate("S", "base_up", 3.0)
    first = controller.pending_weighted_average.total_average.base_up
    controller.discard()

    controller.set_company_grade_rate("S", "base_up", 6.0)

    assert controller.pending_weighted_average.total_average.base_up == pytest.approx(first * 2)
    assert controller.pending_budget_usage.direct_cost == pytest.approx(
        controller.budget_breakdown(pending=True)["direct_cost"].sum()
    )
