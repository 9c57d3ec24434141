"""
Staging controller: pending / apply / discard / undo / redo / reset / reload
around the adjustment matrix of one planning session.

Edits never touch the committed matrix. The first edit copies it into a
pending matrix; ``apply`` moves the pending matrix into history and makes it
the committed one. ``history[history_index]`` is always the committed matrix.
"""

import logging
import threading
from typing import Any, Callable, Dict, Hashable, List, Optional, Tuple

import pandas as pd

from wage_planner.config import defaults
from wage_planner.config.models import PayZoneConfiguration, PlannerConfig
from wage_planner.engines.budget import BudgetUsage, budget_breakdown, calculate_budget_usage
from wage_planner.engines.synchronizer import (
    Coordinates,
    EditScope,
    clear_pay_zone_override,
    recompute,
    set_grade_rates,
    set_rate,
)
from wage_planner.engines.weighted_average import (
    WeightedAverageResult,
    calculate_weighted_average,
)
from wage_planner.matrix.builder import create_empty_matrix
from wage_planner.matrix.models import AdjustmentMatrix, RateValues
from wage_planner.state.pay_zones import PayZoneAssigner, with_resolved_zones
from wage_planner.state.repository import RosterProvider, RosterRepository
from wage_planner.state.roster import Roster

from .exceptions import RosterLoadError
from .storage import MatrixStore

logger = logging.getLogger(__name__)

_ADDITIONAL_TYPES = (defaults.ADDITIONAL_PERCENTAGE, defaults.ADDITIONAL_AMOUNT)


class StagingController:
    """
    Owns the (committed, pending, history) state of one session.

    Every public action holds the controller's re-entrant lock, so a
    controller may be shared between threads; separate sessions use
    separate controllers.
    """

    def __init__(
        self,
        roster: Roster,
        config: Optional[PlannerConfig] = None,
        assign_zone: Optional[Callable] = None,
        store: Optional[MatrixStore] = None,
    ):
        self._lock = threading.RLock()
        self.repository = RosterRepository(roster, config)
        self.store = store
        self._assign_zone = assign_zone or PayZoneAssigner(self.config.pay_zones)
        self._zone_config_generation = 0
        self._frame: Optional[pd.DataFrame] = None
        self._views: Dict[str, Tuple[AdjustmentMatrix, Hashable, Any]] = {}
        self._pending: Optional[AdjustmentMatrix] = None
        self._history: List[AdjustmentMatrix] = []
        self._history_index = -1
        self._rebuild()

    # --- read model ---

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def roster(self) -> Roster:
        return self.repository.roster

    @property
    def config(self) -> PlannerConfig:
        return self.repository.config

    @property
    def additional_type(self) -> str:
        return self.config.additional_type

    @property
    def matrix(self) -> AdjustmentMatrix:
        with self._lock:
            return self._history[self._history_index]

    @property
    def pending_matrix(self) -> Optional[AdjustmentMatrix]:
        return self._pending

    @property
    def history(self) -> Tuple[AdjustmentMatrix, ...]:
        return tuple(self._history)

    @property
    def history_index(self) -> int:
        return self._history_index

    @property
    def has_changes(self) -> bool:
        return self._pending is not None

    @property
    def can_undo(self) -> bool:
        return self._history_index > 0

    @property
    def can_redo(self) -> bool:
        return self._history_index < len(self._history) - 1

    @property
    def weighted_average(self) -> WeightedAverageResult:
        with self._lock:
            return self._weighted_average_for("committed", self.matrix)

    @property
    def budget_usage(self) -> BudgetUsage:
        with self._lock:
            return self._budget_usage_for("committed", self.matrix)

    @property
    def pending_weighted_average(self) -> Optional[WeightedAverageResult]:
        with self._lock:
            if self._pending is None:
                return None
            return self._weighted_average_for("pending", self._pending)

    @property
    def pending_budget_usage(self) -> Optional[BudgetUsage]:
        with self._lock:
            if self._pending is None:
                return None
            return self._budget_usage_for("pending", self._pending)

    def budget_breakdown(self, pending: bool = False) -> pd.DataFrame:
        """Per-employee resolved rates and raise amounts for the committed (or pending) matrix."""
        with self._lock:
            matrix = self._pending if pending and self._pending is not None else self.matrix
            return budget_breakdown(
                matrix,
                self.roster,
                additional_type=self.additional_type,
                fixed_amount_unit=self.config.fixed_amount_unit,
                frame=self._roster_frame(),
            )

    # --- edits ---

    def edit(
        self,
        scope: EditScope,
        grade: str,
        field: str,
        value: float,
        band: Optional[str] = None,
        level: Optional[str] = None,
        zone: Optional[int] = None,
    ) -> bool:
        coordinates = Coordinates(band=band, level=level, zone=zone)
        return self._stage(lambda m: set_rate(m, scope, coordinates, grade, field, value))

    def set_company_grade_rate(self, grade: str, field: str, value: float) -> bool:
        return self.edit(EditScope.COMPANY, grade, field, value)

    def set_cell_grade_rate(
        self, band: str, level: str, grade: str, field: str, value: float
    ) -> bool:
        return self.edit(EditScope.CELL, grade, field, value, band=band, level=level)

    def set_level_pay_zone_grade_rate(
        self, level: str, zone: int, grade: str, field: str, value: float
    ) -> bool:
        return self.edit(EditScope.LEVEL_PAY_ZONE, grade, field, value, level=level, zone=zone)

    def set_cell_pay_zone_grade_rate(
        self, band: str, level: str, zone: int, grade: str, field: str, value: float
    ) -> bool:
        return self.edit(
            EditScope.CELL_PAY_ZONE, grade, field, value, band=band, level=level, zone=zone
        )

    def set_grade_rates(self, rates_by_grade: Dict[str, RateValues]) -> bool:
        return self._stage(lambda m: set_grade_rates(m, rates_by_grade))

    def clear_pay_zone_override(
        self, band: str, level: str, grade: str, zone: Optional[int] = None
    ) -> bool:
        return self._stage(lambda m: clear_pay_zone_override(m, band, level, grade, zone))

    def _stage(self, mutate: Callable[[AdjustmentMatrix], bool]) -> bool:
        with self._lock:
            target = self._pending if self._pending is not None else self.matrix.copy()
            if not mutate(target):
                return False
            self._recompute(target)
            self._pending = target
            return True

    # --- transactions ---

    def apply(self) -> bool:
        with self._lock:
            if self._pending is None:
                return False
            committed = self._pending
            del self._history[self._history_index + 1:]
            self._history.append(committed)
            self._history_index += 1
            self._pending = None
            logger.info(
                f"[STAGING] Applied pending changes as version {committed.metadata.version} "
                f"(history {self._history_index + 1}/{len(self._history)})"
            )
            if self.store is not None:
                self.store.save(self.config.storage_key, committed)
            return True

    def discard(self) -> None:
        with self._lock:
            if self._pending is not None:
                logger.info("[STAGING] Discarded pending changes")
            self._pending = None

    def undo(self) -> bool:
        with self._lock:
            if self._history_index <= 0:
                return False
            self._history_index -= 1
            self._pending = None
            self._refresh(self.matrix)
            return True

    def redo(self) -> bool:
        with self._lock:
            if self._history_index >= len(self._history) - 1:
                return False
            self._history_index += 1
            self._pending = None
            self._refresh(self.matrix)
            return True

    def reset(self) -> None:
        """All-zero matrix for the current vocabulary; history restarts."""
        with self._lock:
            self._rebuild()
            logger.info("[STAGING] Matrix reset to zero rates")

    def reload(self, provider: RosterProvider) -> Roster:
        """
        Replace the roster from ``provider`` and rebuild the matrix against its
        vocabulary. Pending edits are discarded whether or not the load
        succeeds; on failure the committed matrix and history are kept.
        """
        with self._lock:
            self._pending = None
            try:
                roster = self.repository.load(provider)
            except Exception as e:
                logger.error(f"[STAGING] Roster reload failed, keeping committed matrix: {e}")
                raise RosterLoadError("Roster reload failed") from e
            self._rebuild()
            return roster

    def restore(self) -> bool:
        """
        Replace the committed matrix with the persisted snapshot when its
        vocabulary matches the current roster. History restarts from it.
        """
        with self._lock:
            if self.store is None:
                return False
            snapshot = self.store.load(self.config.storage_key)
            if snapshot is None:
                return False
            roster = self.roster
            if (
                list(snapshot.bands) != list(roster.bands)
                or list(snapshot.levels) != list(roster.levels)
                or list(snapshot.grades) != list(roster.grades)
            ):
                logger.warning("[STAGING] Stored matrix vocabulary differs from roster; not restored")
                return False
            self._recompute(snapshot)
            self._pending = None
            self._history = [snapshot]
            self._history_index = 0
            logger.info(f"[STAGING] Restored matrix '{self.config.storage_key}'")
            return True

    # --- mode / config toggles ---

    def set_additional_type(self, additional_type: str) -> None:
        if additional_type not in _ADDITIONAL_TYPES:
            raise ValueError(
                f"additional_type must be one of {_ADDITIONAL_TYPES}, got {additional_type!r}"
            )
        with self._lock:
            self.repository.update_config(
                self.config.model_copy(update={"additional_type": additional_type})
            )
            self._refresh_current()

    def set_budget(self, total: float, welfare: float = 0.0) -> None:
        with self._lock:
            budget = self.config.budget.model_copy(update={"total": total, "welfare": welfare})
            self.repository.update_config(self.config.model_copy(update={"budget": budget}))

    def set_pay_zone_config(self, configuration: PayZoneConfiguration) -> None:
        with self._lock:
            self._assign_zone = PayZoneAssigner(configuration)
            self.repository.update_config(
                self.config.model_copy(update={"pay_zones": configuration})
            )
            self._zone_config_generation += 1
            self._frame = None
            self._refresh_current()

    # --- internals ---

    def _basis(self) -> str:
        return (
            f"{self.additional_type}|zones:{self._zone_config_generation}"
            f"|roster:{self.repository.generation}"
        )

    def _roster_frame(self) -> pd.DataFrame:
        if self._frame is None:
            self._frame = with_resolved_zones(self.roster, self._assign_zone)
        return self._frame

    def _recompute(self, matrix: AdjustmentMatrix) -> None:
        recompute(
            matrix,
            self.roster,
            additional_type=self.additional_type,
            frame=self._roster_frame(),
        )
        matrix.metadata.basis = self._basis()

    def _refresh(self, matrix: AdjustmentMatrix) -> None:
        """Recompute derived views only if they were built against another basis."""
        if matrix.metadata.basis != self._basis():
            self._recompute(matrix)

    def _refresh_current(self) -> None:
        self._refresh(self.matrix)
        if self._pending is not None:
            self._refresh(self._pending)

    def _rebuild(self) -> None:
        roster = self.roster
        self._frame = None
        matrix = create_empty_matrix(roster.bands, roster.levels, roster.grades)
        self._recompute(matrix)
        self._pending = None
        self._history = [matrix]
        self._history_index = 0
        self._views.clear()
        logger.info(
            f"[STAGING] Built matrix {len(matrix.bands)}x{len(matrix.levels)} "
            f"for {len(roster)} employees"
        )

    def _cached(
        self, name: str, matrix: AdjustmentMatrix, key: Hashable, compute: Callable[[], Any]
    ) -> Any:
        # Entries hold the matrix itself; a recycled id() must not match.
        hit = self._views.get(name)
        if hit is not None and hit[0] is matrix and hit[1] == key:
            return hit[2]
        value = compute()
        self._views[name] = (matrix, key, value)
        return value

    def _weighted_average_for(self, name: str, matrix: AdjustmentMatrix) -> WeightedAverageResult:
        key = (matrix.metadata.version, self._basis())
        return self._cached(
            f"wavg:{name}",
            matrix,
            key,
            lambda: calculate_weighted_average(
                matrix,
                self.roster,
                additional_type=self.additional_type,
                frame=self._roster_frame(),
            ),
        )

    def _budget_usage_for(self, name: str, matrix: AdjustmentMatrix) -> BudgetUsage:
        config = self.config
        key = (
            matrix.metadata.version,
            self._basis(),
            config.budget.available,
            config.indirect_cost_rate,
            config.fixed_amount_unit,
            config.usage_display_ceiling,
        )
        return self._cached(
            f"budget:{name}",
            matrix,
            key,
            lambda: calculate_budget_usage(
                matrix,
                self.roster,
                config.budget.available,
                additional_type=config.additional_type,
                indirect_cost_rate=config.indirect_cost_rate,
                fixed_amount_unit=config.fixed_amount_unit,
                usage_ceiling=config.usage_display_ceiling,
                warning_threshold=config.warning_threshold,
                danger_threshold=config.danger_threshold,
                frame=self._roster_frame(),
            ),
        )
