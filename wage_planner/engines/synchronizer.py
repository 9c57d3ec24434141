# wage_planner/engines/synchronizer.py
"""
Edits at four scopes, all written into the matrix's canonical store
(cell grade rates and pay-zone overrides):

- COMPANY:         one grade, every cell (fan-out overwrite)
- CELL:            one grade, one band x level cell
- LEVEL_PAY_ZONE:  one grade, one zone override, every band at a level
- CELL_PAY_ZONE:   one grade, one zone override, one cell

Coarser views (company total, band / level / grade roll-ups) are never
written directly; ``recompute`` derives them from the canonical data.
"""

import logging
import re
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

import pandas as pd

from wage_planner.config import defaults
from wage_planner.matrix.models import AdjustmentMatrix, MatrixCell, RateValues, normalize_field
from wage_planner.matrix.statistics import update_statistics
from wage_planner.state.pay_zones import PayZoneAssigner, with_resolved_zones
from wage_planner.state.roster import Employee, Roster

from .weighted_average import WeightedAverageCalculator, WeightedAverageResult, apply_rollups

logger = logging.getLogger(__name__)
perf_logger = logging.getLogger("wage_planner.performance")

_ZONE_NUMBER = re.compile(r"\d+")


class EditScope(str, Enum):
    COMPANY = "company"
    CELL = "cell"
    LEVEL_PAY_ZONE = "level_pay_zone"
    CELL_PAY_ZONE = "cell_pay_zone"


@dataclass(frozen=True)
class Coordinates:
    """Target of an edit; which members matter depends on the scope."""

    band: Optional[str] = None
    level: Optional[str] = None
    zone: Optional[Any] = None


def _zone_id(zone: Any) -> Optional[int]:
    """Edit target zone as a positive int ('Lv.3' yields 3); None when unusable."""
    if isinstance(zone, bool):
        return None
    if isinstance(zone, str):
        match = _ZONE_NUMBER.search(zone)
        zone = match.group(0) if match else None
    try:
        zone_id = int(zone)
    except (TypeError, ValueError):
        return None
    return zone_id if zone_id > 0 else None


def _target_cells(
    matrix: AdjustmentMatrix, scope: EditScope, coordinates: Coordinates
) -> List[MatrixCell]:
    if scope == EditScope.COMPANY:
        return list(matrix.iter_cells())
    if scope == EditScope.LEVEL_PAY_ZONE:
        if coordinates.level not in matrix.levels:
            return []
        return [matrix.cell(band, coordinates.level) for band in matrix.bands]
    cell = matrix.cell(coordinates.band, coordinates.level)
    return [cell] if cell is not None else []


def _override_for(cell: MatrixCell, grade: str, zone: int) -> RateValues:
    """Existing override, or a new one seeded from the cell's grade rates."""
    zones = cell.pay_zone_overrides.setdefault(grade, {})
    if zone not in zones:
        zones[zone] = cell.resolve(grade).copy()
    return zones[zone]


def set_rate(
    matrix: AdjustmentMatrix,
    scope: EditScope,
    coordinates: Coordinates,
    grade: str,
    field: str,
    value: float,
) -> bool:
    """
    Write ``value`` into the canonical store for ``scope``.

    Unknown band / level / grade / field or a missing zone for a pay-zone
    scope is a no-op (logged); returns whether anything was written.
    Derived views are stale until ``recompute`` runs.
    """
    scope = EditScope(scope)
    name = normalize_field(field)
    if name is None:
        logger.warning(f"[SYNC] Ignoring edit of unknown rate field '{field}'")
        return False
    if grade not in matrix.grades:
        logger.warning(f"[SYNC] Ignoring {scope.value} edit for unknown grade '{grade}'")
        return False
    pay_zone_scope = scope in (EditScope.LEVEL_PAY_ZONE, EditScope.CELL_PAY_ZONE)
    zone_id = _zone_id(coordinates.zone) if pay_zone_scope else None
    if pay_zone_scope and zone_id is None:
        logger.warning(
            f"[SYNC] Ignoring {scope.value} edit without a valid pay zone: {coordinates.zone!r}"
        )
        return False

    cells = _target_cells(matrix, scope, coordinates)
    if not cells:
        logger.warning(
            f"[SYNC] Ignoring {scope.value} edit for unknown cell "
            f"band={coordinates.band!r} level={coordinates.level!r}"
        )
        return False

    for cell in cells:
        if pay_zone_scope:
            _override_for(cell, grade, zone_id).set(name, value)
        else:
            cell.grade_rates.setdefault(grade, RateValues.zero()).set(name, value)

    logger.debug(
        f"[SYNC] {scope.value} {grade}.{name}={value} -> {len(cells)} cells ({coordinates})"
    )
    return True


def set_grade_rates(matrix: AdjustmentMatrix, rates_by_grade: Dict[str, RateValues]) -> bool:
    """Replace the whole rate triple per grade in every cell."""
    known = {g: r for g, r in rates_by_grade.items() if g in matrix.grades}
    unknown = sorted(set(rates_by_grade) - set(known))
    if unknown:
        logger.warning(f"[SYNC] Ignoring rates for unknown grades: {unknown}")
    if not known:
        return False
    for cell in matrix.iter_cells():
        for grade, rates in known.items():
            cell.grade_rates[grade] = rates.copy()
    return True


def clear_pay_zone_override(
    matrix: AdjustmentMatrix,
    band: str,
    level: str,
    grade: str,
    zone: Optional[int] = None,
) -> bool:
    """Drop one zone override (or every override of the grade when zone is None)."""
    cell = matrix.cell(band, level)
    if cell is None or grade not in cell.pay_zone_overrides:
        return False
    if zone is None:
        del cell.pay_zone_overrides[grade]
        return True
    zones = cell.pay_zone_overrides[grade]
    if zones.pop(int(zone), None) is None:
        return False
    if not zones:
        del cell.pay_zone_overrides[grade]
    return True


def resolve_rates(
    matrix: AdjustmentMatrix, employee: Employee, assign_zone=None
) -> RateValues:
    """Effective rates for one employee: pay-zone override -> grade rates -> zero."""
    cell = matrix.cell(employee.band, employee.level)
    if cell is None:
        return RateValues.zero()
    zone = None
    if cell.has_overrides(employee.grade):
        zone = (assign_zone or PayZoneAssigner())(employee)
    return cell.resolve(employee.grade, zone)


def recompute(
    matrix: AdjustmentMatrix,
    roster: Roster,
    assign_zone=None,
    additional_type: str = defaults.ADDITIONAL_PERCENTAGE,
    frame: Optional[pd.DataFrame] = None,
) -> WeightedAverageResult:
    """
    Refresh statistics, the weighted average and every roll-up view of
    ``matrix``, and bump its version.
    """
    start = time.perf_counter()
    if frame is None:
        frame = with_resolved_zones(roster, assign_zone)
    update_statistics(matrix, roster, frame=frame)
    result = WeightedAverageCalculator().calculate_matrix(
        matrix, roster, additional_type=additional_type, frame=frame
    )
    apply_rollups(matrix, result)
    matrix.touch()
    perf_logger.info(
        f"[SYNC] Recomputed matrix v{matrix.metadata.version} for {len(roster)} employees "
        f"in {time.perf_counter() - start:.4f}s"
    )
    return result
