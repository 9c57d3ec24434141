import logging
from typing import Optional

import pandas as pd

from wage_planner.state.pay_zones import with_resolved_zones
from wage_planner.state.roster import Roster
from wage_planner.utils.columns import (
    EMP_BAND,
    EMP_GRADE,
    EMP_GROSS_COMP,
    EMP_LEVEL,
    EMP_RESOLVED_ZONE,
)

from .models import AdjustmentMatrix, CellStatistics, CellWeightedAverage

logger = logging.getLogger(__name__)


def known_cell_rows(matrix: AdjustmentMatrix, frame: pd.DataFrame) -> pd.Series:
    """Boolean mask of roster rows whose band and level exist in the matrix."""
    return frame[EMP_BAND].isin(matrix.bands) & frame[EMP_LEVEL].isin(matrix.levels)


def update_statistics(
    matrix: AdjustmentMatrix,
    roster: Roster,
    assign_zone=None,
    frame: Optional[pd.DataFrame] = None,
) -> int:
    """
    Recount headcount, salary mass, grade and pay-zone distributions per cell.

    Statistics and cell weighted averages are reset first, so re-running is
    idempotent. Employees whose band/level is unknown to the matrix are
    skipped. ``frame`` may carry a roster frame with resolved zones already.

    Returns:
        Number of employees skipped.
    """
    for cell in matrix.iter_cells():
        cell.statistics = CellStatistics()
        cell.weighted_average = CellWeightedAverage()

    if frame is None:
        frame = with_resolved_zones(roster, assign_zone)
    if frame.empty:
        return 0

    known = known_cell_rows(matrix, frame)
    skipped = int((~known).sum())
    if skipped:
        logger.warning(
            f"[MATRIX] Skipped {skipped} employees whose band/level is not in the matrix"
        )

    for (band, level), rows in frame[known].groupby([EMP_BAND, EMP_LEVEL], sort=False):
        cell = matrix.cell(band, level)
        stats = cell.statistics
        stats.employee_count = int(len(rows))
        stats.total_salary_amount = float(rows[EMP_GROSS_COMP].sum())
        stats.grade_distribution = {
            str(grade): int(n) for grade, n in rows[EMP_GRADE].value_counts(sort=False).items()
        }
        stats.pay_zone_distribution = {
            int(zone): int(n)
            for zone, n in rows[EMP_RESOLVED_ZONE].value_counts(sort=False).items()
        }

    for cell in matrix.iter_cells():
        stats = cell.statistics
        stats.average_salary = (
            stats.total_salary_amount / stats.employee_count if stats.employee_count else 0.0
        )
    return skipped
