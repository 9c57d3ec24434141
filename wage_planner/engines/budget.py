# wage_planner/engines/budget.py
"""
Budget usage of the planned raises against the available envelope.

Per employee, rates resolve by priority pay-zone override -> grade rates ->
zero. Direct cost is the sum of base-up, merit and additional amounts;
indirect cost is a fixed load on top of it.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from wage_planner.config import defaults
from wage_planner.matrix.models import RATE_FIELDS, AdjustmentMatrix, RateValues
from wage_planner.state.pay_zones import with_resolved_zones
from wage_planner.state.roster import Roster
from wage_planner.utils.columns import (
    ADDITIONAL,
    ADDITIONAL_AMOUNT,
    BASE_UP,
    BASE_UP_AMOUNT,
    DIRECT_COST,
    EMP_BAND,
    EMP_GRADE,
    EMP_GROSS_COMP,
    EMP_LEVEL,
    EMP_RESOLVED_ZONE,
    MERIT,
    MERIT_AMOUNT,
    RATE_SOURCE,
    SOURCE_GRADE,
    SOURCE_NONE,
    SOURCE_PAY_ZONE,
)

logger = logging.getLogger(__name__)

STATUS_UNDER = "under"
STATUS_OPTIMAL = "optimal"
STATUS_OVER = "over"

_CELL_KEYS = [EMP_BAND, EMP_LEVEL, EMP_GRADE]
_ZONE_KEYS = _CELL_KEYS + [EMP_RESOLVED_ZONE]


@dataclass
class BudgetUsage:
    direct_cost: float = 0.0
    indirect_cost: float = 0.0
    total_cost: float = 0.0
    available_budget: float = 0.0
    usage_percentage: float = 0.0
    remaining: float = 0.0
    is_over_budget: bool = False
    status: str = STATUS_UNDER


def _grade_rate_table(matrix: AdjustmentMatrix) -> pd.DataFrame:
    rows = [
        (cell.band, cell.level, grade, rates.base_up, rates.merit, rates.additional)
        for cell in matrix.iter_cells()
        for grade, rates in cell.grade_rates.items()
    ]
    table = pd.DataFrame(rows, columns=_CELL_KEYS + list(RATE_FIELDS))
    return table.astype({name: "float64" for name in RATE_FIELDS})


def _override_table(matrix: AdjustmentMatrix) -> pd.DataFrame:
    rows = [
        (cell.band, cell.level, grade, zone, rates.base_up, rates.merit, rates.additional)
        for cell in matrix.iter_cells()
        for grade, zones in cell.pay_zone_overrides.items()
        for zone, rates in zones.items()
    ]
    table = pd.DataFrame(rows, columns=_ZONE_KEYS + list(RATE_FIELDS))
    dtypes = {name: "float64" for name in RATE_FIELDS}
    dtypes[EMP_RESOLVED_ZONE] = "int64"
    return table.astype(dtypes)


def _additional_amount(
    salary: pd.Series, additional: pd.Series, additional_type: str, fixed_amount_unit: float
) -> pd.Series:
    if additional_type == defaults.ADDITIONAL_PERCENTAGE:
        return salary * additional / 100
    # fixed amount, entered in units of fixed_amount_unit
    return additional * fixed_amount_unit


def budget_breakdown(
    matrix: AdjustmentMatrix,
    roster: Roster,
    assign_zone=None,
    additional_type: str = defaults.ADDITIONAL_PERCENTAGE,
    fixed_amount_unit: float = defaults.FIXED_AMOUNT_UNIT,
    frame: Optional[pd.DataFrame] = None,
) -> pd.DataFrame:
    """
    Per-employee resolved rates and raise amounts.

    Returns the roster frame (one row per employee, original order) with the
    resolved rate columns, RATE_SOURCE, the three amount columns and DIRECT_COST.
    """
    if frame is None:
        frame = with_resolved_zones(roster, assign_zone)
    frame = frame.astype({EMP_RESOLVED_ZONE: "int64"})

    df = frame.merge(_grade_rate_table(matrix), how="left", on=_CELL_KEYS)
    df = df.merge(
        _override_table(matrix), how="left", on=_ZONE_KEYS, suffixes=("", "_override")
    )

    has_override = df[f"{BASE_UP}_override"].notna()
    has_grade = df[BASE_UP].notna()
    for name in RATE_FIELDS:
        df[name] = df[f"{name}_override"].where(has_override, df[name]).fillna(0.0)
    df = df.drop(columns=[f"{name}_override" for name in RATE_FIELDS])
    df[RATE_SOURCE] = np.where(
        has_override, SOURCE_PAY_ZONE, np.where(has_grade, SOURCE_GRADE, SOURCE_NONE)
    )

    salary = df[EMP_GROSS_COMP].astype(float)
    df[BASE_UP_AMOUNT] = salary * df[BASE_UP] / 100
    df[MERIT_AMOUNT] = salary * df[MERIT] / 100
    df[ADDITIONAL_AMOUNT] = _additional_amount(
        salary, df[ADDITIONAL], additional_type, fixed_amount_unit
    )
    df[DIRECT_COST] = df[BASE_UP_AMOUNT] + df[MERIT_AMOUNT] + df[ADDITIONAL_AMOUNT]
    return df


def budget_status(
    usage_percentage: float,
    is_over_budget: bool = False,
    warning_threshold: float = defaults.WARNING_THRESHOLD,
    danger_threshold: float = defaults.DANGER_THRESHOLD,
) -> str:
    """Classify usage: below the warning threshold is 'under', up to danger 'optimal'."""
    if is_over_budget or usage_percentage > danger_threshold:
        return STATUS_OVER
    if usage_percentage < warning_threshold:
        return STATUS_UNDER
    return STATUS_OPTIMAL


def summarize_usage(
    direct_cost: float,
    available_budget: float,
    indirect_cost_rate: float = defaults.INDIRECT_COST_TOTAL,
    usage_ceiling: float = defaults.USAGE_DISPLAY_CEILING,
    warning_threshold: float = defaults.WARNING_THRESHOLD,
    danger_threshold: float = defaults.DANGER_THRESHOLD,
) -> BudgetUsage:
    """Indirect load, usage ratio and remaining budget for a direct cost."""
    indirect_cost = direct_cost * indirect_cost_rate
    total_cost = direct_cost + indirect_cost

    if available_budget > 0:
        usage_percentage = total_cost / available_budget * 100
    elif total_cost > 0:
        # no envelope: keep the display bounded
        usage_percentage = usage_ceiling
    else:
        usage_percentage = 0.0

    is_over_budget = total_cost > available_budget
    return BudgetUsage(
        direct_cost=direct_cost,
        indirect_cost=indirect_cost,
        total_cost=total_cost,
        available_budget=available_budget,
        usage_percentage=usage_percentage,
        remaining=available_budget - total_cost,
        is_over_budget=is_over_budget,
        status=budget_status(
            usage_percentage, is_over_budget, warning_threshold, danger_threshold
        ),
    )


def calculate_budget_usage(
    matrix: AdjustmentMatrix,
    roster: Roster,
    available_budget: float,
    assign_zone=None,
    additional_type: str = defaults.ADDITIONAL_PERCENTAGE,
    indirect_cost_rate: float = defaults.INDIRECT_COST_TOTAL,
    fixed_amount_unit: float = defaults.FIXED_AMOUNT_UNIT,
    usage_ceiling: float = defaults.USAGE_DISPLAY_CEILING,
    warning_threshold: float = defaults.WARNING_THRESHOLD,
    danger_threshold: float = defaults.DANGER_THRESHOLD,
    frame: Optional[pd.DataFrame] = None,
) -> BudgetUsage:
    breakdown = budget_breakdown(
        matrix, roster, assign_zone, additional_type, fixed_amount_unit, frame=frame
    )
    direct_cost = float(breakdown[DIRECT_COST].sum()) if not breakdown.empty else 0.0
    usage = summarize_usage(
        direct_cost,
        available_budget,
        indirect_cost_rate,
        usage_ceiling,
        warning_threshold,
        danger_threshold,
    )
    logger.debug(
        f"[BUDGET] direct={usage.direct_cost:,.0f} indirect={usage.indirect_cost:,.0f} "
        f"usage={usage.usage_percentage:.1f}% over={usage.is_over_budget}"
    )
    return usage


def employee_budget_impact(
    salary: float,
    rates: RateValues,
    additional_type: str = defaults.ADDITIONAL_PERCENTAGE,
    indirect_cost_rate: float = defaults.INDIRECT_COST_TOTAL,
    fixed_amount_unit: float = defaults.FIXED_AMOUNT_UNIT,
) -> float:
    """Total cost (direct plus indirect load) of one employee's raise."""
    direct = salary * (rates.base_up + rates.merit) / 100
    if additional_type == defaults.ADDITIONAL_PERCENTAGE:
        direct += salary * rates.additional / 100
    else:
        direct += rates.additional * fixed_amount_unit
    return direct * (1 + indirect_cost_rate)
