# wage_planner/engines/weighted_average.py
"""
Salary-mass weighted average of raise rates across the adjustment matrix.

Every (band, level, grade) cohort with employees contributes its rates
weighted by its salary mass. When the cell carries pay-zone overrides for
the grade, the cohort is split by resolved zone and each zone subgroup
contributes on its own (override rate, or the grade rate for zones without
an override).

The same detail rows feed the company total, the per-cell weighted
averages and the band / level / grade roll-ups, so all views agree.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from wage_planner.config import defaults
from wage_planner.matrix.models import (
    RATE_FIELDS,
    AdjustmentMatrix,
    Aggregated,
    AggregatedRates,
    RateValues,
)
from wage_planner.matrix.statistics import known_cell_rows
from wage_planner.state.pay_zones import with_resolved_zones
from wage_planner.state.roster import Roster
from wage_planner.utils.columns import (
    EMP_BAND,
    EMP_GRADE,
    EMP_GROSS_COMP,
    EMP_LEVEL,
    EMP_RESOLVED_ZONE,
)

logger = logging.getLogger(__name__)


@dataclass
class WeightedAverageDetail:
    """One contribution to the weighted average (a cohort or a zone subgroup of it)."""

    path: str
    band: str
    level: str
    grade: str
    employee_count: int
    average_salary: float
    total_salary: float
    rates: RateValues
    weight: float
    pay_zone: Optional[int] = None
    contribution: float = 0.0  # share of total weight, percent


@dataclass
class WeightedAverageSummary:
    total_employees: int = 0
    total_salary: float = 0.0
    average_salary: float = 0.0
    effective_rate: float = 0.0


@dataclass
class WeightedAverageResult:
    total_average: RateValues = field(default_factory=RateValues.zero)
    details: List[WeightedAverageDetail] = field(default_factory=list)
    summary: WeightedAverageSummary = field(default_factory=WeightedAverageSummary)
    additional_type: str = defaults.ADDITIONAL_PERCENTAGE


def _weighted_rates(details: Iterable[WeightedAverageDetail]) -> Tuple[RateValues, float]:
    """Salary-weighted mean of the detail rates; zero when there is no weight."""
    sums = dict.fromkeys(RATE_FIELDS, 0.0)
    total_weight = 0.0
    for detail in details:
        for name in RATE_FIELDS:
            sums[name] += detail.rates.get(name) * detail.weight
        total_weight += detail.weight
    if total_weight <= 0:
        return RateValues.zero(), 0.0
    return RateValues(**{name: sums[name] / total_weight for name in RATE_FIELDS}), total_weight


class WeightedAverageCalculator:
    """
    Computes the company-wide effective rate with an auditable breakdown.

    Accumulators are reset at the start of every ``calculate_matrix`` call;
    nothing carries over between calls.
    """

    def __init__(self):
        self._reset()

    def _reset(self) -> None:
        self.details: List[WeightedAverageDetail] = []
        self.total_weight = 0.0
        self.weighted_sums = dict.fromkeys(RATE_FIELDS, 0.0)

    def calculate_matrix(
        self,
        matrix: AdjustmentMatrix,
        roster: Roster,
        assign_zone=None,
        additional_type: str = defaults.ADDITIONAL_PERCENTAGE,
        frame: Optional[pd.DataFrame] = None,
    ) -> WeightedAverageResult:
        self._reset()
        if frame is None:
            frame = with_resolved_zones(roster, assign_zone)

        cohorts = self._cohorts(matrix, frame)
        for band in matrix.bands:
            for level in matrix.levels:
                cell = matrix.cell(band, level)
                if cell is None:
                    continue
                for grade in matrix.grades:
                    zones = cohorts.get((band, level, grade))
                    if not zones:
                        continue
                    if cell.has_overrides(grade):
                        for zone, count, total in zones:
                            self._add_detail(WeightedAverageDetail(
                                path=f"{band} × {level} × {grade} × Zone{zone}",
                                band=band,
                                level=level,
                                grade=grade,
                                pay_zone=zone,
                                employee_count=count,
                                average_salary=total / count,
                                total_salary=total,
                                rates=cell.resolve(grade, zone).copy(),
                                weight=total,
                            ))
                    else:
                        count = sum(z[1] for z in zones)
                        total = sum(z[2] for z in zones)
                        self._add_detail(WeightedAverageDetail(
                            path=f"{band} × {level} × {grade}",
                            band=band,
                            level=level,
                            grade=grade,
                            employee_count=count,
                            average_salary=total / count,
                            total_salary=total,
                            rates=cell.resolve(grade).copy(),
                            weight=total,
                        ))

        return self._compute_final_average(additional_type)

    @staticmethod
    def _cohorts(
        matrix: AdjustmentMatrix, frame: pd.DataFrame
    ) -> Dict[Tuple[str, str, str], List[Tuple[int, int, float]]]:
        """(band, level, grade) -> [(zone, headcount, salary mass)] sorted by zone."""
        cohorts: Dict[Tuple[str, str, str], List[Tuple[int, int, float]]] = defaultdict(list)
        if frame.empty:
            return cohorts
        mask = known_cell_rows(matrix, frame) & frame[EMP_GRADE].isin(matrix.grades)
        grouped = (
            frame[mask]
            .groupby([EMP_BAND, EMP_LEVEL, EMP_GRADE, EMP_RESOLVED_ZONE], sort=True)[EMP_GROSS_COMP]
            .agg(["count", "sum"])
        )
        for (band, level, grade, zone), row in grouped.iterrows():
            cohorts[(band, level, grade)].append((int(zone), int(row["count"]), float(row["sum"])))
        return cohorts

    def _add_detail(self, detail: WeightedAverageDetail) -> None:
        self.details.append(detail)
        self.total_weight += detail.weight
        for name in RATE_FIELDS:
            self.weighted_sums[name] += detail.rates.get(name) * detail.weight

    def _compute_final_average(self, additional_type: str) -> WeightedAverageResult:
        if self.total_weight > 0:
            total_average = RateValues(
                **{name: self.weighted_sums[name] / self.total_weight for name in RATE_FIELDS}
            )
        else:
            total_average = RateValues.zero()

        for detail in self.details:
            detail.contribution = (
                detail.weight / self.total_weight * 100 if self.total_weight > 0 else 0.0
            )

        total_employees = sum(d.employee_count for d in self.details)
        total_salary = sum(d.total_salary for d in self.details)
        summary = WeightedAverageSummary(
            total_employees=total_employees,
            total_salary=total_salary,
            average_salary=total_salary / total_employees if total_employees else 0.0,
            effective_rate=total_average.effective_rate(additional_type),
        )
        logger.debug(
            f"[WAVG] {len(self.details)} contributions, {total_employees} employees, "
            f"effective rate {summary.effective_rate:.3f}%"
        )
        return WeightedAverageResult(
            total_average=total_average,
            details=list(self.details),
            summary=summary,
            additional_type=additional_type,
        )


def calculate_weighted_average(
    matrix: AdjustmentMatrix,
    roster: Roster,
    assign_zone=None,
    additional_type: str = defaults.ADDITIONAL_PERCENTAGE,
    frame: Optional[pd.DataFrame] = None,
) -> WeightedAverageResult:
    return WeightedAverageCalculator().calculate_matrix(
        matrix, roster, assign_zone, additional_type, frame=frame
    )


def restrict(
    result: WeightedAverageResult,
    band: Optional[str] = None,
    level: Optional[str] = None,
    grade: Optional[str] = None,
    pay_zone: Optional[int] = None,
) -> RateValues:
    """Weighted average over the detail rows matching every given coordinate."""
    selected = [
        d for d in result.details
        if (band is None or d.band == band)
        and (level is None or d.level == level)
        and (grade is None or d.grade == grade)
        and (pay_zone is None or d.pay_zone == pay_zone)
    ]
    rates, _ = _weighted_rates(selected)
    return rates


def _aggregate(details: List[WeightedAverageDetail], additional_type: str) -> AggregatedRates:
    rates, _ = _weighted_rates(details)
    count = sum(d.employee_count for d in details)
    total_salary = sum(d.total_salary for d in details)
    return AggregatedRates(
        base_up=rates.base_up,
        merit=rates.merit,
        additional=rates.additional,
        total=rates.effective_rate(additional_type),
        employee_count=count,
        total_salary=total_salary,
        average_salary=total_salary / count if count else 0.0,
    )


def apply_rollups(
    matrix: AdjustmentMatrix,
    result: WeightedAverageResult,
) -> None:
    """
    Write the read-only projections of ``result`` onto the matrix: per-cell
    weighted averages, each cell's share of salary mass, and the
    total / band / level / grade roll-ups. Statistics must be current.
    """
    additional_type = result.additional_type
    by_cell: Dict[Tuple[str, str], List[WeightedAverageDetail]] = defaultdict(list)
    by_band: Dict[str, List[WeightedAverageDetail]] = defaultdict(list)
    by_level: Dict[str, List[WeightedAverageDetail]] = defaultdict(list)
    by_grade: Dict[str, List[WeightedAverageDetail]] = defaultdict(list)
    for detail in result.details:
        by_cell[(detail.band, detail.level)].append(detail)
        by_band[detail.band].append(detail)
        by_level[detail.level].append(detail)
        by_grade[detail.grade].append(detail)

    total_mass = sum(c.statistics.total_salary_amount for c in matrix.iter_cells())
    for cell in matrix.iter_cells():
        rates, _ = _weighted_rates(by_cell.get((cell.band, cell.level), []))
        wavg = cell.weighted_average
        wavg.base_up = rates.base_up
        wavg.merit = rates.merit
        wavg.additional = rates.additional
        wavg.total = rates.effective_rate(additional_type)
        wavg.weight_in_matrix = (
            cell.statistics.total_salary_amount / total_mass
            if total_mass > 0 and cell.statistics.employee_count > 0
            else 0.0
        )

    matrix.aggregated = Aggregated(
        total=_aggregate(result.details, additional_type),
        by_band={b: _aggregate(by_band[b], additional_type) for b in matrix.bands if b in by_band},
        by_level={l: _aggregate(by_level[l], additional_type) for l in matrix.levels if l in by_level},
        by_grade={g: _aggregate(by_grade[g], additional_type) for g in matrix.grades if g in by_grade},
    )


def visualize(result: WeightedAverageResult, top: int = 20) -> str:
    """Text breakdown of the largest contributions, for audit / debugging."""
    rule = "═" * 45
    lines = [rule, "Weighted average breakdown", rule]
    total_weight = sum(d.weight for d in result.details)
    for d in sorted(result.details, key=lambda d: d.contribution, reverse=True)[:top]:
        base_up_share = d.rates.base_up * d.weight / total_weight if total_weight else 0.0
        lines.append(
            f"{d.path}: {d.employee_count} x {d.rates.base_up:.1f}% = {base_up_share:.2f}% "
            f"(weight {d.contribution:.1f}%)"
        )
    lines.append(rule)
    return "\n".join(lines)
