# wage_planner/reporting/summaries.py
"""
Tabular views of a matrix and its derived results, for export and review.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

from wage_planner.engines.budget import BudgetUsage
from wage_planner.engines.weighted_average import WeightedAverageResult
from wage_planner.matrix.models import RATE_FIELDS, AdjustmentMatrix

logger = logging.getLogger(__name__)


def matrix_cells_frame(matrix: AdjustmentMatrix) -> pd.DataFrame:
    """One row per cell x grade with the grade rates and the cell's derived views."""
    rows = []
    for cell in matrix.iter_cells():
        for grade in matrix.grades:
            rates = cell.resolve(grade)
            rows.append({
                "band": cell.band,
                "level": cell.level,
                "grade": grade,
                **rates.to_dict(),
                "override_zones": ",".join(
                    str(z) for z in sorted(cell.pay_zone_overrides.get(grade, {}))
                ),
                "grade_headcount": cell.statistics.grade_distribution.get(grade, 0),
                "cell_headcount": cell.statistics.employee_count,
                "cell_average_salary": cell.statistics.average_salary,
                "cell_weighted_total": cell.weighted_average.total,
                "cell_weight_in_matrix": cell.weighted_average.weight_in_matrix,
            })
    return pd.DataFrame(rows)


def weighted_average_frame(result: WeightedAverageResult) -> pd.DataFrame:
    """Detail rows of a weighted-average run, largest contribution first."""
    columns = [
        "path", "band", "level", "grade", "pay_zone", "employee_count",
        "average_salary", "total_salary", *RATE_FIELDS, "contribution",
    ]
    rows = [
        {
            "path": d.path,
            "band": d.band,
            "level": d.level,
            "grade": d.grade,
            "pay_zone": d.pay_zone,
            "employee_count": d.employee_count,
            "average_salary": d.average_salary,
            "total_salary": d.total_salary,
            **d.rates.to_dict(),
            "contribution": d.contribution,
        }
        for d in result.details
    ]
    df = pd.DataFrame(rows, columns=columns)
    return df.sort_values("contribution", ascending=False, kind="stable").reset_index(drop=True)


def aggregated_frame(matrix: AdjustmentMatrix) -> pd.DataFrame:
    """Company / band / level / grade roll-ups in one long frame."""
    rows = [{"dimension": "total", "key": "", **matrix.aggregated.total.__dict__}]
    views = (
        ("band", matrix.aggregated.by_band),
        ("level", matrix.aggregated.by_level),
        ("grade", matrix.aggregated.by_grade),
    )
    for dimension, rollups in views:
        for key, rates in rollups.items():
            rows.append({"dimension": dimension, "key": key, **rates.__dict__})
    return pd.DataFrame(rows)


def budget_frame(usage: BudgetUsage) -> pd.DataFrame:
    return pd.DataFrame([usage.__dict__])


def write_summaries(
    output_dir: Path,
    matrix: AdjustmentMatrix,
    result: WeightedAverageResult,
    usage: BudgetUsage,
    breakdown: Optional[pd.DataFrame] = None,
) -> Dict[str, Path]:
    """Write the summary frames as CSV files; returns name -> path."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    frames = {
        "matrix_cells": matrix_cells_frame(matrix),
        "weighted_average": weighted_average_frame(result),
        "aggregated": aggregated_frame(matrix),
        "budget": budget_frame(usage),
    }
    if breakdown is not None:
        frames["employee_breakdown"] = breakdown

    written = {}
    for name, df in frames.items():
        path = output_dir / f"{name}.csv"
        df.to_csv(path, index=False)
        written[name] = path
        logger.info(f"Saved {name} ({len(df)} rows) to {path}")
    return written
