from .budget import (
    BudgetUsage,
    budget_breakdown,
    budget_status,
    calculate_budget_usage,
    employee_budget_impact,
    summarize_usage,
)
from .synchronizer import (
    Coordinates,
    EditScope,
    clear_pay_zone_override,
    recompute,
    resolve_rates,
    set_grade_rates,
    set_rate,
)
from .weighted_average import (
    WeightedAverageCalculator,
    WeightedAverageDetail,
    WeightedAverageResult,
    WeightedAverageSummary,
    apply_rollups,
    calculate_weighted_average,
    restrict,
    visualize,
)

__all__ = [
    "BudgetUsage",
    "Coordinates",
    "EditScope",
    "WeightedAverageCalculator",
    "WeightedAverageDetail",
    "WeightedAverageResult",
    "WeightedAverageSummary",
    "apply_rollups",
    "budget_breakdown",
    "budget_status",
    "calculate_budget_usage",
    "calculate_weighted_average",
    "clear_pay_zone_override",
    "employee_budget_impact",
    "recompute",
    "resolve_rates",
    "restrict",
    "set_grade_rates",
    "set_rate",
    "summarize_usage",
    "visualize",
]
