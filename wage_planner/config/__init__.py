from .loaders import ConfigLoadError, load_planner_config, parse_planner_config
from .models import (
    AdditionalType,
    BudgetConfig,
    IndirectCostRates,
    LevelPayZoneConfig,
    PayZoneConfiguration,
    PayZoneRange,
    PlannerConfig,
)

__all__ = [
    "AdditionalType",
    "BudgetConfig",
    "ConfigLoadError",
    "IndirectCostRates",
    "LevelPayZoneConfig",
    "PayZoneConfiguration",
    "PayZoneRange",
    "PlannerConfig",
    "load_planner_config",
    "parse_planner_config",
]
