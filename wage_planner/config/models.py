# wage_planner/config/models.py
"""
Pydantic models for validating the planner configuration loaded from YAML
(budget envelope, indirect cost load, additional-raise mode, pay zones).
"""

import logging
from typing import List, Literal, Optional

import numpy as np
from pydantic import BaseModel, Field, model_validator

from . import defaults

logger = logging.getLogger(__name__)

AdditionalType = Literal["percentage", "amount"]


# --- Budget ---


class BudgetConfig(BaseModel):
    """Budget envelope; the welfare carve-out is not available for raises."""

    total: float = Field(0.0, description="Total raise budget (currency units)")
    welfare: float = Field(0.0, description="Welfare carve-out taken from the total")

    @property
    def available(self) -> float:
        return self.total - self.welfare


class IndirectCostRates(BaseModel):
    """Secondary cost load applied on top of direct raise cost."""

    retirement: float = Field(defaults.INDIRECT_COST_RETIREMENT, ge=0.0)
    insurance: float = Field(defaults.INDIRECT_COST_INSURANCE, ge=0.0)
    pension: float = Field(defaults.INDIRECT_COST_PENSION, ge=0.0)
    rate: Optional[float] = Field(
        None, ge=0.0, description="Explicit total rate; overrides the component sum"
    )

    @property
    def total(self) -> float:
        if self.rate is not None:
            return self.rate
        return self.retirement + self.insurance + self.pension

    @model_validator(mode='after')
    def check_components_match_rate(self) -> 'IndirectCostRates':
        """Warn when an explicit rate disagrees with the components."""
        if self.rate is not None:
            component_sum = self.retirement + self.insurance + self.pension
            if not np.isclose(component_sum, self.rate, atol=1e-6):
                logger.warning(
                    f"Indirect cost rate {self.rate:.4f} differs from component sum "
                    f"{component_sum:.4f}; using the explicit rate."
                )
        return self


# --- Pay zones ---


class PayZoneRange(BaseModel):
    """Salary bucket mapped onto a zone id."""

    zone_id: int = Field(..., ge=1, le=defaults.MAX_ZONES)
    min_salary: float = Field(..., ge=0.0)
    max_salary: float = Field(..., ge=0.0)
    label: Optional[str] = None
    is_active: bool = True

    @model_validator(mode='after')
    def check_bounds(self) -> 'PayZoneRange':
        if self.min_salary > self.max_salary:
            raise ValueError(
                f"Zone {self.zone_id}: min_salary {self.min_salary} > max_salary {self.max_salary}"
            )
        return self

    def contains(self, salary: float) -> bool:
        return self.min_salary <= salary <= self.max_salary


class LevelPayZoneConfig(BaseModel):
    level: str
    ranges: List[PayZoneRange] = Field(default_factory=list)
    default_zone: int = Field(defaults.DEFAULT_ZONE, ge=1)
    allowed_zones: List[int] = Field(
        default_factory=lambda: list(defaults.DEFAULT_ALLOWED_ZONES)
    )


class PayZoneConfiguration(BaseModel):
    """
    mode 'manual' keeps the zone recorded on the roster; 'range' derives it
    from the employee's salary and the level's salary ranges.
    """

    mode: Literal["manual", "range"] = "range"
    level_configs: List[LevelPayZoneConfig] = Field(default_factory=list)

    def for_level(self, level: str) -> Optional[LevelPayZoneConfig]:
        for level_config in self.level_configs:
            if level_config.level == level:
                return level_config
        return None

    @classmethod
    def default(cls) -> 'PayZoneConfiguration':
        return cls.model_validate(defaults.DEFAULT_PAY_ZONE_CONFIG)


# --- Top-level ---


class PlannerConfig(BaseModel):
    """Everything the engine needs besides the roster."""

    budget: BudgetConfig = Field(default_factory=BudgetConfig)
    indirect_cost: IndirectCostRates = Field(default_factory=IndirectCostRates)
    additional_type: AdditionalType = defaults.ADDITIONAL_PERCENTAGE
    fixed_amount_unit: float = Field(defaults.FIXED_AMOUNT_UNIT, gt=0.0)
    usage_display_ceiling: float = Field(defaults.USAGE_DISPLAY_CEILING, gt=0.0)
    warning_threshold: float = Field(defaults.WARNING_THRESHOLD, ge=0.0)
    danger_threshold: float = Field(defaults.DANGER_THRESHOLD, ge=0.0)
    pay_zones: PayZoneConfiguration = Field(default_factory=PayZoneConfiguration.default)
    storage_key: str = defaults.STORAGE_KEY

    @model_validator(mode='after')
    def check_thresholds(self) -> 'PlannerConfig':
        if self.warning_threshold > self.danger_threshold:
            raise ValueError(
                f"warning_threshold {self.warning_threshold} exceeds "
                f"danger_threshold {self.danger_threshold}"
            )
        return self

    @property
    def indirect_cost_rate(self) -> float:
        return self.indirect_cost.total
