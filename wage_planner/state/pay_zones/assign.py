"""
Default pay-zone assigner: maps an employee onto a zone id.

The matrix engine only ever calls ``assigner(employee)`` (or
``assign_frame`` for whole rosters); the policy lives here.
"""

import logging
import re
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from wage_planner.config import defaults
from wage_planner.config.models import LevelPayZoneConfig, PayZoneConfiguration
from wage_planner.state.roster import Employee, Roster
from wage_planner.utils.columns import (
    EMP_GROSS_COMP,
    EMP_LEVEL,
    EMP_PAY_ZONE,
    EMP_RESOLVED_ZONE,
)

from .intervals import build_intervals, check_for_overlapping_ranges

logger = logging.getLogger(__name__)

_ZONE_NUMBER = re.compile(r"\d+")


def parse_recorded_zone(value: Any) -> int:
    """Zone recorded on the roster: ints pass through, 'Lv.3' yields 3, else default."""
    if value is None:
        return defaults.DEFAULT_ZONE
    if isinstance(value, str):
        match = _ZONE_NUMBER.search(value)
        return int(match.group(0)) if match else defaults.DEFAULT_ZONE
    try:
        if pd.isna(value):
            return defaults.DEFAULT_ZONE
        return int(value) or defaults.DEFAULT_ZONE
    except (TypeError, ValueError):
        return defaults.DEFAULT_ZONE


class PayZoneAssigner:
    """Callable Employee -> zone id driven by a PayZoneConfiguration."""

    def __init__(self, configuration: Optional[PayZoneConfiguration] = None, strict: bool = True):
        self.configuration = configuration or PayZoneConfiguration.default()
        self._level_configs: Dict[str, LevelPayZoneConfig] = {}
        self._overlapping: set = set()
        for level_config in self.configuration.level_configs:
            overlaps = check_for_overlapping_ranges(level_config, strict=strict)
            if overlaps:
                logger.warning(
                    f"[PAYZONE] Level {level_config.level} has {len(overlaps)} overlapping ranges; "
                    "first matching range wins"
                )
                self._overlapping.add(level_config.level)
            self._level_configs[level_config.level] = level_config

    @property
    def mode(self) -> str:
        return self.configuration.mode

    def __call__(self, employee: Employee) -> int:
        return self.assign(employee)

    def assign(self, employee: Employee) -> int:
        if self.mode == "manual":
            return parse_recorded_zone(employee.pay_zone)
        return self.assign_salary(employee.level, employee.current_salary)

    def assign_salary(self, level: str, salary: float) -> int:
        level_config = self._level_configs.get(level)
        if level_config is None:
            return defaults.DEFAULT_ZONE
        for salary_range in level_config.ranges:
            if salary_range.is_active and salary_range.contains(salary):
                return salary_range.zone_id
        return level_config.default_zone

    def assign_frame(self, df: pd.DataFrame) -> pd.Series:
        """Vectorized assignment over a roster frame, aligned to its index."""
        if df.empty:
            return pd.Series([], index=df.index, dtype="int64")
        if self.mode == "manual":
            if EMP_PAY_ZONE not in df.columns:
                return pd.Series(defaults.DEFAULT_ZONE, index=df.index, dtype="int64")
            return df[EMP_PAY_ZONE].map(parse_recorded_zone).astype("int64")

        zones = pd.Series(defaults.DEFAULT_ZONE, index=df.index, dtype="int64")
        for level, rows in df.groupby(EMP_LEVEL, sort=False):
            level_config = self._level_configs.get(level)
            if level_config is None:
                continue
            salaries = rows[EMP_GROSS_COMP].astype(float)
            if level in self._overlapping:
                zones.loc[rows.index] = [self.assign_salary(level, s) for s in salaries]
                continue
            active = sorted(
                (r for r in level_config.ranges if r.is_active), key=lambda r: r.min_salary
            )
            if not active:
                zones.loc[rows.index] = level_config.default_zone
                continue
            positions = build_intervals(level_config).get_indexer(salaries.to_numpy())
            zone_ids = np.array([r.zone_id for r in active], dtype="int64")
            zones.loc[rows.index] = np.where(
                positions >= 0, zone_ids[positions], level_config.default_zone
            )
        return zones

    def available_zones(self, level: str) -> List[int]:
        level_config = self._level_configs.get(level)
        if level_config is None:
            return list(defaults.DEFAULT_ALLOWED_ZONES)
        return list(level_config.allowed_zones)

    def distribution(self, roster: Roster) -> Dict[str, Dict]:
        """Zone headcounts per level and overall."""
        stats: Dict[str, Dict] = {"by_level": {}, "total": {}}
        for employee in roster.employees:
            zone = self.assign(employee)
            stats["total"][zone] = stats["total"].get(zone, 0) + 1
            by_level = stats["by_level"].setdefault(employee.level, {})
            by_level[zone] = by_level.get(zone, 0) + 1
        return stats


def with_resolved_zones(roster: Roster, assigner=None) -> pd.DataFrame:
    """
    Roster frame with an EMP_RESOLVED_ZONE column.

    ``assigner`` is any callable Employee -> zone id; a PayZoneAssigner is
    applied vectorized. None means the default range configuration.
    """
    if assigner is None:
        assigner = PayZoneAssigner()
    frame = roster.to_frame()
    if isinstance(assigner, PayZoneAssigner):
        frame[EMP_RESOLVED_ZONE] = assigner.assign_frame(frame)
    else:
        frame[EMP_RESOLVED_ZONE] = pd.Series(
            [int(assigner(e)) for e in roster.employees], index=frame.index, dtype="int64"
        )
    return frame
