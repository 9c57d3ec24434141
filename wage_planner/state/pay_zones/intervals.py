from typing import List, Tuple

import pandas as pd

from wage_planner.config.models import LevelPayZoneConfig, PayZoneRange

from .models import PayZoneError

__all__ = ["build_intervals", "check_for_overlapping_ranges"]


def _active_sorted(level_config: LevelPayZoneConfig) -> List[PayZoneRange]:
    return sorted(
        (r for r in level_config.ranges if r.is_active), key=lambda r: r.min_salary
    )


def build_intervals(level_config: LevelPayZoneConfig) -> pd.IntervalIndex:
    """Build an interval index over a level's active salary ranges.

    Args:
        level_config: Pay-zone configuration for one level

    Returns:
        IntervalIndex sorted by lower bound, closed on both sides

    Raises:
        PayZoneError: If the level has no active ranges
    """
    active = _active_sorted(level_config)
    if not active:
        raise PayZoneError(f"Level {level_config.level} has no active pay-zone ranges")
    return pd.IntervalIndex.from_tuples(
        [(r.min_salary, r.max_salary) for r in active], closed="both"
    )


def check_for_overlapping_ranges(
    level_config: LevelPayZoneConfig, strict: bool = True
) -> List[Tuple[PayZoneRange, PayZoneRange]]:
    """Check for overlapping active salary ranges within one level.

    Args:
        level_config: Pay-zone configuration for one level
        strict: If True, raise error on overlaps; if False, return overlaps list

    Returns:
        List of tuples of overlapping ranges

    Raises:
        PayZoneError: If strict and overlaps found
    """
    overlaps: List[Tuple[PayZoneRange, PayZoneRange]] = []
    active = _active_sorted(level_config)
    for current, next_range in zip(active, active[1:]):
        if current.max_salary >= next_range.min_salary:
            overlaps.append((current, next_range))
            if strict:
                raise PayZoneError(
                    f"Overlapping pay-zone ranges in level {level_config.level}: "
                    f"zone {current.zone_id} max {current.max_salary} "
                    f"overlaps with zone {next_range.zone_id} min {next_range.min_salary}"
                )
    return overlaps
