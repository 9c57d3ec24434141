"""
Explicit holder for the roster and planner configuration of one session.

Replaces module-level caches: each session (or test) owns its repository and
tears it down with ``clear()``.
"""

import logging
from typing import Callable, Optional

from wage_planner.config.models import PlannerConfig
from wage_planner.state.roster import EMPTY_ROSTER, Roster

logger = logging.getLogger(__name__)

RosterProvider = Callable[[], Roster]


class RosterRepository:
    """Roster snapshot + config, with defined init / teardown."""

    def __init__(self, roster: Optional[Roster] = None, config: Optional[PlannerConfig] = None):
        self._roster = roster if roster is not None else EMPTY_ROSTER
        self._config = config if config is not None else PlannerConfig()
        self._generation = 0

    @property
    def roster(self) -> Roster:
        return self._roster

    @property
    def config(self) -> PlannerConfig:
        return self._config

    @property
    def generation(self) -> int:
        """Incremented on every successful roster load."""
        return self._generation

    def load(self, provider: RosterProvider) -> Roster:
        """
        Fetch a fresh roster from ``provider``. On failure the previous roster
        is kept and the provider's exception propagates.
        """
        roster = provider()
        if not isinstance(roster, Roster):
            raise TypeError(f"Roster provider returned {type(roster).__name__}, expected Roster")
        self._roster = roster
        self._generation += 1
        logger.info(
            f"[ROSTER] Loaded generation {self._generation}: {len(roster)} employees, "
            f"{len(roster.bands)} bands, {len(roster.levels)} levels, {len(roster.grades)} grades"
        )
        return roster

    def update_config(self, config: PlannerConfig) -> None:
        self._config = config

    def clear(self) -> None:
        self._roster = EMPTY_ROSTER
        self._config = PlannerConfig()
        self._generation = 0
        logger.debug("[ROSTER] Repository cleared")
