from .repository import RosterProvider, RosterRepository
from .roster import EMPTY_ROSTER, Employee, Roster

__all__ = ["EMPTY_ROSTER", "Employee", "Roster", "RosterProvider", "RosterRepository"]
