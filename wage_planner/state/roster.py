"""
Immutable roster snapshot consumed by every matrix calculation.

The engine never mutates a Roster; a reload produces a new one.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from wage_planner.utils.columns import (
    EMP_BAND,
    EMP_GRADE,
    EMP_GROSS_COMP,
    EMP_ID,
    EMP_LEVEL,
    EMP_NAME,
    EMP_PAY_ZONE,
    REQUIRED_ROSTER_COLUMNS,
)

logger = logging.getLogger(__name__)

ROSTER_COLS = [EMP_ID, EMP_NAME, EMP_BAND, EMP_LEVEL, EMP_GRADE, EMP_PAY_ZONE, EMP_GROSS_COMP]


@dataclass(frozen=True)
class Employee:
    """A single roster record.

    Args:
        employee_id: Unique identifier
        band: Job family
        level: Rank within the band
        grade: Performance rating category
        current_salary: Annual salary, positive
        pay_zone: Zone recorded on the roster (used by manual zone assignment)
        name: Optional display name
    """
    employee_id: str
    band: str
    level: str
    grade: str
    current_salary: float
    pay_zone: Optional[Any] = None
    name: str = ""


def _unique(values: Iterable[Any]) -> List[str]:
    """First-seen order, blanks dropped."""
    seen: List[str] = []
    for value in values:
        if value is None or (isinstance(value, float) and pd.isna(value)):
            continue
        text = str(value).strip()
        if text and text not in seen:
            seen.append(text)
    return seen


@dataclass(frozen=True)
class Roster:
    """Employees plus the band/level/grade vocabulary discovered in them."""

    employees: Tuple[Employee, ...]
    bands: Tuple[str, ...]
    levels: Tuple[str, ...]
    grades: Tuple[str, ...]
    _frame: Optional[pd.DataFrame] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_employees(
        cls,
        employees: Sequence[Employee],
        bands: Optional[Sequence[str]] = None,
        levels: Optional[Sequence[str]] = None,
        grades: Optional[Sequence[str]] = None,
    ) -> "Roster":
        """Build a roster; vocabulary defaults to what the employees use.

        Band, level and grade are stored as trimmed strings so employee keys
        always match the vocabulary (a level of 1 becomes "1").
        """
        kept = []
        for emp in employees:
            if emp.current_salary is None or not emp.current_salary > 0:
                logger.warning(
                    f"[ROSTER] Dropping employee {emp.employee_id}: non-positive salary {emp.current_salary}"
                )
                continue
            kept.append(
                replace(
                    emp,
                    band=str(emp.band).strip(),
                    level=str(emp.level).strip(),
                    grade=str(emp.grade).strip(),
                )
            )
        return cls(
            employees=tuple(kept),
            bands=tuple(_unique(bands if bands is not None else (e.band for e in kept))),
            levels=tuple(_unique(levels if levels is not None else (e.level for e in kept))),
            grades=tuple(_unique(grades if grades is not None else (e.grade for e in kept))),
        )

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "Roster":
        """Build a roster from a DataFrame with the standardized roster columns."""
        missing_cols = [col for col in REQUIRED_ROSTER_COLUMNS if col not in df.columns]
        if missing_cols:
            raise ValueError(f"Roster is missing required columns: {missing_cols}")

        salaries = pd.to_numeric(df[EMP_GROSS_COMP], errors="coerce")
        has_zone = EMP_PAY_ZONE in df.columns
        has_name = EMP_NAME in df.columns

        employees = []
        for idx, row in df.iterrows():
            zone = row[EMP_PAY_ZONE] if has_zone else None
            if zone is not None and pd.isna(zone):
                zone = None
            salary = salaries.loc[idx]
            employees.append(
                Employee(
                    employee_id=str(row[EMP_ID]),
                    band=str(row[EMP_BAND]).strip(),
                    level=str(row[EMP_LEVEL]).strip(),
                    grade=str(row[EMP_GRADE]).strip(),
                    current_salary=None if pd.isna(salary) else float(salary),
                    pay_zone=zone,
                    name=str(row[EMP_NAME]) if has_name and pd.notna(row[EMP_NAME]) else "",
                )
            )
        logger.info(f"[ROSTER] Built roster from frame with {len(employees)} records")
        return cls.from_employees(employees)

    def __len__(self) -> int:
        return len(self.employees)

    @property
    def total_salary(self) -> float:
        return float(sum(e.current_salary for e in self.employees))

    def to_frame(self) -> pd.DataFrame:
        """Cached DataFrame view with the standardized roster columns."""
        if self._frame is None:
            frame = pd.DataFrame(
                [
                    (e.employee_id, e.name, e.band, e.level, e.grade, e.pay_zone, e.current_salary)
                    for e in self.employees
                ],
                columns=ROSTER_COLS,
            )
            frame[EMP_GROSS_COMP] = frame[EMP_GROSS_COMP].astype(float)
            object.__setattr__(self, "_frame", frame)
        return self._frame.copy()


EMPTY_ROSTER = Roster(employees=(), bands=(), levels=(), grades=())
