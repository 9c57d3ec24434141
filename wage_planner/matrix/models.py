"""
Data structures for the Band x Level adjustment matrix.

Each cell holds per-grade raise rates (the canonical store), optional
pay-zone overrides per grade, and derived statistics / weighted averages
that are recomputed from the roster on every change.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

from wage_planner.config import defaults

RATE_FIELDS = ("base_up", "merit", "additional")

# Accept the camelCase spellings used by front ends
RATE_FIELD_ALIASES = {
    "baseUp": "base_up",
    "base_up": "base_up",
    "merit": "merit",
    "additional": "additional",
}


def normalize_field(name: str) -> Optional[str]:
    """Canonical rate field name, or None if unknown."""
    return RATE_FIELD_ALIASES.get(name)


@dataclass
class RateValues:
    """Raise rates in percent; ``additional`` may be a fixed amount (see AdditionalType)."""

    base_up: float = 0.0
    merit: float = 0.0
    additional: float = 0.0

    @classmethod
    def zero(cls) -> "RateValues":
        return cls()

    def copy(self) -> "RateValues":
        return RateValues(self.base_up, self.merit, self.additional)

    def get(self, name: str) -> float:
        return getattr(self, RATE_FIELD_ALIASES[name])

    def set(self, name: str, value: float) -> None:
        setattr(self, RATE_FIELD_ALIASES[name], float(value))

    def effective_rate(self, additional_type: str = defaults.ADDITIONAL_PERCENTAGE) -> float:
        """Quoted rate; a fixed-amount additional is not a percentage and is left out."""
        rate = self.base_up + self.merit
        if additional_type == defaults.ADDITIONAL_PERCENTAGE:
            rate += self.additional
        return rate

    def to_dict(self) -> Dict[str, float]:
        return {"base_up": self.base_up, "merit": self.merit, "additional": self.additional}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RateValues":
        values = {}
        for key, value in data.items():
            name = normalize_field(key)
            if name is not None:
                values[name] = float(value)
        return cls(**values)


@dataclass
class CellStatistics:
    employee_count: int = 0
    average_salary: float = 0.0
    total_salary_amount: float = 0.0
    grade_distribution: Dict[str, int] = field(default_factory=dict)
    pay_zone_distribution: Dict[int, int] = field(default_factory=dict)

    def copy(self) -> "CellStatistics":
        return CellStatistics(
            self.employee_count,
            self.average_salary,
            self.total_salary_amount,
            dict(self.grade_distribution),
            dict(self.pay_zone_distribution),
        )


@dataclass
class CellWeightedAverage:
    base_up: float = 0.0
    merit: float = 0.0
    additional: float = 0.0
    total: float = 0.0
    weight_in_matrix: float = 0.0

    def copy(self) -> "CellWeightedAverage":
        return CellWeightedAverage(
            self.base_up, self.merit, self.additional, self.total, self.weight_in_matrix
        )


@dataclass
class AggregatedRates:
    """Salary-weighted roll-up of one slice of the matrix."""

    base_up: float = 0.0
    merit: float = 0.0
    additional: float = 0.0
    total: float = 0.0
    employee_count: int = 0
    total_salary: float = 0.0
    average_salary: float = 0.0

    def copy(self) -> "AggregatedRates":
        return AggregatedRates(**self.__dict__)


@dataclass
class Aggregated:
    total: AggregatedRates = field(default_factory=AggregatedRates)
    by_band: Dict[str, AggregatedRates] = field(default_factory=dict)
    by_level: Dict[str, AggregatedRates] = field(default_factory=dict)
    by_grade: Dict[str, AggregatedRates] = field(default_factory=dict)

    def copy(self) -> "Aggregated":
        return Aggregated(
            self.total.copy(),
            {k: v.copy() for k, v in self.by_band.items()},
            {k: v.copy() for k, v in self.by_level.items()},
            {k: v.copy() for k, v in self.by_grade.items()},
        )


@dataclass
class MatrixMetadata:
    last_updated: datetime = field(default_factory=datetime.now)
    version: int = 1
    created_by: Optional[str] = None
    # what the derived views were computed against (mode, zone config, roster)
    basis: Optional[str] = None

    def copy(self) -> "MatrixMetadata":
        return MatrixMetadata(self.last_updated, self.version, self.created_by, self.basis)


@dataclass
class MatrixCell:
    """Band x Level intersection.

    Args:
        band: Job family
        level: Rank within the band
        grade_rates: Rates per performance grade, one entry per known grade
        pay_zone_overrides: grade -> zone id -> rates; dominates grade_rates
            for employees resolved into that zone
        statistics: Headcount / salary distribution of the cell
        weighted_average: Salary-weighted rates of the cell and its share of
            the roster's salary mass
    """
    band: str
    level: str
    grade_rates: Dict[str, RateValues] = field(default_factory=dict)
    pay_zone_overrides: Dict[str, Dict[int, RateValues]] = field(default_factory=dict)
    statistics: CellStatistics = field(default_factory=CellStatistics)
    weighted_average: CellWeightedAverage = field(default_factory=CellWeightedAverage)

    def resolve(self, grade: str, zone: Optional[int] = None) -> RateValues:
        """Rates for a grade/zone: pay-zone override, then grade rates, then zero."""
        if zone is not None:
            override = self.pay_zone_overrides.get(grade, {}).get(zone)
            if override is not None:
                return override
        return self.grade_rates.get(grade) or RateValues.zero()

    def has_overrides(self, grade: str) -> bool:
        return bool(self.pay_zone_overrides.get(grade))

    def copy(self) -> "MatrixCell":
        return MatrixCell(
            band=self.band,
            level=self.level,
            grade_rates={g: r.copy() for g, r in self.grade_rates.items()},
            pay_zone_overrides={
                g: {z: r.copy() for z, r in zones.items()}
                for g, zones in self.pay_zone_overrides.items()
            },
            statistics=self.statistics.copy(),
            weighted_average=self.weighted_average.copy(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "band": self.band,
            "level": self.level,
            "grade_rates": {g: r.to_dict() for g, r in self.grade_rates.items()},
            "pay_zone_overrides": {
                g: {str(z): r.to_dict() for z, r in zones.items()}
                for g, zones in self.pay_zone_overrides.items()
            },
            "statistics": {
                "employee_count": self.statistics.employee_count,
                "average_salary": self.statistics.average_salary,
                "total_salary_amount": self.statistics.total_salary_amount,
                "grade_distribution": dict(self.statistics.grade_distribution),
                "pay_zone_distribution": {
                    str(z): n for z, n in self.statistics.pay_zone_distribution.items()
                },
            },
            "weighted_average": dict(self.weighted_average.__dict__),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatrixCell":
        stats = data.get("statistics", {})
        return cls(
            band=data["band"],
            level=data["level"],
            grade_rates={
                g: RateValues.from_dict(r) for g, r in data.get("grade_rates", {}).items()
            },
            pay_zone_overrides={
                g: {int(z): RateValues.from_dict(r) for z, r in zones.items()}
                for g, zones in (data.get("pay_zone_overrides") or {}).items()
            },
            statistics=CellStatistics(
                employee_count=int(stats.get("employee_count", 0)),
                average_salary=float(stats.get("average_salary", 0.0)),
                total_salary_amount=float(stats.get("total_salary_amount", 0.0)),
                grade_distribution={
                    g: int(n) for g, n in stats.get("grade_distribution", {}).items()
                },
                pay_zone_distribution={
                    int(z): int(n) for z, n in (stats.get("pay_zone_distribution") or {}).items()
                },
            ),
            weighted_average=CellWeightedAverage(**data.get("weighted_average", {})),
        )


@dataclass(eq=False)
class AdjustmentMatrix:
    """Full Band x Level grid plus roll-ups.

    ``cells[i][j]`` and ``cell_map[band][level]`` reference the same cell objects.
    """

    bands: List[str]
    levels: List[str]
    grades: List[str]
    cells: List[List[MatrixCell]]
    cell_map: Dict[str, Dict[str, MatrixCell]]
    aggregated: Aggregated = field(default_factory=Aggregated)
    metadata: MatrixMetadata = field(default_factory=MatrixMetadata)

    def cell(self, band: str, level: str) -> Optional[MatrixCell]:
        return self.cell_map.get(band, {}).get(level)

    def iter_cells(self) -> Iterator[MatrixCell]:
        for row in self.cells:
            yield from row

    def copy(self) -> "AdjustmentMatrix":
        """Structural copy; shares nothing mutable with the original."""
        cells = [[c.copy() for c in row] for row in self.cells]
        return AdjustmentMatrix(
            bands=list(self.bands),
            levels=list(self.levels),
            grades=list(self.grades),
            cells=cells,
            cell_map=_index_cells(cells),
            aggregated=self.aggregated.copy(),
            metadata=self.metadata.copy(),
        )

    def touch(self) -> None:
        self.metadata.version += 1
        self.metadata.last_updated = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        def agg(a: AggregatedRates) -> Dict[str, Any]:
            return dict(a.__dict__)

        return {
            "bands": list(self.bands),
            "levels": list(self.levels),
            "grades": list(self.grades),
            "cells": [[c.to_dict() for c in row] for row in self.cells],
            "aggregated": {
                "total": agg(self.aggregated.total),
                "by_band": {k: agg(v) for k, v in self.aggregated.by_band.items()},
                "by_level": {k: agg(v) for k, v in self.aggregated.by_level.items()},
                "by_grade": {k: agg(v) for k, v in self.aggregated.by_grade.items()},
            },
            "metadata": {
                "last_updated": self.metadata.last_updated.isoformat(),
                "version": self.metadata.version,
                "created_by": self.metadata.created_by,
                "basis": self.metadata.basis,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AdjustmentMatrix":
        cells = [[MatrixCell.from_dict(c) for c in row] for row in data["cells"]]
        aggregated = data.get("aggregated", {})
        meta = data.get("metadata", {})
        last_updated = meta.get("last_updated")
        return cls(
            bands=list(data["bands"]),
            levels=list(data["levels"]),
            grades=list(data["grades"]),
            cells=cells,
            cell_map=_index_cells(cells),
            aggregated=Aggregated(
                total=AggregatedRates(**aggregated.get("total", {})),
                by_band={k: AggregatedRates(**v) for k, v in aggregated.get("by_band", {}).items()},
                by_level={k: AggregatedRates(**v) for k, v in aggregated.get("by_level", {}).items()},
                by_grade={k: AggregatedRates(**v) for k, v in aggregated.get("by_grade", {}).items()},
            ),
            metadata=MatrixMetadata(
                last_updated=datetime.fromisoformat(last_updated) if last_updated else datetime.now(),
                version=int(meta.get("version", 1)),
                created_by=meta.get("created_by"),
                basis=meta.get("basis"),
            ),
        )

    def __eq__(self, other: object) -> bool:
        # last_updated is a wall-clock stamp, not matrix content
        if not isinstance(other, AdjustmentMatrix):
            return NotImplemented
        mine, theirs = self.to_dict(), other.to_dict()
        mine["metadata"].pop("last_updated")
        theirs["metadata"].pop("last_updated")
        return mine == theirs


def _index_cells(cells: List[List[MatrixCell]]) -> Dict[str, Dict[str, MatrixCell]]:
    cell_map: Dict[str, Dict[str, MatrixCell]] = {}
    for row in cells:
        for cell in row:
            cell_map.setdefault(cell.band, {})[cell.level] = cell
    return cell_map
