import logging
from typing import Iterable, List

from .models import (
    AdjustmentMatrix,
    Aggregated,
    MatrixCell,
    MatrixMetadata,
    RateValues,
)

logger = logging.getLogger(__name__)


def _dedupe(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(values))


def create_empty_matrix(
    bands: Iterable[str], levels: Iterable[str], grades: Iterable[str]
) -> AdjustmentMatrix:
    """
    Build the full band x level grid with zero rates for every grade and
    zeroed statistics. Duplicate vocabulary entries are collapsed.
    """
    bands, levels, grades = _dedupe(bands), _dedupe(levels), _dedupe(grades)

    cells: List[List[MatrixCell]] = []
    cell_map = {}
    for band in bands:
        row = []
        cell_map[band] = {}
        for level in levels:
            cell = MatrixCell(
                band=band,
                level=level,
                grade_rates={grade: RateValues.zero() for grade in grades},
            )
            row.append(cell)
            cell_map[band][level] = cell
        cells.append(row)

    logger.debug(
        f"[MATRIX] Created empty matrix: {len(bands)} bands x {len(levels)} levels x {len(grades)} grades"
    )
    return AdjustmentMatrix(
        bands=bands,
        levels=levels,
        grades=grades,
        cells=cells,
        cell_map=cell_map,
        aggregated=Aggregated(),
        metadata=MatrixMetadata(version=1),
    )
