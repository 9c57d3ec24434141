from .builder import create_empty_matrix
from .models import (
    RATE_FIELDS,
    AdjustmentMatrix,
    Aggregated,
    AggregatedRates,
    CellStatistics,
    CellWeightedAverage,
    MatrixCell,
    MatrixMetadata,
    RateValues,
    normalize_field,
)
from .statistics import update_statistics

__all__ = [
    "RATE_FIELDS",
    "AdjustmentMatrix",
    "Aggregated",
    "AggregatedRates",
    "CellStatistics",
    "CellWeightedAverage",
    "MatrixCell",
    "MatrixMetadata",
    "RateValues",
    "create_empty_matrix",
    "normalize_field",
    "update_statistics",
]
