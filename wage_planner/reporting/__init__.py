from .summaries import (
    aggregated_frame,
    budget_frame,
    matrix_cells_frame,
    weighted_average_frame,
    write_summaries,
)

__all__ = [
    "aggregated_frame",
    "budget_frame",
    "matrix_cells_frame",
    "weighted_average_frame",
    "write_summaries",
]
