__all__ = [
    "PayZoneAssigner",
    "PayZoneError",
    "build_intervals",
    "check_for_overlapping_ranges",
    "parse_recorded_zone",
    "with_resolved_zones",
]

from .assign import PayZoneAssigner, parse_recorded_zone, with_resolved_zones
from .intervals import build_intervals, check_for_overlapping_ranges
from .models import PayZoneError
