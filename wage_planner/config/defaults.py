# wage_planner/config/defaults.py
"""
Default constants for budget math and pay-zone assignment.
"""

from typing import Any, Dict, List

# Indirect cost components applied on top of direct raise cost
INDIRECT_COST_RETIREMENT = 0.045
INDIRECT_COST_INSURANCE = 0.113
INDIRECT_COST_PENSION = 0.020
INDIRECT_COST_TOTAL = 0.178

# Fixed-amount additional raises are entered in units of ten thousand (won)
FIXED_AMOUNT_UNIT = 10_000

# Usage percentage displayed when the available budget is not positive
USAGE_DISPLAY_CEILING = 200.0

# Budget usage thresholds (%)
WARNING_THRESHOLD = 80.0
DANGER_THRESHOLD = 100.0

# Pay-zone fallbacks
DEFAULT_ZONE = 1
DEFAULT_ALLOWED_ZONES: List[int] = [1, 2, 3, 4, 5]
MAX_ZONES = 8

ADDITIONAL_PERCENTAGE = "percentage"
ADDITIONAL_AMOUNT = "amount"

STORAGE_KEY = "adjustment_matrix"


def _senior_ranges() -> List[Dict[str, Any]]:
    return [
        {"zone_id": 5, "min_salary": 109_809_604, "max_salary": 120_000_000, "is_active": True},
        {"zone_id": 4, "min_salary": 99_619_203, "max_salary": 109_809_603, "is_active": True},
        {"zone_id": 3, "min_salary": 89_428_802, "max_salary": 99_619_202, "is_active": True},
        {"zone_id": 2, "min_salary": 79_238_401, "max_salary": 89_428_801, "is_active": True},
        {"zone_id": 1, "min_salary": 0, "max_salary": 79_238_400, "is_active": True},
    ]


DEFAULT_PAY_ZONE_CONFIG: Dict[str, Any] = {
    "mode": "range",
    "level_configs": [
        {
            "level": "Lv.4",
            "ranges": _senior_ranges(),
            "default_zone": 1,
            "allowed_zones": [1, 2, 3, 4, 5],
        },
        {
            "level": "Lv.3",
            "ranges": _senior_ranges(),
            "default_zone": 1,
            "allowed_zones": [1, 2, 3, 4, 5],
        },
        {
            "level": "Lv.2",
            "ranges": [
                {"zone_id": 3, "min_salary": 72_128_002, "max_salary": 99_999_999, "is_active": True},
                {"zone_id": 2, "min_salary": 62_668_001, "max_salary": 72_128_001, "is_active": True},
                {"zone_id": 1, "min_salary": 0, "max_salary": 62_668_000, "is_active": True},
            ],
            "default_zone": 1,
            "allowed_zones": [1, 2, 3],
        },
        {
            "level": "Lv.1",
            "ranges": [
                {"zone_id": 3, "min_salary": 0, "max_salary": 99_999_999, "is_active": False},
                {"zone_id": 2, "min_salary": 0, "max_salary": 99_999_999, "is_active": True},
            ],
            "default_zone": 2,
            "allowed_zones": [2, 3],
        },
    ],
}
