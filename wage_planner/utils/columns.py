# wage_planner/utils/columns.py

# Roster columns (standardized)
EMP_ID = "employee_id"
EMP_NAME = "employee_name"
EMP_BAND = "employee_band"
EMP_LEVEL = "employee_level"
EMP_GRADE = "performance_grade"
EMP_PAY_ZONE = "employee_pay_zone"
EMP_GROSS_COMP = "employee_gross_compensation"

# Columns derived during calculation
EMP_RESOLVED_ZONE = "resolved_pay_zone"
RATE_SOURCE = "rate_source"
BASE_UP = "base_up"
MERIT = "merit"
ADDITIONAL = "additional"
BASE_UP_AMOUNT = "base_up_amount"
MERIT_AMOUNT = "merit_amount"
ADDITIONAL_AMOUNT = "additional_amount"
DIRECT_COST = "direct_cost"

# Rate sources
SOURCE_PAY_ZONE = "pay_zone"
SOURCE_GRADE = "grade"
SOURCE_NONE = "none"

# Roster columns every provider must supply
REQUIRED_ROSTER_COLUMNS = [EMP_ID, EMP_BAND, EMP_LEVEL, EMP_GRADE, EMP_GROSS_COMP]

# Common spellings mapped onto the standardized names
ROSTER_COLUMN_ALIASES = {
    "id": EMP_ID,
    "emp_id": EMP_ID,
    "employee id": EMP_ID,
    "name": EMP_NAME,
    "band": EMP_BAND,
    "level": EMP_LEVEL,
    "grade": EMP_GRADE,
    "performance_rating": EMP_GRADE,
    "performancerating": EMP_GRADE,
    "pay_zone": EMP_PAY_ZONE,
    "payzone": EMP_PAY_ZONE,
    "salary": EMP_GROSS_COMP,
    "current_salary": EMP_GROSS_COMP,
    "currentsalary": EMP_GROSS_COMP,
}
