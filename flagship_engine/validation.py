"""Parameter validation for the projection engine"""
import math
from numbers import Real


class ConfigurationError(ValueError):
    """Raised when a parameter set or override cannot be used for a projection"""


# Fractions that must lie in [0, 1]
RATE_FIELDS = (
    "churn_rate",
    "tuition_increase_rate",
    "facility_inflation_rate",
    "marketing_rate",
    "bad_debt_rate",
    "payment_processing_rate",
)

# Counts and money amounts that must be >= 0
NON_NEGATIVE_FIELDS = (
    "students_year1",
    "students_year2",
    "students_year3_plus",
    "tuition_monthly",
    "kit_cost_per_student",
    "technology_year1",
    "technology_years_after",
    "initial_capex",
    "year1_capex",
    "base_facility_cost",
    "staff_cost_per_student",
    "min_staff_cost",
    "corporate_overhead",
    "teacher_training_base",
    "teacher_training_per_student",
    "insurance_base",
    "legal_compliance",
    "bridge_loan",
    "desenvolve_sp",
    "prefeitura_subsidy",
)


def check_number(name: str, value) -> float:
    """Return value as float, or raise if it is not a finite real number"""
    # bool is a Real subclass; True/False are never valid amounts
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ConfigurationError(f"{name} must be finite, got {value!r}")
    return value


def check_rate(name: str, value) -> float:
    check_number(name, value)
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{name} outside allowed range [0, 1]: {value}")
    return value


def check_non_negative(name: str, value) -> float:
    check_number(name, value)
    if value < 0:
        raise ConfigurationError(f"{name} must be >= 0, got {value}")
    return value


def check_year(value) -> int:
    """Year indices are non-negative integers (JSON object keys may arrive as strings)"""
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigurationError(f"year must be a non-negative integer, got {value!r}")
    return value


def validate_parameters(params) -> None:
    """
    Fail fast on a parameter set that would produce NaN/inf or nonsense projections.

    Checks every numeric field is finite, rate fields lie in [0, 1], counts and
    money amounts are non-negative and max_students is positive. Overrides are
    validated by YearOverride itself.
    """
    for name in RATE_FIELDS:
        check_rate(name, getattr(params, name))
    for name in NON_NEGATIVE_FIELDS:
        check_non_negative(name, getattr(params, name))

    check_number("max_students", params.max_students)
    if params.max_students <= 0:
        raise ConfigurationError(f"max_students must be > 0, got {params.max_students}")

    check_number("base_year", params.base_year)
