import logging
import math

from .models import ParameterSet
from .finance import taxes, funding_sources, debt_service
from .validation import ConfigurationError

logger = logging.getLogger(__name__)

CHURN_REPLACEMENT = 0.95     # share of churned students replaced by new enrollment
COST_INFLATION = 1.05        # technology, staff, overhead, training, insurance, legal
CONTINGENCY_RATE = 0.02      # of revenue
MAINTENANCE_CAPEX_RATE = 0.02  # of revenue, from year 2


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def enrolled_students(params: ParameterSet, year: int, override) -> int:
    """Enrollment for the year: tier base, churn-adjusted, capped at capacity"""
    if override.is_set("students"):
        students = override.students
    else:
        if year == 0:
            students = 0  # pre-launch
        elif year == 1:
            students = params.students_year1
        elif year == 2:
            students = params.students_year2
        else:
            students = params.students_year3_plus

        # Recomputed from the tier base each year, not from last year's count
        if year > 1:
            churn = override.churn_rate if override.is_set("churn_rate") else params.churn_rate
            students = round_half_up(students * (1 - churn) + students * churn * CHURN_REPLACEMENT)

    return int(max(0, min(students, params.max_students)))


def calculate_year_data(params: ParameterSet, year: int) -> dict:
    """
    Full financial detail for one projection year.

    Every overridable quantity takes the year's override verbatim when set and
    skips its own inflation/derivation. Pure: no state is carried between calls.

    Args:
        params: complete parameter set
        year: projection index, 0 = pre-launch

    Returns:
        JSON-serializable year record
    """
    if isinstance(year, bool) or not isinstance(year, int) or year < 0:
        raise ConfigurationError(f"year must be a non-negative integer, got {year!r}")

    ov = params.override_for(year)
    if ov.set_fields():
        logger.debug("Year %d overrides: %s", year, ", ".join(ov.set_fields()))

    def pick(name, computed):
        return getattr(ov, name) if ov.is_set(name) else computed

    students = enrolled_students(params, year, ov)

    # Year 0 and year 1 share exponent 0; inflation accrues from year 2
    inflation_years = max(0, year - 1)
    price_factor = (1 + params.tuition_increase_rate) ** inflation_years
    cost_factor = COST_INFLATION ** inflation_years

    # Pricing
    tuition = pick("tuition", params.tuition_monthly * price_factor)
    kit_cost = pick("kit_cost", params.kit_cost_per_student * price_factor)

    # Revenue
    tuition_revenue = students * tuition * 12
    kit_revenue = students * kit_cost
    total_revenue = tuition_revenue + kit_revenue

    # Costs
    if year == 0:
        technology = 0.0
    elif year == 1:
        technology = params.technology_year1
    else:
        technology = params.technology_years_after * cost_factor
    technology = pick("technology", technology)

    base_staff = max(params.min_staff_cost, students * params.staff_cost_per_student)
    staff = pick("staff_costs", 0.0 if year == 0 else base_staff * cost_factor)

    # Half overhead during pre-launch
    corporate = pick(
        "corporate_overhead",
        params.corporate_overhead * 0.5 if year == 0 else params.corporate_overhead * cost_factor,
    )

    facilities = pick(
        "facility_costs",
        0.0 if year == 0 else
        params.base_facility_cost * (1 + params.facility_inflation_rate) ** inflation_years,
    )

    marketing = pick("marketing", total_revenue * params.marketing_rate)

    training_base = max(params.teacher_training_base, students * params.teacher_training_per_student)
    teacher_training = pick("teacher_training", 0.0 if year == 0 else training_base * cost_factor)

    # Revenue-driven lines are never overridden
    bad_debt = total_revenue * params.bad_debt_rate
    payment_processing = total_revenue * params.payment_processing_rate
    contingency = total_revenue * CONTINGENCY_RATE

    insurance = pick("insurance", params.insurance_base * cost_factor)
    legal = pick("legal", params.legal_compliance * cost_factor)

    total_costs = (
        technology + staff + corporate + facilities + marketing + teacher_training +
        bad_debt + payment_processing + insurance + legal + contingency
    )

    ebitda = total_revenue - total_costs
    ebitda_margin = ebitda / total_revenue if total_revenue > 0 else 0.0

    # CAPEX
    if ov.is_set("capex"):
        capex = ov.capex
    elif year == 0:
        capex = params.initial_capex
    elif year == 1:
        capex = params.year1_capex
    else:
        capex = total_revenue * MAINTENANCE_CAPEX_RATE

    tax = taxes(ebitda)
    net_income = ebitda - tax
    free_cash_flow = net_income - capex

    return {
        "year": year,
        "calendar_year": params.base_year + year,
        "students": students,
        "revenue": {
            "tuition": tuition_revenue,
            "kits": kit_revenue,
            "total": total_revenue,
        },
        "costs": {
            "technology": technology,
            "staff": staff,
            "corporate": corporate,
            "facilities": facilities,
            "marketing": marketing,
            "teacher_training": teacher_training,
            "bad_debt": bad_debt,
            "payment_processing": payment_processing,
            "insurance": insurance,
            "legal": legal,
            "contingency": contingency,
            "total": total_costs,
        },
        "capex": capex,
        "ebitda": ebitda,
        "ebitda_margin": ebitda_margin,
        "taxes": tax,
        "net_income": net_income,
        "free_cash_flow": free_cash_flow,
        "pricing": {
            "tuition": tuition,
            "kit_cost": kit_cost,
        },
        "funding_sources": funding_sources(params, year),
        "debt_service": debt_service(params, year),
        "overridden": sorted(ov.set_fields()),
    }
