from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from .validation import (
    ConfigurationError, check_number, check_non_negative, check_rate, check_year,
    validate_parameters,
)

# camelCase names used by the browser front end and its saved JSON
PARAMETER_ALIASES = {
    "maxStudents": "max_students",
    "studentsYear1": "students_year1",
    "studentsYear2": "students_year2",
    "studentsYear3Plus": "students_year3_plus",
    "churnRate": "churn_rate",
    "tuitionMonthly": "tuition_monthly",
    "tuitionIncreaseRate": "tuition_increase_rate",
    "kitCostPerStudent": "kit_cost_per_student",
    "technologyYear1": "technology_year1",
    "technologyYearsAfter": "technology_years_after",
    "initialCapex": "initial_capex",
    "year1Capex": "year1_capex",
    "baseFacilityCost": "base_facility_cost",
    "facilityInflationRate": "facility_inflation_rate",
    "staffCostPerStudent": "staff_cost_per_student",
    "minStaffCost": "min_staff_cost",
    "corporateOverhead": "corporate_overhead",
    "marketingRate": "marketing_rate",
    "badDebtRate": "bad_debt_rate",
    "paymentProcessingRate": "payment_processing_rate",
    "teacherTrainingBase": "teacher_training_base",
    "teacherTrainingPerStudent": "teacher_training_per_student",
    "insuranceBase": "insurance_base",
    "legalCompliance": "legal_compliance",
    "bridgeLoan": "bridge_loan",
    "desenvolveSP": "desenvolve_sp",
    "prefeituraSubsidy": "prefeitura_subsidy",
    "baseYear": "base_year",
    "yearlyOverrides": "yearly_overrides",
}

OVERRIDE_ALIASES = {
    "churnRate": "churn_rate",
    "kitCost": "kit_cost",
    "staffCosts": "staff_costs",
    "corporateOverhead": "corporate_overhead",
    "corporate": "corporate_overhead",      # year editor key
    "facilityCosts": "facility_costs",
    "facilities": "facility_costs",         # year editor key
    "teacherTraining": "teacher_training",
}


@dataclass(frozen=True)
class YearOverride:
    """Manual per-year values; None means 'not set', 0 is a real override"""
    students: Optional[float] = None
    churn_rate: Optional[float] = None
    tuition: Optional[float] = None          # monthly, per student
    kit_cost: Optional[float] = None         # per student
    technology: Optional[float] = None
    staff_costs: Optional[float] = None
    corporate_overhead: Optional[float] = None
    facility_costs: Optional[float] = None
    marketing: Optional[float] = None
    teacher_training: Optional[float] = None
    insurance: Optional[float] = None
    legal: Optional[float] = None
    capex: Optional[float] = None

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                check_number(f"override {f.name}", value)
        if self.students is not None:
            check_non_negative("override students", self.students)
            if self.students != int(self.students):
                raise ConfigurationError(f"override students must be a whole number, got {self.students}")
        if self.churn_rate is not None:
            check_rate("override churn_rate", self.churn_rate)

    def is_set(self, name: str) -> bool:
        return getattr(self, name) is not None

    def set_fields(self) -> List[str]:
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]

    def to_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in self.set_fields()}

    @classmethod
    def from_dict(cls, data: Mapping) -> "YearOverride":
        if isinstance(data, YearOverride):
            return data
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"override record must be a mapping, got {data!r}")
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = OVERRIDE_ALIASES.get(key, key)
            if name not in known:
                raise ConfigurationError(f"unknown override field: {key}")
            kwargs[name] = value
        return cls(**kwargs)


NO_OVERRIDE = YearOverride()


@dataclass(frozen=True)
class ParameterSet:
    # Student capacity
    max_students: int = 1200            # 30 students/class, morning + afternoon shifts
    students_year1: int = 300
    students_year2: int = 750
    students_year3_plus: int = 1200
    churn_rate: float = 0.05            # annual, K-12 standard

    # Pricing
    tuition_monthly: float = 2300.0
    tuition_increase_rate: float = 0.06
    kit_cost_per_student: float = 1200.0  # per year

    # Technology
    technology_year1: float = 5_000_000.0
    technology_years_after: float = 500_000.0

    # CAPEX
    initial_capex: float = 15_000_000.0   # year 0: building + renovation
    year1_capex: float = 5_000_000.0      # equipment, finishing

    # Facilities
    base_facility_cost: float = 1_500_000.0
    facility_inflation_rate: float = 0.05

    # Staff
    staff_cost_per_student: float = 4400.0
    min_staff_cost: float = 5_000_000.0
    corporate_overhead: float = 2_000_000.0

    # Share of revenue
    marketing_rate: float = 0.05
    bad_debt_rate: float = 0.02
    payment_processing_rate: float = 0.025

    # Other costs
    teacher_training_base: float = 200_000.0
    teacher_training_per_student: float = 250.0
    insurance_base: float = 100_000.0
    legal_compliance: float = 500_000.0

    # Funding
    bridge_loan: float = 8_000_000.0      # repaid when the other funding arrives
    desenvolve_sp: float = 10_000_000.0
    prefeitura_subsidy: float = 2_000_000.0

    base_year: int = 2026
    yearly_overrides: Mapping[int, YearOverride] = field(default_factory=dict)  # read-only after init

    def __post_init__(self):
        # normalize keys/records without touching the caller's mapping;
        # a null record (saved JSON) means no override for that year
        if self.yearly_overrides is not None and not isinstance(self.yearly_overrides, Mapping):
            raise ConfigurationError(f"yearly_overrides must be a mapping, got {self.yearly_overrides!r}")
        overrides = {
            check_year(year): YearOverride.from_dict(ov)
            for year, ov in (self.yearly_overrides or {}).items()
            if ov is not None
        }
        object.__setattr__(self, "yearly_overrides", MappingProxyType(overrides))
        validate_parameters(self)

    def override_for(self, year: int) -> YearOverride:
        return self.yearly_overrides.get(year, NO_OVERRIDE)

    def to_dict(self) -> dict:
        """Plain JSON-serializable data (overrides keyed by int year)"""
        data = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "yearly_overrides"}
        data["yearly_overrides"] = {
            year: ov.to_dict() for year, ov in sorted(self.yearly_overrides.items())
        }
        return data

    @classmethod
    def from_dict(cls, data: Mapping) -> "ParameterSet":
        """
        Build a parameter set from plain data.

        Accepts snake_case or camelCase keys. Missing fields keep their default
        value, unknown keys raise ConfigurationError.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = PARAMETER_ALIASES.get(key, key)
            if name not in known:
                raise ConfigurationError(f"unknown parameter: {key}")
            kwargs[name] = value
        return cls(**kwargs)


def merge_parameters(params: ParameterSet, updates: Mapping) -> ParameterSet:
    """Return a new parameter set with a partial edit applied"""
    merged = params.to_dict()
    for key, value in updates.items():
        merged[PARAMETER_ALIASES.get(key, key)] = value
    return ParameterSet.from_dict(merged)


def set_year_override(params: ParameterSet, year: int, **values) -> ParameterSet:
    """Replace the override record for one year"""
    overrides = dict(params.yearly_overrides)
    overrides[check_year(year)] = YearOverride.from_dict(values)
    return replace(params, yearly_overrides=overrides)


def clear_year_override(params: ParameterSet, year: int) -> ParameterSet:
    overrides = dict(params.yearly_overrides)
    overrides.pop(year, None)
    return replace(params, yearly_overrides=overrides)


def clear_all_overrides(params: ParameterSet) -> ParameterSet:
    return replace(params, yearly_overrides={})
