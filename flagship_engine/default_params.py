"""Default parameters and scenario presets for the flagship school model."""
from types import MappingProxyType

from .models import ParameterSet
from .validation import ConfigurationError

DEFAULT_SCENARIO = 'realistic'

# Realistic case: the ParameterSet field defaults
DEFAULT_PARAMETERS = MappingProxyType({
    **ParameterSet().to_dict(),
    'yearly_overrides': MappingProxyType({}),
})

PESSIMISTIC_DELTAS = {
    'max_students': 1000,
    'students_year1': 250,
    'students_year2': 600,
    'students_year3_plus': 1000,
    'tuition_monthly': 2100,
    'tuition_increase_rate': 0.05,
    'kit_cost_per_student': 1000,
    'churn_rate': 0.07,
    'technology_year1': 5_500_000,
    'technology_years_after': 600_000,
    'initial_capex': 17_000_000,
    'year1_capex': 5_500_000,
    'base_facility_cost': 1_700_000,
    'staff_cost_per_student': 4800,
    'min_staff_cost': 5_500_000,
    'corporate_overhead': 2_300_000,
    'marketing_rate': 0.06,
    'bad_debt_rate': 0.03,
    'bridge_loan': 9_000_000,
    'desenvolve_sp': 11_000_000,
    'prefeitura_subsidy': 2_500_000,
}

OPTIMISTIC_DELTAS = {
    'max_students': 1400,
    'students_year1': 400,
    'students_year2': 900,
    'students_year3_plus': 1400,
    'tuition_monthly': 2500,
    'tuition_increase_rate': 0.07,
    'kit_cost_per_student': 1400,
    'churn_rate': 0.03,
    'technology_year1': 4_500_000,
    'technology_years_after': 400_000,
    'initial_capex': 14_000_000,
    'year1_capex': 4_500_000,
    'base_facility_cost': 1_400_000,
    'staff_cost_per_student': 4000,
    'min_staff_cost': 4_500_000,
    'corporate_overhead': 1_800_000,
    'marketing_rate': 0.04,
    'bad_debt_rate': 0.015,
    'bridge_loan': 7_000_000,
    'desenvolve_sp': 9_000_000,
    'prefeitura_subsidy': 2_500_000,
}


def _complete(deltas):
    # presets are full parameter sets: unspecified fields fall back to the realistic case
    return MappingProxyType({**DEFAULT_PARAMETERS, **deltas, 'yearly_overrides': MappingProxyType({})})


SCENARIO_PRESETS = MappingProxyType({
    'pessimistic': MappingProxyType({
        'name': 'Pessimistic',
        'description': 'Conservative growth, higher costs, slower ramp-up',
        'parameters': _complete(PESSIMISTIC_DELTAS),
    }),
    'realistic': MappingProxyType({
        'name': 'Realistic',
        'description': 'Expected scenario with moderate growth',
        'parameters': _complete({}),
    }),
    'optimistic': MappingProxyType({
        'name': 'Optimistic',
        'description': 'Strong growth, efficient operations, faster ramp-up',
        'parameters': _complete(OPTIMISTIC_DELTAS),
    }),
})


def preset_parameters(name: str = DEFAULT_SCENARIO) -> ParameterSet:
    """Fresh ParameterSet for a named scenario preset"""
    try:
        preset = SCENARIO_PRESETS[name]
    except KeyError:
        raise ConfigurationError(
            f"unknown scenario {name!r}; expected one of {sorted(SCENARIO_PRESETS)}"
        ) from None
    return ParameterSet.from_dict(preset['parameters'])
