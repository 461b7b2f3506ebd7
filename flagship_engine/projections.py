"""10-year projection and investment summary"""
import logging

from .models import ParameterSet
from .compute import calculate_year_data
from .metrics import npv, solve_irr, payback_period, investment_cash_flows
from .validation import ConfigurationError

logger = logging.getLogger(__name__)

PROJECTION_YEARS = 10
DISCOUNT_RATE = 0.10


def calculate_projection(params: ParameterSet, years: int = PROJECTION_YEARS) -> list:
    """Year records for indices 0..years inclusive"""
    if isinstance(years, bool) or not isinstance(years, int) or years < 0:
        raise ConfigurationError(f"years must be a non-negative integer, got {years!r}")
    projection = [calculate_year_data(params, year) for year in range(years + 1)]
    logger.debug("Built %d-year projection (%d override years)", years, len(params.yearly_overrides))
    return projection


def build_financial_summary(params: ParameterSet, years: int = PROJECTION_YEARS,
                            discount_rate: float = DISCOUNT_RATE):
    """Build the projection and reduce it to return metrics and totals"""
    projection = calculate_projection(params, years)
    operating = projection[1:]   # year 0 is pre-launch
    last = projection[-1]

    def roll(xs, key):
        return sum(r[key] for r in xs)

    # IRR and payback treat year 0 as the initial CAPEX outflow;
    # NPV discounts the projected free cash flow as is
    investment_flows = investment_cash_flows(projection, params.initial_capex)
    irr_result = solve_irr(investment_flows)
    fcf = [r["free_cash_flow"] for r in projection]

    funding_total = params.bridge_loan + params.desenvolve_sp + params.prefeitura_subsidy

    summary = {
        "year10_revenue": last["revenue"]["total"],
        "year10_ebitda": last["ebitda"],
        "year10_students": last["students"],
        "cumulative_ebitda": roll(operating, "ebitda"),
        "cumulative_fcf": roll(operating, "free_cash_flow"),
        "total_capex": roll(projection, "capex"),
        "total_revenue": sum(r["revenue"]["total"] for r in operating),
        "total_costs": sum(r["costs"]["total"] for r in operating),
        "total_taxes": roll(operating, "taxes"),
        "average_ebitda_margin": roll(operating, "ebitda_margin") / len(operating) if operating else 0.0,
        "irr": irr_result.rate,
        "irr_converged": irr_result.converged,
        "irr_iterations": irr_result.iterations,
        "npv": npv(fcf, discount_rate),
        "payback_period": payback_period(investment_flows),
        "total_investment": params.initial_capex + params.year1_capex,
        "funding_structure": {
            "bridge_loan": params.bridge_loan,
            "desenvolve_sp": params.desenvolve_sp,
            "prefeitura_subsidy": params.prefeitura_subsidy,
            "total": funding_total,
        },
    }

    return {"projection": projection, "summary": summary}
