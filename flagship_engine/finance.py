"""Funding inflows, debt service and tax for the flagship school"""
from typing import Optional

TAX_RATE = 0.34                  # Brazilian corporate rate, flat, no loss carryforward
BRIDGE_INTEREST_RATE = 0.14      # annual, paid with the principal in year 1
DSP_INTEREST_RATE = 0.084        # Desenvolve SP, annual
DSP_GRACE_YEARS = range(2, 7)    # interest-only, years 2-6 inclusive
DSP_FIRST_AMORTIZATION_YEAR = 7
DSP_AMORTIZATION_YEARS = 5       # straight-line


def taxes(ebitda: float) -> float:
    """Flat tax on positive EBITDA"""
    return max(0.0, ebitda) * TAX_RATE


def dsp_remaining_principal(principal: float, year: int) -> float:
    """Desenvolve SP balance at the start of an amortization year"""
    if year < DSP_FIRST_AMORTIZATION_YEAR:
        return principal
    installment = principal / DSP_AMORTIZATION_YEARS
    return principal - (year - DSP_FIRST_AMORTIZATION_YEAR) * installment


def funding_sources(params, year: int) -> Optional[dict]:
    """Capital inflows for the year, or None when nothing arrives"""
    if year == 0:
        if params.bridge_loan <= 0:
            return None
        return {
            "bridge_loan": params.bridge_loan,
            "total": params.bridge_loan,
        }
    if year == 1:
        if params.desenvolve_sp + params.prefeitura_subsidy <= 0:
            return None
        return {
            "desenvolve_sp": params.desenvolve_sp,
            "prefeitura_subsidy": params.prefeitura_subsidy,
            "total": params.desenvolve_sp + params.prefeitura_subsidy,
        }
    return None


def debt_service(params, year: int) -> Optional[dict]:
    """Debt payments for the year, or None when no debt cash moves"""
    if year == 1 and params.bridge_loan > 0:
        # bridge is repaid in full once Desenvolve SP and the subsidy land
        return {
            "bridge_repayment": params.bridge_loan,
            "bridge_interest": params.bridge_loan * BRIDGE_INTEREST_RATE,
        }
    if params.desenvolve_sp <= 0:
        return None
    if year in DSP_GRACE_YEARS:
        return {"dsp_interest": params.desenvolve_sp * DSP_INTEREST_RATE}
    if year >= DSP_FIRST_AMORTIZATION_YEAR:
        remaining = dsp_remaining_principal(params.desenvolve_sp, year)
        if remaining > 0:
            return {
                "principal": params.desenvolve_sp / DSP_AMORTIZATION_YEARS,
                "interest": remaining * DSP_INTEREST_RATE,
            }
    return None
