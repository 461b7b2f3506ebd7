"""Investment return metrics: IRR, NPV, payback and per-student ratios"""
import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

logger = logging.getLogger(__name__)

IRR_SEED = 0.10
IRR_LOW = -0.99
IRR_HIGH = 1.0
IRR_MAX_ITER = 100
IRR_NPV_TOLERANCE = 1000.0   # currency units
MIN_PAYBACK_YEARS = 2


@dataclass(frozen=True)
class IRRResult:
    rate: float
    npv: float          # NPV of the cash flows at `rate`
    iterations: int
    converged: bool


def npv(cash_flows: Sequence[float], discount_rate: float = 0.10) -> float:
    """Net present value, cash_flows[t] discounted t periods"""
    cf = np.asarray(cash_flows, dtype=float)
    periods = np.arange(cf.size)
    return float(np.sum(cf / (1.0 + discount_rate) ** periods))


def solve_irr(cash_flows: Sequence[float]) -> IRRResult:
    """
    Bisection search for the rate where NPV is (nearly) zero.

    Starts at 10% inside [-99%, 100%] and stops once |NPV| < 1000 or after 100
    steps. The last rate is returned either way; `converged` tells the two apart.
    """
    rate, low, high = IRR_SEED, IRR_LOW, IRR_HIGH
    converged = False
    iterations = 0

    for iterations in range(1, IRR_MAX_ITER + 1):
        value = npv(cash_flows, rate)
        if abs(value) < IRR_NPV_TOLERANCE:
            converged = True
            break
        # NPV falls as the rate rises for an invest-then-earn stream
        if value > 0:
            low = rate
        else:
            high = rate
        rate = (low + high) / 2

    final_npv = npv(cash_flows, rate)
    if converged:
        logger.debug("IRR converged to %.6f after %d iterations", rate, iterations)
    else:
        logger.warning(
            "IRR did not converge after %d iterations: rate=%.6f npv=%.2f",
            iterations, rate, final_npv,
        )
    return IRRResult(rate=rate, npv=final_npv, iterations=iterations, converged=converged)


def irr(cash_flows: Sequence[float]) -> float:
    return solve_irr(cash_flows).rate


def payback_period(cash_flows: Sequence[float]) -> int:
    """First period with positive cumulative cash (never below 2); len(cash_flows) if never"""
    cumulative = 0.0
    for i, cf in enumerate(cash_flows):
        cumulative += cf
        if cumulative > 0:
            return max(i, MIN_PAYBACK_YEARS)
    return len(cash_flows)


def investment_cash_flows(projection, initial_capex: float) -> list:
    """Free cash flow by year with year 0 replaced by the initial CAPEX outflow"""
    flows = [year["free_cash_flow"] for year in projection]
    if flows:
        flows[0] = -initial_capex
    return flows


def revenue_per_student(year: dict) -> float:
    return year["revenue"]["total"] / year["students"] if year["students"] > 0 else 0.0


def cost_per_student(year: dict) -> float:
    return year["costs"]["total"] / year["students"] if year["students"] > 0 else 0.0
