"""
Investment metric tests

IRR uses a bisection search with an absolute NPV tolerance of 1000,
so small cash flows stop at the 10% seed.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import logging

import pytest

from flagship_engine.metrics import (
    IRR_MAX_ITER, npv, solve_irr, irr, payback_period, investment_cash_flows,
    revenue_per_student, cost_per_student,
)


def test_npv_discounts_each_period():
    assert npv([100, 110, 121], 0.10) == pytest.approx(300)
    assert npv([-1000], 0.5) == pytest.approx(-1000)
    assert npv([], 0.10) == 0


def test_npv_zero_rate_is_plain_sum():
    assert npv([-5, 3, 4], 0.0) == pytest.approx(2)


def test_irr_two_period_stream():
    # 6/(1+r) + 6/(1+r)^2 = 10  ->  r ~ 13.07%
    result = solve_irr([-10_000_000, 6_000_000, 6_000_000])
    assert result.converged
    assert result.rate == pytest.approx(0.13066, abs=0.001)
    assert abs(result.npv) < 1000
    assert result.iterations < IRR_MAX_ITER


def test_irr_small_flows_stop_at_seed():
    """|NPV| is already below the tolerance at 10%"""
    result = solve_irr([-100, 60, 60])
    assert result.rate == 0.10
    assert result.iterations == 1
    assert result.converged


@pytest.mark.parametrize("flows", [
    [-5_000_000, -1_000_000, -1_000_000],
    [5_000_000, 1_000_000, 1_000_000],
])
def test_irr_without_sign_change_does_not_converge(flows, caplog):
    with caplog.at_level(logging.WARNING, logger="flagship_engine.metrics"):
        result = solve_irr(flows)
    assert not result.converged
    assert result.iterations == IRR_MAX_ITER
    assert -0.99 <= result.rate <= 1.0
    assert "did not converge" in caplog.text


def test_irr_returns_rate_only():
    assert irr([-10_000_000, 6_000_000, 6_000_000]) == solve_irr([-10_000_000, 6_000_000, 6_000_000]).rate


def test_payback_first_positive_cumulative():
    assert payback_period([-100, -50, 80, 80, 80]) == 3
    assert payback_period([-100, 30, 30, 30, 30, 30]) == 4


def test_payback_floor_of_two():
    # cumulative turns positive in period 1, reported as 2
    assert payback_period([-10, 50, 50]) == 2
    assert payback_period([10, 10]) == 2


def test_payback_never_reached():
    flows = [-100, 10, 10, 10]
    assert payback_period(flows) == len(flows)


def test_investment_flows_replace_year0():
    projection = [{"free_cash_flow": -16.6e6}, {"free_cash_flow": -11e6}, {"free_cash_flow": 6e6}]
    flows = investment_cash_flows(projection, 15e6)
    assert flows == [-15e6, -11e6, 6e6]
    assert projection[0]["free_cash_flow"] == -16.6e6
    assert investment_cash_flows([], 15e6) == []


def test_per_student_ratios():
    year = {"students": 200, "revenue": {"total": 1_000_000}, "costs": {"total": 600_000}}
    assert revenue_per_student(year) == 5000
    assert cost_per_student(year) == 3000

    empty = {"students": 0, "revenue": {"total": 0}, "costs": {"total": 1_600_000}}
    assert revenue_per_student(empty) == 0
    assert cost_per_student(empty) == 0
