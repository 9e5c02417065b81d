
from __future__ import annotations
import math
from typing import Optional

from core.presets import (
    AMORT_TERM_YEARS,
    CLOSING_COST_PCT,
    RESERVE_LARGE_LOAN,
    RESERVE_MONTHS,
    RESERVE_MONTHS_ELEVATED,
)
from domus.models import (
    CashFlowMetrics,
    InvalidScenarioError,
    ReserveRequirement,
    ScenarioInput,
    SensitivityAnalysis,
)


def nz(x, default=0.0):
    """Return a float for ``x`` or a fallback value.

    Form fields that were left blank arrive as ``None`` or ``NaN``.  This
    helper mirrors the spreadsheet ``NZ()`` function and keeps later math from
    breaking when a value is missing.
    """

    try:
        if x is None or (isinstance(x, float) and math.isnan(x)):
            return default
        return float(x)
    except (TypeError, ValueError):
        return default


def monthly_payment(principal, annual_rate_pct, term_years=AMORT_TERM_YEARS):
    """Calculate the fully amortizing monthly payment for a loan.

    ``principal`` is the starting loan amount, ``annual_rate_pct`` is the
    nominal yearly interest rate (e.g. ``7.0`` for 7%), and ``term_years`` is
    the amortization period in years.  Only used for the illustrative P&I
    figure; qualification runs on :func:`interest_only_payment`.
    """

    L = nz(principal)
    r = nz(annual_rate_pct) / 100 / 12
    n = int(nz(term_years) * 12)
    if n <= 0:
        return 0.0
    if abs(r) < 1e-9:
        return L / n
    return (r * L) / (1 - (1 + r) ** (-n))


def interest_only_payment(principal, annual_rate_pct):
    """Monthly interest-only debt service."""

    return nz(principal) * nz(annual_rate_pct) / 100 / 12


def cash_flow_metrics(
    scenario: ScenarioInput,
    loan_amount: float,
    annual_rate_pct: float,
) -> CashFlowMetrics:
    """Size the full monthly obligation (PITIA) and DSCR for ``loan_amount``.

    Debt service is interest-only at ``annual_rate_pct`` (the benchmark rate)
    so the qualification decision never moves with the quoted rate.  The
    amortizing P&I is carried alongside for display.
    """

    value = scenario.valuation
    interest = interest_only_payment(loan_amount, annual_rate_pct)
    tax = scenario.monthly_tax
    ins = scenario.monthly_insurance
    hoa = nz(scenario.monthly_hoa)
    total = interest + tax + ins + hoa
    if not total > 0 or not math.isfinite(total):
        raise InvalidScenarioError("invalid scenario: monthly obligation must be positive")
    dscr = nz(scenario.monthly_rent) / total
    if not math.isfinite(dscr):
        raise InvalidScenarioError("invalid scenario: DSCR is not finite")
    return CashFlowMetrics(
        loan_amount=loan_amount,
        ltv=loan_amount / value,
        monthly_interest=interest,
        monthly_pi=monthly_payment(loan_amount, annual_rate_pct),
        monthly_tax=tax,
        monthly_insurance=ins,
        monthly_hoa=hoa,
        total_obligation=total,
        dscr=dscr,
    )


def reserve_requirement(
    metrics: CashFlowMetrics,
    liquidity: Optional[float],
    is_short_term_rental: bool = False,
) -> ReserveRequirement:
    """Months of PITIA the borrower must hold in liquid reserves.

    Thin coverage or a large loan doubles the requirement.  Undeclared
    liquidity is not compared, so it never produces a shortfall.
    """

    months = RESERVE_MONTHS
    if metrics.dscr < 1.0:
        months = RESERVE_MONTHS_ELEVATED
    elif metrics.loan_amount > RESERVE_LARGE_LOAN:
        months = RESERVE_MONTHS_ELEVATED
    elif is_short_term_rental and metrics.loan_amount > RESERVE_LARGE_LOAN:
        # Unreachable after the large-loan branch; kept to match the program guide wording.
        months = RESERVE_MONTHS_ELEVATED

    required = metrics.total_obligation * months
    shortfall = 0.0
    if liquidity is not None:
        shortfall = max(0.0, required - liquidity)
    return ReserveRequirement(
        months=months,
        required=required,
        liquidity=liquidity,
        shortfall=shortfall,
    )


def estimated_cash_out(loan_amount, payoff_amount):
    """Net proceeds after payoff and closing costs, floored at zero."""

    L = nz(loan_amount)
    return max(0.0, L - nz(payoff_amount) - L * CLOSING_COST_PCT)


def sensitivity(scenario: ScenarioInput, metrics: CashFlowMetrics, annual_rate_pct: float) -> SensitivityAnalysis:
    """Break-even points where DSCR would be exactly 1.00x.

    ``rate_for_dscr_1`` holds the loan fixed and solves for the interest-only
    rate; ``ltv_for_dscr_1`` holds the benchmark rate and solves for leverage.
    """

    fixed = metrics.monthly_tax + metrics.monthly_insurance + metrics.monthly_hoa
    room = nz(scenario.monthly_rent) - fixed
    rate_for_one = None
    ltv_for_one = None
    if room > 0 and metrics.loan_amount > 0:
        rate_for_one = room * 12 / metrics.loan_amount * 100
    if room > 0 and annual_rate_pct > 0:
        ltv_for_one = room * 12 / (annual_rate_pct / 100) / scenario.valuation
    return SensitivityAnalysis(
        base_dscr=metrics.dscr,
        rate_for_dscr_1=rate_for_one,
        ltv_for_dscr_1=ltv_for_one,
    )
