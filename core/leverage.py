"""Maximum leverage and loan sizing per transaction type."""
from __future__ import annotations

import logging
from typing import List, Tuple

from core.presets import (
    BENCHMARK_RATE_PCT,
    CASH_OUT_DOLLAR_CAP,
    CASH_OUT_DOLLAR_CAP_HIGH,
    CASH_OUT_HIGH_CAP_MAX_LTV,
    CASH_OUT_LTV_CAP,
    CASH_OUT_LTV_CAP_TIGHT,
    MAX_LTV,
    RATE_TERM_COST_FACTOR,
)
from core.utils import fico_to_max_ltv
from domus.calculators import cash_flow_metrics
from domus.models import CashFlowMetrics, LeverageDecision, RuleResult, ScenarioInput

logger = logging.getLogger(__name__)


def base_ltv(score) -> float:
    return min(fico_to_max_ltv(score), MAX_LTV)


def _metrics_at(scenario: ScenarioInput, ltv: float, rate_pct: float) -> CashFlowMetrics:
    return cash_flow_metrics(scenario, scenario.valuation * ltv, rate_pct)


def _resolve_cash_out(
    scenario: ScenarioInput, tiered: float, rate_pct: float
) -> Tuple[LeverageDecision, CashFlowMetrics, List[RuleResult]]:
    warnings: List[RuleResult] = []
    baseline = _metrics_at(scenario, tiered, rate_pct)

    ltv_cap = CASH_OUT_LTV_CAP
    if scenario.is_short_term_rental or baseline.dscr < 1.0:
        ltv_cap = CASH_OUT_LTV_CAP_TIGHT
    ltv = min(tiered, ltv_cap)
    metrics = _metrics_at(scenario, ltv, rate_pct)

    # Single pass: the cap is chosen from DSCR at the LTV-capped loan and is
    # not re-checked after the clamp below.
    dollar_cap = CASH_OUT_DOLLAR_CAP
    if metrics.dscr >= 1.0 and not scenario.is_short_term_rental and ltv < CASH_OUT_HIGH_CAP_MAX_LTV:
        dollar_cap = CASH_OUT_DOLLAR_CAP_HIGH

    max_loan = scenario.payoff_amount + dollar_cap
    capped = False
    if metrics.loan_amount > max_loan:
        ltv = max_loan / scenario.valuation
        metrics = _metrics_at(scenario, ltv, rate_pct)
        capped = True
        warnings.append(
            RuleResult(
                code="PROCEEDS_CAP",
                severity="warn",
                message=f"Proceeds Cap: Cash-out restricted to ${dollar_cap / 1000:,.0f}k max.",
                context={"dollar_cap": dollar_cap, "max_loan": max_loan},
            )
        )
        logger.debug("cash-out proceeds capped at %.0f; ltv %.4f", dollar_cap, ltv)

    decision = LeverageDecision(
        base_ltv=tiered,
        ltv=ltv,
        loan_amount=metrics.loan_amount,
        cash_out_ltv_cap=ltv_cap,
        dollar_cap=dollar_cap,
        proceeds_capped=capped,
    )
    return decision, metrics, warnings


def resolve_leverage(
    scenario: ScenarioInput, rate_pct: float = BENCHMARK_RATE_PCT
) -> Tuple[LeverageDecision, CashFlowMetrics, List[RuleResult]]:
    """Resolve LTV and loan amount, returning the final metrics and any soft warnings.

    Purchase sizes off the valuation at the tiered LTV.  Rate-and-term sizes
    to the payoff grossed up for a 2% all-in cost, never above the tiered LTV.
    Cash-out applies the LTV overlay then the dollar cap on new proceeds.
    """
    tiered = base_ltv(scenario.effective_credit_score)

    if scenario.is_cash_out_refinance:
        return _resolve_cash_out(scenario, tiered, rate_pct)

    value = scenario.valuation
    if scenario.is_rate_and_term:
        loan = min(scenario.payoff_amount / RATE_TERM_COST_FACTOR, value * tiered)
    else:
        loan = value * tiered
    metrics = cash_flow_metrics(scenario, loan, rate_pct)
    decision = LeverageDecision(base_ltv=tiered, ltv=loan / value, loan_amount=loan)
    return decision, metrics, []
