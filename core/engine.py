"""Underwriting pipeline: eligibility, leverage, cash flow, reserves, pricing, band.

Each step consumes the previous step's output and nothing is revisited.
:func:`underwrite` is a pure function of the scenario and the rate sheet it
is handed, so concurrent callers can share one loaded sheet.
"""
from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from pydantic import ValidationError

from core.leverage import resolve_leverage
from core.presets import BENCHMARK_RATE_PCT, GREEN_MIN_DSCR
from core.pricing import quote_rate
from core.rate_sheet import RateSheet, active_rate_sheet
from core.rules import build_verdict, dscr_floor_rule, evaluate_eligibility
from domus.calculators import estimated_cash_out, reserve_requirement, sensitivity
from domus.models import (
    Band,
    EligibilityVerdict,
    InvalidScenarioError,
    RuleResult,
    ScenarioInput,
    UnderwritingResult,
)

logger = logging.getLogger(__name__)

BAND_SCORES = {Band.GREEN: 95, Band.YELLOW: 75, Band.RED: 30}


def build_scenario(data: Mapping[str, Any]) -> ScenarioInput:
    """Validate raw form data into a :class:`ScenarioInput`."""
    try:
        return ScenarioInput.model_validate(dict(data))
    except ValidationError as exc:
        raise InvalidScenarioError(f"invalid scenario: {exc.error_count()} field error(s)") from exc


def assign_band(verdict: EligibilityVerdict, dscr: float) -> Band:
    if verdict.failures:
        return Band.RED
    if verdict.warnings or dscr < GREEN_MIN_DSCR:
        return Band.YELLOW
    return Band.GREEN


def underwrite(
    scenario: ScenarioInput,
    sheet: Optional[RateSheet] = None,
    benchmark_rate: float = BENCHMARK_RATE_PCT,
) -> UnderwritingResult:
    """Run the full DSCR decision for one scenario.

    Qualification (DSCR, reserves) always uses ``benchmark_rate``; the
    quoted rate is discovered afterwards and cannot change the decision
    except by declining the configuration outright.
    """
    sheet = sheet or active_rate_sheet()
    rules: List[RuleResult] = evaluate_eligibility(scenario)

    leverage, metrics, leverage_warnings = resolve_leverage(scenario, benchmark_rate)
    rules += leverage_warnings
    rules += dscr_floor_rule(metrics.dscr)

    reserve = reserve_requirement(metrics, scenario.liquidity, scenario.is_short_term_rental)
    if reserve.shortfall > 0:
        rules.append(
            RuleResult(
                code="RESERVE_SHORTFALL",
                severity="warn",
                message=f"Liquidity: ${round(reserve.shortfall):,} reserve shortfall.",
                context={"required": reserve.required, "months": reserve.months},
            )
        )

    quote = quote_rate(scenario, leverage.ltv, leverage.loan_amount, metrics.dscr, sheet)
    if not quote.is_offered:
        rules.append(
            RuleResult(
                code="PRICING_NOT_OFFERED",
                severity="critical",
                message="Loan configuration is not offered on the current rate sheet.",
                context={"dimensions": quote.not_offered_dimensions},
            )
        )

    verdict = build_verdict(rules)
    band = assign_band(verdict, metrics.dscr)
    logger.debug(
        "verdict band=%s dscr=%.3f ltv=%.4f failures=%s warnings=%s",
        band.value,
        metrics.dscr,
        leverage.ltv,
        [r.code for r in verdict.failures],
        [r.code for r in verdict.warnings],
    )
    if band == Band.RED:
        logger.info("scenario declined: %s", ", ".join(r.code for r in verdict.failures))

    cash_out = None
    if scenario.is_cash_out_refinance:
        cash_out = estimated_cash_out(leverage.loan_amount, scenario.payoff_amount)

    return UnderwritingResult(
        band=band,
        score=BAND_SCORES[band],
        qualified=band != Band.RED,
        dscr=metrics.dscr,
        ltv=leverage.ltv,
        loan_amount=leverage.loan_amount,
        benchmark_rate=benchmark_rate,
        metrics=metrics,
        leverage=leverage,
        reserve=reserve,
        verdict=verdict,
        quote=quote,
        reasoning=" ".join(verdict.messages),
        estimated_cash_out=cash_out,
        io_eligible=scenario.effective_credit_score >= 780 and metrics.dscr >= 1.0,
        sensitivity=sensitivity(scenario, metrics, benchmark_rate),
    )
