from __future__ import annotations
from typing import List

from core.presets import DSCR_FLOOR, EXCLUDED_STATES, MIN_CREDIT_SCORE
from domus.models import EligibilityVerdict, RuleResult, ScenarioInput

__all__ = [
    "RuleResult",
    "evaluate_eligibility",
    "dscr_floor_rule",
    "build_verdict",
]


def evaluate_eligibility(scenario: ScenarioInput) -> List[RuleResult]:
    """Collect every hard decline for ``scenario``.

    All rules run; a scenario excluded on several grounds reports each one.
    """
    res: List[RuleResult] = []

    state = scenario.property_state.strip().upper()
    if state in EXCLUDED_STATES:
        res.append(
            RuleResult(
                code="STATE_EXCLUDED",
                severity="critical",
                message=f"We do not lend in {state}.",
                context={"state": state},
            )
        )

    if scenario.is_rural:
        res.append(
            RuleResult(
                code="RURAL",
                severity="critical",
                message="Rural properties are ineligible.",
            )
        )

    if scenario.is_short_term_rental and scenario.is_multi_unit:
        res.append(
            RuleResult(
                code="STR_MULTI_UNIT",
                severity="critical",
                message="STR status is only eligible for Single Family properties.",
                context={"units": scenario.number_of_units},
            )
        )

    # Foreign nationals may omit domestic credit entirely; the floor does not apply.
    if not scenario.is_foreign_national and scenario.effective_credit_score < MIN_CREDIT_SCORE:
        res.append(
            RuleResult(
                code="CREDIT_FLOOR",
                severity="critical",
                message=f"Minimum FICO of {MIN_CREDIT_SCORE} required.",
                context={"actual": scenario.credit_score, "limit": MIN_CREDIT_SCORE},
            )
        )

    return res


def dscr_floor_rule(dscr: float) -> List[RuleResult]:
    if dscr < DSCR_FLOOR:
        return [
            RuleResult(
                code="DSCR_FLOOR",
                severity="critical",
                message=f"DSCR below {DSCR_FLOOR:.2f}x floor.",
                context={"actual": round(dscr, 4), "limit": DSCR_FLOOR},
            )
        ]
    return []


def build_verdict(res: List[RuleResult]) -> EligibilityVerdict:
    """Split rule results into hard failures and soft warnings, keeping order."""
    return EligibilityVerdict(
        failures=[r for r in res if r.severity == "critical"],
        warnings=[r for r in res if r.severity == "warn"],
    )
