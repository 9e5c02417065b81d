"""Matrix pricing: sum five rate-sheet adjustments, then a two-stage closest-price search."""
from __future__ import annotations

import logging
from typing import Optional, Sequence

import pandas as pd

from core.presets import NOT_OFFERED, PAR_PRICE
from core.rate_sheet import RateSheet, active_rate_sheet
from core.utils import dscr_tier, fico_to_tier, loan_amount_tier, ltv_bracket
from domus.models import LoanPurpose, RatePoint, RateQuote, ScenarioInput

logger = logging.getLogger(__name__)


def transaction_type(scenario: ScenarioInput) -> str:
    if scenario.loan_purpose == LoanPurpose.PURCHASE:
        return "Purchase"
    return "Cash Out" if scenario.is_cash_out else "Rate & Term"


def property_type(scenario: ScenarioInput) -> str:
    if scenario.is_short_term_rental:
        return "Short Term Rental"
    if scenario.number_of_units > 4:
        return "Multi Family (up to 9)"
    if not scenario.is_multi_unit:
        return "Single Family / Condo / Townhome"
    return "2 - 4 Unit"


def closest_rate(table: Sequence[RatePoint], target: float) -> RatePoint:
    """Entry whose price is nearest ``target``; ties keep the earlier entry."""
    closest = table[0]
    min_diff = abs(closest.price - target)
    for entry in table:
        diff = abs(entry.price - target)
        if diff < min_diff:
            min_diff = diff
            closest = entry
    return closest


def quote_rate(
    scenario: ScenarioInput,
    ltv: float,
    loan_amount: float,
    dscr: float,
    sheet: Optional[RateSheet] = None,
) -> RateQuote:
    """Price ``scenario`` against ``sheet`` (the active sheet by default).

    A foreign national with no domestic credit is not priced: the quote is
    offered but left for a manual rate review.  Any ``N/O`` cell declines the
    whole quote and names the dimension that failed.
    """
    sheet = sheet or active_rate_sheet()
    tx = transaction_type(scenario)
    ltv_label = ltv_bracket(ltv)
    prop = property_type(scenario)
    prepay = scenario.prepayment_penalty.value

    if scenario.no_domestic_credit:
        return RateQuote(
            transaction_type=tx,
            ltv_label=ltv_label,
            credit_tier="No US Credit",
            property_type=prop,
            prepayment_label=prepay,
            is_offered=True,
            requires_manual_rate_review=True,
            rate_sheet_version=sheet.version,
        )

    credit = fico_to_tier(scenario.effective_credit_score)
    loan_tier = loan_amount_tier(loan_amount)
    coverage = dscr_tier(dscr)

    adjustments = {
        "transaction_adjustment": sheet.transaction_cell(tx, credit, ltv_label),
        "property_adjustment": sheet.other_cell("Property_Type", prop, ltv_label),
        "loan_amount_adjustment": sheet.other_cell("Loan_Amount", loan_tier, ltv_label),
        "dscr_adjustment": sheet.other_cell("DSCR", coverage, ltv_label),
        "prepayment_adjustment": sheet.other_cell("Prepayment_Penalty", prepay, ltv_label),
    }
    labels = dict(
        transaction_type=tx,
        ltv_label=ltv_label,
        credit_tier=credit,
        property_type=prop,
        loan_tier=loan_tier,
        dscr_tier=coverage,
        prepayment_label=prepay,
        rate_sheet_version=sheet.version,
    )

    missing = [name for name, adj in adjustments.items() if adj == NOT_OFFERED]
    if missing:
        logger.info("configuration not offered: %s", ", ".join(missing))
        return RateQuote(**labels, **adjustments, is_offered=False, not_offered_dimensions=missing)

    total = sum(adjustments.values())
    initial_price = PAR_PRICE - total
    first = closest_rate(sheet.rate_table, initial_price)
    shifted = first.price + sheet.price_margin
    second = closest_rate(sheet.rate_table, shifted)
    return RateQuote(
        **labels,
        **adjustments,
        total_adjustment=total,
        initial_price=initial_price,
        first_match=first,
        shifted_price=shifted,
        second_match=second,
        final_rate=second.rate,
        is_offered=True,
    )


def breakdown_frame(quote: RateQuote) -> pd.DataFrame:
    """Adjustment audit trail as a two-column table for display and export."""
    tiers = [
        quote.transaction_type + " / " + quote.credit_tier,
        quote.property_type,
        quote.loan_tier or "N/A",
        quote.dscr_tier or "N/A",
        quote.prepayment_label,
    ]
    rows = [
        {"Dimension": dim, "Tier": tier, quote.ltv_label: "" if adj is None else adj}
        for (dim, adj), tier in zip(quote.adjustments.items(), tiers)
    ]
    df = pd.DataFrame(rows)
    if quote.total_adjustment is not None:
        summary = pd.DataFrame(
            [
                {"Dimension": "Total Adjustment", "Tier": "", quote.ltv_label: quote.total_adjustment},
                {"Dimension": "Initial Price", "Tier": "", quote.ltv_label: quote.initial_price},
                {"Dimension": "Par Match", "Tier": f"{quote.first_match.rate:.3f}%", quote.ltv_label: quote.first_match.price},
                {"Dimension": "Shifted Price", "Tier": "", quote.ltv_label: quote.shifted_price},
                {"Dimension": "Final Match", "Tier": f"{quote.second_match.rate:.3f}%", quote.ltv_label: quote.second_match.price},
            ]
        )
        df = pd.concat([df, summary], ignore_index=True)
    return df
