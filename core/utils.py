"""Tier classifiers shared by the leverage resolver and the pricing matrix."""

from core.presets import LTV_TIERS


def fico_to_tier(score):
    """Map a numeric credit score to the pricing-matrix credit tier.

    Scores under 680 share the lowest ``660-679`` row; the credit floor is
    enforced by the eligibility rules, not here.
    """
    try:
        s = float(score)
    except (TypeError, ValueError):
        return "660-679"
    if s >= 780:
        return "780+"
    if s >= 760:
        return "760-779"
    if s >= 740:
        return "740-759"
    if s >= 720:
        return "720-739"
    if s >= 700:
        return "700-719"
    if s >= 680:
        return "680-699"
    return "660-679"


def fico_to_max_ltv(score):
    """Tiered maximum LTV for a credit score."""
    for floor, ltv in LTV_TIERS:
        if score >= floor:
            return ltv
    return LTV_TIERS[-1][1]


def ltv_bracket(ltv):
    """Round an LTV fraction up to the nearest matrix column (``LTV_50`` .. ``LTV_80``)."""
    # 0.7 * 100 is 70.00000000000001; round before comparing to the ceilings
    pct = round(ltv * 100, 6)
    for ceiling in (50, 55, 60, 65, 70, 75):
        if pct <= ceiling:
            return f"LTV_{ceiling}"
    return "LTV_80"


def loan_amount_tier(amount):
    if amount <= 150000:
        return "<=$150,000"
    if amount <= 1000000:
        return "<=$1,000,000"
    if amount <= 1500000:
        return "<=$1,500,000"
    if amount <= 2000000:
        return "<=$2,000,000"
    if amount <= 2500000:
        return "<=$2,500,000"
    return "<=$3,000,000"


def dscr_tier(dscr):
    if dscr < 1.15:
        return "< 1.15"
    if dscr <= 1.30:
        return "> 1.15 <= 1.30"
    return "> 1.30"
