import pytest

from core.pricing import breakdown_frame, closest_rate, property_type, quote_rate, transaction_type
from core.rate_sheet import default_rate_sheet
from core.utils import dscr_tier, fico_to_tier, loan_amount_tier, ltv_bracket
from domus.calculators import monthly_payment
from domus.models import AssetType, LoanPurpose, PrepaymentPenalty, RatePoint, ScenarioInput

SHEET = default_rate_sheet()


def _scenario(**kw):
    base = dict(
        credit_score=760,
        property_state="TX",
        purchase_price=400000,
        as_is_value=400000,
        monthly_rent=3200,
        annual_tax=4800,
        annual_insurance=1800,
    )
    base.update(kw)
    return ScenarioInput(**base)


@pytest.mark.parametrize(
    "ltv,label",
    [
        (0.40, "LTV_50"),
        (0.50, "LTV_50"),
        (0.501, "LTV_55"),
        (0.55, "LTV_55"),
        (0.60, "LTV_60"),
        (0.6122, "LTV_65"),
        (0.70, "LTV_70"),
        (0.75, "LTV_75"),
        (0.80, "LTV_80"),
    ],
)
def test_ltv_bracket_rounds_up(ltv, label):
    assert ltv_bracket(ltv) == label


def test_tier_classifiers():
    assert fico_to_tier(780) == "780+"
    assert fico_to_tier(779) == "760-779"
    assert fico_to_tier(680) == "680-699"
    assert fico_to_tier(650) == "660-679"
    assert loan_amount_tier(150000) == "<=$150,000"
    assert loan_amount_tier(150001) == "<=$1,000,000"
    assert loan_amount_tier(3200000) == "<=$3,000,000"
    assert dscr_tier(1.149) == "< 1.15"
    assert dscr_tier(1.30) == "> 1.15 <= 1.30"
    assert dscr_tier(1.31) == "> 1.30"


def test_transaction_and_property_types():
    assert transaction_type(_scenario()) == "Purchase"
    refi = dict(loan_purpose=LoanPurpose.REFI, payoff_amount=200000)
    assert transaction_type(_scenario(**refi)) == "Rate & Term"
    assert transaction_type(_scenario(is_cash_out=True, **refi)) == "Cash Out"
    assert property_type(_scenario()) == "Single Family / Condo / Townhome"
    assert property_type(_scenario(is_short_term_rental=True)) == "Short Term Rental"
    assert property_type(_scenario(asset_type=AssetType.THREE_UNIT, number_of_units=3)) == "2 - 4 Unit"
    assert property_type(_scenario(asset_type=AssetType.FOUR_UNIT, number_of_units=6)) == "Multi Family (up to 9)"


def test_closest_rate_tie_keeps_first_entry():
    table = (RatePoint(rate=7.0, price=101.0), RatePoint(rate=6.5, price=100.0))
    assert closest_rate(table, 100.5).rate == 7.0
    assert closest_rate(table, 100.4).rate == 6.5


def test_quote_matches_worked_example():
    q = quote_rate(_scenario(), 0.75, 300000, 3200 / 2300, SHEET)
    assert q.is_offered
    assert q.ltv_label == "LTV_75"
    assert q.credit_tier == "760-779"
    assert q.transaction_adjustment == -0.5
    assert q.property_adjustment == 0
    assert q.loan_amount_adjustment == -0.5
    assert q.dscr_adjustment == 0.25
    assert q.prepayment_adjustment == 1.5
    assert q.total_adjustment == pytest.approx(0.75)
    assert q.initial_price == pytest.approx(99.25)
    assert q.first_match == RatePoint(rate=6.125, price=99.1588)
    assert q.shifted_price == pytest.approx(100.6588)
    assert q.second_match == RatePoint(rate=6.375, price=100.5527)
    assert q.final_rate == 6.375
    assert q.rate_sheet_version == SHEET.version


def test_final_rate_is_always_on_the_table():
    rates = {p.rate for p in SHEET.rate_table}
    for penalty in PrepaymentPenalty:
        q = quote_rate(_scenario(prepayment_penalty=penalty), 0.75, 300000, 1.2, SHEET)
        assert q.final_rate in rates


def test_rate_and_term_uses_its_own_80_column():
    s = _scenario(credit_score=750, loan_purpose=LoanPurpose.REFI, payoff_amount=320000)
    q = quote_rate(s, 0.80, 320000, 1.2, SHEET)
    assert q.transaction_type == "Rate & Term"
    assert q.transaction_adjustment == -1.82


def test_not_offered_loan_tier_declines_quote():
    s = _scenario(credit_score=790, purchase_price=4000000, as_is_value=4000000, monthly_rent=30000)
    q = quote_rate(s, 0.80, 3200000, 1.38, SHEET)
    assert q.is_offered is False
    assert q.loan_amount_adjustment == "N/O"
    assert q.not_offered_dimensions == ("loan_amount_adjustment",)
    assert q.final_rate is None
    assert q.total_adjustment is None


def test_cash_out_has_no_row_below_680():
    s = _scenario(
        credit_score=670,
        loan_purpose=LoanPurpose.REFI,
        is_cash_out=True,
        payoff_amount=100000,
    )
    q = quote_rate(s, 0.65, 260000, 1.3, SHEET)
    assert q.is_offered is False
    assert "transaction_adjustment" in q.not_offered_dimensions


def test_foreign_national_without_credit_goes_to_manual_review():
    s = _scenario(credit_score=0, is_foreign_national=True)
    q = quote_rate(s, 0.75, 300000, 1.39, SHEET)
    assert q.is_offered is True
    assert q.requires_manual_rate_review is True
    assert q.final_rate is None
    assert q.credit_tier == "No US Credit"
    assert all(v is None for v in q.adjustments.values())


def test_foreign_national_with_credit_is_priced():
    s = _scenario(credit_score=760, is_foreign_national=True)
    q = quote_rate(s, 0.75, 300000, 1.39, SHEET)
    assert q.requires_manual_rate_review is False
    assert q.final_rate == 6.375


def test_quote_against_custom_sheet():
    sheet = SHEET.model_copy(
        update={
            "version": "test-flat",
            "rate_table": (RatePoint(rate=7.5, price=101.5), RatePoint(rate=7.0, price=100.0)),
        }
    )
    q = quote_rate(_scenario(), 0.75, 300000, 1.39, sheet)
    assert q.first_match.rate == 7.0
    assert q.final_rate == 7.5
    assert q.rate_sheet_version == "test-flat"


def test_quoted_rate_feeds_amortization():
    q = quote_rate(_scenario(), 0.75, 300000, 1.39, SHEET)
    r = q.final_rate / 100 / 12
    expected = 300000 * r / (1 - (1 + r) ** -360)
    assert monthly_payment(300000, q.final_rate, 30) == pytest.approx(expected)


def test_breakdown_frame_rows():
    offered = breakdown_frame(quote_rate(_scenario(), 0.75, 300000, 1.39, SHEET))
    assert list(offered.columns) == ["Dimension", "Tier", "LTV_75"]
    assert len(offered) == 10
    assert offered.iloc[0]["Dimension"] == "Transaction"
    assert offered.iloc[-1]["Dimension"] == "Final Match"

    manual = breakdown_frame(quote_rate(_scenario(credit_score=0, is_foreign_national=True), 0.75, 300000, 1.39, SHEET))
    assert len(manual) == 5
