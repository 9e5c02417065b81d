import pytest

from core.leverage import base_ltv, resolve_leverage
from domus.models import LoanPurpose, ScenarioInput


def _purchase(**kw):
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


def _cash_out(**kw):
    base = dict(
        credit_score=790,
        property_state="FL",
        loan_purpose=LoanPurpose.REFI,
        is_cash_out=True,
        as_is_value=1000000,
        payoff_amount=600000,
        monthly_rent=6000,
        annual_tax=6000,
        annual_insurance=2400,
    )
    base.update(kw)
    return ScenarioInput(**base)


@pytest.mark.parametrize(
    "score,expected",
    [(820, 0.80), (780, 0.80), (779, 0.75), (700, 0.75), (699, 0.70), (680, 0.70), (679, 0.65), (0, 0.65)],
)
def test_base_ltv_tiers(score, expected):
    assert base_ltv(score) == expected


def test_purchase_sizes_off_purchase_price():
    decision, metrics, warnings = resolve_leverage(_purchase())
    assert decision.ltv == pytest.approx(0.75)
    assert decision.loan_amount == pytest.approx(300000)
    assert metrics.loan_amount == pytest.approx(300000)
    assert warnings == []


def test_purchase_falls_back_to_as_is_value():
    decision, _, _ = resolve_leverage(_purchase(purchase_price=None, as_is_value=500000))
    assert decision.loan_amount == pytest.approx(375000)


def test_purchase_uses_contract_price_when_present():
    decision, _, _ = resolve_leverage(_purchase(purchase_price=380000, as_is_value=400000))
    assert decision.loan_amount == pytest.approx(285000)
    assert decision.ltv == pytest.approx(0.75)


def test_foreign_national_uses_proxy_score():
    decision, _, _ = resolve_leverage(_purchase(credit_score=0, is_foreign_national=True))
    assert decision.base_ltv == 0.75


def test_rate_and_term_grosses_up_payoff():
    s = _cash_out(is_cash_out=False, payoff_amount=300000, as_is_value=500000)
    decision, metrics, warnings = resolve_leverage(s)
    assert decision.loan_amount == pytest.approx(300000 / 0.98)
    assert decision.ltv == pytest.approx(300000 / 0.98 / 500000)
    assert metrics.loan_amount == pytest.approx(decision.loan_amount)
    assert warnings == []


def test_rate_and_term_capped_by_tiered_ltv():
    s = _cash_out(is_cash_out=False, payoff_amount=480000, as_is_value=500000)
    decision, _, _ = resolve_leverage(s)
    assert decision.loan_amount == pytest.approx(400000)
    assert decision.ltv == pytest.approx(0.80)


def test_cash_out_overlay_caps_at_75():
    decision, metrics, warnings = resolve_leverage(_cash_out())
    assert decision.base_ltv == 0.80
    assert decision.cash_out_ltv_cap == 0.75
    assert decision.ltv == pytest.approx(0.75)
    assert decision.loan_amount == pytest.approx(750000)
    assert decision.dollar_cap == 500000
    assert decision.proceeds_capped is False
    assert warnings == []


def test_cash_out_short_term_rental_caps_at_70():
    decision, _, _ = resolve_leverage(_cash_out(is_short_term_rental=True))
    assert decision.cash_out_ltv_cap == 0.70
    assert decision.ltv == pytest.approx(0.70)


def test_cash_out_thin_baseline_dscr_caps_at_70():
    # 4000 / (800k * 7% / 12 + 700) is below 1.0 at the tiered 80%
    decision, _, _ = resolve_leverage(_cash_out(monthly_rent=4000))
    assert decision.cash_out_ltv_cap == 0.70
    assert decision.ltv == pytest.approx(0.70)


def test_cash_out_dollar_cap_clamps_proceeds():
    decision, metrics, warnings = resolve_leverage(_cash_out(payoff_amount=100000))
    assert decision.proceeds_capped is True
    assert decision.ltv == pytest.approx(0.60)
    assert decision.loan_amount == pytest.approx(600000)
    assert metrics.loan_amount == pytest.approx(600000)
    assert [w.code for w in warnings] == ["PROCEEDS_CAP"]
    assert warnings[0].severity == "warn"


@pytest.mark.parametrize(
    "scenario",
    [
        _purchase(credit_score=820),
        _purchase(credit_score=0, is_foreign_national=True),
        _cash_out(),
        _cash_out(payoff_amount=0),
        _cash_out(is_cash_out=False, payoff_amount=990000),
    ],
)
def test_ltv_never_exceeds_80(scenario):
    decision, _, _ = resolve_leverage(scenario)
    assert 0 <= decision.ltv <= 0.80 + 1e-12
