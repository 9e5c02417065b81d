from core.engine import underwrite
from core.pdf_export import build_quote_pdf, quote_summary
from core.rate_sheet import default_rate_sheet
from domus.models import LoanPurpose, ScenarioInput


def _scenario(**kw):
    base = dict(
        credit_score=760,
        property_state="TX",
        zip_code="75201",
        purchase_price=400000,
        as_is_value=400000,
        monthly_rent=3200,
        annual_tax=4800,
        annual_insurance=1800,
    )
    base.update(kw)
    return ScenarioInput(**base)


def test_quote_summary_fields():
    s = _scenario()
    summary = quote_summary(s, underwrite(s, default_rate_sheet()))
    assert summary["deal_snapshot"]["Property"] == "Single Property, TX 75201"
    assert summary["totals"]["Quoted Rate"] == "6.375%"
    assert summary["totals"]["LTV"] == "75.00%"
    assert summary["totals"]["PITIA @ 7.00%"] == "$2,300.00"
    assert "Est. Cash Out" not in summary["totals"]


def test_quote_summary_rate_states():
    fn = _scenario(credit_score=0, is_foreign_national=True)
    assert quote_summary(fn, underwrite(fn, default_rate_sheet()))["totals"]["Quoted Rate"] == "Pending Review"
    big = _scenario(credit_score=790, purchase_price=4000000, as_is_value=4000000, monthly_rent=30000)
    assert quote_summary(big, underwrite(big, default_rate_sheet()))["totals"]["Quoted Rate"] == "Not Offered"


def test_build_quote_pdf(tmp_path):
    s = _scenario()
    out = tmp_path / "quote.pdf"
    build_quote_pdf(str(out), s, underwrite(s, default_rate_sheet()), branding={"title": "Domus Lending", "contact": "desk@domuslending.com"})
    assert out.read_bytes().startswith(b"%PDF")


def test_build_quote_pdf_for_declined_cash_out(tmp_path):
    s = _scenario(
        property_state="CA",
        loan_purpose=LoanPurpose.REFI,
        is_cash_out=True,
        purchase_price=None,
        as_is_value=1000000,
        payoff_amount=100000,
        monthly_rent=6000,
    )
    res = underwrite(s, default_rate_sheet())
    out = tmp_path / "declined.pdf"
    build_quote_pdf(str(out), s, res)
    assert out.exists() and out.stat().st_size > 0
    assert "Est. Cash Out" in quote_summary(s, res)["totals"]
