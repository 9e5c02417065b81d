from core.engine import underwrite
from core.notify import ContactInfo, dispatch_quote, flatten_quote
from core.rate_sheet import default_rate_sheet
from domus.models import ScenarioInput

CONTACT = ContactInfo(name="Jordan Lee", email="jordan@example.com", phone="555-0100")


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


def test_flatten_quote_is_all_strings():
    s = _scenario()
    fields = flatten_quote(s, underwrite(s, default_rate_sheet()), CONTACT)
    assert all(isinstance(k, str) and isinstance(v, str) for k, v in fields.items())
    assert fields["band"] == "Green"
    assert fields["qualified"] == "Yes"
    assert fields["final_rate"] == "6.375"
    assert fields["dscr"] == "1.3913"
    assert fields["adj_transaction"] == "-0.5"
    assert fields["adj_prepayment"] == "1.5"
    assert fields["ltv_bracket"] == "LTV_75"
    assert fields["estimated_cash_out"] == ""
    assert fields["contact_email"] == "jordan@example.com"


def test_flatten_quote_manual_review():
    s = _scenario(credit_score=0, is_foreign_national=True)
    fields = flatten_quote(s, underwrite(s, default_rate_sheet()))
    assert fields["final_rate"] == "Pending Review"
    assert fields["manual_rate_review"] == "Yes"
    assert "contact_name" not in fields


def test_dispatch_uses_sender():
    s = _scenario()
    res = underwrite(s, default_rate_sheet())
    sent = []
    assert dispatch_quote(s, res, CONTACT, sender=lambda subject, fields: sent.append((subject, fields))) is True
    subject, fields = sent[0]
    assert "Jordan Lee" in subject
    assert "$300,000" in subject
    assert fields["contact_name"] == "Jordan Lee"


def test_dispatch_failure_returns_false(caplog):
    def broken(subject, fields):
        raise RuntimeError("smtp down")

    s = _scenario()
    res = underwrite(s, default_rate_sheet())
    assert dispatch_quote(s, res, CONTACT, sender=broken) is False
    assert "quote dispatch failed" in caplog.text
