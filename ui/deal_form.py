import streamlit as st

from core.engine import build_scenario
from domus.models import AssetType, InvalidScenarioError, LoanPurpose, PrepaymentPenalty

UNITS_BY_ASSET = {
    AssetType.SINGLE.value: 1,
    AssetType.TWO_UNIT.value: 2,
    AssetType.THREE_UNIT.value: 3,
    AssetType.FOUR_UNIT.value: 4,
}

FORM_DEFAULTS = {
    "zip_code": "",
    "property_state": "",
    "is_rural": False,
    "asset_type": AssetType.SINGLE.value,
    "loan_purpose": LoanPurpose.PURCHASE.value,
    "is_cash_out": False,
    "more_than_one_unit_vacant": False,
    "purchase_price": 0.0,
    "as_is_value": 0.0,
    "payoff_amount": 0.0,
    "monthly_rent": 0.0,
    "annual_tax": 0.0,
    "annual_insurance": 0.0,
    "monthly_hoa": 0.0,
    "credit_score": 740,
    "liquidity": None,
    "is_first_time_investor": False,
    "is_short_term_rental": False,
    "is_foreign_national": False,
    "prepayment_penalty": PrepaymentPenalty.MONTHS_60.value,
}


def scenario_from_form(values: dict):
    """Turn raw widget values into a validated scenario.

    Blank purchase price means "use the as-is value"; the unit count follows
    the asset type.  Blank liquidity stays ``None`` (undisclosed).  Raises
    ``InvalidScenarioError`` for out-of-domain input.
    """
    data = dict(values)
    data["number_of_units"] = UNITS_BY_ASSET.get(data.get("asset_type"), 1)
    if not data.get("purchase_price"):
        data["purchase_price"] = None
    if data.get("loan_purpose") == LoanPurpose.PURCHASE.value:
        data["is_cash_out"] = False
        data["payoff_amount"] = 0.0
    return build_scenario(data)


def render_deal_form():
    """Render the deal form; returns a scenario on a valid submit, else ``None``."""
    st.session_state.setdefault("deal_values", dict(FORM_DEFAULTS))
    f = st.session_state["deal_values"]
    with st.form("deal_form"):
        st.subheader("Property")
        c1, c2 = st.columns(2)
        f["property_state"] = c1.text_input("State", value=f["property_state"], max_chars=2)
        f["zip_code"] = c2.text_input("Zip Code", value=f["zip_code"], max_chars=5)
        assets = [a.value for a in AssetType]
        f["asset_type"] = c1.selectbox("Asset Type", assets, index=assets.index(f["asset_type"]))
        f["is_rural"] = c2.checkbox("Rural Property", value=f["is_rural"])
        f["is_short_term_rental"] = c2.checkbox("Short-Term Rental", value=f["is_short_term_rental"])
        f["more_than_one_unit_vacant"] = c2.checkbox("More Than One Unit Vacant", value=f["more_than_one_unit_vacant"])

        st.subheader("Transaction")
        c1, c2 = st.columns(2)
        purposes = [p.value for p in LoanPurpose]
        f["loan_purpose"] = c1.selectbox("Loan Purpose", purposes, index=purposes.index(f["loan_purpose"]))
        f["is_cash_out"] = c2.checkbox("Cash-Out (refinance only)", value=f["is_cash_out"])
        f["purchase_price"] = c1.number_input("Purchase Price", min_value=0.0, value=float(f["purchase_price"]), step=1000.0)
        f["as_is_value"] = c2.number_input("As-Is Value", min_value=0.0, value=float(f["as_is_value"]), step=1000.0)
        f["payoff_amount"] = c1.number_input("Payoff Amount (refinance)", min_value=0.0, value=float(f["payoff_amount"]), step=1000.0)
        penalties = [p.value for p in PrepaymentPenalty]
        f["prepayment_penalty"] = c2.selectbox(
            "Prepayment Penalty", penalties, index=penalties.index(f["prepayment_penalty"])
        )

        st.subheader("Income & Expenses")
        c1, c2 = st.columns(2)
        f["monthly_rent"] = c1.number_input("Monthly Gross Rent", min_value=0.0, value=float(f["monthly_rent"]), step=50.0)
        f["annual_tax"] = c2.number_input("Annual Taxes", min_value=0.0, value=float(f["annual_tax"]), step=100.0)
        f["annual_insurance"] = c1.number_input("Annual Insurance", min_value=0.0, value=float(f["annual_insurance"]), step=100.0)
        f["monthly_hoa"] = c2.number_input("Monthly HOA", min_value=0.0, value=float(f["monthly_hoa"]), step=10.0)

        st.subheader("Borrower")
        c1, c2 = st.columns(2)
        f["credit_score"] = int(c1.number_input("Credit Score (0 if none)", min_value=0, max_value=900, value=int(f["credit_score"])))
        f["is_foreign_national"] = c2.checkbox("Foreign National", value=f["is_foreign_national"])
        f["liquidity"] = c1.number_input(
            "Liquid Reserves (leave blank if undisclosed)", min_value=0.0, value=f["liquidity"], step=1000.0
        )
        f["is_first_time_investor"] = c2.checkbox("First-Time Investor", value=f["is_first_time_investor"])

        submitted = st.form_submit_button("Get My Quote")

    if not submitted:
        return None
    if not f["property_state"]:
        st.error("State is required.")
        return None
    try:
        return scenario_from_form(f)
    except InvalidScenarioError as exc:
        st.error(f"Invalid scenario. Check the highlighted values and try again. ({exc})")
        return None
