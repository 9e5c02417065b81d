import os
import tempfile

import pandas as pd
import streamlit as st

from core.checklist import build_document_checklist
from core.integrations import generate_analysis
from core.notify import ContactInfo, dispatch_quote
from core.pdf_export import build_quote_pdf
from core.presets import DISCLAIMER
from core.pricing import breakdown_frame
from core.rate_sheet import active_rate_sheet, rate_table_rows
from domus.models import ScenarioInput, UnderwritingResult


def render_findings(result: UnderwritingResult):
    for r in result.verdict.failures:
        st.error(f"[{r.code}] {r.message}")
    for r in result.verdict.warnings:
        st.warning(f"[{r.code}] {r.message}")


def render_quote(result: UnderwritingResult):
    q = result.quote
    if q.requires_manual_rate_review:
        st.info("Foreign national without US credit: your rate will be set by a pricing specialist.")
        return
    if not q.is_offered:
        st.error("This configuration is not offered: " + ", ".join(q.not_offered_dimensions))
        return
    st.metric("Quoted Rate", f"{q.final_rate:.3f}%")
    with st.expander("Pricing Breakdown"):
        st.dataframe(breakdown_frame(q), use_container_width=True)
        table = pd.DataFrame(rate_table_rows(active_rate_sheet()), columns=["Rate %", "Price"])
        st.caption(f"Rate sheet {q.rate_sheet_version}")
        st.dataframe(table, use_container_width=True)


def render_contact_form(scenario: ScenarioInput, result: UnderwritingResult):
    with st.form("contact_form"):
        st.write("**Connect with a Specialist**")
        name = st.text_input("Full Name")
        email = st.text_input("Email Address")
        phone = st.text_input("Cell Phone")
        if st.form_submit_button("Send to Desk"):
            if not name or not email:
                st.error("Name and email are required.")
                return
            sent = dispatch_quote(scenario, result, ContactInfo(name=name, email=email, phone=phone))
            if sent:
                st.success(f"Deal sent to desk. We'll review your ${result.loan_amount:,.0f} scenario shortly.")
            else:
                st.warning("We couldn't send your scenario right now. Please try again later.")


def render_result(scenario: ScenarioInput, result: UnderwritingResult, generator=None):
    """Render the underwriting result, narrative, quote and next steps."""
    st.header("Underwriting Result")
    if not result.qualified:
        st.error("Declined")
        st.write(result.reasoning)
        render_contact_form(scenario, result)
        return

    cols = st.columns(4)
    cols[0].metric("Result", result.band.value)
    cols[1].metric("DSCR", f"{result.dscr:.2f}x")
    cols[2].metric("LTV", f"{result.ltv*100:.2f}%")
    cols[3].metric("Loan Amount", f"${result.loan_amount:,.0f}")
    cols = st.columns(4)
    cols[0].metric(f"PITIA @ {result.benchmark_rate:.2f}%", f"${result.total_monthly_payment:,.2f}")
    cols[1].metric("Interest Only", f"${result.metrics.monthly_interest:,.2f}")
    cols[2].metric("Reserves", f"${result.reserve.required:,.0f}", delta=f"{result.reserve.months} mo", delta_color="off")
    if result.estimated_cash_out is not None:
        cols[3].metric("Est. Cash Out", f"${result.estimated_cash_out:,.0f}")
    render_findings(result)

    analysis = generate_analysis(scenario, result, generator)
    st.write(analysis.narrative_summary)
    if generator is None:
        st.caption("Narrative service not configured; showing standard commentary.")
    c1, c2 = st.columns(2)
    with c1:
        st.write("**What's Working**")
        for item in analysis.whats_working:
            st.write(f"- {item}")
    with c2:
        st.write("**Red Flags**")
        for item in analysis.red_flags:
            st.write(f"- {item}")

    render_quote(result)

    st.write("**Documentation Checklist**")
    for doc in build_document_checklist(scenario):
        st.write(f"- {doc}")

    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "dscr_quote.pdf")
        build_quote_pdf(path, scenario, result)
        with open(path, "rb") as fh:
            st.download_button("Download Quote PDF", fh.read(), file_name="dscr_quote.pdf", mime="application/pdf")

    render_contact_form(scenario, result)
    st.caption(DISCLAIMER)
