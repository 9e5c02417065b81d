from __future__ import annotations
from reportlab.lib.pagesizes import LETTER
from reportlab.lib import colors
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from reportlab.lib.styles import getSampleStyleSheet

from core.checklist import build_document_checklist
from core.presets import DISCLAIMER
from core.pricing import breakdown_frame
from domus.models import ScenarioInput, UnderwritingResult

GRID_STYLE = TableStyle([('BACKGROUND',(0,0),(-1,0), colors.lightgrey),('BOX',(0,0),(-1,-1),1,colors.black),('INNERGRID',(0,0),(-1,-1),0.5,colors.grey)])


def _rate_text(result: UnderwritingResult) -> str:
    q = result.quote
    if q.requires_manual_rate_review:
        return "Pending Review"
    if not q.is_offered:
        return "Not Offered"
    return f"{q.final_rate:.3f}%"


def quote_summary(scenario: ScenarioInput, result: UnderwritingResult) -> dict:
    """Deal snapshot and totals shown at the top of the quote PDF."""
    snapshot = {
        "Purpose": scenario.loan_purpose.value + (" (Cash-Out)" if scenario.is_cash_out_refinance else ""),
        "Property": f"{scenario.asset_type.value}, {scenario.property_state.upper()} {scenario.zip_code}".strip(),
        "Value": f"${scenario.valuation:,.0f}",
        "Monthly Rent": f"${scenario.monthly_rent:,.2f}",
        "Prepayment Penalty": scenario.prepayment_penalty.value,
    }
    totals = {
        "Result": result.band.value,
        "Loan Amount": f"${result.loan_amount:,.0f}",
        "LTV": f"{result.ltv*100:.2f}%",
        "DSCR": f"{result.dscr:.2f}x",
        f"PITIA @ {result.benchmark_rate:.2f}%": f"${result.total_monthly_payment:,.2f}",
        "Illustrative P&I (30yr)": f"${result.metrics.monthly_pi:,.2f}",
        "Reserves Required": f"${result.reserve.required:,.0f} ({result.reserve.months} mo)",
        "Quoted Rate": _rate_text(result),
    }
    if result.estimated_cash_out is not None:
        totals["Est. Cash Out"] = f"${result.estimated_cash_out:,.0f}"
    return {"deal_snapshot": snapshot, "totals": totals}


def build_quote_pdf(out_path: str, scenario: ScenarioInput, result: UnderwritingResult, branding: dict = None):
    branding = branding or {}
    styles = getSampleStyleSheet()
    doc = SimpleDocTemplate(out_path, pagesize=LETTER, leftMargin=36, rightMargin=36, topMargin=36, bottomMargin=36)
    story = []
    title = branding.get("title","DSCR Soft Quote")
    story += [Paragraph(f"<b>{title}</b>", styles['Title']), Spacer(1,6)]
    if branding.get("contact"): story.append(Paragraph(f"Contact: {branding['contact']}", styles['Normal']))
    story += [Spacer(1, 12)]
    summary = quote_summary(scenario, result)
    for heading in ("deal_snapshot", "totals"):
        rows = [[k, f"{v}"] for k,v in summary[heading].items()]
        t = Table([[heading.replace("_"," ").title(),""]] + rows, hAlign='LEFT', colWidths=[200, 320])
        t.setStyle(GRID_STYLE)
        story += [t, Spacer(1, 12)]
    if result.quote.is_offered and not result.quote.requires_manual_rate_review:
        df = breakdown_frame(result.quote)
        rows = [list(df.columns)] + [[str(v) for v in r] for r in df.itertuples(index=False)]
        t = Table(rows, hAlign='LEFT')
        t.setStyle(GRID_STYLE)
        story += [Paragraph("<b>Pricing Breakdown</b>", styles['Heading3']), Spacer(1,6), t, Spacer(1,12)]
    findings = result.verdict.failures + result.verdict.warnings
    if findings:
        w_rows = [["Code","Severity","Message"]]+[[r.code, r.severity, r.message] for r in findings]
        t = Table(w_rows, hAlign='LEFT')
        t.setStyle(GRID_STYLE)
        story += [Paragraph("<b>Findings</b>", styles['Heading3']), Spacer(1,6), t, Spacer(1,12)]
    checklist = build_document_checklist(scenario)
    if result.qualified and checklist:
        rows = [["Required Document"]]+[[c] for c in checklist]
        t = Table(rows, hAlign='LEFT', colWidths=[520])
        t.setStyle(GRID_STYLE)
        story += [Paragraph("<b>Documentation Checklist</b>", styles['Heading3']), Spacer(1,6), t, Spacer(1,12)]
    story += [Spacer(1, 12), Paragraph(f"<font size=8>{DISCLAIMER}</font>", styles['Normal'])]
    doc.build(story)
