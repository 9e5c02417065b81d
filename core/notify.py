"""Forward a completed quote to the quote desk."""
from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

import sendgrid
from pydantic import BaseModel, Field
from sendgrid.helpers.mail import Mail

from core.config import Settings
from domus.models import ScenarioInput, UnderwritingResult

logger = logging.getLogger(__name__)

# (subject, flat fields) -> None; raise on failure
Sender = Callable[[str, Dict[str, str]], None]


class ContactInfo(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    phone: str = ""


def _fmt(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, float):
        return f"{value:.4f}".rstrip("0").rstrip(".")
    return str(getattr(value, "value", value))


def flatten_quote(
    scenario: ScenarioInput, result: UnderwritingResult, contact: Optional[ContactInfo] = None
) -> Dict[str, str]:
    """Flat string key/value view of a quote for transmission."""
    quote = result.quote
    fields = {
        "band": result.band,
        "qualified": result.qualified,
        "dscr": round(result.dscr, 4),
        "ltv": round(result.ltv, 4),
        "loan_amount": round(result.loan_amount, 2),
        "total_monthly_payment": round(result.total_monthly_payment, 2),
        "monthly_pi": round(result.metrics.monthly_pi, 2),
        "benchmark_rate": result.benchmark_rate,
        "reserve_months": result.reserve.months,
        "required_reserves": round(result.reserve.required, 2),
        "reserve_shortfall": round(result.reserve.shortfall, 2),
        "estimated_cash_out": None if result.estimated_cash_out is None else round(result.estimated_cash_out, 2),
        "reasoning": result.reasoning,
        "quote_offered": quote.is_offered,
        "manual_rate_review": quote.requires_manual_rate_review,
        "final_rate": "Pending Review" if quote.requires_manual_rate_review else quote.final_rate,
        "transaction_type": quote.transaction_type,
        "credit_tier": quote.credit_tier,
        "ltv_bracket": quote.ltv_label,
        "total_adjustment": quote.total_adjustment,
        "rate_sheet_version": quote.rate_sheet_version,
        "property_state": scenario.property_state,
        "zip_code": scenario.zip_code,
        "loan_purpose": scenario.loan_purpose,
        "asset_type": scenario.asset_type,
        "as_is_value": scenario.as_is_value,
        "monthly_rent": scenario.monthly_rent,
    }
    for dim, adj in quote.adjustments.items():
        fields["adj_" + dim.lower().replace(" ", "_")] = adj
    if contact is not None:
        fields.update(contact_name=contact.name, contact_email=contact.email, contact_phone=contact.phone)
    return {k: _fmt(v) for k, v in fields.items()}


class SendGridSender:
    def __init__(self, api_key: str = None, to_email: str = None, from_email: str = None):
        self.api_key = api_key or Settings.SENDGRID_API_KEY
        self.to_email = to_email or Settings.QUOTE_DESK_EMAIL
        self.from_email = from_email or Settings.QUOTE_FROM_EMAIL

    def __call__(self, subject: str, fields: Dict[str, str]) -> None:
        body = "\n".join(f"{k}: {v}" for k, v in fields.items())
        sg = sendgrid.SendGridAPIClient(self.api_key)
        sg.send(
            Mail(
                from_email=self.from_email,
                to_emails=self.to_email,
                subject=subject,
                plain_text_content=body,
            )
        )


def dispatch_quote(
    scenario: ScenarioInput,
    result: UnderwritingResult,
    contact: ContactInfo,
    sender: Optional[Sender] = None,
) -> bool:
    """Send the quote to the desk; returns ``False`` on failure without raising."""
    fields = flatten_quote(scenario, result, contact)
    subject = f"DSCR Soft Quote: {contact.name} ({result.band.value}) ${result.loan_amount:,.0f}"
    sender = sender or SendGridSender()
    try:
        sender(subject, fields)
    except Exception:
        logger.exception("quote dispatch failed for %s", contact.email)
        return False
    logger.info("quote dispatched for %s", contact.email)
    return True
