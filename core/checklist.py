"""Document checklist helpers."""
from __future__ import annotations
from typing import Dict, List

from domus.models import LoanPurpose, ScenarioInput

GENERAL_DOCS: List[str] = [
    "Government Issued Photo ID",
    "LLC Entity Documents",
]

# Mapping of loan purpose to the transaction document
DOCS_BY_PURPOSE: Dict[LoanPurpose, List[str]] = {
    LoanPurpose.PURCHASE: ["Fully Executed Purchase Contract"],
    LoanPurpose.REFI: ["Current Mortgage Payoff Statement"],
}


def _docs_for_income(scenario: ScenarioInput) -> List[str]:
    if scenario.is_short_term_rental:
        return ["12-Month STR Booking History"]
    if scenario.is_multi_unit:
        return ["Rent Roll"]
    return ["Lease Agreement"]


def build_document_checklist(scenario: ScenarioInput) -> List[str]:
    """Return a de-duplicated list of required documents."""
    docs: List[str] = []
    for doc in (
        GENERAL_DOCS
        + DOCS_BY_PURPOSE.get(scenario.loan_purpose, [])
        + ["2 Most Recent Bank Statements (Full)"]
        + _docs_for_income(scenario)
    ):
        if doc not in docs:
            docs.append(doc)
    if scenario.is_foreign_national:
        docs.append("Valid Passport and Visa")
    return docs
