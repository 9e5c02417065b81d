"""Narrative analysis boundary for an external text-generation service.

The engine's numbers are handed to ``generator`` as a prompt; the service's
JSON reply is parsed into :class:`NarrativeAnalysis`.  The narrative is
read-only commentary and never feeds back into qualification.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from openai import OpenAI
from pydantic import BaseModel, Field, ValidationError

from core.config import Settings
from core.presets import BENCHMARK_RATE_PCT
from domus.models import ScenarioInput, UnderwritingResult

logger = logging.getLogger(__name__)

# Takes a prompt, returns the service's raw JSON text.
TextGenerator = Callable[[str], str]


class NarrativeAnalysis(BaseModel):
    narrative_summary: str
    whats_working: List[str] = Field(default_factory=list)
    red_flags: List[str] = Field(default_factory=list)
    deep_dive_areas: List[str] = Field(default_factory=list)
    improvement_checklist: List[str] = Field(default_factory=list)


def declined_analysis() -> NarrativeAnalysis:
    return NarrativeAnalysis(
        narrative_summary=(
            "The current scenario does not meet the necessary criteria for our DSCR programs. "
            "Review the decline reasons for specific details."
        ),
        improvement_checklist=["Adjust leverage or property occupancy status and re-run."],
    )


def default_analysis() -> NarrativeAnalysis:
    return NarrativeAnalysis(
        narrative_summary=(
            "Quantitative metrics are being reviewed against local market conditions. "
            f"Calculations assume a {BENCHMARK_RATE_PCT:.2f}% baseline rate; submit for final pricing."
        ),
        whats_working=["Asset type aligns with current portfolio targets"],
        red_flags=["Valuation consistency must be verified"],
        deep_dive_areas=["Local market vacancy rates"],
        improvement_checklist=["Provide full entity documents"],
    )


def build_narrative_prompt(scenario: ScenarioInput, result: UnderwritingResult) -> str:
    """Prompt for the narrative service, limited to the read-only engine outputs."""
    rate = f"{result.benchmark_rate:.2f}%"
    return f"""
Persona: Senior Credit Underwriter. Tone: professional, decisive, objective.

Task: Analyze this DSCR loan request for the property at {scenario.zip_code or 'N/A'}, {scenario.property_state}.
- Do NOT recite program rules or LTV matrices.
- State that DSCR and payment figures use a baseline {rate} interest rate for analysis.
- State that the borrower must submit the soft quote form to unlock the actual rate.
- Do NOT mention borrower liquidity or cash reserves.
- If DSCR is above 1.50x, flag that the appraisal may return a lower market rent.

DEAL DATA:
- Loan Amount: ${result.loan_amount:,.0f}
- LTV: {result.ltv * 100:.1f}%
- Asset: {scenario.asset_type.value}
- Purpose: {scenario.loan_purpose.value}
- Band: {result.band.value}
- DSCR: {result.dscr:.2f}x (assumed @ {rate})
- Monthly Payment (PITIA @ {rate}): ${result.total_monthly_payment:,.2f}
- STR Deal: {'Yes' if scenario.is_short_term_rental else 'No'}

Reply with JSON only, keys: narrative_summary, whats_working, red_flags,
deep_dive_areas, improvement_checklist.
""".strip()


class OpenAIGenerator:
    """Chat-completions client that returns the raw JSON reply for a prompt."""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", client=None):
        self.model = model
        self.client = client or OpenAI(api_key=api_key)

    def __call__(self, prompt: str) -> str:
        reply = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            response_format={"type": "json_object"},
            temperature=0.2,
        )
        return reply.choices[0].message.content or ""


def narrative_generator() -> Optional[TextGenerator]:
    """Configured narrative service, or ``None`` when no API key is set."""
    if not Settings.OPENAI_API_KEY:
        return None
    return OpenAIGenerator(Settings.OPENAI_API_KEY, Settings.NARRATIVE_MODEL)


def generate_analysis(
    scenario: ScenarioInput,
    result: UnderwritingResult,
    generator: Optional[TextGenerator] = None,
) -> NarrativeAnalysis:
    """Narrative for ``result``; falls back to a fixed analysis when the service is unavailable."""
    if not result.qualified:
        return declined_analysis()
    if generator is None:
        return default_analysis()
    try:
        reply = generator(build_narrative_prompt(scenario, result))
        return NarrativeAnalysis.model_validate_json(reply)
    except ValidationError as exc:
        logger.warning("narrative reply did not match schema: %s", exc.error_count())
    except Exception:
        logger.exception("narrative generation failed")
    return default_analysis()
