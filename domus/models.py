from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer, model_validator

from core.presets import FOREIGN_NATIONAL_PROXY_SCORE

Adjustment = Union[float, Literal["N/O"]]


def freeze_mapping(value):
    """Read-only view of a (nested) mapping."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze_mapping(v) for k, v in value.items()})
    return value


def thaw_mapping(value):
    if isinstance(value, Mapping):
        return {k: thaw_mapping(v) for k, v in value.items()}
    return value


# Validated as a dict, stored read-only, serialized back to a plain dict.
FrozenDict = Annotated[
    Dict[str, Any],
    AfterValidator(freeze_mapping),
    PlainSerializer(thaw_mapping, return_type=Dict[str, Any]),
]


class AssetType(str, Enum):
    SINGLE = "Single Property"
    TWO_UNIT = "2 Units"
    THREE_UNIT = "3 Units"
    FOUR_UNIT = "4 Units"


class LoanPurpose(str, Enum):
    PURCHASE = "Purchase"
    REFI = "Refinance"


class PrepaymentPenalty(str, Enum):
    NONE = "No Penalty"
    MONTHS_12 = "12 Months"
    MONTHS_24 = "24 Months"
    MONTHS_36 = "36 Months"
    MONTHS_48 = "48 Months"
    MONTHS_60 = "60 Months"


class Band(str, Enum):
    GREEN = "Green"
    YELLOW = "Yellow"
    RED = "Red"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class ScenarioInput(_Frozen):
    """One submitted DSCR loan request.

    ``credit_score`` of ``0`` together with ``is_foreign_national`` is the
    deliberate "no domestic credit" signal, not missing data.
    """

    credit_score: int = Field(0, ge=0, le=900)
    property_state: str
    zip_code: str = ""
    is_rural: bool = False
    asset_type: AssetType = AssetType.SINGLE
    number_of_units: int = Field(1, ge=1, le=9)
    loan_purpose: LoanPurpose = LoanPurpose.PURCHASE
    is_cash_out: bool = False
    more_than_one_unit_vacant: bool = False
    purchase_price: Optional[float] = Field(None, ge=0)
    as_is_value: float = Field(gt=0)
    payoff_amount: float = Field(0.0, ge=0)
    monthly_rent: float = Field(ge=0)
    annual_tax: float = Field(0.0, ge=0)
    annual_insurance: float = Field(0.0, ge=0)
    monthly_hoa: float = Field(0.0, ge=0)
    liquidity: Optional[float] = Field(None, ge=0)
    is_short_term_rental: bool = False
    is_first_time_investor: bool = False
    is_foreign_national: bool = False
    prepayment_penalty: PrepaymentPenalty = PrepaymentPenalty.MONTHS_60

    @model_validator(mode="after")
    def _rate_term_needs_payoff(self):
        if self.is_rate_and_term and self.payoff_amount <= 0:
            raise ValueError("rate-and-term refinance requires a payoff amount")
        return self

    @property
    def monthly_tax(self) -> float:
        return self.annual_tax / 12

    @property
    def monthly_insurance(self) -> float:
        return self.annual_insurance / 12

    @property
    def is_multi_unit(self) -> bool:
        return self.asset_type != AssetType.SINGLE or self.number_of_units > 1

    @property
    def no_domestic_credit(self) -> bool:
        return self.is_foreign_national and not self.credit_score

    @property
    def effective_credit_score(self) -> int:
        if self.no_domestic_credit:
            return FOREIGN_NATIONAL_PROXY_SCORE
        return self.credit_score

    @property
    def is_cash_out_refinance(self) -> bool:
        return self.loan_purpose == LoanPurpose.REFI and self.is_cash_out

    @property
    def is_rate_and_term(self) -> bool:
        return self.loan_purpose == LoanPurpose.REFI and not self.is_cash_out

    @property
    def valuation(self) -> float:
        """Value the LTV is measured against."""
        if self.loan_purpose == LoanPurpose.PURCHASE and self.purchase_price:
            return self.purchase_price
        return self.as_is_value


class RuleResult(_Frozen):
    code: str
    severity: Literal["info", "warn", "critical"]
    message: str
    context: FrozenDict = Field(default_factory=dict, validate_default=True)


class EligibilityVerdict(_Frozen):
    failures: Tuple[RuleResult, ...] = ()
    warnings: Tuple[RuleResult, ...] = ()

    @property
    def eligible(self) -> bool:
        return not self.failures

    @property
    def messages(self) -> List[str]:
        return [r.message for r in self.failures + self.warnings]


class LeverageDecision(_Frozen):
    base_ltv: float
    ltv: float
    loan_amount: float
    cash_out_ltv_cap: Optional[float] = None
    dollar_cap: Optional[float] = None
    proceeds_capped: bool = False


class CashFlowMetrics(_Frozen):
    loan_amount: float
    ltv: float
    monthly_interest: float
    monthly_pi: float
    monthly_tax: float
    monthly_insurance: float
    monthly_hoa: float
    total_obligation: float
    dscr: float


class ReserveRequirement(_Frozen):
    months: Literal[6, 12]
    required: float
    liquidity: Optional[float] = None
    shortfall: float = 0.0

    @property
    def liquidity_declared(self) -> bool:
        return self.liquidity is not None


class RatePoint(_Frozen):
    rate: float
    price: float


class RateQuote(_Frozen):
    transaction_type: str
    ltv_label: str
    credit_tier: str
    property_type: str
    loan_tier: Optional[str] = None
    dscr_tier: Optional[str] = None
    prepayment_label: str
    transaction_adjustment: Optional[Adjustment] = None
    property_adjustment: Optional[Adjustment] = None
    loan_amount_adjustment: Optional[Adjustment] = None
    dscr_adjustment: Optional[Adjustment] = None
    prepayment_adjustment: Optional[Adjustment] = None
    total_adjustment: Optional[float] = None
    initial_price: Optional[float] = None
    first_match: Optional[RatePoint] = None
    shifted_price: Optional[float] = None
    second_match: Optional[RatePoint] = None
    final_rate: Optional[float] = None
    is_offered: bool
    requires_manual_rate_review: bool = False
    not_offered_dimensions: Tuple[str, ...] = ()
    rate_sheet_version: str = ""

    @property
    def adjustments(self) -> Dict[str, Optional[Adjustment]]:
        return {
            "Transaction": self.transaction_adjustment,
            "Property Type": self.property_adjustment,
            "Loan Amount": self.loan_amount_adjustment,
            "DSCR": self.dscr_adjustment,
            "Prepayment": self.prepayment_adjustment,
        }


class SensitivityAnalysis(_Frozen):
    base_dscr: float
    rate_for_dscr_1: Optional[float] = None
    ltv_for_dscr_1: Optional[float] = None


class UnderwritingResult(_Frozen):
    band: Band
    score: int
    qualified: bool
    dscr: float
    ltv: float
    loan_amount: float
    benchmark_rate: float
    metrics: CashFlowMetrics
    leverage: LeverageDecision
    reserve: ReserveRequirement
    verdict: EligibilityVerdict
    quote: RateQuote
    reasoning: str = ""
    estimated_cash_out: Optional[float] = None
    io_eligible: bool = False
    sensitivity: SensitivityAnalysis

    @property
    def total_monthly_payment(self) -> float:
        return self.metrics.total_obligation


class InvalidScenarioError(ValueError):
    """Raised for out-of-domain input that would produce a non-finite result."""
