DISCLAIMER = ("This tool produces an advisory DSCR loan estimate only. Figures assume a 7.00% benchmark rate for "
"qualification; the quoted rate comes from the current pricing matrix and is subject to appraisal, credit review, "
"title and underwriter discretion. Nothing here is a commitment to lend or a binding offer of terms.")

# Qualification rate used for DSCR and reserves regardless of the quoted rate.
BENCHMARK_RATE_PCT = 7.0
AMORT_TERM_YEARS = 30

EXCLUDED_STATES = ("AK", "ID", "CA", "MN", "MT", "NV", "ND", "OR", "SD", "VT")
MIN_CREDIT_SCORE = 660
FOREIGN_NATIONAL_PROXY_SCORE = 700
DSCR_FLOOR = 0.75
GREEN_MIN_DSCR = 1.10

# Max LTV by minimum credit score, highest tier first.
LTV_TIERS = ((780, 0.80), (700, 0.75), (680, 0.70), (0, 0.65))
MAX_LTV = 0.80

CASH_OUT_LTV_CAP = 0.75
CASH_OUT_LTV_CAP_TIGHT = 0.70
CASH_OUT_DOLLAR_CAP = 500000.0
CASH_OUT_DOLLAR_CAP_HIGH = 1000000.0
CASH_OUT_HIGH_CAP_MAX_LTV = 0.65
RATE_TERM_COST_FACTOR = 0.98
CLOSING_COST_PCT = 0.02

RESERVE_MONTHS = 6
RESERVE_MONTHS_ELEVATED = 12
RESERVE_LARGE_LOAN = 2000000.0

PRICE_MARGIN = 1.5
PAR_PRICE = 100.0
NOT_OFFERED = "N/O"

RATE_SHEET_VERSION = "2024-11-standard"

LTV_BRACKETS = ("LTV_50", "LTV_55", "LTV_60", "LTV_65", "LTV_70", "LTV_75", "LTV_80")


def _flat(value):
    return {b: value for b in LTV_BRACKETS}


_PURCHASE_GRID = {
    "780+": {"LTV_50": 1, "LTV_55": 1, "LTV_60": 0.75, "LTV_65": 0.75, "LTV_70": 0.25, "LTV_75": 0, "LTV_80": -0.75},
    "760-779": {"LTV_50": 0.75, "LTV_55": 0.75, "LTV_60": 0.5, "LTV_65": 0.25, "LTV_70": 0, "LTV_75": -0.5, "LTV_80": -1.25},
    "740-759": {"LTV_50": 0.75, "LTV_55": 0.75, "LTV_60": 0.25, "LTV_65": 0, "LTV_70": -0.25, "LTV_75": -1, "LTV_80": -1.75},
    "720-739": {"LTV_50": 0.5, "LTV_55": 0.5, "LTV_60": 0, "LTV_65": -0.25, "LTV_70": -0.75, "LTV_75": -1.5, "LTV_80": -2.5},
    "700-719": {"LTV_50": 0.25, "LTV_55": 0.25, "LTV_60": -0.25, "LTV_65": -0.75, "LTV_70": -1.25, "LTV_75": -2.25, "LTV_80": -3.25},
    "680-699": {"LTV_50": 0, "LTV_55": 0, "LTV_60": -0.5, "LTV_65": -1.25, "LTV_70": -1.75, "LTV_75": -2.75, "LTV_80": "N/O"},
    "660-679": {"LTV_50": -0.25, "LTV_55": -0.25, "LTV_60": -1, "LTV_65": -1.75, "LTV_70": -2.5, "LTV_75": "N/O", "LTV_80": "N/O"},
}

# Rate & Term shares the purchase grid except for the 80% column on mid-tier credit.
_RATE_TERM_GRID = {tier: dict(row) for tier, row in _PURCHASE_GRID.items()}
_RATE_TERM_GRID["740-759"]["LTV_80"] = -1.82
_RATE_TERM_GRID["720-739"]["LTV_80"] = -2.61
_RATE_TERM_GRID["700-719"]["LTV_80"] = -3.41

TRANSACTION_ADJUSTMENTS = {
    "Purchase": _PURCHASE_GRID,
    "Rate & Term": _RATE_TERM_GRID,
    # No 660-679 row: cash-out is not offered below 680.
    "Cash Out": {
        "780+": {"LTV_50": 0.75, "LTV_55": 0.75, "LTV_60": 0.5, "LTV_65": 0.25, "LTV_70": -0.5, "LTV_75": -1.5, "LTV_80": "N/O"},
        "760-779": {"LTV_50": 0.5, "LTV_55": 0.5, "LTV_60": 0.25, "LTV_65": -0.25, "LTV_70": -0.75, "LTV_75": -2, "LTV_80": "N/O"},
        "740-759": {"LTV_50": 0.5, "LTV_55": 0.5, "LTV_60": 0, "LTV_65": -0.5, "LTV_70": -1, "LTV_75": -2.5, "LTV_80": "N/O"},
        "720-739": {"LTV_50": 0.25, "LTV_55": 0.25, "LTV_60": -0.25, "LTV_65": -0.75, "LTV_70": -1.5, "LTV_75": -3, "LTV_80": "N/O"},
        "700-719": {"LTV_50": 0, "LTV_55": 0, "LTV_60": -0.5, "LTV_65": -1.25, "LTV_70": -2, "LTV_75": -3.75, "LTV_80": "N/O"},
        "680-699": {"LTV_50": -0.25, "LTV_55": -0.25, "LTV_60": -0.75, "LTV_65": -1.75, "LTV_70": -2.5, "LTV_75": "N/O", "LTV_80": "N/O"},
    },
}

OTHER_ADJUSTMENTS = {
    "Property_Type": {
        "Single Family / Condo / Townhome": _flat(0),
        "2 - 4 Unit": {"LTV_50": -0.5, "LTV_55": -0.5, "LTV_60": -0.75, "LTV_65": -1, "LTV_70": -1.25, "LTV_75": -1.5, "LTV_80": -2},
        "Short Term Rental": _flat(0),
        "Multi Family (up to 9)": {"LTV_50": -4.5, "LTV_55": -4.5, "LTV_60": -5, "LTV_65": -5.5, "LTV_70": -6, "LTV_75": -6.5, "LTV_80": "N/O"},
    },
    "Loan_Amount": {
        "<=$150,000": _flat(-1),
        "<=$1,000,000": _flat(-0.5),
        "<=$1,500,000": _flat(-0.5),
        "<=$2,000,000": _flat(-1.5),
        "<=$2,500,000": _flat(-1.5),
        "<=$3,000,000": _flat("N/O"),
    },
    "DSCR": {
        "< 1.15": {"LTV_50": 0, "LTV_55": 0, "LTV_60": -0.25, "LTV_65": -0.25, "LTV_70": -0.25, "LTV_75": -0.5, "LTV_80": -0.75},
        "> 1.15 <= 1.30": _flat(0),
        "> 1.30": _flat(0.25),
    },
    "Prepayment_Penalty": {
        "No Penalty": _flat(-2),
        "12 Months": _flat(-1.5),
        "24 Months": _flat(0),
        "36 Months": _flat(1),
        "48 Months": _flat(1),
        "60 Months": _flat(1.5),
    },
}

# (rate %, price), descending by rate.
RATE_TABLE = (
    (8.625, 107.9915), (8.5, 107.7398), (8.375, 107.4709), (8.25, 107.194),
    (8.125, 106.9092), (8.0, 106.595), (7.875, 106.2769), (7.75, 105.9293),
    (7.625, 105.5737), (7.5, 105.2072), (7.375, 104.8213), (7.25, 104.4051),
    (7.125, 103.9478), (7.0, 103.4705), (6.875, 102.9475), (6.75, 102.3999),
    (6.625, 101.8146), (6.5, 101.1988), (6.375, 100.5527), (6.25, 99.8761),
    (6.125, 99.1588), (6.0, 98.4211),
)
