"""Versioned pricing matrices and the process-wide active rate sheet.

A :class:`RateSheet` is never mutated once built.  Reloading a pricing sheet
builds a new instance and swaps the module reference in one step, so an
evaluation that already holds a sheet keeps pricing against it.
"""
from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Annotated, Dict, List, Optional, Tuple

from pydantic import AfterValidator, BaseModel, ConfigDict, PlainSerializer, ValidationError

from core import presets
from core.config import Settings
from domus.models import Adjustment, RatePoint, freeze_mapping, thaw_mapping

logger = logging.getLogger(__name__)

Grid = Dict[str, Dict[str, Adjustment]]
# Grids are read-only once validated; a reload builds a new sheet.
GridSet = Annotated[
    Dict[str, Grid],
    AfterValidator(freeze_mapping),
    PlainSerializer(thaw_mapping, return_type=Dict[str, Grid]),
]


class RateSheetError(ValueError):
    pass


class RateSheet(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: str
    transaction_adjustments: GridSet
    other_adjustments: GridSet
    rate_table: Tuple[RatePoint, ...]
    price_margin: float = presets.PRICE_MARGIN

    def transaction_cell(self, transaction_type: str, credit_tier: str, ltv_label: str) -> Adjustment:
        """Signed point adjustment, or ``"N/O"`` for a missing or not-offered cell."""
        row = self.transaction_adjustments.get(transaction_type, {}).get(credit_tier, {})
        return row.get(ltv_label, presets.NOT_OFFERED)

    def other_cell(self, dimension: str, tier: str, ltv_label: str) -> Adjustment:
        row = self.other_adjustments.get(dimension, {}).get(tier, {})
        return row.get(ltv_label, presets.NOT_OFFERED)


def default_rate_sheet() -> RateSheet:
    return RateSheet(
        version=presets.RATE_SHEET_VERSION,
        transaction_adjustments=presets.TRANSACTION_ADJUSTMENTS,
        other_adjustments=presets.OTHER_ADJUSTMENTS,
        rate_table=[RatePoint(rate=r, price=p) for r, p in presets.RATE_TABLE],
        price_margin=presets.PRICE_MARGIN,
    )


def load_rate_sheet(path) -> RateSheet:
    """Read a JSON rate sheet exported by :meth:`RateSheet.model_dump_json`."""
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        sheet = RateSheet.model_validate(data)
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        raise RateSheetError(f"cannot load rate sheet {path}: {exc}") from exc
    if not sheet.rate_table:
        raise RateSheetError(f"rate sheet {path} has an empty rate table")
    return sheet


_lock = threading.Lock()
_active: Optional[RateSheet] = None


def publish_rate_sheet(sheet: RateSheet) -> RateSheet:
    """Make ``sheet`` the active sheet; returns the sheet it replaced."""
    global _active
    with _lock:
        previous, _active = _active, sheet
    logger.info("published rate sheet %s", sheet.version)
    return previous


def active_rate_sheet() -> RateSheet:
    """Current rate sheet, loaded on first use from ``DOMUS_RATE_SHEET_PATH`` or the defaults."""
    global _active
    sheet = _active
    if sheet is not None:
        return sheet
    with _lock:
        if _active is None:
            if Settings.RATE_SHEET_PATH:
                _active = load_rate_sheet(Settings.RATE_SHEET_PATH)
            else:
                _active = default_rate_sheet()
            logger.info("loaded rate sheet %s", _active.version)
        return _active


def rate_table_rows(sheet: RateSheet) -> List[Tuple[float, float]]:
    return [(p.rate, p.price) for p in sheet.rate_table]
