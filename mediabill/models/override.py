from __future__ import annotations

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel

from mediabill.models.burst import Channel
from mediabill.models.schedule import ScheduleMonth

FEE_ROW = "fee"
AD_SERVING_ROW = "adServing"
PRODUCTION_ROW = "production"

COST_ROWS = (FEE_ROW, AD_SERVING_ROW, PRODUCTION_ROW)


def media_row(channel: Channel) -> str:
    return f"media:{channel.value}"


def line_item_row(channel: Channel, line_item_id: str) -> str:
    return f"lineItem:{channel.value}:{line_item_id}"


class BillingMode(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"


class ValidationResult(BaseModel):
    ok: bool
    total: Decimal
    budget: Decimal
    difference: Decimal  # total - budget
    message: str = ""


class ManualOverrideState(BaseModel):
    auto_schedule: list[ScheduleMonth] = []
    baseline: list[ScheduleMonth] = []
    months: list[ScheduleMonth] = []
    committed: list[ScheduleMonth] | None = None
    # row key -> month_year -> value before pre-bill was switched on
    prebill_snapshots: dict[str, dict[str, Decimal]] = {}

    def is_prebilled(self, row: str) -> bool:
        return row in self.prebill_snapshots


class BillingState(BaseModel):
    mode: BillingMode = BillingMode.AUTO
    auto_schedule: list[ScheduleMonth] = []
    manual: ManualOverrideState | None = None

    @property
    def current_schedule(self) -> list[ScheduleMonth]:
        if self.mode == BillingMode.MANUAL and self.manual is not None and self.manual.committed is not None:
            return self.manual.committed
        return self.auto_schedule


class BudgetMismatchError(ValueError):
    def __init__(self, result: ValidationResult) -> None:
        super().__init__(result.message)
        self.result = result

    @property
    def difference(self) -> Decimal:
        return self.result.difference
