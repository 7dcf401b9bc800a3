from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from mediabill.constants import MEDIA_CHANNELS
from mediabill.models.burst import Channel


def _empty_media_costs() -> dict[Channel, Decimal]:
    return {channel: Decimal(0) for channel in MEDIA_CHANNELS}


class MonthBucket(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str  # 'March 2025'
    start: date
    end: date


class ScheduleLineItem(BaseModel):
    line_item_id: str
    header1: str = ""
    header2: str = ""
    monthly_amounts: dict[str, Decimal] = {}
    total_amount: Decimal = Decimal(0)

    def recalculate(self) -> None:
        self.total_amount = sum(self.monthly_amounts.values(), Decimal(0))


class ScheduleMonth(BaseModel):
    month_year: str
    media_costs: dict[Channel, Decimal] = Field(default_factory=_empty_media_costs)
    media_total: Decimal = Decimal(0)
    fee_total: Decimal = Decimal(0)
    ad_serving_total: Decimal = Decimal(0)
    production_total: Decimal = Decimal(0)
    total_amount: Decimal = Decimal(0)
    line_items: dict[Channel, list[ScheduleLineItem]] | None = None

    def recalculate(self) -> None:
        """Recompute media_total and total_amount from the month's own cells."""
        self.media_total = sum(self.media_costs.values(), Decimal(0))
        self.total_amount = self.media_total + self.fee_total + self.ad_serving_total + self.production_total


def grand_total(months: list[ScheduleMonth]) -> Decimal:
    return sum((m.total_amount for m in months), Decimal(0))


class Schedules(BaseModel):
    billing: list[ScheduleMonth] = []
    delivery: list[ScheduleMonth] = []
    buckets: list[MonthBucket] = []

    @property
    def billing_total(self) -> Decimal:
        return grand_total(self.billing)

    @property
    def delivery_total(self) -> Decimal:
        return grand_total(self.delivery)
