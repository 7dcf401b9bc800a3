from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import BaseModel

from mediabill.models.rates import AdServingRates
from mediabill.models.snapshot import SnapshotKey


class Campaign(BaseModel):
    name: str = ""
    start: date | None = None
    end: date | None = None
    budget: Decimal = Decimal(0)
    plan_identity: str = ""

    @property
    def snapshot_key(self) -> SnapshotKey:
        return SnapshotKey(campaign_start=self.start, campaign_end=self.end, plan_identity=self.plan_identity)


class Plan(BaseModel):
    campaign: Campaign
    rates: AdServingRates = AdServingRates()
    fees: dict[str, Decimal] = {}
    line_items: dict[str, Any] = {}  # channel key -> raw line item records
