from __future__ import annotations

import re
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict

from mediabill.models.schedule import ScheduleMonth


class SnapshotKey(BaseModel):
    model_config = ConfigDict(frozen=True)

    campaign_start: date | None
    campaign_end: date | None
    plan_identity: str = ""

    @property
    def slug(self) -> str:
        """Filesystem-safe rendering of the key, e.g. '2025-01-01_2025-03-31_MBA-42-v2'."""
        plan = re.sub(r"[^A-Za-z0-9_-]+", "-", self.plan_identity).strip("-") or "plan"
        start = self.campaign_start.isoformat() if self.campaign_start else "none"
        end = self.campaign_end.isoformat() if self.campaign_end else "none"
        return f"{start}_{end}_{plan}"


class DeliverySnapshot(BaseModel):
    key: SnapshotKey
    months: list[ScheduleMonth] = []
    captured_at: datetime | None = None
