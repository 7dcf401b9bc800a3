from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel


class AdServingRates(BaseModel):
    impression: Decimal = Decimal(0)
    video: Decimal = Decimal(0)
    display: Decimal = Decimal(0)
    audio: Decimal = Decimal(0)

    def rate_for_group(self, group: str | None) -> Decimal:
        if group is None:
            return Decimal(0)
        return getattr(self, group, Decimal(0))
