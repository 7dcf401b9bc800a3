from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel

from mediabill.models.burst import Channel


class PartialInvoiceState(BaseModel):
    media_totals: dict[Channel, Decimal] = {}
    gross_media: Decimal = Decimal(0)
    assembled_fee: Decimal = Decimal(0)
    ad_serving: Decimal = Decimal(0)
    production: Decimal = Decimal(0)
    selected_months: list[str] = []
    enabled_channels: dict[Channel, bool] = {}

    @property
    def total(self) -> Decimal:
        return self.gross_media + self.assembled_fee + self.ad_serving + self.production

    def recalculate_gross_media(self) -> None:
        self.gross_media = sum(self.media_totals.values(), Decimal(0))
