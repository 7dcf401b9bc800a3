from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel


class Channel(str, Enum):
    SEARCH = "search"
    SOCIAL_MEDIA = "socialMedia"
    TELEVISION = "television"
    RADIO = "radio"
    NEWSPAPER = "newspaper"
    MAGAZINES = "magazines"
    OOH = "ooh"
    CINEMA = "cinema"
    DIGI_DISPLAY = "digiDisplay"
    DIGI_AUDIO = "digiAudio"
    DIGI_VIDEO = "digiVideo"
    BVOD = "bvod"
    INTEGRATION = "integration"
    PROG_DISPLAY = "progDisplay"
    PROG_VIDEO = "progVideo"
    PROG_BVOD = "progBvod"
    PROG_AUDIO = "progAudio"
    PROG_OOH = "progOoh"
    INFLUENCERS = "influencers"
    PRODUCTION = "production"
    CONSULTING = "consulting"


class BuyType(str, Enum):
    STANDARD = "standard"
    CPM = "cpm"
    BONUS = "bonus"


class Burst(BaseModel):
    line_item_id: str = ""
    channel: Channel
    start_date: date | None = None
    end_date: date | None = None
    media_amount: Decimal = Decimal(0)
    fee_percentage: Decimal | None = None
    fee_amount: Decimal | None = None  # pre-split fee, used only without fee_percentage
    budget_includes_fees: bool = False
    client_pays_for_media: bool = False
    no_adserving: bool = False
    deliverables: Decimal = Decimal(0)
    buy_type: BuyType = BuyType.STANDARD

    @property
    def has_valid_dates(self) -> bool:
        if self.start_date is None or self.end_date is None:
            return False
        return self.start_date <= self.end_date


class LineItem(BaseModel):
    id: str
    channel: Channel
    header1: str = ""
    header2: str = ""
    bursts: list[Burst] = []
