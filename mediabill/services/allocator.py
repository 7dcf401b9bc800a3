from __future__ import annotations

import logging
from decimal import Decimal

from pydantic import BaseModel

from mediabill.constants import AD_SERVING_RATE_GROUPS, AUDIO_CHANNELS, PER_THOUSAND_BUY_TYPES, PRODUCTION_CHANNELS
from mediabill.models.burst import Burst, BuyType, Channel
from mediabill.models.rates import AdServingRates
from mediabill.models.schedule import MonthBucket
from mediabill.services.proration import distribute, prorate

logger = logging.getLogger(__name__)

HUNDRED = Decimal(100)
THOUSAND = Decimal(1000)


class MonthAllocation(BaseModel):
    month_year: str
    channel: Channel
    billing_media: Decimal = Decimal(0)
    delivery_media: Decimal = Decimal(0)
    fee: Decimal = Decimal(0)
    ad_serving: Decimal = Decimal(0)
    billing_production: Decimal = Decimal(0)
    delivery_production: Decimal = Decimal(0)


def split_media_and_fee(burst: Burst) -> tuple[Decimal, Decimal]:
    """Return (net media, fee) for the whole burst.

    An explicit fee percentage wins over a pre-split fee amount.
    """
    amount = burst.media_amount
    if burst.fee_percentage is not None:
        pct = burst.fee_percentage
        if burst.budget_includes_fees:
            net = amount * (HUNDRED - pct) / HUNDRED
            return net, amount - net
        return amount, amount * pct / HUNDRED

    if burst.fee_amount is not None:
        if burst.budget_includes_fees:
            return amount - burst.fee_amount, burst.fee_amount
        return amount, burst.fee_amount

    return amount, Decimal(0)


def ad_serving_rate(burst: Burst, rates: AdServingRates) -> Decimal:
    if burst.channel == Channel.DIGI_AUDIO and burst.buy_type in (BuyType.CPM, BuyType.BONUS):
        return rates.audio
    group = AD_SERVING_RATE_GROUPS.get(burst.channel)
    if group is None:
        logger.debug("No ad-serving rate for channel %s, using 0", burst.channel.value)
    return rates.rate_for_group(group)


def is_per_thousand(burst: Burst) -> bool:
    if burst.buy_type in PER_THOUSAND_BUY_TYPES:
        return True
    return burst.buy_type == BuyType.BONUS and burst.channel in AUDIO_CHANNELS


def ad_serving_cost(burst: Burst, deliverables: Decimal, rates: AdServingRates) -> Decimal:
    if burst.no_adserving:
        return Decimal(0)
    rate = ad_serving_rate(burst, rates)
    if is_per_thousand(burst):
        return deliverables / THOUSAND * rate
    return deliverables * rate


def allocate(burst: Burst, buckets: list[MonthBucket], rates: AdServingRates) -> list[MonthAllocation]:
    """Split one burst into per-month media, fee, ad-serving and production shares."""
    fractions = distribute(burst, buckets)
    if not fractions:
        return []

    net_media, fee = split_media_and_fee(burst)
    is_production = burst.channel in PRODUCTION_CHANNELS

    allocations: list[MonthAllocation] = []
    for month_year, fraction in fractions.items():
        delivery_share = prorate(net_media, fraction)
        billing_share = Decimal(0) if burst.client_pays_for_media else delivery_share
        allocation = MonthAllocation(
            month_year=month_year,
            channel=burst.channel,
            fee=prorate(fee, fraction),
            ad_serving=ad_serving_cost(burst, prorate(burst.deliverables, fraction), rates),
        )
        if is_production:
            allocation.billing_production = billing_share
            allocation.delivery_production = delivery_share
        else:
            allocation.billing_media = billing_share
            allocation.delivery_media = delivery_share
        allocations.append(allocation)

    logger.debug(
        "Allocated burst of line item %r (%s) across %d months",
        burst.line_item_id,
        burst.channel.value,
        len(allocations),
    )
    return allocations
