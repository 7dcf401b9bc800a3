from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from mediabill.constants import PRODUCTION_CHANNELS
from mediabill.models.burst import Burst, Channel, LineItem
from mediabill.models.rates import AdServingRates
from mediabill.models.schedule import MonthBucket, ScheduleLineItem, ScheduleMonth, Schedules
from mediabill.services.allocator import allocate, split_media_and_fee
from mediabill.services.lattice import build_month_lattice
from mediabill.services.proration import distribute, prorate

logger = logging.getLogger(__name__)


class ScheduleService:
    def compute_schedules(
        self,
        bursts: list[Burst],
        campaign_start: date | None,
        campaign_end: date | None,
        rates: AdServingRates | None = None,
    ) -> Schedules:
        rates = rates or AdServingRates()
        buckets = build_month_lattice(campaign_start, campaign_end)

        billing = {b.key: ScheduleMonth(month_year=b.key) for b in buckets}
        delivery = {b.key: ScheduleMonth(month_year=b.key) for b in buckets}

        skipped = 0
        for burst in bursts:
            allocations = allocate(burst, buckets, rates)
            if not allocations:
                skipped += 1
                continue
            for alloc in allocations:
                bill_month = billing[alloc.month_year]
                deliv_month = delivery[alloc.month_year]
                if alloc.channel not in PRODUCTION_CHANNELS:
                    bill_month.media_costs[alloc.channel] += alloc.billing_media
                    deliv_month.media_costs[alloc.channel] += alloc.delivery_media
                bill_month.production_total += alloc.billing_production
                deliv_month.production_total += alloc.delivery_production
                bill_month.fee_total += alloc.fee
                deliv_month.fee_total += alloc.fee
                bill_month.ad_serving_total += alloc.ad_serving
                deliv_month.ad_serving_total += alloc.ad_serving

        for month in (*billing.values(), *delivery.values()):
            month.recalculate()

        schedules = Schedules(billing=list(billing.values()), delivery=list(delivery.values()), buckets=buckets)
        logger.info(
            "Computed schedules: months=%d bursts=%d skipped=%d billing_total=%s delivery_total=%s",
            len(buckets),
            len(bursts),
            skipped,
            schedules.billing_total,
            schedules.delivery_total,
        )
        return schedules

    def compute_for_line_items(
        self,
        line_items: list[LineItem],
        campaign_start: date | None,
        campaign_end: date | None,
        rates: AdServingRates | None = None,
    ) -> Schedules:
        bursts = [burst for item in line_items for burst in item.bursts]
        return self.compute_schedules(bursts, campaign_start, campaign_end, rates)

    def build_line_item_breakdown(
        self, line_items: list[LineItem], buckets: list[MonthBucket]
    ) -> dict[Channel, list[ScheduleLineItem]]:
        """Billing-mode media per line item per month, for manual editing and schedule documents."""
        keys = [b.key for b in buckets]
        breakdown: dict[Channel, list[ScheduleLineItem]] = {}
        for item in line_items:
            monthly = {key: Decimal(0) for key in keys}
            for burst in item.bursts:
                if burst.client_pays_for_media:
                    continue
                net_media, _ = split_media_and_fee(burst)
                for month_year, fraction in distribute(burst, buckets).items():
                    monthly[month_year] += prorate(net_media, fraction)
            row = ScheduleLineItem(
                line_item_id=item.id,
                header1=item.header1,
                header2=item.header2,
                monthly_amounts=monthly,
            )
            row.recalculate()
            breakdown.setdefault(item.channel, []).append(row)
        logger.debug("Built line item breakdown for %d line items", len(line_items))
        return breakdown
