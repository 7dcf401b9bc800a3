from __future__ import annotations

import logging
from decimal import Decimal

from mediabill.constants import MEDIA_CHANNELS
from mediabill.models.burst import Channel
from mediabill.models.override import ValidationResult
from mediabill.models.partial import PartialInvoiceState
from mediabill.models.schedule import ScheduleMonth
from mediabill.services.manual_override_service import validate_total

logger = logging.getLogger(__name__)

PARTIAL_FIELDS = ("assembled_fee", "ad_serving", "production")


class PartialInvoiceService:
    def compute(
        self,
        delivery_months: list[ScheduleMonth],
        selected_months: list[str],
        channels: list[Channel] | None = None,
        enabled: dict[Channel, bool] | None = None,
    ) -> PartialInvoiceState:
        """Headline totals of the delivery schedule for the chosen months and channels.

        No selected months means every month. Fee, ad-serving and production
        ignore the channel toggles.
        """
        channels = list(channels) if channels is not None else list(MEDIA_CHANNELS)
        enabled = dict(enabled or {})
        selected = self._select(delivery_months, selected_months)

        media_totals: dict[Channel, Decimal] = {}
        for channel in channels:
            if enabled.get(channel, True):
                media_totals[channel] = sum((m.media_costs.get(channel, Decimal(0)) for m in selected), Decimal(0))
            else:
                media_totals[channel] = Decimal(0)

        state = PartialInvoiceState(
            media_totals=media_totals,
            assembled_fee=sum((m.fee_total for m in selected), Decimal(0)),
            ad_serving=sum((m.ad_serving_total for m in selected), Decimal(0)),
            production=sum((m.production_total for m in selected), Decimal(0)),
            selected_months=list(selected_months),
            enabled_channels={channel: enabled.get(channel, True) for channel in channels},
        )
        state.recalculate_gross_media()
        logger.debug(
            "Partial invoice computed: months=%d channels=%d gross_media=%s",
            len(selected),
            len(channels),
            state.gross_media,
        )
        return state

    def toggle_channel(
        self,
        state: PartialInvoiceState,
        delivery_months: list[ScheduleMonth],
        channel: Channel,
        enabled: bool,
    ) -> PartialInvoiceState:
        if enabled:
            selected = self._select(delivery_months, state.selected_months)
            state.media_totals[channel] = sum((m.media_costs.get(channel, Decimal(0)) for m in selected), Decimal(0))
        else:
            state.media_totals[channel] = Decimal(0)
        state.enabled_channels[channel] = enabled
        state.recalculate_gross_media()
        logger.debug("Partial invoice channel %s enabled=%s", channel.value, enabled)
        return state

    def set_media_total(self, state: PartialInvoiceState, channel: Channel, value: Decimal) -> PartialInvoiceState:
        state.media_totals[channel] = Decimal(str(value))
        state.recalculate_gross_media()
        return state

    def set_field(self, state: PartialInvoiceState, field: str, value: Decimal) -> PartialInvoiceState:
        if field not in PARTIAL_FIELDS:
            raise ValueError(f"Unknown partial invoice field: {field}")
        setattr(state, field, Decimal(str(value)))
        return state

    def validate(self, state: PartialInvoiceState, campaign_budget: Decimal) -> ValidationResult:
        result = validate_total(state.total, campaign_budget)
        if not result.ok:
            logger.warning("Partial invoice does not match budget: %s", result.message)
        return result

    @staticmethod
    def _select(delivery_months: list[ScheduleMonth], selected_months: list[str]) -> list[ScheduleMonth]:
        if not selected_months:
            return list(delivery_months)
        wanted = set(selected_months)
        return [m for m in delivery_months if m.month_year in wanted]
