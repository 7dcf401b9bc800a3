from __future__ import annotations

import logging
from decimal import Decimal

from mediabill.constants import MEDIA_CHANNELS, PRODUCTION_CHANNELS
from mediabill.models import format_money, round_money
from mediabill.models.burst import Channel, LineItem
from mediabill.models.override import (
    AD_SERVING_ROW,
    COST_ROWS,
    FEE_ROW,
    PRODUCTION_ROW,
    BillingMode,
    BillingState,
    BudgetMismatchError,
    ManualOverrideState,
    ValidationResult,
    line_item_row,
)
from mediabill.models.schedule import MonthBucket, ScheduleLineItem, ScheduleMonth, grand_total
from mediabill.services.schedule_service import ScheduleService
from mediabill.settings import settings

logger = logging.getLogger(__name__)


def _copy_months(months: list[ScheduleMonth]) -> list[ScheduleMonth]:
    return [m.model_copy(deep=True) for m in months]


def _parse_row(row: str) -> tuple[str, Channel | None, str | None]:
    """Split a row key into (kind, channel, line item id)."""
    if row in COST_ROWS:
        return row, None, None
    kind, _, rest = row.partition(":")
    if kind == "media" and rest:
        channel = Channel(rest)
        if channel not in MEDIA_CHANNELS:
            raise ValueError(f"Channel {rest} has no media row")
        return "media", channel, None
    if kind == "lineItem" and rest:
        channel_key, _, line_item_id = rest.partition(":")
        if line_item_id:
            return "lineItem", Channel(channel_key), line_item_id
    raise ValueError(f"Unknown schedule row: {row}")


def _find_line_item(month: ScheduleMonth, channel: Channel, line_item_id: str) -> ScheduleLineItem | None:
    for item in (month.line_items or {}).get(channel, []):
        if item.line_item_id == line_item_id:
            return item
    return None


def _breakdown_ids(months: list[ScheduleMonth], channel: Channel) -> list[str]:
    """Line item ids broken out for a channel, empty when the channel has no breakdown."""
    for month in months:
        items = (month.line_items or {}).get(channel)
        if items:
            return [item.line_item_id for item in items]
    return []


def _sum_line_items(month: ScheduleMonth, channels) -> Decimal:
    total = Decimal(0)
    for channel in channels:
        for item in (month.line_items or {}).get(channel, []):
            total += item.monthly_amounts.get(month.month_year, Decimal(0))
    return total


class ManualOverrideService:
    def __init__(self, schedule_service: ScheduleService | None = None) -> None:
        self.schedule_service = schedule_service or ScheduleService()

    # ---- State transitions ----

    def start_auto(self, auto_schedule: list[ScheduleMonth]) -> BillingState:
        return BillingState(mode=BillingMode.AUTO, auto_schedule=_copy_months(auto_schedule))

    def to_manual(
        self,
        billing_state: BillingState,
        line_items: list[LineItem] | None = None,
        buckets: list[MonthBucket] | None = None,
    ) -> BillingState:
        manual = billing_state.manual
        if manual is None:
            manual = self.enter_manual_mode(billing_state.auto_schedule, line_items, buckets)
        return BillingState(mode=BillingMode.MANUAL, auto_schedule=billing_state.auto_schedule, manual=manual)

    def commit(self, billing_state: BillingState, campaign_budget: Decimal) -> BillingState:
        if billing_state.manual is None:
            raise ValueError("Billing is not in manual mode")
        self.save(billing_state.manual, campaign_budget)
        return billing_state

    def to_auto(self, billing_state: BillingState, auto_schedule: list[ScheduleMonth] | None = None) -> BillingState:
        if auto_schedule is None:
            auto_schedule = billing_state.auto_schedule
        logger.info("Billing switched back to automatic")
        return self.start_auto(auto_schedule)

    # ---- Manual editing ----

    def enter_manual_mode(
        self,
        auto_schedule: list[ScheduleMonth],
        line_items: list[LineItem] | None = None,
        buckets: list[MonthBucket] | None = None,
    ) -> ManualOverrideState:
        months = _copy_months(auto_schedule)

        has_breakdown = any(m.line_items for m in months)
        if not has_breakdown and line_items and buckets:
            breakdown = self.schedule_service.build_line_item_breakdown(line_items, buckets)
            for month in months:
                month.line_items = {
                    channel: [item.model_copy(deep=True) for item in items] for channel, items in breakdown.items()
                }

        state = ManualOverrideState(
            auto_schedule=_copy_months(auto_schedule),
            baseline=_copy_months(months),
            months=months,
        )
        logger.info("Entered manual billing: months=%d total=%s", len(months), grand_total(months))
        return state

    def get_row(self, state: ManualOverrideState, row: str) -> dict[str, Decimal]:
        kind, channel, line_item_id = _parse_row(row)
        return {m.month_year: self._read_cell(m, kind, channel, line_item_id) for m in state.months}

    def set_cell(self, state: ManualOverrideState, month_year: str, row: str, value: Decimal) -> ManualOverrideState:
        kind, channel, line_item_id = _parse_row(row)
        if kind == "media" and _breakdown_ids(state.months, channel):
            raise ValueError(f"Channel {channel.value} is broken out by line item; edit its line item rows")
        month = self._get_month(state, month_year)
        self._write_cell(state, month, kind, channel, line_item_id, Decimal(str(value)))
        month.recalculate()
        logger.debug("Manual cell set: month=%s row=%s value=%s", month_year, row, value)
        return state

    def toggle_prebill(self, state: ManualOverrideState, row: str, checked: bool) -> ManualOverrideState:
        kind, channel, line_item_id = _parse_row(row)
        if not state.months:
            return state

        line_item_ids = _breakdown_ids(state.months, channel) if kind == "media" else []
        if line_item_ids:
            return self._toggle_channel_prebill(state, row, channel, line_item_ids, checked)

        if checked:
            if state.is_prebilled(row):
                logger.debug("Row %s is already pre-billed", row)
                return state
            current = self.get_row(state, row)
            state.prebill_snapshots[row] = dict(current)
            total = sum(current.values(), Decimal(0))
            first = state.months[0].month_year
            for month in state.months:
                amount = total if month.month_year == first else Decimal(0)
                self._write_cell(state, month, kind, channel, line_item_id, amount)
            logger.info("Pre-billed row %s: %s moved into %s", row, total, first)
        else:
            snapshot = state.prebill_snapshots.pop(row, None)
            if snapshot is None:
                logger.debug("No pre-bill snapshot for row %s, nothing to restore", row)
                return state
            for month in state.months:
                if month.month_year in snapshot:
                    self._write_cell(state, month, kind, channel, line_item_id, snapshot[month.month_year])
            logger.info("Pre-bill removed from row %s", row)

        for month in state.months:
            month.recalculate()
        return state

    def _toggle_channel_prebill(
        self,
        state: ManualOverrideState,
        row: str,
        channel: Channel,
        line_item_ids: list[str],
        checked: bool,
    ) -> ManualOverrideState:
        """Pre-bill a broken-out channel through its line item rows so the breakdown stays in step."""
        if checked:
            if state.is_prebilled(row):
                logger.debug("Row %s is already pre-billed", row)
                return state
            state.prebill_snapshots[row] = self.get_row(state, row)
        elif state.prebill_snapshots.pop(row, None) is None:
            logger.debug("No pre-bill snapshot for row %s, nothing to restore", row)
            return state

        for line_item_id in line_item_ids:
            self.toggle_prebill(state, line_item_row(channel, line_item_id), checked)
        logger.info("Pre-bill %s for channel row %s", "applied" if checked else "removed", row)
        return state

    def validate(self, state: ManualOverrideState, campaign_budget: Decimal) -> ValidationResult:
        return validate_total(grand_total(state.months), campaign_budget)

    def save(self, state: ManualOverrideState, campaign_budget: Decimal) -> list[ScheduleMonth]:
        result = self.validate(state, campaign_budget)
        if not result.ok:
            logger.warning("Manual billing refused: %s", result.message)
            raise BudgetMismatchError(result)
        state.committed = _copy_months(state.months)
        logger.info("Manual billing saved: total=%s", result.total)
        return _copy_months(state.committed)

    def discard_changes(self, state: ManualOverrideState) -> ManualOverrideState:
        state.months = _copy_months(state.baseline)
        state.prebill_snapshots = {}
        logger.info("Manual billing edits discarded")
        return state

    def reset(self, state: ManualOverrideState, auto_schedule: list[ScheduleMonth] | None = None) -> list[ScheduleMonth]:
        """Drop manual edits and return the auto schedule, the freshest one when given."""
        if auto_schedule is not None:
            state.auto_schedule = _copy_months(auto_schedule)
        state.months = _copy_months(state.baseline)
        state.committed = None
        state.prebill_snapshots = {}
        logger.info("Manual billing reset to automatic schedule")
        return _copy_months(state.auto_schedule)

    # ---- Helpers ----

    @staticmethod
    def _get_month(state: ManualOverrideState, month_year: str) -> ScheduleMonth:
        for month in state.months:
            if month.month_year == month_year:
                return month
        raise ValueError(f"Month not in schedule: {month_year}")

    @staticmethod
    def _read_cell(month: ScheduleMonth, kind: str, channel: Channel | None, line_item_id: str | None) -> Decimal:
        if kind == FEE_ROW:
            return month.fee_total
        if kind == AD_SERVING_ROW:
            return month.ad_serving_total
        if kind == PRODUCTION_ROW:
            return month.production_total
        if kind == "media":
            return month.media_costs.get(channel, Decimal(0))
        item = _find_line_item(month, channel, line_item_id)
        if item is None:
            raise ValueError(f"Line item {line_item_id} not in {channel.value} breakdown")
        return item.monthly_amounts.get(month.month_year, Decimal(0))

    @staticmethod
    def _write_cell(
        state: ManualOverrideState,
        month: ScheduleMonth,
        kind: str,
        channel: Channel | None,
        line_item_id: str | None,
        value: Decimal,
    ) -> None:
        if kind == FEE_ROW:
            month.fee_total = value
        elif kind == AD_SERVING_ROW:
            month.ad_serving_total = value
        elif kind == PRODUCTION_ROW:
            month.production_total = value
        elif kind == "media":
            month.media_costs[channel] = value
        else:
            if _find_line_item(month, channel, line_item_id) is None:
                raise ValueError(f"Line item {line_item_id} not in {channel.value} breakdown")
            # every month carries its own copy of the breakdown; keep them in step
            for other in state.months:
                item = _find_line_item(other, channel, line_item_id)
                if item is not None:
                    item.monthly_amounts[month.month_year] = value
                    item.recalculate()
            if channel in PRODUCTION_CHANNELS:
                month.production_total = _sum_line_items(month, PRODUCTION_CHANNELS)
            else:
                month.media_costs[channel] = _sum_line_items(month, (channel,))


def validate_total(total: Decimal, campaign_budget: Decimal) -> ValidationResult:
    """Check a schedule total against the campaign budget within the configured tolerance."""
    budget = Decimal(str(campaign_budget))
    rounded = round_money(total)
    difference = rounded - budget
    tolerance = settings.budget_tolerance
    ok = abs(difference) <= tolerance

    message = ""
    if not ok:
        direction = "over" if difference > 0 else "under"
        message = (
            f"Schedule total {format_money(rounded, settings.currency_symbol)} is "
            f"{format_money(abs(difference), settings.currency_symbol)} {direction} the campaign budget "
            f"{format_money(budget, settings.currency_symbol)}. The total must be within "
            f"{format_money(tolerance, settings.currency_symbol)} of the budget."
        )
    return ValidationResult(ok=ok, total=rounded, budget=budget, difference=difference, message=message)
