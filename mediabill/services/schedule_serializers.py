"""Serializers that turn schedules into the plain structures collaborators persist.

Money is rounded to cents here and nowhere earlier.
"""

from __future__ import annotations

from decimal import Decimal

from mediabill.constants import channel_label
from mediabill.models import format_money, round_money
from mediabill.models.partial import PartialInvoiceState
from mediabill.models.schedule import ScheduleMonth
from mediabill.settings import settings


def _num(value: Decimal) -> float:
    """Round to cents and convert to a JSON number."""
    return float(round_money(value))


def _money(value: Decimal) -> str:
    return format_money(value, settings.currency_symbol)


def serialize_schedule_month(month: ScheduleMonth) -> dict:
    """Serialize one month in the persisted billingSchedule shape."""
    return {
        "monthYear": month.month_year,
        "mediaTotal": _num(month.media_total),
        "feeTotal": _num(month.fee_total),
        "totalAmount": _num(month.total_amount),
        "adservingTechFees": _num(month.ad_serving_total),
        "production": _num(month.production_total),
        "mediaCosts": {channel.value: _num(amount) for channel, amount in month.media_costs.items()},
    }


def serialize_schedule(months: list[ScheduleMonth]) -> list[dict]:
    return [serialize_schedule_month(m) for m in months]


def build_billing_schedule_json(months: list[ScheduleMonth]) -> list[dict]:
    """Month -> media type -> line items, for billing schedule documents.

    Line items without spend in a month are left out, as are months with
    neither line items nor fee, ad-serving or production amounts.
    """
    entries: list[dict] = []
    for month in months:
        media_types = []
        for channel, items in (month.line_items or {}).items():
            rows = []
            for item in items:
                amount = round_money(item.monthly_amounts.get(month.month_year, Decimal(0)))
                if amount > 0:
                    rows.append(
                        {
                            "lineItemId": item.line_item_id,
                            "header1": item.header1,
                            "header2": item.header2,
                            "amount": _money(amount),
                        }
                    )
            if rows:
                media_types.append({"mediaType": channel_label(channel), "lineItems": rows})

        entry: dict = {"monthYear": month.month_year, "mediaTypes": media_types}
        if round_money(month.fee_total) != 0:
            entry["feeTotal"] = _money(month.fee_total)
        if round_money(month.ad_serving_total) != 0:
            entry["adservingTechFees"] = _money(month.ad_serving_total)
        if round_money(month.production_total) != 0:
            entry["production"] = _money(month.production_total)

        if media_types or len(entry) > 2:
            entries.append(entry)
    return entries


def serialize_partial_invoice(state: PartialInvoiceState) -> dict:
    return {
        "mediaTotals": {channel.value: _num(amount) for channel, amount in state.media_totals.items()},
        "grossMedia": _num(state.gross_media),
        "assembledFee": _num(state.assembled_fee),
        "adServing": _num(state.ad_serving),
        "production": _num(state.production),
        "total": _num(state.total),
        "selectedMonths": list(state.selected_months),
    }
