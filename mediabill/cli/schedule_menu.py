from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

import questionary
from rich.console import Console
from rich.table import Table

from mediabill.constants import MEDIA_CHANNELS, channel_label
from mediabill.models import format_money
from mediabill.models.schedule import ScheduleMonth, grand_total
from mediabill.services.schedule_serializers import build_billing_schedule_json, serialize_schedule

console = Console()


def _active_channels(months: list[ScheduleMonth]):
    return [c for c in MEDIA_CHANNELS if any(m.media_costs.get(c, Decimal(0)) != 0 for m in months)]


def render_schedule(months: list[ScheduleMonth], title: str) -> Table:
    channels = _active_channels(months)

    table = Table(title=title)
    table.add_column("Month", style="bold")
    for channel in channels:
        table.add_column(channel_label(channel), justify="right")
    table.add_column("Fee", justify="right")
    table.add_column("Ad Serving", justify="right")
    table.add_column("Production", justify="right")
    table.add_column("Total", justify="right", style="bold")

    for m in months:
        table.add_row(
            m.month_year,
            *(format_money(m.media_costs.get(c, Decimal(0))) for c in channels),
            format_money(m.fee_total),
            format_money(m.ad_serving_total),
            format_money(m.production_total),
            format_money(m.total_amount),
        )

    table.add_row(
        "Total",
        *(format_money(sum((m.media_costs.get(c, Decimal(0)) for m in months), Decimal(0))) for c in channels),
        format_money(sum((m.fee_total for m in months), Decimal(0))),
        format_money(sum((m.ad_serving_total for m in months), Decimal(0))),
        format_money(sum((m.production_total for m in months), Decimal(0))),
        format_money(grand_total(months)),
        style="bold",
    )
    return table


def show_schedule(months: list[ScheduleMonth], title: str) -> None:
    if not months:
        console.print("[yellow]No months to show. Check the campaign dates.[/yellow]")
        return
    console.print()
    console.print(render_schedule(months, title))


def export_schedule_menu(billing: list[ScheduleMonth], delivery: list[ScheduleMonth]) -> None:
    path = questionary.text("Export to file:", default="schedule.json").ask()
    if not path:
        console.print("[yellow]Export cancelled.[/yellow]")
        return

    payload = {
        "billingSchedule": serialize_schedule(billing),
        "deliverySchedule": serialize_schedule(delivery),
        "billingScheduleDocument": build_billing_schedule_json(billing),
    }
    Path(path).write_text(json.dumps(payload, indent=2), encoding="utf-8")
    console.print(f"[green]Schedule exported to {path}[/green]")
