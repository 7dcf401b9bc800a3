from __future__ import annotations

from decimal import Decimal

import questionary
from rich.console import Console
from rich.table import Table

from mediabill.constants import MEDIA_CHANNELS, channel_label
from mediabill.models import format_money
from mediabill.models.partial import PartialInvoiceState
from mediabill.models.schedule import ScheduleMonth
from mediabill.services.partial_invoice_service import PartialInvoiceService

console = Console()


def render_partial_invoice(state: PartialInvoiceState) -> Table:
    table = Table(title="Partial MBA")
    table.add_column("Item", style="bold")
    table.add_column("Amount", justify="right")

    for channel, amount in state.media_totals.items():
        if amount == 0 and state.enabled_channels.get(channel, True):
            continue
        label = channel_label(channel)
        if not state.enabled_channels.get(channel, True):
            label = f"{label} (excluded)"
        table.add_row(label, format_money(amount))

    table.add_row("Gross Media", format_money(state.gross_media), style="bold")
    table.add_row("Assembled Fee", format_money(state.assembled_fee))
    table.add_row("Ad Serving", format_money(state.ad_serving))
    table.add_row("Production", format_money(state.production))
    table.add_row("Total", format_money(state.total), style="bold")
    return table


def partial_invoice_menu(
    service: PartialInvoiceService,
    delivery_months: list[ScheduleMonth],
    campaign_budget: Decimal,
) -> PartialInvoiceState | None:
    if not delivery_months:
        console.print("[yellow]No delivery months available.[/yellow]")
        return None

    selected = questionary.checkbox(
        "Months to invoice (none selected = all):",
        choices=[m.month_year for m in delivery_months],
    ).ask()
    if selected is None:
        return None

    active = [c for c in MEDIA_CHANNELS if any(m.media_costs.get(c, Decimal(0)) != 0 for m in delivery_months)]
    channel_choices = [questionary.Choice(channel_label(c), value=c, checked=True) for c in active]
    kept = questionary.checkbox("Channels to include:", choices=channel_choices).ask() if active else []
    if kept is None:
        return None

    state = service.compute(delivery_months, selected)
    for channel in active:
        if channel not in kept:
            service.toggle_channel(state, delivery_months, channel, False)

    console.print()
    console.print(render_partial_invoice(state))

    result = service.validate(state, campaign_budget)
    if result.ok:
        console.print("[green]Partial invoice is within budget tolerance.[/green]")
    else:
        console.print(f"[yellow]{result.message}[/yellow]")
    return state
