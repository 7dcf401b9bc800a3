from __future__ import annotations

from decimal import Decimal

import questionary
from rich.console import Console

from mediabill.cli.schedule_menu import show_schedule
from mediabill.constants import MEDIA_CHANNELS, channel_label
from mediabill.models import format_money, parse_money
from mediabill.models.burst import LineItem
from mediabill.models.override import (
    AD_SERVING_ROW,
    FEE_ROW,
    PRODUCTION_ROW,
    BillingState,
    BudgetMismatchError,
    ManualOverrideState,
    line_item_row,
    media_row,
)
from mediabill.models.schedule import MonthBucket, ScheduleMonth, grand_total
from mediabill.services.manual_override_service import ManualOverrideService

console = Console()


def _row_choices(state: ManualOverrideState) -> dict[str, str]:
    """Display label -> row key for every editable row.

    Channels broken out by line item are edited through their line item rows.
    """
    breakdown = (state.months[0].line_items or {}) if state.months else {}
    choices = {f"Media - {channel_label(c)}": media_row(c) for c in MEDIA_CHANNELS if not breakdown.get(c)}
    choices["Fee"] = FEE_ROW
    choices["Ad Serving"] = AD_SERVING_ROW
    choices["Production"] = PRODUCTION_ROW
    if breakdown:
        for channel, items in breakdown.items():
            for item in items:
                label = f"Line Item - {channel_label(channel)} - {item.header1} {item.header2}".rstrip()
                choices[f"{label} [{item.line_item_id}]"] = line_item_row(channel, item.line_item_id)
    return choices


def _edit_cell(service: ManualOverrideService, state: ManualOverrideState) -> None:
    month = questionary.select("Month:", choices=[m.month_year for m in state.months]).ask()
    if not month:
        return
    rows = _row_choices(state)
    label = questionary.select("Row:", choices=list(rows.keys())).ask()
    if not label:
        return
    value = parse_money(questionary.text("New amount:").ask() or "")
    if value is None:
        console.print("[red]Invalid amount.[/red]")
        return
    service.set_cell(state, month, rows[label], value)
    console.print(f"[green]{label} for {month} set to {format_money(value)}[/green]")


def _toggle_prebill(service: ManualOverrideService, state: ManualOverrideState) -> None:
    rows = _row_choices(state)
    label = questionary.select("Row to pre-bill:", choices=list(rows.keys())).ask()
    if not label:
        return
    row = rows[label]
    checked = questionary.confirm("Bill the whole row in the first month?", default=not state.is_prebilled(row)).ask()
    if checked is None:
        return
    service.toggle_prebill(state, row, checked)


def manual_billing_menu(
    service: ManualOverrideService,
    billing_state: BillingState,
    campaign_budget: Decimal,
    auto_schedule: list[ScheduleMonth],
    line_items: list[LineItem] | None = None,
    buckets: list[MonthBucket] | None = None,
) -> BillingState:
    billing_state = service.to_manual(billing_state, line_items, buckets)
    state = billing_state.manual

    while True:
        show_schedule(state.months, "Manual Billing Schedule")
        console.print(
            f"  Total: [bold]{format_money(grand_total(state.months))}[/bold]"
            f"  Budget: [bold]{format_money(campaign_budget)}[/bold]"
        )

        choice = questionary.select(
            "Manual Billing",
            choices=["Edit Cell", "Toggle Pre-bill", "Save", "Discard Changes", "Reset to Automatic", "Back"],
        ).ask()

        if choice is None or choice == "Back":
            return billing_state
        elif choice == "Edit Cell":
            _edit_cell(service, state)
        elif choice == "Toggle Pre-bill":
            _toggle_prebill(service, state)
        elif choice == "Save":
            try:
                service.commit(billing_state, campaign_budget)
            except BudgetMismatchError as e:
                console.print(f"[red bold]Budget mismatch:[/red bold] [red]{e}[/red]")
                continue
            console.print("[green bold]Manual billing schedule saved.[/green bold]")
            return billing_state
        elif choice == "Discard Changes":
            service.discard_changes(state)
            console.print("[yellow]Changes discarded.[/yellow]")
        elif choice == "Reset to Automatic":
            service.reset(state, auto_schedule)
            console.print("[yellow]Billing reset to the automatic schedule.[/yellow]")
            return service.to_auto(billing_state, auto_schedule)
