import json
import logging
from pathlib import Path

import questionary
from rich.console import Console

from mediabill.cli.manual_menu import manual_billing_menu
from mediabill.cli.partial_menu import partial_invoice_menu
from mediabill.cli.schedule_menu import export_schedule_menu, show_schedule
from mediabill.models import format_money
from mediabill.models.plan import Plan
from mediabill.repositories.factory import get_snapshot_repository
from mediabill.services.manual_override_service import ManualOverrideService
from mediabill.services.normalizer import normalise_plan
from mediabill.services.partial_invoice_service import PartialInvoiceService
from mediabill.services.schedule_service import ScheduleService
from mediabill.services.snapshot_service import DeliverySnapshotService

logger = logging.getLogger(__name__)

console = Console()


def load_plan(path: str | Path) -> Plan:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    plan = Plan.model_validate(data)
    logger.info("Loaded plan %s from %s", plan.campaign.plan_identity or "(unnamed)", path)
    return plan


def _build_services() -> tuple[ScheduleService, ManualOverrideService, DeliverySnapshotService, PartialInvoiceService]:
    schedule_service = ScheduleService()
    snapshot_repo = get_snapshot_repository()
    return (
        schedule_service,
        ManualOverrideService(schedule_service),
        DeliverySnapshotService(snapshot_repo),
        PartialInvoiceService(),
    )


def main_menu(plan: Plan) -> None:
    schedule_service, manual_service, snapshot_service, partial_service = _build_services()
    campaign = plan.campaign

    line_items = normalise_plan(plan.line_items, plan.fees)
    schedules = schedule_service.compute_for_line_items(line_items, campaign.start, campaign.end, plan.rates)
    delivery = snapshot_service.capture(campaign.snapshot_key, schedules.delivery)
    billing_state = manual_service.start_auto(schedules.billing)

    console.print()
    console.print(f"[bold]{campaign.name or 'Campaign'}[/bold]", style="cyan")
    console.print(f"  Budget: {format_money(campaign.budget)}  Months: {len(schedules.buckets)}")
    console.print()

    while True:
        choice = questionary.select(
            "Main Menu",
            choices=[
                "View Billing Schedule",
                "View Delivery Schedule",
                "Manual Billing",
                "Partial MBA",
                "Export Schedule JSON",
                "Exit",
            ],
        ).ask()

        if choice is None or choice == "Exit":
            console.print("[bold]Goodbye![/bold]")
            break
        elif choice == "View Billing Schedule":
            title = f"Billing Schedule ({billing_state.mode.value})"
            show_schedule(billing_state.current_schedule, title)
        elif choice == "View Delivery Schedule":
            show_schedule(delivery, "Delivery Schedule")
        elif choice == "Manual Billing":
            billing_state = manual_billing_menu(
                manual_service,
                billing_state,
                campaign.budget,
                schedules.billing,
                line_items,
                schedules.buckets,
            )
        elif choice == "Partial MBA":
            partial_invoice_menu(partial_service, delivery, campaign.budget)
        elif choice == "Export Schedule JSON":
            export_schedule_menu(billing_state.current_schedule, delivery)
