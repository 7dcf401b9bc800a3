from decimal import Decimal
from unittest.mock import patch

import pytest

from mediabill.models.burst import Channel
from mediabill.models.override import FEE_ROW, BillingMode, line_item_row
from mediabill.services.manual_override_service import ManualOverrideService

BUDGET = Decimal("8410")


@pytest.fixture()
def service():
    return ManualOverrideService()


@pytest.fixture()
def run_menu(service, sample_schedules, sample_line_items):
    from mediabill.cli.manual_menu import manual_billing_menu

    def _run():
        billing_state = service.start_auto(sample_schedules.billing)
        return manual_billing_menu(
            service,
            billing_state,
            BUDGET,
            sample_schedules.billing,
            sample_line_items,
            sample_schedules.buckets,
        )

    return _run


class TestManualBillingMenu:
    @patch("mediabill.cli.manual_menu.questionary")
    def test_back_keeps_manual_mode(self, mock_q, run_menu):
        mock_q.select.return_value.ask.return_value = "Back"

        result = run_menu()
        assert result.mode == BillingMode.MANUAL
        assert result.manual.committed is None

    @patch("mediabill.cli.manual_menu.questionary")
    def test_edit_cell(self, mock_q, run_menu):
        mock_q.select.return_value.ask.side_effect = ["Edit Cell", "March 2025", "Fee", "Back"]
        mock_q.text.return_value.ask.return_value = "$25.00"

        result = run_menu()
        assert result.manual.months[2].fee_total == Decimal("25.00")

    @patch("mediabill.cli.manual_menu.questionary")
    def test_edit_cell_invalid_amount(self, mock_q, run_menu):
        mock_q.select.return_value.ask.side_effect = ["Edit Cell", "March 2025", "Fee", "Back"]
        mock_q.text.return_value.ask.return_value = "abc"

        result = run_menu()
        assert result.manual.months[2].fee_total == 0

    @patch("mediabill.cli.manual_menu.questionary")
    def test_edit_cell_cancelled(self, mock_q, run_menu):
        mock_q.select.return_value.ask.side_effect = ["Edit Cell", None, "Back"]

        run_menu()
        mock_q.text.assert_not_called()

    @patch("mediabill.cli.manual_menu.questionary")
    def test_save_commits(self, mock_q, run_menu):
        mock_q.select.return_value.ask.return_value = "Save"

        result = run_menu()
        assert result.mode == BillingMode.MANUAL
        assert result.manual.committed is not None
        assert result.current_schedule is result.manual.committed

    @patch("mediabill.cli.manual_menu.questionary")
    def test_save_mismatch_stays_in_menu(self, mock_q, run_menu):
        mock_q.select.return_value.ask.side_effect = ["Edit Cell", "March 2025", "Fee", "Save", "Back"]
        mock_q.text.return_value.ask.return_value = "100"

        result = run_menu()
        assert result.manual.committed is None
        assert result.manual.months[2].fee_total == Decimal("100")

    @patch("mediabill.cli.manual_menu.questionary")
    def test_toggle_prebill(self, mock_q, run_menu):
        mock_q.select.return_value.ask.side_effect = ["Toggle Pre-bill", "Fee", "Back"]
        mock_q.confirm.return_value.ask.return_value = True

        result = run_menu()
        assert result.manual.is_prebilled(FEE_ROW)
        assert result.manual.months[1].fee_total == 0

    @patch("mediabill.cli.manual_menu.questionary")
    def test_line_item_rows_offered(self, mock_q, run_menu):
        mock_q.select.return_value.ask.side_effect = [
            "Edit Cell",
            "January 2025",
            "Line Item - Search - Google Brand [search-1]",
            "Back",
        ]
        mock_q.text.return_value.ask.return_value = "1000"

        result = run_menu()
        jan = result.manual.months[0]
        assert jan.media_costs[Channel.SEARCH] == Decimal("1000")
        assert result.manual.months[1].line_items[Channel.SEARCH][0].monthly_amounts["January 2025"] == Decimal(
            "1000"
        )

    @patch("mediabill.cli.manual_menu.questionary")
    def test_discard(self, mock_q, run_menu):
        mock_q.select.return_value.ask.side_effect = ["Edit Cell", "March 2025", "Fee", "Discard Changes", "Back"]
        mock_q.text.return_value.ask.return_value = "100"

        result = run_menu()
        assert result.manual.months[2].fee_total == 0

    @patch("mediabill.cli.manual_menu.questionary")
    def test_reset_to_automatic(self, mock_q, run_menu, sample_schedules):
        mock_q.select.return_value.ask.return_value = "Reset to Automatic"

        result = run_menu()
        assert result.mode == BillingMode.AUTO
        assert result.manual is None
        assert result.current_schedule == sample_schedules.billing


class TestRowChoices:
    def test_includes_cost_and_line_item_rows(self, service, sample_schedules, sample_line_items):
        from mediabill.cli.manual_menu import _row_choices

        state = service.enter_manual_mode(sample_schedules.billing, sample_line_items, sample_schedules.buckets)
        choices = _row_choices(state)
        assert choices["Fee"] == FEE_ROW
        assert choices["Media - Radio"] == "media:radio"
        assert "Media - Television" not in choices
        assert "Media - Search" not in choices
        assert choices["Line Item - Television - Nine Sydney [tv-1]"] == line_item_row(Channel.TELEVISION, "tv-1")
