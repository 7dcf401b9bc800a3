from datetime import date
from decimal import Decimal

from mediabill.models import round_money
from mediabill.models.burst import BuyType, Channel
from mediabill.services.schedule_service import ScheduleService


class TestComputeSchedules:
    def setup_method(self):
        self.service = ScheduleService()

    def test_example_scenario(self, make_burst):
        schedules = self.service.compute_schedules([make_burst()], date(2025, 1, 1), date(2025, 2, 28))
        jan, feb = schedules.billing
        assert jan.month_year == "January 2025"
        assert round_money(jan.media_costs[Channel.SEARCH]) == Decimal("1653.33")
        assert round_money(feb.media_costs[Channel.SEARCH]) == Decimal("1446.67")
        assert round_money(schedules.billing_total) == Decimal("3100.00")

    def test_client_pays_billing_vs_delivery(self, make_burst):
        schedules = self.service.compute_schedules(
            [make_burst(client_pays_for_media=True)], date(2025, 1, 1), date(2025, 2, 28)
        )
        assert [m.media_costs[Channel.SEARCH] for m in schedules.billing] == [0, 0]
        assert [round_money(m.media_costs[Channel.SEARCH]) for m in schedules.delivery] == [
            Decimal("1653.33"),
            Decimal("1446.67"),
        ]

    def test_month_totals_add_up(self, make_burst, rates):
        bursts = [
            make_burst(fee_percentage=Decimal("15")),
            make_burst(
                channel=Channel.PROG_DISPLAY,
                buy_type=BuyType.CPM,
                deliverables=Decimal("100000"),
                media_amount=Decimal("900"),
            ),
            make_burst(channel=Channel.CONSULTING, media_amount=Decimal("200")),
        ]
        schedules = self.service.compute_schedules(bursts, date(2025, 1, 1), date(2025, 2, 28), rates)
        for month in schedules.billing:
            assert month.media_total == sum(month.media_costs.values(), Decimal(0))
            assert month.total_amount == (
                month.media_total + month.fee_total + month.ad_serving_total + month.production_total
            )
        assert round_money(schedules.billing_total) == Decimal("4765.00")

    def test_idempotent(self, make_burst, rates):
        bursts = [make_burst(fee_percentage=Decimal("10")), make_burst(channel=Channel.RADIO)]
        first = self.service.compute_schedules(bursts, date(2025, 1, 1), date(2025, 3, 31), rates)
        second = self.service.compute_schedules(bursts, date(2025, 1, 1), date(2025, 3, 31), rates)
        assert first == second

    def test_empty_months_present(self, make_burst):
        schedules = self.service.compute_schedules([make_burst()], date(2025, 1, 1), date(2025, 3, 31))
        assert [m.month_year for m in schedules.billing] == ["January 2025", "February 2025", "March 2025"]
        assert schedules.billing[2].total_amount == 0

    def test_no_dates_gives_empty_schedule(self, make_burst):
        schedules = self.service.compute_schedules([make_burst()], None, None)
        assert schedules.billing == []
        assert schedules.delivery == []

    def test_invalid_burst_skipped(self, make_burst):
        schedules = self.service.compute_schedules(
            [make_burst(start_date=None), make_burst()], date(2025, 1, 1), date(2025, 2, 28)
        )
        assert round_money(schedules.billing_total) == Decimal("3100.00")

    def test_compute_for_line_items(self, sample_schedules):
        assert round_money(sample_schedules.billing_total) == Decimal("8410.00")
        assert round_money(sample_schedules.billing[2].media_costs[Channel.TELEVISION]) == Decimal("5000.00")


class TestLineItemBreakdown:
    def test_breakdown_matches_media_costs(self, sample_line_items, sample_schedules):
        breakdown = ScheduleService().build_line_item_breakdown(sample_line_items, sample_schedules.buckets)
        assert set(breakdown) == {Channel.SEARCH, Channel.TELEVISION}
        search = breakdown[Channel.SEARCH][0]
        assert search.header1 == "Google"
        for month in sample_schedules.billing:
            assert search.monthly_amounts[month.month_year] == month.media_costs[Channel.SEARCH]
        assert round_money(search.total_amount) == Decimal("3100.00")

    def test_client_pays_excluded(self, make_burst, make_line_item, sample_schedules):
        item = make_line_item(make_burst(client_pays_for_media=True))
        breakdown = ScheduleService().build_line_item_breakdown([item], sample_schedules.buckets)
        assert breakdown[Channel.SEARCH][0].total_amount == 0
