from decimal import Decimal

from mediabill.models.burst import Channel
from mediabill.models.override import media_row
from mediabill.models.schedule import ScheduleLineItem, ScheduleMonth
from mediabill.services.manual_override_service import ManualOverrideService
from mediabill.services.partial_invoice_service import PartialInvoiceService
from mediabill.services.schedule_serializers import (
    build_billing_schedule_json,
    serialize_partial_invoice,
    serialize_schedule,
    serialize_schedule_month,
)


class TestSerializeScheduleMonth:
    def test_rounds_to_cents(self, sample_schedules):
        data = serialize_schedule_month(sample_schedules.billing[0])
        assert data["monthYear"] == "January 2025"
        assert data["mediaCosts"]["search"] == 1653.33
        assert data["feeTotal"] == 165.33
        assert data["production"] == 0.0
        assert len(data["mediaCosts"]) == 19

    def test_schedule(self, sample_schedules):
        data = serialize_schedule(sample_schedules.billing)
        assert [m["monthYear"] for m in data] == ["January 2025", "February 2025", "March 2025"]
        assert data[2]["totalAmount"] == 5000.0


class TestBuildBillingScheduleJson:
    def _month(self, month_year, amount, **totals):
        month = ScheduleMonth(month_year=month_year, **totals)
        month.line_items = {
            Channel.SEARCH: [
                ScheduleLineItem(
                    line_item_id="search-1",
                    header1="Google",
                    header2="Brand",
                    monthly_amounts={month_year: amount},
                )
            ]
        }
        return month

    def test_line_items_grouped_by_media_type(self):
        data = build_billing_schedule_json([self._month("January 2025", Decimal("1234.567"))])
        assert data == [
            {
                "monthYear": "January 2025",
                "mediaTypes": [
                    {
                        "mediaType": "Search",
                        "lineItems": [
                            {"lineItemId": "search-1", "header1": "Google", "header2": "Brand", "amount": "$1,234.57"}
                        ],
                    }
                ],
            }
        ]

    def test_zero_amounts_and_empty_months_skipped(self):
        data = build_billing_schedule_json([self._month("January 2025", Decimal("0"))])
        assert data == []

    def test_cost_rows_keep_month(self):
        month = self._month("February 2025", Decimal("0"), fee_total=Decimal("10"), production_total=Decimal("5"))
        data = build_billing_schedule_json([month])
        assert data == [
            {"monthYear": "February 2025", "mediaTypes": [], "feeTotal": "$10.00", "production": "$5.00"}
        ]

    def test_agrees_with_schedule_after_prebill(self, sample_schedules, sample_line_items):
        service = ManualOverrideService()
        state = service.enter_manual_mode(sample_schedules.billing, sample_line_items, sample_schedules.buckets)
        service.toggle_prebill(state, media_row(Channel.SEARCH), True)

        schedule = serialize_schedule(state.months)
        document = {entry["monthYear"]: entry for entry in build_billing_schedule_json(state.months)}
        assert [m["mediaCosts"]["search"] for m in schedule] == [3100.0, 0.0, 0.0]
        assert document["January 2025"]["mediaTypes"] == [
            {
                "mediaType": "Search",
                "lineItems": [
                    {"lineItemId": "search-1", "header1": "Google", "header2": "Brand", "amount": "$3,100.00"}
                ],
            }
        ]
        assert document["February 2025"]["mediaTypes"] == []


class TestSerializePartialInvoice:
    def test_shape(self, sample_schedules):
        state = PartialInvoiceService().compute(sample_schedules.delivery, ["March 2025"])
        data = serialize_partial_invoice(state)
        assert data["grossMedia"] == 5000.0
        assert data["total"] == 5000.0
        assert data["selectedMonths"] == ["March 2025"]
        assert data["mediaTotals"]["television"] == 5000.0
