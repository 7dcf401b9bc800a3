"""Root conftest: burst and schedule builders shared across the suite."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from mediabill.models.burst import Burst, Channel, LineItem
from mediabill.models.rates import AdServingRates
from mediabill.services.schedule_service import ScheduleService


def _make_burst(**overrides) -> Burst:
    defaults = dict(
        line_item_id="search-1",
        channel=Channel.SEARCH,
        start_date=date(2025, 1, 16),
        end_date=date(2025, 2, 14),
        media_amount=Decimal("3100"),
    )
    defaults.update(overrides)
    return Burst(**defaults)


def _make_line_item(*bursts: Burst, **overrides) -> LineItem:
    defaults = dict(
        id=bursts[0].line_item_id if bursts else "search-1",
        channel=bursts[0].channel if bursts else Channel.SEARCH,
        header1="Google",
        header2="Brand",
        bursts=list(bursts),
    )
    defaults.update(overrides)
    return LineItem(**defaults)


@pytest.fixture()
def rates() -> AdServingRates:
    return AdServingRates(
        impression=Decimal("0.50"),
        video=Decimal("2.00"),
        display=Decimal("1.00"),
        audio=Decimal("1.50"),
    )


@pytest.fixture()
def campaign_dates() -> tuple[date, date]:
    return date(2025, 1, 1), date(2025, 3, 31)


@pytest.fixture()
def sample_line_items() -> list[LineItem]:
    search = _make_line_item(
        _make_burst(fee_percentage=Decimal("10")),
    )
    tv = _make_line_item(
        _make_burst(
            line_item_id="tv-1",
            channel=Channel.TELEVISION,
            start_date=date(2025, 3, 1),
            end_date=date(2025, 3, 31),
            media_amount=Decimal("5000"),
        ),
        header1="Nine",
        header2="Sydney",
    )
    return [search, tv]


@pytest.fixture()
def sample_schedules(sample_line_items, campaign_dates):
    start, end = campaign_dates
    return ScheduleService().compute_for_line_items(sample_line_items, start, end)


@pytest.fixture()
def make_burst():
    return _make_burst


@pytest.fixture()
def make_line_item():
    return _make_line_item
