from __future__ import annotations

import json
import logging
import re
from datetime import date, datetime
from decimal import Decimal

from mediabill.constants import MEDIA_TYPE_LABELS
from mediabill.models import parse_money
from mediabill.models.burst import Burst, BuyType, Channel, LineItem

logger = logging.getLogger(__name__)

# Source records spell the same field many ways. Bump the version when the
# accepted spellings change so stored records can be traced to a table.
FIELD_ALIASES_VERSION = 1

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "line_item_id": ("line_item_id", "lineItemId", "id"),
    "bursts": ("bursts", "bursts_json"),
    "start_date": ("start_date", "startDate", "start"),
    "end_date": ("end_date", "endDate", "end"),
    "amount": ("budget", "media_investment", "spend", "investment", "amount", "deliverablesAmount"),
    "deliverables": ("deliverables", "calculatedValue", "deliverable", "impressions", "views", "spots"),
    "fee_amount": ("feeAmount", "fee_amount"),
    "fee_percentage": ("feePercentage", "fee_percentage"),
    "buy_type": ("buyType", "buy_type"),
    "budget_includes_fees": ("budgetIncludesFees", "budget_includes_fees"),
    "client_pays_for_media": ("clientPaysForMedia", "client_pays_for_media"),
    "no_adserving": ("noadserving", "noAdserving", "no_adserving"),
    "media_total": ("totalMedia", "total_media", "mediaTotal"),
    "fee_total": ("feeTotal", "fee_total", "totalFee"),
}

_PLATFORM_TARGETING = (
    ("platform", "publisher", "network"),
    ("targeting", "creativeTargeting", "creative_targeting", "targetingAttribute", "targeting_attribute"),
)
_PUBLISHER_SITE = (("publisher",), ("site",))

# header1 / header2 source fields per channel
HEADER_ALIASES: dict[Channel, tuple[tuple[str, ...], tuple[str, ...]]] = {
    Channel.SEARCH: _PLATFORM_TARGETING,
    Channel.SOCIAL_MEDIA: _PLATFORM_TARGETING,
    Channel.PROG_DISPLAY: _PLATFORM_TARGETING,
    Channel.PROG_VIDEO: _PLATFORM_TARGETING,
    Channel.PROG_BVOD: _PLATFORM_TARGETING,
    Channel.PROG_AUDIO: _PLATFORM_TARGETING,
    Channel.PROG_OOH: _PLATFORM_TARGETING,
    Channel.TELEVISION: (("network",), ("station",)),
    Channel.RADIO: (("network", "platform"), ("station", "bid_strategy", "bidStrategy")),
    Channel.NEWSPAPER: (("publisher", "network"), ("title",)),
    Channel.MAGAZINES: (("publisher", "network"), ("title",)),
    Channel.DIGI_DISPLAY: _PUBLISHER_SITE,
    Channel.DIGI_AUDIO: _PUBLISHER_SITE,
    Channel.DIGI_VIDEO: _PUBLISHER_SITE,
    Channel.BVOD: _PUBLISHER_SITE,
    Channel.OOH: (("network",), ("format", "oohFormat", "ooh_format")),
    Channel.CINEMA: (("network",), ("format", "creative", "station")),
    Channel.PRODUCTION: (("header1",), ("header2",)),
    Channel.CONSULTING: (("header1",), ("header2",)),
}
DEFAULT_HEADER_ALIASES = (
    ("network", "publisher", "platform", "header1"),
    ("station", "site", "title", "format", "header2"),
)
HEADER_DEFAULTS: dict[Channel, tuple[str, str]] = {
    Channel.PRODUCTION: ("Production", "Total"),
    Channel.CONSULTING: ("Consulting", "Total"),
}

_CHANNEL_EXTRA_NAMES = {
    "tv": Channel.TELEVISION,
    "social": Channel.SOCIAL_MEDIA,
    "paidsocial": Channel.SOCIAL_MEDIA,
    "sem": Channel.SEARCH,
    "magazine": Channel.MAGAZINES,
    "broadcastvideoondemand": Channel.BVOD,
    "outofhome": Channel.OOH,
    "influencer": Channel.INFLUENCERS,
}


def _squash(key: str) -> str:
    return re.sub(r"[\s_\-]+", "", key).lower()


_CHANNEL_NAMES: dict[str, Channel] = {
    **{_squash(c.value): c for c in Channel},
    **{_squash(label): c for c, label in MEDIA_TYPE_LABELS.items()},
    **_CHANNEL_EXTRA_NAMES,
}


def resolve_channel(key: str | Channel) -> Channel:
    if isinstance(key, Channel):
        return key
    channel = _CHANNEL_NAMES.get(_squash(str(key)))
    if channel is None:
        raise ValueError(f"Unknown media channel: {key}")
    return channel


def pick(raw: dict, field: str):
    """First non-empty value among the accepted spellings of a field."""
    for key in FIELD_ALIASES[field]:
        value = raw.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _first_text(raw: dict, keys: tuple[str, ...]) -> str:
    for key in keys:
        value = raw.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return ""


def schedule_headers(channel: Channel, raw: dict) -> tuple[str, str]:
    header1_keys, header2_keys = HEADER_ALIASES.get(channel, DEFAULT_HEADER_ALIASES)
    default1, default2 = HEADER_DEFAULTS.get(channel, ("", ""))
    return _first_text(raw, header1_keys) or default1, _first_text(raw, header2_keys) or default2


def parse_date(value) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def parse_flag(value) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in ("true", "1", "yes", "y")


def parse_buy_type(value) -> BuyType:
    text = str(value or "").strip().lower()
    if text == "cpm":
        return BuyType.CPM
    if text == "bonus":
        return BuyType.BONUS
    return BuyType.STANDARD


def _decimal_or_zero(value) -> Decimal:
    parsed = parse_money(value)
    return parsed if parsed is not None else Decimal(0)


def parse_records(value) -> list[dict]:
    """Accept a list of records, a single record or a JSON string of either."""
    if value is None:
        return []
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        try:
            value = json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Unparseable JSON records, ignoring: %.60s", text)
            return []
    if isinstance(value, dict):
        return [value]
    if isinstance(value, list):
        return [b for b in value if isinstance(b, dict)]
    return []


def infer_fee_percentage(media_total: Decimal, fee_total: Decimal, budget_includes_fees: bool) -> Decimal | None:
    """Recover a fee percentage from a line item's media and fee totals.

    With fees embedded the percentage is of the gross amount, otherwise of
    net media. Used only when no explicit percentage exists.
    """
    base = media_total + fee_total if budget_includes_fees else media_total
    if base <= 0 or fee_total < 0:
        return None
    return fee_total / base * 100


def resolve_fee_percentage(raw: dict, fee_percentage: Decimal | None, budget_includes_fees: bool) -> Decimal | None:
    if fee_percentage is not None:
        return parse_money(fee_percentage)
    own = parse_money(pick(raw, "fee_percentage"))
    if own is not None:
        return own
    media_total = parse_money(pick(raw, "media_total"))
    fee_total = parse_money(pick(raw, "fee_total"))
    if media_total is None or fee_total is None:
        return None
    inferred = infer_fee_percentage(media_total, fee_total, budget_includes_fees)
    if inferred is not None:
        logger.info("Inferred fee percentage %.4f%% from line item totals", inferred)
    return inferred


def normalise_burst(raw: dict, line_item: dict, line_item_id: str, channel: Channel, fee_percentage: Decimal | None) -> Burst:
    start = parse_date(pick(raw, "start_date"))
    end = parse_date(pick(raw, "end_date"))
    if start is None or end is None:
        logger.warning("Burst of line item %r has missing or invalid dates", line_item_id)

    fee_amount = parse_money(pick(raw, "fee_amount"))
    return Burst(
        line_item_id=line_item_id,
        channel=channel,
        start_date=start,
        end_date=end,
        media_amount=_decimal_or_zero(pick(raw, "amount")),
        fee_percentage=fee_percentage,
        fee_amount=fee_amount,
        budget_includes_fees=parse_flag(pick(line_item, "budget_includes_fees")),
        client_pays_for_media=parse_flag(pick(line_item, "client_pays_for_media")),
        no_adserving=parse_flag(pick(line_item, "no_adserving")),
        deliverables=_decimal_or_zero(pick(raw, "deliverables")),
        buy_type=parse_buy_type(pick(raw, "buy_type") or pick(line_item, "buy_type")),
    )


def normalise_line_item(raw: dict, channel: Channel | str, index: int = 0, fee_percentage: Decimal | None = None) -> LineItem:
    channel = resolve_channel(channel)
    line_item_id = str(pick(raw, "line_item_id") or f"{channel.value}-{index + 1}")
    includes_fees = parse_flag(pick(raw, "budget_includes_fees"))
    pct = resolve_fee_percentage(raw, fee_percentage, includes_fees)
    header1, header2 = schedule_headers(channel, raw)

    bursts = [
        normalise_burst(burst, raw, line_item_id, channel, pct) for burst in parse_records(pick(raw, "bursts"))
    ]
    return LineItem(id=line_item_id, channel=channel, header1=header1, header2=header2, bursts=bursts)


def normalise_line_items(raw_items, channel: Channel | str, fee_percentage: Decimal | None = None) -> list[LineItem]:
    items = parse_records(raw_items)
    result = [normalise_line_item(raw, channel, i, fee_percentage) for i, raw in enumerate(items)]
    logger.debug("Normalised %d %s line items", len(result), resolve_channel(channel).value)
    return result


def normalise_plan(line_items_by_channel: dict, fees: dict | None = None) -> list[LineItem]:
    """Normalise every channel's raw line items, applying the per-channel fee table.

    Unknown channel keys are skipped with a warning; the rest of the plan is kept.
    """
    fee_table: dict[Channel, Decimal | None] = {}
    for key, value in (fees or {}).items():
        try:
            fee_table[resolve_channel(key)] = parse_money(value)
        except ValueError:
            logger.warning("Ignoring fee for unknown media channel %r", key)

    result: list[LineItem] = []
    for key, raw_items in line_items_by_channel.items():
        try:
            channel = resolve_channel(key)
        except ValueError:
            logger.warning("Skipping line items for unknown media channel %r", key)
            continue
        result.extend(normalise_line_items(raw_items, channel, fee_table.get(channel)))
    return result
