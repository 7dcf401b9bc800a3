from mediabill.models.burst import BuyType, Channel

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

MEDIA_CHANNELS = (
    Channel.SEARCH,
    Channel.SOCIAL_MEDIA,
    Channel.TELEVISION,
    Channel.RADIO,
    Channel.NEWSPAPER,
    Channel.MAGAZINES,
    Channel.OOH,
    Channel.CINEMA,
    Channel.DIGI_DISPLAY,
    Channel.DIGI_AUDIO,
    Channel.DIGI_VIDEO,
    Channel.BVOD,
    Channel.INTEGRATION,
    Channel.PROG_DISPLAY,
    Channel.PROG_VIDEO,
    Channel.PROG_BVOD,
    Channel.PROG_AUDIO,
    Channel.PROG_OOH,
    Channel.INFLUENCERS,
)

PRODUCTION_CHANNELS = frozenset({Channel.PRODUCTION, Channel.CONSULTING})

MEDIA_TYPE_LABELS = {
    Channel.SEARCH: "Search",
    Channel.SOCIAL_MEDIA: "Social Media",
    Channel.TELEVISION: "Television",
    Channel.RADIO: "Radio",
    Channel.NEWSPAPER: "Newspaper",
    Channel.MAGAZINES: "Magazines",
    Channel.OOH: "OOH",
    Channel.CINEMA: "Cinema",
    Channel.DIGI_DISPLAY: "Digital Display",
    Channel.DIGI_AUDIO: "Digital Audio",
    Channel.DIGI_VIDEO: "Digital Video",
    Channel.BVOD: "BVOD",
    Channel.INTEGRATION: "Integration",
    Channel.PROG_DISPLAY: "Programmatic Display",
    Channel.PROG_VIDEO: "Programmatic Video",
    Channel.PROG_BVOD: "Programmatic BVOD",
    Channel.PROG_AUDIO: "Programmatic Audio",
    Channel.PROG_OOH: "Programmatic OOH",
    Channel.INFLUENCERS: "Influencers",
    Channel.PRODUCTION: "Production",
    Channel.CONSULTING: "Consulting",
}

# Ad-serving rate group per channel; channels not listed carry no ad-serving cost.
AD_SERVING_RATE_GROUPS = {
    Channel.PROG_VIDEO: "video",
    Channel.PROG_BVOD: "video",
    Channel.DIGI_VIDEO: "video",
    Channel.BVOD: "video",
    Channel.PROG_AUDIO: "audio",
    Channel.DIGI_AUDIO: "audio",
    Channel.PROG_DISPLAY: "display",
    Channel.DIGI_DISPLAY: "display",
    Channel.PROG_OOH: "impression",
}

AUDIO_CHANNELS = frozenset({Channel.DIGI_AUDIO, Channel.PROG_AUDIO})

# Buy types whose deliverables are priced per thousand.
PER_THOUSAND_BUY_TYPES = frozenset({BuyType.CPM})


def format_month(year: int, month: int) -> str:
    if not 1 <= month <= 12:
        return f"{month} {year}"
    return f"{MONTH_NAMES[month - 1]} {year}"


def channel_label(channel: Channel | str) -> str:
    try:
        return MEDIA_TYPE_LABELS[Channel(channel)]
    except ValueError:
        return str(channel)
