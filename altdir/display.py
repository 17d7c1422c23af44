"""Presentation helpers: flags, icons, verification labels and result cards."""

from datetime import datetime, timezone
from types import MappingProxyType

GLOBE_FLAG = "\U0001F30D"

COUNTRY_FLAGS = MappingProxyType({
    "Germany": "🇩🇪", "France": "🇫🇷", "United Kingdom": "🇬🇧",
    "Switzerland": "🇨🇭", "Netherlands": "🇳🇱", "Sweden": "🇸🇪",
    "Norway": "🇳🇴", "Finland": "🇫🇮", "Denmark": "🇩🇰",
    "Austria": "🇦🇹", "Belgium": "🇧🇪", "Spain": "🇪🇸",
    "Italy": "🇮🇹", "Poland": "🇵🇱", "Czech Republic": "🇨🇿",
    "Czechia": "🇨🇿", "Ireland": "🇮🇪", "Portugal": "🇵🇹",
    "Estonia": "🇪🇪", "Latvia": "🇱🇻", "Lithuania": "🇱🇹",
    "Luxembourg": "🇱🇺", "Iceland": "🇮🇸", "Romania": "🇷🇴",
    "Bulgaria": "🇧🇬", "Hungary": "🇭🇺", "Slovakia": "🇸🇰",
    "Slovenia": "🇸🇮", "Croatia": "🇭🇷", "Greece": "🇬🇷",
    "Malta": "🇲🇹", "Cyprus": "🇨🇾", "Ukraine": "🇺🇦",
    "Russia": "🇷🇺", "Turkey": "🇹🇷",
    "Japan": "🇯🇵", "China": "🇨🇳", "People's Republic of China": "🇨🇳",
    "South Korea": "🇰🇷", "India": "🇮🇳", "Singapore": "🇸🇬",
    "Taiwan": "🇹🇼", "Hong Kong": "🇭🇰", "Thailand": "🇹🇭",
    "Vietnam": "🇻🇳", "Indonesia": "🇮🇩", "Malaysia": "🇲🇾",
    "Philippines": "🇵🇭", "Israel": "🇮🇱", "Iran": "🇮🇷",
    "Pakistan": "🇵🇰",
    "Australia": "🇦🇺", "New Zealand": "🇳🇿",
    "Canada": "🇨🇦", "Mexico": "🇲🇽",
    "Brazil": "🇧🇷", "Argentina": "🇦🇷", "Chile": "🇨🇱",
    "Colombia": "🇨🇴", "Rwanda": "🇷🇼",
    "South Africa": "🇿🇦", "Nigeria": "🇳🇬", "Kenya": "🇰🇪",
    "Egypt": "🇪🇬", "England": "🏴󠁧󠁢󠁥󠁮󠁧󠁿",
})

CATEGORY_ICONS = MappingProxyType({
    "Communication": "MessageCircle",
    "Productivity & Tools": "Briefcase",
    "Social": "Globe",
    "Information & Browsers": "Search",
    "Electric Vehicles": "CarFront",
    "Cloud Infrastructure": "Server",
    "Entertainment": "Play",
    "E-Commerce": "ShoppingCart",
})

_UNITS = (
    ("year", 365 * 86400),
    ("month", 30 * 86400),
    ("day", 86400),
    ("hour", 3600),
    ("minute", 60),
)


def country_flag(country: str, flags=COUNTRY_FLAGS) -> str:
    return flags.get(country, GLOBE_FLAG)


def category_icon(category: str, icons=CATEGORY_ICONS) -> str:
    return icons.get(category, "Globe")


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp (with 'Z' or offset). None if unparseable."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def time_ago(then: datetime, now: datetime = None) -> str:
    """Rough distance like '3 hours' or 'less than a minute'."""
    now = now or datetime.now(timezone.utc)
    seconds = max(0, int((now - then).total_seconds()))
    for unit, size in _UNITS:
        if seconds >= size:
            n = seconds // size
            return f"{n} {unit}{'s' if n != 1 else ''}"
    return "less than a minute"


def verified_label(last_checked: str | None, now: datetime = None) -> str:
    """'Verified active N ago', or plain 'Verified' when the time is unknown."""
    then = parse_timestamp(last_checked)
    if then is None:
        return "Verified"
    return f"Verified active {time_ago(then, now)} ago"


def trustpilot_badge(item) -> bool:
    trust = getattr(item, "trust", None)
    return trust is not None and trust.trustpilot_status == "verified"


def format_card(item, now: datetime = None) -> list[str]:
    """Lines for one result card in the CLI."""
    badges = [verified_label(item.status.last_checked, now)]
    if trustpilot_badge(item):
        badges.append("Trustpilot verified")
    return [
        f"  {country_flag(item.country)} {item.name} ({item.country})",
        f"    {item.description}",
        f"    [{category_icon(item.category_name)}] {item.category_name}  |  {item.region}",
        f"    {item.url}",
        f"    {'  |  '.join(badges)}",
    ]
