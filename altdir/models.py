"""Typed catalog records built from the on-disk services.json layout."""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from urllib.parse import quote


class CatalogError(Exception):
    """Raised when a catalog snapshot cannot be loaded or saved."""


def _require(record: dict, key: str, kind, where: str):
    if not isinstance(record, dict):
        raise CatalogError(f"{where}: expected an object, got {type(record).__name__}")
    if key not in record:
        raise CatalogError(f"{where}: missing '{key}'")
    value = record[key]
    if not isinstance(value, kind):
        raise CatalogError(f"{where}: '{key}' should be {kind.__name__}, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class HealthStatus:
    is_active: bool = False
    last_checked: str | None = None
    http_code: int = 0

    @classmethod
    def from_dict(cls, data: dict, where: str) -> "HealthStatus":
        is_active = _require(data, "is_active", bool, where)
        last_checked = data.get("last_checked")
        if last_checked is not None and not isinstance(last_checked, str):
            raise CatalogError(f"{where}: 'last_checked' should be a string or null")
        http_code = data.get("http_code", 0)
        if isinstance(http_code, bool) or not isinstance(http_code, int):
            raise CatalogError(f"{where}: 'http_code' should be int")
        return cls(is_active=is_active, last_checked=last_checked, http_code=http_code)


@dataclass(frozen=True)
class TrustSignals:
    """Independent verification flags. Informational only; search ignores them."""

    website_status: str | None = None
    trustpilot_status: str | None = None
    wikidata_status: str | None = None
    wikidata_id: str | None = None
    last_checked: str | None = None

    @classmethod
    def from_dict(cls, data: dict, where: str) -> "TrustSignals":
        if not isinstance(data, dict):
            raise CatalogError(f"{where}: 'trust_data' should be an object")
        return cls(
            website_status=data.get("website_status"),
            trustpilot_status=data.get("trustpilot_status"),
            wikidata_status=data.get("wikidata_status"),
            wikidata_id=data.get("wikidata_id"),
            last_checked=data.get("last_checked"),
        )


@dataclass(frozen=True)
class Entry:
    """One alternative service ("innovator") listed in a category."""

    id: str
    name: str
    region: str
    country: str
    url: str
    description: str
    status: HealthStatus
    trust: TrustSignals | None = None

    @classmethod
    def from_dict(cls, data: dict, where: str) -> "Entry":
        entry_id = _require(data, "id", str, where)
        where = f"{where} > {entry_id}"
        trust = data.get("trust_data")
        return cls(
            id=entry_id,
            name=_require(data, "name", str, where),
            region=_require(data, "region", str, where),
            country=_require(data, "country", str, where),
            url=_require(data, "url", str, where),
            description=_require(data, "description", str, where),
            status=HealthStatus.from_dict(_require(data, "status", dict, where), where),
            trust=TrustSignals.from_dict(trust, where) if trust is not None else None,
        )


@dataclass(frozen=True)
class Incumbent:
    name: str
    hq: str


@dataclass(frozen=True)
class Category:
    name: str
    incumbent: Incumbent
    entries: tuple[Entry, ...] = ()
    icon: str | None = None

    @classmethod
    def from_dict(cls, data: dict, index: int) -> "Category":
        name = _require(data, "category", str, f"category #{index}")
        incumbent = _require(data, "incumbent", dict, name)
        innovators = _require(data, "innovators", list, name)
        entries = tuple(Entry.from_dict(item, name) for item in innovators)
        seen = set()
        for entry in entries:
            if entry.id in seen:
                raise CatalogError(f"{name}: duplicate entry id '{entry.id}'")
            seen.add(entry.id)
        return cls(
            name=name,
            incumbent=Incumbent(
                name=_require(incumbent, "name", str, f"{name} incumbent"),
                hq=_require(incumbent, "hq", str, f"{name} incumbent"),
            ),
            entries=entries,
            icon=data.get("icon"),
        )


@dataclass(frozen=True)
class ProjectedEntry:
    """An active entry denormalized with its category and incumbent."""

    entry: Entry
    category_name: str
    incumbent_name: str

    @property
    def key(self) -> tuple[str, str]:
        # Entry ids are only unique within a category.
        return (self.category_name, self.entry.id)

    @property
    def id(self) -> str:
        return self.entry.id

    @property
    def name(self) -> str:
        return self.entry.name

    @property
    def country(self) -> str:
        return self.entry.country

    @property
    def region(self) -> str:
        return self.entry.region

    @property
    def description(self) -> str:
        return self.entry.description

    @property
    def url(self) -> str:
        return self.entry.url

    @property
    def status(self) -> HealthStatus:
        return self.entry.status

    @property
    def trust(self) -> TrustSignals | None:
        return self.entry.trust


@dataclass(frozen=True)
class QueryState:
    free_text: str = ""
    selected_category: str | None = None

    def with_text(self, text: str) -> "QueryState":
        return replace(self, free_text=text or "")

    def with_category(self, category: str | None) -> "QueryState":
        return replace(self, selected_category=category or None)


@dataclass(frozen=True)
class Suggestion:
    """A user-proposed alternative, delivered by the presentation layer."""

    name: str
    url: str
    category: str
    description: str = ""

    def subject(self) -> str:
        return f"New alternative suggestion: {self.name}"

    def body(self) -> str:
        return (f"Name: {self.name}\n"
                f"URL: {self.url}\n"
                f"Category: {self.category}\n"
                f"Description: {self.description}\n")

    def mailto_url(self, recipient: str) -> str:
        """Build a pre-filled mailto: link for an email client."""
        return (f"mailto:{recipient}"
                f"?subject={quote(self.subject())}&body={quote(self.body())}")


@dataclass(frozen=True)
class CategoryCounts:
    total: int = 0
    by_category: MappingProxyType = field(default_factory=lambda: MappingProxyType({}))

    def get(self, category: str) -> int:
        return self.by_category.get(category, 0)
