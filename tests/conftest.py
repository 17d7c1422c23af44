"""Shared fixtures: a small catalog document and fake HTTP sessions."""

import copy
import json

import pytest
import requests

from altdir import catalog, search

CHECKED = "2026-10-01T08:00:00Z"


def innovator(entry_id, name, country, region, description, active=True, url=None, trust=None):
    item = {
        "id": entry_id,
        "name": name,
        "region": region,
        "country": country,
        "url": url or f"https://www.{entry_id}.example",
        "description": description,
        "status": {"is_active": active, "last_checked": CHECKED, "http_code": 200 if active else 0},
    }
    if trust is not None:
        item["trust_data"] = trust
    return item


DOCUMENT = [
    {
        "category": "Communication",
        "incumbent": {"name": "WhatsApp", "hq": "USA"},
        "innovators": [
            innovator("proton-mail", "Proton Mail", "Switzerland", "Western Europe",
                      "Encrypted email service from Switzerland",
                      trust={"trustpilot_status": "verified"}),
            innovator("threema", "Threema", "Switzerland", "Western Europe",
                      "Private messenger popular with Tesla owners"),
            innovator("old-chat", "Old Chat", "Finland", "Northern Europe",
                      "Retired chat app", active=False),
        ],
    },
    {
        "category": "Information & Browsers",
        "incumbent": {"name": "Google Search", "hq": "USA"},
        "innovators": [
            innovator("ecosoa", "Ecosoa", "Germany", "Western Europe",
                      "Search engine that plants trees"),
            innovator("qwant", "Qwant", "France", "Western Europe",
                      "Privacy-respecting search engine from France"),
        ],
    },
    {
        "category": "Social",
        "incumbent": {"name": "Facebook", "hq": "USA"},
        "innovators": [
            innovator("mastodon", "Mastodon", "Germany", "Western Europe",
                      "Decentralized social network from Germany"),
        ],
    },
    {
        "category": "Electric Vehicles",
        "incumbent": {"name": "Tesla", "hq": "USA"},
        "innovators": [
            innovator("polestar", "Polestar", "Sweden", "Northern Europe",
                      "Performance electric cars from Sweden"),
            innovator("byd", "BYD", "China", "East Asia", "Electric cars and batteries from China"),
        ],
    },
    {
        "category": "Cloud Infrastructure",
        "incumbent": {"name": "AWS", "hq": "USA"},
        "innovators": [
            innovator("gone-cloud", "Gone Cloud", "Estonia", "Northern Europe",
                      "Hosting that no longer answers", active=False),
        ],
    },
]


@pytest.fixture(autouse=True)
def _reset_caches(monkeypatch):
    catalog.invalidate()
    monkeypatch.setattr(search, "_index_cache", None)
    yield
    catalog.invalidate()


@pytest.fixture
def document():
    return copy.deepcopy(DOCUMENT)


@pytest.fixture
def snapshot(document):
    return catalog.parse_document(document)


@pytest.fixture
def services_file(tmp_path, document):
    path = tmp_path / "services.json"
    path.write_text(json.dumps(document, indent=2), encoding="utf-8")
    return str(path)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, reason="OK"):
        self.status_code = status_code
        self.ok = status_code < 400
        self.reason = reason
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """Stands in for requests.Session.

    ``routes`` maps (method, url) or url to a FakeResponse, an exception
    instance to raise, or a callable taking the request kwargs.
    """

    def __init__(self, routes=None, default=None):
        self.routes = routes or {}
        self.default = default if default is not None else FakeResponse(200)
        self.calls = []
        self.headers = {}

    def _handle(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        outcome = self.routes.get((method, url), self.routes.get(url, self.default))
        if isinstance(outcome, Exception):
            raise outcome
        if callable(outcome):
            return outcome(**kwargs)
        return outcome

    def head(self, url, **kwargs):
        return self._handle("HEAD", url, **kwargs)

    def get(self, url, **kwargs):
        return self._handle("GET", url, **kwargs)


@pytest.fixture
def dns_error():
    return requests.ConnectionError(
        "Max retries exceeded (Caused by NameResolutionError: Failed to resolve "
        "'nowhere.example' ([Errno -2] Name or service not known))")
