"""Catalog population: Wikidata SPARQL import and bundled seed entries."""

import logging
import re

import requests

from . import catalog
from .config import IMPORT_USER_AGENT
from .validators import make_session, now_iso

logger = logging.getLogger(__name__)

SPARQL_ENDPOINT = "https://query.wikidata.org/sparql"

SPARQL_QUERY = """
SELECT DISTINCT ?item ?itemLabel ?website ?countryLabel ?countryCode WHERE {
  ?item wdt:P31 wd:Q7397 .
  ?item wdt:P495 ?country .
  ?item wdt:P856 ?website .
  FILTER(?country != wd:Q30)
  OPTIONAL { ?country wdt:P297 ?countryCode . }
  SERVICE wikibase:label { bd:serviceParam wikibase:language "en" . }
}
LIMIT 50
"""

REGIONS = {
    "Europe": ["Germany", "France", "United Kingdom", "Switzerland", "Netherlands", "Sweden",
               "Norway", "Finland", "Denmark", "Austria", "Belgium", "Spain", "Italy", "Poland",
               "Czech Republic", "Czechia", "Ireland", "Portugal", "Estonia", "Latvia",
               "Lithuania", "Luxembourg", "Iceland", "Romania", "Bulgaria", "Hungary",
               "Slovakia", "Slovenia", "Croatia", "Greece", "Malta", "Cyprus", "Ukraine",
               "Russia"],
    "Asia": ["Japan", "China", "South Korea", "India", "Singapore", "Taiwan", "Hong Kong",
             "Thailand", "Vietnam", "Indonesia", "Malaysia", "Philippines"],
    "Middle East": ["Israel"],
    "Oceania": ["Australia", "New Zealand"],
    "North America": ["Canada", "Mexico"],
    "South America": ["Brazil", "Argentina", "Chile", "Colombia"],
    "Africa": ["South Africa", "Nigeria", "Kenya", "Egypt"],
}
COUNTRY_REGION = {country: region for region, countries in REGIONS.items() for country in countries}

# Keyword rules for guessing a category from a product name, first hit wins
NAME_CATEGORIES = [
    ("Email", ["mail", "email"]),
    ("Office Suite", ["office", "document", "word"]),
    ("Browser", ["browser"]),
    ("Cloud Storage", ["cloud", "storage", "drive"]),
    ("Messaging", ["chat", "messenger", "message"]),
    ("Video", ["video", "stream"]),
    ("Music", ["music", "audio"]),
    ("Photos", ["photo", "image"]),
    ("Maps", ["map"]),
    ("Search", ["search"]),
]

UNCHECKED_TRUST = {
    "website_status": "unchecked",
    "trustpilot_status": "unchecked",
    "wikidata_status": "unchecked",
    "last_checked": None,
}

SEED_ENTRIES = {
    "Communication": [
        ("line", "Line", "East Asia", "Japan", "https://line.me",
         "Line - Messaging app from Japan"),
        ("rakuten-viber", "Rakuten Viber", "Western Europe", "Luxembourg", "https://www.viber.com",
         "Viber - Messaging app owned by Rakuten"),
        ("fastmail", "Fastmail", "Oceania", "Australia", "https://www.fastmail.com",
         "Fastmail - Private email from Australia"),
    ],
    "Productivity & Tools": [
        ("canva", "Canva", "Oceania", "Australia", "https://www.canva.com",
         "Canva - Design platform from Australia"),
        ("zoho", "Zoho", "South Asia", "India", "https://www.zoho.com",
         "Zoho - Business software suite from India"),
        ("atlassian", "Atlassian", "Oceania", "Australia", "https://www.atlassian.com",
         "Atlassian - Jira, Confluence from Australia"),
    ],
    "Social": [
        ("mastodon", "Mastodon", "Western Europe", "Germany", "https://joinmastodon.org",
         "Mastodon - Decentralized social network from Germany"),
        ("bluesky", "Bluesky", "North America", "USA", "https://bsky.app",
         "Bluesky - Public Benefit social network"),
        ("koo", "Koo", "South Asia", "India", "https://www.kooapp.com",
         "Koo - Social platform from India"),
    ],
    "Electric Vehicles": [
        ("tata-ev", "Tata Motors EV", "South Asia", "India", "https://ev.tatamotors.com",
         "Tata Motors - Leading EV manufacturer from India"),
        ("ola-electric", "Ola Electric", "South Asia", "India", "https://www.olaelectric.com",
         "Ola Electric - Electric scooters from India"),
    ],
    "E-Commerce": [
        ("mercado-libre", "Mercado Libre", "South America", "Argentina", "https://www.mercadolibre.com",
         "Mercado Libre - E-commerce giant from Argentina"),
        ("rakuten", "Rakuten", "East Asia", "Japan", "https://www.rakuten.co.jp",
         "Rakuten - E-commerce and fintech from Japan"),
        ("flipkart", "Flipkart", "South Asia", "India", "https://www.flipkart.com",
         "Flipkart - E-commerce platform from India"),
        ("jumia", "Jumia", "Africa", "Nigeria", "https://www.jumia.com.ng",
         "Jumia - E-commerce platform from Africa"),
        ("allegro", "Allegro", "Central Europe", "Poland", "https://allegro.pl",
         "Allegro - E-commerce platform from Poland"),
    ],
}

# Categories the seeder may create when missing
SEED_CATEGORIES = {
    "E-Commerce": {"icon": "ShoppingCart", "incumbent": {"name": "Amazon", "hq": "USA"}},
}


class WikidataError(RuntimeError):
    """Raised when the SPARQL endpoint does not answer with results."""


def generate_id(name: str) -> str:
    """URL-safe slug: lowercase, non-alphanumerics collapsed to '-'."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def region_for(country: str) -> str:
    return COUNTRY_REGION.get(country, "Other")


def categorize_by_name(name: str) -> str:
    lower = name.lower()
    for category, keywords in NAME_CATEGORIES:
        for kw in keywords:
            if kw in lower:
                return category
    return "Software"


def fetch_wikidata_items(session: requests.Session = None, timeout: float = 60) -> list[dict]:
    """Run the SPARQL query and return its result bindings."""
    session = session or make_session(IMPORT_USER_AGENT)
    logger.info("Fetching data from Wikidata SPARQL endpoint...")
    try:
        response = session.get(
            SPARQL_ENDPOINT,
            params={"query": SPARQL_QUERY, "format": "json"},
            headers={"Accept": "application/sparql-results+json"},
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise WikidataError(f"Wikidata query failed: {e}")
    if not response.ok:
        raise WikidataError(f"Wikidata query failed: {response.status_code} {response.reason}")
    try:
        return response.json()["results"]["bindings"]
    except (ValueError, KeyError, TypeError) as e:
        raise WikidataError(f"Unexpected Wikidata response: {e}")


def transform_bindings(bindings: list[dict]) -> list[dict]:
    """Group SPARQL rows into category documents sorted by category name."""
    categories = {}
    for row in bindings:
        name = row.get("itemLabel", {}).get("value") or "Unknown"
        website = row.get("website", {}).get("value") or ""
        country = row.get("countryLabel", {}).get("value") or "Unknown"
        if not website or name == "Unknown":
            continue

        category = categorize_by_name(name)
        innovator = {
            "id": generate_id(name),
            "name": name,
            "region": region_for(country),
            "country": country,
            "url": website,
            "description": f"{name} - Software from {country}",
            "status": {"is_active": False, "last_checked": None, "http_code": 0},
        }
        doc = categories.setdefault(category, {
            "category": category,
            "incumbent": {"name": "Various", "hq": "USA"},
            "innovators": [],
        })
        if not any(i["id"] == innovator["id"] for i in doc["innovators"]):
            doc["innovators"].append(innovator)

    return [categories[name] for name in sorted(categories)]


def import_wikidata(path: str = None, session: requests.Session = None) -> list[dict]:
    """Replace the catalog with software imported from Wikidata."""
    bindings = fetch_wikidata_items(session=session)
    logger.info("Fetched %d items from Wikidata", len(bindings))
    data = transform_bindings(bindings)
    total = sum(len(c["innovators"]) for c in data)
    logger.info("Grouped %d innovators into %d categories", total, len(data))
    catalog.write_document(data, path)
    return data


def seed_catalog(path: str = None) -> int:
    """Reset trust data, mark entries active and add the bundled seed entries.

    Returns the number of entries added.
    """
    data = catalog.read_document(path)
    for _, innovator in catalog.iter_innovators(data):
        innovator["trust_data"] = dict(UNCHECKED_TRUST)
        innovator.setdefault("status", {"last_checked": None, "http_code": 0})["is_active"] = True

    added = 0
    for category_name, seeds in SEED_ENTRIES.items():
        category = next((c for c in data if c.get("category") == category_name), None)
        if category is None and category_name in SEED_CATEGORIES:
            template = SEED_CATEGORIES[category_name]
            category = {
                "category": category_name,
                "icon": template["icon"],
                "incumbent": dict(template["incumbent"]),
                "innovators": [],
            }
            data.append(category)
        if category is None:
            logger.info("Skipping seeds for missing category %s", category_name)
            continue

        existing = {i.get("id") for i in category.setdefault("innovators", [])}
        for entry_id, name, region, country, url, description in seeds:
            if entry_id in existing:
                continue
            category["innovators"].append({
                "id": entry_id,
                "name": name,
                "region": region,
                "country": country,
                "url": url,
                "description": description,
                "status": {"is_active": True, "last_checked": now_iso(), "http_code": 200},
                "trust_data": dict(UNCHECKED_TRUST),
            })
            existing.add(entry_id)
            added += 1

    catalog.write_document(data, path)
    logger.info("Seeded %d new entries", added)
    return added
