"""Network probes that refresh health status and trust signals in the catalog.

Each pass walks the raw services.json document in order, makes one or more
outbound requests per entry with a fixed timeout, sleeps a short courtesy
delay between entries, and saves the whole document once at the end. A failed
probe is recorded as a sentinel outcome; it never aborts the run.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from urllib.parse import urlparse

import requests

from . import catalog
from .config import (
    BROWSER_USER_AGENT, GLOBAL_DELAY, HEALTH_DELAY, HEALTH_TIMEOUT, SLOW_TRUST_CATEGORIES,
    SLOW_TRUST_TIMEOUT, TRUST_DELAY, TRUST_TIMEOUT, VALIDATOR_USER_AGENT,
)

logger = logging.getLogger(__name__)

TRUSTPILOT_URL = "https://www.trustpilot.com/review/{domain}"
WIKIDATA_API = "https://www.wikidata.org/w/api.php"

# Sentinel codes for probes that never got an HTTP response
TIMEOUT_CODE = 408
DNS_FAILURE_CODE = 404
REFUSED_CODE = 503
TLS_FAILURE_CODE = 495
UNKNOWN_FAILURE_CODE = 0


@dataclass
class ProbeResult:
    success: bool
    http_code: int


def make_session(user_agent: str = VALIDATOR_USER_AGENT) -> requests.Session:
    session = requests.Session()
    session.headers.update({"User-Agent": user_agent})
    return session


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def extract_domain(url: str) -> str | None:
    """Hostname without a leading 'www.', or None for an invalid URL."""
    try:
        host = urlparse(url).hostname
    except ValueError:
        return None
    if not host:
        return None
    return host[4:] if host.startswith("www.") else host


def classify_error(error: Exception) -> int:
    """Map a request failure to a sentinel status code."""
    if isinstance(error, requests.Timeout):
        return TIMEOUT_CODE
    if isinstance(error, requests.exceptions.SSLError):
        return TLS_FAILURE_CODE
    message = str(error).lower()
    if isinstance(error, requests.ConnectionError):
        if ("name or service not known" in message or "nodename nor servname" in message
                or "getaddrinfo" in message or "name resolution" in message):
            return DNS_FAILURE_CODE
        if "refused" in message:
            return REFUSED_CODE
    if "certificate" in message or "ssl" in message:
        return TLS_FAILURE_CODE
    return UNKNOWN_FAILURE_CODE


def check_url(url: str, session: requests.Session = None, timeout: float = HEALTH_TIMEOUT) -> ProbeResult:
    """HEAD the URL; on a non-timeout error retry once with GET."""
    session = session or make_session()
    try:
        response = session.head(url, timeout=timeout, allow_redirects=True)
        return ProbeResult(success=response.ok, http_code=response.status_code)
    except requests.RequestException as e:
        error = e

    if not isinstance(error, requests.Timeout):
        try:
            response = session.get(url, timeout=timeout, allow_redirects=True)
            return ProbeResult(success=response.ok, http_code=response.status_code)
        except requests.RequestException as retry_error:
            logger.debug("GET retry for %s failed: %s", url, retry_error)

    return ProbeResult(success=False, http_code=classify_error(error))


def check_website(url: str, session: requests.Session = None, timeout: float = SLOW_TRUST_TIMEOUT) -> str:
    """'active' for a 2xx HEAD response, otherwise 'inactive'."""
    session = session or make_session(BROWSER_USER_AGENT)
    try:
        response = session.head(url, timeout=timeout, allow_redirects=True)
    except requests.RequestException:
        return "inactive"
    return "active" if 200 <= response.status_code < 300 else "inactive"


def check_trustpilot(domain: str, category: str = None, session: requests.Session = None,
                     timeout: float = None) -> str:
    """'verified' when trustpilot.com has a review page for the domain."""
    session = session or make_session(BROWSER_USER_AGENT)
    url = TRUSTPILOT_URL.format(domain=domain)
    slow = category in SLOW_TRUST_CATEGORIES
    if timeout is None:
        timeout = SLOW_TRUST_TIMEOUT if slow else TRUST_TIMEOUT
    try:
        response = session.head(url, timeout=timeout, allow_redirects=True)
        if not response.ok and slow:
            logger.info("Retrying %s with GET request (%s)", domain, category)
            response = session.get(url, timeout=timeout, allow_redirects=True)
    except requests.RequestException as e:
        logger.warning("Error checking %s: %s", domain, e)
        return "unverified"
    return "verified" if response.status_code == 200 else "unverified"


def check_wikidata(name: str, session: requests.Session = None,
                   timeout: float = SLOW_TRUST_TIMEOUT) -> tuple[str, str | None]:
    """Search Wikidata entities by name. Returns (status, first entity id)."""
    session = session or make_session(BROWSER_USER_AGENT)
    params = {
        "action": "wbsearchentities",
        "search": name,
        "language": "en",
        "format": "json",
        "origin": "*",
    }
    try:
        response = session.get(WIKIDATA_API, params=params, timeout=timeout)
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning("Wikidata lookup for %s failed: %s", name, e)
        return "unverified", None
    hits = data.get("search") if isinstance(data, dict) else None
    if hits:
        return "verified", hits[0].get("id")
    return "unverified", None


def validate_services(path: str = None, session: requests.Session = None,
                      delay: float = None, sleep=None) -> dict:
    """Ping every entry's URL and record its health status."""
    session = session or make_session()
    delay = HEALTH_DELAY if delay is None else delay
    sleep = sleep or time.sleep
    data = catalog.read_document(path)
    pairs = list(catalog.iter_innovators(data))
    logger.info("Found %d innovators to validate", len(pairs))

    checked_at = now_iso()
    active, dead = 0, []
    for i, (_, innovator) in enumerate(pairs, 1):
        result = check_url(innovator.get("url", ""), session=session)
        innovator["status"] = {
            "is_active": result.success,
            "last_checked": checked_at,
            "http_code": result.http_code,
        }
        if result.success:
            active += 1
            logger.info("[%d/%d] %s: active (%d)", i, len(pairs), innovator.get("name"), result.http_code)
        else:
            dead.append(innovator)
            logger.info("[%d/%d] %s: dead (%s)", i, len(pairs), innovator.get("name"),
                        result.http_code or "timeout/error")
        if delay and i < len(pairs):
            sleep(delay)

    catalog.write_document(data, path)
    logger.info("Checked %d sites. %d Active, %d Dead", len(pairs), active, len(dead))
    for innovator in dead:
        logger.info("  dead: %s: %s", innovator.get("name"), innovator.get("url"))
    return {"checked": len(pairs), "active": active, "dead": len(dead),
            "dead_entries": [(d.get("name"), d.get("url")) for d in dead]}


def verify_legitimacy(path: str = None, session: requests.Session = None,
                      delay: float = None, sleep=None) -> dict:
    """Record whether each entry has a Trustpilot review page."""
    session = session or make_session(BROWSER_USER_AGENT)
    delay = TRUST_DELAY if delay is None else delay
    sleep = sleep or time.sleep
    data = catalog.read_document(path)
    checked = verified = 0
    for category in data:
        logger.info("Processing category: %s", category.get("category"))
        for innovator in category.get("innovators", []):
            domain = extract_domain(innovator.get("url", ""))
            if not domain:
                logger.info("Skipping %s: invalid URL", innovator.get("name"))
                innovator["trust_data"] = {"trustpilot_status": "unverified"}
                continue
            status = check_trustpilot(domain, category.get("category"), session=session)
            innovator["trust_data"] = {"trustpilot_status": status}
            checked += 1
            if status == "verified":
                verified += 1
            logger.info("  %s (%s): %s", innovator.get("name"), domain, status)
            if delay:
                sleep(delay)

    catalog.write_document(data, path)
    logger.info("Checked %d services. Verified: %d, Unverified: %d", checked, verified, checked - verified)
    return {"checked": checked, "verified": verified, "unverified": checked - verified}


def global_validate(path: str = None, session: requests.Session = None,
                    delay: float = None, sleep=None) -> dict:
    """Website + Trustpilot + Wikidata check for every entry."""
    session = session or make_session(BROWSER_USER_AGENT)
    delay = GLOBAL_DELAY if delay is None else delay
    sleep = sleep or time.sleep
    data = catalog.read_document(path)
    total = 0
    for category in data:
        logger.info("=== %s ===", category.get("category"))
        for innovator in category.get("innovators", []):
            total += 1
            url = innovator.get("url", "")
            domain = extract_domain(url)
            web_status = check_website(url, session=session)
            tp_status = "unverified"
            if domain:
                tp_status = check_trustpilot(domain, session=session, timeout=SLOW_TRUST_TIMEOUT)
            wd_status, wd_id = check_wikidata(innovator.get("name", ""), session=session)
            logger.info("  %s (%s): website=%s trustpilot=%s wikidata=%s%s",
                        innovator.get("name"), domain or url, web_status, tp_status,
                        wd_status, f" ({wd_id})" if wd_id else "")

            innovator["trust_data"] = {
                "website_status": web_status,
                "trustpilot_status": tp_status,
                "wikidata_status": wd_status,
                "wikidata_id": wd_id,
                "last_checked": now_iso(),
            }
            status = innovator.setdefault("status", {"last_checked": None, "http_code": 0})
            status["is_active"] = web_status == "active"
            if delay:
                sleep(delay)

    catalog.write_document(data, path)
    logger.info("Validated %d/%d services", total, total)
    return {"validated": total}
