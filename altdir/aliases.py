"""Brand-alias resolution: map a query naming an incumbent brand to a category."""

import logging

from .config import BRAND_ALIASES

logger = logging.getLogger(__name__)

_validated = False


class AliasConflictError(ValueError):
    """Raised when two categories claim overlapping aliases."""


def normalize(text: str) -> str:
    return (text or "").strip().lower()


def find_conflicts(table: dict) -> list[tuple[str, str, str, str]]:
    """Return (category_a, alias_a, category_b, alias_b) pairs that overlap.

    Two aliases from different categories overlap when they are equal or one
    contains the other, since a query equal to the longer alias would then
    match both categories.
    """
    flat = [(cat, normalize(alias)) for cat, aliases in table.items() for alias in aliases]
    conflicts = []
    for i, (cat_a, alias_a) in enumerate(flat):
        for cat_b, alias_b in flat[i + 1:]:
            if cat_a == cat_b:
                continue
            if alias_a in alias_b or alias_b in alias_a:
                conflicts.append((cat_a, alias_a, cat_b, alias_b))
    return conflicts


def validate_alias_table(table: dict) -> dict:
    """Fail fast if alias sets are not disjoint across categories."""
    for category, aliases in table.items():
        for alias in aliases:
            if not normalize(alias):
                raise AliasConflictError(f"Empty alias in category '{category}'")
    conflicts = find_conflicts(table)
    if conflicts:
        details = "; ".join(f"'{a}' ({ca}) vs '{b}' ({cb})" for ca, a, cb, b in conflicts)
        raise AliasConflictError(f"Overlapping brand aliases: {details}")
    return table


def default_table() -> dict:
    """The bundled alias table, validated on first use."""
    global _validated
    if not _validated:
        validate_alias_table(BRAND_ALIASES)
        _validated = True
    return BRAND_ALIASES


def resolve_category(free_text: str, table: dict) -> str | None:
    """First category whose aliases contain, or are contained in, the query."""
    query = normalize(free_text)
    if not query:
        return None
    for category, aliases in table.items():
        for alias in aliases:
            alias = normalize(alias)
            if alias in query or query in alias:
                logger.debug("Query '%s' matched alias '%s' -> %s", query, alias, category)
                return category
    return None
