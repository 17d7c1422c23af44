"""Fuzzy search over active entries and the category/alias/search pipeline."""

import logging
import re

from thefuzz import fuzz

from .aliases import resolve_category
from .catalog import category_counts, project
from .config import FUZZY_THRESHOLD
from .models import QueryState

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("name", "country", "region", "description", "category_name", "incumbent_name")

_index_cache = None
_WORD = re.compile(r"\w+")


def _field_text(item, field: str) -> str:
    return (getattr(item, field, "") or "").lower()


def score_text(query: str, text: str) -> int:
    """Similarity 0-100 between a query and one field value.

    A query found verbatim in the field scores 100. Otherwise the query is
    compared whole-word against each word of the field, so a short query
    cannot pick up a few scattered letters inside a long description. A
    field word shorter than the query can explain at most len(word) of its
    characters and is scaled down accordingly. Multi-word queries score as
    their weakest word.
    """
    if not query or not text:
        return 0
    if query in text:
        return 100
    best = 0
    for word in _WORD.findall(text):
        score = fuzz.ratio(query, word)
        if len(word) < len(query):
            score = score * len(word) // len(query)
        best = max(best, score)
    words = query.split()
    if len(words) > 1:
        best = max(best, min(score_text(w, text) for w in words))
    return best


class SearchIndex:
    """Approximate-match index over one list of projected entries.

    A field matches when its normalized distance (1 - score/100) is at or
    below ``threshold``: 0.0 accepts only exact matches, 1.0 accepts anything.
    """

    def __init__(self, entries, threshold: float = FUZZY_THRESHOLD, fields=SEARCH_FIELDS):
        self.entries = list(entries)
        self.threshold = threshold
        self.fields = fields
        self._docs = [
            [_field_text(item, f) for f in fields]
            for item in self.entries
        ]

    def __len__(self):
        return len(self.entries)

    def score(self, position: int, query: str) -> int:
        fields = self._docs[position]
        best = max((score_text(query, text) for text in fields), default=0)
        words = query.split()
        if len(words) > 1:
            # words may be spread over fields, e.g. name and country
            spread = min(max((score_text(w, text) for text in fields), default=0) for w in words)
            best = max(best, spread)
        return best

    def search(self, text: str) -> list[tuple]:
        """Return (entry, distance) pairs within the threshold, best first."""
        query = " ".join((text or "").lower().split())
        if not query:
            return []
        results = []
        for position, item in enumerate(self.entries):
            distance = round(1.0 - self.score(position, query) / 100, 4)
            if distance <= self.threshold:
                results.append((item, distance))
        results.sort(key=lambda r: r[1])
        return results


def build_index(entries, threshold: float = FUZZY_THRESHOLD) -> SearchIndex:
    return SearchIndex(entries, threshold=threshold)


def get_index(snapshot, threshold: float = FUZZY_THRESHOLD):
    """Projected entries and their index, cached by snapshot identity."""
    global _index_cache
    cached = _index_cache
    if cached is not None and cached[0] is snapshot and cached[3] == threshold:
        return cached[1], cached[2]
    projected = project(snapshot)
    index = build_index(projected, threshold=threshold)
    _index_cache = (snapshot, projected, index, threshold)
    logger.debug("Built search index over %d active entries", len(projected))
    return projected, index


def filter_entries(query: QueryState, projected, index: SearchIndex, alias_table) -> list:
    """Apply category selection, brand-alias override and fuzzy search.

    Order follows ``projected``; relevance scores are not used for sorting.
    """
    filtered = list(projected)

    if query.selected_category:
        filtered = [p for p in filtered if p.category_name == query.selected_category]

    if query.free_text.strip():
        alias_category = None
        if not query.selected_category:
            alias_category = resolve_category(query.free_text, alias_table)
        if alias_category is not None:
            return [p for p in projected if p.category_name == alias_category]
        matched = {item.key for item, _ in index.search(query.free_text)}
        filtered = [p for p in filtered if p.key in matched]

    return filtered


class SearchSession:
    """Query state over one catalog snapshot."""

    def __init__(self, snapshot, alias_table, threshold: float = FUZZY_THRESHOLD):
        self.alias_table = alias_table
        self.threshold = threshold
        self.state = QueryState()
        self.set_snapshot(snapshot)

    def set_snapshot(self, snapshot):
        self.snapshot = snapshot
        self.projected, self.index = get_index(snapshot, threshold=self.threshold)

    def set_free_text(self, text: str):
        self.state = self.state.with_text(text)

    def set_selected_category(self, name: str | None):
        self.state = self.state.with_category(name)

    def get_results(self) -> list:
        return filter_entries(self.state, self.projected, self.index, self.alias_table)

    def get_category_counts(self):
        return category_counts(self.projected)
