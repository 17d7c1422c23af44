"""Tests for the fuzzy index, the filter pipeline and the query session."""

import pytest

from altdir import search
from altdir.catalog import project
from altdir.config import BRAND_ALIASES
from altdir.models import QueryState
from altdir.search import SearchSession, build_index, filter_entries, get_index, score_text

ALIASES = {
    "Electric Vehicles": ["tesla", "rivian"],
    "Social": ["facebook", "instagram"],
}


def ids(items):
    return [item.id for item in items]


def run(snapshot, text="", category=None, table=ALIASES):
    projected = project(snapshot)
    index = build_index(projected)
    return filter_entries(QueryState(text, category), projected, index, table)


class TestScoreText:

    def test_exact_substring(self):
        assert score_text("search", "privacy search engine") == 100

    def test_small_typo(self):
        assert score_text("ecosia", "ecosoa") >= 60
        assert score_text("polestr", "polestar") >= 60

    def test_short_field_cannot_explain_long_query(self):
        assert score_text("ecosia", "asia") < 60

    def test_scattered_letters_in_long_text(self):
        assert score_text("qwant", "search engine that plants trees") < 60
        assert score_text("zebra", "encrypted email service from switzerland") < 60

    def test_reordered_words(self):
        assert score_text("email encrypted", "encrypted email service") == 100

    def test_empty(self):
        assert score_text("", "anything") == 0
        assert score_text("query", "") == 0


class TestSearchIndex:

    def test_exact_name(self, snapshot):
        index = build_index(project(snapshot))
        assert "qwant" in ids(item for item, _ in index.search("Qwant"))

    def test_one_character_edit(self, snapshot):
        index = build_index(project(snapshot))
        assert "ecosoa" in ids(item for item, _ in index.search("Ecosia"))

    def test_matches_country_and_category_and_incumbent(self, snapshot):
        index = build_index(project(snapshot))
        assert "polestar" in ids(item for item, _ in index.search("sweden"))
        assert "mastodon" in ids(item for item, _ in index.search("social"))
        assert "qwant" in ids(item for item, _ in index.search("google search"))

    def test_unrelated_query(self, snapshot):
        index = build_index(project(snapshot))
        assert index.search("xyznonexistentquery123") == []

    @pytest.mark.parametrize("word", ["zebra", "brick", "piano", "tulip"])
    def test_unrelated_short_word(self, snapshot, word):
        index = build_index(project(snapshot))
        assert index.search(word) == []

    def test_exact_name_matches_only_that_entry(self, snapshot):
        index = build_index(project(snapshot))
        assert ids(item for item, _ in index.search("Qwant")) == ["qwant"]

    @pytest.mark.parametrize("typo, expected", [("Mastadan", "mastodon"), ("Qvamt", "qwant")])
    def test_two_character_edits(self, snapshot, typo, expected):
        index = build_index(project(snapshot))
        assert expected in ids(item for item, _ in index.search(typo))

    def test_words_spread_over_fields(self, snapshot):
        index = build_index(project(snapshot))
        assert ids(item for item, _ in index.search("qwant france")) == ["qwant"]

    def test_blank_query(self, snapshot):
        index = build_index(project(snapshot))
        assert index.search("   ") == []

    def test_results_carry_distance(self, snapshot):
        index = build_index(project(snapshot))
        results = index.search("Qwant")
        assert results[0][0].id == "qwant"
        assert results[0][1] == 0.0
        assert all(0.0 <= d <= index.threshold for _, d in results)

    def test_zero_threshold_is_exact_only(self, snapshot):
        index = build_index(project(snapshot), threshold=0.0)
        assert index.search("Ecosia") == []
        assert "ecosoa" in ids(item for item, _ in index.search("Ecosoa"))

    def test_len(self, snapshot):
        assert len(build_index(project(snapshot))) == 7


class TestGetIndex:

    def test_cached_by_snapshot_identity(self, snapshot):
        projected, index = get_index(snapshot)
        again_projected, again_index = get_index(snapshot)
        assert again_index is index
        assert again_projected is projected

    def test_rebuilt_for_new_snapshot(self, snapshot, document):
        from altdir.catalog import parse_document
        _, index = get_index(snapshot)
        _, other = get_index(parse_document(document))
        assert other is not index


class TestFilterEntries:

    def test_empty_query_returns_all_active(self, snapshot):
        assert ids(run(snapshot)) == ids(project(snapshot))

    def test_category_only(self, snapshot):
        assert ids(run(snapshot, category="Social")) == ["mastodon"]

    def test_brand_alias_overrides_fuzzy_search(self, snapshot):
        # threema mentions Tesla in its description but is not an EV
        assert ids(run(snapshot, "tesla")) == ["polestar", "byd"]

    def test_alias_ignored_when_category_selected(self, snapshot):
        results = run(snapshot, "tesla", category="Communication")
        assert "threema" in ids(results)
        assert all(r.category_name == "Communication" for r in results)

    def test_category_and_text(self, snapshot):
        results = run(snapshot, "search engine", category="Information & Browsers")
        assert ids(results) == ["ecosoa", "qwant"]

    def test_fuzzy_respects_category(self, snapshot):
        assert run(snapshot, "Qwant", category="Social") == []

    def test_no_match_is_empty(self, snapshot):
        assert run(snapshot, "xyznonexistentquery123") == []

    @pytest.mark.parametrize("word", ["zebra", "brick", "piano", "tulip"])
    def test_short_unrelated_word_is_empty(self, snapshot, word):
        assert run(snapshot, word) == []

    def test_typo_still_finds_entry(self, snapshot):
        assert "ecosoa" in ids(run(snapshot, "Ecosia"))

    def test_preserves_catalog_order(self, snapshot):
        order = ids(project(snapshot))
        results = ids(run(snapshot, "germany"))
        assert results == [i for i in order if i in results]
        assert set(results) >= {"ecosoa", "mastodon"}

    def test_ids_shared_across_categories_stay_separate(self, document):
        from altdir.catalog import parse_document
        document[2]["innovators"][0]["id"] = "qwant"
        snapshot = parse_document(document)
        results = run(snapshot, "Qwant", category="Information & Browsers")
        assert [r.category_name for r in results] == ["Information & Browsers"]
        assert [r.category_name for r in run(snapshot, "Qwant")] == ["Information & Browsers"]

    def test_unknown_category(self, snapshot):
        assert run(snapshot, category="Gardening") == []


class TestSearchSession:

    def test_results_and_counts(self, snapshot):
        session = SearchSession(snapshot, ALIASES)
        assert len(session.get_results()) == 7
        counts = session.get_category_counts()
        assert counts.total == 7
        assert counts.get("Social") == 1

    def test_clearing_category_restores_full_list(self, snapshot):
        session = SearchSession(snapshot, ALIASES)
        full = session.get_results()
        session.set_selected_category("Social")
        assert ids(session.get_results()) == ["mastodon"]
        session.set_selected_category(None)
        assert session.get_results() == full

    def test_clearing_text_restores_full_list(self, snapshot):
        session = SearchSession(snapshot, ALIASES)
        session.set_free_text("xyznonexistentquery123")
        assert session.get_results() == []
        session.set_free_text("")
        assert len(session.get_results()) == 7

    def test_bundled_aliases_catch_partial_brand(self, snapshot):
        session = SearchSession(snapshot, BRAND_ALIASES)
        session.set_free_text("mail")
        assert {r.category_name for r in session.get_results()} == {"Communication"}

    def test_counts_ignore_query_state(self, snapshot):
        session = SearchSession(snapshot, ALIASES)
        session.set_free_text("tesla")
        assert session.get_category_counts().total == 7

    def test_reuses_index_across_queries(self, snapshot, monkeypatch):
        built = []
        original = search.build_index
        monkeypatch.setattr(search, "build_index", lambda e, threshold: built.append(1) or original(e, threshold))
        session = SearchSession(snapshot, ALIASES)
        for text in ("Qwant", "Ecosia", "sweden"):
            session.set_free_text(text)
            session.get_results()
        SearchSession(snapshot, ALIASES)
        assert built == [1]
