"""Tests for the trend store."""

from datetime import datetime, timedelta

import pytest

from conftest import FIXED_NOW, fixed_clock
from stylescout.trends.catalog import CURATED_TRENDS
from stylescout.trends.store import (
    STYLE_VOCABULARY,
    TrendStore,
    calculate_confidence_score,
    cosine_similarity,
)


def raw_trend(trend_id: str, **overrides) -> dict:
    data = {
        "trend_id": trend_id,
        "trend_name": f"Trend {trend_id}",
        "description": "A bold party look.",
        "source": "Test Source",
        "sources_count": 3,
        "category": "party",
        "season": "Any",
        "keywords": ["sequin"],
        "created_at": datetime(2026, 1, 1),
        "expires_at": datetime(2027, 1, 1),
    }
    data.update(overrides)
    return data


class TestConfidenceScore:
    """Tests for calculate_confidence_score."""

    OLD = FIXED_NOW - timedelta(days=90)

    @pytest.mark.parametrize("sources,expected", [
        (1, 0.40),
        (2, 0.60),
        (3, 0.70),
        (4, 0.85),
        (5, 0.90),
        (12, 0.90),
    ])
    def test_by_sources(self, sources, expected):
        assert calculate_confidence_score(sources, self.OLD, FIXED_NOW) == expected

    def test_recency_boost(self):
        """Trends recorded within 30 days get +0.05."""
        recent = FIXED_NOW - timedelta(days=30)
        assert calculate_confidence_score(3, recent, FIXED_NOW) == 0.75
        assert calculate_confidence_score(5, recent, FIXED_NOW) == 0.95

    def test_partial_day_still_recent(self):
        """Elapsed time counts in whole days, so 30 days and some hours is recent."""
        created = FIXED_NOW - timedelta(days=30, hours=11)
        assert calculate_confidence_score(3, created, FIXED_NOW) == 0.75

    def test_no_boost_after_window(self):
        stale = FIXED_NOW - timedelta(days=31)
        assert calculate_confidence_score(3, stale, FIXED_NOW) == 0.70

    def test_pure_function_of_inputs(self):
        """Same source count outside the window means the same score."""
        a = calculate_confidence_score(4, FIXED_NOW - timedelta(days=40), FIXED_NOW)
        b = calculate_confidence_score(4, FIXED_NOW - timedelta(days=400), FIXED_NOW)
        assert a == b


class TestCosineSimilarity:
    def test_identical(self):
        assert cosine_similarity([1.0, 0.0, 1.0], [1.0, 0.0, 1.0]) == pytest.approx(1.0)

    def test_zero_norm(self):
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0

    def test_length_mismatch(self):
        assert cosine_similarity([1.0], [1.0, 1.0]) == 0.0


class TestTrendStore:
    """Tests for TrendStore."""

    def test_initialize_is_idempotent(self):
        store = TrendStore(clock=fixed_clock)
        assert not store.initialized

        store.initialize()
        first = store.get_all()
        store.initialize()

        assert store.initialized
        assert len(first) == len(CURATED_TRENDS) == 12
        assert store.get_all()[0] is first[0]

    def test_confidence_derived_at_init(self, trend_store):
        by_name = {t.trend_name: t for t in trend_store.get_all()}

        assert by_name["Relaxed Tailoring"].confidence_score == 0.90
        assert by_name["Dopamine Dressing"].confidence_score == 0.85
        assert by_name["Corporate Core"].confidence_score == 0.70
        assert by_name["Boho Maximalism"].confidence_score == 0.40

    def test_input_confidence_is_ignored(self):
        """Confidence and embeddings are never taken from input records."""
        store = TrendStore([raw_trend("t1", confidence_score=0.99, embedding=[1.0])], clock=fixed_clock)
        store.initialize()

        trend = store.get_all()[0]
        assert trend.confidence_score == 0.70
        assert len(trend.embedding) == len(STYLE_VOCABULARY)

    def test_embed_is_binary_indicator(self, trend_store):
        vector = trend_store.embed("Relaxed, OFFICE-ready and bold!")

        assert set(vector) == {0.0, 1.0}
        on = {STYLE_VOCABULARY[i] for i, v in enumerate(vector) if v}
        assert on == {"relaxed", "office", "bold"}

    def test_embed_matches_whole_words(self, trend_store):
        """Substrings such as "boldly" do not switch on "bold"."""
        assert not any(trend_store.embed("boldly casually"))

    def test_search_by_vector_orders_by_similarity(self, trend_store):
        results = trend_store.search_by_vector(trend_store.embed("relaxed office"), 6)
        assert [t.trend_name for t in results] == ["Relaxed Tailoring", "Corporate Core"]

    def test_search_by_vector_ties_keep_corpus_order(self, trend_store):
        results = trend_store.search_by_vector(trend_store.embed("summer"), 10)
        assert [t.trend_id for t in results] == ["trend_009", "trend_004", "trend_006", "trend_003"]

    def test_search_by_vector_zero_query(self, trend_store):
        assert trend_store.search_by_vector(trend_store.embed("kurta"), 6) == []

    def test_search_by_vector_respects_k(self, trend_store):
        assert len(trend_store.search_by_vector(trend_store.embed("summer"), 2)) == 2

    def test_search_by_keyword(self, trend_store):
        results = trend_store.search_by_keyword("Festive KURTA for a wedding")
        assert [t.trend_name for t in results] == ["Elevated Ethnic"]

    def test_search_by_keyword_ignores_any_category(self, trend_store):
        """Category "any" never matches by itself."""
        assert trend_store.search_by_keyword("anything goes") == []

    def test_any_category_trend_matches_by_keyword(self):
        """Only the category clause is skipped, keywords and name still match."""
        store = TrendStore([raw_trend("t1", category="any")], clock=fixed_clock)
        store.initialize()

        assert [t.trend_id for t in store.search_by_keyword("sequin top")] == ["t1"]
        assert [t.trend_id for t in store.search_by_keyword("trend t1 please")] == ["t1"]
        assert store.search_by_keyword("anything for many occasions") == []

    def test_search_by_keyword_matches_name_and_category(self, trend_store):
        names = [t.trend_name for t in trend_store.search_by_keyword("quiet luxury office")]
        assert "Quiet Luxury" in names
        assert "Corporate Core" in names

    def test_embedding_failure_leaves_keyword_path(self, monkeypatch):
        """A trend whose embedding fails is stored without one."""
        store = TrendStore([raw_trend("t1")], clock=fixed_clock)

        def broken(text):
            raise ValueError("model offline")

        monkeypatch.setattr(store, "embed", broken)
        store.initialize()

        trend = store.get_all()[0]
        assert trend.embedding is None
        assert store.search_by_keyword("sequin top") == [trend]

    def test_expiry(self):
        store = TrendStore(
            [raw_trend("old", expires_at=FIXED_NOW - timedelta(days=1)), raw_trend("new")],
            clock=fixed_clock,
        )
        store.initialize()

        assert [t.trend_id for t in store.all_active()] == ["new"]
        assert len(store.get_all()) == 2

    def test_get_by_confidence(self, trend_store):
        results = trend_store.get_by_confidence(0.85)
        assert {t.trend_id for t in results} == {"trend_001", "trend_002", "trend_003", "trend_004"}
