"""Tests for relevance scoring and query filtering."""

import pytest

from conftest import make_product
from stylescout.tools.scraping.filters import (
    extract_keywords,
    filter_by_query,
    keyword_match_score,
    matches_any_keyword,
    relevance_score,
)


class TestExtractKeywords:
    """Tests for extract_keywords."""

    def test_drops_short_words(self):
        """Words of two characters or fewer are not keywords."""
        assert extract_keywords("A red t-shirt for me") == ["red", "t-shirt", "for"]

    def test_lowercases(self):
        assert extract_keywords("Linen SHIRT") == ["linen", "shirt"]


class TestRelevanceScore:
    """Tests for the scraper weighting."""

    def test_exact_match_and_keywords(self):
        """Exact substring earns 50, each keyword 15."""
        product = make_product("1", "Linen Blend Shirt", brand="H&M")
        assert relevance_score(product, "linen shirt") == 30
        assert relevance_score(product, "linen blend") == 50 + 15 + 15

    def test_brand_keyword_bonus(self):
        """A keyword in the brand earns the keyword and brand bonus."""
        product = make_product("1", "Casual Sneakers", brand="Campus")
        assert relevance_score(product, "campus") == 15 + 10

    def test_no_match_scores_zero(self):
        product = make_product("1", "Leather Loafers", brand="Zara")
        assert relevance_score(product, "saree") == 0

    def test_monotonic_in_matched_keywords(self):
        """Matching more query keywords never lowers the score."""
        query = "cotton linen shirt"
        none = make_product("1", "Denim Jacket")
        one = make_product("2", "Denim Shirt")
        two = make_product("3", "Linen Shirt")
        three = make_product("4", "Cotton Linen Shirt")

        scores = [relevance_score(p, query) for p in (none, one, two, three)]
        assert scores == sorted(scores)


class TestFilterByQuery:
    """Tests for filter_by_query."""

    @pytest.fixture
    def products(self):
        return [
            make_product("1", "White Cotton Shirt"),
            make_product("2", "Linen Shirt"),
            make_product("3", "Oxford Shirt"),
            make_product("4", "Denim Jeans"),
            make_product("5", "Running Shoes"),
            make_product("6", "Leather Wallet"),
            make_product("7", "Silk Scarf"),
        ]

    def test_blank_query_passes_through(self, products):
        """A blank query returns every product in input order."""
        assert filter_by_query(products, "   ") == products

    def test_relevant_products_ranked(self, products):
        """Products above the threshold are returned best first."""
        result = filter_by_query(products, "cotton shirt")

        assert [p.id for p in result] == ["1", "2", "3"]

    def test_few_relevant_returns_top_five(self, products):
        """With fewer than three relevant products, the top five by score are returned."""
        result = filter_by_query(products, "jeans")

        assert len(result) == 5
        assert result[0].id == "4"

    def test_few_relevant_returns_all_when_small(self):
        """Never fewer than available when the candidate set is small."""
        products = [make_product("1", "Jeans"), make_product("2", "Scarf")]
        result = filter_by_query(products, "saree")
        assert len(result) == 2


class TestKeywordMatchScore:
    """Tests for the analyzer weighting."""

    def test_blank_query(self):
        score, reasoning = keyword_match_score(make_product("1", "Anything"), "")
        assert score == 50
        assert reasoning == "General product recommendation."

    def test_base_score_without_matches(self):
        score, reasoning = keyword_match_score(make_product("1", "Leather Wallet"), "summer dress")
        assert score == 30
        assert reasoning == "Browse option based on your search."

    def test_exact_keyword_and_category_bonus(self):
        """Exact match, keywords and a shared category bucket all add up."""
        product = make_product("1", "Floral Summer Dress", brand="Sassafras")
        score, reasoning = keyword_match_score(product, "summer dress")

        assert score == 30 + 30 + 20 + 15
        assert reasoning == "Matches your search for exact match, summer, dress."

    def test_capped_at_95(self):
        """Keyword scoring leaves headroom for LLM-graded matches."""
        product = make_product("1", "Blue Cotton Linen Shirt Dress", brand="Cotton")
        score, _ = keyword_match_score(product, "cotton linen shirt dress")

        assert score == 95

    def test_keyword_bonus_capped(self):
        """Keyword matches contribute at most 30 points."""
        product = make_product("1", "Alpha Bravo Charlie Delta Echo")
        score, _ = keyword_match_score(product, "echo delta charlie bravo alpha")
        assert score == 30 + 30

    def test_only_first_category_bucket_counts(self):
        """Category bonus does not stack across buckets."""
        product = make_product("1", "Formal Shirt Blazer")
        score, reasoning = keyword_match_score(product, "shirt blazer")

        assert score == 30 + 30 + 20 + 15
        assert "shirt" in reasoning
        assert "formal" not in reasoning


class TestMatchesAnyKeyword:
    def test_matches_title_case_insensitively(self):
        product = make_product("1", "Wrap Midi Dress")
        assert matches_any_keyword(product, ["WRAP", "peplum"])
        assert not matches_any_keyword(product, ["peplum"])
