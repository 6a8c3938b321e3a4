"""Tests for the trend-grounded analyzer."""

import json

import pytest

from conftest import fake_llm, make_product, sent_messages
from stylescout.agents.trend_analyzer import (
    NO_TRENDS_INSTRUCTION,
    TrendAnalyzer,
    score_with_keywords,
)


@pytest.fixture
def dresses():
    return [
        make_product("p1", "Leather Wallet", brand="Lee Cooper"),
        make_product("p2", "Floral Summer Dress", brand="Sassafras"),
        make_product("p3", "Cotton Jersey Dress", brand="H&M"),
    ]


def analysis(*entries):
    return {"analysis": [
        {"id": pid, "confidenceScore": score, "reasoning": reason, "trendReference": trend}
        for pid, score, reason, trend in entries
    ]}


class TestScoreWithKeywords:
    def test_sorted_and_annotated(self, dresses):
        ranked = score_with_keywords(dresses, "summer dress")

        assert [p.id for p in ranked] == ["p2", "p3", "p1"]
        for product in ranked:
            assert product.confidence_score == product.comfort_score
            assert product.reasoning

    def test_inputs_untouched(self, dresses):
        score_with_keywords(dresses, "summer dress")
        assert all(p.confidence_score is None for p in dresses)


class TestAnalyzeWithoutLLM:
    """Keyword path when no LLM is configured."""

    @pytest.mark.asyncio
    async def test_summer_dress_fallback(self, trend_store, dresses):
        analyzer = TrendAnalyzer(trend_store)

        result = await analyzer.analyze(dresses, "summer dress", [], None)

        assert len(result) == len(dresses)
        assert all(p.comfort_score is not None and p.reasoning for p in result)
        scores = [p.comfort_score for p in result]
        assert scores == sorted(scores, reverse=True)
        assert all(p.trend_reference is None for p in result)

    @pytest.mark.asyncio
    async def test_empty_products(self, trend_store):
        outcome = await TrendAnalyzer(trend_store, fake_llm()).rank([], "summer dress")

        assert outcome.products == []
        assert not outcome.llm_used

    @pytest.mark.asyncio
    async def test_rank_reports_retrieval(self, trend_store, dresses):
        outcome = await TrendAnalyzer(trend_store).rank(dresses, "summer dress")

        assert outcome.retrieval.method == "vector"
        assert [t.trend_name for t in outcome.retrieval.trends] == [
            "Coastal Grandmother", "Sheer Confidence", "Dopamine Dressing",
        ]


class TestAnalyzeWithLLM:
    """Tests for the LLM path."""

    @pytest.mark.asyncio
    async def test_merges_scores_and_labels_trends(self, trend_store, dresses):
        llm = fake_llm(analysis(
            ("p2", 97, "Breezy and light.", "coastal grandmother"),
            ("p3", 80, "Easy summer staple.", None),
            ("p1", 10, "Not a dress.", None),
        ))
        analyzer = TrendAnalyzer(trend_store, llm)

        outcome = await analyzer.rank(dresses, "summer dress", {"fit": "relaxed"})

        assert outcome.llm_used
        assert [p.id for p in outcome.products] == ["p2", "p3", "p1"]
        top = outcome.products[0]
        assert top.confidence_score == 97
        assert top.comfort_score == 97
        assert top.trend_reference == "Coastal Grandmother"
        assert top.trend_confidence == "High"
        assert outcome.products[1].trend_confidence is None

    @pytest.mark.asyncio
    async def test_unretrieved_trend_reference_dropped(self, trend_store, dresses):
        """Trend names the LLM invents are never passed on."""
        llm = fake_llm(analysis(
            ("p2", 90, "On trend.", "Barbiecore"),
            ("p3", 85, "Also nice.", "Relaxed Tailoring"),
        ))

        result = await TrendAnalyzer(trend_store, llm).analyze(dresses, "summer dress")

        by_id = {p.id: p for p in result}
        assert by_id["p2"].trend_reference is None
        assert by_id["p2"].trend_confidence is None
        # Relaxed Tailoring exists in the corpus but was not retrieved for this query
        assert by_id["p3"].trend_reference is None

    @pytest.mark.asyncio
    async def test_missing_analyses_use_keywords(self, trend_store, dresses):
        llm = fake_llm(analysis(("p1", 99, "Surprisingly great.", None)))

        result = await TrendAnalyzer(trend_store, llm).analyze(dresses, "summer dress")

        by_id = {p.id: p for p in result}
        assert by_id["p1"].confidence_score == 99
        assert by_id["p2"].reasoning.startswith("Matches your search")
        assert by_id["p3"].confidence_score <= 95

    @pytest.mark.asyncio
    async def test_only_first_products_sent(self, trend_store):
        products = [make_product(f"p{i}", f"Summer Dress {i}") for i in range(10)]
        llm = fake_llm(analysis(
            ("p0", 90, "Good.", None),
            ("p9", 99, "Not sent, must be ignored.", None),
        ))

        result = await TrendAnalyzer(trend_store, llm, max_llm_products=8).analyze(products, "summer dress")

        _, user = sent_messages(llm)
        sent = json.loads(user.split("\n", 1)[1])
        assert [item["id"] for item in sent] == [f"p{i}" for i in range(8)]
        assert len(result) == 10
        by_id = {p.id: p for p in result}
        assert by_id["p9"].confidence_score != 99

    @pytest.mark.asyncio
    async def test_prompt_contains_only_retrieved_trends(self, trend_store, dresses):
        llm = fake_llm(analysis(("p2", 90, "Nice.", None)))

        await TrendAnalyzer(trend_store, llm).analyze(dresses, "summer dress", user_preferences={"fit": "loose"})

        system, _ = sent_messages(llm)
        assert "Coastal Grandmother" in system
        assert "Relaxed Tailoring" not in system.split("User Query")[0].split("YOUR CONTEXT")[1]
        assert '"fit": "loose"' in system
        assert 'User Query: "summer dress"' in system
        assert NO_TRENDS_INSTRUCTION.strip() not in system

    @pytest.mark.asyncio
    async def test_no_trends_instruction(self, trend_store, dresses):
        llm = fake_llm(analysis(("p2", 90, "Nice.", None)))

        await TrendAnalyzer(trend_store, llm).analyze(dresses, "xyz")

        system, _ = sent_messages(llm)
        assert "Do NOT fabricate or invent trend names." in system
        assert "No specific user preferences provided." in system

    @pytest.mark.parametrize("reply", [
        "definitely not json",
        {"scores": []},
        {"analysis": [{"id": "p2", "confidenceScore": 150, "reasoning": "Too high."}]},
        {"analysis": [{"id": "p2", "reasoning": "No score."}]},
        RuntimeError("rate limited"),
    ])
    @pytest.mark.asyncio
    async def test_llm_failure_is_all_or_nothing(self, trend_store, dresses, reply):
        """Any failure drops every LLM result and keyword-scores everything."""
        llm = fake_llm(reply)

        outcome = await TrendAnalyzer(trend_store, llm).rank(dresses, "summer dress")

        assert not outcome.llm_used
        assert len(outcome.products) == len(dresses)
        assert all(p.reasoning for p in outcome.products)
        expected = score_with_keywords(dresses, "summer dress")
        assert [(p.id, p.confidence_score) for p in outcome.products] == [
            (p.id, p.confidence_score) for p in expected
        ]

    @pytest.mark.asyncio
    async def test_trends_hint_is_ignored(self, trend_store, dresses):
        llm = fake_llm(analysis(("p2", 90, "Nice.", "Made Up Trend")))

        result = await TrendAnalyzer(trend_store, llm).analyze(
            dresses, "summer dress", trends_hint=[{"trend_name": "Made Up Trend"}]
        )

        system, _ = sent_messages(llm)
        assert "Made Up Trend" not in system
        assert all(p.trend_reference is None for p in result)
