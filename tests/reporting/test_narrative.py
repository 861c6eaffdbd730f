"""Unit tests for the rule-based narrative generator."""
from __future__ import annotations

import pytest

from comment_pulse.analysis.sentiment import AnalysisResult, SentimentResult
from comment_pulse.reporting import narrative as nv
from comment_pulse.reporting.models import BatchSummary, CommentAnalysis, KeywordCount


def _summary(pos, neg, neu, avg=0.0, total=None):
    total = total if total is not None else 10
    return BatchSummary(
        total=total,
        positive=round(total * pos / 100),
        negative=round(total * neg / 100),
        neutral=round(total * neu / 100),
        positive_percentage=pos,
        negative_percentage=neg,
        neutral_percentage=neu,
        average_score=avg,
    )


def _result(idx, score, keywords):
    return CommentAnalysis(
        id=f"c{idx}",
        text=f"comment {idx}",
        analysis=AnalysisResult(
            sentiment=SentimentResult.from_score(score, 0.5), keywords=keywords, word_count=2
        ),
    )


@pytest.mark.parametrize(
    "strength,tone", [(100, "strongly"), (60, "strongly"), (59, "moderately"), (40, "moderately"), (39, "slightly")]
)
def test_tone_ladder(strength, tone):
    assert nv.tone_for(strength) == tone


def test_executive_summary_positive_strong():
    text = nv.executive_summary(_summary(70, 20, 10, avg=0.45), 10)
    assert text.startswith("Analysis of 10 public comments reveals a strongly positive overall sentiment (70%).")
    assert "0.45" in text
    assert "generally favorable public opinion" in text


def test_executive_summary_tie_is_neutral():
    text = nv.executive_summary(_summary(30, 30, 40, avg=0.0), 10)
    assert "moderately neutral overall sentiment (40%)" in text
    assert "mixed public opinion" in text


def test_executive_summary_negative_concerns():
    text = nv.executive_summary(_summary(10, 55, 35, avg=-0.5), 10)
    assert "moderately negative" in text
    assert "significant public concerns" in text


def test_key_findings_ladders():
    keywords = [KeywordCount(w, 3) for w in ["cost", "bus", "park", "tax", "road", "bike"]]
    findings = nv.key_findings(_summary(60, 20, 20, total=120), keywords)
    assert findings[0] == "Sentiment distribution: 60% positive, 20% negative, 20% neutral responses"
    assert findings[1].startswith("Majority of respondents express favorable views")
    assert findings[2] == "Most frequently discussed topics: cost, bus, park, tax, road"
    assert findings[3].startswith("High level of public engagement")


def test_key_findings_without_keywords_and_small_sample():
    findings = nv.key_findings(_summary(30, 30, 40, total=5), [])
    assert findings[1] == "Public opinion is divided with no clear majority sentiment"
    assert len(findings) == 3
    assert findings[-1] == "Limited public participation in the consultation process"


def test_sentiment_overview_predominance():
    text = nv.sentiment_overview(_summary(70, 10, 20, avg=0.5))
    assert "predominantly positive public sentiment (70% positive vs 10% negative)" in text
    assert "20% of comments maintain a neutral stance" in text
    assert "strong average sentiment score (0.50)" in text


def test_sentiment_overview_mixed():
    text = nv.sentiment_overview(_summary(40, 30, 30, avg=0.1))
    assert "mixed public sentiment" in text
    assert "moderate average sentiment score (0.10)" in text


def test_concerns_empty_results_sentinel():
    assert nv.top_concerns([], []) == [nv.NO_CONCERNS]


def test_concerns_without_negative_comments():
    results = [_result(0, 0.9, ["great"]), _result(1, 0.0, ["bus"])]
    assert nv.top_concerns(results, [KeywordCount("cost", 5)]) == [nv.NO_CONCERNS]


def test_concerns_from_negative_comments():
    results = [
        _result(0, -0.9, ["cost", "tax", "delay"]),
        _result(1, -0.8, ["cost", "delay"]),
        _result(2, 0.8, ["park"]),
    ]
    keywords = [KeywordCount("cost", 2), KeywordCount("delay", 2), KeywordCount("risk", 1)]
    concerns = nv.top_concerns(results, keywords)
    assert concerns == [
        "Financial concerns mentioned 2 times",
        "Significant portion of respondents express reservations about the proposal",
        "Majority opposition suggests need for policy revision or additional consultation",
        "Key areas of concern include: cost, delay, tax",
    ]


def test_concerns_fallback_sentinel_when_nothing_matches():
    # 1 negative of 4 (25%), no concern vocabulary, no keywords anywhere
    results = [_result(0, -0.9, []), _result(1, 0.9, []), _result(2, 0.9, []), _result(3, 0.9, [])]
    assert nv.top_concerns(results, []) == [nv.NO_SPECIFIC_CONCERNS]


def test_recommendations_table():
    recs = nv.recommendations(_summary(10, 45, 45, total=20), ["Financial concerns mentioned 1 times"])
    assert recs[:2] == list(nv.RECOMMENDATION_RULES[0][1])
    assert recs[2:4] == list(nv.RECOMMENDATION_RULES[2][1])
    assert nv.COST_RECOMMENDATION in recs
    assert nv.OUTREACH_RECOMMENDATION in recs
    assert recs[-2:] == list(nv.STANDING_RECOMMENDATIONS)


def test_recommendations_large_positive_sample():
    recs = nv.recommendations(_summary(70, 10, 20, total=200), [nv.NO_CONCERNS])
    assert recs == list(nv.RECOMMENDATION_RULES[1][1]) + list(nv.STANDING_RECOMMENDATIONS)


def test_generate_narrative_is_deterministic_and_complete():
    results = [_result(0, -0.9, ["cost"]), _result(1, 0.9, ["park"])]
    summary = _summary(50, 50, 0, avg=0.0, total=2)
    keywords = [KeywordCount("cost", 1), KeywordCount("park", 1)]

    first = nv.generate_narrative(results, summary, keywords)
    second = nv.generate_narrative(results, summary, keywords)

    assert first == second
    data = first.to_dict()
    assert set(data) == {
        "executiveSummary",
        "keyFindings",
        "sentimentOverview",
        "topConcerns",
        "recommendations",
        "methodology",
    }
    assert data["methodology"] == nv.METHODOLOGY
    assert data["executiveSummary"].startswith("Analysis of 2 public comments")
