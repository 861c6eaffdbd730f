"""Rule-based narrative report derived from aggregate statistics.

Every threshold lives in one of the tables below; the functions only walk the
tables. Given the same results, summary and keyword table the output is
identical.
"""
from __future__ import annotations

from collections import Counter
from typing import Callable, List, Sequence, Tuple

from comment_pulse.analysis.sentiment import SentimentLabel
from comment_pulse.reporting.models import (
    BatchSummary,
    CommentAnalysis,
    KeywordCount,
    Narrative,
)

Rule = Tuple[Callable[[BatchSummary], bool], str]

NO_CONCERNS = "No significant concerns identified in the feedback"
NO_SPECIFIC_CONCERNS = "No specific concerns identified in the analysis"

CONCERN_VOCABULARY = (
    "cost", "expensive", "burden", "impact", "problem",
    "issue", "concern", "worry", "risk", "danger",
)
FINANCIAL_VOCABULARY = ("cost", "expensive", "burden")

# (minimum strength, tone word); first match wins
TONE_LADDER: List[Tuple[int, str]] = [(60, "strongly"), (40, "moderately"), (0, "slightly")]

AVERAGE_SCORE_LADDER: List[Rule] = [
    (lambda s: s.average_score > 0.2, "generally favorable public opinion"),
    (lambda s: s.average_score < -0.2, "significant public concerns"),
    (lambda s: True, "mixed public opinion with balanced perspectives"),
]

MAJORITY_LADDER: List[Rule] = [
    (
        lambda s: s.positive_percentage > 50,
        "Majority of respondents express favorable views toward the proposed policy",
    ),
    (
        lambda s: s.negative_percentage > 50,
        "Majority of respondents express concerns or opposition to the proposed policy",
    ),
    (lambda s: True, "Public opinion is divided with no clear majority sentiment"),
]

ENGAGEMENT_LADDER: List[Rule] = [
    (
        lambda s: s.total > 100,
        "High level of public engagement with significant participation in the consultation process",
    ),
    (
        lambda s: s.total > 50,
        "Moderate level of public engagement in the consultation process",
    ),
    (lambda s: True, "Limited public participation in the consultation process"),
]

PREDOMINANCE_LADDER: List[Rule] = [
    (
        lambda s: s.positive_percentage > s.negative_percentage + 20,
        "predominantly positive public sentiment ({pos}% positive vs {neg}% negative). ",
    ),
    (
        lambda s: s.negative_percentage > s.positive_percentage + 20,
        "predominantly negative public sentiment ({neg}% negative vs {pos}% positive). ",
    ),
    (
        lambda s: True,
        "mixed public sentiment with relatively balanced positive ({pos}%) and negative ({neg}%) responses. ",
    ),
]

AVERAGE_STRENGTH_LADDER: List[Rule] = [
    (
        lambda s: abs(s.average_score) > 0.3,
        "The strong average sentiment score ({avg:.2f}) indicates clear public opinion trends.",
    ),
    (
        lambda s: True,
        "The moderate average sentiment score ({avg:.2f}) suggests nuanced public opinion.",
    ),
]

# Negative share thresholds (percent, exclusive) for reservation concerns
RESERVATION_RULES: List[Tuple[float, str]] = [
    (30, "Significant portion of respondents express reservations about the proposal"),
    (50, "Majority opposition suggests need for policy revision or additional consultation"),
]

# Every matching rule contributes all of its lines
RECOMMENDATION_RULES: List[Tuple[Callable[[BatchSummary], bool], Tuple[str, ...]]] = [
    (
        lambda s: s.negative_percentage > 40,
        (
            "Consider addressing the primary concerns raised by respondents before policy implementation",
            "Conduct additional stakeholder engagement to better understand opposition viewpoints",
        ),
    ),
    (
        lambda s: s.positive_percentage > 60,
        (
            "Leverage positive public sentiment to build support for policy implementation",
            "Highlight the aspects of the policy that resonate most positively with the public",
        ),
    ),
    (
        lambda s: s.neutral_percentage > 40,
        (
            "Provide additional information to help neutral respondents form more definitive opinions",
            "Focus on education and awareness campaigns to clarify policy benefits and impacts",
        ),
    ),
]

COST_RECOMMENDATION = (
    "Develop clear cost-benefit analysis and communicate economic impacts transparently"
)
OUTREACH_RECOMMENDATION = (
    "Expand outreach efforts to increase public participation in future consultations"
)
STANDING_RECOMMENDATIONS = (
    "Monitor ongoing public sentiment as policy development progresses",
    "Consider implementing a feedback mechanism for continuous public input",
)

METHODOLOGY = (
    "This analysis employed automated sentiment analysis techniques to evaluate "
    "public comments submitted during the consultation period. Each comment was "
    "processed using natural language processing algorithms to determine "
    "sentiment polarity (positive, negative, or neutral) and extract key themes. "
    "The analysis includes keyword frequency analysis, sentiment scoring (-1 to +1 "
    "scale), and statistical aggregation of results. While automated analysis "
    "provides valuable insights at scale, it should be complemented with "
    "qualitative review of individual comments for comprehensive understanding."
)


def _first_match(rules: Sequence[Rule], summary: BatchSummary) -> str:
    for predicate, text in rules:
        if predicate(summary):
            return text
    raise LookupError("rule table has no catch-all entry")  # pragma: no cover


def dominant_sentiment(summary: BatchSummary) -> str:
    if summary.positive_percentage > summary.negative_percentage:
        return SentimentLabel.POSITIVE.value
    if summary.negative_percentage > summary.positive_percentage:
        return SentimentLabel.NEGATIVE.value
    return SentimentLabel.NEUTRAL.value


def tone_for(strength: int) -> str:
    for minimum, tone in TONE_LADDER:
        if strength >= minimum:
            return tone
    return TONE_LADDER[-1][1]


def executive_summary(summary: BatchSummary, total_comments: int) -> str:
    strength = max(
        summary.positive_percentage,
        summary.negative_percentage,
        summary.neutral_percentage,
    )
    return (
        f"Analysis of {total_comments} public comments reveals a "
        f"{tone_for(strength)} {dominant_sentiment(summary)} overall sentiment "
        f"({strength}%). The average sentiment score of {summary.average_score:.2f} "
        f"indicates {_first_match(AVERAGE_SCORE_LADDER, summary)}. This analysis "
        "provides valuable insights into public perception and can inform policy "
        "decision-making processes."
    )


def key_findings(summary: BatchSummary, keywords: Sequence[KeywordCount]) -> List[str]:
    findings = [
        f"Sentiment distribution: {summary.positive_percentage}% positive, "
        f"{summary.negative_percentage}% negative, "
        f"{summary.neutral_percentage}% neutral responses",
        _first_match(MAJORITY_LADDER, summary),
    ]
    if keywords:
        topics = ", ".join(k.word for k in keywords[:5])
        findings.append(f"Most frequently discussed topics: {topics}")
    findings.append(_first_match(ENGAGEMENT_LADDER, summary))
    return findings


def sentiment_overview(summary: BatchSummary) -> str:
    values = {
        "pos": summary.positive_percentage,
        "neg": summary.negative_percentage,
        "avg": summary.average_score,
    }
    return (
        "The sentiment analysis reveals "
        + _first_match(PREDOMINANCE_LADDER, summary).format(**values)
        + f"{summary.neutral_percentage}% of comments maintain a neutral stance. "
        + _first_match(AVERAGE_STRENGTH_LADDER, summary).format(**values)
    )


def top_concerns(
    results: Sequence[CommentAnalysis], keywords: Sequence[KeywordCount]
) -> List[str]:
    negative = [r for r in results if r.label is SentimentLabel.NEGATIVE]
    if not negative:
        return [NO_CONCERNS]

    concerns: List[str] = []
    flagged = [k for k in keywords if k.word.lower() in CONCERN_VOCABULARY]
    if flagged:
        financial = next((k.count for k in flagged if k.word in FINANCIAL_VOCABULARY), 0)
        concerns.append(f"Financial concerns mentioned {financial} times")

    negative_share = len(negative) / len(results) * 100
    concerns.extend(text for threshold, text in RESERVATION_RULES if negative_share > threshold)

    negative_counts: Counter[str] = Counter()
    for result in negative:
        negative_counts.update(result.analysis.keywords)
    # most_common keeps first-seen order for equal counts
    top_negative = [word for word, _ in negative_counts.most_common(3)]
    if top_negative:
        concerns.append(f"Key areas of concern include: {', '.join(top_negative)}")

    return concerns or [NO_SPECIFIC_CONCERNS]


def recommendations(summary: BatchSummary, concerns: Sequence[str]) -> List[str]:
    recs: List[str] = []
    for predicate, lines in RECOMMENDATION_RULES:
        if predicate(summary):
            recs.extend(lines)
    if any("cost" in c or "Financial" in c for c in concerns):
        recs.append(COST_RECOMMENDATION)
    if summary.total < 50:
        recs.append(OUTREACH_RECOMMENDATION)
    recs.extend(STANDING_RECOMMENDATIONS)
    return recs


def generate_narrative(
    results: Sequence[CommentAnalysis],
    summary: BatchSummary,
    keywords: Sequence[KeywordCount],
) -> Narrative:
    """Derive the full narrative report from one batch's outputs."""
    concerns = top_concerns(results, keywords)
    return Narrative(
        executive_summary=executive_summary(summary, len(results)),
        key_findings=key_findings(summary, keywords),
        sentiment_overview=sentiment_overview(summary),
        top_concerns=concerns,
        recommendations=recommendations(summary, concerns),
        methodology=METHODOLOGY,
    )
