"""Aggregate raw comments into a structured :class:`BatchAnalysis`."""

from __future__ import annotations

import logging
import math
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence

from comment_pulse import config
from comment_pulse.analysis.classifier import (
    Classifier,
    LexiconClassifier,
    build_classifier,
)
from comment_pulse.analysis.sentiment import AnalysisResult, SentimentLabel
from comment_pulse.reporting.models import (
    BatchAnalysis,
    BatchSummary,
    Comment,
    CommentAnalysis,
    KeywordCount,
)

logger = logging.getLogger(__name__)

_LOCAL = LexiconClassifier()


def _percentage(count: int, total: int) -> int:
    """Return ``count/total`` as a whole percentage, halves rounded up."""
    if total <= 0:
        return 0
    return int(math.floor(count / total * 100 + 0.5))


def _classify_one(classifier: Classifier, comment: Comment) -> AnalysisResult:
    try:
        return classifier.analyze(comment.text)
    except Exception as exc:  # noqa: BLE001 – one bad comment must not sink the batch
        logger.warning(
            "Classification failed for comment %s, using lexicon: %s",
            comment.id,
            exc,
            exc_info=True,
        )
        return _LOCAL.analyze(comment.text)


def summarize_results(results: Sequence[CommentAnalysis]) -> BatchSummary:
    """Return label counts, percentages and mean score for *results*."""
    total = len(results)
    if total == 0:
        return BatchSummary()

    counts: Counter[SentimentLabel] = Counter(r.label for r in results)
    positive = counts[SentimentLabel.POSITIVE]
    negative = counts[SentimentLabel.NEGATIVE]
    neutral = counts[SentimentLabel.NEUTRAL]

    return BatchSummary(
        total=total,
        positive=positive,
        negative=negative,
        neutral=neutral,
        positive_percentage=_percentage(positive, total),
        negative_percentage=_percentage(negative, total),
        neutral_percentage=_percentage(neutral, total),
        average_score=sum(r.analysis.sentiment.score for r in results) / total,
    )


def tally_keywords(
    results: Sequence[CommentAnalysis], limit: Optional[int] = None
) -> List[KeywordCount]:
    """Count, per keyword, how many comments list it (document frequency).

    Sorted by count descending; ties keep first-seen order.
    """
    limit = config.MAX_KEYWORDS if limit is None else limit
    counts: Dict[str, int] = {}
    for result in results:
        for word in dict.fromkeys(result.analysis.keywords):
            counts[word] = counts.get(word, 0) + 1

    # dicts keep insertion order and sorted() is stable
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [KeywordCount(word=word, count=count) for word, count in ranked[:limit]]


def analyze_batch(
    comments: Sequence[Comment],
    *,
    classifier: Optional[Classifier] = None,
    max_workers: Optional[int] = None,
) -> BatchAnalysis:
    """Classify every comment concurrently and aggregate the results.

    The output order always matches *comments*. An empty input yields a
    zero-valued :class:`BatchAnalysis`.
    """
    if not comments:
        return BatchAnalysis()

    classifier = classifier or build_classifier()
    workers = max(1, min(max_workers or config.ANALYSIS_MAX_WORKERS, len(comments)))

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="classify") as pool:
        futures = [pool.submit(_classify_one, classifier, c) for c in comments]
        analyses = [f.result() for f in futures]

    results = [
        CommentAnalysis(id=c.id, text=c.text, analysis=a, source=c.source)
        for c, a in zip(comments, analyses)
    ]
    summary = summarize_results(results)
    keywords = tally_keywords(results)

    logger.info(
        "batch_analyzed",
        extra={
            "total": summary.total,
            "positive": summary.positive,
            "negative": summary.negative,
            "neutral": summary.neutral,
            "classifier": classifier.name,
        },
    )
    return BatchAnalysis(results=results, summary=summary, keywords=keywords)
