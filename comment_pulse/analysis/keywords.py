"""Keyword extraction for a single comment.

Two rankings are available:

``frequency``
    Raw term counts, ties broken by first occurrence.
``significance``
    Term frequency weighted by how concentrated a term is across the
    sentences of the comment. The weights live in a ``_TermContext`` that is
    created for one document and thrown away afterwards, so concurrent or
    successive calls never share counts.
"""
from __future__ import annotations

import math
import re
from collections import Counter
from typing import Dict, List

from comment_pulse import config
from comment_pulse.analysis.lexicon import tokenize

STRATEGIES = ("frequency", "significance")

_SENTENCE_SPLIT_RE = re.compile(r"[.!?;\n]+")


def _rank(weights: Dict[str, float], order: Dict[str, int], limit: int) -> List[str]:
    ranked = sorted(weights, key=lambda word: (-weights[word], order[word]))
    return ranked[:limit]


def _first_seen(tokens: List[str]) -> Dict[str, int]:
    order: Dict[str, int] = {}
    for idx, token in enumerate(tokens):
        order.setdefault(token, idx)
    return order


def _by_frequency(text: str, limit: int) -> List[str]:
    tokens = tokenize(text)
    counts = Counter(tokens)
    return _rank(dict(counts), _first_seen(tokens), limit)


class _TermContext:
    """Term statistics for exactly one document."""

    __slots__ = ("tokens", "term_counts", "sentence_df", "n_sentences")

    def __init__(self, text: str) -> None:
        self.tokens: List[str] = tokenize(text)
        self.term_counts: Counter[str] = Counter(self.tokens)
        self.sentence_df: Counter[str] = Counter()
        sentences = [s for s in _SENTENCE_SPLIT_RE.split(text) if s.strip()]
        for sentence in sentences:
            self.sentence_df.update(set(tokenize(sentence)))
        self.n_sentences = len(sentences)

    def weights(self) -> Dict[str, float]:
        n = self.n_sentences
        return {
            term: tf * (1.0 + math.log((1 + n) / (1 + self.sentence_df[term])))
            for term, tf in self.term_counts.items()
        }


def _by_significance(text: str, limit: int) -> List[str]:
    context = _TermContext(text)
    return _rank(context.weights(), _first_seen(context.tokens), limit)


def extract_keywords(
    text: str,
    *,
    strategy: str | None = None,
    limit: int | None = None,
) -> List[str]:
    """Return up to *limit* (max 10) distinct keywords, most significant first.

    Raises
    ------
    ValueError
        If *strategy* is not one of :data:`STRATEGIES`.
    """
    strategy = strategy or config.KEYWORD_STRATEGY
    cap = config.MAX_KEYWORDS_PER_COMMENT
    limit = cap if limit is None else max(0, min(limit, cap))

    if strategy == "frequency":
        return _by_frequency(text, limit)
    if strategy == "significance":
        return _by_significance(text, limit)
    raise ValueError(f"Unknown keyword strategy: {strategy}")
