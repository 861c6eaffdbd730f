"""Deterministic word-list sentiment scorer.

Used as the local, network-independent scoring tier. The scorer is a pure
function of its input: no caches, no module state mutated at call time.
"""
from __future__ import annotations

import re
from typing import FrozenSet, List

from comment_pulse.analysis.sentiment import SentimentResult

POSITIVE_WORDS: FrozenSet[str] = frozenset(
    {
        "good", "great", "excellent", "amazing", "wonderful", "fantastic",
        "awesome", "brilliant", "outstanding", "superb", "perfect", "love",
        "like", "enjoy", "happy", "pleased", "satisfied", "delighted",
        "thrilled", "impressed", "support", "agree", "approve", "recommend",
        "beneficial", "helpful", "useful", "valuable", "important",
        "necessary", "effective", "efficient", "successful", "positive",
        "optimistic", "hopeful", "encouraging", "inspiring", "motivating",
        "uplifting",
    }
)

NEGATIVE_WORDS: FrozenSet[str] = frozenset(
    {
        "bad", "terrible", "awful", "horrible", "disgusting", "hate",
        "dislike", "angry", "frustrated", "disappointed", "upset", "annoyed",
        "irritated", "concerned", "worried", "anxious", "scared", "afraid",
        "disagree", "oppose", "reject", "refuse", "deny", "criticize",
        "complain", "problem", "issue", "difficulty", "trouble", "challenge",
        "obstacle", "barrier", "failure", "mistake", "error", "wrong",
        "incorrect", "inappropriate", "unacceptable", "unfair", "unjust",
        "negative", "pessimistic", "discouraging", "demotivating",
        "depressing",
    }
)

STOP_WORDS: FrozenSet[str] = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
        "of", "with", "by", "from", "up", "about", "into", "through",
        "during", "before", "after", "above", "below", "between", "among",
        "is", "are", "was", "were", "be", "been", "being", "have", "has",
        "had", "do", "does", "did", "will", "would", "could", "should",
        "may", "might", "must", "can", "this", "that", "these", "those",
        "i", "you", "he", "she", "it", "we", "they", "me", "him", "her",
        "us", "them", "my", "your", "his", "its", "our", "their",
    }
)

MIN_TOKEN_LENGTH = 3

_NON_WORD_RE = re.compile(r"[^\w\s]")


def tokenize(text: str) -> List[str]:
    """Return lowercase content tokens of *text* in document order.

    Punctuation becomes whitespace, then stop-words and tokens shorter than
    three characters are dropped. Non-string input yields ``[]``.
    """
    if not isinstance(text, str) or not text.strip():
        return []
    cleaned = _NON_WORD_RE.sub(" ", text.lower())
    return [
        token
        for token in cleaned.split()
        if len(token) >= MIN_TOKEN_LENGTH and token not in STOP_WORDS
    ]


def score_text(text: str) -> SentimentResult:
    """Score *text* by counting positive vs negative lexicon hits."""
    tokens = tokenize(text)

    positive = 0
    negative = 0
    for token in tokens:
        if token in POSITIVE_WORDS:
            positive += 1
        elif token in NEGATIVE_WORDS:
            negative += 1

    hits = positive + negative
    if hits == 0:
        return SentimentResult.neutral()

    score = (positive - negative) / hits
    confidence = min(1.0, hits / len(tokens) * 2)
    return SentimentResult.from_score(score, confidence)
