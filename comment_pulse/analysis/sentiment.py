"""Sentiment result types and the OpenAI-backed analysis request.

This module owns the structured result types shared by every scoring path
(``SentimentLabel``, ``SentimentResult``, ``AnalysisResult``) together with
``request_analysis`` which asks OpenAI for a sentiment + keyword payload via
the central ``openai_client`` wrapper.

The prompt asks the model to respond *only* with a compact JSON object so the
payload can be validated field by field before it is trusted.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from comment_pulse.openai_client import chat_completion

_logger = logging.getLogger(__name__)

# Scores strictly above / below these bounds are polar, the rest is neutral.
POSITIVE_THRESHOLD = 0.1
NEGATIVE_THRESHOLD = -0.1


class SentimentLabel(str, Enum):
    """Enumeration of supported sentiment classes."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


def label_for_score(score: float) -> SentimentLabel:
    """Map *score* onto a label using the fixed threshold policy."""
    if score > POSITIVE_THRESHOLD:
        return SentimentLabel.POSITIVE
    if score < NEGATIVE_THRESHOLD:
        return SentimentLabel.NEGATIVE
    return SentimentLabel.NEUTRAL


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, float(value)))


@dataclass(frozen=True)
class SentimentResult:
    """Structured sentiment analysis output."""

    label: SentimentLabel
    score: float  # range -1.0 .. 1.0
    confidence: float = 0.0  # range 0.0 .. 1.0

    @classmethod
    def from_score(cls, score: float, confidence: float) -> "SentimentResult":
        """Build a result whose label is derived from the clamped *score*."""
        score_f = _clamp(score, -1.0, 1.0)
        return cls(
            label=label_for_score(score_f),
            score=score_f,
            confidence=_clamp(confidence, 0.0, 1.0),
        )

    @classmethod
    def neutral(cls) -> "SentimentResult":
        return cls(label=SentimentLabel.NEUTRAL, score=0.0, confidence=0.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "label": self.label.value,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Per-comment analysis: sentiment, ranked keywords and raw word count."""

    sentiment: SentimentResult
    keywords: List[str] = field(default_factory=list)
    word_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sentiment": self.sentiment.to_dict(),
            "keywords": list(self.keywords),
            "wordCount": self.word_count,
        }


@dataclass(frozen=True)
class RemoteAnalysis:
    """Validated payload returned by the remote classifier (no word count)."""

    sentiment: SentimentResult
    keywords: List[str]
    reasoning: Optional[str] = None


_RESPONSE_RE = re.compile(r"\{[\s\S]*\}")  # outermost JSON object in string

_MAX_REMOTE_KEYWORDS = 10


def _require_number(payload: Dict[str, Any], key: str, low: float, high: float) -> float:
    value = payload.get(key)
    # bool is an int subclass but never a valid score
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Sentiment {key} missing or not numeric")
    if not low <= value <= high:
        raise ValueError(f"Sentiment {key} {value} outside [{low}, {high}]")
    return float(value)


def _parse_response(content: str) -> RemoteAnalysis:
    """Validate the model's raw string response against the expected schema.

    Expected shape::

        {"sentiment": {"label": ..., "score": -1..1, "confidence": 0..1},
         "keywords": [<=10 strings], "reasoning": "optional"}
    """

    match = _RESPONSE_RE.search(content)
    if not match:
        raise ValueError("Model response did not contain a JSON object")

    try:
        payload: Dict[str, Any] = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise ValueError("Failed to parse JSON from model response") from exc

    if not isinstance(payload, dict):
        raise ValueError("Model response JSON was not an object")

    sentiment = payload.get("sentiment")
    if not isinstance(sentiment, dict):
        raise ValueError("Model response missing 'sentiment' object")

    label_raw = sentiment.get("label")
    try:
        SentimentLabel(label_raw)
    except ValueError as exc:
        raise ValueError(f"Unexpected sentiment label: {label_raw}") from exc

    score = _require_number(sentiment, "score", -1.0, 1.0)
    confidence = _require_number(sentiment, "confidence", 0.0, 1.0)

    keywords = payload.get("keywords", [])
    if not isinstance(keywords, list) or not all(isinstance(k, str) for k in keywords):
        raise ValueError("Keywords were not an array of strings")
    if len(keywords) > _MAX_REMOTE_KEYWORDS:
        raise ValueError(f"Expected at most {_MAX_REMOTE_KEYWORDS} keywords")

    reasoning = payload.get("reasoning")
    if reasoning is not None and not isinstance(reasoning, str):
        raise ValueError("Reasoning must be a string when present")

    # The label is re-derived from the score so every tier obeys one policy.
    return RemoteAnalysis(
        sentiment=SentimentResult.from_score(score, confidence),
        keywords=keywords,
        reasoning=reasoning,
    )


_PROMPT_SYSTEM = (
    "You are a precise sentiment analysis assistant for public consultation "
    "comments. Return ONLY a minified JSON object like "
    '{"sentiment":{"label":"positive","score":0.8,"confidence":0.9},'
    '"keywords":["pricing","support"],"reasoning":"..."}.'
)


def _build_user_prompt(text: str) -> str:
    return (
        "Analyze the sentiment of this text and extract key meaningful words "
        "(not stop words).\n\n"
        f'Text: "{text}"\n\n'
        "Provide:\n"
        "1. Sentiment label (positive, negative, or neutral)\n"
        "2. Score from -1 (very negative) to 1 (very positive)\n"
        "3. Confidence level (0-1) based on how clear the sentiment is\n"
        "4. Up to 10 keywords that are most meaningful in this text\n"
        "5. Brief reasoning for the sentiment classification\n\n"
        "Be nuanced - not everything is neutral. Look for subtle emotional "
        "indicators, context, and implied sentiment."
    )


def request_analysis(
    text: str,
    *,
    temperature: float = 0.0,
    timeout: Optional[float] = None,
) -> RemoteAnalysis:
    """Classify *text* and extract keywords using OpenAI.

    Parameters
    ----------
    text
        The text to classify.
    temperature
        Optional temperature forwarded to the model (default 0 for determinism).
    timeout
        Request timeout in seconds, forwarded to the client when given.

    Raises
    ------
    ValueError
        If the response is missing fields or fails schema validation.
    """

    messages = [
        {"role": "system", "content": _PROMPT_SYSTEM},
        {"role": "user", "content": _build_user_prompt(text)},
    ]

    kwargs: Dict[str, Any] = {"temperature": temperature}
    if timeout is not None:
        kwargs["timeout"] = timeout

    response = chat_completion(messages, **kwargs)
    try:
        content: str = response["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ValueError("Model response missing expected fields") from exc

    result = _parse_response(content)
    _logger.debug(
        "Remote analysis label=%s score=%.3f keywords=%d",
        result.sentiment.label.value,
        result.sentiment.score,
        len(result.keywords),
    )
    return result
