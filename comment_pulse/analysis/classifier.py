"""Per-comment classification with graceful degradation.

``Classifier`` is the seam between the batch pipeline and whatever produces
sentiment + keywords for a single text. Two implementations exist:

* :class:`OpenAIClassifier` asks the model through ``request_analysis``.
* :class:`LexiconClassifier` composes the local scorer and keyword extractor.

:class:`FallbackClassifier` wraps a primary and a fallback so any failure of
the primary (network, timeout, invalid payload, missing credentials) is
logged and answered by the fallback instead of raised.
"""
from __future__ import annotations

import abc
import logging
from typing import List, Optional

from comment_pulse import config
from comment_pulse.analysis.keywords import extract_keywords
from comment_pulse.analysis.lexicon import MIN_TOKEN_LENGTH, STOP_WORDS, score_text
from comment_pulse.analysis.sentiment import (
    AnalysisResult,
    SentimentResult,
    request_analysis,
)
from comment_pulse.openai_client import is_configured

logger = logging.getLogger(__name__)

BACKENDS = ("auto", "openai", "lexicon")


def count_words(text: str) -> int:
    """Return the number of whitespace-delimited tokens in the raw *text*."""
    if not isinstance(text, str):
        return 0
    return len(text.split())


def empty_result() -> AnalysisResult:
    return AnalysisResult(sentiment=SentimentResult.neutral(), keywords=[], word_count=0)


def _is_blank(text: str) -> bool:
    return not isinstance(text, str) or not text.strip()


def _normalize_keywords(keywords: List[str]) -> List[str]:
    """Apply the local keyword invariants to externally produced keywords."""
    seen: List[str] = []
    for raw in keywords:
        word = raw.strip().lower()
        if len(word) < MIN_TOKEN_LENGTH or word in STOP_WORDS or word in seen:
            continue
        seen.append(word)
    return seen[: config.MAX_KEYWORDS_PER_COMMENT]


class Classifier(abc.ABC):
    """Produce an :class:`AnalysisResult` for one comment text."""

    name = "base"

    def analyze(self, text: str) -> AnalysisResult:
        if _is_blank(text):
            return empty_result()
        return self._analyze(text)

    @abc.abstractmethod
    def _analyze(self, text: str) -> AnalysisResult:
        """Classify non-blank *text*."""


class LexiconClassifier(Classifier):
    """Local word-list tier; deterministic and network-free."""

    name = "lexicon"

    def __init__(self, keyword_strategy: Optional[str] = None) -> None:
        self._keyword_strategy = keyword_strategy

    def _analyze(self, text: str) -> AnalysisResult:
        return AnalysisResult(
            sentiment=score_text(text),
            keywords=extract_keywords(text, strategy=self._keyword_strategy),
            word_count=count_words(text),
        )


class OpenAIClassifier(Classifier):
    """Remote tier backed by the OpenAI chat API. Raises on any failure."""

    name = "openai"

    def __init__(self, timeout: Optional[float] = None) -> None:
        self._timeout = timeout

    def _analyze(self, text: str) -> AnalysisResult:
        timeout = self._timeout if self._timeout is not None else config.CLASSIFIER_TIMEOUT_SECONDS
        remote = request_analysis(text, timeout=timeout)
        return AnalysisResult(
            sentiment=remote.sentiment,
            keywords=_normalize_keywords(remote.keywords),
            word_count=count_words(text),
        )


class FallbackClassifier(Classifier):
    """Try *primary*; on any exception answer with *fallback*."""

    name = "fallback"

    def __init__(self, primary: Classifier, fallback: Classifier) -> None:
        self.primary = primary
        self.fallback = fallback

    def _analyze(self, text: str) -> AnalysisResult:
        try:
            return self.primary.analyze(text)
        except Exception as exc:  # noqa: BLE001 – any primary failure degrades
            logger.warning(
                "%s classification failed, using %s: %s",
                self.primary.name,
                self.fallback.name,
                exc,
                exc_info=True,
            )
            return self.fallback.analyze(text)


def build_classifier(backend: Optional[str] = None) -> Classifier:
    """Return the classifier selected by *backend* (or ``CLASSIFIER_BACKEND``).

    ``auto`` uses OpenAI with a lexicon fallback when an API key is present and
    the lexicon alone otherwise.

    Raises
    ------
    ValueError
        If *backend* is not one of :data:`BACKENDS`.
    """
    backend = (backend or config.CLASSIFIER_BACKEND).lower()
    if backend not in BACKENDS:
        raise ValueError(f"Unknown classifier backend: {backend}")

    lexicon = LexiconClassifier()
    if backend == "lexicon" or (backend == "auto" and not is_configured()):
        logger.debug("Using lexicon classifier (backend=%s)", backend)
        return lexicon
    return FallbackClassifier(primary=OpenAIClassifier(), fallback=lexicon)


def classify(text: str, classifier: Optional[Classifier] = None) -> AnalysisResult:
    """Analyze a single comment *text* with *classifier* (default: configured)."""
    return (classifier or build_classifier()).analyze(text)
