"""Data structures for the batch analysis pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from comment_pulse.analysis.sentiment import AnalysisResult, SentimentLabel


@dataclass(frozen=True)
class Comment:
    """A single free-text comment handed to the pipeline."""

    id: str
    text: str
    source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "text": self.text}
        if self.source is not None:
            data["source"] = self.source
        return data


@dataclass(frozen=True)
class CommentAnalysis:
    """A comment paired with its analysis."""

    id: str
    text: str
    analysis: AnalysisResult
    source: Optional[str] = None

    @property
    def label(self) -> SentimentLabel:
        return self.analysis.sentiment.label

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id, "text": self.text, "analysis": self.analysis.to_dict()}
        if self.source is not None:
            data["source"] = self.source
        return data


@dataclass(frozen=True)
class BatchSummary:
    """Corpus-level sentiment distribution."""

    total: int = 0
    positive: int = 0
    negative: int = 0
    neutral: int = 0
    positive_percentage: int = 0
    negative_percentage: int = 0
    neutral_percentage: int = 0
    average_score: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "positive": self.positive,
            "negative": self.negative,
            "neutral": self.neutral,
            "positivePercentage": self.positive_percentage,
            "negativePercentage": self.negative_percentage,
            "neutralPercentage": self.neutral_percentage,
            "averageScore": self.average_score,
        }


@dataclass(frozen=True)
class KeywordCount:
    """Number of comments whose keyword list contains *word*."""

    word: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"word": self.word, "count": self.count}


@dataclass(frozen=True)
class BatchAnalysis:
    """Everything produced by one ``analyze_batch`` run."""

    results: List[CommentAnalysis] = field(default_factory=list)
    summary: BatchSummary = field(default_factory=BatchSummary)
    keywords: List[KeywordCount] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "summary": self.summary.to_dict(),
            "keywords": [k.to_dict() for k in self.keywords],
        }


@dataclass(frozen=True)
class Narrative:
    """Human-readable findings derived from a :class:`BatchAnalysis`."""

    executive_summary: str
    key_findings: List[str]
    sentiment_overview: str
    top_concerns: List[str]
    recommendations: List[str]
    methodology: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "executiveSummary": self.executive_summary,
            "keyFindings": list(self.key_findings),
            "sentimentOverview": self.sentiment_overview,
            "topConcerns": list(self.top_concerns),
            "recommendations": list(self.recommendations),
            "methodology": self.methodology,
        }
