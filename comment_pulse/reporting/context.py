"""Context dataclass for rendering analysis reports.

This module defines `ReportContext`, a typed container that holds all
values expected by the Markdown template located in
`comment_pulse/reporting/templates/report.md.j2` and by the Slack dashboard
blocks.

Keeping *context building* apart from *template rendering* means the
aggregation and narrative logic can be unit-tested without touching
template strings, and the same context feeds Markdown, JSON and Slack
output.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime as _dt
from datetime import timezone as _tz
from typing import Any, Dict, List, Optional

from comment_pulse import __version__, config
from comment_pulse.reporting.models import BatchAnalysis, Narrative
from comment_pulse.reporting.narrative import generate_narrative

__all__ = [
    "ReportContext",
    "build_report_context",
    "emoji_bar",
]


@dataclass(slots=True)
class ReportContext:
    """Container with all fields used by the report templates."""

    # Header & meta
    generated_at: str  # ISO-8601 timestamp (UTC)
    total: int

    # Distribution
    summary: Dict[str, Any]
    emoji_bar: str

    # Narrative sections
    narrative: Dict[str, Any]

    # Keyword table as plain dicts
    keywords: List[Dict[str, Any]] = field(default_factory=list)

    version: str = __version__
    title: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:  # noqa: D401 – simple helper
        """Return a *plain* ``dict`` (recursively) for Jinja rendering."""
        return asdict(self)


def emoji_bar(counts: Dict[str, int], max_emoji: int = 20) -> str:
    """Return a string bar of emojis based on *counts*.

    Positive → 😊, Neutral → 😐, Negative → 🙁. Each present class gets at
    least one emoji; the bar is scaled to roughly *max_emoji* characters.
    """

    pos = counts.get("positive", 0)
    neu = counts.get("neutral", 0)
    neg = counts.get("negative", 0)
    total = pos + neu + neg or 1

    scale = max_emoji / total
    pos_e = "😊" * max(1 if pos else 0, round(pos * scale))
    neu_e = "😐" * max(1 if neu else 0, round(neu * scale))
    neg_e = "🙁" * max(1 if neg else 0, round(neg * scale))
    return pos_e + neu_e + neg_e


def build_report_context(
    batch: BatchAnalysis,
    *,
    narrative: Optional[Narrative] = None,
    generated_at: Optional[str] = None,
    title: Optional[str] = None,
) -> ReportContext:
    """Convert a :class:`BatchAnalysis` into a :class:`ReportContext`.

    The function is *pure* apart from reading the clock when *generated_at*
    is omitted.
    """

    narrative = narrative or generate_narrative(batch.results, batch.summary, batch.keywords)
    summary = batch.summary
    counts = {
        "positive": summary.positive,
        "neutral": summary.neutral,
        "negative": summary.negative,
    }

    return ReportContext(
        generated_at=generated_at or _dt.now(tz=_tz.utc).isoformat(timespec="seconds"),
        total=summary.total,
        summary=summary.to_dict(),
        emoji_bar=emoji_bar(counts, config.MAX_EMOJI_BAR) if summary.total else "",
        narrative=narrative.to_dict(),
        keywords=[k.to_dict() for k in batch.keywords],
        title=title,
    )
