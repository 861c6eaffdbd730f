"""CSV / JSON / Markdown exports of a :class:`BatchAnalysis`."""
from __future__ import annotations

import csv
import io
import json
from datetime import date, datetime, timezone
from typing import Callable, Dict, Optional

from comment_pulse import __version__
from comment_pulse.exceptions import UnsupportedExportFormatError
from comment_pulse.reporting.models import BatchAnalysis
from comment_pulse.reporting.narrative import generate_narrative
from comment_pulse.reporting.render import render_markdown

CSV_HEADERS = [
    "Comment ID",
    "Comment Text",
    "Source",
    "Sentiment Label",
    "Sentiment Score",
    "Confidence",
    "Word Count",
    "Top Keywords",
]

DEFAULT_SOURCE = "Manual Input"

MIME_TYPES = {
    "csv": "text/csv",
    "json": "application/json",
    "md": "text/markdown",
}


def _now() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="seconds")


def to_csv(batch: BatchAnalysis) -> str:
    """Return one CSV row per comment, preceded by a header row."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for result in batch.results:
        sentiment = result.analysis.sentiment
        writer.writerow(
            [
                result.id,
                result.text,
                result.source or DEFAULT_SOURCE,
                sentiment.label.value,
                f"{sentiment.score:.3f}",
                f"{sentiment.confidence:.3f}",
                result.analysis.word_count,
                ", ".join(result.analysis.keywords[:5]),
            ]
        )
    return buffer.getvalue()


def to_json(batch: BatchAnalysis, *, timestamp: Optional[str] = None) -> str:
    """Return the full structured dump plus the narrative as indented JSON."""
    narrative = generate_narrative(batch.results, batch.summary, batch.keywords)
    summary = batch.summary
    payload = {
        "metadata": {
            "exportDate": timestamp or _now(),
            "totalComments": summary.total,
            "analysisVersion": __version__,
        },
        "summary": {
            "sentimentDistribution": {
                "positive": summary.positive_percentage,
                "negative": summary.negative_percentage,
                "neutral": summary.neutral_percentage,
            },
            "averageSentimentScore": summary.average_score,
            "topKeywords": [k.to_dict() for k in batch.keywords[:20]],
        },
        "executiveSummary": narrative.executive_summary,
        "keyFindings": narrative.key_findings,
        "recommendations": narrative.recommendations,
        "detailedResults": [
            {
                "id": r.id,
                "text": r.text,
                "source": r.source,
                "sentiment": r.analysis.sentiment.to_dict(),
                "keywords": list(r.analysis.keywords),
                "wordCount": r.analysis.word_count,
            }
            for r in batch.results
        ],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def to_markdown(batch: BatchAnalysis, *, timestamp: Optional[str] = None) -> str:
    return render_markdown(batch, generated_at=timestamp or _now())


_EXPORTERS: Dict[str, Callable[[BatchAnalysis], str]] = {
    "csv": to_csv,
    "json": to_json,
    "md": to_markdown,
}


def normalize_format(fmt: str) -> str:
    """Return the canonical export key for *fmt* (``markdown`` → ``md``)."""
    key = (fmt or "").strip().lower().lstrip(".")
    if key == "markdown":
        key = "md"
    if key not in _EXPORTERS:
        raise UnsupportedExportFormatError(
            f"Unsupported export format '{fmt}'. Choose one of: csv, json, md."
        )
    return key


def export_batch(batch: BatchAnalysis, fmt: str) -> str:
    """Render *batch* in export format *fmt*.

    Raises
    ------
    UnsupportedExportFormatError
        If *fmt* is not csv, json or md/markdown.
    """
    return _EXPORTERS[normalize_format(fmt)](batch)


def generate_filename(fmt: str, *, today: Optional[date] = None) -> str:
    """Return ``sentiment-analysis-report-YYYY-MM-DD.<fmt>``."""
    today = today or datetime.now(tz=timezone.utc).date()
    return f"sentiment-analysis-report-{today.isoformat()}.{normalize_format(fmt)}"
