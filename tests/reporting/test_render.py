"""Unit tests for report rendering and Slack posting helpers."""
from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from comment_pulse.analysis.sentiment import AnalysisResult, SentimentResult
from comment_pulse.reporting.models import (
    BatchAnalysis,
    BatchSummary,
    CommentAnalysis,
    KeywordCount,
)
from comment_pulse.reporting.render import post_report_to_slack, render_markdown


def _sample_batch() -> BatchAnalysis:
    results = [
        CommentAnalysis(
            id="c1",
            text="Great work team!",
            analysis=AnalysisResult(SentimentResult.from_score(1.0, 0.7), ["great", "work"], 3),
        ),
        CommentAnalysis(
            id="c2",
            text="The cost is a problem",
            analysis=AnalysisResult(SentimentResult.from_score(-1.0, 1.0), ["cost", "problem"], 5),
        ),
    ]
    summary = BatchSummary(
        total=2,
        positive=1,
        negative=1,
        neutral=0,
        positive_percentage=50,
        negative_percentage=50,
        neutral_percentage=0,
        average_score=0.0,
    )
    keywords = [KeywordCount(w, 1) for w in ["great", "work", "cost", "problem"]]
    return BatchAnalysis(results=results, summary=summary, keywords=keywords)


@pytest.fixture()
def batch() -> BatchAnalysis:
    return _sample_batch()


def test_render_markdown_basic(batch: BatchAnalysis):
    out = render_markdown(batch, generated_at="2026-10-19T10:00:00+00:00", title="Transit survey")
    assert out.startswith("# Transit survey")
    assert "**Total Comments Analyzed:** 2" in out
    assert "1. **great** (1 mentions)" in out
    assert "4. **problem** (1 mentions)" in out
    assert "- **Average Sentiment Score:** 0.000" in out
    assert "Financial concerns mentioned 1 times" in out


def test_render_markdown_caps_keywords(batch: BatchAnalysis):
    many = BatchAnalysis(
        results=batch.results,
        summary=batch.summary,
        keywords=[KeywordCount(f"word{i}", 1) for i in range(30)],
    )
    out = render_markdown(many, generated_at="now")
    assert "**word14**" in out
    assert "**word15**" not in out


def test_post_report_short_message(batch: BatchAnalysis):
    with patch("comment_pulse.reporting.render.render_markdown", return_value="short") as render_mp:
        client = MagicMock()
        post_report_to_slack(batch=batch, client=client, channel="C123")

    render_mp.assert_called_once()
    client.chat_postMessage.assert_called_once_with(channel="C123", text="short", thread_ts=None)
    client.files_upload_v2.assert_not_called()


def test_post_report_long_upload(batch: BatchAnalysis):
    long_text = "x" * 3000
    with patch("comment_pulse.reporting.render.render_markdown", return_value=long_text):
        client = MagicMock()
        post_report_to_slack(batch=batch, client=client, channel="C123", thread_ts="1.2")

    client.files_upload_v2.assert_called_once()
    assert client.files_upload_v2.call_args.kwargs["thread_ts"] == "1.2"
    client.chat_postMessage.assert_not_called()
