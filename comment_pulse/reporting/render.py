"""Render analysis reports using Jinja2 templates and post them to Slack."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader

from comment_pulse.reporting.context import build_report_context
from comment_pulse.reporting.models import BatchAnalysis, Narrative

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).parent / "templates"

# Markdown templates don’t need HTML escaping – it breaks apostrophes etc.
_env = Environment(
    loader=FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
)

# Keywords listed in the Markdown report
MARKDOWN_MAX_KEYWORDS = 15

# Slack rejects very long chat messages; longer reports go up as a file.
SLACK_MESSAGE_LIMIT = 2800


def render_markdown(
    batch: BatchAnalysis,
    *,
    narrative: Optional[Narrative] = None,
    generated_at: Optional[str] = None,
    title: Optional[str] = None,
) -> str:
    """Render the Markdown narrative report for *batch*."""

    context = build_report_context(
        batch, narrative=narrative, generated_at=generated_at, title=title
    )
    template = _env.get_template("report.md.j2")
    return template.render(max_keywords=MARKDOWN_MAX_KEYWORDS, **context.to_dict())


def post_report_to_slack(
    *,
    batch: BatchAnalysis,
    client,
    channel: str,
    thread_ts: Optional[str] = None,
) -> None:
    """Post the Markdown report for *batch* to Slack *channel* using *client*."""

    report_text = render_markdown(batch)
    report_len = len(report_text)
    logger.debug(
        "Report generated for channel=%s comments=%d len=%d",
        channel,
        batch.summary.total,
        report_len,
    )

    if report_len < SLACK_MESSAGE_LIMIT:
        logger.debug("Posting report as chat message (len=%d)", report_len)
        client.chat_postMessage(channel=channel, text=report_text, thread_ts=thread_ts)
    else:
        logger.debug("Uploading report as file (len=%d) via files_upload_v2", report_len)
        client.files_upload_v2(
            channel=channel,
            title="Sentiment Analysis Report",
            content=report_text,
            filename="sentiment-analysis-report.md",
            thread_ts=thread_ts,
        )
