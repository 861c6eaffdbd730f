import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from slack_sdk.models.blocks import (
    ActionsBlock,
    ButtonElement,
    DividerBlock,
    HeaderBlock,
    SectionBlock,
)

from comment_pulse import config
from comment_pulse.reporting.context import build_report_context
from comment_pulse.reporting.models import BatchAnalysis, Comment, Narrative

logger = logging.getLogger(__name__)

EXPORT_ACTION_PREFIX = "export_report_"
EXPORT_FORMATS = (("csv", "CSV"), ("json", "JSON"), ("md", "Markdown"))

# Comments echoed back by the ``list`` sub-command
MAX_LISTED_COMMENTS = 20
_PREVIEW_CHARS = 80


def _mrkdwn(text: str) -> Dict[str, str]:
    return {"type": "mrkdwn", "text": text}


def build_dashboard_blocks(
    batch: BatchAnalysis, *, narrative: Optional[Narrative] = None
) -> List[Dict[str, Any]]:
    """Return Block Kit blocks summarising *batch*.

    Layout: header, distribution fields with an emoji bar, average score,
    top keywords, executive summary and one export button per format.
    """
    context = build_report_context(batch, narrative=narrative)
    summary = context.summary

    distribution = [
        _mrkdwn(f"*Positive*\n{summary['positivePercentage']}% ({summary['positive']})"),
        _mrkdwn(f"*Negative*\n{summary['negativePercentage']}% ({summary['negative']})"),
        _mrkdwn(f"*Neutral*\n{summary['neutralPercentage']}% ({summary['neutral']})"),
        _mrkdwn(f"*Average score*\n{summary['averageScore']:.3f}"),
    ]

    top = context.keywords[: config.MAX_DASHBOARD_KEYWORDS]
    keyword_text = (
        ", ".join(f"`{k['word']}` ({k['count']})" for k in top)
        if top
        else "_No keywords extracted._"
    )

    buttons = [
        ButtonElement(
            text=label,
            action_id=f"{EXPORT_ACTION_PREFIX}{fmt}",
            value=json.dumps({"format": fmt}),
        )
        for fmt, label in EXPORT_FORMATS
    ]

    blocks = [
        HeaderBlock(text=f"Sentiment analysis of {context.total} comment(s)"),
        SectionBlock(text=_mrkdwn(context.emoji_bar or "_No comments analyzed._"), fields=distribution),
        DividerBlock(),
        SectionBlock(text=_mrkdwn(f"*Top keywords*\n{keyword_text}")),
        SectionBlock(text=_mrkdwn(f"*Executive summary*\n{context.narrative['executiveSummary']}")),
        ActionsBlock(elements=buttons),
    ]
    return [block.to_dict() for block in blocks]


def format_comment_list(comments: Sequence[Comment]) -> str:
    """Return a short mrkdwn listing of *comments* for the ``list`` sub-command."""
    if not comments:
        return "No comments loaded yet."

    lines = [f"*{len(comments)} comment(s) loaded*"]
    for comment in comments[:MAX_LISTED_COMMENTS]:
        preview = comment.text
        if len(preview) > _PREVIEW_CHARS:
            preview = preview[:_PREVIEW_CHARS].rstrip() + "…"
        source = f" _({comment.source})_" if comment.source else ""
        lines.append(f"• `{comment.id}` {preview}{source}")
    if len(comments) > MAX_LISTED_COMMENTS:
        lines.append(f"…and {len(comments) - MAX_LISTED_COMMENTS} more.")
    return "\n".join(lines)


def help_text(command: str) -> str:
    """Return a help message describing the bot and its sub-commands."""
    return (
        "*Comment Pulse – sentiment & keyword analysis for comments*\n\n"
        "*Sub-commands*\n"
        f"• `{command} add <text>` - add a comment; paste several lines to add one per line.\n"
        f"• `{command} list` - show loaded comments and their IDs.\n"
        f"• `{command} remove <id>` - remove one comment.\n"
        f"• `{command} clear` - remove all comments and the last analysis.\n"
        f"• `{command} analyze` - score every comment and post the dashboard.\n"
        f"• `{command} export csv|json|md` - upload the last analysis as a file.\n"
        "Share a `.csv` or `.txt` file in the channel to load one comment per line or row.\n"
    )
