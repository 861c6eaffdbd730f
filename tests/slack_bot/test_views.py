"""Tests for Block Kit dashboard and text helpers."""
import json

from comment_pulse.analysis.classifier import LexiconClassifier
from comment_pulse.reporting.aggregator import analyze_batch
from comment_pulse.reporting.models import BatchAnalysis, Comment
from comment_pulse.slack_bot import views


def _batch():
    comments = [
        Comment(id="a", text="I love the new park, great work"),
        Comment(id="b", text="The cost is terrible"),
        Comment(id="c", text="Meeting on Tuesday"),
    ]
    return analyze_batch(comments, classifier=LexiconClassifier())


def test_dashboard_layout():
    blocks = views.build_dashboard_blocks(_batch())

    assert [b["type"] for b in blocks] == ["header", "section", "divider", "section", "section", "actions"]
    assert blocks[0]["text"]["text"] == "Sentiment analysis of 3 comment(s)"

    fields = [f["text"] for f in blocks[1]["fields"]]
    assert fields[0] == "*Positive*\n33% (1)"
    assert fields[1] == "*Negative*\n33% (1)"
    assert fields[3] == "*Average score*\n0.000"
    assert "`cost` (1)" in blocks[3]["text"]["text"]
    assert blocks[4]["text"]["text"].startswith("*Executive summary*\nAnalysis of 3 public comments")


def test_export_buttons_have_unique_action_ids():
    actions = views.build_dashboard_blocks(_batch())[-1]["elements"]
    assert [a["action_id"] for a in actions] == [
        "export_report_csv",
        "export_report_json",
        "export_report_md",
    ]
    assert [json.loads(a["value"])["format"] for a in actions] == ["csv", "json", "md"]


def test_dashboard_for_empty_batch():
    blocks = views.build_dashboard_blocks(BatchAnalysis())
    assert blocks[1]["text"]["text"] == "_No comments analyzed._"
    assert "_No keywords extracted._" in blocks[3]["text"]["text"]


def test_format_comment_list_truncates():
    comments = [Comment(id=f"c{i}", text="x" * 100, source="s.csv") for i in range(25)]
    text = views.format_comment_list(comments)
    lines = text.splitlines()
    assert lines[0] == "*25 comment(s) loaded*"
    assert len(lines) == 1 + views.MAX_LISTED_COMMENTS + 1
    assert lines[1].endswith("… _(s.csv)_")
    assert lines[-1] == "…and 5 more."


def test_format_comment_list_empty():
    assert views.format_comment_list([]) == "No comments loaded yet."


def test_help_text_mentions_every_subcommand():
    text = views.help_text("/comments")
    for sub in ("add", "list", "remove", "clear", "analyze", "export"):
        assert f"`/comments {sub}" in text
