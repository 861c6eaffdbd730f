"""Unit tests for the OpenAI-backed request_analysis helper."""
import json
from typing import Dict

import pytest

from comment_pulse.analysis import sentiment as sa


class _StubOpenAI:
    """Simple stub mimicking the chat completion behaviour."""

    def __init__(self):
        self.calls: Dict[str, Dict] = {}

    class ChatCompletion:
        @staticmethod
        def create(*args, **kwargs):  # type: ignore[override]
            if args:
                # First positional arg is expected to be messages list
                kwargs["messages"] = args[0]

            _StubOpenAI._instance.calls = kwargs  # type: ignore[attr-defined]
            prompt = kwargs["messages"][1]["content"]
            if "great" in prompt:
                label, score, keywords = "positive", 0.9, ["service", "staff"]
            elif "meh" in prompt:
                label, score, keywords = "neutral", 0.0, []
            else:
                label, score, keywords = "negative", -0.8, ["experience"]
            content = (
                "Here you go: "
                + json.dumps(
                    {
                        "sentiment": {"label": label, "score": score, "confidence": 0.7},
                        "keywords": keywords,
                        "reasoning": "stubbed",
                    }
                )
            )
            return {"choices": [{"message": {"content": content}}]}

    _instance: "_StubOpenAI" = None  # type: ignore[assignment]


@pytest.fixture(autouse=True)
def patch_openai(monkeypatch):
    stub = _StubOpenAI()
    _StubOpenAI._instance = stub
    monkeypatch.setattr(
        sa,
        "chat_completion",
        lambda *a, **k: _StubOpenAI.ChatCompletion.create(*a, **k),
    )
    yield stub


def _with_content(monkeypatch, content: str):
    monkeypatch.setattr(
        sa,
        "chat_completion",
        lambda *_, **__: {"choices": [{"message": {"content": content}}]},
    )


def test_positive():
    res = sa.request_analysis("The service was great!")
    assert res.sentiment.label == sa.SentimentLabel.POSITIVE
    assert res.sentiment.score > 0.5
    assert res.sentiment.confidence == pytest.approx(0.7)
    assert res.keywords == ["service", "staff"]
    assert res.reasoning == "stubbed"


def test_neutral():
    res = sa.request_analysis("It was meh.")
    assert res.sentiment.label == sa.SentimentLabel.NEUTRAL


def test_negative():
    res = sa.request_analysis("Terrible experience")
    assert res.sentiment.label == sa.SentimentLabel.NEGATIVE
    assert res.sentiment.score < 0


def test_timeout_and_temperature_forwarded(patch_openai):
    sa.request_analysis("great", timeout=4.0)
    assert patch_openai.calls["timeout"] == 4.0
    assert patch_openai.calls["temperature"] == 0.0


def test_label_rederived_from_score(monkeypatch):
    _with_content(
        monkeypatch,
        '{"sentiment": {"label": "positive", "score": 0.05, "confidence": 0.9}, "keywords": []}',
    )
    res = sa.request_analysis("fine")
    assert res.sentiment.label == sa.SentimentLabel.NEUTRAL


def test_bad_json(monkeypatch):
    _with_content(monkeypatch, "no json here")
    with pytest.raises(ValueError):
        sa.request_analysis("oops")


@pytest.mark.parametrize(
    "payload",
    [
        {"sentiment": {"label": "furious", "score": -0.5, "confidence": 0.5}, "keywords": []},
        {"sentiment": {"label": "negative", "score": -1.5, "confidence": 0.5}, "keywords": []},
        {"sentiment": {"label": "negative", "score": -0.5, "confidence": 1.2}, "keywords": []},
        {"sentiment": {"label": "negative", "score": "bad", "confidence": 0.5}, "keywords": []},
        {"sentiment": {"label": "negative", "score": True, "confidence": 0.5}, "keywords": []},
        {"sentiment": {"label": "negative", "score": -0.5, "confidence": 0.5}, "keywords": [1, 2]},
        {"sentiment": {"label": "negative", "score": -0.5, "confidence": 0.5}, "keywords": ["k"] * 11},
        {"keywords": []},
    ],
)
def test_schema_violations_raise(monkeypatch, payload):
    _with_content(monkeypatch, json.dumps(payload))
    with pytest.raises(ValueError):
        sa.request_analysis("text")


def test_missing_choices(monkeypatch):
    monkeypatch.setattr(sa, "chat_completion", lambda *_, **__: {"choices": []})
    with pytest.raises(ValueError):
        sa.request_analysis("text")


def test_result_to_dict_shape():
    result = sa.AnalysisResult(
        sentiment=sa.SentimentResult.from_score(2.0, -1.0), keywords=["a"], word_count=3
    )
    assert result.to_dict() == {
        "sentiment": {"score": 1.0, "label": "positive", "confidence": 0.0},
        "keywords": ["a"],
        "wordCount": 3,
    }
