"""Unit tests for the word-list sentiment scorer."""
import pytest

from comment_pulse.analysis import lexicon
from comment_pulse.analysis.sentiment import SentimentLabel, label_for_score


def test_positive_example():
    res = lexicon.score_text("This is great, I love it!")
    assert res.label == SentimentLabel.POSITIVE
    assert res.score > 0.1


def test_negative_example():
    res = lexicon.score_text("This is terrible and I hate it")
    assert res.label == SentimentLabel.NEGATIVE
    assert res.score < -0.1


@pytest.mark.parametrize("text", ["", "   ", "\n\t", None, 42])
def test_blank_or_non_string_is_neutral(text):
    res = lexicon.score_text(text)
    assert res.label == SentimentLabel.NEUTRAL
    assert res.score == 0
    assert res.confidence == 0


def test_no_sentiment_words_is_neutral_with_zero_confidence():
    res = lexicon.score_text("The meeting covered parking and zoning")
    assert res.score == 0
    assert res.confidence == 0
    assert res.label == SentimentLabel.NEUTRAL


def test_balanced_hits_score_zero_but_have_confidence():
    # tokens: good, bad -> score 0, confidence min(1, 2/2*2)
    res = lexicon.score_text("good bad")
    assert res.score == 0
    assert res.label == SentimentLabel.NEUTRAL
    assert res.confidence == 1.0


def test_confidence_scales_with_hit_density():
    # tokens: proposal, great, parking, downtown -> 1 hit / 4 tokens * 2 = 0.5
    res = lexicon.score_text("The proposal is great for parking downtown")
    assert res.score == 1.0
    assert res.confidence == pytest.approx(0.5)


def test_mixed_score_formula():
    # 2 positive, 1 negative -> (2 - 1) / 3
    res = lexicon.score_text("helpful and useful, but one problem")
    assert res.score == pytest.approx(1 / 3)
    assert res.label == SentimentLabel.POSITIVE


def test_punctuation_is_stripped_before_matching():
    res = lexicon.score_text("Terrible!!! Awful... (unacceptable)")
    assert res.score == -1.0


def test_tokenize_filters_stop_words_and_short_tokens():
    assert lexicon.tokenize("It is an OK plan, and we do like it!") == ["plan", "like"]


@pytest.mark.parametrize(
    "text",
    [
        "I love this wonderful, amazing idea",
        "worried and concerned about the cost, a real problem",
        "good bad good bad neutral words here",
        "Nothing to see",
    ],
)
def test_label_is_consistent_with_score_and_ranges(text):
    res = lexicon.score_text(text)
    assert -1.0 <= res.score <= 1.0
    assert 0.0 <= res.confidence <= 1.0
    assert res.label == label_for_score(res.score)


def test_scorer_is_idempotent():
    text = "Excellent support, but the error handling is wrong."
    assert lexicon.score_text(text) == lexicon.score_text(text)


@pytest.mark.parametrize(
    "score,label",
    [
        (0.11, SentimentLabel.POSITIVE),
        (0.1, SentimentLabel.NEUTRAL),
        (0.0, SentimentLabel.NEUTRAL),
        (-0.1, SentimentLabel.NEUTRAL),
        (-0.11, SentimentLabel.NEGATIVE),
    ],
)
def test_threshold_policy(score, label):
    assert label_for_score(score) == label
