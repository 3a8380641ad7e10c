"""Scoring - normalization curve, tokenization and the element breakdown math."""

import pytest

from slopguess.core.domain_types import ScoringCurve
from slopguess.core.scoring import (
    ElementBreakdown,
    PartialMatch,
    assign_partial_matches,
    compute_element_score,
    match_exact,
    normalize_score,
    round_half_up,
    tokenize_meaningful,
)


# -- normalize_score -----------------------------------------------------------

@pytest.mark.parametrize("similarity,expected", [
    (0.65, 57),
    (0.44, 28),
    (0.86, 84),
])
def test_curved_reference_values(similarity, expected):
    assert normalize_score(similarity) == expected


@pytest.mark.parametrize("similarity", [-1.0, 0.0, 0.1, 0.3])
def test_at_or_below_floor_scores_zero(similarity):
    assert normalize_score(similarity) == 0


@pytest.mark.parametrize("similarity", [1.0, 1.2])
def test_at_or_above_ceiling_scores_hundred(similarity):
    assert normalize_score(similarity) == 100


def test_curved_is_monotonic():
    scores = [normalize_score(s / 100) for s in range(0, 101)]
    assert scores == sorted(scores)
    assert all(isinstance(s, int) and 0 <= s <= 100 for s in scores)


def test_linear_skips_the_curve():
    assert normalize_score(0.65, ScoringCurve.LINEAR) == 50
    assert normalize_score(0.65, ScoringCurve.LINEAR) < normalize_score(0.65)


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(1.25, 1) == pytest.approx(1.3)


# -- tokenization and exact pass ------------------------------------------------

def test_tokenize_drops_stop_words_and_punctuation():
    assert tokenize_meaningful("A big, red DOG in the park!") == ["big", "red", "dog", "park"]


def test_tokenize_keeps_duplicates():
    assert tokenize_meaningful("red red dog") == ["red", "red", "dog"]


def test_tokenize_only_stop_words():
    assert tokenize_meaningful("the and of a") == []


def test_match_exact_splits_tokens():
    matched, unmatched, leftover = match_exact(
        ["big", "red", "dog"], ["big", "red", "cat"],
    )
    assert matched == ["big", "red"]
    assert unmatched == ["dog"]
    assert leftover == ["cat"]


def test_match_exact_guess_word_used_once():
    matched, unmatched, leftover = match_exact(["red", "red", "dog"], ["red"])
    assert matched == ["red"]
    assert unmatched == ["dog"]
    assert leftover == []


# -- partial matches -----------------------------------------------------------

def test_partial_match_above_threshold():
    vectors = {"dog": [1.0, 0.0], "puppy": [0.9, 0.1]}
    matches = assign_partial_matches(["dog"], ["puppy"], vectors)
    assert len(matches) == 1
    assert matches[0].word == "dog"
    assert matches[0].matched_with == "puppy"
    assert matches[0].similarity == pytest.approx(0.994)


def test_partial_match_below_threshold_is_dropped():
    vectors = {"dog": [1.0, 0.0], "spoon": [0.5, 1.0]}
    assert assign_partial_matches(["dog"], ["spoon"], vectors) == []


def test_partial_match_is_one_to_one_and_greedy():
    vectors = {
        "dog": [1.0, 0.0],
        "wolf": [0.95, 0.3],
        "puppy": [1.0, 0.05],
    }
    matches = assign_partial_matches(["dog", "wolf"], ["puppy"], vectors)
    assert [(m.word, m.matched_with) for m in matches] == [("dog", "puppy")]


def test_negative_similarity_never_matches():
    vectors = {"dog": [1.0, 0.0], "cat": [-1.0, 0.0]}
    assert assign_partial_matches(["dog"], ["cat"], vectors, threshold=-2.0) == []


# -- element score -------------------------------------------------------------

def test_element_score():
    assert compute_element_score(3, 0, 4) == 75
    assert compute_element_score(1, 1, 2) == 75
    assert compute_element_score(0, 0, 0) == 0
    assert compute_element_score(5, 5, 5) == 100


def test_breakdown_to_dict():
    breakdown = ElementBreakdown(
        matched_words=["red"],
        partial_matches=[PartialMatch("dog", "puppy", 0.8)],
        element_score=75,
        overall_score=60,
    )
    assert breakdown.to_dict() == {
        "matched_words": ["red"],
        "partial_matches": [{"word": "dog", "matched_with": "puppy", "similarity": 0.8}],
        "element_score": 75,
        "overall_score": 60,
    }
