"""Scoring - similarity-to-score normalization and word-level match breakdown.

Invariants:
    - normalize_score returns an int in 0–100; <= FLOOR gives 0, >= CEILING gives 100
    - CURVED applies pow(linear, CURVE_EXPONENT); LINEAR skips the curve
    - The breakdown is feedback only: nothing here feeds back into the overall score
    - One guess word satisfies at most one prompt word (exact or partial)
    - Partial matches are greedy in prompt-token order, threshold >= PARTIAL_MATCH_THRESHOLD

Design Decisions:
    - Half-up rounding so x.5 always rounds away from zero for positive scores
    - Embedding lookups stay in the service layer; assign_partial_matches receives vectors
"""

import math
import re
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from slopguess.core.domain_types import ScoringCurve
from slopguess.core.similarity import cosine_similarity

SIMILARITY_FLOOR = 0.3
SIMILARITY_CEILING = 1.0
CURVE_EXPONENT = 0.8
PARTIAL_MATCH_THRESHOLD = 0.6
PARTIAL_MATCH_WEIGHT = 0.5

STOP_WORDS = frozenset({
    "a", "an", "the", "in", "of", "and", "with", "on", "at", "to",
    "for", "is", "it", "by", "as", "or", "be", "was", "are", "from",
    "that", "this", "but", "not", "has", "have", "had", "its",
})

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


# ─── Score Normalization ─────────────────────────────────────────

def normalize_score(similarity: float, curve: ScoringCurve = ScoringCurve.CURVED) -> int:
    """Map cosine similarity onto the 0–100 player-facing score."""
    linear = (similarity - SIMILARITY_FLOOR) / (SIMILARITY_CEILING - SIMILARITY_FLOOR)
    linear = max(0.0, min(1.0, linear))
    if curve == ScoringCurve.CURVED:
        linear = linear ** CURVE_EXPONENT
    return int(round_half_up(linear * 100))


# ─── Element Breakdown ───────────────────────────────────────────

@dataclass(frozen=True)
class PartialMatch:
    word: str
    matched_with: str
    similarity: float


@dataclass
class ElementBreakdown:
    matched_words: list[str] = field(default_factory=list)
    partial_matches: list[PartialMatch] = field(default_factory=list)
    element_score: int = 0
    overall_score: int = 0

    def to_dict(self) -> dict:
        return {
            "matched_words": list(self.matched_words),
            "partial_matches": [
                {"word": p.word, "matched_with": p.matched_with, "similarity": p.similarity}
                for p in self.partial_matches
            ],
            "element_score": self.element_score,
            "overall_score": self.overall_score,
        }


def tokenize_meaningful(text: str) -> list[str]:
    """Lowercase, strip punctuation, split, drop stop words. Keeps duplicates."""
    stripped = _NON_ALNUM.sub("", text.lower())
    return [t for t in stripped.split() if t and t not in STOP_WORDS]


def match_exact(
    prompt_tokens: Sequence[str], guess_tokens: Sequence[str],
) -> tuple[list[str], list[str], list[str]]:
    """Exact pass over unique prompt tokens.

    Returns (matched, unmatched_prompt, leftover_guess), each de-duplicated
    and in first-seen order.
    """
    unique_prompt = list(dict.fromkeys(prompt_tokens))
    remaining = dict.fromkeys(guess_tokens)
    matched: list[str] = []
    unmatched: list[str] = []
    for token in unique_prompt:
        if token in remaining:
            matched.append(token)
            del remaining[token]
        else:
            unmatched.append(token)
    return matched, unmatched, list(remaining)


def assign_partial_matches(
    unmatched_prompt: Sequence[str],
    leftover_guess: Sequence[str],
    vectors: Mapping[str, Sequence[float]],
    threshold: float = PARTIAL_MATCH_THRESHOLD,
) -> list[PartialMatch]:
    """Greedy one-to-one semantic assignment in prompt-token order."""
    claimed: set[int] = set()
    matches: list[PartialMatch] = []
    for prompt_word in unmatched_prompt:
        best_index = -1
        best_similarity = 0.0
        for i, guess_word in enumerate(leftover_guess):
            if i in claimed:
                continue
            sim = cosine_similarity(vectors[prompt_word], vectors[guess_word])
            if sim > best_similarity:
                best_similarity = sim
                best_index = i
        if best_index >= 0 and best_similarity >= threshold:
            claimed.add(best_index)
            matches.append(PartialMatch(
                word=prompt_word,
                matched_with=leftover_guess[best_index],
                similarity=round_half_up(best_similarity, 3),
            ))
    return matches


def compute_element_score(exact: int, partial: int, unique_prompt_tokens: int) -> int:
    if unique_prompt_tokens == 0:
        return 0
    ratio = min(1.0, (exact + PARTIAL_MATCH_WEIGHT * partial) / unique_prompt_tokens)
    return int(round_half_up(ratio * 100))
