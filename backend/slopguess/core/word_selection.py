"""Word Selection - category balancing and combination overlap math.

Invariants:
    - balance_categories never returns more than `count` words and never repeats a word
    - First pass caps each category at max(2, ceil(count / 3)); the remainder is filled
      from the candidate order
    - Overlap ratio = shared words / proposed words; valid iff highest ratio < threshold
    - An empty proposal is always valid
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Sequence

from slopguess.core.domain_types import WordEntry

DEFAULT_LOOKBACK_ROUNDS = 30
DEFAULT_MAX_OVERLAP = 0.5


def max_per_category(count: int) -> int:
    return max(2, math.ceil(count / 3))


def balance_categories(candidates: Sequence[WordEntry], count: int) -> list[WordEntry]:
    """Pick `count` words from the ordered candidate pool, spreading categories."""
    cap = max_per_category(count)
    selected: list[WordEntry] = []
    per_category: dict[str, int] = {}

    for entry in candidates:
        if len(selected) >= count:
            break
        used = per_category.get(entry.category, 0)
        if used < cap:
            selected.append(entry)
            per_category[entry.category] = used + 1

    if len(selected) < count:
        taken = {e.id for e in selected}
        for entry in candidates:
            if len(selected) >= count:
                break
            if entry.id not in taken:
                selected.append(entry)
                taken.add(entry.id)

    return selected


@dataclass(frozen=True)
class CombinationCheck:
    valid: bool
    highest_overlap_ratio: float
    most_overlapping_round_id: Any
    overlapping_word_count: int
    threshold: float

    @classmethod
    def permissive(cls, threshold: float) -> "CombinationCheck":
        return cls(True, 0.0, None, 0, threshold)


def check_combination(
    proposed_ids: Sequence[int],
    recent_rounds: dict[Any, set[int]],
    threshold: float = DEFAULT_MAX_OVERLAP,
) -> CombinationCheck:
    """Compare a proposed word set against recent rounds' word sets."""
    if not proposed_ids:
        return CombinationCheck.permissive(threshold)

    proposed = set(proposed_ids)
    highest = 0.0
    worst_round = None
    shared_count = 0
    for round_id, word_ids in recent_rounds.items():
        shared = len(proposed & word_ids)
        ratio = shared / len(proposed_ids)
        if ratio > highest:
            highest = ratio
            worst_round = round_id
            shared_count = shared

    return CombinationCheck(
        valid=highest < threshold,
        highest_overlap_ratio=highest,
        most_overlapping_round_id=worst_round,
        overlapping_word_count=shared_count,
        threshold=threshold,
    )


# ─── Variety Report ──────────────────────────────────────────────

@dataclass(frozen=True)
class RoundOverlap:
    round_id: Any
    prompt: str
    created_at: datetime
    word_ids: list[int]
    overlap_with_previous: int


@dataclass(frozen=True)
class VarietyReport:
    rounds_analyzed: int
    lookback_window: int
    average_overlap: float
    max_overlap: int
    rounds: list[RoundOverlap] = field(default_factory=list)


def build_variety_report(
    rounds_newest_first: Sequence[tuple[Any, str, datetime, list[int]]],
    lookback: int,
) -> VarietyReport:
    """Consecutive-pair overlap over rounds ordered newest first."""
    entries: list[RoundOverlap] = []
    total = 0
    peak = 0
    pairs = 0
    for i, (round_id, prompt, created_at, word_ids) in enumerate(rounds_newest_first):
        overlap = 0
        if i + 1 < len(rounds_newest_first):
            previous = set(rounds_newest_first[i + 1][3])
            overlap = sum(1 for w in word_ids if w in previous)
            total += overlap
            peak = max(peak, overlap)
            pairs += 1
        entries.append(RoundOverlap(round_id, prompt, created_at, sorted(word_ids), overlap))

    return VarietyReport(
        rounds_analyzed=len(entries),
        lookback_window=lookback,
        average_overlap=total / pairs if pairs else 0.0,
        max_overlap=peak,
        rounds=entries,
    )
