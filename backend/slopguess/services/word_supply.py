"""Word Supply - difficulty-sized word selection with anti-repetition.

Invariants:
    - Word count comes from the difficulty -> count mapping; unknown labels raise
      InvalidDifficultyError before any query runs
    - Candidates are ordered by usage tier (never used, used before the cooldown,
      recently used) then randomly; the pool is 3x the requested count
    - A selection whose overlap with any of the last N rounds reaches the threshold
      is re-drawn, up to max_attempts; the last draw is kept if none passes
    - The combination check degrades to "allow" when its query fails
    - Words are marked used only inside the round-creation transaction (mark_words_used)
"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Callable, Sequence

from sqlalchemy import case, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from slopguess.core.domain_types import WordEntry
from slopguess.core.errors import DatabaseError, InvalidDifficultyError
from slopguess.core.repository_protocols import SessionFactory
from slopguess.core.word_selection import (
    DEFAULT_LOOKBACK_ROUNDS, DEFAULT_MAX_OVERLAP,
    CombinationCheck, VarietyReport,
    balance_categories, build_variety_report, check_combination,
)
from slopguess.models.round import Round
from slopguess.models.word_bank import RoundWord, WordBankEntry

logger = logging.getLogger(__name__)

CANDIDATE_POOL_FACTOR = 3


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WordSupply:
    def __init__(
        self,
        session_factory: SessionFactory,
        word_counts: dict[str, int],
        lookback_rounds: int = DEFAULT_LOOKBACK_ROUNDS,
        max_overlap: float = DEFAULT_MAX_OVERLAP,
        max_attempts: int = 5,
        cooldown: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._session_factory = session_factory
        self._word_counts = dict(word_counts)
        self.lookback_rounds = lookback_rounds
        self.max_overlap = max_overlap
        self.max_attempts = max_attempts
        self.cooldown = cooldown
        self._clock = clock

    def resolve_word_count(self, difficulty: str) -> int:
        try:
            return self._word_counts[difficulty]
        except KeyError:
            raise InvalidDifficultyError(difficulty, sorted(self._word_counts)) from None

    async def get_words_for_difficulty(self, difficulty: str) -> list[WordEntry]:
        count = self.resolve_word_count(difficulty)
        selection: list[WordEntry] = []
        for attempt in range(1, self.max_attempts + 1):
            selection = await self.get_random_words(count)
            if not selection:
                return []
            check = await self.validate_combination([w.id for w in selection])
            if check.valid:
                return selection
            logger.warning(
                f"Word combination overlaps {check.highest_overlap_ratio:.0%} with "
                f"round {check.most_overlapping_round_id}, reselecting",
                extra={"attempt": attempt, "difficulty": difficulty},
            )

        logger.warning(
            f"No combination below {self.max_overlap:.0%} overlap after "
            f"{self.max_attempts} attempts, keeping last selection",
            extra={"difficulty": difficulty},
        )
        return selection

    async def get_random_words(self, count: int) -> list[WordEntry]:
        cutoff = self._clock() - self.cooldown
        usage_tier = case(
            (WordBankEntry.last_used_at.is_(None), 0),
            (WordBankEntry.last_used_at < cutoff, 1),
            else_=2,
        )
        stmt = (
            select(WordBankEntry)
            .order_by(usage_tier, func.random())
            .limit(count * CANDIDATE_POOL_FACTOR)
        )
        async with self._session_factory() as db:
            rows = (await db.execute(stmt)).scalars().all()

        if not rows:
            logger.warning("Word bank is empty; has it been seeded?")
            return []

        selected = balance_categories([r.to_entry() for r in rows], count)
        if len(selected) < count:
            logger.warning(f"Requested {count} words but only {len(selected)} available")
        return selected

    async def validate_combination(self, word_ids: Sequence[int]) -> CombinationCheck:
        """Overlap check against recent rounds; permissive when the query fails."""
        if not word_ids:
            return CombinationCheck.permissive(self.max_overlap)

        recent = (
            select(Round.id)
            .order_by(Round.created_at.desc())
            .limit(self.lookback_rounds)
        )
        stmt = select(RoundWord.round_id, RoundWord.word_id).where(
            RoundWord.round_id.in_(recent),
        )
        try:
            async with self._session_factory() as db:
                rows = (await db.execute(stmt)).all()
        except (SQLAlchemyError, DatabaseError) as e:
            logger.error(f"Combination check failed, allowing selection: {e}")
            return CombinationCheck.permissive(self.max_overlap)

        by_round: dict = defaultdict(set)
        for round_id, word_id in rows:
            by_round[round_id].add(word_id)
        return check_combination(word_ids, by_round, self.max_overlap)

    async def mark_words_used(
        self, db: AsyncSession, word_ids: Sequence[int], used_at: datetime,
    ) -> None:
        """Stamp last_used_at inside the caller's transaction."""
        if not word_ids:
            return
        await db.execute(
            update(WordBankEntry)
            .where(WordBankEntry.id.in_(list(word_ids)))
            .values(last_used_at=used_at),
        )

    async def get_variety_report(self, lookback: int | None = None) -> VarietyReport:
        lookback = lookback or self.lookback_rounds
        async with self._session_factory() as db:
            rounds = (await db.execute(
                select(Round.id, Round.prompt, Round.created_at)
                .where(Round.id.in_(select(RoundWord.round_id).distinct()))
                .order_by(Round.created_at.desc())
                .limit(lookback)
            )).all()
            round_ids = [r.id for r in rounds]
            links = (await db.execute(
                select(RoundWord.round_id, RoundWord.word_id)
                .where(RoundWord.round_id.in_(round_ids))
            )).all() if round_ids else []

        words: dict = defaultdict(list)
        for round_id, word_id in links:
            words[round_id].append(word_id)
        return build_variety_report(
            [(r.id, r.prompt, r.created_at, words[r.id]) for r in rounds], lookback,
        )

    async def get_word_count(self) -> int:
        async with self._session_factory() as db:
            return (await db.execute(select(func.count(WordBankEntry.id)))).scalar_one()

    async def get_categories(self) -> list[str]:
        async with self._session_factory() as db:
            rows = await db.execute(
                select(WordBankEntry.category).distinct().order_by(WordBankEntry.category)
            )
            return list(rows.scalars().all())
