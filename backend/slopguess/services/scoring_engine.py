"""Scoring Engine - scores guesses against a round's hidden prompt and persists them.

Invariants:
    - Score = normalize_score(cosine(prompt_embedding, guess_embedding)); identical
      inputs always give the identical score
    - The element breakdown is attached as feedback and never changes the score
    - Guesses are accepted only for active rounds, once per (round, user)
    - The UNIQUE(round_id, user_id) violation maps to DuplicateGuessError, the same
      error the pre-check raises
    - Provider failures during scoring propagate immediately (no retry)
    - Notification failures never affect the saved guess

Design Decisions:
    - A round without a stored embedding is repaired in place (logged as a warning),
      using a conditional UPDATE so an existing embedding is never overwritten
"""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError

from slopguess.core.domain_types import (
    GuessId, RoundId, RoundStatus, Score, ScoringCurve, Similarity, UserId,
)
from slopguess.core.errors import (
    DuplicateGuessError,
    GuessValidationError,
    RoundNotActiveError,
    RoundNotFoundError,
)
from slopguess.core.repository_protocols import EmbeddingProvider, SessionFactory
from slopguess.core.scoring import (
    ElementBreakdown,
    assign_partial_matches,
    compute_element_score,
    match_exact,
    normalize_score,
    tokenize_meaningful,
)
from slopguess.core.similarity import cosine_similarity
from slopguess.models.guess import Guess
from slopguess.models.round import Round
from slopguess.services.notifications import NotificationDispatcher

logger = logging.getLogger(__name__)


@dataclass
class ScoreResult:
    score: Score
    similarity: Similarity
    guess_embedding: list[float]
    element_breakdown: ElementBreakdown


class ScoringEngine:
    def __init__(
        self,
        session_factory: SessionFactory,
        embedding_provider: EmbeddingProvider,
        notifications: NotificationDispatcher | None = None,
        curve: ScoringCurve = ScoringCurve.CURVED,
        max_guess_length: int = 200,
    ):
        self._session_factory = session_factory
        self._embeddings = embedding_provider
        self._notifications = notifications
        self.curve = curve
        self.max_guess_length = max_guess_length

    def validate_guess_text(self, guess_text: str | None) -> str:
        text = (guess_text or "").strip()
        if not text:
            raise GuessValidationError("Guess must be a non-empty string", "INVALID_GUESS")
        if len(text) > self.max_guess_length:
            raise GuessValidationError(
                f"Guess must be at most {self.max_guess_length} characters",
                "GUESS_TOO_LONG",
            )
        return text

    # ─── Scoring ─────────────────────────────────────────────────

    async def score_guess(self, round_id: RoundId, guess_text: str) -> ScoreResult:
        async with self._session_factory() as db:
            round_row = await db.get(Round, round_id)
        if round_row is None:
            raise RoundNotFoundError(round_id)

        prompt_vector = round_row.prompt_embedding
        if not prompt_vector:
            prompt_vector = await self._repair_prompt_embedding(round_row)

        guess = await self._embeddings.embed(guess_text)
        similarity = cosine_similarity(prompt_vector, guess.vector)
        score = normalize_score(similarity, self.curve)
        breakdown = await self.compute_element_breakdown(round_row.prompt, guess_text, score)
        return ScoreResult(Score(score), Similarity(similarity), guess.vector, breakdown)

    async def _repair_prompt_embedding(self, round_row: Round) -> list[float]:
        logger.warning(
            f"Round {round_row.id} has no prompt embedding, repairing",
            extra={"round_id": round_row.id, "event": "embedding_repair"},
        )
        embedding = await self._embeddings.embed(round_row.prompt)
        async with self._session_factory() as db:
            await db.execute(
                update(Round)
                .where(Round.id == round_row.id, Round.prompt_embedding.is_(None))
                .values(prompt_embedding=embedding.vector)
                .execution_options(synchronize_session=False)
            )
            await db.commit()
            stored = await db.scalar(select(Round.prompt_embedding).where(Round.id == round_row.id))
        return stored or embedding.vector

    async def compute_element_breakdown(
        self, prompt_text: str, guess_text: str, overall_score: int,
    ) -> ElementBreakdown:
        prompt_tokens = tokenize_meaningful(prompt_text)
        if not prompt_tokens:
            return ElementBreakdown(overall_score=overall_score)

        matched, unmatched, leftover = match_exact(prompt_tokens, tokenize_meaningful(guess_text))
        partial = []
        if unmatched and leftover:
            words = list(dict.fromkeys([*unmatched, *leftover]))
            vectors = await self._embeddings.embed_batch(words)
            partial = assign_partial_matches(unmatched, leftover, dict(zip(words, vectors)))

        return ElementBreakdown(
            matched_words=matched,
            partial_matches=partial,
            element_score=compute_element_score(
                len(matched), len(partial), len(matched) + len(unmatched),
            ),
            overall_score=overall_score,
        )

    # ─── Persistence ─────────────────────────────────────────────

    async def score_and_save_guess(
        self, round_id: RoundId, user_id: UserId, guess_text: str,
    ) -> Guess:
        text = self.validate_guess_text(guess_text)

        async with self._session_factory() as db:
            round_row = await db.get(Round, round_id)
            if round_row is None:
                raise RoundNotFoundError(round_id)
            if round_row.status != RoundStatus.ACTIVE.value:
                raise RoundNotActiveError(round_id, round_row.status)
            if await self._find_guess(db, round_id, user_id) is not None:
                raise DuplicateGuessError(round_id, user_id)

        result = await self.score_guess(round_id, text)
        guess = Guess(
            id=GuessId(uuid.uuid4()),
            round_id=round_id,
            user_id=user_id,
            guess_text=text,
            score=result.score,
            embedding_similarity=result.similarity,
            guess_embedding=result.guess_embedding,
            element_scores=result.element_breakdown.to_dict(),
        )

        async with self._session_factory() as db:
            db.add(guess)
            try:
                await db.commit()
            except IntegrityError as e:
                await db.rollback()
                logger.info(
                    "Concurrent duplicate guess rejected by constraint",
                    extra={"round_id": round_id, "user_id": user_id},
                )
                raise DuplicateGuessError(round_id, user_id) from e

        logger.info(
            f"Guess scored {result.score}",
            extra={"round_id": round_id, "user_id": user_id, "score": result.score},
        )
        if self._notifications is not None:
            self._notifications.dispatch(
                "guess_scored",
                round_id=str(round_id),
                user_id=str(user_id),
                score=result.score,
            )
        return guess

    async def _find_guess(self, db, round_id: RoundId, user_id: UserId) -> Guess | None:
        return await db.scalar(
            select(Guess).where(Guess.round_id == round_id, Guess.user_id == user_id)
        )

    # ─── Queries ─────────────────────────────────────────────────

    async def get_user_guess(self, round_id: RoundId, user_id: UserId) -> Guess | None:
        async with self._session_factory() as db:
            return await self._find_guess(db, round_id, user_id)

    async def get_round_scores(self, round_id: RoundId) -> list[Guess]:
        async with self._session_factory() as db:
            rows = await db.scalars(
                select(Guess)
                .where(Guess.round_id == round_id)
                .order_by(Guess.score.desc(), Guess.submitted_at.asc())
            )
            return list(rows.all())

    async def get_guess_rank(self, round_id: RoundId, score: int) -> int:
        async with self._session_factory() as db:
            higher = await db.scalar(
                select(func.count(Guess.id))
                .where(Guess.round_id == round_id, Guess.score > score)
            )
        return (higher or 0) + 1

    async def count_guesses(self, round_id: RoundId) -> int:
        async with self._session_factory() as db:
            total = await db.scalar(
                select(func.count(Guess.id)).where(Guess.round_id == round_id)
            )
        return total or 0
