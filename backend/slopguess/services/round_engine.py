"""Round Engine - creates, activates, completes and rotates game rounds.

Invariants:
    - A round is inserted only with prompt, image reference and embedding populated
    - Round row, round_words rows and word last_used_at marks commit together or not at all
    - activate/complete are conditional UPDATEs (WHERE status = expected); a miss is
      reported as RoundNotFoundError or InvalidRoundTransitionError, never retried
    - create_and_activate_round creates the new round BEFORE completing the current one;
      if every attempt fails, the current active round is left untouched
    - Any exception from a creation attempt counts as a failed attempt, except
      InvalidDifficultyError which is raised at once
    - If activation fails after the current round was completed, no round is active
      until the next scheduler tick creates one
    - At most one active round (also enforced by uq_rounds_single_active)

Design Decisions:
    - Provider calls happen outside the transaction; only the inserts hold a connection
    - Images are persisted to durable storage before the round row references them
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError

from slopguess.core.domain_types import ImageQuality, RoundStatus
from slopguess.core.errors import (
    ActiveRoundExistsError,
    InvalidDifficultyError,
    NoWordsAvailableError,
    RoundCreationFailedError,
    RoundNotFoundError,
    SlopGuessError,
)
from slopguess.core.repository_protocols import (
    EmbeddingProvider, ImageProvider, ImageStore, SessionFactory,
)
from slopguess.core.round_lifecycle import TRANSITIONS, require_transition
from slopguess.models.round import Round
from slopguess.models.word_bank import RoundWord
from slopguess.services.prompt_generator import PromptGenerator
from slopguess.services.word_supply import WordSupply

logger = logging.getLogger(__name__)

MAX_CREATE_ATTEMPTS = 3
MAX_PAGE_SIZE = 100

_TIMESTAMP_FIELD = {"activate": "started_at", "complete": "ended_at"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RoundEngine:
    def __init__(
        self,
        session_factory: SessionFactory,
        word_supply: WordSupply,
        prompt_generator: PromptGenerator,
        image_provider: ImageProvider,
        image_store: ImageStore,
        embedding_provider: EmbeddingProvider,
        default_difficulty: str = "normal",
        image_quality: ImageQuality | None = None,
        max_create_attempts: int = MAX_CREATE_ATTEMPTS,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._session_factory = session_factory
        self._words = word_supply
        self._prompts = prompt_generator
        self._images = image_provider
        self._image_store = image_store
        self._embeddings = embedding_provider
        self.default_difficulty = default_difficulty
        self.image_quality = image_quality
        self.max_create_attempts = max_create_attempts
        self._clock = clock

    # ─── Creation ────────────────────────────────────────────────

    async def create_round(self, difficulty: str | None = None) -> Round:
        """Run the full pipeline and insert a pending round."""
        difficulty = difficulty or self.default_difficulty
        self._words.resolve_word_count(difficulty)

        words = await self._words.get_words_for_difficulty(difficulty)
        if not words:
            raise NoWordsAvailableError(difficulty)

        generated = await self._prompts.generate_prompt_from_words(words)
        image = await self._images.generate(generated.prompt, self.image_quality)
        image_ref = await self._image_store.persist(image)
        embedding = await self._embeddings.embed(generated.prompt)

        round_row = Round(
            id=uuid.uuid4(),
            prompt=generated.prompt,
            image_url=image_ref,
            status=RoundStatus.PENDING.value,
            prompt_embedding=embedding.vector,
            prompt_source=generated.source.value,
            difficulty=difficulty,
            word_count=len(words),
            created_at=self._clock(),
        )
        word_ids = [w.id for w in words]

        async with self._session_factory() as db:
            async with db.begin():
                db.add(round_row)
                await db.flush()
                db.add_all(RoundWord(round_id=round_row.id, word_id=wid) for wid in word_ids)
                await self._words.mark_words_used(db, word_ids, self._clock())

        logger.info(
            f"Created round {round_row.id}",
            extra={
                "round_id": round_row.id,
                "difficulty": difficulty,
                "word_count": len(words),
                "prompt_source": generated.source.value,
            },
        )
        return round_row

    async def create_and_activate_round(self, difficulty: str | None = None) -> Round:
        """Create a new round, then complete the current one and activate the new one."""
        new_round: Round | None = None
        last_error: Exception | None = None
        for attempt in range(1, self.max_create_attempts + 1):
            try:
                new_round = await self.create_round(difficulty)
                break
            except InvalidDifficultyError:
                raise
            except Exception as e:
                last_error = e
                logger.warning(
                    f"Round creation attempt {attempt}/{self.max_create_attempts} failed: {e}",
                    extra={"attempt": attempt},
                    exc_info=not isinstance(e, SlopGuessError),
                )

        if new_round is None:
            logger.error(
                f"Round creation failed after {self.max_create_attempts} attempts; "
                "keeping the current round",
            )
            raise RoundCreationFailedError(self.max_create_attempts, last_error) from last_error

        current = await self.get_active_round()
        if current is not None:
            await self.complete_round(current.id)
        try:
            return await self.activate_round(new_round.id)
        except Exception:
            logger.error(
                f"Round {new_round.id} created but activation failed; "
                "no round is active until the next scheduler tick",
                extra={"round_id": new_round.id, "event": "activation_failed"},
                exc_info=True,
            )
            raise

    # ─── Transitions ─────────────────────────────────────────────

    async def activate_round(self, round_id: uuid.UUID) -> Round:
        return await self._transition(round_id, "activate")

    async def complete_round(self, round_id: uuid.UUID) -> Round:
        return await self._transition(round_id, "complete")

    async def _transition(self, round_id: uuid.UUID, action: str) -> Round:
        expected, target = TRANSITIONS[action]
        values = {"status": target.value, _TIMESTAMP_FIELD[action]: self._clock()}

        async with self._session_factory() as db:
            try:
                result = await db.execute(
                    update(Round)
                    .where(Round.id == round_id, Round.status == expected.value)
                    .values(**values)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    current = await db.scalar(select(Round.status).where(Round.id == round_id))
                    if current is None:
                        raise RoundNotFoundError(round_id)
                    require_transition(round_id, action, current)
                await db.commit()
            except IntegrityError as e:
                await db.rollback()
                raise ActiveRoundExistsError(round_id) from e

            round_row = await db.get(Round, round_id, populate_existing=True)

        logger.info(f"Round {round_id} -> {target.value}", extra={"round_id": round_id})
        return round_row

    # ─── Queries ─────────────────────────────────────────────────

    async def get_active_round(self) -> Round | None:
        async with self._session_factory() as db:
            return await db.scalar(
                select(Round)
                .where(Round.status == RoundStatus.ACTIVE.value)
                .order_by(Round.started_at.desc())
                .limit(1)
            )

    async def get_round_by_id(self, round_id: uuid.UUID) -> Round | None:
        async with self._session_factory() as db:
            return await db.get(Round, round_id)

    async def get_recent_rounds(self, limit: int = 10) -> list[Round]:
        async with self._session_factory() as db:
            rows = await db.scalars(
                select(Round)
                .where(Round.status == RoundStatus.COMPLETED.value)
                .order_by(Round.ended_at.desc())
                .limit(min(max(limit, 1), MAX_PAGE_SIZE))
            )
            return list(rows.all())

    async def get_completed_rounds_paginated(
        self, page: int = 1, limit: int = 20,
    ) -> tuple[list[Round], int]:
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        completed = Round.status == RoundStatus.COMPLETED.value
        async with self._session_factory() as db:
            total = await db.scalar(select(func.count(Round.id)).where(completed))
            rows = await db.scalars(
                select(Round)
                .where(completed)
                .order_by(Round.ended_at.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            )
            return list(rows.all()), total or 0
