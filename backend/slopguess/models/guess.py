"""Guess ORM - one scored guess per (round, user).

Invariants:
    - UNIQUE(round_id, user_id) is the authoritative duplicate guard
    - score within 0–100 when set
    - Rows are immutable after insert

Design Decisions:
    - user_id has no FK: user accounts live outside this service
    - element_scores stored as JSON (matched words, partial matches, element score)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint, DateTime, Float, ForeignKey, Index, Integer, JSON, Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from slopguess.db.base import Base


class Guess(Base):
    __tablename__ = "guesses"
    __table_args__ = (
        UniqueConstraint("round_id", "user_id", name="uq_guesses_round_user"),
        CheckConstraint(
            "score IS NULL OR (score >= 0 AND score <= 100)", name="ck_guesses_score",
        ),
        Index("ix_guesses_round_score", "round_id", "score"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    round_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("rounds.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    guess_text: Mapped[str] = mapped_column(Text, nullable=False)
    score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    embedding_similarity: Mapped[float | None] = mapped_column(Float, nullable=True)
    guess_embedding: Mapped[list | None] = mapped_column(
        JSON(none_as_null=True), nullable=True,
    )
    element_scores: Mapped[dict | None] = mapped_column(
        JSON(none_as_null=True), nullable=True,
    )
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
