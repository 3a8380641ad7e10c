"""Round ORM - one hidden prompt, one generated image, one guessing window.

Invariants:
    - status ∈ {pending, active, completed}; at most one row is active
      (partial unique index uq_rounds_single_active)
    - prompt_embedding, once set, is never replaced
    - difficulty and word_count are written at creation only
    - started_at set on activation, ended_at set on completion

Design Decisions:
    - JSON column for the embedding: portable between Postgres and sqlite, read whole
    - Status transitions are conditional UPDATEs in services/round_engine.py, not ORM writes
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint, DateTime, Index, Integer, JSON, String, Text, text,
)
from sqlalchemy.orm import Mapped, mapped_column, validates
from sqlalchemy.dialects.postgresql import UUID

from slopguess.db.base import Base

_ACTIVE_ONLY = text("status = 'active'")


class Round(Base):
    """A game round - the prompt stays secret until status is completed."""
    __tablename__ = "rounds"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'active', 'completed')", name="ck_rounds_status",
        ),
        Index("ix_rounds_status", "status"),
        Index(
            "uq_rounds_single_active", "status", unique=True,
            postgresql_where=_ACTIVE_ONLY, sqlite_where=_ACTIVE_ONLY,
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending",
    )
    prompt_embedding: Mapped[list | None] = mapped_column(
        JSON(none_as_null=True), nullable=True,
    )
    prompt_source: Mapped[str] = mapped_column(
        String(20), nullable=False, default="templated",
    )
    difficulty: Mapped[str] = mapped_column(
        String(20), nullable=False, default="normal",
    )
    word_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    ended_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    @validates("prompt_embedding")
    def _embedding_is_write_once(self, key, value):
        current = self.__dict__.get("prompt_embedding")
        if current is not None and value != current:
            raise ValueError(f"Round {self.id} already has a prompt embedding")
        return value
