"""Word bank ORM - seed words and the round <-> word junction.

Invariants:
    - word is unique across the bank
    - last_used_at only changes when the word is selected into a persisted round
    - round_words rows are written in the same transaction as their round
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from slopguess.core.domain_types import WordEntry, WordId
from slopguess.db.base import Base


class WordBankEntry(Base):
    __tablename__ = "word_bank"
    __table_args__ = (
        Index("ix_word_bank_last_used_at", "last_used_at"),
        Index("ix_word_bank_category", "category"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    word: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    last_used_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def to_entry(self) -> WordEntry:
        return WordEntry(WordId(self.id), self.word, self.category, self.last_used_at)


class RoundWord(Base):
    """Which word bank entries seeded which round."""
    __tablename__ = "round_words"

    round_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("rounds.id", ondelete="CASCADE"),
        primary_key=True,
    )
    word_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("word_bank.id", ondelete="CASCADE"),
        primary_key=True,
    )
