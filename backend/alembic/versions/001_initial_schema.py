"""Initial schema - rounds, guesses, word_bank, round_words.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "rounds",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("prompt", sa.Text, nullable=False),
        sa.Column("image_url", sa.Text, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("prompt_embedding", sa.JSON, nullable=True),
        sa.Column("prompt_source", sa.String(20), nullable=False, server_default="templated"),
        sa.Column("difficulty", sa.String(20), nullable=False, server_default="normal"),
        sa.Column("word_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "status IN ('pending', 'active', 'completed')", name="ck_rounds_status",
        ),
    )
    op.create_index("ix_rounds_status", "rounds", ["status"])
    op.create_index(
        "uq_rounds_single_active", "rounds", ["status"], unique=True,
        postgresql_where=sa.text("status = 'active'"),
        sqlite_where=sa.text("status = 'active'"),
    )

    op.create_table(
        "guesses",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "round_id", UUID(as_uuid=True),
            sa.ForeignKey("rounds.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("user_id", UUID(as_uuid=True), nullable=False),
        sa.Column("guess_text", sa.Text, nullable=False),
        sa.Column("score", sa.Integer, nullable=True),
        sa.Column("embedding_similarity", sa.Float, nullable=True),
        sa.Column("guess_embedding", sa.JSON, nullable=True),
        sa.Column("element_scores", sa.JSON, nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("round_id", "user_id", name="uq_guesses_round_user"),
        sa.CheckConstraint(
            "score IS NULL OR (score >= 0 AND score <= 100)", name="ck_guesses_score",
        ),
    )
    op.create_index("ix_guesses_round_score", "guesses", ["round_id", "score"])

    op.create_table(
        "word_bank",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("word", sa.String(100), nullable=False, unique=True),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_word_bank_last_used_at", "word_bank", ["last_used_at"])
    op.create_index("ix_word_bank_category", "word_bank", ["category"])

    op.create_table(
        "round_words",
        sa.Column(
            "round_id", UUID(as_uuid=True),
            sa.ForeignKey("rounds.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column(
            "word_id", sa.Integer,
            sa.ForeignKey("word_bank.id", ondelete="CASCADE"), primary_key=True,
        ),
    )


def downgrade() -> None:
    op.drop_table("round_words")
    op.drop_index("ix_word_bank_category", table_name="word_bank")
    op.drop_index("ix_word_bank_last_used_at", table_name="word_bank")
    op.drop_table("word_bank")
    op.drop_index("ix_guesses_round_score", table_name="guesses")
    op.drop_table("guesses")
    op.drop_index("uq_rounds_single_active", table_name="rounds")
    op.drop_index("ix_rounds_status", table_name="rounds")
    op.drop_table("rounds")
