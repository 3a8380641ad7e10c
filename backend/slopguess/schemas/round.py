"""Round Schemas - public round shapes, guess submission and leaderboard entries.

Invariants:
    - PublicRound never carries the prompt; CompletedRound is only built for
      completed rounds
    - Leaderboard entries withhold guess_text unless the round is completed
    - Guess length is validated by the scoring engine (configured limit), not here
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from slopguess.core.domain_types import RoundStatus
from slopguess.models.guess import Guess
from slopguess.models.round import Round


class PublicRound(BaseModel):
    id: UUID
    image_url: str | None
    status: str
    difficulty: str
    word_count: int
    started_at: datetime | None
    ended_at: datetime | None
    created_at: datetime

    @classmethod
    def from_round(cls, round_row: Round) -> "PublicRound":
        return cls(
            id=round_row.id,
            image_url=round_row.image_url,
            status=round_row.status,
            difficulty=round_row.difficulty,
            word_count=round_row.word_count,
            started_at=round_row.started_at,
            ended_at=round_row.ended_at,
            created_at=round_row.created_at,
        )


class CompletedRound(PublicRound):
    prompt: str
    prompt_source: str

    @classmethod
    def from_round(cls, round_row: Round) -> "CompletedRound":
        base = PublicRound.from_round(round_row).model_dump()
        return cls(**base, prompt=round_row.prompt, prompt_source=round_row.prompt_source)


def round_view(round_row: Round) -> PublicRound:
    """Completed rounds reveal their prompt; every other status hides it."""
    if round_row.status == RoundStatus.COMPLETED.value:
        return CompletedRound.from_round(round_row)
    return PublicRound.from_round(round_row)


class ActiveRoundResponse(BaseModel):
    round: PublicRound
    guess_count: int
    next_rotation_at: datetime | None = None
    has_guessed: bool | None = None
    user_score: int | None = None


class RoundDetailResponse(BaseModel):
    round: CompletedRound | PublicRound
    guess_count: int


class RoundHistoryResponse(BaseModel):
    rounds: list[CompletedRound]
    page: int
    limit: int
    total: int


class GuessCreate(BaseModel):
    guess: str


class GuessResultResponse(BaseModel):
    guess_id: UUID
    score: int
    rank: int
    total_guesses: int
    element_breakdown: dict | None = None


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: UUID
    score: int | None
    submitted_at: datetime
    guess_text: str | None = None

    @classmethod
    def from_guess(cls, guess: Guess, rank: int, reveal: bool) -> "LeaderboardEntry":
        return cls(
            rank=rank,
            user_id=guess.user_id,
            score=guess.score,
            submitted_at=guess.submitted_at,
            guess_text=guess.guess_text if reveal else None,
        )


class LeaderboardResponse(BaseModel):
    round_id: UUID
    status: str
    entries: list[LeaderboardEntry]
    total: int


class RotationResponse(BaseModel):
    message: str
    round_id: UUID
    next_rotation_at: datetime | None


class NextRotationResponse(BaseModel):
    next_rotation_at: datetime | None
    scheduler_running: bool
