"""Round Routes - public round views, guess submission and leaderboards.

Invariants:
    - The prompt is never returned for a round that is not completed
    - Guess text of other players is only revealed once the round is completed
    - Caller identity comes from the X-User-Id header; guessing requires it
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from slopguess.api.dependencies import get_runtime, optional_user_id, require_user_id
from slopguess.core.domain_types import RoundStatus
from slopguess.core.errors import NoActiveRoundError, RoundNotFoundError
from slopguess.schemas.round import (
    ActiveRoundResponse,
    CompletedRound,
    GuessCreate,
    GuessResultResponse,
    LeaderboardEntry,
    LeaderboardResponse,
    PublicRound,
    RoundDetailResponse,
    RoundHistoryResponse,
    round_view,
)
from slopguess.services.runtime import GameRuntime

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/rounds", tags=["rounds"])


@router.get("/active", response_model=ActiveRoundResponse)
async def get_active_round(
    runtime: GameRuntime = Depends(get_runtime),
    user_id: UUID | None = Depends(optional_user_id),
):
    active = await runtime.round_engine.get_active_round()
    if active is None:
        raise NoActiveRoundError()

    response = ActiveRoundResponse(
        round=PublicRound.from_round(active),
        guess_count=await runtime.scoring_engine.count_guesses(active.id),
        next_rotation_at=runtime.scheduler.get_next_rotation_time(),
    )
    if user_id is not None:
        guess = await runtime.scoring_engine.get_user_guess(active.id, user_id)
        response.has_guessed = guess is not None
        response.user_score = guess.score if guess else None
    return response


@router.get("/history", response_model=RoundHistoryResponse)
async def get_round_history(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    runtime: GameRuntime = Depends(get_runtime),
):
    rounds, total = await runtime.round_engine.get_completed_rounds_paginated(page, limit)
    return RoundHistoryResponse(
        rounds=[CompletedRound.from_round(r) for r in rounds],
        page=page,
        limit=limit,
        total=total,
    )


@router.get("/{round_id}", response_model=RoundDetailResponse)
async def get_round(round_id: UUID, runtime: GameRuntime = Depends(get_runtime)):
    round_row = await runtime.round_engine.get_round_by_id(round_id)
    if round_row is None:
        raise RoundNotFoundError(round_id)
    return RoundDetailResponse(
        round=round_view(round_row),
        guess_count=await runtime.scoring_engine.count_guesses(round_id),
    )


@router.post(
    "/{round_id}/guess", response_model=GuessResultResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_guess(
    round_id: UUID,
    body: GuessCreate,
    runtime: GameRuntime = Depends(get_runtime),
    user_id: UUID = Depends(require_user_id),
):
    scoring = runtime.scoring_engine
    guess = await scoring.score_and_save_guess(round_id, user_id, body.guess)
    return GuessResultResponse(
        guess_id=guess.id,
        score=guess.score,
        rank=await scoring.get_guess_rank(round_id, guess.score),
        total_guesses=await scoring.count_guesses(round_id),
        element_breakdown=guess.element_scores,
    )


@router.get("/{round_id}/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(round_id: UUID, runtime: GameRuntime = Depends(get_runtime)):
    round_row = await runtime.round_engine.get_round_by_id(round_id)
    if round_row is None:
        raise RoundNotFoundError(round_id)

    reveal = round_row.status == RoundStatus.COMPLETED.value
    guesses = await runtime.scoring_engine.get_round_scores(round_id)
    entries = []
    for position, guess in enumerate(guesses, start=1):
        # Ties share the rank of the first guess with that score
        rank = entries[-1].rank if entries and entries[-1].score == guess.score else position
        entries.append(LeaderboardEntry.from_guess(guess, rank, reveal))
    return LeaderboardResponse(
        round_id=round_id, status=round_row.status, entries=entries, total=len(entries),
    )
