"""Admin Routes - manual rotation, scheduler status and word bank variety.

Invariants:
    - Every route requires the X-Admin-Key header when ADMIN_API_KEY is set
    - Manual rotation goes through the scheduler lock, never around it
"""

import logging

from fastapi import APIRouter, Depends, Query

from slopguess.api.dependencies import get_runtime, require_admin
from slopguess.schemas.round import NextRotationResponse, RotationResponse
from slopguess.schemas.word_bank import VarietyReportResponse
from slopguess.services.runtime import GameRuntime

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/v1/admin", tags=["admin"], dependencies=[Depends(require_admin)],
)


@router.post("/rounds/rotate", response_model=RotationResponse)
async def rotate_round(runtime: GameRuntime = Depends(get_runtime)):
    """Force a rotation now. A failed creation leaves the current round active."""
    logger.info("Manual rotation requested", extra={"event": "manual_rotation"})
    new_round = await runtime.scheduler.rotate_round()
    return RotationResponse(
        message="Round rotated",
        round_id=new_round.id,
        next_rotation_at=runtime.scheduler.get_next_rotation_time(),
    )


@router.get("/rounds/next", response_model=NextRotationResponse)
async def get_next_rotation(runtime: GameRuntime = Depends(get_runtime)):
    return NextRotationResponse(
        next_rotation_at=runtime.scheduler.get_next_rotation_time(),
        scheduler_running=runtime.scheduler.is_running,
    )


@router.get("/word-bank/variety", response_model=VarietyReportResponse)
async def get_variety_report(
    lookback: int | None = Query(default=None, ge=1, le=200),
    runtime: GameRuntime = Depends(get_runtime),
):
    words = runtime.word_supply
    report = await words.get_variety_report(lookback)
    return VarietyReportResponse.build(
        report, await words.get_word_count(), await words.get_categories(),
    )
