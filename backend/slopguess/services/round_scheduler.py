"""Round Scheduler - keeps exactly one active round and rotates it when it expires.

Invariants:
    - start() is idempotent; stop() cancels the loop and clears in-memory state
    - Next rotation = active round started_at + round duration, rebuilt on every start
    - A failing tick or initial check is logged and the loop is still started
    - Rotations are serialized by a lock, so a manual rotate and a tick never overlap
    - get_next_rotation_time() is None when stopped or when no active round is known

Design Decisions:
    - One scheduler object per process, owned by the FastAPI lifespan
    - clock is injectable; tests drive tick() directly with a fake clock
"""

import asyncio
import contextlib
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from slopguess.core.round_lifecycle import compute_next_rotation, is_expired
from slopguess.models.round import Round
from slopguess.services.notifications import NotificationDispatcher
from slopguess.services.round_engine import RoundEngine

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RoundScheduler:
    def __init__(
        self,
        engine: RoundEngine,
        round_duration: timedelta,
        check_interval: timedelta,
        notifications: NotificationDispatcher | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._engine = engine
        self.round_duration = round_duration
        self.check_interval = check_interval
        self._notifications = notifications
        self._clock = clock
        self._task: asyncio.Task | None = None
        self._rotation_lock = asyncio.Lock()
        self._running = False
        self._next_rotation_at: datetime | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        if self._running:
            logger.info("Scheduler already running")
            return
        self._running = True

        try:
            active = await self._engine.get_active_round()
            if active is not None and active.started_at is not None:
                self._next_rotation_at = compute_next_rotation(active.started_at, self.round_duration)
                logger.info(
                    f"Resuming active round, next rotation at {self._next_rotation_at.isoformat()}",
                    extra={"round_id": active.id},
                )
            else:
                logger.info("No active round on startup, creating one")
                await self.rotate_round()
        except Exception as e:
            logger.error(f"Initial round check failed, retrying on next tick: {e}", exc_info=True)

        self._task = asyncio.create_task(self._run_loop())
        logger.info(
            f"Scheduler started (check every {self.check_interval.total_seconds():.0f}s, "
            f"rounds last {self.round_duration.total_seconds() / 3600:g}h)",
        )

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        self._task = None
        self._running = False
        self._next_rotation_at = None
        logger.info("Scheduler stopped")

    def get_next_rotation_time(self) -> datetime | None:
        if not self._running:
            return None
        return self._next_rotation_at

    async def _run_loop(self) -> None:
        interval = self.check_interval.total_seconds()
        while True:
            await asyncio.sleep(interval)
            await self.tick()

    async def tick(self) -> None:
        """One scheduler check. Never raises.

        The active round is read under the rotation lock, so a tick that waited
        on a manual rotation sees the new round instead of rotating again.
        """
        try:
            new_round = None
            async with self._rotation_lock:
                active = await self._engine.get_active_round()
                if active is None or active.started_at is None:
                    logger.info("No active round found, rotating")
                    new_round = await self._rotate_locked()
                elif is_expired(active.started_at, self.round_duration, self._clock()):
                    logger.info("Active round expired, rotating", extra={"round_id": active.id})
                    new_round = await self._rotate_locked()
                else:
                    self._next_rotation_at = compute_next_rotation(
                        active.started_at, self.round_duration,
                    )
            if new_round is not None:
                self._announce(new_round)
        except Exception as e:
            logger.error(f"Scheduler tick failed: {e}", exc_info=True)

    async def rotate_round(self) -> Round:
        """Create-before-complete rotation, used by admin triggers and startup."""
        async with self._rotation_lock:
            new_round = await self._rotate_locked()
        self._announce(new_round)
        return new_round

    async def _rotate_locked(self) -> Round:
        new_round = await self._engine.create_and_activate_round()
        self._next_rotation_at = compute_next_rotation(
            new_round.started_at or self._clock(), self.round_duration,
        )
        return new_round

    def _announce(self, new_round: Round) -> None:
        logger.info(
            f"Rotated to round {new_round.id}, next rotation at "
            f"{self._next_rotation_at.isoformat()}",
            extra={"round_id": new_round.id},
        )
        if self._notifications is not None:
            self._notifications.dispatch("round_rotated", round_id=str(new_round.id))
