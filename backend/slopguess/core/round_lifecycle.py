"""Round Lifecycle - the pending -> active -> completed state machine.

Invariants:
    - Only two transitions exist: activate (pending -> active), complete (active -> completed)
    - completed is terminal
    - Rotation time is started_at + round duration; naive DB timestamps are read as UTC
"""

from datetime import datetime, timedelta, timezone

from slopguess.core.domain_types import RoundStatus
from slopguess.core.errors import InvalidRoundTransitionError

TRANSITIONS: dict[str, tuple[RoundStatus, RoundStatus]] = {
    "activate": (RoundStatus.PENDING, RoundStatus.ACTIVE),
    "complete": (RoundStatus.ACTIVE, RoundStatus.COMPLETED),
}


def require_transition(round_id, action: str, current: str) -> RoundStatus:
    """Return the target status, or raise when `current` does not allow `action`."""
    expected, target = TRANSITIONS[action]
    if current != expected.value:
        raise InvalidRoundTransitionError(round_id, action, current, expected.value)
    return target


def ensure_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def compute_next_rotation(started_at: datetime, duration: timedelta) -> datetime:
    return ensure_utc(started_at) + duration


def is_expired(started_at: datetime, duration: timedelta, now: datetime) -> bool:
    return ensure_utc(now) >= compute_next_rotation(started_at, duration)
