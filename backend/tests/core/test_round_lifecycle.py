"""Round Lifecycle - transition table and rotation timing."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from slopguess.core.domain_types import RoundStatus
from slopguess.core.errors import InvalidRoundTransitionError
from slopguess.core.round_lifecycle import (
    TRANSITIONS, compute_next_rotation, ensure_utc, is_expired, require_transition,
)


def test_only_two_transitions_exist():
    assert TRANSITIONS == {
        "activate": (RoundStatus.PENDING, RoundStatus.ACTIVE),
        "complete": (RoundStatus.ACTIVE, RoundStatus.COMPLETED),
    }


def test_allowed_transitions_return_target():
    assert require_transition(uuid4(), "activate", "pending") == RoundStatus.ACTIVE
    assert require_transition(uuid4(), "complete", "active") == RoundStatus.COMPLETED


@pytest.mark.parametrize("action,current", [
    ("activate", "active"),
    ("activate", "completed"),
    ("complete", "pending"),
    ("complete", "completed"),
])
def test_disallowed_transitions_raise(action, current):
    round_id = uuid4()
    with pytest.raises(InvalidRoundTransitionError) as exc:
        require_transition(round_id, action, current)
    assert exc.value.http_status == 409
    assert exc.value.current_status == current
    assert f"Cannot {action} round {round_id}" in exc.value.message


def test_ensure_utc_treats_naive_as_utc():
    naive = datetime(2026, 1, 1, 12, 0)
    assert ensure_utc(naive) == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_ensure_utc_converts_offsets():
    plus_two = timezone(timedelta(hours=2))
    moment = datetime(2026, 1, 1, 14, 0, tzinfo=plus_two)
    assert ensure_utc(moment) == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_next_rotation_is_start_plus_duration():
    start = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert compute_next_rotation(start, timedelta(hours=1)) == start + timedelta(hours=1)


def test_is_expired_at_boundary():
    start = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    hour = timedelta(hours=1)
    assert is_expired(start, hour, start + timedelta(minutes=59)) is False
    assert is_expired(start, hour, start + hour) is True
    assert is_expired(start.replace(tzinfo=None), hour, start + hour * 2) is True
