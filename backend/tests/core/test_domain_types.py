"""Domain Types - enum values and value objects."""

from uuid import uuid4

from slopguess.core.domain_types import (
    GeneratedImage, PromptSource, RoundId, RoundStatus, ScoringCurve, WordEntry, WordId,
)


def test_identity_types_wrap_values():
    uid = uuid4()
    assert RoundId(uid) == uid
    assert WordId(7) == 7


def test_round_status_has_three_states():
    assert [s.value for s in RoundStatus] == ["pending", "active", "completed"]


def test_enums_serialize_to_string():
    assert PromptSource.GENERATED == "generated"
    assert ScoringCurve.LINEAR == "linear"


def test_value_objects_are_frozen():
    entry = WordEntry(WordId(1), "octopus", "animals")
    assert entry.last_used_at is None
    image = GeneratedImage({"provider": "mock"}, image_url="https://example.com/a.png")
    assert image.image_bytes is None
