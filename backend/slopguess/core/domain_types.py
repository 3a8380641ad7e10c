"""Domain Types - rich types that replace bare primitives across the codebase.

Invariants:
    - RoundId, UserId, GuessId wrap UUIDs; WordId wraps the integer word bank key
    - Round status and prompt source are Enums, stored by .value
    - Provider selectors are closed Enums resolved when settings load

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and compare against DB strings without custom encoders
    - WordEntry is a frozen dataclass so words can leave the session that loaded them
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

RoundId = NewType("RoundId", UUID)
UserId = NewType("UserId", UUID)
GuessId = NewType("GuessId", UUID)
WordId = NewType("WordId", int)


# ─── Value Types ─────────────────────────────────────────────────

Score = NewType("Score", int)              # 0–100
Similarity = NewType("Similarity", float)  # -1.0–1.0


# ─── Enums ───────────────────────────────────────────────────────

class RoundStatus(str, Enum):
    """Round lifecycle states - maps to DB `status` column."""
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"


class PromptSource(str, Enum):
    """How the round prompt was produced."""
    GENERATED = "generated"
    TEMPLATED = "templated"


class EmbeddingProviderKind(str, Enum):
    MOCK = "mock"
    OPENAI = "openai"


class ImageProviderKind(str, Enum):
    MOCK = "mock"
    OPENAI = "openai"


class ImageQuality(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ScoringCurve(str, Enum):
    """Similarity-to-score mapping; rounds use CURVED."""
    CURVED = "curved"
    LINEAR = "linear"


# ─── Value Objects ───────────────────────────────────────────────

@dataclass(frozen=True)
class WordEntry:
    """A word bank row detached from its session."""
    id: WordId
    word: str
    category: str
    last_used_at: datetime | None = None


@dataclass(frozen=True)
class EmbeddingResult:
    vector: list[float]
    dimensions: int
    provider: str
    model: str


@dataclass(frozen=True)
class GeneratedImage:
    """Provider output: exactly one of image_url / image_bytes is set."""
    metadata: dict[str, Any]
    image_url: str | None = None
    image_bytes: bytes | None = None


@dataclass(frozen=True)
class GeneratedPrompt:
    prompt: str
    source: PromptSource


@dataclass(frozen=True)
class NotificationEvent:
    """Outbound event for the notification collaborator."""
    kind: str
    payload: dict[str, Any]
