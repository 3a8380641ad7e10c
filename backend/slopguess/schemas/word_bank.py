"""Word Bank Schemas - admin-facing variety report."""

from dataclasses import asdict
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from slopguess.core.word_selection import VarietyReport


class RoundOverlapEntry(BaseModel):
    round_id: UUID
    prompt: str
    created_at: datetime
    word_ids: list[int]
    overlap_with_previous: int


class VarietyReportResponse(BaseModel):
    rounds_analyzed: int
    lookback_window: int
    average_overlap: float
    max_overlap: int
    total_words: int
    categories: list[str]
    rounds: list[RoundOverlapEntry]

    @classmethod
    def build(
        cls, report: VarietyReport, total_words: int, categories: list[str],
    ) -> "VarietyReportResponse":
        return cls(**asdict(report), total_words=total_words, categories=categories)
