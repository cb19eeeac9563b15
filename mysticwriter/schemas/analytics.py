"""
Writing analytics schema definitions.

One ``DailyActivityRecord`` exists per (user, calendar date) in the
``writing_analytics`` ledger.  ``AnalyticsSummary`` is derived from the
ledger on demand and never persisted.

Usage:
    from mysticwriter.schemas import DailyActivityRecord

    record = DailyActivityRecord.model_validate(row)  # row from the backend
    record.has_activity()
"""
from __future__ import annotations

import datetime as dt
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class DailyActivityRecord(BaseModel):
    """A single day of writing activity for one user.

    Backend row: {id, user_id, date, words_written, segments_added,
    characters_created, stories_created, created_at, updated_at}
    """
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    user_id: str
    date: dt.date
    words_written: int = Field(default=0, ge=0)
    segments_added: int = Field(default=0, ge=0)
    characters_created: int = Field(default=0, ge=0)
    stories_created: int = Field(default=0, ge=0)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def has_activity(self) -> bool:
        # stories_created alone does not keep a streak alive
        return (
            self.words_written > 0
            or self.segments_added > 0
            or self.characters_created > 0
        )


class AnalyticsSummary(BaseModel):
    total_words: int = 0
    words_today: int = 0
    active_characters: int = 0
    streak_days: int = 0

    @classmethod
    def zero(cls) -> "AnalyticsSummary":
        return cls()


class StorySegment(BaseModel):
    """One alternating turn of story text."""
    id: Optional[str] = None
    text: str = Field(default="", max_length=100_000)
    author: Literal["user", "ai"]


class ContributionRequest(BaseModel):
    segments: List[StorySegment] = Field(default_factory=list)


class ContributionResponse(BaseModel):
    contribution_percentage: int
    total_words: int
    user_words: int


class TrackWordsRequest(BaseModel):
    """Either raw ``text`` (counted server-side) or an explicit ``word_count``."""
    text: Optional[str] = Field(default=None, max_length=100_000)
    word_count: Optional[int] = Field(default=None, ge=0)
