"""
Writing analytics: ledger tracking and summary aggregation.

The ledger (``writing_analytics`` table) holds one row per user per UTC
calendar date.  ``compute_summary`` is the pure aggregation; the
``AnalyticsService`` wraps it with the backend reads and the best-effort
failure policy (analytics must never block writing).
"""
from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone
from typing import Awaitable, Callable, Iterable, List, Optional

from mysticwriter.schemas import AnalyticsSummary, DailyActivityRecord, Result, StorySegment
from mysticwriter.services.backend import BackendClient
from mysticwriter.utils.logging_config import UserAdapter, get_logger

_logger = get_logger("mysticwriter.analytics")

LEDGER_TABLE = "writing_analytics"

Clock = Callable[[], date]
CharacterCounter = Callable[[str], Awaitable[Result[int]]]


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def count_words(text: str) -> int:
    return len(text.split())


def contribution_percentage(segments: Iterable[StorySegment]) -> tuple[int, int, int]:
    """Return ``(percentage, total_words, user_words)`` for a story's segments.

    The percentage is rounded half up; 0 when the story has no words.
    """
    total_words = 0
    user_words = 0
    for segment in segments:
        words = count_words(segment.text)
        total_words += words
        if segment.author == "user":
            user_words += words
    if total_words == 0:
        return 0, 0, 0
    percentage = math.floor(user_words * 100 / total_words + 0.5)
    return percentage, total_words, user_words


def compute_streak(records: Iterable[DailyActivityRecord], today: date) -> int:
    """Count consecutive active days walking backward from ``today``.

    A missing day and a day with all-zero counters both end the walk, so a
    user who has not written yet today has a streak of 0.
    """
    by_date = {record.date: record for record in records}
    streak = 0
    day = today
    while True:
        record = by_date.get(day)
        if record is None or not record.has_activity():
            return streak
        streak += 1
        day -= timedelta(days=1)


def compute_summary(
    records: Iterable[DailyActivityRecord],
    today: date,
    active_characters: int = 0,
) -> AnalyticsSummary:
    records = sorted(records, key=lambda r: r.date, reverse=True)
    total_words = sum(r.words_written for r in records)
    words_today = next((r.words_written for r in records if r.date == today), 0)
    return AnalyticsSummary(
        total_words=total_words,
        words_today=words_today,
        active_characters=active_characters,
        streak_days=compute_streak(records, today),
    )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class AnalyticsService:
    """Ledger reads/writes plus the summary wrapper.

    ``count_characters`` is the character-directory lookup
    (see :meth:`CharacterService.count_user_characters`); ``clock`` supplies
    today's date and is injectable for tests.
    """

    def __init__(
        self,
        backend: BackendClient,
        count_characters: Optional[CharacterCounter] = None,
        clock: Clock = utc_today,
    ):
        self.backend = backend
        self._count_characters = count_characters
        self._clock = clock

    def today(self) -> date:
        return self._clock()

    async def get_summary(self, user_id: str, today: Optional[date] = None) -> AnalyticsSummary:
        logger = UserAdapter(_logger, user_id=user_id)
        today = today or self.today()

        result = await self.backend.select(
            LEDGER_TABLE, filters={"user_id": user_id}, order="date.desc"
        )
        if not result.ok:
            logger.warning("analytics_summary_defaulted | reason=ledger_fetch_failed | error=%s", result.error)
            return AnalyticsSummary.zero()
        try:
            records = [DailyActivityRecord.model_validate(row) for row in result.value or []]
        except ValueError as exc:
            logger.warning("analytics_summary_defaulted | reason=malformed_ledger | error=%s", exc)
            return AnalyticsSummary.zero()

        active_characters = 0
        if self._count_characters is not None:
            counted = await self._count_characters(user_id)
            if counted.ok:
                active_characters = counted.value or 0
            else:
                logger.info("active_characters_defaulted | error=%s", counted.error)

        summary = compute_summary(records, today, active_characters)
        logger.info("analytics_summary | records=%d | streak=%d", len(records), summary.streak_days)
        return summary

    async def get_records_in_range(self, user_id: str, start: date, end: date) -> List[DailyActivityRecord]:
        result = await self.backend.select(
            LEDGER_TABLE,
            filters=[
                ("user_id", user_id),
                ("date", ("gte", start.isoformat())),
                ("date", ("lte", end.isoformat())),
            ],
            order="date.asc",
        )
        if not result.ok:
            return []
        records = []
        for row in result.value or []:
            try:
                records.append(DailyActivityRecord.model_validate(row))
            except ValueError as exc:
                _logger.warning("skipping_malformed_ledger_row | error=%s", exc)
        return records

    async def track_words_written(self, user_id: str, word_count: int) -> Result[DailyActivityRecord]:
        """Add ``word_count`` words and one segment to today's record."""
        return await self._increment(
            user_id,
            {"words_written": word_count, "segments_added": 1},
        )

    async def track_character_created(self, user_id: str) -> None:
        result = await self._increment(user_id, {"characters_created": 1})
        if not result.ok:
            UserAdapter(_logger, user_id=user_id).warning("track_character_failed | error=%s", result.error)

    async def track_story_created(self, user_id: str) -> None:
        result = await self._increment(user_id, {"stories_created": 1})
        if not result.ok:
            UserAdapter(_logger, user_id=user_id).warning("track_story_failed | error=%s", result.error)

    async def _increment(self, user_id: str, deltas: dict) -> Result[DailyActivityRecord]:
        # Read-then-write without a transaction: concurrent writers can lose an update
        today = self.today().isoformat()
        existing = await self.backend.select_one(LEDGER_TABLE, {"user_id": user_id, "date": today})
        if not existing.ok:
            return Result.failure(existing.error)

        now = datetime.now(timezone.utc).isoformat()
        if existing.value:
            row = existing.value
            values = {column: (row.get(column) or 0) + delta for column, delta in deltas.items()}
            values["updated_at"] = now
            written = await self.backend.update(LEDGER_TABLE, values, {"id": row["id"]})
            if written.ok and not written.value:
                written = Result.success([{**row, **values}])
        else:
            values = {
                "user_id": user_id,
                "date": today,
                "words_written": 0,
                "segments_added": 0,
                "characters_created": 0,
                "stories_created": 0,
            }
            values.update(deltas)
            written = await self.backend.insert(LEDGER_TABLE, [values])

        if not written.ok:
            return Result.failure(written.error)
        try:
            return Result.success(DailyActivityRecord.model_validate(written.value[0]))
        except ValueError as exc:
            return Result.failure(exc)
