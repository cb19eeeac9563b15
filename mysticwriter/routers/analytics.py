"""Writing analytics REST endpoints: summary, ledger tracking, contribution."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from mysticwriter.dependencies import get_analytics
from mysticwriter.schemas import (
    AnalyticsSummary,
    ContributionRequest,
    ContributionResponse,
    DailyActivityRecord,
    TrackWordsRequest,
)
from mysticwriter.services.analytics import AnalyticsService, contribution_percentage, count_words

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/{user_id}/summary", response_model=AnalyticsSummary)
async def get_summary(
    user_id: str,
    today: Optional[date] = None,
    analytics: AnalyticsService = Depends(get_analytics),
):
    # Never fails: the service returns the zero summary when the ledger is unreachable
    return await analytics.get_summary(user_id, today=today)


@router.get("/{user_id}/records", response_model=List[DailyActivityRecord])
async def get_records(
    user_id: str,
    start: date,
    end: date,
    analytics: AnalyticsService = Depends(get_analytics),
):
    if start > end:
        raise HTTPException(status_code=400, detail="start must not be after end")
    return await analytics.get_records_in_range(user_id, start, end)


@router.post("/{user_id}/words", response_model=DailyActivityRecord)
async def track_words(
    user_id: str,
    request: TrackWordsRequest,
    analytics: AnalyticsService = Depends(get_analytics),
):
    if request.word_count is not None:
        word_count = request.word_count
    else:
        word_count = count_words(request.text or "")

    result = await analytics.track_words_written(user_id, word_count)
    if not result.ok:
        raise HTTPException(status_code=502, detail=f"Failed to track words: {result.error}")
    return result.value


@router.post("/{user_id}/characters")
async def track_character(user_id: str, analytics: AnalyticsService = Depends(get_analytics)):
    await analytics.track_character_created(user_id)
    return {"status": "tracked"}


@router.post("/{user_id}/stories")
async def track_story(user_id: str, analytics: AnalyticsService = Depends(get_analytics)):
    await analytics.track_story_created(user_id)
    return {"status": "tracked"}


@router.post("/contribution", response_model=ContributionResponse)
async def get_contribution(request: ContributionRequest):
    percentage, total_words, user_words = contribution_percentage(request.segments)
    return {
        "contribution_percentage": percentage,
        "total_words": total_words,
        "user_words": user_words,
    }
