"""AI writing helper endpoints (continuation, characters, titles, tone)."""

from fastapi import APIRouter, Depends, HTTPException

from mysticwriter.dependencies import get_story_ai
from mysticwriter.schemas import (
    CharacterDescriptionRequest,
    CharacterDescriptionResponse,
    ContinueStoryRequest,
    ContinueStoryResponse,
    RandomCharacter,
    RandomCharacterRequest,
    TitlesRequest,
    TitlesResponse,
    ToneAnalysis,
    ToneRequest,
)
from mysticwriter.services.story_ai import StoryAI

router = APIRouter(prefix="/writing", tags=["writing"])


@router.post("/continue", response_model=ContinueStoryResponse)
async def continue_story(request: ContinueStoryRequest, story_ai: StoryAI = Depends(get_story_ai)):
    text = await story_ai.continue_story(request.user_text, request.story_context, request.options)
    return {"text": text}


@router.post("/character-description", response_model=CharacterDescriptionResponse)
async def character_description(
    request: CharacterDescriptionRequest,
    story_ai: StoryAI = Depends(get_story_ai),
):
    result = await story_ai.generate_character_description(request.name, request.traits)
    if not result.ok:
        raise HTTPException(status_code=502, detail="Failed to generate character description")
    return {"description": result.value}


@router.post("/random-character", response_model=RandomCharacter)
async def random_character(request: RandomCharacterRequest, story_ai: StoryAI = Depends(get_story_ai)):
    return await story_ai.generate_random_character(request.story_title, request.story_context)


@router.post("/titles", response_model=TitlesResponse)
async def story_titles(request: TitlesRequest, story_ai: StoryAI = Depends(get_story_ai)):
    return {"titles": await story_ai.generate_story_titles(request.content, request.count)}


@router.post("/tone", response_model=ToneAnalysis)
async def story_tone(request: ToneRequest, story_ai: StoryAI = Depends(get_story_ai)):
    return await story_ai.analyze_story_tone(request.content)
