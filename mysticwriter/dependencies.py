from fastapi import HTTPException, Request

from mysticwriter.services.analytics import AnalyticsService
from mysticwriter.services.avatar import AvatarPipeline
from mysticwriter.services.characters import CharacterService
from mysticwriter.services.story_ai import StoryAI


def _services(request: Request):
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="Services not initialised")
    return services


def get_analytics(request: Request) -> AnalyticsService:
    """Dependency for the analytics service."""
    return _services(request).analytics


def get_avatars(request: Request) -> AvatarPipeline:
    return _services(request).avatars


def get_characters(request: Request) -> CharacterService:
    return _services(request).characters


def get_story_ai(request: Request) -> StoryAI:
    return _services(request).story_ai
