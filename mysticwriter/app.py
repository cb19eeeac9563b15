"""FastAPI application, CORS, and the service wiring owned by the lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mysticwriter.config import Settings, get_settings
from mysticwriter.services.analytics import AnalyticsService
from mysticwriter.services.avatar import AvatarPipeline
from mysticwriter.services.backend import BackendClient
from mysticwriter.services.characters import CharacterService
from mysticwriter.services.story_ai import StoryAI
from mysticwriter.utils.logging_config import get_logger

logger = get_logger("mysticwriter.app")


@dataclass
class Services:
    backend: BackendClient
    analytics: AnalyticsService
    avatars: AvatarPipeline
    characters: CharacterService
    story_ai: StoryAI


def build_services(backend: BackendClient, settings: Optional[Settings] = None) -> Services:
    settings = settings or get_settings()
    avatars = AvatarPipeline.from_settings(backend, settings)
    characters = CharacterService(backend, avatars)
    return Services(
        backend=backend,
        analytics=AnalyticsService(backend, count_characters=characters.count_user_characters),
        avatars=avatars,
        characters=characters,
        story_ai=StoryAI(backend, default_model=settings.chat_model),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    # Tests may pre-populate app.state.services with doubles
    owned: Optional[BackendClient] = None
    if getattr(app.state, "services", None) is None:
        owned = BackendClient.from_settings(settings)
        app.state.services = build_services(owned, settings)
        logger.info("backend client ready | base_url=%s", settings.backend_url)
    yield
    if owned is not None:
        await owned.aclose()
        app.state.services = None


app = FastAPI(title="MysticWriter Engine", version="1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
