"""Request/response models for the AI writing helpers."""
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class GenerationOptions(BaseModel):
    model: Optional[Literal["gpt-4o", "gemini-2.5-pro", "gemini-2.5-flash"]] = None
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=500, gt=0, le=8192)


class ContinueStoryRequest(BaseModel):
    user_text: str = Field(..., min_length=1, max_length=100_000)
    story_context: Optional[str] = Field(default=None, max_length=100_000)
    options: GenerationOptions = Field(default_factory=GenerationOptions)


class ContinueStoryResponse(BaseModel):
    text: str


class CharacterDescriptionRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    traits: List[str] = Field(default_factory=list, max_length=50)


class CharacterDescriptionResponse(BaseModel):
    description: str


class RandomCharacterRequest(BaseModel):
    story_title: str = Field(default="Untitled Story", max_length=500)
    story_context: Optional[str] = Field(default=None, max_length=100_000)


class RandomCharacter(BaseModel):
    name: str
    description: str


class TitlesRequest(BaseModel):
    content: str = Field(..., max_length=100_000)
    count: int = Field(default=3, ge=1, le=10)


class TitlesResponse(BaseModel):
    titles: List[str]


class ToneRequest(BaseModel):
    content: str = Field(..., max_length=100_000)


class ToneAnalysis(BaseModel):
    tone: str
    suggestions: List[str] = Field(default_factory=list)
