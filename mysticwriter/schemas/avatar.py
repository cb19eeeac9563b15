from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AvatarResult(BaseModel):
    """Outcome of one avatar generation.

    ``url == ""`` means no avatar. ``storage_key == ""`` means the image is
    not separately addressable in object storage (direct URL or inline data).
    """
    model_config = ConfigDict(frozen=True)

    url: str = ""
    storage_key: str = ""

    @classmethod
    def empty(cls) -> "AvatarResult":
        return cls()


class GeneratedImage(BaseModel):
    """Image endpoint payload: a direct URL or base64-encoded pixel data."""
    model_config = ConfigDict(extra="ignore")

    url: Optional[str] = None
    b64_json: Optional[str] = None


class AvatarRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=5000)
    story_context: Optional[str] = Field(default=None, max_length=5000)


class CharacterAvatarRequest(BaseModel):
    """Fields left out are read from the stored character."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=5000)
    story_context: Optional[str] = Field(default=None, max_length=5000)


class Character(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    story_id: str
    name: str
    description: str = ""
    role: str = ""
    traits: list[str] = Field(default_factory=list)
    avatar_url: Optional[str] = None
