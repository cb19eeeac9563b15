"""Avatar generation endpoints.

Both routes answer 200 once generation has run: an empty ``url`` means the
character has no avatar, which the UI treats as a normal state.
"""

from fastapi import APIRouter, Depends, HTTPException

from mysticwriter.dependencies import get_avatars, get_characters
from mysticwriter.schemas import AvatarRequest, AvatarResult, CharacterAvatarRequest
from mysticwriter.services.avatar import AvatarPipeline
from mysticwriter.services.characters import CharacterService

router = APIRouter(tags=["avatars"])


@router.post("/avatars", response_model=AvatarResult)
async def generate_avatar(request: AvatarRequest, avatars: AvatarPipeline = Depends(get_avatars)):
    return await avatars.generate_avatar(request.name, request.description, request.story_context)


@router.post("/characters/{character_id}/avatar", response_model=AvatarResult)
async def generate_character_avatar(
    character_id: str,
    request: CharacterAvatarRequest,
    characters: CharacterService = Depends(get_characters),
):
    name, description = request.name, request.description
    if name is None or description is None:
        found = await characters.get_character(character_id)
        if not found.ok:
            raise HTTPException(status_code=502, detail="Character lookup failed")
        if found.value is None:
            raise HTTPException(status_code=404, detail="Character not found")
        name = name or found.value.name
        description = found.value.description if description is None else description

    return await characters.generate_avatar(character_id, name, description, request.story_context)
