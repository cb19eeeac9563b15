"""Character directory lookups and avatar attachment for existing characters."""
from __future__ import annotations

from typing import Optional

from mysticwriter.schemas import AvatarResult, Character, Result
from mysticwriter.services.avatar import AvatarPipeline
from mysticwriter.services.backend import BackendClient
from mysticwriter.utils.logging_config import get_logger

logger = get_logger("mysticwriter.characters")

STORIES_TABLE = "stories"
CHARACTERS_TABLE = "characters"


class CharacterService:
    def __init__(self, backend: BackendClient, avatars: AvatarPipeline):
        self.backend = backend
        self.avatars = avatars

    async def count_user_characters(self, user_id: str) -> Result[int]:
        """Count characters across every story the user owns.

        Rows that are not objects mean the directory answered with an
        unexpected shape; that is reported as a failure, like a transport error.
        """
        stories = await self.backend.select(STORIES_TABLE, filters={"user_id": user_id}, columns="id")
        if not stories.ok:
            return Result.failure(stories.error)
        rows = stories.value or []
        if not all(isinstance(row, dict) for row in rows):
            return self._malformed(user_id, STORIES_TABLE)

        story_ids = [row["id"] for row in rows if row.get("id")]
        if not story_ids:
            return Result.success(0)

        characters = await self.backend.select(
            CHARACTERS_TABLE, filters={"story_id": story_ids}, columns="id"
        )
        if not characters.ok:
            return Result.failure(characters.error)
        rows = characters.value or []
        if not all(isinstance(row, dict) for row in rows):
            return self._malformed(user_id, CHARACTERS_TABLE)
        return Result.success(len(rows))

    @staticmethod
    def _malformed(user_id: str, table: str) -> Result[int]:
        logger.warning("character_count_malformed | user_id=%s | table=%s", user_id, table)
        return Result.failure(f"malformed {table} rows")

    async def get_character(self, character_id: str) -> Result[Optional[Character]]:
        """Load one character row; ``Result.success(None)`` when it does not exist."""
        found = await self.backend.select_one(CHARACTERS_TABLE, filters={"id": character_id})
        if not found.ok:
            return Result.failure(found.error)
        if found.value is None:
            return Result.success(None)
        try:
            return Result.success(Character.model_validate(found.value))
        except ValueError as exc:
            logger.warning("character_row_malformed | character_id=%s | error=%s", character_id, exc)
            return Result.failure(f"malformed character row: {exc}")

    async def generate_avatar(
        self,
        character_id: str,
        character_name: str,
        description: str,
        story_context: Optional[str] = None,
    ) -> AvatarResult:
        """Generate an avatar and store its URL on the character row.

        The avatar is returned even when the row update fails; the caller can
        retry the update without paying for another generation.
        """
        avatar = await self.avatars.generate_avatar(character_name, description, story_context)
        if not avatar.url:
            return avatar

        updated = await self.backend.update(
            CHARACTERS_TABLE, {"avatar_url": avatar.url}, {"id": character_id}
        )
        if not updated.ok:
            logger.warning(
                "character_avatar_update_failed | character_id=%s | error=%s",
                character_id, updated.error,
            )
        return avatar
