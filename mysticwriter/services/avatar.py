"""
Character avatar generation pipeline.

Flow for one call::

    prompt -> image endpoint -> direct URL ............................ done
                             -> base64 -> decode -> resize -> encode
                                -> upload -> storage URL .............. done
                                          -> inline data: URI ......... done
                             -> failure -> no avatar ("", "") ......... done

``generate_avatar`` never raises: every branch ends in an ``AvatarResult``.
An empty URL means "no avatar" and is a valid outcome for character creation.
"""
from __future__ import annotations

import asyncio
import re
import time
from typing import Callable, Optional, Protocol

from mysticwriter.config import Settings, get_settings
from mysticwriter.schemas import AvatarResult, GeneratedImage, Result
from mysticwriter.utils.image import (
    AVATAR_CONTENT_TYPE,
    process_avatar_image,
    to_data_uri,
)
from mysticwriter.utils.logging_config import get_logger

logger = get_logger("mysticwriter.avatar")


class ImageGenerator(Protocol):
    async def generate_image(self, prompt: str, model: str) -> Result[GeneratedImage]: ...


class ObjectStore(Protocol):
    async def upload(self, bucket: str, key: str, data: bytes, content_type: str = ...) -> Result[dict]: ...


def build_avatar_prompt(
    character_name: str,
    description: str,
    story_context: Optional[str] = None,
    size: int = 512,
) -> str:
    context_info = f"Story context: {story_context}. " if story_context else ""
    return (
        f"Create a fantasy character portrait in the size of {size}x{size} for {character_name}. "
        f"{description}.\n"
        f"{context_info}High quality, detailed, professional illustration style. "
        "Character-focused composition."
    )


def avatar_file_name(character_name: str, timestamp_ms: int, extension: str = "webp") -> str:
    slug = re.sub(r"\s+", "-", character_name.lower())
    return f"avatar-{slug}-{timestamp_ms}.{extension}"


def _now_ms() -> int:
    return int(time.time() * 1000)


class AvatarPipeline:
    def __init__(
        self,
        images: ImageGenerator,
        storage: ObjectStore,
        *,
        bucket: str = "character-avatars",
        model: str = "google/gemini-2.5-flash-image-preview",
        size: int = 512,
        quality: int = 70,
        clock_ms: Callable[[], int] = _now_ms,
    ):
        self.images = images
        self.storage = storage
        self.bucket = bucket
        self.model = model
        self.size = size
        self.quality = quality
        self._clock_ms = clock_ms

    @classmethod
    def from_settings(cls, backend, settings: Optional[Settings] = None) -> "AvatarPipeline":
        """Build the pipeline on top of a ``BackendClient``.

        Storage always goes through the backend; image generation goes
        through the backend AI proxy unless ``image_provider`` is ``gemini``.
        """
        settings = settings or get_settings()
        images: ImageGenerator = backend
        model = settings.avatar_model
        if settings.image_provider == "gemini":
            from mysticwriter.services.gemini_images import GeminiImageGenerator

            images = GeminiImageGenerator(
                api_key=settings.google_api_key,
                model=settings.gemini_image_model,
            )
            model = settings.gemini_image_model
        return cls(
            images,
            backend,
            bucket=settings.avatar_bucket,
            model=model,
            size=settings.avatar_size,
            quality=settings.avatar_quality,
        )

    async def generate_avatar(
        self,
        character_name: str,
        description: str,
        story_context: Optional[str] = None,
    ) -> AvatarResult:
        try:
            return await self._run(character_name, description, story_context)
        except Exception:
            # Last-resort boundary: character creation proceeds without an avatar
            logger.exception("avatar_pipeline_crashed", extra={"character": character_name})
            return AvatarResult.empty()

    async def _run(
        self,
        character_name: str,
        description: str,
        story_context: Optional[str],
    ) -> AvatarResult:
        extra = {"character": character_name}
        prompt = build_avatar_prompt(character_name, description, story_context, self.size)

        generated = await self.images.generate_image(prompt, self.model)
        if not generated.ok or generated.value is None:
            logger.warning("avatar_generation_failed | error=%s", generated.error,
                           extra={**extra, "stage": "requesting"})
            return AvatarResult.empty()

        image = generated.value
        if not image.b64_json:
            if not image.url:
                logger.warning("avatar_generation_failed | error=empty payload",
                               extra={**extra, "stage": "requesting"})
                return AvatarResult.empty()
            logger.info("avatar_direct_url", extra={**extra, "stage": "direct_url"})
            return AvatarResult(url=image.url)

        return await self._store_inline(character_name, image.b64_json)

    async def _store_inline(self, character_name: str, b64_data: str) -> AvatarResult:
        extra = {"character": character_name}
        fallback = AvatarResult(url=to_data_uri(b64_data))

        started = time.monotonic()
        try:
            compressed = await asyncio.to_thread(
                process_avatar_image, b64_data, (self.size, self.size), self.quality
            )
        except Exception as exc:
            # Any decode, resize or encode error keeps the original payload inline
            logger.warning("avatar_processing_failed | using inline fallback | error=%r", exc,
                           extra={**extra, "stage": "decoding"})
            return fallback

        file_name = avatar_file_name(character_name, self._clock_ms())
        uploaded = await self.storage.upload(self.bucket, file_name, compressed, AVATAR_CONTENT_TYPE)
        if not uploaded.ok:
            logger.warning("avatar_upload_failed | using inline fallback | error=%s", uploaded.error,
                           extra={**extra, "stage": "uploading"})
            return fallback

        url = (uploaded.value or {}).get("url")
        if not url:
            logger.warning("avatar_upload_failed | using inline fallback | error=no URL in upload response",
                           extra={**extra, "stage": "uploading"})
            return fallback

        logger.info(
            "avatar_uploaded | bytes=%d", len(compressed),
            extra={**extra, "stage": "uploaded",
                   "duration_ms": int((time.monotonic() - started) * 1000)},
        )
        return AvatarResult(url=url, storage_key=uploaded.value.get("key") or file_name)
