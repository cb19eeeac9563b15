"""
Direct Gemini image generation through ``google-genai``.

Used instead of the backend AI proxy when ``IMAGE_PROVIDER=gemini``.  Gemini
returns raw image bytes in ``inline_data``; they are base64-encoded so the
avatar pipeline sees the same payload shape as from the proxy.
"""
from __future__ import annotations

import base64
from typing import Optional

import httpx
from google.genai import Client as GenAIClient
from google.genai import errors as genai_errors
from google.genai import types

from mysticwriter.schemas import GeneratedImage, Result
from mysticwriter.utils.logging_config import get_logger

logger = get_logger("mysticwriter.gemini_images")


def strip_provider_prefix(model: str) -> str:
    """``google/gemini-2.5-flash-image-preview`` -> ``gemini-2.5-flash-image-preview``."""
    return model.split("/", 1)[1] if model.startswith("google/") else model


class GeminiImageGenerator:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gemini-2.5-flash-image-preview",
        client: Optional[GenAIClient] = None,
    ):
        self.model = model
        self._client = client or GenAIClient(api_key=api_key or None)

    async def generate_image(self, prompt: str, model: Optional[str] = None) -> Result[GeneratedImage]:
        model_name = strip_provider_prefix(model or self.model)
        try:
            response = await self._client.aio.models.generate_content(
                model=model_name,
                contents=prompt,
                config=types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"]),
            )
        except (genai_errors.APIError, httpx.HTTPError, ValueError) as exc:
            logger.warning("gemini_image_failed | model=%s | error=%s", model_name, exc)
            return Result.failure(exc)

        for candidate in response.candidates or []:
            content = candidate.content
            for part in (content.parts if content else None) or []:
                inline = part.inline_data
                if inline is not None and inline.data:
                    encoded = base64.b64encode(inline.data).decode("ascii")
                    return Result.success(GeneratedImage(b64_json=encoded))

        logger.warning("gemini_image_failed | model=%s | error=no inline image in response", model_name)
        return Result.failure("no image data in Gemini response")
