"""Tests for the direct Gemini image generator (google-genai client mocked)."""

import base64
from unittest.mock import AsyncMock, MagicMock

from google.genai import errors as genai_errors

from conftest import run
from mysticwriter.services import gemini_images
from mysticwriter.services.gemini_images import GeminiImageGenerator, strip_provider_prefix
from mysticwriter.utils.logging_config import ROOT_LOGGER


def _part(text=None, data=None):
    p = MagicMock()
    p.text = text
    if data is None:
        p.inline_data = None
    else:
        p.inline_data = MagicMock()
        p.inline_data.data = data
    return p


def _response(parts):
    candidate = MagicMock()
    candidate.content.parts = parts
    response = MagicMock()
    response.candidates = [candidate]
    return response


def make_generator(response=None, error=None):
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(return_value=response, side_effect=error)
    return GeminiImageGenerator(model="gemini-2.5-flash-image-preview", client=client), client


def test_strip_provider_prefix():
    assert strip_provider_prefix("google/gemini-x") == "gemini-x"
    assert strip_provider_prefix("gemini-x") == "gemini-x"


def test_logs_under_json_configured_root():
    assert gemini_images.logger.name == "mysticwriter.gemini_images"
    assert gemini_images.logger.parent.name == ROOT_LOGGER


class TestGeminiImageGenerator:

    def test_inline_bytes_become_base64(self):
        generator, client = make_generator(_response([_part(text="here"), _part(data=b"\x89PNG...")]))

        result = run(generator.generate_image("a portrait", "google/gemini-2.5-flash-image-preview"))

        assert result.ok
        assert base64.b64decode(result.value.b64_json) == b"\x89PNG..."
        assert client.aio.models.generate_content.await_args.kwargs["model"] == "gemini-2.5-flash-image-preview"

    def test_text_only_response_fails(self):
        generator, _ = make_generator(_response([_part(text="I can't draw that")]))
        assert not run(generator.generate_image("p")).ok

    def test_no_candidates_fails(self):
        response = MagicMock()
        response.candidates = []
        generator, _ = make_generator(response)
        assert not run(generator.generate_image("p")).ok

    def test_api_error_is_failed_result(self):
        error = genai_errors.APIError(429, {"error": {"message": "quota", "status": "RESOURCE_EXHAUSTED"}})
        generator, _ = make_generator(error=error)
        result = run(generator.generate_image("p"))
        assert not result.ok
