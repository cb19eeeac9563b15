"""Tests for the AI writing helpers and their fallbacks."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import run
from mysticwriter.schemas import GenerationOptions, Result
from mysticwriter.services.story_ai import (
    DEFAULT_TITLES,
    FALLBACK_CHARACTER,
    FALLBACK_CONTINUATION,
    StoryAI,
    continuation_system_prompt,
    qualify_model,
)


def make_ai(reply):
    backend = MagicMock()
    backend.chat_completion = AsyncMock(return_value=reply)
    return StoryAI(backend, default_model="gemini-2.5-pro"), backend


@pytest.mark.parametrize("model, expected", [
    ("gpt-4o", "openai/gpt-4o"),
    ("gemini-2.5-pro", "google/gemini-2.5-pro"),
    ("google/gemini-2.5-flash", "google/gemini-2.5-flash"),
])
def test_qualify_model(model, expected):
    assert qualify_model(model) == expected


class TestContinueStory:

    def test_returns_model_text(self):
        ai, backend = make_ai(Result.success("The door creaked open."))

        text = run(ai.continue_story("She knocked.", story_context="A haunted manor"))

        assert text == "The door creaked open."
        model, messages = backend.chat_completion.await_args.args
        assert model == "google/gemini-2.5-pro"
        assert "Story context: A haunted manor" in messages[0]["content"]
        assert messages[1] == {"role": "user", "content": "She knocked."}
        assert backend.chat_completion.await_args.kwargs == {"temperature": 0.7, "max_tokens": 500}

    def test_options_override_model(self):
        ai, backend = make_ai(Result.success("ok"))
        run(ai.continue_story("x", options=GenerationOptions(model="gpt-4o", temperature=0.2, max_tokens=50)))
        assert backend.chat_completion.await_args.args[0] == "openai/gpt-4o"
        assert backend.chat_completion.await_args.kwargs == {"temperature": 0.2, "max_tokens": 50}

    def test_failure_returns_fallback(self):
        ai, _ = make_ai(Result.failure("HTTP 500"))
        assert run(ai.continue_story("x")) == FALLBACK_CONTINUATION

    def test_system_prompt_without_context(self):
        assert "Story context" not in continuation_system_prompt()


class TestCharacterHelpers:

    def test_description_success(self):
        ai, backend = make_ai(Result.success("A tall ranger."))
        result = run(ai.generate_character_description("Aria", ["brave", "quiet"]))
        assert result.ok and result.value == "A tall ranger."
        assert "brave, quiet" in backend.chat_completion.await_args.args[1][1]["content"]

    def test_description_default_traits(self):
        ai, backend = make_ai(Result.success("x"))
        run(ai.generate_character_description("Aria", []))
        assert "mysterious, enigmatic" in backend.chat_completion.await_args.args[1][1]["content"]

    def test_description_failure_is_not_masked(self):
        ai, _ = make_ai(Result.failure("down"))
        assert not run(ai.generate_character_description("Aria", [])).ok

    def test_random_character_from_fenced_json(self):
        reply = '```json\n{"name": "Kael", "description": "A smith with ember eyes."}\n```'
        ai, _ = make_ai(Result.success(reply))
        character = run(ai.generate_random_character("Forge"))
        assert character.name == "Kael"
        assert character.description == "A smith with ember eyes."

    def test_random_character_missing_field_defaults(self):
        ai, _ = make_ai(Result.success('{"name": "Kael"}'))
        character = run(ai.generate_random_character("Forge"))
        assert character.name == "Kael"
        assert character.description == "A mysterious figure whose past remains unknown."

    def test_random_character_unparseable_reply(self):
        ai, _ = make_ai(Result.success("I cannot do that."))
        assert run(ai.generate_random_character("Forge")) == FALLBACK_CHARACTER

    def test_random_character_truncates_context(self):
        ai, backend = make_ai(Result.failure("down"))
        run(ai.generate_random_character("Forge", story_context="z" * 1000))
        prompt = backend.chat_completion.await_args.args[1][1]["content"]
        assert "z" * 300 in prompt
        assert "z" * 301 not in prompt


class TestTitlesAndTone:

    def test_titles_split_trim_and_limit(self):
        ai, _ = make_ai(Result.success("  The Ember Road \n\nAshes Rising\nA Third\nA Fourth"))
        assert run(ai.generate_story_titles("content", count=3)) == ["The Ember Road", "Ashes Rising", "A Third"]

    def test_titles_failure_defaults(self):
        ai, _ = make_ai(Result.failure("down"))
        assert run(ai.generate_story_titles("content")) == DEFAULT_TITLES

    def test_titles_blank_reply(self):
        ai, _ = make_ai(Result.success("   \n  "))
        assert run(ai.generate_story_titles("content")) == ["Untitled Story"]

    def test_tone_parsed(self):
        ai, backend = make_ai(Result.success('{"tone": "somber", "suggestions": ["vary pacing"]}'))
        analysis = run(ai.analyze_story_tone("text"))
        assert analysis.tone == "somber"
        assert analysis.suggestions == ["vary pacing"]
        assert backend.chat_completion.await_args.args[0] == "openai/gpt-4o"

    def test_tone_unparseable(self):
        ai, _ = make_ai(Result.success("It is sad."))
        assert run(ai.analyze_story_tone("text")).tone == "Unable to determine"

    def test_tone_failure(self):
        ai, _ = make_ai(Result.failure("down"))
        assert run(ai.analyze_story_tone("text")).tone == "Unknown"
