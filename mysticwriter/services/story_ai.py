"""
AI writing helpers backed by the backend chat-completion proxy.

Each helper owns its fallback: continuation, random characters, titles and
tone analysis degrade to fixed text so the editor never stalls.  Character
descriptions are the exception and return a failed ``Result``, because a
made-up description would be saved on the character row.
"""
from __future__ import annotations

from typing import List, Optional

from mysticwriter.config import get_settings
from mysticwriter.schemas import GenerationOptions, RandomCharacter, Result, ToneAnalysis
from mysticwriter.services.backend import BackendClient
from mysticwriter.utils.json_extractor import extract_json_object
from mysticwriter.utils.logging_config import get_logger

logger = get_logger("mysticwriter.story_ai")

FALLBACK_CONTINUATION = "The story continues... Tell me more about what happens next."
FALLBACK_CHARACTER = RandomCharacter(
    name="Wandering Traveler",
    description=(
        "A mysterious figure cloaked in shadows, with stories untold "
        "and secrets hidden in their eyes."
    ),
)
DEFAULT_CHARACTER_NAME = "Mysterious Stranger"
DEFAULT_CHARACTER_DESCRIPTION = "A mysterious figure whose past remains unknown."
DEFAULT_TITLES = ["Untitled Story", "New Adventure", "The Journey Begins"]


def qualify_model(model: str) -> str:
    """Prefix a bare model name with its provider, as the proxy expects."""
    if "/" in model:
        return model
    return f"openai/{model}" if model.startswith("gpt") else f"google/{model}"


def continuation_system_prompt(story_context: Optional[str] = None) -> str:
    lines = [
        "You are a creative writing assistant for MysticWriter.",
        "Your role is to help users continue their stories with engaging, coherent narrative.",
    ]
    if story_context:
        lines.append(f"Story context: {story_context}")
    lines.append("Write in a compelling, narrative style that matches the user's tone and genre.")
    lines.append("Keep responses focused and engaging, typically 2-4 sentences.")
    return "\n".join(lines)


class StoryAI:
    def __init__(self, backend: BackendClient, default_model: Optional[str] = None):
        self.backend = backend
        self.default_model = default_model or get_settings().chat_model

    async def _chat(self, model: str, system: str, user: str, temperature: float, max_tokens: int) -> Result[str]:
        return await self.backend.chat_completion(
            qualify_model(model),
            [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )

    async def continue_story(
        self,
        user_text: str,
        story_context: Optional[str] = None,
        options: Optional[GenerationOptions] = None,
    ) -> str:
        options = options or GenerationOptions()
        result = await self._chat(
            options.model or self.default_model,
            continuation_system_prompt(story_context),
            user_text,
            options.temperature,
            options.max_tokens,
        )
        if not result.ok:
            logger.warning("continuation_defaulted | error=%s", result.error)
            return FALLBACK_CONTINUATION
        return result.value

    async def generate_character_description(self, name: str, traits: List[str]) -> Result[str]:
        traits_text = ", ".join(t for t in traits if t.strip()) or "mysterious, enigmatic"
        return await self._chat(
            self.default_model,
            "You are a creative character designer. Generate a vivid, engaging "
            "character description based on the provided information.",
            f"Create a detailed character description for {name} with these traits: "
            f"{traits_text}. Keep it to 2-3 sentences.",
            temperature=0.8,
            max_tokens=200,
        )

    async def generate_random_character(
        self,
        story_title: str,
        story_context: Optional[str] = None,
    ) -> RandomCharacter:
        context_info = f"Story context: {story_context[:300]}" if story_context else ""
        result = await self._chat(
            self.default_model,
            "You are a creative character generator for stories. Generate unique, "
            "interesting characters that fit the story's theme and genre.",
            f'Generate a random character for a story titled "{story_title}". {context_info}\n\n'
            "Return ONLY a JSON object with this exact format (no markdown, no extra text):\n"
            '{"name": "Character Name", "description": "A vivid 2-3 sentence description '
            'of their appearance, personality, and role"}',
            temperature=0.9,
            max_tokens=200,
        )
        if not result.ok:
            logger.warning("random_character_defaulted | error=%s", result.error)
            return FALLBACK_CHARACTER

        data = extract_json_object(result.value, required_keys=("name", "description"))
        if data is None:
            logger.warning("random_character_defaulted | error=unparseable reply")
            return FALLBACK_CHARACTER
        return RandomCharacter(
            name=str(data.get("name") or DEFAULT_CHARACTER_NAME),
            description=str(data.get("description") or DEFAULT_CHARACTER_DESCRIPTION),
        )

    async def generate_story_titles(self, content: str, count: int = 3) -> List[str]:
        result = await self._chat(
            self.default_model,
            "You are a creative title generator for stories. Generate compelling, engaging titles.",
            f'Generate {count} creative story titles for this content: "{content[:200]}...".\n'
            "Return only the titles, one per line, without numbering or additional text.",
            temperature=0.9,
            max_tokens=150,
        )
        if not result.ok:
            logger.warning("titles_defaulted | error=%s", result.error)
            return list(DEFAULT_TITLES)

        titles = [line.strip() for line in result.value.splitlines() if line.strip()][:count]
        return titles or ["Untitled Story"]

    async def analyze_story_tone(self, content: str) -> ToneAnalysis:
        result = await self._chat(
            "gpt-4o",
            "You are a writing coach. Analyze the tone of the story and provide "
            "constructive suggestions for improvement.",
            f'Analyze this story and provide feedback:\n"{content}"\n\n'
            'Respond in JSON format: {"tone": "description of tone", '
            '"suggestions": ["suggestion1", "suggestion2", "suggestion3"]}',
            temperature=0.7,
            max_tokens=300,
        )
        if not result.ok:
            logger.warning("tone_analysis_defaulted | error=%s", result.error)
            return ToneAnalysis(tone="Unknown", suggestions=["Keep writing and developing your story"])

        data = extract_json_object(result.value, required_keys=("tone",))
        if data is None:
            return ToneAnalysis(
                tone="Unable to determine",
                suggestions=["Continue writing to develop the story further"],
            )
        suggestions = data.get("suggestions")
        if not isinstance(suggestions, list):
            suggestions = []
        return ToneAnalysis(tone=str(data["tone"]), suggestions=[str(s) for s in suggestions])
