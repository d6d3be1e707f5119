"""
Prompt director: turn a recipe into a video directive.

Uses an OpenAI chat model to write the free-text prompt the video
provider receives. This runs before a generation job exists and never
touches the ledger.
"""

from __future__ import annotations

import asyncio

from loguru import logger

from app.generation.schemas import Region
from reelsmith_core.config import settings
from reelsmith_core.domain.exceptions import PromptError
from reelsmith_core.infrastructure.openai_client import get_openai_client

REGION_FLAVOR = {
    Region.US: "Use slightly faster pacing and bolder on-screen text.",
    Region.EUROPE: "Use balanced pacing and a subtle, warm aesthetic.",
    Region.ASIA: "Use slightly faster cuts and dynamic plating shots.",
}

DIRECTOR_SYSTEM_PROMPT = """\
You are a precise video director crafting a cooking video prompt for a meal-kit brand.
- Initially show a green lemon logo.
- Then show all ingredients laid out on one table.
- Then show the cooking steps clearly with minimal cuts.
- At the end show happy, fulfilled people enjoying the meal.
- Match the exact ingredients and steps from the provided recipe.
- Region: {region}. {flavor}
- Keep tone upbeat, vivid, and food-forward. Output only the video prompt text."""


def build_messages(recipe_text: str, people: str, region: Region) -> list[dict[str, str]]:
    """Chat messages asking the model for a directive."""
    region = Region(region)
    system_prompt = DIRECTOR_SYSTEM_PROMPT.format(
        region=region.value, flavor=REGION_FLAVOR[region]
    )
    user_message = f"Recipe:\n{recipe_text}\n\nPeople to show: {people}\nRegion: {region.value}"
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_message},
    ]


class PromptDirector:
    """Writes video directives with an OpenAI chat model."""

    def __init__(self, model: str | None = None, temperature: float | None = None):
        self._model = model or settings.OPENAI_PROMPT_MODEL
        self._temperature = (
            temperature if temperature is not None else settings.PROMPT_TEMPERATURE
        )

    def compose(self, recipe_text: str, people: str, region: Region) -> str:
        """
        Write a video directive for a recipe.

        Raises:
            PromptError: The model returned no usable text or the call failed.
        """
        client = get_openai_client()
        logger.info(f"Composing video prompt (model={self._model}, region={Region(region).value})")

        try:
            response = client.chat.completions.create(
                model=self._model,
                temperature=self._temperature,
                messages=build_messages(recipe_text.strip(), people.strip(), region),
            )
        except Exception as e:
            logger.error(f"Prompt director call failed: {type(e).__name__}: {e}")
            raise PromptError(str(e) or "Failed to generate video prompt", cause=e) from e

        content = response.choices[0].message.content if response.choices else None
        video_prompt = (content or "").strip()
        if not video_prompt:
            raise PromptError("Failed to generate video prompt")

        return video_prompt

    async def compose_async(self, recipe_text: str, people: str, region: Region) -> str:
        """Async version of compose (runs the blocking SDK call in a thread)."""
        return await asyncio.to_thread(self.compose, recipe_text, people, region)
