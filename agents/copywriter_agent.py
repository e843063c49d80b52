import json
import logging
from typing import List

from google.genai import types

from agents.creative_agent import SAFETY_SETTINGS
from library.config import DEFAULT_TEXT_MODEL
from library.errors import InvalidRefinementResponse, RefinementError, TranslationError

logger = logging.getLogger(__name__)

REFINE_SYSTEM_INSTRUCTION = (
    "You are a prompt engineering expert for generative AI image models. Your goal is to help "
    "users enhance their initial ideas. You will be given a user's prompt and you must return "
    "3 improved suggestions in a JSON object format."
)

TRANSLATE_SYSTEM_INSTRUCTION = (
    "You are a highly efficient translation engine. Translate the user's text to English. "
    "Do not add any extra text, explanations, or labels like 'English:'. "
    "Only return the translated text itself."
)

SUGGESTIONS_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "suggestions": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(type=types.Type.STRING),
            description="An array of exactly 3 refined prompt suggestions.",
        ),
    },
    required=["suggestions"],
)


class CopywriterAgent:
    """Text helpers around the image prompt: refinement and translation."""

    def __init__(self, client, model_name: str = DEFAULT_TEXT_MODEL):
        self.client = client
        self.model_name = model_name

    async def refine_prompt(self, prompt: str) -> List[str]:
        """
        Asks the text model for three richer alternatives to ``prompt``.
        """
        contents = (
            "Based on the following user prompt, provide 3 more descriptive and creative "
            f'alternatives that would generate a better image. User Prompt: "{prompt}"'
        )
        config = types.GenerateContentConfig(
            system_instruction=REFINE_SYSTEM_INSTRUCTION,
            response_mime_type="application/json",
            response_schema=SUGGESTIONS_SCHEMA,
            safety_settings=SAFETY_SETTINGS,
        )
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model_name, contents=contents, config=config
            )
            parsed = json.loads((response.text or "").strip())
        except Exception as e:
            logger.error(f"[refine] Error refining prompt: {e}")
            raise RefinementError(str(e)) from e

        suggestions = parsed.get("suggestions") if isinstance(parsed, dict) else None
        if not isinstance(suggestions, list):
            raise InvalidRefinementResponse("Received invalid data structure from prompt refinement API.")
        return [str(s) for s in suggestions]

    async def translate(self, prompt: str) -> str:
        """
        Translates ``prompt`` to English. Blank input is returned untouched.
        """
        if not prompt.strip():
            return prompt
        config = types.GenerateContentConfig(
            system_instruction=TRANSLATE_SYSTEM_INSTRUCTION,
            safety_settings=SAFETY_SETTINGS,
        )
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model_name, contents=prompt, config=config
            )
            return (response.text or "").strip()
        except Exception as e:
            logger.error(f"[translate] Error translating prompt: {e}")
            raise TranslationError(str(e)) from e
