"""Style agent: mood-based style suggestions for a scene."""

import asyncio
import json
import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from ..errors import TransientSuggestionError
from ..models import AnimationType, FontFamily, Scene, StyleSuggestion
from .base import BaseAgent

logger = logging.getLogger(__name__)

MAX_INPUT_CHARS = 1000

SYSTEM_PROMPT = """You are a typographer and art director for animated text stories.
Given a passage of text, you judge its mood and propose how it should look on screen.

Output valid JSON only, with no additional text or markdown formatting.
The JSON must be an object with exactly these keys:
  "mood": one or two words,
  "colorTheme": a hex text color such as "#f5e6c8",
  "fontStyle": one of "serif", "sans", "mono",
  "visualPrompt": a brief prompt for a background image or video,
  "suggestedAnimation": one of {animations}."""

# Chinese scenes use the CJK variant of the suggested family.
ZH_FONT_MAP = {
    "serif": FontFamily.ZH_SERIF,
    "sans": FontFamily.ZH_SANS,
}


class StyleAgent(BaseAgent[str, Optional[StyleSuggestion]]):
    """Agent that proposes a style for a scene's text.

    Suggestions are best-effort: any failure is logged and yields None.
    """

    @property
    def name(self) -> str:
        return "StyleAgent"

    @property
    def system_prompt(self) -> str:
        animations = ", ".join(f'"{a.value}"' for a in AnimationType)
        return SYSTEM_PROMPT.format(animations=animations)

    def run(self, input_data: str) -> Optional[StyleSuggestion]:
        """Analyze the mood of a text.

        Args:
            input_data: Scene text. Only the first 1000 characters are sent.

        Returns:
            A validated StyleSuggestion, or None if no usable suggestion came back.
        """
        text = (input_data or "")[:MAX_INPUT_CHARS]
        if not text.strip():
            self._logger.info("Skipping style suggestion for empty text")
            return None

        try:
            response = self._create_message(
                prompt=self._build_prompt(text),
                max_tokens=512,
                temperature=0.7,
            )
            suggestion = self._parse_response(response)
        except TransientSuggestionError as e:
            self._logger.warning(f"Style suggestion unavailable: {e}")
            return None
        except Exception as e:
            self._logger.warning(f"Style suggestion failed: {type(e).__name__}: {e}")
            return None

        self._logger.info(
            f"Suggested mood '{suggestion.mood}': {suggestion.color_theme}, "
            f"{suggestion.font_style}, {suggestion.suggested_animation.value}"
        )
        return suggestion

    async def suggest(self, text: str) -> Optional[StyleSuggestion]:
        """Awaitable form of `run`; the request runs in a worker thread."""
        return await asyncio.to_thread(self.run, text)

    def _build_prompt(self, text: str) -> str:
        return "\n".join([
            "Analyze the mood of this text and suggest a color theme (hex), "
            "font style (serif/sans/mono), and a brief visual prompt for a "
            "background image/video. Return JSON.",
            "",
            f'Text: "{text}"',
        ])

    def _parse_response(self, response: str) -> StyleSuggestion:
        """Parse Claude's response into a StyleSuggestion.

        Raises:
            TransientSuggestionError: If the response is not a valid suggestion.
        """
        json_str = self._extract_json(response)

        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            self._logger.debug(f"Raw response: {response}")
            raise TransientSuggestionError(f"Invalid JSON in response: {e}") from e

        if not isinstance(data, dict):
            raise TransientSuggestionError("Response is not a JSON object")

        try:
            return StyleSuggestion.model_validate(data)
        except PydanticValidationError as e:
            raise TransientSuggestionError(
                f"Response does not match the suggestion schema: {e.error_count()} error(s)"
            ) from e


def apply_suggestion(scene: Scene, suggestion: StyleSuggestion) -> Scene:
    """Return a copy of the scene restyled by a suggestion.

    Sets text color, font family, animation and visual prompt. For Chinese
    scenes serif and sans map to their zh- variants.
    """
    font = FontFamily(suggestion.font_style)
    if scene.language == "zh":
        font = ZH_FONT_MAP.get(suggestion.font_style, font)

    return scene.restyled(
        color=suggestion.color_theme,
        font_family=font,
        animation=suggestion.suggested_animation,
        visual_prompt=suggestion.visual_prompt,
    )
