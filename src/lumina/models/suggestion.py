"""Style suggestion data model."""

from typing import Literal
from pydantic import BaseModel, Field

from .scene import AnimationType


class StyleSuggestion(BaseModel):
    """Mood-based style proposal for a scene's text."""

    mood: str = Field(..., description="One or two words describing the mood")
    color_theme: str = Field(
        ..., alias="colorTheme", description="Hex text color", pattern=r"^#(?:[0-9a-fA-F]{3}){1,2}$"
    )
    font_style: Literal["serif", "sans", "mono"] = Field(..., alias="fontStyle")
    visual_prompt: str = Field(..., alias="visualPrompt", description="Prompt for a background visual")
    suggested_animation: AnimationType = Field(..., alias="suggestedAnimation")

    class Config:
        """Pydantic config."""
        populate_by_name = True
