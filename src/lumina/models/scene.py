"""Scene data model."""

from enum import Enum
from typing import Literal, Optional
from PIL import ImageColor
from pydantic import BaseModel, Field, field_validator


class AnimationType(str, Enum):
    """Entrance animation variants."""
    FADE_IN = "fade-in"
    TYPE_IN = "type-in"
    GRADIENT_IN = "gradient-in"
    SLIDE_UP = "slide-up"
    BLUR_IN = "blur-in"
    ZOOM_IN = "zoom-in"


class WritingMode(str, Enum):
    """Text flow direction."""
    HORIZONTAL = "horizontal-tb"
    VERTICAL_RL = "vertical-rl"
    VERTICAL_LR = "vertical-lr"

    @property
    def is_vertical(self) -> bool:
        return self is not WritingMode.HORIZONTAL


class FontFamily(str, Enum):
    """Font families, including the Chinese variants."""
    SERIF = "serif"
    SANS = "sans"
    MONO = "mono"
    ZH_SERIF = "zh-serif"
    ZH_SANS = "zh-sans"
    ZH_BRUSH = "zh-brush"
    ZH_INK = "zh-ink"


TextAlign = Literal["left", "center", "right", "justify"]
TextDirection = Literal["ltr", "rtl"]
Language = Literal["en", "zh"]


class Scene(BaseModel):
    """One timed unit of text, style and animation."""

    id: str = Field(..., description="Unique scene identifier", min_length=1)
    text: str = Field(default="", description="Text shown in the scene")
    animation: AnimationType = Field(default=AnimationType.FADE_IN, description="Entrance animation")
    duration: float = Field(2.0, description="Animation duration in seconds", gt=0, allow_inf_nan=False)
    delay: float = Field(0.5, description="Delay before the animation starts", ge=0, allow_inf_nan=False)
    font_size: float = Field(48, alias="fontSize", description="Font size in pixels", gt=0)
    letter_spacing: float = Field(0, alias="letterSpacing", description="Extra spacing between characters in pixels")
    line_height: float = Field(1.4, alias="lineHeight", description="Line height as a multiple of font size", gt=0)
    color: str = Field(default="#ffffff", description="Text color")
    background: str = Field(default="#0a0a0a", description="Background color")
    font_family: FontFamily = Field(default=FontFamily.SERIF, alias="fontFamily")
    text_align: TextAlign = Field(default="center", alias="textAlign")
    writing_mode: WritingMode = Field(default=WritingMode.HORIZONTAL, alias="writingMode")
    direction: TextDirection = Field(default="ltr")
    language: Language = Field(default="en")
    visual_prompt: Optional[str] = Field(None, alias="visualPrompt", description="Prompt for a background visual")

    class Config:
        """Pydantic config."""
        frozen = False
        populate_by_name = True

    @field_validator("color", "background")
    @classmethod
    def check_color(cls, value: str) -> str:
        """Accept any color Pillow can draw (hex, rgb(), hsl() or a CSS name)."""
        try:
            ImageColor.getrgb(value)
        except ValueError as e:
            raise ValueError(f"Unknown color: {value!r}") from e
        return value

    def restyled(self, **changes) -> "Scene":
        """Return a validated copy with the given fields replaced."""
        data = self.model_dump()
        data.update(changes)
        return Scene.model_validate(data)


DEFAULT_SCENE = Scene(
    id="1",
    text="Welcome to LuminaBook. Start typing your story...",
    animation=AnimationType.FADE_IN,
    duration=2,
    delay=0.5,
    font_size=48,
    letter_spacing=0,
    line_height=1.4,
    color="#ffffff",
    background="#0a0a0a",
    font_family=FontFamily.SERIF,
    text_align="center",
    writing_mode=WritingMode.HORIZONTAL,
    direction="ltr",
    language="en",
)
