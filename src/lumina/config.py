"""Configuration management."""

import os
from pathlib import Path
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value else default


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


# Frames are always 16:9.
ASPECT_RATIO = (16, 9)


def frame_height_for(width: int) -> int:
    """Height of a 16:9 frame of the given width."""
    return max(1, round(width * ASPECT_RATIO[1] / ASPECT_RATIO[0]))


class Config(BaseModel):
    """Application configuration."""

    # API Keys
    anthropic_api_key: str = Field(
        default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""),
        description="Anthropic API key (style suggestions)"
    )

    # Paths
    workspace: Path = Field(
        default_factory=lambda: Path(os.getenv("LUMINA_WORKSPACE", ".")),
        description="Workspace directory"
    )

    # Model settings
    default_model: str = Field(
        default_factory=lambda: os.getenv("LUMINA_MODEL", "claude-sonnet-4-20250514"),
        description="Claude model used for style suggestions"
    )
    suggestion_timeout: float = Field(
        default_factory=lambda: _env_float("LUMINA_SUGGESTION_TIMEOUT", 30.0),
        description="Timeout for a single suggestion request in seconds",
        gt=0
    )

    # Render settings
    output_fps: int = Field(
        default_factory=lambda: _env_int("LUMINA_FPS", 24),
        description="Frame rate of exported video",
        gt=0
    )
    frame_width: int = Field(
        default_factory=lambda: _env_int("LUMINA_FRAME_WIDTH", 1280),
        description="Width of a 1x frame in pixels (height follows from 16:9)",
        gt=0
    )
    settle_delay: float = Field(
        default_factory=lambda: _env_float("LUMINA_SETTLE_DELAY", 0.6),
        description="Wait after switching the active scene before capturing",
        ge=0
    )
    still_pixel_ratio: float = Field(
        default=2.0,
        description="Pixel density of high-resolution still exports",
        gt=0
    )

    class Config:
        """Pydantic config."""
        frozen = False

    @property
    def frame_height(self) -> int:
        return frame_height_for(self.frame_width)

    def validate_required(self) -> None:
        """Validate that required credentials are set."""
        if not self.anthropic_api_key:
            raise ValueError("ANTHROPIC_API_KEY not set")


# Global config instance
config = Config()
