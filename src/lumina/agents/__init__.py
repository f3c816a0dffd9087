"""AI agents for style suggestions."""

from .base import BaseAgent
from .stylist import StyleAgent, apply_suggestion

__all__ = ["BaseAgent", "StyleAgent", "apply_suggestion"]
