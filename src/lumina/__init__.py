"""LuminaBook: animated text stories rendered to video."""

__version__ = "0.1.0"
