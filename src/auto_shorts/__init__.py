"""Auto Shorts: turn a structured script into a rendered short-form video."""

__version__ = "0.1.0"
