"""Narration Unit Providers, selected by the script's ``type`` tag."""

from __future__ import annotations

from auto_shorts.errors import InvalidScript
from auto_shorts.shapes.base import ShapeProvider
from auto_shorts.shapes.message import MessageShape
from auto_shorts.shapes.quiz import QuizShape
from auto_shorts.shapes.rank import RankShape
from auto_shorts.shapes.rather import RatherShape
from auto_shorts.shapes.topic import TopicShape

SHAPE_PROVIDERS: dict[str, ShapeProvider] = {
    "topic": TopicShape(),
    "message": MessageShape(),
    "quiz": QuizShape(),
    "rank": RankShape(),
    "rather": RatherShape(),
}


def get_provider(shape: str) -> ShapeProvider:
    try:
        return SHAPE_PROVIDERS[shape]
    except KeyError:
        raise InvalidScript(f"Invalid video type: {shape!r}") from None


__all__ = ["SHAPE_PROVIDERS", "ShapeProvider", "get_provider"]
