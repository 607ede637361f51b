"""Conditional edge routing for the optional mixing and subtitle stages."""

from __future__ import annotations

from typing import Literal

from auto_shorts.graph.state import PipelineState
from auto_shorts.shapes import get_provider


def wants_subtitles(state: PipelineState) -> bool:
    """Subtitles run unless disabled or the shape has no caption track."""
    if state["options"].disable_subtitles:
        return False
    return get_provider(state["shape"]).subtitle_max_len is not None


def route_after_mix(state: PipelineState) -> Literal["prepare_transcription", "resolve_assets"]:
    if wants_subtitles(state):
        return "prepare_transcription"
    return "resolve_assets"


def route_after_master(
    state: PipelineState,
) -> Literal["mix_background", "prepare_transcription", "resolve_assets"]:
    """Route after assembly: mix background music, else skip to the subtitle gate."""
    if state.get("bg_music_path"):
        return "mix_background"
    return route_after_mix(state)
