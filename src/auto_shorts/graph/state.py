"""Run state shared by the Timeline Synthesizer stages."""

from __future__ import annotations

from typing import Any, Optional

from typing_extensions import TypedDict

from auto_shorts.config import VideoOptions
from auto_shorts.models.scene import SceneGraph
from auto_shorts.models.timeline import AudioSegment, DerivedUnits, Timeline


class PipelineState(TypedDict):
    """State for one generation run; each stage writes only its own keys."""

    # Run configuration (set once at start)
    run_id: str
    shape: str
    script: Any
    options: VideoOptions
    workspace: str
    units: DerivedUnits

    # Background media picked for this run
    bg_music_path: Optional[str]
    bg_video_path: Optional[str]

    # Audio
    segments: list[AudioSegment]
    voice_path: Optional[str]
    master_path: Optional[str]
    master_duration: float

    # Subtitles
    transcription_path: Optional[str]
    srt_path: Optional[str]

    # Visual unit id -> local asset paths, one per image query
    assets: dict[str, list[str]]

    timeline: Optional[Timeline]
    scene: Optional[SceneGraph]
    output_path: Optional[str]
