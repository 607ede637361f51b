"""Declarative scene graph handed to the rendering collaborator."""

from __future__ import annotations

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# Horizontal position: "center" or a pixel offset from the left edge
XPos = Union[Literal["center"], int]


class Layer(BaseModel):
    """One timed visual layer; times are copied verbatim from a timeline entry."""

    model_config = ConfigDict(frozen=True)

    element_id: str
    kind: Literal["video", "image", "text", "color"]
    start: float
    duration: float

    path: Optional[str] = None
    text: str = ""

    x: XPos = "center"
    y: int = 0
    width: Optional[int] = None
    height: Optional[int] = None

    font: Optional[str] = None
    font_size: int = 60
    color: str = "#ffffff"
    stroke_color: Optional[str] = None
    stroke_width: int = 0
    bg_color: Optional[str] = None

    fade_in: float = 0.0


class SubtitleTrack(BaseModel):
    model_config = ConfigDict(frozen=True)

    srt_path: str
    font: Optional[str] = None
    font_size: int = 70
    color: str = "#ffffff"
    stroke_color: str = "#000000"
    stroke_width: int = 8
    # Vertical centre of the caption band, as a fraction of the frame height
    y_ratio: float = 0.5


class SceneGraph(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: int
    height: int
    duration: float
    fps: int = 24
    audio_path: str
    # Painted bottom to top
    layers: list[Layer] = Field(default_factory=list)
    subtitles: Optional[SubtitleTrack] = None
