"""Pydantic models for narration units, audio segments and timeline entries."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from auto_shorts.models.script import VoiceGender

VisualKind = Literal[
    "image",       # album image (topic)
    "bubble",      # chat bubble (message)
    "header",      # contact header card (message)
    "title",       # headline text
    "label",       # static list label, e.g. "1."
    "answer",      # revealed answer text (quiz)
    "card",        # full-screen image card with headline and rank numbers (rank)
    "poll",        # two-option poll card (rather)
    "percentage",  # poll result label (rather)
]


class NarrationUnit(BaseModel):
    """One piece of text that becomes exactly one spoken clip."""

    model_config = ConfigDict(frozen=True)

    unit_id: str
    ordinal: int
    text: str
    voice_gender: VoiceGender = "male"
    # Resource file merged onto the end of this unit's own clip (e.g. "tick.mp3")
    cue: Optional[str] = None


class VisualUnit(BaseModel):
    """One on-screen element that needs placement and timing."""

    model_config = ConfigDict(frozen=True)

    unit_id: str
    kind: VisualKind
    # Narration unit whose offset drives this element, if any
    narration_id: Optional[str] = None
    text: str = ""
    image_queries: list[str] = Field(default_factory=list)
    labels: list[str] = Field(default_factory=list)
    # Resource file drawn underneath (e.g. "msg_header.png")
    background: Optional[str] = None
    slot: int = 0
    side: Literal["left", "right", "center"] = "center"
    color: str = "#ffffff"
    font: Optional[str] = None
    # Static elements span the whole video and get no timeline entry
    static: bool = False
    fade_in: float = 0.0


class DerivedUnits(BaseModel):
    model_config = ConfigDict(frozen=True)

    narration: list[NarrationUnit]
    visuals: list[VisualUnit]


class AudioSegment(BaseModel):
    """A synthesized (possibly cue-merged) clip and its measured duration."""

    model_config = ConfigDict(frozen=True)

    unit_id: str
    ordinal: int
    file_path: str
    duration: float


class TimelineEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    element_id: str
    start: float
    duration: float
    # Entries tied to the final segment may stretch to the master end
    anchored_to_end: bool = False

    @property
    def end(self) -> float:
        return self.start + self.duration


class Timeline(BaseModel):
    model_config = ConfigDict(frozen=True)

    offsets: list[float]
    durations: list[float]
    total_duration: float
    entries: list[TimelineEntry]


class TranscriptSegment(BaseModel):
    """One time-stamped phrase relative to the master track."""

    model_config = ConfigDict(frozen=True)

    start_ms: int
    end_ms: int
    text: str
