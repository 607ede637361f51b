"""Narration Unit Provider interface shared by the five content shapes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Optional

from auto_shorts.config import VideoOptions
from auto_shorts.errors import InvalidScript, MissingField
from auto_shorts.models.timeline import DerivedUnits, NarrationUnit, TimelineEntry, VisualUnit
from auto_shorts.timing import OffsetTable

TICK_CUE = "tick.mp3"
CLOCK_CUE = "clock.mp3"


class ShapeProvider(ABC):
    """Turns one script shape into ordered narration and visual units.

    ``derive_units`` is a pure transformation. ``assign_offsets`` maps the
    visual units onto the shared offset table; it never measures anything.
    """

    shape: ClassVar[str]
    # Script attributes that must be present and non-empty
    required_fields: ClassVar[tuple[str, ...]] = ()
    # Max characters per subtitle cue; None means no subtitles for this shape
    subtitle_max_len: ClassVar[Optional[int]] = None
    uses_background_video: ClassVar[bool] = True

    def check(self, script: Any) -> None:
        missing = [name for name in self.required_fields if not getattr(script, name, None)]
        if missing:
            raise MissingField(self.shape, missing)

    def check_options(self, options: VideoOptions) -> None:
        """Reject option combinations this shape cannot render."""

    def derive_units(self, script: Any) -> DerivedUnits:
        self.check(script)
        narration, visuals = self._derive(script)
        if not narration:
            raise InvalidScript(f"{self.shape} script produced no narration units")
        # Ordinals follow emission order; callers must not reorder afterwards
        narration = [
            unit if unit.ordinal == i else unit.model_copy(update={"ordinal": i})
            for i, unit in enumerate(narration)
        ]
        return DerivedUnits(narration=narration, visuals=visuals)

    @abstractmethod
    def _derive(self, script: Any) -> tuple[list[NarrationUnit], list[VisualUnit]]:
        ...

    @abstractmethod
    def assign_offsets(self, visuals: list[VisualUnit], table: OffsetTable) -> list[TimelineEntry]:
        ...


class UnitBuilder:
    """Collects narration units in speaking order."""

    def __init__(self) -> None:
        self.units: list[NarrationUnit] = []

    def add(self, unit_id: str, text: str, voice: str = "male", cue: str | None = None) -> str:
        self.units.append(
            NarrationUnit(
                unit_id=unit_id,
                ordinal=len(self.units),
                text=text,
                voice_gender=voice,
                cue=cue,
            )
        )
        return unit_id
