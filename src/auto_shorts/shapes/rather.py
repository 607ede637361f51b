"""Rather shape: "would you rather" polls with revealed vote percentages."""

from __future__ import annotations

from auto_shorts.config import VideoOptions
from auto_shorts.errors import ConfigurationError
from auto_shorts.models.script import RatherScript
from auto_shorts.models.timeline import NarrationUnit, TimelineEntry, VisualUnit
from auto_shorts.shapes.base import TICK_CUE, ShapeProvider, UnitBuilder
from auto_shorts.timing import OffsetTable

POLL_BACKGROUND = "rather.png"
# Percentages appear this many seconds before the question's clip ends
REVEAL_LEAD = 2.0

_WINNER = "#00ff00"
_LOSER = "#ff0000"


def _percent(value: float) -> str:
    return f"{value:g}%"


class RatherShape(ShapeProvider):
    shape = "rather"
    required_fields = ("questions", "start_script", "end_script")
    uses_background_video = False

    def check_options(self, options: VideoOptions) -> None:
        if options.orientation == "horizontal":
            raise ConfigurationError("Rather video does not support horizontal orientation")

    def _derive(self, script: RatherScript) -> tuple[list[NarrationUnit], list[VisualUnit]]:
        units = UnitBuilder()
        visuals: list[VisualUnit] = []

        units.add("start", script.start_script)

        for i, q in enumerate(script.questions):
            question_id = units.add(
                f"question-{i}",
                f"Would you rather {q.option1} or {q.option2}?",
                cue=TICK_CUE,
            )
            visuals.append(
                VisualUnit(
                    unit_id=f"poll-{i}",
                    kind="poll",
                    narration_id=question_id,
                    image_queries=[q.image1 or q.option1, q.image2 or q.option2],
                    labels=[q.option1, q.option2],
                    background=POLL_BACKGROUND,
                    font=script.font_name,
                    slot=i,
                )
            )
            for side, (value, other) in enumerate(((q.p1, q.p2), (q.p2, q.p1))):
                visuals.append(
                    VisualUnit(
                        unit_id=f"percent-{i}-{side + 1}",
                        kind="percentage",
                        narration_id=question_id,
                        text=_percent(value),
                        slot=side,
                        color=_WINNER if value > other else _LOSER,
                        font=script.font_name,
                        fade_in=0.2,
                    )
                )

        units.add("end", script.end_script)
        return units.units, visuals

    def assign_offsets(self, visuals: list[VisualUnit], table: OffsetTable) -> list[TimelineEntry]:
        """Poll cards play back to back; the first absorbs the intro, the last the outro.

        Percentages are revealed shortly before the question's own clip ends
        (never before their card is on screen) and stay until the card ends.
        """
        polls = [v for v in visuals if v.kind == "poll"]
        windows: dict[str, tuple[float, float | None]] = {}
        entries = []

        for i, poll in enumerate(polls):
            start = 0.0 if i == 0 else table.offset(poll.narration_id)
            end = None if i == len(polls) - 1 else table.offset(polls[i + 1].narration_id)
            windows[poll.narration_id] = (start, end)
            entries.append(table.span(poll.unit_id, start, end))

        for visual in visuals:
            if visual.kind != "percentage":
                continue
            card_start, card_end = windows[visual.narration_id]
            reveal = max(card_start, table.end(visual.narration_id) - REVEAL_LEAD)
            entries.append(table.span(visual.unit_id, reveal, card_end))

        return entries
